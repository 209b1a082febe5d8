"""Product image storage: inline Base64 data URIs or files under IMAGE_ROOT."""

import base64
import binascii
import re
import uuid
from pathlib import Path
from typing import Optional
from fastapi import UploadFile
from framework.config import settings
from framework.exceptions.errors import ValidationError
from framework.logging.logger import get_logger

logger = get_logger("image_storage")

ALLOWED_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp"})

MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
    ".webp": "image/webp",
}

_DATA_URI = re.compile(r"^data:(?P<mime>image/[\w.+-]+);base64,(?P<payload>.*)$", re.DOTALL)
_SUBFOLDER = re.compile(r"^[A-Za-z0-9_-]+$")


def mime_type_for(filename: str) -> str:
    return MIME_TYPES.get(Path(filename).suffix.lower(), "image/jpeg")


class ImageStorage:
    """Validates uploads and stores them inline or on the filesystem."""

    def __init__(
        self,
        root: Optional[str] = None,
        base_url: Optional[str] = None,
        max_bytes: Optional[int] = None,
    ):
        self.root = Path(root or settings.IMAGE_ROOT)
        self.base_url = base_url or settings.IMAGE_BASE_URL
        self.max_bytes = max_bytes or settings.MAX_IMAGE_BYTES

    def is_valid_image(self, filename: Optional[str], content_type: Optional[str], size: int) -> bool:
        if not filename or size <= 0 or size > self.max_bytes:
            return False
        if Path(filename).suffix.lower() not in ALLOWED_EXTENSIONS:
            return False
        return bool(content_type) and content_type.startswith("image/")

    async def read_upload(self, upload: UploadFile) -> bytes:
        """Read an upload, rejecting anything that is not an acceptable image."""
        if upload is None:
            raise ValidationError("File is null or empty")
        content = await upload.read()
        if not content:
            raise ValidationError("File is null or empty")
        if not self.is_valid_image(upload.filename, upload.content_type, len(content)):
            raise ValidationError(
                f"Invalid image file: allowed types {', '.join(sorted(ALLOWED_EXTENSIONS))}, "
                f"max {self.max_bytes // (1024 * 1024)} MB"
            )
        return content

    async def to_base64(self, upload: UploadFile) -> str:
        """Encode an upload as a data URI."""
        content = await self.read_upload(upload)
        payload = base64.b64encode(content).decode("ascii")
        return f"data:{mime_type_for(upload.filename)};base64,{payload}"

    async def save(self, upload: UploadFile, subfolder: str = "products") -> str:
        """Write an upload under IMAGE_ROOT/subfolder; returns the relative path."""
        if not _SUBFOLDER.match(subfolder):
            raise ValidationError("Invalid image subfolder")
        content = await self.read_upload(upload)

        target_dir = self.root / subfolder
        target_dir.mkdir(parents=True, exist_ok=True)
        file_name = f"{uuid.uuid4().hex}{Path(upload.filename).suffix.lower()}"
        with open(target_dir / file_name, "wb") as f:
            f.write(content)

        relative = f"{subfolder}/{file_name}"
        logger.info(f"Image saved to {relative} ({len(content)} bytes)")
        return relative

    def _resolve(self, image_path: str) -> Optional[Path]:
        root = self.root.resolve()
        full_path = (root / image_path).resolve()
        if root not in full_path.parents:
            return None
        return full_path

    def delete(self, image_path: Optional[str]) -> bool:
        """Remove a stored image; False when there was nothing to remove."""
        if not image_path:
            return False
        full_path = self._resolve(image_path)
        if full_path is None or not full_path.is_file():
            return False
        try:
            full_path.unlink()
        except OSError as e:
            logger.warning(f"Failed to delete image {image_path}: {e}")
            return False
        logger.info(f"Image deleted: {image_path}")
        return True

    def url_for(self, image_path: Optional[str]) -> Optional[str]:
        if not image_path:
            return None
        return f"{self.base_url.rstrip('/')}/{image_path}"

    def validate_base64(self, value: str) -> str:
        """
        Accept a data URI or bare Base64 string and return it as a data URI.
        Raises ValueError so schema validators can report it.
        """
        value = value.strip()
        match = _DATA_URI.match(value)
        mime, payload = (match.group("mime"), match.group("payload")) if match else ("image/jpeg", value)
        try:
            decoded = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError):
            raise ValueError("image_base64 is not valid Base64")
        if not decoded:
            raise ValueError("image_base64 is empty")
        if len(decoded) > self.max_bytes:
            raise ValueError(f"image exceeds {self.max_bytes // (1024 * 1024)} MB")
        return f"data:{mime};base64,{payload}"
