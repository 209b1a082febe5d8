from typing import Any, Optional
from pydantic import BaseModel

class ResponseModel(BaseModel):
    """Response envelope shared by every endpoint."""
    code: int = 200
    message: str = "success"
    data: Optional[Any] = None

    @staticmethod
    def success(data: Any = None, message: str = "success", code: int = 200):
        return {"code": code, "message": message, "data": data}

    @staticmethod
    def fail(code: int = 400, message: str = "error", data: Any = None):
        return {"code": code, "message": message, "data": data}
