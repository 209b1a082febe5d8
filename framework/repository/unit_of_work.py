"""
Unit of Work: manages repositories and transaction boundaries.
"""

from typing import Optional
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession
from framework.exceptions.errors import BusinessException, ConflictError, DuplicateError, PersistenceError
from framework.logging.logger import get_logger

logger = get_logger("unit_of_work")

_UNIQUE_MARKERS = ("unique constraint", "duplicate entry", "duplicate key", "unique_violation")
_FOREIGN_KEY_MARKERS = ("foreign key",)


def translate_integrity_error(exc: IntegrityError) -> BusinessException:
    """Map a driver constraint violation onto the domain error taxonomy."""
    raw = str(exc.orig) if getattr(exc, "orig", None) is not None else str(exc)
    lowered = raw.lower()
    if any(marker in lowered for marker in _UNIQUE_MARKERS):
        return DuplicateError("Record violates a uniqueness constraint", detail=raw)
    if any(marker in lowered for marker in _FOREIGN_KEY_MARKERS):
        return ConflictError("Record is referenced by, or references, a missing record", detail=raw)
    return PersistenceError("Data integrity error", detail=raw)


class UnitOfWork:
    """Manages related repositories with a shared session and transaction commit/rollback."""

    def __init__(self, session: Optional[AsyncSession] = None):
        """Initialize UnitOfWork; session must be provided (e.g. UnitOfWork.from_session())."""
        if session is None:
            raise ValueError("Session must be provided. Use UnitOfWork.from_session() or pass session explicitly.")

        self.session = session
        self._repositories = {}
        self._transaction_open = False

    @classmethod
    async def from_session(cls, session: AsyncSession) -> "UnitOfWork":
        """Create UnitOfWork from an existing session."""
        return cls(session=session)

    def get_repository(self, repo_class, model_class):
        """Get or create a repository instance (cached)."""
        cache_key = f"{repo_class.__name__}_{model_class.__name__}"
        if cache_key not in self._repositories:
            self._repositories[cache_key] = repo_class(self.session)
        return self._repositories[cache_key]

    @property
    def in_transaction(self) -> bool:
        """True between begin_transaction() and commit/rollback."""
        return self._transaction_open

    def _staged_count(self) -> int:
        session = self.session
        modified = sum(1 for obj in session.dirty if session.is_modified(obj))
        return len(session.new) + len(session.deleted) + modified

    async def save(self) -> int:
        """
        Write all staged mutations and return how many entities were affected.

        Outside an explicit transaction the changes are committed; inside one
        they are only flushed and become durable on commit_transaction().
        Constraint violations roll the session back and surface as
        DuplicateError / ConflictError / PersistenceError.
        """
        affected = self._staged_count()
        try:
            if self._transaction_open:
                await self.session.flush()
            else:
                await self.session.commit()
        except IntegrityError as e:
            await self._abort()
            error = translate_integrity_error(e)
            logger.warning(f"Save rejected by store: {type(error).__name__}")
            raise error from e
        except SQLAlchemyError as e:
            await self._abort()
            logger.error(f"Save failed: {type(e).__name__}")
            raise PersistenceError(detail=str(e)) from e
        return affected

    async def _abort(self) -> None:
        self._transaction_open = False
        await self.session.rollback()

    async def begin_transaction(self) -> None:
        """Open an explicit transaction scope spanning several save() calls."""
        if self._transaction_open:
            raise PersistenceError("A transaction is already in progress")
        self._transaction_open = True

    async def commit_transaction(self) -> None:
        """Commit the explicit transaction; no-op when none is open."""
        if not self._transaction_open:
            return
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self._abort()
            raise translate_integrity_error(e) from e
        except SQLAlchemyError as e:
            await self._abort()
            raise PersistenceError(detail=str(e)) from e
        self._transaction_open = False

    async def rollback_transaction(self) -> None:
        """Discard the explicit transaction; no-op when none is open."""
        if not self._transaction_open:
            return
        await self._abort()

    async def commit(self) -> None:
        """Commit all changes."""
        await self.session.commit()

    async def rollback(self) -> None:
        """Rollback all changes."""
        await self.session.rollback()

    async def flush(self) -> None:
        """Flush session (e.g. to get auto-increment IDs)."""
        await self.session.flush()

    async def dispose(self) -> None:
        """Roll back any open transaction and release the connection."""
        if self._transaction_open:
            await self._abort()
        await self.session.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            await self.rollback()
        await self.dispose()
