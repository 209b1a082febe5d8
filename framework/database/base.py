from abc import ABC, abstractmethod

class BaseDatabaseDriver(ABC):
    """Lifecycle contract for a database backend used by DatabaseManager."""

    @abstractmethod
    async def connect(self):
        """Open or verify the connection."""

    @abstractmethod
    async def disconnect(self):
        """Release every connection held by the driver."""

    @abstractmethod
    async def create_all(self):
        """Create the application schema (development and tests only)."""
