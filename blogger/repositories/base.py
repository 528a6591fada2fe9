# blogger/repositories/base.py
from abc import ABC, abstractmethod
from typing import Optional, List, Dict, Any, Generic, TypeVar
from uuid import UUID

from blogger.database import BlogDatabase
from blogger.exceptions import StorageConflictError

T = TypeVar("T")


def like_pattern(fragment: str) -> str:
    """Build a case-insensitive ``LIKE`` substring pattern (use with ESCAPE '\\')."""
    escaped = (
        fragment.lower()
        .replace("\\", "\\\\")
        .replace("%", "\\%")
        .replace("_", "\\_")
    )
    return f"%{escaped}%"


class BaseRepository(ABC, Generic[T]):
    """Abstract base repository class defining the standard CRUD interface."""

    def __init__(self, db: BlogDatabase):
        self.db = db

    @property
    def use_postgres(self) -> bool:
        return self.db.use_postgres

    def _handle_integrity_error(self, error: Exception, operation: str) -> None:
        """Translate a store-level constraint violation into StorageConflictError."""
        raise StorageConflictError(operation, error) from error

    @abstractmethod
    async def get_by_id(self, entity_id: UUID) -> Optional[T]:
        """Retrieve a single entity by its ID."""
        pass

    @abstractmethod
    async def get_all(self, **filters: Any) -> List[T]:
        """Retrieve all entities matching optional filters."""
        pass

    @abstractmethod
    async def create(self, data: Dict[str, Any]) -> T:
        """Create a new entity and return it."""
        pass

    @abstractmethod
    async def update(
        self, entity_id: UUID, data: Dict[str, Any]
    ) -> Optional[T]:
        """Update an existing entity and return the updated version."""
        pass

    @abstractmethod
    async def delete(self, entity_id: UUID) -> bool:
        """Delete an entity. Returns True if successful."""
        pass

    @abstractmethod
    async def exists(self, entity_id: UUID) -> bool:
        """Check whether an entity with the given ID exists."""
        pass

    @abstractmethod
    async def count(self, **filters: Any) -> int:
        """Count entities matching the given filters."""
        pass
