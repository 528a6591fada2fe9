# blogger/repositories/category_repository.py
import logging
from typing import Optional, List, Dict, Any
from uuid import UUID

import aiosqlite
import asyncpg

from blogger.models.schemas import Category
from blogger.repositories.base import BaseRepository, like_pattern

logger = logging.getLogger(__name__)


def row_to_category(row: Any) -> Category:
    return Category(id=UUID(str(row["id"])), name=row["name"])


class CategoryRepository(BaseRepository[Category]):
    """Repository for Category entity operations."""

    async def get_by_id(self, category_id: UUID) -> Optional[Category]:
        """Fetch single category by ID."""
        if self.use_postgres:
            async with self.db.pool.acquire() as conn:
                row = await conn.fetchrow(
                    "SELECT id, name FROM category WHERE id = $1",
                    category_id
                )
                return row_to_category(row) if row else None
        else:
            async with self.db.sqlite_connection() as conn:
                cursor = await conn.execute(
                    "SELECT id, name FROM category WHERE id = ?",
                    (str(category_id),)
                )
                row = await cursor.fetchone()
                return row_to_category(row) if row else None

    async def get_all(self, **filters: Any) -> List[Category]:
        """Fetch all categories ordered by name."""
        query = "SELECT id, name FROM category ORDER BY name"

        if self.use_postgres:
            async with self.db.pool.acquire() as conn:
                rows = await conn.fetch(query)
                return [row_to_category(row) for row in rows]
        else:
            async with self.db.sqlite_connection() as conn:
                cursor = await conn.execute(query)
                rows = await cursor.fetchall()
                return [row_to_category(row) for row in rows]

    async def find_by_name_containing(self, fragment: str) -> List[Category]:
        """Fetch categories whose name contains ``fragment``, ignoring case."""
        pattern = like_pattern(fragment)

        if self.use_postgres:
            async with self.db.pool.acquire() as conn:
                rows = await conn.fetch(
                    "SELECT id, name FROM category WHERE LOWER(name) LIKE $1 ESCAPE '\\' ORDER BY name",
                    pattern
                )
                return [row_to_category(row) for row in rows]
        else:
            async with self.db.sqlite_connection() as conn:
                cursor = await conn.execute(
                    "SELECT id, name FROM category WHERE unicode_lower(name) LIKE ? ESCAPE '\\' ORDER BY name",
                    (pattern,)
                )
                rows = await cursor.fetchall()
                return [row_to_category(row) for row in rows]

    async def exists(self, category_id: UUID) -> bool:
        return await self.get_by_id(category_id) is not None

    async def exists_by_name(self, name: str, exclude_id: Optional[UUID] = None) -> bool:
        """Check whether another category already uses ``name`` (case-insensitive)."""
        if self.use_postgres:
            query = "SELECT 1 FROM category WHERE LOWER(name) = LOWER($1)"
            params: List[Any] = [name]
            if exclude_id is not None:
                query += " AND id <> $2"
                params.append(exclude_id)
            async with self.db.pool.acquire() as conn:
                return await conn.fetchval(query, *params) is not None
        else:
            query = "SELECT 1 FROM category WHERE unicode_lower(name) = unicode_lower(?)"
            params = [name]
            if exclude_id is not None:
                query += " AND id <> ?"
                params.append(str(exclude_id))
            async with self.db.sqlite_connection() as conn:
                cursor = await conn.execute(query, tuple(params))
                return await cursor.fetchone() is not None

    async def create(self, data: Dict[str, Any]) -> Category:
        """Insert a new category. ``data`` carries the allocated ``id`` and the ``name``."""
        category_id = data["id"]
        name = data["name"]

        if self.use_postgres:
            async with self.db.pool.acquire() as conn:
                try:
                    row = await conn.fetchrow(
                        "INSERT INTO category (id, name) VALUES ($1, $2) RETURNING id, name",
                        category_id, name
                    )
                except asyncpg.IntegrityConstraintViolationError as e:
                    logger.warning(f"Category '{name}' rejected by unique index")
                    self._handle_integrity_error(e, "category create")
                return row_to_category(row)
        else:
            async with self.db.sqlite_connection() as conn:
                try:
                    await conn.execute(
                        "INSERT INTO category (id, name) VALUES (?, ?)",
                        (str(category_id), name)
                    )
                    await conn.commit()
                except aiosqlite.IntegrityError as e:
                    logger.warning(f"Category '{name}' rejected by unique index")
                    self._handle_integrity_error(e, "category create")
                return Category(id=category_id, name=name)

    async def update(
        self, category_id: UUID, data: Dict[str, Any]
    ) -> Optional[Category]:
        """Rename a category. Returns None when no row matched."""
        name = data["name"]

        if self.use_postgres:
            async with self.db.pool.acquire() as conn:
                try:
                    row = await conn.fetchrow(
                        "UPDATE category SET name = $1 WHERE id = $2 RETURNING id, name",
                        name, category_id
                    )
                except asyncpg.IntegrityConstraintViolationError as e:
                    self._handle_integrity_error(e, "category update")
                return row_to_category(row) if row else None
        else:
            async with self.db.sqlite_connection() as conn:
                try:
                    cursor = await conn.execute(
                        "UPDATE category SET name = ? WHERE id = ?",
                        (name, str(category_id))
                    )
                    await conn.commit()
                except aiosqlite.IntegrityError as e:
                    self._handle_integrity_error(e, "category update")
                if cursor.rowcount == 0:
                    return None
                return Category(id=category_id, name=name)

    async def delete(self, category_id: UUID) -> bool:
        """Delete a category. The post foreign key refuses it while posts reference it."""
        if self.use_postgres:
            async with self.db.pool.acquire() as conn:
                try:
                    result = await conn.execute("DELETE FROM category WHERE id = $1", category_id)
                except asyncpg.IntegrityConstraintViolationError as e:
                    self._handle_integrity_error(e, "category delete")
                return result != "DELETE 0"
        else:
            async with self.db.sqlite_connection() as conn:
                try:
                    cursor = await conn.execute("DELETE FROM category WHERE id = ?", (str(category_id),))
                    await conn.commit()
                except aiosqlite.IntegrityError as e:
                    self._handle_integrity_error(e, "category delete")
                return cursor.rowcount > 0

    async def count(self, **filters: Any) -> int:
        """Get total number of categories."""
        if self.use_postgres:
            async with self.db.pool.acquire() as conn:
                count = await conn.fetchval("SELECT COUNT(*) FROM category")
                return count or 0
        else:
            async with self.db.sqlite_connection() as conn:
                cursor = await conn.execute("SELECT COUNT(*) FROM category")
                row = await cursor.fetchone()
                return row[0] if row else 0
