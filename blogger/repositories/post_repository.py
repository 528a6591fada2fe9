# blogger/repositories/post_repository.py
import logging
from typing import Optional, List, Dict, Any
from datetime import datetime
from uuid import UUID

import aiosqlite
import asyncpg

from blogger.models.schemas import Category, Post
from blogger.repositories.base import BaseRepository, like_pattern

logger = logging.getLogger(__name__)

BASE_QUERY = """
    SELECT p.id, p.title, p.content, p.created_date, p.category_id,
           c.name as category_name
    FROM post p
    INNER JOIN category c ON p.category_id = c.id
"""


def row_to_post(row: Any) -> Post:
    created_date = row["created_date"]
    if isinstance(created_date, str):
        created_date = datetime.fromisoformat(created_date)
    return Post(
        id=UUID(str(row["id"])),
        title=row["title"],
        content=row["content"],
        created_date=created_date,
        category=Category(id=UUID(str(row["category_id"])), name=row["category_name"]),
    )


class PostRepository(BaseRepository[Post]):
    """Repository for Post entity operations."""

    async def get_by_id(self, post_id: UUID) -> Optional[Post]:
        """Fetch single post by ID with category info."""
        if self.use_postgres:
            async with self.db.pool.acquire() as conn:
                row = await conn.fetchrow(BASE_QUERY + " WHERE p.id = $1", post_id)
                return row_to_post(row) if row else None
        else:
            async with self.db.sqlite_connection() as conn:
                cursor = await conn.execute(BASE_QUERY + " WHERE p.id = ?", (str(post_id),))
                row = await cursor.fetchone()
                return row_to_post(row) if row else None

    async def get_all(self, **filters: Any) -> List[Post]:
        """Fetch all posts with category info, oldest first."""
        query = BASE_QUERY + " ORDER BY p.created_date ASC"

        if self.use_postgres:
            async with self.db.pool.acquire() as conn:
                rows = await conn.fetch(query)
                return [row_to_post(row) for row in rows]
        else:
            async with self.db.sqlite_connection() as conn:
                cursor = await conn.execute(query)
                rows = await cursor.fetchall()
                return [row_to_post(row) for row in rows]

    async def search(self, keyword: str) -> List[Post]:
        """Fetch posts whose title or content contains ``keyword``, ignoring case."""
        pattern = like_pattern(keyword)

        if self.use_postgres:
            query = BASE_QUERY + (
                " WHERE LOWER(p.title) LIKE $1 ESCAPE '\\'"
                " OR LOWER(p.content) LIKE $1 ESCAPE '\\'"
            )
            async with self.db.pool.acquire() as conn:
                rows = await conn.fetch(query, pattern)
                return [row_to_post(row) for row in rows]
        else:
            query = BASE_QUERY + (
                " WHERE unicode_lower(p.title) LIKE ? ESCAPE '\\'"
                " OR unicode_lower(p.content) LIKE ? ESCAPE '\\'"
            )
            async with self.db.sqlite_connection() as conn:
                cursor = await conn.execute(query, (pattern, pattern))
                rows = await cursor.fetchall()
                return [row_to_post(row) for row in rows]

    async def get_by_category_id(self, category_id: UUID) -> List[Post]:
        """Fetch posts referencing ``category_id``."""
        if self.use_postgres:
            async with self.db.pool.acquire() as conn:
                rows = await conn.fetch(
                    BASE_QUERY + " WHERE p.category_id = $1 ORDER BY p.created_date ASC",
                    category_id
                )
                return [row_to_post(row) for row in rows]
        else:
            async with self.db.sqlite_connection() as conn:
                cursor = await conn.execute(
                    BASE_QUERY + " WHERE p.category_id = ? ORDER BY p.created_date ASC",
                    (str(category_id),)
                )
                rows = await cursor.fetchall()
                return [row_to_post(row) for row in rows]

    async def create(self, data: Dict[str, Any]) -> Post:
        """Insert a new post and return it with category info."""
        post_id = data["id"]
        title = data["title"]
        content = data["content"]
        created_date: datetime = data["created_date"]
        category_id = data["category_id"]

        if self.use_postgres:
            async with self.db.pool.acquire() as conn:
                try:
                    await conn.execute(
                        "INSERT INTO post (id, title, content, created_date, category_id) VALUES ($1, $2, $3, $4, $5)",
                        post_id, title, content, created_date, category_id
                    )
                except asyncpg.IntegrityConstraintViolationError as e:
                    self._handle_integrity_error(e, "post create")
        else:
            async with self.db.sqlite_connection() as conn:
                try:
                    await conn.execute(
                        "INSERT INTO post (id, title, content, created_date, category_id) VALUES (?, ?, ?, ?, ?)",
                        (str(post_id), title, content, created_date.isoformat(timespec="microseconds"), str(category_id))
                    )
                    await conn.commit()
                except aiosqlite.IntegrityError as e:
                    self._handle_integrity_error(e, "post create")

        return await self.get_by_id(post_id)

    async def update(
        self, post_id: UUID, data: Dict[str, Any]
    ) -> Optional[Post]:
        """Replace title, content and category of a post. ``created_date`` is never touched."""
        title = data["title"]
        content = data["content"]
        category_id = data["category_id"]

        if self.use_postgres:
            async with self.db.pool.acquire() as conn:
                try:
                    result = await conn.execute(
                        "UPDATE post SET title = $1, content = $2, category_id = $3 WHERE id = $4",
                        title, content, category_id, post_id
                    )
                except asyncpg.IntegrityConstraintViolationError as e:
                    self._handle_integrity_error(e, "post update")
                if result == "UPDATE 0":
                    return None
        else:
            async with self.db.sqlite_connection() as conn:
                try:
                    cursor = await conn.execute(
                        "UPDATE post SET title = ?, content = ?, category_id = ? WHERE id = ?",
                        (title, content, str(category_id), str(post_id))
                    )
                    await conn.commit()
                except aiosqlite.IntegrityError as e:
                    self._handle_integrity_error(e, "post update")
                if cursor.rowcount == 0:
                    return None

        return await self.get_by_id(post_id)

    async def delete(self, post_id: UUID) -> bool:
        """Delete a post."""
        if self.use_postgres:
            async with self.db.pool.acquire() as conn:
                result = await conn.execute("DELETE FROM post WHERE id = $1", post_id)
                return result != "DELETE 0"
        else:
            async with self.db.sqlite_connection() as conn:
                cursor = await conn.execute("DELETE FROM post WHERE id = ?", (str(post_id),))
                await conn.commit()
                return cursor.rowcount > 0

    async def exists(self, post_id: UUID) -> bool:
        if self.use_postgres:
            async with self.db.pool.acquire() as conn:
                return await conn.fetchval("SELECT 1 FROM post WHERE id = $1", post_id) is not None
        else:
            async with self.db.sqlite_connection() as conn:
                cursor = await conn.execute("SELECT 1 FROM post WHERE id = ?", (str(post_id),))
                return await cursor.fetchone() is not None

    async def count(self, **filters: Any) -> int:
        """Get total number of posts, optionally restricted to one ``category_id``."""
        category_id = filters.get("category_id")

        if self.use_postgres:
            async with self.db.pool.acquire() as conn:
                if category_id is not None:
                    count = await conn.fetchval("SELECT COUNT(*) FROM post WHERE category_id = $1", category_id)
                else:
                    count = await conn.fetchval("SELECT COUNT(*) FROM post")
                return count or 0
        else:
            async with self.db.sqlite_connection() as conn:
                if category_id is not None:
                    cursor = await conn.execute("SELECT COUNT(*) FROM post WHERE category_id = ?", (str(category_id),))
                else:
                    cursor = await conn.execute("SELECT COUNT(*) FROM post")
                row = await cursor.fetchone()
                return row[0] if row else 0
