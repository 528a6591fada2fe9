# blogger/database.py
import os
import logging
from contextlib import asynccontextmanager
from typing import Optional, Dict, Any, AsyncIterator

import aiosqlite
import asyncpg

from blogger import config

logger = logging.getLogger(__name__)


def unicode_lower(value):
    """SQLite's built-in LOWER() folds ASCII only; this folds the full Unicode range."""
    return value.lower() if isinstance(value, str) else value


class BlogDatabase:
    """Connection holder shared by the category and post repositories.

    SQLite opens a connection per operation, PostgreSQL uses an asyncpg pool
    created in ``initialize``.
    """

    def __init__(
        self,
        use_postgres: Optional[bool] = None,
        database_path: Optional[str] = None,
        db_config: Optional[Dict[str, Any]] = None,
    ):
        self.use_postgres = config.USE_POSTGRES if use_postgres is None else use_postgres
        self.database_path = database_path or config.DATABASE_PATH
        self.db_config = db_config or config.DB_CONFIG
        if self.use_postgres and not self.db_config:
            # PostgreSQL requested explicitly while the environment selects SQLite
            self.db_config = config.postgres_config()
        self.pool: Optional[asyncpg.Pool] = None
        self._initialized = False

    async def initialize(self):
        """Initialize database connection pool and schema."""
        if self._initialized:
            return

        if self.use_postgres:
            try:
                self.pool = await asyncpg.create_pool(
                    min_size=5,
                    max_size=20,
                    **self.db_config
                )
                logger.info(f"PostgreSQL connection pool created: {self.db_config['host']}:{self.db_config['port']}")
                await self._initialize_postgres_schema()
            except Exception as e:
                logger.error(f"PostgreSQL pool creation failed: {e}", exc_info=True)
                raise
        else:
            await self._initialize_sqlite_schema()

        self._initialized = True

    @asynccontextmanager
    async def sqlite_connection(self) -> AsyncIterator[aiosqlite.Connection]:
        """Open a SQLite connection with row access by name and foreign keys enforced.

        ``unicode_lower()`` is registered on every connection because the
        category name index is built on it.
        """
        async with aiosqlite.connect(self.database_path) as conn:
            conn.row_factory = aiosqlite.Row
            await conn.create_function("unicode_lower", 1, unicode_lower, deterministic=True)
            await conn.execute("PRAGMA foreign_keys = ON")
            yield conn

    async def _initialize_postgres_schema(self):
        """Initialize PostgreSQL database schema."""
        async with self.pool.acquire() as conn:
            await conn.execute('''
                CREATE TABLE IF NOT EXISTS category (
                    id UUID PRIMARY KEY,
                    name VARCHAR(50) NOT NULL
                )
            ''')
            await conn.execute(
                'CREATE UNIQUE INDEX IF NOT EXISTS idx_category_name_lower ON category (LOWER(name))'
            )

            await conn.execute('''
                CREATE TABLE IF NOT EXISTS post (
                    id UUID PRIMARY KEY,
                    title VARCHAR(200) NOT NULL,
                    content TEXT NOT NULL,
                    created_date TIMESTAMPTZ NOT NULL,
                    category_id UUID NOT NULL REFERENCES category(id)
                )
            ''')

            await conn.execute('CREATE INDEX IF NOT EXISTS idx_post_created_date ON post(created_date)')
            await conn.execute('CREATE INDEX IF NOT EXISTS idx_post_category_id ON post(category_id)')

        logger.info("PostgreSQL blogger database schema initialized")

    async def _initialize_sqlite_schema(self):
        """Initialize SQLite database schema."""
        directory = os.path.dirname(self.database_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        async with self.sqlite_connection() as conn:
            await conn.execute('''
                CREATE TABLE IF NOT EXISTS category (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL
                )
            ''')
            await conn.execute(
                'CREATE UNIQUE INDEX IF NOT EXISTS idx_category_name_unicode_lower ON category (unicode_lower(name))'
            )

            await conn.execute('''
                CREATE TABLE IF NOT EXISTS post (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    content TEXT NOT NULL,
                    created_date TEXT NOT NULL,
                    category_id TEXT NOT NULL,
                    FOREIGN KEY (category_id) REFERENCES category(id)
                )
            ''')
            await conn.execute('CREATE INDEX IF NOT EXISTS idx_post_created_date ON post(created_date)')
            await conn.execute('CREATE INDEX IF NOT EXISTS idx_post_category_id ON post(category_id)')
            await conn.commit()

        logger.info("SQLite blogger database schema initialized")

    async def health_check(self) -> bool:
        """Check database connection health."""
        try:
            if self.use_postgres:
                async with self.pool.acquire() as conn:
                    await conn.fetchval("SELECT 1")
            else:
                async with self.sqlite_connection() as conn:
                    await conn.execute("SELECT 1")
            return True
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return False

    async def close(self):
        """Close database connection pool."""
        if self.use_postgres and self.pool:
            await self.pool.close()
            logger.info("PostgreSQL connection pool closed")
        self._initialized = False
