# blogger/config.py
import os
import logging

logger = logging.getLogger(__name__)

# Redis Configuration
REDIS_HOST = os.getenv('REDIS_HOST', 'redis-service')
REDIS_PORT = int(os.getenv('REDIS_PORT', '6379'))
REDIS_URL = f"redis://{REDIS_HOST}:{REDIS_PORT}"
CACHE_ENABLED = os.getenv('CACHE_ENABLED', 'false').lower() == 'true'
CACHE_TTL = int(os.getenv('CACHE_TTL', '60'))

# CORS
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

# Determine which DB to use
USE_POSTGRES = os.getenv('USE_POSTGRES', 'false').lower() == 'true'


def postgres_config():
    """asyncpg connection settings from the POSTGRES_* environment variables."""
    # SSL mode configuration (asyncpg uses ssl parameter, not sslmode)
    ssl_mode = os.getenv('POSTGRES_SSLMODE', 'disable').lower()
    ssl_enabled = ssl_mode not in ('disable', 'false', 'no', '0')

    return {
        'host': os.getenv('POSTGRES_HOST', 'postgresql-service'),
        'port': int(os.getenv('POSTGRES_PORT', '5432')),
        'database': os.getenv('POSTGRES_DB', 'blogger'),
        'user': os.getenv('POSTGRES_USER', 'postgres'),
        'password': os.getenv('POSTGRES_PASSWORD', ''),
        'ssl': ssl_enabled,
    }


if USE_POSTGRES:
    logger.info("🐘 Using PostgreSQL database for categories and posts")
    DB_CONFIG = postgres_config()
    DATABASE_PATH = None
else:
    logger.info("💾 Using SQLite database for categories and posts")
    DATABASE_PATH = os.getenv('BLOG_DATABASE_PATH', '/app/blogger.db')
    DB_CONFIG = None

# Prometheus Metrics Configuration
REQUEST_LATENCY_BUCKETS = (
    0.001,
    0.005,
    0.01,
    0.025,
    0.05,
    0.075,
    0.1,
    0.25,
    0.5,
    0.75,
    1.0,
    2.5,
    5.0,
    10.0,
)
