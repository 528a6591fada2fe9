"""
blogger-service 단위 테스트를 위한 pytest fixtures
"""
import os
import sys
import tempfile
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

# 프로젝트 루트를 path에 추가
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# blogger.config는 import 시점에 환경변수를 읽으므로 먼저 설정
os.environ.setdefault('USE_POSTGRES', 'false')
os.environ.setdefault('CACHE_ENABLED', 'false')
os.environ.setdefault('ALLOWED_ORIGINS', 'http://localhost:3000')

from blogger.database import BlogDatabase
from blogger.repositories import CategoryRepository, PostRepository
from blogger.services import CategoryService, PostService


@pytest.fixture
def temp_db_path():
    """테스트용 임시 SQLite 데이터베이스 경로"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield os.path.join(tmpdir, 'test_blogger.db')


@pytest_asyncio.fixture
async def database(temp_db_path):
    """스키마가 초기화된 SQLite BlogDatabase"""
    db = BlogDatabase(use_postgres=False, database_path=temp_db_path)
    await db.initialize()
    yield db
    await db.close()


@pytest.fixture
def category_repository(database):
    return CategoryRepository(database)


@pytest.fixture
def post_repository(database):
    return PostRepository(database)


@pytest.fixture
def category_service(category_repository, post_repository):
    return CategoryService(category_repository, post_repository)


@pytest.fixture
def post_service(post_repository, category_service):
    return PostService(post_repository, category_service)


@pytest.fixture
def fixed_clock():
    """호출할 때마다 정해진 순서의 시각을 반환하는 clock"""
    base = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)
    offsets = iter([timedelta(minutes=m) for m in (30, 0, 10, 20, 40, 50)])

    def clock():
        return base + next(offsets)

    return clock


@pytest.fixture
def sample_category_names():
    """테스트용 카테고리 이름"""
    return ['Sport', 'Sports Car', 'Music', 'Sci-Fi']


@pytest.fixture
def sample_post():
    """테스트용 게시물 데이터"""
    return {
        'title': 'Race Day',
        'content': 'The marathon starts at 9am sharp.',
    }
