"""Post manager: blog posts and their category association."""
import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, List, Optional
from uuid import UUID

from blogger.exceptions import PostNotFoundError
from blogger.models.schemas import Post
from blogger.repositories.post_repository import PostRepository
from blogger.services.category_service import CategoryService

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PostService:
    """Create, read, update and delete posts.

    Every operation that takes a category id resolves it through the
    ``CategoryService`` first, so a post never points at a missing category
    when it is written.

    ``clock`` must return timezone-aware datetimes; ``create`` stores its
    value converted to UTC and rejects naive ones with ``ValueError``.
    """

    def __init__(
        self,
        post_repository: PostRepository,
        category_service: CategoryService,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.posts = post_repository
        self.category_service = category_service
        self.clock = clock or utc_now

    async def list_all(self) -> List[Post]:
        """All posts, oldest ``created_date`` first."""
        return await self.posts.get_all()

    async def search(self, keyword: str) -> List[Post]:
        """Posts whose title or content contains ``keyword``, ignoring case."""
        return await self.posts.search(keyword)

    async def list_by_category(self, category_id: UUID) -> List[Post]:
        """Posts referencing ``category_id``. The category itself is not validated here."""
        return await self.posts.get_by_category_id(category_id)

    async def get_by_id(self, post_id: UUID) -> Post:
        post = await self.posts.get_by_id(post_id)
        if post is None:
            raise PostNotFoundError(post_id)
        return post

    async def create(self, title: str, content: str, category_id: UUID) -> Post:
        category = await self.category_service.get_by_id(category_id)

        now = self.clock()
        if now.tzinfo is None or now.utcoffset() is None:
            raise ValueError(f"clock returned naive datetime {now!r}")

        post = await self.posts.create({
            "id": uuid.uuid4(),
            "title": title,
            "content": content,
            "created_date": now.astimezone(timezone.utc),
            "category_id": category.id,
        })
        logger.info(f"Post {post.id} created in category '{category.name}'")
        return post

    async def update(self, post_id: UUID, title: str, content: str, category_id: UUID) -> Post:
        category = await self.category_service.get_by_id(category_id)
        await self.get_by_id(post_id)

        post = await self.posts.update(post_id, {
            "title": title,
            "content": content,
            "category_id": category.id,
        })
        if post is None:
            raise PostNotFoundError(post_id)
        logger.info(f"Post {post_id} updated")
        return post

    async def delete(self, post_id: UUID) -> bool:
        if not await self.posts.exists(post_id):
            raise PostNotFoundError(post_id)

        if not await self.posts.delete(post_id):
            raise PostNotFoundError(post_id)
        logger.info(f"Post {post_id} deleted")
        return True

    async def count(self) -> int:
        return await self.posts.count()
