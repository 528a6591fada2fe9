"""Category manager: identity and name uniqueness of blog categories."""
import logging
import uuid
from typing import List
from uuid import UUID

from blogger.exceptions import (
    CategoryAlreadyExistsError,
    CategoryInUseError,
    CategoryNotFoundError,
    InvalidCategoryNameError,
)
from blogger.models.schemas import Category
from blogger.repositories.category_repository import CategoryRepository
from blogger.repositories.post_repository import PostRepository

logger = logging.getLogger(__name__)


def clean_name(name: str) -> str:
    """Strip surrounding whitespace; a name with nothing left is invalid."""
    stripped = name.strip() if name else ""
    if not stripped:
        raise InvalidCategoryNameError(name)
    return stripped


class CategoryService:
    """Create, read, rename and delete categories.

    Name uniqueness is checked here before every write and enforced again by
    the unique index on the lower-cased name; a write that loses a race surfaces as
    ``StorageConflictError`` from the repository.

    A category still referenced by posts cannot be deleted: ``delete`` raises
    ``CategoryInUseError`` and the post foreign key refuses the row as well.
    """

    def __init__(self, category_repository: CategoryRepository, post_repository: PostRepository):
        self.categories = category_repository
        self.posts = post_repository

    async def list_all(self) -> List[Category]:
        return await self.categories.get_all()

    async def search(self, name_fragment: str) -> List[Category]:
        """Categories whose name contains ``name_fragment``, ignoring case.

        Blank fragments are rejected; callers list everything instead.
        """
        if not name_fragment or not name_fragment.strip():
            raise ValueError("name_fragment must not be blank, use list_all() instead")
        return await self.categories.find_by_name_containing(name_fragment)

    async def get_by_id(self, category_id: UUID) -> Category:
        category = await self.categories.get_by_id(category_id)
        if category is None:
            raise CategoryNotFoundError(category_id)
        return category

    async def create(self, name: str) -> Category:
        name = clean_name(name)
        if await self.categories.exists_by_name(name):
            raise CategoryAlreadyExistsError(name)

        category = await self.categories.create({"id": uuid.uuid4(), "name": name})
        logger.info(f"Category '{category.name}' created with ID {category.id}")
        return category

    async def rename(self, category_id: UUID, new_name: str) -> Category:
        new_name = clean_name(new_name)
        await self.get_by_id(category_id)

        # the category's own current name does not count as a collision
        if await self.categories.exists_by_name(new_name, exclude_id=category_id):
            raise CategoryAlreadyExistsError(new_name)

        category = await self.categories.update(category_id, {"name": new_name})
        if category is None:
            # removed between the lookup and the update
            raise CategoryNotFoundError(category_id)
        logger.info(f"Category {category_id} renamed to '{new_name}'")
        return category

    async def delete(self, category_id: UUID) -> bool:
        await self.get_by_id(category_id)

        post_count = await self.posts.count(category_id=category_id)
        if post_count > 0:
            raise CategoryInUseError(category_id, post_count)

        if not await self.categories.delete(category_id):
            raise CategoryNotFoundError(category_id)
        logger.info(f"Category {category_id} deleted")
        return True

    async def count(self) -> int:
        return await self.categories.count()
