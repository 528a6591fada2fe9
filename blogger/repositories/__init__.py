from blogger.repositories.post_repository import PostRepository
from blogger.repositories.category_repository import CategoryRepository

__all__ = ["PostRepository", "CategoryRepository"]
