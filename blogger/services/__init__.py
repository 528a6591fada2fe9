from blogger.services.category_service import CategoryService
from blogger.services.post_service import PostService

__all__ = ["CategoryService", "PostService"]
