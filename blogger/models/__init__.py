from blogger.models.schemas import Category, Post, CategoryRequest, PostRequest

__all__ = ["Category", "Post", "CategoryRequest", "PostRequest"]
