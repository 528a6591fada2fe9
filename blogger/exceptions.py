"""Error kinds raised by the category and post managers.

Every class here is an expected condition: the HTTP layer maps it to a
response, nothing inside the service retries or swallows it.
"""
from typing import Any


class BlogError(Exception):
    """Base class for expected, caller-recoverable conditions."""

    error_code = "BLOG_ERROR"


class NotFoundError(BlogError):
    error_code = "NOT_FOUND"


class CategoryNotFoundError(NotFoundError):
    error_code = "CATEGORY_NOT_FOUND"

    def __init__(self, category_id: Any):
        self.category_id = category_id
        super().__init__(f"Category with id {category_id} does not exist!")


class PostNotFoundError(NotFoundError):
    error_code = "POST_NOT_FOUND"

    def __init__(self, post_id: Any):
        self.post_id = post_id
        super().__init__(f"Post with id {post_id} does not exist!")


class CategoryAlreadyExistsError(BlogError):
    error_code = "CATEGORY_ALREADY_EXISTS"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Category with name {name} already exists!")


class InvalidCategoryNameError(BlogError):
    error_code = "INVALID_CATEGORY_NAME"

    def __init__(self, name: Any):
        self.name = name
        super().__init__(f"Category name must not be blank, got {name!r}")


class ConflictError(BlogError):
    error_code = "CONFLICT"


class StorageConflictError(ConflictError):
    """The store rejected a write that passed the application checks."""

    error_code = "STORAGE_CONFLICT"

    def __init__(self, operation: str, reason: Any = None):
        self.operation = operation
        self.reason = reason
        message = f"Storage rejected {operation}"
        if reason is not None:
            message += f": {reason}"
        super().__init__(message)


class CategoryInUseError(ConflictError):
    error_code = "CATEGORY_IN_USE"

    def __init__(self, category_id: Any, post_count: int):
        self.category_id = category_id
        self.post_count = post_count
        super().__init__(
            f"Category with id {category_id} is still referenced by {post_count} post(s)!"
        )
