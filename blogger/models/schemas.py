# blogger/models/schemas.py
from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field


class Category(BaseModel):
    id: UUID
    name: str


class Post(BaseModel):
    id: UUID
    title: str
    content: str
    created_date: datetime
    category: Category


class CategoryRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=50)


class PostRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1, max_length=20000)
    category_id: UUID
