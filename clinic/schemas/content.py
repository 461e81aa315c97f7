from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class BlogPostCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    excerpt: str = Field(min_length=1)
    content: str = Field(min_length=1)
    category: str = Field(min_length=1, max_length=64)
    image_url: Optional[str] = Field(default=None, max_length=500)
    read_time: str = Field(default="5 dakika", max_length=32)
    published_at: Optional[datetime] = None


class BlogPostUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    excerpt: Optional[str] = Field(default=None, min_length=1)
    content: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = Field(default=None, min_length=1, max_length=64)
    image_url: Optional[str] = Field(default=None, max_length=500)
    read_time: Optional[str] = Field(default=None, max_length=32)
    published_at: Optional[datetime] = None


class BlogPostResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    excerpt: str
    content: str
    category: str
    image_url: Optional[str] = None
    read_time: str
    published_at: datetime
    created_at: datetime


class TestimonialCreate(BaseModel):
    name: str = Field(min_length=2, max_length=120)
    review: str = Field(min_length=10)
    rating: int = Field(default=5, ge=1, le=5)
    approved: bool = False


class TestimonialUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=120)
    review: Optional[str] = Field(default=None, min_length=10)
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    approved: Optional[bool] = None


class TestimonialResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    review: str
    rating: int
    approved: bool
    created_at: datetime
