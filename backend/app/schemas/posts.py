"""Schemas for the feed: posts, likes and comments."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, constr

from app.schemas.users import PublicUser


class PostCreate(BaseModel):
    content: constr(strip_whitespace=True, max_length=5000) = ""
    image_url: constr(max_length=512) | None = None
    video_url: constr(max_length=512) | None = None


class PostRead(BaseModel):
    """Feed entry with aggregated interaction counters."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    author: PublicUser
    content: str
    image_url: str | None = None
    video_url: str | None = None
    created_at: datetime
    likes_count: int = 0
    comments_count: int = 0
    is_liked: bool = Field(default=False, description="Whether the current user liked the post")


class CommentCreate(BaseModel):
    content: constr(strip_whitespace=True, min_length=1, max_length=2000)


class CommentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    post_id: int
    author: PublicUser
    content: str
    created_at: datetime


class LikeToggleResult(BaseModel):
    liked: bool
    likes_count: int
