from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


# --- Search ---

class SearchType(str, Enum):
    TITLE = "TITLE"
    CONTENT = "CONTENT"
    ID = "ID"
    NICKNAME = "NICKNAME"
    HASHTAG = "HASHTAG"


# --- Hashtag ---

class HashtagResponse(BaseModel):
    id: int
    name: str
    model_config = ConfigDict(from_attributes=True)


# --- User ---

class UserBase(BaseModel):
    username: str = Field(min_length=1, max_length=50)
    email: str = Field(max_length=100)
    nickname: str | None = Field(None, max_length=100)
    memo: str | None = None


class UserCreate(UserBase):
    password: str = Field(min_length=1, max_length=128)


class UserResponse(UserBase):
    id: int
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class UserDetail(UserResponse):
    article_count: int = 0


# --- Comment ---

class ArticleCommentCreate(BaseModel):
    content: str = Field(min_length=1, max_length=500)
    parent_comment_id: int | None = None


class ArticleCommentUpdate(BaseModel):
    content: str = Field(min_length=1, max_length=500)


class ArticleCommentResponse(BaseModel):
    id: int
    article_id: int
    user_id: int
    parent_comment_id: int | None
    content: str
    created_at: datetime
    created_by: str
    child_comments: list[ArticleCommentResponse] = []


# --- Article ---

class ArticleCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1, max_length=10000)


class ArticleUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    content: str | None = Field(None, min_length=1, max_length=10000)


class ArticleCreated(BaseModel):
    id: int


class ArticleResponse(BaseModel):
    id: int
    title: str
    content: str
    created_at: datetime
    created_by: str
    modified_at: datetime | None = None
    modified_by: str | None = None
    user_id: int
    author: UserResponse | None = None
    hashtags: list[HashtagResponse] = []


class ArticleWithCommentsResponse(ArticleResponse):
    comments: list[ArticleCommentResponse] = []


# --- Pagination ---

class PaginatedResponse(BaseModel):
    items: list[ArticleResponse]
    total: int
    page: int
    page_size: int
    pages: int
    bar_numbers: list[int] = []


# --- Metrics ---

class MetricsResponse(BaseModel):
    total_articles: int
    total_comments: int
    total_users: int
    total_hashtags: int
    avg_comments_per_article: float
    cache_info: dict = {}


# Required for the self-referencing comment tree.
ArticleCommentResponse.model_rebuild()
