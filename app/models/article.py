"""
Article model and Firestore conversion helpers
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


class ArticleType(str, Enum):
    """Kinds of content items"""

    ARTICLE = "Article"
    ANNOUNCEMENT = "Announcement"
    ALERT = "Alert"


class ArticleImage(BaseModel):
    url: Optional[str] = None
    public_id: Optional[str] = Field(None, alias="publicId")

    model_config = ConfigDict(populate_by_name=True)


class Article(BaseModel):
    article_id: str = Field(..., alias="id")
    author_id: Optional[str] = Field(None, alias="authorId")
    type: ArticleType = ArticleType.ARTICLE
    title: str
    slug: Optional[str] = None
    content: str
    tags: list[str] = Field(default_factory=list)
    images: list[ArticleImage] = Field(default_factory=list)
    like_count: int = Field(0, alias="likeCount")
    liked_by: list[str] = Field(default_factory=list, alias="likedBy")
    published_at: Optional[datetime] = Field(None, alias="publishedAt")
    view_count: int = Field(0, alias="viewCount")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    model_config = ConfigDict(populate_by_name=True)


def firestore_article_to_model(doc: dict, doc_id: str) -> Article:
    return Article.model_validate({**doc, "id": doc_id})
