"""
Article request/response schemas
"""

from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, Union
from datetime import datetime

from app.models.article import Article, ArticleImage, ArticleType
from app.models.doctor import DoctorSummary


class ArticleCreateSchema(BaseModel):
    author_clerk_id: Optional[str] = Field(None, alias="authorClerkId")
    # type and title are checked by the service so a missing value gets
    # the "Missing required fields" message instead of a field error
    type: Optional[ArticleType] = None
    title: Optional[str] = Field(None, max_length=300)
    content: Optional[str] = Field(None, description="Article body; generated when empty for type=Article")
    key_points: Union[list[str], str] = Field(default_factory=list, alias="keyPoints")
    prompt: Optional[str] = Field(None, description="Extra guidance for AI drafting")
    tags: list[str] = Field(default_factory=list)
    images: list[ArticleImage] = Field(default_factory=list)

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "type": "Article",
                "title": "Staying hydrated in a heatwave",
                "keyPoints": ["signs of dehydration", "who is most at risk"],
                "prompt": "Keep it short and practical",
                "tags": ["heat", "prevention"],
            }
        }
    )


class ArticleUpdateSchema(BaseModel):
    """Partial update. Unknown and system-managed fields are dropped."""

    type: Optional[ArticleType] = None
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    content: Optional[str] = Field(None, min_length=1)
    tags: Optional[list[str]] = None
    images: Optional[list[ArticleImage]] = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("type", "title", "content", "tags", "images")
    @classmethod
    def _not_null(cls, v):
        # Omit a field to leave it unchanged; null would be stored as-is.
        if v is None:
            raise ValueError("must not be null")
        return v

    @field_validator("title", "content")
    @classmethod
    def _not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("must not be blank")
        return v.strip() if v is not None else v


class ArticleResponse(BaseModel):
    article_id: str = Field(..., alias="id")
    author_id: Optional[str] = Field(None, alias="authorId")
    author: Optional[DoctorSummary] = None
    type: ArticleType
    title: str
    slug: Optional[str] = None
    content: str
    tags: list[str]
    images: list[ArticleImage]
    like_count: int = Field(0, alias="likeCount")
    is_liked: bool = Field(False, alias="isLiked")
    published_at: Optional[datetime] = Field(None, alias="publishedAt")
    view_count: int = Field(0, alias="viewCount")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True,
    )

    @classmethod
    def from_article(
        cls,
        article: Article,
        is_liked: bool = False,
        author: Optional[DoctorSummary] = None,
    ) -> "ArticleResponse":
        # likedBy is never sent to clients; isLiked is computed server-side
        data = article.model_dump(exclude={"liked_by"})
        return cls.model_validate({**data, "is_liked": is_liked, "author": author})


class ArticleEnvelope(BaseModel):
    success: bool = True
    message: Optional[str] = None
    data: ArticleResponse


class ArticleListEnvelope(BaseModel):
    success: bool = True
    data: list[ArticleResponse]


class DoctorArticles(BaseModel):
    doctor: DoctorSummary
    articles: list[ArticleResponse]


class ExcludedDoctorArticles(BaseModel):
    excluded_doctor: DoctorSummary = Field(..., alias="excludedDoctor")
    articles: list[ArticleResponse]

    model_config = ConfigDict(populate_by_name=True)


class DoctorArticlesEnvelope(BaseModel):
    success: bool = True
    data: DoctorArticles


class ExcludedDoctorArticlesEnvelope(BaseModel):
    success: bool = True
    data: ExcludedDoctorArticles


class LikeResponse(BaseModel):
    message: str
    likes: int


class DeleteResponse(BaseModel):
    success: bool = True
    message: str
