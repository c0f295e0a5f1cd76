"""Articles API routes"""

from fastapi import APIRouter, Depends, status
from typing import Optional

from app.dependencies import get_viewer_id
from app.services.article_service import article_service
from app.schemas.article import (
    ArticleCreateSchema,
    ArticleUpdateSchema,
    ArticleEnvelope,
    ArticleListEnvelope,
    DoctorArticles,
    DoctorArticlesEnvelope,
    ExcludedDoctorArticles,
    ExcludedDoctorArticlesEnvelope,
    LikeResponse,
    DeleteResponse,
)


router = APIRouter(prefix="/api/articles", tags=["Articles"])


@router.post("", response_model=ArticleEnvelope, status_code=status.HTTP_201_CREATED)
async def create_article(
    payload: ArticleCreateSchema, viewer_id: Optional[str] = Depends(get_viewer_id)
):
    article = await article_service.create(payload, viewer_id)
    return ArticleEnvelope(message="Article created successfully", data=article)


@router.get("", response_model=ArticleListEnvelope)
async def list_articles(viewer_id: Optional[str] = Depends(get_viewer_id)):
    """List all articles, newest first, with isLiked for the viewer"""
    return ArticleListEnvelope(data=await article_service.list(viewer_id))


@router.get("/doctor/{clerk_user_id}", response_model=DoctorArticlesEnvelope)
async def list_doctor_articles(
    clerk_user_id: str, viewer_id: Optional[str] = Depends(get_viewer_id)
):
    doctor, articles = await article_service.list_by_doctor(clerk_user_id, viewer_id)
    return DoctorArticlesEnvelope(data=DoctorArticles(doctor=doctor, articles=articles))


@router.get("/exclude/{clerk_user_id}", response_model=ExcludedDoctorArticlesEnvelope)
async def list_articles_excluding_doctor(
    clerk_user_id: str, viewer_id: Optional[str] = Depends(get_viewer_id)
):
    doctor, articles = await article_service.list_excluding_doctor(clerk_user_id, viewer_id)
    return ExcludedDoctorArticlesEnvelope(
        data=ExcludedDoctorArticles(excluded_doctor=doctor, articles=articles)
    )


@router.get("/{article_id}", response_model=ArticleEnvelope)
async def get_article(article_id: str, viewer_id: Optional[str] = Depends(get_viewer_id)):
    """Fetch one article by id or slug; every call counts as a view"""
    return ArticleEnvelope(data=await article_service.get(article_id, viewer_id))


@router.put("/{article_id}", response_model=ArticleEnvelope)
async def update_article(
    article_id: str,
    payload: ArticleUpdateSchema,
    viewer_id: Optional[str] = Depends(get_viewer_id),
):
    patch = payload.model_dump(by_alias=True, exclude_unset=True, mode="json")
    article = await article_service.update(article_id, patch, viewer_id)
    return ArticleEnvelope(message="Article updated successfully", data=article)


@router.put("/{article_id}/publish", response_model=ArticleEnvelope)
async def publish_article(article_id: str, viewer_id: Optional[str] = Depends(get_viewer_id)):
    article = await article_service.publish(article_id, viewer_id)
    return ArticleEnvelope(message="Article published successfully", data=article)


@router.put("/{article_id}/like", response_model=LikeResponse)
async def like_article(article_id: str, viewer_id: Optional[str] = Depends(get_viewer_id)):
    likes = await article_service.like(article_id, viewer_id)
    return LikeResponse(message="Liked", likes=likes)


@router.put("/{article_id}/unlike", response_model=LikeResponse)
async def unlike_article(article_id: str, viewer_id: Optional[str] = Depends(get_viewer_id)):
    likes = await article_service.unlike(article_id, viewer_id)
    return LikeResponse(message="Unliked", likes=likes)


@router.delete("/{article_id}", response_model=DeleteResponse)
async def delete_article(article_id: str):
    await article_service.delete(article_id)
    return DeleteResponse(message="Article deleted successfully")
