"""
Article lifecycle: create (with optional AI drafting), read, update,
publish, delete, and the viewer-annotated views returned to clients.

The service holds no state between requests; everything persistent goes
through ArticleStore and EngagementTracker.
"""

import logging
import re
from datetime import datetime, UTC
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from app.config import settings
from app.exceptions import (
    DuplicateKeyError,
    GenerationFailedError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from app.models.article import Article, ArticleType
from app.models.doctor import DoctorSummary
from app.prompts import build_article_prompt
from app.schemas.article import ArticleCreateSchema, ArticleResponse
from app.services import groq_service
from app.services.article_store import ArticleStore, article_store
from app.services.engagement import EngagementTracker, engagement_tracker, is_liked

logger = logging.getLogger(__name__)

# Set by the system only; dropped from every update patch
SYSTEM_MANAGED_FIELDS = (
    "id",
    "authorId",
    "slug",
    "publishedAt",
    "viewCount",
    "likeCount",
    "likedBy",
    "createdAt",
    "updatedAt",
)

_KEY_POINT_SEPARATORS = re.compile(r"[\n,]")


def normalize_key_points(
    key_points: Union[str, Iterable[str], None],
    limit: Optional[int] = None,
) -> List[str]:
    """
    Turn user-entered key points into a clean bullet list.

    Accepts a single string or a list of strings. Entries are split on
    newlines and commas, trimmed, blank ones dropped, duplicates removed
    (first occurrence wins) and the result capped at `limit`.
    """
    limit = settings.ARTICLE_MAX_KEY_POINTS if limit is None else limit
    if not key_points:
        return []
    if isinstance(key_points, str):
        key_points = [key_points]

    points: List[str] = []
    for entry in key_points:
        if not entry:
            continue
        for piece in _KEY_POINT_SEPARATORS.split(str(entry)):
            piece = piece.strip()
            if piece and piece not in points:
                points.append(piece)
    return points[:limit]


class ArticleService:
    """Orchestrates article operations for a single request"""

    def __init__(
        self,
        store: Optional[ArticleStore] = None,
        tracker: Optional[EngagementTracker] = None,
    ):
        self.store = store or article_store
        self.tracker = tracker or engagement_tracker

    # ============================================
    # PRESENTATION
    # ============================================

    async def _present(
        self, articles: List[Article], viewer_id: Optional[str]
    ) -> List[ArticleResponse]:
        authors = await self.store.get_doctors(a.author_id for a in articles)
        return [
            ArticleResponse.from_article(
                a, is_liked=is_liked(a, viewer_id), author=authors.get(a.author_id)
            )
            for a in articles
        ]

    async def _present_one(self, article: Article, viewer_id: Optional[str]) -> ArticleResponse:
        return (await self._present([article], viewer_id))[0]

    # ============================================
    # CREATE
    # ============================================

    async def _draft_content(self, payload: ArticleCreateSchema, title: str) -> str:
        prompt = build_article_prompt(
            title,
            normalize_key_points(payload.key_points),
            payload.prompt,
        )
        try:
            content = await groq_service.generate_text(prompt)
        except RuntimeError as e:
            logger.error("Groq generation failed for '%s': %s", title, e)
            raise GenerationFailedError() from e
        if not content or not content.strip():
            logger.warning("Groq returned no content for '%s'", title)
            raise GenerationFailedError()
        return content.strip()

    async def create(
        self, payload: ArticleCreateSchema, viewer_id: Optional[str] = None
    ) -> ArticleResponse:
        """
        Create an article, announcement or alert.

        An Article without content is drafted by the AI collaborator;
        Announcements and Alerts must carry their own content. The author is
        the doctor whose Clerk id is `authorClerkId` (or the viewer); when no
        doctor matches, the item is created without an author.

        Raises:
            ValidationError: missing type/title, or empty content where required
            GenerationFailedError: drafting failed or produced nothing
            InternalError: the item could not be persisted (e.g. slug taken)
        """
        title = (payload.title or "").strip()
        if not title or payload.type is None:
            raise ValidationError("Missing required fields: type, title")

        content = (payload.content or "").strip()
        if not content:
            if payload.type == ArticleType.ARTICLE:
                content = await self._draft_content(payload, title)
            else:
                raise ValidationError("Content is required for Announcement and Alert")

        author: Optional[DoctorSummary] = None
        author_clerk_id = payload.author_clerk_id or viewer_id
        if author_clerk_id:
            author = await self.store.find_doctor_by_clerk_id(author_clerk_id)
            # no doctor profile: admin-authored post

        data: Dict[str, Any] = {
            "authorId": author.doctor_id if author else None,
            "type": payload.type.value,
            "title": title,
            "content": content,
            "tags": list(payload.tags),
            "images": [img.model_dump(by_alias=True) for img in payload.images],
        }
        try:
            article = await self.store.create(data)
        except DuplicateKeyError as e:
            logger.error("Create article failed: %s", e)
            raise InternalError("Failed to create article") from e

        return ArticleResponse.from_article(article, is_liked=False, author=author)

    # ============================================
    # READ
    # ============================================

    async def get(self, article_id: str, viewer_id: Optional[str] = None) -> ArticleResponse:
        """Fetch one article by id (or slug) and count the view"""
        article = await self.store.get(article_id)
        if article is None:
            article = await self.store.get_by_slug(article_id)
        if article is None:
            raise NotFoundError()

        viewed = await self.store.increment_views(article.article_id)
        if viewed is None:
            # deleted between the read and the increment
            raise NotFoundError()
        return await self._present_one(viewed, viewer_id)

    async def list(self, viewer_id: Optional[str] = None) -> List[ArticleResponse]:
        """All articles, newest first"""
        return await self._present(await self.store.list(), viewer_id)

    async def _doctor_or_404(self, clerk_user_id: str) -> DoctorSummary:
        doctor = await self.store.find_doctor_by_clerk_id(clerk_user_id)
        if doctor is None:
            raise NotFoundError("Doctor not found")
        return doctor

    async def list_by_doctor(
        self, clerk_user_id: str, viewer_id: Optional[str] = None
    ) -> Tuple[DoctorSummary, List[ArticleResponse]]:
        doctor = await self._doctor_or_404(clerk_user_id)
        articles = await self.store.list(author_id=doctor.doctor_id)
        return doctor, await self._present(articles, viewer_id)

    async def list_excluding_doctor(
        self, clerk_user_id: str, viewer_id: Optional[str] = None
    ) -> Tuple[DoctorSummary, List[ArticleResponse]]:
        doctor = await self._doctor_or_404(clerk_user_id)
        articles = await self.store.list(exclude_author_id=doctor.doctor_id)
        return doctor, await self._present(articles, viewer_id)

    # ============================================
    # UPDATE / PUBLISH / DELETE
    # ============================================

    async def update(
        self, article_id: str, patch: Dict[str, Any], viewer_id: Optional[str] = None
    ) -> ArticleResponse:
        """Apply a partial update; system-managed fields are ignored"""
        clean = {
            k: v for k, v in patch.items()
            if k not in SYSTEM_MANAGED_FIELDS and v is not None
        }
        for field in ("title", "content"):
            if field in clean and not (clean[field] or "").strip():
                raise ValidationError(f"{field} must not be empty")

        article = await self.store.update(article_id, clean)
        if article is None:
            raise NotFoundError()
        return await self._present_one(article, viewer_id)

    async def publish(self, article_id: str, viewer_id: Optional[str] = None) -> ArticleResponse:
        """Stamp publishedAt with the current time, even if already published"""
        article = await self.store.update(article_id, {"publishedAt": datetime.now(UTC)})
        if article is None:
            raise NotFoundError()
        return await self._present_one(article, viewer_id)

    async def delete(self, article_id: str) -> None:
        if not await self.store.delete(article_id):
            raise NotFoundError()

    # ============================================
    # ENGAGEMENT
    # ============================================

    async def like(self, article_id: str, viewer_id: Optional[str]) -> int:
        return await self.tracker.add_like(article_id, viewer_id)

    async def unlike(self, article_id: str, viewer_id: Optional[str]) -> int:
        return await self.tracker.remove_like(article_id, viewer_id)


article_service = ArticleService()
