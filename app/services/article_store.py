"""
Persistence for articles, their slug reservations and author lookups.

Articles live in the `articles` collection. Slug uniqueness is enforced by a
reservation document per slug in `article_slugs`, created in the same
transaction as the article.
"""

import logging
from datetime import datetime, UTC
from typing import Any, Callable, Dict, Iterable, List, Optional

from app.models.article import Article, firestore_article_to_model
from app.models.doctor import DoctorSummary, firestore_doctor_to_model
from app.services.firebase_service import firebase_service
from app.utils.slug import slugify

logger = logging.getLogger(__name__)

ARTICLES = "articles"
SLUGS = "article_slugs"
DOCTORS = "doctors"

# Firestore ids cannot be empty; titles with no slug-able characters reserve this
EMPTY_SLUG_KEY = "-"


def _slug_key(slug: str) -> str:
    return slug or EMPTY_SLUG_KEY


def _newest_first(items: List[Article]) -> List[Article]:
    return sorted(
        items,
        key=lambda a: a.created_at or datetime.min.replace(tzinfo=UTC),
        reverse=True,
    )


class ArticleStore:
    """Owns every read and write of article documents"""

    def __init__(self, firebase=None):
        self.firebase = firebase or firebase_service

    async def create(self, data: Dict[str, Any]) -> Article:
        """
        Persist a new article.

        The slug is derived from the title only when `data` carries none.
        Counters and timestamps are always initialised here.

        Raises:
            DuplicateKeyError: another article already holds the slug
        """
        now = datetime.now(UTC)
        doc = {
            "authorId": None,
            "tags": [],
            "images": [],
            **data,
            "likeCount": 0,
            "likedBy": [],
            "viewCount": 0,
            "publishedAt": None,
            "createdAt": now,
            "updatedAt": now,
        }
        if not doc.get("slug"):
            doc["slug"] = slugify(doc.get("title", ""))

        doc_id = await self.firebase.create_document_with_unique_key(
            ARTICLES, doc, SLUGS, _slug_key(doc["slug"])
        )
        logger.info("Created article %s (slug=%s)", doc_id, doc["slug"])
        return firestore_article_to_model(doc, doc_id)

    async def get(self, article_id: str) -> Optional[Article]:
        data = await self.firebase.get_document(ARTICLES, article_id)
        return firestore_article_to_model(data, article_id) if data is not None else None

    async def get_by_slug(self, slug: str) -> Optional[Article]:
        reservation = await self.firebase.get_document(SLUGS, _slug_key(slug))
        if not reservation:
            return None
        return await self.get(reservation["documentId"])

    async def list(
        self,
        author_id: Optional[str] = None,
        exclude_author_id: Optional[str] = None,
    ) -> List[Article]:
        """All articles, newest first, optionally filtered by author"""
        filters = [("authorId", "==", author_id)] if author_id else None
        docs = await self.firebase.query_collection(ARTICLES, filters=filters)

        items = [firestore_article_to_model(data, doc_id) for doc_id, data in docs]
        if exclude_author_id:
            # author-less (admin) articles are kept
            items = [a for a in items if a.author_id != exclude_author_id]
        return _newest_first(items)

    async def update(self, article_id: str, patch: Dict[str, Any]) -> Optional[Article]:
        data = await self.firebase.update_document(
            ARTICLES, article_id, {**patch, "updatedAt": datetime.now(UTC)}
        )
        return firestore_article_to_model(data, article_id) if data is not None else None

    async def increment_views(self, article_id: str) -> Optional[Article]:
        data = await self.firebase.increment_field(ARTICLES, article_id, "viewCount", 1)
        return firestore_article_to_model(data, article_id) if data is not None else None

    async def transform(
        self,
        article_id: str,
        mutate: Callable[[Dict[str, Any]], Dict[str, Any]],
    ) -> Optional[Article]:
        """Run `mutate` against the stored document as one atomic update"""

        def _stamped(current: Dict[str, Any]) -> Dict[str, Any]:
            updates = mutate(current)
            return {**updates, "updatedAt": datetime.now(UTC)}

        data = await self.firebase.transform_document(ARTICLES, article_id, _stamped)
        return firestore_article_to_model(data, article_id) if data is not None else None

    async def delete(self, article_id: str) -> bool:
        """Remove the article and release its slug; False if it does not exist"""
        article = await self.get(article_id)
        if article is None:
            return False
        paths = [(ARTICLES, article_id)]
        if article.slug is not None:
            paths.append((SLUGS, _slug_key(article.slug)))
        await self.firebase.delete_documents(paths)
        logger.info("Deleted article %s", article_id)
        return True

    # ============================================
    # DOCTORS (authors)
    # ============================================

    async def find_doctor_by_clerk_id(self, clerk_user_id: str) -> Optional[DoctorSummary]:
        found = await self.firebase.find_one(DOCTORS, "clerkUserId", clerk_user_id)
        if not found:
            return None
        doc_id, data = found
        return firestore_doctor_to_model(data, doc_id)

    async def get_doctors(self, doctor_ids: Iterable[Optional[str]]) -> Dict[str, DoctorSummary]:
        docs = await self.firebase.get_documents(DOCTORS, [i for i in doctor_ids if i])
        return {doc_id: firestore_doctor_to_model(data, doc_id) for doc_id, data in docs.items()}


article_store = ArticleStore()
