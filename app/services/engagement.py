"""
Like/unlike tracking for articles.

Each article keeps `likedBy` (viewer ids, no duplicates) and `likeCount`.
Both are written together inside a single store transaction, and the count
is always recomputed from the set, so `likeCount == len(likedBy)` holds after
every mutation even for documents whose counter had drifted.
"""

import logging
from typing import Any, Dict, List, Optional

from app.exceptions import (
    AlreadyLikedError,
    NotFoundError,
    NotLikedYetError,
    UnauthorizedError,
)
from app.models.article import Article
from app.services.article_store import ArticleStore, article_store

logger = logging.getLogger(__name__)


def _likers(doc: Dict[str, Any]) -> List[str]:
    likers = doc.get("likedBy")
    if not isinstance(likers, list):
        return []
    return list(dict.fromkeys(str(uid) for uid in likers))


def apply_like(doc: Dict[str, Any], viewer_id: str) -> Dict[str, Any]:
    """Return the field updates that add `viewer_id` to the likers"""
    likers = _likers(doc)
    if viewer_id in likers:
        raise AlreadyLikedError(likes=len(likers))
    likers.append(viewer_id)
    return {"likedBy": likers, "likeCount": len(likers)}


def apply_unlike(doc: Dict[str, Any], viewer_id: str) -> Dict[str, Any]:
    """Return the field updates that remove `viewer_id` from the likers"""
    likers = _likers(doc)
    if viewer_id not in likers:
        raise NotLikedYetError(likes=len(likers))
    likers.remove(viewer_id)
    return {"likedBy": likers, "likeCount": len(likers)}


def is_liked(article: Article, viewer_id: Optional[str]) -> bool:
    if not viewer_id:
        return False
    return str(viewer_id) in article.liked_by


class EngagementTracker:
    """Applies like/unlike for a viewer as one atomic store operation"""

    def __init__(self, store: Optional[ArticleStore] = None):
        self.store = store or article_store

    async def add_like(self, article_id: str, viewer_id: Optional[str]) -> int:
        """
        Record that `viewer_id` likes the article.

        Returns:
            The new like count

        Raises:
            UnauthorizedError: no viewer
            NotFoundError: unknown article
            AlreadyLikedError: the viewer already likes it (carries the count)
        """
        if not viewer_id:
            raise UnauthorizedError()
        viewer_id = str(viewer_id)
        article = await self.store.transform(article_id, lambda doc: apply_like(doc, viewer_id))
        if article is None:
            raise NotFoundError("Content not found")
        logger.debug("Viewer %s liked article %s", viewer_id, article_id)
        return article.like_count

    async def remove_like(self, article_id: str, viewer_id: Optional[str]) -> int:
        """
        Withdraw the viewer's like.

        Returns:
            The new like count

        Raises:
            UnauthorizedError: no viewer
            NotFoundError: unknown article
            NotLikedYetError: the viewer does not like it (carries the count)
        """
        if not viewer_id:
            raise UnauthorizedError()
        viewer_id = str(viewer_id)
        article = await self.store.transform(article_id, lambda doc: apply_unlike(doc, viewer_id))
        if article is None:
            raise NotFoundError("Content not found")
        logger.debug("Viewer %s unliked article %s", viewer_id, article_id)
        return article.like_count


engagement_tracker = EngagementTracker()
