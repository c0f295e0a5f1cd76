"""
Error taxonomy for the article content and engagement API.

Every error carries the HTTP status it maps to and a human-readable message;
the handlers registered in ``app.main`` turn them into
``{"success": false, "message": ...}`` responses.
"""

from typing import Optional


class ContentError(Exception):
    """Base class for errors raised by the article services"""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"success": False, "message": self.message}


class ValidationError(ContentError):
    status_code = 400
    default_message = "Invalid request"


class NotFoundError(ContentError):
    status_code = 404
    default_message = "Article not found"


class UnauthorizedError(ContentError):
    status_code = 401
    default_message = "Unauthorized"


class EngagementConflictError(ContentError):
    """Like/unlike requested in a state that does not allow it"""

    status_code = 400

    def __init__(self, likes: int, message: Optional[str] = None):
        self.likes = likes
        super().__init__(message)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["likes"] = self.likes
        return data


class AlreadyLikedError(EngagementConflictError):
    default_message = "Already liked"


class NotLikedYetError(EngagementConflictError):
    default_message = "Not liked before"


class GenerationFailedError(ContentError):
    status_code = 422
    default_message = (
        "AI did not return content. Provide content or try again with keyPoints/prompt."
    )


class DuplicateKeyError(ContentError):
    status_code = 409
    default_message = "Duplicate key"

    def __init__(self, key: str, message: Optional[str] = None):
        self.key = key
        super().__init__(message or f"Duplicate key: {key}")


class InternalError(ContentError):
    status_code = 500
