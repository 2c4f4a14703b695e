"""
Error taxonomy for the chat API.

Every error carries the HTTP status it is rendered with; `main.py` registers a
single handler for `ChatError`.
"""
from typing import Any, List, Optional


class ChatError(Exception):
    status_code = 500
    default_detail = "Internal error"

    def __init__(self, detail: Optional[Any] = None):
        self.detail = detail if detail is not None else self.default_detail
        super().__init__(str(self.detail))


class ValidationError(ChatError):
    """Malformed payload; `detail` holds every violation found."""

    status_code = 422
    default_detail = "Invalid payload"

    def __init__(self, errors: List[dict]):
        self.errors = errors
        super().__init__(errors)


class Conflict(ChatError):
    status_code = 409
    default_detail = "Participant already registered"


class Unauthenticated(ChatError):
    status_code = 401
    default_detail = "Missing User header"


class NotFound(ChatError):
    status_code = 404
    default_detail = "Participant not found"


class UnknownSender(ChatError):
    status_code = 422
    default_detail = "Sender is not a registered participant"


class InvalidLimit(ChatError):
    status_code = 422
    default_detail = "limit must be a positive integer"


class StoreError(ChatError):
    # pymongo failures, surfaced as an opaque 500
    status_code = 500
    default_detail = "Database error"
