"""
Typed failures raised by receipt_review services.

Every exception carries a machine-readable ``kind`` that the HTTP layer echoes
back as the ``error`` field, so callers can branch on it instead of on messages.
Malformed input payloads never end up here: they are coerced field by field at
the boundary and only show up as ``coercion.dropped`` log events.
"""

from __future__ import annotations

from typing import Any


class ReceiptReviewError(Exception):
    kind = "error"
    status_code = 500

    def __init__(self, message: str = "", **details: Any) -> None:
        super().__init__(message or self.kind)
        self.message = message or self.kind
        self.details = details


class InvalidRequestError(ReceiptReviewError):
    kind = "invalid_request"
    status_code = 400


class NotFoundError(ReceiptReviewError):
    kind = "not_found"
    status_code = 404

    def __init__(self, entity: str, entity_id: object) -> None:
        super().__init__(f"{entity} not found", entity=entity, id=str(entity_id))
        self.entity = entity
        self.entity_id = entity_id


class ExtractionFailedError(ReceiptReviewError):
    """The vision extraction source failed or returned something unusable."""

    kind = "extraction_failed"
    status_code = 502


class CategorizationFailedError(ReceiptReviewError):
    """The AI suggestion source failed; nothing was merged."""

    kind = "categorize_failed"
    status_code = 502


class StoreFailedError(ReceiptReviewError):
    kind = "store_failed"
    status_code = 503


class StoreConflictError(StoreFailedError):
    """Another writer updated the draft between our read and our write."""

    kind = "store_conflict"
    status_code = 409
