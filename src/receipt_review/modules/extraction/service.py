from __future__ import annotations

import time
import uuid
from collections.abc import Callable
from typing import Any

from sqlalchemy.orm import Session

from receipt_review.core.config import settings
from receipt_review.core.errors import ReceiptReviewError
from receipt_review.core.logging import get_logger, log_event, log_exception, monotonic_ms
from receipt_review.core.models import utcnow
from receipt_review.modules.drafts.schemas import ExpenseDraft
from receipt_review.modules.drafts.store import DraftStore
from receipt_review.modules.extraction.ai import extract_receipt_fields, vision_model_name
from receipt_review.modules.extraction.reconcile import reconcile_extraction
from receipt_review.modules.extraction.schemas import coerce_extraction
from receipt_review.modules.receipts.models import OcrStatus, ReceiptAsset
from receipt_review.modules.receipts.service import get_receipt, mark_ocr_status

logger = get_logger(__name__)

Extractor = Callable[..., Any]


def extract_receipt(
    session: Session,
    *,
    receipt_id: uuid.UUID,
    body: bytes,
    extractor: Extractor | None = None,
) -> ExpenseDraft:
    """
    Extract, reconcile and persist a new draft for one registered receipt.

    ``extractor`` is called as ``extractor(body=..., filename=..., mime=...)`` and
    returns the untrusted extraction object. If extraction or saving the draft fails,
    the receipt is marked ``error`` and the failure is re-raised.
    """
    extractor = extractor or extract_receipt_fields
    receipt = get_receipt(session, receipt_id=receipt_id)
    start = time.monotonic()
    log_event(
        logger,
        "extraction.start",
        receipt_id=str(receipt.id),
        filename=receipt.filename,
        size_bytes=len(body),
    )

    try:
        draft = _extract_draft(session, receipt=receipt, body=body, extractor=extractor)
    except ReceiptReviewError as e:
        log_exception(
            logger,
            "extraction.error",
            receipt_id=str(receipt.id),
            duration_ms=monotonic_ms(start),
        )
        mark_ocr_status(
            session, receipt=receipt, status=OcrStatus.ERROR, error_message=e.message[:2000]
        )
        raise

    mark_ocr_status(session, receipt=receipt, status=OcrStatus.DONE, model=vision_model_name())
    log_event(
        logger,
        "extraction.finish",
        receipt_id=str(receipt.id),
        draft_id=str(draft.id),
        duration_ms=monotonic_ms(start),
    )
    return draft


def _extract_draft(
    session: Session, *, receipt: ReceiptAsset, body: bytes, extractor: Extractor
) -> ExpenseDraft:
    raw = extractor(body=body, filename=receipt.filename, mime=receipt.mime)
    coerced = coerce_extraction(raw)
    if coerced.dropped:
        log_event(
            logger,
            "coercion.dropped",
            payload="extraction",
            receipt_id=str(receipt.id),
            dropped=coerced.dropped,
        )

    extraction = reconcile_extraction(
        coerced.value,
        merchant_aliases=settings.merchant_aliases,
        category_keywords=settings.category_keywords,
    )
    log_event(
        logger,
        "extraction.reconciled",
        receipt_id=str(receipt.id),
        merchant=extraction.merchant,
        category=extraction.category,
        currency=extraction.currency,
        items_count=len(extraction.items),
        reported_total=(
            str(coerced.value.amount_total) if coerced.value.amount_total is not None else None
        ),
        amount_total=str(extraction.amount_total) if extraction.amount_total is not None else None,
    )

    return DraftStore(session).create(receipt_id=receipt.id, extraction=extraction, now=utcnow())
