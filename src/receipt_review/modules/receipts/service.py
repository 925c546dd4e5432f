from __future__ import annotations

import hashlib
import uuid

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from receipt_review.core.errors import InvalidRequestError, NotFoundError, StoreFailedError
from receipt_review.core.logging import get_logger, log_event
from receipt_review.modules.receipts.models import OcrStatus, ReceiptAsset

logger = get_logger(__name__)


def register_receipt(
    session: Session,
    *,
    filename: str,
    mime: str | None,
    body: bytes,
    employee_id: uuid.UUID | None = None,
) -> ReceiptAsset:
    if not body:
        raise InvalidRequestError("Uploaded file is empty", filename=filename)

    receipt = ReceiptAsset(
        employee_id=employee_id,
        sha256=hashlib.sha256(body).hexdigest(),
        mime=mime,
        filename=filename or "upload.bin",
        size_bytes=len(body),
        ocr_status=OcrStatus.PENDING,
    )
    try:
        session.add(receipt)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise StoreFailedError("Failed to register receipt") from e
    log_event(
        logger,
        "receipt.registered",
        receipt_id=str(receipt.id),
        filename=receipt.filename,
        mime=receipt.mime,
        size_bytes=receipt.size_bytes,
        sha256=receipt.sha256,
    )
    return receipt


def get_receipt(session: Session, *, receipt_id: uuid.UUID) -> ReceiptAsset:
    receipt = session.scalar(select(ReceiptAsset).where(ReceiptAsset.id == receipt_id))
    if not receipt:
        raise NotFoundError("Receipt", receipt_id)
    return receipt


def mark_ocr_status(
    session: Session,
    *,
    receipt: ReceiptAsset,
    status: OcrStatus,
    model: str | None = None,
    error_message: str | None = None,
) -> None:
    prev = receipt.ocr_status
    receipt.ocr_status = status
    if model:
        receipt.ocr_model = model
    receipt.error_message = error_message
    try:
        session.add(receipt)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise StoreFailedError("Failed to update receipt OCR status") from e
    log_event(
        logger,
        "receipt.ocr_status.changed",
        receipt_id=str(receipt.id),
        from_status=prev.value if prev else None,
        to_status=status.value,
    )
