from __future__ import annotations

import uuid
from decimal import Decimal

import pytest
from sqlalchemy import select

from receipt_review.core.db import SessionLocal
from receipt_review.core.errors import ExtractionFailedError, InvalidRequestError, NotFoundError
from receipt_review.modules.drafts.models import ExpenseDraftRow
from receipt_review.modules.drafts.status import DraftStatus
from receipt_review.modules.extraction.service import extract_receipt
from receipt_review.modules.receipts.models import OcrStatus, ReceiptAsset
from receipt_review.modules.receipts.service import register_receipt

BODY = b"\xff\xd8\xff fake jpeg"


def test_extract_receipt_creates_reconciled_draft():
    seen: dict = {}

    def _extractor(*, body, filename, mime):
        seen.update(body=body, filename=filename, mime=mime)
        return {
            "merchant": "  MCDONALDS ",
            "amountTotal": "20.00",
            "currency": "cad",
            "items": [
                {"description": "Big Mac", "amount": 7.49},
                {"description": "Fries", "amount": "3.2"},
                {"description": "Coupon", "amount": -2},
            ],
            "date": "2025-02-03",
        }

    with SessionLocal() as session:
        receipt = register_receipt(session, filename="mcd.jpg", mime="image/jpeg", body=BODY)
        draft = extract_receipt(session, receipt_id=receipt.id, body=BODY, extractor=_extractor)
        stored_receipt = session.scalar(select(ReceiptAsset).where(ReceiptAsset.id == receipt.id))

    assert seen == {"body": BODY, "filename": "mcd.jpg", "mime": "image/jpeg"}
    assert draft.status == DraftStatus.NEEDS_INFO
    assert draft.receipt_id == receipt.id
    assert draft.extraction.merchant == "McDonald's"
    assert draft.extraction.currency == "CAD"
    assert draft.extraction.category == "meals"
    assert draft.extraction.amount_total == Decimal("10.69")
    assert draft.extraction.date == "2025-02-03"
    assert stored_receipt.ocr_status == OcrStatus.DONE
    assert stored_receipt.ocr_model == "openai:gpt-4o-mini"


def test_extract_receipt_failure_marks_receipt_error_and_creates_nothing():
    def _extractor(**_kwargs):
        raise ExtractionFailedError("OpenAI error 503: overloaded", status=503)

    with SessionLocal() as session:
        receipt = register_receipt(session, filename="r.png", mime="image/png", body=BODY)
        with pytest.raises(ExtractionFailedError):
            extract_receipt(session, receipt_id=receipt.id, body=BODY, extractor=_extractor)

        stored_receipt = session.scalar(select(ReceiptAsset).where(ReceiptAsset.id == receipt.id))
        drafts = list(session.scalars(select(ExpenseDraftRow)))

    assert stored_receipt.ocr_status == OcrStatus.ERROR
    assert "overloaded" in stored_receipt.error_message
    assert drafts == []


def test_extract_receipt_unknown_receipt():
    with SessionLocal() as session:
        with pytest.raises(NotFoundError):
            extract_receipt(
                session, receipt_id=uuid.uuid4(), body=BODY, extractor=lambda **_kw: {}
            )


def test_extract_receipt_tolerates_garbage_payload():
    with SessionLocal() as session:
        receipt = register_receipt(session, filename="r.png", mime="image/png", body=BODY)
        draft = extract_receipt(
            session, receipt_id=receipt.id, body=BODY, extractor=lambda **_kw: ["not", "json"]
        )

    assert draft.extraction.merchant is None
    assert draft.extraction.items == []
    assert draft.extraction.currency == "USD"


def test_register_receipt_rejects_empty_upload():
    with SessionLocal() as session:
        with pytest.raises(InvalidRequestError):
            register_receipt(session, filename="empty.png", mime="image/png", body=b"")


def test_default_extractor_fails_without_api_key(monkeypatch):
    from receipt_review.core.config import settings

    monkeypatch.setattr(settings, "openai_api_key", None)

    with SessionLocal() as session:
        receipt = register_receipt(session, filename="r.png", mime="image/png", body=BODY)
        with pytest.raises(ExtractionFailedError):
            extract_receipt(session, receipt_id=receipt.id, body=BODY)


def test_extract_receipt_store_failure_marks_receipt_error(monkeypatch):
    from receipt_review.core.errors import StoreFailedError
    from receipt_review.modules.drafts.store import DraftStore

    def _fail_create(self, **_kwargs):
        raise StoreFailedError("Failed to create draft")

    monkeypatch.setattr(DraftStore, "create", _fail_create)

    with SessionLocal() as session:
        receipt = register_receipt(session, filename="r.png", mime="image/png", body=BODY)
        with pytest.raises(StoreFailedError):
            extract_receipt(
                session,
                receipt_id=receipt.id,
                body=BODY,
                extractor=lambda **_kw: {"merchant": "Cafe"},
            )

    with SessionLocal() as session:
        stored_receipt = session.scalar(select(ReceiptAsset).where(ReceiptAsset.id == receipt.id))

    assert stored_receipt.ocr_status == OcrStatus.ERROR
    assert stored_receipt.error_message == "Failed to create draft"
