from __future__ import annotations

import os

import pytest

# Set env before any receipt_review imports (settings/engine are created at import time).
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite:///./.receipt_review_test.db")
os.environ.setdefault("OPENAI_API_KEY", "")


@pytest.fixture(autouse=True)
def _reset_db() -> None:
    import receipt_review.models  # noqa: F401
    from receipt_review.core.db import engine
    from receipt_review.core.models import Base

    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)

    yield


@pytest.fixture()
def make_draft():
    """Register a receipt and create a draft from ``payload`` through the real pipeline."""
    from receipt_review.core.db import SessionLocal
    from receipt_review.modules.extraction.service import extract_receipt
    from receipt_review.modules.receipts.service import register_receipt

    def _make(payload: dict | None = None):
        with SessionLocal() as session:
            receipt = register_receipt(
                session, filename="receipt.png", mime="image/png", body=b"\x89PNG fake"
            )
            return extract_receipt(
                session,
                receipt_id=receipt.id,
                body=b"\x89PNG fake",
                extractor=lambda **_kwargs: payload or {},
            )

    return _make
