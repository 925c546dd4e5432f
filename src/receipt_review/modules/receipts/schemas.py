from __future__ import annotations

import uuid
from datetime import datetime

from receipt_review.core.schemas import WireModel
from receipt_review.modules.extraction.schemas import ExtractedData
from receipt_review.modules.receipts.models import OcrStatus


class ReceiptOut(WireModel):
    id: uuid.UUID
    employee_id: uuid.UUID | None
    sha256: str
    mime: str | None
    filename: str
    size_bytes: int
    ocr_status: OcrStatus
    ocr_model: str | None
    created_at: datetime


class ExtractionOut(WireModel):
    draft_id: uuid.UUID
    extraction: ExtractedData
