from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from receipt_review.core.db import db_session
from receipt_review.core.logging import get_logger, log_event
from receipt_review.modules.extraction.service import extract_receipt
from receipt_review.modules.receipts.schemas import ExtractionOut, ReceiptOut
from receipt_review.modules.receipts.service import get_receipt, register_receipt

router = APIRouter(tags=["receipts"])
logger = get_logger(__name__)


@router.post("/receipts", response_model=ExtractionOut)
async def upload_receipt(
    upload: UploadFile = File(...),
    employee_id: uuid.UUID | None = Form(default=None),
    session: Session = Depends(db_session),
) -> ExtractionOut:
    body = await upload.read()
    log_event(
        logger,
        "upload.received",
        filename=upload.filename or "upload.bin",
        content_type=upload.content_type,
        byte_size=len(body),
    )
    receipt = register_receipt(
        session,
        filename=upload.filename or "upload.bin",
        mime=upload.content_type,
        body=body,
        employee_id=employee_id,
    )
    draft = extract_receipt(session, receipt_id=receipt.id, body=body)
    return ExtractionOut(draft_id=draft.id, extraction=draft.extraction)


@router.post("/receipts/{receipt_id}/ocr", response_model=ExtractionOut)
async def rerun_receipt_ocr(
    receipt_id: uuid.UUID,
    upload: UploadFile = File(...),
    session: Session = Depends(db_session),
) -> ExtractionOut:
    body = await upload.read()
    draft = extract_receipt(session, receipt_id=receipt_id, body=body)
    return ExtractionOut(draft_id=draft.id, extraction=draft.extraction)


@router.get("/receipts/{receipt_id}", response_model=ReceiptOut)
def get_receipt_endpoint(
    receipt_id: uuid.UUID, session: Session = Depends(db_session)
) -> ReceiptOut:
    receipt = get_receipt(session, receipt_id=receipt_id)
    return ReceiptOut.model_validate(receipt, from_attributes=True)
