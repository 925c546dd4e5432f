from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from receipt_review.core.errors import NotFoundError, StoreConflictError, StoreFailedError
from receipt_review.core.logging import get_logger, log_event
from receipt_review.modules.drafts import lifecycle
from receipt_review.modules.drafts.models import ExpenseDraftRow
from receipt_review.modules.drafts.status import DraftStatus
from receipt_review.modules.drafts.schemas import AISplitAllocation, ExpenseDraft
from receipt_review.modules.extraction.schemas import ExtractedData
from receipt_review.modules.policy.schemas import PolicyFinding

logger = get_logger(__name__)


class DraftStore:
    """
    SQLAlchemy-backed persistence for drafts.

    Identity and ``created_at`` are assigned here. Saves are compare-and-swap on
    the row version, so a write based on a stale read fails with
    StoreConflictError instead of silently overwriting the other writer.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(
        self, *, receipt_id: uuid.UUID, extraction: ExtractedData, now: datetime
    ) -> ExpenseDraft:
        draft = lifecycle.new_draft(
            draft_id=uuid.uuid4(), receipt_id=receipt_id, extraction=extraction, created_at=now
        )
        row = ExpenseDraftRow(id=draft.id, receipt_id=receipt_id, created_at=now)
        _write_row(row, draft)
        try:
            self.session.add(row)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreFailedError("Failed to create draft", receipt_id=str(receipt_id)) from e
        return to_draft(row)

    def get(self, draft_id: uuid.UUID) -> ExpenseDraft:
        return to_draft(self._row(draft_id))

    def query(
        self, *, employee_id: str | None = None, status: DraftStatus | None = None
    ) -> list[ExpenseDraft]:
        stmt = select(ExpenseDraftRow).order_by(ExpenseDraftRow.created_at.desc())
        if employee_id is not None:
            stmt = stmt.where(ExpenseDraftRow.employee_id == employee_id)
        if status is not None:
            stmt = stmt.where(ExpenseDraftRow.status == status)
        try:
            rows = list(self.session.scalars(stmt))
        except SQLAlchemyError as e:
            raise StoreFailedError("Failed to list drafts") from e
        return [to_draft(row) for row in rows]

    def save(self, draft: ExpenseDraft) -> ExpenseDraft:
        row = self._row(draft.id)
        if row.version != draft.version:
            raise StoreConflictError(
                "Draft was modified by another writer",
                draft_id=str(draft.id),
                expected_version=draft.version,
                actual_version=row.version,
            )
        prev_status = row.status
        _write_row(row, draft)
        try:
            self.session.add(row)
            self.session.commit()
        except StaleDataError as e:
            self.session.rollback()
            raise StoreConflictError(
                "Draft was modified by another writer", draft_id=str(draft.id)
            ) from e
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreFailedError("Failed to save draft", draft_id=str(draft.id)) from e

        if prev_status != row.status:
            log_event(
                logger,
                "draft.status.changed",
                draft_id=str(row.id),
                from_status=prev_status.value,
                to_status=row.status.value,
            )
        return to_draft(row)

    def _row(self, draft_id: uuid.UUID) -> ExpenseDraftRow:
        try:
            row = self.session.scalar(
                select(ExpenseDraftRow).where(ExpenseDraftRow.id == draft_id)
            )
        except SQLAlchemyError as e:
            raise StoreFailedError("Failed to load draft", draft_id=str(draft_id)) from e
        if not row:
            raise NotFoundError("Draft", draft_id)
        return row


def to_draft(row: ExpenseDraftRow) -> ExpenseDraft:
    return ExpenseDraft(
        id=row.id,
        receipt_id=row.receipt_id,
        extraction=ExtractedData.model_validate(row.extraction_json or {}),
        validation=[PolicyFinding.model_validate(f) for f in row.validation_json or []],
        status=row.status,
        employee_id=row.employee_id,
        functional_team_code=row.functional_team_code,
        trip_id=row.trip_id,
        gl_account=row.gl_account,
        business_category=row.business_category,
        ai_confidence=row.ai_confidence,
        ai_labels=list(row.ai_labels) if row.ai_labels is not None else None,
        ai_allocations=(
            [AISplitAllocation.model_validate(a) for a in row.ai_allocations]
            if row.ai_allocations is not None
            else None
        ),
        created_at=row.created_at,
        updated_at=row.updated_at,
        version=row.version,
    )


def _write_row(row: ExpenseDraftRow, draft: ExpenseDraft) -> None:
    row.extraction_json = draft.extraction.model_dump(mode="json", by_alias=True)
    row.validation_json = [f.model_dump(mode="json", by_alias=True) for f in draft.validation]
    row.status = draft.status
    row.employee_id = draft.employee_id
    row.functional_team_code = draft.functional_team_code
    row.trip_id = draft.trip_id
    row.gl_account = draft.gl_account
    row.business_category = draft.business_category
    row.ai_confidence = draft.ai_confidence
    row.ai_labels = list(draft.ai_labels) if draft.ai_labels is not None else None
    row.ai_allocations = (
        [a.model_dump(mode="json", by_alias=True, exclude_none=True) for a in draft.ai_allocations]
        if draft.ai_allocations is not None
        else None
    )
    row.updated_at = draft.updated_at
