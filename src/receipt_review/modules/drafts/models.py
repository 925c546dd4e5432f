from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, Integer, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from receipt_review.core.models import Base, CreatedAt, UUIDPrimaryKey, utcnow
from receipt_review.modules.drafts.status import DraftStatus


class ExpenseDraftRow(UUIDPrimaryKey, CreatedAt, Base):
    __tablename__ = "expense_draft"

    receipt_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("receipt_asset.id"), index=True
    )

    extraction_json: Mapped[dict] = mapped_column(JSON, default=dict)
    validation_json: Mapped[list] = mapped_column(JSON, default=list)
    status: Mapped[DraftStatus] = mapped_column(
        Enum(DraftStatus, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        index=True,
    )

    # Assignment ids come from reviewers or the AI assistant; stored as opaque strings.
    employee_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    functional_team_code: Mapped[str | None] = mapped_column(String(64), nullable=True)
    trip_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    gl_account: Mapped[str | None] = mapped_column(String(100), nullable=True)
    business_category: Mapped[str | None] = mapped_column(String(200), nullable=True)
    ai_confidence: Mapped[Decimal | None] = mapped_column(Numeric(5, 4), nullable=True)
    ai_labels: Mapped[list | None] = mapped_column(JSON, nullable=True)
    ai_allocations: Mapped[list | None] = mapped_column(JSON, nullable=True)

    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
