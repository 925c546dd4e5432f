from __future__ import annotations

from sqlalchemy import JSON, Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from receipt_review.core.models import Base, CreatedAt, UUIDPrimaryKey


class PolicyRuleRow(UUIDPrimaryKey, CreatedAt, Base):
    """One stored rule: the code plus a loosely-typed JSON body."""

    __tablename__ = "policy_rule"

    code: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    rule_json: Mapped[dict] = mapped_column(JSON, default=dict)
    position: Mapped[int] = mapped_column(Integer, default=0)
    active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
