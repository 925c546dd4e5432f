"""initial receipt review schema

Revision ID: 3b7e21c9d4a0
Revises:
Create Date: 2026-10-19

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3b7e21c9d4a0"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_DRAFT_STATUSES = (
    "needs-info",
    "valid",
    "flagged",
    "proposed",
    "submitted",
    "approved",
    "rejected",
)


def upgrade() -> None:
    op.create_table(
        "directory_employee",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("team_code", sa.String(length=64), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "directory_functional_team",
        sa.Column("code", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("code"),
    )
    op.create_index(
        op.f("ix_directory_functional_team_active"), "directory_functional_team", ["active"]
    )
    op.create_table(
        "directory_trip",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("city", sa.String(length=100), nullable=True),
        sa.Column("country", sa.String(length=100), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_directory_trip_active"), "directory_trip", ["active"])

    op.create_table(
        "receipt_asset",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("employee_id", sa.Uuid(), nullable=True),
        sa.Column("sha256", sa.String(length=64), nullable=False),
        sa.Column("mime", sa.String(length=200), nullable=True),
        sa.Column("filename", sa.String(length=512), nullable=False),
        sa.Column("size_bytes", sa.Integer(), nullable=False),
        sa.Column(
            "ocr_status",
            sa.Enum("pending", "done", "error", name="ocrstatus", native_enum=False),
            nullable=False,
        ),
        sa.Column("ocr_model", sa.String(length=100), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["employee_id"], ["directory_employee.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_receipt_asset_sha256"), "receipt_asset", ["sha256"])
    op.create_index(op.f("ix_receipt_asset_ocr_status"), "receipt_asset", ["ocr_status"])

    op.create_table(
        "expense_draft",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("receipt_id", sa.Uuid(), nullable=False),
        sa.Column("extraction_json", sa.JSON(), nullable=False),
        sa.Column("validation_json", sa.JSON(), nullable=False),
        sa.Column(
            "status",
            sa.Enum(*_DRAFT_STATUSES, name="draftstatus", native_enum=False),
            nullable=False,
        ),
        sa.Column("employee_id", sa.String(length=64), nullable=True),
        sa.Column("functional_team_code", sa.String(length=64), nullable=True),
        sa.Column("trip_id", sa.String(length=64), nullable=True),
        sa.Column("gl_account", sa.String(length=100), nullable=True),
        sa.Column("business_category", sa.String(length=200), nullable=True),
        sa.Column("ai_confidence", sa.Numeric(5, 4), nullable=True),
        sa.Column("ai_labels", sa.JSON(), nullable=True),
        sa.Column("ai_allocations", sa.JSON(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["receipt_id"], ["receipt_asset.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_expense_draft_receipt_id"), "expense_draft", ["receipt_id"])
    op.create_index(op.f("ix_expense_draft_status"), "expense_draft", ["status"])
    op.create_index(op.f("ix_expense_draft_employee_id"), "expense_draft", ["employee_id"])

    op.create_table(
        "policy_rule",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("code", sa.String(length=100), nullable=False),
        sa.Column("rule_json", sa.JSON(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_policy_rule_code"), "policy_rule", ["code"], unique=True)
    op.create_index(op.f("ix_policy_rule_active"), "policy_rule", ["active"])


def downgrade() -> None:
    op.drop_index(op.f("ix_policy_rule_active"), table_name="policy_rule")
    op.drop_index(op.f("ix_policy_rule_code"), table_name="policy_rule")
    op.drop_table("policy_rule")
    op.drop_index(op.f("ix_expense_draft_employee_id"), table_name="expense_draft")
    op.drop_index(op.f("ix_expense_draft_status"), table_name="expense_draft")
    op.drop_index(op.f("ix_expense_draft_receipt_id"), table_name="expense_draft")
    op.drop_table("expense_draft")
    op.drop_index(op.f("ix_receipt_asset_ocr_status"), table_name="receipt_asset")
    op.drop_index(op.f("ix_receipt_asset_sha256"), table_name="receipt_asset")
    op.drop_table("receipt_asset")
    op.drop_index(op.f("ix_directory_trip_active"), table_name="directory_trip")
    op.drop_table("directory_trip")
    op.drop_index(
        op.f("ix_directory_functional_team_active"), table_name="directory_functional_team"
    )
    op.drop_table("directory_functional_team")
    op.drop_table("directory_employee")
