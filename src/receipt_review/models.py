"""
Model import hook.

Importing this module registers every SQLAlchemy model on Base.metadata, which
``create_all`` needs. Directory tables first: receipts reference employees.
"""

from __future__ import annotations

from receipt_review.modules.directory.models import Employee, FunctionalTeam, Trip  # noqa: F401

from receipt_review.modules.drafts.models import ExpenseDraftRow  # noqa: F401
from receipt_review.modules.policy.models import PolicyRuleRow  # noqa: F401
from receipt_review.modules.receipts.models import ReceiptAsset  # noqa: F401
