from __future__ import annotations

import receipt_review.models  # noqa: F401
from receipt_review.core.config import settings
from receipt_review.core.db import SessionLocal, engine
from receipt_review.core.logging import get_logger, log_event
from receipt_review.core.models import Base
from receipt_review.modules.policy.rules import seed_rules_from_file

logger = get_logger(__name__)


def bootstrap() -> None:
    if settings.environment == "dev" and str(settings.database_url).startswith("sqlite"):
        Base.metadata.create_all(engine)

    if not settings.policy_rules_seed_path:
        return
    if not settings.policy_rules_seed_path.exists():
        log_event(logger, "policy.rules.seed_missing", path=str(settings.policy_rules_seed_path))
        return

    with SessionLocal() as session:
        seed_rules_from_file(session, path=settings.policy_rules_seed_path)
