from __future__ import annotations

from fastapi import APIRouter

from receipt_review.modules.categorize.api import router as categorize_router
from receipt_review.modules.directory.api import router as directory_router
from receipt_review.modules.drafts.api import router as drafts_router
from receipt_review.modules.policy.api import router as policy_router
from receipt_review.modules.receipts.api import router as receipts_router

router = APIRouter()

router.include_router(receipts_router, prefix="/api")
router.include_router(drafts_router, prefix="/api")
router.include_router(policy_router, prefix="/api")
router.include_router(categorize_router, prefix="/api")
router.include_router(directory_router, prefix="/api")


@router.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}
