from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from receipt_review.api.router import router as api_router
from receipt_review.bootstrap import bootstrap
from receipt_review.core.errors import ReceiptReviewError
from receipt_review.core.logging import (
    RequestContextMiddleware,
    get_logger,
    get_request_id,
    log_event,
)

logger = get_logger(__name__)


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(_: FastAPI):
        bootstrap()
        yield

    app = FastAPI(title="Receipt Review", version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestContextMiddleware)

    @app.exception_handler(ReceiptReviewError)
    async def handle_receipt_review_error(request: Request, exc: ReceiptReviewError):
        log_event(
            logger,
            "http.error",
            path=request.url.path,
            error=exc.kind,
            status_code=exc.status_code,
            detail=exc.message,
            details=exc.details or None,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.kind, "detail": exc.message, "requestId": get_request_id()},
        )

    app.include_router(api_router)
    return app


app = create_app()
