"""Exception handlers for the FastAPI app."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from nft_ledger.events_engine.service import EventNotFoundError
from nft_ledger.services.errors import (
    LedgerAuthorizationError,
    LedgerError,
    LedgerNotFoundError,
    LedgerStateError,
    LedgerValidationError,
)

LOGGER = logging.getLogger("nft_ledger.api")

_STATUS_BY_CATEGORY = (
    (LedgerNotFoundError, status.HTTP_404_NOT_FOUND),
    (LedgerAuthorizationError, status.HTTP_403_FORBIDDEN),
    (LedgerStateError, status.HTTP_409_CONFLICT),
    (LedgerValidationError, status.HTTP_400_BAD_REQUEST),
)


def status_for(exc: LedgerError) -> int:
    for category, status_code in _STATUS_BY_CATEGORY:
        if isinstance(exc, category):
            return status_code
    return status.HTTP_400_BAD_REQUEST


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:  # noqa: WPS430
        status_code = status_for(exc)
        LOGGER.info(
            "ledger_request_rejected",
            extra={"code": exc.code, "status_code": status_code, "path": request.url.path},
        )
        return JSONResponse(status_code=status_code, content={"detail": exc.message, "code": exc.code})

    @app.exception_handler(EventNotFoundError)
    async def event_not_found_handler(request: Request, exc: EventNotFoundError) -> JSONResponse:  # noqa: WPS430
        return JSONResponse(status_code=404, content={"detail": str(exc), "code": "EVENT_NOT_FOUND"})
