"""Exception handling utilities."""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger("ella.errors")


class SessionNotFound(HTTPException):
    """Raised by the API when a session id is not registered."""

    def __init__(self, session_id: str) -> None:
        super().__init__(status_code=404, detail=f"unknown session: {session_id}")


async def unhandled_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:  # noqa: D401
    """Return a generic JSON error response while logging the exception."""

    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_error",
            "message": "Something unexpected happened. Please try again later.",
        },
    )
