"""Exception-to-HTTP mapping for the REST server."""

from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse

from logseq_mcp.core.exceptions import (
    InvalidInputError,
    LogseqError,
    LogseqProtocolError,
    LogseqRemoteError,
    LogseqUnreachableError,
    NotFoundError,
)
from logseq_mcp.server.schemas import ErrorResponse


def _error_response(status_code: int, exc: LogseqError) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=exc.kind, detail=str(exc)).model_dump(),
    )


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={
            **ErrorResponse(error=exc.kind, detail=str(exc)).model_dump(),
            "type": exc.entity_type,
            "id": exc.identifier,
        },
    )


async def invalid_input_handler(request: Request, exc: InvalidInputError) -> JSONResponse:
    return _error_response(422, exc)


async def unreachable_handler(request: Request, exc: LogseqUnreachableError) -> JSONResponse:
    return _error_response(503, exc)


async def upstream_error_handler(request: Request, exc: LogseqError) -> JSONResponse:
    return _error_response(502, exc)


EXCEPTION_HANDLERS = {
    NotFoundError: not_found_handler,
    InvalidInputError: invalid_input_handler,
    LogseqUnreachableError: unreachable_handler,
    LogseqProtocolError: upstream_error_handler,
    LogseqRemoteError: upstream_error_handler,
}
