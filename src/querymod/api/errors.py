# src/querymod/api/errors.py
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..core.errors import QueryModifierError, UnknownModifierError
from ..core.logging import color_palette, log


async def query_modifier_error_handler(request: Request, exc: QueryModifierError) -> JSONResponse:
    """Report a rejected query parameter as a 400 response."""
    # Unknown modifiers come from server configuration
    status_code = 500 if isinstance(exc, UnknownModifierError) else 400
    log.warn(f"{request.method} {request.url.path}: {type(exc).__name__} {color_palette['value'](exc.message)}")
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "error": type(exc).__name__},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(QueryModifierError, query_modifier_error_handler)
