"""Translation of domain errors into HTTP responses."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from tenantry.core.exceptions import InsufficientRole, TenantryError, VendorError

logger = structlog.get_logger()


async def tenantry_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render a TenantryError as {"detail", "code"} with the error's status."""
    if not isinstance(exc, TenantryError):
        raise exc

    content: dict[str, Any] = {"detail": str(exc), "code": exc.code}
    if isinstance(exc, InsufficientRole):
        content["acceptable_roles"] = [role.value for role in exc.acceptable_roles]
    if isinstance(exc, VendorError):
        content["vendor"] = exc.vendor

    if exc.status_code >= 500:
        logger.error(
            "request_failed",
            method=request.method,
            path=request.url.path,
            code=exc.code,
            error=str(exc),
        )

    return JSONResponse(status_code=exc.status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """Register domain exception handlers on the application."""
    app.add_exception_handler(TenantryError, tenantry_error_handler)
