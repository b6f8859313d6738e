import time
from datetime import datetime, timezone

import structlog
from fastapi import Request, Response
from sqlalchemy import select, update
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse

import app.core.database as db_module
from app.core.database import ApiToken, ContactInfo
from app.core.exceptions import AuthenticationError
from app.core.security import hash_api_token

logger = structlog.get_logger()

# Paths that skip authentication
PUBLIC_PATHS = {"/conf/health", "/", "/docs", "/openapi.json", "/redoc"}


class AuthMiddleware(BaseHTTPMiddleware):
    """Validates the Bearer API token on every request except public paths.

    A valid token identifies a contact; its id and role bits are stored on
    `request.state` for the viewer dependency.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in PUBLIC_PATHS:
            return await call_next(request)

        auth_header = request.headers.get("authorization", "")
        if not auth_header.startswith("Bearer "):
            error = AuthenticationError("Missing or malformed Authorization header.")
            return JSONResponse(status_code=error.status, content=error.to_dict())

        token = auth_header.removeprefix("Bearer ").strip()

        async with db_module.async_session() as session:
            result = await session.execute(
                select(ApiToken, ContactInfo)
                .join(ContactInfo, ContactInfo.contact_id == ApiToken.contact_id)
                .where(ApiToken.token_hash == hash_api_token(token), ApiToken.is_active == True)  # noqa: E712
            )
            row = result.first()

            if row is None or row[1].disabled:
                error = AuthenticationError("Invalid or revoked API token.")
                return JSONResponse(status_code=error.status, content=error.to_dict())

            token_row, contact = row
            request.state.contact_id = contact.contact_id
            request.state.roles = contact.roles
            request.state.token_prefix = token_row.token_prefix

            await session.execute(
                update(ApiToken).where(ApiToken.id == token_row.id).values(last_used_at=datetime.now(timezone.utc))
            )
            await session.commit()

        return await call_next(request)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request as structured JSON."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        latency_ms = round((time.perf_counter() - start) * 1000, 1)

        logger.info(
            "http_request",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            latency_ms=latency_ms,
            contact_id=getattr(request.state, "contact_id", None),
        )
        return response
