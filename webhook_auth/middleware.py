"""
Signed Webhook Middleware
=========================
Starlette middleware and FastAPI dependency that authenticate webhook
requests before any handler parses the body.

Usage (Starlette/FastAPI middleware):
    settings = WebhookAuthSettings.from_env()
    app.add_middleware(
        SignedWebhookMiddleware,
        authenticator=settings.build_authenticator(),
    )

Usage (FastAPI dependency):
    register_exception_handler(app)
    verify = require_signed_webhook(authenticator)

    @app.post("/api/ingest")
    async def ingest(raw_body: bytes = Depends(verify)):
        payload = json.loads(raw_body)
"""

from typing import Awaitable, Callable, Iterable, Optional

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from .authenticator import RequestAuthenticator
from .errors import classify
from .exceptions import WebhookAuthError
from .headers import extract_incoming_request
from .models import AuthResult

logger = structlog.get_logger(__name__)

DEFAULT_PROTECTED_PATHS = ("/api/ingest", "/api/revalidate")


async def authenticate_request(
    request: Request,
    authenticator: RequestAuthenticator,
) -> AuthResult:
    """Read the raw body and authenticate a Starlette request."""
    raw_body = await request.body()
    incoming = extract_incoming_request(request.headers, raw_body)
    return authenticator.authenticate(incoming)


def unauthorized_response(result: AuthResult) -> JSONResponse:
    status_code, body = classify(result)
    return JSONResponse(status_code=status_code, content=body)


class SignedWebhookMiddleware(BaseHTTPMiddleware):
    """
    Rejects unauthenticated POSTs to protected paths with a 401.

    Authenticated requests continue with the body intact and the verdict
    stored on request.state.webhook_auth.
    """

    def __init__(
        self,
        app,
        authenticator: RequestAuthenticator,
        protected_paths: Optional[Iterable[str]] = None,
        methods: Iterable[str] = ("POST",),
    ):
        super().__init__(app)
        self.authenticator = authenticator
        self.protected_paths = {
            p.rstrip("/") or "/"
            for p in (protected_paths or DEFAULT_PROTECTED_PATHS)
        }
        self.methods = {m.upper() for m in methods}

    def _is_protected(self, request: Request) -> bool:
        path = request.url.path.rstrip("/") or "/"
        return request.method in self.methods and path in self.protected_paths

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        if not self._is_protected(request):
            return await call_next(request)

        result = await authenticate_request(request, self.authenticator)
        if not result.ok:
            logger.info(
                "webhook_request_rejected",
                path=request.url.path,
                reason=result.reason_code.value,
            )
            return unauthorized_response(result)

        request.state.webhook_auth = result
        return await call_next(request)


class WebhookUnauthorized(WebhookAuthError):
    """Raised by the FastAPI dependency; rendered by the registered handler."""

    def __init__(self, result: AuthResult):
        super().__init__(result.reason_code.value)
        self.result = result


async def _webhook_unauthorized_handler(request: Request, exc: WebhookUnauthorized) -> JSONResponse:
    return unauthorized_response(exc.result)


def register_exception_handler(app) -> None:
    """Render WebhookUnauthorized as the standard 401 error body."""
    app.add_exception_handler(WebhookUnauthorized, _webhook_unauthorized_handler)


def require_signed_webhook(authenticator: RequestAuthenticator):
    """
    Build a FastAPI dependency that authenticates the raw body.

    The dependency returns the raw body bytes so the endpoint parses
    only what has already been authenticated. Call
    register_exception_handler(app) once so rejections render as
    {"error": "Unauthorized", "details": ...}.
    """

    async def dependency(request: Request) -> bytes:
        result = await authenticate_request(request, authenticator)
        if not result.ok:
            raise WebhookUnauthorized(result)
        request.state.webhook_auth = result
        return await request.body()

    return dependency
