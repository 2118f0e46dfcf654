"""
Webhook Router
==============
FastAPI router exposing the signed ingest and revalidate endpoints.

The raw body is authenticated before it is parsed; JSON errors are only
reported for requests that already passed authentication.
"""

import json
from typing import Any, Awaitable, Callable, Dict, Optional

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from .authenticator import RequestAuthenticator
from .errors import MALFORMED_REQUEST_STATUS, ErrorBody
from .middleware import authenticate_request, unauthorized_response

logger = structlog.get_logger(__name__)

WebhookHandler = Callable[[Any], Awaitable[Dict[str, Any]]]


def parse_json_body(raw_body: bytes) -> Any:
    """
    Decode an authenticated body as JSON.

    Raises:
        ValueError: if the body is not valid UTF-8 JSON
    """
    try:
        return json.loads(raw_body.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise ValueError("body is not valid UTF-8") from e


def _invalid_json_response() -> JSONResponse:
    body = ErrorBody(error="Invalid JSON", details="Request body must be valid JSON")
    return JSONResponse(status_code=MALFORMED_REQUEST_STATUS, content=body.model_dump())


def _internal_error_response() -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


async def _dispatch(name: str, handler: WebhookHandler, raw_body: bytes) -> JSONResponse:
    try:
        payload = parse_json_body(raw_body)
    except ValueError:
        logger.info("webhook_invalid_json", endpoint=name)
        return _invalid_json_response()

    try:
        result = await handler(payload)
    except Exception as e:
        logger.error("webhook_handler_failed", endpoint=name, error=str(e), exc_info=True)
        return _internal_error_response()

    return JSONResponse(status_code=200, content=result)


def create_webhook_router(
    authenticator: RequestAuthenticator,
    ingest_handler: WebhookHandler,
    revalidate_handler: Optional[WebhookHandler] = None,
    prefix: str = "/api",
) -> APIRouter:
    """
    Create a router with signed webhook endpoints.

    Args:
        authenticator: Shared authenticator (one replay guard per process)
        ingest_handler: Async callable receiving the parsed ingest payload
        revalidate_handler: Async callable receiving the parsed revalidate
            payload (optional; endpoint omitted when not given)
        prefix: Path prefix for the endpoints

    Returns:
        FastAPI router with POST {prefix}/ingest and {prefix}/revalidate.
    """
    router = APIRouter(prefix=prefix, tags=["Webhooks"])

    async def handle(name: str, handler: WebhookHandler, request: Request) -> JSONResponse:
        result = await authenticate_request(request, authenticator)
        if not result.ok:
            return unauthorized_response(result)
        request.state.webhook_auth = result
        return await _dispatch(name, handler, await request.body())

    @router.post("/ingest")
    async def ingest(request: Request) -> JSONResponse:
        return await handle("ingest", ingest_handler, request)

    if revalidate_handler is not None:
        @router.post("/revalidate")
        async def revalidate(request: Request) -> JSONResponse:
            return await handle("revalidate", revalidate_handler, request)

    return router
