"""FastAPI application factory for the mail relay.

The module exposes a `create_app` function that mounts the send-email route
on top of :class:`mail_relay.handler.MailDispatchHandler`. Every decision
(method gate, authentication, validation, dispatch) is delegated to the
handler; this layer only decodes the request and renders the JSON response.
Authentication uses the shared secret carried in the ``x-api-key`` header.
"""

import json
from typing import Any, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse, Response
from fastapi.security import APIKeyHeader
from pydantic import BaseModel

from .handler import MailDispatchHandler, api_key_matches
from .models import ErrorResponse, SendEmailPayload, SuccessResponse

API_KEY_HEADER_NAME = "x-api-key"
SEND_EMAIL_PATH = "/api/send-email"
# Every verb is routed to the handler so that non-POST calls get the JSON 405 body.
ROUTED_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

api_key_scheme = APIKeyHeader(name=API_KEY_HEADER_NAME, auto_error=False)


class BasicOkResponse(BaseModel):
    ok: bool


async def _read_json(request: Request) -> Any:
    """Decode the request body, returning ``None`` when it is empty or not JSON."""
    raw = await request.body()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except (ValueError, RecursionError):
        return None


def create_app(handler: MailDispatchHandler) -> FastAPI:
    """Create and configure the FastAPI application.

    Parameters
    ----------
    handler:
        Instance of :class:`mail_relay.handler.MailDispatchHandler` carrying
        the settings (including the API key) and the SMTP transport factory.

    Returns
    -------
    FastAPI
        A configured application ready to be served by Uvicorn or any ASGI
        server.
    """
    api = FastAPI(title="Mail Relay")
    api.state.handler = handler

    async def require_key(api_key: Optional[str] = Depends(api_key_scheme)) -> None:
        if not api_key_matches(api_key, handler.settings.api_key):
            raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid or missing API key")

    router = APIRouter(tags=["mail"])

    @router.api_route(
        SEND_EMAIL_PATH,
        methods=ROUTED_METHODS,
        responses={
            200: {"model": SuccessResponse},
            400: {"model": ErrorResponse},
            401: {"model": ErrorResponse},
            405: {"model": ErrorResponse},
            500: {"model": ErrorResponse},
        },
        openapi_extra={
            "requestBody": {
                "content": {"application/json": {"schema": SendEmailPayload.model_json_schema()}},
            }
        },
    )
    async def send_email(request: Request, api_key: Optional[str] = Depends(api_key_scheme)):
        """Send one email using the sender credentials carried in the payload."""
        payload = await _read_json(request) if request.method == "POST" else None
        result = await handler.handle(request.method, api_key, payload)
        return JSONResponse(status_code=result.status_code, content=result.body)

    @router.get("/status", response_model=BasicOkResponse, dependencies=[Depends(require_key)])
    async def relay_status():
        """Return a simple health status payload."""
        return BasicOkResponse(ok=True)

    @router.get("/metrics", dependencies=[Depends(require_key)])
    async def metrics():
        """Expose Prometheus metrics collected by the relay."""
        return Response(content=handler.metrics.generate_latest(), media_type="text/plain; version=0.0.4")

    api.include_router(router)
    return api
