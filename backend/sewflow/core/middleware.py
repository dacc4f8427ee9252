"""ASGI middleware: request log context and request size guard."""

from __future__ import annotations

import re
import time
import uuid

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from sewflow.core.config import settings
from sewflow.core.logging import order_id_ctx_var, request_id_ctx_var

_ORDER_PATH = re.compile(r"^/api/orders/(?P<order_id>[^/]+)")


def _order_id_from_path(path: str) -> str:
    match = _ORDER_PATH.match(path)
    if match is None or match.group("order_id") == "next-id":
        return "-"
    return match.group("order_id")


class RequestContextLogMiddleware(BaseHTTPMiddleware):
    """Tag every log record of a request with its request id and order id.

    The order id comes from ``/api/orders/{id}/...`` paths, so the cutting,
    distribution and completion events of one order can be followed across
    requests.
    """

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        order_id = _order_id_from_path(request.url.path)
        request.state.request_id = request_id
        request_token = request_id_ctx_var.set(request_id)
        order_token = order_id_ctx_var.set(order_id)
        start = time.perf_counter()
        response: Response | None = None
        try:
            response = await call_next(request)
            return response
        finally:
            elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
            logger.bind(
                method=request.method,
                path=request.url.path,
                status=response.status_code if response is not None else 500,
                duration_ms=elapsed_ms,
            ).info("request_completed")
            if response is not None:
                response.headers.setdefault("X-Request-ID", request_id)
            order_id_ctx_var.reset(order_token)
            request_id_ctx_var.reset(request_token)


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Refuse bodies whose declared length exceeds ``MAX_UPLOAD_BYTES``."""

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        declared = request.headers.get("content-length")
        if declared is None:
            return await call_next(request)
        if not declared.isdigit():
            return JSONResponse(status_code=400, content={"detail": "Invalid Content-Length header"})
        if int(declared) > settings.MAX_UPLOAD_BYTES:
            logger.bind(path=request.url.path, declared=int(declared)).warning("request_body_too_large")
            return JSONResponse(
                status_code=413,
                content={"detail": f"Request body exceeds {settings.MAX_UPLOAD_BYTES} bytes"},
            )
        return await call_next(request)
