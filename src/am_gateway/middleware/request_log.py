"""Request logging middleware.

Each request gets a short id, stored on request.state (handlers copy it into
ApiResponse) and echoed back in the X-Request-ID header. An inbound
X-Request-ID from a proxy is reused so logs correlate across hops.

Log format:
    INFO POST /api/v1/settlement/fulfill 200 23ms client=10.0.0.5 req_a1b2c3d4e5f6
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("am.request")

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or f"req_{uuid.uuid4().hex[:12]}"
        request.state.request_id = request_id

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        response.headers[REQUEST_ID_HEADER] = request_id

        logger.info(
            "%s %s %d %.0fms client=%s %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request.client.host if request.client else "-",
            request_id,
        )
        return response
