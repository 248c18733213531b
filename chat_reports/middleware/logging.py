"""Request logging middleware."""

import time

from fastapi import Request

from chat_reports.utils.logger import bind_request_id, get_logger

log = get_logger("chat_reports.access")

REQUEST_ID_HEADER = "X-Request-ID"


async def logging_middleware(request: Request, call_next):
    """Log one line per request: method, path, status, duration and client IP."""
    request_id = bind_request_id(request.headers.get(REQUEST_ID_HEADER))
    start = time.perf_counter()
    client_ip = request.client.host if request.client else None

    try:
        response = await call_next(request)
    except Exception:
        duration_ms = round((time.perf_counter() - start) * 1000, 2)
        log.exception(
            "request failed",
            method=request.method,
            path=request.url.path,
            duration_ms=duration_ms,
            client_ip=client_ip,
        )
        raise

    duration_ms = round((time.perf_counter() - start) * 1000, 2)
    response.headers[REQUEST_ID_HEADER] = request_id
    log.info(
        "request completed",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=duration_ms,
        client_ip=client_ip,
    )
    return response
