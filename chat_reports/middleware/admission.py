"""Admission control middleware: progressive slow-down, then the general rate limit.

Runs for every request, including ones that end up unmatched (404). The
strict per-route limit is a route dependency (``dependencies.StrictLimitGuard``).
"""

from asyncio import sleep

from fastapi import Request, status

from chat_reports.services.admission import AdmissionController, Outcome
from chat_reports.schemas.errors import error_response


async def admission_middleware(request: Request, call_next):
    controller: AdmissionController | None = getattr(request.app.state, "admission", None)
    if controller is None:
        return await call_next(request)

    identity = controller.identify(request)

    slowed = controller.slow_down.check(identity)
    if slowed.outcome is Outcome.DELAYED:
        await sleep(slowed.delay)

    limiter = controller.general
    decision = limiter.check(identity)
    headers = limiter.headers(decision)
    if not decision.allowed:
        return error_response(
            status.HTTP_429_TOO_MANY_REQUESTS,
            limiter.message,
            retry_after=limiter.retry_after_text,
            headers=headers,
        )

    response = await call_next(request)
    # Headers from a stricter route limiter take precedence
    headers.update(getattr(request.state, "rate_limit_headers", {}))
    for name, value in headers.items():
        response.headers[name] = value
    return response
