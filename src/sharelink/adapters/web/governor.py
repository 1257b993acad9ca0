# src/sharelink/adapters/web/governor.py
"""
Rate-Limited Handlers - Request Governing for FastAPI Routes

Wraps a route handler so every call is counted against a named rate limit
policy. A denied call short-circuits with HTTP 429 and retry timing; an
allowed call runs the handler and gets quota headers on its response.

The RateGovernor is owned by the application (app.state.governor), so
handlers must declare a `request: Request` parameter.

Files that USE this module:
- sharelink.adapters.web.routes (decorates governed handlers)
- tests.test_web (integration tests)

Files that this module USES:
- sharelink.shared.rate_limiter (RateGovernor, RateLimitDecision)
- sharelink.domain.errors (ConfigurationError)
"""
import inspect
import logging
import math
from typing import Any, Callable, Dict, Mapping, Optional

from fastapi import HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response
from fastapi.concurrency import run_in_threadpool

from sharelink.domain.errors import ConfigurationError
from sharelink.shared.rate_limiter import RateGovernor, RateLimitDecision

logger = logging.getLogger(__name__)

USER_AGENT_PREFIX = 50


def client_key_for(headers: Mapping[str, str], client_host: Optional[str]) -> str:
    """
    Derive a client identity from network origin and a coarse client signature.

    Uses the first X-Forwarded-For address (else the socket peer) plus the
    first 50 characters of the User-Agent.
    """
    forwarded = headers.get("x-forwarded-for")
    ip = forwarded.split(",")[0].strip() if forwarded else (client_host or "unknown")
    user_agent = headers.get("user-agent") or "unknown"
    return f"{ip}-{user_agent[:USER_AGENT_PREFIX]}"


def quota_headers(decision: RateLimitDecision) -> Dict[str, str]:
    return {
        "X-RateLimit-Limit": str(decision.limit),
        "X-RateLimit-Remaining": str(decision.remaining),
        "X-RateLimit-Reset": str(math.ceil(decision.reset_at)),
    }


def too_many_requests(decision: RateLimitDecision) -> JSONResponse:
    """Structured 429 response carrying retry timing."""
    headers = quota_headers(decision)
    headers["Retry-After"] = str(decision.retry_after)
    return JSONResponse(
        status_code=429,
        content={"error": "Too many requests", "retryAfter": decision.retry_after},
        headers=headers,
    )


def rate_limited(policy: str) -> Callable:
    """
    Decorate a FastAPI handler with the named rate limit policy.

    Args:
        policy: Name of a policy configured on the application's RateGovernor

    Returns:
        Decorator producing an async handler with the same signature
    """

    def decorator(handler: Callable) -> Callable:
        is_async = inspect.iscoroutinefunction(handler)

        async def wrapper(*args: Any, **kwargs: Any) -> Response:
            request = kwargs.get("request")
            if not isinstance(request, Request):
                raise ConfigurationError(f"{handler.__name__} must accept a 'request: Request' parameter")
            governor: RateGovernor = request.app.state.governor

            key = client_key_for(request.headers, request.client.host if request.client else None)
            decision = governor.check(policy, key)
            if not decision.allowed:
                logger.warning("Rate limit '%s' exceeded for %s (retry in %ss)", policy, key, decision.retry_after)
                return too_many_requests(decision)

            headers = quota_headers(decision)
            try:
                if is_async:
                    result = await handler(*args, **kwargs)
                else:
                    result = await run_in_threadpool(handler, *args, **kwargs)
            except HTTPException as e:
                e.headers = {**(e.headers or {}), **headers}
                raise

            response = result if isinstance(result, Response) else JSONResponse(content=jsonable_encoder(result))
            response.headers.update(headers)
            return response

        # No __wrapped__: FastAPI must see (and await) the async wrapper itself
        wrapper.__signature__ = inspect.signature(handler)
        wrapper.__name__ = handler.__name__
        wrapper.__qualname__ = handler.__qualname__
        wrapper.__doc__ = handler.__doc__
        return wrapper

    return decorator
