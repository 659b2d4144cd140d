from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
from redis.exceptions import RedisError
import logging
import secrets

from app.core.config import settings
from app.core.exceptions import RateLimitedError, UnauthorizedError
from app.models.entrant import MAX_IP_ADDRESS_LENGTH, MAX_USER_AGENT_LENGTH
from app.schemas.waitlist import SignupMetadata
from app.utils.rate_limiter import allow_for_address

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_client_address(request: Request) -> str:
    """First X-Forwarded-For hop when behind a proxy, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


def get_signup_metadata(request: Request) -> SignupMetadata:
    # Header values are client controlled; clip them to the column sizes
    user_agent = request.headers.get("user-agent")
    return SignupMetadata(
        ipAddress=get_client_address(request)[:MAX_IP_ADDRESS_LENGTH],
        userAgent=user_agent[:MAX_USER_AGENT_LENGTH] if user_agent else None,
        signupSource="website"
    )


def _enforce_rate_limit(request: Request, action: str, limit: int) -> None:
    if not settings.RATE_LIMIT_ENABLED:
        return

    address = get_client_address(request)
    try:
        allowed = allow_for_address(
            action,
            address,
            limit=limit,
            window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS
        )
    except RedisError as e:
        logger.warning(f"Rate limiter unavailable, allowing request from {address}: {str(e)}")
        return

    if not allowed:
        logger.info(f"Rate limit exceeded for {address}")
        raise RateLimitedError()


def enforce_signup_rate_limit(request: Request) -> None:
    _enforce_rate_limit(request, "waitlist-join", settings.RATE_LIMIT_MAX_REQUESTS)


def enforce_read_rate_limit(request: Request) -> None:
    _enforce_rate_limit(request, "waitlist-read", settings.RATE_LIMIT_READ_MAX_REQUESTS)


def require_admin_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> None:
    """Ensure the request carries ``Authorization: Bearer <ADMIN_TOKEN>``"""
    if not settings.ADMIN_TOKEN or credentials is None:
        raise UnauthorizedError()

    if not secrets.compare_digest(
        credentials.credentials.encode("utf-8"),
        settings.ADMIN_TOKEN.encode("utf-8")
    ):
        raise UnauthorizedError()
