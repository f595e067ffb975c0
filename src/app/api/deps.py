from fastapi import Request

from src.app.core.config import settings
from src.app.db.session import get_db  # noqa: F401


def get_base_url(request: Request) -> str:
    """
    Get the scheme and host that short URLs are built on.

    Args:
        request: Incoming request

    Returns:
        PUBLIC_BASE_URL if configured, otherwise the request's own base URL
    """
    if settings.PUBLIC_BASE_URL:
        return settings.PUBLIC_BASE_URL.rstrip("/")
    return str(request.base_url).rstrip("/")
