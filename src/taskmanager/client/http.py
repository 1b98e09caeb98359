from __future__ import annotations

from typing import Any, Optional

import httpx

from .settings import ClientSettings, get_client_settings


# PUBLIC_INTERFACE
def create_http_client(
    settings: Optional[ClientSettings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """
    Build the AsyncClient shared by TaskApiClient and AIProxyClient.

    `transport` lets tests route requests to an in-process app
    (httpx.ASGITransport) or a canned handler (httpx.MockTransport).
    """
    s = settings or get_client_settings()
    return httpx.AsyncClient(
        base_url=s.api_base_url,
        timeout=s.request_timeout,
        transport=transport,
    )


def json_body(response: httpx.Response) -> Any:
    """Decoded JSON body, or None when the body is not JSON."""
    try:
        return response.json()
    except ValueError:
        return None


def error_message(response: httpx.Response, default: str) -> str:
    """
    Pull the most specific message out of an error response. Understands the
    backend's shapes: {"detail": str}, {"message": str}, {"error": str}.
    """
    body = json_body(response)
    if isinstance(body, dict):
        for key in ("detail", "message", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return f"{default} ({response.status_code})"
