"""
HTTP client for the WhatsApp Cloud (Graph) API.

All outbound calls get explicit timeouts so a slow Graph API never pins a
webhook worker.
"""

import httpx

from app.core.config import settings

GRAPH_API_BASE_URL = "https://graph.facebook.com"


def get_httpx_timeout() -> httpx.Timeout:
    return httpx.Timeout(
        10.0,  # Default for all operations
        connect=5.0,
        read=10.0,
        write=5.0,
        pool=5.0,
    )


def create_graph_client(access_token: str | None = None) -> httpx.AsyncClient:
    """
    Create an httpx.AsyncClient bound to the Graph API with bearer auth.

    Args:
        access_token: Override for settings.whatsapp_access_token

    Returns:
        httpx.AsyncClient; use as an async context manager
    """
    token = access_token or settings.whatsapp_access_token
    return httpx.AsyncClient(
        base_url=GRAPH_API_BASE_URL,
        timeout=get_httpx_timeout(),
        headers={
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        },
    )
