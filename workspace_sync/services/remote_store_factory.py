"""Factory for creating RemoteStoreClient instances."""

import logging
from typing import Optional

import httpx

from ..config.settings import ClientSettings
from .remote_store import RemoteStoreClient

logger = logging.getLogger(__name__)


def create_remote_store(
    base_url: str,
    token: str = "",
    timeout: float = 30.0,
    http_client: Optional[httpx.AsyncClient] = None,
) -> RemoteStoreClient:
    """
    Create a RemoteStoreClient.

    Args:
        base_url: API root, e.g. ``http://localhost:8080/api/v1``
        token: Bearer token; no Authorization header is sent when empty
        timeout: Per-request timeout in seconds, enforced by httpx
        http_client: Pre-configured client to reuse (the caller keeps ownership)

    Returns:
        RemoteStoreClient bound to ``base_url``
    """
    logger.debug("Remote store at %s (timeout %.1fs)", base_url, timeout)
    return RemoteStoreClient(
        base_url, token=token, timeout=timeout, http_client=http_client
    )


def create_remote_store_from_settings(
    settings: ClientSettings, http_client: Optional[httpx.AsyncClient] = None
) -> RemoteStoreClient:
    """
    Create a RemoteStoreClient using client settings.

    Args:
        settings: Client settings
        http_client: Optional pre-configured httpx client

    Returns:
        RemoteStoreClient configured from ``settings``
    """
    return create_remote_store(
        base_url=settings.API_BASE_URL,
        token=settings.API_TOKEN,
        timeout=settings.REQUEST_TIMEOUT,
        http_client=http_client,
    )
