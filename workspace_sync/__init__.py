"""Async client and edit-session engine for a git-backed workspace store."""

from .config import ClientSettings, get_settings
from .logging_config import configure_logging
from .services import (
    MutationOutcome,
    RemoteStoreClient,
    SessionController,
    SessionPhase,
    SyncPolicy,
    create_remote_store,
    create_remote_store_from_settings,
)

__all__ = [
    "ClientSettings",
    "MutationOutcome",
    "RemoteStoreClient",
    "SessionController",
    "SessionPhase",
    "SyncPolicy",
    "configure_logging",
    "create_remote_store",
    "create_remote_store_from_settings",
    "get_settings",
]
