"""Services for the client."""

from .remote_store import RemoteStoreClient
from .remote_store_factory import (
    create_remote_store,
    create_remote_store_from_settings,
)
from .session_controller import SessionController, SessionPhase, SessionView
from .sync_policy import MutationOutcome, SyncPolicy, SyncStage, build_commit_message

__all__ = [
    "MutationOutcome",
    "RemoteStoreClient",
    "SessionController",
    "SessionPhase",
    "SessionView",
    "SyncPolicy",
    "SyncStage",
    "build_commit_message",
    "create_remote_store",
    "create_remote_store_from_settings",
]
