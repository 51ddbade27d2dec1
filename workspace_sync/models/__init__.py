"""Local session state."""

from .content_types import ContentKind, classify, is_image_file, permitted_views
from .delayed_apply import DelayedApply
from .edit_buffer import EditBuffer
from .errors import (
    AmbiguousLookup,
    AutoCommitFailed,
    DirtyPullWarning,
    GitDisabled,
    InvalidSessionState,
    OperationInProgress,
    RemoteOperationFailed,
    UnresolvedChanges,
    WorkspaceSyncError,
)
from .file_cache import FileCache, FileEntry, FileTree
from .settings_editor import SettingsEditor

__all__ = [
    "AmbiguousLookup",
    "AutoCommitFailed",
    "ContentKind",
    "DelayedApply",
    "DirtyPullWarning",
    "EditBuffer",
    "FileCache",
    "FileEntry",
    "FileTree",
    "GitDisabled",
    "InvalidSessionState",
    "OperationInProgress",
    "RemoteOperationFailed",
    "SettingsEditor",
    "UnresolvedChanges",
    "WorkspaceSyncError",
    "classify",
    "is_image_file",
    "permitted_views",
]
