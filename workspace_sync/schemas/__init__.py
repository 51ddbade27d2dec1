"""Wire schemas for the remote store."""

from .files import FileNode
from .git import GitAction
from .workspace import DEFAULT_COMMIT_MSG_TEMPLATE, Workspace, WorkspaceSettings

__all__ = [
    "DEFAULT_COMMIT_MSG_TEMPLATE",
    "FileNode",
    "GitAction",
    "Workspace",
    "WorkspaceSettings",
]
