"""Remote store protocol interface."""

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from ..schemas import FileNode, Workspace, WorkspaceSettings


@runtime_checkable
class RemoteStoreProtocol(Protocol):
    """Protocol for the workspace, file and git endpoints of the remote store."""

    async def list_workspaces(self) -> List[Workspace]:
        """List all workspaces of the current user."""
        ...

    async def create_workspace(self, name: str) -> Workspace:
        """Create a workspace."""
        ...

    async def get_workspace(self, name: str) -> Workspace:
        """Get a workspace with its settings."""
        ...

    async def update_workspace(
        self, name: str, settings: WorkspaceSettings
    ) -> Workspace:
        """Replace the workspace settings. Returns the server-confirmed workspace."""
        ...

    async def delete_workspace(self, name: str) -> Optional[str]:
        """Delete a workspace. Returns the name of the workspace to switch to."""
        ...

    async def get_last_workspace_name(self) -> Optional[str]:
        ...

    async def update_last_workspace_name(self, name: str) -> None:
        ...

    async def list_files(self, workspace: str) -> List[FileNode]:
        """List the file tree of a workspace."""
        ...

    async def get_file_content(self, workspace: str, path: str) -> str:
        """Get the raw content of a file."""
        ...

    async def save_file_content(
        self, workspace: str, path: str, content: str
    ) -> Dict[str, Any]:
        """Create or overwrite a file."""
        ...

    async def delete_file(self, workspace: str, path: str) -> None:
        ...

    async def lookup_file_by_name(self, workspace: str, filename: str) -> List[str]:
        """Resolve a short file name to full paths."""
        ...

    async def get_last_opened_file(self, workspace: str) -> Optional[str]:
        ...

    async def update_last_opened_file(self, workspace: str, path: str) -> None:
        ...

    async def pull_changes(self, workspace: str) -> Dict[str, Any]:
        """Pull remote changes into the workspace repository."""
        ...

    async def commit_and_push(self, workspace: str, message: str) -> Dict[str, Any]:
        """Commit all workspace changes and push them."""
        ...
