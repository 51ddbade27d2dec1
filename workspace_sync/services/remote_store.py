"""HTTP client for the remote workspace store."""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from ..models.errors import RemoteOperationFailed
from ..schemas import FileNode, Workspace, WorkspaceSettings

logger = logging.getLogger(__name__)


def _workspace_segment(name: str) -> str:
    if not name:
        raise ValueError("Workspace name must not be empty")
    return quote(name, safe="")


def _file_segment(path: str) -> str:
    path = path.strip("/")
    if not path:
        raise ValueError("File path must not be empty")
    return quote(path, safe="/")


class RemoteStoreClient:
    """Stateless wrapper around the remote store's REST resources.

    Every coroutine issues exactly one request. Non-success responses and
    transport errors (including timeouts) raise ``RemoteOperationFailed``;
    nothing is retried or cached here.
    """

    def __init__(
        self,
        base_url: str,
        token: str = "",
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "RemoteStoreClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, verb: str, resource: str, **kwargs: Any) -> httpx.Response:
        logger.debug("%s %s", verb, resource)
        headers = {**self._headers, **kwargs.pop("headers", {})}
        try:
            response = await self._client.request(
                verb,
                f"{self.base_url}/{resource}",
                headers=headers,
                timeout=self.timeout,
                **kwargs,
            )
        except httpx.HTTPError as e:
            raise RemoteOperationFailed(resource, verb, None, str(e)) from e

        if not response.is_success:
            raise RemoteOperationFailed(
                resource, verb, response.status_code, self._error_detail(response)
            )
        return response

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text[:200]
        if isinstance(body, dict):
            return str(body.get("error") or body.get("detail") or body.get("message") or "")
        return ""

    @staticmethod
    def _json(response: httpx.Response, resource: str, verb: str) -> Any:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise RemoteOperationFailed(
                resource, verb, response.status_code, "invalid JSON response"
            ) from e

    async def _call_json(self, verb: str, resource: str, **kwargs: Any) -> Any:
        response = await self._request(verb, resource, **kwargs)
        return self._json(response, resource, verb)

    # Workspaces

    async def list_workspaces(self) -> List[Workspace]:
        data = await self._call_json("GET", "workspaces")
        return [Workspace.model_validate(item) for item in data or []]

    async def create_workspace(self, name: str) -> Workspace:
        _workspace_segment(name)
        data = await self._call_json("POST", "workspaces", json={"name": name})
        return Workspace.model_validate(data)

    async def get_workspace(self, name: str) -> Workspace:
        data = await self._call_json("GET", f"workspaces/{_workspace_segment(name)}")
        return Workspace.model_validate(data)

    async def update_workspace(
        self, name: str, settings: WorkspaceSettings
    ) -> Workspace:
        data = await self._call_json(
            "PUT",
            f"workspaces/{_workspace_segment(name)}",
            json=settings.to_payload(),
        )
        return Workspace.model_validate(data)

    async def delete_workspace(self, name: str) -> Optional[str]:
        data = await self._call_json(
            "DELETE", f"workspaces/{_workspace_segment(name)}"
        )
        return data.get("nextWorkspaceName") or None

    async def get_last_workspace_name(self) -> Optional[str]:
        data = await self._call_json("GET", "workspaces/last")
        return data.get("lastWorkspaceName") or None

    async def update_last_workspace_name(self, name: str) -> None:
        _workspace_segment(name)
        await self._request("PUT", "workspaces/last", json={"workspaceName": name})

    # Files

    def get_file_url(self, workspace: str, path: str) -> str:
        """URL of a file's raw content, for previews that load it directly."""
        return (
            f"{self.base_url}/workspaces/{_workspace_segment(workspace)}"
            f"/files/{_file_segment(path)}"
        )

    async def list_files(self, workspace: str) -> List[FileNode]:
        data = await self._call_json(
            "GET", f"workspaces/{_workspace_segment(workspace)}/files"
        )
        return [FileNode.model_validate(item) for item in data or []]

    async def get_file_content(self, workspace: str, path: str) -> str:
        response = await self._request(
            "GET",
            f"workspaces/{_workspace_segment(workspace)}/files/{_file_segment(path)}",
        )
        return response.text

    async def save_file_content(
        self, workspace: str, path: str, content: str
    ) -> Dict[str, Any]:
        resource = (
            f"workspaces/{_workspace_segment(workspace)}/files/{_file_segment(path)}"
        )
        return await self._call_json(
            "POST",
            resource,
            content=content.encode("utf-8"),
            headers={"Content-Type": "text/plain"},
        )

    async def delete_file(self, workspace: str, path: str) -> None:
        await self._request(
            "DELETE",
            f"workspaces/{_workspace_segment(workspace)}/files/{_file_segment(path)}",
        )

    async def lookup_file_by_name(self, workspace: str, filename: str) -> List[str]:
        data = await self._call_json(
            "GET",
            f"workspaces/{_workspace_segment(workspace)}/files/lookup",
            params={"filename": filename},
        )
        return list(data.get("paths") or [])

    async def get_last_opened_file(self, workspace: str) -> Optional[str]:
        data = await self._call_json(
            "GET", f"workspaces/{_workspace_segment(workspace)}/files/last"
        )
        return data.get("lastOpenedFilePath") or None

    async def update_last_opened_file(self, workspace: str, path: str) -> None:
        await self._request(
            "PUT",
            f"workspaces/{_workspace_segment(workspace)}/files/last",
            json={"filePath": path},
        )

    # Git

    async def pull_changes(self, workspace: str) -> Dict[str, Any]:
        return await self._call_json(
            "POST", f"workspaces/{_workspace_segment(workspace)}/git/pull"
        )

    async def commit_and_push(self, workspace: str, message: str) -> Dict[str, Any]:
        if not message or not message.strip():
            raise ValueError("Commit message must not be empty")
        return await self._call_json(
            "POST",
            f"workspaces/{_workspace_segment(workspace)}/git/commit",
            json={"message": message},
        )
