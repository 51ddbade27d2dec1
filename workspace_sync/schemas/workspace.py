from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

DEFAULT_COMMIT_MSG_TEMPLATE = "${action} ${filename}"


class WorkspaceSettings(BaseModel):
    """Per-workspace settings, exchanged with the server in camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )

    name: str = ""
    theme: str = "light"
    auto_save: bool = False
    git_enabled: bool = False
    git_url: str = ""
    git_user: str = ""
    git_token: str = ""
    git_auto_commit: bool = False
    git_commit_msg_template: str = DEFAULT_COMMIT_MSG_TEMPLATE

    @property
    def auto_commit_enabled(self) -> bool:
        return self.git_enabled and self.git_auto_commit

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class Workspace(WorkspaceSettings):
    """A workspace as returned by ``GET /workspaces/{name}``."""

    id: Optional[int] = None
    created_at: Optional[str] = None

    def settings(self) -> WorkspaceSettings:
        return WorkspaceSettings.model_validate(
            self.model_dump(exclude={"id", "created_at"})
        )
