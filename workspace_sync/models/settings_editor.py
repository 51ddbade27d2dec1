from typing import Any

from ..schemas import WorkspaceSettings


class SettingsEditor:
    """Local, unconfirmed edits to workspace settings.

    ``initial`` is the last server-confirmed snapshot and stays
    authoritative until ``mark_saved`` receives a new confirmed one.
    """

    def __init__(self, initial: WorkspaceSettings):
        self.initial = initial
        self.local = initial

    @property
    def has_unsaved_changes(self) -> bool:
        return self.local != self.initial

    def update(self, **changes: Any) -> WorkspaceSettings:
        merged = {**self.local.model_dump(), **changes}
        self.local = WorkspaceSettings.model_validate(merged)
        return self.local

    def mark_saved(self, confirmed: WorkspaceSettings) -> None:
        self.initial = confirmed
        self.local = confirmed

    def reset(self) -> WorkspaceSettings:
        self.local = self.initial
        return self.local
