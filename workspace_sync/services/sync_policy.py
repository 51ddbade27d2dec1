"""Turns save/create/delete/pull/commit intents into remote call sequences."""

import logging
from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict

from ..models.errors import (
    AutoCommitFailed,
    DirtyPullWarning,
    GitDisabled,
    RemoteOperationFailed,
)
from ..models.file_cache import FileCache
from ..protocols.remote_store_protocol import RemoteStoreProtocol
from ..schemas import DEFAULT_COMMIT_MSG_TEMPLATE, GitAction, WorkspaceSettings

logger = logging.getLogger(__name__)


class SyncStage(str, Enum):
    """Steps of a mutation sequence, reported as they start."""

    PERSIST = "persist"
    DELETE = "delete"
    COMMIT = "commit"
    PULL = "pull"
    REFRESH = "refresh"


StageCallback = Callable[[SyncStage], None]


class MutationOutcome(BaseModel):
    """Result of a mutation whose primary call succeeded."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    action: str
    path: Optional[str] = None
    commit_message: Optional[str] = None
    committed: bool = False
    auto_commit_error: Optional[AutoCommitFailed] = None
    refresh_error: Optional[RemoteOperationFailed] = None

    @property
    def has_warnings(self) -> bool:
        return self.auto_commit_error is not None or self.refresh_error is not None


def build_commit_message(template: str, filename: str, action: str) -> str:
    """Fill ``${filename}`` and ``${action}`` and capitalize the first character.

    Only the first character is touched: ``"auto-${action}"`` with action
    ``update`` gives ``"Auto-update"``.
    """
    template = template or DEFAULT_COMMIT_MSG_TEMPLATE
    message = template.replace("${filename}", filename).replace("${action}", action)
    return message[:1].upper() + message[1:]


class SyncPolicy:
    """Sequences remote calls for one mutation intent, honoring workspace settings.

    The primary call (persist or delete) always settles before auto-commit
    is considered, and auto-commit only runs after a successful primary
    call. Auto-commit and post-mutation refresh failures are reported on
    the outcome; they never undo or fail the primary result.
    """

    def __init__(
        self,
        remote: RemoteStoreProtocol,
        file_cache: FileCache,
        settings: WorkspaceSettings,
    ):
        self.remote = remote
        self.file_cache = file_cache
        self.settings = settings

    def commit_message_for(self, path: str, action: GitAction) -> str:
        return build_commit_message(
            self.settings.git_commit_msg_template, path, action.value
        )

    async def save(
        self,
        workspace: str,
        path: str,
        content: str,
        on_stage: Optional[StageCallback] = None,
    ) -> MutationOutcome:
        _notify(on_stage, SyncStage.PERSIST)
        await self.remote.save_file_content(workspace, path, content)
        logger.info("Saved %s in %s", path, workspace)

        outcome = MutationOutcome(action=GitAction.UPDATE.value, path=path)
        await self._auto_commit(workspace, path, GitAction.UPDATE, outcome, on_stage)
        return outcome

    async def create(
        self,
        workspace: str,
        path: str,
        content: str = "",
        on_stage: Optional[StageCallback] = None,
    ) -> MutationOutcome:
        with self.file_cache.pending_mutation():
            _notify(on_stage, SyncStage.PERSIST)
            await self.remote.save_file_content(workspace, path, content)
            logger.info("Created %s in %s", path, workspace)

            outcome = MutationOutcome(action=GitAction.CREATE.value, path=path)
            await self._auto_commit(
                workspace, path, GitAction.CREATE, outcome, on_stage
            )
            await self._forced_refresh(workspace, outcome, on_stage)
        return outcome

    async def delete(
        self,
        workspace: str,
        path: str,
        on_stage: Optional[StageCallback] = None,
    ) -> MutationOutcome:
        with self.file_cache.pending_mutation():
            _notify(on_stage, SyncStage.DELETE)
            await self.remote.delete_file(workspace, path)
            logger.info("Deleted %s from %s", path, workspace)

            outcome = MutationOutcome(action=GitAction.DELETE.value, path=path)
            await self._auto_commit(
                workspace, path, GitAction.DELETE, outcome, on_stage
            )
            await self._forced_refresh(workspace, outcome, on_stage)
        return outcome

    async def pull(
        self,
        workspace: str,
        dirty_path: Optional[str] = None,
        proceed_with_unsaved: bool = False,
        on_stage: Optional[StageCallback] = None,
    ) -> MutationOutcome:
        """Pull remote changes. Never touches the edit buffer."""
        if not self.settings.git_enabled:
            raise GitDisabled(workspace)
        if dirty_path is not None and not proceed_with_unsaved:
            raise DirtyPullWarning(dirty_path)

        with self.file_cache.pending_mutation():
            _notify(on_stage, SyncStage.PULL)
            await self.remote.pull_changes(workspace)
            logger.info("Pulled latest changes into %s", workspace)

            outcome = MutationOutcome(action="pull")
            await self._forced_refresh(workspace, outcome, on_stage)
        return outcome

    async def commit(
        self,
        workspace: str,
        message: str,
        on_stage: Optional[StageCallback] = None,
    ) -> MutationOutcome:
        """Explicit commit-and-push; a failure here is the primary failure."""
        if not self.settings.git_enabled:
            raise GitDisabled(workspace)

        with self.file_cache.pending_mutation():
            _notify(on_stage, SyncStage.COMMIT)
            await self.remote.commit_and_push(workspace, message)
            logger.info("Committed and pushed %s: %s", workspace, message)

            outcome = MutationOutcome(
                action="commit", commit_message=message, committed=True
            )
            await self._forced_refresh(workspace, outcome, on_stage)
        return outcome

    async def _auto_commit(
        self,
        workspace: str,
        path: str,
        action: GitAction,
        outcome: MutationOutcome,
        on_stage: Optional[StageCallback],
    ) -> None:
        if not self.settings.auto_commit_enabled:
            return

        message = self.commit_message_for(path, action)
        outcome.commit_message = message
        _notify(on_stage, SyncStage.COMMIT)
        try:
            await self.remote.commit_and_push(workspace, message)
        except (RemoteOperationFailed, ValueError) as e:
            logger.warning("Auto-commit of %s after %s failed: %s", path, action.value, e)
            outcome.auto_commit_error = AutoCommitFailed(path, action.value, message, e)
            return
        outcome.committed = True
        logger.info("Auto-committed %s: %s", path, message)

    async def _forced_refresh(
        self,
        workspace: str,
        outcome: MutationOutcome,
        on_stage: Optional[StageCallback],
    ) -> None:
        _notify(on_stage, SyncStage.REFRESH)
        try:
            await self.file_cache.refresh(workspace, forced=True)
        except RemoteOperationFailed as e:
            logger.warning("File list refresh for %s failed: %s", workspace, e)
            outcome.refresh_error = e


def _notify(on_stage: Optional[StageCallback], stage: SyncStage) -> None:
    if on_stage is not None:
        on_stage(stage)
