"""Unit tests for SyncPolicy and commit message templating."""

from unittest.mock import MagicMock, Mock, call

import pytest

from workspace_sync.models import (
    AutoCommitFailed,
    DirtyPullWarning,
    FileCache,
    GitDisabled,
    RemoteOperationFailed,
    UnresolvedChanges,
)
from workspace_sync.schemas import GitAction, WorkspaceSettings
from workspace_sync.services import RemoteStoreClient, SyncPolicy, SyncStage
from workspace_sync.services.sync_policy import build_commit_message


class TestBuildCommitMessage:
    """Test cases for commit message templating."""

    def test_substitutes_placeholders(self):
        message = build_commit_message(
            "Auto: ${action} ${filename}", "notes/todo.md", "update"
        )
        assert message == "Auto: update notes/todo.md"

    def test_capitalizes_first_character_only(self):
        assert build_commit_message("auto-${action}", "x.md", "update") == "Auto-update"
        assert build_commit_message("${filename} ABC", "readme.md", "create") == (
            "Readme.md ABC"
        )

    def test_empty_template_uses_default(self):
        assert build_commit_message("", "a.md", "delete") == "Delete a.md"

    def test_replaces_every_occurrence(self):
        message = build_commit_message("${action}: ${filename} (${filename})", "a.md", "create")
        assert message == "Create: a.md (a.md)"


class TestSyncPolicy:
    """Test cases for SyncPolicy."""

    def setup_method(self):
        self.mock_remote = Mock(spec=RemoteStoreClient)
        self.mock_cache = MagicMock(spec=FileCache)
        self.settings = WorkspaceSettings(
            name="notes",
            git_enabled=True,
            git_auto_commit=True,
            git_commit_msg_template="${action} ${filename}",
        )
        self.policy = SyncPolicy(self.mock_remote, self.mock_cache, self.settings)
        self.stages = []

    @pytest.mark.asyncio
    async def test_save_persists_then_auto_commits(self):
        manager = Mock()
        manager.attach_mock(self.mock_remote.save_file_content, "save")
        manager.attach_mock(self.mock_remote.commit_and_push, "commit")

        outcome = await self.policy.save(
            "notes", "todo.md", "text", on_stage=self.stages.append
        )

        assert manager.mock_calls == [
            call.save("notes", "todo.md", "text"),
            call.commit("notes", "Update todo.md"),
        ]
        assert outcome.committed
        assert outcome.commit_message == "Update todo.md"
        assert outcome.auto_commit_error is None
        assert self.stages == [SyncStage.PERSIST, SyncStage.COMMIT]
        self.mock_cache.refresh.assert_not_called()

    @pytest.mark.asyncio
    async def test_save_failure_never_auto_commits(self):
        self.mock_remote.save_file_content.side_effect = RemoteOperationFailed(
            "workspaces/notes/files/todo.md", "POST", 500
        )

        with pytest.raises(RemoteOperationFailed) as exc_info:
            await self.policy.save("notes", "todo.md", "text")

        assert exc_info.value.status == 500
        self.mock_remote.commit_and_push.assert_not_called()

    @pytest.mark.asyncio
    async def test_auto_commit_failure_is_reported_not_raised(self):
        error = RemoteOperationFailed("workspaces/notes/git/commit", "POST", 502)
        self.mock_remote.commit_and_push.side_effect = error

        outcome = await self.policy.save("notes", "todo.md", "text")

        assert not outcome.committed
        assert isinstance(outcome.auto_commit_error, AutoCommitFailed)
        assert outcome.auto_commit_error.cause is error
        assert outcome.auto_commit_error.action == "update"
        assert outcome.has_warnings

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "git_enabled,auto_commit",
        [(False, True), (True, False), (False, False)],
    )
    async def test_auto_commit_requires_both_flags(self, git_enabled, auto_commit):
        self.policy.settings = self.settings.model_copy(
            update={"git_enabled": git_enabled, "git_auto_commit": auto_commit}
        )

        outcome = await self.policy.save("notes", "todo.md", "text")

        self.mock_remote.commit_and_push.assert_not_called()
        assert outcome.commit_message is None
        assert not outcome.committed

    @pytest.mark.asyncio
    async def test_create_commits_then_forces_refresh(self):
        outcome = await self.policy.create(
            "notes", "new.md", on_stage=self.stages.append
        )

        self.mock_cache.pending_mutation.assert_called_once_with()
        self.mock_remote.save_file_content.assert_called_once_with("notes", "new.md", "")
        self.mock_remote.commit_and_push.assert_called_once_with("notes", "Create new.md")
        self.mock_cache.refresh.assert_called_once_with("notes", forced=True)
        assert outcome.action == GitAction.CREATE.value
        assert self.stages == [SyncStage.PERSIST, SyncStage.COMMIT, SyncStage.REFRESH]

    @pytest.mark.asyncio
    async def test_delete_commits_then_forces_refresh(self):
        outcome = await self.policy.delete("notes", "old.md", on_stage=self.stages.append)

        self.mock_remote.delete_file.assert_called_once_with("notes", "old.md")
        self.mock_remote.commit_and_push.assert_called_once_with("notes", "Delete old.md")
        self.mock_cache.refresh.assert_called_once_with("notes", forced=True)
        assert outcome.committed
        assert self.stages == [SyncStage.DELETE, SyncStage.COMMIT, SyncStage.REFRESH]

    @pytest.mark.asyncio
    async def test_delete_failure_skips_commit_and_refresh(self):
        self.mock_remote.delete_file.side_effect = RemoteOperationFailed(
            "workspaces/notes/files/old.md", "DELETE", 404
        )

        with pytest.raises(RemoteOperationFailed):
            await self.policy.delete("notes", "old.md")

        self.mock_remote.commit_and_push.assert_not_called()
        self.mock_cache.refresh.assert_not_called()

    @pytest.mark.asyncio
    async def test_refresh_failure_is_reported(self):
        self.mock_cache.refresh.side_effect = RemoteOperationFailed(
            "workspaces/notes/files", "GET", 503
        )

        outcome = await self.policy.delete("notes", "old.md")

        assert outcome.refresh_error is not None
        assert outcome.refresh_error.status == 503
        assert outcome.committed

    @pytest.mark.asyncio
    async def test_pull_with_dirty_buffer_warns_before_network(self):
        with pytest.raises(DirtyPullWarning) as exc_info:
            await self.policy.pull("notes", dirty_path="todo.md")

        assert isinstance(exc_info.value, UnresolvedChanges)
        assert exc_info.value.path == "todo.md"
        self.mock_remote.pull_changes.assert_not_called()
        self.mock_cache.pending_mutation.assert_not_called()

    @pytest.mark.asyncio
    async def test_pull_proceeds_when_asked(self):
        outcome = await self.policy.pull(
            "notes",
            dirty_path="todo.md",
            proceed_with_unsaved=True,
            on_stage=self.stages.append,
        )

        self.mock_remote.pull_changes.assert_called_once_with("notes")
        self.mock_cache.refresh.assert_called_once_with("notes", forced=True)
        assert outcome.action == "pull"
        assert self.stages == [SyncStage.PULL, SyncStage.REFRESH]

    @pytest.mark.asyncio
    async def test_git_operations_require_git_enabled(self):
        self.policy.settings = WorkspaceSettings(name="notes", git_enabled=False)

        with pytest.raises(GitDisabled):
            await self.policy.pull("notes")
        with pytest.raises(GitDisabled):
            await self.policy.commit("notes", "message")

        self.mock_remote.pull_changes.assert_not_called()
        self.mock_remote.commit_and_push.assert_not_called()

    @pytest.mark.asyncio
    async def test_explicit_commit_failure_propagates(self):
        self.mock_remote.commit_and_push.side_effect = RemoteOperationFailed(
            "workspaces/notes/git/commit", "POST", 500
        )

        with pytest.raises(RemoteOperationFailed):
            await self.policy.commit("notes", "Manual commit")

        self.mock_cache.refresh.assert_not_called()

    @pytest.mark.asyncio
    async def test_explicit_commit_refreshes(self):
        outcome = await self.policy.commit("notes", "Manual commit")

        self.mock_remote.commit_and_push.assert_called_once_with("notes", "Manual commit")
        self.mock_cache.refresh.assert_called_once_with("notes", forced=True)
        assert outcome.committed
        assert outcome.commit_message == "Manual commit"

    @pytest.mark.asyncio
    async def test_failed_delete_releases_pending_mutation(self):
        cache = FileCache(self.mock_remote)
        policy = SyncPolicy(self.mock_remote, cache, self.settings)
        self.mock_remote.delete_file.side_effect = RemoteOperationFailed(
            "workspaces/notes/files/old.md", "DELETE", 500
        )

        with pytest.raises(RemoteOperationFailed):
            await policy.delete("notes", "old.md")

        assert not cache.mutation_pending
