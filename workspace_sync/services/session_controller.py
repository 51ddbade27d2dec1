"""Edit-session state machine over one active workspace."""

import asyncio
import logging
from contextlib import asynccontextmanager
from enum import Enum
from typing import AsyncIterator, Callable, List, Optional, Set, Tuple

from pydantic import BaseModel, ConfigDict

from ..config.settings import ClientSettings, get_settings
from ..models import (
    AmbiguousLookup,
    DelayedApply,
    EditBuffer,
    FileCache,
    FileTree,
    InvalidSessionState,
    OperationInProgress,
    RemoteOperationFailed,
    SettingsEditor,
    UnresolvedChanges,
    is_image_file,
    permitted_views,
)
from ..protocols.remote_store_protocol import RemoteStoreProtocol
from ..schemas import Workspace, WorkspaceSettings
from .sync_policy import MutationOutcome, SyncPolicy, SyncStage

logger = logging.getLogger(__name__)


class SessionPhase(str, Enum):
    IDLE = "idle"
    FILE_SELECTED = "file_selected"
    LOADING = "loading"
    SAVING = "saving"
    CREATING = "creating"
    DELETING = "deleting"
    PULLING = "pulling"
    COMMITTING = "committing"


_STAGE_PHASES = {
    SyncStage.COMMIT: SessionPhase.COMMITTING,
    SyncStage.PULL: SessionPhase.PULLING,
}


class SessionView(BaseModel):
    """What the presentation layer renders."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    workspace: str
    selected_file: Optional[str]
    content: str
    dirty: bool
    file_tree: FileTree
    error: Optional[str]
    phase: SessionPhase
    theme: str
    views: Tuple[str, ...]

    @property
    def preview_only(self) -> bool:
        return self.views == ("preview",)


class SessionController:
    """Orchestrates the edit buffer, file cache and sync policy for one session.

    At most one mutating sequence runs at a time: a second one is rejected
    with ``OperationInProgress`` before it reaches the network. Local
    precondition failures (``UnresolvedChanges``, ``OperationInProgress``,
    ``InvalidSessionState``) never issue a remote call, and no failure
    clears unsaved buffer content.
    """

    def __init__(
        self,
        remote: RemoteStoreProtocol,
        workspace_name: str,
        settings: WorkspaceSettings,
        file_cache: Optional[FileCache] = None,
        theme_delay: float = 0.0,
        auto_save_delay: float = 1.0,
        on_theme_change: Optional[Callable[[str], None]] = None,
    ):
        if not workspace_name:
            raise ValueError("Workspace name must not be empty")
        self.remote = remote
        self.workspace_name = workspace_name
        self.file_cache = file_cache or FileCache(remote)
        self.buffer = EditBuffer()
        self.policy = SyncPolicy(remote, self.file_cache, settings)
        self.settings_editor = SettingsEditor(settings)
        self.theme = settings.theme
        self.on_theme_change = on_theme_change
        self.last_error: Optional[Exception] = None

        self._running: Optional[SessionPhase] = None
        self._operation: Optional[SessionPhase] = None
        self._closed = False
        self._theme_timer: DelayedApply[str] = DelayedApply(self._apply_theme, theme_delay)
        self._auto_save_timer: DelayedApply[str] = DelayedApply(
            self._start_auto_save, auto_save_delay
        )
        self._auto_save_tasks: Set[asyncio.Task] = set()

    @classmethod
    async def open(
        cls,
        remote: RemoteStoreProtocol,
        workspace_name: Optional[str] = None,
        client_settings: Optional[ClientSettings] = None,
        on_theme_change: Optional[Callable[[str], None]] = None,
    ) -> "SessionController":
        """Start a session: load settings once, list files, restore the last file."""
        client_settings = client_settings or get_settings()
        name = (
            workspace_name
            or client_settings.WORKSPACE_NAME
            or await remote.get_last_workspace_name()
        )
        if not name:
            raise InvalidSessionState("No workspace to open")

        workspace = await remote.get_workspace(name)
        controller = cls(
            remote,
            name,
            workspace.settings(),
            theme_delay=client_settings.THEME_APPLY_DELAY,
            auto_save_delay=client_settings.AUTO_SAVE_DELAY,
            on_theme_change=on_theme_change,
        )
        await controller.file_cache.refresh(name, forced=True)
        await controller._restore_last_opened()
        logger.info("Opened workspace %s (%d files)", name, len(controller.file_cache.tree))
        return controller

    async def __aenter__(self) -> "SessionController":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release the theme and auto-save timers and settle every running auto-save."""
        self._closed = True
        self._theme_timer.cancel()
        self._auto_save_timer.cancel()
        if self._auto_save_tasks:
            await asyncio.gather(*self._auto_save_tasks)

    # State

    @property
    def settings(self) -> WorkspaceSettings:
        """The last server-confirmed settings."""
        return self.policy.settings

    @property
    def phase(self) -> SessionPhase:
        if self._running is not None:
            return self._running
        if self.buffer.has_selection:
            return SessionPhase.FILE_SELECTED
        return SessionPhase.IDLE

    @property
    def busy(self) -> bool:
        return self._running is not None

    def view(self) -> SessionView:
        return SessionView(
            workspace=self.workspace_name,
            selected_file=self.buffer.path,
            content=self.buffer.content,
            dirty=self.buffer.dirty,
            file_tree=self.file_cache.tree,
            error=str(self.last_error) if self.last_error else None,
            phase=self.phase,
            theme=self.theme,
            views=permitted_views(self.buffer.path),
        )

    @asynccontextmanager
    async def _exclusive(self, phase: SessionPhase) -> AsyncIterator[None]:
        if self._running is not None:
            raise OperationInProgress(self._running.value)
        self._running = self._operation = phase
        try:
            yield
        except Exception as e:
            self.last_error = e
            raise
        else:
            self.last_error = None
        finally:
            self._running = self._operation = None

    def _enter_stage(self, stage: SyncStage) -> None:
        self._running = _STAGE_PHASES.get(stage, self._operation)

    def _require_clean(self, discard: bool) -> None:
        if self.buffer.dirty and not discard:
            raise UnresolvedChanges(self.buffer.path)

    # Files

    async def select_file(self, path: str, discard: bool = False) -> str:
        """Load ``path`` into the edit buffer.

        Fails with ``UnresolvedChanges`` while the buffer is dirty, unless
        ``discard`` is set, in which case local edits are dropped and the
        remote content always wins.
        """
        self._require_clean(discard)
        async with self._exclusive(SessionPhase.LOADING):
            await self._load(path, discard=discard)
        return path

    async def _load(self, path: str, discard: bool = False) -> None:
        if is_image_file(path):
            content = ""
        else:
            content = await self.remote.get_file_content(self.workspace_name, path)
        self._auto_save_timer.cancel()
        if discard:
            self.buffer.discard()
        self.buffer.load(path, content)
        await self._remember_last_opened(path)

    async def _remember_last_opened(self, path: str) -> None:
        try:
            await self.remote.update_last_opened_file(self.workspace_name, path)
        except RemoteOperationFailed as e:
            logger.warning("Could not record %s as last opened file: %s", path, e)

    async def _restore_last_opened(self) -> None:
        try:
            path = await self.remote.get_last_opened_file(self.workspace_name)
            if path and self.file_cache.contains(path):
                await self._load(path)
        except RemoteOperationFailed as e:
            logger.warning("Could not restore last opened file: %s", e)

    def edit_content(self, text: str) -> bool:
        """Replace the buffer content locally. Returns the dirty flag."""
        path = self.buffer.path
        if path is None:
            raise InvalidSessionState("No file selected")
        if is_image_file(path):
            raise InvalidSessionState(f"{path} can only be previewed")
        dirty = self.buffer.edit(text)
        if dirty and self.settings.auto_save and not self._closed:
            self._auto_save_timer.schedule(path)
        else:
            self._auto_save_timer.cancel()
        return dirty

    def discard_changes(self) -> None:
        self._auto_save_timer.cancel()
        self.buffer.discard()

    async def save(self) -> Optional[MutationOutcome]:
        """Persist the buffer. Returns None when there is nothing to save."""
        if not self.buffer.has_selection:
            raise InvalidSessionState("No file selected")
        async with self._exclusive(SessionPhase.SAVING):
            if not self.buffer.dirty:
                return None
            self._auto_save_timer.cancel()
            path, content = self.buffer.path, self.buffer.content
            outcome = await self.policy.save(
                self.workspace_name, path, content, on_stage=self._enter_stage
            )
            if self.buffer.path == path:
                self.buffer.mark_saved(content)
            return outcome

    async def create_file(
        self, name: str, initial_content: str = "", discard: bool = False
    ) -> MutationOutcome:
        """Create ``name`` remotely, refresh the listing and select the new file."""
        path = name.strip().strip("/")
        if not path:
            raise ValueError("File name must not be empty")
        self._require_clean(discard)
        async with self._exclusive(SessionPhase.CREATING):
            outcome = await self.policy.create(
                self.workspace_name, path, initial_content, on_stage=self._enter_stage
            )
            if self.buffer.dirty and not discard:
                logger.warning("Not selecting %s: %s has unsaved changes", path, self.buffer.path)
                return outcome
            self._auto_save_timer.cancel()
            if discard:
                self.buffer.discard()
            self.buffer.load(path, initial_content)
            await self._remember_last_opened(path)
            return outcome

    async def delete_file(self, path: Optional[str] = None) -> MutationOutcome:
        """Delete ``path`` (default: the selected file) and refresh the listing."""
        path = path or self.buffer.path
        if not path:
            raise InvalidSessionState("No file selected")
        async with self._exclusive(SessionPhase.DELETING):
            outcome = await self.policy.delete(
                self.workspace_name, path, on_stage=self._enter_stage
            )
            if self.buffer.path == path:
                self._auto_save_timer.cancel()
                self.buffer.clear(force=True)
            return outcome

    async def pull(self, proceed_with_unsaved: bool = False) -> MutationOutcome:
        """Pull remote changes. A dirty buffer is never touched.

        Raises ``DirtyPullWarning`` while the buffer is dirty unless
        ``proceed_with_unsaved`` is set. A clean buffer is reloaded from
        the pulled content.
        """
        dirty_path = self.buffer.path if self.buffer.dirty else None
        async with self._exclusive(SessionPhase.PULLING):
            outcome = await self.policy.pull(
                self.workspace_name,
                dirty_path=dirty_path,
                proceed_with_unsaved=proceed_with_unsaved,
                on_stage=self._enter_stage,
            )
            if outcome.refresh_error is None:
                await self._reload_clean_buffer()
            return outcome

    async def _reload_clean_buffer(self) -> None:
        path = self.buffer.path
        if path is None or self.buffer.dirty:
            return
        if not self.file_cache.contains(path):
            logger.info("%s no longer exists after pull", path)
            self.buffer.clear()
            return
        if is_image_file(path):
            return
        try:
            content = await self.remote.get_file_content(self.workspace_name, path)
        except RemoteOperationFailed as e:
            logger.warning("Could not reload %s after pull: %s", path, e)
            return
        if self.buffer.path == path and not self.buffer.dirty:
            self.buffer.load(path, content)

    async def commit_and_push(self, message: str) -> MutationOutcome:
        async with self._exclusive(SessionPhase.COMMITTING):
            return await self.policy.commit(
                self.workspace_name, message, on_stage=self._enter_stage
            )

    async def refresh_files(self) -> bool:
        """Re-list files. Read-only, so it may run alongside a mutation."""
        return await self.file_cache.refresh(self.workspace_name)

    async def lookup_file_by_name(self, filename: str) -> List[str]:
        """Resolve a short name. Empty when nothing matches; raises when ambiguous."""
        candidates = await self.file_cache.lookup(self.workspace_name, filename)
        if len(candidates) > 1:
            raise AmbiguousLookup(filename, candidates)
        return candidates

    async def open_file_by_name(
        self, filename: str, discard: bool = False
    ) -> Optional[str]:
        """Follow a link by short name; returns the selected path or None."""
        candidates = await self.lookup_file_by_name(filename)
        if not candidates:
            return None
        return await self.select_file(candidates[0], discard=discard)

    # Workspaces

    async def list_workspaces(self) -> List[Workspace]:
        return await self.remote.list_workspaces()

    async def switch_workspace(self, name: str, discard: bool = False) -> None:
        self._require_clean(discard)
        async with self._exclusive(SessionPhase.LOADING):
            await self._switch_to(name)

    async def create_workspace(self, name: str, discard: bool = False) -> Workspace:
        self._require_clean(discard)
        async with self._exclusive(SessionPhase.CREATING):
            workspace = await self.remote.create_workspace(name)
            await self._switch_to(workspace.name or name)
            return workspace

    async def delete_workspace(self, discard: bool = False) -> Optional[str]:
        """Delete the active workspace and switch to the one the server names."""
        self._require_clean(discard)
        async with self._exclusive(SessionPhase.DELETING):
            self.file_cache.mark_stale()
            next_name = await self.remote.delete_workspace(self.workspace_name)
            logger.info("Deleted workspace %s", self.workspace_name)
            if next_name:
                await self._switch_to(next_name)
            return next_name

    async def _switch_to(self, name: str) -> None:
        """Make ``name`` the active workspace once its settings and listing are in.

        If either fetch fails, the current workspace stays active untouched.
        """
        workspace = await self.remote.get_workspace(name)
        self.file_cache.mark_stale()
        await self.file_cache.refresh(name, forced=True)

        self._auto_save_timer.cancel()
        self._theme_timer.cancel()
        self.buffer.clear(force=True)
        self.workspace_name = name
        self._adopt_settings(workspace.settings())
        try:
            await self.remote.update_last_workspace_name(name)
        except RemoteOperationFailed as e:
            logger.warning("Could not record %s as last workspace: %s", name, e)
        await self._restore_last_opened()
        logger.info("Switched to workspace %s", name)

    # Settings

    def _adopt_settings(self, settings: WorkspaceSettings) -> None:
        self.policy.settings = settings
        self.settings_editor = SettingsEditor(settings)
        self._apply_theme(settings.theme)

    async def save_settings(self) -> WorkspaceSettings:
        """Send local settings edits; they count only once the server confirms them."""
        editor = self.settings_editor
        if not editor.has_unsaved_changes:
            return self.settings
        try:
            workspace = await self.remote.update_workspace(
                self.workspace_name, editor.local
            )
        except RemoteOperationFailed as e:
            self.last_error = e
            raise
        confirmed = workspace.settings()
        editor.mark_saved(confirmed)
        self.policy.settings = confirmed
        self._theme_timer.cancel()
        self._apply_theme(confirmed.theme)
        logger.info("Saved settings for %s", self.workspace_name)
        return confirmed

    def reset_settings(self) -> WorkspaceSettings:
        """Drop unconfirmed settings edits and restore the confirmed theme."""
        self._theme_timer.cancel()
        settings = self.settings_editor.reset()
        self._apply_theme(settings.theme)
        return settings

    def toggle_theme(self) -> str:
        """Flip the theme locally and apply it after the debounce delay."""
        theme = "light" if self.settings_editor.local.theme == "dark" else "dark"
        self.settings_editor.update(theme=theme)
        self._theme_timer.schedule(theme)
        return theme

    def _apply_theme(self, theme: str) -> None:
        self.theme = theme
        if self.on_theme_change is not None:
            self.on_theme_change(theme)

    # Auto-save

    def _start_auto_save(self, path: str) -> None:
        if self._closed:
            return
        task = asyncio.get_running_loop().create_task(self._auto_save(path))
        self._auto_save_tasks.add(task)
        task.add_done_callback(self._auto_save_tasks.discard)

    async def _auto_save(self, path: str) -> None:
        if self.buffer.path != path or not self.buffer.dirty:
            return
        try:
            await self.save()
        except OperationInProgress:
            if not self._closed:
                self._auto_save_timer.schedule(path)
        except RemoteOperationFailed as e:
            logger.warning("Auto-save of %s failed: %s", path, e)
