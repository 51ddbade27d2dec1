"""Error taxonomy for the edit-session engine."""

from typing import List, Optional


class WorkspaceSyncError(Exception):
    """Base class for every error raised by this package."""


class RemoteOperationFailed(WorkspaceSyncError):
    """A remote call did not succeed. ``status`` is None for transport errors."""

    def __init__(
        self,
        resource: str,
        verb: str,
        status: Optional[int] = None,
        detail: str = "",
    ):
        self.resource = resource
        self.verb = verb
        self.status = status
        self.detail = detail
        if status is None:
            message = f"{verb} {resource} failed: {detail or 'transport error'}"
        else:
            message = f"{verb} {resource} failed with status {status}"
            if detail:
                message = f"{message}: {detail}"
        super().__init__(message)


class UnresolvedChanges(WorkspaceSyncError):
    """The edit buffer holds unsaved changes that must be saved or discarded."""

    def __init__(self, path: Optional[str], message: str = ""):
        self.path = path
        super().__init__(message or f"Unsaved changes in {path}")


class DirtyPullWarning(UnresolvedChanges):
    """A pull was requested while the edit buffer is dirty."""

    def __init__(self, path: Optional[str]):
        super().__init__(
            path,
            f"Pulling while {path} has unsaved changes; "
            "save, discard or proceed explicitly",
        )


class OperationInProgress(WorkspaceSyncError):
    """Another mutating sequence is already running on this session."""

    def __init__(self, running: str):
        self.running = running
        super().__init__(f"Operation in progress: {running}")


class AmbiguousLookup(WorkspaceSyncError):
    """A short file name resolved to more than one path."""

    def __init__(self, filename: str, candidates: List[str]):
        self.filename = filename
        self.candidates = list(candidates)
        super().__init__(
            f"{filename!r} matches {len(self.candidates)} files: "
            + ", ".join(self.candidates)
        )


class AutoCommitFailed(WorkspaceSyncError):
    """Auto-commit after a successful mutation failed. Reported, never raised."""

    def __init__(
        self,
        path: str,
        action: str,
        message: str,
        cause: Optional[Exception] = None,
    ):
        self.path = path
        self.action = action
        self.commit_message = message
        self.cause = cause
        super().__init__(f"Auto-commit after {action} of {path} failed: {cause}")


class InvalidSessionState(WorkspaceSyncError):
    """The operation is not valid in the session's current state."""


class GitDisabled(WorkspaceSyncError):
    """A git operation was requested for a workspace with git disabled."""

    def __init__(self, workspace: str):
        self.workspace = workspace
        super().__init__(f"Git is not enabled for workspace {workspace!r}")
