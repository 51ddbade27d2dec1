"""Cached file listing for the active workspace."""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import TYPE_CHECKING, Iterable, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from ..schemas import FileNode
from .content_types import ContentKind, classify
from .errors import RemoteOperationFailed

if TYPE_CHECKING:
    from ..protocols.remote_store_protocol import RemoteStoreProtocol

logger = logging.getLogger(__name__)


class FileEntry(BaseModel):
    """A file (never a directory) in the tree, with its rendering kind."""

    model_config = ConfigDict(frozen=True)

    path: str
    kind: ContentKind


class FileTree(BaseModel):
    """Immutable snapshot of one listing response."""

    model_config = ConfigDict(frozen=True)

    nodes: Tuple[FileNode, ...] = ()
    entries: Tuple[FileEntry, ...] = ()

    @classmethod
    def from_nodes(cls, nodes: Iterable[FileNode]) -> "FileTree":
        nodes = tuple(nodes)
        entries: List[FileEntry] = []
        seen = set()
        stack = list(reversed(nodes))
        # Depth-first, in server order
        while stack:
            node = stack.pop()
            if node.is_directory:
                stack.extend(reversed(node.children))
                continue
            if node.path in seen:
                continue
            seen.add(node.path)
            entries.append(FileEntry(path=node.path, kind=classify(node.path)))
        return cls(nodes=nodes, entries=tuple(entries))

    def paths(self) -> List[str]:
        return [entry.path for entry in self.entries]

    def __contains__(self, path: object) -> bool:
        return any(entry.path == path for entry in self.entries)

    def __len__(self) -> int:
        return len(self.entries)


class FileCache:
    """Holds the last applied file listing and resolves short file names.

    ``refresh`` is the only method that replaces the tree. Results of a
    non-forced refresh are dropped when a refresh-triggering mutation
    started after the request went out (see ``mark_stale``) or is still
    pending (see ``pending_mutation``), and any result is dropped once a
    newer refresh has been applied.
    """

    def __init__(self, remote: "RemoteStoreProtocol"):
        self.remote = remote
        self.workspace: Optional[str] = None
        self.last_refreshed: Optional[datetime] = None
        self._tree = FileTree()
        self._epoch = 0
        self._issued = 0
        self._applied = 0
        self._pending = 0

    @property
    def tree(self) -> FileTree:
        return self._tree

    def paths(self) -> List[str]:
        return self._tree.paths()

    def contains(self, path: str) -> bool:
        return path in self._tree

    def mark_stale(self) -> None:
        """Start a new mutation epoch; pending non-forced refreshes become stale."""
        self._epoch += 1

    @property
    def mutation_pending(self) -> bool:
        return self._pending > 0

    @contextmanager
    def pending_mutation(self) -> Iterator[None]:
        """Scope a refresh-triggering mutation, from its first call to its forced refresh."""
        self.mark_stale()
        self._pending += 1
        try:
            yield
        finally:
            self._pending -= 1

    async def refresh(self, workspace: str, forced: bool = False) -> bool:
        """Replace the tree with a fresh listing. Returns False if the result was stale."""
        self._issued += 1
        seq = self._issued
        epoch = self._epoch

        nodes = await self.remote.list_files(workspace)

        if seq < self._applied:
            logger.debug("Dropping listing #%d, #%d already applied", seq, self._applied)
            return False
        if not forced and (epoch != self._epoch or self._pending):
            logger.debug("Dropping listing #%d superseded by a mutation", seq)
            return False

        self._tree = FileTree.from_nodes(nodes)
        self._applied = seq
        self.workspace = workspace
        self.last_refreshed = datetime.now()
        logger.debug("File tree for %s refreshed: %d files", workspace, len(self._tree))
        return True

    async def lookup(self, workspace: str, filename: str) -> List[str]:
        """Resolve a short name to candidate paths; empty when nothing matches."""
        try:
            paths = await self.remote.lookup_file_by_name(workspace, filename)
        except RemoteOperationFailed as e:
            if e.status == 404:
                return []
            raise
        candidates: List[str] = []
        for path in paths:
            if path not in candidates:
                candidates.append(path)
        return candidates
