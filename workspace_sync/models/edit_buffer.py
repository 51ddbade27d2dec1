from typing import Optional

from .errors import UnresolvedChanges


class EditBuffer:
    """In-memory content of the one open file, tracked against its baseline.

    ``dirty`` is derived from ``content != baseline`` on every read, so it
    can never drift from the content it describes.
    """

    def __init__(self):
        self.path: Optional[str] = None
        self.content: str = ""
        self.baseline: str = ""

    @property
    def dirty(self) -> bool:
        return self.content != self.baseline

    @property
    def has_selection(self) -> bool:
        return self.path is not None

    def load(self, path: str, content: str) -> None:
        """Replace the buffer with freshly fetched content."""
        if self.dirty:
            raise UnresolvedChanges(self.path)
        self.path = path
        self.content = content
        self.baseline = content

    def edit(self, new_content: str) -> bool:
        self.content = new_content
        return self.dirty

    def mark_saved(self, saved_content: Optional[str] = None) -> None:
        """Adopt the content that was sent to the server as the new baseline."""
        self.baseline = self.content if saved_content is None else saved_content

    def discard(self) -> None:
        self.content = self.baseline

    def clear(self, force: bool = False) -> None:
        if self.dirty and not force:
            raise UnresolvedChanges(self.path)
        self.path = None
        self.content = ""
        self.baseline = ""
