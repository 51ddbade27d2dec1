from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel


class FileNode(BaseModel):
    """One node of the nested listing returned by ``GET /files``."""

    id: Union[int, str] = ""
    name: str
    path: str
    children: Optional[List[FileNode]] = None

    @property
    def is_directory(self) -> bool:
        return self.children is not None
