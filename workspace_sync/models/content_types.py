from enum import Enum
from pathlib import PurePosixPath
from typing import Optional, Tuple

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg", ".bmp", ".ico"}

SOURCE_VIEW = "source"
PREVIEW_VIEW = "preview"


class ContentKind(str, Enum):
    TEXT = "text"
    IMAGE = "image"


def classify(path: Optional[str]) -> ContentKind:
    if not path:
        return ContentKind.TEXT
    if PurePosixPath(path).suffix.lower() in IMAGE_EXTENSIONS:
        return ContentKind.IMAGE
    return ContentKind.TEXT


def is_image_file(path: Optional[str]) -> bool:
    return classify(path) is ContentKind.IMAGE


def permitted_views(path: Optional[str]) -> Tuple[str, ...]:
    """Image files can only be previewed; everything else can also be edited."""
    if is_image_file(path):
        return (PREVIEW_VIEW,)
    return (SOURCE_VIEW, PREVIEW_VIEW)
