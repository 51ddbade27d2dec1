from enum import Enum


class GitAction(str, Enum):
    """Mutation kinds substituted for ``${action}`` in commit messages."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
