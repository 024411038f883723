"""Custom exception hierarchy for menusync.

These exceptions allow callers to discriminate error categories
and handle them appropriately while preserving the original context.
"""

from __future__ import annotations


class MenuSyncError(Exception):
    """Base class for all menusync exceptions."""


class ConfigError(MenuSyncError):
    """Raised when configuration loading or validation fails."""


class FetchError(MenuSyncError):
    """Raised when the remote endpoint cannot be reached or answers with an error status."""


class DecodeError(MenuSyncError):
    """Raised when the remote document does not have the expected shape."""


class PersistenceError(MenuSyncError):
    """Raised when the storage layer rejects a create, update or delete."""


class MissingLinkWarning(MenuSyncError, UserWarning):
    """A menu item has no usable link destination and was left unsaved.

    Never raised out of an import run; the reconciler logs it and moves on.
    """

    def __init__(self, remote_id: str) -> None:
        super().__init__(f"Menu item with id {remote_id} does not have a valid link.")
        self.remote_id = remote_id
