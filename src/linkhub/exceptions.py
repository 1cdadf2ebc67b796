"""Exception hierarchy for LinkHub."""

from typing import Optional


class LinkHubError(Exception):
    """Base class for all LinkHub errors."""


class LinkNotFoundError(LinkHubError):
    """Raised when an operation targets a link id that is not in the list."""

    def __init__(self, link_id: str):
        self.link_id = link_id
        super().__init__(f"Link not found: {link_id}")


class SyncBusyError(LinkHubError):
    """Raised when load or save is requested while another one is running."""


class RemoteStoreError(LinkHubError):
    """A GitHub call failed. ``status`` is the HTTP status, or None for transport errors."""

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


class AuthenticationRequired(RemoteStoreError):
    """Loading failed; the caller should send the user back to the login view."""


class SaveError(RemoteStoreError):
    """Writing the link file failed."""


class ConflictError(SaveError):
    """GitHub rejected the write because the revision token was stale."""
