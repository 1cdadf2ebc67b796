"""Abstract interface for the remote link file store."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class FetchStatus(Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    FAILED = "failed"


class WriteStatus(Enum):
    SUCCESS = "success"
    CONFLICT = "conflict"
    FAILED = "failed"


@dataclass
class FetchResult:
    """Result of reading the link file."""

    status: FetchStatus
    content: Optional[str] = None
    sha: Optional[str] = None
    http_status: Optional[int] = None
    error: Optional[str] = None


@dataclass
class WriteResult:
    """Result of writing the link file."""

    status: WriteStatus
    sha: Optional[str] = None
    http_status: Optional[int] = None
    error: Optional[str] = None


class BaseRemoteStore(ABC):
    """A single file with a revision token, read and written as a whole."""

    @abstractmethod
    async def fetch_file(self) -> FetchResult:
        """Read the file and its current revision token."""
        pass

    @abstractmethod
    async def write_file(
        self,
        content: str,
        sha: Optional[str] = None,
        message: str = "Update LinkHub data",
    ) -> WriteResult:
        """Write base64 content; ``sha`` None creates the file."""
        pass
