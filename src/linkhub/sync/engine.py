"""Load and save the link list against the remote store."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..config import Config, Session
from ..exceptions import (
    AuthenticationRequired,
    ConflictError,
    LinkHubError,
    SaveError,
    SyncBusyError,
)
from ..remote.base import BaseRemoteStore, FetchStatus, WriteStatus
from ..remote.client import GitHubContentsClient
from ..remote.codec import decode_links, encode_links
from ..storage.models import Link
from ..storage.repository import LinkRepository
from ..storage.search import filter_links

logger = logging.getLogger(__name__)

LOAD_FAILED = "Failed to load links. Check your connection and credentials."
SAVE_FAILED = "Failed to save links. Check your connection and credentials."


class SyncState(Enum):
    IDLE = "idle"
    LOADING = "loading"
    SAVING = "saving"
    ERROR = "error"


class SaveAction(Enum):
    """Why the list is being saved; the value is the commit message."""

    ADD = "Add new link to LinkHub"
    UPDATE = "Update link in LinkHub"
    DELETE = "Remove link from LinkHub"


@dataclass
class AppState:
    """Everything the application holds in memory for one session."""

    session: Session
    repository: LinkRepository = field(default_factory=LinkRepository)
    query: str = ""
    sync_state: SyncState = SyncState.IDLE
    loaded: bool = False
    last_error: Optional[str] = None

    # Revision token seen on the last successful load or write, for diagnostics.
    # save() never writes against it; it always refetches the current sha.
    sha: Optional[str] = None

    def visible_links(self) -> list[Link]:
        """The list filtered by the current search query."""
        return filter_links(self.repository.list(), self.query)


class SyncEngine:
    """Moves the whole link list between memory and the remote file.

    There is no locking beyond GitHub's revision check: ``save`` fetches the
    current sha right before writing, and a concurrent writer in between makes
    the write fail with a conflict. With ``conflict_retries`` above zero the
    sha is refetched and the same local list is written again, up to that many
    extra times; the default of zero reports the conflict to the caller.
    """

    def __init__(
        self,
        state: AppState,
        store: BaseRemoteStore,
        conflict_retries: int = 0,
    ):
        self.state = state
        self.store = store
        self.conflict_retries = conflict_retries

    @classmethod
    def from_config(cls, config: Config, session: Session) -> "SyncEngine":
        """Engine with an empty list, talking to GitHub with ``session``."""
        store = GitHubContentsClient(
            session,
            file_path=config.file_path,
            api_base_url=config.api_base_url,
            timeout_seconds=config.request_timeout_seconds,
        )
        return cls(AppState(session=session), store, config.conflict_retries)

    @property
    def repository(self) -> LinkRepository:
        return self.state.repository

    async def load(self) -> list[Link]:
        """Replace the in-memory list with the remote file.

        A missing file is the normal first-run case and yields an empty list.

        Raises:
            AuthenticationRequired: on any other failure; the engine is left in ERROR
        """
        self._begin(SyncState.LOADING)
        try:
            result = await self.store.fetch_file()
        except Exception:
            self._fail("Unexpected error while loading links")
            raise

        if result.status == FetchStatus.FOUND:
            self.repository.replace_all(decode_links(result.content))
            self.state.sha = result.sha
            logger.info(f"Loaded {len(self.repository)} links (sha {result.sha})")
        elif result.status == FetchStatus.NOT_FOUND:
            self.repository.replace_all([])
            self.state.sha = None
            logger.info("No link file yet, starting with an empty list")
        else:
            message = f"{LOAD_FAILED} ({result.error})"
            self._fail(message)
            raise AuthenticationRequired(message, status=result.http_status)

        self.state.loaded = True
        self._finish()
        return self.repository.list()

    async def save(self, action: SaveAction = SaveAction.UPDATE) -> list[Link]:
        """Write the whole in-memory list, then reload it from the remote file.

        On failure the in-memory list keeps the local change that was being saved.

        Raises:
            ConflictError: the revision token went stale and retries ran out
            SaveError: any other failure; the engine is left in ERROR
        """
        self._begin(SyncState.SAVING)
        try:
            new_sha = await self._write(action)
        except LinkHubError as e:
            self._fail(str(e))
            raise
        except Exception:
            self._fail("Unexpected error while saving links")
            raise

        self.state.sha = new_sha
        self._finish()
        logger.info(f"Saved {len(self.repository)} links ({action.name.lower()})")
        return await self.load()

    async def _write(self, action: SaveAction) -> Optional[str]:
        sha = await self._current_sha()
        content = encode_links(link.to_dict() for link in self.repository.list())

        attempt = 0
        while True:
            result = await self.store.write_file(content, sha=sha, message=action.value)
            if result.status == WriteStatus.SUCCESS:
                return result.sha

            if result.status == WriteStatus.CONFLICT:
                if attempt < self.conflict_retries:
                    attempt += 1
                    logger.warning(
                        f"Revision conflict on save, refetching sha "
                        f"(retry {attempt}/{self.conflict_retries})"
                    )
                    sha = await self._current_sha()
                    continue
                raise ConflictError(
                    "The link file changed on GitHub since it was loaded. "
                    f"Reload and try again. ({result.error})",
                    status=result.http_status,
                )

            raise SaveError(
                f"{SAVE_FAILED} ({result.error})",
                status=result.http_status,
            )

    async def _current_sha(self) -> Optional[str]:
        """Revision token to write against; None means create the file."""
        result = await self.store.fetch_file()
        if result.status == FetchStatus.FOUND:
            return result.sha
        if result.status == FetchStatus.NOT_FOUND:
            return None
        raise SaveError(
            f"{SAVE_FAILED} ({result.error})",
            status=result.http_status,
        )

    def _begin(self, target: SyncState) -> None:
        if self.state.sync_state in (SyncState.LOADING, SyncState.SAVING):
            raise SyncBusyError(
                f"Cannot start {target.value}: already {self.state.sync_state.value}"
            )
        logger.debug(f"Sync state {self.state.sync_state.value} -> {target.value}")
        self.state.sync_state = target

    def _finish(self) -> None:
        logger.debug(f"Sync state {self.state.sync_state.value} -> idle")
        self.state.sync_state = SyncState.IDLE
        self.state.last_error = None

    def _fail(self, message: str) -> None:
        logger.error(message)
        self.state.sync_state = SyncState.ERROR
        self.state.last_error = message
