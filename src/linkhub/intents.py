"""User intents and the dispatcher that applies them to the core."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from .exceptions import LinkNotFoundError
from .storage.models import Link
from .sync.engine import SaveAction, SyncEngine

logger = logging.getLogger(__name__)


class IntentAction(Enum):
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"
    SEARCH = "search"
    TAG_CLICK = "tag-click"


@dataclass
class Intent:
    """One user action coming from a presentation layer."""

    action: IntentAction
    link_id: Optional[str] = None
    fields: dict[str, Any] = field(default_factory=dict)
    query: Optional[str] = None


class IntentDispatcher:
    """Routes intents by action type; returns the list to render afterwards."""

    def __init__(self, engine: SyncEngine):
        self.engine = engine
        self._handlers: dict[IntentAction, Callable[[Intent], Awaitable[None]]] = {
            IntentAction.CREATE: self._create,
            IntentAction.EDIT: self._edit,
            IntentAction.DELETE: self._delete,
            IntentAction.SEARCH: self._search,
            IntentAction.TAG_CLICK: self._search,
        }

    async def dispatch(self, intent: Intent) -> list[Link]:
        logger.debug(f"Dispatching {intent.action.value} intent")
        await self._handlers[intent.action](intent)
        return self.engine.state.visible_links()

    async def _create(self, intent: Intent) -> None:
        self.engine.repository.add(intent.fields)
        await self.engine.save(SaveAction.ADD)

    async def _edit(self, intent: Intent) -> None:
        if intent.link_id is None:
            raise LinkNotFoundError("")
        self.engine.repository.update(intent.link_id, intent.fields)
        await self.engine.save(SaveAction.UPDATE)

    async def _delete(self, intent: Intent) -> None:
        if intent.link_id is None or not self.engine.repository.remove(intent.link_id):
            logger.info(f"Nothing to delete for id {intent.link_id}")
            return
        await self.engine.save(SaveAction.DELETE)

    async def _search(self, intent: Intent) -> None:
        self.engine.state.query = (intent.query or "").strip()
