"""Tests for the intent dispatcher."""

import pytest

from linkhub.exceptions import LinkNotFoundError
from linkhub.intents import Intent, IntentAction, IntentDispatcher
from linkhub.sync.engine import AppState, SyncEngine
from tests.fakes import FakeRemoteStore


@pytest.fixture
def loaded_engine(session, go_docs):
    rust = dict(go_docs, id="2", title="Rust Book", url="https://rust-lang.org", tags=["rust"])
    return SyncEngine(AppState(session=session), FakeRemoteStore([rust, go_docs]))


@pytest.mark.asyncio
async def test_create_prepends_and_saves(loaded_engine):
    await loaded_engine.load()
    dispatcher = IntentDispatcher(loaded_engine)

    links = await dispatcher.dispatch(
        Intent(
            IntentAction.CREATE,
            fields={"title": "New", "url": "https://n.example", "tags": "a, b"},
        )
    )

    assert links[0].title == "New"
    assert links[0].tags == ["a", "b"]
    assert loaded_engine.store.writes[-1]["message"] == "Add new link to LinkHub"


@pytest.mark.asyncio
async def test_edit_updates_in_place(loaded_engine):
    await loaded_engine.load()
    dispatcher = IntentDispatcher(loaded_engine)

    links = await dispatcher.dispatch(
        Intent(IntentAction.EDIT, link_id="1", fields={"notes": "official docs"})
    )

    assert [link.id for link in links] == ["2", "1"]
    assert links[1].notes == "official docs"
    assert loaded_engine.store.writes[-1]["message"] == "Update link in LinkHub"


@pytest.mark.asyncio
async def test_edit_missing_link_does_not_write(loaded_engine):
    await loaded_engine.load()
    dispatcher = IntentDispatcher(loaded_engine)

    with pytest.raises(LinkNotFoundError):
        await dispatcher.dispatch(Intent(IntentAction.EDIT, link_id="missing-id", fields={}))

    assert loaded_engine.store.writes == []


@pytest.mark.asyncio
async def test_delete_removes_and_saves(loaded_engine):
    await loaded_engine.load()
    dispatcher = IntentDispatcher(loaded_engine)

    links = await dispatcher.dispatch(Intent(IntentAction.DELETE, link_id="2"))

    assert [link.id for link in links] == ["1"]
    assert loaded_engine.store.writes[-1]["message"] == "Remove link from LinkHub"
    assert [r["id"] for r in loaded_engine.store.records] == ["1"]


@pytest.mark.asyncio
async def test_delete_unknown_id_skips_the_network(loaded_engine):
    await loaded_engine.load()
    dispatcher = IntentDispatcher(loaded_engine)

    links = await dispatcher.dispatch(Intent(IntentAction.DELETE, link_id="nope"))

    assert len(links) == 2
    assert loaded_engine.store.writes == []


@pytest.mark.asyncio
async def test_search_and_tag_click_filter_the_view(loaded_engine):
    await loaded_engine.load()
    dispatcher = IntentDispatcher(loaded_engine)

    links = await dispatcher.dispatch(Intent(IntentAction.SEARCH, query="  RUST "))
    assert [link.id for link in links] == ["2"]
    assert loaded_engine.state.query == "RUST"

    links = await dispatcher.dispatch(Intent(IntentAction.TAG_CLICK, query="docs"))
    assert [link.id for link in links] == ["1"]
    assert loaded_engine.state.query == "docs"

    links = await dispatcher.dispatch(Intent(IntentAction.SEARCH, query=""))
    assert len(links) == 2


@pytest.mark.asyncio
async def test_view_after_save_keeps_the_search(loaded_engine):
    await loaded_engine.load()
    dispatcher = IntentDispatcher(loaded_engine)
    await dispatcher.dispatch(Intent(IntentAction.SEARCH, query="go"))

    links = await dispatcher.dispatch(
        Intent(IntentAction.CREATE, fields={"title": "Go by Example", "url": "u"})
    )

    assert [link.title for link in links] == ["Go by Example", "Go Docs"]
