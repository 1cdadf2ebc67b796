"""Tests for link record models."""

from datetime import datetime, timezone

from linkhub.storage.models import Link, clean_tags, parse_tags, utc_timestamp


def test_utc_timestamp_matches_stored_format():
    now = datetime(2024, 3, 5, 7, 8, 9, 123456, tzinfo=timezone.utc)
    assert utc_timestamp(now) == "2024-03-05T07:08:09.123Z"


def test_parse_tags_trims_and_drops_empty():
    assert parse_tags(" go,  docs , ,web,") == ["go", "docs", "web"]
    assert parse_tags("") == []
    assert parse_tags(None) == []


def test_clean_tags_accepts_lists_and_strings():
    assert clean_tags([" a ", "", "b"]) == ["a", "b"]
    assert clean_tags("a, b") == ["a", "b"]
    assert clean_tags(None) == []


def test_from_dict_uses_camel_case_keys(go_docs):
    link = Link.from_dict(go_docs)

    assert link.id == "1"
    assert link.tags == ["go", "docs"]
    assert link.created_at == go_docs["createdAt"]
    assert link.to_dict() == go_docs


def test_unknown_keys_survive_a_round_trip(go_docs):
    record = dict(go_docs, favorite=True)
    link = Link.from_dict(record)

    assert link.extra == {"favorite": True}
    assert link.to_dict()["favorite"] is True


def test_from_dict_fills_defaults_for_missing_fields():
    link = Link.from_dict({"id": 7, "title": "Bare"})

    assert link.id == "7"
    assert link.url == ""
    assert link.tags == []
    assert link.notes == ""


def test_null_id_is_empty_not_none():
    assert Link.from_dict({"id": None, "title": "A"}).id == ""
    assert Link.from_dict({"title": "B"}).id == ""
