"""Base64/JSON encoding of the stored link file."""

import base64
import binascii
import json
import logging
from typing import Any, Iterable

logger = logging.getLogger(__name__)


def encode_links(records: Iterable[dict[str, Any]]) -> str:
    """Pretty-print records as a UTF-8 JSON array and base64 it for transport."""
    text = json.dumps(list(records), indent=2, ensure_ascii=False)
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def decode_links(content: str | None) -> list[Any]:
    """Decode the base64 file body into a list.

    GitHub wraps base64 at 60 columns; the line breaks are dropped.
    Undecodable content or a top level that is not an array gives [].
    """
    if not content:
        return []
    try:
        raw = base64.b64decode("".join(content.split()))
        data = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        logger.warning(f"Stored link file is not valid base64 JSON, treating as empty: {e}")
        return []

    if not isinstance(data, list):
        logger.warning(
            f"Stored link file holds {type(data).__name__}, not a list; treating as empty"
        )
        return []
    return data
