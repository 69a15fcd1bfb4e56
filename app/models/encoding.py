"""
Encoding of list-valued proposal columns.

Lists cross the database boundary as JSON array text. Decoding never raises:
legacy or hand-edited rows with broken text read back as an empty list so the
proposal page still renders.
"""
import json
import logging
from typing import Any, Iterable, List, Optional

logger = logging.getLogger("proposal_server.encoding")


def encode_list(values: Optional[Iterable[Any]]) -> str:
    if values is None:
        return "[]"
    return json.dumps(list(values), ensure_ascii=False)


def decode_list(text: Optional[str]) -> List[Any]:
    if text is None or text == "":
        return []
    try:
        value = json.loads(text)
    except (TypeError, ValueError) as e:
        logger.warning(f"Failed to decode list column {text[:40]!r}: {e}")
        return []
    if not isinstance(value, list):
        logger.warning(f"List column holds a {type(value).__name__}, not a list")
        return []
    return value
