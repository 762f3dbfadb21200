"""Extraction of JSON objects from model output."""

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"```json\n?|\n?```")


def extract_json(content: str | None, strict: bool = False) -> dict[str, Any] | None:
    """Extract a JSON object from model output.

    Strips surrounding whitespace and markdown code-fence markers. With
    ``strict``, prose outside the outermost braces is dropped as well (text
    from the first ``{`` to the last ``}`` is kept).

    Args:
        content: Raw text returned by the model
        strict: Also cut leading/trailing prose around the object

    Returns:
        The decoded object, or None if no JSON object could be decoded
    """
    if not content:
        return None

    clean = _CODE_FENCE.sub("", content.strip()).strip()

    if strict:
        start = clean.find("{")
        end = clean.rfind("}")
        if start == -1 or end < start:
            return None
        clean = clean[start : end + 1]

    try:
        data = json.loads(clean)
    except json.JSONDecodeError as e:
        logger.debug(f"JSON decode failed: {e}")
        return None

    if not isinstance(data, dict):
        return None
    return data
