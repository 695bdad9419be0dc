"""Encoding of multi-value fields stored inside single text columns.

Two encodings are in use:

- comma-joined text for visit diseases and medications
  (``"Aspirin, Ibuprofen"``), which is lossy for values containing commas;
- JSON array literals for the patient history arrays
  (``'["Penicillin", "Latex"]'``).
"""

import json
from collections.abc import Iterable

from loguru import logger

CSV_SEPARATOR = ", "
LEGACY_DISPLAY_CHARS = '[]"'


def encode_csv(values: Iterable[str] | None) -> str:
    """Trim each value, drop empties and join with ", "."""
    if not values:
        return ""
    return CSV_SEPARATOR.join(v.strip() for v in values if v and v.strip())


def decode_csv(text: str | None) -> list[str]:
    """Split on commas, trim and drop empties."""
    if not text:
        return []
    return [part.strip() for part in text.split(",") if part.strip()]


def encode_json(values: Iterable[str] | None) -> str:
    """Serialize a list of strings to a JSON array literal."""
    return json.dumps(list(values or []))


def decode_json(text: str | None) -> list[str]:
    """Parse a JSON array of strings. Never raises; bad input gives []."""
    if not text:
        return []
    try:
        data = json.loads(text)
    except (ValueError, TypeError) as e:
        logger.debug(f"Could not decode JSON list {text!r}: {e}")
        return []
    if not isinstance(data, list):
        logger.debug(f"Expected a JSON list, got {type(data).__name__}")
        return []
    return [item if isinstance(item, str) else str(item) for item in data if item is not None]


def clean_legacy_entry(text: str | None) -> str:
    """Strip brackets and quotes that leaked into older stored values."""
    if not text:
        return ""
    for char in LEGACY_DISPLAY_CHARS:
        text = text.replace(char, "")
    return text.strip()
