"""Bundled ICD-10 diagnosis reference list.

Loaded once from clinicpad/data/icd10_codes.json and never written.
"""

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from loguru import logger

CODES_PATH = Path(__file__).parent / "data" / "icd10_codes.json"
SEARCH_LIMIT = 10


@dataclass(frozen=True)
class DiagnosisCode:
    code: str
    desc: str

    @property
    def label(self) -> str:
        """Form stored on visits and in history, e.g. "I10 - Essential (primary) hypertension"."""
        return f"{self.code} - {self.desc}"


@lru_cache(maxsize=1)
def load_codes() -> tuple[DiagnosisCode, ...]:
    """Load the reference list once."""
    with CODES_PATH.open("r", encoding="utf-8") as f:
        data = json.load(f)
    codes = tuple(DiagnosisCode(code=item["code"], desc=item["desc"]) for item in data)
    logger.debug(f"Loaded {len(codes)} diagnosis codes from {CODES_PATH.name}")
    return codes


def search_codes(query: str | None, limit: int = SEARCH_LIMIT) -> list[DiagnosisCode]:
    """Codes starting with the query, or whose description contains it.

    Matching ignores case. An empty query returns the head of the list.
    """
    codes = load_codes()
    needle = (query or "").strip().upper()
    if not needle:
        return list(codes[:limit])

    matches = []
    for item in codes:
        if item.code.upper().startswith(needle) or needle in item.desc.upper():
            matches.append(item)
            if len(matches) >= limit:
                break
    return matches


def lookup(code: str) -> DiagnosisCode | None:
    """Exact code lookup."""
    wanted = code.strip().upper()
    return next((item for item in load_codes() if item.code.upper() == wanted), None)
