"""Display-ready views built from already fetched records.

Every function here is pure: records in, new lists out, no storage access.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime

from clinicpad.codec import clean_legacy_entry, decode_csv, decode_json

HOME_LIST_LIMIT = 3
DETAIL_VISIT_LIMIT = 2


def to_day(value: date | datetime | str | None = None) -> str:
    """Normalize a date-ish value to YYYY-MM-DD. None means today."""
    if value is None:
        return date.today().isoformat()
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value).split("T")[0]


def _visit_key(appointment) -> tuple[str, str]:
    return (to_day(appointment.date), appointment.hour or "")


@dataclass
class VisitSplit:
    upcoming: list = field(default_factory=list)
    recent: list = field(default_factory=list)


def split_upcoming_recent(appointments: Iterable, today=None, limit: int = HOME_LIST_LIMIT) -> VisitSplit:
    """Next visits from today on (soonest first) and past visits (latest first)."""
    day = to_day(today)
    ordered = sorted(appointments, key=_visit_key)
    upcoming = [a for a in ordered if to_day(a.date) >= day]
    recent = [a for a in reversed(ordered) if to_day(a.date) < day]
    return VisitSplit(upcoming=upcoming[:limit], recent=recent[:limit])


def latest_visits(appointments: Iterable, limit: int = DETAIL_VISIT_LIMIT) -> list:
    """Most recent visits first."""
    return sorted(appointments, key=_visit_key, reverse=True)[:limit]


def unique_medications(fields: Iterable[str | list[str] | None]) -> list[str]:
    """Flatten medication lists, dropping blanks and repeats.

    Each field is either a comma-joined string or a list. Repeats are
    detected ignoring case; the first spelling seen is kept.
    """
    seen = set()
    result = []
    for value in fields:
        if value is None:
            continue
        entries = decode_csv(value) if isinstance(value, str) else value
        for entry in entries:
            entry = (entry or "").strip()
            key = entry.casefold()
            if entry and key not in seen:
                seen.add(key)
                result.append(entry)
    return result


@dataclass
class MedicalHistory:
    main_disease: str = ""
    visit_diseases: list[str] = field(default_factory=list)
    history_diseases: list[str] = field(default_factory=list)

    @property
    def combined(self) -> list[str]:
        """Main disease, visit diseases and history diseases without repeats."""
        entries = [self.main_disease] if self.main_disease else []
        entries += self.visit_diseases + self.history_diseases
        return list(dict.fromkeys(entries))


def _clean_entries(values: Iterable[str | None]) -> list[str]:
    cleaned = (clean_legacy_entry(v) for v in values)
    return list(dict.fromkeys(v for v in cleaned if v))


def combined_medical_history(
    main_disease: str | None,
    visit_diseases: Iterable[str | None],
    history_diseases: Iterable[str] | str | None,
) -> MedicalHistory:
    """Everything the patient has been diagnosed with, cleaned for display.

    history_diseases may also be the raw stored JSON text of older rows.
    """
    if isinstance(history_diseases, str):
        history_diseases = decode_json(history_diseases) or decode_csv(clean_legacy_entry(history_diseases))
    return MedicalHistory(
        main_disease=clean_legacy_entry(main_disease),
        visit_diseases=_clean_entries(visit_diseases),
        history_diseases=_clean_entries(history_diseases or []),
    )


def filter_patients(patients: Iterable, query: str = "", sex: str | None = None, source: str | None = None) -> list:
    """Search by full name or AMKA number, then filter by sex and intake source."""
    result = list(patients)
    needle = query.strip()
    if needle:
        lowered = needle.lower()
        result = [
            p for p in result
            if lowered in f"{p.first_name} {p.last_name}".lower() or needle in (p.amka_number or "")
        ]
    if sex:
        result = [p for p in result if p.sex == sex]
    if source:
        result = [p for p in result if p.patient_source == source]
    return result


def filter_appointments(
    appointments: Iterable,
    on_date=None,
    location: str | None = None,
    order: str = "asc",
) -> list:
    """Visit list filters: exact day, location, and date/hour sort order."""
    if order not in ("asc", "desc"):
        raise ValueError(f"order must be 'asc' or 'desc', got {order!r}")
    result = list(appointments)
    if on_date:
        day = to_day(on_date)
        result = [a for a in result if to_day(a.date) == day]
    if location:
        result = [a for a in result if a.location == location]
    return sorted(result, key=_visit_key, reverse=(order == "desc"))


def appointments_on_date(appointments: Iterable, day) -> list:
    """Visits whose stored date starts with the day, by hour."""
    prefix = to_day(day)
    return sorted((a for a in appointments if str(a.date).startswith(prefix)), key=lambda a: a.hour or "")


def marked_dates(appointments: Iterable) -> list[str]:
    """Distinct days that have at least one visit, ascending."""
    return sorted({to_day(a.date) for a in appointments})
