"""Patient medical history: past diseases, medications and allergies."""

import sqlite3
from dataclasses import dataclass, field

from clinicpad.codec import encode_json
from clinicpad.events import change_bus

from .connection import connect
from .schema import HISTORY_ITEM_COLUMNS

HISTORY_KINDS = tuple(HISTORY_ITEM_COLUMNS)


@dataclass
class PatientHistory:
    patient_id: int
    id: int | None = None
    diseases: list[str] = field(default_factory=list)
    medications: list[str] = field(default_factory=list)
    allergies: list[str] = field(default_factory=list)

    def items(self, kind: str) -> list[str]:
        return getattr(self, HISTORY_ITEM_COLUMNS[kind])


class HistoryRepository:
    """Repository for the one-per-patient history row.

    Every mutation rewrites whole arrays, both in history_items and in the
    legacy JSON columns of the history row.
    """

    TABLE = "history"

    def get_for_patient(self, patient_id: int) -> PatientHistory | None:
        """Get the history row without creating one."""
        with connect("get history") as conn:
            row = conn.execute("SELECT * FROM history WHERE patient_id = ?", (patient_id,)).fetchone()
            return self._load(conn, row) if row else None

    def get_or_create(self, patient_id: int) -> PatientHistory:
        """Get the history row, creating an empty one on first access."""
        with connect("get or create history") as conn:
            cursor = conn.execute(
                """INSERT OR IGNORE INTO history (patient_id, diseases, medications, allergies)
                   VALUES (?, '[]', '[]', '[]')""",
                (patient_id,),
            )
            created = cursor.rowcount == 1
            row = conn.execute("SELECT * FROM history WHERE patient_id = ?", (patient_id,)).fetchone()
            history = self._load(conn, row)

        if created:
            change_bus.publish(self.TABLE, history.id)
        return history

    def save(self, history: PatientHistory) -> PatientHistory:
        """Overwrite all three arrays for the patient."""
        if history.id is None:
            history.id = self.get_or_create(history.patient_id).id

        with connect("save history") as conn:
            for kind in HISTORY_KINDS:
                values = [v.strip() for v in history.items(kind) if v and v.strip()]
                setattr(history, HISTORY_ITEM_COLUMNS[kind], values)
                self._replace_items(conn, history.id, kind, values)

        change_bus.publish(self.TABLE, history.id)
        return history

    def add_item(self, patient_id: int, kind: str, value: str) -> PatientHistory:
        """Append a value. Diseases already present are not added twice."""
        history = self.get_or_create(patient_id)
        value = value.strip()
        items = history.items(kind)
        if value and not (kind == "disease" and value in items):
            items.append(value)
            return self.save(history)
        return history

    def remove_item(self, patient_id: int, kind: str, index: int) -> PatientHistory:
        """Remove the value at a position; out-of-range positions are ignored."""
        history = self.get_or_create(patient_id)
        items = history.items(kind)
        if 0 <= index < len(items):
            del items[index]
            return self.save(history)
        return history

    # Private helpers

    def _replace_items(self, conn: sqlite3.Connection, history_id: int, kind: str, values: list[str]) -> None:
        conn.execute("DELETE FROM history_items WHERE history_id = ? AND kind = ?", (history_id, kind))
        conn.executemany(
            "INSERT INTO history_items (history_id, kind, position, value) VALUES (?, ?, ?, ?)",
            [(history_id, kind, i, value) for i, value in enumerate(values)],
        )
        column = HISTORY_ITEM_COLUMNS[kind]
        conn.execute(f"UPDATE history SET {column} = ? WHERE id = ?", (encode_json(values), history_id))

    def _load(self, conn: sqlite3.Connection, row) -> PatientHistory:
        history = PatientHistory(id=row["id"], patient_id=row["patient_id"])
        item_rows = conn.execute(
            "SELECT kind, value FROM history_items WHERE history_id = ? ORDER BY kind, position",
            (history.id,),
        ).fetchall()
        for item in item_rows:
            history.items(item["kind"]).append(item["value"])
        return history
