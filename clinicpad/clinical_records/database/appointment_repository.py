"""Appointment (visit) repository with disease and medication lists."""

import sqlite3
from dataclasses import dataclass, field

from clinicpad.codec import encode_csv
from clinicpad.events import change_bus

from .connection import connect
from .schema import APPOINTMENT_ITEM_COLUMNS

# Stay well under SQLite's host parameter limit
_IN_CHUNK = 500


@dataclass
class Appointment:
    patient_id: int
    date: str
    hour: str
    id: int | None = None
    patient_name: str | None = None
    location: str | None = None
    description: str | None = None
    visit_diseases: list[str] = field(default_factory=list)
    medications: list[str] = field(default_factory=list)
    note: str | None = None
    created_at: str | None = None


def _clean(values) -> list[str]:
    return [v.strip() for v in values or [] if v and v.strip()]


class AppointmentRepository:
    """Repository for visits.

    Visit diseases and medications live one row per value in
    appointment_items. The legacy comma-joined columns are rewritten from the
    same list in the same transaction.
    """

    TABLE = "appointments"

    # Scalar fields that can be updated
    APPOINTMENT_FIELDS = ["patient_id", "patient_name", "date", "hour", "location", "description", "note"]

    def create(self, appointment: Appointment) -> Appointment:
        """Insert a visit and return it with its id."""
        appointment.visit_diseases = _clean(appointment.visit_diseases)
        appointment.medications = _clean(appointment.medications)

        with connect("create appointment") as conn:
            cursor = conn.execute(
                """INSERT INTO appointments
                   (patient_id, patient_name, date, hour, location, description, note)
                   VALUES (?, ?, ?, ?, ?, ?, ?)""",
                (
                    appointment.patient_id, appointment.patient_name, appointment.date,
                    appointment.hour, appointment.location, appointment.description,
                    appointment.note,
                ),
            )
            appointment.id = cursor.lastrowid
            self._replace_items(conn, appointment.id, "disease", appointment.visit_diseases)
            self._replace_items(conn, appointment.id, "medication", appointment.medications)
            row = conn.execute("SELECT created_at FROM appointments WHERE id = ?", (appointment.id,)).fetchone()
            appointment.created_at = row["created_at"]

        change_bus.publish(self.TABLE, appointment.id)
        return appointment

    def get_by_id(self, appointment_id: int) -> Appointment | None:
        """Get a visit by ID."""
        with connect("get appointment") as conn:
            row = conn.execute("SELECT * FROM appointments WHERE id = ?", (appointment_id,)).fetchone()
            if not row:
                return None
            return self._load(conn, [row])[0]

    def list_for_patient(
        self,
        patient_id: int,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Appointment]:
        """Visits for a patient ordered by date then hour."""
        direction = "DESC" if descending else "ASC"
        query = f"SELECT * FROM appointments WHERE patient_id = ? ORDER BY date {direction}, hour {direction}"
        params: list = [patient_id]
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        with connect("list appointments") as conn:
            rows = conn.execute(query, params).fetchall()
            return self._load(conn, rows)

    def list_with_patients(self) -> list[Appointment]:
        """All visits with the current patient name, ordered by date then hour."""
        with connect("list appointments") as conn:
            rows = conn.execute(
                """SELECT a.*,
                          COALESCE(p.first_name || ' ' || p.last_name, a.patient_name) AS joined_name
                   FROM appointments a
                   LEFT JOIN patients p ON a.patient_id = p.id
                   ORDER BY a.date, a.hour"""
            ).fetchall()
            return self._load(conn, rows)

    def list_on_date(self, day: str) -> list[Appointment]:
        """Visits whose date starts with the given YYYY-MM-DD day."""
        with connect("list appointments") as conn:
            rows = conn.execute(
                """SELECT a.*,
                          COALESCE(p.first_name || ' ' || p.last_name, a.patient_name) AS joined_name
                   FROM appointments a
                   LEFT JOIN patients p ON a.patient_id = p.id
                   WHERE substr(a.date, 1, 10) = ?
                   ORDER BY a.hour""",
                (day,),
            ).fetchall()
            return self._load(conn, rows)

    def update(self, appointment_id: int, updates: dict) -> Appointment | None:
        """Update scalar fields and/or the disease and medication lists."""
        scalar_updates = {k: v for k, v in updates.items() if k in self.APPOINTMENT_FIELDS}

        with connect("update appointment") as conn:
            exists = conn.execute("SELECT 1 FROM appointments WHERE id = ?", (appointment_id,)).fetchone()
            if exists:
                if scalar_updates:
                    set_clause = ", ".join(f"{field} = ?" for field in scalar_updates)
                    conn.execute(
                        f"UPDATE appointments SET {set_clause} WHERE id = ?",
                        list(scalar_updates.values()) + [appointment_id],
                    )
                if "visit_diseases" in updates:
                    self._replace_items(conn, appointment_id, "disease", _clean(updates["visit_diseases"]))
                if "medications" in updates:
                    self._replace_items(conn, appointment_id, "medication", _clean(updates["medications"]))

        if exists:
            change_bus.publish(self.TABLE, appointment_id)
        return self.get_by_id(appointment_id)

    def delete(self, appointment_id: int) -> None:
        """Delete a visit. Its X-ray rows are left in place."""
        with connect("delete appointment") as conn:
            conn.execute("DELETE FROM appointments WHERE id = ?", (appointment_id,))
        change_bus.publish(self.TABLE, appointment_id)

    # Note

    def set_note(self, appointment_id: int, note: str) -> None:
        """Replace the visit note."""
        with connect("update appointment note") as conn:
            conn.execute("UPDATE appointments SET note = ? WHERE id = ?", (note.strip(), appointment_id))
        change_bus.publish(self.TABLE, appointment_id)

    # Visit diseases

    def get_visit_diseases(self, appointment_id: int) -> list[str]:
        with connect("get visit diseases") as conn:
            return self._get_items(conn, appointment_id, "disease")

    def set_visit_diseases(self, appointment_id: int, labels: list[str]) -> list[str]:
        return self._set_list(appointment_id, "disease", labels)

    def toggle_visit_disease(self, appointment_id: int, label: str) -> list[str]:
        """Add the label if absent, remove it if present."""
        label = label.strip()
        current = self.get_visit_diseases(appointment_id)
        if label in current:
            updated = [d for d in current if d != label]
        else:
            updated = current + [label]
        return self.set_visit_diseases(appointment_id, updated)

    def distinct_visit_diseases(self, patient_id: int) -> list[str]:
        """Every disease label recorded on the patient's visits, first-seen order."""
        with connect("list visit diseases") as conn:
            rows = conn.execute(
                """SELECT i.value
                   FROM appointment_items i
                   JOIN appointments a ON a.id = i.appointment_id
                   WHERE a.patient_id = ? AND i.kind = 'disease'
                   ORDER BY a.date, a.hour, a.id, i.position""",
                (patient_id,),
            ).fetchall()
        return list(dict.fromkeys(row["value"] for row in rows))

    # Medications

    def get_medications(self, appointment_id: int) -> list[str]:
        with connect("get medications") as conn:
            return self._get_items(conn, appointment_id, "medication")

    def set_medications(self, appointment_id: int, medications: list[str]) -> list[str]:
        return self._set_list(appointment_id, "medication", medications)

    def add_medication(self, appointment_id: int, medication: str) -> list[str]:
        current = self.get_medications(appointment_id)
        return self.set_medications(appointment_id, current + [medication])

    def remove_medication(self, appointment_id: int, medication: str) -> list[str]:
        """Remove every entry equal to the medication after trimming."""
        target = medication.strip()
        current = self.get_medications(appointment_id)
        return self.set_medications(appointment_id, [m for m in current if m.strip() != target])

    # Private helpers

    def _set_list(self, appointment_id: int, kind: str, values: list[str]) -> list[str]:
        values = _clean(values)
        with connect(f"update appointment {kind} list") as conn:
            exists = conn.execute("SELECT 1 FROM appointments WHERE id = ?", (appointment_id,)).fetchone()
            if exists:
                self._replace_items(conn, appointment_id, kind, values)
        if not exists:
            return []
        change_bus.publish(self.TABLE, appointment_id)
        return values

    def _replace_items(self, conn: sqlite3.Connection, appointment_id: int, kind: str, values: list[str]) -> None:
        """Overwrite one list in both the item table and the legacy column."""
        conn.execute(
            "DELETE FROM appointment_items WHERE appointment_id = ? AND kind = ?",
            (appointment_id, kind),
        )
        conn.executemany(
            "INSERT INTO appointment_items (appointment_id, kind, position, value) VALUES (?, ?, ?, ?)",
            [(appointment_id, kind, i, value) for i, value in enumerate(values)],
        )
        column = APPOINTMENT_ITEM_COLUMNS[kind]
        conn.execute(f"UPDATE appointments SET {column} = ? WHERE id = ?", (encode_csv(values), appointment_id))

    def _get_items(self, conn: sqlite3.Connection, appointment_id: int, kind: str) -> list[str]:
        rows = conn.execute(
            "SELECT value FROM appointment_items WHERE appointment_id = ? AND kind = ? ORDER BY position",
            (appointment_id, kind),
        ).fetchall()
        return [row["value"] for row in rows]

    def _load(self, conn: sqlite3.Connection, rows) -> list[Appointment]:
        """Convert rows and attach their item lists in one query per chunk."""
        appointments = [self._row_to_appointment(row) for row in rows]
        by_id = {a.id: a for a in appointments}
        ids = list(by_id)

        for start in range(0, len(ids), _IN_CHUNK):
            chunk = ids[start:start + _IN_CHUNK]
            placeholders = ", ".join("?" for _ in chunk)
            item_rows = conn.execute(
                f"""SELECT appointment_id, kind, value FROM appointment_items
                    WHERE appointment_id IN ({placeholders})
                    ORDER BY appointment_id, kind, position""",
                chunk,
            ).fetchall()
            for item in item_rows:
                appointment = by_id[item["appointment_id"]]
                if item["kind"] == "disease":
                    appointment.visit_diseases.append(item["value"])
                else:
                    appointment.medications.append(item["value"])

        return appointments

    def _row_to_appointment(self, row) -> Appointment:
        """Convert a database row to an Appointment object."""
        keys = row.keys()
        patient_name = row["joined_name"] if "joined_name" in keys else row["patient_name"]
        return Appointment(
            id=row["id"],
            patient_id=row["patient_id"],
            patient_name=patient_name,
            date=row["date"],
            hour=row["hour"],
            location=row["location"],
            description=row["description"],
            note=row["note"],
            created_at=row["created_at"],
        )
