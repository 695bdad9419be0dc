"""Note repositories: the doctor's scratchpad and per-patient notes."""

from dataclasses import dataclass

from clinicpad.events import change_bus

from .connection import connect


@dataclass
class Note:
    title: str
    description: str
    id: int | None = None
    created_at: str | None = None


@dataclass
class PatientNote:
    patient_id: int
    title: str
    description: str
    id: int | None = None
    created_at: str | None = None


class NoteRepository:
    """Standalone notes, newest first."""

    TABLE = "notes"

    def create(self, note: Note) -> Note:
        with connect("create note") as conn:
            cursor = conn.execute(
                "INSERT INTO notes (title, description) VALUES (?, ?)",
                (note.title, note.description),
            )
            note.id = cursor.lastrowid
        change_bus.publish(self.TABLE, note.id)
        return note

    def get_by_id(self, note_id: int) -> Note | None:
        with connect("get note") as conn:
            row = conn.execute("SELECT * FROM notes WHERE id = ?", (note_id,)).fetchone()
        return self._row_to_note(row) if row else None

    def list_all(self) -> list[Note]:
        with connect("list notes") as conn:
            rows = conn.execute("SELECT * FROM notes ORDER BY id DESC").fetchall()
        return [self._row_to_note(row) for row in rows]

    def update(self, note_id: int, title: str, description: str) -> Note | None:
        with connect("update note") as conn:
            conn.execute(
                "UPDATE notes SET title = ?, description = ? WHERE id = ?",
                (title, description, note_id),
            )
        change_bus.publish(self.TABLE, note_id)
        return self.get_by_id(note_id)

    def delete(self, note_id: int) -> None:
        with connect("delete note") as conn:
            conn.execute("DELETE FROM notes WHERE id = ?", (note_id,))
        change_bus.publish(self.TABLE, note_id)

    def _row_to_note(self, row) -> Note:
        return Note(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            created_at=row["created_at"],
        )


class PatientNoteRepository:
    """Notes attached to a patient."""

    TABLE = "patient_notes"

    def create(self, note: PatientNote) -> PatientNote:
        with connect("create patient note") as conn:
            cursor = conn.execute(
                "INSERT INTO patient_notes (patient_id, title, description) VALUES (?, ?, ?)",
                (note.patient_id, note.title, note.description),
            )
            note.id = cursor.lastrowid
        change_bus.publish(self.TABLE, note.id)
        return note

    def get_by_id(self, note_id: int) -> PatientNote | None:
        with connect("get patient note") as conn:
            row = conn.execute("SELECT * FROM patient_notes WHERE id = ?", (note_id,)).fetchone()
        return self._row_to_note(row) if row else None

    def list_for_patient(self, patient_id: int) -> list[PatientNote]:
        with connect("list patient notes") as conn:
            rows = conn.execute(
                "SELECT * FROM patient_notes WHERE patient_id = ? ORDER BY id DESC", (patient_id,)
            ).fetchall()
        return [self._row_to_note(row) for row in rows]

    def update(self, note_id: int, title: str, description: str) -> PatientNote | None:
        with connect("update patient note") as conn:
            conn.execute(
                "UPDATE patient_notes SET title = ?, description = ? WHERE id = ?",
                (title, description, note_id),
            )
        change_bus.publish(self.TABLE, note_id)
        return self.get_by_id(note_id)

    def delete(self, note_id: int) -> None:
        with connect("delete patient note") as conn:
            conn.execute("DELETE FROM patient_notes WHERE id = ?", (note_id,))
        change_bus.publish(self.TABLE, note_id)

    def _row_to_note(self, row) -> PatientNote:
        return PatientNote(
            id=row["id"],
            patient_id=row["patient_id"],
            title=row["title"],
            description=row["description"],
            created_at=row["created_at"],
        )
