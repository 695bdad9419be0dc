"""X-ray attachment repository. Rows hold a file path, never image bytes."""

from dataclasses import dataclass

from clinicpad.events import change_bus

from .connection import connect


@dataclass
class XrayAttachment:
    file_path: str
    id: int | None = None
    patient_id: int | None = None
    appointment_id: int | None = None
    description: str | None = None
    appointment_date: str | None = None
    created_at: str | None = None


class XrayRepository:
    """Repository for X-ray attachments."""

    TABLE = "xray"

    def create(self, xray: XrayAttachment) -> XrayAttachment:
        with connect("create xray") as conn:
            cursor = conn.execute(
                """INSERT INTO xray (patient_id, appointment_id, file_path, description, appointment_date)
                   VALUES (?, ?, ?, ?, ?)""",
                (xray.patient_id, xray.appointment_id, xray.file_path, xray.description, xray.appointment_date),
            )
            xray.id = cursor.lastrowid

        change_bus.publish(self.TABLE, xray.id)
        return xray

    def get_by_id(self, xray_id: int) -> XrayAttachment | None:
        with connect("get xray") as conn:
            row = conn.execute("SELECT * FROM xray WHERE id = ?", (xray_id,)).fetchone()
        return self._row_to_xray(row) if row else None

    def list_for_appointment(self, appointment_id: int) -> list[XrayAttachment]:
        with connect("list xrays") as conn:
            rows = conn.execute(
                "SELECT * FROM xray WHERE appointment_id = ? ORDER BY id", (appointment_id,)
            ).fetchall()
        return [self._row_to_xray(row) for row in rows]

    def list_for_patient(self, patient_id: int) -> list[XrayAttachment]:
        """Patient X-rays, dated by their visit when they belong to one."""
        with connect("list xrays") as conn:
            rows = conn.execute(
                """SELECT x.*, COALESCE(a.date, x.appointment_date) AS visit_date
                   FROM xray x
                   LEFT JOIN appointments a ON x.appointment_id = a.id
                   WHERE x.patient_id = ?
                   ORDER BY x.id""",
                (patient_id,),
            ).fetchall()
        return [self._row_to_xray(row) for row in rows]

    def delete(self, xray_id: int) -> None:
        """Delete the row. The image file is left on disk."""
        with connect("delete xray") as conn:
            conn.execute("DELETE FROM xray WHERE id = ?", (xray_id,))
        change_bus.publish(self.TABLE, xray_id)

    def _row_to_xray(self, row) -> XrayAttachment:
        keys = row.keys()
        return XrayAttachment(
            id=row["id"],
            patient_id=row["patient_id"],
            appointment_id=row["appointment_id"],
            file_path=row["file_path"],
            description=row["description"],
            appointment_date=row["visit_date"] if "visit_date" in keys else row["appointment_date"],
            created_at=row["created_at"],
        )
