"""Explicit cascade deletes.

Plain repository deletes remove a single row and leave dependants behind.
These functions remove a patient or visit together with everything hanging
off it, in a fixed order and in one transaction.
"""

from dataclasses import dataclass, field

from loguru import logger

from clinicpad.events import change_bus

from .connection import connect


@dataclass
class CascadeResult:
    """Rows removed per table, plus image paths that no remaining X-ray row uses."""
    deleted: dict[str, int] = field(default_factory=dict)
    released_files: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(self.deleted.values())


def _unreferenced(conn, paths: list[str]) -> list[str]:
    """Paths, in first-seen order, that no X-ray row still points at."""
    return [
        path for path in dict.fromkeys(paths)
        if conn.execute("SELECT 1 FROM xray WHERE file_path = ? LIMIT 1", (path,)).fetchone() is None
    ]


def delete_patient_cascade(patient_id: int) -> CascadeResult:
    """Delete a patient with its X-rays, visits, notes and history."""
    result = CascadeResult()

    with connect("delete patient cascade") as conn:
        xray_where = "patient_id = ? OR appointment_id IN (SELECT id FROM appointments WHERE patient_id = ?)"
        xray_params = [patient_id, patient_id]
        paths = [
            row["file_path"] for row in conn.execute(f"SELECT file_path FROM xray WHERE {xray_where}", xray_params)
        ]

        steps = [
            ("xray", f"DELETE FROM xray WHERE {xray_where}", xray_params),
            ("appointments", "DELETE FROM appointments WHERE patient_id = ?", [patient_id]),
            ("patient_notes", "DELETE FROM patient_notes WHERE patient_id = ?", [patient_id]),
            ("history", "DELETE FROM history WHERE patient_id = ?", [patient_id]),
            ("patients", "DELETE FROM patients WHERE id = ?", [patient_id]),
        ]
        for table, statement, params in steps:
            result.deleted[table] = conn.execute(statement, params).rowcount
        result.released_files = _unreferenced(conn, paths)

    logger.info(f"Deleted patient {patient_id} with dependants: {result.deleted}")
    for table, count in result.deleted.items():
        if count:
            change_bus.publish(table, patient_id if table == "patients" else None)
    return result


def delete_appointment_cascade(appointment_id: int) -> CascadeResult:
    """Delete a visit together with its X-ray rows."""
    result = CascadeResult()

    with connect("delete appointment cascade") as conn:
        paths = [
            row["file_path"]
            for row in conn.execute("SELECT file_path FROM xray WHERE appointment_id = ?", (appointment_id,))
        ]
        result.deleted["xray"] = conn.execute(
            "DELETE FROM xray WHERE appointment_id = ?", (appointment_id,)
        ).rowcount
        result.deleted["appointments"] = conn.execute(
            "DELETE FROM appointments WHERE id = ?", (appointment_id,)
        ).rowcount
        result.released_files = _unreferenced(conn, paths)

    logger.info(f"Deleted appointment {appointment_id} with dependants: {result.deleted}")
    for table, count in result.deleted.items():
        if count:
            change_bus.publish(table, appointment_id if table == "appointments" else None)
    return result
