"""Patient repository with CRUD operations."""

from dataclasses import dataclass

from clinicpad.errors import NotFoundError
from clinicpad.events import change_bus

from .connection import connect


@dataclass
class Patient:
    first_name: str
    last_name: str
    id: int | None = None
    doctor_id: int | None = None
    amka_number: str | None = None
    sex: str | None = None
    date_of_birth: str | None = None
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    postal_code: str | None = None
    city: str | None = None
    main_disease: str | None = None
    patient_source: str | None = None
    created_at: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class PatientRepository:
    """Repository for patient CRUD operations.

    Deleting a patient leaves its visits, X-rays, notes and history rows in
    place; use cleanup.delete_patient_cascade to remove them too.
    """

    TABLE = "patients"

    # Fields that can be updated
    PATIENT_FIELDS = [
        "doctor_id", "first_name", "last_name", "amka_number", "sex",
        "date_of_birth", "phone", "email", "address", "postal_code", "city",
        "main_disease", "patient_source",
    ]

    def create(self, patient: Patient) -> Patient:
        """Insert a new patient and return it with its id."""
        columns = ", ".join(self.PATIENT_FIELDS)
        placeholders = ", ".join("?" for _ in self.PATIENT_FIELDS)
        with connect("create patient") as conn:
            cursor = conn.execute(
                f"INSERT INTO patients ({columns}) VALUES ({placeholders})",
                [getattr(patient, field) for field in self.PATIENT_FIELDS],
            )
            patient.id = cursor.lastrowid
            row = conn.execute("SELECT created_at FROM patients WHERE id = ?", (patient.id,)).fetchone()
            patient.created_at = row["created_at"]

        change_bus.publish(self.TABLE, patient.id)
        return patient

    def get_by_id(self, patient_id: int) -> Patient | None:
        """Get a patient by ID."""
        with connect("get patient") as conn:
            row = conn.execute("SELECT * FROM patients WHERE id = ?", (patient_id,)).fetchone()
        return self._row_to_patient(row) if row else None

    def require(self, patient_id: int) -> Patient:
        """Get a patient by ID or raise NotFoundError."""
        patient = self.get_by_id(patient_id)
        if patient is None:
            raise NotFoundError(f"Patient {patient_id} not found")
        return patient

    def list_for_doctor(self, doctor_id: int) -> list[Patient]:
        """All patients owned by a doctor."""
        with connect("list patients") as conn:
            rows = conn.execute(
                "SELECT * FROM patients WHERE doctor_id = ? ORDER BY last_name, first_name",
                (doctor_id,),
            ).fetchall()
        return [self._row_to_patient(row) for row in rows]

    def list_all(self) -> list[Patient]:
        with connect("list patients") as conn:
            rows = conn.execute("SELECT * FROM patients ORDER BY last_name, first_name").fetchall()
        return [self._row_to_patient(row) for row in rows]

    def update(self, patient_id: int, updates: dict) -> Patient | None:
        """Update patient fields. A missing patient is not an error."""
        valid_updates = {k: v for k, v in updates.items() if k in self.PATIENT_FIELDS}

        if valid_updates:
            set_clause = ", ".join(f"{field} = ?" for field in valid_updates)
            values = list(valid_updates.values()) + [patient_id]
            with connect("update patient") as conn:
                conn.execute(f"UPDATE patients SET {set_clause} WHERE id = ?", values)
            change_bus.publish(self.TABLE, patient_id)

        return self.get_by_id(patient_id)

    def delete(self, patient_id: int) -> None:
        """Delete the patient row only."""
        with connect("delete patient") as conn:
            conn.execute("DELETE FROM patients WHERE id = ?", (patient_id,))
        change_bus.publish(self.TABLE, patient_id)

    def _row_to_patient(self, row) -> Patient:
        """Convert a database row to a Patient object."""
        return Patient(
            id=row["id"],
            doctor_id=row["doctor_id"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            amka_number=row["amka_number"],
            sex=row["sex"],
            date_of_birth=row["date_of_birth"],
            phone=row["phone"],
            email=row["email"],
            address=row["address"],
            postal_code=row["postal_code"],
            city=row["city"],
            main_disease=row["main_disease"],
            patient_source=row["patient_source"],
            created_at=row["created_at"],
        )
