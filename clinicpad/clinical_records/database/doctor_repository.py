"""Doctor repository: registration, login lookup and profile edits."""

from dataclasses import dataclass

from clinicpad.events import change_bus

from .connection import connect


@dataclass
class Doctor:
    first_name: str
    last_name: str
    email: str
    password: str
    id: int | None = None
    profile_image: str | None = None
    created_at: str | None = None

    @property
    def display_name(self) -> str:
        return f"Dr. {self.first_name} {self.last_name}"


class DoctorRepository:
    """Repository for doctor accounts. Doctors are never deleted."""

    TABLE = "doctors"

    PROFILE_FIELDS = ["first_name", "last_name", "email", "password", "profile_image"]

    def create(self, doctor: Doctor) -> Doctor:
        """Register a doctor. A duplicate email, in any letter case, raises ConstraintError."""
        with connect("register doctor") as conn:
            cursor = conn.execute(
                """INSERT INTO doctors (first_name, last_name, email, password, profile_image)
                   VALUES (?, ?, ?, ?, ?)""",
                (doctor.first_name, doctor.last_name, doctor.email, doctor.password, doctor.profile_image),
            )
            doctor.id = cursor.lastrowid

        change_bus.publish(self.TABLE, doctor.id)
        return doctor

    def get_by_id(self, doctor_id: int) -> Doctor | None:
        with connect("get doctor") as conn:
            row = conn.execute("SELECT * FROM doctors WHERE id = ?", (doctor_id,)).fetchone()
        return self._row_to_doctor(row) if row else None

    def find_by_email(self, email: str) -> Doctor | None:
        with connect("find doctor") as conn:
            row = conn.execute(
                "SELECT * FROM doctors WHERE email = ? COLLATE NOCASE", (email.strip(),)
            ).fetchone()
        return self._row_to_doctor(row) if row else None

    def authenticate(self, email: str, password: str) -> Doctor | None:
        """Return the doctor whose email and password match, if any."""
        doctor = self.find_by_email(email)
        if doctor and doctor.password == password:
            return doctor
        return None

    def update_profile(self, doctor_id: int, updates: dict) -> Doctor | None:
        """Update profile fields. A missing doctor is not an error."""
        valid_updates = {k: v for k, v in updates.items() if k in self.PROFILE_FIELDS}

        if valid_updates:
            set_clause = ", ".join(f"{field} = ?" for field in valid_updates)
            with connect("update doctor profile") as conn:
                conn.execute(
                    f"UPDATE doctors SET {set_clause} WHERE id = ?",
                    list(valid_updates.values()) + [doctor_id],
                )
            change_bus.publish(self.TABLE, doctor_id)

        return self.get_by_id(doctor_id)

    def _row_to_doctor(self, row) -> Doctor:
        return Doctor(
            id=row["id"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            email=row["email"],
            password=row["password"],
            profile_image=row["profile_image"],
            created_at=row["created_at"],
        )
