"""Active doctor session, passed explicitly to whatever needs it."""

from dataclasses import dataclass, field

from loguru import logger

from clinicpad.clinical_records.database.key_value_store import KeyValueStore
from clinicpad.errors import NotFoundError

DOCTOR_ID_KEY = "DoctorID"


@dataclass
class DoctorSession:
    """Tracks which doctor is logged in, persisted under the DoctorID key."""
    store: KeyValueStore = field(default_factory=KeyValueStore)
    doctor_id: int | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.doctor_id is not None

    def load(self) -> int | None:
        """Restore the doctor id saved by a previous run."""
        value = self.store.get_item(DOCTOR_ID_KEY)
        try:
            self.doctor_id = int(value) if value else None
        except ValueError:
            logger.warning(f"Ignoring malformed {DOCTOR_ID_KEY} value {value!r}")
            self.doctor_id = None
        return self.doctor_id

    def login(self, doctor_id: int) -> None:
        self.doctor_id = doctor_id
        self.store.set_item(DOCTOR_ID_KEY, str(doctor_id))

    def logout(self) -> None:
        self.doctor_id = None
        self.store.remove_item(DOCTOR_ID_KEY)

    def require_doctor_id(self) -> int:
        if self.doctor_id is None:
            raise NotFoundError("Doctor ID not found.")
        return self.doctor_id
