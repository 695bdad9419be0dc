from .connection import ensure_schema, get_connection, init_database
from .appointment_repository import Appointment, AppointmentRepository
from .doctor_repository import Doctor, DoctorRepository
from .history_repository import HistoryRepository, PatientHistory
from .key_value_store import KeyValueStore
from .note_repository import Note, NoteRepository, PatientNote, PatientNoteRepository
from .patient_repository import Patient, PatientRepository
from .xray_repository import XrayAttachment, XrayRepository

__all__ = [
    "get_connection", "init_database", "ensure_schema",
    "Appointment", "AppointmentRepository",
    "Doctor", "DoctorRepository",
    "HistoryRepository", "PatientHistory",
    "KeyValueStore",
    "Note", "NoteRepository", "PatientNote", "PatientNoteRepository",
    "Patient", "PatientRepository",
    "XrayAttachment", "XrayRepository",
]
