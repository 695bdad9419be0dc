"""Form models validated before anything is written."""

import re
from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from clinicpad.clinical_records.database import (
    Appointment,
    Doctor,
    Note,
    Patient,
    PatientNote,
    XrayAttachment,
)
from clinicpad.errors import ValidationError

LOCATIONS = ("Clinic", "Hospital")

# pydantic error types produced by a missing or blank value
BLANK_ERROR_TYPES = ("missing", "string_type", "int_type", "literal_error")


def _blank_to_none(v):
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v


class FormModel(BaseModel):
    """Strips strings and treats blanks as missing."""

    @field_validator("*", mode="before")
    @classmethod
    def strip_strings(cls, v):
        return _blank_to_none(v)


class DoctorForm(FormModel):
    first_name: str
    last_name: str
    email: str = Field(..., description="Login email")
    password: str
    profile_image: str | None = None

    def to_doctor(self) -> Doctor:
        return Doctor(**self.model_dump())


class PatientForm(FormModel):
    doctor_id: int
    first_name: str
    last_name: str
    date_of_birth: str
    amka_number: str
    sex: str
    address: str
    postal_code: str
    city: str
    phone: str
    email: str
    main_disease: str
    patient_source: Literal["Clinic", "Hospital"]

    def to_patient(self) -> Patient:
        return Patient(**self.model_dump())


class AppointmentForm(FormModel):
    patient_id: int
    patient_name: str | None = None
    description: str
    date: str = Field(..., description="Visit day in YYYY-MM-DD format")
    hour: str = Field(..., description="Visit time in HH:MM format")
    location: Literal["Clinic", "Hospital"] = "Clinic"

    @field_validator("date", mode="before")
    @classmethod
    def normalize_date(cls, v):
        """Accept date objects and ISO strings, keep only the day."""
        if isinstance(v, datetime):
            return v.date().isoformat()
        if isinstance(v, date):
            return v.isoformat()
        v = _blank_to_none(v)
        if v is None:
            return None
        day = str(v).split("T")[0]
        if not re.match(r"^\d{4}-\d{2}-\d{2}$", day):
            raise ValueError("date must be YYYY-MM-DD")
        date.fromisoformat(day)
        return day

    @field_validator("hour", mode="before")
    @classmethod
    def normalize_hour(cls, v):
        """Zero-pad to HH:MM."""
        v = _blank_to_none(v)
        if v is None:
            return None
        match = re.match(r"^(\d{1,2}):(\d{1,2})$", str(v))
        if not match:
            raise ValueError("hour must be HH:MM")
        hours, minutes = (int(part) for part in match.groups())
        if hours > 23 or minutes > 59:
            raise ValueError("hour must be a valid time of day")
        return f"{hours:02d}:{minutes:02d}"

    def to_appointment(self) -> Appointment:
        return Appointment(**self.model_dump())


class NoteForm(FormModel):
    title: str
    description: str

    def to_note(self) -> Note:
        return Note(**self.model_dump())


class PatientNoteForm(NoteForm):
    patient_id: int

    def to_patient_note(self) -> PatientNote:
        return PatientNote(**self.model_dump())


class XrayForm(FormModel):
    file_path: str
    description: str
    patient_id: int | None = None
    appointment_id: int | None = None
    appointment_date: str | None = None

    def to_xray(self) -> XrayAttachment:
        return XrayAttachment(**self.model_dump())


def validate_form(model: type[FormModel], data: dict) -> FormModel:
    """Build a form model, raising ValidationError naming the bad fields."""
    try:
        return model(**data)
    except PydanticValidationError as e:
        fields = []
        details = []
        for error in e.errors():
            name = ".".join(str(part) for part in error["loc"]) or model.__name__
            if name not in fields:
                fields.append(name)
            blank = _blank_to_none(data.get(name)) is None
            if not (blank and error["type"] in BLANK_ERROR_TYPES):
                details.append(f"{name}: {error['msg']}")
        message = "Please fill all fields." if not details else "; ".join(details)
        raise ValidationError(fields, message) from e


def require_text(value: str | None, field: str) -> str:
    """Trimmed text, or ValidationError when blank."""
    value = _blank_to_none(value)
    if value is None:
        raise ValidationError([field], f"{field.replace('_', ' ').capitalize()} cannot be empty.")
    return value
