"""Tests for form validation."""

from datetime import date

import pytest

from clinicpad.errors import ValidationError
from clinicpad.forms import (
    AppointmentForm,
    DoctorForm,
    NoteForm,
    PatientForm,
    require_text,
    validate_form,
)

PATIENT_DATA = {
    "doctor_id": 1,
    "first_name": " Maria ",
    "last_name": "Papadopoulou",
    "date_of_birth": "1985-03-12",
    "amka_number": "12038501234",
    "sex": "Female",
    "address": "Ermou 10",
    "postal_code": "10563",
    "city": "Athens",
    "phone": "6912345678",
    "email": "maria@email.com",
    "main_disease": "J45 - Asthma",
    "patient_source": "Clinic",
}


class TestPatientForm:

    def test_valid_form(self):
        patient = validate_form(PatientForm, PATIENT_DATA).to_patient()

        assert patient.first_name == "Maria"
        assert patient.doctor_id == 1
        assert patient.id is None

    def test_blank_field_asks_to_fill_all(self):
        with pytest.raises(ValidationError) as exc:
            validate_form(PatientForm, {**PATIENT_DATA, "city": "   ", "phone": ""})

        assert exc.value.fields == ["city", "phone"]
        assert str(exc.value) == "Please fill all fields."

    def test_missing_field(self):
        data = dict(PATIENT_DATA)
        del data["email"]

        with pytest.raises(ValidationError) as exc:
            validate_form(PatientForm, data)
        assert exc.value.fields == ["email"]

    def test_unknown_source_is_reported(self):
        with pytest.raises(ValidationError) as exc:
            validate_form(PatientForm, {**PATIENT_DATA, "patient_source": "Home"})

        assert exc.value.fields == ["patient_source"]
        assert "patient_source" in str(exc.value)


class TestAppointmentForm:

    def test_normalizes_date_and_hour(self):
        form = validate_form(AppointmentForm, {
            "patient_id": "3",
            "description": "Checkup",
            "date": "2024-06-01T00:00:00.000Z",
            "hour": "9:5",
        })

        assert form.date == "2024-06-01"
        assert form.hour == "09:05"
        assert form.location == "Clinic"
        assert form.patient_id == 3

    def test_accepts_date_objects(self):
        form = AppointmentForm(patient_id=1, description="x", date=date(2024, 1, 2), hour="10:00")
        assert form.date == "2024-01-02"

    @pytest.mark.parametrize("field,value", [
        ("date", "01/06/2024"),
        ("date", "2024-02-30"),
        ("hour", "25:00"),
        ("hour", "noon"),
    ])
    def test_rejects_bad_values(self, field, value):
        data = {"patient_id": 1, "description": "x", "date": "2024-06-01", "hour": "10:00", field: value}

        with pytest.raises(ValidationError) as exc:
            validate_form(AppointmentForm, data)
        assert exc.value.fields == [field]
        assert str(exc.value) != "Please fill all fields."


class TestSmallForms:

    def test_doctor_form(self):
        doctor = validate_form(DoctorForm, {
            "first_name": "Eleni", "last_name": "Kosta", "email": "eleni@email.com", "password": "pw",
        }).to_doctor()
        assert doctor.email == "eleni@email.com"
        assert doctor.profile_image is None

    def test_note_form_requires_both(self):
        with pytest.raises(ValidationError) as exc:
            validate_form(NoteForm, {"title": "Only title", "description": ""})
        assert exc.value.fields == ["description"]

    def test_require_text(self):
        assert require_text("  Aspirin ", "medication") == "Aspirin"
        with pytest.raises(ValidationError, match="Medication cannot be empty."):
            require_text("  ", "medication")
