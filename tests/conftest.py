"""Shared pytest fixtures."""

import pytest

from clinicpad.clinical_records.database import (
    Appointment,
    AppointmentRepository,
    Doctor,
    DoctorRepository,
    Patient,
    PatientRepository,
    init_database,
)
from clinicpad.events import change_bus


@pytest.fixture(autouse=True)
def isolated_database(tmp_path, monkeypatch):
    """Point every test at a fresh database and media directory."""
    db_path = tmp_path / "clinicpad-test.db"
    monkeypatch.setenv("CLINICPAD_DB_PATH", str(db_path))
    monkeypatch.setenv("CLINICPAD_MEDIA_DIR", str(tmp_path / "media"))
    init_database()
    yield db_path


@pytest.fixture(autouse=True)
def clear_subscriptions():
    """Drop change subscriptions left behind by a test."""
    yield
    for subscription in list(change_bus._subscriptions):
        subscription.cancel()


@pytest.fixture
def doctor():
    return DoctorRepository().create(Doctor(
        first_name="Test",
        last_name="Doctor",
        email="test.doctor@email.com",
        password="secret",
    ))


@pytest.fixture
def patient(doctor):
    return PatientRepository().create(Patient(
        doctor_id=doctor.id,
        first_name="Test",
        last_name="Fixture",
        amka_number="01019012345",
        sex="Female",
        date_of_birth="1990-01-01",
        phone="6900000000",
        email="test.fixture@email.com",
        address="Test Street 1",
        postal_code="10000",
        city="Athens",
        main_disease="I10 - Essential (primary) hypertension",
        patient_source="Clinic",
    ))


@pytest.fixture
def make_appointment(patient):
    """Factory creating visits for the fixture patient."""
    repo = AppointmentRepository()

    def _make(date="2024-06-01", hour="10:00", **kwargs):
        kwargs.setdefault("patient_id", patient.id)
        kwargs.setdefault("patient_name", patient.full_name)
        kwargs.setdefault("location", "Clinic")
        kwargs.setdefault("description", "Checkup")
        return repo.create(Appointment(date=date, hour=hour, **kwargs))

    return _make
