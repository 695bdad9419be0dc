"""Tests for database initialization and migrations."""

import pytest

from clinicpad.clinical_records.database import (
    AppointmentRepository,
    Doctor,
    DoctorRepository,
    HistoryRepository,
    init_database,
)
from clinicpad.clinical_records.database.connection import SCHEMA_VERSION, get_connection, get_schema_version
from clinicpad.errors import ConstraintError


class TestInitDatabase:

    def test_schema_version_recorded(self):
        conn = get_connection()
        assert get_schema_version(conn) == SCHEMA_VERSION
        conn.close()

    def test_init_is_idempotent(self, patient, make_appointment):
        appointment = make_appointment(medications=["Aspirin"])

        init_database()
        init_database()

        assert AppointmentRepository().get_medications(appointment.id) == ["Aspirin"]

    def test_all_tables_exist(self):
        conn = get_connection()
        tables = {row["name"] for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")}
        conn.close()

        assert {
            "doctors", "patients", "appointments", "appointment_items", "xray",
            "notes", "patient_notes", "history", "history_items", "key_value",
        } <= tables


class TestBackfillMigration:
    """Rows written before the item tables existed are copied into them."""

    def test_legacy_columns_are_backfilled(self, patient):
        conn = get_connection()
        cursor = conn.execute(
            """INSERT INTO appointments (patient_id, date, hour, visit_diseases, medications)
               VALUES (?, '2023-01-01', '09:00', 'J45 - Asthma, R05 - Cough', 'Aspirin')""",
            (patient.id,),
        )
        appointment_id = cursor.lastrowid
        conn.execute(
            """INSERT INTO history (patient_id, diseases, medications, allergies)
               VALUES (?, '["I10 - Hypertension"]', 'not json', '["Latex", "Pollen"]')""",
            (patient.id,),
        )
        conn.execute("PRAGMA user_version = 1")
        conn.commit()
        conn.close()

        init_database()

        appointments = AppointmentRepository()
        assert appointments.get_visit_diseases(appointment_id) == ["J45 - Asthma", "R05 - Cough"]
        assert appointments.get_medications(appointment_id) == ["Aspirin"]

        history = HistoryRepository().get_for_patient(patient.id)
        assert history.diseases == ["I10 - Hypertension"]
        assert history.medications == []
        assert history.allergies == ["Latex", "Pollen"]

        conn = get_connection()
        assert get_schema_version(conn) == SCHEMA_VERSION
        conn.close()


class TestEmailMigration:
    """Databases created before emails were case-insensitive get an index."""

    def test_case_variant_rejected_after_upgrade(self):
        conn = get_connection()
        conn.executescript(
            """DROP TABLE doctors;
               CREATE TABLE doctors (
                   id INTEGER PRIMARY KEY AUTOINCREMENT,
                   first_name TEXT NOT NULL,
                   last_name TEXT NOT NULL,
                   email TEXT NOT NULL UNIQUE,
                   password TEXT NOT NULL,
                   profile_image TEXT,
                   created_at TEXT DEFAULT CURRENT_TIMESTAMP
               );
               PRAGMA user_version = 2;"""
        )
        conn.close()

        init_database()

        repo = DoctorRepository()
        repo.create(Doctor(first_name="Doc", last_name="One", email="Doc@x.com", password="one"))
        with pytest.raises(ConstraintError):
            repo.create(Doctor(first_name="Doc", last_name="Two", email="doc@x.com", password="two"))
