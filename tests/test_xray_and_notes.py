"""Tests for X-ray attachments and both kinds of notes."""

import pytest

from clinicpad.clinical_records.database import (
    Note,
    NoteRepository,
    PatientNote,
    PatientNoteRepository,
    XrayAttachment,
    XrayRepository,
)


class TestXrayRepository:

    @pytest.fixture
    def repo(self):
        return XrayRepository()

    def test_list_for_appointment(self, repo, patient, make_appointment):
        appointment = make_appointment()
        repo.create(XrayAttachment(file_path="/media/a.png", appointment_id=appointment.id, patient_id=patient.id))
        repo.create(XrayAttachment(file_path="/media/b.png", patient_id=patient.id))

        assert [x.file_path for x in repo.list_for_appointment(appointment.id)] == ["/media/a.png"]

    def test_list_for_patient_takes_visit_date(self, repo, patient, make_appointment):
        appointment = make_appointment(date="2024-03-03")
        repo.create(XrayAttachment(file_path="/media/a.png", appointment_id=appointment.id, patient_id=patient.id))
        repo.create(XrayAttachment(file_path="/media/b.png", patient_id=patient.id, appointment_date="2024-01-01"))

        xrays = repo.list_for_patient(patient.id)
        assert [(x.file_path, x.appointment_date) for x in xrays] == [
            ("/media/a.png", "2024-03-03"),
            ("/media/b.png", "2024-01-01"),
        ]

    def test_delete(self, repo, patient):
        xray = repo.create(XrayAttachment(file_path="/media/a.png", patient_id=patient.id, description="Chest"))
        assert repo.get_by_id(xray.id).description == "Chest"

        repo.delete(xray.id)
        assert repo.get_by_id(xray.id) is None

    def test_deleting_visit_leaves_xray(self, repo, patient, make_appointment):
        from clinicpad.clinical_records.database import AppointmentRepository

        appointment = make_appointment()
        xray = repo.create(XrayAttachment(file_path="/media/a.png", appointment_id=appointment.id, patient_id=patient.id))
        AppointmentRepository().delete(appointment.id)

        assert repo.get_by_id(xray.id) is not None


class TestNoteRepository:

    def test_newest_first(self):
        repo = NoteRepository()
        repo.create(Note(title="First", description="one"))
        repo.create(Note(title="Second", description="two"))

        assert [n.title for n in repo.list_all()] == ["Second", "First"]

    def test_update_and_delete(self):
        repo = NoteRepository()
        note = repo.create(Note(title="Draft", description="text"))

        assert repo.update(note.id, "Final", "done").title == "Final"
        repo.delete(note.id)
        assert repo.get_by_id(note.id) is None


class TestPatientNoteRepository:

    def test_notes_scoped_to_patient(self, patient):
        repo = PatientNoteRepository()
        repo.create(PatientNote(patient_id=patient.id, title="Diet", description="Low salt"))
        repo.create(PatientNote(patient_id=patient.id + 1, title="Other", description="x"))

        notes = repo.list_for_patient(patient.id)
        assert [n.title for n in notes] == ["Diet"]

    def test_update_and_delete(self, patient):
        repo = PatientNoteRepository()
        note = repo.create(PatientNote(patient_id=patient.id, title="Diet", description="Low salt"))

        assert repo.update(note.id, "Diet", "No salt").description == "No salt"
        repo.delete(note.id)
        assert repo.list_for_patient(patient.id) == []
