"""Tests for the display views built from fetched records."""

from datetime import date, datetime

import pytest

from clinicpad.clinical_records.database import Appointment, Patient
from clinicpad.views import (
    appointments_on_date,
    combined_medical_history,
    filter_appointments,
    filter_patients,
    latest_visits,
    marked_dates,
    split_upcoming_recent,
    to_day,
    unique_medications,
)


def _visit(day, hour="10:00", location="Clinic", **kwargs):
    return Appointment(patient_id=1, date=day, hour=hour, location=location, **kwargs)


class TestToDay:

    def test_accepts_dates_and_strings(self):
        assert to_day(date(2024, 6, 1)) == "2024-06-01"
        assert to_day(datetime(2024, 6, 1, 9, 30)) == "2024-06-01"
        assert to_day("2024-06-01T09:30:00.000Z") == "2024-06-01"

    def test_none_is_today(self):
        assert to_day() == date.today().isoformat()


class TestUpcomingRecent:

    def test_split_around_today(self):
        visits = [_visit("2024-01-01"), _visit("2024-06-01"), _visit("2024-12-31")]

        split = split_upcoming_recent(visits, today="2024-06-15")

        assert [v.date for v in split.upcoming] == ["2024-12-31"]
        assert [v.date for v in split.recent] == ["2024-06-01", "2024-01-01"]

    def test_today_counts_as_upcoming(self):
        split = split_upcoming_recent([_visit("2024-06-15")], today="2024-06-15")
        assert len(split.upcoming) == 1
        assert split.recent == []

    def test_lists_are_capped(self):
        visits = [_visit(f"2025-01-0{d}") for d in range(1, 6)] + [_visit(f"2023-01-0{d}") for d in range(1, 6)]

        split = split_upcoming_recent(visits, today="2024-06-15")

        assert [v.date for v in split.upcoming] == ["2025-01-01", "2025-01-02", "2025-01-03"]
        assert [v.date for v in split.recent] == ["2023-01-05", "2023-01-04", "2023-01-03"]

    def test_latest_visits(self):
        visits = [_visit("2024-01-01"), _visit("2024-03-01", "08:00"), _visit("2024-03-01", "16:00")]

        latest = latest_visits(visits)

        assert [(v.date, v.hour) for v in latest] == [("2024-03-01", "16:00"), ("2024-03-01", "08:00")]


class TestUniqueMedications:

    def test_flattens_and_dedups(self):
        assert unique_medications(["Aspirin, Ibuprofen", "ibuprofen ", ""]) == ["Aspirin", "Ibuprofen"]

    def test_accepts_lists_and_none(self):
        assert unique_medications([["Metformin", " "], None, "Aspirin"]) == ["Metformin", "Aspirin"]

    def test_empty(self):
        assert unique_medications([]) == []


class TestCombinedMedicalHistory:

    def test_combines_without_repeats(self):
        history = combined_medical_history(
            "I10 - Essential (primary) hypertension",
            ["J45 - Asthma", "J45 - Asthma", ""],
            ["I10 - Essential (primary) hypertension", "K21 - Gastro-oesophageal reflux disease"],
        )

        assert history.combined == [
            "I10 - Essential (primary) hypertension",
            "J45 - Asthma",
            "K21 - Gastro-oesophageal reflux disease",
        ]

    def test_legacy_characters_are_stripped(self):
        history = combined_medical_history('["E11 - Type 2 diabetes mellitus"]', ['"R05 - Cough"'], None)

        assert history.main_disease == "E11 - Type 2 diabetes mellitus"
        assert history.visit_diseases == ["R05 - Cough"]
        assert history.history_diseases == []

    def test_raw_json_history_text(self):
        history = combined_medical_history(None, [], '["J30 - Vasomotor and allergic rhinitis"]')
        assert history.combined == ["J30 - Vasomotor and allergic rhinitis"]


class TestFilters:

    @pytest.fixture
    def patients(self):
        return [
            Patient(first_name="Maria", last_name="Papadopoulou", sex="Female",
                    amka_number="01019012345", patient_source="Clinic"),
            Patient(first_name="Nikos", last_name="Georgiou", sex="Male",
                    amka_number="02028054321", patient_source="Hospital"),
        ]

    def test_patient_search_by_name_and_amka(self, patients):
        assert [p.first_name for p in filter_patients(patients, "maria papa")] == ["Maria"]
        assert [p.first_name for p in filter_patients(patients, "0202")] == ["Nikos"]
        assert len(filter_patients(patients, "  ")) == 2

    def test_patient_filters(self, patients):
        assert [p.first_name for p in filter_patients(patients, sex="Male")] == ["Nikos"]
        assert [p.first_name for p in filter_patients(patients, source="Clinic")] == ["Maria"]
        assert filter_patients(patients, sex="Female", source="Hospital") == []

    def test_appointment_filters(self):
        visits = [
            _visit("2024-06-01", "12:00", "Hospital"),
            _visit("2024-06-01", "09:00"),
            _visit("2024-05-01", "09:00"),
        ]

        assert [v.hour for v in filter_appointments(visits, on_date="2024-06-01")] == ["09:00", "12:00"]
        assert [v.date for v in filter_appointments(visits, location="Clinic", order="desc")] == [
            "2024-06-01", "2024-05-01",
        ]

    def test_bad_order(self):
        with pytest.raises(ValueError):
            filter_appointments([], order="sideways")

    def test_calendar_helpers(self):
        visits = [_visit("2024-06-01T00:00:00", "11:00"), _visit("2024-06-01", "08:00"), _visit("2024-05-01")]

        assert [v.hour for v in appointments_on_date(visits, "2024-06-01")] == ["08:00", "11:00"]
        assert marked_dates(visits) == ["2024-05-01", "2024-06-01"]
