"""Seed the database with a demo doctor, patients, visits and history."""

from dataclasses import replace
from datetime import date, timedelta

from clinicpad.clinical_records.database import (
    Appointment,
    AppointmentRepository,
    Doctor,
    DoctorRepository,
    HistoryRepository,
    Note,
    NoteRepository,
    Patient,
    PatientRepository,
    init_database,
)

DEMO_DOCTOR = Doctor(
    first_name="Eleni",
    last_name="Papadopoulou",
    email="demo@clinicpad.local",
    password="demo",
)

MOCK_PATIENTS = [
    Patient(
        first_name="Giorgos",
        last_name="Nikolaou",
        amka_number="01018512345",
        sex="Male",
        date_of_birth="1985-01-01",
        phone="6900000001",
        email="g.nikolaou@email.com",
        address="Ermou 12",
        postal_code="10563",
        city="Athens",
        main_disease="I10 - Essential (primary) hypertension",
        patient_source="Clinic",
    ),
    Patient(
        first_name="Maria",
        last_name="Georgiou",
        amka_number="22079254321",
        sex="Female",
        date_of_birth="1992-07-22",
        phone="6900000002",
        email="maria.g@email.com",
        address="Tsimiski 40",
        postal_code="54623",
        city="Thessaloniki",
        main_disease="J45 - Asthma",
        patient_source="Hospital",
    ),
    Patient(
        first_name="Nikos",
        last_name="Alexiou",
        amka_number="08117811223",
        sex="Male",
        date_of_birth="1978-11-08",
        phone="6900000003",
        email="n.alexiou@email.com",
        address="Korinthou 5",
        postal_code="26221",
        city="Patras",
        main_disease="E11 - Type 2 diabetes mellitus",
        patient_source="Clinic",
    ),
]

# (patient index, days from today, hour, location, description, diseases, medications)
MOCK_VISITS = [
    (0, -40, "09:30", "Clinic", "Blood pressure check", ["I10 - Essential (primary) hypertension"], ["Amlodipine"]),
    (0, -5, "10:00", "Clinic", "Headache follow-up", ["R51 - Headache"], ["Amlodipine", "Paracetamol"]),
    (0, 7, "11:00", "Clinic", "Routine control", [], []),
    (1, -12, "12:30", "Hospital", "Asthma exacerbation", ["J45 - Asthma"], ["Salbutamol", "Budesonide"]),
    (1, 3, "09:00", "Hospital", "Spirometry", [], []),
    (2, -2, "16:00", "Clinic", "HbA1c results", ["E11 - Type 2 diabetes mellitus"], ["Metformin"]),
    (2, 14, "15:30", "Clinic", "Foot examination", [], []),
]

# (patient index, diseases, medications, allergies)
MOCK_HISTORY = [
    (0, ["K21 - Gastro-oesophageal reflux disease"], ["Omeprazole"], ["Penicillin"]),
    (1, ["J30 - Vasomotor and allergic rhinitis"], ["Cetirizine"], ["Pollen", "Dust mites"]),
]

MOCK_NOTES = [
    Note(title="Order supplies", description="Gloves, gauze and syringes before Friday."),
    Note(title="Conference", description="Cardiology update, Athens, next month."),
]


def seed_database():
    """Initialize and seed the database with mock data."""
    print("Initializing database...")
    init_database()

    doctor_repo = DoctorRepository()
    patient_repo = PatientRepository()
    appointment_repo = AppointmentRepository()
    history_repo = HistoryRepository()
    note_repo = NoteRepository()

    doctor = doctor_repo.find_by_email(DEMO_DOCTOR.email)
    if doctor:
        print(f"Demo doctor {doctor.email} already exists, nothing to do.")
        return
    doctor = doctor_repo.create(replace(DEMO_DOCTOR))
    print(f"Created doctor {doctor.email} (password: {doctor.password})")

    print("Creating mock patients...")
    patients = []
    for patient in MOCK_PATIENTS:
        patients.append(patient_repo.create(replace(patient, doctor_id=doctor.id)))
        print(f"  Created {patient.full_name}")

    print("Creating mock visits...")
    today = date.today()
    for index, offset, hour, location, description, diseases, medications in MOCK_VISITS:
        patient = patients[index]
        appointment_repo.create(Appointment(
            patient_id=patient.id,
            patient_name=patient.full_name,
            date=(today + timedelta(days=offset)).isoformat(),
            hour=hour,
            location=location,
            description=description,
            visit_diseases=diseases,
            medications=medications,
        ))
        print(f"  Created visit: {description}")

    print("Creating medical history...")
    for index, diseases, medications, allergies in MOCK_HISTORY:
        history = history_repo.get_or_create(patients[index].id)
        history.diseases = diseases
        history.medications = medications
        history.allergies = allergies
        history_repo.save(history)

    for note in MOCK_NOTES:
        note_repo.create(replace(note))

    print("\nDatabase seeded successfully!")
    print(f"  - {len(MOCK_PATIENTS)} patients")
    print(f"  - {len(MOCK_VISITS)} visits")
    print(f"  - {len(MOCK_HISTORY)} history records")
    print(f"  - {len(MOCK_NOTES)} notes")


if __name__ == "__main__":
    seed_database()
