"""Clinician console: patients, visits, history, X-rays and notes."""

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table

from clinicpad.clinical_records.database import (
    AppointmentRepository,
    DoctorRepository,
    HistoryRepository,
    NoteRepository,
    PatientNoteRepository,
    PatientRepository,
    XrayRepository,
    init_database,
)
from clinicpad.clinical_records.database.cleanup import delete_appointment_cascade, delete_patient_cascade
from clinicpad.diagnosis_codes import lookup, search_codes
from clinicpad.errors import NotFoundError, StorageError, ValidationError
from clinicpad.events import LiveQuery
from clinicpad.forms import (
    AppointmentForm,
    DoctorForm,
    NoteForm,
    PatientForm,
    PatientNoteForm,
    require_text,
    validate_form,
)
from clinicpad.logger import setup_logging
from clinicpad.media import attach_xray
from clinicpad.session import DoctorSession
from clinicpad.views import (
    combined_medical_history,
    filter_patients,
    latest_visits,
    split_upcoming_recent,
    unique_medications,
)

console = Console()
doctor_repo = DoctorRepository()
patient_repo = PatientRepository()
appointment_repo = AppointmentRepository()
xray_repo = XrayRepository()
history_repo = HistoryRepository()
note_repo = NoteRepository()
patient_note_repo = PatientNoteRepository()

HISTORY_KINDS = {"d": "disease", "m": "medication", "a": "allergy"}


# =============================================================================
# Actions
# =============================================================================

def register_doctor(data: dict):
    """Validate and store a new doctor account."""
    form = validate_form(DoctorForm, data)
    return doctor_repo.create(form.to_doctor())


def login(session: DoctorSession, email: str, password: str):
    """Log in and remember the doctor for the next run."""
    doctor = doctor_repo.authenticate(email, password)
    if doctor:
        session.login(doctor.id)
    return doctor


def add_patient(session: DoctorSession, data: dict):
    form = validate_form(PatientForm, {**data, "doctor_id": session.require_doctor_id()})
    return patient_repo.create(form.to_patient())


def add_visit(data: dict):
    form = validate_form(AppointmentForm, data)
    patient = patient_repo.require(form.patient_id)
    appointment = form.to_appointment()
    appointment.patient_name = patient.full_name
    return appointment_repo.create(appointment)


def add_visit_note(appointment_id: int, text: str) -> None:
    appointment_repo.set_note(appointment_id, require_text(text, "note"))


def add_visit_medication(appointment_id: int, text: str) -> list[str]:
    return appointment_repo.add_medication(appointment_id, require_text(text, "medication"))


def toggle_visit_code(appointment_id: int, code: str) -> list[str]:
    """Add or remove a diagnosis on a visit by ICD-10 code."""
    item = lookup(require_text(code, "code"))
    if item is None:
        raise NotFoundError(f"Unknown diagnosis code {code!r}")
    return appointment_repo.toggle_visit_disease(appointment_id, item.label)


def add_history_item(patient_id: int, kind: str, value: str):
    """Add to the patient's history. Diseases are given as ICD-10 codes."""
    value = require_text(value, kind)
    if kind == "disease":
        item = lookup(value)
        if item is None:
            raise NotFoundError(f"Unknown diagnosis code {value!r}")
        value = item.label
    return history_repo.add_item(patient_id, kind, value)


def add_note(data: dict):
    return note_repo.create(validate_form(NoteForm, data).to_note())


def add_patient_note(data: dict):
    return patient_note_repo.create(validate_form(PatientNoteForm, data).to_patient_note())


# =============================================================================
# Rendering
# =============================================================================

def _visit_table(title: str, appointments) -> Table:
    table = Table(title=title, expand=True)
    table.add_column("ID", justify="right")
    table.add_column("Date")
    table.add_column("Time")
    table.add_column("Patient")
    table.add_column("Description")
    for a in appointments:
        table.add_row(str(a.id), a.date, a.hour, a.patient_name or "", a.description or "")
    return table


def render_home(session: DoctorSession, appointments, today=None) -> Group:
    """Greeting plus the next and the latest visits."""
    doctor = doctor_repo.get_by_id(session.doctor_id) if session.is_authenticated else None
    greeting = f"Welcome, {doctor.display_name}" if doctor else "Welcome"
    split = split_upcoming_recent(appointments, today=today)
    return Group(
        Panel(greeting, style="bold blue"),
        _visit_table("Upcoming Visits", split.upcoming),
        _visit_table("Recent Visits", split.recent),
    )


def render_patient_list(session: DoctorSession, query: str = "", sex=None, source=None) -> Table:
    patients = patient_repo.list_for_doctor(session.require_doctor_id())
    table = Table(title="Patients", expand=True)
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("AMKA")
    table.add_column("Sex")
    table.add_column("Source")
    table.add_column("Main disease")
    for p in filter_patients(patients, query=query, sex=sex, source=source):
        table.add_row(str(p.id), p.full_name, p.amka_number or "", p.sex or "", p.patient_source or "", p.main_disease or "")
    return table


def render_patient_detail(patient_id: int) -> Group:
    """Patient card: details, latest visits, medications, history and X-rays."""
    patient = patient_repo.require(patient_id)
    visits = appointment_repo.list_for_patient(patient_id, descending=True)
    history = history_repo.get_for_patient(patient_id)
    medical = combined_medical_history(
        patient.main_disease,
        appointment_repo.distinct_visit_diseases(patient_id),
        history.diseases if history else [],
    )
    medications = unique_medications(v.medications for v in visits)
    xrays = xray_repo.list_for_patient(patient_id)

    details = (
        f"[bold]{patient.full_name}[/bold]  AMKA {patient.amka_number or '-'}\n"
        f"Born {patient.date_of_birth or '-'}, {patient.sex or '-'}, via {patient.patient_source or '-'}\n"
        f"{patient.phone or '-'} | {patient.email or '-'}\n"
        f"{patient.address or ''} {patient.postal_code or ''} {patient.city or ''}".rstrip()
    )

    history_table = Table(title="Medical History", expand=True)
    history_table.add_column("Source")
    history_table.add_column("Entries")
    history_table.add_row("Main disease", medical.main_disease or "-")
    history_table.add_row("Visits", "\n".join(medical.visit_diseases) or "-")
    history_table.add_row("History", "\n".join(medical.history_diseases) or "-")
    if history:
        history_table.add_row("Allergies", ", ".join(history.allergies) or "-")
        history_table.add_row("Past medications", ", ".join(history.medications) or "-")

    xray_table = Table(title="X-rays", expand=True)
    xray_table.add_column("ID", justify="right")
    xray_table.add_column("Visit date")
    xray_table.add_column("Description")
    xray_table.add_column("File")
    for x in xrays:
        xray_table.add_row(str(x.id), x.appointment_date or "-", x.description or "", x.file_path)

    return Group(
        Panel(details, title="Patient"),
        _visit_table("Latest Visits", latest_visits(visits)),
        Panel(", ".join(medications) or "No medications", title="Medications"),
        history_table,
        xray_table,
    )


def render_visit_detail(appointment_id: int) -> Group:
    appointment = appointment_repo.get_by_id(appointment_id)
    if appointment is None:
        raise NotFoundError(f"Visit {appointment_id} not found")
    xrays = xray_repo.list_for_appointment(appointment_id)
    body = (
        f"[bold]{appointment.patient_name or ''}[/bold] {appointment.date} {appointment.hour} "
        f"at {appointment.location or '-'}\n{appointment.description or ''}\n\n"
        f"[bold]Diagnoses:[/bold] {', '.join(appointment.visit_diseases) or '-'}\n"
        f"[bold]Medications:[/bold] {', '.join(appointment.medications) or '-'}\n"
        f"[bold]Note:[/bold] {appointment.note or '-'}\n"
        f"[bold]X-rays:[/bold] {', '.join(x.description or x.file_path for x in xrays) or '-'}"
    )
    return Group(Panel(body, title=f"Visit {appointment.id}"))


def render_code_search(query: str) -> Table:
    table = Table(title=f"Diagnosis codes matching {query!r}")
    table.add_column("Code")
    table.add_column("Description")
    for item in search_codes(query):
        table.add_row(item.code, item.desc)
    return table


def render_notes() -> Table:
    table = Table(title="Notes", expand=True)
    table.add_column("ID", justify="right")
    table.add_column("Title")
    table.add_column("Description")
    for note in note_repo.list_all():
        table.add_row(str(note.id), note.title, note.description)
    return table


# =============================================================================
# Console loop
# =============================================================================

def ask(label: str) -> str:
    return console.input(f"[bold green]{label}:[/bold green] ").strip()


def ask_fields(labels: dict[str, str]) -> dict:
    return {field: ask(label) for field, label in labels.items()}


def ask_id(label: str) -> int:
    value = ask(label)
    if not value.isdigit():
        raise ValidationError([label], f"{label} must be a number.")
    return int(value)


def authenticate(session: DoctorSession) -> bool:
    """Log in or register until a doctor is active. False means quit."""
    while not session.is_authenticated:
        choice = ask("[l]ogin, [r]egister or [q]uit").lower()
        if choice == "q":
            return False
        if choice == "r":
            doctor = register_doctor(ask_fields({
                "first_name": "First name", "last_name": "Last name",
                "email": "Email", "password": "Password",
            }))
            session.login(doctor.id)
        elif choice == "l":
            if not login(session, ask("Email"), ask("Password")):
                console.print("[bold yellow]Invalid email or password.[/bold yellow]")
    return True


def run_command(session: DoctorSession, command: str, dashboard: dict) -> bool:
    """Run one menu command. Returns False when the user quits."""
    if command in ("q", "quit", "exit"):
        return False
    if command == "home":
        console.print(render_home(session, dashboard.get("appointments", [])))
    elif command == "patients":
        console.print(render_patient_list(session, query=ask("Search (name or AMKA, blank for all)")))
    elif command == "patient":
        console.print(render_patient_detail(ask_id("Patient ID")))
    elif command == "new-patient":
        patient = add_patient(session, ask_fields({
            "first_name": "First name", "last_name": "Last name", "date_of_birth": "Date of birth",
            "amka_number": "AMKA number", "sex": "Sex", "address": "Address",
            "postal_code": "Postal code", "city": "City", "phone": "Phone", "email": "Email",
            "main_disease": "Main disease", "patient_source": "Source (Clinic/Hospital)",
        }))
        console.print(f"[bold blue]Added patient {patient.id}.[/bold blue]")
    elif command == "delete-patient":
        result = delete_patient_cascade(ask_id("Patient ID"))
        console.print(f"Deleted {result.total} rows.")
    elif command == "new-visit":
        appointment = add_visit(ask_fields({
            "patient_id": "Patient ID", "description": "Description", "date": "Date (YYYY-MM-DD)",
            "hour": "Time (HH:MM)", "location": "Location (Clinic/Hospital)",
        }))
        console.print(f"[bold blue]Added visit {appointment.id}.[/bold blue]")
    elif command == "visit":
        console.print(render_visit_detail(ask_id("Visit ID")))
    elif command == "delete-visit":
        delete_appointment_cascade(ask_id("Visit ID"))
    elif command == "visit-note":
        add_visit_note(ask_id("Visit ID"), ask("Note"))
    elif command == "visit-med":
        console.print(", ".join(add_visit_medication(ask_id("Visit ID"), ask("Medication"))))
    elif command == "visit-code":
        visit_id = ask_id("Visit ID")
        console.print(render_code_search(ask("Search codes")))
        console.print(", ".join(toggle_visit_code(visit_id, ask("Code"))))
    elif command == "history":
        patient_id = ask_id("Patient ID")
        kind = HISTORY_KINDS.get(ask("[d]isease, [m]edication or [a]llergy").lower())
        if kind is None:
            raise ValidationError(["kind"], "Choose d, m or a.")
        if kind == "disease":
            console.print(render_code_search(ask("Search codes")))
        add_history_item(patient_id, kind, ask("Code" if kind == "disease" else "Value"))
    elif command == "xray":
        visit_id = ask_id("Visit ID")
        appointment = appointment_repo.get_by_id(visit_id)
        if appointment is None:
            raise NotFoundError(f"Visit {visit_id} not found")
        attach_xray(
            ask("Image file"), ask("Description"),
            patient_id=appointment.patient_id, appointment_id=visit_id,
        )
    elif command == "codes":
        console.print(render_code_search(ask("Search")))
    elif command == "notes":
        console.print(render_notes())
    elif command == "new-note":
        add_note(ask_fields({"title": "Title", "description": "Description"}))
    elif command == "patient-note":
        add_patient_note({"patient_id": ask_id("Patient ID"), **ask_fields({"title": "Title", "description": "Description"})})
    elif command == "logout":
        session.logout()
    else:
        console.print(f"Commands: {', '.join(COMMANDS)}")
    return True


COMMANDS = [
    "home", "patients", "patient", "new-patient", "delete-patient", "new-visit", "visit",
    "delete-visit", "visit-note", "visit-med", "visit-code", "history", "xray", "codes",
    "notes", "new-note", "patient-note", "logout", "quit",
]


def main():
    """Run the clinician console."""
    setup_logging()
    init_database()

    session = DoctorSession()
    session.load()

    console.print("[bold blue]Welcome to ClinicPad![/bold blue]")
    console.print("Type 'help' for commands or 'quit' to exit.\n")

    dashboard: dict = {}
    home_query = LiveQuery(
        fetch=appointment_repo.list_with_patients,
        tables=["appointments", "patients"],
        on_result=lambda rows: dashboard.update(appointments=rows),
    ).start()

    try:
        while True:
            try:
                if not authenticate(session):
                    break
                if not run_command(session, ask("Command").lower(), dashboard):
                    console.print("[bold blue]Goodbye![/bold blue]")
                    break
            except (EOFError, KeyboardInterrupt):
                console.print("\n[bold blue]Goodbye![/bold blue]")
                break
            except ValidationError as e:
                console.print(f"[bold yellow]Attention![/bold yellow] {e}\n")
            except NotFoundError as e:
                console.print(f"[bold yellow]{e}[/bold yellow]\n")
            except StorageError:
                console.print("[bold red]Error:[/bold red] An error occurred. Please try again.\n")
    finally:
        home_query.cancel()


if __name__ == "__main__":
    main()
