"""
Clinical Records Database Schema
Supports doctors, patients, visits, X-rays, notes, medical history and session keys.
"""

SCHEMA = """
-- =============================================================================
-- 1. DOCTORS - Registered clinicians
-- =============================================================================
CREATE TABLE IF NOT EXISTS doctors (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    first_name TEXT NOT NULL,
    last_name TEXT NOT NULL,
    email TEXT NOT NULL UNIQUE COLLATE NOCASE,
    password TEXT NOT NULL,
    profile_image TEXT,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);


-- =============================================================================
-- 2. PATIENTS - Core patient information, owned by a doctor
-- =============================================================================
CREATE TABLE IF NOT EXISTS patients (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    doctor_id INTEGER,

    -- Demographics
    first_name TEXT NOT NULL,
    last_name TEXT NOT NULL,
    amka_number TEXT,
    sex TEXT,
    date_of_birth TEXT,

    -- Contact
    phone TEXT,
    email TEXT,
    address TEXT,
    postal_code TEXT,
    city TEXT,

    -- Free-text main disease, e.g. "I10 - Essential (primary) hypertension"
    main_disease TEXT,

    -- Intake source: Clinic or Hospital
    patient_source TEXT,

    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_patients_doctor ON patients(doctor_id);
CREATE INDEX IF NOT EXISTS idx_patients_amka ON patients(amka_number);


-- =============================================================================
-- 3. APPOINTMENTS - Visits
-- =============================================================================
-- patient_id has no foreign key: deleting a patient leaves its visits behind.
CREATE TABLE IF NOT EXISTS appointments (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    patient_id INTEGER NOT NULL,
    patient_name TEXT,

    -- Scheduling
    date TEXT NOT NULL,   -- "2024-06-01"
    hour TEXT NOT NULL,   -- "09:30"
    location TEXT,        -- Clinic or Hospital
    description TEXT,

    -- Legacy encoded columns, kept in step with appointment_items
    visit_diseases TEXT,  -- "A09 - Diarrhoea, I10 - Hypertension"
    medications TEXT,     -- "Aspirin, Ibuprofen"
    note TEXT,

    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_appointments_patient ON appointments(patient_id);
CREATE INDEX IF NOT EXISTS idx_appointments_date ON appointments(date, hour);


-- =============================================================================
-- 4. APPOINTMENT_ITEMS - One row per visit disease / medication
-- =============================================================================
CREATE TABLE IF NOT EXISTS appointment_items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    appointment_id INTEGER NOT NULL,
    kind TEXT NOT NULL CHECK (kind IN ('disease', 'medication')),
    position INTEGER NOT NULL,
    value TEXT NOT NULL,
    FOREIGN KEY (appointment_id) REFERENCES appointments(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_appointment_items_owner ON appointment_items(appointment_id, kind, position);


-- =============================================================================
-- 5. XRAY - Image attachments (path only, never binary content)
-- =============================================================================
CREATE TABLE IF NOT EXISTS xray (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    patient_id INTEGER,
    appointment_id INTEGER,
    file_path TEXT NOT NULL,
    description TEXT,
    appointment_date TEXT,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_xray_patient ON xray(patient_id);
CREATE INDEX IF NOT EXISTS idx_xray_appointment ON xray(appointment_id);


-- =============================================================================
-- 6. NOTES - Personal scratchpad, not tied to a patient
-- =============================================================================
CREATE TABLE IF NOT EXISTS notes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    description TEXT NOT NULL,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);


-- =============================================================================
-- 7. PATIENT_NOTES - Free-text notes about a patient
-- =============================================================================
CREATE TABLE IF NOT EXISTS patient_notes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    patient_id INTEGER NOT NULL,
    title TEXT NOT NULL,
    description TEXT NOT NULL,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_patient_notes_patient ON patient_notes(patient_id);


-- =============================================================================
-- 8. HISTORY - Past diseases, medications and allergies (one row per patient)
-- =============================================================================
CREATE TABLE IF NOT EXISTS history (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    patient_id INTEGER NOT NULL,

    -- Legacy JSON arrays, kept in step with history_items
    diseases TEXT DEFAULT '[]',
    medications TEXT DEFAULT '[]',
    allergies TEXT DEFAULT '[]'
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_history_patient ON history(patient_id);


-- =============================================================================
-- 9. HISTORY_ITEMS - One row per history entry
-- =============================================================================
CREATE TABLE IF NOT EXISTS history_items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    history_id INTEGER NOT NULL,
    kind TEXT NOT NULL CHECK (kind IN ('disease', 'medication', 'allergy')),
    position INTEGER NOT NULL,
    value TEXT NOT NULL,
    FOREIGN KEY (history_id) REFERENCES history(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_history_items_owner ON history_items(history_id, kind, position);


-- =============================================================================
-- 10. KEY_VALUE - Small persisted settings (active DoctorID)
-- =============================================================================
CREATE TABLE IF NOT EXISTS key_value (
    key TEXT PRIMARY KEY,
    value TEXT
);
"""

# Legacy encoded column per item kind
APPOINTMENT_ITEM_COLUMNS = {
    "disease": "visit_diseases",
    "medication": "medications",
}

HISTORY_ITEM_COLUMNS = {
    "disease": "diseases",
    "medication": "medications",
    "allergy": "allergies",
}
