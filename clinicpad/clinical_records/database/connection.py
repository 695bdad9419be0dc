"""Database connection manager for SQLite."""

import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

from clinicpad.codec import decode_csv, decode_json
from clinicpad.errors import ConstraintError, StorageError

from .schema import APPOINTMENT_ITEM_COLUMNS, HISTORY_ITEM_COLUMNS, SCHEMA

load_dotenv(override=True)

DEFAULT_DB_PATH = Path(__file__).parent.parent / "clinicpad.db"


def get_db_path() -> Path:
    """Database file location, re-read on every call."""
    return Path(os.environ.get("CLINICPAD_DB_PATH", DEFAULT_DB_PATH))


def get_connection() -> sqlite3.Connection:
    """Get a database connection with row factory enabled."""
    conn = sqlite3.connect(get_db_path())
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def connect(operation: str):
    """Open a connection for one unit of work.

    Commits when the block finishes, rolls back otherwise, and always closes.
    sqlite errors are logged and re-raised as StorageError/ConstraintError.
    """
    conn = None
    try:
        conn = get_connection()
        yield conn
        conn.commit()
    except sqlite3.IntegrityError as e:
        if conn is not None:
            conn.rollback()
        logger.error(f"{operation}: constraint violated: {e}")
        raise ConstraintError(operation, str(e)) from e
    except sqlite3.Error as e:
        if conn is not None:
            conn.rollback()
        logger.error(f"{operation}: {e}")
        raise StorageError(operation, str(e)) from e
    finally:
        if conn is not None:
            conn.close()


# =============================================================================
# Migrations, tracked in PRAGMA user_version
# =============================================================================

def _migrate_base_schema(conn: sqlite3.Connection) -> None:
    """Version 1: tables are created by SCHEMA itself."""


def _migrate_backfill_items(conn: sqlite3.Connection) -> None:
    """Version 2: copy legacy encoded columns into the item tables."""
    cursor = conn.cursor()

    cursor.execute("SELECT id, visit_diseases, medications FROM appointments")
    for row in cursor.fetchall():
        for kind, column in APPOINTMENT_ITEM_COLUMNS.items():
            existing = conn.execute(
                "SELECT COUNT(*) FROM appointment_items WHERE appointment_id = ? AND kind = ?",
                (row["id"], kind),
            ).fetchone()[0]
            if existing:
                continue
            conn.executemany(
                "INSERT INTO appointment_items (appointment_id, kind, position, value) VALUES (?, ?, ?, ?)",
                [(row["id"], kind, i, value) for i, value in enumerate(decode_csv(row[column]))],
            )

    cursor.execute("SELECT id, diseases, medications, allergies FROM history")
    for row in cursor.fetchall():
        for kind, column in HISTORY_ITEM_COLUMNS.items():
            existing = conn.execute(
                "SELECT COUNT(*) FROM history_items WHERE history_id = ? AND kind = ?",
                (row["id"], kind),
            ).fetchone()[0]
            if existing:
                continue
            conn.executemany(
                "INSERT INTO history_items (history_id, kind, position, value) VALUES (?, ?, ?, ?)",
                [(row["id"], kind, i, value) for i, value in enumerate(decode_json(row[column]))],
            )


def _migrate_email_nocase(conn: sqlite3.Connection) -> None:
    """Version 3: doctor emails are unique regardless of case."""
    conn.execute("CREATE UNIQUE INDEX IF NOT EXISTS idx_doctors_email_nocase ON doctors(email COLLATE NOCASE)")


MIGRATIONS = [
    (1, _migrate_base_schema),
    (2, _migrate_backfill_items),
    (3, _migrate_email_nocase),
]

SCHEMA_VERSION = MIGRATIONS[-1][0]


def get_schema_version(conn: sqlite3.Connection) -> int:
    return conn.execute("PRAGMA user_version").fetchone()[0]


def init_database() -> None:
    """Initialize the database with schema. Safe to call on every start."""
    path = get_db_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    with connect("initialize database") as conn:
        conn.executescript(SCHEMA)
        current = get_schema_version(conn)
        for version, migrate in MIGRATIONS:
            if version <= current:
                continue
            logger.info(f"Applying schema migration {version} ({migrate.__name__})")
            migrate(conn)
            conn.execute(f"PRAGMA user_version = {int(version)}")


ensure_schema = init_database
