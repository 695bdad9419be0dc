"""Small persisted key/value settings table."""

from .connection import connect


class KeyValueStore:
    """String values keyed by name, e.g. the active DoctorID."""

    def get_item(self, key: str) -> str | None:
        with connect("read setting") as conn:
            row = conn.execute("SELECT value FROM key_value WHERE key = ?", (key,)).fetchone()
        return row["value"] if row else None

    def set_item(self, key: str, value: str) -> None:
        with connect("write setting") as conn:
            conn.execute(
                """INSERT INTO key_value (key, value) VALUES (?, ?)
                   ON CONFLICT(key) DO UPDATE SET value = excluded.value""",
                (key, value),
            )

    def remove_item(self, key: str) -> None:
        with connect("remove setting") as conn:
            conn.execute("DELETE FROM key_value WHERE key = ?", (key,))
