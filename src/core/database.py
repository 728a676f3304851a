"""
SQLite database operations for staff schedules, schedule requests and preferences.
"""

import sqlite3
import uuid
from datetime import datetime, timezone
from pathlib import Path

from core.config import DB_PATH

ENTRY_COLUMNS = (
    "id", "staff_id", "date", "start_time", "end_time",
    "status", "notes", "created_at", "updated_at",
)
ENTRY_UPDATABLE = {"date", "start_time", "end_time", "status", "notes"}

REQUEST_COLUMNS = (
    "id", "staff_id", "staff_name", "date", "start_time", "end_time",
    "notes", "status", "requested_at", "approved_at",
)
REQUEST_UPDATABLE = {"status", "notes", "approved_at"}


def get_connection(db_path: Path | str = DB_PATH) -> sqlite3.Connection:
    """Get a database connection with dict-like rows."""
    if str(db_path) != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


def create_tables(conn: sqlite3.Connection):
    """Create all tables and indexes if they don't exist."""
    cursor = conn.cursor()

    # staff_id has no declared type so integer and string ids keep their type
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS schedule_entries (
            id TEXT PRIMARY KEY,
            staff_id NOT NULL,
            date TEXT NOT NULL,
            start_time TEXT NOT NULL,
            end_time TEXT NOT NULL,
            status TEXT NOT NULL DEFAULT 'scheduled'
                CHECK(status IN ('scheduled', 'active', 'completed', 'absent', 'cancelled')),
            notes TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS schedule_requests (
            id TEXT PRIMARY KEY,
            staff_id NOT NULL,
            staff_name TEXT,
            date TEXT NOT NULL,
            start_time TEXT NOT NULL,
            end_time TEXT NOT NULL,
            notes TEXT,
            status TEXT NOT NULL DEFAULT 'pending'
                CHECK(status IN ('pending', 'approved', 'rejected', 'modified')),
            requested_at TEXT NOT NULL,
            approved_at TEXT
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS preferences (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS api_requests (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            request_id TEXT UNIQUE NOT NULL,
            timestamp TEXT NOT NULL,
            endpoint TEXT NOT NULL,
            method TEXT NOT NULL,
            client_ip TEXT,
            status_code INTEGER NOT NULL,
            error_code TEXT,
            error_message TEXT,
            processing_time_ms INTEGER NOT NULL,
            entries_created INTEGER,
            entries_skipped INTEGER
        )
    """)

    cursor.execute(
        "CREATE INDEX IF NOT EXISTS idx_entries_date ON schedule_entries(date)"
    )
    cursor.execute(
        "CREATE INDEX IF NOT EXISTS idx_entries_staff_date ON schedule_entries(staff_id, date)"
    )
    cursor.execute(
        "CREATE INDEX IF NOT EXISTS idx_requests_status ON schedule_requests(status)"
    )
    cursor.execute(
        "CREATE INDEX IF NOT EXISTS idx_api_requests_timestamp ON api_requests(timestamp)"
    )
    conn.commit()


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_id(prefix: str) -> str:
    """Generate a record id such as 'schedule-3f2a...'."""
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


# =============================================================================
# SCHEDULE ENTRIES
# =============================================================================


def select_entries_for_date(conn: sqlite3.Connection, date_str: str) -> list[dict]:
    cursor = conn.cursor()
    cursor.execute(
        "SELECT * FROM schedule_entries WHERE date = ? ORDER BY start_time, created_at",
        (date_str,),
    )
    return [dict(row) for row in cursor.fetchall()]


def select_entry(conn: sqlite3.Connection, entry_id: str) -> dict | None:
    cursor = conn.cursor()
    cursor.execute("SELECT * FROM schedule_entries WHERE id = ?", (entry_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def insert_entry(conn: sqlite3.Connection, candidate: dict) -> dict:
    """Insert a schedule entry and return the stored record."""
    now = utc_now()
    entry = {
        "id": new_id("schedule"),
        "staff_id": candidate["staff_id"],
        "date": candidate["date"],
        "start_time": candidate["start_time"],
        "end_time": candidate["end_time"],
        "status": candidate.get("status") or "scheduled",
        "notes": candidate.get("notes"),
        "created_at": now,
        "updated_at": now,
    }
    cursor = conn.cursor()
    cursor.execute(
        f"INSERT INTO schedule_entries ({', '.join(ENTRY_COLUMNS)}) "
        f"VALUES ({', '.join('?' for _ in ENTRY_COLUMNS)})",
        tuple(entry[col] for col in ENTRY_COLUMNS),
    )
    conn.commit()
    return entry


def update_entry_fields(conn: sqlite3.Connection, entry_id: str, fields: dict) -> dict | None:
    """
    Update the given columns of an entry.

    Unknown field names raise ValueError. Returns the updated record,
    or None if no entry has that id.
    """
    unknown = set(fields) - ENTRY_UPDATABLE
    if unknown:
        raise ValueError(f"Cannot update schedule fields: {', '.join(sorted(unknown))}")

    if select_entry(conn, entry_id) is None:
        return None

    assignments = [f"{col} = ?" for col in fields] + ["updated_at = ?"]
    params = list(fields.values()) + [utc_now(), entry_id]
    cursor = conn.cursor()
    cursor.execute(
        f"UPDATE schedule_entries SET {', '.join(assignments)} WHERE id = ?",
        params,
    )
    conn.commit()
    return select_entry(conn, entry_id)


def delete_entry_row(conn: sqlite3.Connection, entry_id: str) -> bool:
    cursor = conn.cursor()
    cursor.execute("DELETE FROM schedule_entries WHERE id = ?", (entry_id,))
    conn.commit()
    return cursor.rowcount > 0


# =============================================================================
# SCHEDULE REQUESTS
# =============================================================================


def insert_request(conn: sqlite3.Connection, request: dict) -> dict:
    """Insert a pending staff schedule request and return the stored record."""
    record = {
        "id": new_id("request"),
        "staff_id": request["staff_id"],
        "staff_name": request.get("staff_name"),
        "date": request["date"],
        "start_time": request["start_time"],
        "end_time": request["end_time"],
        "notes": request.get("notes"),
        "status": "pending",
        "requested_at": utc_now(),
        "approved_at": None,
    }
    cursor = conn.cursor()
    cursor.execute(
        f"INSERT INTO schedule_requests ({', '.join(REQUEST_COLUMNS)}) "
        f"VALUES ({', '.join('?' for _ in REQUEST_COLUMNS)})",
        tuple(record[col] for col in REQUEST_COLUMNS),
    )
    conn.commit()
    return record


def select_requests(conn: sqlite3.Connection, status: str | None = None) -> list[dict]:
    cursor = conn.cursor()
    if status:
        cursor.execute(
            "SELECT * FROM schedule_requests WHERE status = ? ORDER BY requested_at",
            (status,),
        )
    else:
        cursor.execute("SELECT * FROM schedule_requests ORDER BY requested_at")
    return [dict(row) for row in cursor.fetchall()]


def select_request(conn: sqlite3.Connection, request_id: str) -> dict | None:
    cursor = conn.cursor()
    cursor.execute("SELECT * FROM schedule_requests WHERE id = ?", (request_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def update_request_fields(conn: sqlite3.Connection, request_id: str, fields: dict) -> dict | None:
    unknown = set(fields) - REQUEST_UPDATABLE
    if unknown:
        raise ValueError(f"Cannot update request fields: {', '.join(sorted(unknown))}")

    if select_request(conn, request_id) is None:
        return None

    assignments = [f"{col} = ?" for col in fields]
    cursor = conn.cursor()
    cursor.execute(
        f"UPDATE schedule_requests SET {', '.join(assignments)} WHERE id = ?",
        list(fields.values()) + [request_id],
    )
    conn.commit()
    return select_request(conn, request_id)


# =============================================================================
# PREFERENCES
# =============================================================================


def get_preference_value(conn: sqlite3.Connection, key: str) -> str | None:
    cursor = conn.cursor()
    cursor.execute("SELECT value FROM preferences WHERE key = ?", (key,))
    row = cursor.fetchone()
    return row["value"] if row else None


def set_preference_value(conn: sqlite3.Connection, key: str, value: str):
    cursor = conn.cursor()
    cursor.execute(
        """
        INSERT INTO preferences (key, value, updated_at) VALUES (?, ?, ?)
        ON CONFLICT(key) DO UPDATE SET
            value = excluded.value,
            updated_at = excluded.updated_at
        """,
        (key, value, utc_now()),
    )
    conn.commit()
