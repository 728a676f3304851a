"""
Persistence collaborator for schedule entries and staff schedule requests.

Every method is one awaited round-trip. The SQLite implementation runs each
call in a worker thread so the event loop is never blocked.
"""

import asyncio
import sqlite3
from pathlib import Path
from typing import Protocol

from core import database
from core.config import DB_PATH
from core.log import get_logger
from models.schedules import ScheduleCandidate, ScheduleEntry, ScheduleRequest

logger = get_logger(__name__)


class ScheduleStore(Protocol):
    """Operations the scheduling services need from storage."""

    async def fetch_entries_for_date(self, date_str: str) -> list[ScheduleEntry]: ...

    async def get_entry(self, entry_id: str) -> ScheduleEntry | None: ...

    async def create_entry(self, candidate: ScheduleCandidate) -> ScheduleEntry: ...

    async def update_entry(self, entry_id: str, fields: dict) -> ScheduleEntry | None: ...

    async def delete_entry(self, entry_id: str) -> bool: ...

    async def create_request(self, request: dict) -> ScheduleRequest: ...

    async def list_requests(self, status: str | None = None) -> list[ScheduleRequest]: ...

    async def get_request(self, request_id: str) -> ScheduleRequest | None: ...

    async def update_request(self, request_id: str, fields: dict) -> ScheduleRequest | None: ...


class SqliteScheduleStore:
    """ScheduleStore backed by the project SQLite database."""

    def __init__(self, db_path: Path | str = DB_PATH, conn: sqlite3.Connection | None = None):
        self.db_path = db_path
        self.conn = conn or database.get_connection(db_path)
        database.create_tables(self.conn)
        # sqlite3 connections are not safe for concurrent use across threads
        self._lock = asyncio.Lock()

    async def _run(self, func, *args):
        async with self._lock:
            return await asyncio.to_thread(func, self.conn, *args)

    async def fetch_entries_for_date(self, date_str: str) -> list[dict]:
        return await self._run(database.select_entries_for_date, date_str)

    async def get_entry(self, entry_id: str) -> dict | None:
        return await self._run(database.select_entry, entry_id)

    async def create_entry(self, candidate: dict) -> dict:
        entry = await self._run(database.insert_entry, candidate)
        logger.debug(
            "Created entry %s for staff %s on %s %s-%s",
            entry["id"], entry["staff_id"], entry["date"], entry["start_time"], entry["end_time"],
        )
        return entry

    async def update_entry(self, entry_id: str, fields: dict) -> dict | None:
        return await self._run(database.update_entry_fields, entry_id, fields)

    async def delete_entry(self, entry_id: str) -> bool:
        return await self._run(database.delete_entry_row, entry_id)

    async def create_request(self, request: dict) -> dict:
        return await self._run(database.insert_request, request)

    async def list_requests(self, status: str | None = None) -> list[dict]:
        return await self._run(database.select_requests, status)

    async def get_request(self, request_id: str) -> dict | None:
        return await self._run(database.select_request, request_id)

    async def update_request(self, request_id: str, fields: dict) -> dict | None:
        return await self._run(database.update_request_fields, request_id, fields)

    def close(self):
        self.conn.close()
