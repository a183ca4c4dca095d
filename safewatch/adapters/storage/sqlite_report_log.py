"""
SQLite-based report log for SafeWatch.

This module implements an append-only SQLite table holding one row
per check run, as an alternative to the per-run JSON files.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

import aiosqlite

from safewatch.core.models import SafetyReport
from safewatch.observability.logging_setup import get_logger

log = get_logger("safewatch.reportlog")

# SQLite schema
SCHEMA = """
CREATE TABLE IF NOT EXISTS reports (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    run_at TEXT NOT NULL,
    kind TEXT NOT NULL,
    verdict TEXT NOT NULL,
    payload TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_reports_run_at ON reports(run_at);
"""


@dataclass
class ReportRow:
    """One stored run"""
    id: int
    run_at: str
    kind: str
    verdict: str
    payload: Dict[str, Any]


class SQLiteReportLog:
    """SQLite report history"""

    def __init__(self, path: str):
        """
        Initialize the log.

        Args:
            path: SQLite database file path
        """
        self.path = path
        self._ready = False

    async def init(self) -> None:
        """Create the schema."""
        async with aiosqlite.connect(self.path) as db:
            await db.executescript(SCHEMA)
            await db.commit()
        self._ready = True
        log.info("SQLiteReportLog schema ready", path=self.path)

    async def append(self, report: SafetyReport, meta: Optional[Dict[str, Any]] = None) -> str:
        if not self._ready:
            await self.init()

        entry = report.model_dump(mode="json")
        entry["meta"] = dict(meta or {})

        async with aiosqlite.connect(self.path) as db:
            cursor = await db.execute(
                "INSERT INTO reports (run_at, kind, verdict, payload) VALUES (?, ?, ?, ?)",
                (entry["generated_at"], report.kind.value, report.verdict.value, json.dumps(entry, ensure_ascii=False))
            )
            await db.commit()
            row_id = cursor.lastrowid

        log.info("report logged", row_id=row_id)
        return str(row_id)

    async def count(self) -> int:
        async with aiosqlite.connect(self.path) as db:
            cursor = await db.execute("SELECT COUNT(*) FROM reports")
            result = await cursor.fetchone()
            return result[0] if result else 0

    async def latest(self, kind: Optional[str] = None) -> Optional[ReportRow]:
        """
        Return the most recent run.

        Args:
            kind: restrict to one report kind

        Returns:
            ReportRow or None when empty
        """
        query = "SELECT id, run_at, kind, verdict, payload FROM reports"
        params: tuple = ()
        if kind:
            query += " WHERE kind = ?"
            params = (kind,)
        query += " ORDER BY id DESC LIMIT 1"

        async with aiosqlite.connect(self.path) as db:
            cursor = await db.execute(query, params)
            row = await cursor.fetchone()

        if row is None:
            return None
        return ReportRow(id=row[0], run_at=row[1], kind=row[2], verdict=row[3], payload=json.loads(row[4]))
