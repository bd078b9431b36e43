#!/usr/bin/env python3
"""
Session History Database
========================
Stores completed reports so results can be compared over time.

Only the inputs of a report (age bracket and round results) are needed to
rebuild it, since report generation is deterministic; the headline numbers
are stored as columns for listing and statistics.

Storage: SQLite database (default ~/.lexaccess/sessions.db, see app.yaml
storage.db_path or the LEXACCESS_DB environment variable)
"""

import json
import logging
import os
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from lexaccess.models import Report, RoundResult
from lexaccess.report import generate_report
from lexaccess.settings import get_setting, resolve_path

logger = logging.getLogger(__name__)


@dataclass
class SessionRecord:
    """A stored session"""
    id: int
    created_at: str
    age_bracket: str
    pct: int
    percentile: int
    phono_pct: int
    semantic_pct: int
    mixed_pct: int
    archetype: str
    strongest: str
    weakest: str
    partial_count: int
    results: List[RoundResult] = field(default_factory=list)

    def to_report(self) -> Report:
        """Rebuild the full report from the stored results."""
        return generate_report(self.results, self.age_bracket)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'created_at': self.created_at,
            'age_bracket': self.age_bracket,
            'pct': self.pct,
            'percentile': self.percentile,
            'phono_pct': self.phono_pct,
            'semantic_pct': self.semantic_pct,
            'mixed_pct': self.mixed_pct,
            'archetype': self.archetype,
            'strongest': self.strongest,
            'weakest': self.weakest,
            'partial_count': self.partial_count,
            'results': [r.to_dict() for r in self.results],
        }


def default_db_path() -> Path:
    env = os.environ.get('LEXACCESS_DB')
    if env:
        return resolve_path(env, base=Path.cwd())
    value = get_setting("storage.db_path")
    if value is None:
        raise ValueError("storage.db_path must be set in app.yaml")
    return resolve_path(value)


class SessionDB:
    """
    SQLite store for completed sessions.

    Usage:
        db = SessionDB()
        session_id = db.save(report)
        record = db.get(session_id)
        for rec in db.recent(10):
            print(rec.pct, rec.archetype)
    """

    def __init__(self, db_path: str = None):
        self.db_path = Path(db_path) if db_path else default_db_path()
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self):
        """Create tables"""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS sessions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    created_at TEXT NOT NULL,
                    age_bracket TEXT NOT NULL,
                    pct INTEGER NOT NULL,
                    percentile INTEGER NOT NULL,
                    phono_pct INTEGER NOT NULL,
                    semantic_pct INTEGER NOT NULL,
                    mixed_pct INTEGER NOT NULL,
                    archetype TEXT NOT NULL,
                    strongest TEXT NOT NULL,
                    weakest TEXT NOT NULL,
                    partial_count INTEGER NOT NULL DEFAULT 0,
                    results TEXT NOT NULL
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_sessions_created ON sessions(created_at)")

    def _now(self) -> str:
        return datetime.now().isoformat(timespec='seconds')

    def save(self, report: Report) -> int:
        """Store a completed report; returns the new session id."""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute("""
                INSERT INTO sessions (
                    created_at, age_bracket, pct, percentile,
                    phono_pct, semantic_pct, mixed_pct,
                    archetype, strongest, weakest, partial_count, results
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                self._now(),
                report.age_bracket,
                report.pct,
                report.percentile,
                report.phono_pct,
                report.semantic_pct,
                report.mixed_pct,
                report.archetype.name,
                report.strongest.channel.value,
                report.weakest.channel.value,
                report.partial_count,
                json.dumps([r.to_dict() for r in report.results]),
            ))
            session_id = cursor.lastrowid
        logger.info(f"Saved session {session_id} ({report.pct}%, {report.archetype.name})")
        return session_id

    def _row_to_record(self, row) -> SessionRecord:
        return SessionRecord(
            id=row['id'],
            created_at=row['created_at'],
            age_bracket=row['age_bracket'],
            pct=row['pct'],
            percentile=row['percentile'],
            phono_pct=row['phono_pct'],
            semantic_pct=row['semantic_pct'],
            mixed_pct=row['mixed_pct'],
            archetype=row['archetype'],
            strongest=row['strongest'],
            weakest=row['weakest'],
            partial_count=row['partial_count'],
            results=[RoundResult.from_dict(d) for d in json.loads(row['results'])],
        )

    def get(self, session_id: int) -> Optional[SessionRecord]:
        """Get a session by id"""
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            cursor = conn.execute("SELECT * FROM sessions WHERE id = ?", (session_id,))
            row = cursor.fetchone()
            return self._row_to_record(row) if row else None

    def recent(self, limit: int = 20) -> List[SessionRecord]:
        """Most recent sessions first"""
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            cursor = conn.execute(
                "SELECT * FROM sessions ORDER BY id DESC LIMIT ?", (limit,)
            )
            return [self._row_to_record(row) for row in cursor.fetchall()]

    def count(self) -> int:
        with sqlite3.connect(self.db_path) as conn:
            return conn.execute("SELECT COUNT(*) FROM sessions").fetchone()[0]

    # =========================================================================
    # Statistics
    # =========================================================================

    def stats(self) -> dict:
        """Aggregate statistics over all stored sessions"""
        with sqlite3.connect(self.db_path) as conn:
            stats = {'total': 0, 'by_archetype': {}, 'by_weakest': {}}

            stats['total'] = conn.execute("SELECT COUNT(*) FROM sessions").fetchone()[0]

            row = conn.execute(
                "SELECT AVG(pct), AVG(percentile), MAX(pct) FROM sessions"
            ).fetchone()
            stats['avg_pct'], stats['avg_percentile'], stats['best_pct'] = row

            cursor = conn.execute("""
                SELECT archetype, COUNT(*) FROM sessions GROUP BY archetype
            """)
            for name, count in cursor.fetchall():
                stats['by_archetype'][name] = count

            cursor = conn.execute("""
                SELECT weakest, COUNT(*) FROM sessions GROUP BY weakest
            """)
            for channel, count in cursor.fetchall():
                stats['by_weakest'][channel] = count

            return stats

    # =========================================================================
    # Export / Reset
    # =========================================================================

    def export_json(self, filepath: str = None) -> str:
        """Export all sessions to JSON (oldest first)"""
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            cursor = conn.execute("SELECT * FROM sessions ORDER BY id")
            sessions = [self._row_to_record(row).to_dict() for row in cursor.fetchall()]

        json_str = json.dumps(sessions, indent=2, ensure_ascii=False)
        if filepath:
            Path(filepath).write_text(json_str, encoding='utf-8')
        return json_str

    def reset(self) -> int:
        """Delete all sessions; returns how many were removed."""
        with sqlite3.connect(self.db_path) as conn:
            removed = conn.execute("DELETE FROM sessions").rowcount
        logger.info(f"Removed {removed} sessions")
        return removed


# Singleton
_default_db = None

def get_db() -> SessionDB:
    """Get default database instance"""
    global _default_db
    if _default_db is None:
        _default_db = SessionDB()
    return _default_db


__all__ = [
    'SessionDB',
    'SessionRecord',
    'default_db_path',
    'get_db',
]
