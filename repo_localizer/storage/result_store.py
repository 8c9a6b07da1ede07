"""Per-analysis result store backed by SQLite."""

import logging
import sqlite3
import threading
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..models.translation_unit import TranslationStatus, TranslationUnit

logger = logging.getLogger(__name__)


SCHEMA = """
CREATE TABLE IF NOT EXISTS translations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    analysis_id TEXT NOT NULL,
    translation_key TEXT NOT NULL,
    language_code TEXT NOT NULL,
    original_text TEXT NOT NULL,
    translated_text TEXT NOT NULL,
    quality_score REAL NOT NULL DEFAULT 0,
    status TEXT NOT NULL DEFAULT 'pending',
    error TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    UNIQUE (analysis_id, language_code, translation_key)
);
CREATE INDEX IF NOT EXISTS idx_translations_analysis_status
    ON translations (analysis_id, status);
"""


class ResultStore:
    """
    Stores every TranslationUnit of an analysis.

    Rows are unique per (analysis_id, language_code, translation_key);
    writes use upsert semantics so re-runs never duplicate a unit.
    """

    def __init__(self, db_path: Union[str, Path] = ":memory:"):
        """
        Open (and create if needed) the result database.

        Args:
            db_path: SQLite database path, or ":memory:"
        """
        self.db_path = str(db_path)
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        self._lock = threading.Lock()
        self.conn = sqlite3.connect(self.db_path, timeout=30.0, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        if self.db_path != ":memory:":
            self.conn.execute("PRAGMA journal_mode = WAL")
        self.conn.executescript(SCHEMA)
        self.conn.commit()

    def upsert(self, unit: TranslationUnit) -> None:
        """Insert a unit, or update the existing row for the same key."""
        now = datetime.now().isoformat()
        with self._lock, self.conn:
            self.conn.execute(
                """
                INSERT INTO translations (
                    analysis_id, translation_key, language_code, original_text,
                    translated_text, quality_score, status, error, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (analysis_id, language_code, translation_key) DO UPDATE SET
                    original_text = excluded.original_text,
                    translated_text = excluded.translated_text,
                    quality_score = excluded.quality_score,
                    status = excluded.status,
                    error = excluded.error,
                    updated_at = excluded.updated_at
                """,
                (
                    unit.analysis_id,
                    unit.translation_key,
                    unit.target_language,
                    unit.source_text,
                    unit.translated_text,
                    unit.quality_score,
                    TranslationStatus(unit.status).value,
                    unit.error,
                    now,
                    now,
                ),
            )

    def get_units(
        self,
        analysis_id: str,
        language: Optional[str] = None,
        status: Optional[TranslationStatus] = None,
    ) -> List[TranslationUnit]:
        """
        Fetch units for an analysis in insertion order.

        Args:
            analysis_id: Analysis identifier
            language: Optional language filter
            status: Optional status filter

        Returns:
            List of TranslationUnit
        """
        query = "SELECT * FROM translations WHERE analysis_id = ?"
        params: list = [analysis_id]
        if language:
            query += " AND language_code = ?"
            params.append(language)
        if status:
            query += " AND status = ?"
            params.append(TranslationStatus(status).value)
        query += " ORDER BY id"

        with self._lock:
            rows = self.conn.execute(query, params).fetchall()
        return [self._row_to_unit(row) for row in rows]

    def get_unit(
        self, analysis_id: str, language: str, translation_key: str
    ) -> Optional[TranslationUnit]:
        """Fetch a single unit, or None."""
        with self._lock:
            row = self.conn.execute(
                """
                SELECT * FROM translations
                WHERE analysis_id = ? AND language_code = ? AND translation_key = ?
                """,
                (analysis_id, language, translation_key),
            ).fetchone()
        return self._row_to_unit(row) if row else None

    def update_status(
        self,
        analysis_id: str,
        language: str,
        translation_key: str,
        status: TranslationStatus,
        quality_score: float,
    ) -> bool:
        """
        Update status and score of an existing unit.

        Returns:
            True if a row was updated
        """
        with self._lock, self.conn:
            cursor = self.conn.execute(
                """
                UPDATE translations
                SET status = ?, quality_score = ?, error = NULL, updated_at = ?
                WHERE analysis_id = ? AND language_code = ? AND translation_key = ?
                """,
                (
                    TranslationStatus(status).value,
                    quality_score,
                    datetime.now().isoformat(),
                    analysis_id,
                    language,
                    translation_key,
                ),
            )
        return cursor.rowcount > 0

    def count_by_status(self, analysis_id: str, language: Optional[str] = None) -> Dict[str, int]:
        """Count units per status for an analysis (optionally one language)."""
        query = "SELECT status, COUNT(*) AS count FROM translations WHERE analysis_id = ?"
        params: list = [analysis_id]
        if language:
            query += " AND language_code = ?"
            params.append(language)
        query += " GROUP BY status"

        counts = {status.value: 0 for status in TranslationStatus}
        with self._lock:
            for row in self.conn.execute(query, params):
                counts[row["status"]] = row["count"]
        return counts

    def languages(self, analysis_id: str) -> List[str]:
        """List languages that have units for an analysis."""
        with self._lock:
            rows = self.conn.execute(
                "SELECT DISTINCT language_code FROM translations "
                "WHERE analysis_id = ? ORDER BY language_code",
                (analysis_id,),
            ).fetchall()
        return [row["language_code"] for row in rows]

    def close(self) -> None:
        with self._lock:
            self.conn.close()

    @staticmethod
    def _row_to_unit(row: sqlite3.Row) -> TranslationUnit:
        return TranslationUnit(
            analysis_id=row["analysis_id"],
            translation_key=row["translation_key"],
            source_text=row["original_text"],
            target_language=row["language_code"],
            translated_text=row["translated_text"],
            quality_score=row["quality_score"],
            status=TranslationStatus(row["status"]),
            error=row["error"],
        )
