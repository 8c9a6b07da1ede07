"""Persistent translation cache shared across analyses."""

import hashlib
import json
import logging
import os
import tempfile
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple, Union

from ..models.translation_unit import CacheEntry

logger = logging.getLogger(__name__)


class TranslationCache:
    """
    Caches translations by exact (source text, target language) match.

    Two tiers: an in-memory session dict in front of a JSON file on disk.
    Entries are written once and read many times; they are never
    invalidated within a run and persist across runs.

    File layout::

        {"version": 1, "entries": {"es": {"<sha256>": {...}}}}
    """

    VERSION = 1

    def __init__(self, path: Optional[Union[str, Path]] = None):
        """
        Initialize the cache.

        Args:
            path: JSON file backing the cache. None keeps the cache in memory only.
        """
        self.path = Path(path) if path else None
        self._lock = threading.Lock()
        self._data: Optional[Dict[str, Any]] = None

    def _load(self) -> Dict[str, Any]:
        """Load the cache from disk, with in-memory caching."""
        if self._data is not None:
            return self._data

        data: Dict[str, Any] = {"version": self.VERSION, "entries": {}}
        if self.path and self.path.exists():
            try:
                loaded = json.loads(self.path.read_text(encoding="utf-8"))
                if isinstance(loaded, dict) and isinstance(loaded.get("entries"), dict):
                    data = loaded
                else:
                    logger.warning("Ignoring cache file with unexpected layout: %s", self.path)
            except (json.JSONDecodeError, OSError) as e:
                logger.warning("Could not read translation cache %s: %s", self.path, e)

        self._data = data
        return data

    def _save(self) -> None:
        """Write the cache to disk atomically."""
        if self.path is None or self._data is None:
            return

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=str(self.path.parent), prefix=self.path.name, suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._data, f, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    @staticmethod
    def _compute_hash(source_text: str) -> str:
        return hashlib.sha256(source_text.encode("utf-8")).hexdigest()

    def get(self, source_text: str, target_language: str) -> Optional[CacheEntry]:
        """
        Look up a cached translation.

        Args:
            source_text: Exact source text
            target_language: Target language code

        Returns:
            CacheEntry if found, None otherwise
        """
        with self._lock:
            entries = self._load()["entries"].get(target_language, {})
            record = entries.get(self._compute_hash(source_text))

        # Guard against hash collisions by comparing the stored text
        if not record or record.get("source_text") != source_text:
            return None

        return CacheEntry(
            source_text=source_text,
            target_language=target_language,
            translated_text=record["translated_text"],
            quality_score=float(record.get("quality_score", 0.9)),
        )

    def put(
        self,
        source_text: str,
        target_language: str,
        translated_text: str,
        quality_score: float,
    ) -> None:
        """
        Store a translation. Writing the same key again overwrites it.

        Args:
            source_text: Exact source text
            target_language: Target language code
            translated_text: Translated text
            quality_score: Quality score in [0, 1]
        """
        self.put_many([(source_text, target_language, translated_text, quality_score)])

    def put_many(self, records: Iterable[Tuple[str, str, str, float]]) -> int:
        """
        Store several translations with a single write to disk.

        Args:
            records: (source_text, target_language, translated_text, quality_score) tuples

        Returns:
            Number of records stored
        """
        created_at = datetime.now().isoformat()
        count = 0
        with self._lock:
            data = self._load()
            for source_text, target_language, translated_text, quality_score in records:
                language_entries = data["entries"].setdefault(target_language, {})
                language_entries[self._compute_hash(source_text)] = {
                    "source_text": source_text,
                    "translated_text": translated_text,
                    "quality_score": quality_score,
                    "created_at": created_at,
                }
                count += 1
            if count:
                self._save()
        return count

    def clear(self) -> None:
        """Remove every entry, on disk and in memory."""
        with self._lock:
            self._data = {"version": self.VERSION, "entries": {}}
            if self.path and self.path.exists():
                self.path.unlink()

    def __len__(self) -> int:
        with self._lock:
            return sum(len(v) for v in self._load()["entries"].values())
