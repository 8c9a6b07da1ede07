"""Shared fixtures: an in-process fake backend and throwaway stores."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

import pytest

from repo_localizer.storage.result_store import ResultStore
from repo_localizer.storage.translation_cache import TranslationCache
from repo_localizer.translation.adapter import BackendAdapter
from repo_localizer.translation.clients.base import TranslationError
from repo_localizer.translation.retry import RetryPolicy


def no_sleep(seconds: float) -> None:
    """Sleep replacement that returns immediately."""


def fake_translation(text: str, target_language: str) -> str:
    return f"[{target_language}] {text}"


class FakeClock:
    """Monotonic clock that only moves when told to; records every sleep."""

    def __init__(self) -> None:
        self.now = 100.0
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeBackend:
    """
    Deterministic backend speaking the translation contract.

    ``fail_when`` receives the texts of a batch request and returns True when
    that request should raise a retryable TranslationError.
    """

    name = "fake"

    def __init__(
        self,
        translate: Callable[[str, str], str] = fake_translation,
        score: float = 0.95,
        fail_when: Optional[Callable[[List[str]], bool]] = None,
        payload: Any = None,
    ):
        self.translate = translate
        self.score = score
        self.fail_when = fail_when
        self.payload = payload
        self.text_calls: List[List[str]] = []
        self.json_calls: List[Dict[str, Any]] = []
        self.consolidated_calls: List[Dict[str, Any]] = []

    def translate_texts(
        self,
        texts: List[str],
        target_language: str,
        preserve_placeholders: bool = True,
        timeout: Optional[float] = None,
    ) -> Any:
        self.text_calls.append(list(texts))
        if self.fail_when is not None and self.fail_when(list(texts)):
            raise TranslationError("backend unavailable")
        if self.payload is not None:
            return self.payload
        return [
            {"translatedText": self.translate(t, target_language), "qualityScore": self.score}
            for t in texts
        ]

    def translate_json(
        self,
        data: Dict[str, Any],
        target_language: str,
        timeout: Optional[float] = None,
    ) -> Any:
        self.json_calls.append(data)
        if self.payload is not None:
            return self.payload
        return self._map_leaves(data, target_language)

    def translate_consolidated(
        self,
        english_json: Dict[str, str],
        target_languages: List[str],
        batch_index: Optional[int] = None,
        total_batches: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        self.consolidated_calls.append(
            {
                "englishJson": dict(english_json),
                "targetLanguages": list(target_languages),
                "batchIndex": batch_index,
                "totalBatches": total_batches,
            }
        )
        if self.fail_when is not None and self.fail_when(list(english_json.values())):
            raise TranslationError("backend unavailable")
        if self.payload is not None:
            return self.payload
        return {
            "translations": {
                key: {lang: self.translate(text, lang) for lang in target_languages}
                for key, text in english_json.items()
            }
        }

    def _map_leaves(self, node: Any, target_language: str) -> Any:
        if isinstance(node, dict):
            return {k: self._map_leaves(v, target_language) for k, v in node.items()}
        if isinstance(node, list):
            return [self._map_leaves(v, target_language) for v in node]
        if isinstance(node, str):
            return self.translate(node, target_language)
        return node


FAST_POLICY = RetryPolicy(max_attempts=3, base_delay=0.0, max_delay=0.0, jitter=0.0)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def adapter(backend: FakeBackend) -> BackendAdapter:
    return BackendAdapter(backend, policy=FAST_POLICY, timeout=5.0, sleep=no_sleep)


@pytest.fixture
def store():
    result_store = ResultStore(":memory:")
    yield result_store
    result_store.close()


@pytest.fixture
def cache(tmp_path) -> TranslationCache:
    return TranslationCache(tmp_path / "cache.json")
