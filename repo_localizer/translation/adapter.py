"""Backend adapter: batching, timeouts, retries and response validation."""

import copy
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from ..models.translation_result import (
    BackendResult,
    ConsolidatedBatchResult,
    JsonTranslationResult,
)
from ..models.translation_unit import TranslationStatus
from .clients.base import (
    ConfigurationError,
    MalformedResponseError,
    TranslationBackend,
    TranslationError,
)
from .retry import RetryPolicy, retry_with_backoff

logger = logging.getLogger(__name__)

DEFAULT_QUALITY_SCORE = 0.9


class BackendAdapter:
    """
    Wraps a TranslationBackend so callers always get results, never exceptions.

    Each public method sends one request per call, retries retryable failures
    with exponential backoff and converts final failures into failed results
    carrying the last error message.
    """

    def __init__(
        self,
        backend: TranslationBackend,
        policy: Optional[RetryPolicy] = None,
        timeout: float = 60.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the adapter.

        Args:
            backend: Translation backend to call
            policy: Retry policy (defaults to 3 attempts, 4s base, 30s cap)
            timeout: Per-attempt timeout in seconds, passed to the backend
            sleep: Sleep function used between retries
        """
        self.backend = backend
        self.policy = policy or RetryPolicy()
        self.timeout = timeout
        self.sleep = sleep

    def _call(self, attempt: Callable[[], Any]) -> Any:
        return retry_with_backoff(
            attempt,
            policy=self.policy,
            retry_on=(TranslationError,),
            sleep=self.sleep,
        )

    def translate_batch(
        self,
        texts: List[str],
        target_language: str,
        preserve_placeholders: bool = True,
    ) -> List[BackendResult]:
        """
        Translate a batch of texts in one request.

        Args:
            texts: Source texts
            target_language: Target language code
            preserve_placeholders: Ask the backend to keep interpolation tokens

        Returns:
            One BackendResult per input text, in input order
        """
        if not texts:
            return []

        def attempt() -> List[BackendResult]:
            payload = self.backend.translate_texts(
                texts,
                target_language,
                preserve_placeholders=preserve_placeholders,
                timeout=self.timeout,
            )
            return self._parse_batch_payload(payload, len(texts))

        try:
            return self._call(attempt)
        except ConfigurationError as e:
            logger.error("Backend %s is misconfigured: %s", self.backend.name, e)
            error = str(e)
        except Exception as e:
            logger.error(
                "All attempts failed for batch of %d texts to %s: %s",
                len(texts),
                target_language,
                e,
            )
            error = str(e) or "Batch translation failed after all retries"

        return [BackendResult.failed(error) for _ in texts]

    def translate_text(
        self,
        text: str,
        target_language: str,
        preserve_placeholders: bool = True,
    ) -> BackendResult:
        """Translate a single text as a batch of one."""
        return self.translate_batch([text], target_language, preserve_placeholders)[0]

    def translate_json(self, data: Dict[str, Any], target_language: str) -> JsonTranslationResult:
        """
        Translate leaf string values of a JSON object.

        The response must have exactly the same key paths as the input;
        anything else counts as a malformed response. On final failure the
        source object is returned unchanged with a failed status.
        """
        expected = _key_paths(data)

        def attempt() -> Dict[str, Any]:
            payload = self.backend.translate_json(data, target_language, timeout=self.timeout)
            _raise_on_error_payload(payload)
            if not isinstance(payload, dict):
                raise MalformedResponseError("Structured response is not a JSON object")
            actual = _key_paths(payload)
            if actual != expected:
                missing = sorted(expected - actual)
                extra = sorted(actual - expected)
                raise MalformedResponseError(
                    f"Key mismatch in structured response: "
                    f"{len(missing)} missing, {len(extra)} unexpected"
                )
            return payload

        try:
            translated = self._call(attempt)
        except Exception as e:
            logger.error("Structured translation to %s failed: %s", target_language, e)
            return JsonTranslationResult(
                data=copy.deepcopy(data),
                status=TranslationStatus.FAILED,
                error=str(e),
            )

        issues = [
            f"'{'.'.join(str(p) for p in path)}' was returned untranslated"
            for path, value in _leaves(data)
            if _get_path(translated, path) == value and value.strip()
        ]
        return JsonTranslationResult(
            data=translated, status=TranslationStatus.COMPLETED, issues=issues
        )

    def translate_consolidated(
        self,
        english_json: Dict[str, str],
        target_languages: List[str],
        batch_index: Optional[int] = None,
        total_batches: Optional[int] = None,
    ) -> ConsolidatedBatchResult:
        """
        Translate a key -> English map into several languages in one request.

        Keys or languages absent from the response fall back to the English
        text and are listed in ``missing``; they are not reported as success.
        On final failure every value falls back to English.
        """

        def attempt() -> Dict[str, Any]:
            payload = self.backend.translate_consolidated(
                english_json,
                target_languages,
                batch_index=batch_index,
                total_batches=total_batches,
                timeout=self.timeout,
            )
            _raise_on_error_payload(payload)
            if not isinstance(payload, dict) or not isinstance(payload.get("translations"), dict):
                raise MalformedResponseError("No translation data returned from service")
            return payload["translations"]

        try:
            raw = self._call(attempt)
        except Exception as e:
            logger.error(
                "Consolidated translation failed for %d keys: %s", len(english_json), e
            )
            return ConsolidatedBatchResult(
                translations={
                    key: {lang: text for lang in target_languages}
                    for key, text in english_json.items()
                },
                status=TranslationStatus.FAILED,
                missing={key: list(target_languages) for key in english_json},
                error=str(e),
            )

        translations: Dict[str, Dict[str, str]] = {}
        missing: Dict[str, List[str]] = {}
        for key, text in english_json.items():
            per_key = raw.get(key) if isinstance(raw.get(key), dict) else {}
            values = {}
            for lang in target_languages:
                value = per_key.get(lang)
                if isinstance(value, str) and value.strip():
                    values[lang] = value
                else:
                    values[lang] = text
                    missing.setdefault(key, []).append(lang)
            translations[key] = values

        if missing:
            logger.warning(
                "Consolidated response missing %d key/language pairs; using English fallback",
                sum(len(v) for v in missing.values()),
            )
        return ConsolidatedBatchResult(
            translations=translations,
            status=TranslationStatus.COMPLETED,
            missing=missing,
        )

    @staticmethod
    def _parse_batch_payload(payload: Any, expected_count: int) -> List[BackendResult]:
        """Validate a batch response and convert it to positional results."""
        _raise_on_error_payload(payload)
        if payload is None:
            raise MalformedResponseError("No data returned from translation service")

        items = payload if isinstance(payload, list) else [payload]
        if len(items) != expected_count:
            raise MalformedResponseError(
                f"Expected {expected_count} results, got {len(items)}"
            )

        results = []
        for item in items:
            text = item.get("translatedText") if isinstance(item, dict) else None
            if not isinstance(text, str):
                results.append(BackendResult.failed("Missing translated text in response"))
                continue
            results.append(BackendResult(
                translated_text=text,
                quality_score=_normalize_score(item.get("qualityScore")),
                status=TranslationStatus.COMPLETED,
            ))
        return results


def _raise_on_error_payload(payload: Any) -> None:
    if isinstance(payload, dict) and payload.get("error"):
        raise MalformedResponseError(str(payload["error"]))


def _normalize_score(value: Any) -> float:
    """Clamp a reported score to [0, 1]; missing or zero scores use the default."""
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not value:
        return DEFAULT_QUALITY_SCORE
    return min(1.0, max(0.0, float(value)))


def _leaves(node: Any, path: Tuple[Any, ...] = ()) -> List[Tuple[Tuple[Any, ...], str]]:
    if isinstance(node, dict):
        out = []
        for key, value in node.items():
            out.extend(_leaves(value, path + (key,)))
        return out
    if isinstance(node, list):
        out = []
        for i, value in enumerate(node):
            out.extend(_leaves(value, path + (i,)))
        return out
    if isinstance(node, str):
        return [(path, node)]
    return []


def _key_paths(node: Any, path: Tuple[Any, ...] = ()) -> Set[Tuple[Any, ...]]:
    """All key paths of a JSON value, including container paths."""
    paths = {path}
    if isinstance(node, dict):
        for key, value in node.items():
            paths |= _key_paths(value, path + (key,))
    elif isinstance(node, list):
        for i, value in enumerate(node):
            paths |= _key_paths(value, path + (i,))
    return paths


def _get_path(node: Any, path: Tuple[Any, ...]) -> Any:
    for step in path:
        node = node[step]
    return node
