"""Assembles translation JSON files from the result store."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..models.translation_result import TranslationFile
from ..models.translation_unit import TranslationStatus
from ..storage.result_store import ResultStore

logger = logging.getLogger(__name__)

SOURCE_LANGUAGE = "en"


class TranslationFileAssembler:
    """
    Builds per-language and consolidated translation files.

    Reads exclusively from the result store and never modifies it. Only
    completed units become values; a language with nothing completed, or
    whose generation fails, yields an empty ``{}`` file.
    """

    def __init__(
        self,
        store: Optional[ResultStore] = None,
        locales_dir: str = "src/i18n/locales",
        consolidated_path: str = "src/i18n/translations.json",
    ):
        self.store = store
        self.locales_dir = locales_dir.rstrip("/")
        self.consolidated_path = consolidated_path

    def assemble(
        self,
        analysis_id: str,
        target_languages: List[str],
        source_strings: Optional[Dict[str, str]] = None,
    ) -> List[TranslationFile]:
        """
        Generate one flat ``{key: text}`` file per language.

        Args:
            analysis_id: Analysis identifier
            target_languages: Language codes to emit
            source_strings: Optional English strings; when given, ``en.json`` comes first

        Returns:
            List of TranslationFile, one per language
        """
        files = []
        if source_strings is not None:
            files.append(self._file(SOURCE_LANGUAGE, dict(source_strings)))

        for language in target_languages:
            if language == SOURCE_LANGUAGE and source_strings is not None:
                continue
            try:
                units = self.store.get_units(
                    analysis_id, language=language, status=TranslationStatus.COMPLETED
                )
                data = {u.translation_key: u.translated_text or "" for u in units}
                if not data:
                    logger.warning("%s file will be empty (no completed translations)", language)
                files.append(self._file(language, data))
            except Exception as e:
                logger.error("Failed to generate file for %s: %s", language, e)
                files.append(self._file(language, {}))

        logger.info("Generated %d translation files for analysis %s", len(files), analysis_id)
        return files

    def assemble_consolidated(
        self, analysis_id: str, target_languages: List[str]
    ) -> TranslationFile:
        """
        Generate one ``{key: {lang: text}}`` document with English first.

        English comes from the stored source text, so every stored key is
        present even when no language completed for it.
        """
        document: Dict[str, Dict[str, str]] = {}
        try:
            units = self.store.get_units(analysis_id)
            for unit in units:
                document.setdefault(unit.translation_key, {SOURCE_LANGUAGE: unit.source_text})

            for language in target_languages:
                if language == SOURCE_LANGUAGE:
                    continue
                for unit in units:
                    if unit.target_language == language and unit.status == TranslationStatus.COMPLETED:
                        document[unit.translation_key][language] = unit.translated_text or ""
        except Exception as e:
            logger.error("Failed to generate consolidated file: %s", e)
            document = {}

        return TranslationFile(
            path=self.consolidated_path,
            content=self.to_json(document),
            language="all",
            entry_count=len(document),
        )

    def consolidated_file(self, translations: Dict[str, Dict[str, str]]) -> TranslationFile:
        """Wrap an already-built consolidated document as a TranslationFile."""
        return TranslationFile(
            path=self.consolidated_path,
            content=self.to_json(translations),
            language="all",
            entry_count=len(translations),
        )

    @staticmethod
    def to_json(data: Any) -> str:
        """Serialize with 2-space indentation, keeping non-ASCII characters."""
        return json.dumps(data, indent=2, ensure_ascii=False)

    def write(self, files: List[TranslationFile], output_dir: Union[str, Path]) -> List[Path]:
        """
        Write files below output_dir, keeping their relative paths.

        Returns:
            Paths written
        """
        written = []
        root = Path(output_dir)
        for file in files:
            path = root / file.path
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                f.write(file.content)
                f.write("\n")  # Trailing newline
            written.append(path)
        return written

    def _file(self, language: str, data: Dict[str, str]) -> TranslationFile:
        return TranslationFile(
            path=f"{self.locales_dir}/{language}.json",
            content=self.to_json(data),
            language=language,
            entry_count=len(data),
        )
