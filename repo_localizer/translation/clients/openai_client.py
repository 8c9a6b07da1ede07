"""OpenAI client implementing the translation service contract."""

import json
import logging
from typing import Any, Dict, List, Optional

import openai
from openai import OpenAI

from ...config import config
from .base import (
    BackendTimeoutError,
    ConfigurationError,
    MalformedResponseError,
    TranslationError,
)

logger = logging.getLogger(__name__)

DEFAULT_QUALITY_SCORE = 0.9


class OpenAIClient:
    """Client for OpenAI chat-completions translation (primary backend)."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        consolidated_model: Optional[str] = None,
    ):
        """
        Initialize the OpenAI client.

        Args:
            api_key: OpenAI API key. If not provided, uses OPENAI_API_KEY from environment.
            model: Model for per-language requests
            consolidated_model: Model for consolidated multi-language requests
        """
        self.api_key = api_key or config.openai_api_key
        if not self.api_key:
            raise ConfigurationError("OpenAI API key is required")
        self.client = OpenAI(api_key=self.api_key, max_retries=0)
        self.model = model or config.openai_model
        self.consolidated_model = consolidated_model or config.openai_consolidated_model
        self.temperature = config.openai_temperature

    @property
    def name(self) -> str:
        return "openai"

    def translate_texts(
        self,
        texts: List[str],
        target_language: str,
        preserve_placeholders: bool = True,
        timeout: Optional[float] = None,
    ) -> List[Dict[str, Any]]:
        """
        Translate multiple texts in a single API call using JSON format.

        Args:
            texts: List of texts to translate
            target_language: Target language code
            preserve_placeholders: Instruct the model to keep interpolation tokens
            timeout: Per-request timeout in seconds

        Returns:
            List of {"translatedText", "qualityScore"} in input order
        """
        if not texts:
            return []

        lang_name = config.language_name(target_language)
        batch_items = [{"id": str(i), "text": t} for i, t in enumerate(texts)]

        system_prompt = self._build_batch_system_prompt(lang_name, preserve_placeholders)
        user_prompt = (
            f"Translate to {lang_name}:\n\n"
            f"{json.dumps({'translations': batch_items}, indent=2, ensure_ascii=False)}"
        )

        content = self._complete(
            self.model, system_prompt, user_prompt, config.openai_max_tokens, timeout
        )
        parsed = self._parse_batch_response(content)

        result_map = {str(item.get("id")): item for item in parsed if isinstance(item, dict)}
        missing = [str(i) for i in range(len(texts)) if str(i) not in result_map]
        if missing:
            raise MalformedResponseError(
                f"Batch response is missing {len(missing)} of {len(texts)} items"
            )

        results = []
        for i in range(len(texts)):
            item = result_map[str(i)]
            results.append({
                "translatedText": item.get("translation"),
                "qualityScore": item.get("confidence", DEFAULT_QUALITY_SCORE),
            })
        return results

    def translate_json(
        self,
        data: Dict[str, Any],
        target_language: str,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Translate the values of a JSON object, preserving keys and structure."""
        lang_name = config.language_name(target_language)
        system_prompt = f"""You are a professional translator. Translate the values in the given JSON object to {lang_name} while preserving the keys and structure exactly.

CRITICAL RULES:
1. Return ONLY a valid JSON object with the exact same structure as the input
2. Do NOT translate the keys of the JSON object - only translate the values
3. Preserve any HTML tags, placeholders, special characters, or formatting within the values
4. For UI text, use natural, user-friendly language
5. If a value is technical content (CSS classes, code, configuration), keep it exactly as is"""

        user_prompt = (
            f"Translate this JSON object to {lang_name}:\n"
            f"{json.dumps(data, indent=2, ensure_ascii=False)}\n\n"
            "Remember: Return ONLY the translated JSON object with the same structure and keys."
        )

        content = self._complete(
            self.model, system_prompt, user_prompt, config.openai_max_tokens, timeout
        )
        return self._load_json(content)

    def translate_consolidated(
        self,
        english_json: Dict[str, str],
        target_languages: List[str],
        batch_index: Optional[int] = None,
        total_batches: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Translate a key -> English map into every target language in one call."""
        language_names = ", ".join(config.language_name(code) for code in target_languages)
        example = ",\n".join(
            f'         "{code}": "translated_text_in_{config.language_name(code)}"'
            for code in target_languages[:2]
        )
        system_prompt = f"""You are a professional translator. You will receive a JSON object with English text values and need to create a consolidated translation structure.

CRITICAL RULES:
1. Return ONLY a valid JSON object with this exact structure:
   {{
     "translations": {{
       "original_key": {{
{example}
       }}
     }}
   }}
2. Do NOT include English ("en") in the output - only the target languages: {', '.join(target_languages)}
3. Do NOT translate the keys - only translate the values
4. Preserve any HTML tags, placeholders, special characters, or formatting within the values
5. If a value is technical content (CSS classes, code, configuration), keep it exactly as is

TARGET LANGUAGES: {language_names}"""

        user_prompt = (
            f"Translate this English JSON object to the target languages "
            f"({', '.join(target_languages)}):\n\n"
            f"{json.dumps(english_json, indent=2, ensure_ascii=False)}"
        )
        if batch_index is not None and total_batches:
            logger.debug("Consolidated request batch %d/%d", batch_index + 1, total_batches)

        content = self._complete(
            self.consolidated_model,
            system_prompt,
            user_prompt,
            config.openai_consolidated_max_tokens,
            timeout,
        )
        return self._load_json(content)

    def _complete(
        self,
        model: str,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int,
        timeout: Optional[float],
    ) -> str:
        """Run one chat completion in JSON mode and return the message content."""
        try:
            response = self.client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=self.temperature,
                max_tokens=max_tokens,
                response_format={"type": "json_object"},
                timeout=timeout,
            )
        except openai.APITimeoutError as e:
            raise BackendTimeoutError(f"OpenAI request timed out after {timeout}s") from e
        except openai.AuthenticationError as e:
            raise ConfigurationError("Invalid OpenAI API key") from e
        except openai.NotFoundError as e:
            raise ConfigurationError(f"Model '{model}' is not available") from e
        except openai.RateLimitError as e:
            raise TranslationError("OpenAI rate limit exceeded, please retry later") from e
        except openai.OpenAIError as e:
            raise TranslationError(f"OpenAI API error: {e}") from e

        content = response.choices[0].message.content
        if not content:
            raise MalformedResponseError("OpenAI returned empty response")
        return content.strip()

    def _build_batch_system_prompt(self, lang_name: str, preserve_placeholders: bool) -> str:
        """Build system prompt for batch JSON translation."""
        prompt = f"""You are an expert software localizer translating web application UI strings to {lang_name}.

You will receive a JSON object with a "translations" array. Each item has "id" and "text".
Return a JSON object with a "translations" array. Each item must have "id", "translation"
and "confidence" (a number between 0 and 1 describing how sure you are).
The order and IDs must match exactly.

CRITICAL RULES:
1. Return ONLY valid JSON - no explanations, no markdown
2. Keep translations concise and natural for UI
3. Preserve HTML tags, emojis and whitespace exactly
4. If a value is technical content (CSS classes, code, identifiers), keep it unchanged
5. If unable to translate an item, use the original text"""

        if preserve_placeholders:
            prompt += (
                "\n6. Preserve ALL interpolation placeholders exactly: {{name}}, {name}, "
                "${name}, %s, %d, %1$s, <0></0>"
            )
        return prompt

    def _parse_batch_response(self, response: str) -> List[Dict[str, Any]]:
        """Parse JSON response from batch translation."""
        data = self._load_json(response)
        if isinstance(data, list):
            return data
        elif isinstance(data, dict) and isinstance(data.get("translations"), list):
            return data["translations"]
        raise MalformedResponseError("Unexpected JSON structure in batch response")

    @staticmethod
    def _load_json(content: str) -> Any:
        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            logger.debug("Unparseable response (first 1000 chars): %s", content[:1000])
            raise MalformedResponseError(f"Failed to parse translation response: {e}") from e
