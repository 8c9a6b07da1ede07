"""Loader for extracted-string JSON files (flat or nested i18next style)."""

import json
from pathlib import Path
from typing import Any, Dict, Union


def load_strings(file_path: Union[str, Path]) -> Dict[str, str]:
    """
    Load a key -> English text mapping from a JSON file.

    Args:
        file_path: Path to the .json file

    Returns:
        Flat mapping of dotted translation keys to source text
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    if path.suffix != ".json":
        raise ValueError(f"Expected .json file, got: {path.suffix}")

    with open(path, "r", encoding="utf-8") as f:
        return parse_strings(f.read())


def parse_strings(content: str) -> Dict[str, str]:
    """
    Parse extracted strings from JSON content.

    Args:
        content: JSON string content

    Returns:
        Flat mapping of translation keys to source text
    """
    data = json.loads(content)
    if not isinstance(data, dict):
        raise ValueError("Extracted strings must be a JSON object")
    return flatten_strings(data)


def flatten_strings(data: Dict[str, Any], prefix: str = "") -> Dict[str, str]:
    """
    Flatten nested objects into dotted keys.

    ``{"button": {"save": "Save"}}`` becomes ``{"button.save": "Save"}``.
    Flat input is returned unchanged; key order is preserved.

    Raises:
        ValueError: If a leaf value is not a string
    """
    flat: Dict[str, str] = {}
    for key, value in data.items():
        full_key = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, dict):
            flat.update(flatten_strings(value, full_key))
        elif isinstance(value, str):
            flat[full_key] = value
        else:
            raise ValueError(
                f"Value for '{full_key}' must be a string, got {type(value).__name__}"
            )
    return flat
