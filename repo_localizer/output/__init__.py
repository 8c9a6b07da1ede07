"""Input loading and translation file generation."""

from .file_assembler import TranslationFileAssembler
from .strings_loader import flatten_strings, load_strings, parse_strings

__all__ = ["TranslationFileAssembler", "flatten_strings", "load_strings", "parse_strings"]
