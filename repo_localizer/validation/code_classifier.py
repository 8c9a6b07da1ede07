"""Classifier for machine-code-like strings that must not be translated.

Rules are kept as an ordered list of data so each one can be exercised on
its own. The first matching rule wins.

Whitespace policy: extracted UI text is usually a phrase, so a string that
contains whitespace only matches rules flagged ``allows_spaces``, plus the
``utility-classes`` rule when most of its tokens are utility CSS classes
(e.g. ``"flex items-center gap-2"``). Ambiguous strings are left for
translation.
"""

import re
from dataclasses import dataclass
from typing import Callable, Optional, Tuple


@dataclass(frozen=True)
class CodeRule:
    """A single named classification rule."""

    name: str
    matches: Callable[[str], bool]
    allows_spaces: bool = False


def _regex(*patterns: str, flags: int = 0) -> Callable[[str], bool]:
    compiled = [re.compile(p, flags) for p in patterns]
    return lambda text: any(p.search(text) for p in compiled)


FILE_EXTENSIONS = (
    "js", "jsx", "ts", "tsx", "mjs", "cjs", "css", "scss", "sass", "less",
    "html", "htm", "json", "svg", "png", "jpg", "jpeg", "gif", "webp", "ico",
    "md", "yml", "yaml", "vue", "py",
)

# Responsive / state variants (sm:, hover:, dark:, ...)
UTILITY_VARIANTS = (
    "sm", "md", "lg", "xl", "2xl", "hover", "focus", "active", "disabled",
    "dark", "group-hover", "focus-visible", "first", "last", "odd", "even",
)

# Spacing / layout / typography utility prefixes (Tailwind, Bootstrap, Font Awesome)
UTILITY_PREFIXES = (
    "bg", "text", "border", "rounded", "shadow", "ring", "outline",
    "p", "px", "py", "pt", "pb", "pl", "pr", "m", "mx", "my", "mt", "mb", "ml", "mr",
    "w", "h", "min-w", "max-w", "min-h", "max-h", "size",
    "flex", "grid", "gap", "space-x", "space-y", "col", "row", "order",
    "justify", "items", "self", "content", "place",
    "font", "leading", "tracking", "line-clamp", "whitespace",
    "top", "left", "right", "bottom", "inset", "z",
    "overflow", "opacity", "transition", "duration", "ease", "delay", "animate",
    "translate", "rotate", "scale", "cursor", "select", "object", "aspect",
    "btn", "fa", "col-sm", "col-md", "col-lg", "d", "align",
)

KEYWORDS = (
    "import", "export", "function", "class", "const", "let", "var",
    "return", "require", "async", "await", "def",
)

_UTILITY_VARIANT_RE = re.compile(
    r"^(?:(?:%s):)+[\w\-/.\[\]#%%]+$" % "|".join(re.escape(v) for v in UTILITY_VARIANTS)
)
_UTILITY_PREFIX_RE = re.compile(
    r"^-?(?:%s)-[\w\-/.\[\]#%%]+$"
    % "|".join(re.escape(p) for p in sorted(UTILITY_PREFIXES, key=len, reverse=True))
)
_KEBAB_RE = re.compile(r"^[a-z][a-z0-9]*(?:-[a-z0-9]+)+$")
_IDENTIFIER_RE = re.compile(r"^[a-zA-Z_$][a-zA-Z0-9_$]*$")
_CONSTANT_RE = re.compile(r"^[A-Z_][A-Z0-9_]*$")
_CAMEL_HUMP_RE = re.compile(r"[a-z0-9][A-Z]")
_KEYWORD_RE = re.compile(r"^(?:%s)\s" % "|".join(KEYWORDS))
_CODE_PUNCTUATION_RE = re.compile(r"[=;{}()]|=>|\bfrom\s+['\"]")


def is_utility_class(token: str) -> bool:
    """Check whether a single whitespace-free token is a utility CSS class."""
    if _UTILITY_VARIANT_RE.match(token) or _UTILITY_PREFIX_RE.match(token):
        return True
    # Hyphenated words ("sign-in", "e-mail") are UI text unless they carry a digit
    return bool(_KEBAB_RE.match(token)) and any(ch.isdigit() for ch in token)


def _is_short(text: str) -> bool:
    return len(text) <= 2


def _is_non_alphabetic(text: str) -> bool:
    return not any(ch.isalpha() for ch in text)


def _is_identifier(text: str) -> bool:
    # Plain words ("Submit") are identifiers syntactically but are UI text.
    if not _IDENTIFIER_RE.match(text):
        return False
    return "_" in text or "$" in text or bool(_CAMEL_HUMP_RE.search(text))


def _is_constant(text: str) -> bool:
    # Shouting UI labels ("SAVE") stay translatable; constants need _ or a digit.
    return bool(_CONSTANT_RE.match(text)) and any(ch == "_" or ch.isdigit() for ch in text)


def _is_keyword_statement(text: str) -> bool:
    return bool(_KEYWORD_RE.match(text)) and bool(_CODE_PUNCTUATION_RE.search(text))


def _is_utility_dominated(text: str) -> bool:
    tokens = text.split()
    if not tokens:
        return False
    utility_tokens = sum(1 for token in tokens if is_utility_class(token))
    return utility_tokens * 2 > len(tokens)


CODE_RULES: Tuple[CodeRule, ...] = (
    CodeRule("short", _is_short, allows_spaces=True),
    CodeRule("non-alphabetic", _is_non_alphabetic, allows_spaces=True),
    CodeRule("literal", _regex(r"^(?:true|false|null|undefined|NaN)$", flags=re.I)),
    CodeRule("identifier", _is_identifier),
    CodeRule("constant", _is_constant),
    CodeRule(
        "file-extension",
        _regex(r"\.(?:%s)$" % "|".join(FILE_EXTENSIONS), flags=re.I),
    ),
    CodeRule(
        "css-value",
        _regex(
            r"^#(?:[0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$",
            r"^-?\d*\.?\d+(?:px|em|rem|%|vh|vw|vmin|vmax|pt|ch|fr|s|ms|deg)$",
            r"^(?:rgba?|hsla?|var|calc|url|linear-gradient|translate[XYZ]?)\(",
        ),
    ),
    CodeRule(
        "css-selector",
        _regex(
            r"^\.[\w-]+$",
            r"^#[\w-]+$",
            r"^@[\w-]+",
            r"^--[\w-]+",
            r"^\$[\w-]+$",
            r"^[a-z-]+:[a-z-]+$",
        ),
    ),
    CodeRule("json-literal", _regex(r"^\{.*\}$", r"^\[.*\]$", flags=re.S)),
    CodeRule("template-expression", _regex(r"^\$\{.*\}$", r"^\{\{.*\}\}$")),
    CodeRule("html-tag", _regex(r"^</?[a-zA-Z][\w-]*")),
    CodeRule("path-or-url", _regex(r"^/[\w\-.~/]*$", r"^(?:https?:)?//", r"^www\.", r"^mailto:")),
    CodeRule("property-access", _regex(r"^[\w$]+(?:\.[\w$]+)+$")),
    CodeRule("function-call", _regex(r"^[\w$.]+\(.*\)$")),
    CodeRule("keyword-statement", _is_keyword_statement, allows_spaces=True),
    CodeRule("utility-class", is_utility_class),
)

UTILITY_CLASSES_RULE = CodeRule("utility-classes", _is_utility_dominated, allows_spaces=True)


def classify_code_string(text: Optional[str]) -> Optional[str]:
    """
    Classify a string as code-like.

    Args:
        text: Candidate UI string

    Returns:
        Name of the first matching rule, or None if the text looks like
        natural language
    """
    if text is None or not isinstance(text, str):
        return "short"

    stripped = text.strip()
    has_spaces = any(ch.isspace() for ch in stripped)

    for rule in CODE_RULES:
        if has_spaces and not rule.allows_spaces:
            continue
        if rule.matches(stripped):
            return rule.name

    if has_spaces and UTILITY_CLASSES_RULE.matches(stripped):
        return UTILITY_CLASSES_RULE.name

    return None


def is_code_string(text: Optional[str]) -> bool:
    """Return True when the text is code-like and must not be translated."""
    return classify_code_string(text) is not None
