# File: autocrud/utils.py
"""
AutoCRUD - Utility Functions & Helpers
=======================================
String transformation, PHP rendering and checksum helpers used throughout
the generation pipeline.

Performance strategy:
- ALL string-conversion functions are decorated with ``@lru_cache(maxsize=None)``
  because the same model and column names are converted many times per run.
- No external dependencies beyond the Python standard library.
"""

from __future__ import annotations

import functools
import hashlib
import logging
import re
import time
from typing import Dict, List, Optional, Sequence, Tuple

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("autocrud.utils")

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns (compiled once at module load)
# ---------------------------------------------------------------------------

_CAMEL_TO_SNAKE_RE1: re.Pattern[str] = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_TO_SNAKE_RE2: re.Pattern[str] = re.compile(r"([a-z0-9])([A-Z])")
_NON_ALPHANUM_RE: re.Pattern[str] = re.compile(r"[^a-zA-Z0-9]")
_MULTI_UNDERSCORE_RE: re.Pattern[str] = re.compile(r"_{2,}")
_LEADING_TRAILING_UNDERSCORE_RE: re.Pattern[str] = re.compile(r"^_+|_+$")
_LAST_WORD_RE: re.Pattern[str] = re.compile(r"^(.*?)([A-Z]?[a-z0-9]*)$")

# Irregular nouns that show up in model names
_IRREGULAR_PLURALS: Dict[str, str] = {
    "person": "people",
    "child": "children",
    "man": "men",
    "woman": "women",
    "mouse": "mice",
    "goose": "geese",
    "tooth": "teeth",
    "foot": "feet",
    "datum": "data",
    "index": "indices",
    "matrix": "matrices",
    "vertex": "vertices",
    "axis": "axes",
    "crisis": "crises",
    "analysis": "analyses",
    "status": "statuses",
    "address": "addresses",
    "quiz": "quizzes",
}

# Nouns that are the same in singular and plural
_UNCOUNTABLE: Tuple[str, ...] = (
    "equipment", "information", "rice", "money", "species", "series",
    "fish", "sheep", "news", "media", "feedback", "metadata",
)

_O_ES_PLURALS: Tuple[str, ...] = ("hero", "potato", "tomato", "echo", "veto")


# ---------------------------------------------------------------------------
# Cached string transformation functions
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def to_snake_case(name: str) -> str:
    """
    Convert any string to snake_case.

    Examples:
        >>> to_snake_case("OrderItems")
        'order_items'
        >>> to_snake_case("already_snake")
        'already_snake'
    """
    if not name:
        return ""
    s: str = _CAMEL_TO_SNAKE_RE1.sub(r"\1_\2", name)
    s = _CAMEL_TO_SNAKE_RE2.sub(r"\1_\2", s)
    s = _NON_ALPHANUM_RE.sub("_", s)
    s = _MULTI_UNDERSCORE_RE.sub("_", s)
    s = _LEADING_TRAILING_UNDERSCORE_RE.sub("", s)
    return s.lower()


def _pluralise_word(word: str) -> str:
    lower: str = word.lower()

    if lower in _UNCOUNTABLE:
        return word

    if lower in _IRREGULAR_PLURALS:
        plural: str = _IRREGULAR_PLURALS[lower]
        # Preserve original casing of first char
        if word[0].isupper():
            return plural[0].upper() + plural[1:]
        return plural

    # Rules ordered by specificity
    if lower.endswith(("sh", "ch", "x", "z", "s")):
        return word + "es"
    if lower.endswith("y") and len(word) > 1 and lower[-2] not in "aeiou":
        return word[:-1] + "ies"
    if lower.endswith("ife"):
        return word[:-2] + "ves"
    if lower.endswith(("lf", "eaf", "arf")):
        return word[:-1] + "ves"
    if lower in _O_ES_PLURALS:
        return word + "es"
    return word + "s"


@functools.lru_cache(maxsize=None)
def to_plural(name: str) -> str:
    """
    English pluralisation of the *last word* of a PascalCase name.

        >>> to_plural("Product")
        'Products'
        >>> to_plural("OrderCategory")
        'OrderCategories'
        >>> to_plural("Person")
        'People'

    Good enough for model names; exotic nouns should be named explicitly.
    """
    if not name:
        return ""
    match: Optional[re.Match[str]] = _LAST_WORD_RE.match(name)
    if match is None or not match.group(2):
        return _pluralise_word(name)
    head, last = match.group(1), match.group(2)
    return head + _pluralise_word(last)


@functools.lru_cache(maxsize=None)
def table_name_for_model(model_name: str) -> str:
    """Backing table of a model: ``snake_case(plural(name))``."""
    return to_snake_case(to_plural(model_name))


# ---------------------------------------------------------------------------
# PHP rendering helpers
# ---------------------------------------------------------------------------


def indent_lines(lines: Sequence[str], level: int = 1, size: int = 4) -> List[str]:
    """Indent a list of lines, returning a new list. Blank lines stay blank."""
    prefix: str = " " * (level * size)
    return [prefix + line if line.strip() else line for line in lines]


def php_string(value: str) -> str:
    """Single-quoted PHP string literal."""
    escaped: str = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def php_docblock(summary: str, *details: str, level: int = 1) -> List[str]:
    """
    Build a ``/** ... */`` docblock as a list of lines.

    *details* are emitted after a blank ``*`` separator line; empty strings
    inside *details* become further separator lines.
    """
    prefix: str = " " * (level * 4)
    lines: List[str] = [f"{prefix}/**", f"{prefix} * {summary}"]
    if details:
        lines.append(f"{prefix} *")
        for detail in details:
            lines.append(f"{prefix} * {detail}" if detail else f"{prefix} *")
    lines.append(f"{prefix} */")
    return lines


# ---------------------------------------------------------------------------
# Checksum & metrics
# ---------------------------------------------------------------------------


def sha256_hex(content: str) -> str:
    """Return SHA-256 hex digest of a string. O(n)."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def count_lines(content: str) -> int:
    """Count the number of lines in a string. O(n)."""
    if not content:
        return 0
    return content.count("\n") + (1 if not content.endswith("\n") else 0)


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Simple context-manager timer for profiling generation steps.

    Usage:
        with Timer("emit artifacts") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.debug(
            "Timer [%s]: %.4f seconds",
            self.label,
            self.elapsed,
        )

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


__all__: List[str] = [
    "to_snake_case",
    "to_plural",
    "table_name_for_model",
    "indent_lines",
    "php_string",
    "php_docblock",
    "sha256_hex",
    "count_lines",
    "Timer",
]

logger.debug("autocrud.utils loaded — %d public symbols.", len(__all__))
