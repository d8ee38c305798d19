# File: autocrud/validators.py
"""
AutoCRUD - Model & Configuration Validators
============================================
Pure-function checks that run before any artifact is planned.

Pydantic already guarantees structural correctness of ``ModelSpec`` and
``GenerationConfig``. This module adds the semantic checks the generated
PHP depends on: PascalCase model names, identifier-safe column names,
non-overlapping media suffixes and well-formed exclusion tables.

Usage::

    from autocrud.validators import validate_full
    result = validate_full(spec, config)
    if not result.is_valid:
        print(result.format_report())
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional, Set

from autocrud.classifier import ColumnClassifier
from autocrud.models import ColumnKind, GenerationConfig, ModelSpec

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("autocrud.validators")

# ---------------------------------------------------------------------------
# Validation result container
# ---------------------------------------------------------------------------


class ValidationError:
    """Lightweight issue descriptor (no Pydantic overhead)."""

    __slots__ = ("level", "code", "message", "context")

    def __init__(
        self,
        level: str,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.level: str = level  # "error" | "warning"
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}

    @property
    def is_error(self) -> bool:
        return self.level == "error"

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    def __repr__(self) -> str:
        return f"[{self.level.upper()}] {self.code}: {self.message}"

    def __str__(self) -> str:
        return self.__repr__()


class ValidationResult:
    """Accumulates ``ValidationError`` instances produced by the checks."""

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[ValidationError] = []

    def add_error(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationError("error", code, message, context))

    def add_warning(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationError("warning", code, message, context))

    def merge(self, other: "ValidationResult") -> None:
        self._items.extend(other._items)

    @property
    def errors(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_error]

    @property
    def warnings(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_warning]

    @property
    def is_valid(self) -> bool:
        return not any(e.is_error for e in self._items)

    def codes(self) -> List[str]:
        return [e.code for e in self._items]

    def summary(self) -> str:
        return (
            f"Validation: {len(self.errors)} error(s), "
            f"{len(self.warnings)} warning(s)."
        )

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __bool__(self) -> bool:
        """Truthy when there are NO errors (i.e. valid)."""
        return self.is_valid

    def __len__(self) -> int:
        return len(self._items)

    def format_report(self) -> str:
        """Human-readable multi-line report."""
        lines: List[str] = [self.summary(), ""]
        for item in self._items:
            prefix: str = "✗" if item.is_error else "⚠"
            lines.append(f"  {prefix} [{item.code}] {item.message}")
            for k, v in item.context.items():
                lines.append(f"       {k}: {v}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Regex patterns
# ---------------------------------------------------------------------------

_PASCAL_CASE_RE: re.Pattern[str] = re.compile(r"^[A-Z][a-zA-Z0-9]*$")
_IDENTIFIER_RE: re.Pattern[str] = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")
_NAMESPACE_RE: re.Pattern[str] = re.compile(
    r"^[A-Z][a-zA-Z0-9_]*(\\[A-Z][a-zA-Z0-9_]*)*$"
)

# Names PHP will not accept as a class name.
_PHP_RESERVED_CLASS_NAMES: Set[str] = {
    "Abstract", "And", "Array", "As", "Bool", "Break", "Callable", "Case",
    "Catch", "Class", "Clone", "Const", "Continue", "Declare", "Default",
    "Do", "Echo", "Else", "Empty", "Enum", "Eval", "Exit", "Extends",
    "False", "Final", "Float", "Fn", "For", "Foreach", "Function",
    "Global", "Goto", "If", "Implements", "Include", "Instanceof", "Int",
    "Interface", "Isset", "List", "Match", "Mixed", "Namespace", "New",
    "Null", "Object", "Or", "Parent", "Print", "Private", "Protected",
    "Public", "Readonly", "Require", "Return", "Self", "Static", "String",
    "Switch", "Throw", "Trait", "True", "Try", "Unset", "Use", "Var",
    "Void", "While", "Xor", "Yield",
}


# ---------------------------------------------------------------------------
# Model checks
# ---------------------------------------------------------------------------


def validate_model_name(spec: ModelSpec) -> ValidationResult:
    result: ValidationResult = ValidationResult()
    ctx: Dict[str, Any] = {"model": spec.name}

    if not _PASCAL_CASE_RE.match(spec.name):
        result.add_error(
            "INVALID_MODEL_NAME",
            f"Model name '{spec.name}' must be a PascalCase identifier, e.g. 'Product'.",
            ctx,
        )
    elif spec.name in _PHP_RESERVED_CLASS_NAMES:
        result.add_error(
            "RESERVED_MODEL_NAME",
            f"Model name '{spec.name}' is a reserved word in PHP.",
            ctx,
        )
    elif spec.plural_name == spec.name:
        result.add_warning(
            "UNCOUNTABLE_MODEL_NAME",
            f"Model name '{spec.name}' has no distinct plural; "
            f"the route path and list variable reuse it.",
            ctx,
        )
    return result


def validate_column_names(spec: ModelSpec) -> ValidationResult:
    """
    Every column name ends up as a PHP array key, a property access and a
    request field, so it must be a plain identifier. Duplicates would give
    duplicate array keys.
    """
    result: ValidationResult = ValidationResult()
    seen: Set[str] = set()

    for name in spec.columns:
        ctx: Dict[str, Any] = {"model": spec.name, "column": name}
        if name in seen:
            result.add_error(
                "DUPLICATE_COLUMN_NAME",
                f"Column '{name}' appears more than once.",
                ctx,
            )
        seen.add(name)
        if not _IDENTIFIER_RE.match(name):
            result.add_error(
                "INVALID_COLUMN_NAME",
                f"Column '{name}' is not a valid identifier.",
                ctx,
            )
    return result


def validate_column_kinds(spec: ModelSpec, config: GenerationConfig) -> ValidationResult:
    """Warnings about column sets that still generate but are unusual."""
    result: ValidationResult = ValidationResult()
    classifier: ColumnClassifier = ColumnClassifier.from_config(config)
    kinds: List[ColumnKind] = [classifier.classify(n).kind for n in spec.columns]

    if ColumnKind.IDENTIFIER not in kinds:
        result.add_warning(
            "NO_IDENTIFIER",
            f"Model '{spec.name}' has no 'id' column; route model binding "
            f"may not resolve.",
            {"model": spec.name},
        )

    writable: List[ColumnKind] = [
        k for k in kinds
        if k in (ColumnKind.PLAIN_FIELD, ColumnKind.MEDIA_REFERENCE, ColumnKind.SENSITIVE_AUTH_FIELD)
    ]
    if not writable:
        result.add_warning(
            "NO_WRITABLE_COLUMNS",
            f"Model '{spec.name}' has only bookkeeping columns; "
            f"the generated rule sets will be empty.",
            {"model": spec.name},
        )
    return result


# ---------------------------------------------------------------------------
# Configuration checks
# ---------------------------------------------------------------------------


def validate_media_table(config: GenerationConfig) -> ValidationResult:
    """
    No two suffix rules may overlap: a suffix that is a tail of another
    (``_img`` vs ``_cover_img``) would make a column match two subtypes.
    """
    result: ValidationResult = ValidationResult()
    names: Set[str] = set()
    owners: Dict[str, str] = {}

    for media in config.media_types:
        if media.name in names:
            result.add_error(
                "DUPLICATE_MEDIA_TYPE",
                f"Media type '{media.name}' is defined more than once.",
                {"media_type": media.name},
            )
        names.add(media.name)

        for suffix in media.suffixes:
            for other_suffix, owner in owners.items():
                if owner == media.name:
                    continue
                if suffix.endswith(other_suffix) or other_suffix.endswith(suffix):
                    result.add_error(
                        "OVERLAPPING_MEDIA_SUFFIX",
                        f"Suffix '{suffix}' ({media.name}) overlaps "
                        f"'{other_suffix}' ({owner}).",
                        {"media_type": media.name, "suffix": suffix},
                    )
            owners[suffix] = media.name

    return result


def validate_config(config: GenerationConfig) -> ValidationResult:
    result: ValidationResult = ValidationResult()
    result.merge(validate_media_table(config))

    for model in config.auth_models:
        if not _PASCAL_CASE_RE.match(model):
            result.add_error(
                "INVALID_AUTH_MODEL",
                f"Auth model '{model}' must be a PascalCase model name.",
                {"model": model},
            )

    for model, table in config.model_exclusions.items():
        if not _PASCAL_CASE_RE.match(model):
            result.add_error(
                "INVALID_EXCLUSION_MODEL",
                f"Exclusion entry '{model}' must be a PascalCase model name.",
                {"model": model},
            )
        for artifact, columns in table.items():
            if not columns:
                result.add_warning(
                    "EMPTY_EXCLUSION",
                    f"Exclusion list {model}/{artifact.value} is empty.",
                    {"model": model, "artifact": artifact.value},
                )

    for label, namespace in (
        ("app_namespace", config.app_namespace),
        ("support_namespace", config.support_namespace),
    ):
        if not _NAMESPACE_RE.match(namespace):
            result.add_error(
                "INVALID_NAMESPACE",
                f"{label} '{namespace}' is not a valid PHP namespace.",
                {"field": label},
            )

    if not config.routes_file.endswith(".php"):
        result.add_warning(
            "ROUTES_FILE_NOT_PHP",
            f"Routes file '{config.routes_file}' does not end in .php.",
            {"routes_file": config.routes_file},
        )
    return result


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------


def validate_model_spec(spec: ModelSpec, config: Optional[GenerationConfig] = None) -> ValidationResult:
    result: ValidationResult = ValidationResult()
    result.merge(validate_model_name(spec))
    result.merge(validate_column_names(spec))
    result.merge(validate_column_kinds(spec, config or GenerationConfig()))
    return result


def validate_full(spec: ModelSpec, config: GenerationConfig) -> ValidationResult:
    """Run every model and configuration check."""
    result: ValidationResult = ValidationResult()
    result.merge(validate_config(config))
    result.merge(validate_model_spec(spec, config))
    logger.debug("validate_full(%s): %s", spec.name, result.summary())
    return result


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ValidationError",
    "ValidationResult",
    "validate_model_name",
    "validate_column_names",
    "validate_column_kinds",
    "validate_media_table",
    "validate_config",
    "validate_model_spec",
    "validate_full",
]

logger.debug("autocrud.validators loaded.")
