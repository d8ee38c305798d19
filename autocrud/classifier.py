# File: autocrud/classifier.py
"""
AutoCRUD - Column Classifier
=============================
Turns a raw column name into a ``ColumnDescriptor``. This is the only place
in the package that looks at naming conventions; every generator downstream
switches on ``ColumnDescriptor.kind``.

Matching order (first match wins):

    1. exact names (``id``, ``created_at``, ``updated_at``, ``deleted_at``
       and the configured sensitive authentication columns)
    2. media suffixes, in media-table order
    3. everything else is a plain field

Classification is total: an unknown suffix such as ``_pdf`` is simply a
plain field.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from autocrud.models import (
    DEFAULT_SENSITIVE_COLUMNS,
    SOFT_DELETE_COLUMN,
    ColumnDescriptor,
    ColumnKind,
    GenerationConfig,
    MediaType,
    default_media_types,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("autocrud.classifier")

# ---------------------------------------------------------------------------
# Exact-name table
# ---------------------------------------------------------------------------

EXACT_NAME_KINDS: Dict[str, ColumnKind] = {
    "id": ColumnKind.IDENTIFIER,
    "created_at": ColumnKind.CREATED_TIMESTAMP,
    "updated_at": ColumnKind.UPDATED_TIMESTAMP,
    SOFT_DELETE_COLUMN: ColumnKind.SOFT_DELETE_MARKER,
}


# ---------------------------------------------------------------------------
# Classifier
# ---------------------------------------------------------------------------


class ColumnClassifier:
    """
    Table-driven classifier.

    The suffix table is flattened once at construction into
    ``(suffix, media_type)`` pairs in media-table order, so a name can match
    at most one media subtype.
    """

    def __init__(
        self,
        media_types: Optional[Sequence[MediaType]] = None,
        sensitive_columns: Optional[Iterable[str]] = None,
    ) -> None:
        media: Sequence[MediaType] = (
            list(media_types) if media_types is not None else default_media_types()
        )
        self._suffix_table: List[Tuple[str, str]] = [
            (suffix, m.name) for m in media for suffix in m.suffixes
        ]
        self._exact: Dict[str, ColumnKind] = dict(EXACT_NAME_KINDS)
        for name in (
            sensitive_columns if sensitive_columns is not None else DEFAULT_SENSITIVE_COLUMNS
        ):
            self._exact.setdefault(name, ColumnKind.SENSITIVE_AUTH_FIELD)

        logger.debug(
            "ColumnClassifier initialised: %d exact names, %d suffixes.",
            len(self._exact),
            len(self._suffix_table),
        )

    @classmethod
    def from_config(cls, config: GenerationConfig) -> "ColumnClassifier":
        return cls(config.media_types, config.sensitive_columns)

    def classify(self, name: str) -> ColumnDescriptor:
        kind: Optional[ColumnKind] = self._exact.get(name)
        if kind is not None:
            return ColumnDescriptor(name=name, kind=kind)

        for suffix, media_name in self._suffix_table:
            if name.endswith(suffix):
                return ColumnDescriptor(
                    name=name,
                    kind=ColumnKind.MEDIA_REFERENCE,
                    media_type=media_name,
                )

        return ColumnDescriptor(name=name, kind=ColumnKind.PLAIN_FIELD)

    def classify_all(self, names: Iterable[str]) -> List[ColumnDescriptor]:
        """Classify an ordered column list, preserving order."""
        descriptors: List[ColumnDescriptor] = [self.classify(n) for n in names]
        logger.debug(
            "Classified %d columns: %s",
            len(descriptors),
            ", ".join(f"{d.name}={d.kind.value}" for d in descriptors),
        )
        return descriptors


_DEFAULT_CLASSIFIER: Optional[ColumnClassifier] = None


def classify(name: str) -> ColumnDescriptor:
    """Classify *name* with the built-in tables."""
    global _DEFAULT_CLASSIFIER
    if _DEFAULT_CLASSIFIER is None:
        _DEFAULT_CLASSIFIER = ColumnClassifier()
    return _DEFAULT_CLASSIFIER.classify(name)


__all__: List[str] = [
    "EXACT_NAME_KINDS",
    "DEFAULT_SENSITIVE_COLUMNS",
    "ColumnClassifier",
    "classify",
]

logger.debug("autocrud.classifier loaded.")
