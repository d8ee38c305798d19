# File: autocrud/rules.py
"""
AutoCRUD - Validation Rule Synthesizer
=======================================
Maps a classified column and an operation mode to Laravel validation rule
text.

    PlainField             'required'  (create) / 'nullable'  (update)
    MediaReference(image)  'required|file|image|mimes:...|max:N|mimetypes:...'

Media allow-lists come from the media table in ``GenerationConfig``.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from autocrud.models import (
    ColumnDescriptor,
    ColumnKind,
    GenerationConfig,
    MediaType,
    OperationMode,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("autocrud.rules")

_PRESENCE: Dict[OperationMode, str] = {
    OperationMode.CREATE: "required",
    OperationMode.UPDATE: "nullable",
}


class RuleSynthesizer:
    """Renders rule text for one column at a time."""

    def __init__(self, config: Optional[GenerationConfig] = None) -> None:
        self._config: GenerationConfig = config or GenerationConfig()

    def presence(self, mode: OperationMode) -> str:
        return _PRESENCE[OperationMode(mode)]

    def media_rule(self, media: MediaType, mode: OperationMode) -> str:
        tokens: List[str] = [self.presence(mode), "file"]
        if media.is_image:
            tokens.append("image")
        tokens.append("mimes:" + ",".join(media.extensions))
        tokens.append(f"max:{self._config.max_upload_kb}")
        tokens.append("mimetypes:" + ",".join(media.mime_types))
        return "|".join(tokens)

    def rule(self, column: ColumnDescriptor, mode: OperationMode) -> str:
        if column.kind == ColumnKind.MEDIA_REFERENCE:
            media: Optional[MediaType] = self._config.media_type_named(
                column.media_type or ""
            )
            if media is not None:
                return self.media_rule(media, mode)
            # A descriptor built against another media table.
            logger.warning(
                "Column '%s' references unknown media type '%s'; "
                "using plain rule.",
                column.name,
                column.media_type,
            )
        return self.presence(mode)


def rule(
    column: ColumnDescriptor,
    mode: OperationMode,
    config: Optional[GenerationConfig] = None,
) -> str:
    """Shortcut for ``RuleSynthesizer(config).rule(column, mode)``."""
    return RuleSynthesizer(config).rule(column, mode)


__all__: List[str] = [
    "RuleSynthesizer",
    "rule",
]

logger.debug("autocrud.rules loaded.")
