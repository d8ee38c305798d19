# File: autocrud/exclusions.py
"""
AutoCRUD - Exclusion Policy
============================
Decides, per artifact, which classified columns take part in it.

Two tables drive the decision and both are plain data:

    ``BASELINE_EXCLUSIONS``  kinds dropped from an artifact for every model
    ``GenerationConfig``     auth-subject models (sensitive fields dropped
                             everywhere) and per-model extra column names

The policy is a filter, so applying it twice gives the same result as
applying it once.
"""

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, List, Optional, Sequence

from autocrud.models import (
    ArtifactKind,
    ColumnDescriptor,
    ColumnKind,
    GenerationConfig,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("autocrud.exclusions")

# ---------------------------------------------------------------------------
# Baseline table
# ---------------------------------------------------------------------------

_BOOKKEEPING: FrozenSet[ColumnKind] = frozenset({
    ColumnKind.IDENTIFIER,
    ColumnKind.CREATED_TIMESTAMP,
    ColumnKind.UPDATED_TIMESTAMP,
    ColumnKind.SOFT_DELETE_MARKER,
})

BASELINE_EXCLUSIONS: Dict[ArtifactKind, FrozenSet[ColumnKind]] = {
    # The identifier stays visible in the read model.
    ArtifactKind.RESOURCE: frozenset({
        ColumnKind.CREATED_TIMESTAMP,
        ColumnKind.UPDATED_TIMESTAMP,
        ColumnKind.SOFT_DELETE_MARKER,
    }),
    ArtifactKind.STORE_REQUEST: _BOOKKEEPING,
    ArtifactKind.UPDATE_REQUEST: _BOOKKEEPING,
    ArtifactKind.CONTROLLER: _BOOKKEEPING,
    ArtifactKind.SERVICE: _BOOKKEEPING,
}

# Per-model extra exclusions listed under either handler artifact apply to both.
HANDLER_ARTIFACTS: FrozenSet[ArtifactKind] = frozenset({
    ArtifactKind.CONTROLLER,
    ArtifactKind.SERVICE,
})


# ---------------------------------------------------------------------------
# Policy
# ---------------------------------------------------------------------------


class ExclusionPolicy:
    """Table-driven keep/drop decision for (model, column, artifact)."""

    def __init__(
        self,
        config: Optional[GenerationConfig] = None,
        baseline: Optional[Dict[ArtifactKind, FrozenSet[ColumnKind]]] = None,
    ) -> None:
        self._config: GenerationConfig = config or GenerationConfig()
        self._baseline: Dict[ArtifactKind, FrozenSet[ColumnKind]] = (
            baseline if baseline is not None else BASELINE_EXCLUSIONS
        )
        self._auth_models: FrozenSet[str] = frozenset(self._config.auth_models)

    def is_auth_model(self, model_name: str) -> bool:
        return model_name in self._auth_models

    def is_included(
        self,
        model_name: str,
        column: ColumnDescriptor,
        artifact: ArtifactKind,
    ) -> bool:
        if column.kind in self._baseline.get(artifact, frozenset()):
            return False
        if column.kind == ColumnKind.SENSITIVE_AUTH_FIELD and self.is_auth_model(model_name):
            return False
        return column.name not in self.extra_exclusions(model_name, artifact)

    def extra_exclusions(self, model_name: str, artifact: ArtifactKind) -> FrozenSet[str]:
        table = self._config.model_exclusions.get(model_name, {})
        if artifact in HANDLER_ARTIFACTS:
            return frozenset(
                name for kind in HANDLER_ARTIFACTS for name in table.get(kind, [])
            )
        return frozenset(table.get(artifact, []))

    def filter_columns(
        self,
        model_name: str,
        columns: Sequence[ColumnDescriptor],
        artifact: ArtifactKind,
    ) -> List[ColumnDescriptor]:
        """Columns of *columns* kept in *artifact*, in their original order."""
        kept: List[ColumnDescriptor] = [
            c for c in columns if self.is_included(model_name, c, artifact)
        ]
        logger.debug(
            "%s/%s: kept %d of %d columns.",
            model_name,
            artifact.value,
            len(kept),
            len(columns),
        )
        return kept


__all__: List[str] = [
    "BASELINE_EXCLUSIONS",
    "HANDLER_ARTIFACTS",
    "ExclusionPolicy",
]

logger.debug("autocrud.exclusions loaded.")
