# File: autocrud/exporters.py
"""
AutoCRUD - Artifact Exporter (File-System Manager)
===================================================

Materialises an ``Artifact`` under the target project root according to its
write policy:

    CREATE_IF_ABSENT  the file is created with exclusive mode (``"x"``) so an
                      existing file is never overwritten or merged into; an
                      existing file yields a ``skipped`` record
    APPEND            the block is appended to the shared file (created if
                      missing); no locking, one self-contained block per call

I/O faults are raised as ``DirectoryCreateFailure`` / ``FileWriteFailure``.
Files written before a fault stay on disk.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from autocrud.errors import DirectoryCreateFailure, FileWriteFailure
from autocrud.models import Artifact, ArtifactKind, WritePolicy
from autocrud.utils import count_lines, sha256_hex

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("autocrud.exporters")


# ---------------------------------------------------------------------------
# Data classes for export results
# ---------------------------------------------------------------------------


class RecordStatus(str, Enum):
    """What happened to one artifact."""

    CREATED = "created"
    SKIPPED = "skipped"
    APPENDED = "appended"
    PLANNED = "planned"


@dataclass(frozen=True, slots=True)
class FileRecord:
    """Immutable record of a single emitted (or skipped) artifact."""

    kind: ArtifactKind
    relative_path: str
    absolute_path: str
    status: RecordStatus
    size_bytes: int
    line_count: int
    sha256: str
    detail: str = ""


@dataclass(frozen=False, slots=True)
class ExportManifest:
    """All records of one run, in emission order. Serialisable to JSON."""

    project_root: str = ""
    files: List[FileRecord] = field(default_factory=list)

    def count(self, status: RecordStatus) -> int:
        return sum(1 for f in self.files if f.status == status)

    @property
    def total_bytes(self) -> int:
        return sum(
            f.size_bytes for f in self.files
            if f.status in (RecordStatus.CREATED, RecordStatus.APPENDED)
        )

    @property
    def total_lines(self) -> int:
        return sum(
            f.line_count for f in self.files
            if f.status in (RecordStatus.CREATED, RecordStatus.APPENDED)
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert manifest to a JSON-serialisable dictionary."""
        return {
            "project_root": self.project_root,
            "created": self.count(RecordStatus.CREATED),
            "skipped": self.count(RecordStatus.SKIPPED),
            "appended": self.count(RecordStatus.APPENDED),
            "planned": self.count(RecordStatus.PLANNED),
            "total_bytes": self.total_bytes,
            "total_lines": self.total_lines,
            "files": [
                {
                    "kind": f.kind.value,
                    "relative_path": f.relative_path,
                    "status": f.status.value,
                    "size_bytes": f.size_bytes,
                    "line_count": f.line_count,
                    "sha256": f.sha256,
                    "detail": f.detail,
                }
                for f in self.files
            ],
        }

    def to_json(self, indent_size: int = 2) -> str:
        """Serialise manifest to pretty-printed JSON."""
        return json.dumps(self.to_dict(), indent=indent_size, ensure_ascii=False)


# ---------------------------------------------------------------------------
# ArtifactExporter class
# ---------------------------------------------------------------------------


class ArtifactExporter:
    """
    Writes artifacts below a project root.

    Usage::

        exporter = ArtifactExporter(Path("/srv/shop"))
        record = exporter.emit(artifact)

    Thread-safety: NOT thread-safe. Concurrent runs against the same route
    file must be serialised by the caller.
    """

    def __init__(
        self,
        project_root: Path,
        *,
        dry_run: bool = False,
        dedupe_routes: bool = False,
    ) -> None:
        self._root: Path = Path(project_root).resolve()
        self._dry_run: bool = dry_run
        self._dedupe_routes: bool = dedupe_routes
        self.manifest: ExportManifest = ExportManifest(project_root=str(self._root))

        logger.debug(
            "ArtifactExporter initialised: root=%s, dry_run=%s, dedupe_routes=%s.",
            self._root,
            dry_run,
            dedupe_routes,
        )

    @property
    def project_root(self) -> Path:
        return self._root

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def emit(self, artifact: Artifact, *, route_marker: Optional[str] = None) -> FileRecord:
        """
        Emit one artifact and record the outcome.

        Args:
            artifact: What to write and how.
            route_marker: Text whose presence in the route file means the
                block is already registered (used only with ``dedupe_routes``).

        Raises:
            DirectoryCreateFailure: parent directory could not be created.
            FileWriteFailure: the file could not be written or appended to.
        """
        target: Path = self._root / artifact.relative_path

        if self._dry_run:
            record: FileRecord = self._record(artifact, target, RecordStatus.PLANNED)
        elif artifact.policy == WritePolicy.APPEND:
            record = self._append(artifact, target, route_marker)
        else:
            record = self._create_if_absent(artifact, target)

        self.manifest.files.append(record)
        return record

    # -----------------------------------------------------------------
    # Internal: writing
    # -----------------------------------------------------------------

    def _ensure_parent(self, target: Path) -> None:
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise DirectoryCreateFailure(str(target.parent), str(exc)) from exc

    def _create_if_absent(self, artifact: Artifact, target: Path) -> FileRecord:
        if target.exists():
            logger.info("%s already exists, skipping.", artifact.relative_path)
            return self._record(artifact, target, RecordStatus.SKIPPED, "already exists")

        self._ensure_parent(target)
        try:
            with open(target, "x", encoding="utf-8", newline="\n") as fh:
                fh.write(artifact.content)
        except FileExistsError:
            # created by someone else between the check and the open
            logger.info("%s already exists, skipping.", artifact.relative_path)
            return self._record(artifact, target, RecordStatus.SKIPPED, "already exists")
        except OSError as exc:
            raise FileWriteFailure(str(target), str(exc)) from exc

        logger.info("Created %s.", artifact.relative_path)
        return self._record(artifact, target, RecordStatus.CREATED)

    def _append(
        self,
        artifact: Artifact,
        target: Path,
        route_marker: Optional[str],
    ) -> FileRecord:
        if self._dedupe_routes and route_marker and target.is_file():
            try:
                existing: str = target.read_text(encoding="utf-8")
            except OSError as exc:
                raise FileWriteFailure(str(target), str(exc)) from exc
            if route_marker in existing:
                logger.info(
                    "%s already registers %s, skipping append.",
                    artifact.relative_path,
                    route_marker,
                )
                return self._record(
                    artifact, target, RecordStatus.SKIPPED, "already registered"
                )

        self._ensure_parent(target)
        try:
            with open(target, "a", encoding="utf-8", newline="\n") as fh:
                fh.write(artifact.content)
        except OSError as exc:
            raise FileWriteFailure(str(target), str(exc)) from exc

        logger.info("Appended %s block to %s.", artifact.kind.value, artifact.relative_path)
        return self._record(artifact, target, RecordStatus.APPENDED)

    @staticmethod
    def _record(
        artifact: Artifact,
        target: Path,
        status: RecordStatus,
        detail: str = "",
    ) -> FileRecord:
        return FileRecord(
            kind=artifact.kind,
            relative_path=artifact.relative_path,
            absolute_path=str(target),
            status=status,
            size_bytes=len(artifact.content.encode("utf-8")),
            line_count=count_lines(artifact.content),
            sha256=sha256_hex(artifact.content),
            detail=detail,
        )


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "RecordStatus",
    "FileRecord",
    "ExportManifest",
    "ArtifactExporter",
]

logger.debug("autocrud.exporters loaded.")
