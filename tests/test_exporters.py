"""
tests/test_exporters.py
Unit tests for autocrud.exporters: create-if-absent, append, dedupe,
dry-run and I/O failures.
"""

from __future__ import annotations

import json
import pathlib

import pytest

from autocrud.errors import DirectoryCreateFailure, FileWriteFailure
from autocrud.exporters import ArtifactExporter, RecordStatus
from autocrud.models import Artifact, ArtifactKind, WritePolicy


def _file_artifact(content: str = "<?php\n// v1\n") -> Artifact:
    return Artifact(
        kind=ArtifactKind.RESOURCE,
        relative_path="app/Http/Resources/ProductResource.php",
        content=content,
    )


def _route_artifact(content: str = "\nRoute::apiResource('Products', X::class);\n") -> Artifact:
    return Artifact(
        kind=ArtifactKind.ROUTES,
        relative_path="routes/api.php",
        content=content,
        policy=WritePolicy.APPEND,
    )


class TestCreateIfAbsent:

    def test_creates_file_and_parents(self, tmp_path: pathlib.Path) -> None:
        record = ArtifactExporter(tmp_path).emit(_file_artifact())
        target = tmp_path / "app" / "Http" / "Resources" / "ProductResource.php"
        assert record.status == RecordStatus.CREATED
        assert target.read_text(encoding="utf-8") == "<?php\n// v1\n"
        assert record.line_count == 2
        assert record.absolute_path == str(target.resolve())

    def test_existing_file_is_skipped_untouched(self, tmp_path: pathlib.Path) -> None:
        exporter = ArtifactExporter(tmp_path)
        exporter.emit(_file_artifact("<?php\n// hand edited\n"))
        record = exporter.emit(_file_artifact("<?php\n// regenerated\n"))
        target = tmp_path / "app" / "Http" / "Resources" / "ProductResource.php"
        assert record.status == RecordStatus.SKIPPED
        assert record.detail == "already exists"
        assert target.read_text(encoding="utf-8") == "<?php\n// hand edited\n"

    def test_blocked_directory_raises(self, tmp_path: pathlib.Path) -> None:
        (tmp_path / "app").write_text("not a directory", encoding="utf-8")
        with pytest.raises(DirectoryCreateFailure) as exc_info:
            ArtifactExporter(tmp_path).emit(_file_artifact())
        assert "Failed to create directory" in str(exc_info.value)

    def test_unwritable_route_file_raises(self, tmp_path: pathlib.Path) -> None:
        (tmp_path / "routes" / "api.php").mkdir(parents=True)
        with pytest.raises(FileWriteFailure) as exc_info:
            ArtifactExporter(tmp_path).emit(_route_artifact())
        assert "Failed to write" in str(exc_info.value)


class TestAppend:

    def test_appends_every_time(self, laravel_root: pathlib.Path) -> None:
        exporter = ArtifactExporter(laravel_root)
        first = exporter.emit(_route_artifact())
        second = exporter.emit(_route_artifact())
        text = (laravel_root / "routes" / "api.php").read_text(encoding="utf-8")
        assert first.status == second.status == RecordStatus.APPENDED
        assert text.startswith("<?php")
        assert text.count("Route::apiResource('Products'") == 2

    def test_creates_missing_route_file(self, tmp_path: pathlib.Path) -> None:
        record = ArtifactExporter(tmp_path).emit(_route_artifact())
        assert record.status == RecordStatus.APPENDED
        assert (tmp_path / "routes" / "api.php").exists()

    def test_dedupe_skips_registered_controller(self, laravel_root: pathlib.Path) -> None:
        exporter = ArtifactExporter(laravel_root, dedupe_routes=True)
        exporter.emit(_route_artifact(), route_marker="X::class")
        record = exporter.emit(_route_artifact(), route_marker="X::class")
        text = (laravel_root / "routes" / "api.php").read_text(encoding="utf-8")
        assert record.status == RecordStatus.SKIPPED
        assert text.count("Route::apiResource") == 1

    def test_marker_ignored_without_dedupe(self, laravel_root: pathlib.Path) -> None:
        exporter = ArtifactExporter(laravel_root)
        exporter.emit(_route_artifact(), route_marker="X::class")
        record = exporter.emit(_route_artifact(), route_marker="X::class")
        assert record.status == RecordStatus.APPENDED


class TestDryRunAndManifest:

    def test_dry_run_writes_nothing(self, tmp_path: pathlib.Path) -> None:
        exporter = ArtifactExporter(tmp_path, dry_run=True)
        assert exporter.emit(_file_artifact()).status == RecordStatus.PLANNED
        assert exporter.emit(_route_artifact()).status == RecordStatus.PLANNED
        assert list(tmp_path.iterdir()) == []

    def test_manifest_counts(self, laravel_root: pathlib.Path) -> None:
        exporter = ArtifactExporter(laravel_root)
        exporter.emit(_file_artifact())
        exporter.emit(_file_artifact())
        exporter.emit(_route_artifact())
        data = json.loads(exporter.manifest.to_json())
        assert (data["created"], data["skipped"], data["appended"]) == (1, 1, 1)
        assert [f["status"] for f in data["files"]] == ["created", "skipped", "appended"]
