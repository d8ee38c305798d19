"""
tests/test_schema.py
Tests for autocrud.schema: SQLite introspection through SQLAlchemy,
schema files and configuration loading.
"""

from __future__ import annotations

import json
import pathlib

import pytest
import yaml

from autocrud.errors import ConfigError, InvalidModelSpec, SchemaNotFound
from autocrud.models import ArtifactKind
from autocrud.schema import (
    DatabaseSchemaSource,
    FileSchemaSource,
    build_model_spec,
    load_config_file,
    load_document,
    parse_config,
)


class TestDatabaseSchemaSource:

    def test_has_table(self, sqlite_url: str) -> None:
        source = DatabaseSchemaSource(sqlite_url)
        try:
            assert source.has_table("products")
            assert not source.has_table("orders")
        finally:
            source.dispose()

    def test_columns_in_ordinal_order(self, sqlite_url: str) -> None:
        source = DatabaseSchemaSource(sqlite_url)
        try:
            assert source.get_column_listing("posts") == [
                "id", "title", "body", "banner_img", "created_at", "updated_at", "deleted_at",
            ]
        finally:
            source.dispose()

    def test_build_model_spec(self, sqlite_url: str) -> None:
        source = DatabaseSchemaSource(sqlite_url)
        try:
            spec = build_model_spec("Post", source)
        finally:
            source.dispose()
        assert spec.name == "Post"
        assert spec.table_name == "posts"
        assert spec.supports_soft_delete is True

    def test_missing_table(self, sqlite_url: str) -> None:
        source = DatabaseSchemaSource(sqlite_url)
        try:
            with pytest.raises(SchemaNotFound) as exc_info:
                build_model_spec("Order", source)
        finally:
            source.dispose()
        assert str(exc_info.value) == "Table orders does not exist."
        assert exc_info.value.exit_code == 2

    def test_bad_url(self) -> None:
        with pytest.raises(ConfigError):
            DatabaseSchemaSource("not a url")


class TestFileSchemaSource:

    def test_string_and_mapping_entries(self, raw_schema) -> None:
        source = FileSchemaSource.from_mapping(raw_schema)
        assert source.get_column_listing("posts")[:3] == ["id", "title", "body"]

    def test_from_yaml_file(self, schema_yaml_path: pathlib.Path) -> None:
        spec = build_model_spec("Product", FileSchemaSource.from_file(schema_yaml_path))
        assert spec.columns == ["id", "title", "cover_img", "created_at", "updated_at"]
        assert spec.supports_soft_delete is False

    def test_from_json_file(self, raw_schema, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "schema.json"
        path.write_text(json.dumps(raw_schema), encoding="utf-8")
        assert FileSchemaSource.from_file(path).has_table("users")

    def test_missing_tables_key(self) -> None:
        with pytest.raises(ConfigError):
            FileSchemaSource.from_mapping({"products": ["id"]})

    def test_bad_column_entry(self) -> None:
        with pytest.raises(ConfigError):
            FileSchemaSource.from_mapping({"tables": {"products": [1]}})

    def test_missing_file(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(ConfigError):
            FileSchemaSource.from_file(tmp_path / "nope.yaml")

    def test_empty_table_is_invalid_model(self) -> None:
        source = FileSchemaSource({"products": []})
        with pytest.raises(InvalidModelSpec):
            build_model_spec("Product", source)


class TestLoaders:

    def test_load_document_rejects_non_mapping(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_document(path)

    def test_invalid_json(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{nope", encoding="utf-8")
        with pytest.raises(ValueError):
            load_document(path)

    def test_config_file_with_overrides(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "autocrud.yaml"
        path.write_text(yaml.safe_dump({
            "default_page_size": 20,
            "project_root": "/srv/a",
            "model_exclusions": {"Product": {"resource": ["secret"]}},
        }), encoding="utf-8")
        config = load_config_file(path, {"project_root": "/srv/b", "dedupe_routes": None})
        assert config.default_page_size == 20
        assert config.project_root == "/srv/b"
        assert config.dedupe_routes is False
        assert config.model_exclusions["Product"][ArtifactKind.RESOURCE] == ["secret"]

    def test_nested_config_key(self) -> None:
        assert parse_config({"config": {"max_upload_kb": 512}}).max_upload_kb == 512

    def test_unknown_key_is_config_error(self) -> None:
        with pytest.raises(ConfigError):
            parse_config({"page_size": 5})

    def test_no_file_gives_defaults(self) -> None:
        config = load_config_file(None)
        assert config.routes_file == "routes/api.php"
        assert config.auth_models == ["User"]
