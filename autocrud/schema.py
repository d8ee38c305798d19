# File: autocrud/schema.py
"""
AutoCRUD - Schema Sources & File Loaders
=========================================
Supplies the two facts generation needs about a model's backing table:
whether it exists and its ordered column list.

    DatabaseSchemaSource  live database, read through SQLAlchemy's inspector
    FileSchemaSource      JSON/YAML document ``{tables: {name: [columns]}}``

Also hosts the JSON/YAML loaders used for configuration files.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from autocrud.errors import ConfigError, InvalidModelSpec, SchemaNotFound
from autocrud.models import GenerationConfig, ModelSpec
from autocrud.utils import table_name_for_model

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("autocrud.schema")


# ---------------------------------------------------------------------------
# File loader helpers
# ---------------------------------------------------------------------------


def _load_json_file(path: Path) -> Dict[str, Any]:
    """Load and parse a JSON file. Raises ValueError on parse errors."""
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a JSON object at top level, got {type(data).__name__}."
        )
    return data


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    try:
        data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a YAML mapping at top level, got {type(data).__name__}."
        )
    return data


def load_document(path: Path) -> Dict[str, Any]:
    """
    Load a JSON or YAML document, dispatching on the file extension.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file can't be parsed.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    if not path.is_file():
        raise ValueError(f"Path is not a file: {path}")

    suffix: str = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _load_yaml_file(path)
    if suffix == ".json":
        return _load_json_file(path)

    logger.info("Unknown extension '%s', trying JSON then YAML.", suffix)
    try:
        return _load_json_file(path)
    except ValueError:
        return _load_yaml_file(path)


# ---------------------------------------------------------------------------
# Configuration loading
# ---------------------------------------------------------------------------


def parse_config(
    raw: Optional[Mapping[str, Any]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> GenerationConfig:
    """
    Build a ``GenerationConfig`` from a raw mapping plus overrides.

    The mapping may hold the settings at top level or under a ``config``
    key. Overrides win over file values.
    """
    data: Dict[str, Any] = dict(raw or {})
    if isinstance(data.get("config"), dict):
        data = dict(data["config"])
    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return GenerationConfig.model_validate(data)
    except PydanticValidationError as exc:
        raise ConfigError(f"Config validation failed: {exc}") from exc


def load_config_file(
    path: Optional[Path],
    overrides: Optional[Mapping[str, Any]] = None,
) -> GenerationConfig:
    """Load the optional configuration file and apply CLI overrides."""
    raw: Dict[str, Any] = {}
    if path is not None:
        try:
            raw = load_document(Path(path))
        except (FileNotFoundError, ValueError) as exc:
            raise ConfigError(str(exc)) from exc
        logger.info("Loaded config file: %s (%d keys).", path, len(raw))
    return parse_config(raw, overrides)


# ---------------------------------------------------------------------------
# Schema sources
# ---------------------------------------------------------------------------


class SchemaSource:
    """Read-only view of table existence and column order."""

    description: str = "schema"

    def has_table(self, table_name: str) -> bool:
        raise NotImplementedError

    def get_column_listing(self, table_name: str) -> List[str]:
        raise NotImplementedError


class DatabaseSchemaSource(SchemaSource):
    """
    Introspects a live database through SQLAlchemy.

    Usage::

        source = DatabaseSchemaSource("sqlite:///database.sqlite")
        source.get_column_listing("products")
        source.dispose()
    """

    def __init__(self, database_url: str, *, engine: Optional[Engine] = None) -> None:
        self.database_url: str = database_url
        try:
            self._engine: Engine = engine or create_engine(database_url)
        except (SQLAlchemyError, ValueError) as exc:
            raise ConfigError(f"Cannot open database '{database_url}': {exc}") from exc
        self.description = self._engine.url.render_as_string(hide_password=True)

    def has_table(self, table_name: str) -> bool:
        try:
            return inspect(self._engine).has_table(table_name)
        except SQLAlchemyError as exc:
            raise ConfigError(f"Cannot inspect {self.description}: {exc}") from exc

    def get_column_listing(self, table_name: str) -> List[str]:
        # get_columns reports columns in ordinal order
        try:
            columns: List[Dict[str, Any]] = inspect(self._engine).get_columns(table_name)
        except SQLAlchemyError as exc:
            raise ConfigError(f"Cannot inspect {self.description}: {exc}") from exc
        return [str(c["name"]) for c in columns]

    def dispose(self) -> None:
        self._engine.dispose()


class FileSchemaSource(SchemaSource):
    """
    Column listings read from a JSON/YAML document::

        tables:
          products: [id, title, cover_img, created_at, updated_at]
          users:
            - id
            - name: email
    """

    def __init__(self, tables: Mapping[str, List[str]], description: str = "schema file") -> None:
        self._tables: Dict[str, List[str]] = {k: list(v) for k, v in tables.items()}
        self.description = description

    @classmethod
    def from_file(cls, path: Path) -> "FileSchemaSource":
        try:
            raw: Dict[str, Any] = load_document(Path(path))
        except (FileNotFoundError, ValueError) as exc:
            raise ConfigError(str(exc)) from exc
        return cls.from_mapping(raw, description=str(path))

    @classmethod
    def from_mapping(
        cls,
        raw: Mapping[str, Any],
        description: str = "schema mapping",
    ) -> "FileSchemaSource":
        tables: Any = raw.get("tables")
        if not isinstance(tables, dict):
            raise ConfigError(
                f"{description}: expected a 'tables' mapping of table name to columns."
            )

        parsed: Dict[str, List[str]] = {}
        for table_name, entries in tables.items():
            if not isinstance(entries, list):
                raise ConfigError(
                    f"{description}: columns of table '{table_name}' must be a list."
                )
            columns: List[str] = []
            for entry in entries:
                if isinstance(entry, str):
                    columns.append(entry)
                elif isinstance(entry, dict) and isinstance(entry.get("name"), str):
                    columns.append(entry["name"])
                else:
                    raise ConfigError(
                        f"{description}: bad column entry {entry!r} in table '{table_name}'."
                    )
            parsed[str(table_name)] = columns
        return cls(parsed, description=description)

    def has_table(self, table_name: str) -> bool:
        return table_name in self._tables

    def get_column_listing(self, table_name: str) -> List[str]:
        return list(self._tables.get(table_name, []))


# ---------------------------------------------------------------------------
# ModelSpec construction
# ---------------------------------------------------------------------------


def build_model_spec(
    model_name: str,
    source: SchemaSource,
    table_name: Optional[str] = None,
) -> ModelSpec:
    """
    Look up the backing table of *model_name* and build its ``ModelSpec``.

    Raises:
        SchemaNotFound: the table does not exist in *source*.
        InvalidModelSpec: the table exists but cannot describe a model.
    """
    name: str = model_name.strip()
    table: str = table_name or table_name_for_model(name)

    if not source.has_table(table):
        logger.error("Table %s does not exist in %s.", table, source.description)
        raise SchemaNotFound(table, source.description)

    columns: List[str] = source.get_column_listing(table)
    logger.info("Table %s: %d columns (%s).", table, len(columns), ", ".join(columns))

    try:
        return ModelSpec(name=name, columns=columns)
    except PydanticValidationError as exc:
        raise InvalidModelSpec(
            f"Cannot build model '{name}' from table {table}: {exc}",
            [str(e["msg"]) for e in exc.errors()],
        ) from exc


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "load_document",
    "parse_config",
    "load_config_file",
    "SchemaSource",
    "DatabaseSchemaSource",
    "FileSchemaSource",
    "build_model_spec",
]

logger.debug("autocrud.schema loaded.")
