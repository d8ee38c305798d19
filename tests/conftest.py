"""
tests/conftest.py
Shared fixtures for the autocrud test suite.

No external mocking libraries are used; real file I/O is performed inside
temporary directories managed by pytest's tmp_path fixture, and database
introspection runs against a throwaway SQLite file.
"""

from __future__ import annotations

import pathlib
from typing import Any, Dict, List

import pytest
import yaml
from sqlalchemy import create_engine, text

from autocrud.classifier import ColumnClassifier
from autocrud.models import ColumnDescriptor, GenerationConfig, ModelSpec

ROUTES_HEADER: str = "<?php\n\nuse Illuminate\\Support\\Facades\\Route;\n"


# ---------------------------------------------------------------------------
# Column lists
# ---------------------------------------------------------------------------


@pytest.fixture()
def product_columns() -> List[str]:
    return ["id", "title", "cover_img", "created_at", "updated_at"]


@pytest.fixture()
def soft_product_columns(product_columns: List[str]) -> List[str]:
    return product_columns + ["deleted_at"]


@pytest.fixture()
def user_columns() -> List[str]:
    return [
        "id",
        "name",
        "email",
        "email_verified_at",
        "password",
        "remember_token",
        "avatar_img",
        "created_at",
        "updated_at",
    ]


# ---------------------------------------------------------------------------
# Model specs
# ---------------------------------------------------------------------------


@pytest.fixture()
def product_spec(product_columns: List[str]) -> ModelSpec:
    return ModelSpec(name="Product", columns=product_columns)


@pytest.fixture()
def soft_product_spec(soft_product_columns: List[str]) -> ModelSpec:
    return ModelSpec(name="Product", columns=soft_product_columns)


@pytest.fixture()
def user_spec(user_columns: List[str]) -> ModelSpec:
    return ModelSpec(name="User", columns=user_columns)


@pytest.fixture()
def media_spec() -> ModelSpec:
    """One column per built-in media subtype."""
    return ModelSpec(
        name="Lesson",
        columns=["id", "title", "thumb_img", "intro_vid", "podcast_aud", "notes_doc", "created_at"],
    )


@pytest.fixture()
def classifier() -> ColumnClassifier:
    return ColumnClassifier()


@pytest.fixture()
def product_descriptors(classifier: ColumnClassifier, product_spec: ModelSpec) -> List[ColumnDescriptor]:
    return classifier.classify_all(product_spec.columns)


@pytest.fixture()
def soft_product_descriptors(
    classifier: ColumnClassifier, soft_product_spec: ModelSpec
) -> List[ColumnDescriptor]:
    return classifier.classify_all(soft_product_spec.columns)


# ---------------------------------------------------------------------------
# Target project & configuration
# ---------------------------------------------------------------------------


@pytest.fixture()
def laravel_root(tmp_path: pathlib.Path) -> pathlib.Path:
    """A bare Laravel project with an existing routes/api.php."""
    root: pathlib.Path = tmp_path / "shop"
    (root / "routes").mkdir(parents=True)
    (root / "routes" / "api.php").write_text(ROUTES_HEADER, encoding="utf-8")
    return root


@pytest.fixture()
def config(laravel_root: pathlib.Path) -> GenerationConfig:
    return GenerationConfig(project_root=str(laravel_root))


@pytest.fixture()
def raw_schema() -> Dict[str, Any]:
    return {
        "tables": {
            "products": ["id", "title", "cover_img", "created_at", "updated_at"],
            "posts": [
                "id",
                {"name": "title"},
                {"name": "body"},
                {"name": "banner_img"},
                "created_at",
                "updated_at",
                "deleted_at",
            ],
            "users": ["id", "name", "email", "password", "created_at", "updated_at"],
        }
    }


@pytest.fixture()
def schema_yaml_path(raw_schema: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    """Write the schema dict to a temporary YAML file and return its path."""
    path = tmp_path / "schema.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(raw_schema, fh, default_flow_style=False, allow_unicode=True)
    return path


@pytest.fixture()
def sqlite_url(tmp_path: pathlib.Path) -> str:
    """SQLite database with a products and a posts table."""
    url: str = f"sqlite:///{tmp_path / 'database.sqlite'}"
    engine = create_engine(url)
    with engine.begin() as conn:
        conn.execute(text(
            "CREATE TABLE products ("
            " id INTEGER PRIMARY KEY,"
            " title VARCHAR(255) NOT NULL,"
            " cover_img VARCHAR(255),"
            " created_at TIMESTAMP,"
            " updated_at TIMESTAMP)"
        ))
        conn.execute(text(
            "CREATE TABLE posts ("
            " id INTEGER PRIMARY KEY,"
            " title VARCHAR(255),"
            " body TEXT,"
            " banner_img VARCHAR(255),"
            " created_at TIMESTAMP,"
            " updated_at TIMESTAMP,"
            " deleted_at TIMESTAMP)"
        ))
    engine.dispose()
    return url
