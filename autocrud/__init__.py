# File: autocrud/__init__.py
"""
AutoCRUD — Laravel CRUD Scaffolding Generator
==============================================

Reads a model's column list from a database (or a schema file) and writes
the companion Laravel files for it: store/update form requests, an API
resource, a controller (optionally backed by a service) and a route block.
Existing files are never overwritten.

Architecture overview::

    ┌──────────────┐     ┌────────────────┐     ┌──────────────────┐
    │  CLI / Entry │────▶│  CrudGenerator │────▶│ ColumnClassifier │
    │   (cli.py)   │     │ (generator.py) │     │ (classifier.py)  │
    └──────────────┘     └───────┬────────┘     └──────────────────┘
                                 │
          ┌──────────────┬───────┴──────┬──────────────┐
          ▼              ▼              ▼              ▼
    ┌───────────┐ ┌────────────┐ ┌────────────┐ ┌───────────┐
    │exclusions │ │ templates  │ │  handlers  │ │ exporters │
    │ rules     │ │  (.py)     │ │  (.py)     │ │  (.py)    │
    └───────────┘ └────────────┘ └────────────┘ └───────────┘

Usage::

    # As a library
    from autocrud import CrudGenerator, GenerationConfig, ModelSpec
    gen = CrudGenerator(GenerationConfig(project_root="./shop"))
    gen.generate(ModelSpec(name="Product", columns=["id", "title"]))

    # From the command line
    autocrud Product --schema-file schema.yaml --service -v
"""

from __future__ import annotations

__version__: str = "0.1.0"
__license__: str = "MIT"

from autocrud.classifier import ColumnClassifier, classify
from autocrud.errors import (
    AutoCrudError,
    ConfigError,
    DirectoryCreateFailure,
    EmitFailure,
    FileWriteFailure,
    InvalidModelSpec,
    SchemaNotFound,
)
from autocrud.exclusions import BASELINE_EXCLUSIONS, ExclusionPolicy
from autocrud.exporters import ArtifactExporter, ExportManifest, FileRecord, RecordStatus
from autocrud.generator import CrudGenerator, GenerationReport, GenerationState
from autocrud.handlers import RequestHandlerGenerator
from autocrud.models import (
    Artifact,
    ArtifactKind,
    ArtifactPlan,
    ColumnDescriptor,
    ColumnKind,
    GenerationConfig,
    GenerationOptions,
    MediaType,
    ModelSpec,
    OperationMode,
    WritePolicy,
)
from autocrud.rules import RuleSynthesizer, rule
from autocrud.schema import (
    DatabaseSchemaSource,
    FileSchemaSource,
    SchemaSource,
    build_model_spec,
    load_config_file,
)
from autocrud.templates import TemplateGenerator
from autocrud.validators import ValidationResult, validate_full

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    "__version__",
    "__license__",
    # Orchestrator
    "CrudGenerator",
    "GenerationReport",
    "GenerationState",
    # Models
    "Artifact",
    "ArtifactKind",
    "ArtifactPlan",
    "ColumnDescriptor",
    "ColumnKind",
    "GenerationConfig",
    "GenerationOptions",
    "MediaType",
    "ModelSpec",
    "OperationMode",
    "WritePolicy",
    # Core
    "ColumnClassifier",
    "classify",
    "BASELINE_EXCLUSIONS",
    "ExclusionPolicy",
    "RuleSynthesizer",
    "rule",
    "TemplateGenerator",
    "RequestHandlerGenerator",
    # Emission
    "ArtifactExporter",
    "ExportManifest",
    "FileRecord",
    "RecordStatus",
    # Schema
    "SchemaSource",
    "DatabaseSchemaSource",
    "FileSchemaSource",
    "build_model_spec",
    "load_config_file",
    # Validation
    "validate_full",
    "ValidationResult",
    # Errors
    "AutoCrudError",
    "ConfigError",
    "SchemaNotFound",
    "InvalidModelSpec",
    "EmitFailure",
    "DirectoryCreateFailure",
    "FileWriteFailure",
]
