# File: autocrud/models.py
"""
AutoCRUD - Core Data Models
============================
Pydantic V2 models describing a model's column inventory, the semantic kinds
the classifier assigns to columns, the generation configuration and the
artifact plan the orchestrator emits. These models are the single source of
truth for the entire pipeline:

    Schema Source → ModelSpec → Classification → ArtifactPlan → Emission
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from autocrud.utils import table_name_for_model, to_plural

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("autocrud.models")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SOFT_DELETE_COLUMN: str = "deleted_at"

DEFAULT_SENSITIVE_COLUMNS: Tuple[str, ...] = (
    "password",
    "remember_token",
    "email_verified_at",
)

# ---------------------------------------------------------------------------
# Enums: fixed sets used across the entire project
# ---------------------------------------------------------------------------


class ColumnKind(str, Enum):
    """Semantic kind of a column, derived from its name only."""

    IDENTIFIER = "identifier"
    CREATED_TIMESTAMP = "created_timestamp"
    UPDATED_TIMESTAMP = "updated_timestamp"
    SOFT_DELETE_MARKER = "soft_delete_marker"
    SENSITIVE_AUTH_FIELD = "sensitive_auth_field"
    MEDIA_REFERENCE = "media_reference"
    PLAIN_FIELD = "plain_field"


class MediaSubtype(str, Enum):
    """Built-in media subtypes. Configuration may add more by name."""

    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    DOCUMENT = "document"


class OperationMode(str, Enum):
    """Which validation rule set is being synthesised."""

    CREATE = "create"
    UPDATE = "update"


class ArtifactKind(str, Enum):
    """Every kind of file the generator can produce."""

    STORE_REQUEST = "store_request"
    UPDATE_REQUEST = "update_request"
    RESOURCE = "resource"
    SERVICE = "service"
    CONTROLLER = "controller"
    ROUTES = "routes"
    RESPONSE_TRAIT = "response_trait"
    STORAGE_TRAIT = "storage_trait"


class WritePolicy(str, Enum):
    """How an artifact is materialised on disk."""

    CREATE_IF_ABSENT = "create_if_absent"
    APPEND = "append"


# ---------------------------------------------------------------------------
# Mixin: shared model configuration
# ---------------------------------------------------------------------------

_SHARED_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    validate_assignment=True,
    frozen=False,
    extra="forbid",
    protected_namespaces=(),
)

_FROZEN_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    frozen=True,
    extra="forbid",
    protected_namespaces=(),
)


# ---------------------------------------------------------------------------
# Media table entries
# ---------------------------------------------------------------------------


class MediaType(BaseModel):
    """
    One row of the media table: a subtype, the column-name suffixes that
    select it and the upload allow-list that validates it.
    """

    model_config = _FROZEN_CONFIG

    name: str = Field(..., min_length=1, description="Subtype name, e.g. 'image'.")
    suffixes: List[str] = Field(
        ..., min_length=1, description="Column-name suffixes, e.g. ['_img']."
    )
    extensions: List[str] = Field(
        ..., min_length=1, description="Allowed file extensions."
    )
    mime_types: List[str] = Field(
        ..., min_length=1, description="Allowed MIME types."
    )
    is_image: bool = Field(
        default=False, description="Adds the framework's 'image' rule."
    )

    @field_validator("suffixes")
    @classmethod
    def _suffixes_start_with_underscore(cls, v: List[str]) -> List[str]:
        for suffix in v:
            if not suffix.startswith("_") or len(suffix) < 2:
                raise ValueError(
                    f"Media suffix '{suffix}' must start with '_' and name something."
                )
        return v

    def __repr__(self) -> str:
        return f"<MediaType {self.name}: {','.join(self.suffixes)}>"


def default_media_types() -> List[MediaType]:
    """The built-in media table (image, video, audio, document)."""
    return [
        MediaType(
            name=MediaSubtype.IMAGE.value,
            suffixes=["_img"],
            extensions=["png", "jpg", "jpeg", "gif"],
            mime_types=["image/jpeg", "image/png", "image/jpg", "image/gif"],
            is_image=True,
        ),
        MediaType(
            name=MediaSubtype.VIDEO.value,
            suffixes=["_vid"],
            extensions=["mp4", "webm", "ogg", "mov", "wmv"],
            mime_types=[
                "video/mp4",
                "video/webm",
                "video/ogg",
                "video/quicktime",
                "video/x-ms-wmv",
            ],
        ),
        MediaType(
            name=MediaSubtype.AUDIO.value,
            suffixes=["_aud"],
            extensions=["mp3", "wav", "ogg", "aac"],
            mime_types=["audio/mpeg", "audio/wav", "audio/ogg", "audio/aac"],
        ),
        MediaType(
            name=MediaSubtype.DOCUMENT.value,
            suffixes=["_doc", "_docs"],
            extensions=["pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx"],
            mime_types=[
                "application/pdf",
                "application/msword",
                "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
                "application/vnd.ms-excel",
                "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
                "application/vnd.ms-powerpoint",
                "application/vnd.openxmlformats-officedocument.presentationml.presentation",
            ],
        ),
    ]


# ---------------------------------------------------------------------------
# Columns & models
# ---------------------------------------------------------------------------


class ColumnDescriptor(BaseModel):
    """A column name together with the kind the classifier assigned to it."""

    model_config = _FROZEN_CONFIG

    name: str = Field(..., min_length=1, description="Raw column name.")
    kind: ColumnKind = Field(..., description="Semantic kind.")
    media_type: Optional[str] = Field(
        default=None,
        description="Media subtype name; set only for MEDIA_REFERENCE columns.",
    )

    @model_validator(mode="after")
    def _media_type_matches_kind(self) -> "ColumnDescriptor":
        is_media: bool = self.kind == ColumnKind.MEDIA_REFERENCE
        if is_media and not self.media_type:
            raise ValueError(f"Media column '{self.name}' needs a media_type.")
        if not is_media and self.media_type is not None:
            raise ValueError(
                f"Column '{self.name}' of kind {self.kind.value} cannot carry a media_type."
            )
        return self

    @computed_field  # type: ignore[misc]
    @property
    def is_media(self) -> bool:
        return self.kind == ColumnKind.MEDIA_REFERENCE

    def __repr__(self) -> str:
        suffix: str = f"({self.media_type})" if self.media_type else ""
        return f"<ColumnDescriptor {self.name}: {self.kind.value}{suffix}>"


class ModelSpec(BaseModel):
    """
    A data model and the ordered column list of its backing table.

    Built once per run from the schema source; immutable afterwards.
    Column order is the schema's ordinal order and is preserved in every
    generated field list.
    """

    model_config = _FROZEN_CONFIG

    name: str = Field(..., min_length=1, description="PascalCase singular model name.")
    columns: List[str] = Field(
        ..., min_length=1, description="Ordered raw column names."
    )

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        return v.strip()

    @computed_field  # type: ignore[misc]
    @property
    def plural_name(self) -> str:
        return to_plural(self.name)

    @computed_field  # type: ignore[misc]
    @property
    def table_name(self) -> str:
        return table_name_for_model(self.name)

    @computed_field  # type: ignore[misc]
    @property
    def supports_soft_delete(self) -> bool:
        return SOFT_DELETE_COLUMN in self.columns

    def __repr__(self) -> str:
        return f"<ModelSpec {self.name} ({len(self.columns)} columns)>"


class GenerationOptions(BaseModel):
    """Per-run choices made by the caller (flag or interactive prompt)."""

    model_config = _SHARED_CONFIG

    use_service_layer: bool = Field(
        default=False,
        description="Delegate persistence to a generated {Model}Service.",
    )


# ---------------------------------------------------------------------------
# Generation configuration
# ---------------------------------------------------------------------------


class GenerationConfig(BaseModel):
    """
    Master configuration that controls where artifacts go and which tables
    (media, exclusions) drive their contents.

    Loadable from JSON/YAML; CLI flags override individual fields.
    """

    model_config = _SHARED_CONFIG

    # -- Target project -----------------------------------------------------
    project_root: str = Field(
        default=".", description="Root of the Laravel project receiving artifacts."
    )
    app_dir: str = Field(default="app", description="Application directory.")
    routes_file: str = Field(
        default="routes/api.php", description="Shared route table, relative to root."
    )
    app_namespace: str = Field(default="App", description="Root PHP namespace.")
    support_namespace: str = Field(
        default="App\\Traits",
        description="Namespace of the published response / storage traits.",
    )

    # -- Generated behaviour ------------------------------------------------
    default_page_size: int = Field(
        default=10, ge=1, le=1000, description="Default per_page of list endpoints."
    )
    max_upload_kb: int = Field(
        default=10000, ge=1, description="Max upload size in kilobytes."
    )
    storage_disk: str = Field(
        default="public", min_length=1, description="Filesystem disk for uploads."
    )

    # -- Classification & exclusion tables ----------------------------------
    media_types: List[MediaType] = Field(
        default_factory=default_media_types,
        description="Media table, checked in order.",
    )
    sensitive_columns: List[str] = Field(
        default_factory=lambda: list(DEFAULT_SENSITIVE_COLUMNS),
        description="Column names classified as sensitive authentication fields.",
    )
    auth_models: List[str] = Field(
        default_factory=lambda: ["User"],
        description="Models whose sensitive fields are suppressed everywhere.",
    )
    model_exclusions: Dict[str, Dict[ArtifactKind, List[str]]] = Field(
        default_factory=dict,
        description="Extra per-model exclusions: {Model: {artifact_kind: [columns]}}.",
    )

    # -- Emission -----------------------------------------------------------
    publish_support: bool = Field(
        default=True,
        description="Publish ApiResponseTrait / FileStorageTrait if absent.",
    )
    dedupe_routes: bool = Field(
        default=False,
        description="Skip the route append when the controller is already routed.",
    )

    def relative_path_for(self, kind: ArtifactKind, model_name: str) -> str:
        """Conventional location of an artifact, relative to ``project_root``."""
        app: str = self.app_dir.rstrip("/")
        kind = ArtifactKind(kind)
        if kind == ArtifactKind.STORE_REQUEST:
            return f"{app}/Http/Requests/{model_name}Request/Store{model_name}Request.php"
        if kind == ArtifactKind.UPDATE_REQUEST:
            return f"{app}/Http/Requests/{model_name}Request/Update{model_name}Request.php"
        if kind == ArtifactKind.RESOURCE:
            return f"{app}/Http/Resources/{model_name}Resource.php"
        if kind == ArtifactKind.SERVICE:
            return f"{app}/Services/{model_name}Service.php"
        if kind == ArtifactKind.CONTROLLER:
            return f"{app}/Http/Controllers/{model_name}Controller.php"
        if kind == ArtifactKind.RESPONSE_TRAIT:
            return f"{app}/Traits/ApiResponseTrait.php"
        if kind == ArtifactKind.STORAGE_TRAIT:
            return f"{app}/Traits/FileStorageTrait.php"
        return self.routes_file

    def media_type_named(self, name: str) -> Optional[MediaType]:
        for media in self.media_types:
            if media.name == name:
                return media
        return None


# ---------------------------------------------------------------------------
# Artifact plan
# ---------------------------------------------------------------------------


class Artifact(BaseModel):
    """One generated file (or route block) and its write policy."""

    model_config = _FROZEN_CONFIG

    kind: ArtifactKind
    relative_path: str = Field(..., min_length=1)
    content: str
    policy: WritePolicy = WritePolicy.CREATE_IF_ABSENT

    def __repr__(self) -> str:
        return f"<Artifact {self.kind.value} → {self.relative_path}>"


class ArtifactPlan(BaseModel):
    """Everything the orchestrator will emit for one model, in order."""

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1, description="Model the plan belongs to.")
    artifacts: List[Artifact] = Field(default_factory=list)

    def get(self, kind: ArtifactKind) -> Optional[Artifact]:
        for artifact in self.artifacts:
            if artifact.kind == kind:
                return artifact
        return None

    @computed_field  # type: ignore[misc]
    @property
    def kinds(self) -> List[ArtifactKind]:
        return [a.kind for a in self.artifacts]


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "SOFT_DELETE_COLUMN",
    "DEFAULT_SENSITIVE_COLUMNS",
    "ColumnKind",
    "MediaSubtype",
    "OperationMode",
    "ArtifactKind",
    "WritePolicy",
    "MediaType",
    "default_media_types",
    "ColumnDescriptor",
    "ModelSpec",
    "GenerationOptions",
    "GenerationConfig",
    "Artifact",
    "ArtifactPlan",
]

logger.debug("autocrud.models loaded — %d public symbols.", len(__all__))
