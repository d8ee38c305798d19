"""
tests/test_exclusions.py
Unit tests for autocrud.exclusions: baseline table, auth-model suppression
and per-model extra exclusions.
"""

from __future__ import annotations

from typing import List

import pytest

from autocrud.classifier import ColumnClassifier
from autocrud.exclusions import BASELINE_EXCLUSIONS, ExclusionPolicy
from autocrud.models import ArtifactKind, ColumnDescriptor, GenerationConfig

HANDLER_ARTIFACTS: List[ArtifactKind] = [
    ArtifactKind.STORE_REQUEST,
    ArtifactKind.UPDATE_REQUEST,
    ArtifactKind.CONTROLLER,
    ArtifactKind.SERVICE,
]


def _names(columns: List[ColumnDescriptor]) -> List[str]:
    return [c.name for c in columns]


class TestBaseline:

    @pytest.mark.parametrize("artifact", HANDLER_ARTIFACTS)
    def test_bookkeeping_columns_dropped_from_writes(self, artifact, product_descriptors) -> None:
        kept = ExclusionPolicy().filter_columns("Product", product_descriptors, artifact)
        assert _names(kept) == ["title", "cover_img"]

    def test_resource_keeps_identifier(self, soft_product_descriptors) -> None:
        kept = ExclusionPolicy().filter_columns(
            "Product", soft_product_descriptors, ArtifactKind.RESOURCE
        )
        assert _names(kept) == ["id", "title", "cover_img"]

    def test_routes_have_no_baseline_entry(self) -> None:
        assert ArtifactKind.ROUTES not in BASELINE_EXCLUSIONS


class TestAuthModel:

    @pytest.mark.parametrize(
        "artifact",
        HANDLER_ARTIFACTS + [ArtifactKind.RESOURCE],
    )
    def test_sensitive_columns_dropped_for_user(self, artifact, user_spec) -> None:
        descriptors = ColumnClassifier().classify_all(user_spec.columns)
        kept = _names(ExclusionPolicy().filter_columns("User", descriptors, artifact))
        assert "password" not in kept
        assert "email_verified_at" not in kept
        assert "remember_token" not in kept
        assert "email" in kept

    def test_sensitive_columns_kept_for_other_models(self) -> None:
        descriptors = ColumnClassifier().classify_all(["id", "name", "password"])
        kept = ExclusionPolicy().filter_columns("Door", descriptors, ArtifactKind.STORE_REQUEST)
        assert _names(kept) == ["name", "password"]

    def test_auth_models_are_configurable(self) -> None:
        config = GenerationConfig(auth_models=["Admin"])
        policy = ExclusionPolicy(config)
        assert policy.is_auth_model("Admin")
        assert not policy.is_auth_model("User")


class TestModelExclusions:

    def test_extra_names_only_affect_their_artifact(self, product_descriptors) -> None:
        config = GenerationConfig(
            model_exclusions={"Product": {ArtifactKind.RESOURCE: ["cover_img"]}}
        )
        policy = ExclusionPolicy(config)
        assert _names(policy.filter_columns("Product", product_descriptors, ArtifactKind.RESOURCE)) == [
            "id",
            "title",
        ]
        assert "cover_img" in _names(
            policy.filter_columns("Product", product_descriptors, ArtifactKind.STORE_REQUEST)
        )

    @pytest.mark.parametrize("listed_under", [ArtifactKind.CONTROLLER, ArtifactKind.SERVICE])
    @pytest.mark.parametrize("artifact", [ArtifactKind.CONTROLLER, ArtifactKind.SERVICE])
    def test_handler_extra_names_cover_controller_and_service(
        self, listed_under, artifact, product_descriptors
    ) -> None:
        config = GenerationConfig(model_exclusions={"Product": {listed_under: ["title"]}})
        kept = ExclusionPolicy(config).filter_columns("Product", product_descriptors, artifact)
        assert _names(kept) == ["cover_img"]

    def test_extra_names_do_not_leak_to_other_models(self, product_descriptors) -> None:
        config = GenerationConfig(model_exclusions={"Order": {ArtifactKind.RESOURCE: ["title"]}})
        kept = ExclusionPolicy(config).filter_columns("Product", product_descriptors, ArtifactKind.RESOURCE)
        assert "title" in _names(kept)

    def test_string_keys_are_parsed_into_artifact_kinds(self) -> None:
        config = GenerationConfig.model_validate(
            {"model_exclusions": {"Product": {"resource": ["secret"]}}}
        )
        assert config.model_exclusions["Product"][ArtifactKind.RESOURCE] == ["secret"]


class TestIdempotency:

    @pytest.mark.parametrize("artifact", list(ArtifactKind))
    def test_filter_twice_equals_filter_once(self, artifact, user_spec) -> None:
        descriptors = ColumnClassifier().classify_all(user_spec.columns + ["deleted_at"])
        config = GenerationConfig(model_exclusions={"User": {artifact: ["name"]}})
        policy = ExclusionPolicy(config)
        once = policy.filter_columns("User", descriptors, artifact)
        twice = policy.filter_columns("User", once, artifact)
        assert once == twice
