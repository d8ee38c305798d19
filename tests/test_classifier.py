"""
tests/test_classifier.py
Unit tests for autocrud.classifier: exact names, media suffixes and the
plain-field fallback.
"""

from __future__ import annotations

import pytest

from autocrud.classifier import ColumnClassifier, classify
from autocrud.models import ColumnKind, GenerationConfig, MediaType


class TestExactNames:

    @pytest.mark.parametrize(
        "name, kind",
        [
            ("id", ColumnKind.IDENTIFIER),
            ("created_at", ColumnKind.CREATED_TIMESTAMP),
            ("updated_at", ColumnKind.UPDATED_TIMESTAMP),
            ("deleted_at", ColumnKind.SOFT_DELETE_MARKER),
            ("password", ColumnKind.SENSITIVE_AUTH_FIELD),
            ("remember_token", ColumnKind.SENSITIVE_AUTH_FIELD),
            ("email_verified_at", ColumnKind.SENSITIVE_AUTH_FIELD),
        ],
    )
    def test_exact_match(self, name: str, kind: ColumnKind) -> None:
        descriptor = classify(name)
        assert descriptor.kind == kind
        assert descriptor.media_type is None

    def test_exact_names_are_case_sensitive(self) -> None:
        assert classify("ID").kind == ColumnKind.PLAIN_FIELD

    def test_custom_sensitive_columns(self) -> None:
        classifier = ColumnClassifier(sensitive_columns=["api_token"])
        assert classifier.classify("api_token").kind == ColumnKind.SENSITIVE_AUTH_FIELD
        assert classifier.classify("password").kind == ColumnKind.PLAIN_FIELD


class TestMediaSuffixes:

    @pytest.mark.parametrize(
        "name, media",
        [
            ("cover_img", "image"),
            ("intro_vid", "video"),
            ("podcast_aud", "audio"),
            ("manual_doc", "document"),
            ("manual_docs", "document"),
        ],
    )
    def test_suffix_selects_subtype(self, name: str, media: str) -> None:
        descriptor = classify(name)
        assert descriptor.kind == ColumnKind.MEDIA_REFERENCE
        assert descriptor.media_type == media
        assert descriptor.is_media is True

    def test_bare_suffix_is_media(self) -> None:
        descriptor = classify("_img")
        assert descriptor.kind == ColumnKind.MEDIA_REFERENCE
        assert descriptor.media_type == "image"

    def test_suffix_must_be_at_the_end(self) -> None:
        assert classify("img_cover").kind == ColumnKind.PLAIN_FIELD
        assert classify("cover_image").kind == ColumnKind.PLAIN_FIELD

    def test_unknown_suffix_is_plain(self) -> None:
        assert classify("contract_pdf").kind == ColumnKind.PLAIN_FIELD

    def test_configured_media_type(self) -> None:
        config = GenerationConfig(media_types=[
            MediaType(
                name="archive",
                suffixes=["_zip"],
                extensions=["zip"],
                mime_types=["application/zip"],
            ),
        ])
        classifier = ColumnClassifier.from_config(config)
        assert classifier.classify("backup_zip").media_type == "archive"
        assert classifier.classify("cover_img").kind == ColumnKind.PLAIN_FIELD


class TestTotality:

    @pytest.mark.parametrize(
        "name",
        ["title", "price", "x", "is_active", "user_id", "created_by", "deleted"],
    )
    def test_everything_else_is_plain(self, name: str) -> None:
        assert classify(name).kind == ColumnKind.PLAIN_FIELD

    def test_classify_all_preserves_order(self, product_columns) -> None:
        descriptors = ColumnClassifier().classify_all(product_columns)
        assert [d.name for d in descriptors] == product_columns
        assert [d.kind for d in descriptors] == [
            ColumnKind.IDENTIFIER,
            ColumnKind.PLAIN_FIELD,
            ColumnKind.MEDIA_REFERENCE,
            ColumnKind.CREATED_TIMESTAMP,
            ColumnKind.UPDATED_TIMESTAMP,
        ]
