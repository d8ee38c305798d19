"""
tests/test_rules.py
Unit tests for autocrud.rules: presence per mode and media allow-lists.
"""

from __future__ import annotations

import pytest

from autocrud.classifier import classify
from autocrud.models import ColumnDescriptor, ColumnKind, GenerationConfig, OperationMode
from autocrud.rules import RuleSynthesizer, rule


class TestPlainFields:

    def test_create_is_required(self) -> None:
        assert rule(classify("title"), OperationMode.CREATE) == "required"

    def test_update_is_nullable(self) -> None:
        assert rule(classify("title"), OperationMode.UPDATE) == "nullable"

    def test_sensitive_field_of_non_auth_model_is_plain_rule(self) -> None:
        assert rule(classify("password"), OperationMode.CREATE) == "required"


class TestMediaFields:

    def test_image_create_rule(self) -> None:
        assert rule(classify("cover_img"), OperationMode.CREATE) == (
            "required|file|image|mimes:png,jpg,jpeg,gif|max:10000"
            "|mimetypes:image/jpeg,image/png,image/jpg,image/gif"
        )

    def test_image_update_rule_is_nullable(self) -> None:
        text = rule(classify("cover_img"), OperationMode.UPDATE)
        assert text.startswith("nullable|file|image|")

    @pytest.mark.parametrize(
        "name, fragment",
        [
            ("intro_vid", "mimes:mp4,webm,ogg,mov,wmv"),
            ("podcast_aud", "mimes:mp3,wav,ogg,aac"),
            ("manual_doc", "mimes:pdf,doc,docx,xls,xlsx,ppt,pptx"),
            ("manual_docs", "mimes:pdf,doc,docx,xls,xlsx,ppt,pptx"),
        ],
    )
    def test_non_image_media_has_no_image_rule(self, name: str, fragment: str) -> None:
        text = rule(classify(name), OperationMode.CREATE)
        assert text.startswith("required|file|mimes:")
        assert fragment in text
        assert "|image|" not in text

    def test_max_upload_size_is_configurable(self) -> None:
        config = GenerationConfig(max_upload_kb=2048)
        text = RuleSynthesizer(config).rule(classify("cover_img"), OperationMode.CREATE)
        assert "|max:2048|" in text

    def test_unknown_media_type_falls_back_to_presence(self) -> None:
        column = ColumnDescriptor(name="x_zip", kind=ColumnKind.MEDIA_REFERENCE, media_type="archive")
        assert rule(column, OperationMode.UPDATE) == "nullable"
