"""
tests/test_templates.py
Unit tests for autocrud.templates: resources, form requests, route blocks
and the published support traits.
"""

from __future__ import annotations

from autocrud.classifier import ColumnClassifier
from autocrud.exclusions import ExclusionPolicy
from autocrud.models import ArtifactKind, GenerationConfig, ModelSpec, OperationMode
from autocrud.templates import TemplateGenerator


def _kept(spec: ModelSpec, artifact: ArtifactKind):
    descriptors = ColumnClassifier().classify_all(spec.columns)
    return ExclusionPolicy().filter_columns(spec.name, descriptors, artifact)


class TestResource:

    def test_projects_kept_columns(self, product_spec: ModelSpec) -> None:
        php = TemplateGenerator().generate_resource(
            product_spec, _kept(product_spec, ArtifactKind.RESOURCE)
        )
        assert php.startswith("<?php\n\nnamespace App\\Http\\Resources;")
        assert "class ProductResource extends JsonResource" in php
        assert "'id' => $this->id," in php
        assert "'title' => $this->title," in php
        assert "'cover_img' => $this->cover_img ? asset($this->cover_img) : null," in php
        assert "created_at" not in php

    def test_user_resource_hides_secrets(self, user_spec: ModelSpec) -> None:
        php = TemplateGenerator().generate_resource(user_spec, _kept(user_spec, ArtifactKind.RESOURCE))
        assert "'email' => $this->email," in php
        assert "password" not in php
        assert "email_verified_at" not in php

    def test_custom_namespace(self, product_spec: ModelSpec) -> None:
        config = GenerationConfig(app_namespace="Shop")
        php = TemplateGenerator(config).generate_resource(product_spec, [])
        assert "namespace Shop\\Http\\Resources;" in php


class TestFormRequests:

    def test_store_request_rules(self, product_spec: ModelSpec) -> None:
        php = TemplateGenerator().generate_store_request(
            product_spec, _kept(product_spec, ArtifactKind.STORE_REQUEST)
        )
        assert "namespace App\\Http\\Requests\\ProductRequest;" in php
        assert "class StoreProductRequest extends FormRequest" in php
        assert "'title' => 'required'," in php
        assert "'cover_img' => 'required|file|image|mimes:png,jpg,jpeg,gif|max:10000|" in php
        for hidden in ("'id'", "'created_at'", "'updated_at'"):
            assert hidden not in php

    def test_update_request_is_nullable(self, product_spec: ModelSpec) -> None:
        php = TemplateGenerator().generate_form_request(
            product_spec, _kept(product_spec, ArtifactKind.UPDATE_REQUEST), OperationMode.UPDATE
        )
        assert "class UpdateProductRequest extends FormRequest" in php
        assert "'title' => 'nullable'," in php
        assert "'cover_img' => 'nullable|file|image|" in php

    def test_failed_validation_uses_error_envelope(self, product_spec: ModelSpec) -> None:
        php = TemplateGenerator().generate_store_request(product_spec, [])
        assert "use App\\Traits\\ApiResponseTrait;" in php
        assert "$this->errorResponse($errors, 'Validation error', 422)" in php
        assert "protected $stopOnFirstFailure = false;" in php

    def test_user_requests_drop_secrets(self, user_spec: ModelSpec) -> None:
        php = TemplateGenerator().generate_store_request(
            user_spec, _kept(user_spec, ArtifactKind.STORE_REQUEST)
        )
        assert "'password'" not in php
        assert "'email_verified_at'" not in php
        assert "'avatar_img' => 'required|file|image|" in php


class TestRoutes:

    def test_plain_model(self, product_spec: ModelSpec) -> None:
        block = TemplateGenerator().generate_routes(product_spec)
        assert block.startswith("\n/**\n * Product Management Routes")
        assert (
            "Route::apiResource('Products', App\\Http\\Controllers\\ProductController::class);"
            in block
        )
        assert "trashed" not in block

    def test_soft_delete_routes_precede_resource(self, soft_product_spec: ModelSpec) -> None:
        block = TemplateGenerator().generate_routes(soft_product_spec)
        trashed = block.index("Route::get('Products/trashed'")
        restore = block.index("Route::post('Products/{id}/restore'")
        force = block.index("Route::delete('Products/{id}/forceDelete'")
        resource = block.index("Route::apiResource('Products'")
        assert trashed < resource and restore < resource and force < resource
        assert "ProductController::class, 'forceDelete']" in block

    def test_block_is_self_contained(self, product_spec: ModelSpec) -> None:
        block = TemplateGenerator().generate_routes(product_spec)
        assert block.endswith(";\n")


class TestSupportTraits:

    def test_response_trait_pagination_keys(self) -> None:
        php = TemplateGenerator().generate_response_trait()
        assert "trait ApiResponseTrait" in php
        for key in ("'total'", "'count'", "'per_page'", "'current_page'", "'total_pages'"):
            assert key in php
        assert "public function errorResponse($data = null, $message = 'Operation Failed', $status = 400)" in php

    def test_storage_trait_renders_media_table(self) -> None:
        php = TemplateGenerator().generate_storage_trait()
        assert "trait FileStorageTrait" in php
        assert "'image' => [" in php
        assert "'document' => [" in php
        assert "'application/pdf'" in php
        assert "public function storeFile($file, string $folderName, string $fileType)" in php
        assert "public function fileExists($file, $oldFile, string $folderName, string $fileType)" in php
        assert "public function deleteFile($fileUrl)" in php

    def test_storage_trait_uses_configured_disk(self) -> None:
        php = TemplateGenerator(GenerationConfig(storage_disk="s3")).generate_storage_trait()
        assert "Storage::disk('s3')" in php
        assert "Storage::disk('public')" not in php
