# File: autocrud/templates.py
"""
AutoCRUD - Code Template Engine
================================
Transforms a ``ModelSpec`` and its classified columns into PHP source for:

    1. The read-model transformer (``{Model}Resource``)
    2. The create / update validation objects (``Store``/``Update{Model}Request``)
    3. The route-registration block appended to ``routes/api.php``
    4. The runtime support traits the generated code relies on
       (``ApiResponseTrait``, ``FileStorageTrait``)

Request handlers (controller / service) live in ``autocrud.handlers``.

All string assembly uses ``List[str]`` + ``"\\n".join()``; methods hold no
per-call state, so one generator can render any number of models.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from autocrud.models import (
    ColumnDescriptor,
    GenerationConfig,
    ModelSpec,
    OperationMode,
)
from autocrud.rules import RuleSynthesizer
from autocrud.utils import php_docblock, php_string

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("autocrud.templates")

_INDENT: str = "    "


class TemplateGenerator:
    """
    Stateless renderer for every artifact except the request handlers.

    Each ``generate_*`` method returns a complete file content string (or,
    for routes, a self-contained block ready to be appended).
    """

    def __init__(self, config: Optional[GenerationConfig] = None) -> None:
        self._config: GenerationConfig = config or GenerationConfig()
        self._rules: RuleSynthesizer = RuleSynthesizer(self._config)
        self._ns: str = self._config.app_namespace

    # ===================================================================
    # 1. Transformer
    # ===================================================================

    def generate_resource(
        self,
        spec: ModelSpec,
        columns: Sequence[ColumnDescriptor],
    ) -> str:
        """
        ``JsonResource`` projecting every kept column.

        Media columns are stored as public paths and projected as absolute
        URLs through ``asset()``.
        """
        class_name: str = f"{spec.name}Resource"
        lines: List[str] = [
            "<?php",
            "",
            f"namespace {self._ns}\\Http\\Resources;",
            "",
            "use Illuminate\\Http\\Resources\\Json\\JsonResource;",
            "",
            f"class {class_name} extends JsonResource",
            "{",
        ]
        lines.extend(php_docblock(
            "Transform the resource into an array.",
            "@param  \\Illuminate\\Http\\Request  $request",
            "@return array|\\Illuminate\\Contracts\\Support\\Arrayable|\\JsonSerializable",
        ))
        lines.append(f"{_INDENT}public function toArray($request)")
        lines.append(f"{_INDENT}{{")
        lines.append(f"{_INDENT * 2}return [")
        for col in columns:
            if col.is_media:
                value: str = f"$this->{col.name} ? asset($this->{col.name}) : null"
            else:
                value = f"$this->{col.name}"
            lines.append(f"{_INDENT * 3}{php_string(col.name)} => {value},")
        lines.append(f"{_INDENT * 2}];")
        lines.append(f"{_INDENT}}}")
        lines.append("}")
        lines.append("")

        content: str = "\n".join(lines)
        logger.debug(
            "Generated resource for '%s': %d columns.", spec.name, len(columns)
        )
        return content

    # ===================================================================
    # 2. Validation objects
    # ===================================================================

    def generate_form_request(
        self,
        spec: ModelSpec,
        columns: Sequence[ColumnDescriptor],
        mode: OperationMode,
    ) -> str:
        """``FormRequest`` with one rule line per kept column."""
        mode = OperationMode(mode)
        prefix: str = "Store" if mode == OperationMode.CREATE else "Update"
        folder: str = f"{spec.name}Request"
        class_name: str = f"{prefix}{spec.name}Request"

        lines: List[str] = [
            "<?php",
            "",
            f"namespace {self._ns}\\Http\\Requests\\{folder};",
            "",
            "use Illuminate\\Foundation\\Http\\FormRequest;",
            "use Illuminate\\Contracts\\Validation\\Validator;",
            "use Illuminate\\Http\\Exceptions\\HttpResponseException;",
            f"use {self._config.support_namespace}\\ApiResponseTrait;",
            "",
            f"class {class_name} extends FormRequest",
            "{",
            f"{_INDENT}use ApiResponseTrait;",
            "",
            f"{_INDENT}// report every failing rule, not only the first one",
            f"{_INDENT}protected $stopOnFirstFailure = false;",
            "",
        ]

        lines.extend(php_docblock(
            "Determine if the user is authorized to make this request.",
            "@return bool",
        ))
        lines.extend([
            f"{_INDENT}public function authorize()",
            f"{_INDENT}{{",
            f"{_INDENT * 2}return true;",
            f"{_INDENT}}}",
            "",
        ])

        lines.extend(php_docblock(
            "Get the validation rules that apply to the request.",
            "@return array",
        ))
        lines.append(f"{_INDENT}public function rules()")
        lines.append(f"{_INDENT}{{")
        lines.append(f"{_INDENT * 2}return [")
        for col in columns:
            rule_text: str = self._rules.rule(col, mode)
            lines.append(f"{_INDENT * 3}{php_string(col.name)} => {php_string(rule_text)},")
        lines.append(f"{_INDENT * 2}];")
        lines.append(f"{_INDENT}}}")
        lines.append("")

        lines.extend(php_docblock(
            "Handle a failed validation attempt with the API error envelope.",
            "@param  \\Illuminate\\Contracts\\Validation\\Validator  $validator",
            "@throws \\Illuminate\\Http\\Exceptions\\HttpResponseException",
            "@return never",
        ))
        lines.extend([
            f"{_INDENT}protected function failedValidation(Validator $validator)",
            f"{_INDENT}{{",
            f"{_INDENT * 2}$errors = $validator->errors()->all();",
            f"{_INDENT * 2}throw new HttpResponseException("
            f"$this->errorResponse($errors, 'Validation error', 422));",
            f"{_INDENT}}}",
            "",
        ])

        lines.extend(php_docblock(
            "Get custom messages for validator errors.",
            "@return array",
        ))
        lines.extend([
            f"{_INDENT}public function messages()",
            f"{_INDENT}{{",
            f"{_INDENT * 2}return [",
            f"{_INDENT * 3}//",
            f"{_INDENT * 2}];",
            f"{_INDENT}}}",
            "}",
            "",
        ])

        content: str = "\n".join(lines)
        logger.debug(
            "Generated %s for '%s': %d rules.", class_name, spec.name, len(columns)
        )
        return content

    def generate_store_request(
        self, spec: ModelSpec, columns: Sequence[ColumnDescriptor]
    ) -> str:
        return self.generate_form_request(spec, columns, OperationMode.CREATE)

    def generate_update_request(
        self, spec: ModelSpec, columns: Sequence[ColumnDescriptor]
    ) -> str:
        return self.generate_form_request(spec, columns, OperationMode.UPDATE)

    # ===================================================================
    # 3. Routes
    # ===================================================================

    def controller_reference(self, spec: ModelSpec) -> str:
        return f"{self._ns}\\Http\\Controllers\\{spec.name}Controller"

    def generate_routes(self, spec: ModelSpec) -> str:
        """
        Route block for one model.

        The soft-delete routes are registered before ``apiResource`` so that
        ``{Models}/trashed`` is not captured by the ``{Models}/{Model}`` route.
        """
        path: str = spec.plural_name
        controller: str = self.controller_reference(spec)

        lines: List[str] = [""]
        lines.extend(php_docblock(
            f"{spec.name} Management Routes",
            f"These routes handle {spec.name} management operations.",
            level=0,
        ))
        if spec.supports_soft_delete:
            lines.append(
                f"Route::get('{path}/trashed', [{controller}::class, 'trashed']);"
            )
            lines.append(
                f"Route::post('{path}/{{id}}/restore', [{controller}::class, 'restore']);"
            )
            lines.append(
                f"Route::delete('{path}/{{id}}/forceDelete', "
                f"[{controller}::class, 'forceDelete']);"
            )
        lines.append(f"Route::apiResource('{path}', {controller}::class);")
        lines.append("")
        return "\n".join(lines)

    # ===================================================================
    # 4. Runtime support traits
    # ===================================================================

    def generate_response_trait(self) -> str:
        """``ApiResponseTrait``: success / error / paginated JSON envelopes."""
        lines: List[str] = [
            "<?php",
            "",
            f"namespace {self._config.support_namespace};",
            "",
            "trait ApiResponseTrait",
            "{",
        ]
        lines.extend(php_docblock(
            "Return a successful JSON response.",
            "@param  mixed  $data",
            "@param  string  $message",
            "@param  int  $status",
            "@return \\Illuminate\\Http\\JsonResponse",
        ))
        lines.extend([
            f"{_INDENT}public function successResponse($data = null, $message = 'Operation Done', $status = 200)",
            f"{_INDENT}{{",
            f"{_INDENT * 2}return response()->json([",
            f"{_INDENT * 3}'status' => 'success',",
            f"{_INDENT * 3}'data' => $data,",
            f"{_INDENT * 3}'message' => trans($message),",
            f"{_INDENT * 2}], $status);",
            f"{_INDENT}}}",
            "",
        ])
        lines.extend(php_docblock(
            "Return an error JSON response.",
            "@param  mixed  $data  validation errors or null",
            "@param  string  $message",
            "@param  int  $status",
            "@return \\Illuminate\\Http\\JsonResponse",
        ))
        lines.extend([
            f"{_INDENT}public function errorResponse($data = null, $message = 'Operation Failed', $status = 400)",
            f"{_INDENT}{{",
            f"{_INDENT * 2}return response()->json([",
            f"{_INDENT * 3}'status' => 'error',",
            f"{_INDENT * 3}'data' => $data,",
            f"{_INDENT * 3}'message' => trans($message),",
            f"{_INDENT * 2}], $status);",
            f"{_INDENT}}}",
            "",
        ])
        lines.extend(php_docblock(
            "Return a paginated resource collection with its pagination meta.",
            "@param  \\Illuminate\\Http\\Resources\\Json\\AnonymousResourceCollection  $collection",
            "@param  string  $message",
            "@param  int  $status",
            "@return \\Illuminate\\Http\\JsonResponse",
        ))
        lines.extend([
            f"{_INDENT}public function resourcePaginated($collection, $message = 'Operation Success', $status = 200)",
            f"{_INDENT}{{",
            f"{_INDENT * 2}$paginator = $collection->resource;",
            "",
            f"{_INDENT * 2}return response()->json([",
            f"{_INDENT * 3}'status' => 'success',",
            f"{_INDENT * 3}'message' => trans($message),",
            f"{_INDENT * 3}'data' => $collection->items(),",
            f"{_INDENT * 3}'pagination' => [",
            f"{_INDENT * 4}'total' => $paginator->total(),",
            f"{_INDENT * 4}'count' => $paginator->count(),",
            f"{_INDENT * 4}'per_page' => $paginator->perPage(),",
            f"{_INDENT * 4}'current_page' => $paginator->currentPage(),",
            f"{_INDENT * 4}'total_pages' => $paginator->lastPage(),",
            f"{_INDENT * 3}],",
            f"{_INDENT * 2}], $status);",
            f"{_INDENT}}}",
            "}",
            "",
        ])
        return "\n".join(lines)

    def generate_storage_trait(self) -> str:
        """
        ``FileStorageTrait``: store / replace / delete uploaded files.

        The per-subtype allow-lists are rendered from the media table so the
        runtime checks and the validation rules never drift apart.
        """
        disk: str = php_string(self._config.storage_disk)
        lines: List[str] = [
            "<?php",
            "",
            f"namespace {self._config.support_namespace};",
            "",
            "use Exception;",
            "use Illuminate\\Support\\Str;",
            "use Illuminate\\Support\\Facades\\Storage;",
            "",
            "trait FileStorageTrait",
            "{",
        ]

        lines.extend(php_docblock(
            "Allowed extensions and MIME types per media subtype.",
            "@return array",
        ))
        lines.append(f"{_INDENT}protected function allowedFileTypes()")
        lines.append(f"{_INDENT}{{")
        lines.append(f"{_INDENT * 2}return [")
        for media in self._config.media_types:
            extensions: str = ", ".join(php_string(e) for e in media.extensions)
            mime_types: str = ", ".join(php_string(m) for m in media.mime_types)
            lines.append(f"{_INDENT * 3}{php_string(media.name)} => [")
            lines.append(f"{_INDENT * 4}'extensions' => [{extensions}],")
            lines.append(f"{_INDENT * 4}'mimetypes' => [{mime_types}],")
            lines.append(f"{_INDENT * 3}],")
        lines.append(f"{_INDENT * 2}];")
        lines.append(f"{_INDENT}}}")
        lines.append("")

        lines.extend(php_docblock(
            "Store an uploaded file on the public disk and return its URL.",
            "@param  \\Illuminate\\Http\\UploadedFile|null  $file",
            "@param  string  $folderName  folder named after the model",
            "@param  string  $fileType  media subtype selecting the allow-list",
            "@return string|null",
            "@throws \\Exception",
        ))
        lines.extend([
            f"{_INDENT}public function storeFile($file, string $folderName, string $fileType)",
            f"{_INDENT}{{",
            f"{_INDENT * 2}if (is_null($file)) {{",
            f"{_INDENT * 3}return null;",
            f"{_INDENT * 2}}}",
            "",
            f"{_INDENT * 2}// double extensions such as shell.php.png",
            f"{_INDENT * 2}if (preg_match('/\\.[^.]+\\./', $file->getClientOriginalName())) {{",
            f"{_INDENT * 3}throw new Exception(trans('File name is not allowed.'), 403);",
            f"{_INDENT * 2}}}",
            "",
            f"{_INDENT * 2}$allowed = $this->allowedFileTypes()[$fileType] ?? null;",
            f"{_INDENT * 2}if (is_null($allowed)) {{",
            f"{_INDENT * 3}throw new Exception(\"Unknown file type {{$fileType}}.\", 422);",
            f"{_INDENT * 2}}}",
            "",
            f"{_INDENT * 2}$mimeType = $file->getClientMimeType();",
            f"{_INDENT * 2}$extension = strtolower($file->getClientOriginalExtension());",
            f"{_INDENT * 2}if (!in_array($mimeType, $allowed['mimetypes']) "
            f"|| !in_array($extension, $allowed['extensions'])) {{",
            f"{_INDENT * 3}throw new Exception(trans('Invalid file type.'), 403);",
            f"{_INDENT * 2}}}",
            "",
            f"{_INDENT * 2}$fileName = preg_replace('/[^A-Za-z0-9_\\-]/', '', Str::random(32)) . '.' . $extension;",
            f"{_INDENT * 2}$path = $file->storeAs($folderName, $fileName, {disk});",
            "",
            f"{_INDENT * 2}$disk = Storage::disk({disk});",
            f"{_INDENT * 2}if ($disk->path($path) !== $disk->path($folderName . '/' . $fileName)) {{",
            f"{_INDENT * 3}$disk->delete($path);",
            f"{_INDENT * 3}throw new Exception(trans('File path is not allowed.'), 403);",
            f"{_INDENT * 2}}}",
            "",
            f"{_INDENT * 2}return $disk->url($path);",
            f"{_INDENT}}}",
            "",
        ])

        lines.extend(php_docblock(
            "Replace a stored file when a new one was uploaded.",
            "Returns null when no new file was sent so the current value is kept.",
            "",
            "@param  \\Illuminate\\Http\\UploadedFile|null  $file",
            "@param  string|null  $oldFile  URL currently stored on the record",
            "@param  string  $folderName",
            "@param  string  $fileType",
            "@return string|null",
        ))
        lines.extend([
            f"{_INDENT}public function fileExists($file, $oldFile, string $folderName, string $fileType)",
            f"{_INDENT}{{",
            f"{_INDENT * 2}if (is_null($file)) {{",
            f"{_INDENT * 3}return null;",
            f"{_INDENT * 2}}}",
            "",
            f"{_INDENT * 2}$url = $this->storeFile($file, $folderName, $fileType);",
            f"{_INDENT * 2}$this->deleteFile($oldFile);",
            "",
            f"{_INDENT * 2}return $url;",
            f"{_INDENT}}}",
            "",
        ])

        lines.extend(php_docblock(
            "Delete a stored file given the URL saved on the record.",
            "@param  string|null  $fileUrl",
            "@return bool",
        ))
        lines.extend([
            f"{_INDENT}public function deleteFile($fileUrl)",
            f"{_INDENT}{{",
            f"{_INDENT * 2}if (empty($fileUrl)) {{",
            f"{_INDENT * 3}return false;",
            f"{_INDENT * 2}}}",
            "",
            f"{_INDENT * 2}$disk = Storage::disk({disk});",
            f"{_INDENT * 2}$path = ltrim(Str::after(parse_url($fileUrl, PHP_URL_PATH) ?? $fileUrl, '/storage/'), '/');",
            "",
            f"{_INDENT * 2}return $disk->exists($path) ? $disk->delete($path) : false;",
            f"{_INDENT}}}",
            "}",
            "",
        ])
        return "\n".join(lines)


__all__: List[str] = [
    "TemplateGenerator",
]

logger.debug("autocrud.templates loaded.")
