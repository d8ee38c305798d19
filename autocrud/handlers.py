# File: autocrud/handlers.py
"""
AutoCRUD - Request-Handler Generator
=====================================
Renders the ``{Model}Controller`` and, in service mode, the ``{Model}Service``.

Every operation is described once as a ``HandlerOperation``: its signature,
the persistence / storage statements it runs, the variable holding its
result and the JSON response built from that result. A call-site strategy
then decides where those statements live:

    ``DirectCallSite``   the controller runs them inside try/catch and
                         answers failures with the error envelope itself
    ``ServiceCallSite``  a per-model service runs them and turns failures
                         into ``HttpResponseException`` carrying the same
                         envelope; the controller only delegates

Operations:

    index, store, show, update, destroy
    trashed, restore, forceDelete        (models with a ``deleted_at`` column)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from autocrud.models import (
    ArtifactKind,
    ColumnDescriptor,
    GenerationConfig,
    ModelSpec,
)
from autocrud.utils import indent_lines, php_docblock, php_string

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("autocrud.handlers")

_INDENT: str = "    "
SERVER_ERROR_MESSAGE: str = "there is something wrong in server"
JSON_RESPONSE: str = "\\Illuminate\\Http\\JsonResponse"


# ---------------------------------------------------------------------------
# Operation description
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class HandlerOperation:
    """One endpoint, independent of where its persistence calls live."""

    action: str
    service_method: str
    summary: str
    controller_params: Tuple[str, ...]
    service_params: Tuple[str, ...]
    call_args: Tuple[str, ...]
    prelude: Tuple[str, ...]
    body: Tuple[str, ...]
    result: Optional[str]
    response: str
    failure_label: str
    not_found: bool = False
    param_docs: Tuple[str, ...] = ()


@dataclass(slots=True)
class HandlerContext:
    """Names shared by every operation of one model."""

    spec: ModelSpec
    columns: List[ColumnDescriptor]
    config: GenerationConfig
    model: str = ""
    plural: str = ""
    var: str = ""
    list_var: str = ""
    resource: str = ""
    media_columns: List[ColumnDescriptor] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.model = self.spec.name
        self.plural = self.spec.plural_name
        self.var = f"${self.model}"
        self.list_var = f"${self.plural}"
        self.resource = f"{self.model}Resource"
        self.media_columns = [c for c in self.columns if c.is_media]

    @property
    def folder(self) -> str:
        return php_string(self.model)

    def input_of(self, column: ColumnDescriptor) -> str:
        return f"$fieldInputs[{php_string(column.name)}] ?? null"


# ---------------------------------------------------------------------------
# Per-operation builders
# ---------------------------------------------------------------------------


def _paginated_operation(
    ctx: HandlerContext,
    action: str,
    service_method: str,
    summary: str,
    query: str,
    result: str,
    label: str,
) -> HandlerOperation:
    return HandlerOperation(
        action=action,
        service_method=service_method,
        summary=summary,
        controller_params=("Request $request",),
        service_params=("int $perPage",),
        call_args=("$perPage",),
        prelude=(
            f"$perPage = $request->input('per_page', {ctx.config.default_page_size});",
        ),
        body=(f"{result} = {query}->paginate($perPage);",),
        result=result,
        response=f"$this->resourcePaginated({ctx.resource}::collection({result}))",
        failure_label=label,
        param_docs=("@param  \\Illuminate\\Http\\Request  $request",),
    )


def build_list_operation(ctx: HandlerContext) -> HandlerOperation:
    return _paginated_operation(
        ctx,
        action="index",
        service_method=f"list{ctx.model}",
        summary=f"Display a paginated listing of {ctx.plural}.",
        query=ctx.model + "::query()",
        result=ctx.list_var,
        label=f"Error listing {ctx.plural}",
    )


def build_create_operation(ctx: HandlerContext) -> HandlerOperation:
    body: List[str] = [f"{ctx.var} = {ctx.model}::create(["]
    for col in ctx.columns:
        if col.is_media:
            value: str = (
                f"$this->storeFile({ctx.input_of(col)}, {ctx.folder}, "
                f"{php_string(col.media_type or '')})"
            )
        else:
            value = ctx.input_of(col)
        body.append(f"{_INDENT}{php_string(col.name)} => {value},")
    body.append("]);")

    return HandlerOperation(
        action="store",
        service_method=f"create{ctx.model}",
        summary=f"Store a newly created {ctx.model}.",
        controller_params=(f"Store{ctx.model}Request $request",),
        service_params=("array $fieldInputs",),
        call_args=("$fieldInputs",),
        prelude=("$fieldInputs = $request->validated();",),
        body=tuple(body),
        result=ctx.var,
        response=(
            f"$this->successResponse(new {ctx.resource}({ctx.var}), "
            f"{php_string(ctx.model + ' Created Successfully')}, 201)"
        ),
        failure_label=f"Error creating {ctx.model}",
        param_docs=(
            f"@param  \\{ctx.config.app_namespace}\\Http\\Requests\\{ctx.model}Request\\Store{ctx.model}Request  $request",
        ),
    )


def build_read_operation(ctx: HandlerContext) -> HandlerOperation:
    return HandlerOperation(
        action="show",
        service_method=f"get{ctx.model}",
        summary=f"Display the specified {ctx.model}.",
        controller_params=(f"{ctx.model} {ctx.var}",),
        service_params=(f"{ctx.model} {ctx.var}",),
        call_args=(ctx.var,),
        prelude=(),
        body=(),
        result=ctx.var,
        response=f"$this->successResponse(new {ctx.resource}({ctx.var}))",
        failure_label=f"Error retrieving {ctx.model}",
        param_docs=(f"@param  \\{ctx.config.app_namespace}\\Models\\{ctx.model}  {ctx.var}",),
    )


def build_update_operation(ctx: HandlerContext) -> HandlerOperation:
    body: List[str] = ["$data = ["]
    for col in ctx.columns:
        if col.is_media:
            value: str = (
                f"$this->fileExists({ctx.input_of(col)}, {ctx.var}->{col.name}, "
                f"{ctx.folder}, {php_string(col.media_type or '')})"
            )
        else:
            value = ctx.input_of(col)
        body.append(f"{_INDENT}{php_string(col.name)} => {value},")
    body.append("];")
    body.append(
        f"{ctx.var}->update(array_filter($data, fn ($value) => !is_null($value)));"
    )

    return HandlerOperation(
        action="update",
        service_method=f"update{ctx.model}",
        summary=f"Update the specified {ctx.model}.",
        controller_params=(f"Update{ctx.model}Request $request", f"{ctx.model} {ctx.var}"),
        service_params=("array $fieldInputs", f"{ctx.model} {ctx.var}"),
        call_args=("$fieldInputs", ctx.var),
        prelude=("$fieldInputs = $request->validated();",),
        body=tuple(body),
        result=ctx.var,
        response=(
            f"$this->successResponse(new {ctx.resource}({ctx.var}), "
            f"{php_string(ctx.model + ' Updated Successfully')})"
        ),
        failure_label=f"Error updating {ctx.model}",
        param_docs=(
            f"@param  \\{ctx.config.app_namespace}\\Http\\Requests\\{ctx.model}Request\\Update{ctx.model}Request  $request",
            f"@param  \\{ctx.config.app_namespace}\\Models\\{ctx.model}  {ctx.var}",
        ),
    )


def _delete_files(ctx: HandlerContext) -> List[str]:
    return [f"$this->deleteFile({ctx.var}->{col.name});" for col in ctx.media_columns]


def build_delete_operation(ctx: HandlerContext) -> HandlerOperation:
    body: List[str] = []
    if ctx.spec.supports_soft_delete:
        summary: str = f"Move the specified {ctx.model} to the trash."
    else:
        summary = f"Remove the specified {ctx.model} and its stored files."
        body.extend(_delete_files(ctx))
    body.append(f"{ctx.var}->delete();")

    return HandlerOperation(
        action="destroy",
        service_method=f"delete{ctx.model}",
        summary=summary,
        controller_params=(f"{ctx.model} {ctx.var}",),
        service_params=(f"{ctx.model} {ctx.var}",),
        call_args=(ctx.var,),
        prelude=(),
        body=tuple(body),
        result=None,
        response=(
            f"$this->successResponse(null, "
            f"{php_string(ctx.model + ' Deleted Successfully')})"
        ),
        failure_label=f"Error deleting {ctx.model}",
        param_docs=(f"@param  \\{ctx.config.app_namespace}\\Models\\{ctx.model}  {ctx.var}",),
    )


def build_trashed_operation(ctx: HandlerContext) -> HandlerOperation:
    return _paginated_operation(
        ctx,
        action="trashed",
        service_method=f"trashedList{ctx.model}",
        summary=f"Display a paginated listing of trashed {ctx.plural}.",
        query=f"{ctx.model}::onlyTrashed()",
        result=f"$trashed{ctx.plural}",
        label=f"Error listing trashed {ctx.plural}",
    )


def build_restore_operation(ctx: HandlerContext) -> HandlerOperation:
    return HandlerOperation(
        action="restore",
        service_method=f"restore{ctx.model}",
        summary=f"Restore a trashed {ctx.model}.",
        controller_params=("$id",),
        service_params=("$id",),
        call_args=("$id",),
        prelude=(),
        body=(
            f"{ctx.var} = {ctx.model}::onlyTrashed()->findOrFail($id);",
            f"{ctx.var}->restore();",
        ),
        result=ctx.var,
        response=(
            f"$this->successResponse(new {ctx.resource}({ctx.var}), "
            f"{php_string(ctx.model + ' Restored Successfully')})"
        ),
        failure_label=f"Error restoring {ctx.model}",
        not_found=True,
        param_docs=("@param  int  $id",),
    )


def build_force_delete_operation(ctx: HandlerContext) -> HandlerOperation:
    body: List[str] = [f"{ctx.var} = {ctx.model}::onlyTrashed()->findOrFail($id);"]
    body.extend(_delete_files(ctx))
    body.append(f"{ctx.var}->forceDelete();")

    return HandlerOperation(
        action="forceDelete",
        service_method=f"forceDelete{ctx.model}",
        summary=f"Permanently remove a trashed {ctx.model} and its stored files.",
        controller_params=("$id",),
        service_params=("$id",),
        call_args=("$id",),
        prelude=(),
        body=tuple(body),
        result=None,
        response=(
            f"$this->successResponse(null, "
            f"{php_string(ctx.model + ' Deleted Permanently')})"
        ),
        failure_label=f"Error force deleting {ctx.model}",
        not_found=True,
        param_docs=("@param  int  $id",),
    )


def build_operations(ctx: HandlerContext) -> List[HandlerOperation]:
    """All operations of a model in declaration order."""
    operations: List[HandlerOperation] = [
        build_list_operation(ctx),
        build_create_operation(ctx),
        build_read_operation(ctx),
        build_update_operation(ctx),
        build_delete_operation(ctx),
    ]
    if ctx.spec.supports_soft_delete:
        operations.extend([
            build_trashed_operation(ctx),
            build_restore_operation(ctx),
            build_force_delete_operation(ctx),
        ])
    return operations


# ---------------------------------------------------------------------------
# Call-site strategies
# ---------------------------------------------------------------------------


def _catch_blocks(
    ctx: HandlerContext,
    op: HandlerOperation,
    wrap: str,
) -> List[str]:
    """
    ``catch`` clauses shared by both call sites.

    *wrap* turns an error-envelope expression into a statement
    (``return %s;`` or ``throw new HttpResponseException(%s);``).
    """
    lines: List[str] = []
    if op.not_found:
        lines.extend([
            "} catch (ModelNotFoundException $e) {",
            f"{_INDENT}Log::error({php_string(ctx.model + ' not found: ')} . $e->getMessage());",
            _INDENT + wrap % (
                f"$this->errorResponse(null, {php_string(ctx.model + ' not found')}, 404)"
            ),
        ])
    lines.extend([
        "} catch (Exception $e) {",
        f"{_INDENT}Log::error({php_string(op.failure_label + ': ')} . $e->getMessage());",
        _INDENT + wrap % (
            f"$this->errorResponse(null, {php_string(SERVER_ERROR_MESSAGE)}, 500)"
        ),
        "}",
    ])
    return lines


class CallSite:
    """Where an operation's persistence statements are executed."""

    name: str = "abstract"

    def controller_imports(self, ctx: HandlerContext) -> List[str]:
        raise NotImplementedError

    def controller_traits(self) -> List[str]:
        raise NotImplementedError

    def controller_members(self, ctx: HandlerContext) -> List[str]:
        return []

    def controller_body(self, ctx: HandlerContext, op: HandlerOperation) -> List[str]:
        raise NotImplementedError


class DirectCallSite(CallSite):
    """The controller talks to Eloquent and the storage trait itself."""

    name = "direct"

    def controller_imports(self, ctx: HandlerContext) -> List[str]:
        imports: List[str] = [
            "Exception",
            f"{ctx.config.app_namespace}\\Models\\{ctx.model}",
            "Illuminate\\Http\\Request",
            "Illuminate\\Support\\Facades\\Log",
        ]
        if ctx.spec.supports_soft_delete:
            imports.append("Illuminate\\Database\\Eloquent\\ModelNotFoundException")
        return imports

    def controller_traits(self) -> List[str]:
        return ["ApiResponseTrait", "FileStorageTrait"]

    def controller_body(self, ctx: HandlerContext, op: HandlerOperation) -> List[str]:
        lines: List[str] = list(op.prelude)
        if lines:
            lines.append("")
        lines.append("try {")
        lines.extend(indent_lines(op.body))
        lines.append(f"{_INDENT}return {op.response};")
        lines.extend(_catch_blocks(ctx, op, "return %s;"))
        return lines


class ServiceCallSite(CallSite):
    """The controller delegates to ``{Model}Service`` injected once per instance."""

    name = "service"

    @staticmethod
    def service_property(ctx: HandlerContext) -> str:
        return f"{ctx.model}Service"

    def controller_imports(self, ctx: HandlerContext) -> List[str]:
        return [
            f"{ctx.config.app_namespace}\\Models\\{ctx.model}",
            "Illuminate\\Http\\Request",
            f"{ctx.config.app_namespace}\\Services\\{ctx.model}Service",
        ]

    def controller_traits(self) -> List[str]:
        return ["ApiResponseTrait"]

    def controller_members(self, ctx: HandlerContext) -> List[str]:
        prop: str = self.service_property(ctx)
        service_fqcn: str = f"\\{ctx.config.app_namespace}\\Services\\{ctx.model}Service"
        lines: List[str] = php_docblock(
            f"The service class responsible for {ctx.model} persistence and storage.",
            f"@var {service_fqcn}",
        )
        lines.append(f"{_INDENT}protected ${prop};")
        lines.append("")
        lines.extend(php_docblock(
            f"Create a new {ctx.model}Controller instance.",
            f"@param  {service_fqcn}  ${prop}",
        ))
        lines.extend([
            f"{_INDENT}public function __construct({ctx.model}Service ${prop})",
            f"{_INDENT}{{",
            f"{_INDENT * 2}$this->{prop} = ${prop};",
            f"{_INDENT}}}",
            "",
        ])
        return lines

    def controller_body(self, ctx: HandlerContext, op: HandlerOperation) -> List[str]:
        lines: List[str] = list(op.prelude)
        call: str = (
            f"$this->{self.service_property(ctx)}->{op.service_method}"
            f"({', '.join(op.call_args)})"
        )
        if op.result:
            lines.append(f"{op.result} = {call};")
        else:
            lines.append(f"{call};")
        lines.append("")
        lines.append(f"return {op.response};")
        return lines

    def service_body(self, ctx: HandlerContext, op: HandlerOperation) -> List[str]:
        lines: List[str] = ["try {"]
        lines.extend(indent_lines(op.body))
        if op.result:
            lines.append(f"{_INDENT}return {op.result};")
        lines.extend(_catch_blocks(ctx, op, "throw new HttpResponseException(%s);"))
        return lines


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


class RequestHandlerGenerator:
    """
    Renders the controller (and service) of one model.

    Usage::

        gen = RequestHandlerGenerator(config)
        sources = gen.generate(spec, handler_columns, use_service_layer=True)
        sources[ArtifactKind.CONTROLLER], sources[ArtifactKind.SERVICE]
    """

    def __init__(self, config: Optional[GenerationConfig] = None) -> None:
        self._config: GenerationConfig = config or GenerationConfig()

    def call_site(self, use_service_layer: bool) -> CallSite:
        return ServiceCallSite() if use_service_layer else DirectCallSite()

    def generate(
        self,
        spec: ModelSpec,
        columns: Sequence[ColumnDescriptor],
        *,
        use_service_layer: bool = False,
    ) -> Dict[ArtifactKind, str]:
        ctx: HandlerContext = HandlerContext(spec, list(columns), self._config)
        operations: List[HandlerOperation] = build_operations(ctx)
        site: CallSite = self.call_site(use_service_layer)

        sources: Dict[ArtifactKind, str] = {
            ArtifactKind.CONTROLLER: self.generate_controller(ctx, operations, site),
        }
        if isinstance(site, ServiceCallSite):
            sources[ArtifactKind.SERVICE] = self.generate_service(ctx, operations, site)

        logger.debug(
            "Generated %s handler for '%s': %d operations, %d media columns.",
            site.name,
            spec.name,
            len(operations),
            len(ctx.media_columns),
        )
        return sources

    # -----------------------------------------------------------------
    # Controller
    # -----------------------------------------------------------------

    def generate_controller(
        self,
        ctx: HandlerContext,
        operations: Sequence[HandlerOperation],
        site: CallSite,
    ) -> str:
        ns: str = ctx.config.app_namespace
        support: str = ctx.config.support_namespace
        imports: List[str] = site.controller_imports(ctx)
        imports.extend([
            f"{ns}\\Http\\Resources\\{ctx.resource}",
            *(f"{support}\\{trait}" for trait in site.controller_traits()),
            f"{ns}\\Http\\Requests\\{ctx.model}Request\\Store{ctx.model}Request",
            f"{ns}\\Http\\Requests\\{ctx.model}Request\\Update{ctx.model}Request",
        ])

        lines: List[str] = ["<?php", "", f"namespace {ns}\\Http\\Controllers;", ""]
        lines.extend(f"use {imp};" for imp in imports)
        lines.extend([
            "",
            f"class {ctx.model}Controller extends Controller",
            "{",
            f"{_INDENT}use {', '.join(site.controller_traits())};",
            "",
        ])
        lines.extend(site.controller_members(ctx))

        for op in operations:
            lines.extend(php_docblock(op.summary, *op.param_docs, f"@return {JSON_RESPONSE}"))
            lines.append(
                f"{_INDENT}public function {op.action}({', '.join(op.controller_params)})"
            )
            lines.append(f"{_INDENT}{{")
            lines.extend(indent_lines(site.controller_body(ctx, op), level=2))
            lines.append(f"{_INDENT}}}")
            lines.append("")

        if lines[-1] == "":
            lines.pop()
        lines.extend(["}", ""])
        return "\n".join(lines)

    # -----------------------------------------------------------------
    # Service
    # -----------------------------------------------------------------

    def generate_service(
        self,
        ctx: HandlerContext,
        operations: Sequence[HandlerOperation],
        site: ServiceCallSite,
    ) -> str:
        ns: str = ctx.config.app_namespace
        support: str = ctx.config.support_namespace
        imports: List[str] = [
            "Exception",
            f"{ns}\\Models\\{ctx.model}",
            "Illuminate\\Support\\Facades\\Log",
            f"{support}\\ApiResponseTrait",
            f"{support}\\FileStorageTrait",
            "Illuminate\\Http\\Exceptions\\HttpResponseException",
        ]
        if ctx.spec.supports_soft_delete:
            imports.append("Illuminate\\Database\\Eloquent\\ModelNotFoundException")

        lines: List[str] = ["<?php", "", f"namespace {ns}\\Services;", ""]
        lines.extend(f"use {imp};" for imp in imports)
        lines.extend([
            "",
            f"class {ctx.model}Service",
            "{",
            f"{_INDENT}use ApiResponseTrait, FileStorageTrait;",
            "",
        ])

        for op in operations:
            returns: str = "mixed" if op.result else "void"
            docs: List[str] = [f"@param  {p}" for p in op.service_params]
            lines.extend(php_docblock(
                op.summary,
                *docs,
                f"@return {returns}",
                "@throws \\Illuminate\\Http\\Exceptions\\HttpResponseException",
            ))
            lines.append(
                f"{_INDENT}public function {op.service_method}({', '.join(op.service_params)})"
            )
            lines.append(f"{_INDENT}{{")
            lines.extend(indent_lines(site.service_body(ctx, op), level=2))
            lines.append(f"{_INDENT}}}")
            lines.append("")

        if lines[-1] == "":
            lines.pop()
        lines.extend(["}", ""])
        return "\n".join(lines)


__all__: List[str] = [
    "SERVER_ERROR_MESSAGE",
    "HandlerOperation",
    "HandlerContext",
    "build_operations",
    "CallSite",
    "DirectCallSite",
    "ServiceCallSite",
    "RequestHandlerGenerator",
]

logger.debug("autocrud.handlers loaded.")
