# File: autocrud/generator.py
"""
AutoCRUD - Generation Pipeline (Orchestrator)
==============================================

Connects every phase for one model:

    ModelSpec → Validation → Classification → ArtifactPlan → Emission

State machine::

    START ──classify──▶ CLASSIFIED ──plan──▶ PLANNED ──emit──▶ EMITTED ──▶ DONE

Emission policy:
    - Every artifact except the route block is created only if no file
      exists at its path. An existing file is a *skipped* record.
    - The route block is appended to the shared route file on every run
      (unless ``dedupe_routes`` is on and the controller is already routed).

Error handling strategy:
    - Validation errors are collected in the report; nothing is written.
    - The first ``EmitFailure`` stops emission. Artifacts written before it
      stay on disk; there is no rollback.
    - The final report gives a clear pass/fail verdict and an exit code.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from autocrud.classifier import ColumnClassifier
from autocrud.errors import (
    EXIT_EXPORT_ERROR,
    EXIT_SUCCESS,
    EXIT_VALIDATION_ERROR,
    EmitFailure,
)
from autocrud.exclusions import ExclusionPolicy
from autocrud.exporters import ArtifactExporter, ExportManifest, FileRecord, RecordStatus
from autocrud.handlers import RequestHandlerGenerator
from autocrud.models import (
    Artifact,
    ArtifactKind,
    ArtifactPlan,
    ColumnDescriptor,
    GenerationConfig,
    GenerationOptions,
    ModelSpec,
    WritePolicy,
)
from autocrud.schema import SchemaSource, build_model_spec
from autocrud.templates import TemplateGenerator
from autocrud.utils import Timer
from autocrud.validators import ValidationResult, validate_full

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("autocrud.generator")


class GenerationState(str, Enum):
    START = "start"
    CLASSIFIED = "classified"
    PLANNED = "planned"
    EMITTED = "emitted"
    DONE = "done"


_NEXT_STATE: Dict[GenerationState, GenerationState] = {
    GenerationState.START: GenerationState.CLASSIFIED,
    GenerationState.CLASSIFIED: GenerationState.PLANNED,
    GenerationState.PLANNED: GenerationState.EMITTED,
    GenerationState.EMITTED: GenerationState.DONE,
}


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class GenerationStepMetric:
    """Timing and outcome for a single pipeline step."""

    step_name: str = ""
    success: bool = True
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(frozen=False, slots=True)
class GenerationReport:
    """
    Report produced by ``CrudGenerator.generate()``.

    ``state`` is the last state the run reached; a run aborted by an I/O
    fault stays in ``PLANNED``.
    """

    success: bool = False
    state: GenerationState = GenerationState.START
    model_name: str = ""
    project_root: str = ""
    use_service_layer: bool = False
    dry_run: bool = False
    total_elapsed_seconds: float = 0.0

    records: List[FileRecord] = field(default_factory=list)
    step_metrics: List[GenerationStepMetric] = field(default_factory=list)
    validation_errors: List[str] = field(default_factory=list)
    validation_warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    plan: Optional[ArtifactPlan] = None
    manifest: Optional[ExportManifest] = None

    def records_with(self, status: RecordStatus) -> List[FileRecord]:
        return [r for r in self.records if r.status == status]

    @property
    def created(self) -> List[str]:
        return [r.relative_path for r in self.records_with(RecordStatus.CREATED)]

    @property
    def skipped(self) -> List[str]:
        return [r.relative_path for r in self.records_with(RecordStatus.SKIPPED)]

    @property
    def appended(self) -> List[str]:
        return [r.relative_path for r in self.records_with(RecordStatus.APPENDED)]

    @property
    def planned(self) -> List[str]:
        return [r.relative_path for r in self.records_with(RecordStatus.PLANNED)]

    @property
    def exit_code(self) -> int:
        if self.success:
            return EXIT_SUCCESS
        if self.validation_errors:
            return EXIT_VALIDATION_ERROR
        return EXIT_EXPORT_ERROR

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        status: str = "✅ SUCCESS" if self.success else "❌ FAILED"
        mode: str = "service" if self.use_service_layer else "direct"
        lines.append(f"{'='*60}")
        lines.append("  AutoCRUD — Generation Report")
        lines.append(f"{'='*60}")
        lines.append(f"  Status:           {status}")
        lines.append(f"  Model:            {self.model_name}")
        lines.append(f"  Project root:     {self.project_root}")
        lines.append(f"  Handler mode:     {mode}")
        lines.append(f"  Final state:      {self.state.value}")
        lines.append(f"  Total time:       {self.total_elapsed_seconds:.3f}s")
        lines.append(f"{'─'*60}")

        if self.step_metrics:
            lines.append("  Pipeline Steps:")
            for step in self.step_metrics:
                icon: str = "✓" if step.success else "✗"
                lines.append(
                    f"    {icon} {step.step_name:<28s} "
                    f"{step.elapsed_seconds:>7.3f}s  "
                    f"{step.detail}"
                )

        if self.records:
            lines.append(f"{'─'*60}")
            lines.append("  Files:")
            icons: Dict[RecordStatus, str] = {
                RecordStatus.CREATED: "+",
                RecordStatus.APPENDED: "»",
                RecordStatus.SKIPPED: "⊘",
                RecordStatus.PLANNED: "·",
            }
            for record in self.records:
                note: str = f" ({record.detail})" if record.detail else ""
                lines.append(
                    f"    {icons[record.status]} {record.status.value:<9s} "
                    f"{record.relative_path}{note}"
                )

        if self.validation_errors:
            lines.append(f"{'─'*60}")
            lines.append(f"  Validation Errors ({len(self.validation_errors)}):")
            for err in self.validation_errors:
                lines.append(f"    ✗ {err}")

        if self.validation_warnings:
            lines.append(f"{'─'*60}")
            lines.append(f"  Validation Warnings ({len(self.validation_warnings)}):")
            for warn in self.validation_warnings:
                lines.append(f"    ⚠ {warn}")

        if self.errors:
            lines.append(f"{'─'*60}")
            lines.append(f"  Errors ({len(self.errors)}):")
            for err in self.errors:
                lines.append(f"    ✗ {err}")

        lines.append(f"{'='*60}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# CrudGenerator (orchestrator)
# ---------------------------------------------------------------------------


class CrudGenerator:
    """
    Runs the pipeline for one model at a time.

    Usage::

        generator = CrudGenerator(GenerationConfig(project_root="/srv/shop"))
        spec = ModelSpec(name="Product", columns=["id", "title", "cover_img"])
        report = generator.generate(spec, GenerationOptions(use_service_layer=True))
        print(report.summary())

    The generator is reusable; every call starts from ``START``.
    """

    def __init__(self, config: Optional[GenerationConfig] = None, *, dry_run: bool = False) -> None:
        self._config: GenerationConfig = config or GenerationConfig()
        self._dry_run: bool = dry_run
        self._classifier: ColumnClassifier = ColumnClassifier.from_config(self._config)
        self._policy: ExclusionPolicy = ExclusionPolicy(self._config)
        self._templates: TemplateGenerator = TemplateGenerator(self._config)
        self._handlers: RequestHandlerGenerator = RequestHandlerGenerator(self._config)

        logger.debug(
            "CrudGenerator initialised: root=%s, dry_run=%s.",
            self._config.project_root,
            dry_run,
        )

    @property
    def config(self) -> GenerationConfig:
        return self._config

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def generate(
        self,
        spec: ModelSpec,
        options: Optional[GenerationOptions] = None,
    ) -> GenerationReport:
        options = options or GenerationOptions()
        report: GenerationReport = GenerationReport(
            model_name=spec.name,
            project_root=str(Path(self._config.project_root).resolve()),
            use_service_layer=options.use_service_layer,
            dry_run=self._dry_run,
        )
        pipeline_start: float = time.perf_counter()

        if not self._step_validate(spec, report):
            return self._finalise_report(report, time.perf_counter() - pipeline_start)

        descriptors: List[ColumnDescriptor] = self._step_classify(spec, report)
        plan: ArtifactPlan = self._step_plan(spec, descriptors, options, report)
        self._step_emit(spec, plan, report)

        return self._finalise_report(report, time.perf_counter() - pipeline_start)

    def generate_from_source(
        self,
        model_name: str,
        source: SchemaSource,
        options: Optional[GenerationOptions] = None,
    ) -> GenerationReport:
        """Look the model's table up in *source*, then ``generate``."""
        spec: ModelSpec = build_model_spec(model_name, source)
        return self.generate(spec, options)

    def classify(self, spec: ModelSpec) -> List[ColumnDescriptor]:
        return self._classifier.classify_all(spec.columns)

    def plan(
        self,
        spec: ModelSpec,
        descriptors: Sequence[ColumnDescriptor],
        options: Optional[GenerationOptions] = None,
    ) -> ArtifactPlan:
        """
        Render every artifact for *spec* without touching the disk.

        Each generator sees only the columns the exclusion policy keeps for
        its own artifact kind.
        """
        options = options or GenerationOptions()
        cfg: GenerationConfig = self._config
        tpl: TemplateGenerator = self._templates

        def kept(kind: ArtifactKind) -> List[ColumnDescriptor]:
            return self._policy.filter_columns(spec.name, descriptors, kind)

        def artifact(
            kind: ArtifactKind,
            content: str,
            policy: WritePolicy = WritePolicy.CREATE_IF_ABSENT,
        ) -> Artifact:
            return Artifact(
                kind=kind,
                relative_path=cfg.relative_path_for(kind, spec.name),
                content=content,
                policy=policy,
            )

        artifacts: List[Artifact] = []
        if cfg.publish_support:
            artifacts.append(artifact(ArtifactKind.RESPONSE_TRAIT, tpl.generate_response_trait()))
            artifacts.append(artifact(ArtifactKind.STORAGE_TRAIT, tpl.generate_storage_trait()))

        artifacts.append(artifact(
            ArtifactKind.STORE_REQUEST,
            tpl.generate_store_request(spec, kept(ArtifactKind.STORE_REQUEST)),
        ))
        artifacts.append(artifact(
            ArtifactKind.UPDATE_REQUEST,
            tpl.generate_update_request(spec, kept(ArtifactKind.UPDATE_REQUEST)),
        ))
        artifacts.append(artifact(
            ArtifactKind.RESOURCE,
            tpl.generate_resource(spec, kept(ArtifactKind.RESOURCE)),
        ))

        handler_columns: List[ColumnDescriptor] = kept(
            ArtifactKind.SERVICE if options.use_service_layer else ArtifactKind.CONTROLLER
        )
        sources: Dict[ArtifactKind, str] = self._handlers.generate(
            spec,
            handler_columns,
            use_service_layer=options.use_service_layer,
        )
        if ArtifactKind.SERVICE in sources:
            artifacts.append(artifact(ArtifactKind.SERVICE, sources[ArtifactKind.SERVICE]))
        artifacts.append(artifact(ArtifactKind.CONTROLLER, sources[ArtifactKind.CONTROLLER]))

        artifacts.append(artifact(
            ArtifactKind.ROUTES,
            tpl.generate_routes(spec),
            WritePolicy.APPEND,
        ))
        return ArtifactPlan(name=spec.name, artifacts=artifacts)

    # -----------------------------------------------------------------
    # Pipeline steps
    # -----------------------------------------------------------------

    @staticmethod
    def _advance(report: GenerationReport, target: GenerationState) -> None:
        expected: GenerationState = _NEXT_STATE[report.state]
        if target != expected:
            raise RuntimeError(
                f"Illegal transition {report.state.value} → {target.value}."
            )
        logger.debug("%s: %s → %s.", report.model_name, report.state.value, target.value)
        report.state = target

    def _step_validate(self, spec: ModelSpec, report: GenerationReport) -> bool:
        with Timer("validation") as t:
            result: ValidationResult = validate_full(spec, self._config)

        report.validation_errors.extend(str(e) for e in result.errors)
        report.validation_warnings.extend(str(w) for w in result.warnings)

        if result.errors:
            detail: str = f"{len(result.errors)} error(s)"
        elif result.warnings:
            detail = f"{len(result.warnings)} warning(s)"
        else:
            detail = "all checks passed"

        report.step_metrics.append(GenerationStepMetric(
            step_name="Validate Model",
            success=result.is_valid,
            elapsed_seconds=t.elapsed,
            detail=detail,
        ))

        if not result.is_valid:
            logger.error(
                "Validation of '%s' failed with %d error(s).",
                spec.name,
                len(result.errors),
            )
            for err in result.errors:
                logger.error("  ✗ %s", err)
            return False

        for warn in result.warnings:
            logger.warning("  ⚠ %s", warn)
        return True

    def _step_classify(self, spec: ModelSpec, report: GenerationReport) -> List[ColumnDescriptor]:
        with Timer("classification") as t:
            descriptors: List[ColumnDescriptor] = self.classify(spec)

        media: int = sum(1 for d in descriptors if d.is_media)
        report.step_metrics.append(GenerationStepMetric(
            step_name="Classify Columns",
            success=True,
            elapsed_seconds=t.elapsed,
            detail=f"{len(descriptors)} columns, {media} media",
        ))
        self._advance(report, GenerationState.CLASSIFIED)
        return descriptors

    def _step_plan(
        self,
        spec: ModelSpec,
        descriptors: Sequence[ColumnDescriptor],
        options: GenerationOptions,
        report: GenerationReport,
    ) -> ArtifactPlan:
        with Timer("planning") as t:
            plan: ArtifactPlan = self.plan(spec, descriptors, options)

        report.plan = plan
        report.step_metrics.append(GenerationStepMetric(
            step_name="Plan Artifacts",
            success=True,
            elapsed_seconds=t.elapsed,
            detail=f"{len(plan.artifacts)} artifacts",
        ))
        logger.info(
            "Planned %d artifacts for '%s' (%s).",
            len(plan.artifacts),
            spec.name,
            ", ".join(k.value for k in plan.kinds),
        )
        self._advance(report, GenerationState.PLANNED)
        return plan

    def _step_emit(self, spec: ModelSpec, plan: ArtifactPlan, report: GenerationReport) -> None:
        exporter: ArtifactExporter = ArtifactExporter(
            Path(self._config.project_root),
            dry_run=self._dry_run,
            dedupe_routes=self._config.dedupe_routes,
        )
        report.manifest = exporter.manifest
        route_marker: str = f"{self._templates.controller_reference(spec)}::class"
        failure: Optional[EmitFailure] = None

        with Timer("emission") as t:
            for artifact in plan.artifacts:
                try:
                    record: FileRecord = exporter.emit(
                        artifact,
                        route_marker=route_marker if artifact.kind == ArtifactKind.ROUTES else None,
                    )
                except EmitFailure as exc:
                    failure = exc
                    break
                report.records.append(record)

        if failure is not None:
            report.errors.append(str(failure))
            logger.error(
                "Emission aborted after %d of %d artifacts: %s",
                len(report.records),
                len(plan.artifacts),
                failure,
            )
        manifest: ExportManifest = exporter.manifest
        report.step_metrics.append(GenerationStepMetric(
            step_name="Emit Artifacts",
            success=failure is None,
            elapsed_seconds=t.elapsed,
            detail=(
                f"{manifest.count(RecordStatus.CREATED)} created, "
                f"{manifest.count(RecordStatus.SKIPPED)} skipped, "
                f"{manifest.count(RecordStatus.APPENDED)} appended"
                + (f", {manifest.count(RecordStatus.PLANNED)} planned" if self._dry_run else "")
            ),
        ))

        if failure is None:
            self._advance(report, GenerationState.EMITTED)
            self._advance(report, GenerationState.DONE)

    def _finalise_report(self, report: GenerationReport, total_elapsed: float) -> GenerationReport:
        report.total_elapsed_seconds = total_elapsed
        report.success = (
            report.state == GenerationState.DONE
            and not report.validation_errors
            and not report.errors
        )
        return report


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "GenerationState",
    "GenerationStepMetric",
    "GenerationReport",
    "CrudGenerator",
]

logger.debug("autocrud.generator loaded.")
