# File: connectvue/generator.py
"""
protoc-gen-connect-vue - Generation Pipeline (Orchestrator)
============================================================

Connects the phases:

    Descriptors → Service View Model → Rendered Files → Export

Workflow::

    1. Load descriptors (YAML / JSON document or CodeGeneratorRequest).
    2. Pick the first service across the generated files.  No service means
       nothing to do, which is a success.
    3. Build the ``ServiceViewModel`` (builder.py).
    4. Render every output through ``TemplateRenderer`` (templates.py).
    5. Hand the rendered files to ``ProjectExporter`` (exporters.py).
    6. Return a ``GenerationReport`` with metrics and status.

Error handling:
    - Load errors are recorded and stop the pipeline.
    - A render error is fatal for the invocation: nothing is exported.
    - Export errors are recorded per file in the report.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from jinja2 import TemplateError
from pydantic import ValidationError

from connectvue.builder import build_first_service
from connectvue.descriptors import load_descriptor_file
from connectvue.exporters import ExportManifest, ExportResult, ProjectExporter
from connectvue.models import DescriptorSet, GenerationConfig, ServiceViewModel
from connectvue.templates import TemplateRenderer
from connectvue.utils import Timer, count_lines

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("connectvue.generator")


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
    Report produced by ``ConnectVueGenerator``.

    ``rendered_files`` holds the rendered outputs even in dry-run mode, when
    nothing is written.
    """

    success: bool = False
    service_name: str = ""
    output_directory: str = ""
    dry_run: bool = False

    total_files: int = 0
    total_bytes: int = 0
    total_lines: int = 0
    total_rpcs: int = 0
    total_elapsed_seconds: float = 0.0

    step_metrics: List[GenerationStepMetric] = field(default_factory=list)
    load_errors: List[str] = field(default_factory=list)
    generation_errors: List[str] = field(default_factory=list)
    export_errors: List[str] = field(default_factory=list)
    rendered_files: Dict[str, str] = field(default_factory=dict)

    manifest: Optional[ExportManifest] = None

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        status: str = "SUCCESS" if self.success else "FAILED"
        lines.append("=" * 60)
        lines.append("  protoc-gen-connect-vue — Generation Report")
        lines.append("=" * 60)
        lines.append(f"  Status:           {status}")
        lines.append(f"  Service:          {self.service_name or '(none)'}")
        lines.append(f"  Output:           {self.output_directory}")
        lines.append(f"  RPCs:             {self.total_rpcs}")
        lines.append(f"  Files:            {self.total_files}"
                     + ("  (dry run)" if self.dry_run else ""))
        lines.append(f"  Total lines:      {self.total_lines:,}")
        lines.append(f"  Total time:       {self.total_elapsed_seconds:.3f}s")
        lines.append("-" * 60)

        if self.step_metrics:
            lines.append("  Pipeline Steps:")
            for step in self.step_metrics:
                icon: str = "✓" if step.success else "✗"
                lines.append(
                    f"    {icon} {step.step_name:<24s} "
                    f"{step.elapsed_seconds:>7.3f}s  {step.detail}"
                )

        for title, errors in (
            ("Load Errors", self.load_errors),
            ("Generation Errors", self.generation_errors),
            ("Export Errors", self.export_errors),
        ):
            if errors:
                lines.append("-" * 60)
                lines.append(f"  {title} ({len(errors)}):")
                for err in errors:
                    lines.append(f"    ✗ {err}")

        lines.append("=" * 60)
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Config helpers
# ---------------------------------------------------------------------------


def build_config(*overrides: Optional[Dict[str, Any]]) -> GenerationConfig:
    """
    Merge override mappings (later wins) into a ``GenerationConfig``.

    Raises:
        ValueError: If the merged settings don't validate.
    """
    merged: Dict[str, Any] = {}
    for override in overrides:
        if override:
            merged.update({k: v for k, v in override.items() if v is not None})
    try:
        return GenerationConfig.model_validate(merged)
    except ValidationError as exc:
        raise ValueError(f"Config validation failed: {exc}") from exc


def render_service(
    descriptors: DescriptorSet,
    config: GenerationConfig,
    renderer: Optional[TemplateRenderer] = None,
) -> Dict[str, str]:
    """
    Render the first service of *descriptors*.

    Returns an empty mapping when there is no service.  Template errors
    propagate.
    """
    view_model: Optional[ServiceViewModel] = build_first_service(descriptors, config)
    if view_model is None:
        return {}
    renderer = renderer or TemplateRenderer(config)
    return renderer.render_all(view_model)


# ---------------------------------------------------------------------------
# ConnectVueGenerator — orchestrator
# ---------------------------------------------------------------------------


class ConnectVueGenerator:
    """
    Pipeline orchestrator.

    Usage::

        generator = ConnectVueGenerator()
        report = generator.generate_from_file(
            descriptor_path=Path("tickets.yaml"),
            output_dir=Path("./src/api"),
        )
        print(report.summary())

    The generator holds no per-run state and can be reused.
    """

    def __init__(
        self,
        *,
        clean_output: bool = False,
        write_manifest: bool = True,
        dry_run: bool = False,
    ) -> None:
        """
        Args:
            clean_output: If True, wipe the output directory before writing.
            write_manifest: If True, write ``manifest.json`` next to the output.
            dry_run: If True, render but don't write anything.
        """
        self._clean_output: bool = clean_output
        self._write_manifest: bool = write_manifest
        self._dry_run: bool = dry_run

        logger.debug(
            "ConnectVueGenerator initialised: clean=%s, manifest=%s, dry_run=%s.",
            clean_output,
            write_manifest,
            dry_run,
        )

    # -----------------------------------------------------------------
    # Public: generate from file
    # -----------------------------------------------------------------

    def generate_from_file(
        self,
        descriptor_path: Path,
        output_dir: Path,
        *,
        config_overrides: Optional[Dict[str, Any]] = None,
    ) -> GenerationReport:
        """
        Full pipeline: load file → build → render → export.

        ``config_overrides`` take precedence over the document's ``config``
        mapping.
        """
        report: GenerationReport = GenerationReport(dry_run=self._dry_run)
        report.output_directory = str(output_dir.resolve())
        pipeline_start: float = time.perf_counter()

        with Timer("load_descriptors") as t_load:
            try:
                descriptors, document_config = load_descriptor_file(descriptor_path)
                config: GenerationConfig = build_config(document_config, config_overrides)
            except (FileNotFoundError, ValueError) as exc:
                report.load_errors.append(str(exc))
                logger.error("Failed to load descriptors: %s", exc)
                failed = True
            else:
                failed = False

        report.step_metrics.append(GenerationStepMetric(
            step_name="Load Descriptors",
            success=not failed,
            elapsed_seconds=t_load.elapsed,
            detail=f"from {descriptor_path.name}",
        ))
        if failed:
            return self._finalise_report(report, time.perf_counter() - pipeline_start)

        return self._run_pipeline(descriptors, config, output_dir, report, pipeline_start)

    # -----------------------------------------------------------------
    # Public: generate from in-memory descriptors
    # -----------------------------------------------------------------

    def generate(
        self,
        descriptors: DescriptorSet,
        config: GenerationConfig,
        output_dir: Path,
    ) -> GenerationReport:
        report: GenerationReport = GenerationReport(dry_run=self._dry_run)
        report.output_directory = str(output_dir.resolve())
        return self._run_pipeline(
            descriptors, config, output_dir, report, time.perf_counter()
        )

    # -----------------------------------------------------------------
    # Internal: master pipeline
    # -----------------------------------------------------------------

    def _run_pipeline(
        self,
        descriptors: DescriptorSet,
        config: GenerationConfig,
        output_dir: Path,
        report: GenerationReport,
        pipeline_start: float,
    ) -> GenerationReport:
        view_model: Optional[ServiceViewModel] = self._step_build(descriptors, config, report)
        if view_model is None:
            return self._finalise_report(report, time.perf_counter() - pipeline_start)

        rendered: Dict[str, str] = self._step_render(view_model, config, report)
        if report.generation_errors:
            return self._finalise_report(report, time.perf_counter() - pipeline_start)

        report.rendered_files = rendered
        report.total_files = len(rendered)
        report.total_lines = sum(count_lines(c) for c in rendered.values())
        report.total_bytes = sum(len(c.encode("utf-8")) for c in rendered.values())

        if self._dry_run:
            logger.info("Dry run: %d file(s) rendered, nothing written.", len(rendered))
        else:
            self._step_export(rendered, view_model.service_name, output_dir, report)

        return self._finalise_report(report, time.perf_counter() - pipeline_start)

    def _step_build(
        self,
        descriptors: DescriptorSet,
        config: GenerationConfig,
        report: GenerationReport,
    ) -> Optional[ServiceViewModel]:
        with Timer("build_view_model") as t:
            view_model: Optional[ServiceViewModel] = build_first_service(descriptors, config)

        if view_model is None:
            detail: str = "no service found, nothing to generate"
        else:
            report.service_name = view_model.service_name
            report.total_rpcs = len(view_model.rpcs)
            detail = f"{view_model.service_name}: {len(view_model.rpcs)} rpcs"

        report.step_metrics.append(GenerationStepMetric(
            step_name="Build View Model",
            success=True,
            elapsed_seconds=t.elapsed,
            detail=detail,
        ))
        return view_model

    def _step_render(
        self,
        view_model: ServiceViewModel,
        config: GenerationConfig,
        report: GenerationReport,
    ) -> Dict[str, str]:
        rendered: Dict[str, str] = {}
        with Timer("render") as t:
            try:
                rendered = TemplateRenderer(config).render_all(view_model)
            except (TemplateError, OSError, ValueError) as exc:
                error_msg: str = f"Fatal render error: {type(exc).__name__}: {exc}"
                report.generation_errors.append(error_msg)
                logger.error(error_msg, exc_info=True)

        report.step_metrics.append(GenerationStepMetric(
            step_name="Render Templates",
            success=not report.generation_errors,
            elapsed_seconds=t.elapsed,
            detail=", ".join(rendered) if rendered else "aborted",
        ))
        return rendered

    def _step_export(
        self,
        rendered: Dict[str, str],
        service_name: str,
        output_dir: Path,
        report: GenerationReport,
    ) -> None:
        with Timer("export") as t:
            exporter: ProjectExporter = ProjectExporter(
                output_dir,
                service_name=service_name,
                clean_before_export=self._clean_output,
                atomic_writes=True,
                generate_manifest=self._write_manifest,
            )
            export_result: ExportResult = exporter.export(rendered)

        report.export_errors.extend(export_result.errors)
        report.manifest = export_result.manifest

        report.step_metrics.append(GenerationStepMetric(
            step_name="Export to Filesystem",
            success=export_result.success,
            elapsed_seconds=t.elapsed,
            detail=(
                f"{export_result.manifest.total_files} files, "
                f"{export_result.manifest.total_bytes:,} bytes"
            ),
        ))

    def _finalise_report(self, report: GenerationReport, total_elapsed: float) -> GenerationReport:
        report.total_elapsed_seconds = total_elapsed
        report.success = not (
            report.load_errors or report.generation_errors or report.export_errors
        )
        return report


__all__ = [
    "ConnectVueGenerator",
    "GenerationReport",
    "GenerationStepMetric",
    "build_config",
    "render_service",
]
