# File: connectvue/exporters.py
"""
protoc-gen-connect-vue - File Exporter
=======================================

Responsible for:
    1. Creating the output directory.
    2. Writing rendered files atomically (write-to-temp then rename).
    3. Producing an export manifest with checksums for reproducibility.

Export only starts once every file has rendered, so a render failure never
leaves a partial set of outputs behind.  Individual writes are atomic; a
failing write is recorded and the remaining files are still attempted.
"""

from __future__ import annotations

import json
import logging
import shutil
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple

from connectvue.utils import Timer, count_lines, sha256_hex, write_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("connectvue.exporters")

MANIFEST_FILE: str = "manifest.json"


# ---------------------------------------------------------------------------
# Data classes for export results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FileRecord:
    """Immutable record of a single exported file."""

    relative_path: str
    absolute_path: str
    size_bytes: int
    line_count: int
    sha256: str


@dataclass(frozen=False, slots=True)
class ExportManifest:
    """Manifest of all exported files, serialisable to JSON."""

    service_name: str = ""
    generator_version: str = ""
    export_timestamp: str = ""
    output_directory: str = ""
    total_files: int = 0
    total_bytes: int = 0
    total_lines: int = 0
    files: List[FileRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "service_name": self.service_name,
            "generator_version": self.generator_version,
            "export_timestamp": self.export_timestamp,
            "output_directory": self.output_directory,
            "total_files": self.total_files,
            "total_bytes": self.total_bytes,
            "total_lines": self.total_lines,
            "files": [
                {
                    "relative_path": f.relative_path,
                    "size_bytes": f.size_bytes,
                    "line_count": f.line_count,
                    "sha256": f.sha256,
                }
                for f in self.files
            ],
        }

    def to_json(self, indent_size: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent_size, ensure_ascii=False)


@dataclass(frozen=True, slots=True)
class ExportResult:
    """Final result returned by ``ProjectExporter.export()``."""

    success: bool
    manifest: ExportManifest
    errors: Tuple[str, ...]
    warnings: Tuple[str, ...]
    elapsed_seconds: float


# ---------------------------------------------------------------------------
# Exporter
# ---------------------------------------------------------------------------


class ProjectExporter:
    """
    Writes rendered files under one output directory.

    Usage::

        exporter = ProjectExporter(output_dir=Path("./src/api"))
        result = exporter.export({"api.ts": "...", "client.ts": "..."})

    Thread-safety: NOT thread-safe.  Use one exporter per export.
    """

    def __init__(
        self,
        output_dir: Path,
        *,
        service_name: str = "",
        clean_before_export: bool = False,
        atomic_writes: bool = True,
        generate_manifest: bool = True,
    ) -> None:
        """
        Args:
            output_dir: Root directory for output files.
            service_name: Recorded in the manifest.
            clean_before_export: If True, wipe the output directory first.
            atomic_writes: If True, use write-to-temp+rename.
            generate_manifest: If True, write ``manifest.json``.
        """
        self._output_dir: Path = output_dir.resolve()
        self._service_name: str = service_name
        self._clean_before_export: bool = clean_before_export
        self._atomic_writes: bool = atomic_writes
        self._generate_manifest: bool = generate_manifest

        self._errors: List[str] = []
        self._warnings: List[str] = []
        self._file_records: List[FileRecord] = []

        logger.debug(
            "ProjectExporter initialised: output_dir=%s, atomic=%s.",
            self._output_dir,
            self._atomic_writes,
        )

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def export(self, rendered_files: Dict[str, str]) -> ExportResult:
        """
        Write every rendered file to the output directory.

        Args:
            rendered_files: Mapping of relative_path → file_content.
        """
        with Timer("export") as timer:
            try:
                self._pre_export_cleanup()
                self._output_dir.mkdir(parents=True, exist_ok=True)
                self._write_rendered_files(rendered_files)

                if self._generate_manifest:
                    self._write_manifest_file()

            except OSError as exc:
                error_msg: str = f"Fatal export error: {type(exc).__name__}: {exc}"
                self._errors.append(error_msg)
                logger.error(error_msg, exc_info=True)

        manifest: ExportManifest = self._build_manifest()
        success: bool = len(self._errors) == 0

        if success:
            logger.info(
                "Export completed successfully: %d files, %d bytes, %.3fs.",
                manifest.total_files,
                manifest.total_bytes,
                timer.elapsed,
            )
        else:
            logger.error(
                "Export completed with %d error(s) in %.3fs.",
                len(self._errors),
                timer.elapsed,
            )

        return ExportResult(
            success=success,
            manifest=manifest,
            errors=tuple(self._errors),
            warnings=tuple(self._warnings),
            elapsed_seconds=timer.elapsed,
        )

    # -----------------------------------------------------------------
    # Internal
    # -----------------------------------------------------------------

    def _pre_export_cleanup(self) -> None:
        """Clean output directory if configured to do so."""
        if not self._clean_before_export or not self._output_dir.exists():
            return

        logger.info("Cleaning output directory: %s", self._output_dir)
        for item in self._output_dir.iterdir():
            if item.name in {".git", ".gitignore", ".gitkeep"}:
                continue
            try:
                if item.is_dir():
                    shutil.rmtree(item)
                else:
                    item.unlink()
            except OSError as exc:
                warning_msg: str = f"Could not remove {item}: {exc}"
                self._warnings.append(warning_msg)
                logger.warning(warning_msg)

    def _write_rendered_files(self, rendered_files: Dict[str, str]) -> None:
        for rel_path, content in rendered_files.items():
            try:
                self._file_records.append(
                    self._write_single_file(self._output_dir / rel_path, content, rel_path)
                )
            except OSError as exc:
                error_msg: str = f"Failed to write {rel_path}: {type(exc).__name__}: {exc}"
                self._errors.append(error_msg)
                logger.error(error_msg)

        logger.info(
            "Wrote %d rendered file(s) to %s.",
            len(self._file_records),
            self._output_dir,
        )

    def _write_single_file(self, full_path: Path, content: str, rel_path: str) -> FileRecord:
        size_bytes: int = write_file(full_path, content, atomic=self._atomic_writes)
        line_count: int = count_lines(content)
        logger.debug("Wrote file: %s (%d bytes, %d lines).", rel_path, size_bytes, line_count)
        return FileRecord(
            relative_path=rel_path,
            absolute_path=str(full_path),
            size_bytes=size_bytes,
            line_count=line_count,
            sha256=sha256_hex(content),
        )

    def _build_manifest(self) -> ExportManifest:
        import connectvue

        return ExportManifest(
            service_name=self._service_name,
            generator_version=connectvue.__version__,
            export_timestamp=time.strftime("%Y-%m-%dT%H:%M:%S%z"),
            output_directory=str(self._output_dir),
            total_files=len(self._file_records),
            total_bytes=sum(r.size_bytes for r in self._file_records),
            total_lines=sum(r.line_count for r in self._file_records),
            files=list(self._file_records),
        )

    def _write_manifest_file(self) -> None:
        manifest_path: Path = self._output_dir / MANIFEST_FILE
        try:
            write_file(manifest_path, self._build_manifest().to_json(), atomic=self._atomic_writes)
            logger.debug("Wrote manifest to %s.", manifest_path)
        except OSError as exc:
            self._warnings.append(f"Could not write manifest: {exc}")
            logger.warning("Failed to write manifest: %s", exc)


__all__ = [
    "ExportManifest",
    "ExportResult",
    "FileRecord",
    "MANIFEST_FILE",
    "ProjectExporter",
]
