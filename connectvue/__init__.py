# File: connectvue/__init__.py
"""
protoc-gen-connect-vue — Vue Query bindings for Connect services
=================================================================

A protoc plugin that reads the descriptors of a protobuf service and
generates a typed TypeScript client layer for Vue 3 applications: one
plain async function per unary RPC plus a TanStack Vue Query composable
(``useQuery``, ``useInfiniteQuery`` or ``useMutation``) chosen by naming
and message-shape heuristics.

Architecture overview::

    ┌──────────────┐     ┌────────────────────┐     ┌──────────────────┐
    │ plugin / CLI │────▶│ ConnectVueGenerator │────▶│ TemplateRenderer │
    │ (plugin.py)  │     │   (generator.py)    │     │  (templates.py)  │
    └──────────────┘     └─────────┬──────────┘     └──────────────────┘
                                   │
               ┌───────────────────┼───────────────────┐
               ▼                   ▼                   ▼
        ┌─────────────┐     ┌─────────────┐     ┌───────────┐
        │ descriptors │     │   builder   │     │ exporters │
        │    (.py)    │     │ classifier  │     │   (.py)   │
        └─────────────┘     │  resolver   │     └───────────┘
                            └─────────────┘

Usage::

    # As a protoc / buf plugin
    protoc --connect-vue_out=src/api tickets.proto

    # From the command line, without protoc
    python -m connectvue --descriptor tickets.yaml --output ./src/api -v

Public API:
    - ConnectVueGenerator      — Pipeline orchestrator
    - GenerationConfig         — Generation settings model
    - build_service_view_model — Descriptor → view model
    - TemplateRenderer         — Template engine
    - ProjectExporter          — File-system writer
    - generate_code            — protoc request → response
"""

from __future__ import annotations

__version__: str = "1.0.2"
__license__: str = "MIT"

from connectvue.models import (
    DescriptorSet,
    ExternalImport,
    FieldDescriptor,
    FieldKind,
    FileDescriptor,
    GenerationConfig,
    MessageDescriptor,
    MethodDescriptor,
    MethodKind,
    RpcViewModel,
    ServiceDescriptor,
    ServiceViewModel,
)
from connectvue.resolver import ImportAccumulator, resolve_type
from connectvue.classifier import classify_method, derive_resource, is_mutation, is_paginated
from connectvue.builder import build_first_service, build_service_view_model
from connectvue.descriptors import DescriptorLoader, load_descriptor_file, parse_descriptor_document
from connectvue.templates import TemplateRenderer
from connectvue.exporters import ExportManifest, ExportResult, ProjectExporter
from connectvue.generator import ConnectVueGenerator, GenerationReport, build_config
from connectvue.plugin import generate_code

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    # Version info
    "__version__",
    "__license__",
    # Core orchestrator
    "ConnectVueGenerator",
    "GenerationReport",
    "build_config",
    "generate_code",
    # Descriptor model
    "DescriptorSet",
    "FieldDescriptor",
    "FieldKind",
    "FileDescriptor",
    "MessageDescriptor",
    "MethodDescriptor",
    "MethodKind",
    "ServiceDescriptor",
    # Descriptor loading
    "DescriptorLoader",
    "load_descriptor_file",
    "parse_descriptor_document",
    # View model
    "ExternalImport",
    "GenerationConfig",
    "RpcViewModel",
    "ServiceViewModel",
    "ImportAccumulator",
    "resolve_type",
    "classify_method",
    "derive_resource",
    "is_mutation",
    "is_paginated",
    "build_first_service",
    "build_service_view_model",
    # Rendering & export
    "TemplateRenderer",
    "ProjectExporter",
    "ExportManifest",
    "ExportResult",
]
