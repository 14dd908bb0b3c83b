# File: connectvue/models.py
"""
protoc-gen-connect-vue - Core Data Models
==========================================
Data structures flowing through the pipeline:

    Descriptor Tree → Service View Model → Rendered Files

Two families of models live here:

* The **descriptor tree** (``FileDescriptor`` → ``ServiceDescriptor`` →
  ``MethodDescriptor`` → ``MessageDescriptor`` → ``FieldDescriptor``).  It is
  read-only input produced by the loaders in ``connectvue.descriptors``.
  Message types may reference each other in cycles, so these are plain
  identity-compared dataclasses that are never compared, hashed or
  serialised field-by-field.
* The **view model** (``RpcViewModel``, ``ServiceViewModel``) and the
  ``GenerationConfig``.  These are frozen Pydantic V2 models: built once per
  invocation, then handed to the renderer as plain dictionaries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("connectvue.models")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class MethodKind(IntEnum):
    """RPC shapes, numbered as in the protobuf runtime."""

    UNARY = 1
    SERVER_STREAMING = 2
    CLIENT_STREAMING = 3
    BIDI_STREAMING = 4

    @classmethod
    def from_streaming_flags(
        cls, client_streaming: bool, server_streaming: bool
    ) -> "MethodKind":
        if client_streaming and server_streaming:
            return cls.BIDI_STREAMING
        if client_streaming:
            return cls.CLIENT_STREAMING
        if server_streaming:
            return cls.SERVER_STREAMING
        return cls.UNARY


class FieldKind(str, Enum):
    """Field shapes.  Repeated fields keep the kind of their element; map
    fields are ``MAP`` whatever their value type."""

    SCALAR = "scalar"
    ENUM = "enum"
    MESSAGE = "message"
    MAP = "map"


# ---------------------------------------------------------------------------
# Descriptor tree
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class FieldDescriptor:
    """A single message field.  ``message`` is set for message-typed fields
    and for map fields whose value type is a message."""

    name: str
    field_kind: FieldKind = FieldKind.SCALAR
    repeated: bool = False
    message: Optional["MessageDescriptor"] = field(default=None, repr=False)


@dataclass(eq=False)
class MessageDescriptor:
    """A message type.  ``type_name`` is fully qualified, ``name`` is short."""

    type_name: str
    name: str
    file: "FileDescriptor" = field(repr=False)
    fields: List[FieldDescriptor] = field(default_factory=list, repr=False)


@dataclass(eq=False)
class MethodDescriptor:
    name: str
    input: MessageDescriptor = field(repr=False)
    output: MessageDescriptor = field(repr=False)
    method_kind: MethodKind = MethodKind.UNARY


@dataclass(eq=False)
class ServiceDescriptor:
    name: str
    file: "FileDescriptor" = field(repr=False)
    methods: List[MethodDescriptor] = field(default_factory=list)

    @property
    def type_name(self) -> str:
        if self.file.package:
            return f"{self.file.package}.{self.name}"
        return self.name


@dataclass(eq=False)
class FileDescriptor:
    """One ``.proto`` file, identified by its path relative to the proto root."""

    name: str
    package: str = ""
    messages: List[MessageDescriptor] = field(default_factory=list, repr=False)
    services: List[ServiceDescriptor] = field(default_factory=list)


@dataclass(eq=False)
class DescriptorSet:
    """
    Everything one invocation sees: all known files plus the subset whose
    services may be generated (``files_to_generate``, in request order).
    """

    files: List[FileDescriptor] = field(default_factory=list)
    files_to_generate: List[str] = field(default_factory=list)

    def generated_files(self) -> List[FileDescriptor]:
        if not self.files_to_generate:
            return list(self.files)
        by_name = {f.name: f for f in self.files}
        return [by_name[name] for name in self.files_to_generate if name in by_name]

    def first_service(self) -> Optional[ServiceDescriptor]:
        """First service declared across the generated files, if any."""
        for file_desc in self.generated_files():
            if file_desc.services:
                return file_desc.services[0]
        return None


# ---------------------------------------------------------------------------
# Generation configuration
# ---------------------------------------------------------------------------

_CONFIG: ConfigDict = ConfigDict(
    populate_by_name=True,
    validate_assignment=True,
    frozen=True,
    extra="forbid",
)


class GenerationConfig(BaseModel):
    """Settings for one generator invocation."""

    model_config = _CONFIG

    output_root: str = Field(
        default="./gen",
        description="Import prefix for generated message modules of other files.",
    )
    proto_suffix: str = Field(default=".proto", min_length=1)
    pb_suffix: str = Field(default="_pb", description="Suffix of message modules.")
    connect_query_suffix: str = Field(
        default="_connectquery",
        description="Suffix of the connect-query method definition module.",
    )
    hook_prefix: str = Field(default="use", min_length=1)
    template_dir: Optional[str] = Field(
        default=None,
        description="Directory overriding the bundled templates.",
    )
    client_file: str = Field(default="client.ts", min_length=1)
    api_file: str = Field(default="api.ts", min_length=1)
    index_file: str = Field(default="index.ts", min_length=1)
    base_url: str = Field(default="/", description="Default transport base URL.")
    query_stale_time: int = Field(
        default=0, ge=0, description="Default staleTime (ms) for generated queries."
    )

    @field_validator("output_root")
    @classmethod
    def _no_trailing_slash(cls, v: str) -> str:
        stripped = v.rstrip("/")
        return stripped or v


# ---------------------------------------------------------------------------
# View model
# ---------------------------------------------------------------------------


class RpcViewModel(BaseModel):
    """How one RPC is exposed by the generated client code."""

    model_config = _CONFIG

    function_name: str
    hook_name: str
    query_definition_name: str
    resource: str
    input_type: str
    output_type: str
    method_kind: MethodKind
    is_unary: bool
    is_mutation: bool
    is_query: bool
    is_paginated: bool


class ExternalImport(BaseModel):
    """Names imported from the generated module of another proto file."""

    model_config = _CONFIG

    path: str
    types: List[str]


class ServiceViewModel(BaseModel):
    """Everything the templates need to render one service."""

    model_config = _CONFIG

    service_name: str
    proto_pb_file: str
    connect_query_file: str
    rpcs: List[RpcViewModel] = Field(default_factory=list)
    wkt_imports: List[str] = Field(default_factory=list)
    local_imports: List[str] = Field(default_factory=list)
    external_imports: List[ExternalImport] = Field(default_factory=list)


__all__ = [
    "DescriptorSet",
    "ExternalImport",
    "FieldDescriptor",
    "FieldKind",
    "FileDescriptor",
    "GenerationConfig",
    "MessageDescriptor",
    "MethodDescriptor",
    "MethodKind",
    "RpcViewModel",
    "ServiceDescriptor",
    "ServiceViewModel",
]
