# File: connectvue/descriptors.py
"""
protoc-gen-connect-vue - Descriptor Loading
============================================

Builds the descriptor tree (``connectvue.models``) from one of two inputs:

    1. A protoc ``CodeGeneratorRequest`` (the plugin path).  Every file in
       ``proto_file`` is indexed, dependencies included, so cross-file and
       well-known message references resolve to real descriptors.
    2. A YAML / JSON descriptor document (the CLI path), validated through
       the Pydantic ``DescriptorDocument`` model:

       .. code-block:: yaml

           files:
             - name: tickets/v1/ticket.proto
               package: tickets.v1
               messages:
                 - name: ListTicketsRequest
                   fields:
                     - {name: page, kind: scalar}
                     - {name: filter, type: TicketFilter}
               services:
                 - name: TicketService
                   methods:
                     - {name: ListTickets, input: ListTicketsRequest,
                        output: ListTicketsResponse}

       Type references resolve like protoc: from the enclosing message
       outward through its parents and the package, then as a fully
       qualified name (``google.protobuf.Empty``).  Well-known types that
       are referenced but not declared are added in their canonical
       ``google/protobuf/*.proto`` files.

Both loaders build messages in two passes (declare every type, then wire
fields) so message references may form cycles.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Set, Tuple

import yaml
from google.protobuf import descriptor_pb2
from google.protobuf.compiler import plugin_pb2
from google.protobuf.message import DecodeError
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from connectvue.models import (
    DescriptorSet,
    FieldDescriptor,
    FieldKind,
    FileDescriptor,
    MessageDescriptor,
    MethodDescriptor,
    MethodKind,
    ServiceDescriptor,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("connectvue.descriptors")

# Canonical files of the well-known types the generator knows about.
WELL_KNOWN_FILES: Dict[str, str] = {
    "google.protobuf.Empty": "google/protobuf/empty.proto",
    "google.protobuf.Timestamp": "google/protobuf/timestamp.proto",
    "google.protobuf.Duration": "google/protobuf/duration.proto",
}

_FieldProto = descriptor_pb2.FieldDescriptorProto


def _qualify(package: str, name: str) -> str:
    return f"{package}.{name}" if package else name


# ---------------------------------------------------------------------------
# CodeGeneratorRequest loader
# ---------------------------------------------------------------------------


class DescriptorLoader:
    """
    Normalise a ``CodeGeneratorRequest`` into a ``DescriptorSet``.

    Usage::

        descriptors = DescriptorLoader(request).load()
    """

    def __init__(self, request: plugin_pb2.CodeGeneratorRequest) -> None:
        self._request = request
        self._messages: Dict[str, MessageDescriptor] = {}
        self._map_entries: Set[str] = set()

    def load(self) -> DescriptorSet:
        files: List[FileDescriptor] = []
        pending: List[Tuple[FileDescriptor, descriptor_pb2.FileDescriptorProto]] = []

        for file_proto in self._request.proto_file:
            file_desc = FileDescriptor(name=file_proto.name, package=file_proto.package)
            for msg_proto in file_proto.message_type:
                self._declare_message(file_desc, msg_proto, file_proto.package)
            files.append(file_desc)
            pending.append((file_desc, file_proto))

        for file_desc, file_proto in pending:
            for msg_proto in file_proto.message_type:
                self._wire_fields(msg_proto, file_proto.package)
            for svc_proto in file_proto.service:
                file_desc.services.append(self._build_service(file_desc, svc_proto))

        logger.info(
            "Loaded %d file(s), %d message type(s) from CodeGeneratorRequest.",
            len(files),
            len(self._messages),
        )
        return DescriptorSet(
            files=files,
            files_to_generate=list(self._request.file_to_generate),
        )

    # -----------------------------------------------------------------
    # Internal
    # -----------------------------------------------------------------

    def _declare_message(
        self,
        file_desc: FileDescriptor,
        msg_proto: descriptor_pb2.DescriptorProto,
        scope: str,
    ) -> None:
        type_name: str = _qualify(scope, msg_proto.name)
        if msg_proto.options.map_entry:
            self._map_entries.add(type_name)
        message = MessageDescriptor(type_name=type_name, name=msg_proto.name, file=file_desc)
        self._messages[type_name] = message
        file_desc.messages.append(message)
        for nested in msg_proto.nested_type:
            self._declare_message(file_desc, nested, type_name)

    def _wire_fields(self, msg_proto: descriptor_pb2.DescriptorProto, scope: str) -> None:
        type_name: str = _qualify(scope, msg_proto.name)
        message: MessageDescriptor = self._messages[type_name]
        # Nested first: map fields read the value field of their entry type.
        for nested in msg_proto.nested_type:
            self._wire_fields(nested, type_name)
        for field_proto in msg_proto.field:
            message.fields.append(self._build_field(field_proto))

    def _build_field(self, field_proto: descriptor_pb2.FieldDescriptorProto) -> FieldDescriptor:
        repeated: bool = field_proto.label == _FieldProto.LABEL_REPEATED
        ref: str = field_proto.type_name.lstrip(".")

        if field_proto.type in (_FieldProto.TYPE_MESSAGE, _FieldProto.TYPE_GROUP):
            if ref in self._map_entries:
                entry = self._lookup(ref)
                value = next((f for f in entry.fields if f.name == "value"), None)
                return FieldDescriptor(
                    name=field_proto.name,
                    field_kind=FieldKind.MAP,
                    message=value.message if value is not None else None,
                )
            return FieldDescriptor(
                name=field_proto.name,
                field_kind=FieldKind.MESSAGE,
                repeated=repeated,
                message=self._lookup(ref),
            )
        if field_proto.type == _FieldProto.TYPE_ENUM:
            return FieldDescriptor(name=field_proto.name, field_kind=FieldKind.ENUM, repeated=repeated)
        return FieldDescriptor(name=field_proto.name, field_kind=FieldKind.SCALAR, repeated=repeated)

    def _build_service(
        self,
        file_desc: FileDescriptor,
        svc_proto: descriptor_pb2.ServiceDescriptorProto,
    ) -> ServiceDescriptor:
        service = ServiceDescriptor(name=svc_proto.name, file=file_desc)
        for method_proto in svc_proto.method:
            service.methods.append(
                MethodDescriptor(
                    name=method_proto.name,
                    input=self._lookup(method_proto.input_type.lstrip(".")),
                    output=self._lookup(method_proto.output_type.lstrip(".")),
                    method_kind=MethodKind.from_streaming_flags(
                        method_proto.client_streaming, method_proto.server_streaming
                    ),
                )
            )
        return service

    def _lookup(self, type_name: str) -> MessageDescriptor:
        try:
            return self._messages[type_name]
        except KeyError:
            raise ValueError(
                f"Message type '{type_name}' is not defined in the request."
            ) from None


def load_request_file(path: Path) -> DescriptorSet:
    """Load a binary serialised ``CodeGeneratorRequest`` from disk."""
    request = plugin_pb2.CodeGeneratorRequest()
    try:
        request.ParseFromString(path.read_bytes())
    except DecodeError as exc:
        raise ValueError(f"Invalid CodeGeneratorRequest in {path}: {exc}") from exc
    return DescriptorLoader(request).load()


# ---------------------------------------------------------------------------
# Descriptor document models
# ---------------------------------------------------------------------------

_DOC_CONFIG: ConfigDict = ConfigDict(extra="forbid", populate_by_name=True)


class FieldDocument(BaseModel):
    model_config = _DOC_CONFIG

    name: str = Field(..., min_length=1)
    kind: Optional[FieldKind] = Field(
        default=None, description="Defaults to 'message' when 'type' is set, else 'scalar'."
    )
    type: Optional[str] = Field(default=None, description="Referenced message type.")
    repeated: bool = False


class MessageDocument(BaseModel):
    model_config = _DOC_CONFIG

    name: str = Field(..., min_length=1)
    fields: List[FieldDocument] = Field(default_factory=list)
    messages: List["MessageDocument"] = Field(default_factory=list)


MessageDocument.model_rebuild()


class MethodDocument(BaseModel):
    model_config = _DOC_CONFIG

    name: str = Field(..., min_length=1)
    input: str = Field(..., min_length=1)
    output: str = Field(..., min_length=1)
    kind: Literal[
        "unary", "server_streaming", "client_streaming", "bidi_streaming"
    ] = "unary"


class ServiceDocument(BaseModel):
    model_config = _DOC_CONFIG

    name: str = Field(..., min_length=1)
    methods: List[MethodDocument] = Field(default_factory=list)


class FileDocument(BaseModel):
    model_config = _DOC_CONFIG

    name: str = Field(..., min_length=1)
    package: str = ""
    messages: List[MessageDocument] = Field(default_factory=list)
    services: List[ServiceDocument] = Field(default_factory=list)


class DescriptorDocument(BaseModel):
    """Top level of a YAML / JSON descriptor document."""

    model_config = _DOC_CONFIG

    files: List[FileDocument] = Field(default_factory=list)
    files_to_generate: List[str] = Field(default_factory=list)
    config: Dict[str, Any] = Field(
        default_factory=dict, description="GenerationConfig overrides."
    )


_METHOD_KINDS: Dict[str, MethodKind] = {
    "unary": MethodKind.UNARY,
    "server_streaming": MethodKind.SERVER_STREAMING,
    "client_streaming": MethodKind.CLIENT_STREAMING,
    "bidi_streaming": MethodKind.BIDI_STREAMING,
}


# ---------------------------------------------------------------------------
# Document → descriptor tree
# ---------------------------------------------------------------------------


class _DocumentBuilder:
    def __init__(self, document: DescriptorDocument) -> None:
        self._document = document
        self._messages: Dict[str, MessageDescriptor] = {}
        self._files: List[FileDescriptor] = []
        self._well_known_files: Dict[str, FileDescriptor] = {}

    def build(self) -> DescriptorSet:
        pending: List[Tuple[FileDescriptor, FileDocument]] = []
        for file_doc in self._document.files:
            file_desc = FileDescriptor(name=file_doc.name, package=file_doc.package)
            for msg_doc in file_doc.messages:
                self._declare(file_desc, msg_doc, file_doc.package)
            self._files.append(file_desc)
            pending.append((file_desc, file_doc))

        for file_desc, file_doc in pending:
            for msg_doc in file_doc.messages:
                self._wire(msg_doc, file_doc.package, file_doc.package)
            for svc_doc in file_doc.services:
                service = ServiceDescriptor(name=svc_doc.name, file=file_desc)
                for method_doc in svc_doc.methods:
                    service.methods.append(
                        MethodDescriptor(
                            name=method_doc.name,
                            input=self._resolve(method_doc.input, file_doc.package),
                            output=self._resolve(method_doc.output, file_doc.package),
                            method_kind=_METHOD_KINDS[method_doc.kind],
                        )
                    )
                file_desc.services.append(service)

        return DescriptorSet(
            files=self._files + list(self._well_known_files.values()),
            files_to_generate=list(self._document.files_to_generate),
        )

    def _declare(self, file_desc: FileDescriptor, msg_doc: MessageDocument, scope: str) -> None:
        type_name: str = _qualify(scope, msg_doc.name)
        if type_name in self._messages:
            raise ValueError(f"Duplicate message type '{type_name}' in {file_desc.name}.")
        message = MessageDescriptor(type_name=type_name, name=msg_doc.name, file=file_desc)
        self._messages[type_name] = message
        file_desc.messages.append(message)
        for nested in msg_doc.messages:
            self._declare(file_desc, nested, type_name)

    def _wire(self, msg_doc: MessageDocument, scope: str, package: str) -> None:
        type_name: str = _qualify(scope, msg_doc.name)
        message: MessageDescriptor = self._messages[type_name]
        for fld in msg_doc.fields:
            kind: FieldKind = fld.kind or (FieldKind.MESSAGE if fld.type else FieldKind.SCALAR)
            target: Optional[MessageDescriptor] = None
            if fld.type:
                target = self._resolve(fld.type, package, scope=type_name)
            elif kind == FieldKind.MESSAGE:
                raise ValueError(f"Field '{type_name}.{fld.name}' is a message field without a type.")
            message.fields.append(
                FieldDescriptor(name=fld.name, field_kind=kind, repeated=fld.repeated, message=target)
            )
        for nested in msg_doc.messages:
            self._wire(nested, type_name, package)

    def _resolve(self, ref: str, package: str, scope: Optional[str] = None) -> MessageDescriptor:
        """
        Look *ref* up the way protoc does: from the innermost scope outward
        (``p.Outer.Mid`` → ``p.Outer`` → ``p`` → root).  A leading dot
        makes the reference fully qualified.
        """
        candidates: List[str] = []
        if ref.startswith("."):
            ref = ref.lstrip(".")
        else:
            parts: List[str] = (scope or package).split(".") if (scope or package) else []
            while parts:
                candidates.append(_qualify(".".join(parts), ref))
                parts.pop()
        candidates.append(ref)

        for candidate in candidates:
            if candidate in self._messages:
                return self._messages[candidate]

        if ref in WELL_KNOWN_FILES:
            return self._synthesise_well_known(ref)

        raise ValueError(f"Unknown message type '{ref}' (package '{package}').")

    def _synthesise_well_known(self, type_name: str) -> MessageDescriptor:
        file_name: str = WELL_KNOWN_FILES[type_name]
        file_desc = self._well_known_files.get(file_name)
        if file_desc is None:
            file_desc = FileDescriptor(name=file_name, package="google.protobuf")
            self._well_known_files[file_name] = file_desc
        message = MessageDescriptor(
            type_name=type_name, name=type_name.rsplit(".", 1)[-1], file=file_desc
        )
        file_desc.messages.append(message)
        self._messages[type_name] = message
        logger.debug("Synthesised well-known type %s in %s.", type_name, file_name)
        return message


def parse_descriptor_document(data: Dict[str, Any]) -> Tuple[DescriptorSet, Dict[str, Any]]:
    """
    Validate a raw document and build the descriptor tree.

    Returns:
        Tuple of (DescriptorSet, config overrides from the ``config`` key).

    Raises:
        ValueError: If the document doesn't validate or references an
            unknown message type.
    """
    try:
        document: DescriptorDocument = DescriptorDocument.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Descriptor document validation failed: {exc}") from exc

    descriptors: DescriptorSet = _DocumentBuilder(document).build()
    logger.info(
        "Parsed descriptor document: %d file(s), %d service(s).",
        len(descriptors.files),
        sum(len(f.services) for f in descriptors.files),
    )
    return descriptors, dict(document.config)


def _load_mapping(path: Path) -> Dict[str, Any]:
    text: str = path.read_text(encoding="utf-8")
    suffix: str = path.suffix.lower()
    try:
        if suffix == ".json":
            data: Any = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ValueError(f"Invalid descriptor document {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a mapping at top level of {path}, got {type(data).__name__}."
        )
    return data


def load_descriptor_file(path: Path) -> Tuple[DescriptorSet, Dict[str, Any]]:
    """
    Load descriptors from a YAML / JSON document or a binary
    ``CodeGeneratorRequest`` (``.bin`` / ``.pb``).

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file can't be parsed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Descriptor file not found: {path}")
    if not path.is_file():
        raise ValueError(f"Descriptor path is not a file: {path}")

    if path.suffix.lower() in (".bin", ".pb"):
        return load_request_file(path), {}
    return parse_descriptor_document(_load_mapping(path))


__all__ = [
    "DescriptorDocument",
    "DescriptorLoader",
    "WELL_KNOWN_FILES",
    "load_descriptor_file",
    "load_request_file",
    "parse_descriptor_document",
]
