# File: connectvue/resolver.py
"""
protoc-gen-connect-vue - Type Resolution & Import Bookkeeping
==============================================================

Every message type referenced by an RPC ends up in exactly one of three
import buckets of the ``ImportAccumulator``:

    1. Well-known types (``google.protobuf.Timestamp`` …) imported from the
       protobuf runtime under a fixed name.
    2. Local types, declared in the same file as the service.
    3. External types, declared in another file and imported from that
       file's generated module via a relative path.

Buckets are insertion-ordered sets, so resolving a type twice never
duplicates an import and the rendered import block is reproducible.
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from connectvue.models import ExternalImport, FileDescriptor, GenerationConfig, MessageDescriptor
from connectvue.utils import join_import_path, relative_dir, strip_suffix

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("connectvue.resolver")

# ---------------------------------------------------------------------------
# Known-type table
# ---------------------------------------------------------------------------

KNOWN_TYPES: Mapping[str, str] = {
    "google.protobuf.Empty": "Empty",
    "google.protobuf.Timestamp": "Timestamp",
    "google.protobuf.Duration": "Duration",
}


# ---------------------------------------------------------------------------
# Import accumulator
# ---------------------------------------------------------------------------


@dataclass
class ImportAccumulator:
    """
    Imports needed by one service.  Dict keys stand in for ordered sets.
    """

    wkt_imports: Dict[str, None] = field(default_factory=dict)
    local_imports: Dict[str, None] = field(default_factory=dict)
    external_imports: Dict[str, Dict[str, None]] = field(default_factory=dict)

    def add_wkt(self, name: str) -> None:
        self.wkt_imports.setdefault(name, None)

    def add_local(self, name: str) -> None:
        self.local_imports.setdefault(name, None)

    def add_external(self, path: str, name: str) -> None:
        self.external_imports.setdefault(path, {}).setdefault(name, None)

    def flatten_wkt(self) -> List[str]:
        return list(self.wkt_imports)

    def flatten_local(self) -> List[str]:
        return list(self.local_imports)

    def flatten_external(self) -> List[ExternalImport]:
        return [
            ExternalImport(path=path, types=list(names))
            for path, names in self.external_imports.items()
        ]


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


def external_import_path(
    message_file: FileDescriptor,
    owning_file: FileDescriptor,
    config: GenerationConfig,
) -> str:
    """
    Import specifier for the generated module of *message_file*, as seen
    from the code generated for *owning_file*.

    Example (default config):
        owning ``tickets/v1/service.proto``, message in
        ``common/v1/paging.proto`` → ``./gen/../../common/v1/paging_pb``
    """
    rel: str = relative_dir(owning_file.name, message_file.name)
    stem: str = strip_suffix(posixpath.basename(message_file.name), config.proto_suffix)
    return join_import_path(config.output_root, rel, f"{stem}{config.pb_suffix}")


def resolve_type(
    message: MessageDescriptor,
    owning_file: FileDescriptor,
    accumulator: ImportAccumulator,
    config: Optional[GenerationConfig] = None,
) -> str:
    """
    Return the TypeScript name for *message* and record the import it needs.
    """
    config = config or GenerationConfig()
    known: Optional[str] = KNOWN_TYPES.get(message.type_name)
    if known is not None:
        accumulator.add_wkt(known)
        return known

    if message.file.name == owning_file.name:
        accumulator.add_local(message.name)
        return message.name

    import_path: str = external_import_path(message.file, owning_file, config)
    accumulator.add_external(import_path, message.name)
    logger.debug(
        "Resolved %s as external import from %s.", message.type_name, import_path
    )
    return message.name


__all__ = [
    "KNOWN_TYPES",
    "ImportAccumulator",
    "external_import_path",
    "resolve_type",
]
