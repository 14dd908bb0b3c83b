# File: connectvue/classifier.py
"""
protoc-gen-connect-vue - RPC Classification
============================================

Decides how each RPC is exposed to Vue code:

    * unary, no mutating verb          → ``useQuery`` binding
    * ... and a paging field on input  → ``useInfiniteQuery`` binding
    * unary with a mutating verb       → ``useMutation`` + cache invalidation
    * any streaming shape              → plain client call only

All rules are name based.  The verb and keyword tables are fixed.
"""

from __future__ import annotations

import logging
from typing import FrozenSet, Optional, Set, Tuple

from connectvue.models import (
    FieldKind,
    FileDescriptor,
    GenerationConfig,
    MessageDescriptor,
    MethodDescriptor,
    MethodKind,
    RpcViewModel,
)
from connectvue.resolver import ImportAccumulator, resolve_type
from connectvue.utils import lower_first

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("connectvue.classifier")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Order matters for derive_resource(): the last matching verb wins.
MUTATION_VERBS: Tuple[str, ...] = (
    "Create",
    "Update",
    "Delete",
    "Remove",
    "Patch",
    "Post",
    "Set",
    "Add",
)

PAGINATION_KEYS: FrozenSet[str] = frozenset({
    "page",
    "offset",
    "cursor",
    "limit",
    "pagesize",
    "pagenumber",
})

LIST_ALL_PREFIX: str = "ListAll"


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------


def is_paginated(
    message: MessageDescriptor,
    visited: Optional[Set[str]] = None,
) -> bool:
    """
    True if *message*, or any message nested in it through message-typed
    fields, declares a field named like a paging parameter.

    *visited* holds the type names already entered during this top-level
    call; a message seen again yields False.  When a cycle leads back to the
    entry message this can miss a keyword found only along that cycle.
    """
    if visited is None:
        visited = set()
    if message.type_name in visited:
        return False
    visited.add(message.type_name)

    for fld in message.fields:
        if fld.name.lower() in PAGINATION_KEYS:
            return True
        if fld.field_kind == FieldKind.MESSAGE and fld.message is not None:
            if is_paginated(fld.message, visited):
                return True
    return False


# ---------------------------------------------------------------------------
# Naming heuristics
# ---------------------------------------------------------------------------


def is_mutation(method_name: str) -> bool:
    """True if *method_name* starts with one of ``MUTATION_VERBS``."""
    return any(method_name.startswith(verb) for verb in MUTATION_VERBS)


def derive_resource(method_name: str) -> str:
    """
    Resource key used to group cache invalidation.

    Every verb in ``MUTATION_VERBS`` that prefixes the name is removed
    everywhere in the name, and a later match replaces an earlier one.
    ``ListAll`` is checked last and overrides the verb result.

    Examples:
        >>> derive_resource("CreateTicket")
        'Ticket'
        >>> derive_resource("ListAllTickets")
        'Tickets'
        >>> derive_resource("GetTicket")
        'GetTicket'
        >>> derive_resource("AddressAdd")
        'ress'
    """
    resource: str = method_name
    for verb in MUTATION_VERBS:
        if method_name.startswith(verb):
            resource = method_name.replace(verb, "")
    if method_name.startswith(LIST_ALL_PREFIX):
        resource = method_name.replace(LIST_ALL_PREFIX, "")
    return resource


# ---------------------------------------------------------------------------
# Method classification
# ---------------------------------------------------------------------------


def classify_method(
    method: MethodDescriptor,
    owning_file: FileDescriptor,
    accumulator: ImportAccumulator,
    config: Optional[GenerationConfig] = None,
) -> RpcViewModel:
    """Build the view-model record for one RPC."""
    config = config or GenerationConfig()

    input_type: str = resolve_type(method.input, owning_file, accumulator, config)
    output_type: str = resolve_type(method.output, owning_file, accumulator, config)

    function_name: str = lower_first(method.name)
    mutation: bool = is_mutation(method.name)
    unary: bool = method.method_kind == MethodKind.UNARY
    query: bool = unary and not mutation
    paginated: bool = query and is_paginated(method.input)

    rpc = RpcViewModel(
        function_name=function_name,
        hook_name=f"{config.hook_prefix}{method.name}",
        query_definition_name=function_name,
        resource=derive_resource(method.name),
        input_type=input_type,
        output_type=output_type,
        method_kind=method.method_kind,
        is_unary=unary,
        is_mutation=mutation,
        is_query=query,
        is_paginated=paginated,
    )
    logger.debug(
        "Classified %s: kind=%s query=%s paginated=%s mutation=%s resource=%s.",
        method.name,
        method.method_kind.name,
        query,
        paginated,
        mutation,
        rpc.resource,
    )
    return rpc


__all__ = [
    "LIST_ALL_PREFIX",
    "MUTATION_VERBS",
    "PAGINATION_KEYS",
    "classify_method",
    "derive_resource",
    "is_mutation",
    "is_paginated",
]
