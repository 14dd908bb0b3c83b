# File: connectvue/builder.py
"""
protoc-gen-connect-vue - Service View-Model Builder
====================================================
Turns one ``ServiceDescriptor`` into the ``ServiceViewModel`` consumed by the
templates.  One ``ImportAccumulator`` is shared by every method of the
service; methods keep their declaration order.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from connectvue.classifier import classify_method
from connectvue.models import (
    DescriptorSet,
    GenerationConfig,
    RpcViewModel,
    ServiceDescriptor,
    ServiceViewModel,
)
from connectvue.resolver import ImportAccumulator
from connectvue.utils import strip_suffix

logger: logging.Logger = logging.getLogger("connectvue.builder")


def companion_modules(
    service: ServiceDescriptor,
    config: Optional[GenerationConfig] = None,
) -> Tuple[str, str]:
    """
    Stems of the two generated modules the output depends on: the message
    module and the connect-query method definitions module.

    Example:
        ``tickets/v1/ticket.proto`` / ``TicketService`` →
        (``tickets/v1/ticket_pb``, ``tickets/v1/ticket-TicketService_connectquery``)
    """
    config = config or GenerationConfig()
    stem: str = strip_suffix(service.file.name, config.proto_suffix)
    return (
        f"{stem}{config.pb_suffix}",
        f"{stem}-{service.name}{config.connect_query_suffix}",
    )


def build_service_view_model(
    service: ServiceDescriptor,
    config: Optional[GenerationConfig] = None,
) -> ServiceViewModel:
    """Classify every method of *service* and collect the imports they need."""
    config = config or GenerationConfig()
    accumulator: ImportAccumulator = ImportAccumulator()

    rpcs: List[RpcViewModel] = [
        classify_method(method, service.file, accumulator, config)
        for method in service.methods
    ]
    proto_pb_file, connect_query_file = companion_modules(service, config)

    view_model = ServiceViewModel(
        service_name=service.name,
        proto_pb_file=proto_pb_file,
        connect_query_file=connect_query_file,
        rpcs=rpcs,
        wkt_imports=accumulator.flatten_wkt(),
        local_imports=accumulator.flatten_local(),
        external_imports=accumulator.flatten_external(),
    )
    logger.info(
        "Built view model for %s: %d rpcs, %d well-known, %d local, %d external import paths.",
        service.type_name,
        len(rpcs),
        len(view_model.wkt_imports),
        len(view_model.local_imports),
        len(view_model.external_imports),
    )
    return view_model


def build_first_service(
    descriptors: DescriptorSet,
    config: Optional[GenerationConfig] = None,
) -> Optional[ServiceViewModel]:
    """
    View model of the first service declared across the generated files,
    or None when there is no service at all.
    """
    service: Optional[ServiceDescriptor] = descriptors.first_service()
    if service is None:
        logger.info("No service found in %d file(s); nothing to generate.",
                    len(descriptors.generated_files()))
        return None

    skipped: int = sum(len(f.services) for f in descriptors.generated_files()) - 1
    if skipped:
        logger.warning(
            "Only the first service (%s) is generated; %d other service(s) ignored.",
            service.type_name,
            skipped,
        )
    return build_service_view_model(service, config)


__all__ = [
    "build_first_service",
    "build_service_view_model",
    "companion_modules",
]
