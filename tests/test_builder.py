"""
tests/test_builder.py
Tests for connectvue.builder: service view model, companion modules and
first-service selection.
"""

from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from connectvue.builder import build_first_service, build_service_view_model, companion_modules
from connectvue.models import (
    DescriptorSet,
    FileDescriptor,
    GenerationConfig,
    ServiceDescriptor,
    ServiceViewModel,
)


class TestCompanionModules:
    def test_default_suffixes(self, ticket_service: ServiceDescriptor) -> None:
        pb, cq = companion_modules(ticket_service)
        assert pb == "tickets/v1/ticket_pb"
        assert cq == "tickets/v1/ticket-TicketService_connectquery"

    def test_custom_suffixes(self, ticket_service: ServiceDescriptor) -> None:
        config = GenerationConfig(pb_suffix="_pb2", connect_query_suffix="_cq")
        assert companion_modules(ticket_service, config) == (
            "tickets/v1/ticket_pb2",
            "tickets/v1/ticket-TicketService_cq",
        )

    def test_extension_only_stripped_at_end(self) -> None:
        f = FileDescriptor(name="my.proto.files/api.proto")
        svc = ServiceDescriptor(name="Api", file=f)
        assert companion_modules(svc)[0] == "my.proto.files/api_pb"


class TestBuildServiceViewModel:
    def test_methods_keep_declaration_order(self, ticket_service: ServiceDescriptor) -> None:
        vm = build_service_view_model(ticket_service)
        assert [r.function_name for r in vm.rpcs] == [
            "listTickets",
            "searchTickets",
            "getTicket",
            "createTicket",
            "updateTicketStatus",
            "deleteTicket",
            "listAllTickets",
            "getDefaultWindow",
            "watchTickets",
        ]

    def test_import_sets_flattened(self, ticket_service: ServiceDescriptor) -> None:
        vm = build_service_view_model(ticket_service)
        assert vm.service_name == "TicketService"
        assert vm.wkt_imports == ["Empty"]
        assert vm.local_imports == [
            "ListTicketsRequest",
            "ListTicketsResponse",
            "SearchTicketsRequest",
            "GetTicketRequest",
            "Ticket",
            "CreateTicketRequest",
            "UpdateTicketStatusRequest",
            "WatchTicketsRequest",
        ]
        [ext] = vm.external_imports
        assert ext.path == "./gen/../../common/v1/paging_pb"
        assert ext.types == ["PageWindow"]

    def test_list_all_is_plain_query(self, ticket_service: ServiceDescriptor) -> None:
        rpc = build_service_view_model(ticket_service).rpcs[6]
        assert rpc.function_name == "listAllTickets"
        assert rpc.is_query and not rpc.is_paginated
        assert rpc.resource == "Tickets"

    def test_deterministic(self, ticket_service: ServiceDescriptor) -> None:
        first = build_service_view_model(ticket_service).model_dump_json()
        second = build_service_view_model(ticket_service).model_dump_json()
        assert first == second

    def test_view_model_is_frozen(self, ticket_service: ServiceDescriptor) -> None:
        vm = build_service_view_model(ticket_service)
        with pytest.raises(ValidationError):
            vm.service_name = "Other"  # type: ignore[misc]

    def test_service_without_methods(self) -> None:
        f = FileDescriptor(name="empty.proto")
        vm = build_service_view_model(ServiceDescriptor(name="Nothing", file=f))
        assert vm.rpcs == []
        assert vm.local_imports == []


class TestBuildFirstService:
    def test_only_first_service(self, two_service_descriptors: DescriptorSet, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="connectvue.builder"):
            vm = build_first_service(two_service_descriptors)

        assert isinstance(vm, ServiceViewModel)
        assert vm.service_name == "AlphaService"
        assert [r.function_name for r in vm.rpcs] == ["ping"]
        assert "Pong" not in vm.local_imports
        assert "1 other service(s) ignored" in caplog.text

    def test_files_to_generate_order(self, two_service_descriptors: DescriptorSet) -> None:
        two_service_descriptors.files_to_generate = ["beta.proto", "alpha.proto"]
        vm = build_first_service(two_service_descriptors)
        assert vm is not None
        assert vm.service_name == "BetaService"

    def test_dependencies_not_generated(self, ticket_descriptors: DescriptorSet) -> None:
        vm = build_first_service(ticket_descriptors)
        assert vm is not None and vm.service_name == "TicketService"

    def test_no_service_returns_none(self, paging_file: FileDescriptor) -> None:
        assert build_first_service(DescriptorSet(files=[paging_file])) is None

    def test_empty_descriptor_set(self) -> None:
        assert build_first_service(DescriptorSet()) is None
