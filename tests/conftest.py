"""
tests/conftest.py
Shared fixtures for the connectvue test suite.

Descriptor trees are built directly from the dataclasses in
``connectvue.models`` so most tests never touch the loaders.  File-based
fixtures write into pytest's tmp_path; no mocking libraries are used.
"""

from __future__ import annotations

import copy
import pathlib
from typing import Any, Dict, Optional

import pytest
import yaml

from connectvue.models import (
    DescriptorSet,
    FieldDescriptor,
    FieldKind,
    FileDescriptor,
    GenerationConfig,
    MessageDescriptor,
    MethodDescriptor,
    MethodKind,
    ServiceDescriptor,
)


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

ROOT_DIR: pathlib.Path = pathlib.Path(__file__).resolve().parent.parent
DESCRIPTOR_EXAMPLE_PATH: pathlib.Path = ROOT_DIR / "descriptor_example.yaml"


# ---------------------------------------------------------------------------
# Descriptor tree builders
# ---------------------------------------------------------------------------


def make_message(
    file_desc: FileDescriptor,
    name: str,
    *fields: FieldDescriptor,
    type_name: Optional[str] = None,
) -> MessageDescriptor:
    """Create a message in *file_desc* and register it there."""
    qualified = type_name or (f"{file_desc.package}.{name}" if file_desc.package else name)
    message = MessageDescriptor(type_name=qualified, name=name, file=file_desc, fields=list(fields))
    file_desc.messages.append(message)
    return message


def scalar(name: str) -> FieldDescriptor:
    return FieldDescriptor(name=name)


def message_field(name: str, message: MessageDescriptor, repeated: bool = False) -> FieldDescriptor:
    return FieldDescriptor(name=name, field_kind=FieldKind.MESSAGE, repeated=repeated, message=message)


def make_method(
    name: str,
    input_msg: MessageDescriptor,
    output_msg: MessageDescriptor,
    kind: MethodKind = MethodKind.UNARY,
) -> MethodDescriptor:
    return MethodDescriptor(name=name, input=input_msg, output=output_msg, method_kind=kind)


def well_known(name: str) -> MessageDescriptor:
    """A well-known type in its own canonical file."""
    file_desc = FileDescriptor(
        name=f"google/protobuf/{name.lower()}.proto", package="google.protobuf"
    )
    return make_message(file_desc, name)


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def config() -> GenerationConfig:
    return GenerationConfig()


# ---------------------------------------------------------------------------
# Ticket service fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def paging_file() -> FileDescriptor:
    """``common/v1/paging.proto`` holding a cursor-bearing PageWindow."""
    file_desc = FileDescriptor(name="common/v1/paging.proto", package="common.v1")
    make_message(file_desc, "PageWindow", scalar("cursor"), scalar("size"))
    return file_desc


@pytest.fixture()
def ticket_file(paging_file: FileDescriptor) -> FileDescriptor:
    """
    ``tickets/v1/ticket.proto`` with a TicketService covering every
    classification branch: paginated, nested-paginated, plain query,
    mutations, well-known types, an external type and a streaming RPC.
    """
    file_desc = FileDescriptor(name="tickets/v1/ticket.proto", package="tickets.v1")
    empty = well_known("Empty")
    page_window = paging_file.messages[0]

    ticket = make_message(file_desc, "Ticket", scalar("id"), scalar("title"))
    ticket.fields.append(message_field("parent", ticket))
    ticket_filter = make_message(
        file_desc, "TicketFilter", scalar("status"), message_field("window", page_window)
    )
    list_req = make_message(
        file_desc, "ListTicketsRequest", scalar("page"), message_field("filter", ticket_filter)
    )
    list_resp = make_message(
        file_desc, "ListTicketsResponse", message_field("tickets", ticket, repeated=True)
    )
    search_req = make_message(
        file_desc, "SearchTicketsRequest", scalar("query"), message_field("filter", ticket_filter)
    )
    get_req = make_message(file_desc, "GetTicketRequest", scalar("id"))
    create_req = make_message(file_desc, "CreateTicketRequest", scalar("title"), scalar("page"))
    update_req = make_message(file_desc, "UpdateTicketStatusRequest", scalar("id"), scalar("status"))
    watch_req = make_message(file_desc, "WatchTicketsRequest", scalar("ticket_id"))

    service = ServiceDescriptor(name="TicketService", file=file_desc)
    service.methods.extend([
        make_method("ListTickets", list_req, list_resp),
        make_method("SearchTickets", search_req, list_resp),
        make_method("GetTicket", get_req, ticket),
        make_method("CreateTicket", create_req, ticket),
        make_method("UpdateTicketStatus", update_req, ticket),
        make_method("DeleteTicket", get_req, empty),
        make_method("ListAllTickets", empty, list_resp),
        make_method("GetDefaultWindow", empty, page_window),
        make_method("WatchTickets", watch_req, ticket, MethodKind.SERVER_STREAMING),
    ])
    file_desc.services.append(service)
    return file_desc


@pytest.fixture()
def ticket_service(ticket_file: FileDescriptor) -> ServiceDescriptor:
    return ticket_file.services[0]


@pytest.fixture()
def ticket_descriptors(ticket_file: FileDescriptor, paging_file: FileDescriptor) -> DescriptorSet:
    return DescriptorSet(
        files=[paging_file, ticket_file],
        files_to_generate=[ticket_file.name],
    )


@pytest.fixture()
def two_service_descriptors() -> DescriptorSet:
    """Two files with one service each; only the first is ever generated."""
    alpha = FileDescriptor(name="alpha.proto", package="alpha")
    alpha_req = make_message(alpha, "PingRequest")
    alpha_resp = make_message(alpha, "PingResponse")
    alpha_svc = ServiceDescriptor(name="AlphaService", file=alpha)
    alpha_svc.methods.append(make_method("Ping", alpha_req, alpha_resp))
    alpha.services.append(alpha_svc)

    beta = FileDescriptor(name="beta.proto", package="beta")
    beta_req = make_message(beta, "PongRequest")
    beta_resp = make_message(beta, "PongResponse")
    beta_svc = ServiceDescriptor(name="BetaService", file=beta)
    beta_svc.methods.append(make_method("Pong", beta_req, beta_resp))
    beta_svc.methods.append(make_method("CreatePong", beta_req, beta_resp))
    beta.services.append(beta_svc)

    return DescriptorSet(files=[alpha, beta], files_to_generate=["alpha.proto", "beta.proto"])


# ---------------------------------------------------------------------------
# Cyclic message fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def cyclic_file() -> FileDescriptor:
    """
    ``Node`` references itself; ``A`` ↔ ``B`` reference each other.  None of
    them declares a paging field.
    """
    file_desc = FileDescriptor(name="graph.proto", package="graph")
    node = make_message(file_desc, "Node", scalar("id"))
    node.fields.append(message_field("next", node))
    node.fields.append(message_field("children", node, repeated=True))

    a = make_message(file_desc, "A", scalar("name"))
    b = make_message(file_desc, "B", scalar("label"))
    a.fields.append(message_field("b", b))
    b.fields.append(message_field("a", a))
    return file_desc


# ---------------------------------------------------------------------------
# Descriptor document fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def raw_descriptor_dict() -> Dict[str, Any]:
    """Load the reference descriptor_example.yaml once per session."""
    assert DESCRIPTOR_EXAMPLE_PATH.exists(), (
        f"Reference descriptor document not found at {DESCRIPTOR_EXAMPLE_PATH}."
    )
    with open(DESCRIPTOR_EXAMPLE_PATH, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    assert isinstance(data, dict), "Top-level YAML must be a mapping."
    return data


@pytest.fixture()
def descriptor_dict(raw_descriptor_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Deep copy so each test can mutate freely."""
    return copy.deepcopy(raw_descriptor_dict)


@pytest.fixture()
def descriptor_yaml_path(descriptor_dict: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    path = tmp_path / "descriptor.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(descriptor_dict, fh, default_flow_style=False, sort_keys=False)
    return path


@pytest.fixture()
def output_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    return tmp_path / "out"
