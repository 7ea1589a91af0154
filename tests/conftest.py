"""Shared pytest fixtures for the prowl test suite.

Builds small in-memory workspaces with ``SymbolTable`` and provides an
executor that runs scan jobs inline, so updater tests are deterministic.
"""

import threading
from collections.abc import Callable, Sequence
from concurrent.futures import Executor, Future
from typing import Any

import pytest

from prowl.annotations import CONTROLLER_ANNOTATIONS, MAPPING_ANNOTATIONS, REQUEST_MAPPING
from prowl.symbols.memory import Annotation, MemberSymbol, SymbolTable, TypeSymbol

_WEB_BIND = "org.springframework.web.bind.annotation"

REST_CONTROLLER = f"{_WEB_BIND}.RestController"
CONTROLLER = "org.springframework.stereotype.Controller"
GET_MAPPING = f"{_WEB_BIND}.GetMapping"
POST_MAPPING = f"{_WEB_BIND}.PostMapping"
DELETE_MAPPING = f"{_WEB_BIND}.DeleteMapping"

ALL_ANNOTATIONS = (*CONTROLLER_ANNOTATIONS, *MAPPING_ANNOTATIONS)


class ImmediateExecutor(Executor):
    """Runs every submitted callable on the caller's thread."""

    def submit(self, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Future[Any]:
        future: Future[Any] = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except BaseException as exc:
            future.set_exception(exc)
        return future


class BlockingTable(SymbolTable):
    """Holds every full scan until ``release`` is set."""

    __slots__ = ("entered", "release")

    def __init__(self) -> None:
        super().__init__()
        self.entered = threading.Event()
        self.release = threading.Event()

    def find_annotated_types(self, annotation: str) -> Sequence[TypeSymbol]:
        self.entered.set()
        self.release.wait(5)
        return super().find_annotated_types(annotation)


def member(
    name: str,
    file_path: str,
    mapping: str,
    *,
    params: tuple[str, ...] = (),
    offset: int = 0,
    **attributes: str,
) -> MemberSymbol:
    return MemberSymbol(
        name=name,
        file_path=file_path,
        annotations=(Annotation(mapping, **attributes),),
        params=params,
        offset=offset,
    )


def controller(
    name: str,
    file_path: str,
    members: tuple[MemberSymbol, ...],
    *,
    prefix: str | None = None,
    module: str | None = "shop.user-service.main",
    marker: str = REST_CONTROLLER,
) -> TypeSymbol:
    annotations = [Annotation(marker)]
    if prefix is not None:
        annotations.append(Annotation(REQUEST_MAPPING, value=f'"{prefix}"'))
    return TypeSymbol(
        name=name,
        file_path=file_path,
        annotations=tuple(annotations),
        members_=members,
        module=module,
    )


def user_controller(file_path: str = "src/UserController.java") -> TypeSymbol:
    """``/api/users`` controller with one GET and one POST route."""
    return controller(
        "UserController",
        file_path,
        (
            member("getUser", file_path, GET_MAPPING, params=("Long",), offset=120, value='"/{id}"'),
            member("createUser", file_path, POST_MAPPING, params=("User",), offset=240),
        ),
        prefix="/api/users",
    )


@pytest.fixture
def table() -> SymbolTable:
    table = SymbolTable(known_annotations=ALL_ANNOTATIONS)
    table.put_file("src/UserController.java", [user_controller()])
    return table


@pytest.fixture
def executor() -> ImmediateExecutor:
    return ImmediateExecutor()
