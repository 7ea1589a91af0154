"""Tests for prowl.persistence — XML round trip and restore."""

import os
from pathlib import Path

from conftest import GET_MAPPING, controller, member, user_controller

from prowl.errors import StalePersistedEntry
from prowl.persistence import (
    IndexPersistence,
    file_timestamp,
    member_signature,
    state_from_xml,
    state_to_xml,
    to_persisted,
)
from prowl.routing.route import IndexState, PersistedRoute
from prowl.scanner import scan_type, scan_workspace
from prowl.store import RouteSnapshot
from prowl.symbols.memory import MemberSymbol, SymbolTable


def _workspace(tmp_path: Path) -> tuple[SymbolTable, str]:
    """A table whose controller file actually exists on disk."""
    source = tmp_path / "UserController.java"
    source.write_text("class UserController {}\n")
    table = SymbolTable()
    table.put_file(str(source), [user_controller(str(source))])
    return table, str(source)


class TestMemberSignature:
    def test_with_params(self) -> None:
        m = MemberSymbol(name="getUser", file_path="x", params=("Long", "String"))
        assert member_signature(m) == "getUser(Long,String)"

    def test_no_params(self) -> None:
        assert member_signature(MemberSymbol(name="list", file_path="x")) == "list()"

    def test_to_persisted(self) -> None:
        route = scan_type(user_controller("src/U.java"))[0]
        entry = to_persisted(route)

        assert entry == PersistedRoute(
            method="GET",
            path="/api/users/{id}",
            class_name="UserController",
            member_name="getUser",
            module_name="user-service",
            file_path="src/U.java",
            member_signature="getUser(Long)",
        )


class TestXmlCodec:
    def test_round_trip(self) -> None:
        entry = to_persisted(scan_type(user_controller("src/U.java"))[0])
        state = IndexState(routes=(entry,), file_timestamps={"src/U.java": 1234}, last_index_time=99)

        assert state_from_xml(state_to_xml(state)) == state

    def test_bad_numbers_tolerated(self) -> None:
        root = state_to_xml(IndexState(file_timestamps={"a": 1}, last_index_time=5))
        root.set("lastIndexTime", "soon")
        root.find("fileTimestamps/file").set("timestamp", "never")

        state = state_from_xml(root)

        assert state.last_index_time == 0
        assert state.file_timestamps == {}


class TestSaveLoad:
    def test_save_then_load(self, tmp_path: Path) -> None:
        table, source = _workspace(tmp_path)
        store_path = tmp_path / ".prowl" / "route-index.xml"
        persistence = IndexPersistence(store_path, table)
        routes = scan_workspace(table)

        saved = persistence.save(routes, now=1_700_000_000_000)
        loaded = persistence.load()

        assert store_path.is_file()
        assert loaded == saved
        assert loaded.last_index_time == 1_700_000_000_000
        assert loaded.file_timestamps == {source: file_timestamp(source)}
        assert [e.member_signature for e in loaded.routes] == ["getUser(Long)", "createUser(User)"]

    def test_missing_file_loads_empty(self, tmp_path: Path) -> None:
        persistence = IndexPersistence(tmp_path / "nope.xml", SymbolTable())
        assert persistence.load().is_empty

    def test_corrupt_file_loads_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "route-index.xml"
        path.write_text("<routeIndex><routes>")
        persistence = IndexPersistence(path, SymbolTable())

        assert persistence.load() == IndexState()

    def test_write_through_saves_snapshot(self, tmp_path: Path) -> None:
        table, _ = _workspace(tmp_path)
        persistence = IndexPersistence(tmp_path / "idx.xml", table)
        snapshot = RouteSnapshot(routes=tuple(scan_workspace(table)))

        persistence.write_through(snapshot)

        assert len(persistence.load().routes) == 2

    def test_no_temp_files_left(self, tmp_path: Path) -> None:
        table, _ = _workspace(tmp_path)
        persistence = IndexPersistence(tmp_path / "store" / "idx.xml", table)
        persistence.save(scan_workspace(table))
        persistence.save(scan_workspace(table))

        assert os.listdir(tmp_path / "store") == ["idx.xml"]


class TestRestore:
    def test_round_trip(self, tmp_path: Path) -> None:
        table, _ = _workspace(tmp_path)
        persistence = IndexPersistence(tmp_path / "idx.xml", table)
        routes = scan_workspace(table)
        persistence.save(routes)

        restored = persistence.restore(persistence.load().routes)

        assert restored == routes
        assert all(a.owner is b.owner for a, b in zip(restored, routes, strict=True))

    def test_deleted_file_dropped(self, tmp_path: Path) -> None:
        table, source = _workspace(tmp_path)
        other = str(tmp_path / "OrderController.java")
        table.put_file(
            other,
            [controller("OrderController", other, (member("list", other, GET_MAPPING, value='"/orders"'),))],
        )
        persistence = IndexPersistence(tmp_path / "idx.xml", table)
        persistence.save(scan_workspace(table))

        table.delete_file(source)
        restored = persistence.restore(persistence.load().routes)

        assert [r.member_name for r in restored] == ["list"]

    def test_changed_signature_dropped(self, tmp_path: Path) -> None:
        table, source = _workspace(tmp_path)
        persistence = IndexPersistence(tmp_path / "idx.xml", table)
        persistence.save(scan_workspace(table))

        edited = controller(
            "UserController",
            source,
            (
                member("getUser", source, GET_MAPPING, params=("String",), value='"/{id}"'),
                member("createUser", source, "org.springframework.web.bind.annotation.PostMapping", params=("User",)),
            ),
            prefix="/api/users",
        )
        table.put_file(source, [edited])
        restored = persistence.restore(persistence.load().routes)

        assert [r.member_name for r in restored] == ["createUser"]

    def test_renamed_type_dropped(self, tmp_path: Path) -> None:
        table, source = _workspace(tmp_path)
        persistence = IndexPersistence(tmp_path / "idx.xml", table)
        persistence.save(scan_workspace(table))
        table.put_file(source, [controller("AccountController", source, ())])

        assert persistence.restore(persistence.load().routes) == []

    def test_member_found_in_later_type_with_same_name(self, tmp_path: Path) -> None:
        table, source = _workspace(tmp_path)
        persistence = IndexPersistence(tmp_path / "idx.xml", table)
        routes = scan_workspace(table)
        persistence.save(routes)
        table.put_file(source, [controller("UserController", source, ()), user_controller(source)])

        restored = persistence.restore(persistence.load().routes)

        assert [r.member_name for r in restored] == [r.member_name for r in routes]

    def test_stale_entry_describes_itself(self) -> None:
        exc = StalePersistedEntry("src/U.java", "get(Long)", "member not found")
        assert str(exc) == "src/U.java#get(Long): member not found"


class TestDriftedFiles:
    def test_unchanged(self, tmp_path: Path) -> None:
        table, _ = _workspace(tmp_path)
        persistence = IndexPersistence(tmp_path / "idx.xml", table)
        state = persistence.save(scan_workspace(table))

        assert IndexPersistence.drifted_files(state) == set()

    def test_modified_and_vanished(self, tmp_path: Path) -> None:
        table, source = _workspace(tmp_path)
        persistence = IndexPersistence(tmp_path / "idx.xml", table)
        state = IndexState(
            routes=tuple(to_persisted(r) for r in scan_workspace(table)),
            file_timestamps={source: file_timestamp(source) - 5000, str(tmp_path / "Gone.java"): 1},
        )

        assert IndexPersistence.drifted_files(state) == {source, str(tmp_path / "Gone.java")}
        assert persistence.path.name == "idx.xml"
