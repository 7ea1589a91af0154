"""Tests for prowl.watch and the debouncer behind it."""

import threading
import time
from pathlib import Path

from watchdog.events import FileCreatedEvent, FileDeletedEvent, FileModifiedEvent, FileMovedEvent

from prowl._internal.debounce import Debouncer
from prowl.events import ChangeEvent, ChangeKind
from prowl.watch import WorkspaceWatcher, _ChangeHandler


class TestDebouncer:
    def test_flush_delivers_batch_once(self) -> None:
        batches: list[list[str]] = []
        debouncer = Debouncer(60.0, batches.append)

        debouncer.push("a")
        debouncer.push("b")
        debouncer.push("a")
        debouncer.flush()
        debouncer.flush()

        assert batches == [["a", "b"]]

    def test_latest_item_per_key_kept(self) -> None:
        batches: list[list[ChangeEvent]] = []
        debouncer = Debouncer(60.0, batches.append, key=lambda e: e.path)

        debouncer.push(ChangeEvent("A.java", ChangeKind.CREATED))
        debouncer.push(ChangeEvent("A.java", ChangeKind.MODIFIED))
        debouncer.flush()

        assert batches == [[ChangeEvent("A.java", ChangeKind.MODIFIED)]]

    def test_cancel_drops_pending(self) -> None:
        batches: list[list[str]] = []
        debouncer = Debouncer(60.0, batches.append)

        debouncer.push("a")
        debouncer.cancel()
        debouncer.flush()

        assert batches == []

    def test_timer_fires_after_quiet_period(self) -> None:
        delivered = threading.Event()
        batches: list[list[str]] = []

        def deliver(batch: list[str]) -> None:
            batches.append(batch)
            delivered.set()

        debouncer = Debouncer(0.01, deliver)
        debouncer.push("a")

        assert delivered.wait(5)
        assert batches == [["a"]]

    def test_callback_error_logged_not_raised(self) -> None:
        def boom(_batch: list[str]) -> None:
            raise RuntimeError("nope")

        debouncer = Debouncer(60.0, boom)
        debouncer.push("a")
        debouncer.flush()


class TestChangeHandler:
    def _handler(self) -> tuple[_ChangeHandler, list[ChangeEvent]]:
        seen: list[ChangeEvent] = []
        return _ChangeHandler(seen.append, (".java", ".kt")), seen

    def test_kinds_mapped(self) -> None:
        handler, seen = self._handler()

        handler.on_created(FileCreatedEvent("/ws/A.java"))
        handler.on_modified(FileModifiedEvent("/ws/B.kt"))
        handler.on_deleted(FileDeletedEvent("/ws/C.java"))

        assert seen == [
            ChangeEvent("/ws/A.java", ChangeKind.CREATED),
            ChangeEvent("/ws/B.kt", ChangeKind.MODIFIED),
            ChangeEvent("/ws/C.java", ChangeKind.DELETED),
        ]

    def test_move_is_delete_plus_create(self) -> None:
        handler, seen = self._handler()

        handler.on_moved(FileMovedEvent("/ws/Old.java", "/ws/New.java"))

        assert seen == [
            ChangeEvent("/ws/Old.java", ChangeKind.DELETED),
            ChangeEvent("/ws/New.java", ChangeKind.CREATED),
        ]

    def test_other_files_and_build_dirs_ignored(self) -> None:
        handler, seen = self._handler()

        handler.on_modified(FileModifiedEvent("/ws/README.md"))
        handler.on_modified(FileModifiedEvent("/ws/build/gen/A.java"))
        handler.on_modified(FileModifiedEvent("/ws/.git/A.java"))

        assert seen == []


class TestWorkspaceWatcher:
    def test_start_stop(self, tmp_path: Path) -> None:
        watcher = WorkspaceWatcher(tmp_path, lambda batch: None)

        watcher.start()
        assert watcher.is_running
        watcher.start()
        watcher.stop()
        assert not watcher.is_running
        watcher.stop()

    def test_delivers_debounced_batch(self, tmp_path: Path) -> None:
        received = threading.Event()
        batches: list[list[ChangeEvent]] = []

        def on_batch(batch: list[ChangeEvent]) -> None:
            batches.append(batch)
            received.set()

        watcher = WorkspaceWatcher(tmp_path, on_batch, debounce=0.05)
        watcher.start()
        try:
            time.sleep(0.1)
            (tmp_path / "UserController.java").write_text("class UserController {}\n")
            assert received.wait(5)
        finally:
            watcher.stop()

        paths = {Path(e.path).name for batch in batches for e in batch}
        assert "UserController.java" in paths
