"""Tests for hotreload_core.file_watcher."""

import threading
import time

import pytest
from watchdog.events import DirModifiedEvent, FileCreatedEvent, FileModifiedEvent, FileMovedEvent
from watchdog.observers.polling import PollingObserver

from hotreload_core.config import HotReloadingConfig
from hotreload_core.file_watcher import HotReloadWatcher
from hotreload_core.models import WatchTargetConfig


class FakeObserver:
    """Records schedule calls instead of starting watchdog threads."""

    def __init__(self):
        self.scheduled = []
        self.started = False
        self.stopped = False

    def schedule(self, handler, path, recursive=False):
        self.scheduled.append((handler, path, recursive))
        return object()

    def start(self):
        self.started = True

    def stop(self):
        self.stopped = True

    def unschedule_all(self):
        self.scheduled.clear()

    def is_alive(self):
        return False

    def join(self, timeout=None):
        pass


def lambda_path(function_name, local_path, runtime="python3.12", **kwargs):
    return WatchTargetConfig(
        function_name=function_name,
        local_path=str(local_path),
        handler="handler.main",
        runtime=runtime,
        **kwargs,
    )


@pytest.fixture
def observers():
    return []


@pytest.fixture
def make_watcher(tmp_path, clock, observers):
    """Build a watcher wired to a fake observer, fake clock and list sink."""

    def _make(lambda_paths, enabled=True, interval=700):
        events = []

        def factory():
            observer = FakeObserver()
            observers.append(observer)
            return observer

        config = HotReloadingConfig(enabled=enabled, watch_interval_ms=interval, lambda_paths=lambda_paths)
        watcher = HotReloadWatcher(
            config,
            sink=events.append,
            project_root=tmp_path,
            clock=clock,
            observer_factory=factory,
        )
        return watcher, events

    return _make


def handler_for(observer, path):
    for handler, scheduled_path, _ in observer.scheduled:
        if scheduled_path == str(path):
            return handler
    raise AssertionError(f"{path} not scheduled")


class TestLifecycle:
    def test_start_watches_existing_directory(self, make_watcher, lambda_dir, observers):
        watcher, _ = make_watcher([lambda_path("orders", lambda_dir)])

        assert watcher.start_watching() is True
        assert watcher.is_watching
        assert watcher.watched_paths == [lambda_dir]
        assert observers[0].started
        assert observers[0].scheduled[0][1:] == (str(lambda_dir), True)

    def test_relative_path_resolved_against_project_root(self, make_watcher, lambda_dir):
        watcher, _ = make_watcher([lambda_path("orders", "lambdas/orders")])
        watcher.start_watching()
        assert watcher.watched_paths == [lambda_dir]

    def test_disabled_is_noop(self, make_watcher, lambda_dir, observers):
        watcher, _ = make_watcher([lambda_path("orders", lambda_dir)], enabled=False)
        assert watcher.start_watching() is False
        assert not watcher.is_watching
        assert observers == []

    def test_empty_lambda_paths(self, make_watcher, observers):
        watcher, _ = make_watcher([])
        assert watcher.start_watching() is False
        assert observers == []

    def test_missing_and_file_paths_skipped(self, make_watcher, tmp_path, lambda_dir, observers):
        not_a_dir = tmp_path / "file.py"
        not_a_dir.write_text("")
        watcher, _ = make_watcher(
            [
                lambda_path("missing", tmp_path / "missing"),
                lambda_path("file", not_a_dir),
                lambda_path("orders", lambda_dir),
            ]
        )

        assert watcher.start_watching() is True
        assert watcher.watched_paths == [lambda_dir]
        assert len(observers[0].scheduled) == 1

    def test_only_missing_paths_stays_idle(self, make_watcher, tmp_path, observers):
        watcher, _ = make_watcher([lambda_path("missing", tmp_path / "missing")])
        assert watcher.start_watching() is False
        assert not watcher.is_watching
        assert not observers[0].started

    def test_second_start_is_noop(self, make_watcher, lambda_dir, observers):
        watcher, _ = make_watcher([lambda_path("orders", lambda_dir)])
        watcher.start_watching()
        assert watcher.start_watching() is True
        assert len(observers) == 1

    def test_shared_path_registers_one_watch(self, make_watcher, lambda_dir, observers):
        watcher, _ = make_watcher([lambda_path("orders", lambda_dir), lambda_path("orders-v2", lambda_dir)])
        watcher.start_watching()

        assert len(observers[0].scheduled) == 1
        assert watcher.watched_paths == [lambda_dir]
        assert [t.function_name for t in watcher.targets] == ["orders", "orders-v2"]

    def test_stop_clears_everything(self, make_watcher, lambda_dir, observers):
        watcher, _ = make_watcher([lambda_path("orders", lambda_dir)])
        watcher.start_watching()
        watcher.stop_watching()

        assert not watcher.is_watching
        assert watcher.watched_paths == []
        assert observers[0].stopped
        assert observers[0].scheduled == []

    def test_stop_is_idempotent_and_safe_before_start(self, make_watcher, lambda_dir):
        watcher, _ = make_watcher([lambda_path("orders", lambda_dir)])
        watcher.stop_watching()
        watcher.start_watching()
        watcher.stop_watching()
        watcher.stop_watching()
        assert watcher.watched_paths == []

    def test_restart_after_stop_uses_fresh_observer(self, make_watcher, lambda_dir, observers):
        watcher, _ = make_watcher([lambda_path("orders", lambda_dir)])
        watcher.start_watching()
        watcher.stop_watching()
        assert watcher.start_watching() is True
        assert len(observers) == 2


class TestChangeHandling:
    def test_accepted_change_emits_event(self, make_watcher, lambda_dir, observers, clock):
        watcher, events = make_watcher([lambda_path("${HOTRELOAD_UNSET_FN}", lambda_dir)])
        watcher.start_watching()
        clock.advance(701)

        handler_for(observers[0], lambda_dir).dispatch(FileModifiedEvent(str(lambda_dir / "handler.py")))

        assert len(events) == 1
        event = events[0]
        assert event.function_name == "${HOTRELOAD_UNSET_FN}"
        assert event.local_path == lambda_dir
        assert event.changed_file == lambda_dir / "handler.py"
        assert event.handler == "handler.main"
        assert event.runtime == "python3.12"
        assert event.timestamp.tzinfo is not None

    def test_change_right_after_start_is_debounced(self, make_watcher, lambda_dir, observers):
        watcher, events = make_watcher([lambda_path("orders", lambda_dir)])
        watcher.start_watching()
        handler_for(observers[0], lambda_dir).dispatch(FileModifiedEvent(str(lambda_dir / "handler.py")))
        assert events == []

    def test_irrelevant_extension_ignored(self, make_watcher, lambda_dir, observers, clock):
        watcher, events = make_watcher([lambda_path("orders", lambda_dir)])
        watcher.start_watching()
        clock.advance(1000)

        handler = handler_for(observers[0], lambda_dir)
        handler.dispatch(FileModifiedEvent(str(lambda_dir / "notes.md")))
        handler.dispatch(FileModifiedEvent(str(lambda_dir / "Makefile")))
        assert events == []

        # Ignored events do not consume the debounce window
        handler.dispatch(FileModifiedEvent(str(lambda_dir / "handler.py")))
        assert len(events) == 1

    def test_directory_events_ignored(self, make_watcher, lambda_dir, observers, clock):
        watcher, events = make_watcher([lambda_path("orders", lambda_dir)])
        watcher.start_watching()
        clock.advance(1000)
        handler_for(observers[0], lambda_dir).dispatch(DirModifiedEvent(str(lambda_dir / "pkg.py")))
        assert events == []

    def test_missing_file_name_ignored(self, make_watcher, lambda_dir, clock):
        watcher, events = make_watcher([lambda_path("orders", lambda_dir)])
        watcher.start_watching()
        clock.advance(1000)
        assert watcher.handle_change(watcher._registry[lambda_dir], "") == []
        assert events == []

    def test_uppercase_extension_matches(self, make_watcher, lambda_dir, observers, clock):
        watcher, events = make_watcher([lambda_path("orders", lambda_dir)])
        watcher.start_watching()
        clock.advance(1000)
        handler_for(observers[0], lambda_dir).dispatch(FileCreatedEvent(str(lambda_dir / "pkg" / "UTIL.PY")))
        assert events[0].changed_file == lambda_dir / "pkg" / "UTIL.PY"

    def test_move_uses_destination(self, make_watcher, lambda_dir, observers, clock):
        watcher, events = make_watcher([lambda_path("orders", lambda_dir)])
        watcher.start_watching()
        clock.advance(1000)
        handler_for(observers[0], lambda_dir).dispatch(
            FileMovedEvent(str(lambda_dir / ".handler.py.swp"), str(lambda_dir / "handler.py"))
        )
        assert events[0].changed_file == lambda_dir / "handler.py"

    def test_burst_collapses_to_one_event(self, make_watcher, lambda_dir, observers, clock):
        watcher, events = make_watcher([lambda_path("orders", lambda_dir)])
        watcher.start_watching()
        clock.advance(1000)

        handler = handler_for(observers[0], lambda_dir)
        for i in range(10):
            handler.dispatch(FileModifiedEvent(str(lambda_dir / f"module_{i}.py")))
            clock.advance(50)
        assert len(events) == 1

        clock.advance(700)
        handler.dispatch(FileModifiedEvent(str(lambda_dir / "handler.py")))
        assert len(events) == 2

    def test_debounce_boundary(self, make_watcher, lambda_dir, observers, clock):
        watcher, events = make_watcher([lambda_path("orders", lambda_dir)], interval=100)
        watcher.start_watching()
        clock.advance(200)

        handler = handler_for(observers[0], lambda_dir)
        handler.dispatch(FileModifiedEvent(str(lambda_dir / "a.py")))
        clock.advance(99)
        handler.dispatch(FileModifiedEvent(str(lambda_dir / "a.py")))
        assert len(events) == 1

        clock.advance(2)
        handler.dispatch(FileModifiedEvent(str(lambda_dir / "a.py")))
        assert len(events) == 2

    def test_debounce_is_per_directory(self, make_watcher, tmp_path, observers, clock):
        first = tmp_path / "first"
        second = tmp_path / "second"
        first.mkdir()
        second.mkdir()
        watcher, events = make_watcher([lambda_path("first", first), lambda_path("second", second)])
        watcher.start_watching()
        clock.advance(1000)

        handler_for(observers[0], first).dispatch(FileModifiedEvent(str(first / "a.py")))
        handler_for(observers[0], second).dispatch(FileModifiedEvent(str(second / "a.py")))
        assert [e.function_name for e in events] == ["first", "second"]

    def test_shared_path_notifies_every_target(self, make_watcher, lambda_dir, observers, clock):
        watcher, events = make_watcher([lambda_path("orders", lambda_dir), lambda_path("orders-v2", lambda_dir)])
        watcher.start_watching()
        clock.advance(1000)

        handler_for(observers[0], lambda_dir).dispatch(FileModifiedEvent(str(lambda_dir / "handler.py")))

        assert sorted(e.function_name for e in events) == ["orders", "orders-v2"]
        assert {e.changed_file for e in events} == {lambda_dir / "handler.py"}

    def test_shared_path_filters_per_target(self, make_watcher, lambda_dir, observers, clock):
        watcher, events = make_watcher(
            [
                lambda_path("py-fn", lambda_dir),
                lambda_path("ts-fn", lambda_dir, runtime="nodejs20.x", file_extensions=[".ts"]),
            ]
        )
        watcher.start_watching()
        clock.advance(1000)

        handler = handler_for(observers[0], lambda_dir)
        handler.dispatch(FileModifiedEvent(str(lambda_dir / "index.ts")))
        assert [e.function_name for e in events] == ["ts-fn"]

        clock.advance(1000)
        handler.dispatch(FileModifiedEvent(str(lambda_dir / "handler.py")))
        assert [e.function_name for e in events] == ["ts-fn", "py-fn"]

    def test_failing_sink_does_not_break_watcher(self, tmp_path, lambda_dir, clock):
        def sink(event):
            raise RuntimeError("consumer exploded")

        config = HotReloadingConfig(enabled=True, lambda_paths=[lambda_path("orders", lambda_dir)])
        watcher = HotReloadWatcher(config, sink, project_root=tmp_path, clock=clock, observer_factory=FakeObserver)
        watcher.start_watching()
        clock.advance(1000)

        events = watcher.handle_change(watcher._registry[lambda_dir], str(lambda_dir / "handler.py"))
        assert len(events) == 1

    def test_concurrent_changes_accept_once(self, make_watcher, lambda_dir, clock):
        watcher, events = make_watcher([lambda_path("orders", lambda_dir)])
        watcher.start_watching()
        clock.advance(1000)
        entry = watcher._registry[lambda_dir]
        barrier = threading.Barrier(8)

        def fire():
            barrier.wait()
            watcher.handle_change(entry, str(lambda_dir / "handler.py"))

        threads = [threading.Thread(target=fire) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(events) == 1


def test_end_to_end_with_polling_observer(tmp_path, lambda_dir):
    """Real watchdog observer: a file write produces one event."""
    received = []
    arrived = threading.Event()

    def sink(event):
        received.append(event)
        arrived.set()

    config = HotReloadingConfig(enabled=True, watch_interval_ms=50, lambda_paths=[lambda_path("orders", lambda_dir)])
    watcher = HotReloadWatcher(
        config,
        sink,
        project_root=tmp_path,
        observer_factory=lambda: PollingObserver(timeout=0.1),
    )

    assert watcher.start_watching()
    try:
        time.sleep(0.3)
        (lambda_dir / "new_module.py").write_text("VALUE = 1\n")
        assert arrived.wait(timeout=5.0)
    finally:
        watcher.stop_watching()

    assert received[0].function_name == "orders"
    assert received[0].changed_file.name == "new_module.py"
    assert not watcher.is_watching
