"""Tests for the listener thread."""

import queue

from irc_logger.errors import SessionError, exit_status
from irc_logger.listener import Listener
from irc_logger.models import LogRecord
from irc_logger.pipeline import Pipeline

from fakes import FakeCollection, FakeSession, SequenceClock


def _drain(q: queue.Queue) -> list:
    items = []
    while True:
        try:
            items.append(q.get_nowait())
        except queue.Empty:
            return items


def _run(session, clock=None, debug=False):
    records, errors = queue.Queue(), queue.Queue(maxsize=1)
    listener = Listener(session, records, errors, debug=debug,
                        clock=clock or SequenceClock(*range(1000, 1100)))
    listener.run()
    return listener, _drain(records), _drain(errors)


class TestRecordEmission:
    def test_records_in_receive_order(self):
        session = FakeSession(["A", "B", "C"])
        _, records, _ = _run(session, clock=SequenceClock(100, 101, 103))
        assert records == [LogRecord(100, "A"), LogRecord(101, "B"), LogRecord(103, "C")]

    def test_fractional_time_truncated(self):
        _, records, _ = _run(FakeSession(["PING :x"]), clock=SequenceClock(1700000000.9))
        assert records == [LogRecord(1700000000, "PING :x")]

    def test_emitted_count(self):
        listener, records, _ = _run(FakeSession([f"line-{i}" for i in range(50)]))
        assert listener.emitted == 50
        assert [r.text for r in records] == [f"line-{i}" for i in range(50)]


class TestFailure:
    def test_error_forwarded_once(self):
        error = SessionError("IRC session lost: Connection reset by peer")
        _, records, errors = _run(FakeSession(["A"], error=error))
        assert errors == [error]
        assert len(records) == 1

    def test_stops_after_failure(self):
        session = FakeSession(["A", "B"])
        _run(session)
        # Two events plus the failing call; nothing is read afterwards.
        assert session.next_calls == 3

    def test_failure_before_any_event(self):
        session = FakeSession([])
        listener, records, errors = _run(session)
        assert records == []
        assert len(errors) == 1
        assert listener.emitted == 0


class TestUnexpectedFailure:
    def test_identify_crash_reported_as_session_error(self):
        class CrashingSession(FakeSession):
            def identify(self):
                raise ValueError("Carriage returns not allowed in privmsg(text)")

        _, records, errors = _run(CrashingSession(["A", "B"]))
        assert len(errors) == 1
        assert isinstance(errors[0], SessionError)
        assert isinstance(errors[0].__cause__, ValueError)
        assert "Carriage returns" in str(errors[0])
        # The line that triggered the crash was already queued; nothing after it.
        assert [r.text for r in records] == ["A"]

    def test_render_crash_reported_as_session_error(self):
        class BadRenderSession(FakeSession):
            def render(self, event):
                raise IndexError("list index out of range")

        _, records, errors = _run(BadRenderSession(["A"]))
        assert records == []
        assert isinstance(errors[0].__cause__, IndexError)

    def test_pipeline_wait_returns_after_crash(self):
        class CrashingSession(FakeSession):
            def identify(self):
                raise ValueError("Message too long")

        pipeline = Pipeline(CrashingSession(["A"]), FakeCollection())
        error = pipeline.run()
        assert isinstance(error, SessionError)
        assert exit_status(error) == 1


class TestIdentify:
    def test_identify_once_after_first_event(self):
        session = FakeSession(["A", "B", "C"])
        _run(session)
        assert session.identify_calls == 1

    def test_no_identify_without_events(self):
        session = FakeSession([])
        _run(session)
        assert session.identify_calls == 0

    def test_identify_retried_until_success(self):
        session = FakeSession(["A", "B", "C", "D", "E"],
                              identify_results=[False, False, True])
        _run(session)
        assert session.identify_calls == 3

    def test_identify_never_succeeding_tried_every_event(self):
        session = FakeSession(["A", "B", "C"], identify_results=[False] * 3)
        _run(session)
        assert session.identify_calls == 3


class TestDebugOutput:
    def test_debug_prints_events(self, capsys):
        _run(FakeSession(["A", "B"]), debug=True)
        out = capsys.readouterr().out.splitlines()
        assert out == ["FakeEvent('A')", "FakeEvent('B')"]

    def test_quiet_without_debug(self, capsys):
        _run(FakeSession(["A", "B"]), debug=False)
        assert capsys.readouterr().out == ""


class TestThreaded:
    def test_runs_as_daemon_thread(self):
        records, errors = queue.Queue(), queue.Queue(maxsize=1)
        listener = Listener(FakeSession(["A", "B"]), records, errors)
        assert listener.daemon is True
        listener.start()
        error = errors.get(timeout=5)
        listener.join(timeout=5)
        assert isinstance(error, SessionError)
        assert not listener.is_alive()
        assert [r.text for r in _drain(records)] == ["A", "B"]
