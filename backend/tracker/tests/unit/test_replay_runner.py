"""Tests for the replay runner: decision-point steps, strict and lenient modes."""

import logging

import pytest

from tracker.logic.events import EventType
from tracker.logic.exceptions import InvalidDiscardError, InvalidStateError
from tracker.logic.melds import Pon
from tracker.logic.tiles import tiles_to_string
from tracker.replay.loader import load_events_from_string
from tracker.replay.models import ReplayError
from tracker.replay.runner import run_replay
from tracker.settings import TrackerSettings
from tracker.tests.helpers.events import as_log, start_kyoku_data

GAME = as_log(
    start_kyoku_data("123456789m1p234s"),
    {"type": "tsumo", "actor": 0, "pai": "1p"},
    {"type": "dahai", "actor": 0, "pai": "9m", "tsumogiri": False},
    {"type": "tsumo", "actor": 1, "pai": "?"},
    {"type": "dahai", "actor": 1, "pai": "1p", "tsumogiri": True},
    {"type": "pon", "actor": 0, "target": 1, "pai": "1p", "consumed": ["1p", "1p"]},
    {"type": "dahai", "actor": 0, "pai": "8m", "tsumogiri": False},
    {"type": "end_kyoku"},
)


@pytest.fixture
def events():
    return load_events_from_string(GAME)


class TestRunReplay:
    def test_records_decision_points_of_tracked_seat(self, events):
        trace = run_replay(events, seats=[0])

        assert trace.num_events == 8
        assert [(step.index, step.event_type, step.shanten) for step in trace.steps] == [
            (1, EventType.TSUMO, -1),
            (5, EventType.PON, 0),
        ]
        assert all(step.actor == 0 for step in trace.steps)

    def test_step_snapshot_is_taken_before_the_discard(self, events):
        trace = run_replay(events, seats=[0])

        pon_step = trace.steps[1]
        assert tiles_to_string(pon_step.snapshot.tehai) == "12345678m234s"
        assert isinstance(pon_step.snapshot.fuuros[0], Pon)

    def test_final_snapshot(self, events):
        trace = run_replay(events, seats=[0])

        (final,) = trace.final
        assert final.actor == 0
        assert tiles_to_string(final.tehai) == "1234567m234s"
        assert len(final.fuuros) == 1
        assert trace.steps_for(0) == trace.steps
        assert trace.steps_for(1) == ()

    def test_logs_summary(self, events, caplog):
        with caplog.at_level(logging.INFO):
            run_replay(events, seats=[0])

        record = next(r for r in caplog.records if r.msg["event"] == "replay finished")
        assert record.msg["num_steps"] == 2
        assert record.msg["num_skipped"] == 0

    def test_trace_search_wires_logging_observer(self, events, caplog):
        with caplog.at_level(logging.DEBUG):
            run_replay(events, seats=[0], settings=TrackerSettings(trace_search=True))

        assert any(r.msg["event"] == "search leaf" for r in caplog.records)

    def test_event_limit(self, events):
        with pytest.raises(ReplayError, match="more than 3 events") as exc_info:
            run_replay(events, seats=[0], settings=TrackerSettings(max_events=3))

        assert exc_info.value.step_index == 3


class TestStrictMode:
    def test_hidden_seat_aborts_replay(self, events):
        with pytest.raises(ReplayError) as exc_info:
            run_replay(events)

        error = exc_info.value
        assert error.step_index == 0
        assert error.event_type == EventType.START_KYOKU
        assert isinstance(error.cause, InvalidStateError)
        assert error.__cause__ is error.cause

    def test_inconsistent_discard_aborts_replay(self):
        events = load_events_from_string(
            as_log(
                start_kyoku_data("123456789m1p234s"),
                {"type": "dahai", "actor": 0, "pai": "C", "tsumogiri": False},
            ),
        )
        with pytest.raises(ReplayError, match=r"Replay error at event 1 \(dahai\)") as exc_info:
            run_replay(events, seats=[0])

        assert isinstance(exc_info.value.cause, InvalidDiscardError)


class TestLenientMode:
    def test_failures_are_skipped_per_seat(self, events, caplog):
        with caplog.at_level(logging.WARNING):
            trace = run_replay(events, settings=TrackerSettings(strict=False))

        assert trace.seats == (0, 1, 2, 3)
        assert (0, 1) in trace.skipped
        assert (3, 1) in trace.skipped
        assert (4, 1) in trace.skipped
        assert all(actor != 0 for _, actor in trace.skipped)
        assert len(trace.steps) == 2

        warnings = [r for r in caplog.records if r.msg["event"] == "replay event skipped"]
        assert len(warnings) == len(trace.skipped)
        assert warnings[0].msg["event_type"] == "start_kyoku"
