"""
Unit tests for record normalization
"""
import json

import pandas as pd
import pytest

from tracetimeline.errors import (
    EmptyTraceError,
    InvalidFilterConfigError,
    LoadFailure,
    MalformedRecordError,
    UnmatchedEventError,
    user_message,
)
from tracetimeline.models import TimeUnit
from tracetimeline.parsing import normalize, detect_format


@pytest.mark.unit
class TestDurationRecords:
    """Test duration-form normalization."""

    def test_duration_invariant(self, sample_trace):
        """Every interval satisfies duration == end - start and end >= start."""
        for interval in sample_trace.intervals:
            assert interval.duration == interval.end - interval.start
            assert interval.end >= interval.start

    def test_input_order_preserved(self, duration_records):
        """Intervals keep input order, not time order."""
        records = list(reversed(duration_records))
        trace = normalize(records)

        assert [iv.base_name for iv in trace.intervals] == [r["name"] for r in records]
        assert [iv.index for iv in trace.intervals] == list(range(len(records)))

    def test_occurrences_count_repeats_in_input_order(self):
        """N records sharing a name are numbered 1..N."""
        records = [
            {"name": "MEM_load", "duration": 1},
            {"name": "ARITH_add", "duration": 1},
            {"name": "MEM_load", "duration": 1},
            {"name": "MEM_load", "duration": 1},
        ]
        trace = normalize(records)

        mem = [iv.occurrence for iv in trace.intervals if iv.base_name == "MEM_load"]
        assert mem == [1, 2, 3]
        assert trace.intervals[1].occurrence == 1

    def test_running_cursor_for_missing_start(self):
        """Records without a start follow each other back to back."""
        trace = normalize([
            {"name": "A", "duration": 10},
            {"name": "B", "start": 100, "duration": 5},
            {"name": "C", "duration": 2},
        ])

        spans = [(iv.start, iv.end) for iv in trace.intervals]
        assert spans == [(0, 10), (100, 105), (10, 12)]

    def test_end_takes_precedence_over_duration(self):
        """An explicit end wins; duration is recomputed from it."""
        trace = normalize([{"name": "A", "start": 5, "duration": 100, "end": 8}])

        interval = trace.intervals[0]
        assert (interval.start, interval.end, interval.duration) == (5, 8, 3)

    def test_malformed_records_skipped(self):
        """A record missing its duration does not abort the trace."""
        trace = normalize([
            {"name": "A", "duration": 5},
            {"name": "B"},
            {"name": "C", "duration": "abc"},
            {"name": "D", "duration": 3},
            "not a record",
        ])

        assert [iv.base_name for iv in trace.intervals] == ["A", "D"]
        assert [(iv.start, iv.end) for iv in trace.intervals] == [(0, 5), (5, 8)]
        assert len(trace.diagnostics) == 3
        assert "Record 1" in trace.diagnostics[0]

    def test_end_before_start_is_malformed(self):
        """end < start is skipped rather than reordered."""
        trace = normalize([
            {"name": "A", "start": 10, "end": 5},
            {"name": "B", "start": 0, "duration": 1},
        ])

        assert [iv.base_name for iv in trace.intervals] == ["B"]

    def test_missing_name_is_unknown(self):
        """Records without a name fall into the UNKNOWN category."""
        trace = normalize([{"duration": 5}])

        interval = trace.intervals[0]
        assert interval.base_name == "UNKNOWN"
        assert interval.category == "UNKNOWN"
        assert interval.subtask == ""

    def test_category_and_subtask(self, sample_trace):
        """Category is the prefix before the first separator."""
        interval = sample_trace.intervals[0]
        assert interval.category == "MAIN"
        assert interval.subtask == "setup"

    def test_extra_fields_carried(self, sample_trace, duration_records):
        """Unknown fields pass through untouched."""
        interval = sample_trace.intervals[1]
        assert interval.extra == {"addr": "0x10"}
        assert interval.original == duration_records[1]

    def test_display_name(self, sample_trace):
        """Display name combines name, occurrence and duration."""
        assert sample_trace.intervals[3].display_name == "MEM_load #2 (20 ns)"

    def test_float_values_rounded(self):
        """Float times are rounded to whole canonical units."""
        trace = normalize([{"name": "A", "start": 1.4, "duration": 2.6}])

        interval = trace.intervals[0]
        assert (interval.start, interval.end) == (1, 4)


@pytest.mark.unit
class TestEventStream:
    """Test begin/end event reconstruction."""

    def test_single_pair(self):
        """h=1000 with begin at 0 and end at 50 gives [1000, 1050]."""
        trace = normalize({"h": 1000, "t": ["A"], "d": [[0, 0, 0], [0, 1, 50]]})

        assert len(trace) == 1
        interval = trace.intervals[0]
        assert (interval.start, interval.end, interval.duration) == (1000, 1050, 50)
        assert trace.source_format == "events"

    def test_events_sorted_by_time(self):
        """Out-of-order events are processed by absolute time."""
        trace = normalize({
            "t": ["X_a", "Y_b"],
            "d": [[1, 0, 20], [0, 0, 0], [1, 1, 30], [0, 1, 10]],
        })

        assert [(iv.base_name, iv.start, iv.end) for iv in trace.intervals] == [
            ("X_a", 0, 10),
            ("Y_b", 20, 30),
        ]

    def test_full_payload(self, event_payload):
        """Force-closed and ongoing intervals in begin order."""
        trace = normalize(event_payload)

        summary = [(iv.base_name, iv.occurrence, iv.start, iv.end, iv.ongoing) for iv in trace.intervals]
        assert summary == [
            ("ROM_fetch", 1, 1000, 1020, False),
            ("HASHFN_round", 1, 1005, 1060, False),
            ("ROM_fetch", 2, 1030, 1045, False),
            ("HASHFN_round", 2, 1060, 1160, True),
        ]
        assert len(trace.diagnostics) == 2

    def test_consecutive_begins_force_close(self):
        """A second begin closes the open interval at the new begin time."""
        trace = normalize({"t": ["MEM_x"], "d": [[0, 0, 0], [0, 0, 10], [0, 1, 25]]})

        assert [(iv.start, iv.end) for iv in trace.intervals] == [(0, 10), (10, 25)]
        assert [iv.occurrence for iv in trace.intervals] == [1, 2]

    def test_unmatched_end_dropped(self):
        """An end without a begin is dropped with a diagnostic."""
        trace = normalize({"t": ["A", "B"], "d": [[1, 1, 5], [0, 0, 0], [0, 1, 10]]})

        assert [iv.base_name for iv in trace.intervals] == ["A"]
        assert any("no matching begin" in message for message in trace.diagnostics)

    @pytest.mark.parametrize("synthetic_span,expected_end", [(100, 140), (7, 47), (0, 40)])
    def test_synthetic_span(self, synthetic_span, expected_end):
        """Unclosed begins get a configurable synthetic end."""
        trace = normalize({"t": ["A"], "d": [[0, 0, 40]]}, synthetic_span=synthetic_span)

        interval = trace.intervals[0]
        assert interval.ongoing is True
        assert interval.end == expected_end

    def test_malformed_events_skipped(self):
        """Bad task indexes and actions are skipped."""
        trace = normalize({
            "t": ["A"],
            "d": [[5, 0, 0], [0, 7, 0], [0, 0], [0, 0, 1], [0, 1, 4]],
        })

        assert [(iv.start, iv.end) for iv in trace.intervals] == [(1, 4)]
        assert len(trace.diagnostics) == 3

    def test_task_color_kept_in_original(self, event_payload):
        """Task table colors are retained for downstream consumers."""
        trace = normalize(event_payload)

        assert trace.intervals[0].original["task"]["color"] == "#112233"
        assert trace.intervals[0].extra == {"color": "#112233"}

    def test_bad_epoch_is_load_failure(self):
        """A malformed payload-level field fails the whole load."""
        with pytest.raises(LoadFailure):
            normalize({"h": "soon", "t": ["A"], "d": [[0, 0, 0]]})


@pytest.mark.unit
class TestTaskEvents:
    """Test task-keyed event objects with a task table."""

    @pytest.fixture
    def task_events(self):
        return {
            "epoch": 1000,
            "tasks": [
                {"id": 7, "name": "ROM_fetch", "color": "#112233"},
                {"id": 9, "name": "HASHFN_round"},
            ],
            "events": [
                {"taskId": 7, "action": "begin", "offsetFromEpoch": 0},
                {"taskId": 9, "action": "begin", "offsetFromEpoch": 5},
                {"taskId": 7, "action": "end", "offsetFromEpoch": 20},
                {"taskId": 9, "action": "end", "offsetFromEpoch": 45},
                {"taskId": 3, "action": "begin", "offsetFromEpoch": 50},
            ],
        }

    def test_pairs_by_task_id(self, task_events):
        trace = normalize(task_events)

        summary = [(iv.base_name, iv.start, iv.end) for iv in trace.intervals]
        assert summary == [("ROM_fetch", 1000, 1020), ("HASHFN_round", 1005, 1045)]
        assert trace.source_format == "task_events"
        assert trace.intervals[0].extra == {"color": "#112233"}

    def test_unknown_task_id_skipped(self, task_events):
        trace = normalize(task_events)
        assert any("unknown taskId 3" in d for d in trace.diagnostics)

    def test_json_text(self, task_events):
        assert len(normalize(json.dumps(task_events))) == 2

    def test_bare_event_list(self):
        """Without a task table, events carry their own names."""
        trace = normalize([
            {"taskId": 1, "name": "MEM_load", "action": "begin", "offsetFromEpoch": 10},
            {"taskId": 1, "name": "MEM_load", "action": "end", "offsetFromEpoch": 30},
            {"taskId": 2, "name": "ARITH_add", "action": "begin", "offsetFromEpoch": 15},
        ], synthetic_span=5)

        summary = [(iv.base_name, iv.start, iv.end, iv.ongoing) for iv in trace.intervals]
        assert summary == [("MEM_load", 10, 30, False), ("ARITH_add", 15, 20, True)]

    @pytest.mark.parametrize("action", ["stop", None, True])
    def test_bad_action_skipped(self, action):
        trace = normalize([
            {"taskId": 1, "name": "A_x", "action": "begin", "offsetFromEpoch": 0},
            {"taskId": 1, "name": "A_x", "action": action, "offsetFromEpoch": 3},
            {"taskId": 1, "name": "A_x", "action": "end", "offsetFromEpoch": 4},
        ])

        assert [(iv.start, iv.end) for iv in trace.intervals] == [(0, 4)]
        assert len(trace.diagnostics) == 1


@pytest.mark.unit
class TestTabular:
    """Test delimited begin/end tables."""

    def test_csv_text(self, csv_text):
        """Tasks are keyed by name and core; broken rows are skipped."""
        trace = normalize(csv_text)

        summary = [(iv.base_name, iv.occurrence, iv.start, iv.end) for iv in trace.intervals]
        assert summary == [
            ("MEM_read", 1, 0, 10),
            ("MEM_read", 2, 5, 20),
            ("ARITH_mul", 1, 12, 30),
        ]
        assert trace.source_format == "table"
        assert len(trace.diagnostics) == 1

    def test_optional_columns_in_extra(self, csv_text):
        """core_id and file_source are carried as extra fields."""
        trace = normalize(csv_text)

        assert trace.intervals[1].extra["core_id"] == 1
        assert trace.intervals[1].extra["file_source"] == "a.log"

    def test_semicolon_dataframe_and_path(self, csv_text, tmp_path):
        """Semicolon text, DataFrames and file paths are all accepted."""
        semicolon = csv_text.replace(",", ";")
        path = tmp_path / "trace.csv"
        path.write_text(semicolon)

        from_text = normalize(semicolon)
        from_path = normalize(path)
        from_frame = normalize(pd.DataFrame({
            "timestamp": [0, 10],
            "task_name": ["MAIN_run", "MAIN_run"],
            "action": ["begin", "end"],
        }))

        assert len(from_text) == 3
        assert len(from_path) == 3
        assert [(iv.start, iv.end) for iv in from_frame.intervals] == [(0, 10)]

    def test_epoch_nanoseconds_stay_exact(self):
        """Timestamps beyond float precision survive a table with a broken row."""
        text = (
            "timestamp,task_name,action\n"
            "1700000000000000001,MEM_read,begin\n"
            "bad,MEM_read,end\n"
            "1700000000000000003,MEM_read,end\n"
        )
        trace = normalize(text)

        interval = trace.intervals[0]
        assert (interval.start, interval.end) == (1700000000000000001, 1700000000000000003)
        assert interval.duration == 2
        assert len(trace.diagnostics) == 1

    def test_epoch_nanoseconds_from_dataframe(self):
        frame = pd.DataFrame({
            "timestamp": [1700000000000000001, 1700000000000000004],
            "task_name": ["MAIN_run", "MAIN_run"],
            "action": ["begin", "end"],
        })
        assert normalize(frame).intervals[0].duration == 3

    def test_missing_columns(self):
        """A table without the required columns cannot load."""
        with pytest.raises(LoadFailure):
            normalize("time,name\n1,A\n")


@pytest.mark.unit
class TestNormalizeBoundary:
    """Test payload dispatch and fatal errors."""

    @pytest.mark.parametrize("payload", [[], None, "", {"d": []}, [{"name": "A"}]])
    def test_empty_trace(self, payload):
        """No valid intervals raises EmptyTraceError."""
        with pytest.raises(EmptyTraceError):
            normalize(payload)

    def test_json_text(self, duration_records):
        """JSON text is decoded before normalization."""
        trace = normalize(json.dumps(duration_records))
        assert len(trace) == 5

    def test_invalid_json(self):
        """Broken JSON is a load failure."""
        with pytest.raises(LoadFailure):
            normalize("[{broken")

    def test_unknown_shape(self):
        """Unrecognized payloads are rejected."""
        with pytest.raises(LoadFailure):
            normalize(42)

    @pytest.mark.parametrize("payload,expected", [
        ([], "duration"),
        ({"d": []}, "events"),
        ({"events": []}, "task_events"),
        ([{"taskId": 1, "action": "begin", "offsetFromEpoch": 0}], "task_events"),
        ("a,b\n", "table"),
        (pd.DataFrame(), "table"),
    ])
    def test_detect_format(self, payload, expected):
        assert detect_format(payload) == expected

    def test_time_unit_recorded(self, duration_records):
        """The canonical unit travels with the trace."""
        trace = normalize(duration_records, time_unit="us")

        assert trace.time_unit is TimeUnit.US
        assert trace.intervals[0].display_name == "MAIN_setup #1 (100.000 µs)"

    def test_invalid_synthetic_span(self, duration_records):
        with pytest.raises(ValueError):
            normalize(duration_records, synthetic_span=-1)


@pytest.mark.unit
class TestErrors:
    """Test error context and user-facing messages."""

    def test_record_index_in_message(self):
        error = MalformedRecordError("missing duration", record_index=3)
        assert error.record_index == 3
        assert str(error) == "Record 3: missing duration"

    def test_unmatched_event_context(self):
        error = UnmatchedEventError("MEM_load", 40)
        assert error.task == "MEM_load"
        assert "has no matching begin" in str(error)

    @pytest.mark.parametrize("error,prefix", [
        (EmptyTraceError(), "No valid data"),
        (InvalidFilterConfigError("bad window"), "Invalid filter: bad window"),
        (LoadFailure("HTTP 500"), "Could not load trace: HTTP 500"),
        (RuntimeError("boom"), "Unexpected error"),
    ])
    def test_user_message(self, error, prefix):
        assert user_message(error).startswith(prefix)
