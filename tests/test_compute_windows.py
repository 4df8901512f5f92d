from datetime import datetime, timedelta

import pytest

from compute_windows import (
    RangeError,
    build_signals_response,
    compare_scenarios,
    compute_signal_score,
    compute_windows,
    detect_signal_overlaps,
    find_current_window,
    find_next_safer_window,
    find_overlaps,
    generate_annotation,
    get_status_from_score,
    get_window_summary,
    group_windows_by_day,
    planning_range,
    sort_overlaps,
    window_edges,
)
from planner_config import DISCLAIMER, PLANNER_TZ

DAY_START = "2026-10-19T00:00:00+00:00"


def _utc(hour):
    return f"2026-10-19T{hour:02d}:00:00+00:00"


def _window(window_id, start_hour, status, score=0.0):
    return {
        "id": window_id,
        "time_range": {"start": _utc(start_hour), "end": _utc(start_hour + 2)},
        "status": status,
        "score": score,
        "annotation": "",
        "contributing_signals": [],
    }


class TestScoring:
    def test_signal_score_is_weight_times_multiplier(self, make_signal):
        assert compute_signal_score(make_signal("a", 0, 1, "high", "medium")) == 37.5
        assert compute_signal_score(make_signal("b", 0, 1, "low", "low")) == 5.0
        assert compute_signal_score(make_signal("c", 0, 1, "medium", "high")) == 30.0

    @pytest.mark.parametrize(
        "score,status",
        [(0, "safer"), (20, "safer"), (20.5, "caution"), (50, "caution"), (50.1, "avoid"), (100, "avoid")],
    )
    def test_status_thresholds(self, score, status):
        assert get_status_from_score(score) == status


class TestWindowEdges:
    def test_even_split(self):
        edges = window_edges(DAY_START, _utc(6))
        assert len(edges) == 3
        assert edges[0][0].isoformat() == DAY_START
        assert edges[-1][1].isoformat() == _utc(6)

    def test_last_window_truncated(self):
        edges = window_edges(DAY_START, _utc(5))
        assert [(s.hour, e.hour) for s, e in edges] == [(0, 2), (2, 4), (4, 5)]

    def test_empty_range(self):
        assert window_edges(_utc(4), _utc(4)) == []
        assert window_edges(_utc(4), _utc(2)) == []

    def test_non_positive_duration_rejected(self):
        with pytest.raises(ValueError):
            window_edges(DAY_START, _utc(6), timedelta(0))


class TestComputeWindows:
    def test_ids_and_time_ranges(self):
        windows = compute_windows([], DAY_START, _utc(6))
        assert [w["id"] for w in windows] == ["window-0", "window-1", "window-2"]
        assert windows[1]["time_range"] == {"start": _utc(2), "end": _utc(4)}
        assert all(w["status"] == "safer" and w["score"] == 0 for w in windows)

    def test_signal_counts_in_every_overlapping_window(self, make_signal):
        signal = make_signal("a", 1, 3, "medium", "high")
        windows = compute_windows([signal], DAY_START, _utc(6))
        assert [w["score"] for w in windows] == [30.0, 30.0, 0.0]
        assert [w["status"] for w in windows] == ["caution", "caution", "safer"]
        assert windows[0]["contributing_signals"] == [signal]

    def test_touching_boundary_does_not_overlap(self, make_signal):
        signal = make_signal("a", 2, 4, "high", "high")
        windows = compute_windows([signal], DAY_START, _utc(6))
        assert windows[0]["contributing_signals"] == []
        assert windows[1]["score"] == 50.0
        assert windows[2]["contributing_signals"] == []

    def test_score_is_capped(self, make_signal):
        signals = [make_signal(f"s{i}", 0, 2, "high", "high") for i in range(3)]
        window = compute_windows(signals, DAY_START, _utc(2))[0]
        assert window["score"] == 100.0
        assert window["status"] == "avoid"
        assert len(window["contributing_signals"]) == 3

    def test_empty_range_gives_no_windows(self, make_signal):
        assert compute_windows([make_signal("a", 0, 2)], _utc(3), _utc(3)) == []

    def test_find_overlaps_keeps_input_order(self, make_signal):
        a = make_signal("a", 0, 5)
        b = make_signal("b", 6, 8)
        c = make_signal("c", 1, 2)
        assert find_overlaps([a, b, c], _utc(1), _utc(3)) == [a, c]


class TestAnnotations:
    def test_no_signals(self):
        assert generate_annotation([], "safer") == (
            "No known disruptions during this window. Good opportunity for outreach."
        )

    def test_high_disruption_lists_high_titles(self, make_signal):
        high = make_signal("a", 0, 2, "high", "high", title="Vermont Cleaning")
        medium = make_signal("b", 0, 2, "medium", "high")
        window = compute_windows([high, medium], DAY_START, _utc(2))[0]
        assert window["status"] == "avoid"
        assert window["annotation"] == (
            "High disruption: 1 high-impact signal(s): Vermont Cleaning; "
            "1 medium-impact signal(s). Consider rescheduling if possible."
        )

    def test_minor_activity(self, make_signal):
        low = make_signal("a", 0, 2, "low", "high")
        window = compute_windows([low], DAY_START, _utc(2))[0]
        assert window["annotation"] == (
            "Minor activity: 1 low-impact signal(s). Generally safe for outreach with awareness."
        )

    def test_moderate_disruption(self, make_signal):
        text = generate_annotation([make_signal("a", 0, 2, "medium", "high")], "caution")
        assert text.startswith("Moderate disruption: 1 medium-impact signal(s).")


class TestOverlapDetection:
    def test_only_significant_pairs(self, make_signal):
        a = make_signal("a", 0, 4, "medium")
        b = make_signal("b", 2, 6, "high")
        c = make_signal("c", 1, 5, "low")
        d = make_signal("d", 5, 7, "medium")
        overlaps = detect_signal_overlaps([a, b, c, d])
        assert [o["id"] for o in overlaps] == ["overlap-a-b", "overlap-b-d"]
        assert overlaps[0]["time_range"] == {"start": _utc(2), "end": _utc(4)}
        assert overlaps[0]["combined_impact"] == "high"
        assert overlaps[0]["signals"] == [a, b]

    def test_combined_medium(self, make_signal):
        overlaps = detect_signal_overlaps([make_signal("a", 0, 4), make_signal("b", 3, 5)])
        assert overlaps[0]["combined_impact"] == "medium"

    def test_touching_signals_do_not_overlap(self, make_signal):
        assert detect_signal_overlaps([make_signal("a", 0, 2), make_signal("b", 2, 4)]) == []

    def test_explanation(self, make_signal):
        a = make_signal("a", 0, 4, signal_type="sanitation", title="Cleaning")
        b = make_signal("b", 1, 3, signal_type="public_event", title="Market")
        explanation = detect_signal_overlaps([a, b])[0]["explanation"]
        assert explanation.startswith("Cleaning (sanitation activity) overlaps with Market (public event).")

    def test_sort_overlaps_by_start(self, make_signal):
        a = make_signal("a", 5, 8)
        b = make_signal("b", 6, 9)
        c = make_signal("c", 0, 3)
        d = make_signal("d", 1, 2)
        overlaps = detect_signal_overlaps([a, b, c, d])
        assert [o["id"] for o in sort_overlaps(overlaps)] == ["overlap-c-d", "overlap-a-b"]


class TestWindowQueries:
    def test_summary(self):
        windows = [_window("w0", 0, "safer", 0.0), _window("w1", 2, "caution", 30.0),
                   _window("w2", 4, "avoid", 100.0)]
        assert get_window_summary(windows) == {
            "total": 3, "safer": 1, "caution": 1, "avoid": 1, "average_score": 43,
        }

    def test_summary_rounds_half_up(self):
        windows = [_window("w0", 0, "safer", 0.0), _window("w1", 2, "safer", 15.0)]
        assert get_window_summary(windows)["average_score"] == 8
        windows = [_window("w0", 0, "safer", 0.0), _window("w1", 2, "caution", 25.0)]
        assert get_window_summary(windows)["average_score"] == 13

    def test_summary_empty(self):
        assert get_window_summary([]) == {
            "total": 0, "safer": 0, "caution": 0, "avoid": 0, "average_score": 0,
        }

    def test_next_safer_window_is_inclusive(self):
        windows = [_window("w4", 4, "safer"), _window("w0", 0, "safer"), _window("w2", 2, "avoid")]
        assert find_next_safer_window(windows, _utc(0))["id"] == "w0"
        assert find_next_safer_window(windows, _utc(1))["id"] == "w4"
        assert find_next_safer_window(windows, _utc(5)) is None

    def test_current_window(self):
        windows = [_window("w0", 0, "safer"), _window("w2", 2, "avoid")]
        assert find_current_window(windows, _utc(2))["id"] == "w2"
        assert find_current_window(windows, "2026-10-19T01:59:00+00:00")["id"] == "w0"
        assert find_current_window(windows, _utc(4)) is None

    def test_group_by_local_day(self):
        # 06:00 UTC is 23:00 on the previous day in Los Angeles (PDT)
        windows = [_window("late", 6, "safer"), _window("morning", 16, "safer")]
        grouped = group_windows_by_day(windows)
        assert list(grouped) == ["2026-10-18", "2026-10-19"]
        assert grouped["2026-10-19"][0]["id"] == "morning"

    def test_planning_range(self):
        now = datetime(2026, 10, 19, 15, 30, tzinfo=PLANNER_TZ)
        start, end = planning_range(1, now)
        assert start == datetime(2026, 10, 19, tzinfo=PLANNER_TZ)
        assert end == datetime(2026, 10, 20, 23, 59, 59, 999000, tzinfo=PLANNER_TZ)

    def test_compare_scenarios(self):
        normal = [_window("w0", 0, "safer"), _window("w2", 2, "safer")]
        scenario = [_window("w0", 0, "safer"), _window("w2", 2, "avoid", 80.0)]
        result = compare_scenarios(normal, scenario)
        assert result["normal"]["safer"] == 2
        assert result["scenario"]["avoid"] == 1
        assert result["safer_change"] == -1
        assert result["avoid_change"] == 1


class TestSignalsResponse:
    def test_defaults_to_seven_days_from_now(self, today):
        now = today + timedelta(hours=12)
        response = build_signals_response(now=now)
        assert set(response) == {"signals", "overlaps", "windows", "meta"}
        assert len(response["windows"]) == 84
        meta = response["meta"]
        assert meta["scenario_mode"] is False
        assert meta["disclaimer"] == DISCLAIMER
        assert meta["query_range"]["start"] == "2026-10-19T19:00:00+00:00"
        assert meta["query_range"]["end"] == "2026-10-26T19:00:00+00:00"

    def test_signals_filtered_to_range(self, today):
        start = today + timedelta(days=2, hours=6)
        end = start + timedelta(hours=6)
        ids = {s["id"] for s in build_signals_response(start, end, now=today)["signals"]}
        assert "sanitation-3" in ids
        assert "transit-1" in ids
        assert "sanitation-1" not in ids
        assert "event-4" not in ids

    def test_scenario_signals_only_in_scenario_mode(self, today):
        end = today + timedelta(days=30)
        normal = build_signals_response(today, end, now=today)
        scenario = build_signals_response(today, end, include_scenario=True, now=today)
        assert not any(s["signal_type"] == "mega_event" for s in normal["signals"])
        assert {"mega-1", "mega-2", "mega-3"} <= {s["id"] for s in scenario["signals"]}
        assert scenario["meta"]["scenario_mode"] is True

    def test_end_before_start(self, today):
        with pytest.raises(RangeError, match="End date must be after start date."):
            build_signals_response(today, today - timedelta(hours=1), now=today)
        with pytest.raises(RangeError):
            build_signals_response(today, today, now=today)
