#!/usr/bin/env python3
"""
Outreach Window Planner — Window Scoring Engine
================================================
Slices a date range into fixed-size outreach windows, scores each window
from the signals that overlap it, classifies it as safer / caution / avoid
and explains why. Also detects periods where two significant signals
coincide.

The score is TRANSPARENT and EXPLAINABLE: a capped sum of
impact weight x confidence multiplier over the overlapping signals.
It does NOT predict enforcement actions.

Usage:
    python compute_windows.py                   # next 7 days from now
    python compute_windows.py --days 30 --scenario
    python compute_windows.py --start 2026-10-17T00:00 --end 2026-10-18T00:00

Output:
    data/windows_output.json  — signals, overlaps and scored windows
    data/windows_summary.json — window counts and average score
"""

import argparse
import json
from datetime import datetime, timedelta

import numpy as np
import pandas as pd

from planner_config import (
    CONFIDENCE_MULTIPLIERS,
    DATA_DIR,
    DEFAULT_QUERY_DAYS,
    DEFAULT_WINDOW_DURATION,
    DISCLAIMER,
    IMPACT_WEIGHTS,
    MAX_SCORE,
    PLANNER_TZ,
    STATUS_THRESHOLDS,
    WINDOW_STATUSES,
    WINDOWS_OUTPUT_PATH,
    WINDOWS_SUMMARY_PATH,
)
from signal_catalog import (
    filter_signals_by_date_range,
    get_all_signals,
    local_today,
    signal_end,
    signal_start,
    signals_to_frame,
    to_timestamp,
)

SIGNIFICANT_IMPACTS = ("medium", "high")

OVERLAP_TYPE_DESCRIPTIONS = {
    "sanitation":          "sanitation activity",
    "public_event":        "public event",
    "shelter_hours":       "shelter service hours",
    "transit_disruption":  "transit disruption",
    "service_bottleneck":  "service bottleneck",
    "infrastructure_work": "infrastructure work",
    "mega_event":          "major event",
    "custom":              "planned activity",
}


class RangeError(ValueError):
    """Raised when a query range ends at or before its start."""


# ─── Scoring ────────────────────────────────────────────────────────────────

def compute_signal_score(signal):
    """Disruption contribution of one signal."""
    return IMPACT_WEIGHTS[signal["impact_level"]] * CONFIDENCE_MULTIPLIERS[signal["confidence_level"]]


def get_status_from_score(score):
    if score <= STATUS_THRESHOLDS["safer"]:
        return "safer"
    if score <= STATUS_THRESHOLDS["caution"]:
        return "caution"
    return "avoid"


def _overlap_mask(frame, window_start, window_end):
    # strict: a signal ending exactly at window_start does not count
    return (frame["start"] < window_end) & (frame["end"] > window_start)


def find_overlaps(signals, window_start, window_end):
    """Signals whose time range intersects [window_start, window_end)."""
    if not signals:
        return []
    frame = signals_to_frame(signals)
    mask = _overlap_mask(frame, to_timestamp(window_start), to_timestamp(window_end))
    return [signals[i] for i in np.flatnonzero(mask.to_numpy())]


def generate_annotation(overlapping, status):
    """Plain-language reason for a window's status."""
    if not overlapping:
        return "No known disruptions during this window. Good opportunity for outreach."

    high = [s for s in overlapping if s["impact_level"] == "high"]
    medium = [s for s in overlapping if s["impact_level"] == "medium"]
    low_count = len(overlapping) - len(high) - len(medium)

    parts = []
    if high:
        parts.append(f"{len(high)} high-impact signal(s): {', '.join(s['title'] for s in high)}")
    if medium:
        parts.append(f"{len(medium)} medium-impact signal(s)")
    if low_count > 0:
        parts.append(f"{low_count} low-impact signal(s)")
    detail = "; ".join(parts)

    if status == "safer":
        return f"Minor activity: {detail}. Generally safe for outreach with awareness."
    if status == "caution":
        return f"Moderate disruption: {detail}. Proceed with flexibility and backup plans."
    return f"High disruption: {detail}. Consider rescheduling if possible."


# ─── Windowing ──────────────────────────────────────────────────────────────

def window_edges(range_start, range_end, window_duration=DEFAULT_WINDOW_DURATION):
    """(start, end) pairs covering the range; the last one is truncated at range_end."""
    duration = pd.Timedelta(window_duration)
    if duration <= pd.Timedelta(0):
        raise ValueError(f"Window duration must be positive, got {window_duration!r}")
    start, end = to_timestamp(range_start), to_timestamp(range_end)
    if end <= start:
        return []
    edges = list(pd.date_range(start, end, freq=duration))
    if edges[-1] < end:
        edges.append(end)
    return list(zip(edges[:-1], edges[1:]))


def compute_windows(signals, range_start, range_end, window_duration=DEFAULT_WINDOW_DURATION):
    """Score every fixed-size window in the range.

    Each window's score is the sum of its overlapping signals' scores,
    capped at 100 for readability.
    """
    edges = window_edges(range_start, range_end, window_duration)
    if not edges:
        return []

    frame = signals_to_frame(signals)
    windows = []
    for index, (w_start, w_end) in enumerate(edges):
        mask = _overlap_mask(frame, w_start, w_end)
        overlapping = [signals[i] for i in np.flatnonzero(mask.to_numpy())]
        raw_score = float(frame.loc[mask, "score"].sum())
        score = min(float(MAX_SCORE), raw_score)
        status = get_status_from_score(score)
        windows.append({
            "id": f"window-{index}",
            "time_range": {"start": w_start.isoformat(), "end": w_end.isoformat()},
            "status": status,
            "score": score,
            "annotation": generate_annotation(overlapping, status),
            "contributing_signals": overlapping,
        })
    return windows


# ─── Overlap Detection ──────────────────────────────────────────────────────

def generate_overlap_explanation(signal_a, signal_b):
    desc_a = OVERLAP_TYPE_DESCRIPTIONS.get(signal_a["signal_type"], signal_a["signal_type"])
    desc_b = OVERLAP_TYPE_DESCRIPTIONS.get(signal_b["signal_type"], signal_b["signal_type"])
    return (
        f"{signal_a['title']} ({desc_a}) overlaps with {signal_b['title']} ({desc_b}). "
        "Multiple disruptions increase unpredictability. "
        "Consider alternative windows or enhanced coordination."
    )


def detect_signal_overlaps(signals):
    """Pairwise overlaps between medium/high-impact signals, in input order."""
    significant = [s for s in signals if s["impact_level"] in SIGNIFICANT_IMPACTS]
    bounds = [(signal_start(s), signal_end(s)) for s in significant]

    overlaps = []
    for i, signal_a in enumerate(significant):
        start_a, end_a = bounds[i]
        for j in range(i + 1, len(significant)):
            signal_b = significant[j]
            start_b, end_b = bounds[j]
            if not (start_a < end_b and end_a > start_b):
                continue
            combined = "high" if "high" in (signal_a["impact_level"], signal_b["impact_level"]) else "medium"
            overlaps.append({
                "id": f"overlap-{signal_a['id']}-{signal_b['id']}",
                "signals": [signal_a, signal_b],
                "time_range": {
                    "start": max(start_a, start_b).isoformat(),
                    "end": min(end_a, end_b).isoformat(),
                },
                "combined_impact": combined,
                "explanation": generate_overlap_explanation(signal_a, signal_b),
            })
    return overlaps


def sort_overlaps(overlaps):
    return sorted(overlaps, key=lambda o: to_timestamp(o["time_range"]["start"]))


# ─── Window Queries ─────────────────────────────────────────────────────────

def _window_start(window):
    return to_timestamp(window["time_range"]["start"])


def _window_end(window):
    return to_timestamp(window["time_range"]["end"])


def status_counts(windows):
    counts = pd.Series([w["status"] for w in windows], dtype=object).value_counts()
    result = {status: int(counts.get(status, 0)) for status in WINDOW_STATUSES}
    result["total"] = len(windows)
    return result


def get_window_summary(windows):
    """Counts per status plus the average score (rounded half up)."""
    counts = status_counts(windows)
    if windows:
        average = float(np.mean([w["score"] for w in windows]))
        average_score = int(np.floor(average + 0.5))
    else:
        average_score = 0
    return {
        "total": counts["total"],
        "safer": counts["safer"],
        "caution": counts["caution"],
        "avoid": counts["avoid"],
        "average_score": average_score,
    }


def find_next_safer_window(windows, from_time=None):
    """Earliest safer window starting at or after from_time (default: now)."""
    t = to_timestamp(from_time or datetime.now(PLANNER_TZ))
    candidates = [w for w in windows if w["status"] == "safer" and _window_start(w) >= t]
    if not candidates:
        return None
    return min(candidates, key=_window_start)


def find_current_window(windows, at_time=None):
    t = to_timestamp(at_time or datetime.now(PLANNER_TZ))
    for window in windows:
        if _window_start(window) <= t < _window_end(window):
            return window
    return None


def group_windows_by_day(windows):
    """{'YYYY-MM-DD': [windows...]} keyed by planner-local start date, sorted."""
    grouped = {}
    for window in windows:
        day = _window_start(window).tz_convert(PLANNER_TZ).strftime("%Y-%m-%d")
        grouped.setdefault(day, []).append(window)
    return {day: grouped[day] for day in sorted(grouped)}


def planning_range(days, now=None):
    """Start of today through the end of the day `days` from now (local time)."""
    start = local_today(now)
    last_day = start + timedelta(days=days)
    end = last_day.replace(hour=23, minute=59, second=59, microsecond=999000)
    return start, end


def compare_scenarios(normal_windows, scenario_windows):
    """Status counts for a baseline run and a scenario run over the same range."""
    normal = status_counts(normal_windows)
    scenario = status_counts(scenario_windows)
    return {
        "normal": normal,
        "scenario": scenario,
        "safer_change": scenario["safer"] - normal["safer"],
        "avoid_change": scenario["avoid"] - normal["avoid"],
    }


# ─── Response Assembly ──────────────────────────────────────────────────────

def build_signals_response(start=None, end=None, include_scenario=False, now=None,
                           window_duration=DEFAULT_WINDOW_DURATION):
    """Signals, overlaps and windows for a query range, with provenance metadata.

    Defaults: start = now, end = start + 7 days. Only simulated, delayed or
    public-calendar signals are ever included.
    """
    now = to_timestamp(now or datetime.now(PLANNER_TZ))
    start = to_timestamp(start) if start is not None else now
    end = to_timestamp(end) if end is not None else start + pd.Timedelta(days=DEFAULT_QUERY_DAYS)
    if end <= start:
        raise RangeError("End date must be after start date.")

    all_signals = get_all_signals(include_scenario, today=local_today(now))
    signals = filter_signals_by_date_range(all_signals, start, end)

    return {
        "signals": signals,
        "overlaps": detect_signal_overlaps(signals),
        "windows": compute_windows(signals, start, end, window_duration),
        "meta": {
            "query_range": {"start": start.isoformat(), "end": end.isoformat()},
            "scenario_mode": include_scenario,
            "generated_at": to_timestamp(datetime.now(PLANNER_TZ)).isoformat(),
            "disclaimer": DISCLAIMER,
        },
    }


# ─── Main ───────────────────────────────────────────────────────────────────

def main():
    parser = argparse.ArgumentParser(description="Compute outreach windows for a date range")
    parser.add_argument("--start", help="Range start, ISO 8601 (default: now)")
    parser.add_argument("--end", help="Range end, ISO 8601 (default: start + --days)")
    parser.add_argument("--days", type=int, default=DEFAULT_QUERY_DAYS,
                        help=f"Range length in days when --end is omitted (default: {DEFAULT_QUERY_DAYS})")
    parser.add_argument("--window-hours", type=float, default=DEFAULT_WINDOW_DURATION.total_seconds() / 3600,
                        help="Window size in hours (default: 2)")
    parser.add_argument("--scenario", action="store_true",
                        help="Include speculative mega-event signals")
    args = parser.parse_args()

    print("=" * 60)
    print("OUTREACH WINDOW PLANNER — Window Scoring")
    print("=" * 60)
    print(f"\nTimestamp: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print(f"Mode: {'SCENARIO (speculative signals included)' if args.scenario else 'BASELINE'}")

    print("\n⏰ Computing windows...")
    try:
        start = to_timestamp(args.start) if args.start else to_timestamp(datetime.now(PLANNER_TZ))
        end = to_timestamp(args.end) if args.end else start + pd.Timedelta(days=args.days)
        response = build_signals_response(
            start, end, include_scenario=args.scenario,
            window_duration=timedelta(hours=args.window_hours),
        )
    except ValueError as e:
        print(f"  ❌ {e}")
        return 1

    summary = get_window_summary(response["windows"])
    print(f"  ✅ {len(response['signals'])} signals in range")
    print(f"  ✅ {summary['total']} windows scored")
    print(f"  ✅ {len(response['overlaps'])} overlaps detected")

    DATA_DIR.mkdir(parents=True, exist_ok=True)
    print(f"\n💾 Writing output to {WINDOWS_OUTPUT_PATH}...")
    with open(WINDOWS_OUTPUT_PATH, "w") as f:
        json.dump(response, f, indent=2)
    with open(WINDOWS_SUMMARY_PATH, "w") as f:
        json.dump({
            "generated": response["meta"]["generated_at"],
            "query_range": response["meta"]["query_range"],
            "scenario_mode": args.scenario,
            "summary": summary,
            "weights": IMPACT_WEIGHTS,
            "confidence_multipliers": CONFIDENCE_MULTIPLIERS,
            "thresholds": STATUS_THRESHOLDS,
        }, f, indent=2)
    print(f"  ✅ Summary: {WINDOWS_SUMMARY_PATH}")

    print("\n" + "=" * 60)
    print("RESULTS")
    print("=" * 60)
    print(f"\n🟢 Safer:   {summary['safer']}")
    print(f"🟡 Caution: {summary['caution']}")
    print(f"🔴 Avoid:   {summary['avoid']}")
    print(f"Average score: {summary['average_score']}")

    next_safer = find_next_safer_window(response["windows"], start)
    if next_safer:
        begins = to_timestamp(next_safer["time_range"]["start"]).tz_convert(PLANNER_TZ)
        print(f"\nNext safer window: {begins.strftime('%a %b %d, %I:%M %p')}")

    print(f"\n{DISCLAIMER}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
