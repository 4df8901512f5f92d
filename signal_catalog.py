"""
Outreach Window Planner — Signal Catalog
=========================================
Simulated and public-calendar temporal signals for the Koreatown / Los
Angeles prototype, plus the filtering helpers the engine and dashboard use.

All data here is SIMULATED or based on PUBLIC information. No real-time
enforcement data, no individual tracking, no coordinates: location context
is text only.

Signals are plain dicts:

    {
        "id": "sanitation-1",
        "signal_type": "sanitation",
        "title": "...",
        "description": "...",
        "time_range": {"start": iso, "end": iso},
        "source": {"label": "...", "kind": "simulated", "last_updated": iso},
        "impact_level": "medium",
        "confidence_level": "medium",
        "interpretation_notes": "...",
        "area_context": "Koreatown - Wilshire Corridor",
        "is_custom": False,
    }
"""

import random
import string
import time
from datetime import datetime, timedelta

import numpy as np
import pandas as pd

from planner_config import (
    CONFIDENCE_MULTIPLIERS,
    IMPACT_WEIGHTS,
    LEVELS,
    PLANNER_TZ,
    SIGNAL_TYPES,
    SOURCE_KINDS,
)


class SignalValidationError(ValueError):
    """Raised when a signal record is incomplete or inconsistent."""


# ─── Time Helpers ───────────────────────────────────────────────────────────

def to_timestamp(value):
    """Parse an ISO string / datetime into a UTC pd.Timestamp.

    Naive values are read as planner-local time.
    """
    if value is None or value == "":
        raise ValueError("Missing timestamp")
    # pandas also accepts keywords like "now" or "today"; ISO dates start with a digit
    if isinstance(value, str) and not value.strip()[:1].isdigit():
        raise ValueError(f"Invalid timestamp: {value!r}")
    ts = pd.Timestamp(value)
    if ts is pd.NaT:
        raise ValueError(f"Invalid timestamp: {value!r}")
    if ts.tzinfo is None:
        # fall-back hour resolves to daylight time, spring-forward gap shifts ahead
        ts = ts.tz_localize(PLANNER_TZ, ambiguous=True, nonexistent="shift_forward")
    return ts.tz_convert("UTC")


def iso(ts):
    """UTC ISO-8601 string for a timestamp."""
    return to_timestamp(ts).isoformat()


def local_today(now=None):
    """Midnight of the current planner-local day."""
    now = to_timestamp(now or datetime.now(PLANNER_TZ)).tz_convert(PLANNER_TZ)
    return now.normalize().to_pydatetime()


def set_time(day, hours, minutes=0):
    return day.replace(hour=hours, minute=minutes, second=0, microsecond=0)


def at(today, days, hours, minutes=0):
    """Local wall-clock time `days` after `today`."""
    return set_time(today + timedelta(days=days), hours, minutes).isoformat()


def signal_start(signal):
    return to_timestamp(signal["time_range"]["start"])


def signal_end(signal):
    return to_timestamp(signal["time_range"]["end"])


# ─── Record Builders ────────────────────────────────────────────────────────

def _signal(signal_id, signal_type, title, description, start, end,
            source_label, source_kind, impact, confidence, notes, area,
            last_updated=None):
    source = {"label": source_label, "kind": source_kind}
    if last_updated:
        source["last_updated"] = last_updated
    return {
        "id": signal_id,
        "signal_type": signal_type,
        "title": title,
        "description": description,
        "time_range": {"start": start, "end": end},
        "source": source,
        "impact_level": impact,
        "confidence_level": confidence,
        "interpretation_notes": notes,
        "area_context": area,
        "is_custom": False,
    }


SANITATION_SOURCE = "LA Sanitation (Simulated Pattern)"
CALENDAR_SOURCE = "Community Calendar (Public)"
PARTNER_SOURCE = "Partner Services (Simulated)"
SCENARIO_SOURCE = "Scenario Simulation (Speculative)"


def sanitation_signals(today, now_iso=None):
    """Street cleaning cycles based on publicly posted patterns."""
    return [
        _signal(
            "sanitation-1", "sanitation", "Street Cleaning - Wilshire Corridor",
            "Scheduled street cleaning along Wilshire Blvd between Vermont and Western. "
            "Parking restrictions enforced.",
            at(today, 0, 8), at(today, 0, 12), SANITATION_SOURCE, "simulated",
            "medium", "medium",
            "Street cleaning often precedes increased activity. Outreach during this window may "
            "face interruptions. Consider timing outreach before or after this period.",
            "Koreatown - Wilshire Corridor", last_updated=now_iso,
        ),
        _signal(
            "sanitation-2", "sanitation", "Street Cleaning - 6th Street Area",
            "Scheduled street cleaning in residential areas around 6th Street and Serrano.",
            at(today, 1, 9), at(today, 1, 13), SANITATION_SOURCE, "simulated",
            "medium", "low",
            "Residential cleaning typically lower impact than commercial corridors. Monitor for changes.",
            "Koreatown - Residential",
        ),
        _signal(
            "sanitation-3", "sanitation", "Street Cleaning - Vermont Ave",
            "Weekly street cleaning along Vermont Avenue commercial district.",
            at(today, 2, 7), at(today, 2, 11), SANITATION_SOURCE, "simulated",
            "high", "medium",
            "Vermont corridor is high-traffic. Cleaning may coincide with morning service hours "
            "at nearby clinics.",
            "Koreatown - Vermont Corridor",
        ),
        _signal(
            "sanitation-4", "sanitation", "Street Cleaning - Olympic Blvd",
            "Bi-weekly street cleaning on Olympic Blvd between Normandie and Western.",
            at(today, 3, 6), at(today, 3, 10), SANITATION_SOURCE, "simulated",
            "medium", "high",
            "Early morning cleaning. People may need to relocate temporarily. Good opportunity "
            "for outreach afterward.",
            "Koreatown - Olympic Corridor",
        ),
    ]


def public_event_signals(today):
    return [
        _signal(
            "event-1", "public_event", "K-Town Night Market",
            "Monthly night market event at Robert F. Kennedy Community Schools. "
            "High foot traffic expected.",
            at(today, 2, 17), at(today, 2, 22), CALENDAR_SOURCE, "public_calendar",
            "medium", "high",
            "Community events can be opportunities for resource distribution but may also "
            "increase displacement pressure. Coordinate with event organizers if possible.",
            "Koreatown",
        ),
        _signal(
            "event-2", "public_event", "Wilshire Center Farmers Market",
            "Weekly farmers market. Blocks portion of street parking.",
            at(today, 3, 9), at(today, 3, 14), CALENDAR_SOURCE, "public_calendar",
            "low", "high",
            "Farmers markets typically low disruption. Some food resources may be available "
            "for distribution.",
            "Wilshire Center",
        ),
        _signal(
            "event-3", "public_event", "Community Health Fair",
            "Free health screenings and resources at MacArthur Park. "
            "Partner organizations will be present.",
            at(today, 4, 10), at(today, 4, 16), CALENDAR_SOURCE, "public_calendar",
            "low", "high",
            "Excellent opportunity for connecting community members with health resources. "
            "Coordinate to avoid duplication.",
            "MacArthur Park",
        ),
        _signal(
            "event-4", "public_event", "LACMA Free Admission Day",
            "Free museum admission draws large crowds to Wilshire/Fairfax area.",
            at(today, 5, 11), at(today, 5, 20), CALENDAR_SOURCE, "public_calendar",
            "low", "high",
            "Increased pedestrian activity in museum area. Generally positive atmosphere.",
            "Miracle Mile",
        ),
    ]


def shelter_signals(today):
    return [
        _signal(
            "shelter-1", "shelter_hours", "Emergency Shelter Intake Opens",
            "Nightly intake window at area emergency shelters. High demand period.",
            at(today, 0, 17), at(today, 0, 20), "LAHSA Shelter Network (Simulated)", "simulated",
            "low", "high",
            "Shelter intake is a positive resource window. Outreach can help connect people "
            "to beds during this time.",
            "Los Angeles - Citywide",
        ),
        _signal(
            "shelter-2", "shelter_hours", "Day Center Services - Union Rescue Mission",
            "Day center services including showers, meals, and case management.",
            at(today, 0, 8), at(today, 0, 14), PARTNER_SOURCE, "partner_provided",
            "low", "high",
            "Day centers provide essential services. Consider coordinating outreach to "
            "complement rather than compete with these hours.",
            "Koreatown Area",
        ),
        _signal(
            "shelter-3", "shelter_hours", "Mobile Shower Unit - Vermont/Wilshire",
            "Weekly mobile shower and hygiene services near Metro station.",
            at(today, 1, 10), at(today, 1, 15), PARTNER_SOURCE, "partner_provided",
            "low", "high",
            "Great opportunity for outreach coordination. People gathering for services are "
            "more accessible.",
            "Koreatown - Vermont/Wilshire",
        ),
        _signal(
            "shelter-4", "shelter_hours", "Hot Meal Service - St. Basil's",
            "Daily hot meal service at church community center.",
            at(today, 0, 11), at(today, 0, 13), PARTNER_SOURCE, "partner_provided",
            "low", "high",
            "Meal times are predictable gathering points. Excellent for resource distribution "
            "and relationship building.",
            "Koreatown - Wilshire",
        ),
    ]


def transit_signals(today):
    return [
        _signal(
            "transit-1", "transit_disruption", "Metro Purple Line Construction",
            "Ongoing construction at Wilshire/Western station. Reduced service and street closures.",
            at(today, 0, 0), at(today, 7, 23, 59), "LA Metro (Public)", "public_calendar",
            "medium", "high",
            "Construction zones can complicate access for both outreach teams and community "
            "members. Plan alternative routes.",
            "Koreatown - Wilshire/Western",
        ),
        _signal(
            "transit-2", "transit_disruption", "Bus Reroute - Vermont Line",
            "Temporary bus reroute due to utility work. Stops relocated.",
            at(today, 2, 6), at(today, 2, 18), "LA Metro (Simulated)", "simulated",
            "low", "medium",
            "Minor disruption. Some community members may be displaced from usual transit stops.",
            "Vermont Corridor",
        ),
    ]


def service_bottleneck_signals(today):
    return [
        _signal(
            "bottleneck-1", "service_bottleneck", "Benefits Office High Volume",
            "First week of month typically sees high volume at DPSS offices.",
            at(today, 0, 8), at(today, 3, 17), "Service Provider Network (Simulated)", "simulated",
            "medium", "medium",
            "High volume periods at benefits offices mean longer waits. Outreach can help with "
            "paperwork prep beforehand.",
            "Los Angeles - Multiple Locations",
        ),
    ]


def infrastructure_signals(today):
    return [
        _signal(
            "infra-1", "infrastructure_work", "Water Main Repair",
            "Emergency water main repair. Street closure and reduced pedestrian access.",
            at(today, 1, 7), at(today, 1, 19), "LADWP (Simulated)", "simulated",
            "medium", "low",
            "Infrastructure work can cause temporary displacement and access issues. Confirm "
            "completion before planning outreach in area.",
            "Koreatown - 8th Street",
        ),
    ]


def mega_event_signals(today):
    """SCENARIO MODE: speculative 2028 Olympics conditions, clearly labeled."""
    return [
        _signal(
            "mega-1", "mega_event", "[SCENARIO] Olympics Opening Week",
            "SPECULATIVE: Simulated increased activity during Olympics opening ceremonies. "
            "Expect heightened security presence and potential displacement pressure.",
            at(today, 14, 0), at(today, 21, 23, 59), SCENARIO_SOURCE, "simulated",
            "high", "low",
            "SCENARIO MODE: This signal represents potential conditions during a mega-event. "
            "Actual impacts will vary. Use for planning exercises only.",
            "Los Angeles - Citywide",
        ),
        _signal(
            "mega-2", "mega_event", "[SCENARIO] Transit Surge Period",
            "SPECULATIVE: Simulated transit system at capacity. Metro stations may have "
            "restricted access.",
            at(today, 15, 6), at(today, 15, 22), SCENARIO_SOURCE, "simulated",
            "high", "low",
            "SCENARIO MODE: Transit hubs near K-Town (Wilshire/Vermont, Wilshire/Western) may "
            "see increased security. Plan alternative meeting points.",
            "Koreatown - Transit Hubs",
        ),
        _signal(
            "mega-3", "mega_event", "[SCENARIO] Venue Buffer Zones",
            "SPECULATIVE: Security perimeters around event venues may expand, affecting "
            "nearby areas.",
            at(today, 14, 0), at(today, 28, 23, 59), SCENARIO_SOURCE, "simulated",
            "high", "low",
            "SCENARIO MODE: Buffer zones around venues historically cause displacement. This is "
            "speculative planning for potential 2028 conditions.",
            "Los Angeles - Venue Adjacent",
        ),
    ]


# ─── Catalog Access ─────────────────────────────────────────────────────────

def get_base_signals(today=None):
    """All non-scenario signals, anchored on the local `today`."""
    today = today or local_today()
    now_iso = datetime.now(PLANNER_TZ).isoformat()
    return (
        sanitation_signals(today, now_iso)
        + public_event_signals(today)
        + shelter_signals(today)
        + transit_signals(today)
        + service_bottleneck_signals(today)
        + infrastructure_signals(today)
    )


def get_all_signals(include_scenario=False, today=None):
    today = today or local_today()
    signals = get_base_signals(today)
    if include_scenario:
        signals += mega_event_signals(today)
    return signals


def signals_to_frame(signals):
    """Tabular view of signals: one row per signal, in input order."""
    frame = pd.DataFrame({
        "id": [s["id"] for s in signals],
        "signal_type": [s["signal_type"] for s in signals],
        "title": [s["title"] for s in signals],
        "impact_level": [s["impact_level"] for s in signals],
        "confidence_level": [s["confidence_level"] for s in signals],
        "start": pd.to_datetime([signal_start(s) for s in signals], utc=True),
        "end": pd.to_datetime([signal_end(s) for s in signals], utc=True),
    })
    frame["score"] = (
        frame["impact_level"].map(IMPACT_WEIGHTS).astype(float)
        * frame["confidence_level"].map(CONFIDENCE_MULTIPLIERS).astype(float)
    )
    return frame


def filter_signals_by_date_range(signals, start, end):
    """Signals touching [start, end]; bounds are inclusive."""
    if not signals:
        return []
    frame = signals_to_frame(signals)
    mask = (frame["start"] <= to_timestamp(end)) & (frame["end"] >= to_timestamp(start))
    return [signals[i] for i in np.flatnonzero(mask.to_numpy())]


def group_signals_by_type(signals):
    grouped = {signal_type: [] for signal_type in SIGNAL_TYPES}
    for signal in signals:
        grouped.setdefault(signal["signal_type"], []).append(signal)
    return grouped


def get_high_impact_signals(signals):
    return [s for s in signals if s["impact_level"] == "high"]


def get_active_signals(signals, at_time=None, impact_level="high"):
    """Signals in effect at `at_time` (start <= t < end), optionally by impact."""
    t = to_timestamp(at_time or datetime.now(PLANNER_TZ))
    active = [s for s in signals if signal_start(s) <= t < signal_end(s)]
    if impact_level and impact_level != "all":
        active = [s for s in active if s["impact_level"] == impact_level]
    return active


def search_signals(signals, query="", signal_type="all", impact_level="all"):
    """Case-insensitive title/description search plus type and impact filters."""
    needle = (query or "").strip().lower()
    results = []
    for signal in signals:
        if needle and needle not in signal["title"].lower() \
                and needle not in signal["description"].lower():
            continue
        if signal_type != "all" and signal["signal_type"] != signal_type:
            continue
        if impact_level != "all" and signal["impact_level"] != impact_level:
            continue
        results.append(signal)
    return results


def count_by_impact(signals):
    counts = pd.Series([s["impact_level"] for s in signals], dtype=object).value_counts()
    return {level: int(counts.get(level, 0)) for level in ["high", "medium", "low"]}


# ─── Validation & Custom Items ──────────────────────────────────────────────

def validate_signal(record):
    """Check a signal record; returns it unchanged or raises SignalValidationError."""
    if not isinstance(record, dict):
        raise SignalValidationError("Signal must be a mapping")
    for key in ("id", "signal_type", "title", "time_range", "impact_level", "confidence_level"):
        if key not in record:
            raise SignalValidationError(f"Signal is missing '{key}'")
    if not str(record["title"]).strip():
        raise SignalValidationError("Title is required.")
    if record["signal_type"] not in SIGNAL_TYPES:
        raise SignalValidationError(f"Unknown signal type: {record['signal_type']}")
    if record["impact_level"] not in LEVELS:
        raise SignalValidationError(f"Unknown impact level: {record['impact_level']}")
    if record["confidence_level"] not in LEVELS:
        raise SignalValidationError(f"Unknown confidence level: {record['confidence_level']}")
    kind = record.get("source", {}).get("kind")
    if kind is not None and kind not in SOURCE_KINDS:
        raise SignalValidationError(f"Unknown source kind: {kind}")
    try:
        start = signal_start(record)
        end = signal_end(record)
    except (KeyError, TypeError, ValueError) as e:
        raise SignalValidationError(f"Invalid time range: {e}") from e
    if end <= start:
        raise SignalValidationError("End time must be after start time.")
    return record


def _custom_id():
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"custom-{int(time.time() * 1000)}-{suffix}"


def make_custom_signal(title, start, end, signal_type="custom", impact_level="low",
                       description="", notes="", area_context="Koreatown Area"):
    """Build an organization-added planning item (always high confidence)."""
    title = (title or "").strip()
    if not title:
        raise SignalValidationError("Title is required.")
    try:
        time_range = {"start": iso(start), "end": iso(end)}
    except ValueError as e:
        raise SignalValidationError(f"Invalid time range: {e}") from e
    signal = {
        "id": _custom_id(),
        "signal_type": signal_type,
        "title": title,
        "description": description.strip() or title,
        "time_range": time_range,
        "source": {
            "label": "Custom (Org-added)",
            "kind": "partner_provided",
            "last_updated": iso(datetime.now(PLANNER_TZ)),
        },
        "impact_level": impact_level,
        "confidence_level": "high",
        "interpretation_notes": notes.strip() or "Custom item added by organization.",
        "area_context": area_context,
        "is_custom": True,
    }
    return validate_signal(signal)
