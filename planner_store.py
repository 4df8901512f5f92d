#!/usr/bin/env python3
"""
Outreach Window Planner — Local Planner Store
==============================================
Organization-added planning items (team shifts, partner hours, internal
meetings, distribution runs) kept in a single local JSON file. No server
sync, no user tracking.

File layout:
    {"custom_signals": [...], "last_modified": iso, "version": 1}

Usage:
    python planner_store.py list
    python planner_store.py add --title "Team A Morning Shift" \
        --start 2026-10-18T09:00 --end 2026-10-18T13:00
    python planner_store.py remove custom-1760000000000-abc123xyz
    python planner_store.py export --output plan.json
    python planner_store.py import plan.json
"""

import argparse
import json
from datetime import datetime, timedelta
from pathlib import Path

from planner_config import (
    CUSTOM_SIGNAL_TYPE_OPTIONS,
    IMPACT_OPTIONS,
    PLANNER_TZ,
    STORE_PATH,
    STORE_VERSION,
)
from signal_catalog import (
    at,
    local_today,
    make_custom_signal,
    to_timestamp,
    validate_signal,
)


class PlannerImportError(ValueError):
    """Raised when an imported file is not a planner export."""


# ─── Demo Items ─────────────────────────────────────────────────────────────

def _demo_item(signal_id, signal_type, title, description, start, end,
               notes, area, impact="low", last_updated=None):
    return {
        "id": signal_id,
        "signal_type": signal_type,
        "title": title,
        "description": description,
        "time_range": {"start": start, "end": end},
        "source": {
            "label": "Custom (Org-added)",
            "kind": "partner_provided",
            "last_updated": last_updated,
        },
        "impact_level": impact,
        "confidence_level": "high",
        "interpretation_notes": notes,
        "area_context": area,
        "is_custom": True,
    }


def demo_custom_signals(today=None):
    """Pre-populated planning items shown on first use."""
    today = today or local_today()
    stamp = datetime.now(PLANNER_TZ).isoformat()
    return [
        _demo_item(
            "demo-custom-1", "custom", "Team Alpha Morning Shift",
            "Morning outreach team covering Wilshire corridor. 3 volunteers confirmed.",
            at(today, 0, 9), at(today, 0, 13),
            "Scheduled outreach shift. Team lead: Maria G. Focus area: tent encampments near "
            "Wilshire/Vermont.",
            "Koreatown - Wilshire Corridor", last_updated=stamp,
        ),
        _demo_item(
            "demo-custom-2", "custom", "Resource Distribution Run",
            "Distributing hygiene kits and water bottles in Olympic area.",
            at(today, 0, 14), at(today, 0, 17),
            "Supplies: 50 hygiene kits, 100 water bottles, 30 blankets. "
            "Contact: operations@outreach.org",
            "Koreatown - Olympic Blvd", last_updated=stamp,
        ),
        _demo_item(
            "demo-custom-3", "shelter_hours", "Partner Org Coordination Meeting",
            "Weekly coordination call with LAHSA and partner organizations.",
            at(today, 1, 10), at(today, 1, 11),
            "Zoom meeting. Agenda: territory coordination, resource sharing, upcoming events.",
            "Virtual", last_updated=stamp,
        ),
        _demo_item(
            "demo-custom-4", "custom", "Team Beta Evening Outreach",
            "Evening shift covering Vermont Avenue area. 4 volunteers, 2 case workers.",
            at(today, 1, 17), at(today, 1, 21),
            "Evening outreach focused on connecting with community members after work hours. "
            "Team lead: James K.",
            "Koreatown - Vermont Corridor", last_updated=stamp,
        ),
        _demo_item(
            "demo-custom-5", "public_event", "Mobile Health Clinic - MacArthur Park",
            "Free health screenings, vaccinations, and resource connections.",
            at(today, 2, 10), at(today, 2, 15),
            "Partnering with LA County Health. Great opportunity for coordinated outreach. "
            "Contact: health@outreach.org",
            "MacArthur Park", last_updated=stamp,
        ),
        _demo_item(
            "demo-custom-6", "custom", "Housing Navigation Workshop",
            "Workshop on housing applications and voucher programs. 20 spots available.",
            at(today, 2, 13), at(today, 2, 15),
            "Held at community center. Pre-registration recommended. Materials provided.",
            "Koreatown - Community Center", last_updated=stamp,
        ),
        _demo_item(
            "demo-custom-7", "custom", "Weekend Resource Distribution",
            "Large-scale distribution: food, clothing, and essential supplies.",
            at(today, 3, 9), at(today, 3, 13),
            "Major distribution event. 8 volunteers needed. Setup begins at 8am. "
            "Location: parking lot at 6th & Normandie.",
            "Koreatown - 6th & Normandie", last_updated=stamp,
        ),
        _demo_item(
            "demo-custom-8", "service_bottleneck", "DMV Mobile Unit Visit",
            "Mobile DMV unit providing ID services. Expected high demand.",
            at(today, 3, 10), at(today, 3, 16),
            "High demand expected. Good opportunity to help community members prepare "
            "documents beforehand.",
            "Koreatown - Vermont/Wilshire", impact="medium", last_updated=stamp,
        ),
        _demo_item(
            "demo-custom-9", "custom", "Team Gamma Midday Shift",
            "Midday outreach covering 8th Street area. Focus on case management follow-ups.",
            at(today, 4, 11), at(today, 4, 15),
            "Follow-up visits with clients. Team includes 2 case managers. "
            "Vehicle available for transport.",
            "Koreatown - 8th Street", last_updated=stamp,
        ),
        _demo_item(
            "demo-custom-10", "custom", "Volunteer Training Session",
            "New volunteer orientation and safety training. Required for all new team members.",
            at(today, 5, 10), at(today, 5, 13),
            "Training covers harm reduction principles, de-escalation, and resource navigation. "
            "Lunch provided.",
            "Koreatown - Office", last_updated=stamp,
        ),
    ]


# ─── Load / Save ────────────────────────────────────────────────────────────

def load_custom_signals(path=STORE_PATH, today=None):
    """Stored items, or the demo set when the store is missing, empty or unreadable."""
    p = Path(path)
    if not p.exists():
        return demo_custom_signals(today)
    try:
        with open(p, "r") as f:
            stored = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        print(f"  ❌ Failed to load custom signals from {p}: {e}")
        return demo_custom_signals(today)
    signals = stored.get("custom_signals") if isinstance(stored, dict) else None
    if not isinstance(signals, list) or not signals:
        return demo_custom_signals(today)
    return signals


def save_custom_signals(signals, path=STORE_PATH):
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "custom_signals": signals,
        "last_modified": to_timestamp(datetime.now(PLANNER_TZ)).isoformat(),
        "version": STORE_VERSION,
    }
    with open(p, "w") as f:
        json.dump(payload, f, indent=2)
    return signals


def add_custom_signal(signals, signal, path=STORE_PATH):
    """Append a validated item (marked custom) and persist the list."""
    validate_signal(signal)
    return save_custom_signals(signals + [{**signal, "is_custom": True}], path)


def remove_custom_signal(signals, signal_id, path=STORE_PATH):
    """Drop an item by id; the store is only rewritten when something was removed."""
    remaining = [s for s in signals if s["id"] != signal_id]
    if len(remaining) == len(signals):
        return signals
    return save_custom_signals(remaining, path)


# ─── Import / Export ────────────────────────────────────────────────────────

def export_payload(signals):
    return {
        "custom_signals": signals,
        "exported_at": to_timestamp(datetime.now(PLANNER_TZ)).isoformat(),
        "version": STORE_VERSION,
    }


def export_filename(now=None):
    day = to_timestamp(now or datetime.now(PLANNER_TZ)).tz_convert(PLANNER_TZ)
    return f"outreach-planner-{day.strftime('%Y-%m-%d')}.json"


def import_payload(existing, payload):
    """Merge imported items after the existing ones; first occurrence of an id wins."""
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as e:
            raise PlannerImportError(f"Not a JSON file: {e}") from e
    imported = payload.get("custom_signals") if isinstance(payload, dict) else None
    if not isinstance(imported, list):
        raise PlannerImportError("Failed to import file. Please check the format.")
    if not all(isinstance(s, dict) and "id" in s for s in imported):
        raise PlannerImportError("Imported items must be signal records with an id.")

    merged, seen = [], set()
    for signal in existing + imported:
        if signal.get("id") in seen:
            continue
        seen.add(signal.get("id"))
        merged.append(signal)
    return merged


# ─── Main ───────────────────────────────────────────────────────────────────

def main():
    parser = argparse.ArgumentParser(description="Manage locally stored planning items")
    parser.add_argument("--store", default=str(STORE_PATH), help="Path to the planner store")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List stored planning items")

    add = sub.add_parser("add", help="Add a planning item")
    add.add_argument("--title", required=True)
    add.add_argument("--start", help="ISO 8601 (default: now)")
    add.add_argument("--end", help="ISO 8601 (default: start + 2h)")
    add.add_argument("--type", dest="signal_type", default="custom",
                     choices=list(CUSTOM_SIGNAL_TYPE_OPTIONS))
    add.add_argument("--impact", default="low", choices=list(IMPACT_OPTIONS))
    add.add_argument("--description", default="")
    add.add_argument("--notes", default="")

    remove = sub.add_parser("remove", help="Remove a planning item by id")
    remove.add_argument("signal_id")

    export = sub.add_parser("export", help="Write an export file")
    export.add_argument("--output", help="Output path (default: outreach-planner-<date>.json)")

    imp = sub.add_parser("import", help="Merge items from an export file")
    imp.add_argument("path")

    args = parser.parse_args()
    store = Path(args.store)
    signals = load_custom_signals(store)

    if args.command == "list":
        print(f"📋 {len(signals)} planning items ({store})")
        for s in signals:
            begins = to_timestamp(s["time_range"]["start"]).tz_convert(PLANNER_TZ)
            print(f"  {s['id']:40s}  {begins.strftime('%a %b %d %I:%M %p')}  [{s['impact_level']}] {s['title']}")

    elif args.command == "add":
        try:
            start = to_timestamp(args.start) if args.start else to_timestamp(datetime.now(PLANNER_TZ))
            end = to_timestamp(args.end) if args.end else start + timedelta(hours=2)
            signal = make_custom_signal(
                args.title, start, end, signal_type=args.signal_type,
                impact_level=args.impact, description=args.description, notes=args.notes,
            )
        except ValueError as e:
            print(f"  ❌ {e}")
            return 1
        add_custom_signal(signals, signal, store)
        print(f"  ✅ Added {signal['id']}")

    elif args.command == "remove":
        remaining = remove_custom_signal(signals, args.signal_id, store)
        if len(remaining) == len(signals):
            print(f"  ⚠️  No item with id {args.signal_id}")
        else:
            print(f"  ✅ Removed {args.signal_id}")

    elif args.command == "export":
        output = Path(args.output or export_filename())
        with open(output, "w") as f:
            json.dump(export_payload(signals), f, indent=2)
        print(f"  ✅ Exported {len(signals)} items to {output}")

    elif args.command == "import":
        try:
            merged = import_payload(signals, Path(args.path).read_text())
        except PlannerImportError as e:
            print(f"  ❌ {e}")
            return 1
        save_custom_signals(merged, store)
        print(f"  ✅ {len(merged) - len(signals)} new items imported ({len(merged)} total)")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
