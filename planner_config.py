"""
Outreach Window Planner — Shared Configuration
===============================================
Paths, scoring tables and display text used by the window engine, the
signals API and the Streamlit dashboard.

Environment overrides:
    PLANNER_DATA_DIR   where output files and the local planner store live
    PLANNER_TZ         timezone used for "today" and day grouping
"""

import os
from datetime import timedelta
from pathlib import Path
from zoneinfo import ZoneInfo

# ─── Paths ──────────────────────────────────────────────────────────────────

BASE_DIR = Path(__file__).parent
DATA_DIR = Path(os.environ.get("PLANNER_DATA_DIR", BASE_DIR / "data"))
STORE_PATH = DATA_DIR / "custom_signals.json"
WINDOWS_OUTPUT_PATH = DATA_DIR / "windows_output.json"
WINDOWS_SUMMARY_PATH = DATA_DIR / "windows_summary.json"

# Koreatown / Los Angeles context
PLANNER_TZ = ZoneInfo(os.environ.get("PLANNER_TZ", "America/Los_Angeles"))

# ─── Scoring ────────────────────────────────────────────────────────────────

IMPACT_WEIGHTS = {
    "low":    10,
    "medium": 30,
    "high":   50,
}

CONFIDENCE_MULTIPLIERS = {
    "low":    0.5,
    "medium": 0.75,
    "high":   1.0,
}

# score <= safer -> safer, score <= caution -> caution, else avoid
STATUS_THRESHOLDS = {
    "safer":   20,
    "caution": 50,
}

MAX_SCORE = 100
DEFAULT_WINDOW_DURATION = timedelta(hours=2)
DEFAULT_QUERY_DAYS = 7
SCENARIO_COMPARE_DAYS = 30
PLANNER_RANGES = {"1d": 1, "7d": 7, "30d": 30}

# ─── Vocabulary ─────────────────────────────────────────────────────────────

SIGNAL_TYPES = [
    "sanitation",
    "public_event",
    "shelter_hours",
    "transit_disruption",
    "service_bottleneck",
    "infrastructure_work",
    "mega_event",
    "custom",
]

SOURCE_KINDS = ["simulated", "delayed", "partner_provided", "public_calendar"]
LEVELS = ["low", "medium", "high"]
WINDOW_STATUSES = ["safer", "caution", "avoid"]

SIGNAL_TYPE_LABELS = {
    "sanitation":          "Sanitation",
    "public_event":        "Public Event",
    "shelter_hours":       "Shelter Hours",
    "transit_disruption":  "Transit",
    "service_bottleneck":  "Service Bottleneck",
    "infrastructure_work": "Infrastructure",
    "mega_event":          "Mega Event",
    "custom":              "Custom",
}

# Types an organization can pick in the add-item form
CUSTOM_SIGNAL_TYPE_OPTIONS = {
    "custom":             "Custom Item",
    "public_event":       "Event / Gathering",
    "shelter_hours":      "Service Hours",
    "transit_disruption": "Transit Note",
    "service_bottleneck": "Service Bottleneck",
}

IMPACT_OPTIONS = {
    "low":    "Low - Minor impact on outreach",
    "medium": "Medium - Some disruption expected",
    "high":   "High - Significant disruption",
}

STATUS_COLORS = {
    "safer":   "#3fa66b",
    "caution": "#d9a441",
    "avoid":   "#c8553d",
}

STORE_VERSION = 1

DISCLAIMER = (
    "PROTOTYPE DATA: All signals are simulated or based on delayed/public information. "
    "This tool does not provide real-time data, enforcement information, or individual tracking. "
    "Use for organizational planning purposes only. Verify conditions before outreach activities."
)
