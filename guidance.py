"""
Outreach Window Planner — Coordinator Guidance
===============================================
Suggestions, not prescriptions. Strategies are harm-reduction focused and
never include enforcement guidance.
"""

from datetime import datetime

from planner_config import PLANNER_TZ
from signal_catalog import to_timestamp

STRATEGIES_BY_STATUS = {
    "safer": [
        "Ideal time for in-depth conversations and relationship building",
        "Good opportunity for resource distribution",
        "Consider scheduled appointments or follow-ups",
        "Document needs and service connections for later follow-up",
    ],
    "caution": [
        "Keep outreach activities flexible and mobile",
        "Have backup locations or timing in mind",
        "Prioritize quick check-ins over lengthy engagements",
        "Coordinate with partner organizations if in same area",
    ],
    "avoid": [
        "Consider rescheduling non-urgent outreach",
        "If outreach is necessary, keep duration brief",
        "Focus on wellness checks rather than service enrollment",
        "Document conditions for future planning",
    ],
}

GENERAL_NOTES = [
    "Always prioritize the safety and dignity of community members",
    "Respect people's autonomy and choices",
    "Coordinate with other organizations to avoid duplication",
    "Document patterns for future planning without collecting personal data",
]

ETHICAL_REMINDER = (
    "This tool provides timing guidance only. It does not track individuals, "
    "predict enforcement, or replace direct community relationships."
)

# How strongly a window is worth planning around
PRIORITY_BY_STATUS = {
    "safer":   "high",
    "caution": "medium",
    "avoid":   "low",
}


def build_guidance(window):
    """GuidanceSuggestion for one scored window."""
    return {
        "window_id": window["id"],
        "strategies": list(STRATEGIES_BY_STATUS[window["status"]]),
        "notes": window["annotation"],
        "priority": PRIORITY_BY_STATUS[window["status"]],
    }


def rating_reasons(window):
    """(impact_level, title) pairs behind a window's rating."""
    return [(s["impact_level"], s["title"]) for s in window["contributing_signals"]]


def next_safer_after(windows, now=None):
    """First safer window in list order that starts strictly after now."""
    t = to_timestamp(now or datetime.now(PLANNER_TZ))
    for window in windows:
        if window["status"] == "safer" and to_timestamp(window["time_range"]["start"]) > t:
            return window
    return None
