from datetime import datetime

import pytest

from planner_config import PLANNER_TZ


@pytest.fixture
def today():
    """A fixed planner-local Monday midnight (no DST change in the following week)."""
    return datetime(2026, 10, 19, tzinfo=PLANNER_TZ)


@pytest.fixture
def make_signal():
    """Factory for minimal signal records on 2026-10-19 (UTC hours)."""

    def _make(signal_id, start_hour, end_hour, impact="medium", confidence="high",
              signal_type="sanitation", title=None):
        return {
            "id": signal_id,
            "signal_type": signal_type,
            "title": title or signal_id.upper(),
            "description": f"{signal_id} description",
            "time_range": {
                "start": f"2026-10-19T{start_hour:02d}:00:00+00:00",
                "end": f"2026-10-19T{end_hour:02d}:00:00+00:00",
            },
            "source": {"label": "Test", "kind": "simulated"},
            "impact_level": impact,
            "confidence_level": confidence,
            "interpretation_notes": "",
            "area_context": "Test Area",
        }

    return _make
