import pytest
from fastapi.testclient import TestClient

from api_server import app
from planner_config import DISCLAIMER


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestSignalsEndpoint:
    def test_default_range(self, client):
        response = client.get("/api/signals")
        assert response.status_code == 200
        body = response.json()
        assert set(body) == {"signals", "overlaps", "windows", "meta"}
        assert body["meta"]["scenario_mode"] is False
        assert body["meta"]["disclaimer"] == DISCLAIMER
        assert len(body["windows"]) == 84

    def test_explicit_range(self, client):
        response = client.get(
            "/api/signals",
            params={"start": "2026-10-19T00:00:00Z", "end": "2026-10-19T12:00:00Z"},
        )
        assert response.status_code == 200
        body = response.json()
        assert [w["id"] for w in body["windows"]] == [f"window-{i}" for i in range(6)]
        assert body["meta"]["query_range"] == {
            "start": "2026-10-19T00:00:00+00:00",
            "end": "2026-10-19T12:00:00+00:00",
        }
        for window in body["windows"]:
            assert window["status"] in {"safer", "caution", "avoid"}
            assert 0 <= window["score"] <= 100

    def test_scenario_on(self, client):
        response = client.get("/api/signals", params={"scenario": "on"})
        assert response.status_code == 200
        assert response.json()["meta"]["scenario_mode"] is True

    def test_invalid_date(self, client):
        response = client.get("/api/signals", params={"start": "not-a-date"})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid date format. Use ISO 8601 format."}

    def test_end_before_start(self, client):
        response = client.get(
            "/api/signals",
            params={"start": "2026-10-19T12:00:00Z", "end": "2026-10-19T00:00:00Z"},
        )
        assert response.status_code == 400
        assert response.json() == {"error": "End date must be after start date."}

    def test_daylight_saving_edges(self, client):
        fall_back = client.get("/api/signals", params={"start": "2026-11-01T01:30", "end": "2026-11-01T06:00"})
        assert fall_back.status_code == 200
        assert fall_back.json()["meta"]["query_range"]["start"] == "2026-11-01T08:30:00+00:00"
        spring_forward = client.get("/api/signals", params={"start": "2026-03-08T02:30", "end": "2026-03-08T06:00"})
        assert spring_forward.status_code == 200

    @pytest.mark.parametrize("value", ["now", "today", "tomorrow"])
    def test_date_keywords_rejected(self, client, value):
        response = client.get("/api/signals", params={"start": value})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid date format. Use ISO 8601 format."}
