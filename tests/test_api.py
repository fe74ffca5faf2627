import unittest
from datetime import datetime, timedelta, timezone
from fastapi.testclient import TestClient

from app import app


class TestEngineApi(unittest.TestCase):

    def setUp(self):
        self.client = TestClient(app)

    def test_health(self):
        res = self.client.get("/health")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["status"], "active")

    def test_classify_raw_payload(self):
        res = self.client.post("/api/v1/engine/classify", json={
            "pH": "7.0", "TDS": "1200", "waterLevel": "", "ts": "2024-01-01T00:00:00Z"
        })
        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertEqual(body["verdict"], "critical")
        self.assertEqual(body["issues"][0]["field"], "tds")
        self.assertIsNone(body["reading"]["water_level"])

    def test_forecast(self):
        t0 = datetime(2024, 1, 1, tzinfo=timezone.utc)
        history = [
            {"timestamp": (t0 + timedelta(hours=i)).isoformat(), "water_level": 10 + i}
            for i in range(4)
        ]
        res = self.client.post("/api/v1/engine/forecast", json={"history": history, "horizon_hours": 2})
        self.assertEqual(res.status_code, 200)
        points = res.json()["points"]
        self.assertEqual(len(points), 6)
        self.assertTrue(points[-1]["is_projected"])
        self.assertAlmostEqual(points[-1]["water_level"], 15.0)

    def test_forecast_rejects_bad_timestamp(self):
        res = self.client.post("/api/v1/engine/forecast", json={"history": [{"timestamp": "soon", "water_level": 1}]})
        self.assertEqual(res.status_code, 422)

    def test_route(self):
        res = self.client.post("/api/v1/engine/route", json={
            "origin": {"lat": 0, "lng": -1},
            "wells": [
                {"id": "c", "name": "C", "lat": 0, "lng": 2},
                {"id": "a", "name": "A", "lat": 0, "lng": 0},
                {"id": "b", "name": "B", "lat": 0, "lng": 1},
                {"id": "x", "name": "Unmapped"},
            ],
        })
        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertEqual([s["well_id"] for s in body["plan"]["stops"]], ["a", "b", "c"])
        self.assertEqual(body["plan"]["excluded_well_ids"], ["x"])
        self.assertEqual(len(body["distances"]), 3)
        self.assertIn("travelmode=driving", body["maps_url"])

    def test_status_offline_for_stale_reading(self):
        now = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
        res = self.client.post("/api/v1/engine/status", json={
            "well": {"id": "w1", "name": "W1", "status": "critical"},
            "readings": [{"ts": (now - timedelta(hours=3)).isoformat(), "tds": 50}],
            "now": now.isoformat(),
        })
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["effective_status"], "offline")


    def test_status_ignores_readings_without_timestamp(self):
        now = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
        res = self.client.post("/api/v1/engine/status", json={
            "well": {"id": "w1", "name": "W1", "status": "active"},
            "readings": [{"tds": 50}],
            "now": now.isoformat(),
        })
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["effective_status"], "offline")
        self.assertIsNone(res.json()["last_reading_at"])

    def test_classify_without_timestamp_is_stamped_now(self):
        res = self.client.post("/api/v1/engine/classify", json={"tds": 50})
        self.assertEqual(res.status_code, 200)
        self.assertIsNotNone(res.json()["reading"]["timestamp"])


if __name__ == '__main__':
    unittest.main()
