import unittest
from datetime import datetime, timedelta, timezone

from wellengine.health.status import (
    effective_status,
    latest_reading,
    refresh_stored_status,
    requires_alert,
    resolve_well_status,
)
from wellengine.schemas.well_models import MetricReading, WellRecord


class TestEffectiveStatus(unittest.TestCase):

    def test_verdict_mapping(self):
        age = timedelta(minutes=10)
        self.assertEqual(effective_status('active', 'healthy', age), 'active')
        self.assertEqual(effective_status('active', 'warning', age), 'warning')
        self.assertEqual(effective_status('active', 'critical', age), 'critical')

    def test_stored_status_does_not_override_fresh_verdict(self):
        self.assertEqual(effective_status('critical', 'healthy', timedelta(minutes=5)), 'active')

    def test_no_reading_is_offline(self):
        self.assertEqual(effective_status('active', None, None), 'offline')
        self.assertEqual(effective_status('critical', None, None), 'offline')

    def test_stale_reading_is_offline_regardless_of_verdict(self):
        for verdict in ('healthy', 'warning', 'critical'):
            with self.subTest(verdict=verdict):
                self.assertEqual(effective_status('active', verdict, timedelta(hours=3)), 'offline')

    def test_exactly_at_window_is_not_offline(self):
        self.assertEqual(effective_status('active', 'healthy', timedelta(hours=2)), 'active')

    def test_custom_window(self):
        self.assertEqual(
            effective_status('active', 'healthy', timedelta(minutes=45), inactivity_window=timedelta(minutes=30)),
            'offline'
        )


class TestLatestReading(unittest.TestCase):

    def setUp(self):
        self.t0 = datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc)

    def test_picks_max_timestamp(self):
        readings = [
            MetricReading(timestamp=self.t0 + timedelta(hours=2), id=1),
            MetricReading(timestamp=self.t0, id=5),
            MetricReading(timestamp=self.t0 + timedelta(hours=1), id=3),
        ]
        self.assertEqual(latest_reading(readings).id, 1)

    def test_tie_broken_by_highest_id(self):
        readings = [
            MetricReading(timestamp=self.t0, id=9, ph=7.0),
            MetricReading(timestamp=self.t0, id=4, ph=8.0),
        ]
        self.assertEqual(latest_reading(readings).id, 9)

    def test_tie_without_ids_takes_last_inserted(self):
        readings = [
            MetricReading(timestamp=self.t0, ph=7.0),
            MetricReading(timestamp=self.t0, ph=8.0),
        ]
        self.assertEqual(latest_reading(readings).ph, 8.0)

    def test_empty(self):
        self.assertIsNone(latest_reading([]))


class TestResolveWellStatus(unittest.TestCase):

    def setUp(self):
        self.now = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
        self.well = WellRecord(id="w1", name="North Well", status="active")

    def test_three_hour_old_critical_reading_is_offline(self):
        reading = MetricReading(timestamp=self.now - timedelta(hours=3), tds=5000)
        self.assertEqual(resolve_well_status(self.well, [reading], now=self.now), 'offline')

    def test_fresh_reading_is_classified_on_the_fly(self):
        reading = MetricReading(timestamp=self.now - timedelta(minutes=20), ph=9.2)
        self.assertEqual(resolve_well_status(self.well, [reading], now=self.now), 'warning')

    def test_attached_verdict_is_used(self):
        reading = MetricReading(timestamp=self.now - timedelta(minutes=20), well_health='critical')
        self.assertEqual(resolve_well_status(self.well, [reading], now=self.now), 'critical')

    def test_no_readings(self):
        self.assertEqual(resolve_well_status(self.well, [], now=self.now), 'offline')

    def test_naive_now_treated_as_utc(self):
        reading = MetricReading(timestamp=self.now - timedelta(minutes=5))
        naive_now = self.now.replace(tzinfo=None)
        self.assertEqual(resolve_well_status(self.well, [reading], now=naive_now), 'active')


class TestStoredStatusRefresh(unittest.TestCase):

    def test_refresh_caches_verdict_status(self):
        well = WellRecord(id="w1", name="North Well", status="offline")
        reading = MetricReading(timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc), tds=800)
        refreshed = refresh_stored_status(well, reading)
        self.assertEqual(refreshed.status, 'warning')
        self.assertEqual(well.status, 'offline')

    def test_requires_alert(self):
        self.assertTrue(requires_alert('active', 'critical'))
        self.assertTrue(requires_alert(None, 'warning'))
        self.assertFalse(requires_alert('critical', 'critical'))
        self.assertFalse(requires_alert('warning', 'active'))
        self.assertFalse(requires_alert('active', 'offline'))


if __name__ == '__main__':
    unittest.main()
