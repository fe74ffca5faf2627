import unittest
from datetime import datetime, timezone

from wellengine.transform.normalizer import (
    coerce_coordinate,
    coerce_metric,
    coerce_timestamp,
    normalize_reading,
    normalize_source,
)


class TestCoercion(unittest.TestCase):

    def test_coerce_metric_accepts_numbers_and_numeric_strings(self):
        self.assertEqual(coerce_metric(7), 7.0)
        self.assertEqual(coerce_metric(7.25), 7.25)
        self.assertEqual(coerce_metric(" 412.5 "), 412.5)
        self.assertEqual(coerce_metric("0"), 0.0)

    def test_coerce_coordinate_rejects_out_of_range_and_non_finite(self):
        self.assertEqual(coerce_coordinate("12.5", 90), 12.5)
        self.assertEqual(coerce_coordinate(-180, 180), -180.0)
        self.assertIsNone(coerce_coordinate(200, 90))
        self.assertIsNone(coerce_coordinate(-90.5, 90))
        self.assertIsNone(coerce_coordinate("nan", 90))
        self.assertIsNone(coerce_coordinate(float("inf"), 180))

    def test_coerce_metric_absent_values(self):
        for value in (None, "", "   ", "abc", "nan", "NaN", "inf", "-Infinity",
                      float("nan"), float("inf"), True, [], {}):
            with self.subTest(value=value):
                self.assertIsNone(coerce_metric(value))

    def test_coerce_timestamp_variants(self):
        expected = datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)
        self.assertEqual(coerce_timestamp("2024-01-01T10:00:00Z"), expected)
        self.assertEqual(coerce_timestamp(datetime(2024, 1, 1, 10, 0)), expected)
        self.assertEqual(coerce_timestamp(expected.timestamp()), expected)
        self.assertIsNone(coerce_timestamp("yesterday"))
        self.assertIsNone(coerce_timestamp(None))

    def test_normalize_source(self):
        self.assertEqual(normalize_source("manual"), "manual")
        self.assertEqual(normalize_source("CSV"), "bulk_import")
        self.assertEqual(normalize_source("sensor"), "device")
        self.assertEqual(normalize_source("carrier pigeon"), "device")
        self.assertEqual(normalize_source(None), "device")


class TestNormalizeReading(unittest.TestCase):

    def setUp(self):
        self.now = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def test_alias_spellings_resolve_to_canonical_fields(self):
        raw = {
            "wellId": "w1",
            "ts": "2024-05-01T11:30:00Z",
            "pH": "7.1",
            "TDS": 350,
            "temp": "26.4",
            "waterLevel": "12.75",
            "dissolvedOxygen": 6.2,
            "sulphate": "40",
        }
        reading = normalize_reading(raw, now=self.now)

        self.assertEqual(reading.well_id, "w1")
        self.assertEqual(reading.timestamp, datetime(2024, 5, 1, 11, 30, tzinfo=timezone.utc))
        self.assertEqual(reading.ph, 7.1)
        self.assertEqual(reading.tds, 350.0)
        self.assertEqual(reading.temperature, 26.4)
        self.assertEqual(reading.water_level, 12.75)
        self.assertEqual(reading.dissolved_oxygen, 6.2)
        self.assertEqual(reading.sulfate, 40.0)

    def test_canonical_name_wins_over_alias(self):
        reading = normalize_reading({"water_level": 3.0, "waterLevel": 9.0}, now=self.now)
        self.assertEqual(reading.water_level, 3.0)

    def test_unusable_canonical_value_falls_through_to_alias(self):
        reading = normalize_reading({"water_level": "", "waterLevel": "9"}, now=self.now)
        self.assertEqual(reading.water_level, 9.0)

    def test_absent_is_not_zero(self):
        reading = normalize_reading({"ph": None, "tds": "", "turbidity": "NaN", "iron": 0}, now=self.now)
        self.assertIsNone(reading.ph)
        self.assertIsNone(reading.tds)
        self.assertIsNone(reading.turbidity)
        self.assertEqual(reading.iron, 0.0)
        self.assertIsNone(reading.lead)

    def test_no_rounding(self):
        reading = normalize_reading({"ph": "7.123456789"}, now=self.now)
        self.assertEqual(reading.ph, 7.123456789)

    def test_missing_timestamp_uses_now(self):
        reading = normalize_reading({"ph": 7}, now=self.now)
        self.assertEqual(reading.timestamp, self.now)

    def test_missing_timestamp_without_now_is_dropped(self):
        self.assertIsNone(normalize_reading({"ph": 7, "tds": 50}))
        self.assertIsNone(normalize_reading({"ts": "not a date", "tds": 50}))

    def test_unusable_timestamp_uses_supplied_now(self):
        reading = normalize_reading({"ts": "not a date", "tds": 50}, now=self.now)
        self.assertEqual(reading.timestamp, self.now)

    def test_notes_and_source_defaults(self):
        reading = normalize_reading({}, now=self.now)
        self.assertEqual(reading.source, "device")
        self.assertEqual(reading.notes, "")
        self.assertIsNone(reading.well_health)


if __name__ == '__main__':
    unittest.main()
