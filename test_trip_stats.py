import math
import unittest

import constants as c
import trip_stats as stats

DAY = 24 * 60 * 60
NOW = 1_750_000_000.0


def record(start_time, miles, seconds, litres, cost, mpg=50.0, mph=30.0):
    return {
        "date": "01/01/2025",
        "start_time": start_time,
        "duration_seconds": seconds,
        "distance_miles": miles,
        "average_speed_mph": mph,
        "fuel_used_litres": litres,
        "fuel_cost": cost,
        "estimated_mpg": mpg,
    }


class TestPeriods(unittest.TestCase):

    def setUp(self):
        self.drives = [
            record(NOW - 2 * DAY, 10.0, 1800, 2.0, 3.0),
            record(NOW - 20 * DAY, 20.0, 1800, 3.0, 4.5),
            record(NOW - 200 * DAY, 40.0, 3600, 5.0, 7.0),
            record(NOW - 800 * DAY, 80.0, 7200, 9.0, 12.0),
        ]

    def test_period_filters(self):
        self.assertEqual(len(stats.drives_for_period(self.drives, "week", now=NOW)), 1)
        self.assertEqual(len(stats.drives_for_period(self.drives, "month", now=NOW)), 2)
        self.assertEqual(len(stats.drives_for_period(self.drives, "year", now=NOW)), 3)
        self.assertEqual(len(stats.drives_for_period(self.drives, "lifetime", now=NOW)), 4)
        self.assertEqual(len(stats.drives_for_period(self.drives, "fortnight", now=NOW)), 4)

    def test_month_stats(self):
        s = stats.get_stats(self.drives, "month", now=NOW)
        self.assertEqual(s["drives"], 2)
        self.assertAlmostEqual(s["miles"], 30.0)
        self.assertAlmostEqual(s["hours"], 1.0)
        self.assertAlmostEqual(s["avg_speed_mph"], 30.0)
        self.assertAlmostEqual(s["fuel_cost"], 7.5)
        self.assertAlmostEqual(s["avg_mpg"], 30.0 / (5.0 * c.LITRES_TO_GALLONS) * c.MPG_CALIBRATION)


class TestCalculateStats(unittest.TestCase):

    def test_no_drives(self):
        s = stats.calculate_stats([])
        self.assertEqual(s["drives"], 0)
        self.assertEqual(s["avg_mpg"], 0.0)
        self.assertEqual(s["avg_speed_mph"], 0.0)

    def test_unreadable_fields_count_as_zero(self):
        drives = [
            stats.normalize_drive(record(NOW, "12.5", 600, "1.0", None)),
            stats.normalize_drive(record(NOW, "oops", 600, 1.0, 2.0)),
        ]
        s = stats.calculate_stats(drives)
        self.assertEqual(s["drives"], 2)
        self.assertAlmostEqual(s["miles"], 12.5)
        self.assertAlmostEqual(s["fuel_cost"], 2.0)
        self.assertTrue(math.isfinite(s["avg_mpg"]))

    def test_zero_fuel_gives_zero_mpg(self):
        s = stats.calculate_stats([stats.normalize_drive(record(NOW, 1.0, 60, 0.0, 0.0))])
        self.assertEqual(s["avg_mpg"], 0.0)


class TestFormatting(unittest.TestCase):

    def test_format_duration(self):
        self.assertEqual(stats.format_duration(42), "42s")
        self.assertEqual(stats.format_duration(750), "12.5min")
        self.assertEqual(stats.format_duration(4500), "1.25hr")

    def test_trip_cost_falls_back_to_default_price(self):
        self.assertAlmostEqual(stats.trip_cost(record(NOW, 1, 60, 2.0, 3.1)), 3.1)
        self.assertAlmostEqual(
            stats.trip_cost(record(NOW, 1, 60, 2.0, None)), 2.0 * c.DEFAULT_PRICE_PENCE / 100.0
        )

    def test_trip_line(self):
        line = stats.format_trip_line(record(NOW, 6.2, 750, 0.512, 0.7, mpg=55.6, mph=37.3))
        self.assertTrue(line.startswith("01/01/2025 @ "))
        self.assertIn("12.5min", line)
        self.assertIn("6.2mi", line)
        self.assertIn("55.6mpg", line)
        self.assertIn("0.512l", line)
        self.assertIn("£0.70", line)

    def test_trip_line_accepts_string_fields(self):
        line = stats.format_trip_line(
            record(str(NOW), "6.2", "750", "0.512", "0.70", mpg="55.6", mph="37.3")
        )
        self.assertIn("12.5min", line)
        self.assertIn("6.2mi", line)
        self.assertIn("37.3mph", line)
        self.assertIn("0.512l", line)
        self.assertIn("£0.70", line)

    def test_trip_line_survives_missing_and_unreadable_fields(self):
        line = stats.format_trip_line({"date": "01/01/2025", "distance_miles": "oops"})
        self.assertTrue(line.startswith("01/01/2025 @ --:-- | "))
        self.assertIn("nanmi", line)


if __name__ == '__main__':
    unittest.main()
