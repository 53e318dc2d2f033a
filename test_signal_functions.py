import unittest

import numpy as np

import constants as c
import signal_functions as sf
from drive_session import SpeedHistory


def history_of(speeds):
    history = SpeedHistory()
    for s in speeds:
        history.push(s)
    return history


class TestSpeedHistory(unittest.TestCase):

    def test_capacity_is_enforced_fifo(self):
        history = history_of(range(100))
        self.assertEqual(len(history), c.HISTORY_CAPACITY)
        self.assertEqual(list(history)[0], 40.0, "Oldest entries must be evicted first")
        self.assertEqual(list(history)[-1], 99.0)

    def test_last_returns_at_most_available(self):
        history = history_of([1, 2, 3])
        np.testing.assert_array_equal(history.last(10), [1.0, 2.0, 3.0])
        np.testing.assert_array_equal(history.last(2), [2.0, 3.0])
        self.assertEqual(history.last(0).size, 0)


class TestSmoothing(unittest.TestCase):

    def test_empty_history_smooths_to_zero(self):
        self.assertEqual(sf.smoothed_speed(SpeedHistory()), 0.0)
        self.assertEqual(sf.short_average(SpeedHistory()), 0.0)

    def test_smoothing_uses_last_ten(self):
        history = history_of(range(1, 16))  # 1..15
        self.assertAlmostEqual(sf.smoothed_speed(history), np.mean(range(6, 16)))

    def test_smoothing_with_short_history(self):
        self.assertAlmostEqual(sf.smoothed_speed(history_of([10, 20])), 15.0)

    def test_short_average_window_is_twelve(self):
        history = history_of(range(20))
        self.assertAlmostEqual(sf.short_average(history), np.mean(range(8, 20)))

    def test_short_average_reacts_faster_than_full_history(self):
        """A recent slowdown should pull the 12-sample mean well below the 60-sample mean."""
        history = history_of([80] * 48 + [15] * 12)
        self.assertAlmostEqual(sf.short_average(history), 15.0)
        self.assertGreater(np.mean(list(history)), 60.0)


class TestStability(unittest.TestCase):

    def test_std_dev_sentinel_before_two_samples(self):
        self.assertEqual(sf.speed_std_dev(SpeedHistory()), c.STD_DEV_SENTINEL)
        self.assertEqual(sf.speed_std_dev(history_of([50])), c.STD_DEV_SENTINEL)

    def test_std_dev_is_population(self):
        self.assertAlmostEqual(sf.speed_std_dev(history_of([80, 82])), 1.0)

    def test_std_dev_only_looks_at_window(self):
        history = history_of([0, 200] + [60] * 10)
        self.assertAlmostEqual(sf.speed_std_dev(history), 0.0)

    def test_acceleration_uses_previous_smoothed(self):
        self.assertAlmostEqual(sf.smoothed_acceleration(51.0, 50.0, 2.0), 0.5)

    def test_acceleration_is_clamped(self):
        self.assertEqual(sf.smoothed_acceleration(100.0, 0.0, 1.0), c.ACCEL_CLAMP_KPH_S)
        self.assertEqual(sf.smoothed_acceleration(0.0, 100.0, 1.0), -c.ACCEL_CLAMP_KPH_S)

    def test_acceleration_without_previous_is_zero(self):
        self.assertEqual(sf.smoothed_acceleration(80.0, None, 1.0), 0.0)


class TestClassifier(unittest.TestCase):

    def test_steady_85_sets_every_cruise_flag(self):
        state = sf.classify(85.0, 0.0, 0.0)
        self.assertTrue(state.is_stable)
        self.assertTrue(state.is_light_load_cruise)
        self.assertTrue(state.is_overrun_like, "Gravity-stabilised cruise counts as overrun-like")
        self.assertTrue(state.is_steady_cruise)
        self.assertFalse(state.is_coasting)

    def test_moderate_spread_is_stable_but_not_light_load(self):
        state = sf.classify(85.0, 0.0, 0.7)
        self.assertTrue(state.is_stable)
        self.assertFalse(state.is_light_load_cruise)
        self.assertFalse(state.is_overrun_like)

    def test_small_acceleration_breaks_stability(self):
        state = sf.classify(85.0, 0.1, 0.0)
        self.assertFalse(state.is_stable)
        self.assertTrue(state.is_steady_cruise, "Steady cruise tolerates |a| < 0.15")

    def test_deceleration_is_overrun_above_35(self):
        state = sf.classify(50.0, -0.4, 2.0)
        self.assertFalse(state.is_stable)
        self.assertTrue(state.is_overrun_like)
        self.assertFalse(sf.classify(30.0, -0.4, 2.0).is_overrun_like)

    def test_coasting(self):
        self.assertTrue(sf.classify(30.0, -1.0, 3.0).is_coasting)
        self.assertFalse(sf.classify(15.0, -1.0, 3.0).is_coasting)
        self.assertFalse(sf.classify(30.0, -0.5, 3.0).is_coasting, "Threshold is strict")

    def test_steady_cruise_band_is_inclusive(self):
        self.assertTrue(sf.classify(70.0, 0.0, 5.0).is_steady_cruise)
        self.assertTrue(sf.classify(105.0, 0.0, 5.0).is_steady_cruise)
        self.assertFalse(sf.classify(105.5, 0.0, 5.0).is_steady_cruise)
        self.assertFalse(sf.classify(69.9, 0.0, 5.0).is_steady_cruise)

    def test_nothing_is_stable_early_in_a_drive(self):
        state = sf.classify(80.0, 0.0, sf.speed_std_dev(history_of([80])))
        self.assertFalse(state.is_stable)
        self.assertFalse(state.is_overrun_like)


if __name__ == '__main__':
    unittest.main()
