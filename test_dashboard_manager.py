import unittest
from types import SimpleNamespace

import matplotlib

matplotlib.use("Agg")

from dashboard_manager import PAUSE_KEY, DashboardManager  # noqa: E402


class TestDashboardKeys(unittest.TestCase):

    def test_pause_key_is_free_of_default_keymaps(self):
        bound = set()
        for name, keys in matplotlib.rcParamsDefault.items():
            if name.startswith("keymap."):
                bound.update(keys)
        self.assertNotIn(PAUSE_KEY, bound)

    def test_space_requests_pause(self):
        dashboard = DashboardManager()
        dashboard.on_key_press(SimpleNamespace(key=PAUSE_KEY))
        self.assertTrue(dashboard.pause_requested)
        self.assertFalse(dashboard.stopped)

    def test_pan_key_does_not_pause(self):
        dashboard = DashboardManager()
        dashboard.on_key_press(SimpleNamespace(key="p"))
        self.assertFalse(dashboard.pause_requested)

    def test_q_and_close_stop(self):
        dashboard = DashboardManager()
        dashboard.on_key_press(SimpleNamespace(key="q"))
        self.assertTrue(dashboard.stopped)

        dashboard = DashboardManager()
        dashboard.on_close_event(None)
        self.assertTrue(dashboard.stopped)


if __name__ == '__main__':
    unittest.main()
