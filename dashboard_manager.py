# dashboard_manager.py
#
# MIT License
#
# Copyright (c) 2025 Chris Cullin

import logging

import matplotlib.pyplot as plt
from matplotlib.gridspec import GridSpec

logger = logging.getLogger(__name__)

# not bound by any default matplotlib keymap
PAUSE_KEY = " "


class DashboardManager:
    """Live drive display: telemetry text on the left, speed and fuel traces on the right."""

    def __init__(self, max_points=3600):
        self.fig = None
        self.text_ax = None
        self.speed_ax = None
        self.fuel_ax = None
        self.text = None
        self.speed_line = None
        self.fuel_line = None
        self.enabled = True
        self.stopped = False
        self.pause_requested = False

        self.max_points = max_points
        self.t_hist = []
        self.speed_hist = []
        self.fuel_hist = []

    def get_or_create_figure(self):
        if self.fig is None:
            plt.ion()
            self.fig = plt.figure(figsize=(14, 8))

            gs = GridSpec(2, 2, figure=self.fig,
                          width_ratios=[1, 3],
                          height_ratios=[1, 1],
                          wspace=0.4,
                          hspace=0.3)

            self.text_ax = self.fig.add_subplot(gs[:, 0])
            self.text_ax.axis('off')
            self.text = self.text_ax.text(0.05, 0.95, "", va='top', ha='left',
                                          fontsize=10, family='monospace')

            self.speed_ax = self.fig.add_subplot(gs[0, 1])
            self.speed_ax.set_title("Speed")
            self.speed_ax.set_ylabel("mph")
            self.speed_ax.grid(alpha=0.3)
            (self.speed_line,) = self.speed_ax.plot([], [], color="tab:blue")

            self.fuel_ax = self.fig.add_subplot(gs[1, 1], sharex=self.speed_ax)
            self.fuel_ax.set_title("Fuel used")
            self.fuel_ax.set_ylabel("L")
            self.fuel_ax.set_xlabel("elapsed (s)")
            self.fuel_ax.grid(alpha=0.3)
            (self.fuel_line,) = self.fuel_ax.plot([], [], color="tab:orange")

            self.fig.canvas.mpl_connect("key_press_event", self.on_key_press)
            self.fig.canvas.mpl_connect("close_event", self.on_close_event)

        return self.fig

    def update(self, snapshot):
        if not self.enabled:
            return

        lines = [
            "╔══════════════════════════════════╗",
            "║           LIVE DRIVE             ║",
            "╚══════════════════════════════════╝",
            "",
            f"Elapsed:        {snapshot['elapsed_s']:8.0f} s",
            f"Speed:          {snapshot['speed_mph']:8.1f} mph",
            f"Smoothed:       {snapshot['smoothed_kph']:8.1f} km/h",
            "",
            "─ Trip ─",
            f"Distance:       {snapshot['distance_mi']:8.2f} mi",
            f"Fuel:           {snapshot['fuel_l']:8.3f} L",
            f"Avg speed:      {snapshot['avg_speed_mph']:8.1f} mph",
            f"Economy:        {snapshot['mpg']:8.1f} mpg",
            "",
            "─ Model ─",
            f"Rate:           {snapshot['rate_l_100km']:8.2f} L/100km",
            f"Downhill cred:  {snapshot['credit_km']:8.3f} km",
            "",
            "[space] pause/resume   [q] stop",
        ]

        self.get_or_create_figure()
        self.text.set_text("\n".join(lines))

        self.t_hist.append(snapshot["elapsed_s"])
        self.speed_hist.append(snapshot["speed_mph"])
        self.fuel_hist.append(snapshot["fuel_l"])
        if len(self.t_hist) > self.max_points:
            del self.t_hist[0], self.speed_hist[0], self.fuel_hist[0]

        self.speed_line.set_data(self.t_hist, self.speed_hist)
        self.fuel_line.set_data(self.t_hist, self.fuel_hist)
        for ax in (self.speed_ax, self.fuel_ax):
            ax.relim()
            ax.autoscale_view()

    __call__ = update

    def draw(self):
        if self.enabled and self.fig:
            try:
                self.fig.canvas.draw_idle()
                self.fig.canvas.flush_events()
            except Exception as e:
                logger.warning("Dashboard disabled, window unavailable: %s", e)
                self.enabled = False

    def close(self):
        if self.fig:
            plt.close(self.fig)
            self.fig = None

    def on_key_press(self, event):
        if event.key == "q":
            self.stopped = True
        elif event.key == PAUSE_KEY:
            self.pause_requested = True

    def on_close_event(self, event):
        self.stopped = True
