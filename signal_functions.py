# signal_functions.py
#
# Speed smoothing and driving-regime classification.
# All speeds are km/h, accelerations km/h per second.
#
# MIT License
#
# Copyright (c) 2025 Chris Cullin

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

import constants as c

if TYPE_CHECKING:
    from drive_session import SpeedHistory


# --- Smoothing ---


def smoothed_speed(history: "SpeedHistory", window=c.SPEED_SMOOTH_WINDOW):
    """Moving average of the last ``min(window, len)`` raw speeds; 0 when empty."""
    recent = history.last(window)
    if recent.size == 0:
        return 0.0
    return float(np.mean(recent))


def short_average(history: "SpeedHistory", window=c.URBAN_AVG_WINDOW):
    """
    Mean of the last ``window`` speeds.

    Used by the urban penalty, with a window shorter than the full history so a
    slowdown registers before older fast samples dilute it.
    """
    recent = history.last(window)
    if recent.size == 0:
        return 0.0
    return float(np.mean(recent))


# --- Stability ---


def speed_std_dev(history: "SpeedHistory", window=c.STD_DEV_WINDOW):
    """
    Population standard deviation of the last ``window`` raw speeds.

    Returns STD_DEV_SENTINEL with fewer than two samples so nothing is
    classified stable at the very start of a drive.
    """
    recent = history.last(window)
    if recent.size < 2:
        return c.STD_DEV_SENTINEL
    return float(np.std(recent))


def smoothed_acceleration(smooth_kph, prev_smooth_kph, delta_seconds):
    """
    Acceleration from consecutive *smoothed* speeds, clamped to +/- ACCEL_CLAMP_KPH_S.
    Never pass raw speeds here.
    """
    if prev_smooth_kph is None or delta_seconds <= 0:
        return 0.0
    accel = (smooth_kph - prev_smooth_kph) / delta_seconds
    return float(np.clip(accel, -c.ACCEL_CLAMP_KPH_S, c.ACCEL_CLAMP_KPH_S))


@dataclass(frozen=True)
class DrivingState:
    smooth_kph: float
    acceleration: float
    std_dev: float
    is_stable: bool
    is_light_load_cruise: bool
    is_overrun_like: bool
    is_coasting: bool
    is_steady_cruise: bool


def classify(smooth_kph, acceleration, std_dev):
    """Derives the regime flags from smoothed speed, clamped acceleration and spread."""
    is_stable = std_dev < c.STABLE_STD_KPH and abs(acceleration) < c.STABLE_ACCEL_KPH_S

    is_light_load_cruise = (
        smooth_kph > c.LIGHT_LOAD_MIN_KPH
        and is_stable
        and std_dev < c.LIGHT_LOAD_STD_KPH
    )

    # decelerating, or held steady by gravity with the throttle closed
    is_overrun_like = smooth_kph > c.OVERRUN_MIN_KPH and (
        acceleration < c.OVERRUN_DECEL_KPH_S
        or (is_stable and std_dev < c.OVERRUN_STD_KPH)
    )

    is_coasting = smooth_kph > c.COASTING_MIN_KPH and acceleration < c.COASTING_DECEL_KPH_S

    is_steady_cruise = (
        c.STEADY_CRUISE_MIN_KPH <= smooth_kph <= c.STEADY_CRUISE_MAX_KPH
        and abs(acceleration) < c.STEADY_CRUISE_ACCEL_KPH_S
    )

    return DrivingState(
        smooth_kph=smooth_kph,
        acceleration=acceleration,
        std_dev=std_dev,
        is_stable=is_stable,
        is_light_load_cruise=is_light_load_cruise,
        is_overrun_like=is_overrun_like,
        is_coasting=is_coasting,
        is_steady_cruise=is_steady_cruise,
    )
