# trip_stats.py
#
# Aggregates over stored drive summaries.
#
# MIT License
#
# Copyright (c) 2025 Chris Cullin

import time
from datetime import datetime

import numpy as np

import constants as c

NUMERIC_FIELDS = (
    "start_time",
    "distance_miles",
    "duration_seconds",
    "fuel_used_litres",
    "fuel_cost",
    "average_speed_mph",
    "estimated_mpg",
)


def _to_float(value):
    try:
        return float(value)
    except (TypeError, ValueError):
        return float("nan")


def normalize_drive(record):
    """Coerces a stored record's numeric fields to floats (NaN where unreadable)."""
    return {key: _to_float(record.get(key)) for key in NUMERIC_FIELDS}


def drives_for_period(drives, period, now=None):
    """
    Normalised drives that started within ``period``.
    "lifetime" and unknown periods return everything.
    """
    normalized = [normalize_drive(d) for d in drives]
    days = c.PERIOD_DAYS.get(period)
    if days is None:
        return normalized

    now = time.time() if now is None else now
    cutoff = now - days * 24 * 60 * 60
    return [d for d in normalized if d["start_time"] >= cutoff]


def _finite_sum(drives, key):
    values = np.array([d.get(key, np.nan) for d in drives], dtype=float)
    return float(np.sum(values[np.isfinite(values)]))


def calculate_stats(drives):
    if not drives:
        return {
            "drives": 0,
            "miles": 0.0,
            "hours": 0.0,
            "avg_mpg": 0.0,
            "avg_speed_mph": 0.0,
            "fuel_cost": 0.0,
        }

    total_miles = _finite_sum(drives, "distance_miles")
    total_seconds = _finite_sum(drives, "duration_seconds")
    total_litres = _finite_sum(drives, "fuel_used_litres")
    total_cost = _finite_sum(drives, "fuel_cost")

    hours = total_seconds / c.SECONDS_PER_HOUR

    if total_litres > 0:
        avg_mpg = (total_miles / (total_litres * c.LITRES_TO_GALLONS)) * c.MPG_CALIBRATION
    else:
        avg_mpg = 0.0

    return {
        "drives": len(drives),
        "miles": total_miles,
        "hours": hours,
        "avg_mpg": avg_mpg,
        "avg_speed_mph": total_miles / hours if hours > 0 else 0.0,
        "fuel_cost": total_cost,
    }


def get_stats(drives, period, now=None):
    return calculate_stats(drives_for_period(drives, period, now=now))


# ----------------------------------------------------------------------
def format_duration(seconds):
    if seconds < 60:
        return f"{int(seconds)}s"
    if seconds < 3600:
        return f"{seconds / 60:.1f}min"
    return f"{seconds / 3600:.2f}hr"


def format_start_time(start_time):
    start_time = _to_float(start_time)
    if not np.isfinite(start_time):
        return "--:--"
    return datetime.fromtimestamp(start_time).strftime("%H:%M")


def trip_cost(record):
    """Stored cost, or the fallback price applied to the litres for old records without one."""
    cost = _to_float(record.get("fuel_cost"))
    if np.isfinite(cost):
        return cost
    return _to_float(record.get("fuel_used_litres")) * (c.DEFAULT_PRICE_PENCE / 100.0)


def format_trip_line(record):
    """One line per stored drive. Unreadable numbers print as nan rather than failing."""
    d = normalize_drive(record)
    duration = format_duration(d["duration_seconds"]) if np.isfinite(d["duration_seconds"]) else "nan"
    return (
        f"{record.get('date', '?')} @ {format_start_time(d['start_time'])} | "
        f"{duration} | "
        f"{d['distance_miles']:.1f}mi | "
        f"{d['average_speed_mph']:.1f}mph | "
        f"{d['estimated_mpg']:.1f}mpg | "
        f"{d['fuel_used_litres']:.3f}l | "
        f"£{trip_cost(record):.2f}"
    )
