# drive_session.py
#
# MIT License
#
# Copyright (c) 2025 Chris Cullin

import collections
import collections.abc
import time
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Optional

import numpy as np

import constants as c


class FixedKeyDictionary(dict):
    """A dict whose key set is frozen after construction (snapshot rows, CSV headers)."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._valid_keys = frozenset(self.keys())
        self._is_initialized = True

    def _check_keys(self, keys, origin):
        if not hasattr(self, "_is_initialized"):
            return
        for key in keys:
            if key not in self._valid_keys:
                raise KeyError(
                    f"Attempted to add unknown key '{key}' via {origin}. "
                    f"Allowed keys: {sorted(self._valid_keys)}"
                )

    def __setitem__(self, key, value):
        self._check_keys([key], "assignment")
        super().__setitem__(key, value)

    def update(self, other=None, **kwargs):
        if other:
            if isinstance(other, collections.abc.Mapping):
                self._check_keys(other.keys(), "update()")
            else:
                other = list(other)
                self._check_keys([k for k, _ in other], "update()")
        self._check_keys(kwargs, "update(**kwargs)")
        if other:
            super().update(other, **kwargs)
        else:
            super().update(**kwargs)

    def setdefault(self, key, default=None):
        self._check_keys([key], "setdefault()")
        return super().setdefault(key, default)


# =================================================================
# Samples
# =================================================================

@dataclass(frozen=True)
class SpeedSample:
    """One speed reading from the location service (km/h, seconds since epoch)."""
    speed_kph: float
    timestamp: float

    @classmethod
    def from_position(cls, position) -> Optional["SpeedSample"]:
        """
        Converts a raw position fix ``{"speed": m/s | None, "timestamp": ms}``.
        Returns None when the fix carries no speed.
        """
        speed_mps = position.get("speed")
        if speed_mps is None:
            return None
        return cls(
            speed_kph=float(speed_mps) * c.MPS_TO_KPH,
            timestamp=float(position["timestamp"]) / 1000.0,
        )


class SpeedHistory:
    """Bounded FIFO of the most recent raw speeds."""

    def __init__(self, capacity=c.HISTORY_CAPACITY):
        self.capacity = capacity
        self._speeds = collections.deque(maxlen=capacity)

    def push(self, speed_kph):
        self._speeds.append(float(speed_kph))

    def last(self, n):
        """Returns the last ``n`` speeds (fewer if the history is shorter) as an array."""
        if n <= 0 or not self._speeds:
            return np.empty(0)
        return np.asarray(self._speeds, dtype=float)[-n:]

    def copy(self):
        clone = SpeedHistory(self.capacity)
        clone._speeds.extend(self._speeds)
        return clone

    def __len__(self):
        return len(self._speeds)

    def __iter__(self):
        return iter(self._speeds)

    def __eq__(self, other):
        if not isinstance(other, SpeedHistory):
            return NotImplemented
        return self.capacity == other.capacity and list(self._speeds) == list(other._speeds)

    def __repr__(self):
        return f"SpeedHistory({list(self._speeds)!r}, capacity={self.capacity})"


# =================================================================
# Session state
# =================================================================

@dataclass
class DriveSession:
    """Mutable per-drive state. Owned by one controller while the drive is active."""
    start_time: float = field(default_factory=time.time)
    last_speed: float = 0.0  # km/h, gates the idle timer only
    recent_speeds: SpeedHistory = field(default_factory=SpeedHistory)
    last_sample_time: Optional[float] = None
    prev_smoothed_speed: Optional[float] = None
    active_seconds: int = 0
    distance_km: float = 0.0
    downhill_credit_km: float = 0.0
    fuel_used_litres: float = 0.0

    def copy(self):
        return DriveSession(
            start_time=self.start_time,
            last_speed=self.last_speed,
            recent_speeds=self.recent_speeds.copy(),
            last_sample_time=self.last_sample_time,
            prev_smoothed_speed=self.prev_smoothed_speed,
            active_seconds=self.active_seconds,
            distance_km=self.distance_km,
            downhill_credit_km=self.downhill_credit_km,
            fuel_used_litres=self.fuel_used_litres,
        )


# ----------------------------------------------------------------------
def average_speed_kph(session):
    if session.active_seconds == 0:
        return 0.0
    hours = session.active_seconds / c.SECONDS_PER_HOUR
    return session.distance_km / hours


def estimated_mpg(distance_km, fuel_litres):
    """Imperial mpg with the calibration factor applied. 0 when no fuel was used."""
    if fuel_litres == 0:
        return 0.0
    miles = distance_km * c.KM_TO_MILES
    gallons = fuel_litres * c.LITRES_TO_GALLONS
    return (miles / gallons) * c.MPG_CALIBRATION


# =================================================================
# Finalised drive
# =================================================================

@dataclass(frozen=True)
class DriveSummary:
    date: str  # dd/mm/yyyy
    start_time: float
    duration_seconds: int
    distance_miles: float
    average_speed_mph: float
    fuel_used_litres: float
    fuel_cost: float
    estimated_mpg: float

    def to_record(self):
        return asdict(self)

    @classmethod
    def from_record(cls, record):
        return cls(**{k: record[k] for k in cls.__dataclass_fields__})


def summarize(session, price_pence_per_litre=0.0, now=None):
    """
    Freezes a session into a DriveSummary.

    :param price_pence_per_litre: local fuel price; None or non-finite means unknown (cost 0)
    :param now: datetime used for the date stamp, defaults to today
    """
    now = now or datetime.now()
    price = price_pence_per_litre if price_pence_per_litre is not None else 0.0
    fuel_cost = session.fuel_used_litres * (price / 100.0)
    if not np.isfinite(fuel_cost):
        fuel_cost = 0.0

    return DriveSummary(
        date=now.strftime("%d/%m/%Y"),
        start_time=session.start_time,
        duration_seconds=int(session.active_seconds),
        distance_miles=round(session.distance_km * c.KM_TO_MILES, 1),
        average_speed_mph=round(average_speed_kph(session) * c.KM_TO_MILES, 1),
        fuel_used_litres=round(session.fuel_used_litres, 3),
        fuel_cost=float(fuel_cost),
        estimated_mpg=round(estimated_mpg(session.distance_km, session.fuel_used_litres), 1),
    )
