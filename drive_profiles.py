# drive_profiles.py
#
# MIT License
#
# Copyright (c) 2025 Chris Cullin

import asyncio
import csv

import numpy as np

import constants as c


# =============================================================================
# Profile classes, one per kind of drive
# =============================================================================

class BaseProfile:
    """Target road speed over time. Subclasses override ``speed_at``."""
    name = "base"
    gps_noise_kph = 0.6
    dropout_prob = 0.02  # fixes that arrive with no speed

    def speed_at(self, t):
        """Return the true road speed in km/h at ``t`` seconds into the drive."""
        return 0.0


class IdleProfile(BaseProfile):
    """ Parked with the engine running """
    name = "idle"
    gps_noise_kph = 0.3

    def speed_at(self, t):
        return 0.0


class UrbanProfile(BaseProfile):
    """ Stop-start town driving: 90 s cycles of pull away, 40 km/h, brake, wait """
    name = "urban"
    CYCLE_S = 90.0
    CRUISE_KPH = 40.0

    def speed_at(self, t):
        phase = t % self.CYCLE_S
        if phase < 10:
            return self.CRUISE_KPH * phase / 10.0
        if phase < 55:
            return self.CRUISE_KPH
        if phase < 65:
            return self.CRUISE_KPH * (65 - phase) / 10.0
        return 0.0


class MotorwayProfile(BaseProfile):
    """ Slip-road acceleration then steady cruise with gentle undulation """
    name = "motorway"
    CRUISE_KPH = 100.0
    RAMP_S = 40.0

    def speed_at(self, t):
        if t < self.RAMP_S:
            return self.CRUISE_KPH * t / self.RAMP_S
        return self.CRUISE_KPH + 3.0 * np.sin(2 * np.pi * t / 300.0)


class DownhillProfile(BaseProfile):
    """ Long descent held at 70 km/h on engine braking, then a climb back at 60 km/h """
    name = "downhill"
    DESCENT_S = 240.0
    gps_noise_kph = 0.1

    def speed_at(self, t):
        if t < 20:
            return 70.0 * t / 20.0
        if t < self.DESCENT_S:
            return 70.0
        if t < self.DESCENT_S + 20:
            return 70.0 - (t - self.DESCENT_S) * 0.5
        return 60.0 + 8.0 * np.sin(2 * np.pi * t / 45.0)


class MixedProfile(BaseProfile):
    """ Town, then A-road, then back into town """
    name = "mixed"

    def __init__(self):
        self.urban = UrbanProfile()
        self.motorway = MotorwayProfile()

    def speed_at(self, t):
        if t < 270:
            return self.urban.speed_at(t)
        if t < 900:
            return min(self.motorway.speed_at(t - 270), 90.0)
        return self.urban.speed_at(t - 900)


PROFILES = {
    profile.name: profile
    for profile in (IdleProfile, UrbanProfile, MotorwayProfile, DownhillProfile, MixedProfile)
}


def create_profile(name):
    try:
        return PROFILES[name]()
    except KeyError:
        raise ValueError(f"Unknown profile '{name}', choose from {sorted(PROFILES)}") from None


# =============================================================================
# Sample sources
# =============================================================================

def synthetic_fixes(profile, duration_s, seed=None, start_ms=0.0):
    """
    Yields position fixes ``{"speed": m/s | None, "timestamp": ms}`` for
    ``profile`` with GPS noise, ~1 Hz cadence jitter and occasional dropouts.
    """
    rng = np.random.default_rng(seed)
    t = 0.0
    while t <= duration_s:
        true_kph = max(0.0, profile.speed_at(t))
        if rng.random() < profile.dropout_prob:
            speed_mps = None
        else:
            noisy_kph = max(0.0, true_kph + rng.normal(0.0, profile.gps_noise_kph)) if true_kph > 0 else 0.0
            speed_mps = noisy_kph / c.MPS_TO_KPH
        yield {"speed": speed_mps, "timestamp": start_ms + t * 1000.0}
        t += c.NOMINAL_SAMPLE_PERIOD_S + rng.uniform(-0.1, 0.1)


async def synthetic_positions(profile, duration_s, seed=None, speedup=1.0, start_ms=0.0):
    """Async source pacing ``synthetic_fixes`` against the loop clock, ``speedup`` times real time."""
    previous_ms = None
    for fix in synthetic_fixes(profile, duration_s, seed=seed, start_ms=start_ms):
        if previous_ms is not None:
            await asyncio.sleep((fix["timestamp"] - previous_ms) / 1000.0 / speedup)
        previous_ms = fix["timestamp"]
        yield fix


def read_fixes_csv(path):
    """
    Reads a recorded drive: ``timestamp_ms,speed_mps`` per row (header optional).
    An empty speed cell means the fix carried no speed.
    """
    fixes = []
    with open(path, newline="") as f:
        for row in csv.reader(f):
            if not row or row[0].strip().lower() in ("timestamp_ms", "timestamp"):
                continue
            timestamp = float(row[0])
            speed = row[1].strip() if len(row) > 1 else ""
            fixes.append({"speed": float(speed) if speed else None, "timestamp": timestamp})
    return fixes


async def csv_positions(path, speedup=1.0):
    previous_ms = None
    for fix in read_fixes_csv(path):
        if previous_ms is not None and fix["timestamp"] > previous_ms:
            await asyncio.sleep((fix["timestamp"] - previous_ms) / 1000.0 / speedup)
        previous_ms = fix["timestamp"]
        yield fix
