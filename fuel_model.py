# fuel_model.py
#
# MIT License
#
# Copyright (c) 2025 Chris Cullin

import enum
import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

import constants as c
import signal_functions as sf
from drive_session import SpeedSample
from signal_functions import DrivingState

logger = logging.getLogger(__name__)


class SampleStatus(enum.Enum):
    ACCEPTED = "accepted"
    FIRST_SAMPLE = "first_sample"  # anchors timing, no distance yet
    NO_SPEED = "no_speed"
    NON_POSITIVE_DT = "non_positive_dt"  # also non-finite timestamps
    NO_DISTANCE = "no_distance"  # stationary or below the moving gate
    BAD_RATE = "bad_rate"
    PAUSED = "paused"
    INACTIVE = "inactive"


@dataclass(frozen=True)
class MultiplierBreakdown:
    accel: float
    speed_efficiency: float
    steady_cruise: float
    coasting: float
    warmup: float
    urban: float

    @property
    def driving(self):
        """Product of the driving-style factors, before warm-up and urban adjustments."""
        return self.accel * self.speed_efficiency * self.steady_cruise * self.coasting

    @property
    def combined(self):
        return self.driving * self.warmup * self.urban

    @property
    def capped(self):
        return min(self.combined, c.MULTIPLIER_CAP)


@dataclass(frozen=True)
class StepResult:
    status: SampleStatus
    delta_seconds: float = 0.0
    delta_km: float = 0.0
    state: Optional[DrivingState] = None
    multipliers: Optional[MultiplierBreakdown] = None
    rate_l_per_100km: Optional[float] = None
    fuel_litres: float = 0.0  # total added this sample, payback included
    payback_litres: float = 0.0

    @property
    def accepted(self):
        return self.status is SampleStatus.ACCEPTED


# =================================================================
# MULTIPLIER MODEL
# =================================================================

def accel_multiplier(acceleration):
    if acceleration > c.HARD_ACCEL_KPH_S:
        return c.HARD_ACCEL_MULT
    if acceleration > c.MODERATE_ACCEL_KPH_S:
        return c.MODERATE_ACCEL_MULT
    return 1.0


def speed_efficiency_multiplier(smooth_kph):
    """Bowl curve: 1.0 at OPTIMAL_SPEED_KPH, rising linearly either side."""
    diff = abs(smooth_kph - c.OPTIMAL_SPEED_KPH)
    return 1.0 + (diff / c.OPTIMAL_SPEED_KPH) * c.SPEED_EFF_STRENGTH


def warmup_multiplier(active_seconds, distance_km):
    """
    Continuous warm-up penalty that decays with both elapsed time and distance.
    Whichever dimension says "colder" wins.
    """
    minutes = active_seconds / 60.0
    time_term = np.exp(-minutes / c.WARMUP_TIME_CONST_MIN)
    dist_term = np.exp(-distance_km / c.WARMUP_DIST_CONST_KM)
    return float(1.0 + c.WARMUP_PENALTY * max(time_term, dist_term))


def urban_multiplier(recent_avg_kph, smooth_kph):
    if recent_avg_kph < c.URBAN_AVG_KPH and smooth_kph < c.URBAN_CURRENT_KPH:
        return c.URBAN_MULT
    return 1.0


def compose_multiplier(state: DrivingState, active_seconds, distance_km, recent_avg_kph):
    coasting = 1.0
    if state.is_coasting and state.smooth_kph > c.COASTING_MIN_SPEED_KPH:
        coasting = c.COASTING_REDUCTION

    return MultiplierBreakdown(
        accel=accel_multiplier(state.acceleration),
        speed_efficiency=speed_efficiency_multiplier(state.smooth_kph),
        steady_cruise=c.STEADY_CRUISE_MULT if state.is_steady_cruise else 1.0,
        coasting=coasting,
        warmup=warmup_multiplier(active_seconds, distance_km),
        urban=urban_multiplier(recent_avg_kph, state.smooth_kph),
    )


def effective_rate(state: DrivingState, capped_multiplier):
    """
    L/100km for this sample. The multiplier is capped first; the light-load and
    overrun clamps are applied afterwards and only ever lower the rate.
    """
    rate = c.LITRES_PER_100KM * capped_multiplier
    if state.is_light_load_cruise:
        rate = min(rate, c.LIGHT_LOAD_RATE_CLAMP)
    if state.is_overrun_like:
        rate = min(rate, c.OVERRUN_RATE_CLAMP)
    return rate


# =================================================================
# DOWNHILL CREDIT LEDGER
# =================================================================

def apply_downhill_ledger(session, delta_km, is_overrun_like):
    """
    Accrues overrun distance as credit, or pays outstanding credit back.

    Credit and payback never happen on the same sample. Returns the extra
    litres charged for paid-back distance (0 while accruing).
    """
    if delta_km <= 0:
        return 0.0

    if is_overrun_like:
        session.downhill_credit_km += delta_km
        return 0.0

    if session.downhill_credit_km <= 0:
        return 0.0

    paid_km = min(delta_km, session.downhill_credit_km)
    session.downhill_credit_km -= paid_km
    if session.downhill_credit_km < 0:  # float residue
        session.downhill_credit_km = 0.0
    return (paid_km / 100.0) * c.PAYBACK_RATE


# =================================================================
# PER-SAMPLE UPDATE
# =================================================================

def apply_sample(session, sample: Optional[SpeedSample]) -> StepResult:
    """
    Advances ``session`` by one speed sample.

    The session is mutated in place and the outcome returned. Rejected samples
    (no speed, non-positive dt) leave the session untouched.
    """
    if sample is None or not np.isfinite(sample.speed_kph):
        return StepResult(SampleStatus.NO_SPEED)
    if not np.isfinite(sample.timestamp):
        return StepResult(SampleStatus.NON_POSITIVE_DT)

    speed_kph = sample.speed_kph
    history = session.recent_speeds

    # 1. first fix only anchors time and the smoothing baseline
    if session.last_sample_time is None:
        session.last_speed = speed_kph
        history.push(speed_kph)
        session.last_sample_time = sample.timestamp
        session.prev_smoothed_speed = sf.smoothed_speed(history)
        return StepResult(SampleStatus.FIRST_SAMPLE)

    delta_seconds = sample.timestamp - session.last_sample_time
    if not np.isfinite(delta_seconds) or delta_seconds <= 0:
        return StepResult(SampleStatus.NON_POSITIVE_DT, delta_seconds=delta_seconds)

    session.last_speed = speed_kph
    history.push(speed_kph)
    session.last_sample_time = sample.timestamp

    # 2. smoothed speed and acceleration
    smooth_kph = sf.smoothed_speed(history)
    acceleration = sf.smoothed_acceleration(
        smooth_kph, session.prev_smoothed_speed, delta_seconds
    )
    session.prev_smoothed_speed = smooth_kph

    # 3. distance, gated on raw speed
    prev_distance = session.distance_km
    if speed_kph >= c.MIN_MOVING_KPH:
        session.distance_km += (speed_kph / c.SECONDS_PER_HOUR) * delta_seconds
    delta_km = session.distance_km - prev_distance

    # 4. nothing travelled, nothing burned (the idle timer covers standing still)
    if delta_km <= 0:
        return StepResult(SampleStatus.NO_DISTANCE, delta_seconds=delta_seconds)

    # 5. classify and price the sample
    state = sf.classify(smooth_kph, acceleration, sf.speed_std_dev(history))
    multipliers = compose_multiplier(
        state,
        active_seconds=session.active_seconds,
        distance_km=session.distance_km,
        recent_avg_kph=sf.short_average(history),
    )
    rate = effective_rate(state, multipliers.capped)

    if not np.isfinite(rate) or rate < 0:
        logger.debug("Dropping fuel effect of sample at %.3f: rate=%r", sample.timestamp, rate)
        return StepResult(
            SampleStatus.BAD_RATE,
            delta_seconds=delta_seconds,
            delta_km=delta_km,
            state=state,
            multipliers=multipliers,
            rate_l_per_100km=rate,
        )

    payback = apply_downhill_ledger(session, delta_km, state.is_overrun_like)

    # 6. integrate fuel
    fuel = (delta_km / 100.0) * rate + payback
    session.fuel_used_litres += fuel

    return StepResult(
        SampleStatus.ACCEPTED,
        delta_seconds=delta_seconds,
        delta_km=delta_km,
        state=state,
        multipliers=multipliers,
        rate_l_per_100km=rate,
        fuel_litres=fuel,
        payback_litres=payback,
    )
