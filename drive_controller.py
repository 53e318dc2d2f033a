# drive_controller.py
#
# MIT License
#
# Copyright (c) 2025 Chris Cullin

import asyncio
import contextlib
import logging
import time

import numpy as np

import constants as c
import fuel_model as fm
from drive_session import (
    DriveSession,
    FixedKeyDictionary,
    SpeedSample,
    average_speed_kph,
    estimated_mpg,
    summarize,
)
from fuel_model import SampleStatus, StepResult
from idle_timer import IdleTimer, idle_tick

logger = logging.getLogger(__name__)


class DriveController:
    """
    Owns the live DriveSession and the two producers that mutate it.

    Samples arrive through an asyncio.Queue drained by a consumer task; the idle
    timer ticks once per ``tick_interval``. Both handlers are plain synchronous
    calls, so each update runs to completion before the loop switches.
    """

    def __init__(self, store=None, price_provider=None, tick_interval=c.TICK_INTERVAL_S, clock=time.time):
        self.store = store
        self.price_provider = price_provider
        self.clock = clock

        self.session = None
        self.paused = False
        self.samples = None
        self.last_result = None
        self.listeners = []  # called with the live snapshot after each accepted sample

        self.idle_timer = IdleTimer(self._on_tick, interval=tick_interval)
        self._consumer = None

        self.snapshot_dict = FixedKeyDictionary({
            "elapsed_s": 0,
            "speed_mph": 0.0,
            "smoothed_kph": 0.0,
            "distance_mi": 0.0,
            "fuel_l": 0.0,
            "avg_speed_mph": 0.0,
            "mpg": 0.0,
            "rate_l_100km": 0.0,
            "credit_km": 0.0,
        })

    # ---------------------------------------------------------------------------
    @property
    def is_active(self):
        return self.session is not None

    @property
    def is_paused(self):
        return self.is_active and self.paused

    def add_listener(self, callback):
        self.listeners.append(callback)

    # =================================================================
    # LIFECYCLE
    # =================================================================
    def start(self):
        """Begins a drive. Must be called from inside the running event loop."""
        if self.session is not None:
            return self.session

        self.session = DriveSession(start_time=self.clock())
        self.paused = False
        self.last_result = None
        self.samples = asyncio.Queue()
        self._consumer = asyncio.get_running_loop().create_task(self._consume(), name="sample-consumer")
        self.idle_timer.start()
        logger.info("Drive started at %.0f", self.session.start_time)
        return self.session

    def pause(self):
        if self.session is None or self.paused:
            return
        self.paused = True
        self.idle_timer.stop()
        logger.info("Drive paused at %ds", self.session.active_seconds)

    def resume(self):
        if self.session is None or not self.paused:
            return
        self.paused = False
        # the next fix re-anchors timing so the paused gap is not driven distance
        self.session.last_sample_time = None
        self.idle_timer.start()
        logger.info("Drive resumed")

    def toggle_pause(self):
        if self.paused:
            self.resume()
        else:
            self.pause()
        return self.paused

    async def stop(self):
        """
        Ends the drive: cancels both producers, summarises the session, stores it.
        Returns the DriveSummary, or None when no drive was active.
        """
        if self.session is None:
            return None

        self.idle_timer.stop()
        consumer, self._consumer = self._consumer, None
        if consumer is not None:
            consumer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await consumer

        session, self.session = self.session, None
        self.paused = False
        self.samples = None

        price = await self._lookup_price()
        summary = summarize(session, price)

        if self.store is not None:
            try:
                self.store.append(summary)
            except Exception:
                logger.exception("Could not save drive summary")

        logger.info(
            "Drive stopped: %.1f mi, %.3f L, %.1f mpg",
            summary.distance_miles, summary.fuel_used_litres, summary.estimated_mpg,
        )
        return summary

    # =================================================================
    # PRODUCERS
    # =================================================================
    def submit(self, position):
        """Queues one raw position fix. Returns False when no drive is running."""
        if self.samples is None:
            return False
        self.samples.put_nowait(position)
        return True

    async def pump(self, source):
        """
        Feeds an async iterator of position fixes into the sample channel until it
        is exhausted or the drive stops. Source errors are logged, never raised.
        """
        try:
            async for position in source:
                if not self.submit(position):
                    break
        except Exception as e:
            logger.error("Sample source failed: %s", e)

    async def _consume(self):
        while True:
            position = await self.samples.get()
            self.handle_position(position)

    def handle_position(self, position) -> StepResult:
        if self.session is None:
            return StepResult(SampleStatus.INACTIVE)
        if self.paused:
            return StepResult(SampleStatus.PAUSED)

        try:
            sample = SpeedSample.from_position(position)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Malformed position fix %r: %s", position, e)
            return StepResult(SampleStatus.NO_SPEED)

        result = fm.apply_sample(self.session, sample)
        self.last_result = result

        if not result.accepted:
            logger.debug("Sample not accepted: %s", result.status.value)
            return result

        snapshot = self.snapshot()
        for callback in self.listeners:
            try:
                callback(snapshot)
            except Exception:
                logger.exception("Snapshot listener failed")
        return result

    def _on_tick(self):
        if self.session is None or self.paused:
            return
        idle_tick(self.session)

    # =================================================================
    # OUTPUTS
    # =================================================================
    def snapshot(self):
        session = self.session
        if session is None:
            return self.snapshot_dict

        result = self.last_result
        rate = 0.0
        smooth = session.prev_smoothed_speed or 0.0
        if result is not None and result.rate_l_per_100km is not None and np.isfinite(result.rate_l_per_100km):
            rate = result.rate_l_per_100km

        self.snapshot_dict.update({
            "elapsed_s": session.active_seconds,
            "speed_mph": session.last_speed * c.KM_TO_MILES,
            "smoothed_kph": smooth,
            "distance_mi": session.distance_km * c.KM_TO_MILES,
            "fuel_l": session.fuel_used_litres,
            "avg_speed_mph": average_speed_kph(session) * c.KM_TO_MILES,
            "mpg": estimated_mpg(session.distance_km, session.fuel_used_litres),
            "rate_l_100km": rate,
            "credit_km": session.downhill_credit_km,
        })
        return self.snapshot_dict

    async def _lookup_price(self):
        if self.price_provider is None:
            return 0.0
        try:
            price = await self.price_provider()
        except Exception as e:
            logger.warning("Fuel price provider failed: %s", e)
            return 0.0
        if price is None or not np.isfinite(price):
            logger.warning("No fuel price available, recording cost as 0")
            return 0.0
        return float(price)
