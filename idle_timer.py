# idle_timer.py
#
# MIT License
#
# Copyright (c) 2025 Chris Cullin

import asyncio
import logging

import constants as c

logger = logging.getLogger(__name__)

IDLE_LITRES_PER_TICK = c.IDLE_LITRES_PER_HOUR / c.SECONDS_PER_HOUR


def idle_tick(session):
    """
    One wall-clock second of drive time.

    Always advances ``active_seconds``; burns idle fuel only while the last
    reported speed is below IDLE_SPEED_KPH. Returns the litres burned.
    """
    session.active_seconds += 1
    if session.last_speed < c.IDLE_SPEED_KPH:
        session.fuel_used_litres += IDLE_LITRES_PER_TICK
        return IDLE_LITRES_PER_TICK
    return 0.0


class IdleTimer:
    """
    Cancellable periodic task calling ``on_tick()`` every ``interval`` seconds.

    Deadlines are scheduled from the loop clock so slow callbacks do not make
    the timer drift. Once ``stop()`` returns no further callbacks fire.
    """

    def __init__(self, on_tick, interval=c.TICK_INTERVAL_S):
        if interval <= 0:
            raise ValueError(f"interval must be > 0, got {interval}")
        self.on_tick = on_tick
        self.interval = interval
        self.ticks = 0
        self._task = None

    @property
    def running(self):
        return self._task is not None and not self._task.done()

    def start(self):
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name="idle-timer")

    def stop(self):
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self):
        loop = asyncio.get_running_loop()
        deadline = loop.time()
        while True:
            deadline += self.interval
            await asyncio.sleep(max(0.0, deadline - loop.time()))
            self.ticks += 1
            try:
                self.on_tick()
            except Exception:
                logger.exception("Idle tick handler failed")
