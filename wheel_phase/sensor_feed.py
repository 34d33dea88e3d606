# -*- coding: utf-8 -*-
"""
wheel_phase.sensor_feed

SensorFeed: bounded wachtrijen per sensor (mag / gyro / accel) met één
consumer, zodat de pipeline single-threaded blijft terwijl de sensoren
vanuit willekeurige callback-threads pushen.

- Elke wachtrij is een deque(maxlen); bij overflow valt het oudste item
  eruit en telt dropped[sensor] op.
- De consumer neemt steeds de kop met de oudste timestamp over de drie
  wachtrijen, en stuurt die naar detector.feed_*_sample.
- drain() verwerkt synchroon alles wat er ligt; start()/stop() draaien
  hetzelfde in een daemon worker-thread (beide idempotent).
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Deque, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

SENSOR_MAG = "mag"
SENSOR_GYRO = "gyro"
SENSOR_ACCEL = "accel"
SENSORS = (SENSOR_MAG, SENSOR_GYRO, SENSOR_ACCEL)

Item = Tuple[float, float, float, float]   # (t, x, y, z)


class SensorFeed:

    def __init__(self, detector, maxlen: int = 1024):
        if maxlen < 1:
            raise ValueError(f"maxlen must be >= 1 (got {maxlen})")
        self.detector = detector
        self.maxlen = maxlen

        self._queues: Dict[str, Deque[Item]] = {s: deque(maxlen=maxlen) for s in SENSORS}
        self.dropped: Dict[str, int] = {s: 0 for s in SENSORS}
        self.dispatched = 0

        self._cond = threading.Condition()
        self._stop_event = threading.Event()
        self._worker: Optional[threading.Thread] = None

    # --- producer side --------------------------------------------------------

    def _push(self, sensor: str, x: float, y: float, z: float, t: float) -> None:
        with self._cond:
            q = self._queues[sensor]
            if len(q) == q.maxlen:
                self.dropped[sensor] += 1
                logger.debug("Queue %s full, dropping oldest item", sensor)
            q.append((t, x, y, z))
            self._cond.notify()

    def push_field(self, x: float, y: float, z: float, t: float) -> None:
        self._push(SENSOR_MAG, x, y, z, t)

    def push_gyro(self, x: float, y: float, z: float, t: float) -> None:
        self._push(SENSOR_GYRO, x, y, z, t)

    def push_accel(self, x: float, y: float, z: float, t: float) -> None:
        self._push(SENSOR_ACCEL, x, y, z, t)

    def pending(self) -> int:
        with self._cond:
            return sum(len(q) for q in self._queues.values())

    # --- consumer side --------------------------------------------------------

    def _pop_oldest(self) -> Optional[Tuple[str, Item]]:
        """Moet onder self._cond aangeroepen worden."""
        best: Optional[str] = None
        for sensor in SENSORS:
            q = self._queues[sensor]
            if q and (best is None or q[0][0] < self._queues[best][0][0]):
                best = sensor
        if best is None:
            return None
        return best, self._queues[best].popleft()

    def _dispatch(self, sensor: str, item: Item) -> None:
        t, x, y, z = item
        if sensor == SENSOR_MAG:
            self.detector.feed_field_sample(x, y, z, t)
        elif sensor == SENSOR_GYRO:
            self.detector.feed_gyro_sample(x, y, z, t)
        else:
            self.detector.feed_accel_sample(x, y, z, t)
        self.dispatched += 1

    def drain(self) -> int:
        """Verwerk alles wat nu in de wachtrijen staat; return het aantal items."""
        n = 0
        while True:
            with self._cond:
                nxt = self._pop_oldest()
            if nxt is None:
                return n
            self._dispatch(*nxt)
            n += 1

    # --- worker thread --------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._worker is not None and self._worker.is_alive()

    def start(self) -> None:
        if self._worker is not None and self._stop_event.is_set():
            # vorige stop() liep tegen de timeout aan
            self._worker.join()
            self._worker = None
        if self.is_running:
            return
        self._stop_event.clear()
        self._worker = threading.Thread(target=self._run, name="sensor-feed", daemon=True)
        self._worker.start()

    def stop(self, timeout: float = 1.0) -> bool:
        """Stop de worker; False als die na timeout nog bezig is (dan geen drain)."""
        if self._worker is None:
            return True
        self._stop_event.set()
        with self._cond:
            self._cond.notify_all()
        self._worker.join(timeout)
        if self._worker.is_alive():
            logger.warning("Sensor feed worker still busy after %.2fs, not draining", timeout)
            return False
        self._worker = None
        # restant synchroon afhandelen
        self.drain()
        return True

    def _run(self) -> None:
        while not self._stop_event.is_set():
            with self._cond:
                nxt = self._pop_oldest()
                if nxt is None:
                    self._cond.wait(timeout=0.05)
                    continue
            self._dispatch(*nxt)
