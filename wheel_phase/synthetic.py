# -*- coding: utf-8 -*-
"""
wheel_phase.synthetic

Synthetische sessies: een magneet die ronddraait in een vlak met willekeurige
normaal, bovenop een constant ambient veld, plus optionele gyro/accel streams.

Gebruik voor tests en voor `replay synth`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np

GRAVITY = 9.81

# volgorde bij gelijke timestamp: hulpsensoren eerst, zodat de gate al bij is
_SENSOR_ORDER = {"gyro": 0, "accel": 1, "mag": 2}


@dataclass
class SyntheticSession:
    t_mag: np.ndarray
    mag: np.ndarray                      # (n, 3) µT
    t_gyro: np.ndarray = field(default_factory=lambda: np.empty(0))
    gyro: np.ndarray = field(default_factory=lambda: np.empty((0, 3)))   # rad/s
    t_accel: np.ndarray = field(default_factory=lambda: np.empty(0))
    accel: np.ndarray = field(default_factory=lambda: np.empty((0, 3)))  # m/s²
    freq_hz: float = 0.0
    normal: Tuple[float, float, float] = (0.0, 0.0, 1.0)

    @property
    def duration_s(self) -> float:
        if len(self.t_mag) == 0:
            return 0.0
        return float(self.t_mag[-1] - self.t_mag[0])


def plane_axes(normal: Sequence[float]) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Orthonormale (a1, a2, n) bij een gegeven normaal; voor n = z is a1 = x."""
    n = np.asarray(normal, dtype=float)
    n = n / np.linalg.norm(n)
    helper = np.array([1.0, 0.0, 0.0])
    if abs(float(np.dot(helper, n))) > 0.9:
        helper = np.array([0.0, 1.0, 0.0])
    a1 = helper - np.dot(helper, n) * n
    a1 = a1 / np.linalg.norm(a1)
    a2 = np.cross(n, a1)
    return a1, a2, n


def _timebase(duration_s: float, rate_hz: float) -> np.ndarray:
    n = int(round(duration_s * rate_hz))
    return np.arange(n + 1, dtype=float) / rate_hz


def generate_session(
    duration_s: float = 10.0,
    sample_rate_hz: float = 50.0,
    freq_hz: float = 1.0,
    amplitude: float = 100.0,
    ambient: Sequence[float] = (0.0, 0.0, 45.0),
    normal: Sequence[float] = (0.0, 0.0, 1.0),
    direction: int = 1,
    phase0: float = 0.0,
    noise_std: float = 0.0,
    seed: Optional[int] = 0,
    aux_rate_hz: float = 0.0,
    gyro_level: float = 0.05,
    gyro_bursts: Sequence[Tuple[float, float, float]] = (),
    include_end: bool = False,
) -> SyntheticSession:
    """
    Bouw een sessie. Samples op t = i / sample_rate_hz; met include_end=False
    valt het sample op t = duration_s weg.

    gyro_bursts: (t_start, t_end, |ω|): in [t_start, t_end) is |ω| = burst.
    aux_rate_hz = 0 → geen gyro/accel streams.
    """
    rng = np.random.default_rng(seed)
    a1, a2, n = plane_axes(normal)

    t = _timebase(duration_s, sample_rate_hz)
    if not include_end:
        t = t[:-1]
    theta = phase0 + direction * 2.0 * math.pi * freq_hz * t
    mag = (
        np.asarray(ambient, dtype=float)[None, :]
        + amplitude * (np.cos(theta)[:, None] * a1[None, :] + np.sin(theta)[:, None] * a2[None, :])
    )
    if noise_std > 0:
        mag = mag + rng.normal(0.0, noise_std, size=mag.shape)

    session = SyntheticSession(t_mag=t, mag=mag, freq_hz=freq_hz,
                               normal=tuple(float(v) for v in n))

    if aux_rate_hz > 0:
        ta = _timebase(duration_s, aux_rate_hz)[:-1]
        level = np.full(len(ta), gyro_level)
        for t0, t1, burst in gyro_bursts:
            level[(ta >= t0) & (ta < t1)] = burst
        # |ω| langs één as; richting doet er voor de gate niet toe
        gyro = np.zeros((len(ta), 3))
        gyro[:, 2] = level
        accel = np.zeros((len(ta), 3))
        accel[:, 2] = GRAVITY
        session.t_gyro, session.gyro = ta, gyro
        session.t_accel, session.accel = ta.copy(), accel

    return session


def iter_events(session: SyntheticSession) -> Iterator[Tuple[str, float, float, float, float]]:
    """Tijd-geordende (sensor, t, x, y, z) tuples over alle streams."""
    events: List[Tuple[float, int, str, np.ndarray]] = []
    for sensor, ts, xs in (
        ("mag", session.t_mag, session.mag),
        ("gyro", session.t_gyro, session.gyro),
        ("accel", session.t_accel, session.accel),
    ):
        for i in range(len(ts)):
            events.append((float(ts[i]), _SENSOR_ORDER[sensor], sensor, xs[i]))
    events.sort(key=lambda e: (e[0], e[1]))
    for t, _, sensor, v in events:
        yield sensor, t, float(v[0]), float(v[1]), float(v[2])


def feed_detector(detector, events) -> None:
    """Stuur (sensor, t, x, y, z) events naar een detector."""
    for sensor, t, x, y, z in events:
        if sensor == "mag":
            detector.feed_field_sample(x, y, z, t)
        elif sensor == "gyro":
            detector.feed_gyro_sample(x, y, z, t)
        elif sensor == "accel":
            detector.feed_accel_sample(x, y, z, t)
        else:
            raise ValueError(f"Unknown sensor {sensor!r}")
