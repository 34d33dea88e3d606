# -*- coding: utf-8 -*-
"""
wheel_phase.session_io

Sessie CSV (long format), één rij per sensor-sample:

    sensor,t_s,x,y,z
    mag,0.00,100.0,0.0,45.0
    gyro,0.00,0.0,0.0,0.05
    ...

sensor ∈ {mag, gyro, accel}.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, Tuple

import numpy as np
import pandas as pd

from .synthetic import SyntheticSession, iter_events

COLUMNS = ["sensor", "t_s", "x", "y", "z"]
VALID_SENSORS = ("mag", "gyro", "accel")


def session_to_frame(session: SyntheticSession) -> pd.DataFrame:
    rows = list(iter_events(session))
    return pd.DataFrame(rows, columns=COLUMNS)


def save_session_csv(session, csv_path) -> Path:
    """Schrijf een SyntheticSession of DataFrame naar CSV; return het pad."""
    df = session if isinstance(session, pd.DataFrame) else session_to_frame(session)
    path = Path(csv_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df[COLUMNS].to_csv(path, index=False)
    return path


def load_session_csv(csv_path) -> pd.DataFrame:
    """Laad en valideer een sessie CSV; rijen gesorteerd op t_s (stabiel)."""
    df = pd.read_csv(csv_path)

    missing = [c for c in COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"{csv_path}: missing columns {missing}")

    unknown = sorted(set(df["sensor"]) - set(VALID_SENSORS))
    if unknown:
        raise ValueError(f"{csv_path}: unknown sensor values {unknown}")

    df = df.sort_values("t_s", kind="mergesort").reset_index(drop=True)
    return df


def frame_events(df: pd.DataFrame) -> Iterator[Tuple[str, float, float, float, float]]:
    for row in df[COLUMNS].itertuples(index=False):
        yield row.sensor, float(row.t_s), float(row.x), float(row.y), float(row.z)


def frame_to_session(df: pd.DataFrame) -> SyntheticSession:
    """Terug naar losse numpy streams (handig voor plots)."""
    def pick(sensor: str):
        part = df[df["sensor"] == sensor]
        return part["t_s"].to_numpy(dtype=float), part[["x", "y", "z"]].to_numpy(dtype=float)

    t_mag, mag = pick("mag")
    t_gyro, gyro = pick("gyro")
    t_accel, accel = pick("accel")
    return SyntheticSession(
        t_mag=t_mag,
        mag=mag if len(mag) else np.empty((0, 3)),
        t_gyro=t_gyro,
        gyro=gyro if len(gyro) else np.empty((0, 3)),
        t_accel=t_accel,
        accel=accel if len(accel) else np.empty((0, 3)),
    )
