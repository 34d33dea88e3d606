# -*- coding: utf-8 -*-
"""
wheel_phase.profiles

DetectorConfig + preset profielen voor de PCA phase-tracking pipeline.

Rol:
- Eén expliciete config-dataclass i.p.v. globale settings verspreid over componenten.
- Preset profielen (default / handheld / bench).
- Laden uit JSON (zelfde layout-idee als de xram profielen) en uit een SettingsStore.
- validate(): onvervulbare configuraties worden bij constructie geweigerd.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional


# === DetectorConfig ==========================================================

@dataclass
class DetectorConfig:
    """Configureerbaar profiel voor de realtime phase-tracking pipeline."""
    name: str = "custom"

    # Window
    sample_rate_hz: float = 50.0
    window_seconds: float = 1.0
    min_window_fill: float = 0.5
    plane_update_every: int = 1

    # Baseline (EMA van het ambient veld)
    baseline_alpha: float = 0.01
    baseline_slowdown: float = 0.1

    # Plane / lock
    min_planarity: float = 0.7
    unlock_ratio: float = 0.8
    anchor_in_plane: bool = True

    # Validity gate
    planar_grace_ms: float = 500.0
    motion_history_s: float = 1.0
    gyro_max_threshold: float = 1.0       # rad/s
    accel_stddev_threshold: float = 0.5   # m/s²
    accel_min_samples: int = 5
    motion_threshold_rad: float = 0.1
    liveness_window_s: float = 1.0

    # Counter
    learn_threshold_rad: float = 0.01

    # Physical
    wheel_circumference_cm: float = 11.78

    @property
    def window_capacity(self) -> int:
        return int(self.sample_rate_hz * self.window_seconds)

    @property
    def min_window_size(self) -> int:
        return int(self.window_capacity * self.min_window_fill)

    def validate(self) -> "DetectorConfig":
        """Raise ValueError als de config nooit runtime vervuld kan worden."""
        if self.sample_rate_hz <= 0 or self.window_seconds <= 0:
            raise ValueError(
                f"sample_rate_hz and window_seconds must be > 0 "
                f"(got {self.sample_rate_hz}, {self.window_seconds})"
            )
        if self.min_window_size > self.window_capacity:
            raise ValueError(
                f"min_window_size ({self.min_window_size}) > "
                f"window_capacity ({self.window_capacity})"
            )
        if self.min_window_size < 3:
            raise ValueError(
                f"min_window_size must be >= 3 for a 3D covariance "
                f"(got {self.min_window_size})"
            )
        if not 0.0 < self.baseline_alpha <= 1.0:
            raise ValueError(f"baseline_alpha must be in (0, 1] (got {self.baseline_alpha})")
        if not 0.0 <= self.baseline_slowdown <= 1.0:
            raise ValueError(f"baseline_slowdown must be in [0, 1] (got {self.baseline_slowdown})")
        if not 0.0 < self.min_planarity <= 1.0:
            raise ValueError(f"min_planarity must be in (0, 1] (got {self.min_planarity})")
        if not 0.0 < self.unlock_ratio <= 1.0:
            raise ValueError(f"unlock_ratio must be in (0, 1] (got {self.unlock_ratio})")
        if self.plane_update_every < 1:
            raise ValueError(f"plane_update_every must be >= 1 (got {self.plane_update_every})")
        return self


# Preset profielen
PROFILE_DEFAULT = DetectorConfig(name="default")

# Telefoon in de hand: meer tolerantie voor trillen, langere grace
PROFILE_HANDHELD = DetectorConfig(
    name="handheld",
    min_planarity=0.65,
    planar_grace_ms=800.0,
    gyro_max_threshold=1.5,
    accel_stddev_threshold=0.8,
)

# Vaste opstelling: trager baseline, strenger op vlakheid
PROFILE_BENCH = DetectorConfig(
    name="bench",
    window_seconds=2.0,
    baseline_alpha=0.005,
    min_planarity=0.8,
    planar_grace_ms=300.0,
    gyro_max_threshold=0.5,
    accel_stddev_threshold=0.3,
)

PROFILES: Dict[str, DetectorConfig] = {
    p.name: p for p in (PROFILE_DEFAULT, PROFILE_HANDHELD, PROFILE_BENCH)
}


def get_profile(name: str) -> DetectorConfig:
    if name not in PROFILES:
        raise ValueError(f"Profile '{name}' not found. Available: {list(PROFILES.keys())}")
    return replace(PROFILES[name])


# === JSON loader =============================================================

def load_config_from_json(json_path: str, profile_name: str) -> DetectorConfig:
    """Load a DetectorConfig from a JSON profiles document."""
    with open(json_path, "r", encoding="utf-8") as f:
        doc = json.load(f)

    profiles = doc.get("profiles", {})
    if profile_name not in profiles:
        raise ValueError(
            f"Profile '{profile_name}' not found in {json_path}. "
            f"Available: {list(profiles.keys())}"
        )

    params = profiles[profile_name].get("params", {})
    # ontbrekende secties → defaults
    p = {section: params.get(section, {}) for section in ("window", "plane", "baseline", "gate", "counter")}
    d = DetectorConfig()

    return DetectorConfig(
        name=profile_name,
        sample_rate_hz=p["window"].get("sample_rate_hz", d.sample_rate_hz),
        window_seconds=p["window"].get("seconds", d.window_seconds),
        min_window_fill=p["window"].get("min_fill", d.min_window_fill),
        plane_update_every=p["plane"].get("update_every", d.plane_update_every),
        baseline_alpha=p["baseline"].get("alpha", d.baseline_alpha),
        baseline_slowdown=p["baseline"].get("slowdown", d.baseline_slowdown),
        min_planarity=p["plane"].get("min_planarity", d.min_planarity),
        unlock_ratio=p["plane"].get("unlock_ratio", d.unlock_ratio),
        anchor_in_plane=p["plane"].get("anchor_in_plane", d.anchor_in_plane),
        planar_grace_ms=p["gate"].get("planar_grace_ms", d.planar_grace_ms),
        motion_history_s=p["gate"].get("history_s", d.motion_history_s),
        gyro_max_threshold=p["gate"].get("gyro_max", d.gyro_max_threshold),
        accel_stddev_threshold=p["gate"].get("accel_stddev", d.accel_stddev_threshold),
        accel_min_samples=p["gate"].get("accel_min_samples", d.accel_min_samples),
        motion_threshold_rad=p["gate"].get("motion_threshold_rad", d.motion_threshold_rad),
        liveness_window_s=p["gate"].get("liveness_window_s", d.liveness_window_s),
        learn_threshold_rad=p["counter"].get("learn_threshold_rad", d.learn_threshold_rad),
        wheel_circumference_cm=p["counter"].get("wheel_circumference_cm", d.wheel_circumference_cm),
    ).validate()


# === SettingsStore koppeling =================================================

CONFIG_KEY_PREFIX = "detector."


def save_config(store, config: DetectorConfig) -> None:
    """Schrijf alle velden naar de store (alleen op sessie-grenzen aanroepen)."""
    for f in fields(config):
        store.save(CONFIG_KEY_PREFIX + f.name, getattr(config, f.name))


def load_config(store, fallback: Optional[DetectorConfig] = None) -> DetectorConfig:
    """Lees een config uit de store; ontbrekende keys komen uit fallback."""
    base = fallback or PROFILE_DEFAULT
    values: Dict[str, Any] = {}
    for f in fields(base):
        values[f.name] = store.load(CONFIG_KEY_PREFIX + f.name, getattr(base, f.name))
    return DetectorConfig(**values).validate()
