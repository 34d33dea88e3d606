"""
wheel_phase – magnetische omwentelingsteller (PCA phase tracking).

Modules:
- profiles                  : DetectorConfig + preset profielen
- sample_buffer             : Sample3, schuivend venster
- baseline_tracker          : EMA van het ambient veld
- plane_estimator_v1_0      : PCA → rotatievlak + planarity
- basis_stabilizer          : teken/volgorde stabilisatie, lock/unlock
- phase_tracker             : projectie, atan2, unwrap
- motion_gate               : planarity / gyro / accel / liveness gate
- revolution_counter        : richting leren, 2π-omwentelingen tellen
- realtime_phase_v1_0       : PhaseTrackingDetector (volledige pipeline)
- threshold_detector        : magnitude-piekdetector
- detector_selector         : Detector contract + methode-keuze
- settings_store            : key-value opslag (memory / JSON)
- sensor_feed               : bounded wachtrijen, één consumer
- synthetic                 : synthetische sessies
- session_io                : sessie CSV (pandas)
- replay                    : CLI
"""

from .detector_selector import DetectionMethod, DetectorSelector
from .profiles import PROFILE_BENCH, PROFILE_DEFAULT, PROFILE_HANDHELD, DetectorConfig, get_profile
from .realtime_phase_v1_0 import PhaseSnapshot, PhaseTrackingDetector
from .settings_store import InMemorySettingsStore, JsonSettingsStore
from .threshold_detector import ThresholdDetector

__all__ = [
    "DetectorConfig",
    "PROFILE_DEFAULT",
    "PROFILE_HANDHELD",
    "PROFILE_BENCH",
    "get_profile",
    "PhaseTrackingDetector",
    "PhaseSnapshot",
    "ThresholdDetector",
    "DetectionMethod",
    "DetectorSelector",
    "InMemorySettingsStore",
    "JsonSettingsStore",
]

# versie van het pakket
VERSION = "1.0"
