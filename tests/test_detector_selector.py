"""
Tests for DetectionMethod and DetectorSelector.
"""

import logging

import pytest

from conftest import feed_mag
from wheel_phase.detector_selector import (
    KEY_DETECTION_METHOD,
    KEY_POINT_NUMBER,
    KEY_WHEEL_CIRCUMFERENCE,
    DetectionMethod,
    DetectorSelector,
)
from wheel_phase.realtime_phase_v1_0 import PhaseTrackingDetector
from wheel_phase.settings_store import InMemorySettingsStore
from wheel_phase.threshold_detector import ThresholdDetector


class FakeDetector:
    """Houdt bij welke calls binnenkomen."""

    def __init__(self, count=0):
        self.calls = []
        self.count = count
        self.running = False

    @property
    def is_running(self):
        return self.running

    def start(self):
        self.calls.append("start")
        self.running = True

    def stop(self):
        self.calls.append("stop")
        self.running = False

    def reset(self):
        self.calls.append("reset")
        self.count = 0

    def feed_field_sample(self, x, y, z, t):
        self.calls.append(("field", t))
        return 0

    def feed_gyro_sample(self, x, y, z, t):
        self.calls.append(("gyro", t))

    def feed_accel_sample(self, x, y, z, t):
        self.calls.append(("accel", t))

    def revolution_count(self):
        return self.count

    def signal_quality(self):
        return 0.5

    def current_phase_angle(self):
        return 1.0

    def restore_count(self, n):
        self.calls.append(("restore", n))
        self.count = n


def fake_selector(store=None, count=0):
    dets = {DetectionMethod.MAGNETIC: FakeDetector(count), DetectionMethod.MAGNETIC_PCA: FakeDetector()}
    return DetectorSelector(store, detectors=dets), dets


class TestDetectionMethod:

    def test_values(self):
        assert DetectionMethod.MAGNETIC.value == "Magnetic"
        assert DetectionMethod.MAGNETIC_PCA.value == "Magnetic (PCA Phase)"
        assert "PCA phase tracking" in DetectionMethod.MAGNETIC_PCA.description
        assert "threshold" in DetectionMethod.MAGNETIC.description

    @pytest.mark.parametrize("raw", [DetectionMethod.MAGNETIC_PCA, "Magnetic (PCA Phase)", "magnetic_pca"])
    def test_parse(self, raw):
        assert DetectionMethod.parse(raw) is DetectionMethod.MAGNETIC_PCA

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="Unknown detection method"):
            DetectionMethod.parse("Optical")


class TestSelectorSetup:

    def test_default_detectors_and_method(self, store):
        sel = DetectorSelector(store)
        assert sel.method is DetectionMethod.MAGNETIC
        assert isinstance(sel.detectors[DetectionMethod.MAGNETIC], ThresholdDetector)
        assert isinstance(sel.detectors[DetectionMethod.MAGNETIC_PCA], PhaseTrackingDetector)
        assert sel.wheel_circumference_cm == 11.78

    def test_restores_stored_method(self):
        store = InMemorySettingsStore({KEY_DETECTION_METHOD: "Magnetic (PCA Phase)"})
        sel, _ = fake_selector(store)
        assert sel.method is DetectionMethod.MAGNETIC_PCA

    def test_unknown_stored_method_falls_back(self, caplog):
        store = InMemorySettingsStore({KEY_DETECTION_METHOD: "Optical"})
        with caplog.at_level(logging.WARNING):
            sel, _ = fake_selector(store)
        assert sel.method is DetectionMethod.MAGNETIC
        assert "unknown stored detection method" in caplog.text

    def test_stored_circumference(self):
        store = InMemorySettingsStore({KEY_WHEEL_CIRCUMFERENCE: 20.0})
        sel, _ = fake_selector(store)
        assert sel.wheel_circumference_cm == 20.0


class TestSelectorForwarding:

    def test_only_active_detector_receives_samples(self):
        sel, dets = fake_selector()
        sel.start()
        sel.feed_field_sample(1, 2, 3, 0.1)
        sel.feed_gyro_sample(1, 2, 3, 0.2)
        sel.feed_accel_sample(1, 2, 3, 0.3)

        active = dets[DetectionMethod.MAGNETIC]
        other = dets[DetectionMethod.MAGNETIC_PCA]
        assert ("field", 0.1) in active.calls
        assert ("gyro", 0.2) in active.calls
        assert ("accel", 0.3) in active.calls
        assert not any(isinstance(c, tuple) for c in other.calls)
        assert "start" not in other.calls
        assert sel.signal_quality() == 0.5
        assert sel.current_phase_angle() == 1.0

    def test_stop_and_reset_reach_all(self):
        sel, dets = fake_selector()
        sel.stop()
        sel.reset()
        for d in dets.values():
            assert "stop" in d.calls
            assert "reset" in d.calls


class TestMethodSwitch:

    def test_switch_transfers_count_and_restarts(self, store):
        sel, dets = fake_selector(store, count=17)
        sel.start()
        sel.switch_method(DetectionMethod.MAGNETIC_PCA)

        old, new = dets[DetectionMethod.MAGNETIC], dets[DetectionMethod.MAGNETIC_PCA]
        assert sel.method is DetectionMethod.MAGNETIC_PCA
        assert not old.is_running
        assert new.is_running
        assert ("restore", 17) in new.calls
        assert sel.revolution_count() == 17
        assert store.load(KEY_DETECTION_METHOD) == "Magnetic (PCA Phase)"

    def test_switch_while_stopped_stays_stopped(self):
        sel, dets = fake_selector(count=3)
        sel.switch_method("magnetic_pca")
        assert not sel.is_running
        assert sel.revolution_count() == 3

    def test_switch_to_current_is_noop(self, store):
        sel, dets = fake_selector(store)
        sel.switch_method(DetectionMethod.MAGNETIC)
        assert dets[DetectionMethod.MAGNETIC].calls == []
        assert store.load(KEY_DETECTION_METHOD) is None

    def test_switch_unknown_method(self):
        sel, _ = fake_selector()
        with pytest.raises(ValueError):
            sel.switch_method("Audio")


class TestDistanceAndSession:

    def test_distance(self):
        sel, _ = fake_selector(count=100)
        assert sel.distance_m() == pytest.approx(11.78)
        sel.wheel_circumference_cm = 11.777
        assert sel.rounded_distance_m() == 11.78

    def test_save_and_load_session(self, store):
        sel, dets = fake_selector(store, count=25)
        sel.save_session()
        assert store.load(KEY_POINT_NUMBER) == 25
        assert store.load(KEY_DETECTION_METHOD) == "Magnetic"

        sel2, dets2 = fake_selector(store)
        assert sel2.load_session() == 25
        for d in dets2.values():
            assert d.revolution_count() == 25

    def test_real_pca_detector_through_selector(self, store, example_session):
        sel = DetectorSelector(store)
        sel.switch_method(DetectionMethod.MAGNETIC_PCA)
        sel.start()
        feed_mag(sel, example_session)
        assert 9 <= sel.revolution_count() <= 10
        assert sel.distance_m() == pytest.approx(sel.revolution_count() * 0.1178)
