"""Unit tests for LevelMeter and compute_rms."""

import threading

import pytest
import numpy as np

from murmur.audio.levels import LevelMeter, compute_rms


@pytest.mark.unit
class TestComputeRms:

    def test_empty_window_is_silent(self):
        assert compute_rms([]) == 0.0

    def test_constant_signal(self):
        assert compute_rms([0.5] * 1024) == pytest.approx(0.5)

    def test_sign_does_not_matter(self):
        assert compute_rms([-0.5, 0.5, -0.5, 0.5]) == pytest.approx(0.5)

    def test_clamped_to_one(self):
        assert compute_rms(np.full(16, 3.0)) == 1.0


@pytest.mark.unit
class TestLevelMeter:

    def test_starts_full_of_silence(self):
        meter = LevelMeter(32)

        assert len(meter) == 32
        assert meter.snapshot() == [0.0] * 32

    def test_push_evicts_oldest(self):
        meter = LevelMeter(4)

        for level in (0.1, 0.2, 0.3, 0.4, 0.5):
            meter.push(level)

        assert meter.snapshot() == pytest.approx([0.2, 0.3, 0.4, 0.5])
        assert len(meter) == 4

    def test_push_clamps_into_unit_range(self):
        meter = LevelMeter(2)

        meter.push(1.7)
        meter.push(-0.3)

        assert meter.snapshot() == [1.0, 0.0]

    def test_snapshot_is_a_copy(self):
        meter = LevelMeter(3)
        snapshot = meter.snapshot()
        snapshot[0] = 0.9

        assert meter.snapshot() == [0.0, 0.0, 0.0]

    def test_clear(self):
        meter = LevelMeter(3)
        meter.push(0.7)

        meter.clear()

        assert meter.snapshot() == [0.0, 0.0, 0.0]

    @pytest.mark.parametrize("capacity", [0, -1])
    def test_invalid_capacity(self, capacity):
        with pytest.raises(ValueError):
            LevelMeter(capacity)

    def test_concurrent_push_keeps_capacity(self):
        meter = LevelMeter(32)

        def writer():
            for _ in range(500):
                meter.push(0.5)

        threads = [threading.Thread(target=writer) for _ in range(4)]
        for t in threads:
            t.start()
        for _ in range(200):
            assert len(meter.snapshot()) == 32
        for t in threads:
            t.join()

        assert meter.snapshot() == [0.5] * 32
