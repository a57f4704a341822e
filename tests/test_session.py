"""Tests for the attention session and frame reducer."""

import threading

import numpy as np
import pytest

from attentionscope.config import EngineConfig
from attentionscope.core.frame import SpectrumFrame
from attentionscope.session import (
    AttentionSession,
    FrameReducer,
    advance,
    initial_snapshot,
)


class FakeClock:
    """Clock returning a settable time."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestInitialSnapshot:
    """Tests for session start values."""

    def test_documented_initial_values(self, config):
        snapshot = initial_snapshot(config, now=3.0)

        assert snapshot.frame_index == -1
        assert snapshot.n_channels == 7
        for channel in snapshot.channels:
            assert channel.attention == pytest.approx(1 / 7)
            assert channel.current_signal == 0.0
            assert channel.merit == 0.0
            assert channel.habituation == 0.0
            assert channel.threshold == config.tuning.base_threshold
            assert channel.signal_history == (0.0,) * config.tuning.signal_history_length
            assert channel.last_novel_timestamp == 3.0
        assert snapshot.harmony.tension == 1.0
        assert snapshot.harmony.inter_lens_consonance.shape == (7, 7)


class TestFrameReducer:
    """Tests for the pure per-frame transition."""

    def test_previous_snapshot_untouched(self, config, make_frame):
        reducer = FrameReducer(config)
        start = initial_snapshot(config, now=0.0)

        nxt = reducer.advance(start, make_frame(fill=255), now=1.0)

        assert nxt.frame_index == 0
        assert nxt.time == 1.0
        assert start.channels[1].current_signal == 0.0
        assert nxt.channels[1].current_signal == pytest.approx(0.3)

    def test_advance_is_deterministic(self, config, random_frames):
        a = initial_snapshot(config, now=0.0)
        b = initial_snapshot(config, now=0.0)

        for i, frame in enumerate(random_frames):
            a = advance(a, frame, now=i / 60, config=config)
            b = advance(b, frame, now=i / 60, config=config)

        assert a.channels == b.channels
        assert a.harmony.pitch == b.harmony.pitch
        assert np.array_equal(a.harmony.inter_lens_consonance, b.harmony.inter_lens_consonance)

    def test_frame_invariants(self, config, random_frames):
        reducer = FrameReducer(config)
        snapshot = initial_snapshot(config, now=0.0)
        t = config.tuning

        for i, frame in enumerate(random_frames):
            snapshot = reducer.advance(snapshot, frame, now=i / 60)

            harmony = snapshot.harmony
            assert harmony.tension == 1.0 - harmony.consonance
            assert 0.0 <= harmony.resolution <= 1.0
            matrix = harmony.inter_lens_consonance
            assert np.array_equal(matrix, matrix.T)
            assert not np.diagonal(matrix).any()
            for channel in snapshot.channels:
                assert channel.threshold == t.base_threshold + channel.habituation * t.threshold_scale
                assert 0.0 <= channel.habituation <= 1.0


class TestAttentionSession:
    """Tests for the stateful session wrapper."""

    def test_step_replaces_snapshot(self, config, make_frame):
        session = AttentionSession(config, clock=FakeClock())

        result = session.step(make_frame(fill=128))

        assert session.snapshot is result
        assert result.frame_index == 0

    def test_silence_with_frozen_clock_keeps_attention(self, config, make_frame):
        """Zero merit and zero recency: attention stays uniform, no NaN."""
        session = AttentionSession(config, clock=FakeClock(0.0))

        for _ in range(20):
            snapshot = session.step(make_frame())

        for channel in snapshot.channels:
            assert channel.attention == 1 / 7
            assert not np.isnan(channel.attention)

    def test_recency_shifts_attention_over_time(self, config, make_frame):
        """Only Bass is novel; the others accumulate recency and gain attention."""
        clock = FakeClock(0.0)
        session = AttentionSession(config, clock=clock)
        bass_only = {i: 255 for i in range(7, 23)}

        for i in range(120):
            clock.now = i / 60
            frame = make_frame(bass_only if i % 2 else None)
            snapshot = session.step(frame)

        attention = [c.attention for c in snapshot.channels]
        assert attention[1] != pytest.approx(1 / 7)
        assert all(a > 0.0 for a in attention)

    def test_reset_restores_initial_values(self, config, make_frame):
        clock = FakeClock(0.0)
        session = AttentionSession(config, clock=clock)
        for _ in range(30):
            session.step(make_frame(fill=200))

        clock.now = 42.0
        snapshot = session.reset()

        expected = initial_snapshot(config, now=42.0)
        assert snapshot.channels == expected.channels
        assert snapshot.frame_index == -1
        assert snapshot.harmony.consonance == 0.0
        assert session.snapshot is snapshot

    def test_rejects_mismatched_frame(self, config):
        session = AttentionSession(config, clock=FakeClock())
        frame = SpectrumFrame(np.zeros(1024), sample_rate=44100, fft_size=2048)

        with pytest.raises(ValueError):
            session.step(frame)

    def test_invalid_config_rejected(self):
        with pytest.raises(ValueError):
            AttentionSession(EngineConfig(channels=()))

    def test_concurrent_steps_never_interleave(self, config, make_frame):
        """Every step advances the frame index by exactly one."""
        session = AttentionSession(config, clock=FakeClock())
        frame = make_frame(fill=64)

        def worker():
            for _ in range(25):
                session.step(frame)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert session.snapshot.frame_index == 99

    def test_properties_mirror_snapshot(self, config):
        session = AttentionSession(config, clock=FakeClock())

        assert session.channels is session.snapshot.channels
        assert session.harmony is session.snapshot.harmony
