"""Tests for the analyser frame source."""

import numpy as np
import pytest

from attentionscope.io.source import AnalyserFrameSource


class TestAnalyserFrameSource:
    """Tests for analyser-style byte spectra."""

    def test_frame_count_and_shape(self, config, pure_sine):
        y, sr = pure_sine
        source = AnalyserFrameSource(config, fps=60)

        frames = source.frames(y)

        assert len(frames) == len(y) // 735
        assert all(f.n_bins == 2048 for f in frames)
        assert all(f.sample_rate == sr for f in frames)

    def test_sine_peak_at_its_bin(self, config, pure_sine):
        y, _ = pure_sine
        source = AnalyserFrameSource(config, fps=60)

        last = source.frames(y)[-1]

        # Loud enough to saturate a few bins around 440 Hz
        hot = np.flatnonzero(last.magnitudes == 255)
        expected_bin = 440 / last.bin_width
        assert len(hot) > 0
        assert hot.min() <= expected_bin <= hot.max()
        assert hot.max() - hot.min() < 12
        assert last.magnitudes.min() >= 0

    def test_silence_gives_zero_frames(self, config):
        source = AnalyserFrameSource(config, fps=30)

        frames = source.frames(np.zeros(44100))

        assert len(frames) == 30
        assert all(not f.magnitudes.any() for f in frames)

    def test_decibel_mapping(self, config):
        source = AnalyserFrameSource(config)
        spectrum = np.array([0.0, 10 ** (-101 / 20), 10 ** (-65 / 20), 10 ** (-29 / 20), 1.0])

        result = source.to_bytes(spectrum)

        assert list(result[[0, 1, 3, 4]]) == [0, 0, 255, 255]
        assert result[2] in (127, 128)

    def test_smoothing_delays_onset(self, config, pure_sine):
        """With heavy smoothing, early frames are quieter than late ones."""
        y, _ = pure_sine
        smooth = AnalyserFrameSource(config, fps=60, smoothing_time_constant=0.95)
        frames = smooth.frames(y)

        assert frames[0].magnitudes.sum() < frames[-1].magnitudes.sum()

    def test_periodic_blackman_window(self, config):
        n = np.arange(config.fft_size)
        phase = 2 * np.pi * n / config.fft_size
        expected = 0.42 - 0.5 * np.cos(phase) + 0.08 * np.cos(2 * phase)

        source = AnalyserFrameSource(config)

        assert np.allclose(source.window, expected)

    def test_invalid_parameters(self, config):
        with pytest.raises(ValueError):
            AnalyserFrameSource(config, fps=0)
        with pytest.raises(ValueError):
            AnalyserFrameSource(config, smoothing_time_constant=1.5)
        with pytest.raises(ValueError):
            AnalyserFrameSource(config, min_decibels=-30, max_decibels=-100)

    def test_missing_file(self, config, tmp_path):
        source = AnalyserFrameSource(config)

        with pytest.raises(FileNotFoundError):
            source.load_audio(tmp_path / "missing.wav")

    def test_load_audio(self, config, temp_audio_file):
        source = AnalyserFrameSource(config)

        y = source.load_audio(temp_audio_file)

        assert y.ndim == 1
        assert len(y) == 44100
