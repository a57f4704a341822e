"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest

from attentionscope.config import EngineConfig
from attentionscope.core.frame import SpectrumFrame

# Reference analyser settings
TEST_SR = 44100
TEST_FFT = 4096


@pytest.fixture
def sample_rate() -> int:
    """Default sample rate for tests."""
    return TEST_SR


@pytest.fixture
def config() -> EngineConfig:
    """Reference configuration: seven channels, 44100 Hz, 4096-point FFT."""
    return EngineConfig(sample_rate=TEST_SR, fft_size=TEST_FFT)


@pytest.fixture
def make_frame():
    """
    Factory for spectrum frames.

    Call with a mapping of bin index -> magnitude (0-255); every other bin
    is zero.
    """

    def _make(bins: dict[int, float] | None = None, fill: float = 0.0) -> SpectrumFrame:
        magnitudes = np.full(TEST_FFT // 2, fill, dtype=np.float64)
        for index, value in (bins or {}).items():
            magnitudes[index] = value
        return SpectrumFrame(magnitudes, sample_rate=TEST_SR, fft_size=TEST_FFT)

    return _make


@pytest.fixture
def random_frames() -> list[SpectrumFrame]:
    """Reproducible noisy byte spectra."""
    rng = np.random.default_rng(42)
    return [
        SpectrumFrame(
            rng.integers(0, 256, TEST_FFT // 2).astype(np.float64),
            sample_rate=TEST_SR,
            fft_size=TEST_FFT,
        )
        for _ in range(40)
    ]


@pytest.fixture
def pure_sine(sample_rate: int) -> tuple[np.ndarray, int]:
    """
    Generate a pure 440Hz sine wave (A4 note).

    Returns:
        Tuple of (audio_signal, sample_rate).
    """
    duration = 1.0
    t = np.linspace(0, duration, int(sample_rate * duration), endpoint=False)
    y = 0.5 * np.sin(2 * np.pi * 440.0 * t)
    return y.astype(np.float32), sample_rate


@pytest.fixture
def harmonic_tone(sample_rate: int) -> tuple[np.ndarray, int]:
    """
    A 220Hz tone with four overtones, fading in over the first half.

    Returns:
        Tuple of (audio_signal, sample_rate).
    """
    duration = 1.0
    t = np.linspace(0, duration, int(sample_rate * duration), endpoint=False)
    y = sum(
        (0.4 / k) * np.sin(2 * np.pi * 220.0 * k * t)
        for k in range(1, 6)
    )
    envelope = np.clip(t / 0.5, 0.0, 1.0)
    return (y * envelope).astype(np.float32), sample_rate


@pytest.fixture
def temp_audio_file(tmp_path, harmonic_tone):
    """Create a temporary audio file for testing file I/O."""
    import soundfile as sf

    y, sr = harmonic_tone
    audio_path = tmp_path / "test_audio.wav"
    sf.write(audio_path, y, sr)
    return audio_path
