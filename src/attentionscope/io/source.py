"""
Analyser-style frame source.

Turns a time-domain signal into the byte spectra a browser analyser node
would report: Blackman-windowed FFT, temporal smoothing, decibel mapping
onto 0-255. Lets the engine run on audio files without a live device.
"""

from pathlib import Path
from typing import Iterator, Union

import librosa
import numpy as np
from scipy import signal as scipy_signal

from attentionscope.config import EngineConfig
from attentionscope.core.frame import MAX_MAGNITUDE, SpectrumFrame


class AnalyserFrameSource:
    """
    Produces one SpectrumFrame per output frame from a mono signal.

    Frame k looks at the fft_size samples ending at sample k * hop, with
    hop = sample_rate / fps, so output frames line up with display frames.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        fps: int = 60,
        smoothing_time_constant: float = 0.8,
        min_decibels: float = -100.0,
        max_decibels: float = -30.0,
    ):
        """
        Initialize the source.

        Args:
            config: Engine configuration supplying sample rate and FFT size.
            fps: Output frames per second.
            smoothing_time_constant: Weight of the previous spectrum (0-1).
            min_decibels: Level mapped to byte 0.
            max_decibels: Level mapped to byte 255.
        """
        if fps <= 0:
            raise ValueError(f"fps must be positive, got {fps}")
        if not 0.0 <= smoothing_time_constant <= 1.0:
            raise ValueError("smoothing_time_constant must be within [0, 1]")
        if max_decibels <= min_decibels:
            raise ValueError("max_decibels must exceed min_decibels")

        self.config = config or EngineConfig()
        self.fps = fps
        self.smoothing_time_constant = smoothing_time_constant
        self.min_decibels = min_decibels
        self.max_decibels = max_decibels

        self.window = scipy_signal.get_window("blackman", self.config.fft_size)

    @property
    def hop_length(self) -> float:
        """Samples between consecutive output frames (may be fractional)."""
        return self.config.sample_rate / self.fps

    def load_audio(self, audio_path: Union[str, Path]) -> np.ndarray:
        """
        Load a mono signal resampled to the configured rate.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        audio_path = Path(audio_path)
        if not audio_path.exists():
            raise FileNotFoundError(f"Audio file not found: {audio_path}")
        y, _ = librosa.load(audio_path, sr=self.config.sample_rate, mono=True)
        return y

    def n_frames(self, n_samples: int) -> int:
        """Number of frames produced for a signal of n_samples."""
        return int(n_samples // self.hop_length)

    def to_bytes(self, spectrum: np.ndarray) -> np.ndarray:
        """Map smoothed linear magnitudes onto the 0-255 byte scale."""
        with np.errstate(divide="ignore"):
            db = 20.0 * np.log10(spectrum)
        scale = MAX_MAGNITUDE / (self.max_decibels - self.min_decibels)
        scaled = np.floor(scale * (db - self.min_decibels))
        # -inf from silent bins clips to 0
        return np.clip(scaled, 0.0, MAX_MAGNITUDE).astype(np.uint8)

    def iter_frames(self, y: np.ndarray) -> Iterator[SpectrumFrame]:
        """
        Yield one frame per hop over the whole signal.

        Args:
            y: Mono audio time series at the configured sample rate.
        """
        fft_size = self.config.fft_size
        n_bins = self.config.n_bins
        tau = self.smoothing_time_constant

        y = np.asarray(y, dtype=np.float64)
        padded = np.concatenate([np.zeros(fft_size), y])
        smoothed = np.zeros(n_bins)

        for k in range(1, self.n_frames(len(y)) + 1):
            end = fft_size + int(round(k * self.hop_length))
            block = padded[end - fft_size:end]

            magnitude = np.abs(np.fft.rfft(block * self.window))[:n_bins] / fft_size
            smoothed = tau * smoothed + (1.0 - tau) * magnitude

            yield SpectrumFrame(
                self.to_bytes(smoothed),
                sample_rate=self.config.sample_rate,
                fft_size=fft_size,
            )

    def frames(self, y: np.ndarray) -> list[SpectrumFrame]:
        """All frames for a signal as a list."""
        return list(self.iter_frames(y))
