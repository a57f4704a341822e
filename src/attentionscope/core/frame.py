"""
Spectrum frame adapter.

Wraps one analyser snapshot (byte magnitudes 0-255) together with the
sample rate and FFT size needed to convert between bins and Hz.
"""

import math
from dataclasses import dataclass

import numpy as np

MAX_MAGNITUDE = 255.0


def freq_to_index(freq: float, fft_size: int, sample_rate: int) -> int:
    """
    Convert a frequency in Hz to the nearest magnitude-array index.

    Halves round up, so 371.5 maps to 372 rather than to the even neighbour.
    """
    position = (freq / (sample_rate / 2)) * (fft_size / 2)
    return int(math.floor(position + 0.5))


def index_range_for(
    freq_range: tuple[float, float],
    fft_size: int,
    sample_rate: int,
) -> tuple[int, int]:
    """Inclusive index range covering a frequency range."""
    return (
        freq_to_index(freq_range[0], fft_size, sample_rate),
        freq_to_index(freq_range[1], fft_size, sample_rate),
    )


@dataclass(frozen=True, eq=False)
class SpectrumFrame:
    """A read-only frequency-magnitude snapshot."""

    magnitudes: np.ndarray  # Shape: (fft_size // 2,), values 0-255
    sample_rate: int
    fft_size: int

    def __post_init__(self):
        magnitudes = np.array(self.magnitudes, dtype=np.float64)
        if magnitudes.ndim != 1:
            raise ValueError(f"magnitudes must be 1-D, got shape {magnitudes.shape}")
        if len(magnitudes) != self.fft_size // 2:
            raise ValueError(
                f"expected {self.fft_size // 2} magnitudes for fft_size "
                f"{self.fft_size}, got {len(magnitudes)}"
            )
        magnitudes.setflags(write=False)
        object.__setattr__(self, "magnitudes", magnitudes)

    @property
    def n_bins(self) -> int:
        return len(self.magnitudes)

    @property
    def bin_width(self) -> float:
        """Hz per bin."""
        return self.sample_rate / self.fft_size

    def index_to_freq(self, index: int) -> float:
        """Bin-center frequency of an index (no interpolation)."""
        return index * self.bin_width

    def freq_to_index(self, freq: float) -> int:
        return freq_to_index(freq, self.fft_size, self.sample_rate)

    def normalized(self) -> np.ndarray:
        """Magnitudes scaled to [0, 1]."""
        return self.magnitudes / MAX_MAGNITUDE

    def channel_slice(self, index_range: tuple[int, int]) -> np.ndarray:
        """
        Magnitudes within an inclusive index range.

        Ranges reaching past the end of the frame are truncated; a range
        lying entirely outside yields an empty array.
        """
        start, end = index_range
        start = max(start, 0)
        return self.magnitudes[start:end + 1]

    @classmethod
    def silent(cls, sample_rate: int, fft_size: int) -> "SpectrumFrame":
        """All-zero frame."""
        return cls(np.zeros(fft_size // 2), sample_rate, fft_size)
