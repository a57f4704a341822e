"""
Global pitch and consonance estimation.

Uses a Harmonic Product Spectrum: multiplying the spectrum by downsampled
copies of itself reinforces a fundamental whose harmonics are present and
suppresses isolated peaks. The strength of the surviving peak is read as
how consonant (periodic) the frame is.
"""

from dataclasses import dataclass, field

import numpy as np

from attentionscope.config import HarmonyParams
from attentionscope.core.frame import SpectrumFrame


@dataclass(frozen=True, eq=False)
class HarmonyState:
    """Smoothed harmony descriptors for one frame."""

    pitch: float = 0.0  # Hz
    consonance: float = 0.0
    tension: float = 1.0  # Always 1 - consonance
    resolution: float = 0.0  # [0.0, 1.0]
    # Pairwise channel consonance, shape (n_channels, n_channels)
    inter_lens_consonance: np.ndarray = field(
        default_factory=lambda: np.zeros((0, 0))
    )

    def __post_init__(self):
        matrix = np.array(self.inter_lens_consonance, dtype=np.float64)
        matrix.setflags(write=False)
        object.__setattr__(self, "inter_lens_consonance", matrix)

    @classmethod
    def initial(cls, n_channels: int) -> "HarmonyState":
        return cls(inter_lens_consonance=np.zeros((n_channels, n_channels)))


class HarmonyEstimator:
    """Harmonic Product Spectrum pitch and consonance estimator."""

    def __init__(self, params: HarmonyParams | None = None):
        self.params = params or HarmonyParams()

    def harmonic_product_spectrum(self, spectrum: np.ndarray) -> np.ndarray:
        """
        Multiply the spectrum by its decimated copies for orders 2..n.

        Bins whose multiple falls outside the spectrum are left as they are
        for that order.
        """
        hps = np.array(spectrum, dtype=np.float64)
        for order in range(2, self.params.n_harmonics + 1):
            decimated = spectrum[::order]
            hps[:len(decimated)] *= decimated
        return hps

    def search_range(self, frame: SpectrumFrame) -> tuple[int, int]:
        """Inclusive index range of plausible fundamentals."""
        start = max(frame.freq_to_index(self.params.min_pitch_hz), 0)
        end = min(frame.freq_to_index(self.params.max_pitch_hz), frame.n_bins - 1)
        return start, end

    def estimate(self, frame: SpectrumFrame) -> tuple[float, float]:
        """
        Estimate the dominant pitch and its consonance.

        Args:
            frame: Spectrum snapshot.

        Returns:
            Tuple of (pitch_hz, consonance). A frame with no energy in the
            search range yields (0.0, 0.0).
        """
        hps = self.harmonic_product_spectrum(frame.normalized())
        start, end = self.search_range(frame)

        max_index = 0
        max_val = 0.0
        if end >= start:
            window = hps[start:end + 1]
            peak = int(np.argmax(window))
            if window[peak] > 0.0:
                max_index = start + peak
                max_val = float(window[peak])

        pitch = frame.index_to_freq(max_index)
        consonance = max_val ** (1.0 / self.params.n_harmonics)
        return pitch, consonance

    def smooth(
        self,
        previous: HarmonyState,
        pitch: float,
        consonance: float,
        inter_lens_consonance: np.ndarray,
    ) -> HarmonyState:
        """
        Fold one frame's raw estimate into the running harmony state.

        Resolution registers only rises of the smoothed consonance over its
        previous smoothed value.
        """
        p = self.params
        smoothed_pitch = previous.pitch * p.pitch_smoothing + pitch * (1.0 - p.pitch_smoothing)
        smoothed_consonance = (
            previous.consonance * p.consonance_smoothing
            + consonance * (1.0 - p.consonance_smoothing)
        )
        rise = max(0.0, smoothed_consonance - previous.consonance)
        resolution = float(np.clip(rise * p.resolution_gain, 0.0, 1.0))

        return HarmonyState(
            pitch=smoothed_pitch,
            consonance=smoothed_consonance,
            tension=1.0 - smoothed_consonance,
            resolution=resolution,
            inter_lens_consonance=inter_lens_consonance,
        )
