"""
Pairwise consonance between channels.

Each channel contributes its loudest bin; every pair of significant peaks
is scored by how close their octave-reduced frequency ratio lies to a
consonant interval, weighted by the weaker peak.
"""

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from attentionscope.config import InterharmonicParams
from attentionscope.core.frame import SpectrumFrame
from attentionscope.core.tracker import ChannelState


@dataclass(frozen=True)
class Peak:
    """Dominant bin of a channel; zeros when insignificant."""

    frequency: float = 0.0
    magnitude: float = 0.0


def octave_reduce(ratio: float) -> float:
    """Fold a positive ratio into [1, 2)."""
    while ratio >= 2.0:
        ratio /= 2.0
    while ratio < 1.0:
        ratio *= 2.0
    return ratio


class InterharmonicAnalyzer:
    """Stateless builder of the inter-channel consonance matrix."""

    def __init__(self, params: InterharmonicParams | None = None):
        self.params = params or InterharmonicParams()

    def find_peak(self, frame: SpectrumFrame, index_range: tuple[int, int]) -> Peak:
        """Loudest bin inside an inclusive index range, first one on ties."""
        band = frame.channel_slice(index_range)
        if len(band) == 0:
            return Peak()

        offset = int(np.argmax(band))
        magnitude = float(band[offset])
        if magnitude < self.params.peak_floor:
            return Peak()

        index = max(index_range[0], 0) + offset
        return Peak(frequency=frame.index_to_freq(index), magnitude=magnitude)

    def ratio_consonance(self, freq_a: float, freq_b: float) -> float:
        """
        Closeness of two frequencies to a consonant interval.

        Returns:
            1.0 on an exact table ratio, falling linearly to 0.0 at the
            tolerance distance.
        """
        ratio = octave_reduce(max(freq_a, freq_b) / min(freq_a, freq_b))
        distance = min(abs(ratio - r) for r in self.params.consonant_ratios)
        return max(0.0, 1.0 - distance / self.params.tolerance)

    def pair_score(self, a: Peak, b: Peak) -> float:
        """Ratio consonance weighted by the weaker peak; 0 if either is silent."""
        if a.frequency == 0.0 or b.frequency == 0.0:
            return 0.0
        ref = self.params.reference_magnitude
        # Not clamped: peaks louder than the reference push the score past 1
        weight = min(a.magnitude / ref, b.magnitude / ref)
        return self.ratio_consonance(a.frequency, b.frequency) * weight

    def analyze(
        self,
        frame: SpectrumFrame,
        channels: Sequence[ChannelState],
    ) -> np.ndarray:
        """
        Score every channel pair for the current frame.

        Returns:
            Symmetric (n, n) matrix with a zero diagonal.
        """
        peaks = [self.find_peak(frame, c.index_range) for c in channels]
        n = len(peaks)
        matrix = np.zeros((n, n))

        for i in range(n):
            for j in range(i + 1, n):
                score = self.pair_score(peaks[i], peaks[j])
                matrix[i, j] = score
                matrix[j, i] = score

        return matrix
