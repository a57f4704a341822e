"""
Attention allocation across channels.

Channels compete for a share of attention scored by merit plus a bonus
that grows with time since each channel last produced something novel,
so quiet channels are periodically revisited.
"""

from dataclasses import replace
from typing import Sequence

import numpy as np

from attentionscope.config import TuningParams
from attentionscope.core.tracker import ChannelState


class AttentionAllocator:
    """Normalizes attention scores and smooths each channel toward its share."""

    def __init__(self, tuning: TuningParams | None = None):
        self.tuning = tuning or TuningParams()

    def scores(self, channels: Sequence[ChannelState], now: float) -> np.ndarray:
        """Merit plus recency bonus per channel."""
        return np.array(
            [
                c.merit + (now - c.last_novel_timestamp) * self.tuning.recency_weight
                for c in channels
            ],
            dtype=np.float64,
        )

    def allocate(
        self,
        channels: Sequence[ChannelState],
        now: float,
    ) -> tuple[ChannelState, ...]:
        """
        Move each channel's attention toward its normalized score.

        Must run after every channel has been updated for the frame. When
        the scores sum to zero (or less) attention is left untouched.

        Args:
            channels: All channels, already updated this frame.
            now: Clock reading shared by the whole frame.

        Returns:
            Channels with updated attention.
        """
        scores = self.scores(channels, now)
        total = float(scores.sum())
        if not total > 0.0:
            return tuple(channels)

        smoothing = self.tuning.attention_smoothing
        shares = scores / total
        return tuple(
            replace(
                c,
                attention=c.attention * smoothing + float(share) * (1.0 - smoothing),
            )
            for c, share in zip(channels, shares)
        )
