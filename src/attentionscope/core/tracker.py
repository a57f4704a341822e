"""
Per-channel signal tracking.

Each channel smooths its band loudness, measures novelty as the spread of
its recent history, and habituates to sustained unchanging signal by
raising its own activation threshold.
"""

from dataclasses import dataclass, replace

import numpy as np

from attentionscope.config import ChannelDefinition, TuningParams
from attentionscope.core.frame import MAX_MAGNITUDE, SpectrumFrame, index_range_for


@dataclass(frozen=True)
class ChannelState:
    """Immutable snapshot of one channel after a frame."""

    id: int
    label: str
    freq_range: tuple[float, float]
    index_range: tuple[int, int]  # Inclusive, into the magnitude array

    current_signal: float  # Smoothed loudness [0.0, 1.0]
    signal_history: tuple[float, ...]
    habituation: float  # Boredom [0.0, 1.0]
    threshold: float
    merit: float  # Smoothed novelty
    last_novel_timestamp: float  # Seconds on the session clock
    attention: float  # Smoothed share of focus
    is_active: bool
    novelty: float = 0.0

    @classmethod
    def initial(
        cls,
        definition: ChannelDefinition,
        fft_size: int,
        sample_rate: int,
        tuning: TuningParams,
        n_channels: int,
        now: float,
    ) -> "ChannelState":
        """Fresh channel at session start."""
        return cls(
            id=definition.id,
            label=definition.label,
            freq_range=tuple(definition.freq_range),
            index_range=index_range_for(definition.freq_range, fft_size, sample_rate),
            current_signal=0.0,
            signal_history=(0.0,) * tuning.signal_history_length,
            habituation=0.0,
            threshold=tuning.base_threshold,
            merit=0.0,
            last_novel_timestamp=now,
            attention=1.0 / n_channels,
            is_active=False,
        )


class ChannelTracker:
    """
    Advances one channel's state by one frame.

    The tracker itself holds only tuning constants; all state lives in the
    ChannelState values it consumes and returns.
    """

    def __init__(self, tuning: TuningParams | None = None):
        self.tuning = tuning or TuningParams()

    @staticmethod
    def raw_signal(channel: ChannelState, frame: SpectrumFrame) -> float:
        """Mean band magnitude scaled to [0, 1]; 0 for an empty range."""
        band = frame.channel_slice(channel.index_range)
        if len(band) == 0:
            return 0.0
        return float(np.mean(band)) / MAX_MAGNITUDE

    def novelty(self, history: tuple[float, ...]) -> float:
        """
        Population standard deviation of the history, scaled.

        The zero-filled start of the buffer is included, so novelty reads
        low until the history has warmed up.
        """
        if not history:
            return 0.0
        return float(np.std(history)) * self.tuning.novelty_gain

    def update(
        self,
        channel: ChannelState,
        frame: SpectrumFrame,
        now: float,
    ) -> ChannelState:
        """
        Run one frame of signal, novelty, merit and habituation dynamics.

        Args:
            channel: State after the previous frame.
            frame: Current spectrum snapshot.
            now: Current clock reading in seconds.

        Returns:
            New ChannelState; attention is carried over unchanged.
        """
        t = self.tuning
        raw = self.raw_signal(channel, frame)

        current_signal = (
            channel.current_signal * t.signal_smoothing
            + raw * (1.0 - t.signal_smoothing)
        )

        history = channel.signal_history + (current_signal,)
        if len(history) > t.signal_history_length:
            history = history[len(history) - t.signal_history_length:]

        novelty = self.novelty(history)
        merit = channel.merit * t.merit_smoothing + novelty * (1.0 - t.merit_smoothing)

        last_novel = channel.last_novel_timestamp
        if merit > t.merit_novel_level:
            last_novel = now

        # Compared against the previous frame's threshold
        if current_signal > channel.threshold and novelty < t.habituation_novelty_ceiling:
            habituation = min(1.0, channel.habituation + t.habituation_rate)
        else:
            habituation = channel.habituation * t.habituation_decay

        threshold = t.base_threshold + habituation * t.threshold_scale

        return replace(
            channel,
            current_signal=current_signal,
            signal_history=history,
            habituation=habituation,
            threshold=threshold,
            merit=merit,
            last_novel_timestamp=last_novel,
            is_active=current_signal > threshold,
            novelty=novelty,
        )
