"""
Attention session.

Combines channel tracking, attention allocation and harmony analysis into
a single per-frame reducer, and wraps it in a session object that owns the
live snapshot between frames.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable

from attentionscope.config import EngineConfig
from attentionscope.core.attention import AttentionAllocator
from attentionscope.core.frame import SpectrumFrame
from attentionscope.core.harmony import HarmonyEstimator, HarmonyState
from attentionscope.core.interharmonic import InterharmonicAnalyzer
from attentionscope.core.tracker import ChannelState, ChannelTracker


@dataclass(frozen=True, eq=False)
class AnalysisSnapshot:
    """Everything the renderer needs for one frame."""

    frame_index: int
    time: float  # Clock reading the frame was analyzed at
    channels: tuple[ChannelState, ...]
    harmony: HarmonyState

    @property
    def n_channels(self) -> int:
        return len(self.channels)


def initial_snapshot(config: EngineConfig, now: float) -> AnalysisSnapshot:
    """State at session start: uniform attention, everything else at rest."""
    n = len(config.channels)
    channels = tuple(
        ChannelState.initial(
            definition,
            fft_size=config.fft_size,
            sample_rate=config.sample_rate,
            tuning=config.tuning,
            n_channels=n,
            now=now,
        )
        for definition in config.channels
    )
    return AnalysisSnapshot(
        frame_index=-1,
        time=now,
        channels=channels,
        harmony=HarmonyState.initial(n),
    )


class FrameReducer:
    """
    Pure per-frame transition from one snapshot to the next.

    Holds only the configured analysis components; never the state.
    """

    def __init__(self, config: EngineConfig):
        self.config = config
        self.tracker = ChannelTracker(config.tuning)
        self.allocator = AttentionAllocator(config.tuning)
        self.harmony = HarmonyEstimator(config.harmony)
        self.interharmonic = InterharmonicAnalyzer(config.interharmonic)

    def advance(
        self,
        previous: AnalysisSnapshot,
        frame: SpectrumFrame,
        now: float,
    ) -> AnalysisSnapshot:
        """
        Produce the snapshot for a new frame.

        Args:
            previous: Snapshot after the last frame (or initial_snapshot()).
            frame: The new spectrum frame.
            now: Clock reading in seconds, shared by the whole frame.

        Returns:
            A new AnalysisSnapshot; previous is left untouched.
        """
        channels = tuple(self.tracker.update(c, frame, now) for c in previous.channels)
        channels = self.allocator.allocate(channels, now)

        pitch, consonance = self.harmony.estimate(frame)
        matrix = self.interharmonic.analyze(frame, channels)
        harmony = self.harmony.smooth(previous.harmony, pitch, consonance, matrix)

        return AnalysisSnapshot(
            frame_index=previous.frame_index + 1,
            time=now,
            channels=channels,
            harmony=harmony,
        )


def advance(
    previous: AnalysisSnapshot,
    frame: SpectrumFrame,
    now: float,
    config: EngineConfig | None = None,
) -> AnalysisSnapshot:
    """Functional form of FrameReducer.advance()."""
    return FrameReducer(config or EngineConfig()).advance(previous, frame, now)


class AttentionSession:
    """
    Owns the live snapshot of one listening session.

    Frames must be fed in order; step() and reset() serialize on a lock so
    a host calling from an audio thread never interleaves two frames.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the session.

        Args:
            config: Engine configuration (default: reference channels at
                    44100 Hz / 4096-point FFT).
            clock: Returns the current time in seconds. Recency bonuses and
                   novelty timestamps are measured on this clock.
        """
        self.config = (config or EngineConfig()).validate()
        self.clock = clock
        self.reducer = FrameReducer(self.config)
        self._lock = threading.Lock()
        self._snapshot = initial_snapshot(self.config, self.clock())

    @property
    def snapshot(self) -> AnalysisSnapshot:
        """The latest snapshot (read-only)."""
        return self._snapshot

    @property
    def channels(self) -> tuple[ChannelState, ...]:
        return self._snapshot.channels

    @property
    def harmony(self) -> HarmonyState:
        return self._snapshot.harmony

    def _check_frame(self, frame: SpectrumFrame) -> None:
        if frame.sample_rate != self.config.sample_rate or frame.fft_size != self.config.fft_size:
            raise ValueError(
                f"frame was produced at {frame.sample_rate} Hz / {frame.fft_size}-point FFT, "
                f"session expects {self.config.sample_rate} Hz / {self.config.fft_size}"
            )

    def step(self, frame: SpectrumFrame) -> AnalysisSnapshot:
        """
        Analyze one frame and replace the session snapshot.

        Raises:
            ValueError: If the frame's sample rate or FFT size differs from
                        the session configuration.
        """
        self._check_frame(frame)
        with self._lock:
            self._snapshot = self.reducer.advance(self._snapshot, frame, self.clock())
            return self._snapshot

    def reset(self) -> AnalysisSnapshot:
        """Discard all state and return to the initial snapshot."""
        with self._lock:
            self._snapshot = initial_snapshot(self.config, self.clock())
            return self._snapshot
