"""
Offline attention pipeline.

Orchestrates the flow from audio file to attention manifest: analyser
frames, per-frame session updates, export.
"""

from pathlib import Path
from typing import Any, Union

import librosa
import numpy as np

from attentionscope.config import EngineConfig
from attentionscope.io.exporter import ManifestExporter
from attentionscope.io.source import AnalyserFrameSource
from attentionscope.session import AnalysisSnapshot, AttentionSession


class FrameClock:
    """
    Deterministic clock advancing one frame period per reading.

    The first reading (taken when a session starts) is 0.0; the reading for
    the k-th analyzed frame is k / fps, matching the frame's position in
    the track.
    """

    def __init__(self, fps: int):
        self.fps = fps
        self._ticks = 0

    def __call__(self) -> float:
        now = self._ticks / self.fps
        self._ticks += 1
        return now


class AttentionPipeline:
    """
    Complete audio-to-manifest processing pipeline.

    Combines the analyser frame source, an attention session and the
    manifest exporter into a single interface.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        target_fps: int = 60,
        smoothing_time_constant: float = 0.8,
    ):
        """
        Initialize the pipeline.

        Args:
            config: Engine configuration.
            target_fps: Frames per second of the analysis.
            smoothing_time_constant: Analyser spectrum smoothing (0-1).
        """
        self.config = (config or EngineConfig()).validate()
        self.target_fps = target_fps

        self.source = AnalyserFrameSource(
            self.config,
            fps=self.target_fps,
            smoothing_time_constant=smoothing_time_constant,
        )
        self.exporter = ManifestExporter()

    def load(self, audio_path: Union[str, Path]) -> np.ndarray:
        """
        Phase A: Load audio at the configured sample rate.

        Raises:
            FileNotFoundError: If the file does not exist. Nothing else has
                               been created at that point.
        """
        return self.source.load_audio(audio_path)

    def new_session(self) -> AttentionSession:
        """Fresh session on a frame-time clock."""
        return AttentionSession(self.config, clock=FrameClock(self.target_fps))

    def analyze_signal(self, y: np.ndarray) -> list[AnalysisSnapshot]:
        """
        Phase B: Run a fresh session over every analyser frame of a signal.

        Args:
            y: Mono audio at the configured sample rate.

        Returns:
            One snapshot per frame, in order.
        """
        session = self.new_session()
        return [session.step(frame) for frame in self.source.iter_frames(y)]

    def export(
        self,
        snapshots: list[AnalysisSnapshot],
        duration: float,
        output_path: Union[str, Path],
        format: str = "json",
    ) -> Path:
        """
        Phase C: Export to manifest file.

        Args:
            snapshots: Per-frame snapshots.
            duration: Audio duration.
            output_path: Output file path.
            format: "json" or "numpy".

        Returns:
            Path to written file.
        """
        if format == "numpy":
            return self.exporter.export_numpy(snapshots, self.target_fps, output_path)
        return self.exporter.export_json(
            snapshots, self.target_fps, duration, self.config, output_path
        )

    def process(
        self,
        audio_path: Union[str, Path],
        output_path: Union[str, Path] | None = None,
        format: str = "json",
    ) -> dict[str, Any]:
        """
        Run the complete pipeline from audio file to manifest.

        Args:
            audio_path: Path to input audio file.
            output_path: Path for output manifest. If None, only returns dict.
            format: Output format ("json" or "numpy").

        Returns:
            Dictionary containing manifest data and processing info.
        """
        y = self.load(audio_path)
        duration = librosa.get_duration(y=y, sr=self.config.sample_rate)

        snapshots = self.analyze_signal(y)

        manifest = self.exporter.to_dict(
            snapshots,
            fps=self.target_fps,
            duration=duration,
            config=self.config,
        )

        result = {
            "manifest": manifest,
            "duration": duration,
            "n_frames": len(snapshots),
            "fps": self.target_fps,
        }

        if output_path:
            written_path = self.export(snapshots, duration, output_path, format)
            result["output_path"] = str(written_path)

        return result

    def process_to_manifest(self, audio_path: Union[str, Path]) -> dict[str, Any]:
        """Process audio and return the manifest dictionary directly."""
        return self.process(audio_path)["manifest"]
