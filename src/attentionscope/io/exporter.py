"""
Manifest serialization module.

Exports per-frame analysis snapshots to JSON or NumPy for renderers that
replay a track offline.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Sequence, Union

import numpy as np

from attentionscope.config import EngineConfig
from attentionscope.core.tracker import ChannelState
from attentionscope.session import AnalysisSnapshot


@dataclass
class ManifestMetadata:
    """Metadata header for the attention manifest."""

    duration: float
    fps: int
    n_frames: int
    sample_rate: int
    fft_size: int
    channel_labels: list[str]
    version: str = "1.0"
    schema_version: str = "1.0"


class ManifestExporter:
    """
    Exports analysis snapshots to a frame-indexed manifest.

    Each frame carries every channel's state and the harmony block.
    Signal histories are internal and not exported.
    """

    def __init__(self, precision: int = 4):
        """
        Initialize the exporter.

        Args:
            precision: Decimal places for floating point values.
        """
        self.precision = precision

    def _round(self, value: float) -> float:
        """Round to configured precision."""
        return round(float(value), self.precision)

    def _build_channel(self, channel: ChannelState) -> dict[str, Any]:
        return {
            "id": channel.id,
            "label": channel.label,
            "signal": self._round(channel.current_signal),
            "novelty": self._round(channel.novelty),
            "merit": self._round(channel.merit),
            "habituation": self._round(channel.habituation),
            "threshold": self._round(channel.threshold),
            "attention": self._round(channel.attention),
            "is_active": bool(channel.is_active),
        }

    def _build_frame(self, snapshot: AnalysisSnapshot) -> dict[str, Any]:
        """
        Build a single frame's data dictionary.

        Args:
            snapshot: Source analysis snapshot. Its clock reading is used
                      as the frame time.

        Returns:
            Dictionary with all frame data.
        """
        harmony = snapshot.harmony
        matrix = harmony.inter_lens_consonance

        return {
            "frame_index": snapshot.frame_index,
            "time": self._round(snapshot.time),
            "channels": [self._build_channel(c) for c in snapshot.channels],
            "harmony": {
                "pitch": self._round(harmony.pitch),
                "consonance": self._round(harmony.consonance),
                "tension": self._round(harmony.tension),
                "resolution": self._round(harmony.resolution),
                "inter_lens_consonance": [
                    [self._round(v) for v in row] for row in matrix
                ],
            },
        }

    def build_manifest(
        self,
        snapshots: Sequence[AnalysisSnapshot],
        fps: int,
        duration: float,
        config: EngineConfig,
    ) -> dict[str, Any]:
        """
        Build the complete manifest dictionary.

        Args:
            snapshots: Per-frame snapshots in order.
            fps: Frame rate the snapshots were produced at.
            duration: Audio duration in seconds.
            config: Engine configuration used for the analysis.

        Returns:
            Complete manifest dictionary ready for serialization.
        """
        metadata = ManifestMetadata(
            duration=self._round(duration),
            fps=fps,
            n_frames=len(snapshots),
            sample_rate=config.sample_rate,
            fft_size=config.fft_size,
            channel_labels=[c.label for c in config.channels],
        )

        frames = [self._build_frame(s) for s in snapshots]

        return {
            "metadata": {
                "duration": metadata.duration,
                "fps": metadata.fps,
                "n_frames": metadata.n_frames,
                "sample_rate": metadata.sample_rate,
                "fft_size": metadata.fft_size,
                "channel_labels": metadata.channel_labels,
                "version": metadata.version,
                "schema_version": metadata.schema_version,
            },
            "frames": frames,
        }

    def export_json(
        self,
        snapshots: Sequence[AnalysisSnapshot],
        fps: int,
        duration: float,
        config: EngineConfig,
        output_path: Union[str, Path],
        indent: int = 2,
    ) -> Path:
        """
        Export manifest to JSON file.

        Returns:
            Path to written file.
        """
        manifest = self.build_manifest(snapshots, fps, duration, config)
        output_path = Path(output_path)

        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(manifest, f, indent=indent)

        return output_path

    def export_numpy(
        self,
        snapshots: Sequence[AnalysisSnapshot],
        fps: int,
        output_path: Union[str, Path],
    ) -> Path:
        """
        Export snapshots as a NumPy .npz archive.

        Channel fields are stacked to shape (n_frames, n_channels); the
        inter-lens matrix to (n_frames, n_channels, n_channels).

        Returns:
            Path to written file.
        """
        output_path = Path(output_path)

        def channel_field(name: str, dtype=np.float64) -> np.ndarray:
            return np.array(
                [[getattr(c, name) for c in s.channels] for s in snapshots],
                dtype=dtype,
            )

        np.savez_compressed(
            output_path,
            signal=channel_field("current_signal"),
            novelty=channel_field("novelty"),
            merit=channel_field("merit"),
            habituation=channel_field("habituation"),
            threshold=channel_field("threshold"),
            attention=channel_field("attention"),
            is_active=channel_field("is_active", dtype=bool),
            pitch=np.array([s.harmony.pitch for s in snapshots]),
            consonance=np.array([s.harmony.consonance for s in snapshots]),
            tension=np.array([s.harmony.tension for s in snapshots]),
            resolution=np.array([s.harmony.resolution for s in snapshots]),
            inter_lens_consonance=np.array(
                [s.harmony.inter_lens_consonance for s in snapshots]
            ),
            frame_times=np.array([s.time for s in snapshots]),
            fps=fps,
            n_frames=len(snapshots),
        )

        return output_path

    def to_dict(
        self,
        snapshots: Sequence[AnalysisSnapshot],
        fps: int,
        duration: float,
        config: EngineConfig,
    ) -> dict[str, Any]:
        """Return manifest as dictionary (for in-memory use)."""
        return self.build_manifest(snapshots, fps, duration, config)
