"""
Engine configuration.

Channel definitions and the tuning constants that shape the novelty,
habituation, attention and harmony dynamics. Everything here is static
for the lifetime of a session.
"""

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Union


@dataclass(frozen=True)
class ChannelDefinition:
    """A frequency band the engine listens to."""

    id: int
    label: str
    freq_range: tuple[float, float]  # Hz, inclusive


DEFAULT_CHANNELS: tuple[ChannelDefinition, ...] = (
    ChannelDefinition(1, "Sub Bass", (20.0, 60.0)),
    ChannelDefinition(2, "Bass", (60.0, 250.0)),
    ChannelDefinition(3, "Low Mids", (250.0, 500.0)),
    ChannelDefinition(4, "Midrange", (500.0, 2000.0)),
    ChannelDefinition(5, "Upper Mids", (2000.0, 4000.0)),
    ChannelDefinition(6, "Presence", (4000.0, 6000.0)),
    ChannelDefinition(7, "Brilliance", (6000.0, 20000.0)),
)


@dataclass(frozen=True)
class TuningParams:
    """Per-channel signal, habituation and attention constants."""

    habituation_rate: float = 0.005  # How quickly a channel gets "bored"
    habituation_decay: float = 0.99  # How quickly boredom fades
    base_threshold: float = 0.15  # Minimum signal to activate
    threshold_scale: float = 0.8  # How much habituation raises the threshold
    signal_smoothing: float = 0.7
    merit_smoothing: float = 0.95
    signal_history_length: int = 30  # Frames used for novelty
    novelty_gain: float = 5.0
    merit_novel_level: float = 0.1  # Merit above this stamps the channel as novel
    habituation_novelty_ceiling: float = 0.05  # Habituate only below this novelty
    recency_weight: float = 0.05  # Attention bonus per second since last novelty
    attention_smoothing: float = 0.9


@dataclass(frozen=True)
class HarmonyParams:
    """Harmonic Product Spectrum search and smoothing constants."""

    n_harmonics: int = 5
    min_pitch_hz: float = 60.0
    max_pitch_hz: float = 1200.0
    pitch_smoothing: float = 0.8
    consonance_smoothing: float = 0.9
    resolution_gain: float = 8.0


@dataclass(frozen=True)
class InterharmonicParams:
    """Pairwise consonance scoring constants (magnitudes on a 0-255 scale)."""

    peak_floor: float = 20.0
    tolerance: float = 0.05
    reference_magnitude: float = 128.0
    consonant_ratios: tuple[float, ...] = (3 / 2, 4 / 3, 5 / 4, 6 / 5, 5 / 3)


@dataclass(frozen=True)
class EngineConfig:
    """Complete static configuration for an attention session."""

    sample_rate: int = 44100
    fft_size: int = 4096
    channels: tuple[ChannelDefinition, ...] = DEFAULT_CHANNELS
    tuning: TuningParams = field(default_factory=TuningParams)
    harmony: HarmonyParams = field(default_factory=HarmonyParams)
    interharmonic: InterharmonicParams = field(default_factory=InterharmonicParams)

    @property
    def n_bins(self) -> int:
        """Length of the magnitude array a frame carries."""
        return self.fft_size // 2

    @property
    def bin_width(self) -> float:
        """Frequency spacing between adjacent bins in Hz."""
        return self.sample_rate / self.fft_size

    def validate(self) -> "EngineConfig":
        """
        Check the configuration for values the engine cannot run with.

        Returns:
            self, so calls can be chained.

        Raises:
            ValueError: On the first invalid value found.
        """
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        if self.fft_size < 2:
            raise ValueError(f"fft_size must be at least 2, got {self.fft_size}")
        if not self.channels:
            raise ValueError("at least one channel must be configured")

        ids = [c.id for c in self.channels]
        if len(set(ids)) != len(ids):
            raise ValueError(f"channel ids must be unique, got {ids}")
        for channel in self.channels:
            low, high = channel.freq_range
            if low < 0 or high < low:
                raise ValueError(
                    f"invalid frequency range {channel.freq_range} for '{channel.label}'"
                )

        t = self.tuning
        for name in (
            "habituation_decay",
            "signal_smoothing",
            "merit_smoothing",
            "attention_smoothing",
        ):
            _check_unit(name, getattr(t, name))
        for name in (
            "habituation_rate",
            "base_threshold",
            "threshold_scale",
            "novelty_gain",
            "merit_novel_level",
            "habituation_novelty_ceiling",
            "recency_weight",
        ):
            value = getattr(t, name)
            if value < 0:
                raise ValueError(f"{name} must not be negative, got {value}")
        if t.signal_history_length < 1:
            raise ValueError(
                f"signal_history_length must be at least 1, got {t.signal_history_length}"
            )

        h = self.harmony
        _check_unit("pitch_smoothing", h.pitch_smoothing)
        _check_unit("consonance_smoothing", h.consonance_smoothing)
        if h.n_harmonics < 1:
            raise ValueError(f"n_harmonics must be at least 1, got {h.n_harmonics}")
        if h.max_pitch_hz < h.min_pitch_hz:
            raise ValueError("max_pitch_hz must not be below min_pitch_hz")

        ih = self.interharmonic
        if ih.tolerance <= 0:
            raise ValueError(f"tolerance must be positive, got {ih.tolerance}")
        if ih.reference_magnitude <= 0:
            raise ValueError("reference_magnitude must be positive")
        if not ih.consonant_ratios:
            raise ValueError("consonant_ratios must not be empty")

        return self

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict form, suitable for JSON."""
        data = asdict(self)
        data["channels"] = [
            {"id": c.id, "label": c.label, "freq_range": list(c.freq_range)}
            for c in self.channels
        ]
        data["interharmonic"]["consonant_ratios"] = list(
            self.interharmonic.consonant_ratios
        )
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EngineConfig":
        """
        Build a validated configuration from a plain dict.

        Missing keys fall back to the defaults. Unknown keys in the
        parameter groups raise TypeError from the dataclass constructor.
        Channel entries missing id, label or freq_range raise ValueError.
        """
        kwargs: dict[str, Any] = {}
        if "sample_rate" in data:
            kwargs["sample_rate"] = int(data["sample_rate"])
        if "fft_size" in data:
            kwargs["fft_size"] = int(data["fft_size"])
        if "channels" in data:
            kwargs["channels"] = tuple(_channel_from_dict(c) for c in data["channels"])
        if "tuning" in data:
            kwargs["tuning"] = TuningParams(**data["tuning"])
        if "harmony" in data:
            kwargs["harmony"] = HarmonyParams(**data["harmony"])
        if "interharmonic" in data:
            ih = dict(data["interharmonic"])
            if "consonant_ratios" in ih:
                ih["consonant_ratios"] = tuple(float(r) for r in ih["consonant_ratios"])
            kwargs["interharmonic"] = InterharmonicParams(**ih)

        return cls(**kwargs).validate()


def _check_unit(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be within [0, 1], got {value}")


def _channel_from_dict(data: dict[str, Any]) -> ChannelDefinition:
    try:
        low, high = data["freq_range"]
        return ChannelDefinition(
            id=int(data["id"]),
            label=str(data["label"]),
            freq_range=(float(low), float(high)),
        )
    except KeyError as e:
        raise ValueError(f"channel entry is missing {e}") from e
    except (TypeError, ValueError) as e:
        raise ValueError(f"malformed channel entry {data!r}: {e}") from e


def load_config(path: Union[str, Path]) -> EngineConfig:
    """
    Load an engine configuration from a JSON file.

    Args:
        path: Path to a JSON document shaped like EngineConfig.to_dict().

    Returns:
        Validated EngineConfig.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return EngineConfig.from_dict(data)
