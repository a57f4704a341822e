"""Spectral attention engine for audio-reactive visuals."""

from attentionscope.config import EngineConfig
from attentionscope.core.frame import SpectrumFrame
from attentionscope.io.exporter import ManifestExporter
from attentionscope.io.source import AnalyserFrameSource
from attentionscope.pipeline import AttentionPipeline
from attentionscope.session import AnalysisSnapshot, AttentionSession

__version__ = "0.1.0"
__all__ = [
    "AnalyserFrameSource",
    "AnalysisSnapshot",
    "AttentionPipeline",
    "AttentionSession",
    "EngineConfig",
    "ManifestExporter",
    "SpectrumFrame",
]
