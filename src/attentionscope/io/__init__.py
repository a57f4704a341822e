"""Frame sources and manifest export."""

from attentionscope.io.exporter import ManifestExporter
from attentionscope.io.source import AnalyserFrameSource

__all__ = ["AnalyserFrameSource", "ManifestExporter"]
