"""Core per-frame analysis modules."""

from attentionscope.core.attention import AttentionAllocator
from attentionscope.core.frame import SpectrumFrame
from attentionscope.core.harmony import HarmonyEstimator, HarmonyState
from attentionscope.core.interharmonic import InterharmonicAnalyzer
from attentionscope.core.tracker import ChannelState, ChannelTracker

__all__ = [
    "AttentionAllocator",
    "ChannelState",
    "ChannelTracker",
    "HarmonyEstimator",
    "HarmonyState",
    "InterharmonicAnalyzer",
    "SpectrumFrame",
]
