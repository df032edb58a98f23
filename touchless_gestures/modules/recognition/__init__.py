"""Temporal smoothing of per-frame classifications."""
from .temporal_filter import TemporalSmoother

__all__ = ["TemporalSmoother"]
