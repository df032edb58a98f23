"""Gesture-to-action dispatch policy."""
from .debouncer import DispatchPolicy

__all__ = ["DispatchPolicy"]
