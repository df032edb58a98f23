"""
Touchless Gestures
==================

Hand gesture recognition and dispatch pipeline: per-frame hand landmarks
in, debounced action events out.

Packages:
    - core: Shared types, event bus, per-session pipeline
    - models: Feature normalization, label/model loading, classifier
    - modules: Temporal smoothing, dispatch policy, detector adapter, utils
"""

__version__ = "1.0.0"
