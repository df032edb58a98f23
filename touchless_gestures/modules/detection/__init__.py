"""Hand landmark detection adapter (MediaPipe, optional)."""
