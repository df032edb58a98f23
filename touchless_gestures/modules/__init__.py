"""Recognition, control, detection and utility modules."""
