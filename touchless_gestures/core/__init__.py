"""Shared types, event bus and the per-session pipeline."""
