"""
Centralized configuration manager.

Loads the bundled YAML defaults, deep-merges optional user overrides on
top, and provides typed access with defaults. Validation only warns; a bad
value never stops the pipeline, the component default is used instead.
"""

import os
import logging

import yaml

logger = logging.getLogger(__name__)

_PACKAGE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
_CONFIG_DIR = os.path.join(_PACKAGE_DIR, "config")

DEFAULT_CONFIG_PATH = os.path.join(_CONFIG_DIR, "config.yaml")
DEFAULT_GESTURES_PATH = os.path.join(_CONFIG_DIR, "gestures.yaml")

# Schema: sections and their expected field types
_CONFIG_SCHEMA = {
    "features": {
        "expected_points": int,
        "rotation_degrees": int,
    },
    "classifier": {
        "model_path": str,
        "labels_path": str,
        "backend": str,
        "num_threads": int,
    },
    "smoothing": {
        "window_size": int,
        "majority_threshold": float,
        "min_confidence": float,
    },
    "dispatch": {
        "cooldown_ms": int,
        "detection_confidence": float,
    },
    "session": {
        "hand_enabled": bool,
        "reset_cooldown_on_reset": bool,
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base dict."""
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _read_yaml(path) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: top level must be a mapping, got %s",
                       path, type(data).__name__)
        return {}
    return data


class Config:
    """Singleton configuration manager."""

    _instance = None
    _data = {}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def load(self, config_path=None, gestures_path=None):
        """Load bundled defaults, then merge the given override files."""
        data = _read_yaml(DEFAULT_CONFIG_PATH)
        data["gestures"] = _read_yaml(DEFAULT_GESTURES_PATH)

        if config_path:
            try:
                data = _deep_merge(data, _read_yaml(config_path))
                logger.info("Loaded config from %s", config_path)
            except FileNotFoundError:
                logger.warning("Config file not found: %s, using defaults", config_path)

        if gestures_path:
            try:
                data["gestures"] = _deep_merge(data["gestures"], _read_yaml(gestures_path))
                logger.info("Loaded gestures from %s", gestures_path)
            except FileNotFoundError:
                logger.warning("Gestures file not found: %s", gestures_path)

        self._data = data
        self._validate()
        return self

    def load_dict(self, data: dict):
        """Load bundled defaults merged with an in-memory override."""
        self.load()
        self._data = _deep_merge(self._data, data)
        self._validate()
        return self

    def _validate(self):
        """Validate config fields against schema (warnings only)."""
        warnings = []
        for section_name, fields in _CONFIG_SCHEMA.items():
            section = self._data.get(section_name)
            if section is None:
                warnings.append("Missing config section: '%s'" % section_name)
                continue
            if not isinstance(section, dict):
                warnings.append("Section '%s' should be a dict, got %s"
                                % (section_name, type(section).__name__))
                continue
            for field_name, expected_type in fields.items():
                if field_name not in section:
                    continue
                value = section[field_name]
                # bool is an int subclass; only accept it for bool fields
                if isinstance(value, bool) and expected_type is not bool:
                    pass
                elif expected_type is float and isinstance(value, (int, float)):
                    continue
                elif isinstance(value, expected_type):
                    continue
                warnings.append("%s.%s: expected %s, got %s (%r)" % (
                    section_name, field_name, expected_type.__name__,
                    type(value).__name__, value))

        for w in warnings:
            logger.warning("Config validation: %s", w)
        if not warnings:
            logger.debug("Config validation passed")
        return warnings

    def get(self, key_path: str, default=None):
        """Get nested config value using dot notation: 'smoothing.window_size'."""
        value = self._data
        for key in key_path.split("."):
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def get_section(self, section: str) -> dict:
        """Get an entire config section."""
        value = self._data.get(section, {})
        return value if isinstance(value, dict) else {}

    @property
    def features(self) -> dict:
        return self.get_section("features")

    @property
    def classifier(self) -> dict:
        return self.get_section("classifier")

    @property
    def smoothing(self) -> dict:
        return self.get_section("smoothing")

    @property
    def dispatch(self) -> dict:
        return self.get_section("dispatch")

    @property
    def session(self) -> dict:
        return self.get_section("session")

    @property
    def mediapipe(self) -> dict:
        return self.get_section("mediapipe")

    @property
    def camera(self) -> dict:
        return self.get_section("camera")

    @property
    def logging(self) -> dict:
        return self.get_section("logging")

    @property
    def gestures(self) -> dict:
        return self.get_section("gestures")

    @property
    def actions(self) -> dict:
        return self.gestures.get("actions", {}) or {}

    @classmethod
    def reset(cls):
        """Reset singleton instance (for testing)."""
        cls._instance = None
        cls._data = {}
