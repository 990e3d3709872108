"""
User settings and engine configuration.

Settings live in ~/.beatforge/settings.json as a nested dict of categories.
Loaded values are merged over the defaults per category so that settings
added in newer versions appear automatically; a missing file is created
with the defaults.
"""
import copy
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, Optional

from core.constants import (
    SUBDIVISIONS_PER_MEASURE, BPM_DEFAULT, BEATS_PER_MEASURE_DEFAULT,
    MAX_DURATION_SECONDS, MAX_FILE_BYTES, MAX_DECODED_BYTES,
    DEFAULT_PIXELS_PER_SECOND, MIN_PIXELS_PER_SECOND, HEADER_WIDTH,
)
from core.models import BeatGridConfig

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path.home() / ".beatforge" / "settings.json"

DEFAULT_SETTINGS: Dict[str, Dict[str, Any]] = {
    "grid": {
        "bpm": BPM_DEFAULT,
        "beats_per_measure": BEATS_PER_MEASURE_DEFAULT,
        "subdivisions_per_measure": SUBDIVISIONS_PER_MEASURE,
    },
    "timeline": {
        "default_pixels_per_second": DEFAULT_PIXELS_PER_SECOND,
        "min_pixels_per_second": MIN_PIXELS_PER_SECOND,
        "header_width": HEADER_WIDTH,
    },
    "limits": {
        "max_duration_seconds": MAX_DURATION_SECONDS,
        "max_file_bytes": MAX_FILE_BYTES,
        "max_decoded_bytes": MAX_DECODED_BYTES,
    },
    "audio": {
        "output_device": "Default",
        "block_size": 512,
    },
    "logging": {
        "level": "INFO",
        "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    },
}


def default_settings() -> Dict[str, Dict[str, Any]]:
    """Fresh deep copy of the default settings."""
    return copy.deepcopy(DEFAULT_SETTINGS)


def load_settings(path: Optional[Path] = None) -> Dict[str, Dict[str, Any]]:
    """
    Load settings from the config file.

    Args:
        path: Settings file (default ~/.beatforge/settings.json)

    Returns:
        Settings dict with every default category present

    Unreadable or malformed files are logged and the defaults are used.
    """
    config_path = Path(path) if path is not None else DEFAULT_SETTINGS_PATH
    settings = default_settings()

    if not config_path.exists():
        # No config file exists, save defaults
        try:
            save_settings(settings, config_path)
            logger.info("Created new settings file with defaults at %s", config_path)
        except OSError as e:
            logger.warning("Failed to save default settings: %s", e)
        return settings

    try:
        with open(config_path, "r") as f:
            loaded = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Failed to load settings from %s: %s", config_path, e)
        return settings

    if not isinstance(loaded, dict):
        logger.warning("Ignoring settings file %s: expected an object", config_path)
        return settings

    # Merge with defaults (in case new settings added)
    for category in settings:
        if isinstance(loaded.get(category), dict):
            settings[category].update(loaded[category])
    return settings


def save_settings(settings: Dict[str, Dict[str, Any]], path: Optional[Path] = None):
    """Write settings to the config file, creating its directory."""
    config_path = Path(path) if path is not None else DEFAULT_SETTINGS_PATH
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w") as f:
        json.dump(settings, f, indent=2)


@dataclass(frozen=True)
class EngineConfig:
    """
    Resolved engine configuration.

    Attributes:
        grid: Tempo and meter
        subdivisions_per_measure: Grid resolution
        default_pixels_per_second: Timeline scale with no audio
        min_pixels_per_second: Timeline scale floor
        header_width: Track header gutter in pixels
        max_duration_seconds: Longest accepted track
        max_file_bytes: Largest accepted raw audio file
        max_decoded_bytes: Largest accepted audio payload
        output_device: sounddevice output device name ("Default" for system default)
        block_size: Output stream block size in frames
    """
    grid: BeatGridConfig = field(default_factory=BeatGridConfig)
    subdivisions_per_measure: int = SUBDIVISIONS_PER_MEASURE
    default_pixels_per_second: float = DEFAULT_PIXELS_PER_SECOND
    min_pixels_per_second: float = MIN_PIXELS_PER_SECOND
    header_width: float = HEADER_WIDTH
    max_duration_seconds: float = MAX_DURATION_SECONDS
    max_file_bytes: int = MAX_FILE_BYTES
    max_decoded_bytes: int = MAX_DECODED_BYTES
    output_device: str = "Default"
    block_size: int = 512

    @classmethod
    def from_settings(cls, settings: Dict[str, Dict[str, Any]]) -> "EngineConfig":
        """
        Build config from a settings dict (missing keys fall back to defaults).

        Raises:
            InputError: If the grid settings are invalid
        """
        merged = default_settings()
        for category, values in settings.items():
            if category in merged and isinstance(values, dict):
                merged[category].update(values)

        grid = merged["grid"]
        timeline = merged["timeline"]
        limits = merged["limits"]
        audio = merged["audio"]
        return cls(
            grid=BeatGridConfig(bpm=grid["bpm"], beats_per_measure=grid["beats_per_measure"]),
            subdivisions_per_measure=int(grid["subdivisions_per_measure"]),
            default_pixels_per_second=float(timeline["default_pixels_per_second"]),
            min_pixels_per_second=float(timeline["min_pixels_per_second"]),
            header_width=float(timeline["header_width"]),
            max_duration_seconds=float(limits["max_duration_seconds"]),
            max_file_bytes=int(limits["max_file_bytes"]),
            max_decoded_bytes=int(limits["max_decoded_bytes"]),
            output_device=str(audio["output_device"]),
            block_size=int(audio["block_size"]),
        )

    @property
    def device_name(self) -> Optional[str]:
        """Output device for sounddevice (None selects the system default)."""
        return None if self.output_device == "Default" else self.output_device


def configure_logging(settings: Optional[Dict[str, Dict[str, Any]]] = None) -> logging.Logger:
    """
    Set up the package root loggers from the logging settings category.

    Returns:
        The configured "core" logger
    """
    log_settings = dict(DEFAULT_SETTINGS["logging"])
    if settings and isinstance(settings.get("logging"), dict):
        log_settings.update(settings["logging"])

    level = logging.getLevelName(str(log_settings["level"]).upper())
    if not isinstance(level, int):
        level = logging.INFO

    formatter = logging.Formatter(log_settings["format"])
    for name in ("core", "audio"):
        package_logger = logging.getLogger(name)
        package_logger.setLevel(level)
        if not package_logger.handlers:
            package_logger.addHandler(logging.StreamHandler())
        for handler in package_logger.handlers:
            handler.setFormatter(formatter)
    return logging.getLogger("core")
