# all configurations in one place

from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

import yaml

# Paths
PROJECT_ROOT = Path(__file__).resolve().parent.parent
DATA_DIR = PROJECT_ROOT / "data"

@dataclass
class VideoConfig:
    source: Union[int, str] = 0  # 0 for webcam, or path to video file
    frame_width: int = 1280
    frame_height: int = 720
    fps: int = 60

@dataclass
class DetectionConfig:
    downsample_factor: int = 4
    min_size: float = 100.0             # contour area, downsampled pixels
    max_size: Optional[float] = None    # None = unbounded
    max_object_count: int = 50
    sample_radius: int = 10             # tap averaging disk, full-res pixels
    fallback_lower: Tuple[int, int, int] = (30, 60, 60)
    fallback_upper: Tuple[int, int, int] = (50, 255, 255)
    frame_budget_ms: float = 1000.0 / 60.0

@dataclass
class TrackingConfig:
    throttle_ms: float = 50.0
    poll_interval_ms: float = 2000.0
    default_color_space: str = "HSV"
    default_target_color: Tuple[int, int, int] = (224, 138, 9)  # orange
    derivation: str = "classifier"  # or "closest"

@dataclass
class LoggingConfig:
    level: str = "INFO"
    log_path: Optional[Path] = None  # e.g. DATA_DIR / "logs" / "colortrack.log"

@dataclass
class PipelineConfig:
    video: VideoConfig = field(default_factory=VideoConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    tracking: TrackingConfig = field(default_factory=TrackingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _apply(section, values: dict, name: str) -> None:
    known = {f.name for f in fields(section)}
    for key, value in values.items():
        if key not in known:
            raise ValueError(f"Unknown config key: {name}.{key}")
        current = getattr(section, key)
        if isinstance(current, tuple) and isinstance(value, list):
            value = tuple(value)
        elif isinstance(current, Path) or key.endswith("_path"):
            value = Path(value) if value is not None else None
        setattr(section, key, value)


def load_config(path: Union[str, Path]) -> PipelineConfig:
    """
    Build a PipelineConfig from a YAML file.

    Top-level keys mirror the PipelineConfig blocks, e.g.

        detection:
          min_size: 50
          max_size: 500
        tracking:
          default_color_space: HLS

    Missing keys keep their defaults.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config root must be a mapping: {path}")

    cfg = PipelineConfig()
    for name, values in data.items():
        section = getattr(cfg, name, None)
        if not is_dataclass(section):
            raise ValueError(f"Unknown config section: {name}")
        _apply(section, values or {}, name)
    return cfg
