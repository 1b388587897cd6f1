# Core data structures (samples, categories, thresholds, boxes, results)

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union

Triple = Tuple[int, int, int]


class ColorSpaceId(str, Enum):
    """
    Numeric encodings a ThresholdSet can be expressed in.
    Values match the OpenCV naming of the conversion targets.
    """
    BGR = "BGR"
    GRAY = "GRAY"
    HLS = "HLS"
    HSV = "HSV"
    Lab = "Lab"
    XYZ = "XYZ"

    @classmethod
    def from_value(cls, value: Union["ColorSpaceId", str, None]) -> Optional["ColorSpaceId"]:
        """
        Total validator: returns the matching member, or None for anything
        that is not exactly one of the six names.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value)
        except ValueError:
            return None


class ClassifyMode(str, Enum):
    COLOR = "COLOR"
    GRAY = "GRAY"


class ColorCategory(str, Enum):
    # reds
    PURE_RED = "PURE_RED"
    RED = "RED"
    DARK_RED = "DARK_RED"
    PINK_RED = "PINK_RED"
    # oranges
    RED_ORANGE = "RED_ORANGE"
    ORANGE = "ORANGE"
    DARK_ORANGE = "DARK_ORANGE"
    BRIGHT_ORANGE = "BRIGHT_ORANGE"
    BROWN = "BROWN"
    # yellows
    YELLOW_ORANGE = "YELLOW_ORANGE"
    YELLOW = "YELLOW"
    DARK_YELLOW = "DARK_YELLOW"
    OLIVE = "OLIVE"
    # greens
    YELLOW_GREEN = "YELLOW_GREEN"
    PURE_GREEN = "PURE_GREEN"
    GREEN = "GREEN"
    DARK_GREEN = "DARK_GREEN"
    CYAN_GREEN = "CYAN_GREEN"
    # cyans
    CYAN = "CYAN"
    DARK_CYAN = "DARK_CYAN"
    CYAN_BLUE = "CYAN_BLUE"
    TEAL = "TEAL"
    # blues
    BLUE = "BLUE"
    PURE_BLUE = "PURE_BLUE"
    DARK_BLUE = "DARK_BLUE"
    NAVY = "NAVY"
    BLUE_PURPLE = "BLUE_PURPLE"
    # purples, magentas, pinks
    PURPLE = "PURPLE"
    DARK_PURPLE = "DARK_PURPLE"
    VIOLET = "VIOLET"
    RED_PURPLE = "RED_PURPLE"
    MAGENTA = "MAGENTA"
    DARK_MAGENTA = "DARK_MAGENTA"
    PINK = "PINK"
    LIGHT_PINK = "LIGHT_PINK"
    HOT_PINK = "HOT_PINK"
    # achromatic
    BLACK = "BLACK"
    VERY_DARK_GRAY = "VERY_DARK_GRAY"
    DARK_GRAY = "DARK_GRAY"
    MEDIUM_DARK_GRAY = "MEDIUM_DARK_GRAY"
    MEDIUM_GRAY = "MEDIUM_GRAY"
    LIGHT_GRAY = "LIGHT_GRAY"
    VERY_LIGHT_GRAY = "VERY_LIGHT_GRAY"
    WHITE = "WHITE"
    GRAY = "GRAY"  # coarse only
    # muted
    MUTED_RED = "MUTED_RED"
    MUTED_ORANGE = "MUTED_ORANGE"
    MUTED_YELLOW = "MUTED_YELLOW"
    MUTED_GREEN = "MUTED_GREEN"
    MUTED_CYAN = "MUTED_CYAN"
    MUTED_BLUE = "MUTED_BLUE"
    MUTED_PURPLE = "MUTED_PURPLE"


@dataclass(frozen=True)
class ColorSample:
    """
    An 8-bit RGB triple. Iterates as (r, g, b).
    """
    r: int
    g: int
    b: int

    def __iter__(self):
        return iter((self.r, self.g, self.b))

    def as_tuple(self) -> Triple:
        return (self.r, self.g, self.b)


@dataclass(frozen=True)
class TapPosition:
    """
    Pixel position of a color sample request, in original-frame coordinates.
    """
    x: int
    y: int


@dataclass(frozen=True)
class ThresholdRange:
    """
    Inclusive per-channel bounds in a color space's native encoding.
    """
    lower: Triple
    upper: Triple


# Ranges are OR-ed together; red in hue-wrap spaces needs two.
ThresholdSet = Tuple[ThresholdRange, ...]


@dataclass
class ColorMetrics:
    """
    Every derived measurement the classifier looks at.
    Hues are in degrees [0, 360).
    """
    hsv: Tuple[float, float, float]
    hsl: Tuple[float, float, float]
    lab: Tuple[float, float, float]
    lch: Tuple[float, float, float]
    luminance: float
    chromaticness: float


@dataclass
class Classification:
    """
    Result of classifying one ColorSample.
    category: simplified category for the requested mode
    detailed: internal classification before simplification
    """
    category: ColorCategory
    detailed: ColorCategory
    confidence: float
    is_dark: bool
    is_light: bool
    is_desaturated: bool
    metrics: ColorMetrics


# box coordinates
@dataclass
class BoundingBox:
    """
    Axis-aligned bounding box in original-frame pixel coordinates.
    (x, y) = top-left corner. area is the enclosed contour area.
    """
    x: int
    y: int
    width: int
    height: int
    area: float = 0.0


@dataclass
class DetectionResult:
    """
    All detections for a single frame, ascending by area.
    """
    frame_id: int
    boxes: List[BoundingBox] = field(default_factory=list)
    color_space: Optional[ColorSpaceId] = None
    processing_time_ms: float = 0.0

    @classmethod
    def empty(cls, frame_id: int, color_space: Optional[ColorSpaceId] = None) -> "DetectionResult":
        return cls(frame_id=frame_id, boxes=[], color_space=color_space)


@dataclass(frozen=True)
class TrackingSnapshot:
    """
    Consistent view of the shared tracking state, for diagnostics and UI.
    """
    color_space: ColorSpaceId
    target_color: ColorSample
    thresholds: ThresholdSet
    pending_tap: Optional[TapPosition]
