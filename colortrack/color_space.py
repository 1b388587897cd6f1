# Threshold tables per color space, and their packed text encoding

from typing import Dict, Optional, Sequence, Tuple, Union

import cv2

from colortrack.data_types import (
    ColorCategory as C,
    ColorSpaceId,
    ThresholdRange,
    ThresholdSet,
    Triple,
)
from colortrack.logger import get_logger

logger = get_logger(__name__)


def _r(lower: Triple, upper: Triple) -> ThresholdRange:
    return ThresholdRange(lower=tuple(lower), upper=tuple(upper))


# OpenCV 8-bit encodings: HSV/HLS hue 0-179, everything else 0-255
# (Lab a/b neutral at 128). GRAY uses only the first component.
# Ordered in order of frequency of use. Calibration constants.
HSV_BOUNDS: Dict[C, ThresholdSet] = {
    C.RED: (_r((0, 100, 100), (10, 255, 255)), _r((170, 100, 100), (179, 255, 255))),
    C.ORANGE: (_r((11, 100, 100), (23, 255, 255)),),
    C.YELLOW: (_r((24, 120, 70), (35, 255, 255)),),
    C.GREEN: (_r((36, 50, 50), (85, 255, 255)),),
    C.CYAN: (_r((86, 50, 50), (100, 255, 255)),),
    C.BLUE: (_r((101, 50, 50), (130, 255, 255)),),
    C.PURPLE: (_r((131, 50, 50), (169, 255, 255)),),
    C.BLACK: (_r((0, 0, 0), (179, 255, 50)),),
    C.GRAY: (_r((0, 0, 51), (179, 50, 200)),),
    C.WHITE: (_r((0, 0, 201), (179, 50, 255)),),
}

HLS_BOUNDS: Dict[C, ThresholdSet] = {
    C.RED: (_r((0, 50, 100), (10, 255, 255)), _r((170, 50, 100), (179, 255, 255))),
    C.ORANGE: (_r((11, 50, 100), (25, 255, 255)),),
    C.YELLOW: (_r((26, 50, 100), (35, 255, 255)),),
    C.GREEN: (_r((36, 50, 50), (85, 255, 255)),),
    C.CYAN: (_r((86, 50, 50), (100, 255, 255)),),
    C.BLUE: (_r((101, 50, 50), (130, 255, 255)),),
    C.PURPLE: (_r((131, 50, 50), (169, 255, 255)),),
    C.BLACK: (_r((0, 0, 0), (179, 50, 255)),),
    C.GRAY: (_r((0, 51, 0), (179, 200, 50)),),
    C.WHITE: (_r((0, 201, 0), (179, 255, 50)),),
}

BGR_BOUNDS: Dict[C, ThresholdSet] = {
    C.RED: (_r((0, 0, 100), (80, 80, 255)),),
    C.ORANGE: (_r((0, 80, 150), (100, 180, 255)),),
    C.YELLOW: (_r((0, 150, 150), (100, 255, 255)),),
    C.GREEN: (_r((0, 100, 0), (80, 255, 80)),),
    C.CYAN: (_r((100, 150, 0), (255, 255, 100)),),
    C.BLUE: (_r((100, 0, 0), (255, 80, 80)),),
    C.PURPLE: (_r((100, 0, 100), (255, 80, 255)),),
    C.BLACK: (_r((0, 0, 0), (50, 50, 50)),),
    C.GRAY: (_r((51, 51, 51), (200, 200, 200)),),
    C.WHITE: (_r((201, 201, 201), (255, 255, 255)),),
}

LAB_BOUNDS: Dict[C, ThresholdSet] = {
    C.RED: (_r((20, 150, 150), (255, 255, 255)),),
    C.ORANGE: (_r((50, 128, 150), (230, 200, 220)),),
    C.YELLOW: (_r((80, 100, 150), (255, 127, 255)),),
    C.GREEN: (_r((20, 0, 100), (200, 120, 140)),),
    C.CYAN: (_r((50, 0, 100), (200, 128, 127)),),
    C.BLUE: (_r((20, 128, 0), (200, 255, 127)),),
    C.PURPLE: (_r((20, 140, 0), (200, 255, 140)),),
    C.BLACK: (_r((0, 0, 0), (50, 255, 255)),),
    C.GRAY: (_r((51, 118, 118), (200, 138, 138)),),
    C.WHITE: (_r((201, 118, 118), (255, 138, 138)),),
}

XYZ_BOUNDS: Dict[C, ThresholdSet] = {
    C.RED: (_r((20, 10, 0), (180, 100, 50)),),
    C.ORANGE: (_r((80, 50, 10), (200, 140, 80)),),
    C.YELLOW: (_r((120, 120, 20), (255, 255, 150)),),
    C.GREEN: (_r((10, 20, 10), (100, 150, 80)),),
    C.CYAN: (_r((80, 120, 120), (200, 255, 255)),),
    C.BLUE: (_r((10, 10, 50), (100, 100, 200)),),
    C.PURPLE: (_r((40, 20, 80), (150, 100, 220)),),
    C.BLACK: (_r((0, 0, 0), (25, 25, 25)),),
    C.GRAY: (_r((26, 26, 26), (150, 150, 150)),),
    C.WHITE: (_r((151, 151, 151), (255, 255, 255)),),
}

GRAY_BOUNDS: Dict[C, ThresholdSet] = {
    C.BLACK: (_r((0, 0, 0), (50, 0, 0)),),
    C.DARK_GRAY: (_r((51, 0, 0), (100, 0, 0)),),
    C.MEDIUM_GRAY: (_r((101, 0, 0), (170, 0, 0)),),
    C.LIGHT_GRAY: (_r((171, 0, 0), (220, 0, 0)),),
    C.WHITE: (_r((221, 0, 0), (255, 0, 0)),),
}

BOUNDS: Dict[ColorSpaceId, Dict[C, ThresholdSet]] = {
    ColorSpaceId.HSV: HSV_BOUNDS,
    ColorSpaceId.HLS: HLS_BOUNDS,
    ColorSpaceId.BGR: BGR_BOUNDS,
    ColorSpaceId.Lab: LAB_BOUNDS,
    ColorSpaceId.XYZ: XYZ_BOUNDS,
    ColorSpaceId.GRAY: GRAY_BOUNDS,
}

# A gray band asked of a color space, or the coarse GRAY asked of GRAY space.
_GRAY_BANDS = (C.VERY_DARK_GRAY, C.DARK_GRAY, C.MEDIUM_DARK_GRAY, C.MEDIUM_GRAY,
               C.LIGHT_GRAY, C.VERY_LIGHT_GRAY)
_ALIASES_COLOR = {band: C.GRAY for band in _GRAY_BANDS}
_ALIASES_GRAY = {
    C.GRAY: C.MEDIUM_GRAY,
    C.VERY_DARK_GRAY: C.DARK_GRAY,
    C.MEDIUM_DARK_GRAY: C.MEDIUM_GRAY,
    C.VERY_LIGHT_GRAY: C.LIGHT_GRAY,
}

# From the RGB frame into each space.
CONVERSION_CODES: Dict[ColorSpaceId, int] = {
    ColorSpaceId.BGR: cv2.COLOR_RGB2BGR,
    ColorSpaceId.GRAY: cv2.COLOR_RGB2GRAY,
    ColorSpaceId.HLS: cv2.COLOR_RGB2HLS,
    ColorSpaceId.HSV: cv2.COLOR_RGB2HSV,
    ColorSpaceId.Lab: cv2.COLOR_RGB2Lab,
    ColorSpaceId.XYZ: cv2.COLOR_RGB2XYZ,
}


def bounds(space: Union[ColorSpaceId, str], category: C) -> ThresholdSet:
    """
    Threshold ranges for a category in a color space.
    Returns an empty tuple for an unknown space or a missing entry.
    """
    space_id = ColorSpaceId.from_value(space)
    if space_id is None:
        logger.warning("Invalid color space: %r", space)
        return ()

    table = BOUNDS[space_id]
    aliases = _ALIASES_GRAY if space_id is ColorSpaceId.GRAY else _ALIASES_COLOR
    key = category if category in table else aliases.get(category, category)

    found = table.get(key)
    if found is None:
        logger.warning("Color key %s not found in format %s", category.value, space_id.value)
        return ()
    return found


def closest_category(rgb: Sequence[int], space: Union[ColorSpaceId, str]) -> Optional[C]:
    """
    Nearest table key for a sampled color, by dominant channel and channel
    ratios. GRAY space always answers with a brightness band.
    Returns None for an unknown space.
    """
    space_id = ColorSpaceId.from_value(space)
    if space_id is None:
        logger.warning("Invalid color space: %r", space)
        return None

    r, g, b = (int(v) for v in rgb)
    hi = max(r, g, b)
    spread = hi - min(r, g, b)
    avg = (r + g + b) / 3

    if spread < 30:
        # neutral
        if avg < 50:
            key = C.BLACK
        elif avg > 220:
            key = C.WHITE
        else:
            key = C.GRAY
    elif hi == r:
        if g > b and g > r * 0.6:
            key = C.YELLOW if g > r * 0.85 else C.ORANGE
        elif b > g and b > r * 0.5:
            key = C.PURPLE
        else:
            key = C.RED
    elif hi == g:
        if r > b and r > g * 0.7:
            key = C.YELLOW
        elif b > r and b > g * 0.7:
            key = C.CYAN
        else:
            key = C.GREEN
    else:
        if r > g and r > b * 0.5:
            key = C.PURPLE
        elif g > r and g > b * 0.7:
            key = C.CYAN
        else:
            key = C.BLUE

    if space_id is ColorSpaceId.GRAY:
        if avg > 220:
            key = C.WHITE
        elif avg > 170:
            key = C.LIGHT_GRAY
        elif avg > 100:
            key = C.MEDIUM_GRAY
        elif avg > 50:
            key = C.DARK_GRAY
        else:
            key = C.BLACK

    return key


def rgb_bounds_to_string(lower: Sequence[int], upper: Sequence[int]) -> str:
    """
    Pack two triples as "<upper>|<lower>", each a 24-bit integer
    (first component in the high byte).
    """
    return f"{rgb_to_integer(upper)}|{rgb_to_integer(lower)}"


def string_bounds_to_rgb(text: str) -> ThresholdRange:
    """
    Inverse of rgb_bounds_to_string.
    Raises ValueError on malformed text.
    """
    parts = text.split("|")
    if len(parts) != 2:
        raise ValueError(f"Expected '<upper>|<lower>', got {text!r}")
    upper, lower = (int(p) for p in parts)
    return ThresholdRange(lower=integer_to_rgb(lower), upper=integer_to_rgb(upper))


def rgb_to_integer(rgb: Sequence[int]) -> int:
    r, g, b = (int(v) for v in rgb)
    for v in (r, g, b):
        if not 0 <= v <= 255:
            raise ValueError(f"Component out of range [0, 255]: {v}")
    return (r << 16) | (g << 8) | b


def integer_to_rgb(color: int) -> Tuple[int, int, int]:
    return (color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF


def encode_thresholds(thresholds: ThresholdSet) -> Tuple[str, ...]:
    return tuple(rgb_bounds_to_string(t.lower, t.upper) for t in thresholds)


def decode_thresholds(packed: Sequence[str]) -> ThresholdSet:
    return tuple(string_bounds_to_rgb(p) for p in packed)
