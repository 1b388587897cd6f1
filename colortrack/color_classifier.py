# Multi-space color classification (HSV, HSL, Lab, LCH, WCAG luminance)

import math
from numbers import Integral
from typing import NamedTuple, Optional, Sequence, Tuple, Union

from colortrack.data_types import (
    Classification,
    ClassifyMode,
    ColorCategory as C,
    ColorMetrics,
)
from colortrack.errors import InvalidSample


class _Ratios(NamedTuple):
    rg: float
    rb: float
    gr: float
    gb: float
    br: float
    bg: float


class _Dominance(NamedTuple):
    max_component: str
    min_component: str
    max: int
    min: int
    mid: int
    range: int
    dominance_ratio: float


# All numeric constants are hand-calibrated. Keep them literal.

# detailed -> coarse, COLOR mode
_COLOR_MAP = {
    # reds
    C.PURE_RED: C.RED, C.RED: C.RED, C.DARK_RED: C.RED, C.PINK_RED: C.RED,
    # oranges (brown is dark orange)
    C.RED_ORANGE: C.ORANGE, C.ORANGE: C.ORANGE, C.DARK_ORANGE: C.ORANGE,
    C.BRIGHT_ORANGE: C.ORANGE, C.BROWN: C.ORANGE,
    # yellows (olive is dark desaturated yellow)
    C.YELLOW_ORANGE: C.YELLOW, C.YELLOW: C.YELLOW, C.DARK_YELLOW: C.YELLOW,
    C.OLIVE: C.YELLOW,
    # greens
    C.YELLOW_GREEN: C.GREEN, C.PURE_GREEN: C.GREEN, C.GREEN: C.GREEN,
    C.DARK_GREEN: C.GREEN, C.CYAN_GREEN: C.GREEN,
    # cyans
    C.CYAN: C.CYAN, C.DARK_CYAN: C.CYAN, C.CYAN_BLUE: C.CYAN, C.TEAL: C.CYAN,
    # blues
    C.BLUE: C.BLUE, C.PURE_BLUE: C.BLUE, C.DARK_BLUE: C.BLUE, C.NAVY: C.BLUE,
    C.BLUE_PURPLE: C.BLUE,
    # purples, magentas, pinks
    C.PURPLE: C.PURPLE, C.DARK_PURPLE: C.PURPLE, C.VIOLET: C.PURPLE,
    C.RED_PURPLE: C.PURPLE, C.MAGENTA: C.PURPLE, C.DARK_MAGENTA: C.PURPLE,
    C.PINK: C.PURPLE, C.LIGHT_PINK: C.PURPLE, C.HOT_PINK: C.PURPLE,
    # achromatic
    C.BLACK: C.BLACK, C.VERY_DARK_GRAY: C.GRAY, C.DARK_GRAY: C.GRAY,
    C.MEDIUM_DARK_GRAY: C.GRAY, C.MEDIUM_GRAY: C.GRAY, C.LIGHT_GRAY: C.GRAY,
    C.VERY_LIGHT_GRAY: C.GRAY, C.WHITE: C.WHITE,
    # muted
    C.MUTED_RED: C.GRAY, C.MUTED_ORANGE: C.GRAY, C.MUTED_YELLOW: C.GRAY,
    C.MUTED_GREEN: C.GRAY, C.MUTED_CYAN: C.GRAY, C.MUTED_BLUE: C.GRAY,
    C.MUTED_PURPLE: C.GRAY,
}

# detailed -> gray band, GRAY mode
_GRAY_MAP = {
    C.BLACK: C.BLACK,
    C.VERY_DARK_GRAY: C.DARK_GRAY,
    C.DARK_GRAY: C.DARK_GRAY,
    C.MEDIUM_DARK_GRAY: C.MEDIUM_GRAY,
    C.MEDIUM_GRAY: C.MEDIUM_GRAY,
    C.LIGHT_GRAY: C.LIGHT_GRAY,
    C.VERY_LIGHT_GRAY: C.LIGHT_GRAY,
    C.WHITE: C.WHITE,
}

_MUTED = {
    C.RED: C.MUTED_RED,
    C.ORANGE: C.MUTED_ORANGE,
    C.YELLOW: C.MUTED_YELLOW,
    C.GREEN: C.MUTED_GREEN,
    C.CYAN: C.MUTED_CYAN,
    C.BLUE: C.MUTED_BLUE,
    C.PURPLE: C.MUTED_PURPLE,
}

ModeLike = Union[ClassifyMode, str]


def classify(rgb: Sequence[int], mode: ModeLike = ClassifyMode.COLOR) -> Classification:
    """
    Classify an RGB sample.

    Args:
        rgb: (r, g, b), each an integer in [0, 255]
        mode: COLOR for the full spectrum, GRAY for gray bands only.
              Anything else is treated as COLOR.

    Returns:
        Classification with the simplified category, the detailed one and
        a confidence in [0, 1).

    Raises:
        InvalidSample: wrong arity or a channel out of range
    """
    r, g, b = validate_rgb(rgb)
    mode = _coerce_mode(mode)

    hsv = rgb_to_hsv(r, g, b)
    hsl = rgb_to_hsl(r, g, b)
    lab = rgb_to_lab(r, g, b)
    lch = lab_to_lch(lab)
    luminance = relative_luminance(r, g, b)
    chromaticness = calculate_chromaticness(r, g, b)

    metrics = ColorMetrics(hsv=hsv, hsl=hsl, lab=lab, lch=lch,
                           luminance=luminance, chromaticness=chromaticness)
    is_dark = luminance < 0.15
    is_light = luminance > 0.85
    is_desaturated = hsv[1] < 0.15

    def result(category, detailed, confidence):
        return Classification(
            category=category,
            detailed=detailed,
            confidence=confidence,
            is_dark=is_dark,
            is_light=is_light,
            is_desaturated=is_desaturated,
            metrics=metrics,
        )

    # Stage 1: achromatic, short-circuits
    achromatic = classify_achromatic(r, g, b, hsv, luminance, chromaticness)
    if achromatic is not None:
        detailed, confidence = achromatic
        return result(simplify(detailed, mode), detailed, confidence)

    if mode is ClassifyMode.GRAY:
        gray = convert_to_gray(luminance)
        return result(gray, gray, 0.70)

    # Stage 2: hue sectors
    detailed = _classify_chromatic(r, g, b, hsv, luminance)
    confidence = calculate_confidence(r, g, b, hsv)

    # Stage 3: dark refinement
    if is_dark:
        detailed = _refine_dark(detailed, r, g, b, hsv, luminance)

    # Stage 4: desaturated refinement (achromatic samples never get here)
    if is_desaturated:
        detailed = _refine_desaturated(detailed, hsv, luminance)

    # Stage 5: simplify
    return result(simplify(detailed, mode), detailed, confidence)


def validate_rgb(rgb) -> Tuple[int, int, int]:
    try:
        values = tuple(rgb)
    except TypeError:
        raise InvalidSample(f"Expected an (r, g, b) sequence, got {rgb!r}") from None

    if len(values) != 3:
        raise InvalidSample(f"Expected 3 channels, got {len(values)}")
    for v in values:
        if isinstance(v, bool) or not isinstance(v, Integral) or not 0 <= v <= 255:
            raise InvalidSample(f"Channel values must be integers in [0, 255], got {values!r}")
    return int(values[0]), int(values[1]), int(values[2])


def _coerce_mode(mode: ModeLike) -> ClassifyMode:
    if isinstance(mode, ClassifyMode):
        return mode
    try:
        return ClassifyMode(str(mode).upper())
    except ValueError:
        return ClassifyMode.COLOR


def simplify(detailed: C, mode: ModeLike = ClassifyMode.COLOR) -> C:
    """
    Collapse a detailed category to a coarse one (COLOR) or a gray band (GRAY).
    """
    if _coerce_mode(mode) is ClassifyMode.GRAY:
        return _GRAY_MAP.get(detailed, C.MEDIUM_GRAY)
    return _COLOR_MAP.get(detailed, C.GRAY)


def convert_to_gray(luminance: float) -> C:
    if luminance < 0.02:
        return C.BLACK
    if luminance < 0.20:
        return C.DARK_GRAY
    if luminance < 0.50:
        return C.MEDIUM_GRAY
    if luminance < 0.80:
        return C.LIGHT_GRAY
    if luminance > 0.95:
        return C.WHITE
    return C.LIGHT_GRAY


def classify_achromatic(r, g, b, hsv, luminance, chromaticness) -> Optional[Tuple[C, float]]:
    """
    Returns (category, confidence) for black/gray/white samples, else None.
    """
    spread = max(r, g, b) - min(r, g, b)
    deviations = (abs(r - g), abs(g - b), abs(b - r))
    avg_deviation = sum(deviations) / 3
    max_deviation = max(deviations)

    # threshold adapts to brightness
    brightness = (r + g + b) / 3
    if brightness < 50:
        threshold = 8
    elif brightness > 200:
        threshold = 12
    else:
        threshold = 10

    sat = hsv[1]
    is_achromatic = (
        (sat < 0.08 and chromaticness < 0.12)
        or (avg_deviation < threshold and max_deviation < threshold * 1.5)
        or (spread < 15 and sat < 0.15)
    )
    if not is_achromatic:
        return None

    if luminance < 0.02 or brightness < 15:
        return C.BLACK, 0.98
    if luminance > 0.95 or brightness > 245:
        return C.WHITE, 0.98
    if luminance < 0.15:
        return C.VERY_DARK_GRAY, 0.90
    if luminance < 0.30:
        return C.DARK_GRAY, 0.92
    if luminance < 0.50:
        return C.MEDIUM_DARK_GRAY, 0.90
    if luminance < 0.65:
        return C.MEDIUM_GRAY, 0.90
    if luminance < 0.80:
        return C.LIGHT_GRAY, 0.92
    return C.VERY_LIGHT_GRAY, 0.90


def _classify_chromatic(r, g, b, hsv, luminance) -> C:
    hue = hsv[0]
    ratios = color_ratios(r, g, b)
    dominance = color_dominance(r, g, b)

    if hue < 15:
        sector = _red_region
    elif hue < 40:
        sector = _orange_region
    elif hue < 70:
        sector = _yellow_region
    elif hue < 150:
        sector = _green_region
    elif hue < 200:
        sector = _cyan_region
    elif hue < 260:
        sector = _blue_region
    elif hue < 310:
        sector = _purple_region
    elif hue < 330:
        sector = _magenta_region
    else:
        sector = _pink_red_region
    return sector(r, g, b, hsv, ratios, dominance, luminance)


def _red_region(r, g, b, hsv, ratios, dominance, luminance):
    # hue 0-15
    _, s, _ = hsv
    if luminance < 0.05 and s < 0.6:
        return C.BLACK
    if luminance < 0.18 and s > 0.5:
        return C.DARK_RED
    if ratios.rg > 1.8 and ratios.rb > 1.5 and g < 80 and r > 200:
        return C.PURE_RED
    if b > g * 1.3 and dominance.max_component == "r":
        return C.PINK_RED
    return C.RED


def _orange_region(r, g, b, hsv, ratios, dominance, luminance):
    # hue 15-40
    h, s, _ = hsv
    if luminance < 0.10:
        if ratios.rg < 1.4 and g > 30:
            return C.BROWN
        return C.DARK_RED
    if luminance < 0.25 and s > 0.5 and g > 50:
        if 1.2 < ratios.rg < 1.6:
            return C.BROWN
        return C.DARK_ORANGE
    if 1.3 < ratios.rg < 1.8 and g > 60:
        if h < 25:
            return C.RED_ORANGE
        return C.ORANGE
    if b < 50 and g > 100 and r > 180:
        return C.BRIGHT_ORANGE
    return C.ORANGE


def _yellow_region(r, g, b, hsv, ratios, dominance, luminance):
    # hue 40-70
    h, s, _ = hsv
    if luminance < 0.20:
        if s > 0.7 and h < 50:
            return C.DARK_ORANGE
        if b < r * 0.25 and b < g * 0.25 and s > 0.6 and r > g * 1.15:
            return C.BROWN
        return C.OLIVE
    if luminance < 0.40 and s > 0.5:
        return C.DARK_YELLOW
    if 0.85 < ratios.rg < 1.15 and b < min(r, g) * 0.5:
        if h < 55:
            return C.YELLOW_ORANGE
        return C.YELLOW
    if b > g * 0.5:
        return C.YELLOW_GREEN
    return C.YELLOW


def _green_region(r, g, b, hsv, ratios, dominance, luminance):
    # hue 70-150
    h, s, _ = hsv
    if luminance < 0.05:
        return C.BLACK
    if luminance < 0.18 and s > 0.4:
        return C.DARK_GREEN
    if h < 90 and r > g * 0.7:
        if luminance < 0.30:
            return C.OLIVE
        return C.YELLOW_GREEN
    if h > 140 and b > g * 0.7:
        return C.CYAN_GREEN
    if dominance.max_component == "g" and ratios.gr > 1.5 and ratios.gb > 1.5:
        return C.PURE_GREEN
    return C.GREEN


def _cyan_region(r, g, b, hsv, ratios, dominance, luminance):
    # hue 150-200
    h, s, _ = hsv
    if luminance < 0.15:
        return C.DARK_BLUE
    if luminance < 0.30 and s > 0.5:
        return C.DARK_CYAN
    if h < 175 and g > b * 0.9:
        return C.CYAN_GREEN
    if h > 185 and b > g * 0.9:
        return C.TEAL
    return C.CYAN


def _blue_region(r, g, b, hsv, ratios, dominance, luminance):
    # hue 200-260
    h, s, _ = hsv
    if luminance < 0.05:
        return C.BLACK
    if luminance < 0.15 and s > 0.5:
        return C.NAVY
    if h < 220 and g > b * 0.7:
        return C.CYAN_BLUE
    if h > 245 and r > b * 0.5:
        return C.BLUE_PURPLE
    if dominance.max_component == "b" and ratios.br > 1.8 and ratios.bg > 1.5 and b > 200:
        return C.PURE_BLUE
    return C.BLUE


def _purple_region(r, g, b, hsv, ratios, dominance, luminance):
    # hue 260-310
    h, s, _ = hsv
    if luminance < 0.05:
        return C.BLACK
    if luminance < 0.18 and s > 0.5:
        return C.DARK_PURPLE
    if h < 280 and b > r * 0.9:
        return C.VIOLET
    if h > 295 and r > b * 0.9:
        return C.RED_PURPLE
    return C.PURPLE


def _magenta_region(r, g, b, hsv, ratios, dominance, luminance):
    # hue 310-330
    _, s, _ = hsv
    if luminance < 0.15 and s > 0.5:
        return C.DARK_MAGENTA
    if luminance > 0.70 and s < 0.6:
        return C.PINK
    return C.MAGENTA


def _pink_red_region(r, g, b, hsv, ratios, dominance, luminance):
    # hue 330-360
    _, s, _ = hsv
    if luminance > 0.65 and s < 0.5:
        return C.LIGHT_PINK
    if luminance > 0.50 and s < 0.7:
        return C.PINK
    if b > g * 1.2 and s > 0.5:
        return C.HOT_PINK
    if luminance < 0.30:
        return C.DARK_RED
    return C.RED


def _refine_dark(detailed, r, g, b, hsv, luminance):
    s = hsv[1]
    if luminance < 0.03 or max(r, g, b) < 15:
        return C.BLACK
    if s < 0.25 and luminance < 0.15:
        return C.VERY_DARK_GRAY
    if detailed in (C.YELLOW, C.DARK_YELLOW) and luminance < 0.20:
        return C.BROWN if s > 0.6 else C.OLIVE
    if detailed is C.ORANGE and luminance < 0.15:
        return C.BROWN
    return detailed


def _refine_desaturated(detailed, hsv, luminance):
    s = hsv[1]
    if s < 0.10:
        if luminance < 0.20:
            return C.DARK_GRAY
        if luminance < 0.45:
            return C.MEDIUM_GRAY
        if luminance < 0.75:
            return C.LIGHT_GRAY
        return C.VERY_LIGHT_GRAY
    if s < 0.15:
        # no muted form for black/gray/white
        return _MUTED.get(simplify(detailed), C.MEDIUM_GRAY)
    return detailed


def color_dominance(r: int, g: int, b: int) -> _Dominance:
    hi = max(r, g, b)
    lo = min(r, g, b)
    max_component = "r" if r == hi else ("g" if g == hi else "b")
    min_component = "r" if r == lo else ("g" if g == lo else "b")
    return _Dominance(
        max_component=max_component,
        min_component=min_component,
        max=hi,
        min=lo,
        mid=r + g + b - hi - lo,
        range=hi - lo,
        dominance_ratio=hi / (lo + 1),
    )


def color_ratios(r: int, g: int, b: int) -> _Ratios:
    return _Ratios(
        rg=r / (g + 1),
        rb=r / (b + 1),
        gr=g / (r + 1),
        gb=g / (b + 1),
        br=b / (r + 1),
        bg=b / (g + 1),
    )


def calculate_confidence(r: int, g: int, b: int, hsv) -> float:
    h, s, _ = hsv
    confidence = 0.5 + s * 0.3
    if max(r, g, b) / (min(r, g, b) + 1) > 2.0:
        confidence += 0.15
    hue_mod = h % 60
    if 15 < hue_mod < 45:
        confidence += 0.1
    return min(0.99, confidence)


def calculate_chromaticness(r: int, g: int, b: int) -> float:
    hi = max(r, g, b)
    if hi == 0:
        return 0.0
    return (hi - min(r, g, b)) / hi


def _hue(r: float, g: float, b: float, hi: float, delta: float) -> float:
    if delta == 0:
        return 0.0
    if hi == r:
        h = ((g - b) / delta + (6 if g < b else 0)) / 6
    elif hi == g:
        h = ((b - r) / delta + 2) / 6
    else:
        h = ((r - g) / delta + 4) / 6
    return h * 360


def rgb_to_hsv(r: int, g: int, b: int) -> Tuple[float, float, float]:
    """
    (h in degrees, s in [0, 1], v in [0, 1])
    """
    r, g, b = r / 255, g / 255, b / 255
    hi = max(r, g, b)
    delta = hi - min(r, g, b)
    s = 0.0 if hi == 0 else delta / hi
    return _hue(r, g, b, hi, delta), s, hi


def rgb_to_hsl(r: int, g: int, b: int) -> Tuple[float, float, float]:
    r, g, b = r / 255, g / 255, b / 255
    hi = max(r, g, b)
    lo = min(r, g, b)
    lightness = (hi + lo) / 2
    delta = hi - lo

    s = 0.0
    if delta != 0:
        s = delta / (2 - hi - lo) if lightness > 0.5 else delta / (hi + lo)
    return _hue(r, g, b, hi, delta), s, lightness


def _srgb_to_linear(c: float) -> float:
    return ((c + 0.055) / 1.055) ** 2.4 if c > 0.04045 else c / 12.92


def _lab_f(t: float) -> float:
    return t ** (1 / 3) if t > 0.008856 else (7.787 * t) + 16 / 116


def rgb_to_lab(r: int, g: int, b: int) -> Tuple[float, float, float]:
    """
    CIE Lab (D65) through linear sRGB and XYZ.
    """
    r = _srgb_to_linear(r / 255)
    g = _srgb_to_linear(g / 255)
    b = _srgb_to_linear(b / 255)

    x = _lab_f((r * 0.4124 + g * 0.3576 + b * 0.1805) / 0.95047)
    y = _lab_f((r * 0.2126 + g * 0.7152 + b * 0.0722) / 1.00000)
    z = _lab_f((r * 0.0193 + g * 0.1192 + b * 0.9505) / 1.08883)

    return 116 * y - 16, 500 * (x - y), 200 * (y - z)


def lab_to_lch(lab) -> Tuple[float, float, float]:
    lightness, a, b = lab
    chroma = math.sqrt(a * a + b * b)
    hue = math.degrees(math.atan2(b, a))
    if hue < 0:
        hue += 360
    return lightness, chroma, hue


def relative_luminance(r: int, g: int, b: int) -> float:
    """
    WCAG 2.x relative luminance in [0, 1].
    """
    def linear(c):
        c = c / 255
        return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4

    return 0.2126 * linear(r) + 0.7152 * linear(g) + 0.0722 * linear(b)
