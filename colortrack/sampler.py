import numpy as np

from colortrack.data_types import ColorSample, TapPosition
from colortrack.errors import EmptySample
from colortrack.logger import get_logger

logger = get_logger(__name__)

BLACK = ColorSample(0, 0, 0)


def average_disk_color(frame_rgb: np.ndarray, x: int, y: int, radius: int) -> ColorSample:
    """
    Mean RGB over the pixels within `radius` of (x, y).
    Pixels outside the frame do not contribute.

    frame_rgb: H x W x 3 uint8, RGB order, full resolution

    Raises:
        EmptySample: no pixel of the disk lies inside the frame
    """
    h, w = frame_rgb.shape[:2]
    radius = max(0, int(radius))

    x0, x1 = max(0, x - radius), min(w, x + radius + 1)
    y0, y1 = max(0, y - radius), min(h, y + radius + 1)
    if x0 >= x1 or y0 >= y1:
        raise EmptySample(f"Tap ({x}, {y}) r={radius} is outside a {w}x{h} frame")

    ys, xs = np.ogrid[y0:y1, x0:x1]
    disk = (xs - x) ** 2 + (ys - y) ** 2 <= radius * radius
    pixels = frame_rgb[y0:y1, x0:x1][disk]
    if pixels.size == 0:
        raise EmptySample(f"Tap ({x}, {y}) r={radius} has no in-bounds pixels")

    mean = pixels.reshape(-1, 3).mean(axis=0)
    r, g, b = (int(round(float(c))) for c in mean)
    return ColorSample(r, g, b)


def sample_tap(frame_rgb: np.ndarray, tap: TapPosition, radius: int) -> ColorSample:
    """
    Target color for a tap. Falls back to black when nothing can be sampled.
    """
    try:
        return average_disk_color(frame_rgb, int(tap.x), int(tap.y), radius)
    except EmptySample as e:
        logger.warning("%s, using black", e)
        return BLACK
