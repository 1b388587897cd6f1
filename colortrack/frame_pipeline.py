from abc import ABC, abstractmethod
import time
from typing import Dict, List, Optional, Sequence, Tuple, Union

import cv2
import numpy as np

from colortrack.color_space import CONVERSION_CODES
from colortrack.config import DetectionConfig
from colortrack.data_types import (
    BoundingBox,
    ColorSpaceId,
    DetectionResult,
    ThresholdRange,
    ThresholdSet,
)
from colortrack.errors import FrameDecodeFailure
from colortrack.logger import get_logger
from colortrack.sampler import sample_tap
from colortrack.tracking_state import TrackingState

logger = get_logger(__name__)

FrameBuffer = Union[bytes, bytearray, memoryview, np.ndarray]

# packed 3-byte layouts a frame can arrive in, and how to get RGB out of them
_LAYOUT_CODES = {
    "rgb": None,
    "bgr": cv2.COLOR_BGR2RGB,
    "yuv": cv2.COLOR_YUV2RGB,
}


class BaseFrameProcessor(ABC):
    """
    Abstract interface for all per-frame processors.
    """

    @abstractmethod
    def process_frame(self, buffer: FrameBuffer, width: int, height: int,
                      layout: str = "rgb") -> DetectionResult:
        """
        Run detection on a single frame.
        Must return a DetectionResult and must not raise.
        """
        raise NotImplementedError

    def release(self) -> None:
        """
        Drop any cached buffers. Called when processing stops.
        """


class ColorFrameProcessor(BaseFrameProcessor):
    """
    Color-threshold region detector.

    Per frame:
      - downsample by config.downsample_factor
      - convert to the tracking state's color space
      - OR together one inRange mask per threshold range
      - external contours, filtered to [min_size, max_size] area
      - bounding boxes ascending by area, at most max_object_count,
        scaled back to full resolution
      - a pending tap is sampled from the full-resolution frame and becomes
        the new target color; it stays pending until that write is accepted
    """

    def __init__(self, state: TrackingState, config: Optional[DetectionConfig] = None):
        self.state = state
        self.config = config or DetectionConfig()
        if self.config.downsample_factor < 1:
            raise ValueError("downsample_factor must be >= 1")

        self._frame_id = 0
        # thresholds -> [(lower, upper)] as uint8 arrays, rebuilt on change
        self._bounds_cache: Dict[ThresholdSet, List[Tuple[np.ndarray, np.ndarray]]] = {}

    @property
    def fallback(self) -> ThresholdRange:
        return ThresholdRange(lower=tuple(self.config.fallback_lower),
                              upper=tuple(self.config.fallback_upper))

    def process_frame(self, buffer: FrameBuffer, width: int, height: int,
                      layout: str = "rgb") -> DetectionResult:
        start_time = time.perf_counter()
        self._frame_id += 1
        frame_id = self._frame_id

        space = ColorSpaceId.from_value(self.state.color_space) or ColorSpaceId.HSV

        try:
            frame = decode_frame(buffer, width, height, layout)
            boxes = self._detect(frame, space)
            self._consume_tap(frame)
        except FrameDecodeFailure as e:
            logger.warning("Skipping frame %d: %s", frame_id, e)
            return DetectionResult.empty(frame_id, space)
        except cv2.error as e:
            logger.warning("Skipping frame %d, backend error: %s", frame_id, e)
            return DetectionResult.empty(frame_id, space)
        except Exception:
            # a bad frame must never stop the stream
            logger.exception("Skipping frame %d", frame_id)
            return DetectionResult.empty(frame_id, space)

        processing_time = (time.perf_counter() - start_time) * 1000
        if processing_time > self.config.frame_budget_ms:
            logger.debug("Frame %d took %.1f ms (budget %.1f ms)",
                         frame_id, processing_time, self.config.frame_budget_ms)

        return DetectionResult(
            frame_id=frame_id,
            boxes=boxes,
            color_space=space,
            processing_time_ms=processing_time,
        )

    def release(self) -> None:
        self._bounds_cache.clear()

    def _detect(self, frame: np.ndarray, space: ColorSpaceId) -> List[BoundingBox]:
        factor = self.config.downsample_factor
        small = downsample(frame, factor)
        converted = convert_color(small, space)
        mask = build_mask(converted, self._bounds_for(self.state.thresholds))

        boxes = find_regions(
            mask,
            min_size=self.config.min_size,
            max_size=self.config.max_size,
            max_count=self.config.max_object_count,
        )
        return [scale_box(box, factor) for box in boxes]

    def _bounds_for(self, thresholds: ThresholdSet) -> List[Tuple[np.ndarray, np.ndarray]]:
        key = thresholds or (self.fallback,)
        cached = self._bounds_cache.get(key)
        if cached is None:
            # only the current set is worth keeping
            self._bounds_cache.clear()
            cached = [
                (np.array(t.lower, dtype=np.uint8), np.array(t.upper, dtype=np.uint8))
                for t in key
            ]
            self._bounds_cache[key] = cached
        return cached

    def _consume_tap(self, frame: np.ndarray) -> None:
        tap = self.state.pending_tap
        if tap is None:
            return
        sample = sample_tap(frame, tap, self.config.sample_radius)
        if self.state.set_target_color(sample) or self.state.target_color == sample:
            self.state.clear_pending_tap(tap)
            logger.info("Sampled %s at (%d, %d)", sample.as_tuple(), tap.x, tap.y)
        else:
            # target write throttled, retry on the next frame
            logger.debug("Tap (%d, %d) kept pending", tap.x, tap.y)


def decode_frame(buffer: Optional[FrameBuffer], width: int, height: int,
                 layout: str = "rgb") -> np.ndarray:
    """
    Turn a packed interleaved 3-byte-per-pixel buffer into an H x W x 3
    RGB uint8 image.

    Raises:
        FrameDecodeFailure: missing buffer, bad dimensions, size mismatch,
                            unsupported layout
    """
    if buffer is None:
        raise FrameDecodeFailure("No frame buffer")
    try:
        width, height = int(width), int(height)
    except (TypeError, ValueError):
        raise FrameDecodeFailure(f"Bad frame size {width!r}x{height!r}") from None
    if width <= 0 or height <= 0:
        raise FrameDecodeFailure(f"Bad frame size {width}x{height}")

    code_key = str(layout).lower()
    if code_key not in _LAYOUT_CODES:
        raise FrameDecodeFailure(f"Unsupported pixel layout: {layout!r}")

    if isinstance(buffer, np.ndarray):
        if buffer.dtype != np.uint8:
            raise FrameDecodeFailure(f"Expected uint8 pixels, got {buffer.dtype}")
        data = buffer
    else:
        try:
            data = np.frombuffer(buffer, dtype=np.uint8)
        except (TypeError, ValueError) as e:
            raise FrameDecodeFailure(f"Unreadable frame buffer: {e}") from None

    expected = width * height * 3
    if data.size != expected:
        raise FrameDecodeFailure(f"Buffer has {data.size} bytes, expected {expected} for {width}x{height}")

    frame = data.reshape((height, width, 3))
    code = _LAYOUT_CODES[code_key]
    if code is not None:
        frame = cv2.cvtColor(frame, code)
    return frame


def downsample(frame: np.ndarray, factor: int) -> np.ndarray:
    if factor == 1:
        return frame
    h, w = frame.shape[:2]
    small_w, small_h = w // factor, h // factor
    if small_w == 0 or small_h == 0:
        raise FrameDecodeFailure(f"Frame {w}x{h} is smaller than the downsample factor {factor}")
    # nearest keeps region edges crisp so they stay inside the threshold ranges
    return cv2.resize(frame, (small_w, small_h), interpolation=cv2.INTER_NEAREST)


def convert_color(frame_rgb: np.ndarray, space: ColorSpaceId) -> np.ndarray:
    """
    RGB image -> the given space in OpenCV's 8-bit encoding.
    GRAY comes back single channel.
    """
    return cv2.cvtColor(frame_rgb, CONVERSION_CODES[space])


def build_mask(converted: np.ndarray,
               ranges: Sequence[Union[ThresholdRange, Tuple[np.ndarray, np.ndarray]]]) -> np.ndarray:
    """
    Union (logical OR) of the inRange masks of every range.
    For a single channel image only the first bound component is used.
    """
    single_channel = converted.ndim == 2
    mask = np.zeros(converted.shape[:2], dtype=np.uint8)

    for item in ranges:
        if isinstance(item, ThresholdRange):
            lower = np.array(item.lower, dtype=np.uint8)
            upper = np.array(item.upper, dtype=np.uint8)
        else:
            lower, upper = item
        if single_channel:
            lower, upper = lower[:1], upper[:1]
        mask = cv2.bitwise_or(mask, cv2.inRange(converted, lower, upper))

    return mask


def find_regions(mask: np.ndarray, min_size: float, max_size: Optional[float],
                 max_count: int) -> List[BoundingBox]:
    """
    Bounding boxes of the mask's external contours whose area lies in
    [min_size, max_size], ascending by area, at most max_count of them.
    Coordinates are in mask pixels.
    """
    if mask.ndim == 3:
        mask = mask[:, :, 0]

    contours, _ = cv2.findContours(mask, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)

    boxes: List[BoundingBox] = []
    for cnt in contours:
        area = float(cv2.contourArea(cnt))
        if area < min_size:
            continue
        if max_size is not None and area > max_size:
            continue
        x, y, w, h = cv2.boundingRect(cnt)
        boxes.append(BoundingBox(x=x, y=y, width=w, height=h, area=area))

    boxes.sort(key=lambda b: b.area)
    return boxes[:max(0, max_count)]


def scale_box(box: BoundingBox, factor: int) -> BoundingBox:
    return BoundingBox(
        x=box.x * factor,
        y=box.y * factor,
        width=box.width * factor,
        height=box.height * factor,
        area=box.area * factor * factor,
    )
