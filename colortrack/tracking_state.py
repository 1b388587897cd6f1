# Shared tracking state between the frame-processing and control contexts

import threading
import time
from typing import Callable, List, Optional, Sequence, Union

from colortrack.color_classifier import classify, validate_rgb
from colortrack.color_space import bounds, closest_category
from colortrack.config import TrackingConfig
from colortrack.data_types import (
    ClassifyMode,
    ColorSample,
    ColorSpaceId,
    TapPosition,
    ThresholdSet,
    TrackingSnapshot,
)
from colortrack.errors import ColorTrackError, InvalidSample, UnsupportedColorSpace
from colortrack.logger import get_logger

logger = get_logger(__name__)

Clock = Callable[[], float]
Listener = Callable[[TrackingSnapshot], None]


class ThrottledValue:
    """
    A single shared register with compare-and-suppress-on-equal writes.
    At most one offer is accepted per interval; an offer equal to the current
    value is dropped without using up the interval. Readers always see a
    complete committed value.
    """

    def __init__(self, name: str, value=None, interval_s: float = 0.05,
                 clock: Clock = time.monotonic):
        self.name = name
        self.interval_s = interval_s
        self._clock = clock
        self._value = value
        self._last_accepted: Optional[float] = None
        self._lock = threading.Lock()

    @property
    def value(self):
        with self._lock:
            return self._value

    def offer(self, value) -> bool:
        """
        Throttled write. Returns True if the value was applied.
        """
        with self._lock:
            if value == self._value:
                return False
            now = self._clock()
            if self._last_accepted is not None and now - self._last_accepted < self.interval_s:
                return False
            self._last_accepted = now
            self._value = value
            return True

    def force(self, value) -> None:
        """
        Unthrottled write, for resets and for consumers clearing a request.
        """
        with self._lock:
            self._value = value

    def replace(self, expected, value) -> bool:
        """
        Unthrottled compare-and-set. Returns False if the current value is
        no longer `expected`.
        """
        with self._lock:
            if self._value != expected:
                return False
            self._value = value
            return True

    def rearm(self) -> None:
        """
        Forget the last accepted write so the next offer is not throttled.
        """
        with self._lock:
            self._last_accepted = None


def derive_thresholds(color_space: ColorSpaceId, target: ColorSample,
                      derivation: str = "classifier") -> ThresholdSet:
    """
    Threshold ranges for a target color in a color space.

    "classifier" names the color with the multi-space classifier (gray bands
    when the space itself is GRAY); "closest" uses the dominant-channel
    heuristic of the table.
    """
    if derivation == "closest":
        category = closest_category(target, color_space)
    else:
        mode = ClassifyMode.GRAY if color_space is ColorSpaceId.GRAY else ClassifyMode.COLOR
        category = classify(target, mode).category

    if category is None:
        return ()
    return bounds(color_space, category)


class TrackingState:
    """
    TrackingState
        color_space   which encoding thresholds are in
        target_color  the color being tracked
        thresholds    derived from the two above, never written directly
        pending_tap   a sample request waiting for the next frame
    """

    def __init__(self, config: Optional[TrackingConfig] = None, clock: Clock = time.monotonic):
        self.config = config or TrackingConfig()
        interval_s = self.config.throttle_ms / 1000.0

        default_space = ColorSpaceId.from_value(self.config.default_color_space)
        if default_space is None:
            raise UnsupportedColorSpace(f"Invalid default color space: {self.config.default_color_space!r}")
        self._default_space = default_space
        self._default_color = ColorSample(*self.config.default_target_color)

        self._color_space = ThrottledValue("color_space", default_space, interval_s, clock)
        self._target_color = ThrottledValue("target_color", self._default_color, interval_s, clock)
        self._pending_tap = ThrottledValue("pending_tap", None, interval_s, clock)
        self._thresholds = ThrottledValue("thresholds", (), interval_s, clock)

        self._derived_from = None
        self._derive_lock = threading.Lock()
        self._listeners: List[Listener] = []

        self.reset_to_defaults()

    # accessors
    @property
    def color_space(self) -> ColorSpaceId:
        return self._color_space.value

    @property
    def target_color(self) -> ColorSample:
        return self._target_color.value

    @property
    def thresholds(self) -> ThresholdSet:
        return self._thresholds.value

    @property
    def pending_tap(self) -> Optional[TapPosition]:
        return self._pending_tap.value

    def snapshot(self) -> TrackingSnapshot:
        return TrackingSnapshot(
            color_space=self.color_space,
            target_color=self.target_color,
            thresholds=self.thresholds,
            pending_tap=self.pending_tap,
        )

    def add_listener(self, listener: Listener) -> None:
        """
        Called with a snapshot every time the thresholds are replaced.
        """
        self._listeners.append(listener)

    # writers
    def set_color_space(self, value: Union[ColorSpaceId, str]) -> bool:
        space = ColorSpaceId.from_value(value)
        if space is None:
            logger.warning("Ignoring unsupported color space: %r", value)
            return False
        if not self._color_space.offer(space):
            return False
        logger.info("Set color space: %s", space.value)
        self.reconcile()
        return True

    def set_target_color(self, value: Union[ColorSample, Sequence[int]]) -> bool:
        try:
            sample = ColorSample(*validate_rgb(value))
        except InvalidSample as e:
            logger.warning("Ignoring target color: %s", e)
            return False
        if not self._target_color.offer(sample):
            return False
        logger.info("Set target color: %s", sample.as_tuple())
        self.reconcile()
        return True

    def set_pending_tap(self, value: Optional[TapPosition]) -> bool:
        if not self._pending_tap.offer(value):
            return False
        logger.debug("Set tap position: %s", value)
        return True

    def clear_pending_tap(self, tap: TapPosition) -> bool:
        """
        Clear the pending tap once it has been applied. A newer tap that
        arrived in the meantime stays pending.
        """
        return self._pending_tap.replace(tap, None)

    def reconcile(self) -> bool:
        """
        Re-derive thresholds if color space or target color moved since the
        last derivation. On failure the previous thresholds stay in place.
        Returns True if the thresholds were replaced.
        """
        with self._derive_lock:
            space = self.color_space
            target = self.target_color
            key = (space, target, self.config.derivation)
            if key == self._derived_from:
                return False
            try:
                derived = derive_thresholds(space, target, self.config.derivation)
            except ColorTrackError as e:
                logger.warning("Threshold derivation failed for %s in %s: %s",
                               target.as_tuple(), space.value, e)
                return False

            self._thresholds.force(derived)
            self._derived_from = key

        logger.info("Set color filter: %s %s", space.value,
                    [(t.lower, t.upper) for t in derived])
        self._notify()
        return True

    def reset_to_defaults(self) -> None:
        for reg in (self._pending_tap, self._color_space, self._target_color, self._thresholds):
            reg.rearm()
        self._pending_tap.force(None)
        self._color_space.force(self._default_space)
        self._target_color.force(self._default_color)
        self.reconcile()
        logger.info("Reset tracking state: %s %s", self._default_space.value,
                    self._default_color.as_tuple())

    def teardown(self) -> None:
        """
        Drop ephemeral state. Color space and target color persist until the
        next reset_to_defaults().
        """
        self._pending_tap.force(None)

    def _notify(self) -> None:
        snap = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snap)
            except Exception:
                logger.exception("Tracking state listener failed")
