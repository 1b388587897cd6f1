# Control context: user requests and the poller that applies them to the tracking state

import threading
from typing import Callable, Optional, Sequence, Union

from colortrack.color_classifier import validate_rgb
from colortrack.config import TrackingConfig
from colortrack.data_types import ColorSample, ColorSpaceId, TapPosition
from colortrack.errors import InvalidSample
from colortrack.logger import get_logger
from colortrack.tracking_state import TrackingState

logger = get_logger(__name__)


class Poller:
    """
    Calls fn every interval_s seconds on a daemon thread until stopped.
    Errors from fn are logged and the loop keeps going.
    """

    def __init__(self, fn: Callable[[], None], interval_s: float, name: str = "poller"):
        self.fn = fn
        self.interval_s = max(0.05, float(interval_s))
        self.name = name
        self._stop = threading.Event()
        self._thr: Optional[threading.Thread] = None

    def start(self) -> None:
        if self.is_running():
            return
        self._stop.clear()
        self._thr = threading.Thread(target=self._loop, name=self.name, daemon=True)
        self._thr.start()

    def stop(self, timeout: Optional[float] = 1.0) -> None:
        self._stop.set()
        thr = self._thr
        if thr is not None and thr is not threading.current_thread():
            thr.join(timeout)
        self._thr = None

    def is_running(self) -> bool:
        return self._thr is not None and self._thr.is_alive()

    def _loop(self) -> None:
        while not self._stop.is_set():
            try:
                self.fn()
            except Exception:
                logger.exception("[%s] fn error", self.name)
            if self._stop.wait(self.interval_s):
                break


class DetectionController:
    """
    Holds what the user asked for and reconciles it into the shared state
    on every poll. Taps skip the poll and are written straight through.
    """

    def __init__(self, state: TrackingState, config: Optional[TrackingConfig] = None):
        self.state = state
        self.config = config or state.config
        self._requested_space: Optional[ColorSpaceId] = None
        self._requested_color: Optional[ColorSample] = None
        self._lock = threading.Lock()

    def request_color_space(self, value: Union[ColorSpaceId, str]) -> bool:
        """
        Returns False (and keeps the previous request) for an unsupported space.
        """
        space = ColorSpaceId.from_value(value)
        if space is None:
            logger.warning("Ignoring unsupported color space request: %r", value)
            return False
        with self._lock:
            self._requested_space = space
        return True

    def request_target_color(self, rgb: Sequence[int]) -> bool:
        try:
            sample = ColorSample(*validate_rgb(rgb))
        except InvalidSample as e:
            logger.warning("Ignoring target color request: %s", e)
            return False
        with self._lock:
            self._requested_color = sample
        return True

    def request_tap(self, x: int, y: int) -> bool:
        return self.state.set_pending_tap(TapPosition(int(x), int(y)))

    def poll(self) -> None:
        """
        One control tick: apply pending selections, then reconcile the
        derived thresholds.
        """
        with self._lock:
            space = self._requested_space
            color = self._requested_color

        if space is not None and space != self.state.color_space:
            self.state.set_color_space(space)
        if color is not None and color != self.state.target_color:
            if self.state.set_target_color(color):
                with self._lock:
                    if self._requested_color == color:
                        self._requested_color = None
        self.state.reconcile()

    def reset(self) -> None:
        with self._lock:
            self._requested_space = None
            self._requested_color = None

    def make_poller(self) -> Poller:
        return Poller(self.poll, self.config.poll_interval_ms / 1000.0, name="tracking-poller")
