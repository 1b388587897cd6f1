import threading
import time
from typing import Optional

from colortrack.config import PipelineConfig
from colortrack.control import DetectionController, Poller
from colortrack.data_types import DetectionResult
from colortrack.frame_pipeline import BaseFrameProcessor, ColorFrameProcessor, FrameBuffer
from colortrack.logger import get_logger
from colortrack.tracking_state import Clock, TrackingState

logger = get_logger(__name__)


class DetectionSession:
    """
    Lifecycle of the detection screen.

    activate()    focus gained: reset state, start the poller, accept frames
    deactivate()  focus lost: refuse frames, cancel the poller, clear the
                  pending tap, release cached buffers
    on_frame()    frame-context entry point; an inactive session returns an
                  empty result without touching the processor
    """

    def __init__(self, config: Optional[PipelineConfig] = None,
                 processor: Optional[BaseFrameProcessor] = None,
                 clock: Optional[Clock] = None):
        self.config = config or PipelineConfig()

        self.state = TrackingState(self.config.tracking, clock=clock or time.monotonic)
        self.processor = processor or ColorFrameProcessor(self.state, self.config.detection)
        self.controller = DetectionController(self.state, self.config.tracking)

        self._poller: Optional[Poller] = None
        self._active = threading.Event()

    @property
    def active(self) -> bool:
        return self._active.is_set()

    def activate(self) -> None:
        if self.active:
            return
        self.controller.reset()
        self.state.reset_to_defaults()
        self._poller = self.controller.make_poller()
        self._poller.start()
        self._active.set()
        logger.info("Detection session activated")

    def deactivate(self) -> None:
        if not self.active:
            return
        self._active.clear()
        if self._poller is not None:
            self._poller.stop()
            self._poller = None
        self.state.teardown()
        self.processor.release()
        logger.info("Detection session deactivated")

    def on_frame(self, buffer: FrameBuffer, width: int, height: int,
                 layout: str = "rgb") -> DetectionResult:
        if not self.active:
            return DetectionResult.empty(0, self.state.color_space)
        return self.processor.process_frame(buffer, width, height, layout)

    def __enter__(self) -> "DetectionSession":
        self.activate()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.deactivate()
