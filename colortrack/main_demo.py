# End-to-end color tracking demo script

import argparse
import cv2

from colortrack.config import PipelineConfig, load_config
from colortrack.data_types import ColorSpaceId
from colortrack.logger import get_logger, setup_logging
from colortrack.overlay import draw_detections
from colortrack.session import DetectionSession

logger = get_logger(__name__)

# number keys 1-6 select a color space
SPACE_KEYS = {ord(str(i + 1)): space for i, space in enumerate(ColorSpaceId)}


def run_demo(config: PipelineConfig, video_source=None) -> None:
    """
    End-to-end demo:
      frame -> session (state + frame processor) -> overlay -> display
    Left click samples the color under the cursor.
    """

    if video_source is None:
        video_source = config.video.source

    cap = cv2.VideoCapture(video_source)
    if not cap.isOpened():
        raise RuntimeError(f"Could not open video source: {video_source}")

    window = "Color Tracking"
    cv2.namedWindow(window)

    session = DetectionSession(config)
    session.state.add_listener(
        lambda snap: logger.info("Thresholds now %s in %s",
                                 [(t.lower, t.upper) for t in snap.thresholds],
                                 snap.color_space.value)
    )

    def on_mouse(event, x, y, flags, param):
        if event == cv2.EVENT_LBUTTONDOWN:
            session.controller.request_tap(x, y)

    cv2.setMouseCallback(window, on_mouse)
    session.activate()

    try:
        while True:
            ret, frame = cap.read()
            if not ret:
                break

            # Resize to configured resolution
            frame = cv2.resize(
                frame,
                (config.video.frame_width, config.video.frame_height),
            )
            h, w = frame.shape[:2]

            # Camera frames are BGR; the processor converts from the layout tag
            result = session.on_frame(frame, w, h, layout="bgr")

            draw_detections(frame, result, session.state.snapshot())

            cv2.imshow(window, frame)
            key = cv2.waitKey(1) & 0xFF
            if key == 27 or key == ord("q"):  # ESC or q
                break
            if key in SPACE_KEYS:
                session.controller.request_color_space(SPACE_KEYS[key])
    finally:
        session.deactivate()
        cap.release()
        cv2.destroyAllWindows()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Real-time color region tracking demo")
    parser.add_argument(
        "--video",
        type=str,
        default=None,
        help="Video file path or camera index (e.g. 0 for default webcam)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Optional YAML file overriding the default configuration",
    )
    args = parser.parse_args()

    cfg = load_config(args.config) if args.config else PipelineConfig()
    setup_logging(cfg.logging)

    if args.video is None:
        video_source = cfg.video.source
    else:
        # If argument is a digit, treat it as camera index; else as path
        if args.video.isdigit():
            video_source = int(args.video)
        else:
            video_source = args.video

    run_demo(cfg, video_source=video_source)
