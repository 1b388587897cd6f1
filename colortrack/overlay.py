# Drawing detection boxes and the current tracking target on frames

import cv2

from colortrack.data_types import DetectionResult, TrackingSnapshot
from typing import Optional


def draw_detections(
    frame,
    result: DetectionResult,
    snapshot: Optional[TrackingSnapshot] = None,
):
    """
    Draw bounding boxes, the active color space and the target color swatch
    on the frame (in place).

    frame: numpy array (BGR)
    result: detections for this frame, original-frame coordinates
    snapshot: optional tracking state to show in the corner
    """

    # ----- Draw boxes -----
    for box in result.boxes:
        cv2.rectangle(
            frame,
            (box.x, box.y),
            (box.x + box.width, box.y + box.height),
            (0, 255, 0),
            2,
        )

    # ----- Draw status -----
    if snapshot is None:
        return

    r, g, b = snapshot.target_color
    cv2.rectangle(frame, (10, 10), (40, 40), (b, g, r), -1)
    cv2.rectangle(frame, (10, 10), (40, 40), (255, 255, 255), 1)

    txt = f"{snapshot.color_space.value}  objects: {len(result.boxes)}  {result.processing_time_ms:.1f} ms"
    cv2.putText(
        frame,
        txt,
        (50, 32),
        cv2.FONT_HERSHEY_SIMPLEX,
        0.6,
        (0, 255, 255),
        2,
        cv2.LINE_AA,
    )
