import unittest

from colortrack.data_types import BoundingBox, DetectionResult
from colortrack.overlay import draw_detections
from colortrack.tracking_state import TrackingState
from tests.utils import FakeClock, make_frame


class TestOverlay(unittest.TestCase):
    def test_draws_boxes_and_swatch(self):
        frame = make_frame(320, 240)
        result = DetectionResult(frame_id=1, boxes=[BoundingBox(100, 100, 50, 40, area=2000.0)])
        snapshot = TrackingState(clock=FakeClock()).snapshot()

        draw_detections(frame, result, snapshot)

        self.assertEqual(frame[100, 120].tolist(), [0, 255, 0])
        # swatch is drawn in BGR order
        self.assertEqual(frame[25, 25].tolist(), [9, 138, 224])

    def test_without_snapshot_only_boxes(self):
        frame = make_frame(320, 240)
        draw_detections(frame, DetectionResult(frame_id=1), None)
        self.assertEqual(int(frame.sum()), 0)


if __name__ == "__main__":
    unittest.main()
