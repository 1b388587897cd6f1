import unittest

import numpy as np

from colortrack.data_types import ColorSample, TapPosition
from colortrack.errors import EmptySample
from colortrack.sampler import BLACK, average_disk_color, sample_tap
from tests.utils import ORANGE_RGB, fill_rect, make_frame


class TestSampler(unittest.TestCase):
    def test_uniform_region_gives_exact_color(self):
        frame = make_frame(200, 100, ORANGE_RGB)
        self.assertEqual(average_disk_color(frame, 50, 50, 10), ColorSample(*ORANGE_RGB))

    def test_disk_clipped_at_corner(self):
        frame = make_frame(200, 100, (10, 20, 30))
        self.assertEqual(average_disk_color(frame, 0, 0, 10), ColorSample(10, 20, 30))

    def test_only_disk_pixels_count(self):
        # the square's corners are outside a radius-2 disk
        frame = make_frame(20, 20, (0, 0, 0))
        fill_rect(frame, 8, 8, 5, 5, (200, 100, 50))
        frame[8, 8] = frame[8, 12] = frame[12, 8] = frame[12, 12] = (0, 0, 0)
        self.assertEqual(average_disk_color(frame, 10, 10, 2), ColorSample(200, 100, 50))

    def test_mean_is_rounded(self):
        frame = make_frame(2, 1, (0, 0, 0))
        frame[0, 1] = (255, 3, 1)
        self.assertEqual(average_disk_color(frame, 0, 0, 1), ColorSample(128, 2, 0))

    def test_outside_frame_raises(self):
        frame = make_frame(50, 50)
        with self.assertRaises(EmptySample):
            average_disk_color(frame, -100, -100, 10)

    def test_tap_outside_frame_falls_back_to_black(self):
        frame = make_frame(50, 50, ORANGE_RGB)
        self.assertEqual(sample_tap(frame, TapPosition(500, 10), 10), BLACK)

    def test_accepts_numpy_ints(self):
        frame = make_frame(50, 50, ORANGE_RGB)
        tap = TapPosition(np.int64(25), np.int64(25))
        self.assertEqual(sample_tap(frame, tap, 3), ColorSample(*ORANGE_RGB))


if __name__ == "__main__":
    unittest.main()
