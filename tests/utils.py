import cv2
import numpy as np

ORANGE_RGB = (224, 138, 9)
BLUE_RGB = (0, 0, 255)
GREEN_RGB = (0, 200, 0)
YELLOW_GREEN_RGB = (128, 255, 0)


class FakeClock:
    """Manually advanced monotonic clock, in seconds."""

    def __init__(self, start=100.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance_ms(self, ms):
        self.now += ms / 1000.0


def make_frame(width=640, height=480, color=(0, 0, 0)):
    """Creates an RGB frame filled with one color."""
    img = np.zeros((height, width, 3), dtype=np.uint8)
    img[:, :] = color
    return img

def fill_rect(img, x, y, w, h, color):
    """Paints a solid rectangle, (x, y) top-left, w x h pixels."""
    cv2.rectangle(img, (x, y), (x + w - 1, y + h - 1), color, -1)
    return img
