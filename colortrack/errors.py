# Error taxonomy for the detector core


class ColorTrackError(Exception):
    """
    Base class for every error raised by colortrack.
    """


class InvalidSample(ColorTrackError, ValueError):
    """
    RGB input out of [0, 255] or not exactly three channels.
    """


class UnsupportedColorSpace(ColorTrackError, ValueError):
    """
    Requested color space is not one of the six supported spaces.
    """


class FrameDecodeFailure(ColorTrackError):
    """
    The current frame buffer cannot be turned into an image.
    Contained to the frame: the pipeline returns an empty result.
    """


class EmptySample(ColorTrackError):
    """
    Tap averaging found no in-bounds pixels.
    """
