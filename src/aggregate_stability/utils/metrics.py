import numpy as np
from typing import Sequence, Union
from .threshold import Threshold, split_channels, channel_thresholds


def channel_areas(image: np.ndarray, threshold: Union[Threshold, Sequence[float]]) -> np.ndarray:
    """
    Count the measured pixels in every channel of an image.

    A pixel is counted when it is finite and strictly greater than the
    threshold of its channel.

    Args:
        image: 2D or 3D (H, W, C) array
        threshold: Scalar or one threshold per channel

    Returns:
        1D array with one pixel count per channel
    """
    values = image.astype(np.float64, copy=False)
    thresholds = channel_thresholds(values, threshold)
    counts = [
        np.count_nonzero(np.isfinite(channel) & (channel > t))
        for channel, t in zip(split_channels(values), thresholds)
    ]
    return np.asarray(counts, dtype=np.float64)


def reduce_channel_areas(counts: np.ndarray) -> float:
    """Collapse per-channel pixel counts to one area by averaging."""
    return float(np.mean(counts))


def measure_area(image: np.ndarray, threshold: Union[Threshold, Sequence[float]]) -> float:
    """
    Measure the area, in pixels, of an image against its threshold.

    Args:
        image: 2D or 3D (H, W, C) array
        threshold: Scalar or one threshold per channel

    Returns:
        Mean over channels of the finite pixel count above the threshold
    """
    return reduce_channel_areas(channel_areas(image, threshold))
