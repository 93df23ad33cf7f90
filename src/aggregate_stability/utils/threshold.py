import numpy as np
from skimage.filters import threshold_otsu
from typing import Optional, Sequence, Tuple, Union

Threshold = Union[float, np.ndarray]

OTSU_BINS = 256
# Intensity scale of images after img_as_float
UNIT_RANGE = (0.0, 1.0)


def split_channels(image: np.ndarray):
    """Split an image into its intensity frames (one for 2D images)."""
    if image.ndim == 2:
        return [image]
    if image.ndim == 3:
        return [image[..., c] for c in range(image.shape[-1])]
    raise ValueError(f"Expected a 2D or 3D image, got shape {image.shape}")


def select_threshold(channel: np.ndarray, value_range: Optional[Tuple[float, float]] = None) -> float:
    """
    Pick the Otsu cutoff for a single intensity channel.

    Pixels are split into {<= t} and {> t}; t maximises the between-class
    variance of a 256-bin histogram.

    Args:
        channel: 2D intensity array (NaN/inf pixels are ignored)
        value_range: Fixed (low, high) span of the histogram. Every image is then
            binned on the same 256 levels and values outside are clipped. None
            spans the channel's own finite range.

    Returns:
        Threshold on the same scale as the input. An image with a single
        intensity level returns that level.
    """
    values = np.asarray(channel, dtype=np.float64)
    values = values[np.isfinite(values)]
    if values.size == 0:
        raise ValueError("Cannot select a threshold for a channel without finite pixels")

    low, high = values.min(), values.max()
    if low == high:
        return float(low)
    if value_range is None:
        return float(threshold_otsu(values, nbins=OTSU_BINS))

    low, high = value_range
    edges = np.linspace(low, high, OTSU_BINS + 1)
    counts, _ = np.histogram(np.clip(values, low, high), bins=edges)
    centers = (edges[:-1] + edges[1:]) / 2
    occupied = np.flatnonzero(counts)
    if occupied.size == 1:
        return float(centers[occupied[0]])
    # drop the empty bins at either end, the class means are undefined there
    keep = slice(occupied[0], occupied[-1] + 1)
    return float(threshold_otsu(hist=(counts[keep], centers[keep])))


def select_channel_thresholds(
    image: np.ndarray,
    value_range: Optional[Tuple[float, float]] = None
) -> Threshold:
    """
    Map ``select_threshold`` across the channels of an image.

    Returns a float for 2D images and a 1D array with one threshold per
    channel for 3D images.
    """
    thresholds = [select_threshold(channel, value_range) for channel in split_channels(image)]
    if image.ndim == 2:
        return thresholds[0]
    return np.asarray(thresholds, dtype=np.float64)


def channel_thresholds(image: np.ndarray, threshold: Union[Threshold, Sequence[float]]) -> np.ndarray:
    """Broadcast a scalar or per-channel threshold to one value per channel."""
    n_channels = 1 if image.ndim == 2 else image.shape[-1]
    values = np.atleast_1d(np.asarray(threshold, dtype=np.float64))
    if values.size == 1:
        return np.repeat(values, n_channels)
    if values.size != n_channels:
        raise ValueError(f"Got {values.size} thresholds for an image with {n_channels} channels")
    return values


def binarize(image: np.ndarray, threshold: Union[Threshold, Sequence[float]]) -> np.ndarray:
    """
    Classify every pixel against its channel threshold.

    A pixel is True when its intensity is <= the threshold (the dark class),
    False otherwise. Boolean images are already classified and are returned
    as a copy, so re-binarizing a result leaves it unchanged.

    Args:
        image: 2D or 3D (H, W, C) intensity array
        threshold: Scalar or one threshold per channel

    Returns:
        Boolean array with the same shape as ``image``
    """
    if image.dtype == np.bool_:
        return image.copy()

    thresholds = channel_thresholds(image, threshold)
    if image.ndim == 2:
        return image <= thresholds[0]
    return np.stack(
        [channel <= t for channel, t in zip(split_channels(image), thresholds)],
        axis=-1
    )
