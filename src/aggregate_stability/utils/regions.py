"""Region isolation: rectangle crop followed by an optional centred circular mask."""

import numpy as np
from typing import Tuple
from ..errors import CropBoundsError


def crop_rectangle(
    image: np.ndarray,
    x_range: Tuple[int, int],
    y_range: Tuple[int, int]
) -> np.ndarray:
    """
    Crop an image to a fixed rectangle.

    Args:
        image: Input image (H, W) or (H, W, C)
        x_range: (start, stop) column bounds, stop excluded
        y_range: (start, stop) row bounds, stop excluded

    Returns:
        Copy of the region with shape (y_stop - y_start, x_stop - x_start[, C])

    Raises:
        CropBoundsError: If the rectangle is empty or reaches outside the image
    """
    img_h, img_w = image.shape[:2]
    x_start, x_stop = (int(v) for v in x_range)
    y_start, y_stop = (int(v) for v in y_range)

    if x_start >= x_stop or y_start >= y_stop:
        raise CropBoundsError(
            f"Invalid crop bounds x={x_range}, y={y_range} would create a "
            f"{x_stop - x_start}x{y_stop - y_start} image"
        )
    if x_start < 0 or y_start < 0 or x_stop > img_w or y_stop > img_h:
        raise CropBoundsError(
            f"Crop bounds x={x_range}, y={y_range} exceed image extent {img_w}x{img_h}"
        )

    return image[y_start:y_stop, x_start:x_stop].copy()


def circle_mask(shape: Tuple[int, int], diameter: int) -> np.ndarray:
    """Boolean mask of the pixels kept by ``crop_circle`` for an image of ``shape``."""
    height, width = shape
    center_y, center_x = height // 2, width // 2
    radius = diameter // 2 - 1

    yy, xx = np.ogrid[:height, :width]
    return (yy - center_y) ** 2 + (xx - center_x) ** 2 <= radius ** 2


def crop_circle(image: np.ndarray, diameter: int, fill_value: float = 0) -> np.ndarray:
    """
    Keep only the centred disk of an image.

    The disk is centred on (floor(H/2), floor(W/2)) with radius
    floor(diameter/2) - 1. Pixels further from the centre than the radius are
    set to ``fill_value`` in every channel; pixels inside pass through unchanged.
    The sample is assumed to be centred by the preceding rectangle crop.

    Raises:
        CropBoundsError: If the circle does not fit inside the image
    """
    img_h, img_w = image.shape[:2]
    if diameter < 2:
        raise CropBoundsError(f"Circle diameter must be at least 2 pixels, got {diameter}")
    if diameter > min(img_h, img_w):
        raise CropBoundsError(
            f"Circle diameter {diameter} exceeds image extent {img_w}x{img_h}"
        )

    mask = circle_mask((img_h, img_w), diameter)
    result = image.copy()
    result[~mask] = fill_value
    return result
