import math

import numpy as np
import pytest

from aggregate_stability.errors import CropBoundsError, OutOfBoundsError
from aggregate_stability.utils.regions import circle_mask, crop_circle, crop_rectangle


def test_crop_rectangle_returns_requested_shape():
    image = np.arange(40 * 30).reshape(40, 30)
    cropped = crop_rectangle(image, (5, 25), (10, 30))
    assert cropped.shape == (20, 20)
    assert cropped[0, 0] == image[10, 5]


def test_crop_rectangle_keeps_channels_and_copies():
    image = np.zeros((20, 20, 3), dtype=np.uint8)
    cropped = crop_rectangle(image, (0, 20), (0, 10))
    assert cropped.shape == (10, 20, 3)
    cropped[:] = 255
    assert image.max() == 0


@pytest.mark.parametrize("x_range, y_range", [
    ((0, 31), (0, 10)),
    ((0, 10), (0, 41)),
    ((-1, 10), (0, 10)),
    ((10, 10), (0, 10)),
    ((20, 5), (0, 10)),
])
def test_crop_rectangle_out_of_bounds(x_range, y_range):
    image = np.zeros((40, 30))
    with pytest.raises(OutOfBoundsError):
        crop_rectangle(image, x_range, y_range)


def test_out_of_bounds_is_crop_bounds_error():
    assert OutOfBoundsError is CropBoundsError


def test_crop_circle_geometry():
    image = np.ones((21, 21))
    result = crop_circle(image, 21)

    # radius = floor(21 / 2) - 1 = 9, centre = (10, 10)
    assert result[10, 10] == 1
    assert result[10, 19] == 1
    assert result[10, 20] == 0
    assert result[0, 0] == 0
    assert result[20, 20] == 0

    yy, xx = np.mgrid[:21, :21]
    outside = (yy - 10) ** 2 + (xx - 10) ** 2 > 81
    assert not result[outside].any()
    assert result[~outside].all()


def test_crop_circle_passed_pixels_match_disk_area():
    image = np.ones((101, 101))
    result = crop_circle(image, 101)
    radius = 101 // 2 - 1
    kept = np.count_nonzero(result)
    assert abs(kept - math.pi * radius ** 2) <= 2 * math.pi * radius


def test_crop_circle_passes_values_through_in_every_channel():
    rng = np.random.default_rng(2)
    image = rng.random((30, 30, 3))
    result = crop_circle(image, 30)
    mask = circle_mask((30, 30), 30)
    np.testing.assert_array_equal(result[mask], image[mask])
    assert (result[~mask] == 0).all()


def test_crop_circle_fill_value():
    result = crop_circle(np.zeros((10, 10)), 10, fill_value=1.0)
    assert result[0, 0] == 1.0
    assert result[5, 5] == 0.0


def test_crop_circle_larger_than_image():
    with pytest.raises(CropBoundsError):
        crop_circle(np.ones((20, 30)), 21)
