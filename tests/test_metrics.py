import numpy as np
import pytest

from aggregate_stability.utils.metrics import channel_areas, measure_area, reduce_channel_areas
from aggregate_stability.utils.metrics_reporter import calculate_summary_statistics


def test_all_background_measures_zero():
    image = np.full((10, 10), 0.2)
    assert measure_area(image, 0.5) == 0


def test_threshold_value_itself_is_not_counted():
    image = np.full((10, 10), 0.5)
    assert measure_area(image, 0.5) == 0


def test_all_soil_measures_full_pixel_count():
    image = np.full((10, 12), 0.9)
    assert measure_area(image, 0.5) == 120


def test_non_finite_pixels_not_counted():
    image = np.full((4, 4), 0.9)
    image[0, 0] = np.nan
    image[0, 1] = np.inf
    assert measure_area(image, 0.5) == 14


def test_area_is_mean_over_channels():
    image = np.zeros((10, 10, 3))
    image[..., 0] = 1.0
    image[:5, :, 1] = 1.0
    counts = channel_areas(image, 0.5)
    np.testing.assert_array_equal(counts, [100, 50, 0])
    assert measure_area(image, 0.5) == pytest.approx(50.0)
    assert reduce_channel_areas(counts) == pytest.approx(50.0)


def test_per_channel_thresholds():
    image = np.full((2, 2, 2), 0.5)
    assert measure_area(image, [0.4, 0.6]) == pytest.approx(2.0)


def test_summary_statistics():
    stats = calculate_summary_statistics([1.0, 2.0, 3.0])
    assert stats['count'] == 3
    assert stats['mean'] == pytest.approx(2.0)
    assert stats['min'] == 1.0
    assert stats['max'] == 3.0
    assert calculate_summary_statistics([]) == {}
