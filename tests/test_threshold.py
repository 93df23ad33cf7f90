import numpy as np
import pytest

from aggregate_stability.utils.threshold import (
    UNIT_RANGE,
    binarize,
    select_channel_thresholds,
    select_threshold,
)


def test_threshold_within_intensity_range():
    rng = np.random.default_rng(0)
    image = rng.integers(0, 256, size=(64, 64)).astype(np.uint8)
    t = select_threshold(image)
    assert image.min() <= t <= image.max()


def test_threshold_separates_two_levels():
    image = np.full((10, 10), 0.2)
    image[:5] = 0.8
    t = select_threshold(image)
    assert 0.2 <= t < 0.8
    assert np.count_nonzero(image > t) == 50


def test_single_valued_image_returns_that_value():
    assert select_threshold(np.full((8, 8), 0.5)) == 0.5
    assert select_threshold(np.full((8, 8), 17, dtype=np.uint8)) == 17.0


def test_non_finite_pixels_are_ignored():
    image = np.full((4, 4), 0.3)
    image[0, 0] = np.nan
    image[1, 1] = np.inf
    t = select_threshold(image)
    assert t == pytest.approx(0.3)
    assert np.isfinite(t)


def test_channel_without_finite_pixels_raises():
    with pytest.raises(ValueError):
        select_threshold(np.full((3, 3), np.nan))


def test_channel_thresholds_one_per_channel():
    image = np.zeros((10, 10, 3))
    image[..., 0] = 0.4
    image[:5, :, 1] = 1.0
    image[..., 2] = np.linspace(0, 1, 100).reshape(10, 10)
    thresholds = select_channel_thresholds(image)
    assert thresholds.shape == (3,)
    assert thresholds[0] == pytest.approx(0.4)
    assert 0.0 <= thresholds[1] < 1.0

    assert isinstance(select_channel_thresholds(image[..., 0]), float)


def test_binarize_marks_dark_pixels():
    image = np.array([[10, 100], [101, 250]], dtype=np.uint8)
    mask = binarize(image, 100)
    assert mask.dtype == np.bool_
    np.testing.assert_array_equal(mask, [[True, True], [False, False]])


def test_binarize_per_channel_threshold():
    image = np.zeros((2, 2, 2))
    image[..., 0] = 0.5
    image[..., 1] = 0.5
    mask = binarize(image, [0.6, 0.4])
    assert mask.shape == image.shape
    assert mask[..., 0].all()
    assert not mask[..., 1].any()


def test_binarize_is_idempotent():
    rng = np.random.default_rng(1)
    image = rng.integers(0, 256, size=(16, 16)).astype(np.uint8)
    once = binarize(image, 120)
    np.testing.assert_array_equal(binarize(once, 120), once)


def test_binarize_rejects_mismatched_threshold_count():
    with pytest.raises(ValueError):
        binarize(np.zeros((4, 4, 3)), [0.1, 0.2])


def test_unit_range_threshold_is_a_fixed_bin_centre():
    image = np.full((10, 10), 0.2)
    image[:5] = 0.8
    # 0.2 falls in bin 51 of 256 over [0, 1]
    assert select_threshold(image, UNIT_RANGE) == 51.5 / 256
    assert np.count_nonzero(image > select_threshold(image, UNIT_RANGE)) == 50


def test_unit_range_bins_do_not_follow_the_image_range():
    rng = np.random.default_rng(2)
    image = np.concatenate([rng.normal(0.3, 0.05, 4000), rng.normal(0.7, 0.05, 4000)]).reshape(80, 100)
    t = select_threshold(image, UNIT_RANGE)
    centres = (np.arange(256) + 0.5) / 256
    assert np.isclose(centres, t).any()
    assert 0.4 < t < 0.6
    assert select_channel_thresholds(np.stack([image, image], axis=-1), UNIT_RANGE).tolist() == [t, t]
