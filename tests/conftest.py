from datetime import datetime

import cv2
import numpy as np
import pytest

FIXED_TIME = datetime(2022, 5, 16, 9, 30)


def block_image(size=10, block=5, high=200, low=50, channels=None):
    """Square uint8 image with a centred bright block on a darker background."""
    image = np.full((size, size), low, dtype=np.uint8)
    start = (size - block) // 2
    image[start:start + block, start:start + block] = high
    if channels:
        image = np.stack([image] * channels, axis=-1)
    return image


@pytest.fixture
def write_sample():
    """Write an initial/final PNG pair into ``parent/name``."""
    def _write(parent, name, initial, final, prefix='soil'):
        folder = parent / name
        folder.mkdir(parents=True)
        assert cv2.imwrite(str(folder / f"{prefix}_0_c1_p1.png"), initial)
        assert cv2.imwrite(str(folder / f"{prefix}_601_c1_p1.png"), final)
        return folder
    return _write


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_TIME
