import cv2
import numpy as np
import tifffile
from pathlib import Path
from typing import Union
from skimage.color import rgb2gray, rgba2rgb
from skimage.util import img_as_float
from ..errors import DecodeError


def load_image(image_path: Union[str, Path]) -> np.ndarray:
    """
    Decode an image file keeping its bit depth.

    Args:
        image_path: Path to the image file

    Returns:
        (H, W) array for single-channel files, (H, W, C) in RGB(A) order otherwise

    Raises:
        DecodeError: If the file is missing or cannot be decoded
    """
    image_path = Path(image_path)
    image = cv2.imread(str(image_path), cv2.IMREAD_UNCHANGED)
    if image is None:
        raise DecodeError(image_path)

    if image.ndim == 3 and image.shape[-1] == 3:
        image = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
    elif image.ndim == 3 and image.shape[-1] == 4:
        image = cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
    return image


def to_grayscale(image: np.ndarray, mode: str = 'luminance') -> np.ndarray:
    """
    Reduce an image to intensity frames on a [0, 1] float scale.

    Args:
        image: (H, W) or (H, W, C) array of any numeric or boolean dtype
        mode: 'luminance' collapses RGB(A) to one channel with the standard
              luminance weights; 'channels' keeps every colour channel as
              its own frame

    Returns:
        float64 array, (H, W) for 'luminance', input shape for 'channels'
    """
    image = img_as_float(image)
    if mode == 'channels' or image.ndim == 2:
        return image
    if mode != 'luminance':
        raise ValueError(f"Unknown grayscale mode: {mode}")

    if image.shape[-1] == 4:
        image = rgba2rgb(image)
    if image.shape[-1] == 3:
        return rgb2gray(image)
    # Non-RGB stacks have no luminance weights; average the frames
    return image.mean(axis=-1)


def save_mask_as_tiff(
    mask: np.ndarray,
    output_path: Union[str, Path],
    compress: bool = True
) -> None:
    """
    Save a binary mask as a TIFF file.

    Args:
        mask: Binary mask as numpy array, (H, W) or (H, W, C)
        output_path: Path to save the TIFF file
        compress: Whether to use compression
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        # Ensure mask is binary uint8
        if mask.dtype != np.uint8:
            if mask.dtype == np.bool_:
                mask = mask.astype(np.uint8) * 255
            else:
                mask = (mask > 0).astype(np.uint8) * 255

        tifffile.imwrite(
            output_path,
            mask,
            compression='zlib' if compress else None,
            photometric='minisblack',
            planarconfig='contig' if mask.ndim == 3 else None
        )
    except Exception as e:
        raise IOError(f"Failed to save mask TIFF file {output_path}: {str(e)}")
