"""Error types raised by the stability pipeline.

Everything deriving from ``SampleError`` is recoverable: the batch runner logs
it against the offending sample folder and moves on. ``OutputConflictError`` is
the only error that stops a whole run.
"""

from pathlib import Path
from typing import Optional, Union


class StabilityError(Exception):
    """Base class for all aggregate stability errors."""


class SampleError(StabilityError):
    """A single sample folder could not be scored."""

    def __init__(self, message: str, folder: Optional[Union[str, Path]] = None):
        super().__init__(message)
        self.folder = Path(folder) if folder is not None else None


class MissingPairError(SampleError):
    """Zero or more than one image matched a role in a sample folder."""

    def __init__(self, folder: Union[str, Path], role: str, count: int):
        self.role = role
        self.count = count
        found = "no" if count == 0 else f"{count}"
        super().__init__(
            f"Found {found} {role} image(s) in {folder} (filename should be "
            f"'{{anything}}_{{0 or 601}}_c{{number}}_p{{number}}.{{extension}}')",
            folder,
        )


class CropBoundsError(SampleError):
    """A configured crop rectangle or circle does not fit inside the image."""


# Name used for the rectangle-crop failure in the region isolation API.
OutOfBoundsError = CropBoundsError


class DecodeError(SampleError):
    """An image file is missing, unreadable or corrupt."""

    def __init__(self, path: Union[str, Path], folder: Optional[Union[str, Path]] = None):
        self.path = Path(path)
        super().__init__(
            f"Image not found or unreadable: {path} (ensure images are 8-bit JPG/PNG/TIFF)",
            folder if folder is not None else self.path.parent,
        )


class EmptyAreaError(SampleError):
    """The final image has no pixels in the measured class, so the ratio is undefined."""


class OutputConflictError(StabilityError):
    """The results file already exists and overwriting it was declined."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        super().__init__(f"Results file already exists and will not be overwritten: {path}")
