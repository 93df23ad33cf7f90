"""Run configuration for the stability pipeline.

Crop bounds and the circular mask diameter are tuned to one physical camera
rig, so they are kept together with the rest of the run settings in a single
``StabilityConfig`` that is handed to the batch runner.
"""

import json
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

logger = logging.getLogger(__name__)

OVERWRITE_POLICIES = ('prompt', 'overwrite', 'abort')
GRAYSCALE_MODES = ('luminance', 'channels')


@dataclass(frozen=True)
class CropRect:
    """Rectangle crop bounds in pixels, 0-based and half-open (``xmax``/``ymax`` excluded)."""
    xmin: int
    xmax: int
    ymin: int
    ymax: int

    @property
    def x_range(self) -> Tuple[int, int]:
        return (self.xmin, self.xmax)

    @property
    def y_range(self) -> Tuple[int, int]:
        return (self.ymin, self.ymax)

    @property
    def width(self) -> int:
        return self.xmax - self.xmin

    @property
    def height(self) -> int:
        return self.ymax - self.ymin


@dataclass(frozen=True)
class StabilityConfig:
    """Settings for one batch run.

    Args:
        parent_directory: Folder holding one subfolder per sample
        crop_rect: Rectangle to keep from every image, or None to skip cropping
        circle_diameter: Diameter of the centred circular mask, or None to disable it
        overwrite_policy: What to do when the results file already exists
            ('prompt', 'overwrite' or 'abort')
        grayscale: 'luminance' reduces RGB to one channel, 'channels' thresholds
            every colour channel on its own
        circle_fill: Value written outside the circular mask
        workers: Number of sample folders scored concurrently
        write_sample_files: Also write a one-value CSV into each sample folder
        mask_dir: Directory for binarised mask TIFFs, or None to skip them
    """
    parent_directory: Optional[Path] = None
    crop_rect: Optional[CropRect] = None
    circle_diameter: Optional[int] = None
    overwrite_policy: str = 'prompt'
    grayscale: str = 'luminance'
    circle_fill: float = 0.0
    workers: int = 1
    write_sample_files: bool = False
    mask_dir: Optional[Path] = None

    def __post_init__(self):
        if self.overwrite_policy not in OVERWRITE_POLICIES:
            raise ValueError(
                f"Unknown overwrite policy {self.overwrite_policy!r}, expected one of {OVERWRITE_POLICIES}"
            )
        if self.grayscale not in GRAYSCALE_MODES:
            raise ValueError(f"Unknown grayscale mode {self.grayscale!r}, expected one of {GRAYSCALE_MODES}")
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")
        if self.circle_diameter is not None and self.circle_diameter < 2:
            raise ValueError(f"circle_diameter must be at least 2 pixels, got {self.circle_diameter}")

    def with_overrides(self, **overrides: Any) -> 'StabilityConfig':
        """Return a copy with every override that is not None applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


# Rig settings used by the labs that produced the original scripts.
PRESETS: Dict[str, Dict[str, Any]] = {
    # Petri dish photographed by the SLAKES rig. x 800..3200 and y 600..3000, 1-based and inclusive.
    'slakes': {
        'crop_rect': CropRect(799, 3200, 599, 3000),
        'circle_diameter': 2250,
        'circle_fill': 0.0,
    },
    # Crop from the Soil Health Institute SOP, Appendix A. No circular mask.
    'sop': {
        'crop_rect': CropRect(1335, 2736, 1123, 2524),
        'circle_diameter': None,
    },
}


def preset_config(name: str, **overrides: Any) -> StabilityConfig:
    """Build a config from one of the named rig presets."""
    if name not in PRESETS:
        raise ValueError(f"Unknown preset {name!r}, expected one of {sorted(PRESETS)}")
    return StabilityConfig(**PRESETS[name]).with_overrides(**overrides)


def _parse_crop_rect(value: Any) -> Optional[CropRect]:
    if value is None:
        return None
    if isinstance(value, dict):
        return CropRect(**{k: int(v) for k, v in value.items()})
    xmin, xmax, ymin, ymax = (int(v) for v in value)
    return CropRect(xmin, xmax, ymin, ymax)


def load_config(path: Union[str, Path]) -> StabilityConfig:
    """Load a ``StabilityConfig`` from a JSON file.

    The file may name a ``preset`` whose values the other keys then override.
    ``crop_rect`` is either ``[xmin, xmax, ymin, ymax]`` or an object with those keys.
    """
    path = Path(path)
    with open(path, 'r') as f:
        data = json.load(f)
    logger.info(f"Loaded configuration from {path}")

    preset = data.pop('preset', None)
    if preset and preset not in PRESETS:
        raise ValueError(f"Unknown preset {preset!r} in {path}")
    values: Dict[str, Any] = dict(PRESETS[preset]) if preset else {}

    if 'crop_rect' in data:
        values['crop_rect'] = _parse_crop_rect(data.pop('crop_rect'))
    for key in ('parent_directory', 'mask_dir'):
        if data.get(key) is not None:
            values[key] = Path(data.pop(key))
    values.update(data)
    return StabilityConfig(**values)
