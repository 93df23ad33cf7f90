from .pipeline import StabilityScorer, BatchRunner, StabilityResult, BatchResult
from .config import StabilityConfig, CropRect, load_config, preset_config
from .errors import (
    StabilityError,
    SampleError,
    MissingPairError,
    CropBoundsError,
    OutOfBoundsError,
    DecodeError,
    EmptyAreaError,
    OutputConflictError
)
from .pairing import Role, SamplePair, classify_filename, locate_sample_pair
from .reporting import ResultTable
from .utils import (
    setup_logger,
    select_threshold,
    binarize,
    crop_rectangle,
    crop_circle,
    measure_area
)

__version__ = "0.1.0"
__all__ = [
    'StabilityScorer',
    'BatchRunner',
    'StabilityResult',
    'BatchResult',
    'StabilityConfig',
    'CropRect',
    'load_config',
    'preset_config',
    'StabilityError',
    'SampleError',
    'MissingPairError',
    'CropBoundsError',
    'OutOfBoundsError',
    'DecodeError',
    'EmptyAreaError',
    'OutputConflictError',
    'Role',
    'SamplePair',
    'classify_filename',
    'locate_sample_pair',
    'ResultTable',
    'setup_logger',
    'select_threshold',
    'binarize',
    'crop_rectangle',
    'crop_circle',
    'measure_area'
]
