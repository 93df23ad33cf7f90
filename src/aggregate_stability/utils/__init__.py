from .logger import setup_logger
from .threshold import select_threshold, select_channel_thresholds, binarize
from .regions import crop_rectangle, crop_circle, circle_mask
from .metrics import measure_area, channel_areas, reduce_channel_areas
from .metrics_reporter import calculate_summary_statistics, report_summary_statistics
from .image_utils import load_image, to_grayscale, save_mask_as_tiff

__all__ = [
    'setup_logger',
    'select_threshold',
    'select_channel_thresholds',
    'binarize',
    'crop_rectangle',
    'crop_circle',
    'circle_mask',
    'measure_area',
    'channel_areas',
    'reduce_channel_areas',
    'calculate_summary_statistics',
    'report_summary_statistics',
    'load_image',
    'to_grayscale',
    'save_mask_as_tiff'
]
