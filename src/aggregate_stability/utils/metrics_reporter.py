import numpy as np
from typing import Dict, List, Sequence
from .logger import setup_logger

logger = setup_logger(__name__)

def calculate_summary_statistics(indices: Sequence[float]) -> Dict[str, float]:
    """Calculate summary statistics for the stability indices of a batch.

    Args:
        indices: Stability index of every scored sample

    Returns:
        Dictionary with count, mean, std, min, median and max (empty for no samples)
    """
    if len(indices) == 0:
        return {}

    values = np.asarray(indices, dtype=np.float64)
    return {
        'count': int(values.size),
        'mean': float(np.mean(values)),
        'std': float(np.std(values)),
        'min': float(np.min(values)),
        'median': float(np.median(values)),
        'max': float(np.max(values)),
    }

def report_summary_statistics(stats: Dict[str, float], skipped: List[str] = None):
    """Report summary statistics to logger.

    Args:
        stats: Output of ``calculate_summary_statistics``
        skipped: Sample folders that could not be scored
    """
    if skipped:
        logger.warning(f"{len(skipped)} sample folder(s) skipped:")
        for folder in skipped:
            logger.warning(f"  {folder}")

    if not stats:
        logger.info("No samples were scored")
        return

    logger.info("Stability index summary:")
    logger.info(f"Samples scored: {stats['count']}")
    logger.info(f"Mean: {stats['mean']:.3f} ± {stats['std']:.3f}")
    logger.info(f"Median: {stats['median']:.3f} (range {stats['min']:.3f} - {stats['max']:.3f})")
