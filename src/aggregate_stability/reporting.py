"""Module for writing the result table and run summaries."""

import logging
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional, Union
import pandas as pd
from .errors import OutputConflictError
from .utils.metrics_reporter import calculate_summary_statistics

if TYPE_CHECKING:
    from .pipeline import BatchResult, StabilityResult

logger = logging.getLogger(__name__)

RESULT_COLUMNS = ['Stability Index', 'Initial Image Filename']
TIMESTAMP_FORMAT = '%Y-%m-%d-%H%M'


def results_filename(
    parent_folder: Union[str, Path],
    when: Optional[datetime] = None,
    prefix: str = 'results'
) -> Path:
    """Timestamped results path inside ``parent_folder`` (to the minute)."""
    when = when or datetime.now()
    return Path(parent_folder) / f"{prefix}_{when.strftime(TIMESTAMP_FORMAT)}.csv"


def confirm_overwrite(path: Path, prompt: Callable[[str], str] = input) -> bool:
    """Ask until the answer is 'yes' or 'no'; True means overwrite."""
    answer = ''
    while answer not in ('yes', 'no'):
        answer = prompt(
            f"Results file {path} already exists. Continuing will overwrite the existing file. "
            "Do you still want to continue? (type 'yes' or 'no') "
        ).strip().lower()
    return answer == 'yes'


class ResultTable:
    """Append-only CSV with one row per scored sample."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.rows = 0

    @classmethod
    def create(
        cls,
        path: Union[str, Path],
        overwrite_policy: str = 'prompt',
        prompt: Callable[[str], str] = input
    ) -> 'ResultTable':
        """
        Create the table with its header row.

        An existing file is only replaced when the policy allows it; otherwise
        it is left untouched and ``OutputConflictError`` is raised.
        """
        path = Path(path)
        if path.exists():
            if overwrite_policy == 'abort' or (
                overwrite_policy == 'prompt' and not confirm_overwrite(path, prompt)
            ):
                logger.error("Aborting process")
                raise OutputConflictError(path)
            logger.warning(f"Overwriting existing results file {path}")

        pd.DataFrame(columns=RESULT_COLUMNS).to_csv(path, index=False)
        logger.info(f"Writing results to {path}")
        return cls(path)

    def append(self, result: 'StabilityResult') -> None:
        row = pd.DataFrame(
            [[result.stability_index, result.initial_image_path]],
            columns=RESULT_COLUMNS
        )
        row.to_csv(self.path, mode='a', header=False, index=False)
        self.rows += 1

    def read(self) -> pd.DataFrame:
        return pd.read_csv(self.path)


def save_sample_result(result: 'StabilityResult', when: Optional[datetime] = None) -> Path:
    """Write a one-row CSV holding the stability index into the sample folder."""
    path = results_filename(result.folder, when, prefix='slaking_image_results')
    pd.DataFrame({'Stability Index': [result.stability_index]}).to_csv(path, index=False)
    return path


def generate_summary_text(batch_result: 'BatchResult', input_dir: Path) -> str:
    """Generate a plain-text summary of a batch run."""
    stats = calculate_summary_statistics([r.stability_index for r in batch_result.results])
    n_folders = len(batch_result.results) + len(batch_result.skipped)

    summary = []
    summary.append("Aggregate Stability Run Summary")
    summary.append("===============================\n")
    summary.append(f"Timestamp: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    summary.append(f"Input Directory: {Path(input_dir).absolute()}")
    summary.append(f"Results File: {batch_result.output_path}\n")

    summary.append("Processing Statistics")
    summary.append("=====================")
    summary.append(f"Sample folders found: {n_folders}")
    summary.append(f"Samples scored: {len(batch_result.results)}")
    summary.append(f"Samples skipped: {len(batch_result.skipped)}")
    summary.append(f"Total runtime: {batch_result.total_time:.1f}s\n")

    if stats:
        summary.append("Stability Index")
        summary.append("===============")
        summary.append(f"Mean: {stats['mean']:.3f} ± {stats['std']:.3f}")
        summary.append(f"Median: {stats['median']:.3f}")
        summary.append(f"Range: {stats['min']:.3f} - {stats['max']:.3f}\n")

    if batch_result.skipped:
        summary.append("Skipped Samples")
        summary.append("===============")
        for skipped in batch_result.skipped:
            summary.append(f"{skipped.folder}: [{skipped.error_type}] {skipped.reason}")

    return "\n".join(summary)


def save_run_summary(batch_result: 'BatchResult', input_dir: Path) -> Path:
    """Save the run summary next to the results file."""
    summary_path = batch_result.output_path.with_name(f"{batch_result.output_path.stem}_summary.txt")
    with open(summary_path, "w") as f:
        f.write(generate_summary_text(batch_result, input_dir))
    return summary_path
