from pathlib import Path
from typing import List, Union, Optional, Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
import logging
import time
import numpy as np
from skimage.util import img_as_float
from tqdm import tqdm
from .config import CropRect, StabilityConfig
from .errors import EmptyAreaError, SampleError
from .pairing import SamplePair, locate_sample_pair
from .reporting import ResultTable, results_filename, save_sample_result
from .utils.image_utils import load_image, to_grayscale, save_mask_as_tiff
from .utils.metrics import measure_area
from .utils.metrics_reporter import calculate_summary_statistics, report_summary_statistics
from .utils.regions import crop_rectangle, crop_circle
from .utils.threshold import UNIT_RANGE, Threshold, binarize, select_channel_thresholds

# Set up logger
logger = logging.getLogger(__name__)

@dataclass
class ImageMeasurement:
    """Intermediate values for one image of a sample."""
    area: float
    threshold: Threshold
    mask: np.ndarray

@dataclass(frozen=True)
class StabilityResult:
    """Stability index of one sample folder."""
    stability_index: float
    initial_image_path: str
    final_image_path: str = ''
    folder: Optional[Path] = None
    initial_area: float = 0.0
    final_area: float = 0.0
    initial_threshold: Threshold = 0.0
    final_threshold: Threshold = 0.0
    elapsed: float = 0.0

@dataclass(frozen=True)
class SkippedSample:
    """A sample folder that could not be scored."""
    folder: Path
    reason: str
    error_type: str

@dataclass
class BatchResult:
    """Data class to store the outcome of a batch run."""
    results: List[StabilityResult]
    skipped: List[SkippedSample]
    output_path: Path
    total_time: float = 0.0
    summary: dict = field(default_factory=dict)

class StabilityScorer:
    def __init__(
        self,
        crop_rect: Optional[CropRect] = None,
        circle_diameter: Optional[int] = None,
        grayscale: str = 'luminance',
        circle_fill: float = 0.0,
        mask_dir: Optional[Union[str, Path]] = None
    ):
        """
        Score samples by comparing soil area before and after submersion.

        Args:
            crop_rect: Rectangle kept from both images, None to use the whole image
            circle_diameter: Diameter of the centred circular mask, None to disable
            grayscale: 'luminance' or 'channels' (see ``to_grayscale``)
            circle_fill: Intensity (on the 0-1 scale) written outside the circle
            mask_dir: Directory to save the binarised masks to, None to skip
        """
        self.crop_rect = crop_rect
        self.circle_diameter = circle_diameter
        self.grayscale = grayscale
        self.circle_fill = circle_fill
        self.mask_dir = Path(mask_dir) if mask_dir is not None else None

    @classmethod
    def from_config(cls, config: StabilityConfig) -> 'StabilityScorer':
        return cls(
            crop_rect=config.crop_rect,
            circle_diameter=config.circle_diameter,
            grayscale=config.grayscale,
            circle_fill=config.circle_fill,
            mask_dir=config.mask_dir
        )

    def isolate_region(self, image: np.ndarray) -> np.ndarray:
        """Apply the rectangle crop then the circular mask; returns floats in [0, 1]."""
        if self.crop_rect is not None:
            image = crop_rectangle(image, self.crop_rect.x_range, self.crop_rect.y_range)
        image = img_as_float(image)
        if self.circle_diameter is not None:
            image = crop_circle(image, self.circle_diameter, fill_value=self.circle_fill)
        return image

    def measure(self, image: np.ndarray) -> ImageMeasurement:
        """Run region isolation, grayscale reduction, thresholding and area measurement."""
        region = self.isolate_region(image)
        gray = to_grayscale(region, self.grayscale)
        threshold = select_channel_thresholds(gray, value_range=UNIT_RANGE)
        mask = binarize(gray, threshold)
        # Area is taken from the intensities, not from the mask: the count of
        # finite pixels strictly above the threshold.
        area = measure_area(gray, threshold)
        return ImageMeasurement(area=area, threshold=threshold, mask=mask)

    def _ratio(self, initial: ImageMeasurement, final: ImageMeasurement) -> float:
        if final.area == 0:
            raise EmptyAreaError("Final image has an area of 0 pixels; stability index is undefined")
        return initial.area / final.area

    def score_images(self, initial: np.ndarray, final: np.ndarray) -> float:
        """Stability index of two in-memory images."""
        return self._ratio(self.measure(initial), self.measure(final))

    def score(self, initial_path: Union[str, Path], final_path: Union[str, Path]) -> float:
        """Stability index of two image files."""
        return self._ratio(self.measure(load_image(initial_path)), self.measure(load_image(final_path)))

    def score_pair(self, pair: SamplePair) -> StabilityResult:
        """
        Score one sample folder.

        Args:
            pair: Initial and final image paths

        Returns:
            StabilityResult for the folder

        Raises:
            SampleError: If an image cannot be decoded, cropped or measured
        """
        start_time = time.time()
        try:
            initial_image = load_image(pair.initial)
            final_image = load_image(pair.final)
            logger.debug(f"Image dimensions: initial {initial_image.shape}, final {final_image.shape}")

            initial = self.measure(initial_image)
            final = self.measure(final_image)
            stability_index = self._ratio(initial, final)
        except SampleError as e:
            if e.folder is None:
                e.folder = pair.folder
            raise

        logger.debug(
            f"{pair.folder.name}: thresholds {initial.threshold} / {final.threshold}, "
            f"areas {initial.area:.1f} / {final.area:.1f} px"
        )
        if self.mask_dir is not None:
            self._save_masks(pair, initial.mask, final.mask)

        return StabilityResult(
            stability_index=stability_index,
            initial_image_path=str(pair.initial),
            final_image_path=str(pair.final),
            folder=pair.folder,
            initial_area=initial.area,
            final_area=final.area,
            initial_threshold=initial.threshold,
            final_threshold=final.threshold,
            elapsed=time.time() - start_time
        )

    def _save_masks(self, pair: SamplePair, initial_mask: np.ndarray, final_mask: np.ndarray) -> None:
        """Save the binarised masks of a sample for visual inspection."""
        sample_dir = self.mask_dir / pair.folder.name
        save_mask_as_tiff(initial_mask, sample_dir / f"{pair.initial.stem}_mask.tiff")
        save_mask_as_tiff(final_mask, sample_dir / f"{pair.final.stem}_mask.tiff")

class BatchRunner:
    def __init__(
        self,
        config: StabilityConfig,
        scorer: Optional[StabilityScorer] = None,
        prompt: Callable[[str], str] = input,
        clock: Callable[[], datetime] = datetime.now
    ):
        """
        Score every sample folder under a parent directory into one result table.

        Args:
            config: Run configuration
            scorer: Scorer to use, built from ``config`` when omitted
            prompt: Function asking the user whether to overwrite an existing table
            clock: Source of the run timestamp used in output file names
        """
        self.config = config
        self.scorer = scorer or StabilityScorer.from_config(config)
        self.prompt = prompt
        self.clock = clock

    @staticmethod
    def find_sample_folders(
        parent_folder: Union[str, Path],
        exclude: Optional[Union[str, Path]] = None
    ) -> List[Path]:
        """Immediate subdirectories of the parent folder, sorted by name.

        ``exclude`` (the mask output directory) is left out when it sits inside the parent.
        """
        parent_folder = Path(parent_folder)
        if not parent_folder.is_dir():
            raise NotADirectoryError(parent_folder)
        excluded = Path(exclude).resolve() if exclude is not None else None
        return sorted(
            d for d in parent_folder.iterdir()
            if d.is_dir() and d.resolve() != excluded
        )

    def _resolve_parent(self, parent_folder: Optional[Union[str, Path]]) -> Path:
        parent_folder = parent_folder or self.config.parent_directory
        if parent_folder is None:
            raise ValueError("No parent directory given")
        return Path(parent_folder)

    def process_folder(self, folder: Path) -> Union[StabilityResult, SkippedSample]:
        """Score one sample folder, turning per-sample failures into a skip."""
        try:
            pair = locate_sample_pair(folder)
            result = self.scorer.score_pair(pair)
        except SampleError as e:
            logger.error(f"Skipping folder {folder}: {str(e)}")
            return SkippedSample(folder=folder, reason=str(e), error_type=type(e).__name__)

        logger.info(f"Scored {folder.name}: stability index {result.stability_index:.4f}")
        return result

    def _iter_outcomes(self, folders: List[Path]):
        if self.config.workers == 1:
            for folder in folders:
                yield self.process_folder(folder)
            return

        # map() yields in submission order, so rows keep the folder order
        with ThreadPoolExecutor(max_workers=self.config.workers) as executor:
            yield from executor.map(self.process_folder, folders)

    def run(
        self,
        parent_folder: Optional[Union[str, Path]] = None,
        pbar: Optional[tqdm] = None
    ) -> BatchResult:
        """
        Process all sample folders of a parent directory.

        Args:
            parent_folder: Folder with one subfolder per sample, defaults to
                ``config.parent_directory``
            pbar: Optional tqdm progress bar for tracking progress

        Returns:
            BatchResult with scored and skipped samples

        Raises:
            OutputConflictError: If the results file exists and overwriting is declined
        """
        start_time = time.time()
        parent_folder = self._resolve_parent(parent_folder)
        folders = self.find_sample_folders(parent_folder, exclude=self.config.mask_dir)
        when = self.clock()

        table = ResultTable.create(
            results_filename(parent_folder, when),
            overwrite_policy=self.config.overwrite_policy,
            prompt=self.prompt
        )
        logger.info(f"Found {len(folders)} sample folder(s) in {parent_folder}")

        results: List[StabilityResult] = []
        skipped: List[SkippedSample] = []
        for outcome in self._iter_outcomes(folders):
            if isinstance(outcome, SkippedSample):
                skipped.append(outcome)
            else:
                table.append(outcome)
                results.append(outcome)
                if self.config.write_sample_files:
                    save_sample_result(outcome, when)
            self._update_progress(pbar, outcome)

        stats = calculate_summary_statistics([r.stability_index for r in results])
        report_summary_statistics(stats, [str(s.folder) for s in skipped])
        logger.info(f"Done processing. See results in {table.path}")

        return BatchResult(
            results=results,
            skipped=skipped,
            output_path=table.path,
            total_time=time.time() - start_time,
            summary=stats
        )

    @staticmethod
    def _update_progress(pbar: Optional[tqdm], outcome: Union[StabilityResult, SkippedSample]) -> None:
        """Update progress bar if provided."""
        if pbar is not None:
            pbar.update(1)
            pbar.set_postfix({'last': outcome.folder.name}, refresh=True)
