import logging
from dataclasses import dataclass
from functools import partial
from typing import List, Optional, Sequence, Tuple

import numpy as np
from tqdm import tqdm

from ..parallel import average_over_slices
from .metrics import RAND, MetricConfig, evaluate_slice
from .statistics import Statistics

logger = logging.getLogger(__name__)

SCORES = ("f_score", "metric")
"""@private
"""


def get_thresholds(min_threshold: float, max_threshold: float, step_threshold: float) -> Optional[List[float]]:
    """Get the thresholds for a threshold sweep.

    Args:
        min_threshold: The first threshold, must be in [0, 1].
        max_threshold: The last threshold (inclusive), must be in [min_threshold, 1].
        step_threshold: The distance between thresholds, must be positive.

    Returns:
        The thresholds, or None if the threshold range is invalid.
    """
    if not (0 <= min_threshold <= max_threshold <= 1):
        logger.error(
            f"Invalid threshold range: expected 0 <= min <= max <= 1, got min={min_threshold}, max={max_threshold}"
        )
        return None
    if step_threshold <= 0:
        logger.error(f"Invalid threshold step {step_threshold}, it must be positive")
        return None
    # the epsilon makes sure that max_threshold is included despite floating point errors
    n_steps = int(np.floor((max_threshold - min_threshold) / step_threshold + 1e-9))
    return [round(min_threshold + k * step_threshold, 12) for k in range(n_steps + 1)]


def _check_inputs(probabilities, groundtruth):
    probabilities, groundtruth = np.asarray(probabilities), np.asarray(groundtruth)
    if probabilities.shape != groundtruth.shape:
        raise ValueError(f"Shape mismatch between probabilities {probabilities.shape} and groundtruth {groundtruth.shape}")
    if probabilities.ndim not in (2, 3):
        raise ValueError(f"Expected 2d images or 3d stacks, got {probabilities.ndim}d data instead")
    return probabilities, groundtruth


def _evaluate(probabilities, groundtruth, threshold, config, n_threads):
    # returns the statistics and the number of failed slices, None if the computation was interrupted
    if probabilities.ndim == 2:
        return evaluate_slice(probabilities, groundtruth, threshold, config), 0
    average = average_over_slices(
        partial(evaluate_slice, threshold=threshold, config=config), probabilities, groundtruth,
        n_threads=n_threads, label=f"{config.family.value} at threshold {threshold}",
    )
    if average is None:
        return None
    return average.value, average.n_failed


def threshold_statistics(
    probabilities: np.ndarray,
    groundtruth: np.ndarray,
    threshold: float,
    config: MetricConfig = RAND,
    n_threads: Optional[int] = None,
) -> Optional[Statistics]:
    """Compute the metric statistics for a probability map binarized at a threshold.

    For stacks the statistics are averaged over the slices.

    Args:
        probabilities: The probability map or stack of probability maps.
        groundtruth: The groundtruth image or stack.
        threshold: The threshold for binarizing the probability map.
        config: The metric configuration.
        n_threads: Number of threads for processing stacks, by default all are used.

    Returns:
        The statistics. None if the computation was interrupted or failed for all slices.
    """
    probabilities, groundtruth = _check_inputs(probabilities, groundtruth)
    result = _evaluate(probabilities, groundtruth, threshold, config, n_threads)
    return None if result is None else result[0]


def metric_value(
    probabilities: np.ndarray,
    groundtruth: np.ndarray,
    threshold: float,
    config: MetricConfig = RAND,
    n_threads: Optional[int] = None,
) -> Optional[float]:
    """Compute the metric value for a probability map binarized at a threshold.

    Args:
        probabilities: The probability map or stack of probability maps.
        groundtruth: The groundtruth image or stack.
        threshold: The threshold for binarizing the probability map.
        config: The metric configuration.
        n_threads: Number of threads for processing stacks, by default all are used.

    Returns:
        The rand index or variation of information.
    """
    stats = threshold_statistics(probabilities, groundtruth, threshold, config, n_threads)
    return None if stats is None else stats.metric_value


@dataclass(frozen=True)
class ThresholdSweep:
    """The results of evaluating a metric over a range of thresholds.

    Attributes:
        thresholds: The evaluated thresholds.
        scores: The score for each threshold, None if it could not be computed.
        statistics: The full statistics for each threshold.
        n_failed: The number of failed slices for each threshold.
        maximize: Whether the best score is the maximal or the minimal one.
    """
    thresholds: Tuple[float, ...]
    scores: Tuple[Optional[float], ...]
    statistics: Tuple[Optional[Statistics], ...]
    n_failed: Tuple[int, ...]
    maximize: bool = True

    @property
    def best_index(self) -> Optional[int]:
        """Index of the best score. The first threshold wins ties.
        """
        best_index, best = None, None
        for index, score in enumerate(self.scores):
            if score is None:
                continue
            if best is None or (score > best if self.maximize else score < best):
                best_index, best = index, score
        return best_index

    @property
    def best_score(self) -> Optional[float]:
        index = self.best_index
        return None if index is None else self.scores[index]

    @property
    def best_threshold(self) -> Optional[float]:
        index = self.best_index
        return None if index is None else self.thresholds[index]


def sweep_thresholds(
    probabilities: np.ndarray,
    groundtruth: np.ndarray,
    min_threshold: float,
    max_threshold: float,
    step_threshold: float,
    config: MetricConfig = RAND,
    score: str = "f_score",
    n_threads: Optional[int] = None,
    verbose: bool = False,
) -> Optional[ThresholdSweep]:
    """Evaluate a metric for a probability map binarized at a range of thresholds.

    The F-score is always maximized, the metric value is maximized for the rand index
    and minimized for the variation of information.

    Args:
        probabilities: The probability map or stack of probability maps.
        groundtruth: The groundtruth image or stack.
        min_threshold: The first threshold, must be in [0, 1].
        max_threshold: The last threshold (inclusive), must be in [min_threshold, 1].
        step_threshold: The distance between thresholds.
        config: The metric configuration.
        score: The score to optimize, either "f_score" or "metric".
        n_threads: Number of threads for processing stacks, by default all are used.
        verbose: Verbosity flag.

    Returns:
        The sweep results. None if the threshold range is invalid or the computation was interrupted.
    """
    if score not in SCORES:
        raise ValueError(f"Invalid score {score}, choose one of {SCORES}")
    thresholds = get_thresholds(min_threshold, max_threshold, step_threshold)
    if thresholds is None:
        return None
    probabilities, groundtruth = _check_inputs(probabilities, groundtruth)

    scores, statistics, n_failed = [], [], []
    for threshold in tqdm(thresholds, desc=f"Sweep {config.family.value} thresholds", disable=not verbose):
        result = _evaluate(probabilities, groundtruth, threshold, config, n_threads)
        if result is None:
            logger.error(f"The threshold sweep was interrupted at threshold {threshold}")
            return None
        stats, failed = result
        value = None if stats is None else (stats.f_score if score == "f_score" else stats.metric_value)
        if verbose:
            logger.info(f"Threshold {threshold}: {score} = {value}")
        scores.append(value)
        statistics.append(stats)
        n_failed.append(failed)

    maximize = True if score == "f_score" else config.higher_is_better
    return ThresholdSweep(
        thresholds=tuple(thresholds), scores=tuple(scores), statistics=tuple(statistics),
        n_failed=tuple(n_failed), maximize=maximize,
    )


def best_score(
    probabilities: np.ndarray,
    groundtruth: np.ndarray,
    min_threshold: float,
    max_threshold: float,
    step_threshold: float,
    config: MetricConfig = RAND,
    score: str = "f_score",
    n_threads: Optional[int] = None,
    verbose: bool = False,
) -> Optional[float]:
    """Get the best score over a range of thresholds.

    See `sweep_thresholds` for details.

    Returns:
        The best score. None if the threshold range is invalid.
    """
    sweep = sweep_thresholds(
        probabilities, groundtruth, min_threshold, max_threshold, step_threshold,
        config=config, score=score, n_threads=n_threads, verbose=verbose,
    )
    return None if sweep is None else sweep.best_score


def maximal_f_score(
    probabilities: np.ndarray,
    groundtruth: np.ndarray,
    min_threshold: float,
    max_threshold: float,
    step_threshold: float,
    config: MetricConfig = RAND,
    n_threads: Optional[int] = None,
    verbose: bool = False,
) -> Optional[float]:
    """@private
    """
    return best_score(probabilities, groundtruth, min_threshold, max_threshold, step_threshold,
                      config=config, score="f_score", n_threads=n_threads, verbose=verbose)


def best_metric_value(
    probabilities: np.ndarray,
    groundtruth: np.ndarray,
    min_threshold: float,
    max_threshold: float,
    step_threshold: float,
    config: MetricConfig = RAND,
    n_threads: Optional[int] = None,
    verbose: bool = False,
) -> Optional[float]:
    """@private
    """
    return best_score(probabilities, groundtruth, min_threshold, max_threshold, step_threshold,
                      config=config, score="metric", n_threads=n_threads, verbose=verbose)


def sweep_all(
    probabilities: np.ndarray,
    groundtruth: np.ndarray,
    min_threshold: float,
    max_threshold: float,
    step_threshold: float,
    configs: Sequence[MetricConfig],
    score: str = "f_score",
    n_threads: Optional[int] = None,
    verbose: bool = False,
) -> Optional[List[ThresholdSweep]]:
    """Run threshold sweeps for several metric configurations.

    Returns:
        One sweep per configuration. None if the threshold range is invalid.
    """
    if get_thresholds(min_threshold, max_threshold, step_threshold) is None:
        return None
    sweeps = []
    for config in configs:
        sweep = sweep_thresholds(probabilities, groundtruth, min_threshold, max_threshold, step_threshold,
                                 config=config, score=score, n_threads=n_threads, verbose=verbose)
        if sweep is None:
            return None
        sweeps.append(sweep)
    return sweeps
