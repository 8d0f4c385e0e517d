from functools import partial
from typing import List, Optional

import numpy as np

from ..parallel import SliceAverage, average_over_slices, map_slice_ranges
from .metrics import MetricConfig, compute_statistics
from .rand_index import compute_rand_scores
from .statistics import ClassificationStatistics, Statistics
from .util import ContingencyMatrix, contingency_matrix, merge_contingency_matrices


def contingency_matrix_3d(
    groundtruth: np.ndarray,
    segmentation: np.ndarray,
    foreground_restricted: bool = False,
    n_threads: Optional[int] = None,
    verbose: bool = False,
) -> ContingencyMatrix:
    """Accumulate a single contingency matrix over all slices of a stack.

    Args:
        groundtruth: The groundtruth label stack.
        segmentation: The segmentation label stack.
        foreground_restricted: Whether to exclude the groundtruth background from the normalization.
        n_threads: Number of threads, by default all are used.
        verbose: Verbosity flag.

    Returns:
        The global contingency matrix.
    """
    matrices = map_slice_ranges(
        partial(contingency_matrix, foreground_restricted=foreground_restricted),
        groundtruth, segmentation, n_threads=n_threads, verbose=verbose, label="contingency_matrix_3d",
    )
    if matrices is None:
        raise RuntimeError("The computation of the contingency matrix was interrupted")
    failed = [z for z, mat in enumerate(matrices) if mat is None]
    if failed:
        raise RuntimeError(f"The contingency matrix could not be computed for slices {failed}")
    return merge_contingency_matrices(matrices)


def rand_index_3d(
    segmentation: np.ndarray,
    groundtruth: np.ndarray,
    foreground_restricted: bool = False,
    method: str = "exact",
    n_threads: Optional[int] = None,
    verbose: bool = False,
) -> ClassificationStatistics:
    """Compute the rand index statistics for a stack from the pooled counts of all slices.

    This is the micro average over the slices. It is a different metric than the mean of the
    per-slice rand indices (see `mean_slice_statistics`), the two are in general not equal.

    Args:
        segmentation: Candidate segmentation stack to evaluate.
        groundtruth: The groundtruth stack.
        foreground_restricted: Whether to exclude the groundtruth background from the evaluation.
        method: The formulation, either "exact" or "n2".
        n_threads: Number of threads, by default all are used.
        verbose: Verbosity flag.

    Returns:
        The rand index statistics.
    """
    matrix = contingency_matrix_3d(groundtruth, segmentation, foreground_restricted, n_threads, verbose)
    return compute_rand_scores(matrix, method=method)


def mean_slice_statistics(
    segmentation: np.ndarray,
    groundtruth: np.ndarray,
    config: MetricConfig,
    n_threads: Optional[int] = None,
    verbose: bool = False,
) -> Optional[SliceAverage]:
    """Compute the mean of the per-slice statistics for a stack of label maps.

    This is the macro average over the slices.

    Args:
        segmentation: Candidate segmentation stack to evaluate.
        groundtruth: The groundtruth stack.
        config: The metric configuration.
        n_threads: Number of threads, by default all are used.
        verbose: Verbosity flag.

    Returns:
        The averaged statistics, together with the number of failed slices.
            None if the computation was interrupted.
    """
    return average_over_slices(
        partial(compute_statistics, config=config), groundtruth, segmentation,
        n_threads=n_threads, verbose=verbose, label=f"mean_slice_statistics ({config.family.value})",
    )


def slice_statistics(
    segmentation: np.ndarray,
    groundtruth: np.ndarray,
    config: MetricConfig,
    n_threads: Optional[int] = None,
    verbose: bool = False,
) -> Optional[List[Optional[Statistics]]]:
    """Compute the statistics for each slice of a stack of label maps.

    Args:
        segmentation: Candidate segmentation stack to evaluate.
        groundtruth: The groundtruth stack.
        config: The metric configuration.
        n_threads: Number of threads, by default all are used.
        verbose: Verbosity flag.

    Returns:
        The statistics for each slice, None for slices that failed.
            None instead of the list if the computation was interrupted.
    """
    return map_slice_ranges(
        partial(compute_statistics, config=config), groundtruth, segmentation,
        n_threads=n_threads, verbose=verbose, label=f"slice_statistics ({config.family.value})",
    )
