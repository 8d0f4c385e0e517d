from typing import Tuple

import numpy as np

from .statistics import ClassificationStatistics, f_score
from .util import ContingencyMatrix, contingency_matrix

RAND_METHODS = ("exact", "n2")
"""@private
"""


def _n_pairs(x):
    x = np.asarray(x, dtype="float64")
    return float(np.sum(x * (x - 1) / 2.0))


def _precision_and_recall(tp, fp, fn):
    precision = tp / (tp + fp) if (tp + fp) > 0 else 0.0
    recall = tp / (tp + fn) if (tp + fn) > 0 else 0.0
    return precision, recall


def _exact_rand_scores(matrix):
    counts = matrix.counts
    n = matrix.n_points

    if matrix.foreground_restricted:
        # the groundtruth background row is dropped and segmentation background
        # pixels in the groundtruth foreground are singletons
        true_positives = _n_pairs(counts[1:, 1:])
        n_pos_true = _n_pairs(counts[1:].sum(axis=1))
        n_pos_actual = _n_pairs(counts[1:, 1:].sum(axis=0))
    else:
        true_positives = _n_pairs(counts)
        n_pos_true = _n_pairs(counts.sum(axis=1))
        n_pos_actual = _n_pairs(counts.sum(axis=0))

    n_pairs_total = n * (n - 1) / 2.0
    true_negatives = n_pairs_total + true_positives - n_pos_true - n_pos_actual
    false_positives = n_pos_actual - true_positives
    false_negatives = (n_pairs_total - n_pos_actual) - true_negatives

    # nothing to disagree on if there are no pairs
    rand = (true_positives + true_negatives) / n_pairs_total if n_pairs_total > 0 else 1.0
    return true_positives, true_negatives, false_positives, false_negatives, rand


def _n2_rand_scores(matrix):
    n = matrix.n_points
    if n == 0:
        return 0.0, 0.0, 0.0, 0.0, 1.0

    p = matrix.probabilities
    a = matrix.row_marginals
    b = matrix.col_marginals
    aux = matrix.aux

    sum_a = float(np.sum(a * a))
    if matrix.foreground_restricted:
        sum_b = float(np.sum(b[1:] * b[1:])) + aux / n
        sum_ab = float(np.sum(p[1:, 1:] * p[1:, 1:])) + aux / n
    else:
        sum_b = float(np.sum(b * b))
        sum_ab = float(np.sum(p * p))

    n_sq = float(n) * float(n)
    true_positives = n_sq * sum_ab
    # clip rounding errors, these are non-negative by construction
    false_positives = max(n_sq * sum_b - true_positives, 0.0)
    false_negatives = max(n_sq * sum_a - true_positives, 0.0)
    true_negatives = max(n_sq - true_positives - false_positives - false_negatives, 0.0)

    rand_error = (false_positives + false_negatives) / n_sq
    return true_positives, true_negatives, false_positives, false_negatives, 1.0 - rand_error


def compute_rand_scores(matrix: ContingencyMatrix, method: str = "exact") -> ClassificationStatistics:
    """Compute the rand index statistics from a contingency matrix.

    Two formulations are supported: the classic rand index, which counts pixel pairs
    via binomial coefficients, and the faster `n2` form, which replaces them with
    squared probabilities. Both lead to the same number of disagreeing pairs
    up to a factor of 2, but the rand index differs by the normalization (`n (n - 1) / 2` vs. `n ** 2`).

    Args:
        matrix: The contingency matrix.
        method: The formulation, either "exact" or "n2".

    Returns:
        The rand index statistics.
    """
    if method == "exact":
        tp, tn, fp, fn, rand = _exact_rand_scores(matrix)
    elif method == "n2":
        tp, tn, fp, fn, rand = _n2_rand_scores(matrix)
    else:
        raise ValueError(f"Invalid rand index method {method}, choose one of {RAND_METHODS}")

    precision, recall = _precision_and_recall(tp, fp, fn)
    return ClassificationStatistics(
        true_positives=tp, true_negatives=tn, false_positives=fp, false_negatives=fn,
        metric_value=rand, precision=precision, recall=recall, f_score=f_score(precision, recall),
    )


def rand_index_statistics(
    segmentation: np.ndarray,
    groundtruth: np.ndarray,
    foreground_restricted: bool = False,
    method: str = "exact",
) -> ClassificationStatistics:
    """Compute the rand index statistics between two segmentations.

    Args:
        segmentation: Candidate segmentation to evaluate.
        groundtruth: The groundtruth segmentation.
        foreground_restricted: Whether to exclude the groundtruth background from the evaluation.
        method: The formulation, either "exact" or "n2".

    Returns:
        The rand index statistics.
    """
    matrix = contingency_matrix(groundtruth, segmentation, foreground_restricted=foreground_restricted)
    return compute_rand_scores(matrix, method=method)


def rand_index(
    segmentation: np.ndarray,
    groundtruth: np.ndarray,
    foreground_restricted: bool = False,
) -> Tuple[float, float]:
    """Compute rand index derived scores between two segmentations.

    This function computes the adapted rand error and rand index.

    Args:
        segmentation: Candidate segmentation to evaluate.
        groundtruth: The groundtruth segmentation.
        foreground_restricted: Whether to exclude the groundtruth background from the evaluation.

    Retuns:
        The adapted rand error.
        The rand index.
    """
    stats = rand_index_statistics(segmentation, groundtruth, foreground_restricted, method="n2")
    return 1.0 - stats.f_score, stats.metric_value


def adapted_rand_error(
    segmentation: np.ndarray,
    groundtruth: np.ndarray,
    foreground_restricted: bool = False,
) -> float:
    """Compute the adapted rand error, i.e. one minus the rand F-score.

    Args:
        segmentation: Candidate segmentation to evaluate.
        groundtruth: The groundtruth segmentation.
        foreground_restricted: Whether to exclude the groundtruth background from the evaluation.

    Returns:
        The adapted rand error.
    """
    return rand_index(segmentation, groundtruth, foreground_restricted)[0]


def foreground_restricted_rand_index(
    segmentation: np.ndarray,
    groundtruth: np.ndarray,
    method: str = "n2",
) -> float:
    """Compute the rand index restricted to the groundtruth foreground.

    Args:
        segmentation: Candidate segmentation to evaluate.
        groundtruth: The groundtruth segmentation.
        method: The formulation, either "exact" or "n2".

    Returns:
        The foreground restricted rand index.
    """
    return rand_index_statistics(segmentation, groundtruth, foreground_restricted=True, method=method).metric_value
