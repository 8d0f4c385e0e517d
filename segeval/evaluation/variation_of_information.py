from typing import Tuple

import numpy as np

from .statistics import InformationStatistics, f_score
from .util import ContingencyMatrix, contingency_matrix


# The two variants suppress the undefined 0 * log(0) terms differently:
# the standard variant skips zero probabilities before taking the log,
# the foreground restricted variant evaluates all terms and drops the NaN ones.
def _plogp_nonzero(x, log):
    x = x[x != 0]
    return float(np.sum(x * log(x)))


def _plogp_nan(x, log):
    with np.errstate(divide="ignore", invalid="ignore"):
        terms = x * log(x)
    return float(np.sum(terms[~np.isnan(terms)]))


def _entropy_precision_and_recall(entropy_a, entropy_b, conditional_a_given_b, conditional_b_given_a):
    if entropy_a == 0:
        return 0.0, 1.0
    if entropy_b == 0:
        return 1.0, 0.0
    precision = (entropy_a - conditional_a_given_b) / entropy_a
    recall = (entropy_b - conditional_b_given_a) / entropy_b
    return float(np.clip(precision, 0.0, 1.0)), float(np.clip(recall, 0.0, 1.0))


def compute_vi_scores(matrix: ContingencyMatrix, use_log2: bool = False) -> InformationStatistics:
    """Compute the variation of information statistics from a contingency matrix.

    For the foreground restricted variant the segmentation background within the
    groundtruth foreground is treated as single pixel objects, which is accounted for
    by the `aux * log(n)` correction of the segmentation and joint entropy sums.

    Args:
        matrix: The contingency matrix.
        use_log2: Whether to use log_2 or log_e.

    Returns:
        The information statistics.
    """
    log = np.log2 if use_log2 else np.log
    p = matrix.probabilities
    a = matrix.row_marginals
    b = matrix.col_marginals

    if matrix.foreground_restricted:
        sum_a = _plogp_nan(a[1:], log)
        sum_b = _plogp_nan(b[1:], log)
        sum_ab = _plogp_nan(p[1:, 1:], log)
        if matrix.n_points > 0:
            correction = matrix.aux * float(log(matrix.n_points))
            sum_b -= correction
            sum_ab -= correction
    else:
        sum_a = _plogp_nonzero(a, log)
        sum_b = _plogp_nonzero(b, log)
        sum_ab = _plogp_nonzero(p, log)

    entropy_a, entropy_b = -sum_a, -sum_b
    # conditional entropies are non-negative, clip rounding errors
    conditional_a_given_b = max(sum_b - sum_ab, 0.0)
    conditional_b_given_a = max(sum_a - sum_ab, 0.0)

    precision, recall = _entropy_precision_and_recall(
        entropy_a, entropy_b, conditional_a_given_b, conditional_b_given_a
    )
    return InformationStatistics(
        entropy_a=entropy_a,
        entropy_b=entropy_b,
        conditional_a_given_b=conditional_a_given_b,
        conditional_b_given_a=conditional_b_given_a,
        variation_of_information=conditional_a_given_b + conditional_b_given_a,
        precision=precision,
        recall=recall,
        f_score=f_score(precision, recall),
    )


def vi_statistics(
    segmentation: np.ndarray,
    groundtruth: np.ndarray,
    foreground_restricted: bool = False,
    use_log2: bool = False,
) -> InformationStatistics:
    """Compute the variation of information statistics between two segmentations.

    Args:
        segmentation: Candidate segmentation to evaluate.
        groundtruth: Groundtruth segmentation.
        foreground_restricted: Whether to exclude the groundtruth background from the evaluation.
        use_log2: Whether to use log_2 or log_e.

    Returns:
        The information statistics.
    """
    matrix = contingency_matrix(groundtruth, segmentation, foreground_restricted=foreground_restricted)
    return compute_vi_scores(matrix, use_log2=use_log2)


def variation_of_information(
    segmentation: np.ndarray,
    groundtruth: np.ndarray,
    foreground_restricted: bool = False,
    use_log2: bool = False,
) -> Tuple[float, float]:
    """Compute variation of information between two segmentations.

    This function computes the split and merge variation of information scores
    You can add them up to get the overall variation of information.

    Args:
        segmentation: Candidate segmentation to evaluate.
        groundtruth: Groundtruth segmentation.
        foreground_restricted: Whether to exclude the groundtruth background from the evaluation.
        use_log2: Whether to use log_2 or log_e.

    Retuns:
        The split variation of information.
        The merge variation of information.
    """
    stats = vi_statistics(segmentation, groundtruth, foreground_restricted, use_log2)
    return stats.split, stats.merge
