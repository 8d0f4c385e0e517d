from typing import Tuple

import numpy as np

from .util import contingency_matrix
from .rand_index import compute_rand_scores
from .variation_of_information import compute_vi_scores


def cremi_score(
    segmentation: np.ndarray,
    groundtruth: np.ndarray,
    foreground_restricted: bool = False,
) -> Tuple[float, float, float, float]:
    """Compute cremi score of two segmentations.

    This score was used as the evaluation metric for the CREMI challenge.
    It is defined as the geometric mean of the variation of information and the adapted rand score.
    Both are derived from the same contingency matrix.

    Args:
        segmentation: Candidate segmentation to evaluate.
        groundtruth: Groundtruth segmentation.
        foreground_restricted: Whether to exclude the groundtruth background from the evaluation.

    Retuns:
        The variation of information split score.
        The variation of information merge score.
        The adapted rand error.
        The cremi score.
    """
    matrix = contingency_matrix(groundtruth, segmentation, foreground_restricted=foreground_restricted)

    # Compute VI scores.
    vi_stats = compute_vi_scores(matrix, use_log2=True)
    vis, vim = vi_stats.split, vi_stats.merge

    # Compute rand score.
    are = 1.0 - compute_rand_scores(matrix, method="n2").f_score

    # Compute the cremi score = geometric mean of voi and ari.
    cs = np.sqrt(are * (vis + vim))

    return vis, vim, are, float(cs)
