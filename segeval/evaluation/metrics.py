from dataclasses import dataclass
from enum import Enum
from typing import Tuple

import numpy as np

from ..segmentation import binarize, label_components, thin_borders
from .rand_index import RAND_METHODS, compute_rand_scores
from .statistics import Statistics
from .util import contingency_matrix
from .variation_of_information import compute_vi_scores


class MetricFamily(Enum):
    RAND = "rand"
    VI = "vi"


@dataclass(frozen=True)
class MetricConfig:
    """Configuration of a segmentation metric.

    Attributes:
        family: Whether to compute the rand index or the variation of information.
        foreground_restricted: Whether to exclude the groundtruth background from the evaluation.
        thinning: Whether to thin the borders of the segmentation before evaluation.
            The segmentation is then binarized inverted, i.e. values above the threshold are borders.
        rand_method: The formulation of the rand index, "exact" or "n2".
        connectivity: The connectivity for labeling connected components.
        groundtruth_threshold: The threshold for binarizing the groundtruth.
        use_log2: Whether to use log_2 or log_e for the variation of information.
    """
    family: MetricFamily = MetricFamily.RAND
    foreground_restricted: bool = False
    thinning: bool = False
    rand_method: str = "exact"
    connectivity: int = 1
    groundtruth_threshold: float = 0.5
    use_log2: bool = False

    def __post_init__(self):
        if not isinstance(self.family, MetricFamily):
            # allow passing the family by value, e.g. "rand"
            object.__setattr__(self, "family", MetricFamily(self.family))
        if self.rand_method not in RAND_METHODS:
            raise ValueError(f"Invalid rand index method {self.rand_method}, choose one of {RAND_METHODS}")

    @property
    def higher_is_better(self) -> bool:
        """Whether higher metric values are better, which is the case for the rand index but not for the VI.
        """
        return self.family is MetricFamily.RAND


RAND = MetricConfig(MetricFamily.RAND)
RAND_FOREGROUND = MetricConfig(MetricFamily.RAND, foreground_restricted=True)
RAND_THINNED = MetricConfig(MetricFamily.RAND, thinning=True)
RAND_FOREGROUND_THINNED = MetricConfig(MetricFamily.RAND, foreground_restricted=True, thinning=True)
VI = MetricConfig(MetricFamily.VI)
VI_FOREGROUND = MetricConfig(MetricFamily.VI, foreground_restricted=True)
VI_THINNED = MetricConfig(MetricFamily.VI, thinning=True)
VI_FOREGROUND_THINNED = MetricConfig(MetricFamily.VI, foreground_restricted=True, thinning=True)


def _rand_statistics(matrix, config):
    return compute_rand_scores(matrix, method=config.rand_method)


def _vi_statistics(matrix, config):
    return compute_vi_scores(matrix, use_log2=config.use_log2)


METRIC_FUNCTIONS = {MetricFamily.RAND: _rand_statistics,
                    MetricFamily.VI: _vi_statistics}
"""@private
"""


def compute_statistics(
    groundtruth_labels: np.ndarray,
    segmentation_labels: np.ndarray,
    config: MetricConfig,
) -> Statistics:
    """Compute the statistics of a metric for two label maps.

    Args:
        groundtruth_labels: The groundtruth label map.
        segmentation_labels: The segmentation label map.
        config: The metric configuration.

    Returns:
        The classification statistics for the rand index or the information statistics for the VI.
    """
    matrix = contingency_matrix(
        groundtruth_labels, segmentation_labels, foreground_restricted=config.foreground_restricted
    )
    return METRIC_FUNCTIONS[config.family](matrix, config)


def label_maps(
    probabilities: np.ndarray,
    groundtruth: np.ndarray,
    threshold: float,
    config: MetricConfig,
) -> Tuple[np.ndarray, np.ndarray]:
    """Binarize and label the groundtruth and the probability map for one threshold.

    Args:
        probabilities: The probability map, values above the threshold are foreground.
        groundtruth: The groundtruth image, binarized at `config.groundtruth_threshold`.
        threshold: The threshold for binarizing the probability map.
        config: The metric configuration.

    Returns:
        The groundtruth label map.
        The segmentation label map.
    """
    groundtruth_labels = label_components(
        binarize(groundtruth, config.groundtruth_threshold), config.connectivity
    )
    if config.thinning:
        segmentation_labels = thin_borders(binarize(probabilities, threshold, invert=True), config.connectivity)
    else:
        segmentation_labels = label_components(binarize(probabilities, threshold), config.connectivity)
    return groundtruth_labels, segmentation_labels


def evaluate_slice(
    probabilities: np.ndarray,
    groundtruth: np.ndarray,
    threshold: float,
    config: MetricConfig,
) -> Statistics:
    """Compute the statistics of a metric for a 2d probability map at a threshold.

    Args:
        probabilities: The probability map.
        groundtruth: The groundtruth image.
        threshold: The threshold for binarizing the probability map.
        config: The metric configuration.

    Returns:
        The statistics.
    """
    groundtruth_labels, segmentation_labels = label_maps(probabilities, groundtruth, threshold, config)
    return compute_statistics(groundtruth_labels, segmentation_labels, config)
