"""Metrics for comparing a segmentation to a groundtruth: the rand index and the variation of information.

Both are computed from the contingency matrix of the two label maps, either for the full image
or restricted to the groundtruth foreground.
"""

from .cremi_score import cremi_score
from .metrics import (MetricConfig, MetricFamily, compute_statistics, evaluate_slice, label_maps,
                      RAND, RAND_FOREGROUND, RAND_THINNED, RAND_FOREGROUND_THINNED,
                      VI, VI_FOREGROUND, VI_THINNED, VI_FOREGROUND_THINNED)
from .rand_index import (adapted_rand_error, compute_rand_scores, foreground_restricted_rand_index,
                         rand_index, rand_index_statistics)
from .stack import contingency_matrix_3d, mean_slice_statistics, rand_index_3d, slice_statistics
from .statistics import ClassificationStatistics, InformationStatistics, f_score
from .threshold import (ThresholdSweep, best_metric_value, best_score, get_thresholds, maximal_f_score,
                        metric_value, sweep_all, sweep_thresholds, threshold_statistics)
from .util import ContingencyMatrix, contingency_matrix, merge_contingency_matrices
from .variation_of_information import compute_vi_scores, variation_of_information, vi_statistics
