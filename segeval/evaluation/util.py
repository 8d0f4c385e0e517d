from dataclasses import dataclass
from typing import Sequence

import numpy as np


def _check_label_map(labels, name):
    labels = np.asarray(labels)
    if not np.issubdtype(labels.dtype, np.integer):
        if np.issubdtype(labels.dtype, np.bool_):
            return labels.astype("uint8")
        # allow float arrays with integral values, e.g. label images read as float32
        if not np.all(np.mod(labels, 1) == 0):
            raise ValueError(f"Expected integer labels for {name}, got dtype {labels.dtype}")
        labels = labels.astype("int64")
    if labels.size > 0 and labels.min() < 0:
        raise ValueError(f"Expected non-negative labels for {name}, got minimum {labels.min()}")
    return labels


@dataclass(frozen=True)
class ContingencyMatrix:
    """Joint label counts of a groundtruth (rows) and a segmentation (columns).

    The full cross tabulation is always stored in `counts`, including the
    background row and column. For the foreground restricted variant the
    normalization `n_points` only counts pixels that are foreground in the groundtruth
    and the background row / column are dropped from the marginals.
    The groundtruth foreground that is labeled as background in the segmentation
    is kept track of separately in `aux`.
    """
    counts: np.ndarray
    n_points: int
    foreground_restricted: bool = False

    @property
    def shape(self):
        return self.counts.shape

    @property
    def probabilities(self) -> np.ndarray:
        """The joint probabilities `p[i][j] = counts[i][j] / n_points`.
        """
        if self.n_points == 0:
            return np.zeros(self.counts.shape, dtype="float64")
        return self.counts.astype("float64") / self.n_points

    @property
    def row_marginals(self) -> np.ndarray:
        """The groundtruth marginals `a[i]`.
        """
        a = self.probabilities.sum(axis=1)
        if self.foreground_restricted:
            a[0] = 0.0
        return a

    @property
    def col_marginals(self) -> np.ndarray:
        """The segmentation marginals `b[j]`.
        """
        p = self.probabilities
        if self.foreground_restricted:
            b = p[1:].sum(axis=0)
            b[0] = 0.0
        else:
            b = p.sum(axis=0)
        return b

    @property
    def aux(self) -> float:
        """Groundtruth foreground mass that is background in the segmentation.

        Only non-zero for the foreground restricted variant.
        """
        if not self.foreground_restricted:
            return 0.0
        return float(self.probabilities[1:, 0].sum())


def contingency_matrix(
    groundtruth: np.ndarray,
    segmentation: np.ndarray,
    foreground_restricted: bool = False,
) -> ContingencyMatrix:
    """Compute the dense contingency matrix for two label maps.

    The contingency matrix counts the number of pixels that are shared between
    objects from the groundtruth and the segmentation.

    Args:
        groundtruth: The groundtruth label map.
        segmentation: The segmentation label map, must have the same shape as the groundtruth.
        foreground_restricted: Whether to exclude the groundtruth background from the normalization.

    Returns:
        The contingency matrix.
    """
    groundtruth = _check_label_map(groundtruth, "groundtruth")
    segmentation = _check_label_map(segmentation, "segmentation")
    if groundtruth.shape != segmentation.shape:
        raise ValueError(
            f"Shape mismatch between groundtruth {groundtruth.shape} and segmentation {segmentation.shape}"
        )

    a = groundtruth.ravel().astype("int64")
    b = segmentation.ravel().astype("int64")
    max_a = int(a.max()) if a.size > 0 else 0
    max_b = int(b.max()) if b.size > 0 else 0

    # count all label pairs in a single pass via a flat index into the dense table
    n_cols = max_b + 1
    counts = np.bincount(a * n_cols + b, minlength=(max_a + 1) * n_cols)
    counts = counts.reshape((max_a + 1, n_cols)).astype("int64")

    n_points = int(np.count_nonzero(a)) if foreground_restricted else int(a.size)
    return ContingencyMatrix(counts=counts, n_points=n_points, foreground_restricted=foreground_restricted)


def merge_contingency_matrices(matrices: Sequence[ContingencyMatrix]) -> ContingencyMatrix:
    """Sum several contingency matrices into one global matrix.

    The matrices are padded to the largest label ids before summation.

    Args:
        matrices: The matrices to merge. All need to have the same restriction flag.

    Returns:
        The merged contingency matrix.
    """
    if len(matrices) == 0:
        raise ValueError("Need at least one contingency matrix to merge")
    restricted = {mat.foreground_restricted for mat in matrices}
    if len(restricted) != 1:
        raise ValueError("Cannot merge standard and foreground restricted contingency matrices")

    n_rows = max(mat.shape[0] for mat in matrices)
    n_cols = max(mat.shape[1] for mat in matrices)
    counts = np.zeros((n_rows, n_cols), dtype="int64")
    for mat in matrices:
        counts[:mat.shape[0], :mat.shape[1]] += mat.counts
    n_points = sum(mat.n_points for mat in matrices)
    return ContingencyMatrix(counts=counts, n_points=n_points, foreground_restricted=restricted.pop())
