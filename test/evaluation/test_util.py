import unittest
import numpy as np


class TestContingencyMatrix(unittest.TestCase):
    def test_contingency_matrix(self):
        from segeval.evaluation import contingency_matrix
        gt = np.array([[1, 1], [0, 2]])
        seg = np.array([[1, 2], [0, 2]])
        matrix = contingency_matrix(gt, seg)

        expected = np.array([[1, 0, 0],
                             [0, 1, 1],
                             [0, 0, 1]])
        self.assertTrue(np.array_equal(matrix.counts, expected))
        self.assertEqual(matrix.n_points, 4)
        self.assertTrue(np.allclose(matrix.row_marginals, [0.25, 0.5, 0.25]))
        self.assertTrue(np.allclose(matrix.col_marginals, [0.25, 0.25, 0.5]))
        self.assertEqual(matrix.aux, 0.0)

    def test_contingency_matrix_random(self):
        from segeval.evaluation import contingency_matrix
        shape = (64, 64)
        gt = np.random.randint(0, 10, size=shape)
        seg = np.random.randint(0, 20, size=shape)
        matrix = contingency_matrix(gt, seg)

        self.assertEqual(matrix.counts.sum(), gt.size)
        self.assertAlmostEqual(matrix.row_marginals.sum(), 1.0)
        self.assertAlmostEqual(matrix.col_marginals.sum(), 1.0)
        # compare with the naive implementation
        pairs = np.concatenate([gt.reshape(-1, 1), seg.reshape(-1, 1)], axis=1)
        ids, counts = np.unique(pairs, axis=0, return_counts=True)
        for (ida, idb), count in zip(ids, counts):
            self.assertEqual(matrix.counts[ida, idb], count)

    def test_foreground_restricted(self):
        from segeval.evaluation import contingency_matrix
        gt = np.array([[1, 1], [0, 2]])
        seg = np.array([[0, 2], [1, 2]])
        matrix = contingency_matrix(gt, seg, foreground_restricted=True)

        # the full cross tabulation is kept, including the groundtruth background row
        expected = np.array([[0, 1, 0],
                             [1, 0, 1],
                             [0, 0, 1]])
        self.assertTrue(np.array_equal(matrix.counts, expected))
        self.assertEqual(matrix.n_points, 3)
        self.assertTrue(np.allclose(matrix.row_marginals, [0.0, 2 / 3, 1 / 3]))
        self.assertTrue(np.allclose(matrix.col_marginals, [0.0, 0.0, 2 / 3]))
        self.assertAlmostEqual(matrix.aux, 1 / 3)
        self.assertAlmostEqual(matrix.row_marginals.sum(), 1.0)
        self.assertAlmostEqual(matrix.col_marginals.sum() + matrix.aux, 1.0)

    def test_shape_mismatch(self):
        from segeval.evaluation import contingency_matrix
        with self.assertRaises(ValueError):
            contingency_matrix(np.zeros((4, 4), dtype="uint32"), np.zeros((4, 5), dtype="uint32"))

    def test_invalid_labels(self):
        from segeval.evaluation import contingency_matrix
        x = np.zeros((4, 4), dtype="int32")
        y = x.copy()
        y[0, 0] = -1
        with self.assertRaises(ValueError):
            contingency_matrix(x, y)
        with self.assertRaises(ValueError):
            contingency_matrix(x, np.full((4, 4), 0.5))

    def test_float_and_bool_labels(self):
        from segeval.evaluation import contingency_matrix
        gt = np.array([[0, 1], [1, 1]], dtype="float32")
        seg = np.array([[False, True], [True, False]])
        matrix = contingency_matrix(gt, seg)
        self.assertTrue(np.array_equal(matrix.counts, [[1, 0], [1, 2]]))

    def test_merge(self):
        from segeval.evaluation import contingency_matrix, merge_contingency_matrices
        x = np.random.randint(0, 5, size=(3, 16, 16))
        y = np.random.randint(0, 8, size=(3, 16, 16))
        x[1] = np.random.randint(0, 12, size=(16, 16))
        for restricted in (False, True):
            matrices = [contingency_matrix(xx, yy, restricted) for xx, yy in zip(x, y)]
            merged = merge_contingency_matrices(matrices)
            expected = contingency_matrix(x, y, restricted)
            self.assertEqual(merged.n_points, expected.n_points)
            self.assertTrue(np.array_equal(merged.counts, expected.counts))

        with self.assertRaises(ValueError):
            merge_contingency_matrices([contingency_matrix(x[0], y[0]),
                                        contingency_matrix(x[0], y[0], foreground_restricted=True)])


if __name__ == "__main__":
    unittest.main()
