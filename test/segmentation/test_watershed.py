import unittest
import numpy as np
from skimage.measure import label as label_reference


class TestWatershed(unittest.TestCase):

    def test_binarize(self):
        from segeval.segmentation import binarize
        x = np.array([[0.1, 0.5], [0.6, 1.0]])
        self.assertTrue(np.array_equal(binarize(x, 0.5), [[False, False], [True, True]]))
        self.assertTrue(np.array_equal(binarize(x, 0.5, invert=True), [[True, True], [False, False]]))

    def test_label_components(self):
        from segeval.segmentation import label_components
        x = np.random.rand(64, 64) > 0.6
        res = label_components(x)
        exp = label_reference(x, connectivity=1)
        self.assertTrue(np.array_equal(res, exp))
        self.assertTrue(np.array_equal(res == 0, ~x))

    def test_label_components_connectivity(self):
        from segeval.segmentation import label_components
        # two pixels that only touch diagonally
        x = np.array([[1, 0], [0, 1]], dtype="bool")
        self.assertEqual(label_components(x, connectivity=1).max(), 2)
        self.assertEqual(label_components(x, connectivity=2).max(), 1)

    def test_thin_borders(self):
        from segeval.segmentation import thin_borders
        shape = (9, 15)
        x = np.zeros(shape, dtype="bool")
        x[:, :3] = 1
        x[:, -3:] = 1
        res = thin_borders(x)

        self.assertEqual(set(np.unique(res)), {0, 1, 2})
        # the objects keep their interior and are separated by a thin line
        left, right = res[0, 0], res[0, -1]
        self.assertNotEqual(left, right)
        self.assertTrue(np.all(res[:, :3] == left))
        self.assertTrue(np.all(res[:, -3:] == right))
        n_border = (res == 0).sum()
        self.assertGreater(n_border, 0)
        self.assertLessEqual(n_border, 2 * shape[0])
        # the line separates the objects
        self.assertEqual(label_reference(res > 0, connectivity=1).max(), 2)

    def test_thin_borders_empty(self):
        from segeval.segmentation import thin_borders
        x = np.zeros((8, 8), dtype="bool")
        res = thin_borders(x)
        self.assertEqual(res.max(), 0)


if __name__ == "__main__":
    unittest.main()
