import unittest
import numpy as np

# reference implementations from sklearn and scipy
from scipy.stats import entropy
from sklearn.metrics import mutual_info_score, rand_score as rand_ref
from sklearn.metrics.cluster import pair_confusion_matrix


def _reference_pair_counts(segmentation, groundtruth):
    # sklearn counts ordered pairs, so each unordered pair is counted twice
    counts = pair_confusion_matrix(groundtruth.ravel(), segmentation.ravel())
    tn, fp, fn, tp = counts[0, 0], counts[0, 1], counts[1, 0], counts[1, 1]
    return tp / 2, tn / 2, fp / 2, fn / 2


def _reference_vi(segmentation, groundtruth):
    # split and merge part of the variation of information, in nats
    gt, seg = groundtruth.ravel(), segmentation.ravel()
    mutual_information = mutual_info_score(gt, seg)
    h_gt = entropy(np.unique(gt, return_counts=True)[1])
    h_seg = entropy(np.unique(seg, return_counts=True)[1])
    return h_seg - mutual_information, h_gt - mutual_information


class TestMetrics(unittest.TestCase):
    shape = (128, 128)

    def test_ri_random_data(self):
        from segeval.evaluation import rand_index_statistics
        x = np.random.randint(0, 10, size=self.shape)
        y = np.random.randint(0, 10, size=self.shape)
        stats = rand_index_statistics(x, y, method="exact")
        ri_exp = rand_ref(y.ravel(), x.ravel())
        self.assertAlmostEqual(stats.metric_value, ri_exp)

    def test_rand_precision_recall_random_data(self):
        from segeval.evaluation import rand_index_statistics
        x = np.random.randint(0, 10, size=self.shape)
        y = np.random.randint(0, 10, size=self.shape)
        stats = rand_index_statistics(x, y, method="exact")

        tp, tn, fp, fn = _reference_pair_counts(x, y)
        self.assertAlmostEqual(stats.true_positives, tp)
        self.assertAlmostEqual(stats.true_negatives, tn)
        self.assertAlmostEqual(stats.false_positives, fp)
        self.assertAlmostEqual(stats.false_negatives, fn)
        self.assertAlmostEqual(stats.precision, tp / (tp + fp))
        self.assertAlmostEqual(stats.recall, tp / (tp + fn))

    def test_vi_random_data(self):
        from segeval.evaluation import variation_of_information
        x = np.random.randint(0, 10, size=self.shape)
        y = np.random.randint(0, 10, size=self.shape)
        vi_s, vi_m = variation_of_information(x, y)
        vi_s_exp, vi_m_exp = _reference_vi(x, y)
        self.assertAlmostEqual(vi_s, vi_s_exp)
        self.assertAlmostEqual(vi_m, vi_m_exp)

        vi_s, vi_m = variation_of_information(x, y, use_log2=True)
        self.assertAlmostEqual(vi_s, vi_s_exp / np.log(2))
        self.assertAlmostEqual(vi_m, vi_m_exp / np.log(2))

    def test_exact_and_n2_agree_on_large_images(self):
        from segeval.evaluation import rand_index_statistics
        shape = (512, 512)
        x = np.random.randint(0, 5, size=shape)
        y = np.random.randint(0, 5, size=shape)
        for restricted in (False, True):
            exact = rand_index_statistics(x, y, restricted, method="exact")
            n2 = rand_index_statistics(x, y, restricted, method="n2")
            self.assertAlmostEqual(exact.metric_value, n2.metric_value, places=4)

    def test_cremi_score(self):
        from segeval.evaluation import cremi_score
        x = np.random.randint(0, 10, size=self.shape)
        y = np.random.randint(0, 10, size=self.shape)

        vis, vim, are, cs = cremi_score(x, y)
        vi_s_exp, vi_m_exp = _reference_vi(x, y)
        self.assertAlmostEqual(vis, vi_s_exp / np.log(2))
        self.assertAlmostEqual(vim, vi_m_exp / np.log(2))

        # the n2 form also counts the pairs of a pixel with itself
        n = x.size
        tp, _, fp, fn = _reference_pair_counts(x, y)
        precision = (2 * tp + n) / (2 * tp + 2 * fp + n)
        recall = (2 * tp + n) / (2 * tp + 2 * fn + n)
        are_exp = 1.0 - 2 * precision * recall / (precision + recall)
        self.assertAlmostEqual(are, are_exp)
        self.assertAlmostEqual(cs, np.sqrt(are * (vis + vim)))

    def test_cremi_score_identical(self):
        from segeval.evaluation import cremi_score
        x = np.random.randint(0, 10, size=self.shape)
        vis, vim, are, cs = cremi_score(x, x)
        self.assertAlmostEqual(vis, 0.0)
        self.assertAlmostEqual(vim, 0.0)
        self.assertAlmostEqual(are, 0.0)
        self.assertAlmostEqual(cs, 0.0)


if __name__ == '__main__':
    unittest.main()
