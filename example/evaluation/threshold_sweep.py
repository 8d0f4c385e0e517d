import numpy as np
from skimage.data import binary_blobs
from skimage.filters import gaussian

from segeval.evaluation import (mean_slice_statistics, rand_index_3d, sweep_thresholds, label_maps,
                                RAND, RAND_FOREGROUND, VI, VI_FOREGROUND_THINNED)


def make_data(n_slices=8, size=256, noise=0.25):
    # the groundtruth are blobs, the prediction is a noisy and smoothed version of them
    gt = np.stack([binary_blobs(size, blob_size_fraction=0.05, seed=z) for z in range(n_slices)]).astype("float32")
    prediction = gt + noise * np.random.randn(*gt.shape)
    prediction = np.stack([gaussian(pred, sigma=2) for pred in prediction])
    prediction = (prediction - prediction.min()) / (prediction.max() - prediction.min())
    return prediction, gt


def sweep_2d(prediction, gt):
    for config in (RAND, RAND_FOREGROUND, VI, VI_FOREGROUND_THINNED):
        sweep = sweep_thresholds(prediction, gt, 0.1, 0.9, 0.1, config=config, verbose=True)
        print(config.family.value, "foreground" if config.foreground_restricted else "",
              "thinned" if config.thinning else "")
        print("Best F-score:", sweep.best_score, "at threshold", sweep.best_threshold)


def micro_vs_macro(prediction, gt, threshold=0.5):
    labels = [label_maps(pred, g, threshold, RAND) for pred, g in zip(prediction, gt)]
    gt_labels = np.stack([lab[0] for lab in labels])
    seg_labels = np.stack([lab[1] for lab in labels])

    micro = rand_index_3d(seg_labels, gt_labels)
    macro = mean_slice_statistics(seg_labels, gt_labels, RAND)
    print("Rand index from pooled counts:", micro.metric_value)
    print("Mean rand index over the slices:", macro.value.metric_value, "failed slices:", macro.n_failed)


if __name__ == "__main__":
    prediction, gt = make_data()
    sweep_2d(prediction[0], gt[0])
    micro_vs_macro(prediction, gt)
