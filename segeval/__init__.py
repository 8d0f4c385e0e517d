"""`segeval` implements metrics for comparing segmentations to groundtruth.

# Overview

`segeval` evaluates how well a predicted segmentation matches a groundtruth labeling. The main functionality is:
- `segeval.evaluation`: Rand index and variation of information (standard and foreground restricted),
  their precision / recall / F-score and threshold sweeps for probability maps.
- `segeval.parallel`: Parallel evaluation over the slices of a stack.
- `segeval.segmentation`: Binarization, connected components and border thinning to turn probability maps into label maps.

# Installation

Install segeval in development mode:
```
pip install -e .
```

# Usage

`segeval` provides the command line interface `segeval_best_threshold`, which finds the
binarization threshold with the best F-score for a probability map:
```
segeval_best_threshold groundtruth.tif probabilities.tif 0.0 1.0 0.1
```
"""

from .__version__ import __version__
