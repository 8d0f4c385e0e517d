import argparse
import logging
import sys
from typing import Optional

import imageio.v3 as imageio

from .metrics import MetricConfig, MetricFamily
from .threshold import ThresholdSweep, get_thresholds, sweep_thresholds


def find_best_threshold(
    groundtruth_path: str,
    probabilities_path: str,
    min_threshold: float,
    max_threshold: float,
    step_threshold: float,
    config: MetricConfig,
    n_threads: Optional[int] = None,
    verbose: bool = False,
) -> Optional[ThresholdSweep]:
    """Find the threshold with the best F-score for a probability map stored in an image file.

    Args:
        groundtruth_path: Path to the groundtruth image or stack.
        probabilities_path: Path to the probability map or stack.
        min_threshold: The first threshold.
        max_threshold: The last threshold.
        step_threshold: The distance between thresholds.
        config: The metric configuration.
        n_threads: Number of threads for processing stacks, by default all are used.
        verbose: Verbosity flag.

    Returns:
        The sweep results. None if the threshold range is invalid.
    """
    groundtruth = imageio.imread(groundtruth_path)
    probabilities = imageio.imread(probabilities_path)
    return sweep_thresholds(
        probabilities, groundtruth, min_threshold, max_threshold, step_threshold,
        config=config, score="f_score", n_threads=n_threads, verbose=verbose,
    )


def main(argv=None):
    """@private
    """
    parser = argparse.ArgumentParser(
        description="Find the binarization threshold of a probability map with the best F-score."
    )
    parser.add_argument("groundtruth", help="The groundtruth image or stack.")
    parser.add_argument("probabilities", help="The probability map or stack.")
    parser.add_argument("min_threshold", type=float)
    parser.add_argument("max_threshold", type=float)
    parser.add_argument("step_threshold", type=float)
    parser.add_argument("-m", "--metric", default="rand", choices=[family.value for family in MetricFamily])
    parser.add_argument("-f", "--foreground_restricted", action="store_true")
    parser.add_argument("-t", "--thinning", action="store_true")
    parser.add_argument("-n", "--n_threads", type=int, default=None)
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )

    if get_thresholds(args.min_threshold, args.max_threshold, args.step_threshold) is None:
        parser.error(
            f"invalid threshold range {args.min_threshold}, {args.max_threshold}, {args.step_threshold}: "
            "expected 0 <= min_threshold <= max_threshold <= 1 and step_threshold > 0"
        )

    config = MetricConfig(
        MetricFamily(args.metric), foreground_restricted=args.foreground_restricted, thinning=args.thinning
    )
    sweep = find_best_threshold(
        args.groundtruth, args.probabilities, args.min_threshold, args.max_threshold, args.step_threshold,
        config=config, n_threads=args.n_threads, verbose=args.verbose,
    )
    if sweep is None or sweep.best_score is None:
        print("Could not compute the F-score", file=sys.stderr)
        return 1

    print("Best F-score:", sweep.best_score, "at threshold", sweep.best_threshold)
    return 0


if __name__ == "__main__":
    sys.exit(main())
