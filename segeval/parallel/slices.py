# IMPORTANT do threadctl import first (before numpy imports)
from threadpoolctl import threadpool_limits

import logging
import threading
# would be nice to use dask for all of this instead of concurrent.futures
# so that this could be used on a cluster as well
from concurrent import futures
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from numpy.typing import ArrayLike
from tqdm import tqdm

from .common import check_stacks, get_n_threads, get_slice_ranges

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SliceAverage:
    """Average of a per-slice computation over a stack.

    Slices for which the computation failed do not contribute to the sum,
    but the sum is still divided by the total number of slices.
    Check `n_failed` or `degraded` to detect such a biased average.
    """
    value: Any
    n_slices: int
    n_failed: int = 0

    @property
    def degraded(self) -> bool:
        return self.n_failed > 0


def average_over_slices(
    func: Callable[[ArrayLike, ArrayLike], Any],
    stack_a: ArrayLike,
    stack_b: ArrayLike,
    n_threads: Optional[int] = None,
    verbose: bool = False,
    label: str = "average_over_slices",
) -> Optional[SliceAverage]:
    """Apply a function to all pairs of 2d slices and average the results.

    Submits one task per slice to a thread pool and computes the macro average of the results.
    The results need to support addition and division by a number.

    Args:
        func: The function to apply to each slice pair.
        stack_a: The first stack.
        stack_b: The second stack, must have the same shape as the first.
        n_threads: Number of threads, by default all are used.
        verbose: Verbosity flag.
        label: Name of this computation, used for logging and the progress bar.

    Returns:
        The average over the slices, or None if the computation was interrupted.
    """
    check_stacks(stack_a, stack_b)
    n_slices = stack_a.shape[0]
    n_threads = get_n_threads(n_threads)

    @threadpool_limits.wrap(limits=1)  # restrict the numpy threadpool to 1 to avoid oversubscription
    def _compute_slice(z):
        return func(stack_a[z], stack_b[z])

    results = [None] * n_slices
    n_failed = 0
    with futures.ThreadPoolExecutor(n_threads) as tp:
        tasks = {tp.submit(_compute_slice, z): z for z in range(n_slices)}
        try:
            for task in tqdm(futures.as_completed(tasks), total=n_slices, desc=label, disable=not verbose):
                z = tasks[task]
                try:
                    results[z] = task.result()
                except Exception:
                    n_failed += 1
                    logger.exception(f"{label}: the computation for slice {z} failed")
        except KeyboardInterrupt:
            for task in tasks:
                task.cancel()
            logger.error(f"{label}: interrupted, the partial results are discarded")
            return None

    # sum in slice order, so that the result does not depend on the completion order
    total = None
    for result in results:
        if result is None:
            continue
        total = result if total is None else total + result

    value = None if total is None else total / n_slices
    if n_failed > 0:
        logger.warning(f"{label}: {n_failed} / {n_slices} slices failed, the average is biased")
    return SliceAverage(value=value, n_slices=n_slices, n_failed=n_failed)


def map_slice_ranges(
    func: Callable[[ArrayLike, ArrayLike], Any],
    stack_a: ArrayLike,
    stack_b: ArrayLike,
    n_threads: Optional[int] = None,
    verbose: bool = False,
    label: str = "map_slice_ranges",
) -> Optional[List[Any]]:
    """Apply a function to all pairs of 2d slices and return the per-slice results.

    The slices are partitioned into one range per worker up front. The workers claim
    the next unprocessed range until all are done and process the slices of a range sequentially.

    Args:
        func: The function to apply to each slice pair.
        stack_a: The first stack.
        stack_b: The second stack, must have the same shape as the first.
        n_threads: Number of threads, by default all are used.
        verbose: Verbosity flag.
        label: Name of this computation, used for logging and the progress bar.

    Returns:
        The results for each slice, None for slices where the computation failed.
            None instead of the list if the computation was interrupted.
    """
    check_stacks(stack_a, stack_b)
    n_slices = stack_a.shape[0]
    n_workers = max(min(get_n_threads(n_threads), n_slices), 1)
    ranges = get_slice_ranges(n_slices, n_workers)

    results = [None] * n_slices
    lock = threading.Lock()
    next_range = [0]

    def _claim_range():
        with lock:
            k = next_range[0]
            next_range[0] += 1
        return k

    with tqdm(total=n_slices, desc=label, disable=not verbose) as progress:

        @threadpool_limits.wrap(limits=1)  # restrict the numpy threadpool to 1 to avoid oversubscription
        def _worker():
            while True:
                k = _claim_range()
                if k >= n_workers:
                    return
                begin, end = ranges[k]
                for z in range(begin, end):
                    # each index is only written by the worker that claimed its range
                    try:
                        results[z] = func(stack_a[z], stack_b[z])
                    except Exception:
                        logger.exception(f"{label}: the computation for slice {z} failed")
                    progress.update(1)

        with futures.ThreadPoolExecutor(n_workers) as tp:
            workers = [tp.submit(_worker) for _ in range(n_workers)]
            try:
                for worker in workers:
                    worker.result()
            except KeyboardInterrupt:
                # the workers stop once no more ranges can be claimed
                with lock:
                    next_range[0] = n_workers
                logger.error(f"{label}: interrupted, the partial results are discarded")
                return None

    return results
