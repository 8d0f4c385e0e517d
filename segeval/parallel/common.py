import multiprocessing
from math import ceil
from typing import List, Optional, Tuple


def get_n_threads(n_threads: Optional[int] = None) -> int:
    """@private
    """
    n_threads = multiprocessing.cpu_count() if n_threads is None else n_threads
    if n_threads < 1:
        raise ValueError(f"Invalid number of threads {n_threads}")
    return n_threads


def get_slice_ranges(n_slices: int, n_workers: int) -> List[Tuple[int, int]]:
    """Partition the slice indices into one contiguous range per worker.

    Args:
        n_slices: The number of slices.
        n_workers: The number of workers.

    Returns:
        The begin and end index of each range. Trailing ranges may be empty.
    """
    chunk_size = max(int(ceil(n_slices / n_workers)), 1)
    return [
        (min(k * chunk_size, n_slices), min((k + 1) * chunk_size, n_slices)) for k in range(n_workers)
    ]


def check_stacks(stack_a, stack_b):
    """@private
    """
    if stack_a.shape != stack_b.shape:
        raise ValueError(f"Shape mismatch between the stacks: {stack_a.shape}, {stack_b.shape}")
    if stack_a.ndim != 3:
        raise ValueError(f"Expected stacks of 2d slices, got {stack_a.ndim}d data instead")
    if stack_a.shape[0] == 0:
        raise ValueError("Expected stacks with at least one slice, got an empty stack")
