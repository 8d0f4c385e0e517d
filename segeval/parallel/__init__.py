"""Parallel evaluation of stacks of 2d slices.
"""

from .slices import SliceAverage, average_over_slices, map_slice_ranges
