"""Binarization and labeling used to turn probability maps into label maps for evaluation.
"""

from .watershed import binarize, label_components, thin_borders
