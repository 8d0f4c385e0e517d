import numpy as np
from scipy.ndimage import distance_transform_edt
from skimage.measure import label
from skimage.segmentation import watershed


def binarize(image: np.ndarray, threshold: float, invert: bool = False) -> np.ndarray:
    """Binarize an image at a threshold.

    Args:
        image: The input image, e.g. a probability map.
        threshold: The threshold. Values strictly above it are foreground.
        invert: Whether to invert the binarization, so that values above the threshold become background.

    Returns:
        The binary image.
    """
    binary = np.asarray(image) > threshold
    return np.logical_not(binary) if invert else binary


def label_components(binary_image: np.ndarray, connectivity: int = 1) -> np.ndarray:
    """Label the connected components of a binary image.

    Args:
        binary_image: The binary input image.
        connectivity: The connectivity, 1 corresponds to the direct neighborhood (4-connected in 2d).

    Returns:
        The label map, background is 0.
    """
    return label(np.asarray(binary_image, dtype="bool"), background=0, connectivity=connectivity).astype("uint32")


def thin_borders(binary_image: np.ndarray, connectivity: int = 1) -> np.ndarray:
    """Thin the borders between objects to lines of one pixel width.

    The connected components of the foreground are used as seeds for a watershed on the
    distance transform of the background. The watershed grows the objects until they meet,
    the lines where they meet are labeled as 0.

    Args:
        binary_image: The binary input image, foreground corresponds to object interiors.
        connectivity: The connectivity for the seeds and the watershed.

    Returns:
        The label map with thinned borders.
    """
    binary_image = np.asarray(binary_image, dtype="bool")
    seeds = label_components(binary_image, connectivity)
    if seeds.max() == 0:
        return seeds
    hmap = distance_transform_edt(np.logical_not(binary_image))
    thinned = watershed(hmap, markers=seeds, connectivity=connectivity, watershed_line=True)
    return thinned.astype("uint32")
