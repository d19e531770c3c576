"""Generation of some simple digital sets"""

import numpy as np

from pykdec.calculus import index_dtype


def box_points(shape):
    """All digital points of a box

    Parameters
    ----------
    shape : tuple of int
        number of points along each axis

    Returns
    -------
    ndarray, [prod(shape), len(shape)], int
        points in lexicographic order
    """
    grid = np.indices(shape, dtype=index_dtype)
    return grid.reshape(len(shape), -1).T


def random_digital_set(shape, probability=0.25, seed=0):
    """Random subset of the points of a box

    Parameters
    ----------
    shape : tuple of int
    probability : float
        probability of each point of the box to be part of the set
    seed : int
        seed of the random number generator; equal seeds give equal sets

    Returns
    -------
    ndarray, [n_points, len(shape)], int
    """
    keep = np.random.RandomState(seed).uniform(size=shape) < probability
    return np.argwhere(keep).astype(index_dtype)


def ball_points(radius, n_dim=2):
    """Digital points within euclidian distance radius of the origin"""
    r = int(np.floor(radius))
    points = box_points((2 * r + 1,) * n_dim) - r
    return points[np.linalg.norm(points, axis=1) <= radius]
