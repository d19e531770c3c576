"""Khalimsky space cell arithmetic

A cell is represented by its Khalimsky coordinates; a tuple of integers, one per axis.
An odd coordinate means the cell is open along that axis, so the dimension of a cell is the
number of its odd coordinates. The top-dimensional cell (spel) of digital point p sits at 2p+1,
its vertex (pointel) at 2p.

Signed cells carry an orientation of +1 or -1. Incidence signs are chosen such that the
boundary of a boundary vanishes; this is what makes the exterior derivative close.
"""

from collections import namedtuple
import itertools

import numpy as np
from cached_property import cached_property

from pykdec.util import permutation_parity


POS = 1
NEG = -1

SCell = namedtuple('SCell', ['cell', 'sign'])


def face_sign(open_below, up):
    """Orientation of the face one step along an open axis, relative to its cell

    Parameters
    ----------
    open_below : int or ndarray of int
        number of open axes of the cell preceding the axis stepped along
    up : bool
        if True, the face in the positive direction

    Returns
    -------
    int or ndarray of int
        +1 or -1
    """
    parity = 1 - 2 * (np.asarray(open_below) & 1)
    return parity if up else -parity


class KhalimskySpace(object):
    """Cellular grid of a given dimension

    Parameters
    ----------
    n_dim : int
        dimension of the space
    """

    def __init__(self, n_dim):
        if n_dim < 1:
            raise ValueError('Khalimsky space needs at least one dimension')
        self.n_dim = int(n_dim)

    @cached_property
    def unit_vectors(self):
        """Khalimsky offsets of a single step along each axis, [n_dim, n_dim]"""
        return np.eye(self.n_dim, dtype=np.int64)

    def __repr__(self):
        return 'KhalimskySpace(n_dim={})'.format(self.n_dim)

    def cell(self, coordinates):
        """Construct an unsigned cell from its Khalimsky coordinates"""
        coordinates = tuple(int(c) for c in coordinates)
        if not len(coordinates) == self.n_dim:
            raise ValueError('Expected {} coordinates, got {}'.format(self.n_dim, len(coordinates)))
        return coordinates

    def signed_cell(self, coordinates, sign=POS):
        if sign not in (POS, NEG):
            raise ValueError('sign should be POS or NEG')
        return SCell(self.cell(coordinates), sign)

    def spel(self, point):
        """Top dimensional cell of a digital point"""
        return self.cell(np.asarray(point, dtype=int) * 2 + 1)

    @staticmethod
    def unsigns(scell):
        """Strip the sign of a cell; unsigned cells are returned as is"""
        if isinstance(scell, SCell):
            return scell.cell
        return tuple(scell)

    @staticmethod
    def sign(scell):
        """Sign of a cell; an unsigned cell counts as positive"""
        if isinstance(scell, SCell):
            return scell.sign
        return POS

    def dim(self, cell):
        cell = self.unsigns(cell)
        return sum(c & 1 for c in cell)

    def dirs(self, cell):
        """Axes along which the cell extends, ascending"""
        cell = self.unsigns(cell)
        return [k for k, c in enumerate(cell) if c & 1]

    def orth_dirs(self, cell):
        """Axes along which the cell is closed, ascending"""
        cell = self.unsigns(cell)
        return [k for k, c in enumerate(cell) if not c & 1]

    def direction_parity(self, cell, n_dim=None):
        """Sign of the permutation formed by the open axes followed by the closed axes

        Parameters
        ----------
        cell : cell or SCell
        n_dim : int, optional
            only the first n_dim axes are considered

        Returns
        -------
        int
            +1 or -1
        """
        cell = self.unsigns(cell)
        if n_dim is not None:
            cell = cell[:n_dim]
        open_ = [k for k, c in enumerate(cell) if c & 1]
        closed = [k for k, c in enumerate(cell) if not c & 1]
        return permutation_parity(open_ + closed)

    def centroid(self, coordinates):
        """Geometric position of cells in the units of the digital grid

        Parameters
        ----------
        coordinates : cell, or ndarray, [..., n_dim], int

        Returns
        -------
        ndarray, [..., n_dim], float
        """
        if isinstance(coordinates, SCell):
            coordinates = coordinates.cell
        return np.asarray(coordinates, dtype=float) / 2

    def neighbours(self, cell, k):
        """The two unsigned cells adjacent to cell along axis k, lower first"""
        cell = self.unsigns(cell)
        lower, upper = list(cell), list(cell)
        lower[k] -= 1
        upper[k] += 1
        return tuple(lower), tuple(upper)

    def lower_incident(self, coordinates, signs):
        """Signed boundaries of a set of cells

        For a cell with open axes a_0 < a_1 < ..., the face along a_i has orientation (-1)^i
        on the positive side and -(-1)^i on the negative side, relative to the cell.

        Parameters
        ----------
        coordinates : ndarray, [n_cells, n_dim], int
        signs : ndarray, [n_cells], int
            orientation of each cell

        Returns
        -------
        source : ndarray, [n_faces], int
            row of the cell each face bounds
        faces : ndarray, [n_faces, n_dim], int
            coordinates of the faces
        face_signs : ndarray, [n_faces], int
            orientation with which each face appears in the boundary of its cell
        """
        coordinates = np.asarray(coordinates, dtype=np.int64).reshape(-1, self.n_dim)
        signs = np.asarray(signs, dtype=np.int64)
        open_ = coordinates & 1
        open_below = np.cumsum(open_, axis=1) - open_
        source, faces, face_signs = [], [], []
        for k, step in enumerate(self.unit_vectors):
            along = np.flatnonzero(open_[:, k])
            for up in (False, True):
                source.append(along)
                faces.append(coordinates[along] + (step if up else -step))
                face_signs.append(signs[along] * face_sign(open_below[along, k], up))
        return (
            np.concatenate(source),
            np.concatenate(faces).reshape(-1, self.n_dim),
            np.concatenate(face_signs),
        )

    def faces(self, cell):
        """All cells in the closure of cell, except cell itself"""
        cell = self.unsigns(cell)
        axes = self.dirs(cell)
        options = [(-1, 0, +1) if k in axes else (0,) for k in range(self.n_dim)]
        return [
            tuple(c + o for c, o in zip(cell, offset))
            for offset in itertools.product(*options)
            if any(offset)
        ]
