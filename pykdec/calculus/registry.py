"""Registry mapping the cells of a calculus to k-form indices

Every unsigned cell registered in a calculus gets an index, unique among the cells of the same dimension.
A primal k-form and a dual (n-k)-form are both indexed by the k-cells; hence the shared buckets,
selected through `actual_order`.

Only one signed representative of each cell is stored; its sign is recorded in `Property.flipped`.
"""

import logging

import numpy as np
import numpy_indexed as npi

from pykdec.khalimsky import SCell, NEG
from pykdec.calculus import CellNotFound, index_dtype, sign_dtype
from pykdec.calculus.duality import PRIMAL, check_duality


logger = logging.getLogger(__name__)


class Property(object):
    """Per cell data of a calculus

    Attributes
    ----------
    size_ratio : float
        ratio of dual cell size over primal cell size
        primal hodges multiply by it, dual hodges divide by it
    index : int
        position of the cell value in k-form containers
    flipped : bool
        True if the registered signed cell is negative
    """
    __slots__ = ('size_ratio', 'index', 'flipped')

    def __init__(self, size_ratio, index, flipped):
        self.size_ratio = size_ratio
        self.index = index
        self.flipped = flipped

    def __eq__(self, other):
        if not isinstance(other, Property):
            return NotImplemented
        return (self.size_ratio, self.index, self.flipped) == (other.size_ratio, other.index, other.flipped)

    def __repr__(self):
        return 'Property(size_ratio={}, index={}, flipped={})'.format(self.size_ratio, self.index, self.flipped)

    def copy(self):
        return Property(self.size_ratio, self.index, self.flipped)


class CellRegistry(object):
    """Bijection between the registered cells and (order, index) pairs

    Parameters
    ----------
    dim_embedded : int
        highest cell dimension that can be registered

    Notes
    -----
    Erased cells leave a tombstone in their bucket, so that the indices of the remaining cells are stable.
    Tombstoned slots are handed out again to later insertions of the same order.
    """

    def __init__(self, dim_embedded):
        self.dim_embedded = dim_embedded
        self.properties = {}
        # one list of signed cells per order; None marks an erased slot
        self.indexed_cells = [[] for _ in range(dim_embedded + 1)]
        self.free = [[] for _ in range(dim_embedded + 1)]

    def __len__(self):
        return len(self.properties)

    def __contains__(self, cell):
        return cell in self.properties

    def __iter__(self):
        return iter(self.properties.items())

    def copy(self):
        other = CellRegistry(self.dim_embedded)
        other.properties = {c: p.copy() for c, p in self.properties.items()}
        other.indexed_cells = [list(b) for b in self.indexed_cells]
        other.free = [list(f) for f in self.free]
        return other

    def actual_order(self, order, duality):
        """Dimension of the cells indexing k-forms of given order and duality"""
        check_duality(duality)
        return order if duality == PRIMAL else self.dim_embedded - order

    def check_order(self, order):
        if not 0 <= order <= self.dim_embedded:
            raise ValueError('order {} out of range [0, {}]'.format(order, self.dim_embedded))
        return order

    def insert(self, scell, dim, size_ratio=1):
        """Register a signed cell of a given dimension

        Returns
        -------
        bool
            True if the cell was not registered before
        """
        if not 0 <= dim <= self.dim_embedded:
            raise ValueError('Cannot insert a {}-cell in a calculus of dimension {}'.format(dim, self.dim_embedded))
        cell, sign = scell
        flipped = sign == NEG
        prop = self.properties.get(cell)
        if prop is not None:
            prop.size_ratio = size_ratio
            prop.flipped = flipped
            self.indexed_cells[dim][prop.index] = SCell(cell, sign)
            return False

        bucket = self.indexed_cells[dim]
        if self.free[dim]:
            index = self.free[dim].pop()
            bucket[index] = SCell(cell, sign)
        else:
            index = len(bucket)
            bucket.append(SCell(cell, sign))
        self.properties[cell] = Property(size_ratio, index, flipped)
        return True

    def erase(self, cell, dim):
        prop = self.properties.pop(cell, None)
        if prop is None:
            return False
        self.indexed_cells[dim][prop.index] = None
        self.free[dim].append(prop.index)
        logger.debug('erased cell %s leaving a hole at index %d of order %d', cell, prop.index, dim)
        return True

    def get(self, cell):
        try:
            return self.properties[cell]
        except KeyError:
            raise CellNotFound(cell)

    def get_scell(self, order, duality, index):
        actual = self.check_order(self.actual_order(order, duality))
        bucket = self.indexed_cells[actual]
        if not 0 <= index < len(bucket) or bucket[index] is None:
            raise CellNotFound('no cell at index {} of order {} {}'.format(index, order, duality))
        return bucket[index]

    def length(self, actual_order):
        """Number of slots in a bucket; includes erased slots"""
        return len(self.indexed_cells[self.check_order(actual_order)])

    def live(self, actual_order):
        """Arrays describing the registered cells of a bucket

        Returns
        -------
        index : ndarray, [n_live], index_dtype
            slot index of each live cell
        coordinates : ndarray, [n_live, n_dim], int
            Khalimsky coordinates of each live cell
        sign : ndarray, [n_live], sign_dtype
            orientation of each stored signed cell
        """
        bucket = self.indexed_cells[self.check_order(actual_order)]
        index = np.array([i for i, c in enumerate(bucket) if c is not None], dtype=index_dtype)
        cells = [bucket[i] for i in index]
        n_dim = len(cells[0].cell) if cells else 0
        coordinates = np.array([c.cell for c in cells], dtype=np.int64).reshape(len(cells), n_dim)
        sign = np.array([c.sign for c in cells], dtype=sign_dtype)
        return index, coordinates, sign

    def lookup(self, actual_order, coordinates):
        """Vectorized index lookup of cells in a bucket

        Parameters
        ----------
        actual_order : int
        coordinates : ndarray, [n_queries, n_dim], int

        Returns
        -------
        index : ndarray, [n_queries], index_dtype
            index of each query cell, or -1 if it is not registered
        sign : ndarray, [n_queries], sign_dtype
            stored sign of each query cell, or 0 if it is not registered
        """
        coordinates = np.asarray(coordinates, dtype=np.int64)
        n_queries = len(coordinates)
        index = -np.ones(n_queries, dtype=index_dtype)
        sign = np.zeros(n_queries, dtype=sign_dtype)
        live_index, live_coordinates, live_sign = self.live(actual_order)
        if n_queries == 0 or len(live_index) == 0:
            return index, sign
        found = npi.indices(live_coordinates, coordinates, missing=-1)
        hit = found >= 0
        index[hit] = live_index[found[hit]]
        sign[hit] = live_sign[found[hit]]
        return index, sign

    def size_ratios(self, actual_order):
        """Size ratio per slot of a bucket; erased slots get nan"""
        bucket = self.indexed_cells[self.check_order(actual_order)]
        return np.array(
            [np.nan if c is None else self.properties[c.cell].size_ratio for c in bucket],
            dtype=np.float64
        )
