"""Construction of a calculus from digital sets and sets of top dimensional cells

Cells are inserted by increasing dimension, then by coordinates,
so that the indices of the resulting calculus do not depend on the order of the input.
"""

import logging
from collections import Counter

import numpy as np
import numpy_indexed as npi

from pykdec.khalimsky import KhalimskySpace, SCell, POS
from pykdec.calculus import InvalidSpace
from pykdec.calculus.calculus import DiscreteExteriorCalculus


logger = logging.getLogger(__name__)


def _faces(kspace, top, dim_embedded, add_border):
    """Faces of a set of top cells

    With add_border, all faces in the closure of the set are returned.
    Otherwise only faces covered by as many cells of the set as a face in the interior of a flat region;
    for a full dimensional set these are the faces whose complete star lies in the set.
    """
    count = Counter(f for c in top for f in kspace.faces(c))
    if add_border:
        return set(count)
    return {f for f, k in count.items() if k >= 2 ** (dim_embedded - kspace.dim(f))}


def from_n_cells(cells, add_border=True, dim_embedded=None, dim_ambient=None, backend='sparse'):
    """Calculus over a set of top dimensional cells and their faces

    Parameters
    ----------
    cells : iterable of SCell or tuple of int
        cells of equal dimension; signed cells keep their sign, unsigned ones are inserted positively
    add_border : bool
        if True, the complete closure of the set is inserted; otherwise only the interior faces
    dim_embedded : int, optional
        dimension of the cells; inferred from the first cell if omitted
    dim_ambient : int, optional
        number of Khalimsky coordinates; inferred from the first cell if omitted
    backend : {'sparse', 'dense'}

    Returns
    -------
    DiscreteExteriorCalculus
        with all size ratios equal to one
    """
    cells = [c if isinstance(c, SCell) else SCell(tuple(c), POS) for c in cells]
    if (dim_ambient is None or dim_embedded is None) and not cells:
        raise ValueError('Cannot infer the dimensions of an empty set of cells')
    if dim_ambient is None:
        dim_ambient = len(cells[0].cell)
    kspace = KhalimskySpace(dim_ambient)
    if dim_embedded is None:
        dim_embedded = kspace.dim(cells[0])

    top = {}
    for c in cells:
        cell = kspace.cell(c.cell)
        if not kspace.dim(cell) == dim_embedded:
            raise ValueError('Expected cells of dimension {}, got {}'.format(dim_embedded, cell))
        top[cell] = c.sign

    calculus = DiscreteExteriorCalculus(dim_embedded, dim_ambient, backend=backend)
    faces = _faces(kspace, top, dim_embedded, add_border)
    for cell in sorted(faces.union(top), key=lambda c: (kspace.dim(c), c)):
        calculus.insert_scell(SCell(cell, top.get(cell, POS)))
    logger.debug('built calculus from %d top cells: %s', len(top), calculus.counts())
    return calculus


def from_digital_set(points, add_border=True, dim_ambient=None, backend='sparse'):
    """Calculus over the spels of a set of digital points

    Parameters
    ----------
    points : ndarray, [n_points, n_dim], int
        duplicate points are ignored
    add_border : bool
        if True, the boundary of the set is part of the complex;
        otherwise only faces whose full star of spels lies in the set are inserted
    dim_ambient : int, optional
        if larger than n_dim, the set is placed in the plane where the remaining coordinates are zero
    backend : {'sparse', 'dense'}

    Returns
    -------
    DiscreteExteriorCalculus
        with dim_embedded equal to n_dim
    """
    points = np.asarray(points, dtype=np.int64)
    if not points.ndim == 2:
        raise ValueError('Expected an array of points of shape [n_points, n_dim]')
    n_dim = points.shape[1]
    dim_ambient = n_dim if dim_ambient is None else dim_ambient
    if dim_ambient < n_dim:
        raise InvalidSpace('Cannot place a {}-dimensional set in a {}-dimensional space'.format(n_dim, dim_ambient))

    padding = (0,) * (dim_ambient - n_dim)
    points = npi.unique(points) if len(points) else points
    kspace = KhalimskySpace(n_dim)
    spels = [kspace.spel(p) + padding for p in points]
    return from_n_cells(spels, add_border=add_border, dim_embedded=n_dim, dim_ambient=dim_ambient, backend=backend)
