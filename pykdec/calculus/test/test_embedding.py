"""Operators of a curve should not depend on the space it is embedded in"""

import numpy as np
import numpy.testing as npt
import pytest

from pykdec.khalimsky import SCell, POS, NEG
from pykdec.util import pairs
from pykdec.calculus.calculus import DiscreteExteriorCalculus
from pykdec.calculus.duality import PRIMAL, DUAL


def lattice_path(waypoints):
    """Signed cells along an axis aligned path through Khalimsky waypoints

    Edges are oriented along the direction of travel; the end vertices get size ratio one half
    """
    waypoints = [np.array(w) for w in waypoints]
    cells = [tuple(waypoints[0])]
    signs = [POS]
    for a, b in pairs(waypoints):
        axis = np.flatnonzero(b - a)[0]
        step = int(np.sign(b - a)[axis])
        p = a.copy()
        while not np.array_equal(p, b):
            p[axis] += step
            cells.append(tuple(int(c) for c in p))
            signs.append((POS if step > 0 else NEG) if p[axis] & 1 else POS)
    ratios = [.5] + [1] * (len(cells) - 2) + [.5]
    return [(SCell(c, s), r) for c, s, r in zip(cells, signs, ratios)]


PATHS = {
    1: [(0,), (30,)],
    2: [(6, 0), (6, 2), (8, 2), (8, -2), (-2, -2), (-2, 2), (2, 2), (2, 0), (0, 0)],
    3: [(0, 0, 0), (4, 0, 0), (4, 4, 0), (0, 4, 0), (0, 2, 0), (2, 2, 0), (2, 2, 2), (2, 6, 2), (2, 6, -2), (2, 2, -2)],
}


def curve_calculus(dim_ambient):
    calculus = DiscreteExteriorCalculus(1, dim_ambient)
    for scell, ratio in lattice_path(PATHS[dim_ambient]):
        calculus.insert_scell(scell, ratio)
    return calculus


def operators(calculus):
    return {
        'primal_hodge_0': calculus.primal_hodge(0),
        'primal_hodge_1': calculus.primal_hodge(1),
        'dual_hodge_0': calculus.dual_hodge(0),
        'dual_hodge_1': calculus.dual_hodge(1),
        'derivative_0': calculus.derivative(0),
        'dual_derivative_0': calculus.derivative(0, DUAL),
        'laplace': calculus.laplace(PRIMAL),
        'dual_laplace': calculus.laplace(DUAL),
    }


def test_path():
    cells = lattice_path(PATHS[2])
    assert len(cells) == 31
    assert len(set(c.cell for c, r in cells)) == 31
    assert cells[1][0] == SCell((6, 1), POS)
    assert cells[5][0] == SCell((8, 1), NEG)
    assert [r for c, r in cells].count(.5) == 2


@pytest.mark.parametrize('dim_ambient', [2, 3])
def test_embedding(dim_ambient):
    reference = curve_calculus(1)
    embedded = curve_calculus(dim_ambient)
    assert embedded.k_form_length(0, PRIMAL) == reference.k_form_length(0, PRIMAL) == 16
    assert embedded.k_form_length(0, DUAL) == reference.k_form_length(0, DUAL) == 15
    expected = operators(reference)
    for name, op in operators(embedded).items():
        npt.assert_allclose(op.todense(), expected[name].todense(), err_msg=name)


def test_curve_laplace():
    L = curve_calculus(3).laplace().todense()
    npt.assert_allclose(L.sum(axis=1), 0, atol=1e-12)
    # end vertices have half the dual size, doubling their laplacian
    npt.assert_allclose(L[0, :2], [-2, 2])
    npt.assert_allclose(L[1, :3], [1, -2, 1])
