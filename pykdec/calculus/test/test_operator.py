import numpy as np
import numpy.testing as npt
import pytest
import scipy.sparse

from pykdec.calculus import IncompatibleOperator
from pykdec.calculus.calculus import DiscreteExteriorCalculus
from pykdec.calculus.duality import PRIMAL, DUAL
from pykdec.calculus.kform import KForm
from pykdec.calculus.operator import LinearOperator


@pytest.fixture(params=['sparse', 'dense'])
def calculus(request):
    return DiscreteExteriorCalculus.from_digital_set([[0, 0], [1, 0], [1, 1]], backend=request.param)


def test_backend(calculus):
    d0 = calculus.derivative(0)
    if calculus.backend == 'sparse':
        assert scipy.sparse.issparse(d0.matrix)
    else:
        assert isinstance(d0.matrix, np.ndarray)
    assert d0.shape == (calculus.k_form_length(1, PRIMAL), calculus.k_form_length(0, PRIMAL))
    assert d0.source == (0, PRIMAL)
    assert d0.target == (1, PRIMAL)


def test_apply(calculus):
    d0 = calculus.derivative(0)
    result = d0 * KForm.ones(calculus, 0, PRIMAL)
    assert result.space == (1, PRIMAL)
    npt.assert_allclose(result.values, 0)
    with pytest.raises(IncompatibleOperator):
        d0 * KForm.ones(calculus, 1, PRIMAL)
    with pytest.raises(IncompatibleOperator):
        d0.apply(np.ones(d0.shape[1]))


def test_compose(calculus):
    d0, d1 = calculus.derivative(0), calculus.derivative(1)
    dd = d1 * d0
    assert dd.source == (0, PRIMAL) and dd.target == (2, PRIMAL)
    npt.assert_allclose(dd.todense(), 0)
    npt.assert_allclose((d1 @ d0).todense(), 0)
    with pytest.raises(IncompatibleOperator):
        d0 * d1


def test_linear_combination(calculus):
    i = calculus.identity(1, DUAL)
    npt.assert_allclose((i + i).todense(), 2 * np.eye(i.shape[0]))
    npt.assert_allclose((i - 3 * i).todense(), -2 * np.eye(i.shape[0]))
    npt.assert_allclose((-i * 2.).todense(), -2 * np.eye(i.shape[0]))
    with pytest.raises(IncompatibleOperator):
        i + calculus.identity(1, PRIMAL)
    with pytest.raises(IncompatibleOperator):
        i + calculus.clone().identity(1, DUAL)


def test_transpose(calculus):
    d0 = calculus.derivative(0)
    assert d0.T.source == d0.target
    assert d0.T.target == d0.source
    npt.assert_allclose(d0.transpose().todense(), d0.todense().T)


def test_shape_check(calculus):
    with pytest.raises(IncompatibleOperator):
        LinearOperator(calculus, 0, PRIMAL, 1, PRIMAL, np.zeros((2, 2)))
    zero = LinearOperator(calculus, 0, PRIMAL, 2, DUAL)
    assert zero.shape == (calculus.k_form_length(2, DUAL), calculus.k_form_length(0, PRIMAL))
    assert zero.nnz == 0

    d0 = calculus.derivative(0)
    assert d0.nnz == 2 * d0.shape[0]
    d0.clear()
    assert d0.nnz == 0
    assert 'primal 0-form -> primal 1-form' in repr(d0)


def test_backends_agree():
    points = [[0, 0], [1, 0], [1, 1]]
    sparse = DiscreteExteriorCalculus.from_digital_set(points, backend='sparse')
    dense = DiscreteExteriorCalculus.from_digital_set(points, backend='dense')
    for duality in (PRIMAL, DUAL):
        npt.assert_allclose(sparse.laplace(duality).todense(), dense.laplace(duality).todense())
