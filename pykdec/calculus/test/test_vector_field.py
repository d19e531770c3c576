import numpy as np
import numpy.testing as npt
import pytest

from pykdec.calculus import IncompatibleOperator
from pykdec.calculus.calculus import DiscreteExteriorCalculus
from pykdec.calculus.duality import PRIMAL, DUAL
from pykdec.calculus.kform import KForm
from pykdec.calculus.vector_field import VectorField


@pytest.fixture
def calculus():
    return DiscreteExteriorCalculus.from_digital_set([[0, 0], [1, 0]])


def test_construct(calculus):
    field = VectorField(calculus, PRIMAL)
    assert field.coordinates.shape == (6, 2)
    assert len(VectorField(calculus, DUAL)) == 2
    with pytest.raises(IncompatibleOperator):
        VectorField(calculus, DUAL, np.zeros((6, 2)))


def test_components(calculus):
    field = VectorField.constant(calculus, DUAL, [3, 4])
    npt.assert_allclose(field.extract_zero_form(1).values, [4, 4])
    npt.assert_allclose(field.intensities().values, [5, 5])
    npt.assert_allclose(field.normalized().coordinates, [[.6, .8], [.6, .8]])

    field.set_arrow(0, [0, 0])
    npt.assert_allclose(field.normalized(epsilon=1e-9).get_arrow(0), [0, 0])
    assert field.get_scell(1).cell == (3, 1)

    rebuilt = VectorField.from_zero_forms([field.extract_zero_form(d) for d in range(2)])
    npt.assert_allclose(rebuilt.coordinates, field.coordinates)


def test_from_zero_forms(calculus):
    with pytest.raises(IncompatibleOperator):
        VectorField.from_zero_forms([KForm(calculus, 0, PRIMAL)])
    with pytest.raises(IncompatibleOperator):
        VectorField.from_zero_forms([KForm(calculus, 0, PRIMAL), KForm(calculus, 0, DUAL)])


def test_arithmetic(calculus):
    a = VectorField.constant(calculus, PRIMAL, [1, 0])
    b = VectorField.constant(calculus, PRIMAL, [0, 2])
    npt.assert_allclose((a + b).get_arrow(3), [1, 2])
    npt.assert_allclose((a - b).get_arrow(3), [1, -2])
    npt.assert_allclose((2 * -a).get_arrow(0), [-2, 0])
    with pytest.raises(IncompatibleOperator):
        a + VectorField(calculus, DUAL)
    c = a.copy()
    c.clear()
    assert a.is_valid() and c.coordinates.sum() == 0 and a.coordinates.sum() == 6
