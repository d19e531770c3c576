import numpy as np
import numpy.testing as npt
import pytest

from pykdec import synthetic
from pykdec.calculus import IncompatibleOperator
from pykdec.calculus.calculus import DiscreteExteriorCalculus
from pykdec.calculus.duality import PRIMAL, DUAL
from pykdec.calculus.kform import KForm
from pykdec.calculus.solver import CalculusSolver


@pytest.fixture(params=['sparse', 'dense'])
def calculus(request):
    points = synthetic.box_points((4, 4))
    return DiscreteExteriorCalculus.from_digital_set(points, backend=request.param)


@pytest.mark.parametrize('method', ['lu', 'minres'])
def test_screened_poisson(calculus, method):
    operator = calculus.laplace() - calculus.identity(0)
    rhs = KForm.dirac(calculus, (4, 4), 0, PRIMAL)
    x = CalculusSolver(method).compute(operator).solve(rhs)
    assert x.space == (0, PRIMAL)
    npt.assert_allclose((operator * x).values, rhs.values, atol=1e-4)


def test_cg(calculus):
    operator = calculus.identity(0, DUAL) - calculus.laplace(DUAL)
    rhs = KForm.ones(calculus, 0, DUAL)
    solver = CalculusSolver('cg')
    x = solver.compute(operator).solve(rhs)
    assert solver.info == 0
    npt.assert_allclose((operator * x).values, rhs.values, atol=1e-4)


def test_errors(calculus):
    with pytest.raises(ValueError):
        CalculusSolver('qr')
    solver = CalculusSolver()
    with pytest.raises(ValueError):
        solver.solve(KForm.ones(calculus, 0, PRIMAL))
    with pytest.raises(IncompatibleOperator):
        solver.compute(calculus.derivative(0))
    solver.compute(calculus.identity(1))
    with pytest.raises(IncompatibleOperator):
        solver.solve(KForm.ones(calculus, 0, PRIMAL))
