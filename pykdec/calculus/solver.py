"""Sparse linear solvers for equations between k-forms"""

import logging

import numpy as np
import scipy.sparse
import scipy.sparse.linalg

from pykdec.calculus import IncompatibleOperator
from pykdec.calculus.kform import KForm


logger = logging.getLogger(__name__)


METHODS = ('lu', 'cg', 'minres')


class CalculusSolver(object):
    """Solve operator * x = y for a square operator between k-forms

    Parameters
    ----------
    method : {'lu', 'cg', 'minres'}
        'lu' factorizes the operator once in `compute`;
        'cg' requires a symmetric definite operator, 'minres' a symmetric one
    kwargs : dict
        passed on to the iterative scipy solver

    Notes
    -----
    `compute` returns the solver, so that it can be chained as CalculusSolver().compute(op).solve(y)
    """

    def __init__(self, method='lu', **kwargs):
        if method not in METHODS:
            raise ValueError('Unknown method {}; expected one of {}'.format(method, METHODS))
        self.method = method
        self.kwargs = kwargs
        self.operator = None
        self.factor = None
        self.info = None

    def compute(self, operator):
        if not operator.source == operator.target:
            raise IncompatibleOperator('Can only solve for operators mapping a space onto itself, got {}'.format(
                operator))
        self.operator = operator
        self.factor = None
        if self.method == 'lu':
            self.factor = scipy.sparse.linalg.splu(scipy.sparse.csc_matrix(operator.matrix))
        return self

    def solve(self, form):
        """Solve for x in operator * x = form

        Parameters
        ----------
        form : KForm
            right hand side, in the target space of the operator

        Returns
        -------
        KForm
            in the source space of the operator
        """
        if self.operator is None:
            raise ValueError('compute should be called before solve')
        if not isinstance(form, KForm) or form.calculus is not self.operator.calculus:
            raise IncompatibleOperator('right hand side should be a k-form of the calculus of the operator')
        if not form.space == self.operator.target:
            raise IncompatibleOperator('right hand side is a {} form; expected {}'.format(
                form.space, self.operator.target))

        if self.method == 'lu':
            x = self.factor.solve(form.values)
            self.info = 0
        else:
            solver = getattr(scipy.sparse.linalg, self.method)
            x, self.info = solver(self.operator.matrix, form.values, **self.kwargs)
            if self.info < 0:
                raise ValueError('{} failed with illegal input or breakdown'.format(self.method))
            if self.info > 0:
                logger.warning('%s did not converge after %d iterations', self.method, self.info)
        order, duality = self.operator.source
        return KForm(form.calculus, order, duality, np.asarray(x).flatten())
