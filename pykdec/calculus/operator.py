import numpy as np
import scipy.sparse

from pykdec.calculus import IncompatibleOperator
from pykdec.calculus.duality import check_duality
from pykdec.calculus.kform import KForm
from pykdec.sparse import as_backend, sparse_zeros, todense


class LinearOperator(object):
    """Linear map between two k-form spaces of a calculus

    Parameters
    ----------
    calculus : DiscreteExteriorCalculus
        calculus the operator is defined on; not owned
    source_order, source_duality : int, PRIMAL or DUAL
        space of the forms the operator applies to
    target_order, target_duality : int, PRIMAL or DUAL
        space of the forms the operator produces
    matrix : sparse or dense matrix, [target_length, source_length], optional
        stored in the representation of the backend of the calculus; zeros if omitted

    Notes
    -----
    The (order, duality) tags of both spaces are checked whenever operators are combined,
    so that only operators between matching spaces can be composed or added
    """

    def __init__(self, calculus, source_order, source_duality, target_order, target_duality, matrix=None):
        self.calculus = calculus
        self.source = source_order, check_duality(source_duality)
        self.target = target_order, check_duality(target_duality)
        shape = (
            calculus.k_form_length(target_order, target_duality),
            calculus.k_form_length(source_order, source_duality),
        )
        if matrix is None:
            matrix = sparse_zeros(shape)
        if not matrix.shape == shape:
            raise IncompatibleOperator(
                'matrix of shape {} does not map {} to {}; expected {}'.format(
                    matrix.shape, self.source, self.target, shape))
        self.matrix = as_backend(matrix, calculus.backend)

    @property
    def shape(self):
        return self.matrix.shape

    @property
    def source_order(self):
        return self.source[0]

    @property
    def source_duality(self):
        return self.source[1]

    @property
    def target_order(self):
        return self.target[0]

    @property
    def target_duality(self):
        return self.target[1]

    def _new(self, source, target, matrix):
        return type(self)(self.calculus, source[0], source[1], target[0], target[1], matrix)

    def _check_calculus(self, other):
        if other.calculus is not self.calculus:
            raise IncompatibleOperator('operands belong to different calculi')

    def transpose(self):
        return self._new(self.target, self.source, self.matrix.T)

    @property
    def T(self):
        return self.transpose()

    def apply(self, form):
        """Apply the operator to a k-form of its source space"""
        if not isinstance(form, KForm):
            raise IncompatibleOperator('cannot apply an operator to {}'.format(type(form).__name__))
        self._check_calculus(form)
        if not form.space == self.source:
            raise IncompatibleOperator('operator from {} applied to a {} form'.format(self.source, form.space))
        values = np.asarray(self.matrix.dot(form.values)).flatten()
        return KForm(self.calculus, self.target[0], self.target[1], values)

    def compose(self, other):
        """Operator that applies other first, then self"""
        self._check_calculus(other)
        if not other.target == self.source:
            raise IncompatibleOperator('cannot compose an operator from {} with an operator to {}'.format(
                self.source, other.target))
        return self._new(other.source, self.target, self.matrix.dot(other.matrix))

    def __mul__(self, other):
        if isinstance(other, LinearOperator):
            return self.compose(other)
        if isinstance(other, KForm):
            return self.apply(other)
        if np.isscalar(other):
            return self._new(self.source, self.target, self.matrix * other)
        return NotImplemented

    def __rmul__(self, other):
        if np.isscalar(other):
            return self._new(self.source, self.target, self.matrix * other)
        return NotImplemented

    def __matmul__(self, other):
        if isinstance(other, (LinearOperator, KForm)):
            return self * other
        return NotImplemented

    def _check_same_spaces(self, other):
        if not isinstance(other, LinearOperator):
            raise IncompatibleOperator('cannot add an operator to {}'.format(type(other).__name__))
        self._check_calculus(other)
        if not (self.source, self.target) == (other.source, other.target):
            raise IncompatibleOperator('cannot add operators {} -> {} and {} -> {}'.format(
                self.source, self.target, other.source, other.target))

    def __add__(self, other):
        self._check_same_spaces(other)
        return self._new(self.source, self.target, self.matrix + other.matrix)

    def __sub__(self, other):
        self._check_same_spaces(other)
        return self._new(self.source, self.target, self.matrix - other.matrix)

    def __neg__(self):
        return self._new(self.source, self.target, -self.matrix)

    def clear(self):
        self.matrix = as_backend(sparse_zeros(self.shape), self.calculus.backend)

    def todense(self):
        return todense(self.matrix)

    @property
    def nnz(self):
        if scipy.sparse.issparse(self.matrix):
            return self.matrix.count_nonzero()
        return int(np.count_nonzero(self.matrix))

    def __repr__(self):
        return 'LinearOperator({} {}-form -> {} {}-form, shape={})'.format(
            self.source[1], self.source[0], self.target[1], self.target[0], self.shape)
