import numpy as np

from pykdec.calculus import IncompatibleOperator, scalar_dtype
from pykdec.calculus.duality import check_duality


class KForm(object):
    """Discrete k-form; one scalar per cell of a given order and duality

    Parameters
    ----------
    calculus : DiscreteExteriorCalculus
        calculus the form is defined on; not owned
    order : int
    duality : PRIMAL or DUAL
    values : array_like, [calculus.k_form_length(order, duality)], optional
        initial values; zeros if omitted
    """

    def __init__(self, calculus, order, duality, values=None):
        self.calculus = calculus
        self.order = order
        self.duality = check_duality(duality)
        length = calculus.k_form_length(order, duality)
        if values is None:
            values = np.zeros(length, dtype=scalar_dtype)
        else:
            values = np.array(values, dtype=scalar_dtype).flatten()
            if not len(values) == length:
                raise IncompatibleOperator(
                    'expected {} values for a {} {}-form, got {}'.format(length, duality, order, len(values)))
        self.values = values

    @classmethod
    def zeros(cls, calculus, order, duality):
        return cls(calculus, order, duality)

    @classmethod
    def ones(cls, calculus, order, duality):
        return cls(calculus, order, duality, np.ones(calculus.k_form_length(order, duality)))

    @classmethod
    def dirac(cls, calculus, cell, order, duality):
        """Form that is one on a single cell, and zero elsewhere"""
        form = cls(calculus, order, duality)
        form.values[calculus.get_cell_index(cell)] = 1
        return form

    @property
    def space(self):
        """(order, duality) tag of the form"""
        return self.order, self.duality

    @property
    def length(self):
        return len(self.values)

    def __len__(self):
        return len(self.values)

    def get_scell(self, index):
        return self.calculus.get_scell(self.order, self.duality, index)

    def get_index(self, cell):
        return self.calculus.get_cell_index(cell)

    def clear(self):
        self.values[:] = 0

    def copy(self):
        return type(self)(self.calculus, self.order, self.duality, self.values.copy())

    def is_valid(self):
        return len(self.values) == self.calculus.k_form_length(self.order, self.duality)

    def _check_compatible(self, other):
        if not isinstance(other, KForm):
            raise IncompatibleOperator('cannot combine a k-form with {}'.format(type(other).__name__))
        if other.calculus is not self.calculus:
            raise IncompatibleOperator('forms belong to different calculi')
        if not other.space == self.space:
            raise IncompatibleOperator('cannot combine a {} with a {} form'.format(self.space, other.space))

    def _new(self, values):
        return type(self)(self.calculus, self.order, self.duality, values)

    def __add__(self, other):
        self._check_compatible(other)
        return self._new(self.values + other.values)

    def __sub__(self, other):
        self._check_compatible(other)
        return self._new(self.values - other.values)

    def __neg__(self):
        return self._new(-self.values)

    def __mul__(self, scalar):
        if isinstance(scalar, KForm):
            raise IncompatibleOperator('use inner to take the product of two forms')
        if not np.isscalar(scalar):
            return NotImplemented
        return self._new(self.values * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar):
        return self._new(self.values / scalar)

    def inner(self, other):
        """Euclidean inner product of the coefficient vectors"""
        self._check_compatible(other)
        return float(np.dot(self.values, other.values))

    def __repr__(self):
        return 'KForm(order={}, duality={}, length={})'.format(self.order, self.duality, self.length)
