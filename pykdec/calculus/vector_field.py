import numpy as np

from pykdec.calculus import IncompatibleOperator, scalar_dtype
from pykdec.calculus.duality import check_duality
from pykdec.calculus.kform import KForm


class VectorField(object):
    """Vector in ambient space attached to each primal or dual vertex

    Parameters
    ----------
    calculus : DiscreteExteriorCalculus
    duality : PRIMAL or DUAL
        primal vector fields live on primal 0-cells, dual ones on dual 0-cells
    coordinates : array_like, [n_vertices, dim_ambient], optional
        zeros if omitted
    """

    def __init__(self, calculus, duality, coordinates=None):
        self.calculus = calculus
        self.duality = check_duality(duality)
        shape = calculus.k_form_length(0, duality), calculus.dim_ambient
        if coordinates is None:
            coordinates = np.zeros(shape, dtype=scalar_dtype)
        else:
            coordinates = np.array(coordinates, dtype=scalar_dtype)
            if not coordinates.shape == shape:
                raise IncompatibleOperator('expected coordinates of shape {}, got {}'.format(shape, coordinates.shape))
        self.coordinates = coordinates

    @classmethod
    def from_zero_forms(cls, forms):
        """Assemble a vector field from one 0-form per ambient direction"""
        forms = list(forms)
        calculus, duality = forms[0].calculus, forms[0].duality
        if not len(forms) == calculus.dim_ambient:
            raise IncompatibleOperator('expected {} components, got {}'.format(calculus.dim_ambient, len(forms)))
        for f in forms:
            if f.calculus is not calculus or not f.space == (0, duality):
                raise IncompatibleOperator('components should be {} 0-forms of the same calculus'.format(duality))
        return cls(calculus, duality, np.stack([f.values for f in forms], axis=1))

    @classmethod
    def constant(cls, calculus, duality, vector):
        """Field with the same vector at every vertex"""
        vector = np.asarray(vector, dtype=scalar_dtype)
        n = calculus.k_form_length(0, duality)
        return cls(calculus, duality, np.tile(vector, (n, 1)))

    @property
    def length(self):
        return len(self.coordinates)

    def __len__(self):
        return len(self.coordinates)

    def get_scell(self, index):
        return self.calculus.get_scell(0, self.duality, index)

    def get_arrow(self, index):
        return self.coordinates[index].copy()

    def set_arrow(self, index, arrow):
        self.coordinates[index] = arrow

    def extract_zero_form(self, direction):
        """0-form holding the component of the field along an ambient direction"""
        return KForm(self.calculus, 0, self.duality, self.coordinates[:, direction])

    def intensities(self):
        """0-form holding the euclidian norm of the field"""
        return KForm(self.calculus, 0, self.duality, np.linalg.norm(self.coordinates, axis=1))

    def normalized(self, epsilon=0.):
        """Unit length copy of the field; vectors with norm not exceeding epsilon are set to zero"""
        norm = np.linalg.norm(self.coordinates, axis=1)
        keep = norm > epsilon
        coordinates = np.zeros_like(self.coordinates)
        coordinates[keep] = self.coordinates[keep] / norm[keep, None]
        return type(self)(self.calculus, self.duality, coordinates)

    def clear(self):
        self.coordinates[:] = 0

    def copy(self):
        return type(self)(self.calculus, self.duality, self.coordinates.copy())

    def is_valid(self):
        return self.coordinates.shape == (self.calculus.k_form_length(0, self.duality), self.calculus.dim_ambient)

    def _check_compatible(self, other):
        if not isinstance(other, VectorField):
            raise IncompatibleOperator('cannot combine a vector field with {}'.format(type(other).__name__))
        if other.calculus is not self.calculus or other.duality != self.duality:
            raise IncompatibleOperator('vector fields live on different spaces')

    def __add__(self, other):
        self._check_compatible(other)
        return type(self)(self.calculus, self.duality, self.coordinates + other.coordinates)

    def __sub__(self, other):
        self._check_compatible(other)
        return type(self)(self.calculus, self.duality, self.coordinates - other.coordinates)

    def __neg__(self):
        return type(self)(self.calculus, self.duality, -self.coordinates)

    def __mul__(self, scalar):
        if not np.isscalar(scalar):
            return NotImplemented
        return type(self)(self.calculus, self.duality, self.coordinates * scalar)

    __rmul__ = __mul__

    def __repr__(self):
        return 'VectorField(duality={}, length={}, dim_ambient={})'.format(
            self.duality, self.length, self.calculus.dim_ambient)
