"""Discrete exterior calculus on a set of signed Khalimsky cells

The calculus owns a registry of cells, and builds the operators of exterior calculus from it.
Forms of complementary order and opposite duality share their index space; a primal k-form
and a dual (n-k)-form both hold one value per registered k-cell.
"""

import logging

import numpy as np

from pykdec.khalimsky import KhalimskySpace, SCell, POS, NEG
from pykdec.sparse import BACKENDS, from_triplets, normalize_l1, sparse_diagonal
from pykdec.calculus import InvalidSpace, IncompatibleOperator, SingularHodge, scalar_dtype
from pykdec.calculus.duality import PRIMAL, DUAL, opposite, check_duality
from pykdec.calculus.registry import CellRegistry
from pykdec.calculus.kform import KForm
from pykdec.calculus.vector_field import VectorField
from pykdec.calculus.operator import LinearOperator


logger = logging.getLogger(__name__)


def _entries(matrix, rows, cols):
    """Gather individual entries of a sparse or dense matrix"""
    if len(rows) == 0:
        return np.zeros(0, dtype=scalar_dtype)
    return np.asarray(matrix[rows, cols], dtype=scalar_dtype).flatten()


class DiscreteExteriorCalculus(object):
    """Discrete exterior calculus over cells of a Khalimsky space

    Parameters
    ----------
    dim_embedded : int
        dimension of the manifold the cells describe
    dim_ambient : int, optional
        dimension of the Khalimsky space the cells live in; equals dim_embedded if omitted
    backend : {'sparse', 'dense'}
        representation of operator matrices

    Notes
    -----
    Cells are inserted with `insert_scell`; boundary cells of inserted cells should be inserted as well,
    but this is not checked. Operators are built on request from the cells present at that time.

    The flat and sharp matrices are cached per duality and direction,
    and invalidated by every mutation of the set of cells.
    """

    def __init__(self, dim_embedded, dim_ambient=None, backend='sparse'):
        dim_ambient = dim_embedded if dim_ambient is None else dim_ambient
        if dim_ambient < 1:
            raise InvalidSpace('ambient dimension should be positive, got {}'.format(dim_ambient))
        if not 0 <= dim_embedded <= dim_ambient:
            raise InvalidSpace('Cannot embed a manifold of dimension {} in a space of dimension {}'.format(
                dim_embedded, dim_ambient))
        if backend not in BACKENDS:
            raise ValueError('Unknown backend {}; expected one of {}'.format(backend, BACKENDS))
        self.backend = backend
        self.kspace = KhalimskySpace(dim_ambient)
        self.registry = CellRegistry(dim_embedded)

        self._flat_matrices = {}
        self._sharp_matrices = {}
        self._cached_operators_modified = True

    @classmethod
    def from_digital_set(cls, points, add_border=True, dim_ambient=None, backend='sparse'):
        """Calculus over the spels of a set of digital points; see `pykdec.calculus.factory`"""
        from pykdec.calculus.factory import from_digital_set
        return from_digital_set(points, add_border=add_border, dim_ambient=dim_ambient, backend=backend)

    @classmethod
    def from_n_cells(cls, cells, add_border=True, dim_embedded=None, dim_ambient=None, backend='sparse'):
        """Calculus over a set of top dimensional cells; see `pykdec.calculus.factory`"""
        from pykdec.calculus.factory import from_n_cells
        return from_n_cells(
            cells, add_border=add_border, dim_embedded=dim_embedded, dim_ambient=dim_ambient, backend=backend)

    @property
    def dim_embedded(self):
        return self.registry.dim_embedded

    @property
    def dim_ambient(self):
        return self.kspace.n_dim

    # cell registry

    def insert_scell(self, scell, size_ratio=1):
        """Register a signed cell

        Parameters
        ----------
        scell : SCell or tuple of int
            an unsigned cell is inserted with positive orientation
        size_ratio : float
            ratio of the size of the dual cell over the size of the primal cell

        Returns
        -------
        bool
            True if the cell was not registered before;
            otherwise its size ratio and orientation are updated, and its index is kept
        """
        if not isinstance(scell, SCell):
            scell = self.kspace.signed_cell(scell, POS)
        scell = self.kspace.signed_cell(scell.cell, scell.sign)
        inserted = self.registry.insert(scell, self.kspace.dim(scell), size_ratio)
        self._cached_operators_modified = True
        return inserted

    def erase_cell(self, cell):
        """Remove a cell; the indices of all other cells are unaffected

        Returns
        -------
        bool
            True if the cell was registered
        """
        cell = self.kspace.cell(self.kspace.unsigns(cell))
        erased = self.registry.erase(cell, self.kspace.dim(cell))
        if erased:
            self._cached_operators_modified = True
        return erased

    @property
    def properties(self):
        """Mapping of unsigned cell to its `Property`"""
        return self.registry.properties

    def __iter__(self):
        return iter(self.registry)

    def __len__(self):
        return len(self.registry)

    def __contains__(self, cell):
        return self.kspace.unsigns(cell) in self.registry

    def get_cell_index(self, cell):
        return self.registry.get(self.kspace.unsigns(cell)).index

    def is_cell_flipped(self, cell):
        return self.registry.get(self.kspace.unsigns(cell)).flipped

    def get_scell(self, order, duality, index):
        """Registered signed cell holding the value of a form at a given index"""
        return self.registry.get_scell(order, duality, index)

    def actual_order(self, order, duality):
        return self.registry.actual_order(order, duality)

    def k_form_length(self, order, duality):
        return self.registry.length(self.actual_order(order, duality))

    def _check_order(self, order, lower=0, upper=None):
        upper = self.dim_embedded if upper is None else upper
        if not lower <= order <= upper:
            raise ValueError('order {} out of range [{}, {}]'.format(order, lower, upper))
        return order

    # orientation

    def hodge_sign(self, cell, duality):
        """Sign of the diagonal entry of the hodge of a cell

        Parameters
        ----------
        cell : SCell or tuple of int
            an unsigned cell counts as positive
        duality : PRIMAL or DUAL
            duality of the form the hodge is applied to

        Returns
        -------
        int
            +1 or -1
        """
        check_duality(duality)
        n = self.dim_embedded
        k = self.kspace.dim(cell)
        sign = self.kspace.sign(cell)
        # in full dimension, orientation depends on how the open axes of a cell are ordered relative to the ambient axes
        if n == self.dim_ambient and (n - 1) & 1:
            sign *= self.kspace.direction_parity(cell)
        if duality == DUAL and (k * (n - k)) & 1:
            sign = -sign
        return sign

    def edge_direction(self, cell, duality):
        """Ambient axis along which a primal or dual 1-cell extends

        The primal edge runs along its open axis. A dual edge crosses its primal cell along a closed axis;
        the first one with a registered cell on either side is chosen.
        """
        check_duality(duality)
        cell = self.kspace.cell(self.kspace.unsigns(cell))
        if duality == PRIMAL:
            axes = self.kspace.dirs(cell)
            if not axes:
                raise ValueError('cell {} is not a primal edge'.format(cell))
            return axes[0]
        axes = self.kspace.orth_dirs(cell)
        if not axes:
            raise ValueError('cell {} is not a dual edge'.format(cell))
        for k in axes:
            if any(c in self.registry for c in self.kspace.neighbours(cell, k)):
                return k
        return axes[0]

    def _slot_signs(self, actual_order, duality):
        """Hodge sign of the unsigned cell in each slot of a bucket; zero for erased slots"""
        return np.array(
            [0 if c is None else self.hodge_sign(c.cell, duality) for c in self.registry.indexed_cells[actual_order]],
            dtype=scalar_dtype
        )

    def _boundary(self, actual_order):
        """Signed incidence of the cells of actual_order in the boundaries of the cells above

        Returns
        -------
        scipy.sparse.csr_matrix, [n_cells(actual_order + 1), n_cells(actual_order)]
            entry (j, i) is the coefficient of stored cell i in the boundary of stored cell j
        """
        shape = self.registry.length(actual_order + 1), self.registry.length(actual_order)
        index, coordinates, sign = self.registry.live(actual_order + 1)
        if len(index) == 0:
            return from_triplets([], [], [], shape)

        source, faces, face_signs = self.kspace.lower_incident(coordinates, sign)
        face, stored_sign = self.registry.lookup(actual_order, faces)
        found = face >= 0
        return from_triplets(index[source][found], face[found], (face_signs * stored_sign)[found], shape)

    # operators

    def identity(self, order, duality=PRIMAL):
        self._check_order(order)
        n = self.k_form_length(order, duality)
        return LinearOperator(self, order, duality, order, duality, sparse_diagonal(np.ones(n)))

    def derivative(self, order, duality=PRIMAL):
        """Exterior derivative, mapping order-forms to (order+1)-forms of the same duality

        Parameters
        ----------
        order : int
            in the range [0, dim_embedded - 1]
        duality : PRIMAL or DUAL

        Returns
        -------
        LinearOperator

        Notes
        -----
        The dual derivative is the transposed primal boundary, conjugated by the primal hodge signs,
        which keeps the dual complex closed and its laplacian semidefinite
        """
        check_duality(duality)
        n = self.dim_embedded
        self._check_order(order, 0, n - 1)
        if duality == PRIMAL:
            matrix = self._boundary(order)
        else:
            a = n - order
            matrix = (
                sparse_diagonal(self._slot_signs(a - 1, PRIMAL)) @
                self._boundary(a - 1).T @
                sparse_diagonal(self._slot_signs(a, PRIMAL))
            ) * (-1) ** a
        logger.debug('derivative of %s %d-forms: %s', duality, order, matrix.shape)
        return LinearOperator(self, order, duality, order + 1, duality, matrix)

    def antiderivative(self, order, duality=PRIMAL):
        """Codifferential, mapping order-forms to (order-1)-forms of the same duality

        Composed as hodge * derivative * hodge, passing through the opposite duality
        """
        check_duality(duality)
        n = self.dim_embedded
        self._check_order(order, 1, n)
        other = opposite(duality)
        return self.hodge(n - order + 1, other) * self.derivative(n - order, other) * self.hodge(order, duality)

    def hodge(self, order, duality=PRIMAL):
        """Hodge star, mapping order-forms to (dim_embedded-order)-forms of the opposite duality

        Raises
        ------
        SingularHodge
            if a dual cell is mapped onto a primal cell of zero size ratio
        """
        check_duality(duality)
        self._check_order(order)
        actual = self.actual_order(order, duality)
        ratios = self.registry.size_ratios(actual)
        signs = self._slot_signs(actual, duality)
        live = ~np.isnan(ratios)

        diagonal = np.zeros(len(ratios), dtype=scalar_dtype)
        if duality == PRIMAL:
            diagonal[live] = signs[live] * ratios[live]
        else:
            singular = live & (ratios == 0)
            if np.any(singular):
                cell = self.registry.indexed_cells[actual][np.flatnonzero(singular)[0]].cell
                logger.warning('dual hodge of order %d on cell %s with zero size ratio', order, cell)
                raise SingularHodge('cell {} has size ratio zero'.format(cell))
            diagonal[live] = signs[live] / ratios[live]
        return LinearOperator(
            self, order, duality, self.dim_embedded - order, opposite(duality), sparse_diagonal(diagonal))

    def primal_hodge(self, order):
        return self.hodge(order, PRIMAL)

    def dual_hodge(self, order):
        return self.hodge(order, DUAL)

    def laplace(self, duality=PRIMAL):
        """Laplace-Beltrami operator on 0-forms; negative semidefinite"""
        if self.dim_embedded == 0:
            # isolated vertices have no edges to diffuse along
            return LinearOperator(self, 0, duality, 0, duality)
        return self.antiderivative(1, duality) * self.derivative(0, duality)

    # flat and sharp

    def _update_cached_operators(self):
        if self._cached_operators_modified:
            if self._flat_matrices:
                logger.debug('cells changed; dropping %d cached flat and sharp matrices', len(self._flat_matrices))
            self._flat_matrices.clear()
            self._sharp_matrices.clear()
            self._cached_operators_modified = False

    def _build_directional(self, duality, direction):
        """Flat and sharp matrices of the 1-form cells extending along an ambient axis"""
        a1, a0 = self.actual_order(1, duality), self.actual_order(0, duality)
        n1, n0 = self.registry.length(a1), self.registry.length(a0)
        index, coordinates, _ = self.registry.live(a1)
        if len(index) == 0:
            empty = from_triplets([], [], [], (n1, n0))
            return empty, empty.T.tocsr()

        along = np.array([self.edge_direction(c, duality) == direction for c in coordinates], dtype=bool)
        edges = index[along]
        step = self.kspace.unit_vectors[direction]
        plus, plus_sign = self.registry.lookup(a0, coordinates[along] + step)
        minus, minus_sign = self.registry.lookup(a0, coordinates[along] - step)
        has_plus, has_minus = plus >= 0, minus >= 0

        # orientation of each edge relative to the positive axis, as seen by the derivative
        d0 = self.derivative(0, duality).matrix
        sigma = np.zeros(len(edges), dtype=scalar_dtype)
        sigma[has_minus] = -_entries(d0, edges[has_minus], minus[has_minus]) * minus_sign[has_minus]
        sigma[has_plus] = _entries(d0, edges[has_plus], plus[has_plus]) * plus_sign[has_plus]
        orientation = np.zeros(n1, dtype=scalar_dtype)
        orientation[edges] = sigma

        rows = np.concatenate([edges[has_plus], edges[has_minus]])
        cols = np.concatenate([plus[has_plus], minus[has_minus]])
        incidence = from_triplets(rows, cols, np.ones(len(rows)), (n1, n0))
        flat = sparse_diagonal(orientation) @ normalize_l1(incidence, axis=1)
        sharp = normalize_l1(incidence.T.tocsr(), axis=1) @ sparse_diagonal(orientation)
        return flat.tocsr(), sharp.tocsr()

    def _directional_matrices(self, duality, direction):
        check_duality(duality)
        if not 0 <= direction < self.dim_ambient:
            raise ValueError('direction {} out of range [0, {})'.format(direction, self.dim_ambient))
        self._update_cached_operators()
        key = duality, direction
        if key not in self._flat_matrices:
            logger.debug('building %s flat and sharp matrices along axis %d', duality, direction)
            self._flat_matrices[key], self._sharp_matrices[key] = self._build_directional(duality, direction)
        return self._flat_matrices[key], self._sharp_matrices[key]

    def flat_directional(self, duality, direction):
        """Operator mapping one component of a vector field onto the 1-forms along that axis"""
        flat, _ = self._directional_matrices(duality, direction)
        return LinearOperator(self, 0, duality, 1, duality, flat)

    def sharp_directional(self, duality, direction):
        """Operator reconstructing one component of a vector field from the 1-forms along that axis"""
        _, sharp = self._directional_matrices(duality, direction)
        return LinearOperator(self, 1, duality, 0, duality, sharp)

    def flat(self, vector_field):
        """Integrate a vector field along the edges of the complex

        Parameters
        ----------
        vector_field : VectorField

        Returns
        -------
        KForm
            1-form of the same duality as the vector field
        """
        if vector_field.calculus is not self:
            raise IncompatibleOperator('vector field belongs to a different calculus')
        duality = vector_field.duality
        result = KForm(self, 1, duality)
        for direction in range(self.dim_ambient):
            result = result + self.flat_directional(duality, direction) * vector_field.extract_zero_form(direction)
        return result

    def sharp(self, one_form):
        """Reconstruct a vector field from a 1-form, by averaging the incident edges of each vertex

        Parameters
        ----------
        one_form : KForm
            1-form; primal or dual

        Returns
        -------
        VectorField
        """
        if one_form.calculus is not self or not one_form.order == 1:
            raise IncompatibleOperator('sharp requires a 1-form of this calculus, got {}'.format(one_form))
        duality = one_form.duality
        components = [self.sharp_directional(duality, d) * one_form for d in range(self.dim_ambient)]
        return VectorField.from_zero_forms(components)

    # misc

    def is_valid(self):
        """Check that the registry and its index are mutually consistent"""
        live = 0
        for order, bucket in enumerate(self.registry.indexed_cells):
            for index, scell in enumerate(bucket):
                if scell is None:
                    continue
                live += 1
                prop = self.registry.properties.get(scell.cell)
                if prop is None or prop.index != index or prop.flipped != (scell.sign == NEG):
                    return False
                if self.kspace.dim(scell) != order:
                    return False
        return live == len(self.registry)

    def counts(self):
        """Number of registered cells per dimension"""
        return [len(self.registry.live(a)[0]) for a in range(self.dim_embedded + 1)]

    def __repr__(self):
        return 'DiscreteExteriorCalculus(dim_embedded={}, dim_ambient={}, backend={}, cells={})'.format(
            self.dim_embedded, self.dim_ambient, self.backend, self.counts())

    def __str__(self):
        lines = [repr(self)]
        for order, count in enumerate(self.counts()):
            lines.append('  {}-cells: {} registered, {} slots'.format(order, count, self.registry.length(order)))
        return '\n'.join(lines)

    def clone(self):
        """Independent copy of the calculus; operators and forms of the original do not apply to it"""
        other = type(self)(self.dim_embedded, self.dim_ambient, self.backend)
        other.registry = self.registry.copy()
        return other

    def __copy__(self):
        raise TypeError('DiscreteExteriorCalculus is not copyable; use clone()')

    def __deepcopy__(self, memo):
        raise TypeError('DiscreteExteriorCalculus is not copyable; use clone()')

    def plot(self, ax=None, primal_color='b', flipped_color='r'):
        """Plot the cells of a planar calculus; negatively oriented cells are drawn in flipped_color"""
        import matplotlib.pyplot as plt
        import matplotlib.collections
        if not self.dim_ambient == 2:
            raise ValueError('Can only plot calculi in a two dimensional space')
        if ax is None:
            fig, ax = plt.subplots(1, 1)

        corners = np.array([[-1, -1], [1, -1], [1, 1], [-1, 1]]) / 2.
        for order in range(self.dim_embedded + 1):
            index, coordinates, sign = self.registry.live(order)
            if len(index) == 0:
                continue
            position = self.kspace.centroid(coordinates)
            color = [flipped_color if s == NEG else primal_color for s in sign]
            if order == 0:
                ax.scatter(*position.T, color=color, zorder=3)
            elif order == 1:
                half = (coordinates & 1) / 2.
                segments = np.stack([position - half, position + half], axis=1)
                ax.add_collection(matplotlib.collections.LineCollection(segments, color=color, alpha=0.7))
            else:
                polygons = position[:, None, :] + corners[None, :, :]
                ax.add_collection(matplotlib.collections.PolyCollection(polygons, facecolors=color, alpha=0.2))
        ax.autoscale_view()
        ax.set_aspect('equal')
        return ax
