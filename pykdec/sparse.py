"""
sparse matrix helpers, specialized for DEC-like applications

operators are assembled from (row, col, value) triplets; duplicate entries are summed
"""

import numpy as np
import scipy.sparse


BACKENDS = ('sparse', 'dense')


def normalize_l1(A, axis=1):
    """Return A scaled such that the absolute sum over `axis` equals 1

    Rows or columns that are entirely empty are left empty
    """
    s = np.abs(np.asarray(A.sum(axis=axis))).flatten()
    s[s == 0] = 1
    D = sparse_diagonal(1. / s)
    if axis == 0:
        return A @ D
    elif axis == 1:
        return D @ A


def from_triplets(rows, cols, data, shape, dtype=np.float64):
    """Assemble a csr matrix from triplets

    Parameters
    ----------
    rows : array_like, [n_entries], int
    cols : array_like, [n_entries], int
    data : array_like, [n_entries]
    shape : tuple of int
        (n_rows, n_cols)

    Returns
    -------
    scipy.sparse.csr_matrix, [shape]
    """
    rows = np.asarray(rows, dtype=np.int64)
    cols = np.asarray(cols, dtype=np.int64)
    data = np.asarray(data, dtype=dtype)
    M = scipy.sparse.coo_matrix((data, (rows, cols)), shape=shape)
    M.sum_duplicates()
    return M.tocsr()


def sparse_zeros(shape, dtype=np.float64):
    return scipy.sparse.csr_matrix(shape, dtype=dtype)


def sparse_diagonal(diagonal):
    diagonal = np.asarray(diagonal, dtype=np.float64)
    i = np.arange(len(diagonal))
    return scipy.sparse.csr_matrix((diagonal, (i, i)), shape=(len(diagonal), len(diagonal)))


def as_backend(matrix, backend):
    """Convert a matrix to the representation used by a given backend"""
    if backend == 'sparse':
        if scipy.sparse.issparse(matrix):
            return matrix.tocsr()
        return scipy.sparse.csr_matrix(np.asarray(matrix))
    elif backend == 'dense':
        if scipy.sparse.issparse(matrix):
            return matrix.toarray()
        return np.asarray(matrix)
    raise ValueError('Unknown backend {}; expected one of {}'.format(backend, BACKENDS))


def todense(matrix):
    if scipy.sparse.issparse(matrix):
        return matrix.toarray()
    return np.asarray(matrix)


def is_zero(matrix, atol=0):
    """Test that all entries of a sparse or dense matrix vanish"""
    if scipy.sparse.issparse(matrix):
        data = matrix.tocsr().data
    else:
        data = np.asarray(matrix)
    return bool(np.all(np.abs(data) <= atol))
