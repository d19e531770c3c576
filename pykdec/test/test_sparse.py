import numpy as np
import numpy.testing as npt
import pytest
import scipy.sparse

from pykdec import sparse


def test_from_triplets():
    M = sparse.from_triplets([0, 0, 1], [1, 1, 0], [1, 2, 5], (2, 3))
    assert scipy.sparse.isspmatrix_csr(M)
    npt.assert_allclose(M.toarray(), [[0, 3, 0], [5, 0, 0]])


def test_normalize_l1():
    M = sparse.from_triplets([0, 0, 2], [0, 1, 1], [1, 1, 1], (3, 2))
    N = sparse.normalize_l1(M, axis=1)
    npt.assert_allclose(N.toarray(), [[.5, .5], [0, 0], [0, 1]])
    N = sparse.normalize_l1(M, axis=0)
    npt.assert_allclose(N.toarray(), [[1, .5], [0, 0], [0, .5]])


def test_diagonal():
    npt.assert_allclose(sparse.sparse_diagonal([1, 2]).toarray(), np.diag([1, 2]))
    assert sparse.sparse_diagonal([]).shape == (0, 0)


def test_backend():
    M = sparse.sparse_diagonal([1, -1])
    D = sparse.as_backend(M, 'dense')
    assert isinstance(D, np.ndarray)
    assert scipy.sparse.issparse(sparse.as_backend(D, 'sparse'))
    npt.assert_allclose(sparse.todense(M), D)
    with pytest.raises(ValueError):
        sparse.as_backend(M, 'gpu')


def test_is_zero():
    assert sparse.is_zero(sparse.sparse_zeros((3, 3)))
    assert not sparse.is_zero(sparse.sparse_diagonal([0, 1e-3]))
    assert sparse.is_zero(np.ones((2, 2)) * 1e-12, atol=1e-9)
