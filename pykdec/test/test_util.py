from pykdec.util import pairs, inversions, permutation_parity


def test_pairs():
    assert list(pairs([1, 2, 3])) == [(1, 2), (2, 3)]
    assert list(pairs([1])) == []
    assert list(pairs([])) == []


def test_permutation_parity():
    assert inversions([2, 0, 1]) == 2
    assert permutation_parity([0, 1, 2]) == 1
    assert permutation_parity([1, 0, 2]) == -1
    assert permutation_parity([2, 0, 1]) == 1
    assert permutation_parity([]) == 1
