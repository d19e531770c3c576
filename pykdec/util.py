def pairs(iterable):
    """Yield consecutive pairs of an iterable"""
    it = iter(iterable)
    try:
        x = next(it)
    except StopIteration:
        return
    for y in it:
        yield x, y
        x = y


def inversions(sequence):
    """Count the pairs of items that appear in decreasing order"""
    sequence = list(sequence)
    return sum(
        1
        for i, a in enumerate(sequence)
        for b in sequence[i + 1:]
        if a > b
    )


def permutation_parity(sequence):
    """Sign of the permutation that sorts sequence; +1 if even, -1 if odd"""
    return -1 if inversions(sequence) & 1 else 1
