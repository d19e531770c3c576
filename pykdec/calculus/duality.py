"""Primal / dual tags of forms and operators"""

PRIMAL = 'primal'
DUAL = 'dual'

DUALITIES = (PRIMAL, DUAL)


def opposite(duality):
    """Map PRIMAL to DUAL and vice versa"""
    if duality == PRIMAL:
        return DUAL
    if duality == DUAL:
        return PRIMAL
    raise ValueError('Unknown duality {!r}'.format(duality))


def check_duality(duality):
    if duality not in DUALITIES:
        raise ValueError('Unknown duality {!r}'.format(duality))
    return duality
