"""Discrete exterior calculus over cells of a Khalimsky space

"""
import numpy as np

# dtypes used for indices, orientations and form values throughout the package;
# changing them here should change them everywhere
index_dtype = np.int64
sign_dtype = np.int8
scalar_dtype = np.float64


class CalculusException(Exception):
    pass


class InvalidSpace(CalculusException, ValueError):
    """Embedded dimension does not fit in the ambient space"""


class CellNotFound(CalculusException, KeyError):
    """Cell or index is not registered in the calculus"""


class IncompatibleOperator(CalculusException, ValueError):
    """Forms or operators that live on different spaces were combined"""


class SingularHodge(CalculusException, ZeroDivisionError):
    """Dual hodge requested on a cell with zero size ratio"""
