"""
elementwise math between two fields of the same length
"""

import numpy as np

from masc.config import EPSILON
from masc.features.definitions import Operation


def perform_math_op(field1, field2, op):
    """
    field1 = field1 (op) field2, in place. division by anything within epsilon of zero gives NaN.
    the min/max of field1 are refreshed afterwards.
    """
    if field1 is None or field2 is None:
        raise ValueError("math operations need two fields")
    if len(field1) != len(field2):
        raise ValueError("fields have different sizes ({} vs {})".format(len(field1), len(field2)))

    a = field1.values
    b = field2.values

    if op == Operation.MINUS:
        result = a - b
    elif op == Operation.PLUS:
        result = a + b
    elif op == Operation.MULTIPLY:
        result = a * b
    elif op == Operation.DIVIDE:
        result = np.full(a.size, np.nan)
        # NaN divisors fail the comparison too
        with np.errstate(invalid="ignore"):
            usable = np.abs(b) > EPSILON
        np.divide(a, b, out=result, where=usable)
    else:
        raise ValueError("Unhandled math operation: {}".format(op))

    field1.values[:] = result
    field1.compute_min_and_max()
    return field1
