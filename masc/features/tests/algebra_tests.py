# pylint: disable=E0401, E1101

"""
tests for elementwise field math
"""

import numpy as np

from masc.config import EPSILON
from masc.features.algebra import perform_math_op
from masc.features.definitions import Operation
from masc.utils.point_clouds import Field

SEED = 10
np.random.seed(SEED)

#---------------------------------------------------------------------------------------------------

def make_field(values, name="f"):
    field = Field(name, len(values))
    field.values[:] = values
    field.compute_min_and_max()
    return field

#---------------------------------------------------------------------------------------------------

def test_operations():
    a = np.random.randn(50)
    b = np.random.randn(50) + 5

    for op, known in ((Operation.MINUS, a - b),
                      (Operation.PLUS, a + b),
                      (Operation.MULTIPLY, a * b),
                      (Operation.DIVIDE, a / b)):
        field1 = make_field(a)
        result = perform_math_op(field1, make_field(b), op)
        assert result is field1, "the first field should hold the result"
        assert np.array_equal(field1.values, known), "wrong {} result".format(op.name)
        assert field1.min == known.min() and field1.max == known.max(), "stale bounds"

#---------------------------------------------------------------------------------------------------

def test_divide_by_zero():
    """
    divisors within epsilon of zero (or NaN) give NaN, the rest divide normally
    """
    a = make_field([1.0, 2.0, 3.0, 4.0, 5.0])
    b = make_field([0.0, EPSILON / 2, -EPSILON / 2, 2.0, np.nan])
    perform_math_op(a, b, Operation.DIVIDE)
    assert np.all(np.isnan(a.values[[0, 1, 2, 4]]))
    assert a.values[3] == 2.0
    assert a.min == 2.0 and a.max == 2.0

#---------------------------------------------------------------------------------------------------

def test_minus_self():
    values = np.random.randn(30)
    field = make_field(values)
    perform_math_op(field, field, Operation.MINUS)
    assert np.all(field.values == 0)

#---------------------------------------------------------------------------------------------------

def test_bad_input():
    a = make_field(np.ones(5))
    for other, op in ((make_field(np.ones(4)), Operation.PLUS),
                      (make_field(np.ones(5)), Operation.NO_OPERATION),
                      (None, Operation.PLUS)):
        try:
            perform_math_op(a, other, op)
        except ValueError:
            pass
        else:
            raise AssertionError("accepted {} with {}".format(op, other))
    assert np.all(a.values == 1), "a failed operation shouldn't touch the field"
