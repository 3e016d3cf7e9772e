import math

from funnelkit.utils.numeric import at_least_one, coerce_number, ieee_divide, safe_divide


def test_ieee_divide():
    assert ieee_divide(6, 3) == 2
    assert ieee_divide(1, 0) == math.inf
    assert ieee_divide(-1, 0) == -math.inf
    assert math.isnan(ieee_divide(0, 0))


def test_safe_divide():
    assert safe_divide(1, 0) == 0
    assert safe_divide(1, 0, default=7) == 7
    assert safe_divide(1, float("nan")) == 0
    assert safe_divide(3, 2) == 1.5


def test_coerce_number():
    assert coerce_number("1,200") == 1200
    assert coerce_number(" 42.5 ") == 42.5
    assert coerce_number("abc") == 0
    assert coerce_number(None) == 0
    assert coerce_number(float("nan")) == 0
    assert coerce_number(-3) == -3


def test_at_least_one():
    assert at_least_one(0) == 1
    assert at_least_one(-2) == 1
    assert at_least_one(7) == 7
