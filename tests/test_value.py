from functools import cmp_to_key

import pytest

from minisqlnet.value import FloatValue, IntValue, StringValue, TupleValue


def test_int_to_string():
    assert IntValue(42).to_string() == "42"
    assert IntValue(-7).to_string() == "-7"
    assert str(IntValue(5)) == "5"


def test_int_compare_signs():
    assert IntValue(3).compare(IntValue(1)) > 0
    assert IntValue(1).compare(IntValue(3)) < 0
    assert IntValue(9).compare(IntValue(9)) == 0


def test_int_compare_is_antisymmetric():
    a, b = IntValue(10), IntValue(-4)
    assert a.compare(b) == -b.compare(a)


def test_float_to_string_short_form():
    assert FloatValue(1.5).to_string() == "1.5"
    assert FloatValue(0.1).to_string() == "0.1"


def test_float_to_string_large_uses_exponent():
    assert FloatValue(1000000.0).to_string() == "1e+06"


def test_float_held_at_single_precision():
    held = FloatValue(0.1).value
    assert held != 0.1
    assert abs(held - 0.1) < 1e-7
    assert FloatValue(held).value == held
    assert FloatValue(0.1).compare(FloatValue(0.1)) == 0
    assert FloatValue(0.1) == FloatValue(0.1)


def test_float_compare():
    assert FloatValue(2.5).compare(FloatValue(1.0)) == 1
    assert FloatValue(1.0).compare(FloatValue(2.5)) == -1
    assert FloatValue(3.25).compare(FloatValue(3.25)) == 0


def test_string_to_string_and_length():
    assert StringValue("hello").to_string() == "hello"
    assert StringValue("hello", 3).to_string() == "hel"


def test_string_negative_length_rejected():
    with pytest.raises(ValueError):
        StringValue("abc", -1)


def test_string_compare():
    assert StringValue("abc").compare(StringValue("abd")) < 0
    assert StringValue("b").compare(StringValue("a")) > 0
    assert StringValue("same").compare(StringValue("same")) == 0
    assert StringValue("ab").compare(StringValue("abc")) < 0


def test_compare_orders_values():
    items = [IntValue(5), IntValue(-2), IntValue(9), IntValue(0)]
    ordered = sorted(items, key=cmp_to_key(lambda a, b: a.compare(b)))
    assert [v.value for v in ordered] == [-2, 0, 5, 9]


def test_mixed_kinds_cannot_compare():
    with pytest.raises(TypeError):
        IntValue(1).compare(FloatValue(1.0))
    with pytest.raises(TypeError):
        StringValue("1").compare(IntValue(1))


def test_base_is_abstract():
    with pytest.raises(TypeError):
        TupleValue()