import pytest

from pascalette.errors import ValueContractError
from pascalette.types import expect_boolean, expect_real, format_value, same_value, type_name


def test_type_names():
    assert type_name(1.0) == 'Real'
    assert type_name(True) == 'Boolean'
    assert type_name('a') == 'String'


def test_expect_real():
    assert expect_real(2.0, 'test') == 2.0
    with pytest.raises(ValueContractError, match='expected Real, got Boolean'):
        expect_real(True, 'test')
    with pytest.raises(ValueContractError):
        expect_real('1', 'test')


def test_expect_boolean():
    assert expect_boolean(False, 'test') is False
    with pytest.raises(ValueContractError, match='expected Boolean, got Real'):
        expect_boolean(0.0, 'test')


def test_value_contract_error_is_a_type_error():
    assert issubclass(ValueContractError, TypeError)


def test_same_value_compares_tag_and_value():
    assert same_value(1.0, 1.0)
    assert same_value('a', 'a')
    assert not same_value(1.0, 2.0)
    assert not same_value(1.0, True)
    assert not same_value(0.0, False)
    assert not same_value('1', 1.0)


def test_format_value():
    assert format_value(14.0) == '14.0'
    assert format_value(-12.5, 8, 2) == '  -12.50'
    assert format_value(2.5, 4) == '   2'
    assert format_value(3.0, 0, 1) == '3.0'
    assert format_value('hi') == 'hi'
    assert format_value('hi', 5) == '   hi'
    assert format_value(True) == 'TRUE'
    assert format_value(False) == 'FALSE'
