"""Runtime values and helpers for Pascalette.

Expression evaluation produces one of three runtime values, represented
by the matching Python type:

* ``Real``    -> ``float``
* ``Boolean`` -> ``bool``
* ``String``  -> ``str``

Each evaluation site states which of them it expects through
``expect_real`` / ``expect_boolean``. A mismatch is a contract violation
of the interpreter itself, not a user error, and raises
``ValueContractError``.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from .errors import ValueContractError

RuntimeValue = Union[float, bool, str]


def type_name(value: Any) -> str:
    # bool first: it is a subclass of int, never of float
    if isinstance(value, bool):
        return 'Boolean'
    if isinstance(value, float):
        return 'Real'
    if isinstance(value, str):
        return 'String'
    return type(value).__name__


def expect_real(value: Any, context: str) -> float:
    if isinstance(value, bool) or not isinstance(value, float):
        raise ValueContractError(f"{context}: expected Real, got {type_name(value)}")
    return value


def expect_boolean(value: Any, context: str) -> bool:
    if not isinstance(value, bool):
        raise ValueContractError(f"{context}: expected Boolean, got {type_name(value)}")
    return value


def same_value(a: RuntimeValue, b: RuntimeValue) -> bool:
    """Equality used by CASE selection: same tag and same value."""
    return type_name(a) == type_name(b) and a == b


def format_value(value: RuntimeValue, width: Optional[int] = None, decimals: Optional[int] = None) -> str:
    """Format a value for WRITE/WRITELN.

    Without a field width the value is written in its natural form. With a
    width, numbers use a fixed-point format with ``decimals`` places
    (0 when omitted) right-aligned in ``width`` columns; strings are
    right-aligned in ``width`` columns.
    """
    if isinstance(value, str):
        if width is not None and width > 0:
            return f"{value:>{width}}"
        return value
    if isinstance(value, bool):
        return 'TRUE' if value else 'FALSE'
    if width is None:
        return str(value)
    places = decimals if decimals is not None else 0
    return f"{value:{max(width, 0)}.{max(places, 0)}f}"
