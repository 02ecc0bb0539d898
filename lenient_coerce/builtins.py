"""
Built-in parsing functions for lenient-coerce.

Every parsing function has the same shape::

    parse(text: str) -> tuple[bool, Any]

returning ``(True, value)`` on success and ``(False, None)`` on failure.
Parsing functions never raise for bad input.

Contents:
- ``BUILTIN_PARSERS``: parsers for the builtin scalar kinds.
- ``numpy_parser(kind)``: parser factory for numpy scalar types.
- ``enum_parser(kind)``: the parse-by-name primitive for enums.
- ``guard(func)``: adapts a raising constructor into a parsing function.
"""

from __future__ import annotations

import datetime as dt
import enum
import uuid
from decimal import Decimal
from fractions import Fraction
from typing import Any, Callable

import numpy as np

ParseFunc = Callable[[str], "tuple[bool, Any]"]

# Errors that mean "this text is not a valid instance", not a bug
PARSE_ERRORS = (ValueError, TypeError, ArithmeticError)

_TRUE_TEXT = "true"
_FALSE_TEXT = "false"


def guard(func: Callable[[str], Any]) -> ParseFunc:
    """Turn a constructor that raises on bad input into a parsing function."""

    def parse(text: str) -> tuple[bool, Any]:
        try:
            return True, func(text)
        except PARSE_ERRORS:
            return False, None

    parse.__name__ = f"parse_{getattr(func, '__name__', 'value')}"
    parse.__qualname__ = parse.__name__
    return parse


def parse_bool(text: str) -> tuple[bool, Any]:
    """Parse ``"True"``/``"False"`` in any letter case, ignoring surrounding whitespace.

    ``"1"``, ``"yes"`` and friends are rejected.
    """
    key = text.strip().lower()
    if key == _TRUE_TEXT:
        return True, True
    if key == _FALSE_TEXT:
        return True, False
    return False, None


BUILTIN_PARSERS: dict[type, ParseFunc] = {
    int: guard(int),
    float: guard(float),
    bool: parse_bool,
    complex: guard(complex),
    Decimal: guard(Decimal),
    Fraction: guard(Fraction),
    uuid.UUID: guard(uuid.UUID),
    dt.date: guard(dt.date.fromisoformat),
    dt.time: guard(dt.time.fromisoformat),
}


def numpy_parser(kind: type) -> ParseFunc:
    """Build a parser for a numpy scalar type such as ``np.int32``.

    ``np.bool_`` goes through ``parse_bool`` first because
    ``np.bool_("False")`` is truthy.
    """
    if issubclass(kind, np.bool_):

        def parse(text: str) -> tuple[bool, Any]:
            ok, value = parse_bool(text)
            return (True, kind(value)) if ok else (False, None)

        return parse
    return guard(kind)


def _parse_member(kind: type[enum.Enum], key: str) -> tuple[bool, Any]:
    # str(Color.RED) renders as "Color.RED"
    key = key.removeprefix(f"{kind.__name__}.")
    member = kind.__members__.get(key)
    if member is not None:
        return True, member
    # Raw value next (string-valued enums), then the integer value
    try:
        return True, kind(key)
    except PARSE_ERRORS:
        pass
    try:
        number = int(key)
    except ValueError:
        return False, None
    try:
        return True, kind(number)
    except PARSE_ERRORS:
        return False, None


def enum_parser(kind: type[enum.Enum]) -> ParseFunc:
    """Build the parse-by-name primitive for an enum.

    Matching rules, in order:
    1. Exact, case-sensitive member name (aliases included), optionally
       qualified with the enum's class name as ``str()`` renders it
       (``"Color.RED"``).
    2. The member's raw value given as text.
    3. The member's integer value (``"2"`` -> ``Color(2)``).

    For ``enum.Flag`` kinds, comma-separated parts are parsed one by one and
    OR-ed together (``"READ, WRITE"``).  Surrounding whitespace is ignored.
    """

    def parse(text: str) -> tuple[bool, Any]:
        key = text.strip()
        if not key:
            return False, None
        if issubclass(kind, enum.Flag) and "," in key:
            combined = None
            for part in key.split(","):
                ok, member = _parse_member(kind, part.strip())
                if not ok:
                    return False, None
                combined = member if combined is None else combined | member
            return True, combined
        return _parse_member(kind, key)

    parse.__name__ = f"parse_{kind.__name__}"
    parse.__qualname__ = parse.__name__
    return parse
