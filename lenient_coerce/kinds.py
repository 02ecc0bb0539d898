"""
Kind descriptors for lenient-coerce.

A *kind* is what a caller asks a raw value to be coerced into.  It is either
a plain Python type (``int``, ``Decimal``, a frozen dataclass, an enum, ...)
or an optional-wrapped type (``Optional[int]``, ``int | None``).

This module answers three questions about a kind, all purely from its shape
and never from any runtime value:

1. ``classify(kind)`` -- which coercion path applies (``KindShape``).
2. ``zero_value(kind)`` -- what a failed default coercion falls back to.
3. ``resolve_kind_name(name)`` -- which kind a config string such as
   ``"int?"`` refers to.

Value kinds vs reference kinds:
  Value kinds are scalars that can be parsed from text: the numeric and
  boolean builtins, ``Decimal``, ``Fraction``, ``UUID``, ``date``, ``time``,
  enums, numpy scalar types, frozen dataclasses, NamedTuples, and any class
  that declares its own ``try_parse`` member.  Everything else (``str``,
  ``bytes``, plain classes) is a reference kind and goes through the kind's
  constructor instead.
"""

from __future__ import annotations

import dataclasses
import datetime as dt
import enum
import functools
import inspect
import types
import typing
import uuid
from decimal import Decimal
from fractions import Fraction
from typing import Any, Optional, Union

import numpy as np

from lenient_coerce.exceptions import UnknownKindNameError, UnsupportedKindError

# Name of the member a custom kind declares to take part in parsing
PARSE_MEMBER = "try_parse"

# Optional no-argument member a custom kind declares as its zero value
ZERO_MEMBER = "zero"

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)

# Exact-type membership only: subclasses of int/float are not implied
BUILTIN_VALUE_KINDS: tuple[type, ...] = (
    int,
    float,
    bool,
    complex,
    Decimal,
    Fraction,
    uuid.UUID,
    dt.date,
    dt.time,
)

# Kind names accepted in config files (case-insensitive, "?" suffix = optional)
KIND_NAMES: dict[str, type] = {
    "int": int,
    "float": float,
    "bool": bool,
    "complex": complex,
    "decimal": Decimal,
    "fraction": Fraction,
    "uuid": uuid.UUID,
    "date": dt.date,
    "time": dt.time,
    "datetime": dt.datetime,
    "str": str,
}

_ZERO_VALUES: dict[type, Any] = {
    uuid.UUID: uuid.UUID(int=0),
    dt.date: dt.date.min,
    dt.datetime: dt.datetime.min,
}


class KindShape(enum.Enum):
    """Coercion path selected for a kind descriptor."""

    DATETIME = "datetime"
    OPTIONAL_DATETIME = "optional_datetime"
    VALUE = "value"
    OPTIONAL_VALUE = "optional_value"
    REFERENCE = "reference"


def unwrap_optional(kind: Any) -> tuple[Any, bool]:
    """Strip one level of optional wrapping from *kind*.

    Returns:
        Tuple of (inner kind, was_optional).

    Raises:
        UnsupportedKindError: For unions with more than one non-``None`` member.
    """
    origin = typing.get_origin(kind)
    if origin is Union or origin is types.UnionType:
        args = typing.get_args(kind)
        members = [a for a in args if a is not type(None)]
        if len(members) == 1 and len(args) == 2:
            return members[0], True
        raise UnsupportedKindError(
            f"Cannot coerce into {kind!r}: only Optional[T] unions are supported"
        )
    return kind, False


def _is_namedtuple(kind: type) -> bool:
    return issubclass(kind, tuple) and hasattr(kind, "_fields")


def _is_frozen_dataclass(kind: type) -> bool:
    return dataclasses.is_dataclass(kind) and kind.__dataclass_params__.frozen


def is_numpy_scalar(kind: type) -> bool:
    return issubclass(kind, (np.number, np.bool_))


def parse_member(kind: type) -> staticmethod | classmethod | None:
    """Return *kind*'s own parse-shaped ``try_parse`` member, or ``None``.

    Parse-shaped means a ``staticmethod`` or ``classmethod`` declared on the
    kind itself (not inherited) taking exactly one positional argument,
    annotated ``str`` or unannotated.
    """
    member = vars(kind).get(PARSE_MEMBER)
    if not isinstance(member, (staticmethod, classmethod)):
        return None

    try:
        signature = inspect.signature(member.__get__(None, kind))
    except (TypeError, ValueError):
        return None

    params = list(signature.parameters.values())
    if len(params) != 1 or params[0].kind not in _POSITIONAL:
        return None
    if params[0].annotation not in (inspect.Parameter.empty, str, "str"):
        return None
    return member


def is_value_kind(kind: type) -> bool:
    """Return True if *kind* is parsed from text rather than constructed."""
    if kind in BUILTIN_VALUE_KINDS:
        return True
    if issubclass(kind, enum.Enum) or is_numpy_scalar(kind):
        return True
    if _is_frozen_dataclass(kind) or _is_namedtuple(kind):
        return True
    return parse_member(kind) is not None


def _require_type(kind: Any, descriptor: Any) -> type:
    # Parameterized generics (list[int], dict[str, int]) are composite targets
    if not isinstance(kind, type) or typing.get_origin(kind) is not None:
        raise UnsupportedKindError(
            f"Cannot coerce into {descriptor!r}: expected a type or Optional[type]"
        )
    return kind


def classify(kind: Any) -> KindShape:
    """Classify a kind descriptor into the coercion path that handles it.

    ``datetime`` (and subclasses such as ``pandas.Timestamp``) is checked
    before the value kinds because it subclasses ``date``.

    Raises:
        UnsupportedKindError: If *kind* is not a type or ``Optional[type]``.
    """
    try:
        hash(kind)
    except TypeError:
        raise UnsupportedKindError(
            f"Cannot coerce into {kind!r}: expected a type or Optional[type]"
        ) from None
    return _classify(kind)


@functools.lru_cache(maxsize=None)
def _classify(kind: Any) -> KindShape:
    inner, optional = unwrap_optional(kind)
    inner = _require_type(inner, kind)

    if issubclass(inner, dt.datetime):
        return KindShape.OPTIONAL_DATETIME if optional else KindShape.DATETIME
    if is_value_kind(inner):
        return KindShape.OPTIONAL_VALUE if optional else KindShape.VALUE
    return KindShape.REFERENCE


def _field_zero(hint: Any) -> Any:
    """Zero value for a dataclass/NamedTuple field annotated with *hint*."""
    try:
        shape = classify(hint)
    except UnsupportedKindError:
        return None
    if shape in (KindShape.VALUE, KindShape.DATETIME):
        return zero_value(hint)
    return None


def _type_hints(kind: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(kind)
    except (NameError, TypeError):
        # Unresolvable forward references: fields fall back to None
        return {}


def _zero_enum(kind: type[enum.Enum]) -> enum.Enum:
    try:
        return kind(0)
    except ValueError:
        members = list(kind)
        if not members:
            raise UnsupportedKindError(f"Enum {kind.__name__} has no members") from None
        return members[0]


def _construct(kind: type, kwargs: dict[str, Any]) -> Any:
    """Call ``kind(**kwargs)``; if the constructor refuses, skip ``__init__``."""
    try:
        return kind(**kwargs)
    except (TypeError, ValueError):
        return kind.__new__(kind)


@functools.lru_cache(maxsize=None)
def _immutable_zero(kind: type) -> Any:
    if kind in _ZERO_VALUES:
        return _ZERO_VALUES[kind]
    if issubclass(kind, dt.datetime):
        return dt.datetime.min
    if issubclass(kind, enum.Enum):
        return _zero_enum(kind)
    if is_numpy_scalar(kind):
        return kind(0)
    return kind()


def zero_value(kind: type) -> Any:
    """Return the zero/default instance of a value kind.

    - Builtin scalars: ``kind()`` (``0``, ``0.0``, ``False``, ``0j``, ...),
      except ``UUID(int=0)``, ``date.min`` and ``datetime.min``.
    - Enums: the member whose value is ``0``, else the first declared member.
    - numpy scalars: ``kind(0)``.
    - Frozen dataclasses and NamedTuples: every field without a default
      gets the zero value of its annotated kind (``None`` for reference or
      optional fields).
    - Kinds declaring their own ``zero`` staticmethod/classmethod: its result.
    - Anything else: ``kind()``, or an instance created without running
      ``__init__`` when the constructor needs arguments.

    Only the builtin, enum and numpy zeros are cached.  Every other kind
    gets a fresh instance per call, so mutating one result never leaks into
    the next.
    """
    kind = _require_type(kind, kind)
    if (
        kind in BUILTIN_VALUE_KINDS
        or issubclass(kind, (dt.datetime, enum.Enum))
        or is_numpy_scalar(kind)
    ):
        return _immutable_zero(kind)

    if dataclasses.is_dataclass(kind):
        hints = _type_hints(kind)
        kwargs = {
            f.name: _field_zero(hints.get(f.name))
            for f in dataclasses.fields(kind)
            if f.init
            and f.default is dataclasses.MISSING
            and f.default_factory is dataclasses.MISSING
        }
        return _construct(kind, kwargs)

    if _is_namedtuple(kind):
        hints = _type_hints(kind)
        kwargs = {
            name: _field_zero(hints.get(name))
            for name in kind._fields
            if name not in kind._field_defaults
        }
        return kind(**kwargs)

    member = vars(kind).get(ZERO_MEMBER)
    if isinstance(member, (staticmethod, classmethod)):
        return member.__get__(None, kind)()
    return _construct(kind, {})


def resolve_kind_name(name: str) -> Any:
    """Map a config kind name (``"int"``, ``"datetime?"``) to a kind descriptor.

    Raises:
        UnknownKindNameError: If the base name is not in ``KIND_NAMES``.
    """
    key = name.strip()
    optional = key.endswith("?")
    if optional:
        key = key[:-1].strip()
    kind = KIND_NAMES.get(key.lower())
    if kind is None:
        raise UnknownKindNameError(
            f"Unknown kind name '{name}'. Known kinds: {sorted(KIND_NAMES)}"
        )
    return Optional[kind] if optional else kind


def to_text(value: Any) -> str:
    """Render a raw value to the text fed to parsing functions.

    ``None`` renders as the empty string, which every coercion path treats
    as absent.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)
