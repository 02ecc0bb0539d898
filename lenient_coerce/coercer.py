"""
Type coercion entry points for lenient-coerce.

``TypeCoercer`` bundles the coercion operations around one injected
``ParserRegistry`` and one ``CoercionConfig``:

- ``optional(value, kind)``  -- parsed value or ``None``.
- ``default(value, kind)``   -- parsed value or the kind's zero value.
- ``datetime(value)``        -- layouts first, then serial dates.
- ``change_type(value, kind)`` -- dispatches on the shape of *kind*:

  =====================  ============================================
  ``datetime``           ``datetime()``, absent -> ``datetime.min``
  ``Optional[datetime]`` ``datetime()``
  reference kind         ``kind(value)`` (errors propagate)
  value kind             ``default()``
  ``Optional[value]``    ``optional()``
  =====================  ============================================

Error policy:
  For value and date/time kinds, nothing raises on bad input.  Empty,
  malformed and unparseable input all come back as ``None`` (or the zero
  value), and callers cannot tell them apart.  Only reference-kind
  conversion lets the constructor's exception through.
"""

from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Callable, Sequence, TypeVar, cast

from lenient_coerce.config import CoercionConfig
from lenient_coerce.dates import coerce_datetime
from lenient_coerce.exceptions import UnsupportedKindError
from lenient_coerce.kinds import (
    KindShape,
    classify,
    to_text,
    unwrap_optional,
    zero_value,
)
from lenient_coerce.registry import ParserRegistry

logger = logging.getLogger(__name__)

T = TypeVar("T")


def convert_native(value: Any, kind: type) -> Any:
    """Conventional conversion for reference kinds: ``kind(value)``.

    ``None`` stays ``None`` and instances of *kind* pass through.  Any error
    raised by the constructor propagates unchanged.
    """
    if value is None or isinstance(value, kind):
        return value
    return kind(value)


class TypeCoercer:
    """Coerces loosely-typed values into requested kinds.

    Args:
        registry: Shared parser cache.  A fresh one is created if omitted;
            pass the same instance to every coercer in an application.
        config: Date layouts and serial-date settings.  Defaults to
            ``CoercionConfig()``.
    """

    def __init__(
        self,
        registry: ParserRegistry | None = None,
        config: CoercionConfig | None = None,
    ) -> None:
        self.registry = registry if registry is not None else ParserRegistry()
        self.config = config if config is not None else CoercionConfig()

    def optional(self, value: Any, kind: Any) -> Any:
        """Coerce *value* to *kind*, returning ``None`` when it can't be parsed.

        ``Optional[T]`` is accepted and treated as ``T``.  Empty input is
        always ``None``, never the zero value.
        """
        inner, _ = unwrap_optional(kind)
        if not isinstance(inner, type):
            raise UnsupportedKindError(f"Cannot coerce into {kind!r}: expected a type")
        if issubclass(inner, dt.datetime):
            return self.datetime(value)
        if type(value) is inner:
            return value

        text = to_text(value)
        if not text:
            return None
        parse = self.registry.resolve(inner)
        if parse is None:
            return None
        ok, parsed = parse(text)
        return parsed if ok else None

    def default(self, value: Any, kind: Any) -> Any:
        """Like ``optional()``, but absence becomes ``zero_value(kind)``."""
        result = self.optional(value, kind)
        if result is None:
            return zero_value(unwrap_optional(kind)[0])
        return result

    def datetime(
        self, value: Any, formats: Sequence[str] | None = None
    ) -> dt.datetime | None:
        """Coerce *value* to a datetime using the configured layouts.

        Args:
            value: Raw value.
            formats: Layouts to use instead of ``config.date_formats``.
        """
        serial = self.config.serial_dates
        return coerce_datetime(
            value,
            self.config.date_formats if formats is None else formats,
            serial_fallback=serial.enabled,
            serial_epoch=serial.epoch,
            serial_min_days=serial.min_days,
            serial_max_days=serial.max_days,
        )

    def change_type(self, value: Any, kind: Any) -> Any:
        """Coerce *value* into *kind*, choosing the path from the kind's shape.

        Raises:
            UnsupportedKindError: If *kind* is not a type or ``Optional[type]``.
            Exception: Whatever a reference kind's constructor raises.
        """
        shape = classify(kind)
        if shape is KindShape.DATETIME:
            result = self.datetime(value)
            return result if result is not None else dt.datetime.min
        if shape is KindShape.OPTIONAL_DATETIME:
            return self.datetime(value)
        if shape is KindShape.REFERENCE:
            return convert_native(value, unwrap_optional(kind)[0])
        if shape is KindShape.VALUE:
            return self.default(value, kind)
        return self.optional(value, unwrap_optional(kind)[0])

    def change_type_as(self, value: Any, kind: type[T]) -> T:
        """Typed variant of ``change_type()`` for statically known kinds."""
        return cast(T, self.change_type(value, kind))

    def converter(self, kind: Any) -> Callable[[Any], Any]:
        """Return a one-argument callable coercing values into *kind*.

        The kind is classified immediately, so an unsupported kind fails here
        rather than on the first value.
        """
        classify(kind)

        def convert(value: Any) -> Any:
            return self.change_type(value, kind)

        return convert
