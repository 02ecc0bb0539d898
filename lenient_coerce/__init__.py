"""
lenient-coerce: best-effort coercion of loosely-typed values.

Turns raw cells from spreadsheets, CSV files and dynamic query results into
typed Python values, falling back to ``None`` or a zero value instead of
raising when a cell cannot be parsed.

Public API surface:

- ``TypeCoercer`` -- the coercion operations (``optional``, ``default``,
  ``datetime``, ``change_type``, ``change_type_as``, ``converter``).

- ``ParserRegistry`` -- the shared, thread-safe cache of parsing functions.
  Build one per application and pass it to each ``TypeCoercer``.

- ``load_coercer(config_path=None)`` -- **recommended entry point**.  Builds
  a registry and a coercer from a YAML config (or the defaults).

- ``coerce_frame(df, columns, coercer)`` / ``coerce_series(...)`` -- apply
  coercion column-wise to pandas data.

Example::

    import lenient_coerce
    from typing import Optional

    coercer = lenient_coerce.load_coercer()
    coercer.change_type("42", int)              # 42
    coercer.change_type("n/a", int)             # 0
    coercer.change_type("n/a", Optional[int])   # None
    coercer.change_type("45000", datetime)      # datetime(2023, 3, 15, 0, 0)
"""

from __future__ import annotations

import logging
from pathlib import Path

from lenient_coerce.coercer import TypeCoercer, convert_native
from lenient_coerce.config import CoercionConfig, load_config, save_config
from lenient_coerce.dates import DEFAULT_DATE_FORMATS, coerce_datetime
from lenient_coerce.frame import FrameCoercionResult, coerce_frame, coerce_series
from lenient_coerce.kinds import KindShape, classify, zero_value
from lenient_coerce.registry import ParserRegistry

__all__ = [
    "CoercionConfig",
    "DEFAULT_DATE_FORMATS",
    "FrameCoercionResult",
    "KindShape",
    "ParserRegistry",
    "TypeCoercer",
    "classify",
    "coerce_datetime",
    "coerce_frame",
    "coerce_series",
    "convert_native",
    "load_coercer",
    "load_config",
    "save_config",
    "zero_value",
]

logger = logging.getLogger(__name__)


def load_coercer(
    config_path: str | Path | None = None,
    registry: ParserRegistry | None = None,
) -> TypeCoercer:
    """Build a ``TypeCoercer`` for an application.

    Args:
        config_path: Optional YAML config.  If ``None``, the built-in
            defaults are used (``DEFAULT_DATE_FORMATS``, serial dates on).
        registry: Registry to share with other coercers.  A new one is
            created if omitted.

    Returns:
        A ready-to-use ``TypeCoercer``.

    Raises:
        FileNotFoundError: If *config_path* does not exist.
        ConfigValidationError: If the config file is empty.
        pydantic.ValidationError: If the config fails schema validation.
    """
    if config_path is None:
        config = CoercionConfig()
    else:
        config = load_config(config_path)
    logger.info(
        "load_coercer() -- %d date layout(s), serial dates %s",
        len(config.date_formats),
        "enabled" if config.serial_dates.enabled else "disabled",
    )
    return TypeCoercer(registry=registry, config=config)
