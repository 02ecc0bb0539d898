"""
Column-wise coercion for pandas DataFrames.

CSV and Excel readers hand back columns of strings (or mixed objects).
``coerce_frame()`` runs ``TypeCoercer.change_type()`` over every cell of
the configured columns so a single malformed cell never aborts the batch.

Scalar coercion cannot tell an empty cell from a malformed one.  At the
batch level we can: a cell that had text in the input but came out absent
(or as the zero value) is counted as a *failure*, and the per-column counts
are returned in ``FrameCoercionResult.failures``.

Missing cells (``None``, ``NaN``, ``pd.NA``, ``NaT``) are fed to the
coercer as ``None``.  Output columns have ``object`` dtype so coerced
values keep their exact Python types (``Decimal``, ``datetime.min``, enum
members, ...).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

import pandas as pd

from lenient_coerce.coercer import TypeCoercer
from lenient_coerce.kinds import (
    KindShape,
    classify,
    resolve_kind_name,
    to_text,
    unwrap_optional,
    zero_value,
)

logger = logging.getLogger(__name__)


@dataclass
class FrameCoercionResult:
    """Result of coercing the columns of a DataFrame.

    Attributes:
        df: New DataFrame with the configured columns coerced.
        failures: Maps column name -> number of non-empty cells that could
            not be parsed.  Only columns that were coerced appear here.
    """

    df: pd.DataFrame
    failures: dict[str, int] = field(default_factory=dict)


def _is_missing(cell: Any) -> bool:
    return cell is None or (pd.api.types.is_scalar(cell) and bool(pd.isna(cell)))


def _coerce_column(
    series: pd.Series, kind: Any, coercer: TypeCoercer
) -> tuple[pd.Series, int]:
    shape = classify(kind)
    inner, _ = unwrap_optional(kind)
    # Coerce through the optional form so failures stay visible as None
    optional_kind = Optional[inner]
    zero_fill = shape in (KindShape.VALUE, KindShape.DATETIME)

    values: list[Any] = []
    failures = 0
    for cell in series.tolist():
        raw = None if _is_missing(cell) else cell
        value = coercer.change_type(raw, optional_kind)
        if value is None:
            if raw is not None and to_text(raw):
                failures += 1
            value = zero_value(inner) if zero_fill else None
        values.append(value)

    result = pd.Series(values, index=series.index, name=series.name, dtype=object)
    return result, failures


def coerce_series(
    series: pd.Series, kind: Any, coercer: TypeCoercer | None = None
) -> pd.Series:
    """Coerce every cell of *series* into *kind*.

    Args:
        series: Input column; left unmodified.
        kind: Kind descriptor or kind name (``"int?"``).
        coercer: Coercer to use; a default one is created if omitted.

    Returns:
        New ``object``-dtype Series with the same index and name.
    """
    if isinstance(kind, str):
        kind = resolve_kind_name(kind)
    result, _ = _coerce_column(series, kind, coercer or TypeCoercer())
    return result


def coerce_frame(
    df: pd.DataFrame,
    columns: Mapping[str, Any],
    coercer: TypeCoercer | None = None,
) -> FrameCoercionResult:
    """Coerce the given columns of *df*.

    Columns not listed in *columns* are copied through untouched.  Listed
    columns that do not exist in *df* are skipped with a warning.

    Args:
        df: Input DataFrame; left unmodified.
        columns: Maps column name -> kind descriptor or kind name.
        coercer: Coercer to use; a default one is created if omitted.

    Returns:
        FrameCoercionResult with the new DataFrame and failure counts.

    Raises:
        UnknownKindNameError: If a kind name is not recognised.
        UnsupportedKindError: If a kind descriptor cannot be classified.
    """
    coercer = coercer or TypeCoercer()
    df = df.copy()
    failures: dict[str, int] = {}

    for column, kind in columns.items():
        if column not in df.columns:
            logger.warning("Column '%s' not found in frame, skipping", column)
            continue
        if isinstance(kind, str):
            kind = resolve_kind_name(kind)
        df[column], failures[column] = _coerce_column(df[column], kind, coercer)
        if failures[column]:
            logger.info(
                "Column '%s': %d of %d cell(s) could not be parsed",
                column, failures[column], len(df),
            )

    return FrameCoercionResult(df=df, failures=failures)
