"""
Shared test fixtures and sample data for lenient-coerce tests.

Sample inputs are defined here as module-level constants so that unit and
integration tests exercise the same spreadsheet-style cells.
"""

from __future__ import annotations

import pytest

from lenient_coerce.coercer import TypeCoercer
from lenient_coerce.registry import ParserRegistry

# ---------------------------------------------------------------------------
# Sample export -- mixes typed dates, serial dates and junk cells
# ---------------------------------------------------------------------------
SAMPLE_EXPORT_CSV = """\
code,trade_date,close,volume,listed,note
A005930,2024-03-15,72800.5,1200,True,ok
A000660,45366,155000,,False,
A035420,15/03/2024 13:45:00,n/a,300,maybe,halted
A051910,,0,12x,TRUE,
"""

SAMPLE_CONFIG_YAML = """\
date_formats:
  - "%Y-%m-%d"
  - "%d/%m/%Y %H:%M:%S"
serial_dates:
  enabled: true
columns:
  trade_date: datetime?
  close: float
  volume: int?
  listed: bool
"""


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def registry() -> ParserRegistry:
    return ParserRegistry()


@pytest.fixture
def coercer(registry: ParserRegistry) -> TypeCoercer:
    return TypeCoercer(registry=registry)


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------
def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (file I/O through the public API)",
    )
