"""
Demo script: coerce the columns of a CSV file using a YAML config.

Usage:
    uv run python scripts/run_coerce.py INPUT.csv CONFIG.yaml            # writes INPUT.coerced.csv
    uv run python scripts/run_coerce.py INPUT.csv CONFIG.yaml OUT.csv

The CSV is read with every cell as a string.  The config's ``columns``
schema decides which columns are coerced and into what kind; per-column
failure counts (non-empty cells that could not be parsed) are logged.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import pandas as pd

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    datefmt="%H:%M:%S",
)
log = logging.getLogger("run_coerce")


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main() -> None:
    import lenient_coerce

    args = sys.argv[1:]
    if len(args) not in (2, 3):
        print(__doc__)
        sys.exit(2)

    input_path = Path(args[0])
    config_path = Path(args[1])
    output_path = Path(args[2]) if len(args) == 3 else input_path.with_suffix(".coerced.csv")

    if not input_path.exists():
        log.error("Input file not found: %s", input_path)
        sys.exit(1)

    coercer = lenient_coerce.load_coercer(config_path)
    df = pd.read_csv(input_path, dtype=str, keep_default_na=False)
    log.info("Read %s rows x %d cols from %s", f"{len(df):,}", len(df.columns), input_path)

    result = lenient_coerce.coerce_frame(df, coercer.config.column_kinds(), coercer)
    for column, count in result.failures.items():
        log.info("  %-24s %d unparseable cell(s)", column, count)

    result.df.to_csv(output_path, index=False)
    log.info("Wrote %s", output_path)


if __name__ == "__main__":
    main()
