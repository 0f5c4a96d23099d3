# marksledger/services/ledger/workbook.py
import io
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

import pandas as pd

from .cells import is_blank
from ...core.exceptions import LedgerFormatError

logger = logging.getLogger(__name__)


@dataclass
class Sheet:
    """First sheet of an upload as a plain grid; grid[i] is sheet row i + 1"""
    name: str
    grid: List[List[Any]] = field(default_factory=list)


def _frame_to_grid(df: pd.DataFrame) -> List[List[Any]]:
    return [
        [None if is_blank(value) else value for value in row]
        for row in df.itertuples(index=False, name=None)
    ]


def read_first_sheet(content: bytes, filename: Optional[str] = None) -> Sheet:
    """Load the first sheet of an xlsx/csv upload without header inference"""
    name = (filename or "").lower()
    try:
        if name.endswith(".csv"):
            try:
                df = pd.read_csv(
                    io.BytesIO(content),
                    header=None,
                    dtype=object,
                    skip_blank_lines=False
                )
            except pd.errors.EmptyDataError:
                df = pd.DataFrame()
            sheet_name = "csv"
        else:
            with pd.ExcelFile(io.BytesIO(content), engine="openpyxl") as workbook:
                sheet_name = workbook.sheet_names[0]
                df = workbook.parse(sheet_name, header=None, dtype=object)
    except Exception as e:
        logger.warning(f"Unreadable upload {filename!r}: {e}")
        raise LedgerFormatError("Invalid Excel file") from e

    grid = _frame_to_grid(df)
    logger.debug(f"Read sheet {sheet_name!r}: {len(grid)} rows")
    return Sheet(name=sheet_name, grid=grid)
