# marksledger/services/ledger/cells.py
"""
Typed rows produced from an uploaded sheet.

Raw cell values arrive from pandas as str, int, float, datetime or NaN. The
helpers below coerce them; the dataclasses are what the planner consumes, so
nothing downstream indexes rows by header strings.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, List, Optional, Union
import math
import re

import pandas as pd

TRUE_VALUES = {"1", "true", "yes", "y"}
LEADING_ZEROS = re.compile(r"^0+(?=\d)")


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (int, float, datetime, date)):
        return isinstance(value, float) and math.isnan(value)
    return bool(pd.isna(value))


def cell_text(value: Any) -> str:
    """Cell as trimmed text; whole floats lose their '.0' (sheets store 7801 as 7801.0)"""
    if is_blank(value):
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip()


def to_number(value: Any) -> Optional[float]:
    if is_blank(value) or isinstance(value, (bool, datetime, date)):
        return None
    try:
        number = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def to_bool(value: Any) -> bool:
    if value is True or value is False:
        return value
    return cell_text(value).lower() in TRUE_VALUES


def normalize_code(value: Any) -> str:
    """Component codes are matched without leading zeros ('021' -> '21')"""
    return LEADING_ZEROS.sub("", cell_text(value))


def to_date(value: Any) -> Optional[date]:
    """Birth date, or None when blank, unparseable or in the future (a BS date read as AD)"""
    if is_blank(value):
        return None
    if isinstance(value, datetime):
        parsed = value.date()
    elif isinstance(value, date):
        parsed = value
    else:
        try:
            parsed = date.fromisoformat(cell_text(value)[:10])
        except ValueError:
            return None
    return parsed if parsed <= date.today() else None


@dataclass(frozen=True)
class TabularRow:
    """One row of the flat layout: symbol_no, component_code, marks_obtained, is_absent"""
    row_number: int
    symbol_no: str
    component_code: str
    marks_obtained: Any = None
    is_absent: Any = None


@dataclass(frozen=True)
class IdentityCell:
    symbol_no: str
    full_name: str = ""
    regd_no: str = ""
    dob: Any = None


@dataclass(frozen=True)
class CompulsoryMarkCell:
    column: int
    position: int  # index among compulsory columns, matched to catalog order
    value: Any = None

    @property
    def is_empty(self) -> bool:
        return is_blank(self.value)


@dataclass(frozen=True)
class OptionalCodeCell:
    column: int
    group_label: str
    code: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.code


@dataclass(frozen=True)
class OptionalMarkCell:
    column: int
    code_column: int  # the OptionalCodeCell this mark belongs to
    group_label: str
    value: Any = None

    @property
    def is_empty(self) -> bool:
        return is_blank(self.value)


LedgerCell = Union[CompulsoryMarkCell, OptionalCodeCell, OptionalMarkCell]


@dataclass(frozen=True)
class GridRow:
    """One student row of the grid ledger"""
    row_number: int
    identity: IdentityCell
    cells: List[LedgerCell] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.identity.full_name and all(cell.is_empty for cell in self.cells)
