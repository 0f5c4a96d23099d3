# marksledger/services/ledger/columns.py
"""
Column schema of the grid ledger.

The header row is matched once against ``IDENTITY_COLUMNS``; a required role
that no header cell satisfies fails the upload with a message naming it.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from .cells import cell_text
from ...core.exceptions import LedgerFormatError


class ColumnRole(str, Enum):
    SYMBOL = "symbol"
    REGD = "regd"
    DOB = "dob"
    NAME = "name"


@dataclass(frozen=True)
class ColumnRule:
    role: ColumnRole
    token: str
    required: bool = False
    label: str = ""

    def matches(self, header: str) -> bool:
        return self.token in header


IDENTITY_COLUMNS = (
    ColumnRule(ColumnRole.SYMBOL, "symbol", required=True, label="Symbol No."),
    ColumnRule(ColumnRole.REGD, "reg", label="Regd. No."),
    ColumnRule(ColumnRole.DOB, "dob", label="DOB"),
    ColumnRule(ColumnRole.NAME, "name", required=True, label="Name of Student"),
)

OPTIONAL_TOKEN = "opt"
STOP_TOKENS = (OPTIONAL_TOKEN, "grand total", "attendance")
PREFERRED_DOB_UNIT = "ad"
# Bikram Sambat dates are never stored
EXCLUDED_DOB_UNIT = "bs"


def normalize_header(value: Any) -> str:
    return " ".join(cell_text(value).lower().split())


def is_header_row(values: Sequence[Any]) -> bool:
    headers = [normalize_header(v) for v in values]
    return any("symbol" in h for h in headers) and any("name" in h for h in headers)


def find_header_row(grid: Sequence[Sequence[Any]]) -> Optional[int]:
    """Index of the first row carrying both a symbol and a name header"""
    for index, values in enumerate(grid):
        if is_header_row(values):
            return index
    return None


@dataclass(frozen=True)
class OptionalColumnPair:
    label: str
    code_column: int
    mark_column: Optional[int]


@dataclass
class LedgerLayout:
    header_row: int
    identity: Dict[ColumnRole, int] = field(default_factory=dict)
    compulsory_columns: List[int] = field(default_factory=list)
    optional_pairs: List[OptionalColumnPair] = field(default_factory=list)

    @property
    def data_start(self) -> int:
        # header row plus the units sub-header
        return self.header_row + 2

    def column(self, role: ColumnRole) -> Optional[int]:
        return self.identity.get(role)


def _match_identity(headers: List[str], subheaders: List[str]) -> Dict[ColumnRole, int]:
    identity: Dict[ColumnRole, int] = {}
    for rule in IDENTITY_COLUMNS:
        candidates = [i for i, h in enumerate(headers) if rule.matches(h)]
        if not candidates:
            continue
        if rule.role == ColumnRole.DOB:
            candidates = [i for i in candidates if subheaders[i] != EXCLUDED_DOB_UNIT]
            preferred = [i for i in candidates if subheaders[i] == PREFERRED_DOB_UNIT]
            candidates = preferred or candidates
            if not candidates:
                continue
        identity[rule.role] = candidates[0]
    return identity


def match_layout(header: Sequence[Any], subheader: Sequence[Any], header_row: int) -> LedgerLayout:
    headers = [normalize_header(v) for v in header]
    subheaders = [normalize_header(v) for v in subheader]
    subheaders += [""] * (len(headers) - len(subheaders))

    layout = LedgerLayout(header_row=header_row, identity=_match_identity(headers, subheaders))

    missing = [
        rule.label for rule in IDENTITY_COLUMNS
        if rule.required and rule.role not in layout.identity
    ]
    if missing:
        raise LedgerFormatError(f"Ledger header is missing required column: {', '.join(missing)}")

    index = layout.identity[ColumnRole.NAME] + 1
    while index < len(headers):
        text = headers[index]
        if not text or any(token in text for token in STOP_TOKENS):
            break
        layout.compulsory_columns.append(index)
        index += 1

    for index, text in enumerate(headers):
        if OPTIONAL_TOKEN in text:
            mark_column = index + 1 if index + 1 < len(headers) else None
            layout.optional_pairs.append(OptionalColumnPair(
                label=cell_text(header[index]),
                code_column=index,
                mark_column=mark_column
            ))

    return layout
