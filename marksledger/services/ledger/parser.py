# marksledger/services/ledger/parser.py
"""
Shape detection and row extraction.

A sheet with a row carrying both a "symbol" and a "name" header is a grid
ledger (one row per student, one column per subject). Anything else is read as
flat rows with the fields symbol_no, component_code, marks_obtained, is_absent.
"""
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Union

import pandas as pd

from .cells import (
    GridRow, IdentityCell, CompulsoryMarkCell, OptionalCodeCell, OptionalMarkCell,
    TabularRow, cell_text, is_blank, normalize_code
)
from .columns import ColumnRole, LedgerLayout, find_header_row, match_layout

TABULAR = "tabular"
GRID = "grid"
ANNOTATION_PREFIX = "full mark"


@dataclass
class ParsedSheet:
    shape: str
    rows: List[Union[TabularRow, GridRow]] = field(default_factory=list)
    layout: Optional[LedgerLayout] = None


def parse_sheet(grid: Sequence[Sequence[Any]]) -> ParsedSheet:
    header_row = find_header_row(grid)
    if header_row is None:
        return parse_tabular(grid)
    return parse_grid(grid, header_row)


def parse_tabular(grid: Sequence[Sequence[Any]]) -> ParsedSheet:
    parsed = ParsedSheet(shape=TABULAR)
    if len(grid) < 2:
        return parsed

    header = [cell_text(h) for h in grid[0]]
    width = len(header)
    body = [(list(values) + [None] * width)[:width] for values in grid[1:]]

    df = pd.DataFrame(body, columns=header, dtype=object)
    df.columns = df.columns.str.strip().str.lower().str.replace(' ', '_')
    df = df.loc[:, ~df.columns.duplicated()]

    for index, row in df.iterrows():
        record = row.to_dict()
        if all(is_blank(v) for v in record.values()):
            continue
        parsed.rows.append(TabularRow(
            row_number=index + 2,  # header is sheet row 1
            symbol_no=cell_text(record.get("symbol_no")),
            component_code=normalize_code(record.get("component_code")),
            marks_obtained=record.get("marks_obtained"),
            is_absent=record.get("is_absent")
        ))
    return parsed


def _value(values: Sequence[Any], column: Optional[int]) -> Any:
    if column is None or column >= len(values):
        return None
    return values[column]


def parse_grid(grid: Sequence[Sequence[Any]], header_row: int) -> ParsedSheet:
    subheader = grid[header_row + 1] if header_row + 1 < len(grid) else []
    layout = match_layout(grid[header_row], subheader, header_row)
    parsed = ParsedSheet(shape=GRID, layout=layout)

    for index in range(layout.data_start, len(grid)):
        values = grid[index]
        identity = IdentityCell(
            symbol_no=cell_text(_value(values, layout.column(ColumnRole.SYMBOL))),
            full_name=cell_text(_value(values, layout.column(ColumnRole.NAME))),
            regd_no=cell_text(_value(values, layout.column(ColumnRole.REGD))),
            dob=_value(values, layout.column(ColumnRole.DOB))
        )

        cells = [
            CompulsoryMarkCell(column=column, position=position, value=_value(values, column))
            for position, column in enumerate(layout.compulsory_columns)
        ]
        for pair in layout.optional_pairs:
            cells.append(OptionalCodeCell(
                column=pair.code_column,
                group_label=pair.label,
                code=normalize_code(_value(values, pair.code_column))
            ))
            if pair.mark_column is not None:
                cells.append(OptionalMarkCell(
                    column=pair.mark_column,
                    code_column=pair.code_column,
                    group_label=pair.label,
                    value=_value(values, pair.mark_column)
                ))

        row = GridRow(row_number=index + 1, identity=identity, cells=cells)
        if row.is_empty:
            continue
        # template rows such as "Full Marks" carry no symbol
        if not identity.symbol_no and identity.full_name.lower().startswith(ANNOTATION_PREFIX):
            continue
        parsed.rows.append(row)

    return parsed
