from datetime import date, datetime

import pytest

from marksledger.core.exceptions import LedgerFormatError
from marksledger.services.ledger.cells import (
    CompulsoryMarkCell, OptionalCodeCell, OptionalMarkCell,
    cell_text, is_blank, normalize_code, to_bool, to_date, to_number
)
from marksledger.services.ledger.columns import ColumnRole, find_header_row, match_layout
from marksledger.services.ledger.parser import GRID, TABULAR, parse_sheet

HEADER = ["SN", "Symbol No.", "Regd. No.", "DOB", "DOB", "Name of Student",
          "English", "Nepali", "Opt. 1st", "Marks", "Grand Total", "Attendance"]
UNITS = [None, None, None, "BS", "AD", None, "TH", "TH", "Sub. Code", "TH", None, None]


def grid_sheet(*rows):
    return [["Mark Ledger"], [], HEADER, UNITS, *rows]


@pytest.mark.parametrize("value,expected", [
    (7801.0, "7801"),
    (" 7801 ", "7801"),
    (21, "21"),
    (None, ""),
    (float("nan"), ""),
    (datetime(2007, 5, 14, 0, 0), "2007-05-14"),
])
def test_cell_text(value, expected):
    assert cell_text(value) == expected


def test_cell_helpers():
    assert is_blank("  ")
    assert not is_blank(0)
    assert to_number("45.5") == 45.5
    assert to_number("AB") is None
    assert to_number(None) is None
    assert to_bool("TRUE") and to_bool(1) and to_bool("yes")
    assert not to_bool("0") and not to_bool(None)
    assert normalize_code("021") == "21"
    assert normalize_code(0) == "0"
    assert to_date("2007-05-14") == date(2007, 5, 14)
    assert to_date("14/05/2007") is None


def test_sheet_without_symbol_and_name_header_is_tabular():
    parsed = parse_sheet([
        ["Symbol No", "Component Code", "Marks Obtained", "Is Absent"],
        ["7801", "021", 60, None],
        [None, None, None, None],
        ["7802", "1", None, "true"],
    ])

    assert parsed.shape == TABULAR
    assert [r.row_number for r in parsed.rows] == [2, 4]
    first = parsed.rows[0]
    assert (first.symbol_no, first.component_code, first.marks_obtained) == ("7801", "21", 60)
    assert parsed.rows[1].is_absent == "true"


def test_header_row_is_found_below_title_rows():
    assert find_header_row(grid_sheet()) == 2
    assert find_header_row([["Symbol No", "Marks"]]) is None


def test_grid_layout_columns():
    layout = match_layout(HEADER, UNITS, 2)

    assert layout.column(ColumnRole.SYMBOL) == 1
    assert layout.column(ColumnRole.REGD) == 2
    assert layout.column(ColumnRole.DOB) == 4  # the AD column
    assert layout.column(ColumnRole.NAME) == 5
    assert layout.compulsory_columns == [6, 7]
    assert [(p.label, p.code_column, p.mark_column) for p in layout.optional_pairs] == [("Opt. 1st", 8, 9)]
    assert layout.data_start == 4


def test_missing_required_column_names_the_role():
    with pytest.raises(LedgerFormatError) as exc:
        match_layout(["SN", "Symbol No.", "English"], [], 0)
    assert "Name of Student" in exc.value.message


def test_grid_rows_are_typed_cells():
    parsed = parse_sheet(grid_sheet(
        [1, 7801, "R-1", "2064-01-31", "2007-05-14", "Ram Thapa", 60, "AB", "021", 80, 200, 180],
    ))

    assert parsed.shape == GRID
    row = parsed.rows[0]
    assert row.row_number == 5
    assert row.identity.symbol_no == "7801"
    assert row.identity.full_name == "Ram Thapa"
    assert row.identity.dob == "2007-05-14"

    compulsory = [c for c in row.cells if isinstance(c, CompulsoryMarkCell)]
    assert [(c.position, c.value) for c in compulsory] == [(0, 60), (1, "AB")]
    code = next(c for c in row.cells if isinstance(c, OptionalCodeCell))
    mark = next(c for c in row.cells if isinstance(c, OptionalMarkCell))
    assert code.code == "21"
    assert (mark.code_column, mark.value) == (8, 80)


def test_blank_and_full_marks_rows_are_skipped():
    parsed = parse_sheet(grid_sheet(
        [None, None, None, None, None, "Full Marks", 100, 100, None, None, 200, None],
        [None] * 12,
        [2, 7802, None, None, None, None, None, None, None, None, None, None],
        [3, 7803, None, None, None, "Hari", None, None, None, None, None, None],
    ))

    assert [r.row_number for r in parsed.rows] == [8]
    assert parsed.rows[0].identity.symbol_no == "7803"


def test_compulsory_columns_stop_at_blank_header():
    layout = match_layout(["Symbol No.", "Name", "English", None, "Nepali"], [], 0)
    assert layout.compulsory_columns == [2]


def test_bs_dob_column_is_never_mapped():
    layout = match_layout(["Symbol No.", "DOB", "Name of Student", "English"], [None, "BS", None, "TH"], 0)
    assert layout.column(ColumnRole.DOB) is None


def test_bs_date_in_unlabelled_dob_column_is_dropped():
    # 2064 BS is 2007 AD; read as AD it lies in the future
    assert to_date("2064-01-31") is None
    assert to_date(datetime(2064, 1, 31)) is None
    assert to_date(date.today()) == date.today()
