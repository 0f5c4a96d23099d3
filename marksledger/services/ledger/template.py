# marksledger/services/ledger/template.py
from dataclasses import dataclass
from io import BytesIO
from typing import List, Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter

IDENTITY_HEADERS = ["SN", "Symbol No.", "Regd. No.", "DOB", "DOB", "Name of Student"]
IDENTITY_UNITS = ["", "", "", "BS", "AD", ""]
TRAILING_HEADERS = ["Grand Total", "Attendance"]
FULL_MARKS_LABEL = "Full Marks"
CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@dataclass(frozen=True)
class TemplateSubject:
    name: str
    full_marks: Optional[float] = None


def build_ledger_template(
    title: str,
    exam_name: str,
    compulsory: List[TemplateSubject],
    optional_groups: List[str]
) -> bytes:
    """
    Blank grid ledger for an exam.

    The header and units rows are exactly what the importer's grid parser
    expects; the "Full Marks" row is skipped on import.
    """
    header = list(IDENTITY_HEADERS)
    units = list(IDENTITY_UNITS)
    full_marks: List[Optional[object]] = [None] * 5 + [FULL_MARKS_LABEL]

    for subject in compulsory:
        header.append(subject.name)
        units.append("TH")
        full_marks.append(subject.full_marks)

    for group in optional_groups:
        # the code column header carries the group name ("Opt. 1st"), the mark column does not
        header.extend([group, "Marks"])
        units.extend(["Sub. Code", "TH"])
        full_marks.extend([None, None])

    header.extend(TRAILING_HEADERS)
    units.extend(["", ""])
    known = [s.full_marks for s in compulsory if s.full_marks is not None]
    full_marks.extend([sum(known) if known else None, None])

    wb = Workbook()
    ws = wb.active
    ws.title = "Ledger"

    ws.append([title])
    ws.append([exam_name])
    ws.append([])
    ws.append(header)
    ws.append(units)
    ws.append(full_marks)

    width = len(header)
    ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=width)
    ws.merge_cells(start_row=2, start_column=1, end_row=2, end_column=width)
    ws["A1"].font = Font(bold=True, size=14)
    ws["A1"].alignment = Alignment(horizontal="center")
    ws["A2"].alignment = Alignment(horizontal="center")

    for row in ws.iter_rows(min_row=4, max_row=5):
        for cell in row:
            cell.font = Font(bold=True)
            cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)

    for index, text in enumerate(header, start=1):
        ws.column_dimensions[get_column_letter(index)].width = max(8, min(len(str(text)) + 4, 28))

    bio = BytesIO()
    wb.save(bio)
    bio.seek(0)
    return bio.read()
