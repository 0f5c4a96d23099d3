# marksledger/services/ledger/__init__.py
"""Ledger import pipeline: read, parse, plan, apply."""
from .parser import GRID, TABULAR, parse_sheet
from .planner import ImportContext, ImportPlan, plan_grid, plan_tabular
from .workbook import read_first_sheet

__all__ = [
    "GRID", "TABULAR", "parse_sheet",
    "ImportContext", "ImportPlan", "plan_grid", "plan_tabular",
    "read_first_sheet",
]
