import uuid
from datetime import date

from marksledger.services.component_config_service import ComponentConfig
from marksledger.services.ledger.cells import (
    CompulsoryMarkCell, GridRow, IdentityCell, OptionalCodeCell, OptionalMarkCell, TabularRow
)
from marksledger.services.ledger.planner import (
    EnrollmentRef, ImportContext, OptionalSubject, plan_grid, plan_tabular
)

PHYSICS = uuid.uuid4()
RAM = EnrollmentRef(enrollment_id=uuid.uuid4(), student_id=uuid.uuid4())


def config(code, full_marks, enabled=True):
    return ComponentConfig(component_code=code, full_marks=full_marks, pass_marks=None, is_enabled=enabled)


def make_context(**overrides):
    context = ImportContext(
        exam_id=uuid.uuid4(),
        enabled={"1": config("1", 75), "2": config("2", 25), "11": config("11", 100), "21": config("21", 100)},
        enrollments={"7801": RAM},
        compulsory_codes=["1", "11"],
        optional_codes={"21": OptionalSubject("21", PHYSICS, "Opt. 1st", 100)},
    )
    for key, value in overrides.items():
        setattr(context, key, value)
    return context


def tabular(row_number, symbol_no="7801", code="1", marks=None, absent=None):
    return TabularRow(row_number, symbol_no, code, marks, absent)


def grid_row(row_number, marks=(), code="", optional_mark=None, symbol_no="7801", **identity):
    cells = [CompulsoryMarkCell(column=6 + i, position=i, value=v) for i, v in enumerate(marks)]
    cells.append(OptionalCodeCell(column=10, group_label="Opt. 1st", code=code))
    cells.append(OptionalMarkCell(column=11, code_column=10, group_label="Opt. 1st", value=optional_mark))
    return GridRow(row_number, IdentityCell(symbol_no=symbol_no, **identity), cells)


def test_tabular_valid_rows_become_marks():
    plan = plan_tabular([tabular(2, marks=60), tabular(3, code="2", marks="25")], make_context())

    assert plan.total_rows == 2
    assert plan.imported == 2
    assert [(m.component_code, m.marks_obtained) for m in plan.marks] == [("1", 60.0), ("2", 25.0)]
    assert plan.errors == []


def test_tabular_absent_row_ignores_marks_value():
    plan = plan_tabular([tabular(2, marks=500, absent="TRUE")], make_context())

    assert plan.skipped == 0
    mark = plan.marks[0]
    assert mark.is_absent is True
    assert mark.marks_obtained is None


def test_tabular_full_marks_is_inclusive():
    plan = plan_tabular([tabular(2, marks=75), tabular(3, marks=75.01)], make_context())

    assert plan.imported == 1
    assert [(e.row, e.reason) for e in plan.errors] == [
        (3, "marks_obtained 75.01 out of range (0..75) for code 1")
    ]


def test_tabular_row_level_errors():
    plan = plan_tabular([
        tabular(2, symbol_no=""),
        tabular(3, symbol_no="9999", marks=10),
        tabular(4, code="99", marks=10),
        tabular(5, marks=None),
        tabular(6, marks=-1),
    ], make_context())

    assert plan.imported == 0
    assert plan.skipped == 5
    assert [e.reason for e in plan.errors] == [
        "Missing symbol_no or component_code",
        "No enrollment found for symbol_no 9999 in this exam context",
        "component_code 99 not enabled/configured for this exam",
        "marks_obtained missing for symbol_no 7801, code 1",
        "marks_obtained -1 out of range (0..75) for code 1",
    ]


def test_grid_maps_compulsory_columns_by_position():
    plan = plan_grid([grid_row(5, marks=[70, 88])], make_context())

    assert [(m.component_code, m.marks_obtained) for m in plan.marks] == [("1", 70.0), ("11", 88.0)]


def test_grid_surplus_compulsory_column_is_ignored():
    plan = plan_grid([grid_row(5, marks=[70, 88, 999])], make_context())

    assert plan.imported == 2
    assert plan.errors == []


def test_grid_non_numeric_mark_is_not_written():
    plan = plan_grid([grid_row(5, marks=["AB", 88])], make_context())

    assert [m.component_code for m in plan.marks] == ["11"]
    assert plan.errors == []


def test_grid_optional_code_sets_choice_and_mark():
    plan = plan_grid([grid_row(5, code="21", optional_mark=91)], make_context())

    assert plan.choices == {RAM.enrollment_id: [("Opt. 1st", PHYSICS)]}
    assert [(m.component_code, m.marks_obtained) for m in plan.marks] == [("21", 91.0)]


def test_grid_unknown_optional_code_is_reported_once():
    plan = plan_grid([grid_row(5, marks=[70], code="55", optional_mark=40)], make_context())

    assert [e.reason for e in plan.errors] == ["Invalid optional code 55 for Opt. 1st"]
    assert [m.component_code for m in plan.marks] == ["1"]
    # stored choices are left alone when no code on the row is recognized
    assert plan.choices == {}


def test_grid_optional_mark_without_code():
    plan = plan_grid([grid_row(5, optional_mark=40)], make_context())

    assert [e.reason for e in plan.errors] == ["Marks under Opt. 1st without a subject code"]
    assert plan.choices == {}


def test_grid_unknown_symbol_and_disabled_component():
    context = make_context(enabled={"1": config("1", 75)})
    plan = plan_grid([grid_row(5, symbol_no="1234", marks=[1]), grid_row(6, marks=[70, 50])], context)

    assert plan.total_rows == 2
    assert [(e.row, e.reason) for e in plan.errors] == [
        (5, "No enrollment found for symbol_no 1234 in this exam context"),
        (6, "component_code 11 not enabled/configured for this exam"),
    ]
    assert plan.imported == 1


def test_grid_backfill_only_carries_filled_fields():
    plan = plan_grid([grid_row(5, full_name="Ram Bahadur Thapa", dob="2007-05-14")], make_context())

    backfill = plan.backfills[0]
    assert backfill.student_id == RAM.student_id
    assert backfill.values() == {"full_name": "Ram Bahadur Thapa", "dob": date(2007, 5, 14)}


def test_grid_unknown_code_on_a_later_row_keeps_earlier_choice():
    plan = plan_grid([grid_row(5, code="21"), grid_row(6, code="55")], make_context())

    assert plan.choices[RAM.enrollment_id] == [("Opt. 1st", PHYSICS)]
    assert [e.row for e in plan.errors] == [6]


def test_grid_last_recognized_row_decides_choices():
    chemistry = uuid.uuid4()
    context = make_context(optional_codes={
        "21": OptionalSubject("21", PHYSICS, "Opt. 1st", 100),
        "31": OptionalSubject("31", chemistry, "Opt. 1st", 100),
    })
    plan = plan_grid([grid_row(5, code="21"), grid_row(6, code="31")], context)

    assert plan.choices[RAM.enrollment_id] == [("Opt. 1st", chemistry)]
