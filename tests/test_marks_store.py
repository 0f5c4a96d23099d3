import uuid

import pytest
from sqlalchemy import func, select, update

from marksledger.core.exceptions import ExamLockedError, ValidationException
from marksledger.models import Exam, Mark, StudentOptionalChoice
from marksledger.schemas.actor import Actor
from marksledger.schemas.marks import MarkIn
from marksledger.services.marks_service import MarksStore, range_error

ACTOR = Actor(role="ADMIN")


async def count_marks(db, exam_id):
    return (await db.execute(select(func.count()).select_from(Mark).where(Mark.exam_id == exam_id))).scalar()


def test_range_error_bounds():
    assert range_error("1", 75, 75) is None
    assert range_error("1", 0, 75) is None
    assert range_error("1", 75.01, 75) == "marks_obtained 75.01 out of range (0..75) for code 1"
    assert range_error("1", -1, 75) is not None


async def test_upsert_same_key_updates_in_place(db, seed):
    store = MarksStore(db)
    enrollment_id = seed.enrollments["7801"]

    first = await store.upsert(seed.exam_id, enrollment_id, "1", 50, False, ACTOR)
    second = await store.upsert(seed.exam_id, enrollment_id, "1", 60, False, ACTOR)
    await db.commit()

    assert first is second
    assert await count_marks(db, seed.exam_id) == 1
    marks = await store.marks_for(seed.exam_id, enrollment_id)
    assert marks["1"].marks_obtained == 60


async def test_upsert_across_sessions_keeps_one_row(session_factory, seed):
    for value in (50, 55):
        async with session_factory() as session:
            await MarksStore(session).upsert(seed.exam_id, seed.enrollments["7801"], "1", value, False, ACTOR)
            await session.commit()

    async with session_factory() as session:
        assert await count_marks(session, seed.exam_id) == 1


async def test_absent_mark_clears_marks_obtained(db, seed):
    store = MarksStore(db)
    await store.upsert(seed.exam_id, seed.enrollments["7801"], "1", 50, False, ACTOR)
    mark = await store.upsert(seed.exam_id, seed.enrollments["7801"], "1", 50, True, ACTOR)
    await db.commit()

    assert mark.is_absent is True
    assert mark.marks_obtained is None


async def test_save_marks_is_all_or_nothing(db, seed):
    store = MarksStore(db)
    marks = [
        MarkIn(component_code="1", marks_obtained=70),
        MarkIn(component_code="2", marks_obtained=26),
    ]

    with pytest.raises(ValidationException) as exc:
        await store.save_marks(seed.exam_id, seed.enrollments["7801"], marks, ACTOR)

    assert "out of range (0..25) for code 2" in exc.value.message
    assert await count_marks(db, seed.exam_id) == 0


async def test_save_marks_rejects_unconfigured_code(db, seed):
    with pytest.raises(ValidationException):
        await MarksStore(db).save_marks(
            seed.exam_id, seed.enrollments["7801"], [MarkIn(component_code="99", marks_obtained=1)], ACTOR
        )


async def test_save_marks_on_locked_exam(db, seed):
    await db.execute(update(Exam).where(Exam.id == seed.exam_id).values(is_locked=True))
    await db.commit()

    with pytest.raises(ExamLockedError):
        await MarksStore(db).save_marks(
            seed.exam_id, seed.enrollments["7801"], [MarkIn(component_code="1", marks_obtained=1)], ACTOR
        )


async def test_save_marks_stamps_actor(db, seed):
    actor = Actor(id=uuid.uuid4(), role="TEACHER")
    store = MarksStore(db)

    saved = await store.save_marks(
        seed.exam_id, seed.enrollments["7801"],
        [MarkIn(component_code="1", marks_obtained=75), MarkIn(component_code="2", is_absent=True, marks_obtained=3)],
        actor
    )

    marks = await store.marks_for(seed.exam_id, seed.enrollments["7801"])
    assert saved == 2
    assert marks["1"].entered_by == actor.id
    assert marks["1"].updated_by == actor.id
    assert marks["2"].is_absent is True
    assert marks["2"].marks_obtained is None


async def test_optional_choices_are_replaced_wholesale(db, seed):
    store = MarksStore(db)
    enrollment_id = seed.enrollments["7801"]

    await store.set_optional_choices(enrollment_id, [
        ("Opt. 1st", seed.subjects["Physics"]),
        ("Opt. 2nd", seed.subjects["Computer"]),
    ])
    await store.set_optional_choices(enrollment_id, [("Opt. 1st", seed.subjects["Economics"])])

    choices = await store.optional_choices(enrollment_id)
    assert [(c.group_name, c.subject_id) for c in choices] == [("Opt. 1st", seed.subjects["Economics"])]

    total = (await db.execute(select(func.count()).select_from(StudentOptionalChoice))).scalar()
    assert total == 1


async def test_student_ledger_lists_components_with_config(db, seed):
    store = MarksStore(db)
    await store.upsert(seed.exam_id, seed.enrollments["7801"], "1", 70, False, ACTOR)
    await db.commit()

    ledger = await store.student_ledger(seed.exam_id, seed.enrollments["7801"])

    assert [row["component_code"] for row in ledger] == ["1", "2", "11", "12"]
    assert ledger[0]["full_marks"] == 75
    assert ledger[0]["marks_obtained"] == 70
    assert ledger[1]["marks_obtained"] is None
