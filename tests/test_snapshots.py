import uuid

import pytest

from marksledger.core.exceptions import ConfigError, ExamLockedError, NotFoundError
from marksledger.models import Exam
from marksledger.schemas.actor import Actor
from marksledger.services.marks_service import MarksStore
from marksledger.services.snapshot_service import SnapshotService

ADMIN = Actor(id=uuid.uuid4(), role="ADMIN")
SUPER_ADMIN = Actor(id=uuid.uuid4(), role="SUPER_ADMIN")


@pytest.fixture
async def with_marks(session_factory, seed):
    async with session_factory() as session:
        store = MarksStore(session)
        for code, value in {"1": 60, "2": 20, "11": 45, "12": 15}.items():
            await store.upsert(seed.exam_id, seed.enrollments["7801"], code, value, False, ADMIN)
        await session.commit()
    return seed


async def test_generate_and_read_back(db, with_marks):
    seed = with_marks
    service = SnapshotService(db)

    snapshot = await service.generate(seed.exam_id, seed.enrollments["7801"], ADMIN)
    out = await service.get(seed.exam_id, seed.enrollments["7801"])

    assert snapshot.generated_by == ADMIN.id
    assert out.overall_gpa == 3.2
    assert out.final_grade == "A"
    assert out.result_status == "PASS"
    assert out.published_at is None
    assert [s["subject_name"] for s in out.payload["subjects"]] == ["English", "Nepali"]


async def test_regenerate_updates_the_same_snapshot(db, with_marks):
    seed = with_marks
    service = SnapshotService(db)

    first = await service.generate(seed.exam_id, seed.enrollments["7801"], ADMIN)
    second = await service.generate(seed.exam_id, seed.enrollments["7801"], ADMIN)

    assert first.id == second.id


async def test_missing_snapshot_is_not_found(db, seed):
    with pytest.raises(NotFoundError):
        await SnapshotService(db).get(seed.exam_id, seed.enrollments["7801"])


async def test_publish_locks_exam(db, with_marks):
    seed = with_marks
    service = SnapshotService(db)
    await service.generate(seed.exam_id, seed.enrollments["7801"], ADMIN)

    published = await service.publish(seed.exam_id, ADMIN)

    assert published == 1
    exam = await db.get(Exam, seed.exam_id)
    assert exam.is_locked is True
    assert (await service.get(seed.exam_id, seed.enrollments["7801"])).published_at is not None

    with pytest.raises(ExamLockedError):
        await service.publish(seed.exam_id, ADMIN)
    with pytest.raises(ExamLockedError):
        await service.generate(seed.exam_id, seed.enrollments["7802"], ADMIN)


async def test_privileged_role_may_generate_on_locked_exam(db, with_marks):
    seed = with_marks
    service = SnapshotService(db)
    await service.generate(seed.exam_id, seed.enrollments["7801"], ADMIN)
    await service.publish(seed.exam_id, ADMIN)

    snapshot = await service.generate(seed.exam_id, seed.enrollments["7802"], SUPER_ADMIN)
    assert snapshot.published_at is None

    # a published snapshot is frozen even for the privileged role
    with pytest.raises(ExamLockedError):
        await service.generate(seed.exam_id, seed.enrollments["7801"], SUPER_ADMIN)


async def test_publish_without_snapshots(db, seed):
    with pytest.raises(ConfigError):
        await SnapshotService(db).publish(seed.exam_id, ADMIN)
