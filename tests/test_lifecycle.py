import pytest
from sqlmodel import select

from portal.core.exceptions import LifecycleError, NotFound
from portal.models.attachment import Attachment
from portal.models.enums import AttachableType, UserRole
from portal.models.lab import Lab, LabTeacher
from portal.models.people import Staff, Teacher
from portal.services import lifecycle_service
from portal.services.lifecycle_service import LifecycleState


async def _add(db_session, record):
    db_session.add(record)
    await db_session.commit()
    await db_session.refresh(record)
    return record


# ------------------------------------------------------------------
# Service level transitions
# ------------------------------------------------------------------
@pytest.mark.asyncio
async def test_soft_delete_and_restore(db_session):
    lab = await _add(db_session, Lab(code="VIS", name="視覺實驗室"))
    assert lifecycle_service.state_of(lab) == LifecycleState.Active

    await lifecycle_service.soft_delete(db_session, lab)
    assert lifecycle_service.state_of(lab) == LifecycleState.Trashed

    with pytest.raises(NotFound):
        await lifecycle_service.get_record(db_session, Lab, lab.id)
    found = await lifecycle_service.get_record(db_session, Lab, lab.id, with_trashed=True)
    assert found.id == lab.id

    await lifecycle_service.restore(db_session, lab)
    assert lab.deleted_at is None


@pytest.mark.asyncio
async def test_invalid_transitions_raise(db_session):
    lab = await _add(db_session, Lab(code="VIS", name="視覺實驗室"))

    with pytest.raises(LifecycleError):
        await lifecycle_service.restore(db_session, lab)

    await lifecycle_service.soft_delete(db_session, lab)
    with pytest.raises(LifecycleError):
        await lifecycle_service.soft_delete(db_session, lab)


@pytest.mark.asyncio
async def test_scoped_queries(db_session):
    kept = await _add(db_session, Lab(code="A", name="A"))
    gone = await _add(db_session, Lab(code="B", name="B"))
    await lifecycle_service.soft_delete(db_session, gone)

    async def ids(trashed):
        query = lifecycle_service.scoped(select(Lab), Lab, trashed).order_by(Lab.id)
        return [lab.id for lab in (await db_session.execute(query)).scalars().all()]

    assert await ids(None) == [kept.id]
    assert await ids("only") == [gone.id]
    assert await ids("with") == [kept.id, gone.id]


@pytest.mark.asyncio
async def test_purge_removes_link_rows(db_session):
    lab = await _add(db_session, Lab(code="NET", name="網路實驗室"))
    teacher = await _add(db_session, Teacher(name="Prof. Lin"))
    await _add(db_session, LabTeacher(lab_id=lab.id, teacher_id=teacher.id))
    lab_id = lab.id

    # purge works straight from the active state
    await lifecycle_service.purge(db_session, lab, (LabTeacher, "lab_id"))

    links = await db_session.execute(select(LabTeacher).where(LabTeacher.lab_id == lab_id))
    assert links.scalars().all() == []
    assert (await db_session.execute(select(Lab).where(Lab.id == lab_id))).scalar_one_or_none() is None


# ------------------------------------------------------------------
# Generic record endpoints
# ------------------------------------------------------------------
@pytest.mark.asyncio
async def test_unknown_record_kind_is_404(client, make_user, auth_headers):
    admin = await make_user(UserRole.Admin)
    res = await client.get("/api/records/widgets", headers=auth_headers(admin))
    assert res.status_code == 404


@pytest.mark.asyncio
async def test_staff_trash_is_admin_only(client, db_session, make_user, auth_headers):
    owner = await make_user(UserRole.Teacher)
    admin = await make_user(UserRole.Admin)
    staff = await _add(db_session, Staff(name="Ms. Chang", user_id=owner.id))

    # owning a staff entry allows editing it, not trashing it
    res = await client.delete(f"/api/records/staff/{staff.id}", headers=auth_headers(owner))
    assert res.status_code == 403

    res = await client.delete(f"/api/records/staff/{staff.id}", headers=auth_headers(admin))
    assert res.status_code == 200

    res = await client.get("/api/records/staff?trashed=only", headers=auth_headers(admin))
    assert [s["id"] for s in res.json()] == [staff.id]

    # the trash bin is not visible to teachers
    res = await client.get("/api/records/staff?trashed=only", headers=auth_headers(owner))
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_record_restore_and_force_delete(client, db_session, make_user, auth_headers):
    admin = await make_user(UserRole.Admin)
    headers = auth_headers(admin)
    teacher = await _add(db_session, Teacher(name="Prof. Wu"))
    teacher_id = teacher.id
    await _add(db_session, Attachment(attachable_type=AttachableType.Teacher, attachable_id=teacher_id, file_url="cv.pdf"))

    assert (await client.post(f"/api/records/teachers/{teacher_id}/restore", headers=headers)).status_code == 409
    assert (await client.delete(f"/api/records/teachers/{teacher_id}", headers=headers)).status_code == 200

    res = await client.post(f"/api/records/teachers/{teacher_id}/restore", headers=headers)
    assert res.status_code == 200
    assert res.json()["deleted_at"] is None

    assert (await client.delete(f"/api/records/teachers/{teacher_id}/force", headers=headers)).status_code == 200

    db_session.expire_all()
    result = await db_session.execute(select(Attachment).where(Attachment.attachable_id == teacher_id))
    assert result.scalars().all() == []
    assert (await client.delete(f"/api/records/teachers/{teacher_id}/force", headers=headers)).status_code == 404
