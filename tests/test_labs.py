import pytest

from portal.models.enums import UserRole
from portal.models.lab import Lab, LabTeacher


async def _lab(db_session, code="AIL", members=()) -> Lab:
    lab = Lab(code=code, name="人工智慧實驗室")
    db_session.add(lab)
    await db_session.commit()
    await db_session.refresh(lab)
    for teacher in members:
        db_session.add(LabTeacher(lab_id=lab.id, teacher_id=teacher.id))
    await db_session.commit()
    return lab


@pytest.mark.asyncio
async def test_public_lab_listing_falls_back_to_primary_name(client, db_session):
    await _lab(db_session)
    res = await client.get("/api/labs/")
    assert res.status_code == 200
    assert res.json()[0]["name_en"] == "人工智慧實驗室"


@pytest.mark.asyncio
async def test_member_teacher_updates_lab(client, db_session, make_user, make_teacher_profile, auth_headers):
    member = await make_user(UserRole.Teacher)
    outsider = await make_user(UserRole.Teacher)
    profile = await make_teacher_profile(member)
    await make_teacher_profile(outsider, name="Prof. Chen")
    lab = await _lab(db_session, members=[profile])

    res = await client.patch(f"/api/labs/{lab.id}", json={"phone": "ext. 3321"}, headers=auth_headers(member))
    assert res.status_code == 200
    assert res.json()["phone"] == "ext. 3321"

    res = await client.patch(f"/api/labs/{lab.id}", json={"phone": "x"}, headers=auth_headers(outsider))
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_teacher_without_profile_cannot_update(client, db_session, make_user, auth_headers):
    teacher = await make_user(UserRole.Teacher)
    lab = await _lab(db_session)
    res = await client.patch(f"/api/labs/{lab.id}", json={"phone": "x"}, headers=auth_headers(teacher))
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_admin_updates_any_lab(client, db_session, make_user, auth_headers):
    admin = await make_user(UserRole.Admin)
    lab = await _lab(db_session)
    res = await client.patch(f"/api/labs/{lab.id}", json={"name_en": "AI Lab"}, headers=auth_headers(admin))
    assert res.status_code == 200
    assert res.json()["name_en"] == "AI Lab"


@pytest.mark.asyncio
async def test_member_manages_members(client, db_session, make_user, make_teacher_profile, auth_headers):
    member = await make_user(UserRole.Teacher)
    profile = await make_teacher_profile(member)
    colleague = await make_teacher_profile(name="Prof. Wu")
    lab = await _lab(db_session, members=[profile])

    res = await client.put(
        f"/api/labs/{lab.id}/members",
        json={"teacher_ids": [profile.id, colleague.id]},
        headers=auth_headers(member),
    )
    assert res.status_code == 200
    assert sorted(m["id"] for m in res.json()) == sorted([profile.id, colleague.id])

    res = await client.get(f"/api/labs/{lab.id}/members")
    assert len(res.json()) == 2


@pytest.mark.asyncio
async def test_unknown_member_id_is_rejected(client, db_session, make_user, auth_headers):
    admin = await make_user(UserRole.Admin)
    lab = await _lab(db_session)
    res = await client.put(f"/api/labs/{lab.id}/members", json={"teacher_ids": [999]}, headers=auth_headers(admin))
    assert res.status_code == 400


@pytest.mark.asyncio
async def test_lab_create_and_delete_are_admin_only(client, db_session, make_user, auth_headers):
    teacher = await make_user(UserRole.Teacher)
    admin = await make_user(UserRole.Admin)
    payload = {"code": "NET", "name": "網路實驗室"}

    assert (await client.post("/api/labs/", json=payload, headers=auth_headers(teacher))).status_code == 403

    res = await client.post("/api/labs/", json=payload, headers=auth_headers(admin))
    assert res.status_code == 201
    lab_id = res.json()["id"]

    assert (await client.post("/api/labs/", json=payload, headers=auth_headers(admin))).status_code == 400

    assert (await client.delete(f"/api/labs/{lab_id}", headers=auth_headers(teacher))).status_code == 403
    assert (await client.delete(f"/api/labs/{lab_id}", headers=auth_headers(admin))).status_code == 200
    assert (await client.get(f"/api/labs/{lab_id}")).status_code == 404


@pytest.mark.asyncio
async def test_teacher_area_lists_own_labs(client, db_session, make_user, make_teacher_profile, auth_headers):
    member = await make_user(UserRole.Teacher)
    profile = await make_teacher_profile(member)
    await _lab(db_session, code="MINE", members=[profile])
    await _lab(db_session, code="OTHER")

    res = await client.get("/manage/teacher/labs", headers=auth_headers(member))

    assert res.status_code == 200
    assert [lab["code"] for lab in res.json()] == ["MINE"]
