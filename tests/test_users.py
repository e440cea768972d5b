import pytest
from sqlmodel import select

from portal.models.audit import AuditLog
from portal.models.enums import UserRole
from portal.models.user import User


@pytest.mark.asyncio
async def test_list_users_requires_auth(client):
    res = await client.get("/api/users/")
    assert res.status_code == 401


@pytest.mark.asyncio
async def test_plain_user_cannot_list(client, make_user, auth_headers):
    user = await make_user(UserRole.User)
    res = await client.get("/api/users/", headers=auth_headers(user))
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_teacher_lists_only_plain_accounts(client, make_user, auth_headers):
    teacher = await make_user(UserRole.Teacher)
    await make_user(UserRole.Admin)
    plain = await make_user(UserRole.User)

    res = await client.get("/api/users/", headers=auth_headers(teacher))

    assert res.status_code == 200
    assert [u["id"] for u in res.json()] == [plain.id]


@pytest.mark.asyncio
async def test_listing_scopes_by_role_and_trash(client, make_user, auth_headers):
    admin = await make_user(UserRole.Admin)
    teacher = await make_user(UserRole.Teacher)
    kept = await make_user(UserRole.User)
    gone = await make_user(UserRole.User)

    assert (await client.delete(f"/api/users/{gone.id}", headers=auth_headers(admin))).status_code == 200

    res = await client.get("/api/users/", headers=auth_headers(admin))
    assert [u["id"] for u in res.json()] == [admin.id, teacher.id, kept.id]

    res = await client.get("/api/users/?role=user&trashed=with", headers=auth_headers(admin))
    assert [u["id"] for u in res.json()] == [kept.id, gone.id]

    # teachers only see active plain accounts, whatever they ask for
    res = await client.get("/api/users/?trashed=only", headers=auth_headers(teacher))
    assert [u["id"] for u in res.json()] == [kept.id]


@pytest.mark.asyncio
async def test_admin_creates_user(client, make_user, auth_headers):
    admin = await make_user(UserRole.Admin)
    payload = {"name": "New TA", "email": "ta@dept.edu", "password": "password123", "role": "teacher"}

    res = await client.post("/api/users/", json=payload, headers=auth_headers(admin))

    assert res.status_code == 201
    assert res.json()["role"] == "teacher"

    dup = await client.post("/api/users/", json=payload, headers=auth_headers(admin))
    assert dup.status_code == 400


@pytest.mark.asyncio
async def test_admin_cannot_delete_self(client, make_user, auth_headers):
    admin = await make_user(UserRole.Admin)
    headers = auth_headers(admin)

    assert (await client.delete(f"/api/users/{admin.id}", headers=headers)).status_code == 403
    assert (await client.delete(f"/api/users/{admin.id}/force", headers=headers)).status_code == 403


@pytest.mark.asyncio
async def test_admin_cannot_delete_other_admin(client, make_user, auth_headers):
    admin = await make_user(UserRole.Admin)
    other = await make_user(UserRole.Admin)
    res = await client.delete(f"/api/users/{other.id}", headers=auth_headers(admin))
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_admin_can_update_self_but_not_own_role(client, make_user, auth_headers):
    admin = await make_user(UserRole.Admin)
    headers = auth_headers(admin)

    res = await client.patch(f"/api/users/{admin.id}", json={"name": "Chair"}, headers=headers)
    assert res.status_code == 200
    assert res.json()["name"] == "Chair"

    res = await client.patch(f"/api/users/{admin.id}", json={"role": "teacher"}, headers=headers)
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_admin_assigns_role_and_it_is_audited(client, db_session, make_user, auth_headers):
    admin = await make_user(UserRole.Admin)
    user = await make_user(UserRole.User)

    res = await client.patch(f"/api/users/{user.id}", json={"role": "teacher"}, headers=auth_headers(admin))

    assert res.status_code == 200
    assert res.json()["role"] == "teacher"

    result = await db_session.execute(select(AuditLog).where(AuditLog.action == "assign_role"))
    log = result.scalar_one()
    assert log.actor_id == admin.id
    assert log.details == {"from": "user", "to": "teacher"}


@pytest.mark.asyncio
async def test_teacher_updates_plain_user_but_cannot_change_role(client, make_user, auth_headers):
    teacher = await make_user(UserRole.Teacher)
    user = await make_user(UserRole.User)
    headers = auth_headers(teacher)

    assert (await client.patch(f"/api/users/{user.id}", json={"name": "Renamed"}, headers=headers)).status_code == 200
    assert (await client.patch(f"/api/users/{user.id}", json={"role": "admin"}, headers=headers)).status_code == 403
    assert (await client.patch(f"/api/users/{user.id}", json={"status": "suspended"}, headers=headers)).status_code == 403


@pytest.mark.asyncio
async def test_user_soft_delete_restore_and_purge(client, db_session, make_user, auth_headers):
    admin = await make_user(UserRole.Admin)
    user = await make_user(UserRole.User)
    headers = auth_headers(admin)

    assert (await client.delete(f"/api/users/{user.id}", headers=headers)).status_code == 200

    trash = await client.get("/api/users/?trashed=only", headers=headers)
    assert [u["id"] for u in trash.json()] == [user.id]

    # a trashed account can no longer sign in with its token
    assert (await client.get("/api/auth/me", headers=auth_headers(user))).status_code == 401

    res = await client.post(f"/api/users/{user.id}/restore", headers=headers)
    assert res.status_code == 200
    assert res.json()["deleted_at"] is None

    assert (await client.delete(f"/api/users/{user.id}/force", headers=headers)).status_code == 200

    user_id = user.id
    db_session.expire_all()
    result = await db_session.execute(select(User).where(User.id == user_id))
    assert result.scalar_one_or_none() is None

    actions = (await db_session.execute(select(AuditLog.action).order_by(AuditLog.id))).scalars().all()
    assert actions == ["delete_user", "restore_user", "force_delete_user"]


@pytest.mark.asyncio
async def test_audit_log_listing_is_admin_only(client, make_user, auth_headers):
    admin = await make_user(UserRole.Admin)
    teacher = await make_user(UserRole.Teacher)

    assert (await client.get("/api/admin/audit-logs/", headers=auth_headers(teacher))).status_code == 403
    res = await client.get("/api/admin/audit-logs/", headers=auth_headers(admin))
    assert res.status_code == 200
    assert res.json() == []
