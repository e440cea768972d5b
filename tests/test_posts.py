import pytest

from portal.models.enums import PostStatus, UserRole
from portal.models.post import Post


async def _post(db_session, author=None, status=PostStatus.Draft, title="Seminar", slug=None) -> Post:
    post = Post(
        title=title,
        slug=slug or f"{title.lower()}-{status.value}",
        status=status,
        created_by=author.id if author else None,
    )
    db_session.add(post)
    await db_session.commit()
    await db_session.refresh(post)
    return post


@pytest.mark.asyncio
async def test_anonymous_list_shows_only_published(client, db_session):
    await _post(db_session, status=PostStatus.Published, title="Open")
    await _post(db_session, status=PostStatus.Draft, title="Hidden")

    res = await client.get("/api/posts/")

    assert res.status_code == 200
    assert [p["title"] for p in res.json()] == ["Open"]


@pytest.mark.asyncio
async def test_teacher_list_includes_own_drafts(client, db_session, make_user, auth_headers):
    teacher = await make_user(UserRole.Teacher)
    other = await make_user(UserRole.Teacher)
    await _post(db_session, author=teacher, title="Mine")
    await _post(db_session, author=other, title="Theirs")

    res = await client.get("/api/posts/", headers=auth_headers(teacher))

    assert [p["title"] for p in res.json()] == ["Mine"]


@pytest.mark.asyncio
async def test_draft_view_rules(client, db_session, make_user, auth_headers):
    owner = await make_user(UserRole.Teacher)
    other = await make_user(UserRole.Teacher)
    plain = await make_user(UserRole.User)
    admin = await make_user(UserRole.Admin)
    draft = await _post(db_session, author=owner)

    assert (await client.get(f"/api/posts/{draft.id}", headers=auth_headers(owner))).status_code == 200
    assert (await client.get(f"/api/posts/{draft.id}", headers=auth_headers(admin))).status_code == 200
    assert (await client.get(f"/api/posts/{draft.id}", headers=auth_headers(other))).status_code == 403
    assert (await client.get(f"/api/posts/{draft.id}", headers=auth_headers(plain))).status_code == 403
    assert (await client.get(f"/api/posts/{draft.id}")).status_code == 404


@pytest.mark.asyncio
async def test_teacher_creates_draft_and_becomes_owner(client, make_user, auth_headers):
    teacher = await make_user(UserRole.Teacher)

    res = await client.post("/api/posts/", json={"title": "Thesis Defense"}, headers=auth_headers(teacher))

    assert res.status_code == 201
    body = res.json()
    assert body["created_by"] == teacher.id
    assert body["status"] == "draft"
    assert body["slug"] == "thesis-defense"
    # English fields fall back to the primary text
    assert body["title_en"] == "Thesis Defense"


@pytest.mark.asyncio
async def test_teacher_cannot_publish_directly(client, make_user, auth_headers):
    teacher = await make_user(UserRole.Teacher)
    payload = {"title": "Urgent", "status": "published"}

    res = await client.post("/api/posts/", json=payload, headers=auth_headers(teacher))
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_plain_user_cannot_create(client, make_user, auth_headers):
    user = await make_user(UserRole.User)
    res = await client.post("/api/posts/", json={"title": "Hi"}, headers=auth_headers(user))
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_owner_updates_but_other_teacher_cannot(client, db_session, make_user, auth_headers):
    owner = await make_user(UserRole.Teacher)
    other = await make_user(UserRole.Teacher)
    post = await _post(db_session, author=owner)

    res = await client.patch(f"/api/posts/{post.id}", json={"summary": "Room 101"}, headers=auth_headers(owner))
    assert res.status_code == 200
    assert res.json()["summary"] == "Room 101"
    assert res.json()["updated_by"] == owner.id

    res = await client.patch(f"/api/posts/{post.id}", json={"summary": "x"}, headers=auth_headers(other))
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_owner_cannot_publish_via_update(client, db_session, make_user, auth_headers):
    owner = await make_user(UserRole.Teacher)
    post = await _post(db_session, author=owner)

    res = await client.patch(f"/api/posts/{post.id}", json={"status": "published"}, headers=auth_headers(owner))
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_admin_publish_and_unpublish(client, db_session, make_user, auth_headers):
    admin = await make_user(UserRole.Admin)
    post = await _post(db_session)

    res = await client.post(f"/api/posts/{post.id}/publish", headers=auth_headers(admin))
    assert res.status_code == 200
    assert res.json()["status"] == "published"
    assert res.json()["publish_at"] is not None

    res = await client.post(f"/api/posts/{post.id}/unpublish", headers=auth_headers(admin))
    assert res.json()["status"] == "draft"


@pytest.mark.asyncio
async def test_post_trash_restore_and_force_delete(client, db_session, make_user, auth_headers):
    owner = await make_user(UserRole.Teacher)
    admin = await make_user(UserRole.Admin)
    post = await _post(db_session, author=owner)

    assert (await client.delete(f"/api/posts/{post.id}", headers=auth_headers(owner))).status_code == 200
    assert (await client.get(f"/api/posts/{post.id}", headers=auth_headers(owner))).status_code == 404

    res = await client.post(f"/api/posts/{post.id}/restore", headers=auth_headers(owner))
    assert res.status_code == 200

    # purge is admin only
    assert (await client.delete(f"/api/posts/{post.id}/force", headers=auth_headers(owner))).status_code == 403
    assert (await client.delete(f"/api/posts/{post.id}/force", headers=auth_headers(admin))).status_code == 200
    assert (await client.post(f"/api/posts/{post.id}/restore", headers=auth_headers(admin))).status_code == 404


@pytest.mark.asyncio
async def test_categories_are_admin_managed(client, make_user, auth_headers):
    teacher = await make_user(UserRole.Teacher)
    admin = await make_user(UserRole.Admin)
    payload = {"slug": "news", "name": "最新消息", "name_en": "News"}

    assert (await client.post("/api/post-categories/", json=payload, headers=auth_headers(teacher))).status_code == 403
    assert (await client.post("/api/post-categories/", json=payload, headers=auth_headers(admin))).status_code == 201

    res = await client.get("/api/post-categories/")
    assert [c["slug"] for c in res.json()] == ["news"]


@pytest.mark.asyncio
async def test_unknown_category_is_rejected(client, make_user, auth_headers):
    teacher = await make_user(UserRole.Teacher)
    res = await client.post("/api/posts/", json={"title": "X", "category_id": 42}, headers=auth_headers(teacher))
    assert res.status_code == 400
