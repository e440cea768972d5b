# portal/api/endpoints/posts.py

from typing import List, Literal, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from portal.api.deps import get_db_session, get_current_actor, get_optional_actor
from portal.core.exceptions import NotFound
from portal.core.policies import Actor, Resource, ResourceKind, authorize
from portal.core.roles import is_admin
from portal.models.enums import AttachableType, PostStatus
from portal.models.post import Post
from portal.schemas.post import (
    PostCategoryCreate,
    PostCategoryRead,
    PostCreate,
    PostRead,
    PostUpdate,
)
from portal.services import lifecycle_service, post_service
from portal.services.audit_service import log_activity
from portal.services.record_service import detach_all

router = APIRouter(prefix="/api/posts", tags=["Posts"])
category_router = APIRouter(prefix="/api/post-categories", tags=["Posts"])


def _status_actions(post: Post, new_status: Optional[PostStatus]) -> list[str]:
    """Extra permissions needed to move a post between draft and published."""
    if new_status is None or new_status == post.status:
        return []
    if new_status == PostStatus.Published:
        return ["publish"]
    if post.status == PostStatus.Published:
        return ["unpublish"]
    return []


# -------------------------------------------------------------------
# Listing & reading (public; drafts only for owners and admins)
# -------------------------------------------------------------------
@router.get("/", response_model=List[PostRead])
async def list_posts(
    status_filter: Optional[PostStatus] = Query(None, alias="status"),
    category_id: Optional[int] = None,
    trashed: Optional[Literal["with", "only"]] = None,
    limit: int = 50,
    offset: int = 0,
    session: AsyncSession = Depends(get_db_session),
    actor: Optional[Actor] = Depends(get_optional_actor),
):
    if trashed and (actor is None or not is_admin(actor.role)):
        trashed = None
    return await post_service.list_posts(
        session, actor,
        status=status_filter, category_id=category_id, trashed=trashed,
        limit=min(limit, 200), offset=offset,
    )


@router.get("/{post_id}", response_model=PostRead)
async def read_post(
    post_id: int,
    session: AsyncSession = Depends(get_db_session),
    actor: Optional[Actor] = Depends(get_optional_actor),
):
    post = await post_service.get_post(session, post_id)

    if actor is None:
        # anonymous visitors get the same view as a plain account
        if post.status != PostStatus.Published:
            raise NotFound("Post not found")
        return post

    authorize(actor, "view", ResourceKind.Post, Resource.of_post(post))
    return post


# -------------------------------------------------------------------
# Create / update
# -------------------------------------------------------------------
@router.post("/", response_model=PostRead, status_code=status.HTTP_201_CREATED)
async def create_post(
    data: PostCreate,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    authorize(actor, "create", ResourceKind.Post)
    if data.status == PostStatus.Published:
        authorize(actor, "publish", ResourceKind.Post)
    if data.publish_at is not None:
        authorize(actor, "schedule_post", ResourceKind.Post)

    try:
        return await post_service.create_post(session, actor.id, **data.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.patch("/{post_id}", response_model=PostRead)
async def update_post(
    post_id: int,
    data: PostUpdate,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    post = await post_service.get_post(session, post_id)
    authorize(actor, "update", ResourceKind.Post, Resource.of_post(post))

    changes = data.model_dump(exclude_unset=True)
    for action in _status_actions(post, changes.get("status")):
        authorize(actor, action, ResourceKind.Post, Resource.of_post(post))
    if changes.get("publish_at") is not None and changes["publish_at"] != post.publish_at:
        authorize(actor, "schedule_post", ResourceKind.Post)

    try:
        return await post_service.update_post(session, post, actor.id, **changes)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/{post_id}/publish", response_model=PostRead)
async def publish_post(
    post_id: int,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    post = await post_service.get_post(session, post_id)
    authorize(actor, "publish", ResourceKind.Post, Resource.of_post(post))
    return await post_service.publish(session, post, actor.id)


@router.post("/{post_id}/unpublish", response_model=PostRead)
async def unpublish_post(
    post_id: int,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    post = await post_service.get_post(session, post_id)
    authorize(actor, "unpublish", ResourceKind.Post, Resource.of_post(post))
    return await post_service.unpublish(session, post, actor.id)


# -------------------------------------------------------------------
# Trash / restore / purge
# -------------------------------------------------------------------
@router.delete("/{post_id}")
async def delete_post(
    post_id: int,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    post = await post_service.get_post(session, post_id)
    authorize(actor, "delete", ResourceKind.Post, Resource.of_post(post))
    await lifecycle_service.soft_delete(session, post)
    return {"detail": "Post moved to trash"}


@router.post("/{post_id}/restore", response_model=PostRead)
async def restore_post(
    post_id: int,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    post = await post_service.get_post(session, post_id, with_trashed=True)
    authorize(actor, "restore", ResourceKind.Post, Resource.of_post(post))
    await lifecycle_service.restore(session, post)
    await log_activity("restore_post", actor.id, "post", post.id)
    return post


@router.delete("/{post_id}/force")
async def force_delete_post(
    post_id: int,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    post = await post_service.get_post(session, post_id, with_trashed=True)
    authorize(actor, "force_delete", ResourceKind.Post, Resource.of_post(post))

    title = post.title
    await detach_all(session, AttachableType.Post, post_id)
    await lifecycle_service.purge(session, post)
    await log_activity("force_delete_post", actor.id, "post", post_id, details={"title": title})
    return {"detail": "Post permanently deleted"}


# -------------------------------------------------------------------
# Categories
# -------------------------------------------------------------------
@category_router.get("/", response_model=List[PostCategoryRead])
async def list_categories(session: AsyncSession = Depends(get_db_session)):
    return await post_service.list_categories(session)


@category_router.post("/", response_model=PostCategoryRead, status_code=status.HTTP_201_CREATED)
async def create_category(
    data: PostCategoryCreate,
    session: AsyncSession = Depends(get_db_session),
    actor: Actor = Depends(get_current_actor),
):
    authorize(actor, "manage_categories", ResourceKind.Post)
    try:
        return await post_service.create_category(session, **data.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
