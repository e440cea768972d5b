# portal/services/post_service.py

import re
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import select
from sqlalchemy import or_, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.exceptions import NotFound
from portal.core.policies import Actor
from portal.core.roles import is_admin, has_role_or_higher
from portal.models.enums import PostStatus, UserRole
from portal.models.post import Post, PostCategory
from portal.services.lifecycle_service import scoped


# ============================================================================
# SCOPES
# ============================================================================
def published_clause(now: Optional[datetime] = None):
    """Published, already live and not yet expired."""
    now = now or datetime.utcnow()
    return and_(
        Post.status == PostStatus.Published,
        or_(Post.publish_at.is_(None), Post.publish_at <= now),
        or_(Post.expire_at.is_(None), Post.expire_at > now),
    )


def visible_to(query, actor: Optional[Actor]):
    """Admins see every post, teachers also see their own drafts, everyone else only live posts."""
    if actor is not None and is_admin(actor.role):
        return query
    if actor is not None and has_role_or_higher(actor.role, UserRole.Teacher):
        return query.where(or_(published_clause(), Post.created_by == actor.id))
    return query.where(published_clause())


# ============================================================================
# SLUGS
# ============================================================================
def slugify(text: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")
    return slug[:100]


async def unique_slug(session: AsyncSession, base: str, exclude_id: Optional[int] = None) -> str:
    base = slugify(base) or f"post-{uuid.uuid4().hex[:8]}"
    candidate, n = base, 2
    while True:
        query = select(Post.id).where(Post.slug == candidate)
        if exclude_id:
            query = query.where(Post.id != exclude_id)
        result = await session.execute(query)
        if result.scalar_one_or_none() is None:
            return candidate
        candidate = f"{base}-{n}"
        n += 1


# ============================================================================
# QUERIES
# ============================================================================
async def list_posts(
    session: AsyncSession,
    actor: Optional[Actor],
    status: Optional[PostStatus] = None,
    category_id: Optional[int] = None,
    trashed: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
) -> list[Post]:
    query = visible_to(scoped(select(Post), Post, trashed), actor)
    if status:
        query = query.where(Post.status == status)
    if category_id:
        query = query.where(Post.category_id == category_id)

    query = query.order_by(Post.pinned.desc(), Post.publish_at.desc(), Post.id.desc())
    result = await session.execute(query.limit(limit).offset(offset))
    return result.scalars().all()


async def get_post(session: AsyncSession, post_id: int, with_trashed: bool = False) -> Post:
    query = select(Post).where(Post.id == post_id)
    if not with_trashed:
        query = query.where(Post.deleted_at.is_(None))
    result = await session.execute(query)
    post = result.scalar_one_or_none()
    if not post:
        raise NotFound("Post not found")
    return post


# ============================================================================
# MUTATIONS
# ============================================================================
async def create_post(session: AsyncSession, author_id: int, **fields) -> Post:
    if fields.get("category_id"):
        await _ensure_category(session, fields["category_id"])

    fields["slug"] = await unique_slug(session, fields.get("slug") or fields.get("title_en") or fields["title"])
    if fields.get("status") == PostStatus.Published and not fields.get("publish_at"):
        fields["publish_at"] = datetime.utcnow()

    post = Post(**fields, created_by=author_id, updated_by=author_id)
    session.add(post)
    await session.commit()
    await session.refresh(post)
    return post


async def update_post(session: AsyncSession, post: Post, editor_id: int, **fields) -> Post:
    if fields.get("category_id"):
        await _ensure_category(session, fields["category_id"])
    if fields.get("slug"):
        fields["slug"] = await unique_slug(session, fields["slug"], exclude_id=post.id)
    if fields.get("status") == PostStatus.Published and not (fields.get("publish_at") or post.publish_at):
        fields["publish_at"] = datetime.utcnow()

    for key, value in fields.items():
        setattr(post, key, value)
    post.updated_by = editor_id
    post.updated_at = datetime.utcnow()

    session.add(post)
    await session.commit()
    await session.refresh(post)
    return post


async def publish(session: AsyncSession, post: Post, editor_id: int) -> Post:
    return await update_post(session, post, editor_id, status=PostStatus.Published)


async def unpublish(session: AsyncSession, post: Post, editor_id: int) -> Post:
    return await update_post(session, post, editor_id, status=PostStatus.Draft)


# ============================================================================
# CATEGORIES
# ============================================================================
async def _ensure_category(session: AsyncSession, category_id: int) -> PostCategory:
    category = await session.get(PostCategory, category_id)
    if not category or category.deleted_at is not None:
        raise ValueError(f"Post category #{category_id} does not exist")
    return category


async def list_categories(session: AsyncSession) -> list[PostCategory]:
    result = await session.execute(
        select(PostCategory)
        .where(PostCategory.deleted_at.is_(None))
        .order_by(PostCategory.sort_order, PostCategory.id)
    )
    return result.scalars().all()


async def create_category(session: AsyncSession, **fields) -> PostCategory:
    if fields.get("parent_id"):
        await _ensure_category(session, fields["parent_id"])

    category = PostCategory(**fields)
    session.add(category)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ValueError(f"Category slug '{fields['slug']}' already exists")
    await session.refresh(category)
    return category
