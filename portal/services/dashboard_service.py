# portal/services/dashboard_service.py

from sqlmodel import select
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession

from portal.models.attachment import Attachment
from portal.models.contact_message import ContactMessage
from portal.models.enums import ContactMessageStatus, PostStatus, AttachmentType, UserRole
from portal.models.post import Post
from portal.models.user import User
from portal.services.attachment_service import total_size


async def _grouped_counts(session: AsyncSession, column, *where) -> dict:
    query = select(column, func.count()).group_by(column)
    if where:
        query = query.where(*where)
    result = await session.execute(query)
    return {_key(row[0]): row[1] for row in result.all()}


def _key(value):
    return getattr(value, "value", value)


async def _count(session: AsyncSession, model, *where) -> int:
    result = await session.execute(select(func.count()).select_from(model).where(*where))
    return int(result.scalar_one())


async def admin_dashboard_data(session: AsyncSession, recent: int = 5) -> dict:
    post_counts = await _grouped_counts(session, Post.status, Post.deleted_at.is_(None))
    attachment_counts = await _grouped_counts(session, Attachment.type, Attachment.deleted_at.is_(None))
    message_counts = await _grouped_counts(session, ContactMessage.status)
    user_counts = await _grouped_counts(session, User.role, User.deleted_at.is_(None))

    recent_posts = await session.execute(
        select(Post).where(Post.deleted_at.is_(None)).order_by(Post.updated_at.desc(), Post.id.desc()).limit(recent)
    )
    recent_attachments = await session.execute(
        select(Attachment).where(Attachment.deleted_at.is_(None))
        .order_by(Attachment.created_at.desc(), Attachment.id.desc()).limit(recent)
    )

    return {
        "posts": {
            "total": sum(post_counts.values()),
            **{s.value: post_counts.get(s.value, 0) for s in PostStatus},
            "trashed": await _count(session, Post, Post.deleted_at.is_not(None)),
        },
        "attachments": {
            "total": sum(attachment_counts.values()),
            **{t.value: attachment_counts.get(t.value, 0) for t in AttachmentType},
            "trashed": await _count(session, Attachment, Attachment.deleted_at.is_not(None)),
            "total_size": await total_size(session),
        },
        "contact_messages": {
            "total": sum(message_counts.values()),
            **{s.value: message_counts.get(s.value, 0) for s in ContactMessageStatus},
        },
        "users": {r.value: user_counts.get(r.value, 0) for r in UserRole},
        "recent_posts": [
            {"id": p.id, "title": p.title, "status": p.status.value, "updated_at": p.updated_at}
            for p in recent_posts.scalars().all()
        ],
        "recent_attachments": [
            {"id": a.id, "title": a.title, "type": a.type.value, "created_at": a.created_at}
            for a in recent_attachments.scalars().all()
        ],
    }
