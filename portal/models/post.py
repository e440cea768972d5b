# portal/models/post.py

from datetime import datetime
from sqlmodel import Field
from sqlalchemy import Column, Text
from typing import Optional

from portal.models.base import SoftDeleteMixin
from portal.models.enums import PostStatus, PostSourceType, enum_column


class PostCategory(SoftDeleteMixin, table=True):
    __tablename__ = "post_categories"

    id: Optional[int] = Field(default=None, primary_key=True)
    parent_id: Optional[int] = Field(default=None, foreign_key="post_categories.id")
    slug: str = Field(nullable=False, unique=True, index=True)
    name: str = Field(nullable=False)
    name_en: Optional[str] = None
    sort_order: int = Field(default=0)
    visible: bool = Field(default=True)


class Post(SoftDeleteMixin, table=True):
    __tablename__ = "posts"

    id: Optional[int] = Field(default=None, primary_key=True)
    category_id: Optional[int] = Field(default=None, foreign_key="post_categories.id", index=True)
    slug: str = Field(nullable=False, unique=True, index=True)

    status: PostStatus = Field(
        default=PostStatus.Draft,
        sa_column=enum_column(PostStatus, "post_status", index=True)
    )
    source_type: PostSourceType = Field(
        default=PostSourceType.Manual,
        sa_column=enum_column(PostSourceType, "post_source_type")
    )
    source_url: Optional[str] = None

    publish_at: Optional[datetime] = Field(default=None, index=True)
    expire_at: Optional[datetime] = None
    pinned: bool = Field(default=False)
    cover_image_url: Optional[str] = None

    title: str = Field(nullable=False)
    title_en: Optional[str] = None
    summary: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    summary_en: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    content: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    content_en: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    created_by: Optional[int] = Field(default=None, foreign_key="users.id", index=True)
    updated_by: Optional[int] = Field(default=None, foreign_key="users.id")
