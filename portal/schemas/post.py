from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator

from portal.models.enums import PostStatus, PostSourceType


# -------------------------------------------------------------------
# CATEGORIES
# -------------------------------------------------------------------
class PostCategoryCreate(BaseModel):
    slug: str = Field(min_length=1, max_length=120)
    name: str
    name_en: Optional[str] = None
    parent_id: Optional[int] = None
    sort_order: int = 0
    visible: bool = True


class PostCategoryRead(PostCategoryCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int


# -------------------------------------------------------------------
# POSTS
# -------------------------------------------------------------------
class PostCreate(BaseModel):
    title: str = Field(min_length=1)
    title_en: Optional[str] = None
    slug: Optional[str] = None
    category_id: Optional[int] = None
    status: PostStatus = PostStatus.Draft
    source_type: PostSourceType = PostSourceType.Manual
    source_url: Optional[str] = None
    publish_at: Optional[datetime] = None
    expire_at: Optional[datetime] = None
    pinned: bool = False
    cover_image_url: Optional[str] = None
    summary: Optional[str] = None
    summary_en: Optional[str] = None
    content: Optional[str] = None
    content_en: Optional[str] = None

    @model_validator(mode="after")
    def check_link_source(self):
        if self.source_type == PostSourceType.Link and not self.source_url:
            raise ValueError("source_url is required for link posts")
        return self


class PostUpdate(BaseModel):
    title: Optional[str] = None
    title_en: Optional[str] = None
    slug: Optional[str] = None
    category_id: Optional[int] = None
    status: Optional[PostStatus] = None
    source_type: Optional[PostSourceType] = None
    source_url: Optional[str] = None
    publish_at: Optional[datetime] = None
    expire_at: Optional[datetime] = None
    pinned: Optional[bool] = None
    cover_image_url: Optional[str] = None
    summary: Optional[str] = None
    summary_en: Optional[str] = None
    content: Optional[str] = None
    content_en: Optional[str] = None


class PostRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    slug: str
    category_id: Optional[int] = None
    status: PostStatus
    source_type: PostSourceType
    source_url: Optional[str] = None
    publish_at: Optional[datetime] = None
    expire_at: Optional[datetime] = None
    pinned: bool
    cover_image_url: Optional[str] = None
    title: str
    title_en: Optional[str] = None
    summary: Optional[str] = None
    summary_en: Optional[str] = None
    content: Optional[str] = None
    content_en: Optional[str] = None
    created_by: Optional[int] = None
    updated_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None

    # English fields fall back to the primary language
    @model_validator(mode="after")
    def fill_translations(self):
        self.title_en = self.title_en or self.title
        self.summary_en = self.summary_en or self.summary
        self.content_en = self.content_en or self.content
        return self
