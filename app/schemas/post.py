from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from app.schemas.user import UserForPost
from app.schemas.comment import CommentPreview

# 게시물 응답 스키마
class PostResponse(BaseModel):
    id: int
    user_id: int
    image_url: Optional[str] = None
    caption: Optional[str] = None
    created_at: datetime
    user: Optional[UserForPost] = None
    like_count: int = 0
    is_liked: bool = False
    comments: List[CommentPreview] = []
    total_comments: int = 0

# 게시물 목록(피드) 응답 스키마
class PostListResponse(BaseModel):
    posts: List[PostResponse]
    has_more: bool = Field(serialization_alias="hasMore")
    page: int
    total: int
