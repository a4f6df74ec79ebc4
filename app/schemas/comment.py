from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional
from app.db.base import MAX_DB_ID
from app.models.comment import MAX_COMMENT_LENGTH
from app.schemas.user import UserForPost # 사용자 스키마 임포트


class CommentCreate(BaseModel):
    post_id: int = Field(alias="postId", le=MAX_DB_ID)
    content: str

    class Config:
        populate_by_name = True

    @field_validator("content")
    @classmethod
    def validate_content(cls, value: str) -> str:
        content = value.strip()
        if not content:
            raise ValueError("댓글 내용을 입력해주세요.")
        if len(content) > MAX_COMMENT_LENGTH:
            raise ValueError(f"댓글은 최대 {MAX_COMMENT_LENGTH}자까지 입력 가능합니다.")
        return content

class CommentResponse(BaseModel):
    id: int
    post_id: int
    user_id: int
    content: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    user: UserForPost # 댓글 작성자

    class Config:
        from_attributes = True

# 게시물 카드에 표시되는 댓글 요약
class CommentPreview(BaseModel):
    id: int
    username: str
    content: str
    user_id: int = Field(serialization_alias="userId")
    created_at: Optional[datetime] = None
