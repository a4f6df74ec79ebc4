from pydantic import BaseModel
from typing import Optional

class UserForPost(BaseModel):
    """게시물/댓글 작성자 표시용 스키마"""
    id: int
    name: str
    profile_image_url: Optional[str] = None

    class Config:
        from_attributes = True

class IdentityUser(BaseModel):
    """인증 서비스에서 조회한 사용자 레코드 (동기화에 필요한 필드만)"""
    identity_id: str
    name: str
    profile_image_url: Optional[str] = None

class UserProfileResponse(BaseModel):
    user_id: int
    identity_id: str
    name: str
    profile_image_url: Optional[str] = None
    posts_count: int = 0
    followers_count: int = 0
    following_count: int = 0
    is_following: bool = False
    is_own_profile: bool = False
