from pydantic import BaseModel, Field

from app.db.base import MAX_DB_ID

# 좋아요/팔로우/삭제 등 단순 처리 결과 응답
class ActionResponse(BaseModel):
    success: bool = True
    message: str

class LikeRequest(BaseModel):
    post_id: int = Field(alias="postId", le=MAX_DB_ID)

    class Config:
        populate_by_name = True

class LikeResponse(ActionResponse):
    post_id: int
    like_count: int

class FollowRequest(BaseModel):
    following_id: int = Field(alias="followingId", le=MAX_DB_ID)

    class Config:
        populate_by_name = True

class FollowResponse(ActionResponse):
    following_id: int
    followers_count: int
