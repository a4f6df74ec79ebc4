import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.base import MAX_DB_ID, get_db
from app.core.errors import not_found
from app.crud import post as post_crud
from app.models.user import User
from app.schemas.user import UserProfileResponse
from app.services.auth import get_current_user, get_optional_current_user_id

# 로깅 설정
logger = logging.getLogger(__name__)

router = APIRouter()


def build_profile(db: Session, user: User, current_user_id: Optional[int] = None) -> UserProfileResponse:
    """사용자 정보 + 통계(게시물/팔로워/팔로잉 수)"""
    is_own_profile = current_user_id == user.id
    following = False
    if current_user_id is not None and not is_own_profile:
        following = post_crud.is_following(db, current_user_id, user.id)

    return UserProfileResponse(
        user_id=user.id,
        identity_id=user.identity_id,
        name=user.name,
        profile_image_url=user.profile_image_url,
        posts_count=post_crud.count_user_posts(db, user.id),
        followers_count=post_crud.count_followers(db, user.id),
        following_count=post_crud.count_following(db, user.id),
        is_following=following,
        is_own_profile=is_own_profile,
    )


@router.get("/me", response_model=UserProfileResponse, summary="내 프로필 조회")
def get_my_profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    현재 로그인한 사용자의 프로필을 가져옵니다.

    - 처음 접근하는 사용자는 인증 서비스 정보로 users 테이블에 동기화됩니다.
    """
    return build_profile(db, current_user, current_user.id)


@router.get("/{user_ref}", response_model=UserProfileResponse, summary="특정 사용자 정보 조회")
def get_user_profile(
    user_ref: str,
    db: Session = Depends(get_db),
    current_user_id: Optional[int] = Depends(get_optional_current_user_id)
):
    """
    특정 사용자의 프로필 정보를 가져옵니다.

    - user_ref는 사용자 ID(숫자) 또는 인증 서비스 식별자입니다.
    - 게시물 수, 팔로워 수, 팔로잉 수를 포함합니다.
    - 로그인 시 내가 팔로우 중인지 여부를 포함합니다.
    """
    # ASCII 숫자만 ID로 취급 ('²' 같은 유니코드 숫자는 int() 변환 불가)
    if user_ref.isascii() and user_ref.isdecimal() and int(user_ref) <= MAX_DB_ID:
        user = db.query(User).filter(User.id == int(user_ref)).first()
    else:
        user = db.query(User).filter(User.identity_id == user_ref).first()

    if not user:
        logger.info(f"사용자 조회 실패: {user_ref}")
        raise not_found("사용자를 찾을 수 없습니다.", error="User not found")

    return build_profile(db, user, current_user_id)
