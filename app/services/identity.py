"""
외부 인증 서비스(Identity Provider) 연동

인증 서비스의 백엔드 API에서 사용자 레코드를 조회하고,
로컬 users 테이블에 identity_id 기준으로 upsert 합니다.
"""
import logging
from typing import Optional

import httpx
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.user import User
from app.schemas.user import IdentityUser

logger = logging.getLogger(__name__)


class IdentityProviderError(Exception):
    """인증 서비스 API 호출 실패 (네트워크 오류 또는 2xx 이외 응답)"""
    def __init__(self, message: str, status_code: Optional[int] = None, not_found: bool = False):
        super().__init__(message)
        self.status_code = status_code
        self.not_found = not_found


def resolve_display_name(record: dict) -> str:
    """
    표시 이름 결정 순서: 전체 이름 → username → 첫 번째 이메일 → "Unknown"
    """
    full_name = " ".join(
        part.strip() for part in (record.get("first_name"), record.get("last_name")) if part and part.strip()
    )
    if full_name:
        return full_name
    if record.get("username"):
        return record["username"]
    for email in record.get("email_addresses") or []:
        address = email.get("email_address") if isinstance(email, dict) else None
        if address:
            return address
    return "Unknown"


def _http_client() -> httpx.Client:
    return httpx.Client(timeout=settings.IDENTITY_API_TIMEOUT)


def fetch_identity_user(identity_id: str) -> IdentityUser:
    """인증 서비스에서 사용자 레코드를 조회합니다."""
    url = f"{settings.IDENTITY_API_URL.rstrip('/')}/users/{identity_id}"
    headers = {"Authorization": f"Bearer {settings.IDENTITY_SECRET_KEY}", "Accept": "application/json"}

    try:
        with _http_client() as client:
            response = client.get(url, headers=headers)
    except httpx.HTTPError as e:
        raise IdentityProviderError(f"인증 서비스 연결 실패: {e}") from e

    if response.status_code == 404:
        raise IdentityProviderError("인증 서비스에 사용자가 없습니다.", status_code=404, not_found=True)
    if not response.is_success:
        raise IdentityProviderError(
            f"인증 서비스 응답 오류 {response.status_code}: {response.text[:200]}",
            status_code=response.status_code,
        )

    record = response.json()
    return IdentityUser(
        identity_id=record.get("id") or identity_id,
        name=resolve_display_name(record),
        profile_image_url=record.get("image_url"),
    )


def get_user_by_identity_id(db: Session, identity_id: str) -> Optional[User]:
    return db.query(User).filter(User.identity_id == identity_id).first()


def upsert_user(db: Session, identity_user: IdentityUser) -> User:
    """
    identity_id 기준 upsert.
    동시 요청으로 INSERT가 유니크 제약에 걸리면 롤백 후 기존 행을 갱신합니다.
    """
    user = get_user_by_identity_id(db, identity_user.identity_id)
    if user is None:
        user = User(
            identity_id=identity_user.identity_id,
            name=identity_user.name,
            profile_image_url=identity_user.profile_image_url,
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.info(f"동시 생성된 사용자 재조회: {identity_user.identity_id}")
            user = get_user_by_identity_id(db, identity_user.identity_id)
            if user is None:
                raise
        else:
            db.refresh(user)
            return user

    user.name = identity_user.name
    user.profile_image_url = identity_user.profile_image_url
    db.commit()
    db.refresh(user)
    return user


def sync_user(db: Session, identity_id: str) -> User:
    """인증 서비스의 사용자 정보를 로컬 users 테이블에 동기화합니다."""
    logger.info(f"사용자 동기화 시작: {identity_id}")
    identity_user = fetch_identity_user(identity_id)
    user = upsert_user(db, identity_user)
    logger.info(f"사용자 동기화 완료: {identity_id} → user_id {user.id}")
    return user
