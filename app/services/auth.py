import logging
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import ExpiredSignatureError, InvalidTokenError  # PyJWT 전용 예외
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import unauthorized, not_found
from app.db.base import get_db
from app.models.user import User
from app.services import identity

# 인증 서비스가 발급한 세션 토큰 (Authorization: Bearer ...)
bearer_scheme = HTTPBearer(auto_error=False)

logger = logging.getLogger(__name__)


def decode_session_token(token: str) -> str:
    """ 세션 토큰 검증 후 identity_id(sub) 반환, 실패 시 401 """
    options = {"require": ["exp", "sub"]}
    try:
        payload = jwt.decode(
            token,
            settings.IDENTITY_JWT_KEY,
            algorithms=[settings.IDENTITY_JWT_ALGORITHM],
            issuer=settings.IDENTITY_ISSUER,
            options=options,
        )
    except ExpiredSignatureError:
        logger.info("Token has expired")
        raise unauthorized("Token has expired")
    except InvalidTokenError as e:
        logger.warning(f"Invalid token: {e}")
        raise unauthorized("Could not validate credentials")

    identity_id = payload.get("sub")
    if not isinstance(identity_id, str) or not identity_id:
        logger.warning("Token payload does not contain sub")
        raise unauthorized("Could not validate credentials")
    return identity_id


def _extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    # Authorization 헤더 우선, 없으면 인증 서비스 세션 쿠키
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


def get_current_identity_id(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """ 현재 identity_id 반환 (인증 필수) """
    token = _extract_token(request, credentials)
    if not token:
        raise unauthorized()
    return decode_session_token(token)


def get_optional_identity_id(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    """ 현재 identity_id 반환 (선택적 인증), 실패 시 None 반환 """
    token = _extract_token(request, credentials)
    if not token:
        return None
    try:
        return decode_session_token(token)
    except HTTPException:
        # 만료되었거나 잘못된 토큰은 비로그인으로 취급
        return None


def get_current_user(
    identity_id: str = Depends(get_current_identity_id),
    db: Session = Depends(get_db),
) -> User:
    """
    현재 사용자 반환 (인증 필수)

    로컬 users 테이블에 없으면 인증 서비스에서 조회하여 동기화합니다.
    """
    user = identity.get_user_by_identity_id(db, identity_id)
    if user:
        return user

    logger.info(f"로컬 사용자 없음, 동기화 시도: {identity_id}")
    try:
        return identity.sync_user(db, identity_id)
    except identity.IdentityProviderError as e:
        if e.not_found:
            logger.warning(f"인증 서비스에 없는 사용자: {identity_id}")
        else:
            logger.error(f"인증 서비스 조회 실패: {identity_id}, status {e.status_code}, {str(e)}")
        db.rollback()
    except Exception as e:
        logger.error(f"사용자 동기화 실패: {identity_id}, {str(e)}")
        db.rollback()

    # 동시 요청이 먼저 생성했을 수 있으므로 한 번 더 확인
    user = identity.get_user_by_identity_id(db, identity_id)
    if user:
        return user
    raise not_found("Failed to find user in database", error="User not found")


def get_optional_current_user_id(
    identity_id: Optional[str] = Depends(get_optional_identity_id),
    db: Session = Depends(get_db),
) -> Optional[int]:
    """ 현재 사용자 ID 반환 (선택적 인증, 동기화 없음) """
    if identity_id is None:
        return None
    user = identity.get_user_by_identity_id(db, identity_id)
    return user.id if user else None
