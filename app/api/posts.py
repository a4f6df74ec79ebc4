from fastapi import APIRouter, Depends, File, Form, HTTPException, Path, Query, UploadFile
from sqlalchemy.orm import Session
from typing import Optional
import logging

from app.db.base import MAX_DB_ID, get_db
from app.core.errors import bad_request, forbidden, internal_error, not_found
from app.crud import post as post_crud
from app.models.post import Post, MAX_CAPTION_LENGTH
from app.models.user import User
from app.schemas.action import ActionResponse
from app.schemas.post import PostListResponse, PostResponse
from app.services.auth import get_current_user, get_optional_current_user_id
from app.services.media import prepare_post_image
from app.services.s3 import (
    StorageError,
    build_post_image_key,
    delete_file_from_s3,
    guess_extension,
    upload_file_to_s3,
)

# 로깅 설정
logger = logging.getLogger(__name__)

router = APIRouter()

MAX_UPLOAD_SIZE = 5 * 1024 * 1024  # 5MB
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 50


@router.get("", response_model=PostListResponse, summary="게시물 목록 조회")
def list_posts(
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    user_id: Optional[int] = Query(None, alias="userId", le=MAX_DB_ID),
    db: Session = Depends(get_db),
    current_user_id: Optional[int] = Depends(get_optional_current_user_id)
):
    """
    최신순 게시물 목록을 페이지 단위로 가져옵니다.

    - page는 1 이상, limit은 1~50 범위로 보정됩니다.
    - userId를 지정하면 해당 사용자의 게시물만 조회합니다.
    - 로그인 시 내가 좋아요를 눌렀는지 포함됩니다.
    - 게시물마다 최신 댓글 2개와 전체 댓글 수를 포함합니다.
    """
    page = max(1, page)
    limit = min(MAX_PAGE_SIZE, max(1, limit))

    try:
        feed = post_crud.get_feed_page(
            db,
            page=page,
            limit=limit,
            user_id=user_id,
            current_user_id=current_user_id,
        )
    except Exception as e:
        logger.error(f"게시물 목록 조회 중 오류 발생: {str(e)}")
        raise internal_error("게시물을 불러오는데 실패했습니다.")

    return PostListResponse(posts=feed.posts, has_more=feed.has_more, page=page, total=feed.total)


@router.post("", response_model=PostResponse, status_code=201, summary="게시물 작성")
async def create_post(
    image: Optional[UploadFile] = File(None),
    caption: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    이미지와 캡션으로 게시물을 작성합니다.

    - 이미지 파일(최대 5MB)만 업로드 가능합니다.
    - 캡션은 최대 2200자입니다.
    - 이미지는 정사각형으로 리사이즈되어 저장되며, 리사이즈에 실패하면 원본이 저장됩니다.
    """
    s3_key = None
    try:
        logger.info(f"게시물 작성 요청: 사용자 ID {current_user.id}")

        # 1. 입력 검증 (이미지를 읽기 전에 캡션부터 확인)
        if image is None or not image.filename:
            raise bad_request("image is required")

        caption = (caption or "").strip()
        if len(caption) > MAX_CAPTION_LENGTH:
            raise bad_request(f"캡션은 최대 {MAX_CAPTION_LENGTH}자까지 입력 가능합니다.")

        if not image.content_type or not image.content_type.startswith("image/"):
            raise bad_request("이미지 파일만 업로드 가능합니다.")

        if image.size is not None and image.size > MAX_UPLOAD_SIZE:
            raise bad_request("파일 크기는 최대 5MB입니다.")

        contents = await image.read()
        if not contents:
            raise bad_request("빈 파일은 업로드할 수 없습니다.")
        if len(contents) > MAX_UPLOAD_SIZE:
            raise bad_request("파일 크기는 최대 5MB입니다.")

        # 2. 리사이즈 (실패 시 원본 사용)
        processed = prepare_post_image(
            contents,
            image.content_type,
            guess_extension(image.filename, image.content_type),
        )

        # 3. S3 업로드
        s3_key = build_post_image_key(current_user.identity_id, processed.extension)
        upload_file_to_s3(processed.content, s3_key, processed.content_type)

        # 4. DB 저장
        new_post = Post(
            user_id=current_user.id,
            image_key=s3_key,
            caption=caption or None,
        )
        db.add(new_post)
        db.commit()
        db.refresh(new_post)

        logger.info(f"게시물 작성 완료: 게시물 ID {new_post.id}, 리사이즈 {processed.resized}")
        return post_crud.to_post_response(new_post)

    except HTTPException as e:
        raise e
    except StorageError as e:
        logger.error(f"게시물 이미지 업로드 실패: {str(e)}")
        raise internal_error("이미지 업로드에 실패했습니다.")
    except Exception as e:
        db.rollback()
        logger.error(f"게시물 작성 중 오류 발생: {str(e)}")
        # DB 저장 실패 시 업로드된 이미지 정리
        if s3_key:
            delete_file_from_s3(s3_key)
        raise internal_error(f"게시물 작성 중 오류가 발생했습니다: {str(e)}")


@router.get("/{post_id}", response_model=PostResponse, summary="게시물 상세 조회")
def get_post(
    post_id: int = Path(..., le=MAX_DB_ID),
    db: Session = Depends(get_db),
    current_user_id: Optional[int] = Depends(get_optional_current_user_id)
):
    """
    특정 게시물 하나의 정보를 가져옵니다. (전체 댓글 포함)
    """
    post = post_crud.get_post_detail(db, post_id, current_user_id)
    if not post:
        raise not_found("Post not found")
    return post


@router.delete("/{post_id}", response_model=ActionResponse, summary="게시물 삭제")
def delete_post(
    post_id: int = Path(..., le=MAX_DB_ID),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    특정 게시물을 삭제합니다.

    - 게시물의 작성자만 삭제할 수 있습니다.
    - 게시물이 존재하지 않으면 404 오류를 반환합니다.
    - 권한이 없으면 403 오류를 반환합니다.
    - 좋아요와 댓글은 함께 삭제되고, 이미지는 S3에서 삭제됩니다.
    """
    # 1. 게시물 조회
    post = post_crud.get_post(db, post_id)
    if not post:
        raise not_found("Post not found")

    # 2. 작성자 권한 확인
    if post.user_id != current_user.id:
        raise forbidden("You can only delete your own posts")

    image_key = post.image_key

    # 3. 게시물 삭제 (cascade로 좋아요/댓글 함께 삭제)
    try:
        db.delete(post)
        db.commit()
        logger.info(f"게시물 DB 삭제 완료: ID {post_id}")
    except Exception as e:
        db.rollback()
        logger.error(f"게시물 삭제 중 오류 발생: {str(e)}")
        raise internal_error(f"게시물 삭제 중 오류 발생: {str(e)}")

    # 4. S3 이미지 삭제 (실패해도 게시물 삭제는 완료된 상태)
    if image_key and not delete_file_from_s3(image_key):
        logger.warning(f"게시물 이미지 S3 삭제 실패: {image_key}")

    return ActionResponse(message="Post deleted successfully")
