import boto3
import os
import uuid
import logging
from datetime import datetime

from app.core.config import settings

logger = logging.getLogger(__name__)

## S3 클라이언트 설정
s3_client = boto3.client(
    's3',
    aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
    aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
    region_name=settings.AWS_REGION
)

BUCKET_NAME = settings.AWS_BUCKET_NAME


class StorageError(Exception):
    """S3 업로드 실패 시 발생"""


def build_post_image_key(identity_id: str, extension: str) -> str:
    """
    게시물 이미지의 S3 키를 생성합니다.

    Args:
        identity_id: 업로드한 사용자의 인증 서비스 식별자
        extension: 파일 확장자 (예: ".jpg")

    Returns:
        str: S3 키 (예: "uploads/user_abc/20250101_120000_3f2a....jpg")
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    if extension and not extension.startswith("."):
        extension = f".{extension}"
    return f"{settings.STORAGE_PREFIX}/{identity_id}/{timestamp}_{uuid.uuid4().hex}{extension.lower()}"


def guess_extension(filename: str | None, content_type: str | None) -> str:
    """원본 파일명 또는 콘텐츠 타입에서 확장자를 결정합니다."""
    extension = os.path.splitext(filename or "")[1]
    if extension:
        return extension.lower()
    if content_type and content_type.startswith("image/"):
        subtype = content_type.split("/", 1)[1].split(";")[0].strip()
        return ".jpg" if subtype == "jpeg" else f".{subtype}"
    return ""


def upload_file_to_s3(content: bytes, s3_key: str, content_type: str) -> str:
    """
    파일 내용을 S3에 업로드하고 S3 키를 반환합니다.
    """
    try:
        s3_client.put_object(
            Bucket=BUCKET_NAME,
            Key=s3_key,
            Body=content,
            ContentType=content_type
        )
        logger.info(f"파일 업로드 성공: {s3_key}")
        return s3_key
    except Exception as e:
        logger.error(f"파일 업로드 실패 ({s3_key}): {str(e)}")
        raise StorageError(f"파일 업로드 중 오류가 발생했습니다: {str(e)}") from e


def delete_file_from_s3(s3_key: str) -> bool:
    """
    S3에서 파일을 삭제합니다.

    Args:
        s3_key: 삭제할 파일의 S3 키

    Returns:
        bool: 삭제 성공 여부
    """
    try:
        s3_client.delete_object(
            Bucket=BUCKET_NAME,
            Key=s3_key
        )
        logger.info(f"S3 파일 삭제 성공: {s3_key}")
        return True
    except Exception as e:
        logger.error(f"S3 파일 삭제 실패 ({s3_key}): {str(e)}")
        return False
