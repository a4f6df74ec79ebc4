import io
import logging
from dataclasses import dataclass

from PIL import Image, ImageOps

from app.core.config import settings

logger = logging.getLogger(__name__)


@dataclass
class ProcessedImage:
    content: bytes
    content_type: str
    extension: str
    resized: bool


def resize_post_image(contents: bytes, size: int | None = None, quality: int | None = None) -> bytes:
    """
    게시물 이미지를 정사각형으로 중앙 크롭 후 리사이즈하여 JPEG로 인코딩합니다.
    (EXIF Orientation 정보를 먼저 반영)
    """
    size = size or settings.POST_IMAGE_SIZE
    quality = quality or settings.POST_IMAGE_QUALITY

    with Image.open(io.BytesIO(contents)) as image:
        image = ImageOps.exif_transpose(image)
        if image.mode != "RGB":
            image = image.convert("RGB")

        resized = ImageOps.fit(
            image,
            (size, size),
            method=Image.Resampling.LANCZOS,
            centering=(0.5, 0.5),
        )

        output = io.BytesIO()
        resized.save(output, format="JPEG", quality=quality, optimize=True)
        return output.getvalue()


def prepare_post_image(contents: bytes, content_type: str, extension: str = "") -> ProcessedImage:
    """
    업로드용 게시물 이미지를 준비합니다.

    - 리사이즈에 성공하면 JPEG(.jpg)로 변환된 결과를 반환합니다.
    - 리사이즈에 실패하면 원본 파일을 그대로 반환합니다.
    """
    try:
        resized = resize_post_image(contents)
        logger.info(f"이미지 리사이즈 완료: {len(contents)} → {len(resized)} bytes")
        return ProcessedImage(content=resized, content_type="image/jpeg", extension=".jpg", resized=True)
    except Exception as e:
        logger.warning(f"이미지 리사이즈 실패, 원본 파일로 업로드합니다: {str(e)}")
        return ProcessedImage(content=contents, content_type=content_type, extension=extension, resized=False)
