import io

from PIL import Image

from app.services.media import prepare_post_image, resize_post_image
from app.services.s3 import build_post_image_key, guess_extension


def _open(data):
    return Image.open(io.BytesIO(data))


def _striped_image():
    """가로 300x100: 왼쪽/오른쪽은 빨강, 가운데는 파랑"""
    image = Image.new("RGB", (300, 100), color=(255, 0, 0))
    image.paste((0, 0, 255), (100, 0, 200, 100))
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


class TestResizePostImage:

    def test_default_size_is_square_jpeg(self, image_bytes):
        with _open(resize_post_image(image_bytes(size=(640, 480)))) as image:
            assert image.format == "JPEG"
            assert image.size == (1080, 1080)

    def test_custom_size(self, image_bytes):
        with _open(resize_post_image(image_bytes(), size=200, quality=70)) as image:
            assert image.size == (200, 200)

    def test_center_crop(self):
        with _open(resize_post_image(_striped_image(), size=100)) as image:
            for point in [(2, 2), (50, 50), (97, 97)]:
                r, g, b = image.getpixel(point)
                assert b > 200 and r < 60

    def test_rgba_converted(self, image_bytes):
        data = image_bytes(size=(300, 300), color=(10, 20, 30, 128), mode="RGBA")
        with _open(resize_post_image(data, size=100)) as image:
            assert image.mode == "RGB"

    def test_exif_orientation_applied(self):
        # 세로로 촬영된 사진 (Orientation=6: 90도 회전 필요)
        image = Image.new("RGB", (400, 200), color=(255, 0, 0))
        image.paste((0, 0, 255), (0, 0, 200, 200))
        exif = Image.Exif()
        exif[0x0112] = 6
        buffer = io.BytesIO()
        image.save(buffer, format="JPEG", exif=exif.tobytes())

        with _open(resize_post_image(buffer.getvalue(), size=100)) as result:
            # 회전 후 200x400, 중앙 크롭은 두 색의 경계를 포함
            top = result.getpixel((50, 5))
            bottom = result.getpixel((50, 94))
            assert top != bottom


class TestPreparePostImage:

    def test_resized(self, image_bytes):
        processed = prepare_post_image(image_bytes(), "image/png", ".png")
        assert processed.resized is True
        assert processed.content_type == "image/jpeg"
        assert processed.extension == ".jpg"

    def test_falls_back_to_original(self):
        processed = prepare_post_image(b"\x00\x01broken", "image/webp", ".webp")
        assert processed.resized is False
        assert processed.content == b"\x00\x01broken"
        assert processed.content_type == "image/webp"
        assert processed.extension == ".webp"


class TestStorageKeys:

    def test_post_image_key(self):
        key = build_post_image_key("user_a", "JPG")
        assert key.startswith("uploads/user_a/")
        assert key.endswith(".jpg")

    def test_keys_are_unique(self):
        assert build_post_image_key("user_a", ".jpg") != build_post_image_key("user_a", ".jpg")

    def test_guess_extension(self):
        assert guess_extension("Photo.PNG", "image/png") == ".png"
        assert guess_extension("upload", "image/jpeg") == ".jpg"
        assert guess_extension(None, "image/webp") == ".webp"
        assert guess_extension("upload", "application/octet-stream") == ""
