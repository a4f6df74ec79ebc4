import io
import os
from datetime import datetime, timedelta, timezone

TEST_JWT_KEY = "test-identity-signing-secret-0123456789abcdef"

# app 임포트 전에 테스트용 설정 주입
os.environ["SQLALCHEMY_DATABASE_URI"] = "sqlite://"
os.environ["IDENTITY_JWT_KEY"] = TEST_JWT_KEY
os.environ["IDENTITY_JWT_ALGORITHM"] = "HS256"
os.environ["IDENTITY_API_URL"] = "https://identity.test/v1"
os.environ["IMAGE_BASE_URL"] = "https://cdn.test"
os.environ["AWS_REGION"] = "us-east-1"
os.environ["AWS_BUCKET_NAME"] = "test-bucket"

import jwt
import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from app.db.base import Base, get_db
from app.models.comment import Comment
from app.models.post import Post
from app.models.user import User
from app.services import identity, s3

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@event.listens_for(engine, "connect")
def _enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeS3Client:
    """put_object / delete_object만 흉내내는 메모리 저장소"""

    def __init__(self):
        self.objects = {}
        self.deleted = []

    def put_object(self, Bucket, Key, Body, ContentType):
        self.objects[Key] = {"bucket": Bucket, "body": Body, "content_type": ContentType}

    def delete_object(self, Bucket, Key):
        self.deleted.append(Key)
        self.objects.pop(Key, None)


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def fake_s3(monkeypatch):
    fake = FakeS3Client()
    monkeypatch.setattr(s3, "s3_client", fake)
    return fake


@pytest.fixture(autouse=True)
def identity_records(monkeypatch):
    """인증 서비스에 등록된 사용자 (identity_id → IdentityUser)"""
    records = {}

    def fake_fetch(identity_id):
        if identity_id not in records:
            raise identity.IdentityProviderError("not found", status_code=404, not_found=True)
        return records[identity_id]

    monkeypatch.setattr(identity, "fetch_identity_user", fake_fetch)
    return records


def make_token(identity_id, expires_in=3600):
    payload = {
        "sub": identity_id,
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    }
    return jwt.encode(payload, TEST_JWT_KEY, algorithm="HS256")


@pytest.fixture
def token_factory():
    return make_token


@pytest.fixture
def auth_headers():
    def _headers(identity_id, expires_in=3600):
        return {"Authorization": f"Bearer {make_token(identity_id, expires_in)}"}
    return _headers


@pytest.fixture
def user_factory(db_session):
    def _create(identity_id, name=None):
        user = User(identity_id=identity_id, name=name or identity_id)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _create


@pytest.fixture
def post_factory(db_session):
    base_time = datetime(2025, 1, 1, 12, 0, 0)
    counter = {"n": 0}

    def _create(user, caption=None, minutes=None):
        counter["n"] += 1
        offset = counter["n"] if minutes is None else minutes
        post = Post(
            user_id=user.id,
            image_key=f"uploads/{user.identity_id}/post_{counter['n']}.jpg",
            caption=caption,
            created_at=base_time + timedelta(minutes=offset),
        )
        db_session.add(post)
        db_session.commit()
        db_session.refresh(post)
        return post
    return _create


@pytest.fixture
def comment_factory(db_session):
    base_time = datetime(2025, 1, 2, 12, 0, 0)
    counter = {"n": 0}

    def _create(post, user, content="nice"):
        counter["n"] += 1
        comment = Comment(
            post_id=post.id,
            user_id=user.id,
            content=content,
            created_at=base_time + timedelta(minutes=counter["n"]),
        )
        db_session.add(comment)
        db_session.commit()
        db_session.refresh(comment)
        return comment
    return _create


def make_image_bytes(size=(1200, 800), color=(0, 200, 100), fmt="PNG", mode="RGB"):
    image = Image.new(mode, size, color=color)
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def image_bytes():
    return make_image_bytes
