from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from app.api import posts, comments, likes, follows, users
from app.core.config import settings
from app.core.errors import register_exception_handlers
from app.db.base import engine
import logging
from contextlib import asynccontextmanager

# 로깅 설정
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# 데이터베이스 연결 정보 출력 함수
def log_database_info():
    try:
        logger.info("=" * 60)
        logger.info(f"{settings.PROJECT_NAME} 서버 시작")
        logger.info(f"DATABASE: {engine.url.render_as_string(hide_password=True)}")

        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        logger.info("데이터베이스 연결 확인 완료")
        logger.info("=" * 60)

    except Exception as e:
        logger.error(f"데이터베이스 연결 확인 중 오류 발생: {e}")

@asynccontextmanager
async def lifespan(app: FastAPI):
    # 서버 시작 시 실행
    log_database_info()
    yield

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Photogram API 서비스",
    version=settings.VERSION,
    lifespan=lifespan
)

# CORS 설정
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 오류 응답 형식 통일
register_exception_handlers(app)

# 라우터 등록
app.include_router(posts.router, prefix=f"{settings.API_PREFIX}/posts", tags=["posts"])
app.include_router(comments.router, prefix=f"{settings.API_PREFIX}/comments", tags=["comments"])
app.include_router(likes.router, prefix=f"{settings.API_PREFIX}/likes", tags=["likes"])
app.include_router(follows.router, prefix=f"{settings.API_PREFIX}/follows", tags=["follows"])
app.include_router(users.router, prefix=f"{settings.API_PREFIX}/users", tags=["users"])

@app.get("/")
async def root():
    return {"message": "Welcome to Photogram API"}

@app.get("/health")
async def health_check():
    return {"status": "healthy"}
