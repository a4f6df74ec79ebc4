from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker

from app.core.config import settings

connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    # SQLite 커넥션을 여러 스레드(요청)에서 공유
    connect_args["check_same_thread"] = False

engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True, connect_args=connect_args)

if engine.dialect.name == "sqlite":
    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        # SQLite는 기본적으로 외래키(ON DELETE CASCADE)를 강제하지 않음
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

# 정수 ID 컬럼이 담을 수 있는 최대값 (BIGINT)
MAX_DB_ID = 2**63 - 1


def get_db():
    """요청 단위 DB 세션"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
