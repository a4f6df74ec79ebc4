from logging.config import fileConfig
from sqlalchemy import engine_from_config
from sqlalchemy import pool
from alembic import context
import os
import sys

# 프로젝트 루트 경로를 Python 경로에 추가
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from app.core.config import settings
from app.db.base import Base

# 모델 임포트 (Base.metadata에 테이블 등록)
from app.models import user, post, like, comment, follow  # noqa: F401

target_metadata = Base.metadata

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def get_url() -> str:
    """ -x db_url=... 인자가 있으면 우선, 없으면 애플리케이션 설정의 DB URL """
    cli_db_url = context.get_x_argument(as_dictionary=True).get("db_url")
    return cli_db_url or settings.DATABASE_URL


def _configure_options(url: str) -> dict:
    # SQLite는 ALTER TABLE 지원이 제한적이라 batch 모드로 마이그레이션
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "render_as_batch": url.startswith("sqlite"),
    }


def run_migrations_offline() -> None:
    """ SQL 스크립트만 출력 (DB 연결 없음) """
    url = get_url()
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_options(url),
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """ 실제 DB에 연결하여 마이그레이션 실행 """
    url = get_url()
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = url

    connectable = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(connection=connection, **_configure_options(url))

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
