# 📄 alembic/env.py
# 목적: Alembic이 stockdesk/models.py의 Base.metadata를 읽어
#       autogenerate를 정상적으로 수행하도록 하는 설정 파일

from __future__ import annotations

from logging.config import fileConfig

from sqlalchemy import create_engine, pool
from alembic import context

from stockdesk.core.config import settings
from stockdesk.models import Base

# ------------------------------------------------------------
# Alembic 기본 설정
# ------------------------------------------------------------
config = context.config

# 로깅 설정
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


# ------------------------------------------------------------
# DB URL 가져오기
# ------------------------------------------------------------
# 우선순위:
# 1) 환경변수 DB_URL / DATABASE_URL (settings)
# 2) alembic.ini의 sqlalchemy.url
def get_database_url() -> str:
    return settings.database_url or config.get_main_option("sqlalchemy.url")


# ------------------------------------------------------------
# OFFLINE MODE (sql문만 출력)
# ------------------------------------------------------------
def run_migrations_offline() -> None:
    context.configure(
        url=get_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


# ------------------------------------------------------------
# ONLINE MODE (실제 DB에 연결)
# ------------------------------------------------------------
def run_migrations_online() -> None:
    connectable = create_engine(
        get_database_url(),
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,        # 컬럼 타입 비교
            compare_server_default=True,
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()


# ------------------------------------------------------------
# 실행 분기
# ------------------------------------------------------------
if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
