# fims/core/database.py

"""
원격 저장소(관계형 DB) 연결 및 세션 관리를 담당하는 모듈입니다.

- SQLModel의 비동기 엔진을 설정합니다.
- 비동기 세션 생성을 위한 세션 팩토리와 의존성 함수를 제공합니다.
- 애플리케이션 시작 시 테이블 생성 및 설비 유형 카탈로그 시드 함수를 포함합니다 (개발용).
"""

from typing import AsyncGenerator
import logging

from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from fims.core.config import settings

# 모든 SQLModel 클래스가 SQLModel.metadata에 등록되도록 명시적으로 임포트합니다.
from fims.domains.insp import models  # noqa
from fims.domains.insp import crud as insp_crud

logger = logging.getLogger(__name__)


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """
    URL에 맞는 비동기 엔진을 생성합니다.
    SQLite(메모리 DB)는 단일 연결을 공유해야 하므로 StaticPool을 사용합니다.
    """
    if url.startswith("sqlite"):
        return create_async_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(
        url,
        echo=echo,
        pool_recycle=3600,  # 1시간마다 연결 재활용
        pool_size=10,
        max_overflow=20
    )


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


engine: AsyncEngine = build_engine(settings.DATABASE_URL.get_secret_value(), echo=settings.DEBUG_MODE)

# 비동기 세션을 생성하는 '세션 공장'입니다.
AsyncSessionLocal = build_session_factory(engine)


# =============================================================================
# 데이터베이스 초기화 및 테이블 생성 함수
# =============================================================================
async def create_db_and_tables(bind: AsyncEngine = None) -> None:
    """
    테이블을 생성하고 설비 유형 카탈로그를 채웁니다.
    이 함수는 개발 환경에서만 사용해야 하며, 기존 테이블을 삭제하지는 않습니다.
    """
    bind = bind or engine
    async with bind.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Database tables created (or already exist).")

    async with build_session_factory(bind)() as session:
        await insp_crud.seed_equipment_types(session)


# =============================================================================
# 비동기 데이터베이스 세션 의존성 주입
# =============================================================================
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    요청마다 새로운 세션을 생성하고, 요청 처리 후 세션을 자동으로 닫습니다.
    """
    async with AsyncSessionLocal() as session:
        yield session
