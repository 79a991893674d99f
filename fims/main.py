# fims/main.py

from typing import AsyncGenerator, List
from contextlib import asynccontextmanager
import logging

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from fastapi import FastAPI, Depends, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware

# 핵심 설정 및 데이터베이스 모듈 임포트
from fims.core.config import settings
from fims.core.database import engine, AsyncSessionLocal, create_db_and_tables
from fims.core import dependencies as deps
from fims.core.exceptions import register_exception_handlers
from fims.core.notifications import Notification, NotificationCenter
from fims.services.hierarchy_store import HierarchyStore

from fims import API_PREFIX

# 도메인 라우터 임포트
from fims.domains.insp.routers import router as insp_router
from fims.domains.rpt.routers import router as rpt_router

logger = logging.getLogger(__name__)


# -- 애플리케이션 수명 주기 이벤트 핸들러 --
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI 애플리케이션의 수명 주기 이벤트(로깅, 테이블 준비, 계층 저장소 적재)를 처리합니다.
    """
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.info("FastAPI 애플리케이션 시작 중...")
    try:
        # 1. 개발 환경: 테이블 생성 및 설비 유형 카탈로그 시드
        if settings.CREATE_TABLES_ON_STARTUP:
            await create_db_and_tables()

        # 2. 계층 저장소 생성 및 초기 적재 (세션당 한 번)
        store = HierarchyStore(AsyncSessionLocal, NotificationCenter(settings.NOTIFICATION_HISTORY_SIZE))
        await store.load()
        app.state.store = store

    except Exception as e:
        logger.error(f"애플리케이션 시작 중 오류 발생: {e}")
        raise

    yield  # 애플리케이션 실행

    logger.info("FastAPI 애플리케이션 종료 중...")
    await engine.dispose()
    logger.info("데이터베이스 연결 풀 종료 완료.")


# -- FastAPI 애플리케이션 인스턴스 생성 --
app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# -- CORS 미들웨어 설정 --
# 개발용: 모든 출처 허용. 프로덕션에서는 실제 프론트엔드 도메인으로 제한합니다.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -- 저장소 예외 → HTTP 응답 변환 --
register_exception_handlers(app)

# -- 도메인 라우터 포함 --
app.include_router(insp_router, prefix=f"{API_PREFIX}/insp", tags=["Inspection Management (점검 관리)"])
app.include_router(rpt_router, prefix=f"{API_PREFIX}/rpt", tags=["Report Management (보고서 관리)"])


# -- 알림 채널 조회 --
@app.get(f"{API_PREFIX}/notifications", response_model=List[Notification], summary="최근 알림 조회")
async def read_notifications(limit: int = 20, notifications: NotificationCenter = Depends(deps.get_notifications)):
    """
    저장소 작업(등록/수정)의 성공/실패 알림을 최신순으로 반환합니다.
    """
    return notifications.recent(limit)


# -- 루트 엔드포인트 --
@app.get("/", summary="API Root", response_description="Welcome message and documentation link.")
async def read_root():
    """
    FIMS API의 루트 엔드포인트입니다.
    """
    return {"message": "Welcome to FIMS API. Visit /docs for interactive API documentation."}


# -- 헬스 체크 엔드포인트 --
@app.get("/health-check", summary="Health Check", response_description="Status of the store and database connection.")
async def health_check(request: Request, session: AsyncSession = Depends(deps.get_db_session)):
    """
    계층 저장소 적재 여부와 데이터베이스 연결 상태를 확인합니다.
    """
    store: HierarchyStore = request.app.state.store
    try:
        result = await session.exec(select(1))
        result.first()
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Database connection error during health check: {e}"
        )
    return {
        "status": "ok" if store.loaded and not store.load_errors else "degraded",
        "database_connection": "successful",
        "store_loaded": store.loaded,
        "load_errors": store.load_errors,
    }
