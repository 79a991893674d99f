# fims/core/dependencies.py

"""
FastAPI 애플리케이션의 의존성 주입(Dependency Injection)을 정의하는 모듈입니다.

- 데이터베이스 세션 관리 (get_db_session).
- lifespan에서 생성되어 app.state에 보관된 HierarchyStore / NotificationCenter 획득.
- 현재 호출자 정보 획득 (get_current_caller).
"""

from typing import AsyncGenerator

from fastapi import Request
from sqlmodel.ext.asyncio.session import AsyncSession

from fims.core.database import get_session as get_main_app_session
from fims.core.notifications import NotificationCenter
from fims.services.hierarchy_store import HierarchyStore
from fims.services.lookup_service import LookupService

# flake8: noqa
from fims.core.security import (
    Caller,
    get_current_caller,  # 토큰에서 호출자 정보를 가져오는 함수 (없으면 None)
)


# --- 데이터베이스 세션 의존성 주입 ---
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI 의존성 주입을 위한 비동기 데이터베이스 세션 제너레이터입니다.
    fims.core.database.get_session을 래핑하여 사용합니다.
    """
    async for session in get_main_app_session():
        yield session


# --- 계층 저장소 의존성 ---
def get_store(request: Request) -> HierarchyStore:
    return request.app.state.store


def get_lookup(request: Request) -> LookupService:
    return LookupService(request.app.state.store)


def get_notifications(request: Request) -> NotificationCenter:
    return request.app.state.store.notifications
