# tests/conftest.py

import os
from datetime import datetime, timedelta, UTC
from typing import AsyncGenerator, Dict

# fims.core.config의 Settings는 임포트 시점에 환경 변수를 읽으므로 가장 먼저 설정합니다.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-fims")
os.environ.setdefault("CREATE_TABLES_ON_STARTUP", "false")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

# fims.main을 임포트하여 FastAPI 앱 인스턴스에 접근합니다.
from fims.main import app as main_app
from fims.core import dependencies as deps
from fims.core.database import build_engine, build_session_factory, create_db_and_tables
from fims.core.notifications import NotificationCenter
from fims.core.security import Caller, create_access_token
from fims.domains.insp import schemas as insp_schemas
from fims.services.hierarchy_store import HierarchyStore
from fims.services.lookup_service import LookupService


# --- 테스트용 데이터베이스 설정 ---
# 테스트마다 새로운 메모리 SQLite DB를 사용합니다. (StaticPool로 단일 연결 공유)
TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture(scope="function")
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    테이블을 생성하고 설비 유형 카탈로그를 채운 메모리 DB 엔진을 제공합니다.
    """
    engine = build_engine(TEST_DATABASE_URL)
    await create_db_and_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture(scope="function")
def session_factory(test_engine: AsyncEngine) -> async_sessionmaker:
    return build_session_factory(test_engine)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    """원격 저장소 상태를 직접 확인하기 위한 세션입니다."""
    async with session_factory() as session:
        yield session


# --- 계층 저장소 픽스처 ---
@pytest_asyncio.fixture(scope="function")
async def store(session_factory: async_sessionmaker) -> HierarchyStore:
    """
    테스트 DB에 연결되고 초기 적재가 끝난 HierarchyStore를 제공합니다.
    """
    hierarchy_store = HierarchyStore(session_factory, NotificationCenter())
    await hierarchy_store.load()
    return hierarchy_store


@pytest.fixture(scope="function")
def lookup(store: HierarchyStore) -> LookupService:
    return LookupService(store)


@pytest.fixture(scope="session")
def caller() -> Caller:
    return Caller(subject="inspector@example.com")


@pytest_asyncio.fixture(scope="function")
async def hierarchy(store: HierarchyStore, caller: Caller) -> Dict[str, object]:
    """
    회사 → 사업장 → 구역 → 설비 → 점검 한 줄기를 저장소를 통해 생성합니다.
    """
    company = await store.add_company(insp_schemas.CompanyCreate(name="Acme Corp", address="Rua A, 1"), caller)
    unit = await store.add_unit(insp_schemas.UnitCreate(company_id=company.id, name="Plant One"), caller)
    sector = await store.add_sector(insp_schemas.SectorCreate(unit_id=unit.id, name="Boiler Room"), caller)
    equipment = await store.add_equipment(
        insp_schemas.EquipmentCreate(sector_id=sector.id, type_code="SF", model="X1", loop="L2", central="C1"),
        caller,
    )
    inspection = await store.add_inspection(
        insp_schemas.InspectionCreate(
            equipment_id=equipment.id,
            description="Sensor tested with smoke spray.",
            functioning=True,
            next_date=datetime.now(UTC) + timedelta(days=3),
        ),
        caller,
    )
    return {
        "company": company,
        "unit": unit,
        "sector": sector,
        "equipment": equipment,
        "inspection": inspection,
    }


# --- HTTP 클라이언트 픽스처 ---
# lifespan은 실행하지 않고, 테스트용 저장소와 세션을 의존성 오버라이드로 주입합니다.
@pytest_asyncio.fixture(scope="function")
async def anonymous_client(
    store: HierarchyStore,
    session_factory: async_sessionmaker,
) -> AsyncGenerator[AsyncClient, None]:
    """토큰 없이 요청하는 클라이언트입니다."""
    async def override_get_db_session():
        async with session_factory() as session:
            yield session

    original_overrides = main_app.dependency_overrides.copy()
    main_app.dependency_overrides[deps.get_db_session] = override_get_db_session
    main_app.state.store = store
    try:
        transport = ASGITransport(app=main_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        main_app.dependency_overrides = original_overrides


@pytest_asyncio.fixture(scope="function")
async def authorized_client(
    anonymous_client: AsyncClient,
    caller: Caller,
) -> AsyncGenerator[AsyncClient, None]:
    """Bearer 토큰이 설정된 클라이언트입니다."""
    token = create_access_token(caller.subject)
    anonymous_client.headers["Authorization"] = f"Bearer {token}"
    yield anonymous_client
