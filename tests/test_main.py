# tests/test_main.py

"""
FastAPI 애플리케이션의 메인 엔드포인트에 대한 통합 테스트를 정의하는 모듈입니다.

- 애플리케이션의 루트 경로 (`/`) 응답을 테스트합니다.
- 저장소/데이터베이스 헬스 체크 엔드포인트 (`/health-check`)를 테스트합니다.
- 알림 채널 엔드포인트 (`/api/v1/notifications`)를 테스트합니다.
"""

import pytest
from httpx import AsyncClient

from fims.services.hierarchy_store import HierarchyStore


@pytest.mark.asyncio
async def test_read_root(anonymous_client: AsyncClient):
    """
    루트 엔드포인트 (`GET /`)가 올바르게 응답하는지 테스트합니다.
    """
    print("\n--- Running test_read_root ---")
    response = await anonymous_client.get("/")
    print(f"Response JSON: {response.json()}")

    assert response.status_code == 200
    assert response.json() == {"message": "Welcome to FIMS API. Visit /docs for interactive API documentation."}


@pytest.mark.asyncio
async def test_health_check(anonymous_client: AsyncClient):
    """
    헬스 체크가 저장소 적재 완료와 데이터베이스 연결 상태를 반환하는지 테스트합니다.
    """
    print("\n--- Running test_health_check ---")
    response = await anonymous_client.get("/health-check")
    print(f"Response JSON: {response.json()}")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["database_connection"] == "successful"
    assert body["store_loaded"] is True
    assert body["load_errors"] == {}


@pytest.mark.asyncio
async def test_notifications_newest_first(authorized_client: AsyncClient, store: HierarchyStore):
    """
    성공/실패 알림이 최신순으로 조회되는지 테스트합니다.
    """
    print("\n--- Running test_notifications_newest_first ---")
    await authorized_client.post("/api/v1/insp/companies/", json={"name": "Acme Corp"})
    await authorized_client.post("/api/v1/insp/companies/", json={"name": "Acme Corp"})

    response = await authorized_client.get("/api/v1/notifications")
    assert response.status_code == 200
    notifications = response.json()
    assert [n["level"] for n in notifications] == ["error", "success"]
    assert notifications[0]["message"] == "Company with this name already exists."
