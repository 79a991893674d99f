# fims/core/exceptions.py

"""
계층 저장소(HierarchyStore) 작업의 실패 유형을 정의하는 모듈입니다.

- 검증 충돌 (ValidationConflictError): 원격 호출 전에 로컬에서 거부됩니다.
- 인증 실패 (NotAuthenticatedError): 호출자가 없으면 쓰기 작업을 거부합니다.
- 원격 저장소 실패 (BackendError): 원격 저장소가 보고한 오류입니다.
- 예기치 않은 실패 (UnexpectedStoreError): 작업 경계에서 잡혀 일반 메시지로 보고됩니다.

모든 예외는 `status_code`와 `detail`을 가지며, `register_exception_handlers`를 통해
HTTPException과 동일한 형태(`{"detail": ...}`)의 응답으로 변환됩니다.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """저장소 작업 실패의 기본 클래스입니다."""
    status_code: int = status.HTTP_400_BAD_REQUEST
    default_detail: str = "Operation failed."

    def __init__(self, detail: str = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


# =============================================================================
# 1. 검증 충돌 (원격 호출 이전에 거부)
# =============================================================================
class ValidationConflictError(StoreError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Validation failed."


class NameConflictError(ValidationConflictError):
    """같은 범위(scope) 안에 동일한 이름이 이미 존재할 때 발생합니다."""

    def __init__(self, entity: str, scope: str = None):
        self.entity = entity
        self.scope = scope
        if scope:
            detail = f"{entity} with this name already exists for this {scope}."
        else:
            detail = f"{entity} with this name already exists."
        super().__init__(detail)


class ParentNotFoundError(ValidationConflictError):
    """참조하는 상위 레코드가 메모리 저장소에 없을 때 발생합니다."""

    def __init__(self, entity: str, parent: str):
        self.entity = entity
        self.parent = parent
        super().__init__(f"{parent} not found for the given {entity}.")


class UnresolvedHierarchyError(ValidationConflictError):
    default_detail = "Equipment final code cannot be resolved: the sector/unit/company chain is incomplete."


class InspectionValidationError(ValidationConflictError):
    default_detail = "Invalid inspection data."


# =============================================================================
# 2. 인증 / 조회 / 원격 저장소 실패
# =============================================================================
class NotAuthenticatedError(StoreError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Not authenticated"


class RecordNotFoundError(StoreError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str):
        self.entity = entity
        super().__init__(f"{entity} not found")


class BackendError(StoreError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "The remote store rejected the operation."


class UnexpectedStoreError(StoreError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "An unexpected error occurred while saving the data."


class EmptyExportError(StoreError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "There is no data to export."


# =============================================================================
# 3. FastAPI 예외 핸들러
# =============================================================================
async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
    headers = None
    if isinstance(exc, NotAuthenticatedError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StoreError, store_error_handler)
