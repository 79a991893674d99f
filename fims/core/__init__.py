# fims/core/__init__.py

"""
FastAPI 애플리케이션의 핵심 구성 요소 패키지입니다.

주요 서브모듈은 다음과 같습니다:

- `config.py`: 애플리케이션의 설정 및 환경 변수 관리 (Pydantic Settings).
- `database.py`: 원격 저장소(관계형 DB) 연결, 세션 관리 (SQLModel 및 AsyncSQLAlchemy).
- `crud_base.py`: 저장소 경계 어댑터 (insert / update-by-id / select-all).
- `field_mapping.py`: 메모리 모델(camelCase)과 저장소 컬럼(snake_case) 간의 명시적 매핑.
- `security.py`: 호출자(caller) 식별을 위한 JWT 유틸리티.
- `dependencies.py`: FastAPI 의존성 주입 함수들.
- `exceptions.py`: 저장소 작업 실패 유형 정의.
- `notifications.py`: 사용자에게 노출되는 단일 알림 채널.
"""

__title__ = "FIMS Core"
__description__ = "Core components for FIMS FastAPI application."
__version__ = "0.1.0"
__all__ = []
