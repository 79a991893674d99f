# tests/__init__.py

"""
FIMS FastAPI 애플리케이션의 테스트 스위트 패키지입니다.

주요 하위 디렉토리:
- `services/`: 코드 생성, 무결성 검사, 계층 저장소, 조회 서비스, 내보내기 단위 테스트.
- `domains/`: 각 도메인(insp, rpt) API 엔드포인트 통합 테스트.
- `conftest.py`: 메모리 SQLite 엔진, 계층 저장소, 테스트 클라이언트 픽스처.
"""

__title__ = "FIMS API Tests"
__description__ = "Test suite for FIMS FastAPI application."
__version__ = "0.1.0"
__all__ = []
