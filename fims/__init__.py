# fims/__init__.py

"""
FIMS (Fire-safety Inspection Management System) FastAPI 애플리케이션의 메인 패키지입니다.

이 패키지는 소방 설비 점검 관리의 핵심 로직과 도메인별 모듈을 포함합니다.
FastAPI 애플리케이션의 진입점 (main.py)과
공통 설정, 데이터베이스 연결, 보안 관련 유틸리티를 담는 core 서브패키지,
계층 구조(회사 → 사업장 → 구역 → 설비) 데이터를 메모리에 유지하는 services 서브패키지,
그리고 각 비즈니스 도메인을 대표하는 domains 서브패키지로 구성됩니다.
"""

APP_NAME = "FIMS FastAPI API"
APP_VERSION = "0.1.0"
API_PREFIX = "/api/v1"  # API 라우트의 공통 접두사 (main.py에서 적용)

__version__ = APP_VERSION
__title__ = APP_NAME
__description__ = "Fire-safety Inspection Management System (FIMS) API backend."
__all__ = []
