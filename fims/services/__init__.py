# fims/services/__init__.py

"""
계층 구조(회사 → 사업장 → 구역 → 설비) 데이터를 메모리에 유지하고 조회하는 서비스 패키지입니다.

주요 서브모듈:
- `codes.py`: 이름 기반 코드 생성 및 설비 최종 코드 계산.
- `integrity.py`: 이름 고유성 및 참조 무결성 검사 (IntegrityGuard).
- `hierarchy_store.py`: 여섯 개 컬렉션을 소유하는 메모리 저장소와 원격 동기화 (HierarchyStore).
- `lookup_service.py`: id/상위 기준 조회, 설비 검색, 점검 상태 계산 (LookupService).
"""

__title__ = "FIMS Services"
__description__ = "In-memory hierarchy store, integrity guard and lookup service."
__version__ = "0.1.0"
__all__ = []
