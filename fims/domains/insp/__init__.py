# fims/domains/insp/__init__.py

"""
FastAPI 애플리케이션의 'insp' 도메인 패키지입니다.

'insp' 도메인은 소방 설비 점검의 계층 구조를 다룹니다.
회사(Company) → 사업장(Unit) → 구역(Sector) → 설비(Equipment) → 점검(Inspection),
그리고 설비 유형(EquipmentType) 카탈로그로 구성됩니다.

주요 서브모듈:
- `models.py`: 원격 저장소 테이블에 매핑되는 SQLModel 정의.
- `schemas.py`: 메모리 레코드 겸 API 요청/응답용 Pydantic 모델 (camelCase 별칭).
- `crud.py`: 테이블별 저장소 경계 어댑터와 필드 매핑 테이블.
- `routers.py`: HierarchyStore / LookupService 위의 얇은 API 엔드포인트.
"""

__title__ = "FIMS Inspection Domain"
__description__ = "Manages the company / unit / sector / equipment / inspection hierarchy."
__version__ = "0.1.0"
__all__ = []
