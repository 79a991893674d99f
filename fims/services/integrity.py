# fims/services/integrity.py

"""
쓰기 작업 이전에 메모리 스냅샷을 기준으로 이름 고유성과 참조 무결성을 검사하는 모듈입니다.

- 회사명: 전역 고유
- 사업장명: 같은 회사 안에서 고유
- 구역명: 같은 사업장 안에서 고유
- 설비/점검: 이름 고유성 제약 없음 (중복 허용)

비교는 대소문자를 구분하는 정확한 일치입니다.
수정(update) 시에는 자기 자신의 id를 비교 대상에서 제외합니다.
"""

from datetime import datetime, UTC
from typing import Optional, TYPE_CHECKING

from fims.core.exceptions import (
    InspectionValidationError,
    NameConflictError,
    ParentNotFoundError,
)
from fims.domains.insp import schemas as insp_schemas

if TYPE_CHECKING:
    from fims.services.hierarchy_store import HierarchyStore


class IntegrityGuard:
    def __init__(self, store: "HierarchyStore"):
        self.store = store

    # --- 이름 고유성 ---
    def check_company_name(self, name: str, exclude_id: Optional[int] = None) -> None:
        if any(c.name == name and c.id != exclude_id for c in self.store.companies):
            raise NameConflictError("Company")

    def check_unit_name(self, name: str, company_id: int, exclude_id: Optional[int] = None) -> None:
        if any(
            u.name == name and u.company_id == company_id and u.id != exclude_id
            for u in self.store.units
        ):
            raise NameConflictError("Unit", scope="company")

    def check_sector_name(self, name: str, unit_id: int, exclude_id: Optional[int] = None) -> None:
        if any(
            s.name == name and s.unit_id == unit_id and s.id != exclude_id
            for s in self.store.sectors
        ):
            raise NameConflictError("Sector", scope="unit")

    # --- 상위 레코드 존재 여부 ---
    def require_company(self, company_id: int) -> insp_schemas.CompanyRead:
        company = self.store.find_company(company_id)
        if company is None:
            raise ParentNotFoundError("unit", "Company")
        return company

    def require_unit(self, unit_id: int) -> insp_schemas.UnitRead:
        unit = self.store.find_unit(unit_id)
        if unit is None:
            raise ParentNotFoundError("sector", "Unit")
        return unit

    def require_sector(self, sector_id: int) -> insp_schemas.SectorRead:
        sector = self.store.find_sector(sector_id)
        if sector is None:
            raise ParentNotFoundError("equipment", "Sector")
        return sector

    def require_equipment(self, equipment_id: int) -> insp_schemas.EquipmentRead:
        equipment = self.store.find_equipment(equipment_id)
        if equipment is None:
            raise ParentNotFoundError("inspection", "Equipment")
        return equipment

    def require_equipment_type(self, type_code: str) -> insp_schemas.EquipmentTypeRead:
        equipment_type = self.store.find_equipment_type(type_code)
        if equipment_type is None:
            raise ParentNotFoundError("equipment", "Equipment type")
        return equipment_type

    # --- 점검 입력 검증 ---
    def check_inspection(self, inspection: insp_schemas.InspectionBase, inspected_at: datetime) -> None:
        if not inspection.functioning and not inspection.malfunction_description.strip():
            raise InspectionValidationError(
                "Malfunction description is required when the equipment is not functioning."
            )
        # 다음 점검일은 날짜(UTC) 단위로 비교합니다.
        if inspection.next_date.astimezone(UTC).date() < inspected_at.astimezone(UTC).date():
            raise InspectionValidationError("Next inspection date must not be earlier than the inspection date.")
