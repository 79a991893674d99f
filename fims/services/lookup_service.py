# fims/services/lookup_service.py

"""
HierarchyStore의 현재 메모리 스냅샷에 대한 읽기 전용 조회 모듈입니다.

- id 기준 조회 및 상위 레코드 기준 목록 조회 (선형 탐색)
- 설비 자유 검색 (대소문자 무시 부분 일치, 여러 필드에 대한 OR)
- 점검 상태 계산 (저장하지 않는 읽기 시점 파생값)
- 대시보드/점검 목록용 필터 및 요약

모든 메서드는 동기 함수이며 저장소 상태를 변경하지 않습니다.
"""

from datetime import datetime, timedelta, UTC
from typing import List, Optional, Tuple
import math

from fims.domains.insp import schemas as insp_schemas
from fims.services.hierarchy_store import HierarchyStore

NOT_AVAILABLE = "N/A"

# 상태 구간 경계 (일)
DUE_SOON_DAYS = 7
UPCOMING_DAYS = 30

_ONE_DAY = timedelta(days=1)


def inspection_status(next_date: datetime, now: Optional[datetime] = None) -> insp_schemas.InspectionStatus:
    """
    다음 점검일까지 남은 일수(올림)로 점검 상태를 계산합니다.

    - days < 0       → overdue (|days|일 경과)
    - 0 ≤ days ≤ 7   → due_soon
    - 8 ≤ days ≤ 30  → upcoming
    - days > 30      → scheduled
    """
    now = insp_schemas.ensure_aware(now) if now else datetime.now(UTC)
    days = math.ceil((insp_schemas.ensure_aware(next_date) - now) / _ONE_DAY)
    if days < 0:
        kind = insp_schemas.InspectionStatusKind.OVERDUE
    elif days <= DUE_SOON_DAYS:
        kind = insp_schemas.InspectionStatusKind.DUE_SOON
    elif days <= UPCOMING_DAYS:
        kind = insp_schemas.InspectionStatusKind.UPCOMING
    else:
        kind = insp_schemas.InspectionStatusKind.SCHEDULED
    return insp_schemas.InspectionStatus(kind=kind, days=days)


def inspection_summary(inspections: List[insp_schemas.InspectionRead]) -> insp_schemas.InspectionSummary:
    functioning = sum(1 for i in inspections if i.functioning)
    return insp_schemas.InspectionSummary(
        total=len(inspections),
        functioning=functioning,
        malfunctioning=len(inspections) - functioning,
    )


class LookupService:
    def __init__(self, store: HierarchyStore):
        self.store = store

    # =========================================================================
    # 1. id 기준 조회
    # =========================================================================
    def get_company_by_id(self, company_id: int) -> Optional[insp_schemas.CompanyRead]:
        return self.store.find_company(company_id)

    def get_unit_by_id(self, unit_id: int) -> Optional[insp_schemas.UnitRead]:
        return self.store.find_unit(unit_id)

    def get_sector_by_id(self, sector_id: int) -> Optional[insp_schemas.SectorRead]:
        return self.store.find_sector(sector_id)

    def get_equipment_by_id(self, equipment_id: int) -> Optional[insp_schemas.EquipmentRead]:
        return self.store.find_equipment(equipment_id)

    def get_inspection_by_id(self, inspection_id: int) -> Optional[insp_schemas.InspectionRead]:
        return self.store.find_inspection(inspection_id)

    def get_equipment_type_by_code(self, code: str) -> Optional[insp_schemas.EquipmentTypeRead]:
        return self.store.find_equipment_type(code)

    def get_equipment_by_code(self, final_code: str) -> Optional[insp_schemas.EquipmentRead]:
        """최종 코드(finalCode)로 설비를 찾습니다. (QR 코드 조회용)"""
        return next((e for e in self.store.equipments if e.final_code == final_code), None)

    # =========================================================================
    # 2. 상위 레코드 기준 목록
    # =========================================================================
    def get_units_by_company(self, company_id: int) -> List[insp_schemas.UnitRead]:
        return [u for u in self.store.units if u.company_id == company_id]

    def get_sectors_by_unit(self, unit_id: int) -> List[insp_schemas.SectorRead]:
        return [s for s in self.store.sectors if s.unit_id == unit_id]

    def get_equipments_by_sector(self, sector_id: int) -> List[insp_schemas.EquipmentRead]:
        return [e for e in self.store.equipments if e.sector_id == sector_id]

    def get_inspections_by_equipment(self, equipment_id: int) -> List[insp_schemas.InspectionRead]:
        return [i for i in self.store.inspections if i.equipment_id == equipment_id]

    # =========================================================================
    # 3. 계층 체인 / 설비 검색
    # =========================================================================
    def resolve_chain(self, equipment: insp_schemas.EquipmentRead) -> Tuple[
        Optional[insp_schemas.CompanyRead],
        Optional[insp_schemas.UnitRead],
        Optional[insp_schemas.SectorRead],
    ]:
        """설비의 (회사, 사업장, 구역)을 찾습니다. 끊어진 단계는 None입니다."""
        return self.store.chain_for_sector(equipment.sector_id)

    def search_equipments(self, term: str = "") -> List[insp_schemas.EquipmentRead]:
        """
        finalCode, 모델, 루프, 수신기, 그리고 회사/사업장/구역 이름 중
        하나라도 검색어를 포함하면 일치합니다. 빈 검색어는 전체 목록을 반환합니다.
        """
        if not term:
            return list(self.store.equipments)
        needle = term.lower()
        results = []
        for equipment in self.store.equipments:
            company, unit, sector = self.resolve_chain(equipment)
            fields = [
                equipment.final_code,
                equipment.model,
                equipment.loop,
                equipment.central,
                company.name if company else None,
                unit.name if unit else None,
                sector.name if sector else None,
            ]
            if any(needle in field.lower() for field in fields if field):
                results.append(equipment)
        return results

    def equipment_details(self, equipment: insp_schemas.EquipmentRead) -> insp_schemas.EquipmentDetail:
        company, unit, sector = self.resolve_chain(equipment)
        equipment_type = self.get_equipment_type_by_code(equipment.type_code)
        return insp_schemas.EquipmentDetail(
            id=equipment.id,
            final_code=equipment.final_code,
            type_code=equipment.type_code,
            type_name=equipment_type.name if equipment_type else NOT_AVAILABLE,
            model=equipment.model,
            loop=equipment.loop,
            central=equipment.central,
            company_name=company.name if company else NOT_AVAILABLE,
            unit_name=unit.name if unit else NOT_AVAILABLE,
            sector_name=sector.name if sector else NOT_AVAILABLE,
        )

    # =========================================================================
    # 4. 점검 대시보드 / 목록
    # =========================================================================
    def upcoming_inspections(
        self,
        company_id: Optional[int] = None,
        unit_id: Optional[int] = None,
        sector_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> List[insp_schemas.InspectionWithStatus]:
        """
        계층 체인이 완전히 연결되고 필터에 맞는 점검을 다음 점검일 오름차순으로 반환합니다.
        """
        items = []
        for inspection in self.store.inspections:
            equipment = self.get_equipment_by_id(inspection.equipment_id)
            if equipment is None:
                continue
            company, unit, sector = self.resolve_chain(equipment)
            if company is None or unit is None or sector is None:
                continue
            if company_id is not None and company.id != company_id:
                continue
            if unit_id is not None and unit.id != unit_id:
                continue
            if sector_id is not None and sector.id != sector_id:
                continue
            items.append(insp_schemas.InspectionWithStatus(
                inspection=inspection,
                equipment=equipment,
                status=inspection_status(inspection.next_date, now),
            ))
        items.sort(key=lambda item: item.inspection.next_date)
        return items

    def filter_inspections(
        self,
        criteria: insp_schemas.InspectionFilter,
        now: Optional[datetime] = None,
    ) -> List[insp_schemas.InspectionRead]:
        """
        점검 목록 화면의 필터를 적용하고 점검 일시 내림차순으로 반환합니다.
        기간 필터는 경과 일수(내림)가 기간 이하인 점검만 남깁니다.
        """
        now = insp_schemas.ensure_aware(now) if now else datetime.now(UTC)
        search = criteria.search.lower() if criteria.search else None
        results = []
        for inspection in self.store.inspections:
            equipment = self.get_equipment_by_id(inspection.equipment_id)
            if equipment is None:
                continue
            company, unit, sector = self.resolve_chain(equipment)

            if criteria.company_id is not None and (company is None or company.id != criteria.company_id):
                continue
            if criteria.unit_id is not None and (unit is None or unit.id != criteria.unit_id):
                continue
            if criteria.sector_id is not None and (sector is None or sector.id != criteria.sector_id):
                continue
            if criteria.type_code and equipment.type_code != criteria.type_code:
                continue
            if criteria.model and equipment.model != criteria.model:
                continue

            if criteria.status == insp_schemas.FunctioningFilter.WORKING and not inspection.functioning:
                continue
            if criteria.status == insp_schemas.FunctioningFilter.NOT_WORKING and inspection.functioning:
                continue

            window = criteria.window.days
            if window is not None and math.floor((now - inspection.date) / _ONE_DAY) > window:
                continue

            if search and search not in equipment.final_code.lower():
                continue
            results.append(inspection)

        results.sort(key=lambda i: i.date, reverse=True)
        return results
