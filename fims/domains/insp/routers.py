# fims/domains/insp/routers.py

"""
'insp' 도메인의 API 엔드포인트를 정의하는 모듈입니다.

이 라우터는 회사, 사업장, 구역, 설비, 점검 정보에 대한 생성/수정/조회 엔드포인트를 제공합니다.
모든 쓰기는 HierarchyStore를 거치며 (호출자 확인, 무결성 검사, 원격 저장 후 메모리 반영),
모든 읽기는 LookupService를 통해 메모리 스냅샷에서 처리됩니다.
삭제는 제공하지 않습니다.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

# 핵심 의존성 (계층 저장소, 호출자 식별 등)
from fims.core import dependencies as deps
from fims.core.security import Caller
from fims.services.hierarchy_store import HierarchyStore
from fims.services.lookup_service import LookupService, inspection_status, inspection_summary

# 'insp' 도메인의 스키마
from fims.domains.insp import schemas as insp_schemas

# 라우터 인스턴스 생성
router = APIRouter(
    tags=["Inspection Management (점검 관리)"],
    responses={404: {"description": "Not found"}},
)


# =============================================================================
# 1. 회사 (Company)
# =============================================================================
@router.post("/companies/", response_model=insp_schemas.CompanyRead, status_code=status.HTTP_201_CREATED, summary="새 회사 생성")
async def create_company(
    company_create: insp_schemas.CompanyCreate,
    store: HierarchyStore = Depends(deps.get_store),
    caller: Optional[Caller] = Depends(deps.get_current_caller),
):
    """
    새로운 회사를 등록합니다. 코드는 이름의 앞 세 글자로 생성됩니다.
    - `name`: 회사명 (전역 고유)
    """
    return await store.add_company(company_create, caller)


@router.get("/companies/", response_model=List[insp_schemas.CompanyRead], summary="회사 목록 조회")
async def read_companies(store: HierarchyStore = Depends(deps.get_store)):
    return store.companies


@router.get("/companies/{company_id}", response_model=insp_schemas.CompanyRead, summary="특정 회사 조회")
async def read_company(company_id: int, lookup: LookupService = Depends(deps.get_lookup)):
    company = lookup.get_company_by_id(company_id)
    if company is None:
        raise HTTPException(status_code=404, detail="Company not found")
    return company


@router.put("/companies/{company_id}", response_model=insp_schemas.CompanyRead, summary="회사 정보 교체")
async def update_company(
    company_id: int,
    company_update: insp_schemas.CompanyUpdate,
    store: HierarchyStore = Depends(deps.get_store),
    caller: Optional[Caller] = Depends(deps.get_current_caller),
):
    """
    회사 정보 전체를 교체합니다. 코드와 등록 일시는 유지됩니다.
    """
    return await store.update_company(company_id, company_update, caller)


# =============================================================================
# 2. 사업장 (Unit)
# =============================================================================
@router.post("/units/", response_model=insp_schemas.UnitRead, status_code=status.HTTP_201_CREATED, summary="새 사업장 생성")
async def create_unit(
    unit_create: insp_schemas.UnitCreate,
    store: HierarchyStore = Depends(deps.get_store),
    caller: Optional[Caller] = Depends(deps.get_current_caller),
):
    """
    회사 아래에 새 사업장을 등록합니다.
    - `companyId`: 소속 회사 ID (필수)
    - `name`: 사업장 명칭 (회사 내 고유)
    """
    return await store.add_unit(unit_create, caller)


@router.get("/units/", response_model=List[insp_schemas.UnitRead], summary="사업장 목록 조회")
async def read_units(
    company_id: Optional[int] = Query(None, description="소속 회사 ID로 필터링"),
    store: HierarchyStore = Depends(deps.get_store),
    lookup: LookupService = Depends(deps.get_lookup),
):
    if company_id is not None:
        return lookup.get_units_by_company(company_id)
    return store.units


@router.get("/units/{unit_id}", response_model=insp_schemas.UnitRead, summary="특정 사업장 조회")
async def read_unit(unit_id: int, lookup: LookupService = Depends(deps.get_lookup)):
    unit = lookup.get_unit_by_id(unit_id)
    if unit is None:
        raise HTTPException(status_code=404, detail="Unit not found")
    return unit


@router.put("/units/{unit_id}", response_model=insp_schemas.UnitRead, summary="사업장 정보 교체")
async def update_unit(
    unit_id: int,
    unit_update: insp_schemas.UnitUpdate,
    store: HierarchyStore = Depends(deps.get_store),
    caller: Optional[Caller] = Depends(deps.get_current_caller),
):
    return await store.update_unit(unit_id, unit_update, caller)


# =============================================================================
# 3. 구역 (Sector)
# =============================================================================
@router.post("/sectors/", response_model=insp_schemas.SectorRead, status_code=status.HTTP_201_CREATED, summary="새 구역 생성")
async def create_sector(
    sector_create: insp_schemas.SectorCreate,
    store: HierarchyStore = Depends(deps.get_store),
    caller: Optional[Caller] = Depends(deps.get_current_caller),
):
    return await store.add_sector(sector_create, caller)


@router.get("/sectors/", response_model=List[insp_schemas.SectorRead], summary="구역 목록 조회")
async def read_sectors(
    unit_id: Optional[int] = Query(None, description="소속 사업장 ID로 필터링"),
    store: HierarchyStore = Depends(deps.get_store),
    lookup: LookupService = Depends(deps.get_lookup),
):
    if unit_id is not None:
        return lookup.get_sectors_by_unit(unit_id)
    return store.sectors


@router.get("/sectors/{sector_id}", response_model=insp_schemas.SectorRead, summary="특정 구역 조회")
async def read_sector(sector_id: int, lookup: LookupService = Depends(deps.get_lookup)):
    sector = lookup.get_sector_by_id(sector_id)
    if sector is None:
        raise HTTPException(status_code=404, detail="Sector not found")
    return sector


@router.put("/sectors/{sector_id}", response_model=insp_schemas.SectorRead, summary="구역 정보 교체")
async def update_sector(
    sector_id: int,
    sector_update: insp_schemas.SectorUpdate,
    store: HierarchyStore = Depends(deps.get_store),
    caller: Optional[Caller] = Depends(deps.get_current_caller),
):
    return await store.update_sector(sector_id, sector_update, caller)


# =============================================================================
# 4. 설비 유형 (EquipmentType)
# =============================================================================
@router.get("/equipment-types/", response_model=List[insp_schemas.EquipmentTypeRead], summary="설비 유형 카탈로그 조회")
async def read_equipment_types(store: HierarchyStore = Depends(deps.get_store)):
    return store.equipment_types


# =============================================================================
# 5. 설비 (Equipment)
# =============================================================================
@router.post("/equipments/", response_model=insp_schemas.EquipmentRead, status_code=status.HTTP_201_CREATED, summary="새 설비 생성")
async def create_equipment(
    equipment_create: insp_schemas.EquipmentCreate,
    store: HierarchyStore = Depends(deps.get_store),
    caller: Optional[Caller] = Depends(deps.get_current_caller),
):
    """
    새 설비를 등록합니다. 최종 코드는
    `{회사코드}_{사업장코드}_{구역코드}_{유형코드}_{모델}_{루프}` 형식으로 계산됩니다.
    """
    return await store.add_equipment(equipment_create, caller)


@router.get("/equipments/", response_model=List[insp_schemas.EquipmentRead], summary="설비 목록 조회")
async def read_equipments(
    sector_id: Optional[int] = Query(None, description="설치 구역 ID로 필터링"),
    store: HierarchyStore = Depends(deps.get_store),
    lookup: LookupService = Depends(deps.get_lookup),
):
    if sector_id is not None:
        return lookup.get_equipments_by_sector(sector_id)
    return store.equipments


@router.get("/equipments/search", response_model=List[insp_schemas.EquipmentDetail], summary="설비 검색")
async def search_equipments(
    term: str = Query("", description="최종 코드, 모델, 루프, 수신기, 회사/사업장/구역 이름 부분 일치"),
    lookup: LookupService = Depends(deps.get_lookup),
):
    """
    대소문자를 구분하지 않는 부분 일치 검색입니다. 빈 검색어는 전체 설비를 반환합니다.
    """
    return [lookup.equipment_details(e) for e in lookup.search_equipments(term)]


@router.get("/equipments/by-code/{final_code}", response_model=insp_schemas.EquipmentRead, summary="최종 코드로 설비 조회")
async def read_equipment_by_code(final_code: str, lookup: LookupService = Depends(deps.get_lookup)):
    equipment = lookup.get_equipment_by_code(final_code)
    if equipment is None:
        raise HTTPException(status_code=404, detail="Equipment not found")
    return equipment


@router.get("/equipments/{equipment_id}", response_model=insp_schemas.EquipmentDetail, summary="특정 설비 조회")
async def read_equipment(equipment_id: int, lookup: LookupService = Depends(deps.get_lookup)):
    equipment = lookup.get_equipment_by_id(equipment_id)
    if equipment is None:
        raise HTTPException(status_code=404, detail="Equipment not found")
    return lookup.equipment_details(equipment)


@router.put("/equipments/{equipment_id}", response_model=insp_schemas.EquipmentRead, summary="설비 정보 교체")
async def update_equipment(
    equipment_id: int,
    equipment_update: insp_schemas.EquipmentUpdate,
    store: HierarchyStore = Depends(deps.get_store),
    caller: Optional[Caller] = Depends(deps.get_current_caller),
):
    """
    설비 정보 전체를 교체합니다. 최종 코드는 다시 계산됩니다.
    """
    return await store.update_equipment(equipment_id, equipment_update, caller)


# =============================================================================
# 6. 점검 (Inspection)
# =============================================================================
@router.post("/inspections/", response_model=insp_schemas.InspectionRead, status_code=status.HTTP_201_CREATED, summary="새 점검 등록")
async def create_inspection(
    inspection_create: insp_schemas.InspectionCreate,
    store: HierarchyStore = Depends(deps.get_store),
    caller: Optional[Caller] = Depends(deps.get_current_caller),
):
    """
    점검 결과를 등록합니다. 점검 일시는 서버 시각으로 기록됩니다.
    - `functioning`이 false이면 `malfunctionDescription`은 필수입니다.
    """
    return await store.add_inspection(inspection_create, caller)


@router.get("/inspections/", response_model=List[insp_schemas.InspectionRead], summary="점검 목록 조회")
async def read_inspections(
    equipment_id: Optional[int] = Query(None, description="점검 대상 설비 ID로 필터링"),
    store: HierarchyStore = Depends(deps.get_store),
    lookup: LookupService = Depends(deps.get_lookup),
):
    if equipment_id is not None:
        return lookup.get_inspections_by_equipment(equipment_id)
    return store.inspections


@router.get("/inspections/filter", response_model=insp_schemas.InspectionListResponse, summary="점검 목록 필터 및 요약")
async def filter_inspections(
    company_id: Optional[int] = None,
    unit_id: Optional[int] = None,
    sector_id: Optional[int] = None,
    type_code: Optional[str] = None,
    model: Optional[str] = None,
    functioning: insp_schemas.FunctioningFilter = Query(insp_schemas.FunctioningFilter.ALL, alias="status"),
    window: insp_schemas.DateWindow = insp_schemas.DateWindow.ALL,
    search: Optional[str] = None,
    lookup: LookupService = Depends(deps.get_lookup),
):
    """
    회사/사업장/구역/유형/모델, 작동 상태, 기간(7/30/90일), 최종 코드 검색으로 점검을 필터링합니다.
    결과는 점검 일시 내림차순이며 요약(전체/정상/이상) 건수를 함께 반환합니다.
    """
    criteria = insp_schemas.InspectionFilter(
        company_id=company_id,
        unit_id=unit_id,
        sector_id=sector_id,
        type_code=type_code,
        model=model,
        status=functioning,
        window=window,
        search=search,
    )
    items = lookup.filter_inspections(criteria)
    return insp_schemas.InspectionListResponse(items=items, summary=inspection_summary(items))


@router.get("/inspections/upcoming", response_model=List[insp_schemas.InspectionWithStatus], summary="다가오는 점검 조회")
async def read_upcoming_inspections(
    company_id: Optional[int] = None,
    unit_id: Optional[int] = None,
    sector_id: Optional[int] = None,
    lookup: LookupService = Depends(deps.get_lookup),
):
    return lookup.upcoming_inspections(company_id=company_id, unit_id=unit_id, sector_id=sector_id)


@router.get("/inspections/{inspection_id}", response_model=insp_schemas.InspectionRead, summary="특정 점검 조회")
async def read_inspection(inspection_id: int, lookup: LookupService = Depends(deps.get_lookup)):
    inspection = lookup.get_inspection_by_id(inspection_id)
    if inspection is None:
        raise HTTPException(status_code=404, detail="Inspection not found")
    return inspection


@router.get("/inspections/{inspection_id}/status", response_model=insp_schemas.InspectionStatus, summary="점검 상태 조회")
async def read_inspection_status(inspection_id: int, lookup: LookupService = Depends(deps.get_lookup)):
    inspection = lookup.get_inspection_by_id(inspection_id)
    if inspection is None:
        raise HTTPException(status_code=404, detail="Inspection not found")
    return inspection_status(inspection.next_date)


@router.put("/inspections/{inspection_id}", response_model=insp_schemas.InspectionRead, summary="점검 정보 교체")
async def update_inspection(
    inspection_id: int,
    inspection_update: insp_schemas.InspectionUpdate,
    store: HierarchyStore = Depends(deps.get_store),
    caller: Optional[Caller] = Depends(deps.get_current_caller),
):
    return await store.update_inspection(inspection_id, inspection_update, caller)
