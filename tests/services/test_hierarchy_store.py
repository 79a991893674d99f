# tests/services/test_hierarchy_store.py

"""
HierarchyStore의 적재, 등록/수정 흐름, 작업 경계(알림/예외 변환)를 테스트합니다.

- 원격 저장소가 성공한 뒤에만 메모리가 바뀌는지
- 검증/인증 실패 시 원격 호출 없이 거부되는지
- 코드 고정, 최종 코드 재계산, 점검 일시 유지
"""

from datetime import datetime, timedelta, UTC
from typing import Dict

import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from fims.core.exceptions import (
    BackendError,
    InspectionValidationError,
    NameConflictError,
    NotAuthenticatedError,
    ParentNotFoundError,
    RecordNotFoundError,
    UnexpectedStoreError,
)
from fims.core.notifications import NotificationLevel
from fims.core.security import Caller
from fims.domains.insp import crud as insp_crud
from fims.domains.insp import models as insp_models
from fims.domains.insp import schemas as insp_schemas
from fims.services.hierarchy_store import HierarchyStore
from fims.services.lookup_service import LookupService


async def _count(db: AsyncSession, model) -> int:
    result = await db.exec(select(model))
    return len(result.all())


# =============================================================================
# 1. 초기 적재
# =============================================================================
@pytest.mark.asyncio
async def test_load_reads_seeded_equipment_types(store: HierarchyStore):
    assert store.loaded is True
    assert [t.code for t in store.equipment_types] == ["AL", "AV", "EX", "HD", "SC", "SF"]
    assert store.companies == []


@pytest.mark.asyncio
async def test_load_failure_leaves_only_that_collection_empty(
    session_factory, hierarchy: Dict[str, object], monkeypatch: pytest.MonkeyPatch
):
    async def broken_select_all(db):
        raise OperationalError("SELECT * FROM inspections", {}, Exception("relation does not exist"))

    monkeypatch.setattr(insp_crud.inspection, "select_all", broken_select_all)

    fresh = HierarchyStore(session_factory)
    await fresh.load()

    assert fresh.loaded is True
    assert fresh.inspections == []
    assert "inspections" in fresh.load_errors
    assert len(fresh.companies) == 1
    assert len(fresh.equipments) == 1


@pytest.mark.asyncio
async def test_reload_matches_memory_after_writes(session_factory, store: HierarchyStore, hierarchy):
    """camelCase ↔ snake_case 매핑을 거쳐 저장된 레코드가 다시 읽어도 같아야 합니다."""
    fresh = HierarchyStore(session_factory)
    await fresh.load()

    assert fresh.companies == store.companies
    assert fresh.units == store.units
    assert fresh.sectors == store.sectors
    assert fresh.equipments == store.equipments
    assert fresh.inspections == store.inspections


# =============================================================================
# 2. 회사 (Company)
# =============================================================================
@pytest.mark.asyncio
async def test_add_company_derives_code_and_prepends(store: HierarchyStore, caller: Caller, db_session: AsyncSession):
    first = await store.add_company(insp_schemas.CompanyCreate(name="Globex"), caller)
    second = await store.add_company(insp_schemas.CompanyCreate(name="Acme Corp", central_model="CX-1"), caller)

    assert second.code == "ACM"
    assert second.central_model == "CX-1"
    assert second.date.tzinfo is not None
    assert [c.id for c in store.companies] == [second.id, first.id]
    assert await _count(db_session, insp_models.Company) == 2

    notification = store.notifications.recent(1)[0]
    assert notification.level == NotificationLevel.SUCCESS


@pytest.mark.asyncio
async def test_duplicate_company_rejected_without_changes(
    store: HierarchyStore, caller: Caller, db_session: AsyncSession
):
    await store.add_company(insp_schemas.CompanyCreate(name="Acme Corp"), caller)
    before = list(store.companies)

    with pytest.raises(NameConflictError):
        await store.add_company(insp_schemas.CompanyCreate(name="Acme Corp"), caller)

    assert store.companies == before
    assert await _count(db_session, insp_models.Company) == 1
    notification = store.notifications.recent(1)[0]
    assert notification.level == NotificationLevel.ERROR
    assert notification.message == "Company with this name already exists."


@pytest.mark.asyncio
async def test_write_without_caller_is_rejected(store: HierarchyStore, db_session: AsyncSession):
    with pytest.raises(NotAuthenticatedError):
        await store.add_company(insp_schemas.CompanyCreate(name="Acme Corp"), None)

    assert store.companies == []
    assert await _count(db_session, insp_models.Company) == 0
    assert store.notifications.recent(1)[0].message == "Not authenticated"


@pytest.mark.asyncio
async def test_update_company_keeps_code_and_date(store: HierarchyStore, caller: Caller, hierarchy):
    company = hierarchy["company"]

    updated = await store.update_company(
        company.id, insp_schemas.CompanyUpdate(name="Zeta Industries", avcb="123"), caller
    )

    assert updated.name == "Zeta Industries"
    assert updated.code == "ACM"
    assert updated.date == company.date
    assert store.find_company(company.id) == updated


@pytest.mark.asyncio
async def test_update_unknown_company(store: HierarchyStore, caller: Caller):
    with pytest.raises(RecordNotFoundError):
        await store.update_company(999, insp_schemas.CompanyUpdate(name="Nobody"), caller)


# =============================================================================
# 3. 사업장 / 구역 (Unit / Sector)
# =============================================================================
@pytest.mark.asyncio
async def test_add_unit_round_trip(store: HierarchyStore, caller: Caller, lookup: LookupService):
    company = await store.add_company(insp_schemas.CompanyCreate(name="Acme Corp"), caller)

    await store.add_unit(insp_schemas.UnitCreate(company_id=company.id, name="Plant One"), caller)

    units = lookup.get_units_by_company(company.id)
    assert [(u.code, u.name) for u in units] == [("PLA", "Plant One")]


@pytest.mark.asyncio
async def test_add_unit_requires_existing_company(store: HierarchyStore, caller: Caller):
    with pytest.raises(ParentNotFoundError):
        await store.add_unit(insp_schemas.UnitCreate(company_id=42, name="Plant One"), caller)
    assert store.units == []


@pytest.mark.asyncio
async def test_same_unit_name_in_other_company(store: HierarchyStore, caller: Caller, hierarchy):
    other = await store.add_company(insp_schemas.CompanyCreate(name="Globex"), caller)

    unit = await store.add_unit(insp_schemas.UnitCreate(company_id=other.id, name="Plant One"), caller)
    assert unit.code == "PLA"

    with pytest.raises(NameConflictError):
        await store.add_unit(insp_schemas.UnitCreate(company_id=other.id, name="Plant One"), caller)


@pytest.mark.asyncio
async def test_sector_move_refreshes_equipment_final_code(
    store: HierarchyStore, caller: Caller, hierarchy, session_factory
):
    company = hierarchy["company"]
    sector = hierarchy["sector"]
    equipment = hierarchy["equipment"]
    other_unit = await store.add_unit(insp_schemas.UnitCreate(company_id=company.id, name="Warehouse"), caller)

    moved = await store.update_sector(
        sector.id, insp_schemas.SectorUpdate(unit_id=other_unit.id, name=sector.name), caller
    )

    assert moved.code == sector.code
    assert store.find_equipment(equipment.id).final_code == "ACM_WAR_BOI_SF_X1_L2"

    fresh = HierarchyStore(session_factory)
    await fresh.load()
    assert fresh.find_equipment(equipment.id).final_code == "ACM_WAR_BOI_SF_X1_L2"


@pytest.mark.asyncio
async def test_unit_move_to_other_company_refreshes_equipment_final_code(
    store: HierarchyStore, caller: Caller, hierarchy, session_factory
):
    unit = hierarchy["unit"]
    equipment = hierarchy["equipment"]
    globex = await store.add_company(insp_schemas.CompanyCreate(name="Globex"), caller)

    moved = await store.update_unit(unit.id, insp_schemas.UnitUpdate(company_id=globex.id, name=unit.name), caller)

    assert moved.code == "PLA"
    assert store.find_unit(unit.id).company_id == globex.id
    assert store.find_equipment(equipment.id).final_code == "GLO_PLA_BOI_SF_X1_L2"

    fresh = HierarchyStore(session_factory)
    await fresh.load()
    assert fresh.find_unit(unit.id).company_id == globex.id
    assert fresh.find_equipment(equipment.id).final_code == "GLO_PLA_BOI_SF_X1_L2"


@pytest.mark.asyncio
async def test_failed_move_rolls_back_parent_and_final_codes(
    store: HierarchyStore, caller: Caller, hierarchy, session_factory, monkeypatch: pytest.MonkeyPatch
):
    company = hierarchy["company"]
    unit = hierarchy["unit"]
    sector = hierarchy["sector"]
    equipment = hierarchy["equipment"]
    warehouse = await store.add_unit(insp_schemas.UnitCreate(company_id=company.id, name="Warehouse"), caller)

    async def failing_update(db, *, id, record, commit=True):
        raise OperationalError("UPDATE equipments", {}, Exception("connection reset"))

    monkeypatch.setattr(insp_crud.equipment, "update_by_id", failing_update)

    with pytest.raises(BackendError) as exc_info:
        await store.update_sector(
            sector.id, insp_schemas.SectorUpdate(unit_id=warehouse.id, name=sector.name), caller
        )

    assert "connection reset" in exc_info.value.detail
    assert store.find_sector(sector.id).unit_id == unit.id
    assert store.find_equipment(equipment.id).final_code == "ACM_PLA_BOI_SF_X1_L2"
    assert store.notifications.recent(1)[0].level == NotificationLevel.ERROR

    fresh = HierarchyStore(session_factory)
    await fresh.load()
    assert fresh.find_sector(sector.id).unit_id == unit.id
    assert fresh.find_equipment(equipment.id).final_code == "ACM_PLA_BOI_SF_X1_L2"


# =============================================================================
# 4. 설비 (Equipment)
# =============================================================================
@pytest.mark.asyncio
async def test_equipment_final_code(hierarchy):
    assert hierarchy["equipment"].final_code == "ACM_PLA_BOI_SF_X1_L2"


@pytest.mark.asyncio
async def test_update_equipment_recomputes_final_code(store: HierarchyStore, caller: Caller, hierarchy):
    equipment = hierarchy["equipment"]

    updated = await store.update_equipment(
        equipment.id,
        insp_schemas.EquipmentUpdate(sector_id=equipment.sector_id, type_code="AL", model="Z9", loop="L7"),
        caller,
    )

    assert updated.final_code == "ACM_PLA_BOI_AL_Z9_L7"
    assert store.find_equipment(equipment.id).final_code == "ACM_PLA_BOI_AL_Z9_L7"


@pytest.mark.asyncio
async def test_equipment_requires_known_type(store: HierarchyStore, caller: Caller, hierarchy):
    with pytest.raises(ParentNotFoundError):
        await store.add_equipment(
            insp_schemas.EquipmentCreate(sector_id=hierarchy["sector"].id, type_code="ZZ", model="X", loop="1"),
            caller,
        )
    assert len(store.equipments) == 1


# =============================================================================
# 5. 점검 (Inspection)
# =============================================================================
@pytest.mark.asyncio
async def test_update_inspection_keeps_inspection_date(store: HierarchyStore, caller: Caller, hierarchy):
    inspection = hierarchy["inspection"]

    updated = await store.update_inspection(
        inspection.id,
        insp_schemas.InspectionUpdate(
            equipment_id=inspection.equipment_id,
            description="Sensor replaced.",
            functioning=False,
            malfunction_description="Dust in chamber.",
            next_date=inspection.next_date + timedelta(days=30),
        ),
        caller,
    )

    assert updated.date == inspection.date
    assert updated.functioning is False
    assert store.find_inspection(inspection.id).malfunction_description == "Dust in chamber."


@pytest.mark.asyncio
async def test_malfunction_without_description_rejected(store: HierarchyStore, caller: Caller, hierarchy):
    with pytest.raises(InspectionValidationError):
        await store.add_inspection(
            insp_schemas.InspectionCreate(
                equipment_id=hierarchy["equipment"].id,
                description="Alarm silent.",
                functioning=False,
                next_date=datetime.now(UTC) + timedelta(days=10),
            ),
            caller,
        )
    assert len(store.inspections) == 1


# =============================================================================
# 6. 원격 저장소 실패 / 예기치 않은 실패
# =============================================================================
@pytest.mark.asyncio
async def test_backend_failure_leaves_memory_untouched(
    store: HierarchyStore, caller: Caller, monkeypatch: pytest.MonkeyPatch
):
    async def failing_insert(db, *, record):
        raise OperationalError("INSERT INTO companies", {}, Exception("connection refused"))

    monkeypatch.setattr(insp_crud.company, "insert", failing_insert)

    with pytest.raises(BackendError) as exc_info:
        await store.add_company(insp_schemas.CompanyCreate(name="Acme Corp"), caller)

    assert "connection refused" in exc_info.value.detail
    assert store.companies == []
    assert store.notifications.recent(1)[0].level == NotificationLevel.ERROR


@pytest.mark.asyncio
async def test_update_of_row_missing_remotely(store: HierarchyStore, caller: Caller):
    ghost = insp_schemas.CompanyRead(id=77, code="GHO", name="Ghost", date=datetime.now(UTC))
    store.companies.append(ghost)

    with pytest.raises(BackendError):
        await store.update_company(77, insp_schemas.CompanyUpdate(name="Ghost Two"), caller)

    assert store.find_company(77) == ghost


@pytest.mark.asyncio
async def test_unexpected_failure_reported_generically(
    store: HierarchyStore, caller: Caller, monkeypatch: pytest.MonkeyPatch
):
    async def broken_insert(db, *, record):
        raise RuntimeError("boom")

    monkeypatch.setattr(insp_crud.company, "insert", broken_insert)

    with pytest.raises(UnexpectedStoreError):
        await store.add_company(insp_schemas.CompanyCreate(name="Acme Corp"), caller)

    assert store.companies == []
    assert store.notifications.recent(1)[0].message == UnexpectedStoreError.default_detail
