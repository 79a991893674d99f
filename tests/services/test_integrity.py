# tests/services/test_integrity.py

"""
IntegrityGuard의 이름 고유성, 상위 레코드 확인, 점검 입력 검증을 테스트합니다.
저장소는 실제 DB 없이 메모리 컬렉션만 채워서 사용합니다.
"""

from datetime import datetime, timedelta, UTC

import pytest

from fims.core.exceptions import InspectionValidationError, NameConflictError, ParentNotFoundError
from fims.domains.insp import schemas as insp_schemas
from fims.services.hierarchy_store import HierarchyStore


@pytest.fixture
def memory_store() -> HierarchyStore:
    store = HierarchyStore(session_factory=None)
    store.companies = [
        insp_schemas.CompanyRead(id=1, code="ACM", name="Acme Corp", date=datetime.now(UTC)),
        insp_schemas.CompanyRead(id=2, code="GLO", name="Globex", date=datetime.now(UTC)),
    ]
    store.units = [insp_schemas.UnitRead(id=10, code="PLA", company_id=1, name="Plant One")]
    store.sectors = [insp_schemas.SectorRead(id=20, code="BOI", unit_id=10, name="Boiler Room")]
    store.equipment_types = [insp_schemas.EquipmentTypeRead(code="SF", name="Sensor de Fumaça")]
    return store


def test_company_name_is_globally_unique(memory_store: HierarchyStore):
    with pytest.raises(NameConflictError) as exc_info:
        memory_store.guard.check_company_name("Acme Corp")
    assert exc_info.value.detail == "Company with this name already exists."


def test_company_name_check_is_case_sensitive(memory_store: HierarchyStore):
    memory_store.guard.check_company_name("acme corp")


def test_company_rename_excludes_itself(memory_store: HierarchyStore):
    memory_store.guard.check_company_name("Acme Corp", exclude_id=1)
    with pytest.raises(NameConflictError):
        memory_store.guard.check_company_name("Globex", exclude_id=1)


def test_unit_name_unique_within_company_only(memory_store: HierarchyStore):
    with pytest.raises(NameConflictError) as exc_info:
        memory_store.guard.check_unit_name("Plant One", company_id=1)
    assert exc_info.value.detail == "Unit with this name already exists for this company."

    # 다른 회사에서는 같은 이름을 사용할 수 있습니다.
    memory_store.guard.check_unit_name("Plant One", company_id=2)


def test_sector_name_unique_within_unit(memory_store: HierarchyStore):
    with pytest.raises(NameConflictError) as exc_info:
        memory_store.guard.check_sector_name("Boiler Room", unit_id=10)
    assert exc_info.value.detail == "Sector with this name already exists for this unit."
    memory_store.guard.check_sector_name("Boiler Room", unit_id=10, exclude_id=20)


def test_missing_parents_are_rejected(memory_store: HierarchyStore):
    with pytest.raises(ParentNotFoundError):
        memory_store.guard.require_company(99)
    with pytest.raises(ParentNotFoundError):
        memory_store.guard.require_unit(99)
    with pytest.raises(ParentNotFoundError):
        memory_store.guard.require_sector(99)
    with pytest.raises(ParentNotFoundError):
        memory_store.guard.require_equipment(99)
    with pytest.raises(ParentNotFoundError):
        memory_store.guard.require_equipment_type("ZZ")

    assert memory_store.guard.require_company(1).name == "Acme Corp"
    assert memory_store.guard.require_equipment_type("SF").name == "Sensor de Fumaça"


def test_inspection_requires_malfunction_description():
    store = HierarchyStore(session_factory=None)
    inspection = insp_schemas.InspectionCreate(
        equipment_id=1,
        description="Alarm did not sound.",
        functioning=False,
        malfunction_description="   ",
        next_date=datetime.now(UTC) + timedelta(days=1),
    )
    with pytest.raises(InspectionValidationError):
        store.guard.check_inspection(inspection, datetime.now(UTC))


def test_inspection_next_date_compared_by_day():
    store = HierarchyStore(session_factory=None)
    now = datetime(2026, 5, 10, 15, 0, tzinfo=UTC)
    same_day = insp_schemas.InspectionCreate(
        equipment_id=1, description="ok", next_date=datetime(2026, 5, 10, 0, 0, tzinfo=UTC)
    )
    store.guard.check_inspection(same_day, now)

    day_before = same_day.model_copy(update={"next_date": datetime(2026, 5, 9, 23, 0, tzinfo=UTC)})
    with pytest.raises(InspectionValidationError):
        store.guard.check_inspection(day_before, now)
