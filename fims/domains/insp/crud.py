# fims/domains/insp/crud.py

"""
'insp' 도메인 테이블에 대한 저장소 경계 어댑터 인스턴스를 정의하는 모듈입니다.

각 엔터티마다 camelCase ↔ snake_case 매핑 테이블(FieldMap)을 명시적으로 선언합니다.
외래 키와 여러 단어로 된 모든 필드는 반드시 이 테이블에 포함되어야 합니다.
"""

from typing import List, Tuple
import logging

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from fims.core.crud_base import RemoteTable
from fims.core.field_mapping import FieldMap
from . import models as insp_models
from . import schemas as insp_schemas

logger = logging.getLogger(__name__)


# =============================================================================
# 1. 필드 매핑 테이블 (메모리 키 -> 저장소 컬럼)
# =============================================================================
COMPANY_FIELDS = FieldMap("Company", {
    "centralModel": "central_model",
    "cbProject": "cb_project",
    "date": "created_at",
})

UNIT_FIELDS = FieldMap("Unit", {
    "companyId": "company_id",
})

SECTOR_FIELDS = FieldMap("Sector", {
    "unitId": "unit_id",
})

EQUIPMENT_FIELDS = FieldMap("Equipment", {
    "sectorId": "sector_id",
    "typeCode": "type_code",
    "finalCode": "final_code",
})

INSPECTION_FIELDS = FieldMap("Inspection", {
    "equipmentId": "equipment_id",
    "descriptionPhoto": "description_photo",
    "malfunctionDescription": "malfunction_description",
    "malfunctionPhoto": "malfunction_photo",
    "nextDate": "next_date",
    "date": "created_at",
})

EQUIPMENT_TYPE_FIELDS = FieldMap("EquipmentType", {})


# =============================================================================
# 2. 원격 테이블 어댑터
# =============================================================================
company = RemoteTable(insp_models.Company, insp_schemas.CompanyRead, COMPANY_FIELDS)
unit = RemoteTable(insp_models.Unit, insp_schemas.UnitRead, UNIT_FIELDS)
sector = RemoteTable(insp_models.Sector, insp_schemas.SectorRead, SECTOR_FIELDS)
equipment = RemoteTable(insp_models.Equipment, insp_schemas.EquipmentRead, EQUIPMENT_FIELDS)
inspection = RemoteTable(insp_models.Inspection, insp_schemas.InspectionRead, INSPECTION_FIELDS)
# 설비 유형 카탈로그는 코드 오름차순으로 읽습니다.
equipment_type = RemoteTable(
    insp_models.EquipmentType,
    insp_schemas.EquipmentTypeRead,
    EQUIPMENT_TYPE_FIELDS,
    order_by_field="code",
    order_desc=False,
)


# =============================================================================
# 3. 설비 유형 카탈로그 시드
# =============================================================================
DEFAULT_EQUIPMENT_TYPES: List[Tuple[str, str]] = [
    ("SF", "Sensor de Fumaça"),
    ("SC", "Sensor de Calor"),
    ("AL", "Alarme"),
    ("AV", "Avisador"),
    ("EX", "Extintor"),
    ("HD", "Hidrante"),
]


async def seed_equipment_types(db: AsyncSession) -> int:
    """
    카탈로그에 없는 기본 설비 유형만 추가합니다. 추가된 개수를 반환합니다.
    """
    result = await db.execute(select(insp_models.EquipmentType.code))
    existing = set(result.scalars().all())
    added = 0
    for code, name in DEFAULT_EQUIPMENT_TYPES:
        if code not in existing:
            db.add(insp_models.EquipmentType(code=code, name=name))
            added += 1
    if added:
        await db.commit()
        logger.info(f"Seeded {added} equipment types.")
    return added
