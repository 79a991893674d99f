# fims/services/hierarchy_store.py

"""
회사 → 사업장 → 구역 → 설비 계층과 점검/설비 유형 데이터를 메모리에 보관하는 저장소 모듈입니다.

HierarchyStore는 애플리케이션 세션마다 한 번 생성되며 (FastAPI lifespan에서 app.state에 보관),
여섯 개 컬렉션의 유일한 소유자입니다. 변경은 load / add_* / update_* 로만 가능합니다.

쓰기 작업 순서:
 1. 호출자 확인 (없으면 원격 호출 전에 거부)
 2. 파생 필드 계산 (code는 생성 시에만, finalCode는 매 쓰기마다)
 3. IntegrityGuard 검사
 4. 원격 저장소 insert / update
    (사업장/구역의 소속이 바뀌면 하위 설비의 finalCode도 같은 트랜잭션에서 갱신)
 5. 원격 저장소가 성공한 뒤에만 메모리 반영 (insert는 맨 앞에 추가, update는 id 기준 교체)

읽기 작업은 현재 메모리 스냅샷에 대한 동기 선형 탐색입니다.
add/update 사이에는 별도의 잠금이 없습니다. 같은 이름으로 동시에 생성하면
둘 다 로컬 검사를 통과할 수 있습니다.
"""

from contextlib import asynccontextmanager
from datetime import datetime, UTC
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Tuple
import asyncio
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from fims.core.crud_base import RemoteTable
from fims.core.exceptions import (
    BackendError,
    NotAuthenticatedError,
    RecordNotFoundError,
    StoreError,
    UnexpectedStoreError,
    UnresolvedHierarchyError,
)
from fims.core.notifications import NotificationCenter
from fims.core.security import Caller
from fims.domains.insp import crud as insp_crud
from fims.domains.insp import schemas as insp_schemas
from fims.services.codes import generate_code, resolve_final_code
from fims.services.integrity import IntegrityGuard

logger = logging.getLogger(__name__)

Chain = Tuple[
    Optional[insp_schemas.CompanyRead],
    Optional[insp_schemas.UnitRead],
    Optional[insp_schemas.SectorRead],
]
Write = Tuple[RemoteTable, int, Dict[str, Any]]


def _find(items: List[Any], predicate: Callable[[Any], bool]) -> Optional[Any]:
    return next((item for item in items if predicate(item)), None)


class HierarchyStore:
    """
    원격 저장소와 동기화되는 메모리 계층 저장소입니다.
    """

    # (컬렉션 속성 이름, 원격 테이블 어댑터)
    COLLECTIONS: List[Tuple[str, RemoteTable]] = [
        ("companies", insp_crud.company),
        ("units", insp_crud.unit),
        ("sectors", insp_crud.sector),
        ("equipments", insp_crud.equipment),
        ("inspections", insp_crud.inspection),
        ("equipment_types", insp_crud.equipment_type),
    ]

    def __init__(self, session_factory: async_sessionmaker, notifications: Optional[NotificationCenter] = None):
        self.session_factory = session_factory
        self.notifications = notifications or NotificationCenter()
        self.guard = IntegrityGuard(self)

        self.companies: List[insp_schemas.CompanyRead] = []
        self.units: List[insp_schemas.UnitRead] = []
        self.sectors: List[insp_schemas.SectorRead] = []
        self.equipments: List[insp_schemas.EquipmentRead] = []
        self.inspections: List[insp_schemas.InspectionRead] = []
        self.equipment_types: List[insp_schemas.EquipmentTypeRead] = []

        self.loaded = False
        self.load_errors: Dict[str, str] = {}

    # =========================================================================
    # 1. 초기 적재 (Sync/Load)
    # =========================================================================
    async def load(self) -> None:
        """
        여섯 개 컬렉션을 동시에 적재합니다.
        한 컬렉션의 실패는 로그로 남기고 해당 컬렉션만 비워 둡니다.
        """
        self.loaded = False
        self.load_errors = {}
        await asyncio.gather(*(self._load_collection(name, table) for name, table in self.COLLECTIONS))
        self.loaded = True
        logger.info(
            "Hierarchy store loaded: "
            + ", ".join(f"{name}={len(getattr(self, name))}" for name, _ in self.COLLECTIONS)
        )

    async def _load_collection(self, name: str, table: RemoteTable) -> None:
        try:
            async with self.session_factory() as db:
                records = await table.select_all(db)
        except Exception as e:
            logger.error(f"Failed to load {name} from the remote store: {e}", exc_info=True)
            self.load_errors[name] = str(e)
            setattr(self, name, [])
            return
        setattr(self, name, records)

    # =========================================================================
    # 2. 메모리 조회 헬퍼 (선형 탐색)
    # =========================================================================
    def find_company(self, company_id: Optional[int]) -> Optional[insp_schemas.CompanyRead]:
        return _find(self.companies, lambda c: c.id == company_id)

    def find_unit(self, unit_id: Optional[int]) -> Optional[insp_schemas.UnitRead]:
        return _find(self.units, lambda u: u.id == unit_id)

    def find_sector(self, sector_id: Optional[int]) -> Optional[insp_schemas.SectorRead]:
        return _find(self.sectors, lambda s: s.id == sector_id)

    def find_equipment(self, equipment_id: Optional[int]) -> Optional[insp_schemas.EquipmentRead]:
        return _find(self.equipments, lambda e: e.id == equipment_id)

    def find_inspection(self, inspection_id: Optional[int]) -> Optional[insp_schemas.InspectionRead]:
        return _find(self.inspections, lambda i: i.id == inspection_id)

    def find_equipment_type(self, code: Optional[str]) -> Optional[insp_schemas.EquipmentTypeRead]:
        return _find(self.equipment_types, lambda t: t.code == code)

    def chain_for_sector(self, sector_id: Optional[int]) -> Chain:
        """구역 id에서 시작해 (회사, 사업장, 구역)을 찾습니다. 찾지 못한 단계는 None입니다."""
        sector = self.find_sector(sector_id)
        unit = self.find_unit(sector.unit_id) if sector else None
        company = self.find_company(unit.company_id) if unit else None
        return company, unit, sector

    # =========================================================================
    # 3. 작업 경계 (알림 채널 / 예외 변환)
    # =========================================================================
    @asynccontextmanager
    async def _operation(self, success_message: str) -> AsyncIterator[None]:
        try:
            yield
        except StoreError as e:
            self.notifications.error(e.detail)
            raise
        except SQLAlchemyError as e:
            reason = str(getattr(e, "orig", None) or e)
            logger.error(f"Remote store rejected the operation: {reason}")
            error = BackendError(reason)
            self.notifications.error(error.detail)
            raise error from e
        except Exception as e:
            logger.exception(f"Unexpected error during store operation: {e}")
            error = UnexpectedStoreError()
            self.notifications.error(error.detail)
            raise error from e
        else:
            self.notifications.success(success_message)

    @staticmethod
    def _require_caller(caller: Optional[Caller]) -> Caller:
        if caller is None:
            raise NotAuthenticatedError()
        return caller

    async def _insert(self, table: RemoteTable, record: Dict[str, Any]):
        async with self.session_factory() as db:
            return await table.insert(db, record=record)

    async def _update(self, *writes: Write) -> None:
        """
        여러 (테이블, id, 레코드) 교체를 하나의 세션에서 실행하고 한 번만 커밋합니다.
        하나라도 실패하면 전체가 롤백되고 예외가 전파됩니다.
        """
        async with self.session_factory() as db:
            try:
                for table, id, record in writes:
                    await table.update_by_id(db, id=id, record=record, commit=False)
                await db.commit()
            except Exception:
                await db.rollback()
                raise

    @staticmethod
    def _replace(items: List[Any], record: Any) -> None:
        for index, item in enumerate(items):
            if item.id == record.id:
                items[index] = record
                return

    # =========================================================================
    # 4. 회사 (Company)
    # =========================================================================
    async def add_company(
        self, data: insp_schemas.CompanyCreate, caller: Optional[Caller]
    ) -> insp_schemas.CompanyRead:
        async with self._operation("Company added successfully."):
            self._require_caller(caller)
            self.guard.check_company_name(data.name)
            record = data.model_dump(by_alias=True)
            record.update(code=generate_code(data.name), date=datetime.now(UTC))
            created = await self._insert(insp_crud.company, record)
            self.companies.insert(0, created)
        return created

    async def update_company(
        self, company_id: int, data: insp_schemas.CompanyUpdate, caller: Optional[Caller]
    ) -> insp_schemas.CompanyRead:
        async with self._operation("Company updated successfully."):
            self._require_caller(caller)
            current = self.find_company(company_id)
            if current is None:
                raise RecordNotFoundError("Company")
            self.guard.check_company_name(data.name, exclude_id=company_id)
            # code와 생성 일시는 유지합니다.
            updated = insp_schemas.CompanyRead(
                id=company_id, code=current.code, date=current.date, **data.model_dump()
            )
            await self._update((insp_crud.company, company_id, updated.model_dump(by_alias=True)))
            self._replace(self.companies, updated)
        return updated

    # =========================================================================
    # 5. 사업장 (Unit)
    # =========================================================================
    async def add_unit(self, data: insp_schemas.UnitCreate, caller: Optional[Caller]) -> insp_schemas.UnitRead:
        async with self._operation("Unit added successfully."):
            self._require_caller(caller)
            self.guard.require_company(data.company_id)
            self.guard.check_unit_name(data.name, data.company_id)
            record = data.model_dump(by_alias=True)
            record.update(code=generate_code(data.name))
            created = await self._insert(insp_crud.unit, record)
            self.units.insert(0, created)
        return created

    async def update_unit(
        self, unit_id: int, data: insp_schemas.UnitUpdate, caller: Optional[Caller]
    ) -> insp_schemas.UnitRead:
        async with self._operation("Unit updated successfully."):
            self._require_caller(caller)
            current = self.find_unit(unit_id)
            if current is None:
                raise RecordNotFoundError("Unit")
            self.guard.require_company(data.company_id)
            self.guard.check_unit_name(data.name, data.company_id, exclude_id=unit_id)
            updated = insp_schemas.UnitRead(id=unit_id, code=current.code, **data.model_dump())
            refreshed = []
            if updated.company_id != current.company_id:
                refreshed = self._rechained_equipments(unit=updated)
            await self._update(
                (insp_crud.unit, unit_id, updated.model_dump(by_alias=True)),
                *self._equipment_writes(refreshed),
            )
            self._replace(self.units, updated)
            self._apply_refreshed(refreshed)
        return updated

    # =========================================================================
    # 6. 구역 (Sector)
    # =========================================================================
    async def add_sector(
        self, data: insp_schemas.SectorCreate, caller: Optional[Caller]
    ) -> insp_schemas.SectorRead:
        async with self._operation("Sector added successfully."):
            self._require_caller(caller)
            self.guard.require_unit(data.unit_id)
            self.guard.check_sector_name(data.name, data.unit_id)
            record = data.model_dump(by_alias=True)
            record.update(code=generate_code(data.name))
            created = await self._insert(insp_crud.sector, record)
            self.sectors.insert(0, created)
        return created

    async def update_sector(
        self, sector_id: int, data: insp_schemas.SectorUpdate, caller: Optional[Caller]
    ) -> insp_schemas.SectorRead:
        async with self._operation("Sector updated successfully."):
            self._require_caller(caller)
            current = self.find_sector(sector_id)
            if current is None:
                raise RecordNotFoundError("Sector")
            self.guard.require_unit(data.unit_id)
            self.guard.check_sector_name(data.name, data.unit_id, exclude_id=sector_id)
            updated = insp_schemas.SectorRead(id=sector_id, code=current.code, **data.model_dump())
            refreshed = []
            if updated.unit_id != current.unit_id:
                refreshed = self._rechained_equipments(sector=updated)
            await self._update(
                (insp_crud.sector, sector_id, updated.model_dump(by_alias=True)),
                *self._equipment_writes(refreshed),
            )
            self._replace(self.sectors, updated)
            self._apply_refreshed(refreshed)
        return updated

    # =========================================================================
    # 7. 설비 (Equipment)
    # =========================================================================
    def compute_final_code(self, data: insp_schemas.EquipmentBase) -> str:
        """
        설비의 최종 코드를 계산합니다. 조상 체인이 불완전하면 UnresolvedHierarchyError.
        """
        company, unit, sector = self.chain_for_sector(data.sector_id)
        final_code = resolve_final_code(data, company, unit, sector)
        if final_code is None:
            raise UnresolvedHierarchyError()
        return final_code

    async def add_equipment(
        self, data: insp_schemas.EquipmentCreate, caller: Optional[Caller]
    ) -> insp_schemas.EquipmentRead:
        async with self._operation("Equipment added successfully."):
            self._require_caller(caller)
            self.guard.require_sector(data.sector_id)
            self.guard.require_equipment_type(data.type_code)
            record = data.model_dump(by_alias=True)
            record.update(finalCode=self.compute_final_code(data))
            created = await self._insert(insp_crud.equipment, record)
            self.equipments.insert(0, created)
        return created

    async def update_equipment(
        self, equipment_id: int, data: insp_schemas.EquipmentUpdate, caller: Optional[Caller]
    ) -> insp_schemas.EquipmentRead:
        async with self._operation("Equipment updated successfully."):
            self._require_caller(caller)
            if self.find_equipment(equipment_id) is None:
                raise RecordNotFoundError("Equipment")
            self.guard.require_sector(data.sector_id)
            self.guard.require_equipment_type(data.type_code)
            updated = insp_schemas.EquipmentRead(
                id=equipment_id, final_code=self.compute_final_code(data), **data.model_dump()
            )
            await self._update((insp_crud.equipment, equipment_id, updated.model_dump(by_alias=True)))
            self._replace(self.equipments, updated)
        return updated

    def _rechained_equipments(
        self,
        *,
        unit: Optional[insp_schemas.UnitRead] = None,
        sector: Optional[insp_schemas.SectorRead] = None,
    ) -> List[insp_schemas.EquipmentRead]:
        """
        사업장 또는 구역의 소속이 바뀐다고 가정하고 하위 설비의 최종 코드를 다시 계산합니다.
        메모리는 아직 변경하지 않으며, 코드가 실제로 바뀌는 설비의 사본만 반환합니다.
        """
        if sector is not None:
            sectors = {sector.id: sector}
        else:
            sectors = {s.id: s for s in self.sectors if s.unit_id == unit.id}

        refreshed = []
        for equipment in self.equipments:
            owner = sectors.get(equipment.sector_id)
            if owner is None:
                continue
            parent = unit if unit is not None else self.find_unit(owner.unit_id)
            company = self.find_company(parent.company_id) if parent else None
            final_code = resolve_final_code(equipment, company, parent, owner)
            if final_code is None or final_code == equipment.final_code:
                continue
            refreshed.append(equipment.model_copy(update={"final_code": final_code}))
        return refreshed

    @staticmethod
    def _equipment_writes(equipments: List[insp_schemas.EquipmentRead]) -> List[Write]:
        return [(insp_crud.equipment, e.id, e.model_dump(by_alias=True)) for e in equipments]

    def _apply_refreshed(self, equipments: List[insp_schemas.EquipmentRead]) -> None:
        for equipment in equipments:
            previous = self.find_equipment(equipment.id)
            self._replace(self.equipments, equipment)
            logger.info(f"Equipment {equipment.id} final code changed: {previous.final_code} -> {equipment.final_code}")

    # =========================================================================
    # 8. 점검 (Inspection)
    # =========================================================================
    async def add_inspection(
        self, data: insp_schemas.InspectionCreate, caller: Optional[Caller]
    ) -> insp_schemas.InspectionRead:
        async with self._operation("Inspection registered successfully."):
            self._require_caller(caller)
            self.guard.require_equipment(data.equipment_id)
            inspected_at = datetime.now(UTC)
            self.guard.check_inspection(data, inspected_at)
            record = data.model_dump(by_alias=True)
            record.update(date=inspected_at)
            created = await self._insert(insp_crud.inspection, record)
            self.inspections.insert(0, created)
        return created

    async def update_inspection(
        self, inspection_id: int, data: insp_schemas.InspectionUpdate, caller: Optional[Caller]
    ) -> insp_schemas.InspectionRead:
        async with self._operation("Inspection updated successfully."):
            self._require_caller(caller)
            current = self.find_inspection(inspection_id)
            if current is None:
                raise RecordNotFoundError("Inspection")
            self.guard.require_equipment(data.equipment_id)
            self.guard.check_inspection(data, current.date)
            updated = insp_schemas.InspectionRead(id=inspection_id, date=current.date, **data.model_dump())
            await self._update((insp_crud.inspection, inspection_id, updated.model_dump(by_alias=True)))
            self._replace(self.inspections, updated)
        return updated
