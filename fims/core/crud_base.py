# fims/core/crud_base.py

"""
원격 저장소(관계형 DB)에 대한 저장소 경계 어댑터 기본 클래스 모듈입니다.

HierarchyStore는 원격 저장소를 아래 세 가지 작업으로만 사용합니다.
- insert: 단일 행 삽입 후 서버가 부여한 id/타임스탬프가 포함된 정규(canonical) 레코드를 반환
- update_by_id: id 기준 전체 레코드 교체 (반환값 없음, 성공/실패만)
- select_all: 생성 일시 내림차순(또는 지정 컬럼 기준) 전체 조회

메모리 레코드(camelCase 키)와 저장소 행(snake_case 컬럼) 간의 변환은
여기서 FieldMap을 통해서만 수행합니다.
모든 메서드는 비동기(async) 환경에 맞게 작성되었습니다.
"""

from typing import Any, Dict, Generic, List, Type, TypeVar
import logging

from sqlalchemy import update
from sqlalchemy.exc import NoResultFound
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession
from pydantic import BaseModel

from fims.core.field_mapping import FieldMap

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=SQLModel)
ReadSchemaType = TypeVar("ReadSchemaType", bound=BaseModel)


class RemoteTable(Generic[ModelType, ReadSchemaType]):
    """
    하나의 테이블에 대한 원격 저장소 작업을 정의합니다.
    """
    def __init__(
        self,
        model: Type[ModelType],
        read_schema: Type[ReadSchemaType],
        field_map: FieldMap,
        *,
        order_by_field: str = "created_at",
        order_desc: bool = True,
    ):
        self.model = model
        self.read_schema = read_schema
        self.field_map = field_map
        self.order_by_field = order_by_field
        self.order_desc = order_desc

    @property
    def entity(self) -> str:
        return self.field_map.entity

    def to_record(self, row: ModelType) -> ReadSchemaType:
        """저장소 행 → 메모리 레코드"""
        return self.read_schema.model_validate(self.field_map.from_row(row.model_dump()))

    async def select_all(self, db: AsyncSession) -> List[ReadSchemaType]:
        """
        전체 레코드를 정렬하여 조회합니다.
        """
        order_column = getattr(self.model, self.order_by_field)
        query = select(self.model).order_by(order_column.desc() if self.order_desc else order_column)
        result = await db.execute(query)
        return [self.to_record(row) for row in result.scalars().all()]

    async def insert(self, db: AsyncSession, *, record: Dict[str, Any]) -> ReadSchemaType:
        """
        새로운 레코드를 삽입하고, 저장소가 반환한 정규 레코드를 돌려줍니다.
        `record`는 camelCase 키를 사용하는 메모리 레코드입니다.
        """
        values = self.field_map.to_row(record)
        values.pop("id", None)  # id는 저장소가 부여합니다.
        db_obj = self.model.model_validate(values)
        db.add(db_obj)
        try:
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        await db.refresh(db_obj)
        return self.to_record(db_obj)

    async def update_by_id(
        self, db: AsyncSession, *, id: Any, record: Dict[str, Any], commit: bool = True
    ) -> None:
        """
        id 기준으로 레코드 전체를 교체합니다. 대상 행이 없으면 NoResultFound를 발생시킵니다.
        `commit=False`이면 커밋은 호출자가 수행하며, 실패 시에는 트랜잭션 전체를 롤백합니다.
        """
        values = self.field_map.to_row(record)
        values.pop("id", None)
        statement = update(self.model).where(self.model.id == id).values(**values)
        try:
            result = await db.execute(statement)
            if result.rowcount == 0:
                raise NoResultFound(f"{self.entity} {id} does not exist in the remote store")
            if commit:
                await db.commit()
        except Exception:
            await db.rollback()
            raise
