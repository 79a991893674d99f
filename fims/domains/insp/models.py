# fims/domains/insp/models.py

"""
'insp' 도메인 (소방 설비 점검)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.
 - 계층 구조: 회사(Company) -> 사업장(Unit) -> 구역(Sector) -> 설비(Equipment)
 - 점검(Inspection)은 설비 하위의 이력 레코드
 - 설비 유형(EquipmentType)은 정적 참조 카탈로그

각 클래스는 원격 저장소의 테이블 구조와 컬럼을 Python 객체로 매핑합니다.
컬럼 이름은 snake_case를 사용하며, 메모리 모델(camelCase)과의 변환은
`fims.domains.insp.crud`의 FieldMap에서만 수행합니다.
"""

from typing import Optional
from datetime import datetime, UTC
from sqlmodel import Field, SQLModel, Column
from sqlalchemy import ForeignKey, Text
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP


# =============================================================================
# 1. companies 테이블 모델
# =============================================================================
class CompanyBase(SQLModel):
    id: Optional[int] = Field(default=None, primary_key=True, description="회사 고유 ID")
    code: str = Field(max_length=3, description="이름에서 파생된 회사 코드 (생성 시 1회 결정)")
    name: str = Field(max_length=200, description="회사명")
    address: Optional[str] = Field(default=None, max_length=255, description="주소")
    phone: Optional[str] = Field(default=None, max_length=50, description="연락처")
    website: Optional[str] = Field(default=None, max_length=255, description="웹사이트")
    email: Optional[str] = Field(default=None, max_length=255, description="이메일")
    responsible: Optional[str] = Field(default=None, max_length=100, description="담당자")
    manufacturer: Optional[str] = Field(default=None, max_length=100, description="화재경보 설비 제조사")
    central_model: Optional[str] = Field(default=None, max_length=100, description="수신기(중앙 제어반) 모델")
    cb_project: Optional[str] = Field(default=None, max_length=100, description="소방 설계(CB) 번호")
    avcb: Optional[str] = Field(default=None, max_length=100, description="소방 검사 필증(AVCB) 번호")

    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )


class Company(CompanyBase, table=True):
    __tablename__ = "companies"


# =============================================================================
# 2. units 테이블 모델
# =============================================================================
class UnitBase(SQLModel):
    id: Optional[int] = Field(default=None, primary_key=True, description="사업장 고유 ID")
    company_id: int = Field(
        sa_column=Column(ForeignKey("companies.id", onupdate="CASCADE", ondelete="RESTRICT"), nullable=False),
        description="소속 회사 ID (FK)"
    )
    name: str = Field(max_length=200, description="사업장 명칭")
    code: str = Field(max_length=3, description="이름에서 파생된 사업장 코드")

    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )


class Unit(UnitBase, table=True):
    __tablename__ = "units"


# =============================================================================
# 3. sectors 테이블 모델
# =============================================================================
class SectorBase(SQLModel):
    id: Optional[int] = Field(default=None, primary_key=True, description="구역 고유 ID")
    unit_id: int = Field(
        sa_column=Column(ForeignKey("units.id", onupdate="CASCADE", ondelete="RESTRICT"), nullable=False),
        description="소속 사업장 ID (FK)"
    )
    name: str = Field(max_length=200, description="구역 명칭")
    code: str = Field(max_length=3, description="이름에서 파생된 구역 코드")

    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )


class Sector(SectorBase, table=True):
    __tablename__ = "sectors"


# =============================================================================
# 4. equipment_types 테이블 모델 (정적 카탈로그)
# =============================================================================
class EquipmentType(SQLModel, table=True):
    __tablename__ = "equipment_types"

    code: str = Field(primary_key=True, max_length=10, description="설비 유형 코드 (예: SF, EX)")
    name: str = Field(max_length=100, description="설비 유형 명칭")


# =============================================================================
# 5. equipments 테이블 모델
# =============================================================================
class EquipmentBase(SQLModel):
    id: Optional[int] = Field(default=None, primary_key=True, description="설비 고유 ID")
    sector_id: int = Field(
        sa_column=Column(ForeignKey("sectors.id", onupdate="CASCADE", ondelete="RESTRICT"), nullable=False),
        description="설치 구역 ID (FK)"
    )
    type_code: str = Field(
        sa_column=Column(ForeignKey("equipment_types.code", onupdate="CASCADE", ondelete="RESTRICT"), nullable=False),
        description="설비 유형 코드 (FK)"
    )
    model: str = Field(max_length=100, description="설비 모델")
    loop: str = Field(max_length=50, description="루프(회로) 식별자")
    central: Optional[str] = Field(default=None, max_length=50, description="수신기(제어반) 식별자")
    # 계산 결과를 저장하는 컬럼 (가상 컬럼 아님)
    final_code: str = Field(max_length=255, description="조상 코드 체인을 포함한 설비 최종 코드")

    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )


class Equipment(EquipmentBase, table=True):
    __tablename__ = "equipments"


# =============================================================================
# 6. inspections 테이블 모델
# =============================================================================
class InspectionBase(SQLModel):
    id: Optional[int] = Field(default=None, primary_key=True, description="점검 고유 ID")
    equipment_id: int = Field(
        sa_column=Column(ForeignKey("equipments.id", onupdate="CASCADE", ondelete="RESTRICT"), nullable=False),
        description="점검 대상 설비 ID (FK)"
    )
    description: str = Field(sa_column=Column(Text, nullable=False), description="점검 내용")
    description_photo: Optional[str] = Field(default=None, sa_column=Column(Text), description="점검 사진 (data URL)")
    functioning: bool = Field(default=True, description="정상 작동 여부")
    malfunction_description: Optional[str] = Field(default=None, sa_column=Column(Text), description="이상 내용")
    malfunction_photo: Optional[str] = Field(default=None, sa_column=Column(Text), description="이상 사진 (data URL)")
    next_date: datetime = Field(
        sa_column=Column(TIMESTAMP(timezone=True), nullable=False),
        description="다음 점검 예정 일시"
    )

    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="점검 일시 (레코드 생성 일시)"
    )


class Inspection(InspectionBase, table=True):
    __tablename__ = "inspections"
