# fims/domains/insp/schemas.py

"""
'insp' 도메인의 Pydantic 스키마를 정의하는 모듈입니다.

이 스키마들은 API 요청/응답 뿐 아니라 HierarchyStore가 메모리에 보관하는 레코드 자체로도 사용됩니다.
Python 속성은 snake_case이고, 외부(API, CSV, 저장소 경계 직전)에서는 camelCase 별칭
(예: companyId, finalCode, nextDate)을 사용합니다.
"""

from typing import Optional, List
from datetime import datetime, UTC
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def ensure_aware(value: Optional[datetime]) -> Optional[datetime]:
    """시간대 정보가 없는 datetime은 UTC로 간주합니다. (SQLite는 tzinfo를 저장하지 않음)"""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =============================================================================
# 1. 회사 (Company)
# =============================================================================
class CompanyBase(CamelModel):
    name: str = Field(..., min_length=1, max_length=200, description="회사명 (전역 고유)")
    address: Optional[str] = Field(None, max_length=255, description="주소")
    phone: Optional[str] = Field(None, max_length=50, description="연락처")
    website: Optional[str] = Field(None, max_length=255, description="웹사이트")
    email: Optional[str] = Field(None, max_length=255, description="이메일")
    responsible: Optional[str] = Field(None, max_length=100, description="담당자")
    manufacturer: Optional[str] = Field(None, max_length=100, description="제조사")
    central_model: Optional[str] = Field(None, max_length=100, description="수신기 모델")
    cb_project: Optional[str] = Field(None, max_length=100, description="CB 설계 번호")
    avcb: Optional[str] = Field(None, max_length=100, description="AVCB 번호")


class CompanyCreate(CompanyBase):
    pass


class CompanyUpdate(CompanyBase):
    """
    전체 레코드 교체용 모델입니다.
    code와 date는 생성 시 결정되므로 입력으로 받지 않습니다.
    """
    pass


class CompanyRead(CompanyBase):
    id: int = Field(..., description="회사 고유 ID")
    code: str = Field(..., description="파생 코드 (최대 3자)")
    date: datetime = Field(..., description="생성 일시")

    @field_validator("date")
    @classmethod
    def aware_date(cls, value):
        return ensure_aware(value)


# =============================================================================
# 2. 사업장 (Unit)
# =============================================================================
class UnitBase(CamelModel):
    company_id: int = Field(..., description="소속 회사 ID")
    name: str = Field(..., min_length=1, max_length=200, description="사업장 명칭 (회사 내 고유)")


class UnitCreate(UnitBase):
    pass


class UnitUpdate(UnitBase):
    pass


class UnitRead(UnitBase):
    id: int = Field(..., description="사업장 고유 ID")
    code: str = Field(..., description="파생 코드 (최대 3자)")


# =============================================================================
# 3. 구역 (Sector)
# =============================================================================
class SectorBase(CamelModel):
    unit_id: int = Field(..., description="소속 사업장 ID")
    name: str = Field(..., min_length=1, max_length=200, description="구역 명칭 (사업장 내 고유)")


class SectorCreate(SectorBase):
    pass


class SectorUpdate(SectorBase):
    pass


class SectorRead(SectorBase):
    id: int = Field(..., description="구역 고유 ID")
    code: str = Field(..., description="파생 코드 (최대 3자)")


# =============================================================================
# 4. 설비 유형 (EquipmentType)
# =============================================================================
class EquipmentTypeRead(CamelModel):
    code: str
    name: str


# =============================================================================
# 5. 설비 (Equipment)
# =============================================================================
class EquipmentBase(CamelModel):
    sector_id: int = Field(..., description="설치 구역 ID")
    type_code: str = Field(..., min_length=1, max_length=10, description="설비 유형 코드")
    model: str = Field(..., max_length=100, description="설비 모델")
    loop: str = Field(..., max_length=50, description="루프(회로) 식별자")
    central: str = Field("", max_length=50, description="수신기(제어반) 식별자")


class EquipmentCreate(EquipmentBase):
    pass


class EquipmentUpdate(EquipmentBase):
    pass


class EquipmentRead(EquipmentBase):
    id: int = Field(..., description="설비 고유 ID")
    final_code: str = Field(..., description="최종 코드 {회사}_{사업장}_{구역}_{유형}_{모델}_{루프}")

    @field_validator("central", mode="before")
    @classmethod
    def central_as_text(cls, value):
        return value or ""


class EquipmentDetail(CamelModel):
    """검색 결과 및 CSV 내보내기에 사용하는 평탄화된 설비 정보"""
    id: int
    final_code: str
    type_code: str
    type_name: str
    model: str
    loop: str
    central: str
    company_name: str
    unit_name: str
    sector_name: str


# =============================================================================
# 6. 점검 (Inspection)
# =============================================================================
class InspectionBase(CamelModel):
    equipment_id: int = Field(..., description="점검 대상 설비 ID")
    description: str = Field(..., min_length=1, description="점검 내용")
    description_photo: Optional[str] = Field(None, description="점검 사진 (base64 data URL)")
    functioning: bool = Field(True, description="정상 작동 여부")
    malfunction_description: str = Field("", description="이상 내용 (작동 불량 시 필수)")
    malfunction_photo: Optional[str] = Field(None, description="이상 사진 (base64 data URL)")
    next_date: datetime = Field(..., description="다음 점검 예정 일시")

    @field_validator("next_date")
    @classmethod
    def aware_next_date(cls, value):
        return ensure_aware(value)

    @field_validator("malfunction_description", mode="before")
    @classmethod
    def malfunction_as_text(cls, value):
        return value or ""


class InspectionCreate(InspectionBase):
    pass


class InspectionUpdate(InspectionBase):
    pass


class InspectionRead(InspectionBase):
    id: int = Field(..., description="점검 고유 ID")
    date: datetime = Field(..., description="점검 일시")

    @field_validator("date")
    @classmethod
    def aware_date(cls, value):
        return ensure_aware(value)


class InspectionStatusKind(str, Enum):
    OVERDUE = "overdue"
    DUE_SOON = "due_soon"
    UPCOMING = "upcoming"
    SCHEDULED = "scheduled"


class InspectionStatus(CamelModel):
    kind: InspectionStatusKind
    days: int = Field(..., description="다음 점검일까지 남은 일수 (올림, 음수면 경과)")

    @property
    def overdue_by(self) -> int:
        return -self.days if self.days < 0 else 0


class InspectionWithStatus(CamelModel):
    inspection: InspectionRead
    equipment: EquipmentRead
    status: InspectionStatus


class InspectionSummary(CamelModel):
    total: int
    functioning: int
    malfunctioning: int


class FunctioningFilter(str, Enum):
    ALL = "all"
    WORKING = "working"
    NOT_WORKING = "not_working"


class DateWindow(str, Enum):
    ALL = "all"
    LAST_7_DAYS = "7days"
    LAST_30_DAYS = "30days"
    LAST_90_DAYS = "90days"

    @property
    def days(self) -> Optional[int]:
        return {"7days": 7, "30days": 30, "90days": 90}.get(self.value)


class InspectionFilter(CamelModel):
    company_id: Optional[int] = None
    unit_id: Optional[int] = None
    sector_id: Optional[int] = None
    type_code: Optional[str] = None
    model: Optional[str] = None
    status: FunctioningFilter = FunctioningFilter.ALL
    window: DateWindow = DateWindow.ALL
    search: Optional[str] = None


class InspectionListResponse(CamelModel):
    items: List[InspectionRead]
    summary: InspectionSummary
