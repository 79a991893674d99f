# fims/services/codes.py

"""
이름 기반 파생 코드와 설비 최종 코드(composite code)를 계산하는 순수 함수 모듈입니다.
"""

from typing import Optional
import re

from fims.domains.insp import schemas as insp_schemas

_WHITESPACE = re.compile(r"\s+")

CODE_LENGTH = 3
FINAL_CODE_SEPARATOR = "_"


def generate_code(name: str) -> str:
    """
    이름에서 모든 공백을 제거한 뒤 앞의 세 글자를 대문자로 반환합니다.
    세 글자보다 짧으면 짧은 그대로 반환합니다. (패딩/오류 없음)

    >>> generate_code("Acme Corp")
    'ACM'
    >>> generate_code("ab")
    'AB'
    """
    # 대문자 변환으로 길이가 늘어나는 문자가 있어 ('ß' -> 'SS') 변환 후 다시 자릅니다.
    return _WHITESPACE.sub("", name or "")[:CODE_LENGTH].upper()[:CODE_LENGTH]


def resolve_final_code(
    equipment: insp_schemas.EquipmentBase,
    company: Optional[insp_schemas.CompanyRead],
    unit: Optional[insp_schemas.UnitRead],
    sector: Optional[insp_schemas.SectorRead],
) -> Optional[str]:
    """
    `{회사코드}_{사업장코드}_{구역코드}_{유형코드}_{모델}_{루프}` 형식의 최종 코드를 계산합니다.
    설비 자신의 필드(유형/모델/루프)는 가공하지 않고 그대로 사용합니다.
    조상 중 하나라도 찾을 수 없으면 None을 반환합니다.
    """
    if company is None or unit is None or sector is None:
        return None
    return FINAL_CODE_SEPARATOR.join([
        company.code,
        unit.code,
        sector.code,
        equipment.type_code,
        equipment.model,
        equipment.loop,
    ])
