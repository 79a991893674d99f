# fims/core/field_mapping.py

"""
메모리 모델 키(camelCase, 예: companyId)와 저장소 컬럼(snake_case, 예: company_id) 간의
명시적인 양방향 매핑 테이블입니다.

매핑은 저장소 경계 어댑터(`crud_base.RemoteTable`)에서만 적용되며,
비즈니스 로직 안에서 키 이름을 변환하지 않습니다.
매핑 테이블에 없는 키(예: name, code)는 양쪽에서 같은 이름을 사용합니다.
"""

from typing import Any, Dict, Mapping


class FieldMap:
    def __init__(self, entity: str, mapping: Mapping[str, str]):
        self.entity = entity
        self._to_column: Dict[str, str] = dict(mapping)
        self._to_key: Dict[str, str] = {column: key for key, column in mapping.items()}
        # 두 방향 모두 1:1 이어야 합니다.
        if len(self._to_key) != len(self._to_column):
            raise ValueError(f"Field mapping for {entity} is not one-to-one: {dict(mapping)}")

    def column(self, key: str) -> str:
        return self._to_column.get(key, key)

    def key(self, column: str) -> str:
        return self._to_key.get(column, column)

    def to_row(self, record: Mapping[str, Any]) -> Dict[str, Any]:
        """메모리 레코드(dict) → 저장소 행(dict)"""
        return {self.column(key): value for key, value in record.items()}

    def from_row(self, row: Mapping[str, Any]) -> Dict[str, Any]:
        """저장소 행(dict) → 메모리 레코드(dict)"""
        return {self.key(column): value for column, value in row.items()}

    def __repr__(self) -> str:
        return f"FieldMap({self.entity!r}, {self._to_column!r})"
