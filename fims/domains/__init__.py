# fims/domains/__init__.py

"""
FIMS 애플리케이션의 비즈니스 도메인 패키지입니다.

- `insp`: 회사/사업장/구역/설비/점검 데이터 모델과 API.
- `rpt`: CSV/PDF 내보내기 API.
"""
