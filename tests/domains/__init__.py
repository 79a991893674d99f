# tests/domains/__init__.py

"""
도메인별 API 엔드포인트 테스트 패키지입니다.

- `test_insp_n.py`: 'insp' 도메인 (회사/사업장/구역/설비/점검) 엔드포인트.
- `test_rpt_n.py`: 'rpt' 도메인 (CSV/PDF 내보내기) 엔드포인트.
"""

__title__ = "FIMS Domain Tests"
__description__ = "Categorized tests for each business domain in FIMS FastAPI application."
__version__ = "0.1.0"
__all__ = []
