# fims/domains/rpt/__init__.py

"""
FastAPI 애플리케이션의 'rpt' 도메인 패키지입니다.

설비 검색 결과 CSV 내보내기와 점검 보고서 PDF 생성을 담당합니다.

주요 서브모듈:
- `exporters.py`: CSV 문자열 및 reportlab PDF 생성.
- `routers.py`: 다운로드 엔드포인트.
"""

__title__ = "FIMS Report Domain"
__description__ = "CSV export and PDF inspection reports."
__version__ = "0.1.0"
__all__ = []
