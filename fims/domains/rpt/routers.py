# fims/domains/rpt/routers.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from fims.core import dependencies as deps
from fims.core.config import settings
from fims.domains.insp import schemas as insp_schemas
from fims.services.lookup_service import LookupService
from . import exporters

router = APIRouter(
    tags=["Report Management (보고서 관리)"],
    responses={404: {"description": "Not found"}},
)


def _attachment(content: bytes, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": exporters.content_disposition(filename)},
    )


@router.get("/equipments.csv", summary="설비 검색 결과 CSV 내보내기")
async def export_equipments_csv(
    term: str = Query("", description="설비 검색어 (빈 값이면 전체)"),
    lookup: LookupService = Depends(deps.get_lookup),
):
    """
    설비 검색 결과를 CSV로 내려받습니다. 결과가 없으면 400을 반환합니다.
    """
    details = [lookup.equipment_details(e) for e in lookup.search_equipments(term)]
    content = exporters.rows_to_csv(exporters.equipment_csv_rows(details))
    return _attachment(content.encode("utf-8"), "text/csv; charset=utf-8", settings.CSV_EXPORT_FILENAME)


@router.get("/inspections/report.pdf", summary="점검 기술 보고서 PDF")
async def export_inspections_report(
    company_id: Optional[int] = None,
    unit_id: Optional[int] = None,
    sector_id: Optional[int] = None,
    type_code: Optional[str] = None,
    model: Optional[str] = None,
    functioning: insp_schemas.FunctioningFilter = Query(insp_schemas.FunctioningFilter.ALL, alias="status"),
    window: insp_schemas.DateWindow = insp_schemas.DateWindow.ALL,
    search: Optional[str] = None,
    lookup: LookupService = Depends(deps.get_lookup),
):
    """
    점검 목록 필터와 같은 조건으로 기술 보고서를 생성합니다.
    `company_id`가 주어지면 계약 회사 정보 블록이 포함됩니다.
    """
    criteria = insp_schemas.InspectionFilter(
        company_id=company_id,
        unit_id=unit_id,
        sector_id=sector_id,
        type_code=type_code,
        model=model,
        status=functioning,
        window=window,
        search=search,
    )
    inspections = lookup.filter_inspections(criteria)
    company = lookup.get_company_by_id(company_id) if company_id is not None else None
    content = exporters.build_inspections_report_pdf(inspections, lookup, company=company)
    return _attachment(content, "application/pdf", exporters.inspections_report_filename())


@router.get("/inspections/{inspection_id}.pdf", summary="단일 점검 보고서 PDF")
async def export_inspection_pdf(inspection_id: int, lookup: LookupService = Depends(deps.get_lookup)):
    inspection = lookup.get_inspection_by_id(inspection_id)
    if inspection is None:
        raise HTTPException(status_code=404, detail="Inspection not found")
    equipment = lookup.get_equipment_by_id(inspection.equipment_id)
    content = exporters.build_inspection_pdf(inspection, lookup)
    return _attachment(content, "application/pdf", exporters.inspection_pdf_filename(inspection, equipment))
