# fims/domains/rpt/exporters.py

"""
설비 목록 CSV와 점검 보고서 PDF를 생성하는 모듈입니다.

- CSV: 첫 레코드의 키로 헤더를 만들고, 모든 값은 큰따옴표로 감쌉니다.
- PDF: reportlab platypus로 고정 양식의 텍스트 블록과 (있으면) 점검 사진을 배치합니다.
보고서 문구는 현장 양식에 맞춰 포르투갈어로 출력합니다.
"""

from datetime import datetime, UTC
from io import BytesIO, StringIO
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote
from xml.sax.saxutils import escape
import base64
import binascii
import csv
import logging
import re
import unicodedata

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.platypus import Image, PageBreak, Paragraph, SimpleDocTemplate, Spacer

from fims.core.exceptions import EmptyExportError
from fims.domains.insp import schemas as insp_schemas
from fims.services.lookup_service import LookupService, NOT_AVAILABLE, inspection_summary

logger = logging.getLogger(__name__)

STATUS_WORKING = "Em funcionamento"
STATUS_NOT_WORKING = "Com problemas"

# 파일 이름에 쓸 수 없는 문자 (경로 구분자, 헤더 인용 부호)
_UNSAFE_FILENAME = re.compile(r'[\\/"]')


# =============================================================================
# 1. CSV
# =============================================================================
def rows_to_csv(rows: Sequence[Dict[str, Any]]) -> str:
    """
    평탄한 레코드 목록을 CSV 문자열로 변환합니다.
    헤더는 따옴표 없이 쉼표로 잇고, 값은 모두 따옴표로 감싸며 내부 따옴표는 두 번 씁니다.

    >>> rows_to_csv([{"A": "1", "B": "x,y"}])
    'A,B\\n"1","x,y"'
    """
    if not rows:
        raise EmptyExportError()
    headers = list(rows[0].keys())
    buffer = StringIO()
    buffer.write(",".join(headers) + "\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for row in rows:
        writer.writerow(["" if row.get(header) is None else str(row.get(header)) for header in headers])
    return buffer.getvalue().rstrip("\n")


def equipment_csv_rows(details: List[insp_schemas.EquipmentDetail]) -> List[Dict[str, str]]:
    """설비 검색 결과를 내보내기 열 순서에 맞춘 레코드로 변환합니다."""
    return [
        {
            "Empresa": d.company_name,
            "Unidade": d.unit_name,
            "Setor": d.sector_name,
            "Equipamento": d.type_name,
            "COD": d.type_code,
            "Modelo": d.model,
            "Laco": d.loop,
            "Central": d.central,
            "CodigoFinal": d.final_code,
        }
        for d in details
    ]


# =============================================================================
# 2. PDF 공통
# =============================================================================
def _styles() -> Dict[str, ParagraphStyle]:
    styles = getSampleStyleSheet()
    return {
        "title": ParagraphStyle(
            "ReportTitle",
            parent=styles["Heading1"],
            fontSize=18,
            alignment=TA_CENTER,
            fontName="Helvetica-Bold",
            spaceAfter=8 * mm,
        ),
        "section": ParagraphStyle(
            "ReportSection",
            parent=styles["Normal"],
            fontSize=12,
            fontName="Helvetica-Bold",
            spaceBefore=4 * mm,
            spaceAfter=2 * mm,
        ),
        "normal": ParagraphStyle(
            "ReportNormal",
            parent=styles["Normal"],
            fontSize=11,
            leading=15,
            alignment=TA_LEFT,
            fontName="Helvetica",
            textColor=colors.HexColor("#000000"),
        ),
    }


def _text(value: Any, style: ParagraphStyle) -> Paragraph:
    return Paragraph(escape("" if value is None else str(value)).replace("\n", "<br/>"), style)


def _format_date(value: datetime) -> str:
    return value.strftime("%d/%m/%Y")


def _status_label(inspection: insp_schemas.InspectionRead) -> str:
    return STATUS_WORKING if inspection.functioning else STATUS_NOT_WORKING


def _photo(data_url: Optional[str]) -> Optional[Image]:
    """base64 data URL을 PDF 이미지로 변환합니다. 해석할 수 없으면 None."""
    if not data_url:
        return None
    encoded = data_url.split(",", 1)[1] if data_url.startswith("data:") else data_url
    try:
        raw = base64.b64decode(encoded, validate=True)
        ImageReader(BytesIO(raw)).getSize()
    except (binascii.Error, ValueError, OSError) as e:
        logger.warning(f"Skipping inspection photo that cannot be decoded: {e}")
        return None
    return Image(BytesIO(raw), width=180 * mm, height=100 * mm, kind="proportional")


def _build(story: List[Any]) -> bytes:
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=15 * mm,
        leftMargin=15 * mm,
        topMargin=15 * mm,
        bottomMargin=15 * mm,
    )
    doc.build(story)
    return buffer.getvalue()


# =============================================================================
# 3. 단일 점검 보고서
# =============================================================================
def inspection_pdf_filename(inspection: insp_schemas.InspectionRead, equipment: Optional[insp_schemas.EquipmentRead]) -> str:
    final_code = equipment.final_code if equipment else NOT_AVAILABLE
    return safe_filename(f"inspecao_{final_code}_{inspection.date.date().isoformat()}.pdf")


def safe_filename(name: str) -> str:
    return _UNSAFE_FILENAME.sub("_", name)


def content_disposition(filename: str) -> str:
    """
    `Content-Disposition` 헤더 값을 만듭니다.
    ASCII 대체 이름(`filename=`)과 UTF-8 인코딩 이름(`filename*=`, RFC 5987)을 함께 제공합니다.
    예: 'inspecao_ŁÓD.pdf' -> filename="inspecao__OD.pdf"; filename*=UTF-8''inspecao_%C5%81%C3%93D.pdf
    """
    filename = safe_filename(filename)
    filename_ascii = _ascii_fallback(filename)
    filename_encoded = quote(filename.encode("utf-8"))
    return f'attachment; filename="{filename_ascii}"; filename*=UTF-8\'\'{filename_encoded}'


def _ascii_fallback(name: str) -> str:
    # 분해 가능한 악센트는 제거하고, 나머지 비 ASCII 문자는 '_'로 바꿉니다.
    decomposed = unicodedata.normalize("NFKD", name)
    return "".join(c if c.isascii() else "_" for c in decomposed if not unicodedata.combining(c))


def build_inspection_pdf(inspection: insp_schemas.InspectionRead, lookup: LookupService) -> bytes:
    styles = _styles()
    equipment = lookup.get_equipment_by_id(inspection.equipment_id)
    company, unit, sector = lookup.resolve_chain(equipment) if equipment else (None, None, None)

    story: List[Any] = [
        _text("Relatório de Inspeção", styles["title"]),
        _text("Informações da Empresa e Localização", styles["section"]),
        _text(f"Empresa: {company.name if company else NOT_AVAILABLE}", styles["normal"]),
        _text(f"Unidade: {unit.name if unit else NOT_AVAILABLE}", styles["normal"]),
        _text(f"Setor: {sector.name if sector else NOT_AVAILABLE}", styles["normal"]),
        _text("Informações do Equipamento", styles["section"]),
        _text(f"Código: {equipment.final_code if equipment else NOT_AVAILABLE}", styles["normal"]),
        _text(f"Modelo: {equipment.model if equipment else NOT_AVAILABLE}", styles["normal"]),
        _text("Detalhes da Inspeção", styles["section"]),
        _text(f"Data da Inspeção: {_format_date(inspection.date)}", styles["normal"]),
        _text(f"Próxima Inspeção: {_format_date(inspection.next_date)}", styles["normal"]),
        _text(f"Status: {_status_label(inspection)}", styles["normal"]),
        _text("Descrição da Inspeção", styles["section"]),
        _text(inspection.description, styles["normal"]),
    ]
    if not inspection.functioning:
        story += [
            _text("Descrição do Problema", styles["section"]),
            _text(inspection.malfunction_description, styles["normal"]),
        ]

    description_photo = _photo(inspection.description_photo)
    malfunction_photo = _photo(inspection.malfunction_photo)
    if description_photo or malfunction_photo:
        story += [PageBreak(), _text("Fotos da Inspeção", styles["title"])]
        if description_photo:
            story += [_text("Foto da Inspeção:", styles["section"]), description_photo, Spacer(1, 5 * mm)]
        if malfunction_photo:
            story += [_text("Foto do Problema:", styles["section"]), malfunction_photo]

    return _build(story)


# =============================================================================
# 4. 점검 목록 기술 보고서
# =============================================================================
def inspections_report_filename(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(UTC)
    return f"relatorio_inspecoes_{now.date().isoformat()}.pdf"


def build_inspections_report_pdf(
    inspections: List[insp_schemas.InspectionRead],
    lookup: LookupService,
    company: Optional[insp_schemas.CompanyRead] = None,
    now: Optional[datetime] = None,
) -> bytes:
    styles = _styles()
    summary = inspection_summary(inspections)
    now = now or datetime.now(UTC)

    story: List[Any] = [_text("RELATÓRIO TÉCNICO DE INSPEÇÃO", styles["title"])]

    if company is not None:
        story += [
            _text("EMPRESA CONTRATANTE:", styles["section"]),
            _text(f"Razão Social: {company.name}", styles["normal"]),
            _text(f"Endereço: {company.address or ''}", styles["normal"]),
            _text(f"Responsável: {company.responsible or ''}", styles["normal"]),
            _text(f"Projeto CB: {company.cb_project or ''}", styles["normal"]),
            _text(f"AVCB: {company.avcb or ''}", styles["normal"]),
        ]

    story += [
        _text("RESUMO DAS INSPEÇÕES:", styles["section"]),
        _text(f"Total de equipamentos inspecionados: {summary.total}", styles["normal"]),
        _text(f"Equipamentos em funcionamento: {summary.functioning}", styles["normal"]),
        _text(f"Equipamentos com problemas: {summary.malfunctioning}", styles["normal"]),
        _text("DETALHAMENTO DAS INSPEÇÕES:", styles["section"]),
    ]

    for inspection in inspections:
        equipment = lookup.get_equipment_by_id(inspection.equipment_id)
        if equipment is None:
            continue
        _, unit, sector = lookup.resolve_chain(equipment)
        equipment_type = lookup.get_equipment_type_by_code(equipment.type_code)
        story += [
            _text(f"Equipamento: {equipment.final_code}", styles["section"]),
            _text(f"Tipo: {equipment_type.name if equipment_type else NOT_AVAILABLE}", styles["normal"]),
            _text(f"Modelo: {equipment.model}", styles["normal"]),
            _text(
                f"Local: {unit.name if unit else NOT_AVAILABLE} - {sector.name if sector else NOT_AVAILABLE}",
                styles["normal"],
            ),
            _text(f"Data da Inspeção: {_format_date(inspection.date)}", styles["normal"]),
            _text(f"Status: {_status_label(inspection)}", styles["normal"]),
            _text(f"Descrição: {inspection.description}", styles["normal"]),
        ]
        if not inspection.functioning:
            story.append(_text(f"Problema Encontrado: {inspection.malfunction_description}", styles["normal"]))
        story.append(Spacer(1, 5 * mm))

    story += [Spacer(1, 10 * mm), _text(f"Data de emissão: {_format_date(now)}", styles["normal"])]
    return _build(story)
