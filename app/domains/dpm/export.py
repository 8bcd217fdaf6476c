# app/domains/dpm/export.py

"""
측정값 내보내기 모듈입니다 (CSV / Excel).

입력 행만으로 결과 바이트가 결정되며, DB에는 접근하지 않습니다.
같은 입력이면 항상 같은 바이트를 반환합니다.
"""

import csv
import io
import zipfile
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, NamedTuple, Optional

from openpyxl import Workbook
from openpyxl.utils import get_column_letter
from openpyxl.writer.excel import ExcelWriter

from app.utils.dates import ensure_utc
from . import models as dpm_models

EXPORT_COLUMNS = [
    "Id", "ParameterName", "Value", "Unit", "Timestamp",
    "EngineeringUnit", "User", "Notes", "IsValid", "ValidationMessage",
]
SHEET_TITLE = "Data Points"

# 워크북 문서 속성(생성/수정 일시)과 zip 엔트리 일시를 고정합니다.
WORKBOOK_TIMESTAMP = datetime(2000, 1, 1)
ZIP_ENTRY_DATE_TIME = (1980, 1, 1, 0, 0, 0)


class ExportRow(NamedTuple):
    id: int
    parameter_name: str
    value: Decimal
    unit: str
    timestamp: datetime
    engineering_unit: Optional[str]
    user: Optional[str]
    notes: Optional[str]
    is_valid: bool
    validation_message: Optional[str]


def to_export_row(data_point: dpm_models.DataPoint) -> ExportRow:
    """user / engineering_unit 관계가 로딩된 측정값을 내보내기 행으로 변환합니다."""
    return ExportRow(
        id=data_point.id,
        parameter_name=data_point.parameter_name,
        value=data_point.value,
        unit=data_point.unit,
        timestamp=ensure_utc(data_point.timestamp),
        engineering_unit=data_point.engineering_unit.name if data_point.engineering_unit else None,
        user=data_point.user.full_name if data_point.user else None,
        notes=data_point.notes,
        is_valid=data_point.is_valid,
        validation_message=data_point.validation_message,
    )


def export_to_csv(rows: Iterable[ExportRow]) -> bytes:
    """헤더 + 측정값 행을 UTF-8 CSV 바이트로 반환합니다. 줄바꿈은 CRLF 입니다."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\r\n")
    writer.writerow(EXPORT_COLUMNS)
    for row in rows:
        writer.writerow([
            row.id,
            row.parameter_name,
            row.value,
            row.unit,
            ensure_utc(row.timestamp).isoformat(),
            row.engineering_unit,
            row.user,
            row.notes,
            row.is_valid,
            row.validation_message,
        ])
    return buffer.getvalue().encode("utf-8")


def _excel_values(row: ExportRow) -> List:
    # Excel은 timezone 정보를 지원하지 않으므로 UTC 기준 naive 일시로 기록합니다.
    return [
        row.id,
        row.parameter_name,
        float(row.value),
        row.unit,
        ensure_utc(row.timestamp).replace(tzinfo=None),
        row.engineering_unit,
        row.user,
        row.notes,
        row.is_valid,
        row.validation_message,
    ]


def _display_width(value) -> int:
    if value is None:
        return 0
    if isinstance(value, datetime):
        return len(value.strftime("%Y-%m-%d %H:%M:%S"))
    return len(str(value))


def _repack(data: bytes) -> bytes:
    """zip 엔트리의 수정 일시를 고정해 다시 압축합니다."""
    source = zipfile.ZipFile(io.BytesIO(data))
    output = io.BytesIO()
    with zipfile.ZipFile(output, "w", zipfile.ZIP_DEFLATED) as target:
        for info in source.infolist():
            entry = zipfile.ZipInfo(info.filename, date_time=ZIP_ENTRY_DATE_TIME)
            entry.compress_type = zipfile.ZIP_DEFLATED
            target.writestr(entry, source.read(info.filename))
    source.close()
    return output.getvalue()


def export_to_excel(rows: Iterable[ExportRow]) -> bytes:
    """
    'Data Points' 시트 하나로 구성된 xlsx 바이트를 반환합니다.
    열 순서는 CSV와 같고, 열 너비는 가장 긴 셀 내용에 맞춥니다.
    """
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = SHEET_TITLE

    widths = [len(name) for name in EXPORT_COLUMNS]
    sheet.append(EXPORT_COLUMNS)
    for row in rows:
        values = _excel_values(row)
        sheet.append(values)
        widths = [max(width, _display_width(value)) for width, value in zip(widths, values)]

    for index, width in enumerate(widths, start=1):
        sheet.column_dimensions[get_column_letter(index)].width = width + 2

    workbook.properties.created = WORKBOOK_TIMESTAMP
    workbook.properties.modified = WORKBOOK_TIMESTAMP

    # Workbook.save()는 저장 시점으로 수정 일시를 덮어쓰므로 ExcelWriter를 직접 사용합니다.
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        ExcelWriter(workbook, archive).write_data()
    return _repack(buffer.getvalue())
