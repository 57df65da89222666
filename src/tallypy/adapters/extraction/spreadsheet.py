"""Render spreadsheets as CSV text for the extraction prompt."""

from __future__ import annotations

import csv
import io
from datetime import date, datetime, time
from logging import getLogger
from typing import TYPE_CHECKING, Final

from openpyxl import load_workbook

from tallypy.domain.ports import ExtractionError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from tallypy.domain.model import UploadedFile

log = getLogger(__name__)

WORKBOOK_EXTENSIONS: Final[frozenset[str]] = frozenset({"xlsx", "xlsm"})
LEGACY_WORKBOOK_EXTENSIONS: Final[frozenset[str]] = frozenset({"xls"})
CSV_EXTENSIONS: Final[frozenset[str]] = frozenset({"csv"})
SPREADSHEET_EXTENSIONS: Final[frozenset[str]] = (
    WORKBOOK_EXTENSIONS | LEGACY_WORKBOOK_EXTENSIONS | CSV_EXTENSIONS
)


class UnsupportedSpreadsheetError(ExtractionError):
    """Raised for spreadsheet formats that cannot be rendered."""


def is_spreadsheet(file: UploadedFile) -> bool:
    return file.extension in SPREADSHEET_EXTENSIONS


def _cell_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        return value.date().isoformat() if value.time() == time() else value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip()


def _rows_to_csv(rows: Iterable[Iterable[object]], max_lines: int) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    written = 0
    for row in rows:
        cells = [_cell_text(value) for value in row]
        if not any(cells):
            continue
        writer.writerow(cells)
        written += 1
        if written >= max_lines:
            break
    return buffer.getvalue()


def _workbook_rows(file: UploadedFile) -> list[tuple[object, ...]]:
    try:
        workbook = load_workbook(io.BytesIO(file.content), read_only=True, data_only=True)
        try:
            if not workbook.worksheets:
                return []
            sheet = workbook.worksheets[0]
            return [tuple(row) for row in sheet.iter_rows(values_only=True)]
        finally:
            workbook.close()
    except Exception as exc:
        raise ExtractionError(
            f"Cannot read workbook {file.name}: {exc}", file_name=file.name
        ) from exc


def render_spreadsheet(file: UploadedFile, *, max_lines: int) -> str:
    """Return the first sheet of ``file`` as CSV, at most ``max_lines`` non-empty rows."""

    extension = file.extension
    if extension in CSV_EXTENSIONS:
        text = file.content.decode("utf-8-sig", errors="replace")
        rows = csv.reader(io.StringIO(text))
        return _rows_to_csv(rows, max_lines)
    if extension in WORKBOOK_EXTENSIONS:
        rendered = _rows_to_csv(_workbook_rows(file), max_lines)
        log.debug("Rendered %s to %d CSV characters", file.name, len(rendered))
        return rendered
    if extension in LEGACY_WORKBOOK_EXTENSIONS:
        raise UnsupportedSpreadsheetError(
            f"{file.name}: legacy .xls workbooks are not supported, save as .xlsx",
            file_name=file.name,
        )
    raise UnsupportedSpreadsheetError(
        f"{file.name}: not a spreadsheet", file_name=file.name
    )
