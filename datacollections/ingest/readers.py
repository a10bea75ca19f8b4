"""
UPLOAD READERS
--------------
Turn uploaded CSV or spreadsheet bytes into flat ``field -> value`` dicts.
No business transformation happens here; headers become field names as-is.
"""

from __future__ import annotations

import csv
import io
import zipfile
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Dict, List, Optional

from openpyxl import load_workbook

from datacollections.exceptions import IngestError, UnsupportedFileError

CSV_EXTENSIONS = {".csv"}
EXCEL_EXTENSIONS = {".xlsx", ".xlsm"}

CSV_CONTENT_TYPES = {"text/csv", "application/csv", "text/plain"}
EXCEL_CONTENT_TYPES = {
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-excel.sheet.macroEnabled.12",
}


def _unique_headers(raw_headers: List[Any]) -> List[str]:
    """Name blank headers by column and suffix repeated ones (``Qty``, ``Qty_1``)."""
    headers: List[str] = []
    taken: set = set()
    suffixes: Dict[str, int] = {}
    for column, header in enumerate(raw_headers, start=1):
        base = str(header).strip() if header not in (None, "") else f"col_{column}"
        name = base
        # a generated name must not shadow a real header, earlier or later
        while name in taken:
            suffixes[base] = suffixes.get(base, 0) + 1
            name = f"{base}_{suffixes[base]}"
        taken.add(name)
        headers.append(name)
    return headers


def _cell_value(value: Any) -> Any:
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return value


def read_csv(data: bytes, encoding: str = "utf-8-sig") -> List[Dict[str, Any]]:
    """Read CSV bytes where line 1 holds the headers."""
    try:
        text = data.decode(encoding)
    except UnicodeDecodeError as exc:
        raise IngestError(f"CSV file is not valid {encoding}: {exc}") from exc

    reader = csv.reader(io.StringIO(text, newline=""))
    try:
        raw_headers = next(reader)
    except StopIteration:
        return []
    headers = _unique_headers(raw_headers)

    rows: List[Dict[str, Any]] = []
    try:
        for values in reader:
            if not any(value.strip() for value in values):
                continue
            rows.append(dict(zip(headers, values)))
    except csv.Error as exc:
        raise IngestError(f"Malformed CSV at line {reader.line_num}: {exc}") from exc
    return rows


def read_excel(data: bytes, sheet_name: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Read spreadsheet bytes where row 1 = headers, rows 2+ = data.

    Empty cells are left out of the row dict and fully empty rows are
    skipped. Uses the first sheet unless ``sheet_name`` is given.

    Raises:
        IngestError: If the bytes are not a readable workbook or the sheet is missing
    """
    try:
        wb = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    except (zipfile.BadZipFile, KeyError, OSError, ValueError) as exc:
        raise IngestError(f"Cannot read Excel file (is it corrupted or wrong format?): {exc}") from exc

    try:
        if sheet_name is not None:
            if sheet_name not in wb.sheetnames:
                raise IngestError(f"Sheet {sheet_name!r} not found")
            ws = wb[sheet_name]
        else:
            ws = wb.worksheets[0]

        row_iter = ws.iter_rows(values_only=True)
        first_row = next(row_iter, None)
        if first_row is None:
            return []
        headers = _unique_headers(list(first_row))

        rows: List[Dict[str, Any]] = []
        for values in row_iter:
            row = {
                header: _cell_value(value)
                for header, value in zip(headers, values)
                if value not in (None, "")
            }
            if row:
                rows.append(row)
        return rows
    finally:
        wb.close()


def read_upload(filename: Optional[str], content_type: Optional[str], data: bytes) -> List[Dict[str, Any]]:
    """Pick the reader from the file extension, falling back to the MIME type."""
    suffix = Path(filename or "").suffix.lower()

    if suffix in CSV_EXTENSIONS:
        return read_csv(data)
    if suffix in EXCEL_EXTENSIONS:
        return read_excel(data)
    if not suffix and content_type in CSV_CONTENT_TYPES:
        return read_csv(data)
    if not suffix and content_type in EXCEL_CONTENT_TYPES:
        return read_excel(data)

    raise UnsupportedFileError(
        f"Invalid file type {filename or content_type!r}. Only CSV and Excel (.xlsx) files are allowed."
    )


def read_path(path: Path) -> List[Dict[str, Any]]:
    """Read a CSV or spreadsheet from disk."""
    path = path.expanduser().resolve()
    if not path.exists():
        raise IngestError(f"File not found: {path}")
    return read_upload(path.name, None, path.read_bytes())
