"""
Record Export

Turns a resource's merged view into a downloadable file: pretty JSON
(a drop-in replacement for the baseline file) or an Excel sheet for
the restaurant owner.

Author: Your Name
Version: 1.0.0
"""

import io
import json
import logging
from typing import Any

import pandas as pd

from quannem.schemas import ExportFormat

logger = logging.getLogger(__name__)

MEDIA_TYPES = {
    ExportFormat.JSON: "application/json",
    ExportFormat.XLSX: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def filename_for(resource: str, fmt: ExportFormat) -> str:
    return f"{resource}.{fmt.value}"


def export_json(records: list[dict[str, Any]]) -> bytes:
    """Serialize records with 4-space indentation."""
    return json.dumps(records, indent=4, ensure_ascii=False).encode("utf-8")


def export_excel(records: list[dict[str, Any]], sheet_name: str = "records") -> bytes:
    """
    Write records to a single-sheet workbook.

    Columns are the union of all record keys in first-seen order;
    missing values are left blank.
    """
    columns: list[str] = []
    for record in records:
        for key in record:
            if key not in columns:
                columns.append(key)

    df = pd.DataFrame(records, columns=columns)

    buffer = io.BytesIO()
    # Excel caps sheet names at 31 characters
    df.to_excel(buffer, index=False, sheet_name=sheet_name[:31], engine="openpyxl")
    logger.info(f"Exported {len(df)} rows to sheet '{sheet_name}'")
    return buffer.getvalue()


def export_records(records: list[dict[str, Any]], resource: str, fmt: ExportFormat) -> bytes:
    if fmt == ExportFormat.XLSX:
        return export_excel(records, sheet_name=resource)
    return export_json(records)
