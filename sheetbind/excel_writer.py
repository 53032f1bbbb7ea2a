"""Excel output helpers for exporting record collections."""

# Module responsibilities:
# - Lay out a styled sheet: merged title row, header row, one row per record.
# - Coerce each field into a numeric or text cell and save the workbook once.

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import BinaryIO, Iterable, Optional, Sequence, Union

from openpyxl import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from .coercion import format_cell_text, to_cell_value
from .errors import SchemaError, WorkbookIOError
from .fields import read_field, resolve_fields
from .schema import ExportSummary
from .styles import SheetTheme
from .utils.log import get_logger
from .utils.paths import atomic_save

_default_logger = get_logger("excel_writer")

Destination = Union[str, os.PathLike, BinaryIO]

# 0-based sheet rows; openpyxl addresses them from 1.
TITLE_ROW = 0
HEADER_ROW = 1
FIRST_DATA_ROW = 2


def _put(ws: Worksheet, row: int, column: int, value: object, style: str) -> None:
    cell = ws.cell(row=row, column=column, value=value)
    if isinstance(value, str):
        # openpyxl reads a leading "=" as a formula; text must stay text.
        cell.data_type = "s"
    cell.style = style


def _write_title(ws: Worksheet, title: Optional[str], span: int, style: str) -> None:
    if span > 1:
        ws.merge_cells(
            start_row=TITLE_ROW + 1,
            start_column=1,
            end_row=TITLE_ROW + 1,
            end_column=span,
        )
    if title is not None:
        _put(ws, TITLE_ROW + 1, 1, title, style)


def _write_headers(ws: Worksheet, headers: Sequence[str], style: str) -> None:
    for idx, label in enumerate(headers, start=1):
        _put(ws, HEADER_ROW + 1, idx, label, style)


def _write_records(
    ws: Worksheet,
    records: Iterable[object],
    column_count: int,
    date_pattern: str,
    style: str,
    strict: bool,
) -> int:
    count = 0
    for offset, record in enumerate(records):
        row_idx = FIRST_DATA_ROW + offset + 1
        count = offset + 1
        descriptors = resolve_fields(type(record))
        if strict and len(descriptors) != column_count:
            raise SchemaError(
                f"{type(record).__qualname__} has {len(descriptors)} fields "
                f"but {column_count} header labels were given"
            )
        for descriptor in descriptors:
            text = format_cell_text(read_field(record, descriptor), date_pattern)
            _put(ws, row_idx, descriptor.position + 1, to_cell_value(text), style)
    return count


def _save(workbook: Workbook, destination: Destination) -> Optional[Path]:
    if isinstance(destination, (str, os.PathLike)):
        path = Path(destination)
        try:
            atomic_save(workbook, path)
        except OSError as exc:
            raise WorkbookIOError(f"Cannot write workbook to {path}: {exc}") from exc
        return path
    try:
        workbook.save(destination)
    except OSError as exc:
        raise WorkbookIOError(f"Cannot write workbook to stream: {exc}") from exc
    return None


def export_records(
    sheet_label: str,
    title: Optional[str],
    header_labels: Sequence[str],
    records: Iterable[object],
    destination: Destination,
    date_pattern: str,
    *,
    theme: Optional[SheetTheme] = None,
    strict: bool = False,
    logger: Optional[logging.Logger] = None,
) -> ExportSummary:
    """Export records into a styled single-sheet workbook.

    Args:
        sheet_label: Worksheet name.
        title: Text of the merged title row; ``None`` leaves the row empty.
        header_labels: Column labels; their count sets the title span.
        records: Records written one per row, fields in declaration order.
        destination: Output path (replaced atomically) or writable binary stream.
        date_pattern: Format for date fields, e.g. ``yyyy-MM-dd HH:mm``.
        theme: Optional style overrides; defaults to ``SheetTheme.default()``.
        strict: When True, every record must have one field per header label.
        logger: Optional logger receiving progress events.

    Returns:
        Summary of the written sheet.

    Raises:
        ValueError: When no header labels are given.
        SchemaError: When a record type has no fields, or on a strict-mode mismatch.
        ReflectionError: When a field value cannot be read.
        WorkbookIOError: When the destination cannot be written.
    """

    log = logger or _default_logger
    headers = list(header_labels)
    if not headers:
        raise ValueError("header_labels must contain at least one label")
    active_theme = theme or SheetTheme.default()

    log.info(
        "Starting Excel export",
        extra={"sheet": sheet_label, "columns": len(headers), "strict": strict},
    )

    workbook = Workbook()
    try:
        ws = workbook.active
        ws.title = sheet_label
        ws.sheet_format.defaultColWidth = active_theme.column_width
        styles = active_theme.register(workbook)

        _write_title(ws, title, len(headers), styles["title"])
        _write_headers(ws, headers, styles["header"])
        count = _write_records(ws, records, len(headers), date_pattern, styles["data"], strict)
        saved_to = _save(workbook, destination)
    finally:
        workbook.close()

    log.info(
        "Excel export complete",
        extra={"records": count, "output": str(saved_to) if saved_to else "<stream>"},
    )
    return ExportSummary(destination=saved_to, record_count=count, column_count=len(headers))
