"""Excel input helpers for importing typed records."""

# Module responsibilities:
# - Open a workbook source and scan a row range into untyped RawRows.
# - Build one record per row, collecting field-level failures instead of aborting.
# - Emit structured logs for traceability.

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import BinaryIO, List, Optional, Sequence, Union
from zipfile import BadZipFile

from openpyxl import Workbook, load_workbook
from openpyxl.cell.cell import Cell
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.worksheet.worksheet import Worksheet

from .coercion import coerce_raw
from .errors import CoercionError, ReflectionError, SchemaError, WorkbookIOError
from .fields import instantiate, resolve_fields, write_field
from .schema import FieldIssue, ImportResult, RawRow
from .utils.log import get_logger

_default_logger = get_logger("excel_reader")

Source = Union[str, os.PathLike, BinaryIO]
SheetType = Union[str, int, None]


def _open_workbook(source: Source) -> Workbook:
    if isinstance(source, (str, os.PathLike)):
        path = Path(source)
        if not path.exists():
            raise WorkbookIOError(f"Source workbook does not exist: {path}")
    try:
        return load_workbook(source)
    except (OSError, BadZipFile, InvalidFileException, KeyError) as exc:
        raise WorkbookIOError(f"Failed to read Excel workbook: {exc}") from exc


def _select_sheet(workbook: Workbook, sheet: SheetType) -> Worksheet:
    if sheet is None:
        return workbook.worksheets[0]
    if isinstance(sheet, int):
        try:
            return workbook.worksheets[sheet]
        except IndexError:
            raise KeyError(f"Worksheet index {sheet} out of range") from None
    return workbook[sheet]


def cell_text(cell: Cell) -> str:
    """Return the raw text of a cell; blank cells read as the empty string."""

    value = cell.value
    if value is None:
        return ""
    if cell.data_type == "f":
        text = str(getattr(value, "text", value))
        return text[1:] if text.startswith("=") else text
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, int):
        # Numbers read back as floating point text, e.g. 1 -> "1.0".
        return f"{value}.0"
    if isinstance(value, float):
        # Integral values never use exponent form, so large ids keep their digits.
        return f"{value:.1f}" if value.is_integer() else repr(value)
    return str(value)


def read_raw_rows(
    worksheet: Worksheet,
    start_row: int,
    end_row_offset: int,
    *,
    logger: Optional[logging.Logger] = None,
) -> List[RawRow]:
    """Scan rows ``[start_row, last_row + end_row_offset]`` (0-based, inclusive).

    ``end_row_offset`` of 0 reads through the last row; a negative offset
    drops that many trailing rows. Rows without any value are skipped, and
    each populated row yields text for columns 0..last populated column.
    """

    log = logger or _default_logger
    last_row = worksheet.max_row - 1
    end_row = last_row + end_row_offset
    # Rows outside [0, last_row] do not exist; they are skipped, not clamped into.
    first = max(start_row, 0)
    last = min(end_row, last_row)
    if last < first:
        log.info(
            "Row range is empty",
            extra={"start_row": start_row, "end_row": end_row, "last_row": last_row},
        )
        return []

    raw_rows: List[RawRow] = []
    for index, cells in enumerate(
        worksheet.iter_rows(min_row=first + 1, max_row=last + 1), start=first
    ):
        populated = [idx for idx, cell in enumerate(cells) if cell.value is not None]
        if not populated:
            continue
        values = tuple(cell_text(cell) for cell in cells[: populated[-1] + 1])
        raw_rows.append(RawRow(index=index, values=values))
        log.debug("Row read", extra={"row": index, "values": values})
    return raw_rows


def build_records(
    raw_rows: Sequence[RawRow],
    record_type: type,
    *,
    strict: bool = False,
    logger: Optional[logging.Logger] = None,
) -> ImportResult:
    """Instantiate one *record_type* per raw row and assign fields by position.

    Field ``i`` takes column ``i``; missing columns read as ``""`` and extra
    columns are ignored. Coercion and accessor failures are recorded as
    issues and the field is skipped.

    Raises:
        SchemaError: When the type has no fields or no zero-argument
            constructor, or in strict mode when a row's column count differs
            from the field count.
    """

    log = logger or _default_logger
    descriptors = resolve_fields(record_type)
    result = ImportResult()

    for raw_row in raw_rows:
        if strict and len(raw_row.values) != len(descriptors):
            raise SchemaError(
                f"Row {raw_row.index} has {len(raw_row.values)} columns but "
                f"{record_type.__qualname__} declares {len(descriptors)} fields"
            )
        record = instantiate(record_type)
        for descriptor in descriptors:
            raw = raw_row.value_at(descriptor.position)
            try:
                write_field(record, descriptor, coerce_raw(raw, descriptor))
            except (CoercionError, ReflectionError) as exc:
                issue = FieldIssue(
                    row=raw_row.index,
                    field_name=descriptor.name,
                    column=descriptor.position,
                    kind="coercion" if isinstance(exc, CoercionError) else "reflection",
                    message=str(exc),
                    raw=raw,
                )
                result.issues.append(issue)
                log.warning(
                    "Field skipped during import",
                    extra={"row": issue.row, "field": issue.field_name, "error": issue.message},
                )
        result.records.append(record)
        result.row_indices.append(raw_row.index)
    return result


def import_records(
    source: Source,
    start_row: int,
    end_row_offset: int,
    record_type: type,
    *,
    sheet: SheetType = None,
    strict: bool = False,
    logger: Optional[logging.Logger] = None,
) -> ImportResult:
    """Load typed records from a row range of an Excel workbook.

    Args:
        source: Path to the workbook or a readable binary stream.
        start_row: First 0-based row to read.
        end_row_offset: 0 reads to the last row, positive values extend the
            end past it, negative values stop that many rows before it.
        record_type: Class instantiated once per populated row.
        sheet: Sheet name or index; defaults to the first sheet.
        strict: Fail when a row's column count differs from the field count.
        logger: Optional logger receiving progress events and field issues.

    Returns:
        ImportResult with one record per populated row and the field issues.

    Raises:
        WorkbookIOError: When the source does not exist or cannot be read.
        KeyError: When the requested sheet is missing.
        SchemaError: When the record type cannot be mapped.
    """

    log = logger or _default_logger
    resolve_fields(record_type)

    log.info(
        "Reading Excel workbook",
        extra={
            "source": str(source) if isinstance(source, (str, os.PathLike)) else "<stream>",
            "sheet": sheet,
            "start_row": start_row,
            "end_row_offset": end_row_offset,
        },
    )

    workbook = _open_workbook(source)
    try:
        worksheet = _select_sheet(workbook, sheet)
        raw_rows = read_raw_rows(worksheet, start_row, end_row_offset, logger=log)
    finally:
        workbook.close()

    result = build_records(raw_rows, record_type, strict=strict, logger=log)
    log.info(
        "Excel import complete",
        extra={"records": len(result), "issues": len(result.issues)},
    )
    return result
