"""Unit tests for the Excel export pipeline."""

# Module responsibilities:
# - Validate the title/header/data layout and the styles applied to each role.
# - Assert the numeric heuristic and the atomic, single write of the destination.

from __future__ import annotations

import io
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

import pytest
from openpyxl import Workbook, load_workbook

from sheetbind.errors import ReflectionError, SchemaError, WorkbookIOError
from sheetbind.excel_writer import export_records
from sheetbind.styles import SheetTheme

HEADERS = ["id", "name", "price", "time"]


@dataclass
class Book:
    id: int = 0
    name: str = ""
    price: float = 0.0
    time: Optional[datetime] = None


@dataclass
class Code:
    value: str = ""
    note: Optional[str] = None


class FailingGetter:
    code: str = ""

    def getCode(self) -> str:
        raise RuntimeError("lookup failed")


class Hollow:
    code: str


def _books() -> list[Book]:
    return [
        Book(1, "A", 7.5, datetime(2024, 1, 1, 9, 15)),
        Book(2, "B", 3.0, datetime(2024, 2, 2, 18, 0)),
    ]


def test_export_lays_out_title_headers_and_rows(tmp_path: Path) -> None:
    out = tmp_path / "books.xlsx"

    summary = export_records("Books", "My books", HEADERS, _books(), out, "yyyy-MM-dd")

    assert summary.destination == out
    assert summary.record_count == 2
    assert summary.column_count == 4

    ws = load_workbook(out)["Books"]
    assert [r.coord for r in ws.merged_cells.ranges] == ["A1:D1"]
    assert ws["A1"].value == "My books"
    assert [ws.cell(row=2, column=c).value for c in range(1, 5)] == HEADERS
    assert ws.cell(row=2, column=5).value is None
    assert [ws.cell(row=3, column=c).value for c in range(1, 5)] == [1, "A", 7.5, "2024-01-01"]
    assert [ws.cell(row=4, column=c).value for c in range(1, 5)] == [2, "B", 3, "2024-02-02"]
    assert ws["A3"].data_type == "n"
    assert ws["C3"].data_type == "n"
    assert ws["D3"].data_type == "s"
    assert ws.max_row == 4


def test_export_without_title_keeps_merged_empty_row(tmp_path: Path) -> None:
    out = tmp_path / "books.xlsx"

    export_records("Books", None, HEADERS, _books(), out, "yyyy-MM-dd HH:mm")

    ws = load_workbook(out).active
    assert [r.coord for r in ws.merged_cells.ranges] == ["A1:D1"]
    assert ws["A1"].value is None
    assert ws["D3"].value == "2024-01-01 09:15"


def test_export_empty_collection_writes_header_only(tmp_path: Path) -> None:
    out = tmp_path / "empty.xlsx"

    summary = export_records("Books", "Nothing", HEADERS, [], out, "yyyy-MM-dd")

    ws = load_workbook(out).active
    assert summary.record_count == 0
    assert ws.max_row == 2
    assert ws["B2"].value == "name"


def test_export_applies_role_styles(tmp_path: Path) -> None:
    out = tmp_path / "styled.xlsx"

    export_records("Books", "Styled", HEADERS, _books(), out, "yyyy-MM-dd")

    ws = load_workbook(out).active
    assert ws.sheet_format.defaultColWidth == 20
    title, header, data = ws["A1"], ws["A2"], ws["B3"]
    assert title.fill.fgColor.rgb == "FF3366FF"
    assert title.font.bold and title.font.sz == 24
    assert header.fill.fgColor.rgb == "FFFF6600"
    assert header.font.bold and header.font.sz == 12
    assert data.fill.fgColor.rgb == "FFFFFFFF"
    assert not data.font.bold
    assert data.alignment.horizontal == "center"
    assert data.alignment.vertical == "center"
    for cell in (title, header, data):
        assert cell.border.left.style == "thin"
        assert cell.border.bottom.style == "thin"


def test_export_numeric_heuristic_converts_digit_text(tmp_path: Path) -> None:
    out = tmp_path / "codes.xlsx"
    records = [Code("00123", "12a"), Code("-5", None), Code("4.50", "x")]

    export_records("Codes", None, ["value", "note"], records, out, "yyyy-MM-dd")

    ws = load_workbook(out).active
    assert ws["A3"].value == 123
    assert ws["B3"].value == "12a"
    assert ws["A4"].value == "-5"
    assert ws["B4"].value in ("", None)
    assert ws["A5"].value == 4.5


def test_export_to_stream(tmp_path: Path) -> None:
    buffer = io.BytesIO()

    summary = export_records("Books", None, HEADERS, _books(), buffer, "yyyy-MM-dd")

    assert summary.destination is None
    buffer.seek(0)
    ws = load_workbook(buffer).active
    assert ws["B3"].value == "A"


def test_export_requires_headers(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        export_records("Books", None, [], _books(), tmp_path / "x.xlsx", "yyyy-MM-dd")


def test_export_strict_mode_rejects_column_mismatch(tmp_path: Path) -> None:
    out = tmp_path / "strict.xlsx"
    with pytest.raises(SchemaError):
        export_records("Books", None, ["id", "name"], _books(), out, "yyyy-MM-dd", strict=True)
    assert not out.exists()


def test_export_reports_unwritable_destination(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")

    with pytest.raises(WorkbookIOError):
        export_records("Books", None, HEADERS, _books(), blocker / "out.xlsx", "yyyy-MM-dd")


def test_failed_save_keeps_previous_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    out = tmp_path / "books.xlsx"
    out.write_bytes(b"previous export")

    def _broken_save(self: Workbook, filename: object) -> None:
        Path(filename).write_bytes(b"partial")
        raise OSError("disk full")

    monkeypatch.setattr(Workbook, "save", _broken_save)

    with pytest.raises(WorkbookIOError):
        export_records("Books", None, HEADERS, _books(), out, "yyyy-MM-dd")

    assert out.read_bytes() == b"previous export"
    assert not (tmp_path / "books.xlsx.tmp").exists()


def test_export_with_custom_theme(tmp_path: Path) -> None:
    out = tmp_path / "themed.xlsx"
    base = SheetTheme.default()
    theme = SheetTheme(
        title=base.title,
        header=base.header,
        data=base.data,
        column_width=32,
    )

    export_records("Books", None, HEADERS, _books(), out, "yyyy-MM-dd", theme=theme)

    ws = load_workbook(out).active
    assert ws.sheet_format.defaultColWidth == 32


def test_export_keeps_leading_equals_as_text(tmp_path: Path) -> None:
    out = tmp_path / "codes.xlsx"

    export_records("Codes", "=title", ["=value", "note"], [Code("=1+1", "=SUM(A1:A2)")], out, "yyyy-MM-dd")

    ws = load_workbook(out).active
    for ref, expected in [("A1", "=title"), ("A2", "=value"), ("A3", "=1+1"), ("B3", "=SUM(A1:A2)")]:
        assert ws[ref].value == expected
        assert ws[ref].data_type == "s"


@pytest.mark.parametrize("record", [FailingGetter(), Hollow()])
def test_export_read_failure_is_fatal_and_writes_nothing(tmp_path: Path, record: object) -> None:
    out = tmp_path / "codes.xlsx"

    with pytest.raises(ReflectionError):
        export_records("Codes", None, ["code"], [record], out, "yyyy-MM-dd")

    assert not out.exists()
    assert not (tmp_path / "codes.xlsx.tmp").exists()
