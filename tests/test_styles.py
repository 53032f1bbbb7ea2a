"""Unit tests for theme defaults and YAML overrides."""

from __future__ import annotations

from pathlib import Path

import pytest
from openpyxl import load_workbook

from sheetbind.errors import ThemeError
from sheetbind.excel_writer import export_records
from sheetbind.styles import ORANGE, SheetTheme


def _write_theme(path: Path, payload: str) -> Path:
    path.write_text(payload, encoding="utf-8")
    return path


def test_default_theme_matches_builtin_bundles() -> None:
    theme = SheetTheme.default()

    assert theme.header.fill_color == ORANGE
    assert theme.title.font.size == 24
    assert theme.data.vertical == "center"
    assert theme.title.vertical is None
    assert theme.column_width == 20


def test_theme_yaml_overrides_only_given_fields(tmp_path: Path) -> None:
    path = _write_theme(
        tmp_path / "theme.yaml",
        "column_width: 28\n"
        "header:\n"
        "  fill_color: '#00aa00'\n"
        "  font:\n"
        "    size: 14\n"
        "data:\n"
        "  border_style: dashed\n",
    )

    theme = SheetTheme.from_yaml(path)
    default = SheetTheme.default()

    assert theme.column_width == 28
    assert theme.header.fill_color == "FF00AA00"
    assert theme.header.font.size == 14
    assert theme.header.font.bold is True
    assert theme.data.border_style == "dashed"
    assert theme.title == default.title


@pytest.mark.parametrize(
    "payload",
    [
        "header:\n  fill_color: zzz\n",
        "header:\n  border_style: wavy\n",
        "footer: {}\n",
        "- not\n- a mapping\n",
    ],
)
def test_invalid_theme_yaml_raises(tmp_path: Path, payload: str) -> None:
    path = _write_theme(tmp_path / "theme.yaml", payload)

    with pytest.raises(ThemeError):
        SheetTheme.from_yaml(path)


def test_missing_theme_file(tmp_path: Path) -> None:
    with pytest.raises(ThemeError):
        SheetTheme.from_yaml(tmp_path / "absent.yaml")


def test_exported_sheet_uses_yaml_theme(tmp_path: Path) -> None:
    theme = SheetTheme.from_yaml(
        _write_theme(tmp_path / "theme.yaml", "title:\n  fill_color: '112233'\n")
    )

    out = tmp_path / "themed.xlsx"
    export_records("Sheet", "Title", ["a"], [], out, "yyyy-MM-dd", theme=theme)

    ws = load_workbook(out).active
    assert ws["A1"].fill.fgColor.rgb == "FF112233"
    assert not list(ws.merged_cells.ranges)
