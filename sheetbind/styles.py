"""
RESPONSIBILITIES
- Describe the Title/Header/Data cell styles applied by the exporter.
- Render those descriptions as openpyxl named styles once per workbook.
- Load theme overrides from YAML, validated through ThemeConfig.
PROCESS OVERVIEW
1. SheetTheme.default() reproduces the built-in colour scheme.
2. SheetTheme.from_yaml() merges a validated override file over the defaults.
3. SheetTheme.register() adds the three named styles to a workbook.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Optional

import yaml
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, NamedStyle, PatternFill, Side
from pydantic import ValidationError

from .errors import ThemeError
from .schema import StyleConfig, ThemeConfig

LIGHT_BLUE = "FF3366FF"
ORANGE = "FFFF6600"
WHITE = "FFFFFFFF"
BLACK = "FF000000"

DEFAULT_COLUMN_WIDTH = 20.0

TITLE_STYLE = "sheetbind_title"
HEADER_STYLE = "sheetbind_header"
DATA_STYLE = "sheetbind_data"


@dataclass(frozen=True)
class FontSpec:
    color: str = BLACK
    size: float = 11
    bold: bool = False


@dataclass(frozen=True)
class StyleSpec:
    """Visual attributes shared by every cell of one role."""

    fill_color: str
    border_style: str = "thin"
    horizontal: Optional[str] = "center"
    vertical: Optional[str] = None
    font: FontSpec = FontSpec()

    def merged(self, overrides: StyleConfig) -> "StyleSpec":
        """Return a copy with the non-empty fields of *overrides* applied."""

        font_overrides = overrides.font.model_dump(exclude_none=True)
        changes = overrides.model_dump(exclude_none=True, exclude={"font"})
        return replace(self, font=replace(self.font, **font_overrides), **changes)

    def to_named_style(self, name: str) -> NamedStyle:
        side = Side(style=self.border_style)
        return NamedStyle(
            name=name,
            font=Font(color=self.font.color, size=self.font.size, bold=self.font.bold),
            fill=PatternFill(fill_type="solid", fgColor=self.fill_color),
            border=Border(left=side, right=side, top=side, bottom=side),
            alignment=Alignment(horizontal=self.horizontal, vertical=self.vertical),
        )


@dataclass(frozen=True)
class SheetTheme:
    """The three style bundles used by an export, plus the default column width."""

    title: StyleSpec
    header: StyleSpec
    data: StyleSpec
    column_width: float = DEFAULT_COLUMN_WIDTH

    @classmethod
    def default(cls) -> "SheetTheme":
        return cls(
            title=StyleSpec(
                fill_color=LIGHT_BLUE,
                font=FontSpec(color=WHITE, size=24, bold=True),
            ),
            header=StyleSpec(
                fill_color=ORANGE,
                font=FontSpec(color=WHITE, size=12, bold=True),
            ),
            data=StyleSpec(
                fill_color=WHITE,
                vertical="center",
                font=FontSpec(color=BLACK, size=11, bold=False),
            ),
        )

    @classmethod
    def from_config(cls, config: ThemeConfig) -> "SheetTheme":
        """Merge a validated theme configuration over the default theme."""

        base = cls.default()
        return cls(
            title=base.title.merged(config.title),
            header=base.header.merged(config.header),
            data=base.data.merged(config.data),
            column_width=config.column_width or base.column_width,
        )

    @classmethod
    def from_yaml(cls, path: Path) -> "SheetTheme":
        """Load theme overrides from a YAML file."""

        if not path.exists():
            raise ThemeError(f"Theme file not found: {path}")
        with path.open("r", encoding="utf-8") as fh:
            payload = yaml.safe_load(fh) or {}
        if not isinstance(payload, dict):
            raise ThemeError("Invalid theme YAML structure (expected mapping)")
        try:
            config = ThemeConfig.model_validate(payload)
        except ValidationError as exc:
            raise ThemeError(f"Invalid theme configuration: {exc}") from exc
        return cls.from_config(config)

    def register(self, workbook: Workbook) -> Dict[str, str]:
        """Add the title/header/data named styles to *workbook*.

        Returns:
            Mapping of role -> registered style name.
        """

        names = {"title": TITLE_STYLE, "header": HEADER_STYLE, "data": DATA_STYLE}
        for role, name in names.items():
            style: StyleSpec = getattr(self, role)
            workbook.add_named_style(style.to_named_style(name))
        return names
