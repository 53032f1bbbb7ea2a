"""Shared schemas for sheet configuration and pipeline results."""

# Module responsibilities:
# - Provide validated configuration models for theme overrides loaded from YAML.
# - Define lightweight containers passed between the import stages and returned to callers.

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator, List, Literal, Optional, Tuple

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import ReflectionError
from .fields import read_field, resolve_fields

_HEX_COLOR = re.compile(r"[0-9A-Fa-f]{6}([0-9A-Fa-f]{2})?")

BorderStyle = Literal[
    "thin",
    "medium",
    "thick",
    "dashed",
    "dotted",
    "double",
    "hair",
    "mediumDashed",
    "dashDot",
    "mediumDashDot",
    "dashDotDot",
    "mediumDashDotDot",
    "slantDashDot",
]
HorizontalAlignment = Literal[
    "general", "left", "center", "right", "fill", "justify", "centerContinuous", "distributed"
]
VerticalAlignment = Literal["top", "center", "bottom", "justify", "distributed"]


def normalize_color(value: str) -> str:
    """Return an ``AARRGGBB`` colour, adding an opaque alpha to ``RRGGBB`` input."""

    text = value.strip().lstrip("#")
    if not _HEX_COLOR.fullmatch(text):
        raise ValueError(f"Invalid colour '{value}' (expected RRGGBB or AARRGGBB)")
    text = text.upper()
    return text if len(text) == 8 else "FF" + text


class FontConfig(BaseModel):
    """Font overrides for one style role."""

    model_config = ConfigDict(extra="forbid")

    color: Optional[str] = None
    size: Optional[float] = Field(default=None, gt=0)
    bold: Optional[bool] = None

    @field_validator("color")
    @classmethod
    def _check_color(cls, value: Optional[str]) -> Optional[str]:
        return normalize_color(value) if value is not None else None


class StyleConfig(BaseModel):
    """Cell style overrides for one role (title, header or data)."""

    model_config = ConfigDict(extra="forbid")

    fill_color: Optional[str] = None
    border_style: Optional[BorderStyle] = None
    horizontal: Optional[HorizontalAlignment] = None
    vertical: Optional[VerticalAlignment] = None
    font: FontConfig = Field(default_factory=FontConfig)

    @field_validator("fill_color")
    @classmethod
    def _check_fill(cls, value: Optional[str]) -> Optional[str]:
        return normalize_color(value) if value is not None else None


class ThemeConfig(BaseModel):
    """Complete theme file model."""

    model_config = ConfigDict(extra="forbid")

    column_width: Optional[float] = Field(default=None, gt=0)
    title: StyleConfig = Field(default_factory=StyleConfig)
    header: StyleConfig = Field(default_factory=StyleConfig)
    data: StyleConfig = Field(default_factory=StyleConfig)


@dataclass(frozen=True)
class RawRow:
    """Untyped text of one sheet row, one entry per column up to the last populated one."""

    index: int
    values: Tuple[str, ...]

    def value_at(self, column: int) -> str:
        return self.values[column] if column < len(self.values) else ""


@dataclass(frozen=True)
class FieldIssue:
    """A field assignment that failed during import and was skipped."""

    row: int
    field_name: str
    column: int
    kind: Literal["coercion", "reflection"]
    message: str
    raw: str = ""


@dataclass(frozen=True)
class ExportSummary:
    """Outcome of an export call."""

    destination: Optional[Path]
    record_count: int
    column_count: int


@dataclass
class ImportResult:
    """Records assembled by an import call together with per-field diagnostics.

    Iterating over the result yields the records; ``row_indices[i]`` is the
    0-based sheet row that produced ``records[i]``.
    """

    records: List[Any] = field(default_factory=list)
    row_indices: List[int] = field(default_factory=list)
    issues: List[FieldIssue] = field(default_factory=list)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def __getitem__(self, index: int) -> Any:
        return self.records[index]

    @property
    def ok(self) -> bool:
        return not self.issues

    def issues_for(self, row: int) -> List[FieldIssue]:
        """Return the issues recorded for the given 0-based sheet row."""

        return [issue for issue in self.issues if issue.row == row]

    def to_dataframe(self) -> pd.DataFrame:
        """Expose the imported records as a DataFrame indexed by sheet row."""

        if not self.records:
            return pd.DataFrame()
        rows = []
        for record in self.records:
            values = {}
            for descriptor in resolve_fields(type(record)):
                try:
                    values[descriptor.name] = read_field(record, descriptor)
                except ReflectionError:
                    values[descriptor.name] = None
            rows.append(values)
        return pd.DataFrame(rows, index=pd.Index(self.row_indices, name="row"))
