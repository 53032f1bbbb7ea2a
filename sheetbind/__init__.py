"""`sheetbind` maps typed records to styled Excel sheets and back."""

# Module responsibilities:
# - Re-export the export/import pipelines, the field resolver and the error types
#   so consumers have a stable API surface.

from __future__ import annotations

from .errors import (
    CoercionError,
    ReflectionError,
    SchemaError,
    SheetBindError,
    ThemeError,
    WorkbookIOError,
)
from .excel_reader import build_records, import_records, read_raw_rows
from .excel_writer import export_records
from .fields import (
    Byte,
    FieldDescriptor,
    FieldKind,
    Float,
    accessor_name,
    resolve_fields,
)
from .schema import ExportSummary, FieldIssue, ImportResult, RawRow, ThemeConfig
from .styles import SheetTheme, StyleSpec

__all__ = [
    "export_records",
    "import_records",
    "read_raw_rows",
    "build_records",
    "resolve_fields",
    "accessor_name",
    "FieldDescriptor",
    "FieldKind",
    "Float",
    "Byte",
    "ExportSummary",
    "ImportResult",
    "FieldIssue",
    "RawRow",
    "ThemeConfig",
    "SheetTheme",
    "StyleSpec",
    "SheetBindError",
    "WorkbookIOError",
    "SchemaError",
    "ReflectionError",
    "CoercionError",
    "ThemeError",
]

__version__ = "0.1.0"
