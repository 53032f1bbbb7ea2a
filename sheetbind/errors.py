"""Custom exceptions used across sheetbind."""


class SheetBindError(Exception):
    """Base error for the package."""


class WorkbookIOError(SheetBindError, OSError):
    """Raised when a workbook source or destination cannot be read or written."""


class SchemaError(SheetBindError):
    """Raised when a record type cannot be mapped onto sheet columns."""


class ReflectionError(SheetBindError):
    """Raised when a field accessor is missing or cannot be invoked."""


class CoercionError(SheetBindError, ValueError):
    """Raised when raw cell text cannot be converted to a field's type."""


class ThemeError(SheetBindError):
    """Theme configuration related error."""
