"""Value coercion between record fields and cell content."""

# Module responsibilities:
# - Render field values as cell text on export and decide numeric vs text cells.
# - Convert raw cell text back into a field's declared type on import.

from __future__ import annotations

import re
import struct
import types
from datetime import date, datetime, time
from typing import Any, Callable, Dict, Union, get_args, get_origin

from .errors import CoercionError
from .fields import FieldDescriptor, FieldKind

CellValue = Union[float, str]

NUMERIC_TEXT = re.compile(r"\d+(\.\d+)?", re.ASCII)
IMPORT_DATE = re.compile(r"\s*(\d{4})-(\d{1,2})-(\d{1,2})", re.ASCII)
# Integral text with an optional fraction; exponent forms are rejected.
_INTEGRAL_TEXT = re.compile(r"\s*([+-]?\d+)(?:\.\d*)?\s*", re.ASCII)

_BYTE_RANGE = range(-128, 128)


def _hour12(value: date) -> int:
    return getattr(value, "hour", 0) % 12 or 12


# Pattern letters and how each renders a date or datetime.
_DATE_TOKENS: Dict[str, Callable[[date], str]] = {
    "yyyy": lambda v: f"{v.year:04d}",
    "yy": lambda v: f"{v.year % 100:02d}",
    "MMMM": lambda v: v.strftime("%B"),
    "MMM": lambda v: v.strftime("%b"),
    "MM": lambda v: f"{v.month:02d}",
    "M": lambda v: str(v.month),
    "dd": lambda v: f"{v.day:02d}",
    "d": lambda v: str(v.day),
    "EEEE": lambda v: v.strftime("%A"),
    "EEE": lambda v: v.strftime("%a"),
    "HH": lambda v: f"{getattr(v, 'hour', 0):02d}",
    "H": lambda v: str(getattr(v, "hour", 0)),
    "hh": lambda v: f"{_hour12(v):02d}",
    "h": lambda v: str(_hour12(v)),
    "mm": lambda v: f"{getattr(v, 'minute', 0):02d}",
    "m": lambda v: str(getattr(v, "minute", 0)),
    "ss": lambda v: f"{getattr(v, 'second', 0):02d}",
    "s": lambda v: str(getattr(v, "second", 0)),
    "SSS": lambda v: f"{getattr(v, 'microsecond', 0) // 1000:03d}",
    "a": lambda v: "PM" if getattr(v, "hour", 0) >= 12 else "AM",
}
# Longest tokens first so that ``MMMM`` wins over ``MM`` and ``M``.
_DATE_TOKEN_RE = re.compile(
    "'[^']*'|"
    + "|".join(re.escape(token) for token in sorted(_DATE_TOKENS, key=len, reverse=True))
)


def format_date(value: date, pattern: str) -> str:
    """Render *value* with a ``yyyy-MM-dd HH:mm`` style pattern.

    Patterns that contain ``%`` are treated as strftime formats. Text inside
    single quotes is kept literally; ``''`` is a quote.
    """

    if "%" in pattern:
        return value.strftime(pattern)

    def _replace(match: re.Match[str]) -> str:
        token = match.group(0)
        if token.startswith("'"):
            return token[1:-1] if len(token) > 2 else "'"
        return _DATE_TOKENS[token](value)

    return _DATE_TOKEN_RE.sub(_replace, pattern)


def format_cell_text(value: Any, date_pattern: str) -> str:
    """Return the text form of a field value for export."""

    if isinstance(value, (date, datetime)):
        return format_date(value, date_pattern)
    if value is None:
        return ""
    return str(value)


def is_numeric_text(text: str) -> bool:
    return NUMERIC_TEXT.fullmatch(text) is not None


def to_cell_value(text: str) -> CellValue:
    """Store all-digit text (optionally with a fraction) as a number, else as text."""

    if is_numeric_text(text):
        return float(text)
    return text


def _fail(raw: str, descriptor: FieldDescriptor, reason: str = "") -> CoercionError:
    detail = f": {reason}" if reason else ""
    return CoercionError(
        f"Cannot convert {raw!r} to {descriptor.kind.value} for field '{descriptor.name}'{detail}"
    )


def _parse_integral(raw: str, descriptor: FieldDescriptor) -> int:
    # Numeric cells come back as "12.0"; drop the fraction when there is one.
    match = _INTEGRAL_TEXT.fullmatch(raw)
    if match is None:
        raise _fail(raw, descriptor)
    value = int(match.group(1))
    if descriptor.kind is FieldKind.BYTE and value not in _BYTE_RANGE:
        raise _fail(raw, descriptor, "value out of range for a byte")
    return value


def _parse_float(raw: str, descriptor: FieldDescriptor) -> float:
    if "_" in raw:
        raise _fail(raw, descriptor)
    try:
        value = float(raw)
    except ValueError as exc:
        raise _fail(raw, descriptor) from exc
    if descriptor.kind is FieldKind.FLOAT:
        try:
            return struct.unpack("f", struct.pack("f", value))[0]
        except OverflowError as exc:
            raise _fail(raw, descriptor, "value out of range for a float") from exc
    return value


def _parse_boolean(raw: str, descriptor: FieldDescriptor) -> bool:
    lowered = raw.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise _fail(raw, descriptor)


def _parse_date(raw: str, descriptor: FieldDescriptor) -> date:
    # Only the leading yyyy-MM-dd is significant; any time part is dropped.
    match = IMPORT_DATE.match(raw)
    if match is None:
        raise _fail(raw, descriptor, "expected yyyy-MM-dd")
    try:
        parsed = date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError as exc:
        raise _fail(raw, descriptor, str(exc)) from exc
    annotation = descriptor.annotation
    if isinstance(annotation, type) and issubclass(annotation, datetime):
        return datetime.combine(parsed, time.min)
    return parsed


def _cast(raw: str, descriptor: FieldDescriptor) -> Any:
    annotation = descriptor.annotation
    if annotation is Any:
        return raw
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        members = get_args(annotation)
    else:
        members = (annotation,)
    for member in members:
        target = get_origin(member) or member
        if member is Any or (isinstance(target, type) and isinstance(raw, target)):
            return raw
    raise _fail(raw, descriptor, "text is not assignable to this type")


_PARSERS = {
    FieldKind.INT: _parse_integral,
    FieldKind.BYTE: _parse_integral,
    FieldKind.FLOAT: _parse_float,
    FieldKind.DOUBLE: _parse_float,
    FieldKind.BOOLEAN: _parse_boolean,
    FieldKind.DATE: _parse_date,
    FieldKind.OTHER: _cast,
}


def coerce_raw(raw: str, descriptor: FieldDescriptor) -> Any:
    """Convert raw cell text into the value assigned to *descriptor*'s field.

    Raises:
        CoercionError: When the text cannot be converted to the declared type.
    """

    if descriptor.kind is FieldKind.STRING:
        return raw
    return _PARSERS[descriptor.kind](raw, descriptor)
