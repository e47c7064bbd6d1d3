"""
SQL literal rendering.

Only literal quoting of recognised scalar kinds is performed; values are
never parameterised here. Callers own statement assembly and length limits.
"""
import datetime
import math
from typing import Any

__all__ = [
    'NULL',
    'quote_string',
    'format_float',
    'render_scalar',
    'render_primitive',
]

NULL = 'NULL'

_ESCAPES = {
    '\\': '\\\\',
    '\0': '\\0',
    '\n': '\\n',
    '\r': '\\r',
    '\t': '\\t',
    '\x1a': '\\Z',
}

_translations: dict[str, dict[int, str]] = {}


def _translation(quote: str) -> dict[int, str]:
    table = _translations.get(quote)
    if table is None:
        table = str.maketrans({**_ESCAPES, quote: '\\' + quote})
        _translations[quote] = table
    return table


def quote_string(text: str, quote: str = '"') -> str:
    """Quote and escape a text literal.

    >>> quote_string('a"b')
    '"a\\\\"b"'
    """
    return quote + text.translate(_translation(quote)) + quote


def format_float(value: float) -> str:
    """Shortest text that reads back as the same float.

    NaN and infinities have no SQL literal and render as NULL.
    """
    if math.isnan(value) or math.isinf(value):
        return NULL
    return repr(value)


def render_scalar(value: Any, quote: str = '"') -> str:
    """Render a value by scalar kind.

    Raises
        TypeError: If the value is not None, bool, int, float or str
    """
    if value is None:
        return NULL
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, int):
        return str(int(value))
    if isinstance(value, float):
        return format_float(value)
    if isinstance(value, str):
        return quote_string(value, quote)
    raise TypeError(type(value))


def render_primitive(value: Any, quote: str = '"') -> str:
    """Render a primitive returned by a wire type's `to_wire()`.

    Accepts the scalar kinds plus bytes (hex literal) and temporal values
    (quoted ISO-8601 text).
    """
    if isinstance(value, bytes | bytearray | memoryview):
        return "X'" + bytes(value).hex().upper() + "'"
    if isinstance(value, datetime.datetime | datetime.date | datetime.time):
        return quote_string(value.isoformat(sep=' ') if isinstance(value, datetime.datetime)
                            else value.isoformat(), quote)
    return render_scalar(value, quote)
