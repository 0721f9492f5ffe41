"""Lexical forms to Python scalars.

    >>> from_lexical("42", int)
    42
    >>> from_lexical("-0.5e1", float)
    -5.0
    >>> from_lexical("true", bool)
    True
    >>> from_lexical("1970-01-01", date)
    datetime.date(1970, 1, 1)
    >>> from_lexical("2020-05-17T10:30:00Z", datetime).tzinfo
    datetime.timezone.utc

Parsing is strict: ``"1"`` is not a boolean, ``" 42"`` and ``"4_2"`` are not
integers, even though Python's own constructors would accept some of them.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any

from .errors import ConversionError

_INTEGER = re.compile(r"[+-]?[0-9]+")
_DOUBLE = re.compile(r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?")
_SPECIAL_DOUBLES = {"INF": float("inf"), "+INF": float("inf"), "-INF": float("-inf"), "NaN": float("nan")}

_BOOLEANS = {"true": True, "false": False}


def from_lexical(lexical: str, target: type) -> Any:
    """Parse ``lexical`` as ``target`` or raise ConversionError."""
    if target is str:
        return lexical

    if target is bool:
        if lexical not in _BOOLEANS:
            raise ConversionError(lexical, "bool")
        return _BOOLEANS[lexical]

    if target is int:
        if not _INTEGER.fullmatch(lexical):
            raise ConversionError(lexical, "int")
        return int(lexical)

    if target is float:
        if lexical in _SPECIAL_DOUBLES:
            return _SPECIAL_DOUBLES[lexical]
        if not _DOUBLE.fullmatch(lexical):
            raise ConversionError(lexical, "float")
        return float(lexical)

    if target is datetime:
        # fromisoformat only takes "Z" from 3.11 on
        text = lexical[:-1] + "+00:00" if lexical.endswith("Z") else lexical
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            raise ConversionError(lexical, "datetime") from None

    if target is date:
        try:
            return date.fromisoformat(lexical)
        except ValueError:
            raise ConversionError(lexical, "date") from None

    raise ConversionError(lexical, getattr(target, "__name__", repr(target)))
