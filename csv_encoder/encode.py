"""
Core encoding logic.

Responsibilities:
- delimiter resolution (explicit or locale list separator)
- field list taken from the first record
- per-field quoting under the active quote mode
- header/row assembly and line joining
"""

from __future__ import annotations

import base64
import hashlib
import locale
import logging
import re
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .models import CsvOptions, QuoteMode
from .rules import (
    ESCAPED_QUOTE,
    LINE_BREAK_CHARS,
    LINE_TERMINATORS,
    QUOTE_CHAR,
    TARGET_ENCODING,
    list_separator,
)

logger = logging.getLogger(__name__)

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


def _sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def resolve_delimiter(options: CsvOptions, conventions: Optional[Mapping[str, Any]] = None) -> str:
    """
    Pick the delimiter for one encode call.

    Rules:
    - use_locale_delimiter wins over an explicit delimiter.
    - Locale conventions may be injected; otherwise the process locale is read.
    """
    if not options.use_locale_delimiter:
        return options.delimiter

    if conventions is None:
        conventions = locale.localeconv()
    return list_separator(conventions)


def field_list(records: Sequence[Mapping[str, Any]]) -> List[str]:
    """Field names of the first record, in order. Later records are not consulted."""
    if not records:
        return []
    return list(records[0].keys())


def render_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def _wrap(s: str) -> str:
    return QUOTE_CHAR + s.replace(QUOTE_CHAR, ESCAPED_QUOTE) + QUOTE_CHAR


def needs_quotes(s: str, delimiter: str) -> bool:
    if delimiter in s or QUOTE_CHAR in s:
        return True
    return any(c in s for c in LINE_BREAK_CHARS)


def quote_field(s: str, mode: QuoteMode, delimiter: str) -> str:
    """
    Apply the quoting policy to one rendered value.

    - ALWAYS: quote; each CR, LF or CRLF collapses to a single space first.
    - AS_NEEDED: quote only when needs_quotes(); line breaks kept verbatim.
    - NEVER: value passes through untouched.
    """
    if mode == QuoteMode.ALWAYS:
        return _wrap(_LINE_BREAK_RE.sub(" ", s))
    if mode == QuoteMode.NEVER:
        return s
    if needs_quotes(s, delimiter):
        return _wrap(s)
    return s


def render_header(fields: Sequence[str], delimiter: str) -> str:
    # Header names are quoted whatever the quote mode
    return delimiter.join(_wrap(name) for name in fields)


def render_row(
    record: Mapping[str, Any],
    fields: Sequence[str],
    mode: QuoteMode,
    delimiter: str,
) -> str:
    return delimiter.join(
        quote_field(render_value(record.get(name)), mode, delimiter) for name in fields
    )


def _encode(records: Sequence[Mapping[str, Any]], options: CsvOptions, delimiter: str) -> str:
    fields = field_list(records)

    lines: List[str] = []
    if options.include_header:
        lines.append(render_header(fields, delimiter))
    for record in records:
        lines.append(render_row(record, fields, options.quote_mode, delimiter))

    logger.debug(
        "encoded %d rows x %d columns (delimiter=%r, quote_mode=%s, header=%s)",
        len(records),
        len(fields),
        delimiter,
        options.quote_mode.value,
        options.include_header,
    )
    return LINE_TERMINATORS[options.line_ending.value].join(lines)


def encode_records(
    records: Sequence[Mapping[str, Any]],
    options: Optional[CsvOptions] = None,
    *,
    conventions: Optional[Mapping[str, Any]] = None,
) -> str:
    """
    Encode an already-collected sequence of records as CSV text.

    The first record fixes the field list: missing fields render empty,
    extra fields are ignored. Empty input gives "" whatever the options.
    No line ending follows the last row.
    """
    if options is None:
        options = CsvOptions()
    if not records:
        return ""

    delimiter = resolve_delimiter(options, conventions)
    return _encode(records, options, delimiter)


def encode_to_payload(
    records: Sequence[Mapping[str, Any]],
    options: Optional[CsvOptions] = None,
    *,
    conventions: Optional[Mapping[str, Any]] = None,
    source: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Encode records and wrap the result in the API's response envelope.
    Content is utf-8-sig; an empty result is zero bytes.
    """
    if options is None:
        options = CsvOptions()

    delimiter = resolve_delimiter(options, conventions)
    text = _encode(records, options, delimiter) if records else ""
    encoded = text.encode(TARGET_ENCODING) if text else b""

    return {
        "encoded_csv": {
            "sha256": _sha256_hex(encoded),
            "encoding": TARGET_ENCODING,
            "content_b64": base64.b64encode(encoded).decode("ascii"),
        },
        "summary": {
            "rows": len(records),
            "columns": len(field_list(records)),
            "header": options.include_header,
            "delimiter": delimiter,
            "quote_mode": options.quote_mode,
            "line_ending": options.line_ending,
        },
        "source": source,
    }
