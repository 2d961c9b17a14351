"""
Deterministic encoding rules.

This file exists to make the quoting and delimiter conventions explicit.
"""

from __future__ import annotations

from typing import Any, Mapping

QUOTE_CHAR = '"'
ESCAPED_QUOTE = QUOTE_CHAR * 2

DEFAULT_DELIMITER = ","
LINE_BREAK_CHARS = ("\r", "\n")

LINE_TERMINATORS = {
    "crlf": "\r\n",
    "lf": "\n",
}

TARGET_ENCODING = "utf-8-sig"  # UTF-8 with BOM

# Delimiters considered when sniffing an uploaded CSV
SNIFF_DELIMITERS = [",", ";", "\t", "|"]
SNIFF_SAMPLE_SIZE = 4096


def list_separator(conventions: Mapping[str, Any]) -> str:
    """
    Conventional list separator for a locale, from its localeconv() mapping.

    Locales that write decimals with a comma separate list items with a
    semicolon; everything else uses a comma.
    """
    if conventions.get("decimal_point") == ",":
        return ";"
    return DEFAULT_DELIMITER
