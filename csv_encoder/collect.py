"""
Collectors: turn an input source into a fully materialized list of records
before encoding starts. The encoder itself never consumes a stream.
"""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Tuple

from charset_normalizer import from_bytes

from .rules import DEFAULT_DELIMITER, SNIFF_DELIMITERS, SNIFF_SAMPLE_SIZE

logger = logging.getLogger(__name__)


def collect_records(items: Iterable[Any]) -> List[Mapping]:
    records: List[Mapping] = []
    for i, item in enumerate(items):
        if not isinstance(item, Mapping):
            raise TypeError(f"record {i} is {type(item).__name__}, expected a mapping")
        records.append(item)
    return records


def decode_bytes(raw: bytes) -> Tuple[str, Dict[str, Any]]:
    """
    Decode uploaded bytes to text.

    Rules:
    - Detect encoding best-effort via charset-normalizer.
    - A UTF-8 BOM is stripped.
    - If decode fails, try UTF-8, then UTF-8 with replacement characters.
    """
    match = from_bytes(raw).best()
    detected = match.encoding if match is not None else None

    decode_used = detected or "utf-8"
    if raw.startswith(b"\xef\xbb\xbf") and (decode_used.lower().replace("-", "_") in ("utf_8", "utf8")):
        decode_used = "utf-8-sig"

    decode_fallback = False
    try:
        text = raw.decode(decode_used)
    except (UnicodeDecodeError, LookupError):
        decode_fallback = True
        try:
            text = raw.decode("utf-8-sig")
            decode_used = "utf-8-sig"
        except UnicodeDecodeError:
            text = raw.decode("utf-8-sig", errors="replace")
            decode_used = "utf-8-sig"
        logger.warning("decode with %s failed, fell back to %s", detected, decode_used)

    return text, {
        "detected_encoding": detected,
        "decode_used": decode_used,
        "decode_fallback": decode_fallback,
    }


def sniff_delimiter(text: str) -> Tuple[str, bool]:
    sample = text[:SNIFF_SAMPLE_SIZE]
    try:
        dialect = csv.Sniffer().sniff(sample, delimiters=SNIFF_DELIMITERS)
    except csv.Error:
        return DEFAULT_DELIMITER, False
    return dialect.delimiter, True


def records_from_csv_bytes(raw: bytes) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
    """
    Read an uploaded CSV into records keyed by its header row.

    Missing cells in short rows come back as None; cells beyond the header
    are dropped. Raises ValueError when the text is not readable CSV.
    """
    text, report = decode_bytes(raw)
    delimiter, sniffed = sniff_delimiter(text)
    logger.debug("source encoding=%s delimiter=%r sniffed=%s", report["decode_used"], delimiter, sniffed)

    reader = csv.DictReader(io.StringIO(text, newline=""), delimiter=delimiter)
    records: List[Dict[str, Any]] = []
    try:
        for row in reader:
            row.pop(None, None)
            records.append(row)
    except csv.Error as e:
        raise ValueError(f"unreadable CSV at line {reader.line_num}: {e}") from e

    report.update(
        {
            "detected_delimiter": delimiter,
            "sniffed": sniffed,
            "rows": len(records),
        }
    )
    return records, report
