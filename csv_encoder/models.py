from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class QuoteMode(str, Enum):
    AS_NEEDED = "as_needed"
    ALWAYS = "always"
    NEVER = "never"


class LineEnding(str, Enum):
    CRLF = "crlf"
    LF = "lf"


class CsvOptions(BaseModel):
    """Encoding options. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    quote_mode: QuoteMode = QuoteMode.AS_NEEDED
    include_header: bool = True
    line_ending: LineEnding = LineEnding.CRLF
    delimiter: str = Field(default=",", min_length=1, max_length=1)
    # When set, wins over `delimiter`
    use_locale_delimiter: bool = False


class EncodeRequest(BaseModel):
    records: List[Dict[str, Any]] = Field(default_factory=list)
    options: CsvOptions = Field(default_factory=CsvOptions)


class EncodedCsv(BaseModel):
    sha256: str
    encoding: str = Field(default="utf-8-sig")
    content_b64: str


class EncodeSummary(BaseModel):
    rows: int = 0
    columns: int = 0
    header: bool = True
    delimiter: str = ","
    quote_mode: QuoteMode = QuoteMode.AS_NEEDED
    line_ending: LineEnding = LineEnding.CRLF


class SourceReport(BaseModel):
    detected_encoding: Optional[str] = Field(default=None, examples=[None])
    decode_used: str
    decode_fallback: bool = False
    detected_delimiter: str = ","
    sniffed: bool = False
    rows: int = 0


class EncodeResponse(BaseModel):
    encoded_csv: EncodedCsv
    summary: EncodeSummary
    source: Optional[SourceReport] = None


class HealthResponse(BaseModel):
    ok: bool = True
