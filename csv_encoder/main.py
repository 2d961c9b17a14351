import logging
import os

from fastapi import FastAPI, UploadFile, File, Form, HTTPException
from fastapi.responses import Response

from .models import CsvOptions, EncodeRequest, EncodeResponse, HealthResponse, LineEnding, QuoteMode
from .collect import records_from_csv_bytes
from .encode import encode_records, encode_to_payload

logging.basicConfig(level=os.environ.get("CSV_ENCODER_LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)

app = FastAPI(
    title="csv-encoder",
    description="Deterministic CSV encoding of record lists",
    version="0.1.0",
)

@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}

@app.post("/encode", response_model=EncodeResponse)
def encode(req: EncodeRequest):
    logger.info("encode: %d records", len(req.records))
    return encode_to_payload(req.records, req.options)

@app.post("/encode.csv")
def encode_csv(req: EncodeRequest):
    logger.info("encode.csv: %d records", len(req.records))
    text = encode_records(req.records, req.options)
    return Response(content=text, media_type="text/csv; charset=utf-8")

@app.post("/encode/upload", response_model=EncodeResponse)
async def encode_upload(
    file: UploadFile = File(...),
    quote_mode: QuoteMode = Form(QuoteMode.AS_NEEDED),
    include_header: bool = Form(True),
    line_ending: LineEnding = Form(LineEnding.CRLF),
    delimiter: str = Form(",", min_length=1, max_length=1),
    use_locale_delimiter: bool = Form(False),
):
    if not file.filename or not file.filename.lower().endswith(".csv"):
        raise HTTPException(status_code=422, detail="Only CSV files are supported")

    raw = await file.read()
    try:
        records, source = records_from_csv_bytes(raw)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    options = CsvOptions(
        quote_mode=quote_mode,
        include_header=include_header,
        line_ending=line_ending,
        delimiter=delimiter,
        use_locale_delimiter=use_locale_delimiter,
    )
    logger.info("encode/upload: %s, %d records", file.filename, len(records))
    return encode_to_payload(records, options, source=source)
