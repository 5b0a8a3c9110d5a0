from __future__ import annotations

import logging
import time

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, Response

from chordsheet.logging_utils import (
    clear_request_context,
    configure_logging,
    current_request_id,
    log_event,
    new_request_id,
    request_elapsed_ms,
    set_request_context,
)
from chordsheet.models import (
    DetectRequest,
    DetectResponse,
    PDFExportRequest,
    PreviewRequest,
    RenderRequest,
    RenderResponse,
    SongPreview,
)
from chordsheet.services.document_parser import parse_document
from chordsheet.services.format_detector import detect_format, section_headers
from chordsheet.services.html_renderer import render_html
from chordsheet.services.music_theory import interval_to_key, transpose_key
from chordsheet.services.pdf_export import build_chord_sheet_pdf
from chordsheet.services.song_preview import build_preview
from chordsheet.services.transposer import detect_key, extract_chords, transpose

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Chord Sheet Engine")


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or new_request_id()
    set_request_context(request_id=request_id, route=request.url.path, method=request.method)
    started = time.perf_counter()
    log_event(logger, "request_started")
    try:
        response = await call_next(request)
    except Exception:
        elapsed_ms = request_elapsed_ms(started)
        log_event(logger, "request_completed", status_code=500, duration_ms=elapsed_ms)
        raise

    elapsed_ms = request_elapsed_ms(started)
    log_event(logger, "request_completed", status_code=response.status_code, duration_ms=elapsed_ms)
    response.headers["X-Request-ID"] = request_id
    clear_request_context()
    return response


@app.exception_handler(Exception)
async def global_exception_handler(_request: Request, exc: Exception):
    request_id = current_request_id()
    logger.exception(
        "unhandled_exception",
        extra={"event": "unhandled_exception", "request_id": request_id},
    )
    response = JSONResponse(
        status_code=500,
        content={
            "detail": "Something went wrong while processing your request. Please try again.",
            "request_id": request_id,
        },
        headers={"X-Request-ID": request_id},
    )
    clear_request_context()
    return response


def _handle_user_error(action: str, exc: ValueError) -> HTTPException:
    log_event(logger, "request_failed", level=logging.WARNING, action=action, reason=str(exc))
    return HTTPException(
        status_code=422,
        detail={
            "message": f"{action} failed. {exc}",
            "request_id": current_request_id(),
        },
    )


def _resolve_interval(original_key: str | None, payload: RenderRequest) -> int:
    if payload.target_key is None:
        return payload.transpose
    if original_key is None:
        raise ValueError("The song has no chords to take a key from.")
    return interval_to_key(original_key, payload.target_key)


@app.get("/api/health")
def health() -> dict[str, bool]:
    return {"ok": True}


@app.post("/api/chords/detect", response_model=DetectResponse)
def detect_endpoint(payload: DetectRequest):
    fmt = detect_format(payload.text)
    return DetectResponse(format=fmt, section_headers=section_headers(payload.text))


@app.post("/api/chords/render", response_model=RenderResponse)
def render_endpoint(payload: RenderRequest):
    action = "Chord rendering"
    doc = parse_document(payload.text)
    original_key = detect_key(doc)
    try:
        interval = _resolve_interval(original_key, payload)
        key = transpose_key(original_key, interval, payload.spelling) if original_key else None
    except ValueError as exc:
        raise _handle_user_error(action, exc) from exc

    transposed = transpose(doc, interval, spelling=payload.spelling)
    html = render_html(transposed)
    log_event(
        logger,
        "chords_rendered",
        chord_format=doc.format.value,
        interval=interval,
        spelling=payload.spelling.value,
        line_count=len(doc.lines),
        output_size_bytes=len(html.encode("utf-8")),
    )
    return RenderResponse(
        format=doc.format,
        html=html,
        chords=extract_chords(transposed),
        original_key=original_key,
        key=key,
        interval=interval,
    )


@app.post("/api/chords/preview", response_model=SongPreview)
def preview_endpoint(payload: PreviewRequest):
    preview = build_preview(payload.text)
    log_event(logger, "song_preview_built", chord_format=preview.format.value, chord_count=len(preview.chords))
    return preview


@app.post("/api/chords/export-pdf")
def export_pdf_endpoint(payload: PDFExportRequest):
    doc = parse_document(payload.text)
    original_key = detect_key(doc)
    transposed = transpose(doc, payload.transpose, spelling=payload.spelling)
    key = transpose_key(original_key, payload.transpose, payload.spelling) if original_key else None

    log_event(logger, "export_started", output_format="pdf", interval=payload.transpose)
    content = build_chord_sheet_pdf(transposed, title=payload.title, author=payload.author, key=key)
    log_event(logger, "export_completed", output_format="pdf", output_size_bytes=len(content))
    return Response(
        content=content,
        media_type="application/pdf",
        headers={
            "Content-Disposition": "attachment; filename=chord-sheet.pdf",
            "X-Request-ID": current_request_id(),
        },
    )
