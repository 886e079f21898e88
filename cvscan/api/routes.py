"""Extraction API endpoints (image/PDF via Gemini, raw text via Gemini, OCR via Document AI)."""

from fastapi import APIRouter, UploadFile, File, HTTPException, Depends, Form
from starlette.concurrency import run_in_threadpool
from typing import Any, Awaitable, Dict, Optional, Tuple
import logging
import uuid

from cvscan.api.deps import get_documentai_service, get_gemini_extractor
from cvscan.core.config import Settings, get_settings
from cvscan.extraction.documentai_client import DocumentAIService
from cvscan.extraction.model_client import GeminiExtractor
from cvscan.extraction.norm_helper import normalize
from cvscan.extraction.processing import prepare_document, validate_upload
from cvscan.extraction.prompts import DOCUMENT_SOURCE, TEXT_SOURCE, build_prompt
from cvscan.extraction.schemas import (
    WORKER_SCHEMA,
    ErrorEnvelope,
    ExtractionResponse,
    PromptRequest,
)

logger = logging.getLogger("cvscan.extract")
router = APIRouter()

_ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    400: {"description": "Invalid upload or missing input"},
    500: {"model": ErrorEnvelope, "description": "Model output was not a flat JSON object"},
    502: {"description": "Upstream service call failed"},
}


def _req_id() -> str:
    return uuid.uuid4().hex[:12]


async def read_upload(file: Optional[UploadFile], settings: Settings) -> Tuple[str, bytes]:
    """Read, validate and prepare one uploaded document -> (mime, bytes)."""
    if file is None or getattr(file, "filename", None) in (None, ""):
        raise HTTPException(400, "no_file_uploaded")
    raw = await file.read()
    try:
        mime, data = validate_upload(file.filename, file.content_type, raw, settings)
        return prepare_document(mime, data, settings)
    except ValueError as ve:
        logger.warning("upload_rejected file=%s reason=%s", file.filename, ve)
        raise HTTPException(400, str(ve))


async def call_model(call: Awaitable[Dict[str, Any]], request_id: str) -> Dict[str, Any]:
    try:
        return await call
    except Exception as exc:
        logger.warning("model_inference_error request_id=%s err=%s", request_id, exc)
        raise HTTPException(502, "model_inference_error")


def to_response(model_result: Dict[str, Any], settings: Settings, request_id: str, source: str) -> Dict[str, Any]:
    """Normalize upstream text into the response body; MalformedOutput propagates to the app handler."""
    normalized = normalize(model_result["raw_text"], WORKER_SCHEMA, diagnostics=settings.DEBUG_EXTRACTION)
    filled = sum(1 for v in normalized.values() if v is not None)
    logger.info(
        "extraction_success request_id=%s source=%s model=%s latency_ms=%s filled=%d/%d",
        request_id, source, model_result.get("model"), model_result.get("latency_ms"), filled, len(normalized),
    )
    return {"jsonResponse": normalized}


@router.post(
    "/api/gemini",
    summary="Extract a worker profile from an uploaded image/PDF with Gemini",
    response_model=ExtractionResponse,
    responses=_ERROR_RESPONSES,
)
async def extract_gemini(
    image: UploadFile = File(None, description="PNG, JPEG or PDF document"),
    model: Optional[str] = Form(None, description="Gemini model override"),
    settings: Settings = Depends(get_settings),
    extractor: GeminiExtractor = Depends(get_gemini_extractor),
):
    rid = _req_id()
    mime, data = await read_upload(image, settings)
    logger.info("extract_start request_id=%s source=gemini file=%s mime=%s size=%d", rid, image.filename, mime, len(data))
    instructions = build_prompt(WORKER_SCHEMA, DOCUMENT_SOURCE)
    result = await call_model(extractor.extract_document(instructions, data, mime, model or None), rid)
    return to_response(result, settings, rid, "gemini")


@router.post(
    "/prompt",
    summary="Extract a worker profile from raw text with Gemini",
    response_model=ExtractionResponse,
    responses=_ERROR_RESPONSES,
)
async def extract_prompt(
    body: PromptRequest,
    settings: Settings = Depends(get_settings),
    extractor: GeminiExtractor = Depends(get_gemini_extractor),
):
    if not body.text or not body.text.strip():
        raise HTTPException(400, "missing_text")
    rid = _req_id()
    logger.info("extract_start request_id=%s source=prompt chars=%d", rid, len(body.text))
    instructions = build_prompt(WORKER_SCHEMA, TEXT_SOURCE)
    result = await call_model(extractor.extract_text(instructions, body.text, body.model or None), rid)
    return to_response(result, settings, rid, "prompt")


@router.post(
    "/process-document",
    summary="OCR an uploaded document with Document AI, then extract a worker profile",
    response_model=ExtractionResponse,
    responses={**_ERROR_RESPONSES, 422: {"description": "No text detected"}, 503: {"description": "Document AI not configured"}},
)
async def process_document(
    document: UploadFile = File(None, description="PNG, JPEG or PDF document"),
    model: Optional[str] = Form(None, description="Gemini model override"),
    settings: Settings = Depends(get_settings),
    docai: DocumentAIService = Depends(get_documentai_service),
    extractor: GeminiExtractor = Depends(get_gemini_extractor),
):
    rid = _req_id()
    mime, data = await read_upload(document, settings)
    logger.info("extract_start request_id=%s source=documentai file=%s mime=%s size=%d", rid, document.filename, mime, len(data))
    try:
        text = await run_in_threadpool(docai.process_document, data, mime)
    except Exception as exc:
        logger.warning("documentai_error request_id=%s err=%s", rid, exc)
        raise HTTPException(502, "documentai_error")
    if not text.strip():
        raise HTTPException(422, "no_text_detected")
    instructions = build_prompt(WORKER_SCHEMA, TEXT_SOURCE)
    result = await call_model(extractor.extract_text(instructions, text, model or None), rid)
    return to_response(result, settings, rid, "documentai")
