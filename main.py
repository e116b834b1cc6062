from __future__ import annotations

import logging
from urllib.parse import quote

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from ai_service import DEFAULT_MODEL, MODELS, AIServiceError, fix_text_with_ai
from docx_builder import create_docx_from_text, fixed_docx_name
from docx_corrector import DocxProcessingError, correct_docx, extract_docx_text
from models import (
    AIFixRequest,
    AIFixResponse,
    DocxFromTextRequest,
    ExtractResponse,
    ModelEntry,
    ModelsResponse,
    NormalizeResponse,
    TextRequest,
    TextStats,
)
from pdf_extractor import PdfExtractionError, extract_pdf_text
from settings import load_settings
from text_processor import get_stats, normalize_text

logger = logging.getLogger("vietcorrect.main")
if not logging.getLogger().hasHandlers():
    logging.basicConfig(level=logging.INFO)

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

app = FastAPI(title="VietCorrect")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _docx_response(data: bytes, file_name: str) -> Response:
    return Response(
        content=data,
        media_type=DOCX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(file_name)}"},
    )


@app.post("/normalize", response_model=NormalizeResponse)
async def normalize(request: TextRequest):
    text = normalize_text(request.text)
    return NormalizeResponse(text=text, stats=TextStats(**get_stats(text)))


@app.post("/stats", response_model=TextStats)
async def stats(request: TextRequest):
    return TextStats(**get_stats(request.text))


@app.post("/extract", response_model=ExtractResponse)
async def extract(file: UploadFile = File(...)):
    file_name = file.filename or ""
    lower_name = file_name.lower()
    contents = await file.read()

    logger.info("Extract request: filename=%s, size=%d", file_name, len(contents))

    try:
        if lower_name.endswith(".docx"):
            file_type = "docx"
            text = await run_in_threadpool(extract_docx_text, contents)
        elif lower_name.endswith(".pdf"):
            file_type = "pdf"
            text = await run_in_threadpool(extract_pdf_text, contents)
        else:
            raise HTTPException(status_code=400, detail="Only .docx and .pdf files are supported.")
    except (DocxProcessingError, PdfExtractionError) as e:
        logger.warning("Extraction failed for %s: %s", file_name, e)
        raise HTTPException(status_code=400, detail=str(e))

    return ExtractResponse(
        file_name=file_name,
        file_type=file_type,
        text=text,
        stats=TextStats(**get_stats(text)),
    )


@app.post("/docx/fix")
async def fix_docx(file: UploadFile = File(...)):
    file_name = file.filename or "document.docx"
    if not file_name.lower().endswith(".docx"):
        raise HTTPException(status_code=400, detail="Only .docx files are supported.")

    contents = await file.read()
    try:
        data = await run_in_threadpool(correct_docx, contents)
    except DocxProcessingError as e:
        logger.warning("DOCX correction failed for %s: %s", file_name, e)
        raise HTTPException(status_code=400, detail=str(e))

    return _docx_response(data, fixed_docx_name(file_name))


@app.post("/docx/from-text")
async def docx_from_text(request: DocxFromTextRequest):
    data = await run_in_threadpool(create_docx_from_text, request.text)
    return _docx_response(data, fixed_docx_name(request.file_name))


@app.post("/ai/fix", response_model=AIFixResponse)
async def ai_fix(request: AIFixRequest):
    settings = load_settings()
    api_key = request.api_key or settings.api_key
    model = request.model or settings.model

    if not api_key:
        raise HTTPException(status_code=400, detail="API key not set.")

    try:
        result = await run_in_threadpool(fix_text_with_ai, request.text, api_key, model)
    except AIServiceError as e:
        logger.error("AI correction failed: %s", e)
        raise HTTPException(status_code=502, detail=str(e))

    return AIFixResponse(text=result.text, model_used=result.model_used)


@app.get("/models", response_model=ModelsResponse)
async def list_models():
    return ModelsResponse(
        models=[ModelEntry(id=m.id, name=m.name, desc=m.desc, priority=m.priority) for m in MODELS],
        default=DEFAULT_MODEL,
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=8000)
