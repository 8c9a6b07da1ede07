"""REST API routes."""

import asyncio
import json
import logging
import math
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ...config import config
from ..services.translation_service import AnalysisRequest, TranslationService

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_JSON_REQUEST_KB = 100
MAX_CONSOLIDATED_TOKENS = 50000


# Request models
class TranslateRequest(BaseModel):
    """A single ``text``, batch ``texts`` or a structured JSON object (``json``)."""
    text: Optional[str] = None
    texts: Optional[List[str]] = None
    json_data: Optional[Dict[str, Any]] = Field(default=None, alias="json")
    targetLanguage: Optional[str] = None
    preservePlaceholders: bool = True

    model_config = {"populate_by_name": True}


class ConsolidatedRequest(BaseModel):
    englishJson: Optional[Dict[str, str]] = None
    targetLanguages: Optional[List[str]] = None
    batchIndex: Optional[int] = None
    totalBatches: Optional[int] = None


class AnalysisTranslateRequest(BaseModel):
    strings: Dict[str, str]
    languages: List[str] = Field(default_factory=lambda: list(config.target_languages))
    batch_size: Optional[int] = None
    quality_threshold: Optional[float] = None
    reconcile: bool = False
    preserve_placeholders: bool = True


def _service(request: Request) -> TranslationService:
    return request.app.state.translation_service


def _error_response(message: str) -> JSONResponse:
    """Failures of the translation contract: {"error", "success": false} with status 500."""
    return JSONResponse({"error": message, "success": False}, status_code=500)


# Translation service contract
@router.post("/translate")
async def translate(request: Request, body: TranslateRequest):
    """
    Translate one text, a batch of texts or a structured JSON object.

    Responses:
    - text: ``{"translatedText", "qualityScore"}``
    - texts: ``[{"translatedText", "qualityScore"}, ...]`` in input order
    - json: the same object with translated leaf values
    - failure: ``{"error": str, "success": false}`` (500)
    """
    service = _service(request)
    try:
        if not body.targetLanguage or (
            body.text is None and body.texts is None and body.json_data is None
        ):
            raise ValueError("Texts or JSON object and target language are required")

        if body.text is not None:
            result = await asyncio.to_thread(
                service.build_adapter().translate_text,
                body.text,
                body.targetLanguage,
                body.preservePlaceholders,
            )
            if not result.success:
                raise ValueError(result.error)
            return {"translatedText": result.translated_text, "qualityScore": result.quality_score}

        if body.json_data is not None:
            size_kb = round(len(json.dumps(body.json_data).encode("utf-8")) / 1024)
            logger.info("Structured request: %dKB with %d keys", size_kb, len(body.json_data))
            if size_kb > MAX_JSON_REQUEST_KB:
                raise ValueError("Request too large for translation service")
            result = await asyncio.to_thread(
                service.build_adapter().translate_json, body.json_data, body.targetLanguage
            )
            if not result.success:
                raise ValueError(result.error)
            for issue in result.issues:
                logger.warning("Structured translation to %s: %s", body.targetLanguage, issue)
            return result.data

        logger.info("Batch request: %d texts to %s", len(body.texts), body.targetLanguage)
        payload = await asyncio.to_thread(
            service.backend.translate_texts,
            body.texts,
            body.targetLanguage,
            preserve_placeholders=body.preservePlaceholders,
            timeout=config.request_timeout,
        )
        if isinstance(payload, dict) and payload.get("error"):
            raise ValueError(payload["error"])
        return payload
    except Exception as e:
        logger.error("Translation error: %s", e)
        return _error_response(str(e))


@router.post("/translate-consolidated")
async def translate_consolidated(request: Request, body: ConsolidatedRequest):
    """
    Translate an English key -> text map into several languages at once.

    Response: ``{"translations": {key: {lang: text}}}`` or the error shape (500).
    """
    service = _service(request)
    try:
        if not body.englishJson or not body.targetLanguages:
            raise ValueError("English JSON and target languages are required")

        estimated_tokens = math.ceil(len(json.dumps(body.englishJson)) / 4)
        if estimated_tokens > MAX_CONSOLIDATED_TOKENS:
            raise ValueError(
                f"Request too large: ~{estimated_tokens} tokens (max {MAX_CONSOLIDATED_TOKENS})"
            )

        payload = await asyncio.to_thread(
            service.backend.translate_consolidated,
            body.englishJson,
            body.targetLanguages,
            batch_index=body.batchIndex,
            total_batches=body.totalBatches,
            timeout=config.request_timeout,
        )
        if not isinstance(payload, dict) or "translations" not in payload:
            raise ValueError("Invalid response structure from translation backend")
        return payload
    except Exception as e:
        logger.error("Consolidated translation error: %s", e)
        return _error_response(str(e))


# Analysis endpoints
@router.post("/analyses/{analysis_id}/translate")
async def start_translation(request: Request, analysis_id: str, body: AnalysisTranslateRequest):
    """Start a translation job for an analysis."""
    job_manager = request.app.state.job_manager

    if not body.strings:
        raise HTTPException(400, "No strings to translate")

    job = job_manager.create_job(
        job_type="translate",
        analysis_id=analysis_id,
        languages=body.languages,
    )

    # Start background translation
    asyncio.create_task(
        _run_translation_job(
            _service(request),
            job_manager,
            job.job_id,
            AnalysisRequest(
                analysis_id=analysis_id,
                strings=body.strings,
                languages=body.languages,
                batch_size=body.batch_size,
                quality_threshold=body.quality_threshold,
                reconcile=body.reconcile,
                preserve_placeholders=body.preserve_placeholders,
            ),
        )
    )

    return {"job_id": job.job_id}


async def _run_translation_job(
    service: TranslationService,
    job_manager,
    job_id: str,
    analysis_request: AnalysisRequest,
):
    """Run translation job in background."""
    job_manager.set_running(job_id)
    job = job_manager.get_job(job_id)

    try:
        async def progress_callback(current, total, message, language, **extra):
            await job_manager.send_progress(
                job_id, current, total, message, language, **extra
            )

        result = await service.translate_analysis(
            analysis_request,
            progress_callback,
            job.cancel_event,
        )

        if result.success:
            summary = {
                "languages_processed": result.languages_processed,
                "stats_by_language": result.stats_by_language,
                "reconcile": result.reconcile,
                "cancelled": result.cancelled,
            }
            if not result.cancelled:
                job_manager.set_completed(job_id, summary)
            await job_manager.send_complete(job_id, {"success": True, **summary})
        else:
            job_manager.set_failed(job_id, result.error)
            await job_manager.send_error(job_id, result.error)

    except Exception as e:
        logger.exception("Translation job %s failed", job_id)
        job_manager.set_failed(job_id, str(e))
        await job_manager.send_error(job_id, str(e))

    finally:
        job_manager.cleanup_job(job_id)


@router.get("/jobs/{job_id}/status")
async def get_job_status(request: Request, job_id: str):
    """Get job status."""
    job_manager = request.app.state.job_manager

    job = job_manager.get_job(job_id)
    if not job:
        raise HTTPException(404, "Job not found")

    return job.to_dict()


@router.post("/jobs/{job_id}/cancel")
async def cancel_job(request: Request, job_id: str):
    """Cancel a running job before its next batch."""
    job_manager = request.app.state.job_manager

    if not job_manager.get_job(job_id):
        raise HTTPException(404, "Job not found")
    if not job_manager.cancel_job(job_id):
        raise HTTPException(409, "Job already finished")

    return {"status": "cancelled"}


@router.post("/analyses/{analysis_id}/reconcile")
async def reconcile_analysis(request: Request, analysis_id: str):
    """Fix translations wrongly recorded as failed."""
    summary = await asyncio.to_thread(_service(request).reconcile, analysis_id)
    return {
        "analysis_id": analysis_id,
        "fixed": summary.fixed,
        "actual_failures": summary.actual_failures,
        "total": summary.total,
    }


@router.get("/analyses/{analysis_id}/stats")
async def get_analysis_stats(request: Request, analysis_id: str):
    """Get translation statistics for an analysis."""
    stats = await asyncio.to_thread(_service(request).stats, analysis_id)
    return {"analysis_id": analysis_id, **stats}


@router.get("/analyses/{analysis_id}/files")
async def get_translation_files(
    request: Request,
    analysis_id: str,
    languages: Optional[str] = Query(None, description="Comma-separated language codes"),
    consolidated: bool = False,
):
    """Generate translation files from stored results."""
    language_list = [code.strip() for code in languages.split(",") if code.strip()] if languages else None
    files = await asyncio.to_thread(
        _service(request).files, analysis_id, language_list, consolidated
    )
    return {
        "analysis_id": analysis_id,
        "files": [
            {
                "path": f.path,
                "language": f.language,
                "entry_count": f.entry_count,
                "content": f.content,
            }
            for f in files
        ],
    }
