"""Server-Sent Events stream of analysis job progress."""

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import StreamingResponse

router = APIRouter()

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@router.get("/jobs/{job_id}/stream")
async def stream_job_progress(request: Request, job_id: str):
    """
    Stream batch progress of a translation job.

    Events:
    - progress: {"current", "total", "percentage", "message", "language", "stats"?}
    - complete: {"complete": true, "result": {...}}
    - error: {"error": str}
    """
    job_manager = request.app.state.job_manager
    if not job_manager.get_job(job_id):
        raise HTTPException(404, "Job not found")

    return StreamingResponse(
        job_manager.stream_progress(job_id),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
