"""Job manager for background analysis translation jobs and their SSE streams."""

import asyncio
import json
import threading
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import AsyncGenerator, Optional, Tuple

HEARTBEAT_SECONDS = 30.0

# Queue items are (event name, payload); "complete" and "error" end the stream
StreamEvent = Tuple[str, dict]
TERMINAL_EVENTS = ("complete", "error")


class JobStatus(str, Enum):
    """Job status enum."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def finished(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.CANCELLED)


@dataclass
class JobProgress:
    """Latest batch progress of a job."""
    current: int
    total: int
    message: str
    language: str = ""

    @property
    def percentage(self) -> float:
        return round(self.current / self.total * 100, 1) if self.total > 0 else 0


@dataclass
class Job:
    """A background translation job for one analysis."""
    job_id: str
    job_type: str
    analysis_id: str
    languages: list[str] = field(default_factory=list)
    status: JobStatus = JobStatus.PENDING
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())
    finished_at: Optional[str] = None
    progress: Optional[JobProgress] = None
    result: Optional[dict] = None
    error: Optional[str] = None
    cancel_event: threading.Event = field(default_factory=threading.Event, repr=False)

    def finish(self, status: JobStatus) -> None:
        self.status = status
        self.finished_at = datetime.now().isoformat()

    def to_dict(self) -> dict:
        progress = None
        if self.progress:
            progress = {**asdict(self.progress), "percentage": self.progress.percentage}
        return {
            "job_id": self.job_id,
            "job_type": self.job_type,
            "analysis_id": self.analysis_id,
            "status": self.status.value,
            "created_at": self.created_at,
            "finished_at": self.finished_at,
            "languages": self.languages,
            "progress": progress,
            "result": self.result,
            "error": self.error,
        }


class JobManager:
    """
    Tracks jobs in memory and fans their events out to one SSE stream each.

    Jobs stay queryable after they finish; their event queue is dropped by
    ``cleanup_job``.
    """

    def __init__(self):
        self.jobs: dict[str, Job] = {}
        self.queues: dict[str, asyncio.Queue] = {}

    def create_job(
        self,
        job_type: str,
        analysis_id: str,
        languages: Optional[list[str]] = None,
    ) -> Job:
        """Register a pending job and its event queue."""
        job = Job(
            job_id=str(uuid.uuid4()),
            job_type=job_type,
            analysis_id=analysis_id,
            languages=languages or [],
        )
        self.jobs[job.job_id] = job
        self.queues[job.job_id] = asyncio.Queue()
        return job

    def get_job(self, job_id: str) -> Optional[Job]:
        return self.jobs.get(job_id)

    def set_running(self, job_id: str) -> None:
        job = self.jobs.get(job_id)
        if job and job.status == JobStatus.PENDING:
            job.status = JobStatus.RUNNING

    def set_completed(self, job_id: str, result: Optional[dict] = None) -> None:
        job = self.jobs.get(job_id)
        if job:
            job.result = result
            job.finish(JobStatus.COMPLETED)

    def set_failed(self, job_id: str, error: str) -> None:
        job = self.jobs.get(job_id)
        if job:
            job.error = error
            job.finish(JobStatus.FAILED)

    def cancel_job(self, job_id: str) -> bool:
        """
        Request cancellation of a job.

        The running orchestrator stops before its next batch; finished
        batches stay in the result store.

        Returns:
            False if the job is unknown or already finished
        """
        job = self.jobs.get(job_id)
        if not job or job.status.finished:
            return False
        job.cancel_event.set()
        job.finish(JobStatus.CANCELLED)
        return True

    async def _publish(self, job_id: str, event: str, payload: dict) -> None:
        queue = self.queues.get(job_id)
        if queue is not None:
            await queue.put((event, payload))

    async def send_progress(
        self,
        job_id: str,
        current: int,
        total: int,
        message: str,
        language: str = "",
        **extra,
    ) -> None:
        """Record the latest progress and publish a progress event."""
        progress = JobProgress(current=current, total=total, message=message, language=language)
        job = self.jobs.get(job_id)
        if job:
            job.progress = progress

        await self._publish(
            job_id,
            "progress",
            {**asdict(progress), "percentage": progress.percentage, **extra},
        )

    async def send_complete(self, job_id: str, result: Optional[dict] = None) -> None:
        await self._publish(job_id, "complete", {"complete": True, "result": result})

    async def send_error(self, job_id: str, error: str) -> None:
        await self._publish(job_id, "error", {"error": error})

    async def stream_progress(self, job_id: str) -> AsyncGenerator[str, None]:
        """
        Yield Server-Sent Events for a job until it completes or fails.

        A comment line is sent as heartbeat when nothing happens for
        HEARTBEAT_SECONDS.
        """
        queue = self.queues.get(job_id)
        if queue is None:
            job = self.jobs.get(job_id)
            if job is None:
                yield _sse("error", {"error": "Job not found"})
            elif job.status == JobStatus.FAILED:
                yield _sse("error", {"error": job.error})
            else:
                yield _sse("complete", {"complete": True, "result": job.result})
            return

        while True:
            try:
                event, payload = await asyncio.wait_for(queue.get(), timeout=HEARTBEAT_SECONDS)
            except asyncio.TimeoutError:
                yield ": heartbeat\n\n"
                continue

            yield _sse(event, payload)
            if event in TERMINAL_EVENTS:
                break

    def cleanup_job(self, job_id: str) -> None:
        """Drop the job's event queue; the job stays queryable."""
        self.queues.pop(job_id, None)

    def list_jobs(self, analysis_id: Optional[str] = None) -> list[Job]:
        """List jobs, newest first, optionally for one analysis."""
        jobs = [j for j in self.jobs.values() if not analysis_id or j.analysis_id == analysis_id]
        return sorted(jobs, key=lambda j: j.created_at, reverse=True)


def _sse(event: str, payload: dict) -> str:
    return f"event: {event}\ndata: {json.dumps(payload)}\n\n"
