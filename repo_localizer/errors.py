"""Pipeline error definitions."""

from typing import Optional


class PipelineError(Exception):
    """Failure at the outer boundary of a run (input loading, backend setup, output)."""

    def __init__(self, message: str, stage: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.stage = stage
        self.cause = cause
