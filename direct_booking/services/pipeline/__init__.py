"""Step pipeline for guest reservation submissions."""

from .base_step import PipelineStep
from .context import SubmissionContext
from .pipeline import Pipeline

__all__ = [
    "PipelineStep",
    "SubmissionContext",
    "Pipeline",
]
