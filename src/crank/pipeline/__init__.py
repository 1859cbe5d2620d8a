"""Build pipeline orchestration."""

from crank.pipeline.orchestrator import Pipeline, PipelineResult
from crank.pipeline.project import Project

__all__ = [
    "Pipeline",
    "PipelineResult",
    "Project",
]
