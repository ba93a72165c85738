"""
Cross-domain systems for PDRPG.

Workflows that span several caches live here so that each cache stays
independently testable without its downstream consumers.
"""

from .cascades import CascadeOrchestrator, StepOutcome, Workflow, WorkflowResult

__all__ = [
    "CascadeOrchestrator",
    "StepOutcome",
    "Workflow",
    "WorkflowResult",
]
