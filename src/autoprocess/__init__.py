"""Editor auto-processing: debounced Format → Translate → Analyze cycles.

  models        — editor state and report types
  debounce      — quiet-interval trigger
  orchestrator  — the per-cycle state machine
  session       — one editor's state wired to the trigger

Import the orchestrator and session from their modules; the package
namespace only re-exports the data types.
"""

from newsdesk.autoprocess.models import (
    AuthoredContent,
    AutoProcessingConfig,
    ContentAnalysisReport,
    CycleOutcome,
    EngagementScore,
    ProcessingStatus,
    ProcessingStep,
    ReadabilityScore,
    SEOScore,
)

__all__ = [
    "AuthoredContent",
    "AutoProcessingConfig",
    "ContentAnalysisReport",
    "CycleOutcome",
    "EngagementScore",
    "ProcessingStatus",
    "ProcessingStep",
    "ReadabilityScore",
    "SEOScore",
]
