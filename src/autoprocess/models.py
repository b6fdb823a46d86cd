"""Auto-processing domain models — pure Pydantic v2 data types.

These models describe the editor-side state touched by one processing
cycle: the bilingual article body, the transient progress status, the
user's auto-processing toggles, and the read-only analysis report.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class ProcessingStep(StrEnum):
    """Position of the orchestrator within a cycle."""

    IDLE = "idle"
    FORMATTING = "formatting"
    TRANSLATING = "translating"
    ANALYZING = "analyzing"
    DONE = "done"


class AuthoredContent(BaseModel):
    """Bilingual article body.

    Frozen so that every write replaces the pair as a whole; a reader
    never observes half of a merge.
    """

    model_config = ConfigDict(frozen=True)

    en: str = ""
    kh: str = ""


class ProcessingStatus(BaseModel):
    """Transient progress of the cycle currently in flight."""

    model_config = ConfigDict(frozen=True)

    is_processing: bool = False
    current_step: ProcessingStep = ProcessingStep.IDLE
    progress: int = Field(default=0, ge=0, le=100)

    @classmethod
    def idle(cls) -> ProcessingStatus:
        return cls()


class AutoProcessingConfig(BaseModel):
    """User-controlled toggles, snapshotted at the start of each cycle."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    auto_format: bool = True
    auto_translate: bool = True
    auto_analyze: bool = True


class ReadabilityScore(BaseModel):
    score: int = Field(default=0, ge=0, le=100)
    level: str = ""


class SEOScore(BaseModel):
    score: int = Field(default=0, ge=0, le=100)
    keywords: list[str] = Field(default_factory=list)


class EngagementScore(BaseModel):
    score: int = Field(default=0, ge=0, le=100)


class ContentAnalysisReport(BaseModel):
    """Quality report produced by the Analyze stage (display-only)."""

    model_config = ConfigDict(frozen=True)

    readability: ReadabilityScore = Field(default_factory=ReadabilityScore)
    seo: SEOScore = Field(default_factory=SEOScore)
    engagement: EngagementScore = Field(default_factory=EngagementScore)


class CycleOutcome(BaseModel):
    """What a single cycle did, for callers and tests."""

    cycle_id: int
    completed: bool = False
    stale: bool = False
    error: str | None = None
    formatted: bool = False
    translated: bool = False
    analyzed: bool = False
