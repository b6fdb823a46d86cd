"""Auto-processing cycle — Format → Translate → Analyze.

One cycle walks the state machine

    idle → formatting → translating → analyzing → done → idle

with fixed progress checkpoints. A stage whose toggle is off is passed
through rather than omitted, so progress always reports the overall
position in the cycle.

Format is all-or-nothing: its failure aborts the cycle without writing
anything. Translate and Analyze are best-effort enrichments: a failure
is logged and the cycle carries on with the previous value.

Cycles may overlap (a new one can start while an older one is still
awaiting a collaborator). Each cycle carries a monotonically increasing
id, and every write is dropped unless that id is still the latest one
started. An authored edit made while a cycle is in flight supersedes it
the same way, so a cycle never writes over newer text.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from newsdesk.autoprocess.models import (
    AuthoredContent,
    AutoProcessingConfig,
    ContentAnalysisReport,
    CycleOutcome,
    ProcessingStatus,
    ProcessingStep,
)
from newsdesk.autoprocess.notify import LoggingNotifier, Notifier

if TYPE_CHECKING:
    from newsdesk.services.base import ContentServices

logger = logging.getLogger(__name__)

PROGRESS_FORMATTING = 10
PROGRESS_FORMATTED = 30
PROGRESS_TRANSLATING = 50
PROGRESS_TRANSLATED = 70
PROGRESS_ANALYZING = 85
PROGRESS_ANALYZED = 90
PROGRESS_DONE = 100

DEFAULT_DONE_HOLD = 1.0

StatusListener = Callable[[ProcessingStatus], None]


@dataclass
class EditorState:
    """Mutable editor state shared by every cycle of one session."""

    content: AuthoredContent = field(default_factory=AuthoredContent)
    status: ProcessingStatus = field(default_factory=ProcessingStatus.idle)
    report: ContentAnalysisReport | None = None
    latest_cycle_id: int = 0


class _StaleCycle(Exception):
    """A newer cycle or an authored edit superseded this cycle."""


class CycleOrchestrator:
    """Runs processing cycles against an :class:`EditorState`."""

    def __init__(
        self,
        services: ContentServices,
        state: EditorState | None = None,
        *,
        notifier: Notifier | None = None,
        done_hold: float = DEFAULT_DONE_HOLD,
    ) -> None:
        self.services = services
        self.state = state or EditorState()
        self.notifier = notifier or LoggingNotifier()
        self.done_hold = done_hold
        self._listeners: list[StatusListener] = []

    def add_status_listener(self, listener: StatusListener) -> None:
        self._listeners.append(listener)

    def begin_cycle(self) -> int:
        """Allocate the next cycle id; older cycles become stale."""
        self.state.latest_cycle_id += 1
        return self.state.latest_cycle_id

    def is_current(self, cycle_id: int) -> bool:
        return cycle_id == self.state.latest_cycle_id

    def supersede(self) -> None:
        """Invalidate every in-flight cycle after an authored edit.

        Their pending results are discarded so they never overwrite the
        newer text, and the status drops back to idle.
        """
        self.state.latest_cycle_id += 1
        if self.state.status != ProcessingStatus.idle():
            self._publish(ProcessingStatus.idle())

    async def run_cycle(
        self,
        config: AutoProcessingConfig,
        *,
        article_id: str | None = None,
        cycle_id: int | None = None,
    ) -> CycleOutcome:
        """Run one full cycle with the given config snapshot.

        Args:
            config: Toggles for this cycle; not re-read mid-cycle.
            article_id: Optional article id passed to the formatter.
            cycle_id: Id from :meth:`begin_cycle`. Allocated here if omitted.

        Returns:
            A CycleOutcome describing which stages wrote results.
        """
        if cycle_id is None:
            cycle_id = self.begin_cycle()
        outcome = CycleOutcome(cycle_id=cycle_id)
        logger.debug("Cycle %d started (%s)", cycle_id, config)

        try:
            self._set_status(cycle_id, ProcessingStatus.idle())
            working = self.state.content

            self._set_step(cycle_id, ProcessingStep.FORMATTING, PROGRESS_FORMATTING)
            if config.auto_format:
                working = await self._format(cycle_id, working, config, article_id)
                outcome.formatted = True
            self._set_step(cycle_id, ProcessingStep.FORMATTING, PROGRESS_FORMATTED)

            self._set_step(cycle_id, ProcessingStep.TRANSLATING, PROGRESS_TRANSLATING)
            if config.auto_translate:
                translated = await self._translate(cycle_id, working)
                if translated is not None:
                    working = translated
                    outcome.translated = True
            self._set_step(cycle_id, ProcessingStep.TRANSLATING, PROGRESS_TRANSLATED)

            self._set_step(cycle_id, ProcessingStep.ANALYZING, PROGRESS_ANALYZING)
            if config.auto_analyze:
                outcome.analyzed = await self._analyze(cycle_id, working)
            self._set_step(cycle_id, ProcessingStep.ANALYZING, PROGRESS_ANALYZED)

            self._set_status(
                cycle_id,
                ProcessingStatus(current_step=ProcessingStep.DONE, progress=PROGRESS_DONE),
            )
        except _StaleCycle:
            logger.debug("Cycle %d superseded, results discarded", cycle_id)
            outcome.stale = True
            return outcome
        except Exception as exc:
            outcome.error = str(exc) or exc.__class__.__name__
            if not self.is_current(cycle_id):
                outcome.stale = True
                return outcome
            logger.error("Cycle %d aborted: %s", cycle_id, outcome.error)
            self._set_status(cycle_id, ProcessingStatus.idle())
            self.notifier.error(f"Auto-processing failed: {outcome.error}")
            return outcome

        self.notifier.success("Content auto-processed")
        outcome.completed = True

        await asyncio.sleep(self.done_hold)
        if self.is_current(cycle_id):
            self._set_status(cycle_id, ProcessingStatus.idle())
        logger.debug("Cycle %d finished", cycle_id)
        return outcome

    # ── Stages ───────────────────────────────────────────────────

    async def _format(
        self,
        cycle_id: int,
        working: AuthoredContent,
        config: AutoProcessingConfig,
        article_id: str | None,
    ) -> AuthoredContent:
        formatted = await self.services.format_content(
            AuthoredContent(en=working.en, kh=""), article_id=article_id
        )
        # The formatter's kh is provisional; Translate owns kh when enabled.
        update = {"en": formatted.en}
        if not config.auto_translate and formatted.kh:
            update["kh"] = formatted.kh
        result = self.state.content.model_copy(update=update)
        self._write_content(cycle_id, result)
        return result

    async def _translate(
        self, cycle_id: int, working: AuthoredContent
    ) -> AuthoredContent | None:
        try:
            text = await self.services.translate(working.en, target_language="kh")
        except Exception as exc:
            logger.warning("Translation failed, keeping previous Khmer text: %s", exc)
            return None
        result = self.state.content.model_copy(update={"kh": text})
        self._write_content(cycle_id, result)
        return result

    async def _analyze(self, cycle_id: int, working: AuthoredContent) -> bool:
        try:
            report = await self.services.analyze(working.en)
        except Exception as exc:
            logger.warning("Content analysis failed, keeping previous report: %s", exc)
            return False
        self._require_current(cycle_id)
        self.state.report = report
        return True

    # ── State writes ─────────────────────────────────────────────

    def _require_current(self, cycle_id: int) -> None:
        if not self.is_current(cycle_id):
            raise _StaleCycle(cycle_id)

    def _write_content(self, cycle_id: int, content: AuthoredContent) -> None:
        self._require_current(cycle_id)
        self.state.content = content

    def _set_step(self, cycle_id: int, step: ProcessingStep, progress: int) -> None:
        self._set_status(
            cycle_id,
            ProcessingStatus(is_processing=True, current_step=step, progress=progress),
        )

    def _set_status(self, cycle_id: int, status: ProcessingStatus) -> None:
        self._require_current(cycle_id)
        self._publish(status)

    def _publish(self, status: ProcessingStatus) -> None:
        self.state.status = status
        for listener in self._listeners:
            listener(status)
