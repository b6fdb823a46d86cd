"""Editor session — wires the debounced trigger to the cycle orchestrator.

The session owns the in-memory article body for one editor. Author
edits to the English body go through :meth:`EditorSession.edit`; once
the text has been quiet for ``quiet_interval`` seconds and is long
enough, one processing cycle starts as its own task. Saving the
article is not the session's job.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import TYPE_CHECKING

from newsdesk.autoprocess.debounce import Debouncer
from newsdesk.autoprocess.models import (
    AuthoredContent,
    AutoProcessingConfig,
    ContentAnalysisReport,
    CycleOutcome,
    ProcessingStatus,
)
from newsdesk.autoprocess.notify import Notifier
from newsdesk.autoprocess.orchestrator import (
    DEFAULT_DONE_HOLD,
    CycleOrchestrator,
    EditorState,
    StatusListener,
)

if TYPE_CHECKING:
    from newsdesk.services.base import ContentServices

logger = logging.getLogger(__name__)

DEFAULT_QUIET_INTERVAL = 2.0
DEFAULT_MIN_LENGTH = 50
DEFAULT_HISTORY = 100


class EditorSession:
    """In-memory editor state plus its auto-processing trigger.

    Must be driven from inside a running event loop.
    """

    def __init__(
        self,
        services: ContentServices,
        *,
        config: AutoProcessingConfig | None = None,
        content: AuthoredContent | None = None,
        article_id: str | None = None,
        notifier: Notifier | None = None,
        quiet_interval: float = DEFAULT_QUIET_INTERVAL,
        min_length: int = DEFAULT_MIN_LENGTH,
        done_hold: float = DEFAULT_DONE_HOLD,
        history: int = DEFAULT_HISTORY,
    ) -> None:
        self.state = EditorState(content=content or AuthoredContent())
        self.orchestrator = CycleOrchestrator(
            services, self.state, notifier=notifier, done_hold=done_hold
        )
        self.config = config or AutoProcessingConfig()
        self.article_id = article_id
        self.min_length = min_length
        self.outcomes: deque[CycleOutcome] = deque(maxlen=history)
        self._started = 0
        self._debouncer = Debouncer(quiet_interval, self._start_cycle)
        self._cycles: set[asyncio.Task[CycleOutcome]] = set()

    # ── Read-only views ──────────────────────────────────────────

    @property
    def content(self) -> AuthoredContent:
        return self.state.content

    @property
    def status(self) -> ProcessingStatus:
        return self.state.status

    @property
    def report(self) -> ContentAnalysisReport | None:
        return self.state.report

    @property
    def cycles_started(self) -> int:
        return self._started

    @property
    def trigger_pending(self) -> bool:
        return self._debouncer.pending

    def add_status_listener(self, listener: StatusListener) -> None:
        self.orchestrator.add_status_listener(listener)

    # ── Author input ─────────────────────────────────────────────

    def edit(self, en: str) -> None:
        """Record an edit to the English body and restart the quiet timer."""
        self._supersede_cycles()
        self.state.content = self.state.content.model_copy(update={"en": en})
        self._debouncer.cancel()
        if self.should_trigger(en):
            self._debouncer.schedule()
        else:
            logger.debug("Edit below trigger threshold (%d chars)", len(en.strip()))

    def edit_kh(self, kh: str) -> None:
        """Record a manual edit to the Khmer body. Never triggers a cycle."""
        self._supersede_cycles()
        self.state.content = self.state.content.model_copy(update={"kh": kh})

    def should_trigger(self, en: str) -> bool:
        return self.config.enabled and len(en.strip()) >= self.min_length

    def process_now(self) -> bool:
        """Start a cycle immediately instead of waiting for the quiet interval.

        Returns False if the current text would not trigger a cycle.
        """
        if self._debouncer.flush():
            return True
        if not self.should_trigger(self.state.content.en):
            return False
        self._start_cycle()
        return True

    # ── Lifecycle ────────────────────────────────────────────────

    async def wait_idle(self) -> list[CycleOutcome]:
        """Wait until no cycle is in flight; return the most recent outcomes."""
        while self._cycles:
            await asyncio.gather(*self._cycles, return_exceptions=True)
        return list(self.outcomes)

    async def close(self) -> None:
        """Drop the pending trigger and wait for in-flight cycles."""
        self._debouncer.cancel()
        await self.wait_idle()

    def _supersede_cycles(self) -> None:
        if self._cycles:
            logger.debug("Authored edit during a cycle, discarding its results")
            self.orchestrator.supersede()

    def _start_cycle(self) -> None:
        config = self.config
        self._started += 1
        cycle_id = self.orchestrator.begin_cycle()
        logger.info("Starting auto-processing cycle %d", cycle_id)
        task = asyncio.get_running_loop().create_task(
            self.orchestrator.run_cycle(
                config, article_id=self.article_id, cycle_id=cycle_id
            )
        )
        self._cycles.add(task)
        task.add_done_callback(self._cycle_finished)

    def _cycle_finished(self, task: asyncio.Task[CycleOutcome]) -> None:
        self._cycles.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Auto-processing cycle crashed: %s", exc)
            return
        self.outcomes.append(task.result())
