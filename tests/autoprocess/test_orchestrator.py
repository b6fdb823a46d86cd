"""Tests for CycleOrchestrator — the Format → Translate → Analyze state machine."""

from __future__ import annotations

import asyncio
from unittest.mock import MagicMock

from conftest import FORMATTED_EN, KHMER_TEXT, LONG_TEXT, FakeServices, make_report

from newsdesk.autoprocess.models import (
    AuthoredContent,
    AutoProcessingConfig,
    ProcessingStatus,
    ProcessingStep,
)
from newsdesk.autoprocess.orchestrator import CycleOrchestrator, EditorState
from newsdesk.services.base import ServiceError

FULL_PROGRESS = [0, 10, 30, 50, 70, 85, 90, 100, 0]


def _orchestrator(
    services: FakeServices,
    content: AuthoredContent | None = None,
) -> tuple[CycleOrchestrator, MagicMock, list[ProcessingStatus]]:
    state = EditorState(content=content or AuthoredContent(en=LONG_TEXT, kh="old khmer"))
    notifier = MagicMock()
    orch = CycleOrchestrator(services, state, notifier=notifier, done_hold=0)
    seen: list[ProcessingStatus] = []
    orch.add_status_listener(seen.append)
    return orch, notifier, seen


class TestFullCycle:
    def test_scenario_all_stages(self, services: FakeServices):
        orch, notifier, seen = _orchestrator(services)

        outcome = asyncio.run(orch.run_cycle(AutoProcessingConfig()))

        assert outcome.completed
        assert outcome.formatted and outcome.translated and outcome.analyzed
        assert orch.state.content == AuthoredContent(en=FORMATTED_EN, kh=KHMER_TEXT)
        assert orch.state.report is not None
        assert orch.state.report.readability.score == 82
        assert orch.state.status == ProcessingStatus.idle()
        notifier.success.assert_called_once()
        notifier.error.assert_not_called()

    def test_stage_order(self, services: FakeServices):
        orch, _, _ = _orchestrator(services)
        asyncio.run(orch.run_cycle(AutoProcessingConfig()))
        assert services.stages() == ["format", "translate", "analyze"]

    def test_translate_and_analyze_see_formatted_text(self, services: FakeServices):
        orch, _, _ = _orchestrator(services)
        asyncio.run(orch.run_cycle(AutoProcessingConfig()))
        assert services.calls[1] == ("translate", FORMATTED_EN)
        assert services.calls[2] == ("analyze", FORMATTED_EN)

    def test_article_id_passed_to_formatter(self):
        services = FakeServices()
        orch, _, _ = _orchestrator(services)
        asyncio.run(orch.run_cycle(AutoProcessingConfig(), article_id="abc123"))
        assert services.article_ids == ["abc123"]

    def test_progress_checkpoints(self, services: FakeServices):
        orch, _, seen = _orchestrator(services)
        asyncio.run(orch.run_cycle(AutoProcessingConfig()))

        assert [s.progress for s in seen] == FULL_PROGRESS
        steps = [s.current_step for s in seen]
        assert steps[-2] == ProcessingStep.DONE
        assert steps[-1] == ProcessingStep.IDLE
        assert steps.index(ProcessingStep.FORMATTING) < steps.index(ProcessingStep.TRANSLATING)
        assert steps.index(ProcessingStep.TRANSLATING) < steps.index(ProcessingStep.ANALYZING)

    def test_is_processing_while_stages_run(self, services: FakeServices):
        orch, _, seen = _orchestrator(services)
        asyncio.run(orch.run_cycle(AutoProcessingConfig()))
        running = [s for s in seen if s.current_step not in (ProcessingStep.IDLE, ProcessingStep.DONE)]
        assert running
        assert all(s.is_processing for s in running)

    def test_done_held_before_idle(self, services: FakeServices):
        orch, _, _ = _orchestrator(services)
        orch.done_hold = 0.05

        async def scenario():
            task = asyncio.create_task(orch.run_cycle(AutoProcessingConfig()))
            await asyncio.sleep(0.02)
            mid = orch.state.status
            await task
            return mid

        mid = asyncio.run(scenario())
        assert mid.current_step == ProcessingStep.DONE
        assert mid.progress == 100
        assert orch.state.status.current_step == ProcessingStep.IDLE

    def test_report_replaced_wholesale(self, services: FakeServices):
        orch, _, _ = _orchestrator(services)
        asyncio.run(orch.run_cycle(AutoProcessingConfig()))
        services.report = make_report(readability=40)
        asyncio.run(orch.run_cycle(AutoProcessingConfig()))
        assert orch.state.report == make_report(readability=40)


class TestToggles:
    def test_no_format_never_mutates_english(self, services: FakeServices):
        orch, _, _ = _orchestrator(services)
        asyncio.run(orch.run_cycle(AutoProcessingConfig(auto_format=False)))

        assert orch.state.content.en == LONG_TEXT
        assert orch.state.content.kh == KHMER_TEXT
        assert "format" not in services.stages()

    def test_skipped_stages_still_report_progress(self, services: FakeServices):
        orch, _, seen = _orchestrator(services)
        config = AutoProcessingConfig(auto_format=False, auto_translate=False, auto_analyze=False)

        outcome = asyncio.run(orch.run_cycle(config))

        assert outcome.completed
        assert services.calls == []
        assert [s.progress for s in seen] == FULL_PROGRESS

    def test_no_translate_keeps_khmer(self, services: FakeServices):
        orch, _, _ = _orchestrator(services)
        asyncio.run(orch.run_cycle(AutoProcessingConfig(auto_translate=False)))
        assert orch.state.content == AuthoredContent(en=FORMATTED_EN, kh="old khmer")

    def test_provisional_khmer_kept_when_translate_disabled(self):
        services = FakeServices(formatted=AuthoredContent(en=FORMATTED_EN, kh="<p>ខ្មែរ</p>"))
        orch, _, _ = _orchestrator(services)
        asyncio.run(orch.run_cycle(AutoProcessingConfig(auto_translate=False)))
        assert orch.state.content.kh == "<p>ខ្មែរ</p>"

    def test_provisional_khmer_overwritten_by_translation(self):
        services = FakeServices(formatted=AuthoredContent(en=FORMATTED_EN, kh="<p>ខ្មែរ</p>"))
        orch, _, _ = _orchestrator(services)
        asyncio.run(orch.run_cycle(AutoProcessingConfig()))
        assert orch.state.content.kh == KHMER_TEXT

    def test_no_analyze_keeps_report(self, services: FakeServices):
        orch, _, _ = _orchestrator(services)
        asyncio.run(orch.run_cycle(AutoProcessingConfig(auto_analyze=False)))
        assert orch.state.report is None


class TestFormatFailure:
    def test_content_unchanged(self, failing_format: FakeServices):
        orch, _, _ = _orchestrator(failing_format)
        before = orch.state.content

        outcome = asyncio.run(orch.run_cycle(AutoProcessingConfig()))

        assert not outcome.completed
        assert outcome.error == "formatter down"
        assert orch.state.content == before
        assert orch.state.report is None

    def test_status_idle_without_done(self, failing_format: FakeServices):
        orch, _, seen = _orchestrator(failing_format)
        asyncio.run(orch.run_cycle(AutoProcessingConfig()))

        assert orch.state.status == ProcessingStatus.idle()
        assert ProcessingStep.DONE not in [s.current_step for s in seen]

    def test_later_stages_not_run(self, failing_format: FakeServices):
        orch, _, _ = _orchestrator(failing_format)
        asyncio.run(orch.run_cycle(AutoProcessingConfig()))
        assert failing_format.stages() == ["format"]

    def test_single_error_toast(self, failing_format: FakeServices):
        orch, notifier, _ = _orchestrator(failing_format)
        asyncio.run(orch.run_cycle(AutoProcessingConfig()))

        notifier.error.assert_called_once()
        assert "formatter down" in notifier.error.call_args[0][0]
        notifier.success.assert_not_called()

    def test_unexpected_exception_handled_like_fatal(self):
        services = FakeServices(format_error=RuntimeError("boom"))
        orch, notifier, _ = _orchestrator(services)

        outcome = asyncio.run(orch.run_cycle(AutoProcessingConfig()))

        assert outcome.error == "boom"
        assert orch.state.status == ProcessingStatus.idle()
        notifier.error.assert_called_once()


class TestBestEffortStages:
    def test_translate_failure_keeps_khmer_and_finishes(self):
        services = FakeServices(
            formatted=AuthoredContent(en=FORMATTED_EN, kh=""),
            translate_error=ServiceError("translator down"),
        )
        orch, notifier, seen = _orchestrator(services)

        outcome = asyncio.run(orch.run_cycle(AutoProcessingConfig()))

        assert outcome.completed
        assert not outcome.translated
        assert orch.state.content == AuthoredContent(en=FORMATTED_EN, kh="old khmer")
        assert ProcessingStep.DONE in [s.current_step for s in seen]
        assert services.stages() == ["format", "translate", "analyze"]
        notifier.error.assert_not_called()
        notifier.success.assert_called_once()

    def test_analyze_failure_keeps_previous_report(self, services: FakeServices):
        orch, notifier, _ = _orchestrator(services)
        asyncio.run(orch.run_cycle(AutoProcessingConfig()))
        first = orch.state.report

        services.analyze_error = ServiceError("analyzer down")
        outcome = asyncio.run(orch.run_cycle(AutoProcessingConfig()))

        assert outcome.completed
        assert not outcome.analyzed
        assert orch.state.report == first
        notifier.error.assert_not_called()


class TestIdempotence:
    def test_two_cycles_same_result(self, services: FakeServices):
        orch, _, _ = _orchestrator(services)
        asyncio.run(orch.run_cycle(AutoProcessingConfig()))
        content, report = orch.state.content, orch.state.report

        asyncio.run(orch.run_cycle(AutoProcessingConfig()))

        assert orch.state.content == content
        assert orch.state.report == report


class TestStaleCycles:
    def test_superseded_cycle_writes_nothing(self, services: FakeServices):
        orch, notifier, _ = _orchestrator(services)

        async def run():
            gate = asyncio.Event()
            services.gate = gate
            first = asyncio.create_task(orch.run_cycle(AutoProcessingConfig()))
            await asyncio.sleep(0.01)
            services.formatted = AuthoredContent(en="<p>fresh</p>", kh="")
            second = await orch.run_cycle(AutoProcessingConfig(auto_translate=False))
            services.formatted = AuthoredContent(en="<p>stale</p>", kh="")
            gate.set()
            return await first, second

        first, second = asyncio.run(run())

        assert first.stale
        assert not first.completed
        assert second.completed
        assert orch.state.content.en == "<p>fresh</p>"
        assert orch.state.content.kh == "old khmer"
        notifier.success.assert_called_once()

    def test_begin_cycle_is_monotonic(self, services: FakeServices):
        orch, _, _ = _orchestrator(services)
        first = orch.begin_cycle()
        second = orch.begin_cycle()
        assert second == first + 1
        assert orch.is_current(second)
        assert not orch.is_current(first)

    def test_supersede_discards_writes_and_resets_status(self, services: FakeServices):
        orch, notifier, seen = _orchestrator(services)

        async def run():
            gate = asyncio.Event()
            services.gate = gate
            task = asyncio.create_task(orch.run_cycle(AutoProcessingConfig()))
            await asyncio.sleep(0.01)
            orch.supersede()
            gate.set()
            return await task

        outcome = asyncio.run(run())

        assert outcome.stale
        assert orch.state.content == AuthoredContent(en=LONG_TEXT, kh="old khmer")
        assert seen[-2].current_step == ProcessingStep.FORMATTING
        assert seen[-1] == ProcessingStatus.idle()
        notifier.success.assert_not_called()
        notifier.error.assert_not_called()
