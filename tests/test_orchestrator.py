import asyncio
import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from ats_engine.pipeline import (  # noqa: E402
    PipelineClosedError,
    ScoreOrchestrator,
    ScoringCancelledError,
    ScoringChannel,
    ScoringTimeoutError,
)
from ats_engine.schemas.worker import SCORE_CALCULATED, WorkerResponse  # noqa: E402
from ats_engine.scoring import calculate_ats_score  # noqa: E402

JOB_TEXT = "Backend engineer with Python, Django, PostgreSQL and Kubernetes experience to build APIs."
BASE_RESULT = calculate_ats_score("", "")


def _response(label):
    payload = BASE_RESULT.model_copy(update={"explanation": label}).model_dump(mode="json")
    return WorkerResponse(type=SCORE_CALCULATED, id=label, payload=payload)


class FakeChannel:
    """Labels each result with the resume text it was computed from."""

    def __init__(self, *, manual=False, honour_cancel=True, error=None):
        self.manual = manual
        self.honour_cancel = honour_cancel
        self.error = error
        self.requests = []
        self.tokens = []
        self.pending = []

    async def request(self, message_type, payload=None, *, token=None, timeout=None):
        self.requests.append(payload or {})
        self.tokens.append(token)
        if self.error is not None:
            raise self.error
        label = payload["resume_text"]
        if not self.manual:
            return _response(label)

        future = asyncio.get_running_loop().create_future()
        self.pending.append(future)
        if self.honour_cancel and token is not None:

            def reject():
                if not future.done():
                    future.set_exception(ScoringCancelledError(token.reason or "cancelled"))

            token.add_callback(reject)
        await future
        return _response(label)


class ScoreOrchestratorTests(unittest.IsolatedAsyncioTestCase):
    def _orchestrator(self, channel, **kwargs):
        self.updates = []
        self.errors = []
        options = {"debounce_seconds": 0.05, "min_text_length": 10}
        options.update(kwargs)
        return ScoreOrchestrator(
            channel,
            on_result=self.updates.append,
            on_error=self.errors.append,
            **options,
        )

    async def _settle(self, orchestrator):
        await asyncio.wait_for(orchestrator.wait_idle(), 2.0)

    async def test_rapid_edits_send_one_request_with_latest_input(self):
        channel = FakeChannel()
        orchestrator = self._orchestrator(channel, debounce_seconds=0.2)
        orchestrator.submit("Resume draft one", JOB_TEXT)
        await asyncio.sleep(0.01)
        orchestrator.submit("Resume draft two", JOB_TEXT)
        await asyncio.sleep(0.01)
        orchestrator.submit("Resume draft three", JOB_TEXT)
        await self._settle(orchestrator)
        self.assertEqual(len(channel.requests), 1)
        self.assertEqual(channel.requests[0]["resume_text"], "Resume draft three")
        self.assertEqual([update.result.explanation for update in self.updates], ["Resume draft three"])
        self.assertEqual(orchestrator.dispatched, 1)
        self.assertFalse(orchestrator.busy)

    async def test_unchanged_input_is_not_resent(self):
        channel = FakeChannel()
        orchestrator = self._orchestrator(channel)
        orchestrator.submit("Resume draft one", JOB_TEXT)
        await self._settle(orchestrator)
        orchestrator.submit("Resume draft one", JOB_TEXT)
        await self._settle(orchestrator)
        self.assertEqual(len(channel.requests), 1)
        self.assertEqual(len(self.updates), 1)

    async def test_repeated_input_is_served_from_cache(self):
        channel = FakeChannel()
        orchestrator = self._orchestrator(channel)
        for text in ("Resume draft one", "Resume draft two", "Resume draft one"):
            orchestrator.submit(text, JOB_TEXT)
            await self._settle(orchestrator)
        self.assertEqual(len(channel.requests), 2)
        self.assertTrue(orchestrator.latest.from_cache)
        self.assertEqual(orchestrator.latest.result.explanation, "Resume draft one")
        self.assertEqual(orchestrator.cache_stats["hits"], 1)
        self.assertEqual([update.sequence for update in self.updates], [1, 2, 3])

    async def test_superseded_result_is_discarded(self):
        channel = FakeChannel(manual=True, honour_cancel=False)
        orchestrator = self._orchestrator(channel)
        orchestrator.submit("Resume draft one", JOB_TEXT)
        orchestrator.flush()
        await asyncio.sleep(0)
        orchestrator.submit("Resume draft two", JOB_TEXT)
        orchestrator.flush()
        await asyncio.sleep(0)
        self.assertEqual(len(channel.requests), 2)
        self.assertTrue(channel.tokens[0].cancelled)

        channel.pending[1].set_result(None)
        await self._settle(orchestrator)
        channel.pending[0].set_result(None)
        await asyncio.sleep(0.01)

        self.assertEqual([update.result.explanation for update in self.updates], ["Resume draft two"])
        self.assertEqual(orchestrator.latest.result.explanation, "Resume draft two")

    async def test_cancelled_request_never_applies(self):
        channel = FakeChannel(manual=True)
        orchestrator = self._orchestrator(channel)
        orchestrator.submit("Resume draft one", JOB_TEXT)
        orchestrator.flush()
        await asyncio.sleep(0)
        orchestrator.submit("Resume draft two", JOB_TEXT)
        orchestrator.flush()
        await asyncio.sleep(0)
        self.assertTrue(channel.pending[0].done())

        channel.pending[1].set_result(None)
        await self._settle(orchestrator)
        self.assertEqual([update.result.explanation for update in self.updates], ["Resume draft two"])
        self.assertEqual(self.errors, [])

    async def test_short_input_is_not_sent(self):
        channel = FakeChannel()
        orchestrator = self._orchestrator(channel, min_text_length=50)
        orchestrator.submit("Too short", JOB_TEXT)
        await self._settle(orchestrator)
        self.assertEqual(channel.requests, [])
        self.assertIsNone(orchestrator.latest)

    async def test_failure_is_reported_and_retry_is_allowed(self):
        error = ScoringTimeoutError("slow")
        channel = FakeChannel(error=error)
        orchestrator = self._orchestrator(channel)
        orchestrator.submit("Resume draft one", JOB_TEXT)
        await self._settle(orchestrator)
        self.assertEqual(self.errors, [error])
        self.assertIsNone(orchestrator.latest)

        orchestrator.submit("Resume draft one", JOB_TEXT)
        await self._settle(orchestrator)
        self.assertEqual(len(channel.requests), 2)

    async def test_channel_rejection_without_own_cancel_is_reported(self):
        error = ScoringCancelledError("Too many pending scoring requests.")
        channel = FakeChannel(error=error)
        orchestrator = self._orchestrator(channel)
        orchestrator.submit("Resume draft one", JOB_TEXT)
        await self._settle(orchestrator)
        self.assertFalse(orchestrator.busy)
        self.assertEqual(self.errors, [error])
        self.assertFalse(channel.tokens[0].cancelled)

        channel.error = None
        orchestrator.submit("Resume draft one", JOB_TEXT)
        await self._settle(orchestrator)
        self.assertEqual(len(channel.requests), 2)
        self.assertEqual(orchestrator.latest.result.explanation, "Resume draft one")

    async def test_close_drops_pending_edit(self):
        channel = FakeChannel()
        orchestrator = self._orchestrator(channel)
        orchestrator.submit("Resume draft one", JOB_TEXT)
        await orchestrator.aclose()
        await asyncio.sleep(0.1)
        self.assertEqual(channel.requests, [])
        with self.assertRaises(PipelineClosedError):
            orchestrator.submit("Resume draft two", JOB_TEXT)

    async def test_scores_through_worker_thread(self):
        resume_text = (
            "JANE DOE\n"
            "jane.doe@example.com | (555) 123-4567\n"
            "EXPERIENCE\n"
            "- Built REST APIs with Python and Django serving 50,000 users.\n"
            "SKILLS\n"
            "Python, Django, PostgreSQL, Docker\n"
        )
        async with ScoringChannel(timeout=30.0) as channel:
            async with self._orchestrator(channel, debounce_seconds=0.01) as orchestrator:
                orchestrator.submit(resume_text, JOB_TEXT)
                await asyncio.wait_for(orchestrator.wait_idle(), 30.0)
        self.assertEqual(len(self.updates), 1)
        self.assertGreater(self.updates[0].result.overall_score, 0.0)
        self.assertIsNotNone(self.updates[0].performance)


if __name__ == "__main__":
    unittest.main()
