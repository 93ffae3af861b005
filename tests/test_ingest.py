#!/usr/bin/env python3
"""
Tests for the share intake pipeline.

Run with:
    python -m pytest tests/test_ingest.py
"""
import asyncio
import unittest

from wishwatch.ingest import IngestionPipeline, QueueShareSource, SharedMedia, extract_candidate


async def _settle():
    # give the listener task a few turns of the loop
    for _ in range(5):
        await asyncio.sleep(0)


class FailingInitialSource(QueueShareSource):
    async def initial_media(self):
        raise RuntimeError("share extension crashed")


class TestExtractCandidate(unittest.TestCase):

    def test_first_item_trimmed(self):
        files = [SharedMedia("  https://a.test/p \n"), SharedMedia("https://b.test/q")]
        self.assertEqual(extract_candidate(files), "https://a.test/p")

    def test_non_url_rejected(self):
        self.assertIsNone(extract_candidate([SharedMedia("look at this")]))

    def test_only_first_item_considered(self):
        self.assertIsNone(extract_candidate([SharedMedia("text"), SharedMedia("https://b.test/q")]))

    def test_empty(self):
        self.assertIsNone(extract_candidate([]))

    def test_non_string_path_ignored(self):
        self.assertIsNone(extract_candidate([SharedMedia(12345)]))
        self.assertIsNone(extract_candidate([SharedMedia(None)]))

    def test_prefix_heuristic_only(self):
        # full URL validation happens at add time
        self.assertEqual(extract_candidate([SharedMedia("httpnope")]), "httpnope")


class TestIngestionPipeline(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.source = QueueShareSource()
        self.pipeline = IngestionPipeline(self.source)

    async def asyncTearDown(self):
        await self.pipeline.close()

    async def test_live_share_is_staged(self):
        await self.pipeline.start()
        self.source.share_text("https://a.test/p")
        await _settle()
        self.assertEqual(self.pipeline.staged_url, "https://a.test/p")

    async def test_last_write_wins(self):
        await self.pipeline.start()
        self.source.share_text("https://a.test/1")
        self.source.share_text("https://a.test/2")
        self.source.share_text("https://a.test/3")
        await _settle()
        self.assertEqual(self.pipeline.staged_url, "https://a.test/3")

    async def test_non_url_share_keeps_previous(self):
        await self.pipeline.start()
        self.source.share_text("https://a.test/p")
        self.source.share_text("hello there")
        await _settle()
        self.assertEqual(self.pipeline.staged_url, "https://a.test/p")

    async def test_empty_notification_ignored(self):
        await self.pipeline.start()
        self.source.share()
        await _settle()
        self.assertIsNone(self.pipeline.staged_url)

    async def test_stream_errors_do_not_stop_pipeline(self):
        errors = []
        self.pipeline.add_error_listener(errors.append)
        await self.pipeline.start()
        self.source.push_error(RuntimeError("boom"))
        self.source.share_text("https://a.test/after")
        await _settle()
        self.assertEqual(len(errors), 1)
        self.assertEqual(str(errors[0]), "boom")
        self.assertTrue(self.pipeline.running)
        self.assertEqual(self.pipeline.staged_url, "https://a.test/after")

    async def test_bad_descriptor_does_not_stop_listener(self):
        await self.pipeline.start()
        self.source.share(SharedMedia(12345))
        self.source.share_text("https://a.test/after")
        await _settle()
        self.assertTrue(self.pipeline.running)
        self.assertEqual(self.pipeline.staged_url, "https://a.test/after")

    async def test_failing_notification_is_reported_and_listener_survives(self):
        errors = []
        self.pipeline.add_error_listener(errors.append)
        await self.pipeline.start()
        # not a sequence of descriptors at all
        self.source._queue.put_nowait(object())
        self.source.share_text("https://a.test/after")
        await _settle()
        self.assertEqual(len(errors), 1)
        self.assertTrue(self.pipeline.running)
        self.assertEqual(self.pipeline.staged_url, "https://a.test/after")

    async def test_cold_start_is_staged_and_acknowledged(self):
        self.source.set_initial([SharedMedia("https://a.test/cold")])
        await self.pipeline.start()
        self.assertEqual(self.pipeline.staged_url, "https://a.test/cold")
        self.assertEqual(self.source.reset_count, 1)

    async def test_cold_start_not_redelivered(self):
        self.source.set_initial([SharedMedia("https://a.test/cold")])
        self.assertEqual(await self.pipeline.check_initial(), "https://a.test/cold")
        self.pipeline.clear_staged()
        # relaunch without a new share
        self.assertIsNone(await self.pipeline.check_initial())
        self.assertIsNone(self.pipeline.staged_url)

    async def test_cold_start_non_url_still_acknowledged(self):
        self.source.set_initial([SharedMedia("just some text")])
        self.assertIsNone(await self.pipeline.check_initial())
        self.assertEqual(self.source.reset_count, 1)

    async def test_empty_cold_start_not_acknowledged(self):
        self.assertIsNone(await self.pipeline.check_initial())
        self.assertEqual(self.source.reset_count, 0)

    async def test_cold_start_error_is_reported(self):
        pipeline = IngestionPipeline(FailingInitialSource())
        errors = []
        pipeline.add_error_listener(errors.append)
        self.assertIsNone(await pipeline.check_initial())
        self.assertEqual(len(errors), 1)

    async def test_staged_listener_notified(self):
        seen = []
        self.pipeline.add_staged_listener(seen.append)
        self.pipeline.offer([SharedMedia("https://a.test/p")])
        self.assertEqual(seen, ["https://a.test/p"])

    async def test_take_staged_clears(self):
        self.pipeline.offer([SharedMedia("https://a.test/p")])
        self.assertEqual(self.pipeline.take_staged(), "https://a.test/p")
        self.assertIsNone(self.pipeline.staged_url)

    async def test_close_releases_subscription(self):
        await self.pipeline.start()
        self.assertTrue(self.pipeline.running)
        await self.pipeline.close()
        self.assertFalse(self.pipeline.running)
        self.source.share_text("https://a.test/late")
        await _settle()
        self.assertIsNone(self.pipeline.staged_url)

    async def test_close_without_start(self):
        await self.pipeline.close()
        self.assertFalse(self.pipeline.running)


if __name__ == "__main__":
    unittest.main()
