# User value: This test keeps the client poller from spinning forever while users wait for a transcript.
import unittest
from unittest.mock import MagicMock

import requests

from client.poller import PollState, TranscriptPoller


def _response(status_code, body):
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = status_code < 400
    if body is None:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = body
    return resp


class TranscriptPollerUnitTests(unittest.TestCase):
    def make(self, *, post, gets=(), **kwargs):
        session = MagicMock()
        session.post.return_value = post
        session.get.side_effect = list(gets)
        self.session = session
        self.transitions = []
        kwargs.setdefault("interval_sec", 0)
        return TranscriptPoller(
            "http://api.test/",
            session=session,
            on_transition=lambda a, b: self.transitions.append((a.value, b.value)),
            **kwargs,
        )

    # User value: captions that are ready right away skip polling entirely.
    def test_fast_path_completes_without_polling(self):
        poller = self.make(post=_response(200, {"status": "completed", "text": "hello"}))
        out = poller.run("https://youtu.be/x")
        self.assertEqual(out.state, PollState.COMPLETED)
        self.assertEqual(out.text, "hello")
        self.assertEqual(self.transitions, [("idle", "loading"), ("loading", "completed")])
        self.session.get.assert_not_called()
        self.assertEqual(self.session.post.call_args[0][0], "http://api.test/start-job")

    def test_pending_then_completed(self):
        poller = self.make(
            post=_response(202, {"status": "pending", "jobId": "job1"}),
            gets=[
                _response(200, {"status": "pending"}),
                _response(200, {"status": "processing"}),
                _response(200, {"status": "completed", "text": "done"}),
            ],
        )
        out = poller.run("https://www.instagram.com/reel/x/")
        self.assertEqual(out.state, PollState.COMPLETED)
        self.assertEqual(out.text, "done")
        self.assertEqual(out.job_id, "job1")
        self.assertEqual(out.attempts, 3)
        self.assertEqual(self.transitions, [("idle", "loading"), ("loading", "pending"), ("pending", "completed")])
        self.assertEqual(self.session.get.call_args.kwargs["params"], {"jobId": "job1"})

    def test_pending_then_server_error(self):
        poller = self.make(
            post=_response(202, {"status": "pending", "jobId": "job1"}),
            gets=[_response(200, {"status": "error", "error": "bad audio"})],
        )
        out = poller.run("u")
        self.assertEqual(out.state, PollState.ERROR)
        self.assertEqual(out.error, "bad audio")

    # User value: users get a distinct timeout instead of an endless spinner.
    def test_max_attempts_gives_timeout(self):
        poller = self.make(
            post=_response(202, {"status": "pending", "jobId": "job1"}),
            gets=[_response(200, {"status": "pending"}) for _ in range(3)],
            max_attempts=3,
        )
        out = poller.run("u")
        self.assertEqual(out.state, PollState.TIMEOUT)
        self.assertEqual(out.attempts, 3)

    def test_max_wait_gives_timeout(self):
        ticks = iter([0.0, 0.0, 5.0, 11.0])
        poller = self.make(
            post=_response(202, {"status": "pending", "jobId": "job1"}),
            gets=[_response(200, {"status": "pending"}) for _ in range(5)],
            max_wait_sec=10,
            clock=lambda: next(ticks),
        )
        out = poller.run("u")
        self.assertEqual(out.state, PollState.TIMEOUT)
        self.assertEqual(out.attempts, 2)

    # User value: the client never waits past the limit the user asked for.
    def test_last_wait_is_clamped_to_deadline(self):
        ticks = iter([0.0, 0.0, 8.0, 10.0])
        poller = self.make(
            post=_response(202, {"status": "pending", "jobId": "job1"}),
            gets=[_response(200, {"status": "pending"}) for _ in range(3)],
            interval_sec=8,
            max_wait_sec=10,
            clock=lambda: next(ticks),
        )
        poller._cancelled = MagicMock()
        poller._cancelled.wait.return_value = False
        out = poller.run("u")
        self.assertEqual(out.state, PollState.TIMEOUT)
        self.assertEqual(out.attempts, 2)
        self.assertEqual([c.args[0] for c in poller._cancelled.wait.call_args_list], [8, 2.0])

    def test_unexpected_status_shape_stops_with_error(self):
        poller = self.make(
            post=_response(202, {"status": "pending", "jobId": "job1"}),
            gets=[_response(404, {"error": "Job not found"})],
        )
        out = poller.run("u")
        self.assertEqual(out.state, PollState.ERROR)
        self.assertEqual(out.error, "Job not found")

    def test_network_error_while_polling_stops_with_error(self):
        poller = self.make(
            post=_response(202, {"status": "pending", "jobId": "job1"}),
            gets=[requests.ConnectionError("down")],
        )
        out = poller.run("u")
        self.assertEqual(out.state, PollState.ERROR)
        self.assertIn("Error checking status", out.error)

    def test_start_job_error_response(self):
        poller = self.make(post=_response(500, {"error": "Failed to get audio from URL", "details": "Unsupported URL"}))
        out = poller.run("u")
        self.assertEqual(out.state, PollState.ERROR)
        self.assertEqual(out.error, "Failed to get audio from URL: Unsupported URL")

    def test_cancel_stops_polling(self):
        poller = self.make(post=_response(202, {"status": "pending", "jobId": "job1"}))
        poller.cancel()
        out = poller.run("u")
        self.assertTrue(out.cancelled)
        self.assertEqual(out.state, PollState.PENDING)
        self.session.get.assert_not_called()

    def test_backoff_delays_are_capped(self):
        poller = TranscriptPoller("http://x", interval_sec=2, backoff=2.0, max_interval_sec=10, session=MagicMock())
        self.assertEqual([poller.delay_for(n) for n in range(1, 6)], [2, 4, 8, 10, 10])

    def test_invalid_settings_rejected(self):
        with self.assertRaises(ValueError):
            TranscriptPoller("http://x", max_attempts=0, session=MagicMock())
        with self.assertRaises(ValueError):
            TranscriptPoller("http://x", backoff=0.5, session=MagicMock())


if __name__ == "__main__":
    unittest.main()
