from types import SimpleNamespace
from unittest.mock import ANY, MagicMock, patch

import redis
from channels.testing import WebsocketCommunicator
from django.contrib.auth.models import AnonymousUser
from django.test import SimpleTestCase

from bulletins.consumers import BulletinExportMetricsConsumer
from bulletins.services import metrics
from bulletins.services.metrics import get_metrics, mark_failed, mark_pending, mark_ready


@patch("bulletins.services.metrics.redis.Redis.from_url")
class ExportMetricsTests(SimpleTestCase):
    def test_pending(self, from_url):
        pipe = from_url.return_value.pipeline.return_value
        mark_pending(7)
        pipe.incr.assert_called_once_with(metrics.PENDING)
        pipe.zadd.assert_called_once_with(metrics.PENDING_Z, {7: ANY})
        pipe.execute.assert_called_once()

    def test_ready(self, from_url):
        pipe = from_url.return_value.pipeline.return_value
        mark_ready(7, 2.5)
        pipe.decr.assert_called_once_with(metrics.PENDING)
        pipe.incr.assert_called_once_with(metrics.READY)
        pipe.zrem.assert_called_once_with(metrics.PENDING_Z, 7)
        pipe.hincrbyfloat.assert_called_once_with(metrics.TIMING, "sum", 2.5)
        pipe.hincrby.assert_called_once_with(metrics.TIMING, "count", 1)

    def test_negative_duration_counts_as_zero(self, from_url):
        pipe = from_url.return_value.pipeline.return_value
        mark_ready(7, -1.0)
        pipe.hincrbyfloat.assert_called_once_with(metrics.TIMING, "sum", 0)

    def test_failed(self, from_url):
        pipe = from_url.return_value.pipeline.return_value
        mark_failed(7)
        pipe.decr.assert_called_once_with(metrics.PENDING)
        pipe.incr.assert_called_once_with(metrics.FAILED)
        pipe.zrem.assert_called_once_with(metrics.PENDING_Z, 7)

    def test_start_is_set_once(self, from_url):
        cli = from_url.return_value
        cli.exists.return_value = False
        mark_pending(7)
        cli.set.assert_called_once_with(metrics.START, ANY)

    @patch("bulletins.services.metrics.time.time", return_value=1000.0)
    def test_get_metrics(self, _time, from_url):
        cli = from_url.return_value
        values = {metrics.PENDING: b"2", metrics.READY: b"6", metrics.FAILED: b"1", metrics.START: b"997"}
        cli.get.side_effect = values.get
        cli.zcount.return_value = 1
        cli.hgetall.return_value = {b"sum": b"12", b"count": b"6"}

        self.assertEqual(
            get_metrics(),
            {
                "pending": 2,
                "ready": 6,
                "failed": 1,
                "stale_pending": 1,
                "avg_seconds": 2.0,
                "total_seconds": 12.0,
                "elapsed_seconds": 3.0,
                "pdfs_per_sec": 2.0,
            },
        )
        cli.zcount.assert_called_once_with(metrics.PENDING_Z, 0, 880.0)

    def test_redis_errors_are_logged_not_raised(self, from_url):
        cli = from_url.return_value
        cli.exists.side_effect = redis.ConnectionError("down")
        with self.assertLogs("bulletins.services.metrics", level="WARNING") as logs:
            mark_pending(1)
            mark_ready(1, 1.0)
            mark_failed(1)
        self.assertEqual(len(logs.output), 3)

    def test_get_metrics_without_redis(self, from_url):
        from_url.return_value.get.side_effect = redis.TimeoutError("timeout")
        self.assertIsNone(get_metrics())


METRICS = {
    "pending": 1,
    "ready": 4,
    "failed": 0,
    "stale_pending": 0,
    "avg_seconds": 1.5,
    "total_seconds": 6.0,
    "elapsed_seconds": 10.0,
    "pdfs_per_sec": 0.4,
}


class MetricsConsumerTests(SimpleTestCase):
    def communicator(self, user):
        communicator = WebsocketCommunicator(BulletinExportMetricsConsumer.as_asgi(), "/ws/bulletins/metrics/")
        communicator.scope["user"] = user
        return communicator

    async def test_anonymous_is_closed(self):
        connected, _ = await self.communicator(AnonymousUser()).connect()
        self.assertFalse(connected)

    async def test_non_staff_is_closed(self):
        user = SimpleNamespace(is_authenticated=True, is_staff=False)
        connected, _ = await self.communicator(user).connect()
        self.assertFalse(connected)

    @patch("bulletins.consumers.get_metrics", MagicMock(return_value=METRICS))
    async def test_staff_receives_metrics(self):
        communicator = self.communicator(SimpleNamespace(is_authenticated=True, is_staff=True))
        connected, _ = await communicator.connect()
        self.assertTrue(connected)
        message = await communicator.receive_json_from()
        self.assertEqual(message, {"type": "metrics", **METRICS})
        await communicator.disconnect()

    @patch("bulletins.consumers.get_metrics", MagicMock(return_value=None))
    async def test_placeholders_without_redis(self):
        communicator = self.communicator(SimpleNamespace(is_authenticated=True, is_staff=True))
        await communicator.connect()
        message = await communicator.receive_json_from()
        self.assertEqual(message["type"], "metrics")
        self.assertEqual(message["pending"], "-")
        self.assertIsNone(message["pdfs_per_sec"])
        await communicator.disconnect()
