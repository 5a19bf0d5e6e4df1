import asyncio
import contextlib

from asgiref.sync import sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer

from bulletins.services.metrics import get_metrics

EMPTY_METRICS = {
    "pending": "-",
    "ready": "-",
    "failed": "-",
    "stale_pending": "-",
    "avg_seconds": None,
    "total_seconds": None,
    "pdfs_per_sec": None,
    "elapsed_seconds": None,
}


class BulletinExportMetricsConsumer(AsyncJsonWebsocketConsumer):
    """
    Pousse les compteurs d'export PDF des bulletins aux clients connectés (toutes les 3 s).
    Réservé au personnel (is_staff).
    """

    interval = 3

    async def connect(self):
        user = self.scope.get("user")
        if not user or not user.is_authenticated or not user.is_staff:
            await self.close()
            return
        await self.accept()
        self._running = True
        await self.send_metrics()
        self._task = asyncio.create_task(self._loop())

    async def disconnect(self, close_code):
        self._running = False
        if hasattr(self, "_task"):
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task

    async def _loop(self):
        while self._running:
            await asyncio.sleep(self.interval)
            await self.send_metrics()

    async def send_metrics(self):
        metrics = await sync_to_async(get_metrics)()
        await self.send_json({"type": "metrics", **(metrics or EMPTY_METRICS)})
