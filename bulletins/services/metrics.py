import logging
import time
from typing import Optional

import redis
from django.conf import settings

logger = logging.getLogger(__name__)

PENDING = "metrics:bulletin_pdf:pending"
READY = "metrics:bulletin_pdf:ready"
FAILED = "metrics:bulletin_pdf:failed"
PENDING_Z = "metrics:bulletin_pdf:pending_z"
TIMING = "metrics:bulletin_pdf:timing"
START = "metrics:bulletin_pdf:start"


def _client():
    """
    Client Redis des métriques d'export PDF. METRICS_REDIS_URL, sinon le broker Celery.
    """
    url = getattr(settings, "METRICS_REDIS_URL", None) or getattr(settings, "CELERY_BROKER_URL", "redis://localhost:6379/0")
    return redis.Redis.from_url(url, socket_connect_timeout=1, socket_timeout=1)


def _safe_int(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _ensure_start(cli):
    if not cli.exists(START):
        cli.set(START, time.time())


def reset_metrics():
    cli = _client()
    pipe = cli.pipeline()
    pipe.delete(PENDING, READY, FAILED, PENDING_Z, TIMING)
    pipe.set(START, time.time())
    pipe.execute()


def mark_pending(export_id: int):
    """
    Compte l'export comme en attente et l'horodate pour la détection des exports bloqués.
    """
    try:
        cli = _client()
        _ensure_start(cli)
        pipe = cli.pipeline()
        pipe.incr(PENDING)
        pipe.zadd(PENDING_Z, {export_id: time.time()})
        pipe.execute()
    except redis.RedisError as exc:
        logger.warning("Metrics unavailable (pending): %s", exc, extra={"export_id": export_id})


def mark_ready(export_id: int, duration_seconds: float):
    try:
        cli = _client()
        _ensure_start(cli)
        pipe = cli.pipeline()
        pipe.decr(PENDING)
        pipe.incr(READY)
        pipe.zrem(PENDING_Z, export_id)
        pipe.hincrbyfloat(TIMING, "sum", max(duration_seconds, 0))
        pipe.hincrby(TIMING, "count", 1)
        pipe.execute()
    except redis.RedisError as exc:
        logger.warning("Metrics unavailable (ready): %s", exc, extra={"export_id": export_id})


def mark_failed(export_id: int):
    try:
        cli = _client()
        _ensure_start(cli)
        pipe = cli.pipeline()
        pipe.decr(PENDING)
        pipe.incr(FAILED)
        pipe.zrem(PENDING_Z, export_id)
        pipe.execute()
    except redis.RedisError as exc:
        logger.warning("Metrics unavailable (failed): %s", exc, extra={"export_id": export_id})


def get_metrics(timeout_seconds: int = 120) -> Optional[dict]:
    """
    Compteurs et temps moyens depuis Redis, None si Redis est injoignable.
    """
    try:
        cli = _client()
        now = time.time()
        pending = _safe_int(cli.get(PENDING))
        ready = _safe_int(cli.get(READY))
        failed = _safe_int(cli.get(FAILED))
        stale = cli.zcount(PENDING_Z, 0, now - timeout_seconds)
        start_val = cli.get(START)
        timing = cli.hgetall(TIMING)
    except redis.RedisError:
        return None
    started_at = float(start_val) if start_val else None
    total = float(timing.get(b"sum", 0) or 0)
    count = _safe_int(timing.get(b"count", 0) or 0)
    elapsed = round(now - started_at, 2) if started_at else None
    return {
        "pending": pending,
        "ready": ready,
        "failed": failed,
        "stale_pending": stale,
        "avg_seconds": round(total / count, 2) if count else None,
        "total_seconds": round(total, 2),
        "elapsed_seconds": elapsed,
        "pdfs_per_sec": round(ready / elapsed, 2) if elapsed and elapsed > 0 else None,
    }
