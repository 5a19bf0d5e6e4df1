import logging
from datetime import timedelta

from botocore.exceptions import BotoCoreError, ClientError
from celery import shared_task
from django.conf import settings
from django.utils import timezone

from bulletins.models import BulletinExport
from bulletins.services.metrics import mark_failed, mark_ready
from bulletins.services.pdf_renderer import BulletinPdfRenderer
from bulletins.services.storage import delete_pdf, store_pdf

logger = logging.getLogger(__name__)


@shared_task(bind=True, autoretry_for=(Exception,), retry_backoff=5, max_retries=3)
def generate_bulletin_pdf(self, export_id: int):
    export = BulletinExport.objects.select_related("bulletin").get(id=export_id)
    logger.info("Start generate_bulletin_pdf", extra={"export_id": export_id, "bulletin_id": export.bulletin_id})
    try:
        pdf_bytes = BulletinPdfRenderer(export.bulletin.html).generate()
        pdf_url, pdf_path = store_pdf(export, pdf_bytes)
        export.pdf_path = pdf_path
        export.status = "READY"
        export.completed_at = timezone.now()
        export.save(update_fields=["pdf_path", "status", "completed_at"])
        duration = (export.completed_at - export.created_at).total_seconds() if export.created_at else 0
        mark_ready(export.id, duration)
        logger.info("Bulletin PDF stored", extra={"export_id": export_id, "pdf_path": pdf_path, "pdf_url": pdf_url})
        return pdf_url
    except Exception:
        export.status = "FAILED"
        export.completed_at = timezone.now()
        export.save(update_fields=["status", "completed_at"])
        mark_failed(export.id)
        raise


def _ttl_seconds():
    try:
        return int(getattr(settings, "DOCUMENT_TTL_SECONDS", 900))
    except (TypeError, ValueError):
        return 900


def _expire(export) -> None:
    delete_pdf(export)
    export.pdf_path = ""
    export.status = "EXPIRED"
    export.save(update_fields=["pdf_path", "status"])


@shared_task
def purge_export_file(export_id: int):
    export = BulletinExport.objects.filter(id=export_id).first()
    if not export or not export.first_download_at or not export.pdf_path:
        return
    if timezone.now() - export.first_download_at < timedelta(seconds=_ttl_seconds()):
        return
    path = export.pdf_path
    try:
        _expire(export)
    except (OSError, BotoCoreError, ClientError) as exc:
        logger.warning("Failed to purge PDF for export %s: %s", export_id, exc)
        return
    logger.info("Purged bulletin PDF after TTL", extra={"export_id": export_id, "path": path})


def schedule_export_purge(export_id: int):
    """Programme la suppression du PDF DOCUMENT_TTL_SECONDS après le premier téléchargement."""
    try:
        purge_export_file.apply_async(args=[export_id], countdown=_ttl_seconds())
    except Exception as exc:
        # la purge périodique (purge_expired) rattrapera ce fichier
        logger.warning("Failed to schedule PDF purge for export %s: %s", export_id, exc)


def purge_expired_exports(hours: int = 1) -> int:
    cutoff = timezone.now() - timedelta(hours=hours)
    deleted = 0
    for export in BulletinExport.objects.filter(status="READY").exclude(pdf_path=""):
        ts = export.first_download_at or export.completed_at
        if ts and ts < cutoff:
            try:
                _expire(export)
            except (OSError, BotoCoreError, ClientError) as exc:
                logger.warning("Failed to purge PDF for export %s: %s", export.id, exc)
                continue
            deleted += 1
    return deleted


@shared_task
def purge_expired(hours: int = 1):
    deleted = purge_expired_exports(hours)
    logger.info("purge_expired done", extra={"hours": hours, "deleted_pdfs": deleted})
    return deleted
