import os
from pathlib import Path
from typing import Tuple

import boto3
from botocore.config import Config
from django.conf import settings


def _store_local(export, pdf_bytes: bytes) -> Tuple[str, str]:
    base_path: Path = export.local_dir()
    base_path.mkdir(parents=True, exist_ok=True)
    filename = export.pdf_filename()
    dest = base_path / filename
    dest.write_bytes(pdf_bytes)
    url = os.path.join(settings.DOCUMENT_BASE_URL, filename)
    return url, str(dest)


def _s3_client():
    session = boto3.session.Session(
        aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
        aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
        region_name=getattr(settings, "AWS_REGION", None),
    )
    return session.client(
        "s3",
        endpoint_url=settings.AWS_S3_ENDPOINT_URL,
        config=Config(s3={"addressing_style": "virtual"}),
    )


def _store_s3(export, pdf_bytes: bytes) -> Tuple[str, str]:
    client = _s3_client()
    key = f"bulletins/school_{export.bulletin.school_id}/{export.pdf_filename()}"
    client.put_object(Bucket=settings.AWS_STORAGE_BUCKET_NAME, Key=key, Body=pdf_bytes, ContentType="application/pdf")
    base_url = getattr(settings, "DOCUMENT_BASE_URL", None)
    if base_url:
        url = f"{base_url.rstrip('/')}/{key}"
    else:
        endpoint = (settings.AWS_S3_ENDPOINT_URL or "").rstrip("/")
        url = f"{endpoint}/{settings.AWS_STORAGE_BUCKET_NAME}/{key}"
    return url, key


def store_pdf(export, pdf_bytes: bytes) -> Tuple[str, str]:
    """Retourne (url, chemin ou clé) du PDF stocké."""
    if getattr(settings, "DOCUMENT_STORAGE", "local") == "s3":
        return _store_s3(export, pdf_bytes)
    return _store_local(export, pdf_bytes)


def delete_pdf(export) -> None:
    """Supprime le fichier local ou l'objet S3 d'un export. Un fichier absent n'est pas une erreur."""
    if not export.pdf_path:
        return
    if getattr(settings, "DOCUMENT_STORAGE", "local") == "s3":
        _s3_client().delete_object(Bucket=settings.AWS_STORAGE_BUCKET_NAME, Key=export.pdf_path)
        return
    Path(export.pdf_path).unlink(missing_ok=True)
