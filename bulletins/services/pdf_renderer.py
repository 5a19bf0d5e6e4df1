import logging
from typing import Optional

from django.conf import settings


class PdfRenderError(Exception):
    pass


class BulletinPdfRenderer:
    """
    Convertit le HTML d'un bulletin en PDF avec WeasyPrint.
    Les images (logo, tampon) relatives sont résolues depuis `base_url`.
    """

    def __init__(self, html: str, base_url: Optional[str] = None):
        self.html = html
        self.base_url = base_url or getattr(settings, "BULLETIN_PDF_BASE_URL", None) or str(settings.BASE_DIR)
        self.logger = logging.getLogger(__name__)

    def generate(self) -> bytes:
        # import local : WeasyPrint charge pango/cairo au premier import
        from weasyprint import HTML

        try:
            pdf_bytes = HTML(string=self.html, base_url=self.base_url).write_pdf()
        except Exception as exc:
            self.logger.error("WeasyPrint failed: %s", exc)
            raise PdfRenderError(str(exc)) from exc
        self.logger.info("Bulletin PDF rendered", extra={"size_bytes": len(pdf_bytes), "base_url": self.base_url})
        return pdf_bytes
