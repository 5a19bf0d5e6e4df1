import logging
from datetime import datetime
from typing import Tuple

from django.template.loader import render_to_string
from django.utils import timezone

logger = logging.getLogger(__name__)

BULLETIN_TEMPLATE = "bulletins/bulletin.html"


def format_datetime_fr(dt: datetime) -> Tuple[str, str]:
    """(date, heure) au format français : 19/10/2026, 14:05:09."""
    if timezone.is_aware(dt):
        dt = timezone.localtime(dt)
    return dt.strftime("%d/%m/%Y"), dt.strftime("%H:%M:%S")


def render_bulletin_html(bulletin_data: dict, school, template_config: dict, generated_at: datetime, auto_print: bool = True) -> str:
    """
    Construit le HTML autonome d'un bulletin.

    `bulletin_data` a la forme renvoyée par l'API : student / period / modules /
    generalAverage. Aucune valeur n'est lue ailleurs que dans les arguments, la
    date de génération comprise : deux appels identiques donnent le même HTML.
    """
    generated_date, generated_time = format_datetime_fr(generated_at)
    context = {
        "student": bulletin_data["student"],
        "period": bulletin_data["period"],
        "modules": bulletin_data["modules"],
        "general_average": bulletin_data["generalAverage"],
        "school": school,
        "template": template_config,
        "show_logo": bool(template_config.get("showLogo") and school.logo),
        "show_stamp": bool(template_config.get("showStamp") and school.stamp),
        "generated_date": generated_date,
        "generated_time": generated_time,
        "auto_print": auto_print,
    }
    html = render_to_string(BULLETIN_TEMPLATE, context)
    logger.debug(
        "Bulletin HTML rendered",
        extra={"school_id": getattr(school, "id", None), "modules": len(bulletin_data["modules"]), "size": len(html)},
    )
    return html
