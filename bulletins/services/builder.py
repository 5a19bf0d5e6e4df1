import logging
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, NamedTuple, Optional

from django.conf import settings
from django.db import transaction
from django.db.models import Prefetch
from django.utils import timezone

from bulletins.models import Bulletin, PDFTemplate
from bulletins.services.grading import (
    EvaluationCategory,
    EvaluationEntry,
    GradeReport,
    aggregate_grades,
)
from bulletins.services.renderer import render_bulletin_html
from schools.models import Evaluation, GradingPeriod, School, Student

logger = logging.getLogger(__name__)


class GeneratedBulletin(NamedTuple):
    bulletin: Bulletin
    data: dict
    html: str


def get_or_create_pdf_template(school: School) -> PDFTemplate:
    """
    Template PDF de l'école, créé avec les valeurs par défaut au premier accès.
    Clé unique sur school : get_or_create relit la ligne si une requête
    concurrente l'a créée entre-temps.
    """
    template, created = PDFTemplate.objects.get_or_create(
        school=school,
        defaults={"header_color": school.primary_color or settings.BULLETIN_DEFAULT_HEADER_COLOR},
    )
    if created:
        logger.info("Default PDF template created", extra={"school_id": school.id, "template_id": template.id})
    return template


def select_students(school: School, period: GradingPeriod, filiere_id=None, student_id=None):
    students = Student.objects.filter(school=school, is_enrolled=True)
    if student_id:
        students = students.filter(id=student_id)
    if filiere_id:
        students = students.filter(filiere_id=filiere_id)
    period_evaluations = (
        Evaluation.objects.filter(
            date__gte=period.start_date,
            date__lte=period.end_date,
            module__school=school,
        )
        .select_related("module")
        .order_by("id")
    )
    return (
        students.select_related("filiere")
        .prefetch_related(Prefetch("evaluations", queryset=period_evaluations, to_attr="period_evaluations"))
        .order_by("last_name", "first_name", "id")
    )


def evaluation_categories(school: School) -> List[EvaluationCategory]:
    return [
        EvaluationCategory(name=t.name, category=t.category, weight=t.weight)
        for t in school.evaluation_types.filter(is_active=True).order_by("id")
    ]


def evaluation_entries(evaluations: Iterable[Evaluation]) -> List[EvaluationEntry]:
    return [
        EvaluationEntry(
            module_id=ev.module_id,
            module_name=ev.module.name,
            type_name=ev.type,
            note=float(ev.note),
            coefficient=float(ev.coefficient),
            date=ev.date,
        )
        for ev in evaluations
    ]


def student_identity(student: Student) -> dict:
    return {
        "name": student.full_name or "Étudiant",
        "studentNumber": student.student_number,
        "filiere": student.filiere.name if student.filiere else "N/A",
        "niveau": student.niveau,
    }


def build_bulletin_data(
    student: Student,
    period: GradingPeriod,
    categories: List[EvaluationCategory],
    formula: Optional[str],
) -> tuple:
    evaluations = getattr(student, "period_evaluations", None)
    if evaluations is None:
        evaluations = (
            student.evaluations.filter(date__gte=period.start_date, date__lte=period.end_date)
            .select_related("module")
            .order_by("id")
        )
    report: GradeReport = aggregate_grades(
        evaluation_entries(evaluations),
        categories,
        formula=formula,
        school_id=student.school_id,
    )
    data = {
        "student": student_identity(student),
        "period": period.name,
        "modules": report.modules_as_dicts(),
        "generalAverage": report.general_average_display,
    }
    return data, report


def generate_bulletins(
    school: School,
    period: GradingPeriod,
    students: Iterable[Student],
    generated_at: Optional[datetime] = None,
) -> List[GeneratedBulletin]:
    """
    Calcule, rend et enregistre un bulletin par élève. Tout ou rien : une
    erreur annule l'ensemble des snapshots de l'appel.
    """
    generated_at = generated_at or timezone.now()
    formula = school.grading_formula or None
    results = []
    with transaction.atomic():
        template = get_or_create_pdf_template(school)
        template_config = template.as_config()
        categories = evaluation_categories(school)
        for student in students:
            data, report = build_bulletin_data(student, period, categories, formula)
            html = render_bulletin_html(data, school, template_config, generated_at)
            bulletin = Bulletin.objects.create(
                school=school,
                student=student,
                grading_period=period,
                filiere=student.filiere,
                period_name=period.name,
                academic_year=period.academic_year or school.academic_year,
                student_name=data["student"]["name"],
                student_number=student.student_number,
                general_average=Decimal(report.general_average_display),
                modules=data["modules"],
                template_config=template_config,
                html=html,
            )
            data["id"] = bulletin.id
            results.append(GeneratedBulletin(bulletin=bulletin, data=data, html=html))
    logger.info(
        "Bulletins generated",
        extra={"school_id": school.id, "period_id": period.id, "count": len(results)},
    )
    return results
