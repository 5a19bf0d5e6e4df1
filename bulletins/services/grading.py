"""
Agrégation des notes d'un élève sur une période : moyenne devoirs / examens
par module, note finale via la formule de l'école, puis moyenne générale.

Les moyennes par catégorie sont des moyennes simples : ni le coefficient de
l'évaluation ni le poids du type d'évaluation ne sont appliqués ici.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional

from bulletins.services.formula import final_grade

EXAM = "EXAM"
HOMEWORK = "HOMEWORK"

TWO_PLACES = Decimal("0.01")


def fmt_grade(value: float) -> str:
    """Arrondi à 2 décimales, demi vers le haut (0.125 -> 0.13)."""
    if value == 0:
        value = 0.0  # pas de "-0.00"
    return str(Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class EvaluationEntry:
    module_id: int
    module_name: str
    type_name: str
    note: float
    coefficient: float = 1.0
    date: Optional[date] = None


@dataclass(frozen=True)
class EvaluationCategory:
    name: str
    category: str
    weight: float = 1.0


@dataclass
class ModuleGradeResult:
    module_id: int
    module: str
    avg_devoirs: float
    avg_examens: float
    final_grade: float

    def as_dict(self) -> dict:
        return {
            "module": self.module,
            "avgDevoirs": fmt_grade(self.avg_devoirs),
            "avgExamens": fmt_grade(self.avg_examens),
            "finalGrade": fmt_grade(self.final_grade),
        }


@dataclass
class GradeReport:
    modules: List[ModuleGradeResult] = field(default_factory=list)
    general_average: float = 0.0

    @property
    def general_average_display(self) -> str:
        return fmt_grade(self.general_average)

    def modules_as_dicts(self) -> List[dict]:
        return [m.as_dict() for m in self.modules]


@dataclass
class _ModuleBuckets:
    module: str
    devoirs: List[float] = field(default_factory=list)
    examens: List[float] = field(default_factory=list)


def category_lookup(evaluation_types: Iterable[EvaluationCategory]) -> Dict[str, str]:
    mapping: Dict[str, str] = {}
    for eval_type in evaluation_types:
        mapping.setdefault(eval_type.name, eval_type.category)
    return mapping


def mean(values: List[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def aggregate_grades(
    evaluations: Iterable[EvaluationEntry],
    evaluation_types: Iterable[EvaluationCategory],
    formula: Optional[str] = None,
    school_id=None,
) -> GradeReport:
    categories = category_lookup(evaluation_types)

    buckets: Dict[int, _ModuleBuckets] = {}
    for entry in evaluations:
        grades = buckets.get(entry.module_id)
        if grades is None:
            grades = buckets[entry.module_id] = _ModuleBuckets(module=entry.module_name)
        if categories.get(entry.type_name) == EXAM:
            grades.examens.append(float(entry.note))
        else:
            grades.devoirs.append(float(entry.note))

    results = []
    for module_id, grades in buckets.items():
        avg_devoirs = mean(grades.devoirs)
        avg_examens = mean(grades.examens)
        results.append(
            ModuleGradeResult(
                module_id=module_id,
                module=grades.module,
                avg_devoirs=avg_devoirs,
                avg_examens=avg_examens,
                final_grade=final_grade(formula, avg_examens, avg_devoirs, projets=0.0, school_id=school_id),
            )
        )

    # moyenne des notes finales telles qu'affichées (arrondies)
    general = mean([float(fmt_grade(r.final_grade)) for r in results])
    return GradeReport(modules=results, general_average=general)
