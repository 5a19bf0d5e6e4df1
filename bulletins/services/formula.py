"""
Évaluation sécurisée des formules de notation propres à chaque école.

Une formule est une expression arithmétique sur les variables ``examens``,
``devoirs`` et ``projets`` (ex: ``(examens + devoirs * 2) / 3``). L'évaluation
passe par simpleeval : pas d'accès aux attributs, pas d'import, seules les
variables et fonctions listées ici sont résolues.
"""

import ast
import logging
import math
from typing import NamedTuple, Optional

from simpleeval import DEFAULT_OPERATORS, SimpleEval, safe_power

logger = logging.getLogger(__name__)

FORMULA_VARIABLES = ("examens", "devoirs", "projets")
DEFAULT_FORMULA = "(examens + devoirs) / 2"

# au-delà, le résultat n'est plus une note (et ne tient pas dans Bulletin.general_average)
MAX_ABS_RESULT = 1e9

# (examens, devoirs, projets) essayés à l'enregistrement d'une formule
VALIDATION_SAMPLES = [(12.0, 14.0, 0.0), (10.0, 10.0, 10.0), (15.5, 8.25, 11.0), (0.0, 0.0, 0.0), (20.0, 20.0, 20.0)]

SAFE_FUNCTIONS = {
    "min": min,
    "max": max,
    "abs": abs,
    "round": round,
}

# `^` = puissance (comme l'ancien moteur de formules), pas de xor
FORMULA_OPERATORS = dict(DEFAULT_OPERATORS)
FORMULA_OPERATORS[ast.BitXor] = safe_power


class FormulaResult(NamedTuple):
    value: Optional[float]
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def default_grade(examens: float, devoirs: float) -> float:
    return (examens + devoirs) / 2


def evaluate_formula(formula: str, examens: float, devoirs: float, projets: float = 0.0) -> FormulaResult:
    if not formula or not formula.strip():
        return FormulaResult(None, "empty formula")

    evaluator = SimpleEval(
        operators=FORMULA_OPERATORS,
        functions=dict(SAFE_FUNCTIONS),
        names={"examens": examens, "devoirs": devoirs, "projets": projets},
    )
    try:
        value = evaluator.eval(formula.strip())
    except Exception as exc:
        return FormulaResult(None, f"{type(exc).__name__}: {exc}")

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return FormulaResult(None, f"non numeric result: {value!r}")
    value = float(value)
    if not math.isfinite(value):
        return FormulaResult(None, f"non finite result: {value}")
    if abs(value) > MAX_ABS_RESULT:
        return FormulaResult(None, f"result out of range: {value}")
    return FormulaResult(value)


def final_grade(formula: Optional[str], examens: float, devoirs: float, projets: float = 0.0, school_id=None) -> float:
    """
    Note finale d'un module. Sans formule, ou si la formule échoue, on retombe
    sur la moyenne simple (examens + devoirs) / 2.
    """
    if not formula:
        return default_grade(examens, devoirs)
    result = evaluate_formula(formula, examens, devoirs, projets)
    if result.ok:
        return result.value
    logger.warning(
        "Grading formula failed, using default formula",
        extra={"school_id": school_id, "formula": formula, "reason": result.error},
    )
    return default_grade(examens, devoirs)


def validate_formula(formula: str) -> FormulaResult:
    """
    Essaie la formule sur quelques jeux de valeurs (utilisé à l'enregistrement).
    Valide dès qu'un essai aboutit : une division par zéro en un point isolé
    n'invalide pas la formule, une erreur de syntaxe ou un nom inconnu si.
    """
    first = None
    for examens, devoirs, projets in VALIDATION_SAMPLES:
        result = evaluate_formula(formula, examens=examens, devoirs=devoirs, projets=projets)
        if result.ok:
            return result
        if first is None:
            first = result
    return first
