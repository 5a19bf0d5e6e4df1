ALL = "all"

# paramètre de requête -> lookup ORM
HISTORY_FILTERS = {
    "academic_year": "academic_year",
    "period_id": "grading_period_id",
    "filiere_id": "filiere_id",
    "student_id": "student_id",
}


def is_all(value) -> bool:
    return value is None or value == "" or str(value) == ALL


def filter_bulletins(bulletins, academic_year=ALL, period_id=ALL, filiere_id=ALL, student_id=ALL):
    """
    Filtres indépendants combinés en ET ; "all" (ou vide) = filtre non appliqué.
    """
    values = {
        "academic_year": academic_year,
        "period_id": period_id,
        "filiere_id": filiere_id,
        "student_id": student_id,
    }
    lookups = {HISTORY_FILTERS[key]: value for key, value in values.items() if not is_all(value)}
    if lookups:
        bulletins = bulletins.filter(**lookups)
    return bulletins
