from rest_framework.exceptions import NotAuthenticated, PermissionDenied
from rest_framework.permissions import BasePermission


def get_profile(user):
    if not user or not user.is_authenticated:
        return None
    return getattr(user, "profile", None)


class IsSchoolAdmin(BasePermission):
    """
    Réservé aux administrateurs d'école. Un rôle insuffisant est traité comme
    une absence d'authentification (401).
    """

    def has_permission(self, request, view):
        profile = get_profile(request.user)
        if profile is None or profile.role != "SCHOOL_ADMIN" or not profile.school_id:
            raise NotAuthenticated("Non autorisé")
        return True


def admin_school_id(request):
    return request.user.profile.school_id


def ensure_same_school(request, school_id):
    """403 si l'admin agit sur une autre école que la sienne."""
    if str(admin_school_id(request)) != str(school_id):
        raise PermissionDenied("Non autorisé")
