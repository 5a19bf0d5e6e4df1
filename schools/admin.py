from django.contrib import admin

from .models import Evaluation, EvaluationType, Filiere, GradingPeriod, Module, School, Student, UserProfile


@admin.register(School)
class SchoolAdmin(admin.ModelAdmin):
    list_display = ("name", "school_type", "academic_year", "grading_system")
    list_filter = ("school_type", "grading_system")
    search_fields = ("name", "academic_year")


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "role", "school")
    list_filter = ("role", "school")
    search_fields = ("user__username", "user__email", "school__name")


@admin.register(Filiere)
class FiliereAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "school")
    list_filter = ("school",)
    search_fields = ("name", "code", "school__name")


@admin.register(Module)
class ModuleAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "filiere", "school", "volume_horaire")
    list_filter = ("school", "filiere")
    search_fields = ("name", "code", "school__name")


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = ("first_name", "last_name", "student_number", "filiere", "niveau", "is_enrolled")
    list_filter = ("school", "filiere", "is_enrolled")
    search_fields = ("first_name", "last_name", "student_number", "school__name")


@admin.register(GradingPeriod)
class GradingPeriodAdmin(admin.ModelAdmin):
    list_display = ("name", "academic_year", "start_date", "end_date", "school")
    list_filter = ("school", "academic_year")


@admin.register(EvaluationType)
class EvaluationTypeAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "weight", "is_active", "school")
    list_filter = ("school", "category", "is_active")


@admin.register(Evaluation)
class EvaluationAdmin(admin.ModelAdmin):
    list_display = ("student", "module", "type", "note", "coefficient", "date")
    list_filter = ("module__school", "type")
    search_fields = ("student__first_name", "student__last_name", "student__student_number", "module__name")
