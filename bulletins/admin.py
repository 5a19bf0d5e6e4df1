from django.contrib import admin

from .models import Bulletin, BulletinExport, PDFTemplate


@admin.register(Bulletin)
class BulletinAdmin(admin.ModelAdmin):
    list_display = ("id", "student_name", "period_name", "academic_year", "general_average", "school", "created_at")
    list_filter = ("school", "academic_year", "period_name")
    search_fields = ("student_name", "student_number")
    exclude = ("html",)


@admin.register(BulletinExport)
class BulletinExportAdmin(admin.ModelAdmin):
    list_display = ("id", "bulletin", "status", "created_at", "completed_at")
    list_filter = ("status",)


@admin.register(PDFTemplate)
class PDFTemplateAdmin(admin.ModelAdmin):
    list_display = ("school", "logo_position", "header_color", "grade_table_style", "updated_at")
