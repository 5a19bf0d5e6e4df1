from pathlib import Path

from django.conf import settings
from django.db import models

from schools.models import Filiere, GradingPeriod, School, Student


class PDFTemplate(models.Model):
    LOGO_POSITIONS = [("left", "Gauche"), ("center", "Centre"), ("right", "Droite")]
    TABLE_STYLES = [("simple", "Simple"), ("detailed", "Détaillé")]
    DEFAULT_FOOTER = "Ce document est officiel et certifié conforme."

    school = models.OneToOneField(School, on_delete=models.CASCADE, related_name="pdf_template")
    show_logo = models.BooleanField(default=True)
    logo_position = models.CharField(max_length=8, choices=LOGO_POSITIONS, default="left")
    header_color = models.CharField(max_length=16, default="#4F46E5")
    school_name_size = models.PositiveSmallIntegerField(default=24)
    show_address = models.BooleanField(default=True)
    show_phone = models.BooleanField(default=True)
    show_email = models.BooleanField(default=True)
    show_stamp = models.BooleanField(default=True)
    footer_text = models.CharField(max_length=255, blank=True, default=DEFAULT_FOOTER)
    grade_table_style = models.CharField(max_length=16, choices=TABLE_STYLES, default="detailed")
    show_signatures = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Template {self.school}"

    def as_config(self) -> dict:
        return {
            "showLogo": self.show_logo,
            "logoPosition": self.logo_position,
            "headerColor": self.header_color,
            "schoolNameSize": self.school_name_size,
            "showAddress": self.show_address,
            "showPhone": self.show_phone,
            "showEmail": self.show_email,
            "showStamp": self.show_stamp,
            "footerText": self.footer_text,
            "gradeTableStyle": self.grade_table_style,
            "showSignatures": self.show_signatures,
        }


class Bulletin(models.Model):
    """
    Snapshot d'un bulletin généré (élève x période). Jamais modifié après création.
    """

    school = models.ForeignKey(School, on_delete=models.CASCADE, related_name="bulletins")
    student = models.ForeignKey(Student, on_delete=models.SET_NULL, null=True, blank=True, related_name="bulletins")
    grading_period = models.ForeignKey(
        GradingPeriod, on_delete=models.SET_NULL, null=True, blank=True, related_name="bulletins"
    )
    filiere = models.ForeignKey(Filiere, on_delete=models.SET_NULL, null=True, blank=True, related_name="bulletins")
    period_name = models.CharField(max_length=64)
    academic_year = models.CharField(max_length=32, blank=True)
    student_name = models.CharField(max_length=160, blank=True)
    student_number = models.CharField(max_length=64, blank=True)
    general_average = models.DecimalField(max_digits=14, decimal_places=2)
    modules = models.JSONField(default=list)
    template_config = models.JSONField(default=dict)
    html = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Bulletin {self.student_name} - {self.period_name}"

    def as_list_item(self) -> dict:
        return {
            "id": self.id,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "generalAverage": f"{self.general_average:.2f}",
            "gradingPeriodId": self.grading_period_id,
            "gradingPeriodName": self.period_name,
            "academicYear": self.academic_year,
            "filiereId": self.filiere_id,
            "filiereName": self.filiere.name if self.filiere_id else None,
            "studentId": self.student_id,
            "studentName": self.student_name or None,
            "studentNumber": self.student_number or None,
        }

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["school", "academic_year"], name="bulletin_school_year_idx"),
            models.Index(fields=["student", "grading_period"], name="bulletin_student_period_idx"),
        ]


class BulletinExport(models.Model):
    STATUS_CHOICES = [
        ("PENDING", "Pending"),
        ("READY", "Ready"),
        ("FAILED", "Failed"),
        ("EXPIRED", "Expired"),
    ]

    bulletin = models.ForeignKey(Bulletin, on_delete=models.CASCADE, related_name="exports")
    status = models.CharField(max_length=12, choices=STATUS_CHOICES, default="PENDING")
    pdf_path = models.CharField(max_length=512, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    first_download_at = models.DateTimeField(null=True, blank=True)

    def __str__(self):
        return f"Export PDF #{self.id} - {self.bulletin}"

    def pdf_filename(self) -> str:
        return f"bulletin_{self.bulletin_id}_{self.id}.pdf"

    def local_dir(self) -> Path:
        return Path(getattr(settings, "DOCUMENT_STORAGE_PATH", Path(settings.MEDIA_ROOT) / "bulletins"))

    class Meta:
        indexes = [
            models.Index(fields=["bulletin", "status"], name="export_bulletin_status_idx"),
        ]
