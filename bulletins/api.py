import logging

from django.conf import settings
from django.db import transaction
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import serializers, status
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response
from rest_framework.views import APIView

from bulletins.models import Bulletin, BulletinExport, PDFTemplate
from bulletins.services.builder import generate_bulletins, get_or_create_pdf_template, select_students
from bulletins.services.history import ALL, filter_bulletins
from bulletins.services.metrics import mark_failed, mark_pending, reset_metrics
from bulletins.services.pdf_renderer import BulletinPdfRenderer, PdfRenderError
from bulletins.tasks import generate_bulletin_pdf, schedule_export_purge
from schools.models import GradingPeriod, School
from schools.permissions import IsSchoolAdmin, admin_school_id, ensure_same_school

logger = logging.getLogger(__name__)

HTML_CONTENT_TYPE = "text/html; charset=utf-8"


class GenerateBulletinsSerializer(serializers.Serializer):
    schoolId = serializers.IntegerField(source="school_id")
    periodId = serializers.IntegerField(source="period_id")
    filiereId = serializers.IntegerField(source="filiere_id", required=False, allow_null=True)
    studentId = serializers.IntegerField(source="student_id", required=False, allow_null=True)


class GenerateBulletinsView(APIView):
    """
    Un seul élève : HTML brut (aperçu / impression).
    Plusieurs élèves : JSON {message, bulletins, count}.
    """

    permission_classes = [IsSchoolAdmin]

    def post(self, request):
        serializer = GenerateBulletinsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        ensure_same_school(request, data["school_id"])

        try:
            school = School.objects.filter(pk=data["school_id"]).first()
            period = GradingPeriod.objects.filter(pk=data["period_id"], school_id=data["school_id"]).first()
            if not school or not period:
                return Response({"detail": "École ou période non trouvée"}, status=status.HTTP_404_NOT_FOUND)

            students = list(
                select_students(school, period, filiere_id=data.get("filiere_id"), student_id=data.get("student_id"))
            )
            if not students:
                return Response({"detail": "Aucun étudiant trouvé"}, status=status.HTTP_404_NOT_FOUND)

            generated = generate_bulletins(school, period, students)
        except Exception:
            logger.exception(
                "Bulletin generation failed",
                extra={"school_id": data["school_id"], "period_id": data["period_id"]},
            )
            return Response({"detail": "Erreur lors de la génération"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        if len(generated) == 1:
            return HttpResponse(generated[0].html, content_type=HTML_CONTENT_TYPE)

        bulletins = [item.data for item in generated]
        return Response(
            {
                "message": f"{len(bulletins)} bulletin(s) généré(s)",
                "bulletins": bulletins,
                "count": len(bulletins),
            },
            status=status.HTTP_200_OK,
        )


class HistoryFilterSerializer(serializers.Serializer):
    academicYear = serializers.CharField(source="academic_year", required=False, default=ALL, allow_blank=True)
    periodId = serializers.CharField(source="period_id", required=False, default=ALL, allow_blank=True)
    filiereId = serializers.CharField(source="filiere_id", required=False, default=ALL, allow_blank=True)
    studentId = serializers.CharField(source="student_id", required=False, default=ALL, allow_blank=True)

    def _id_or_all(self, value):
        if value in ("", ALL) or value.isdigit():
            return value
        raise serializers.ValidationError("Identifiant invalide.")

    def validate_periodId(self, value):
        return self._id_or_all(value)

    def validate_filiereId(self, value):
        return self._id_or_all(value)

    def validate_studentId(self, value):
        return self._id_or_all(value)


class BulletinHistoryView(APIView):
    permission_classes = [IsSchoolAdmin]

    def get(self, request):
        serializer = HistoryFilterSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        bulletins = Bulletin.objects.filter(school_id=admin_school_id(request)).select_related("filiere")
        bulletins = filter_bulletins(bulletins, **serializer.validated_data)
        items = [b.as_list_item() for b in bulletins]
        return Response({"bulletins": items, "count": len(items)})


class BulletinHtmlView(APIView):
    permission_classes = [IsSchoolAdmin]

    def get(self, request, pk):
        # 404 aussi pour un bulletin d'une autre école
        bulletin = get_object_or_404(Bulletin, pk=pk, school_id=admin_school_id(request))
        return HttpResponse(bulletin.html, content_type=HTML_CONTENT_TYPE)


class PdfTemplateConfigSerializer(serializers.Serializer):
    showLogo = serializers.BooleanField(source="show_logo", required=False)
    logoPosition = serializers.ChoiceField(
        source="logo_position", choices=[c[0] for c in PDFTemplate.LOGO_POSITIONS], required=False
    )
    headerColor = serializers.RegexField(source="header_color", regex=r"^#[0-9A-Fa-f]{3,8}$", required=False)
    schoolNameSize = serializers.IntegerField(source="school_name_size", min_value=8, max_value=72, required=False)
    showAddress = serializers.BooleanField(source="show_address", required=False)
    showPhone = serializers.BooleanField(source="show_phone", required=False)
    showEmail = serializers.BooleanField(source="show_email", required=False)
    showStamp = serializers.BooleanField(source="show_stamp", required=False)
    footerText = serializers.CharField(source="footer_text", max_length=255, required=False, allow_blank=True)
    gradeTableStyle = serializers.ChoiceField(
        source="grade_table_style", choices=[c[0] for c in PDFTemplate.TABLE_STYLES], required=False
    )
    showSignatures = serializers.BooleanField(source="show_signatures", required=False)


class PdfTemplateSaveSerializer(serializers.Serializer):
    schoolId = serializers.IntegerField(source="school_id")
    config = PdfTemplateConfigSerializer()


class PdfTemplateView(APIView):
    permission_classes = [IsSchoolAdmin]

    def get(self, request):
        school = get_object_or_404(School, pk=admin_school_id(request))
        template = get_or_create_pdf_template(school)
        return Response({"config": template.as_config()})

    def post(self, request):
        serializer = PdfTemplateSaveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ensure_same_school(request, serializer.validated_data["school_id"])
        school = get_object_or_404(School, pk=serializer.validated_data["school_id"])
        changes = serializer.validated_data["config"]
        with transaction.atomic():
            template = get_or_create_pdf_template(school)
            for field, value in changes.items():
                setattr(template, field, value)
            template.save()
        logger.info("PDF template saved", extra={"school_id": school.id, "fields": sorted(changes)})
        return Response({"detail": "Template sauvegardé avec succès", "config": template.as_config()})


# ============================
# Export PDF
# ============================


class ExportRequestSerializer(serializers.Serializer):
    force_new = serializers.BooleanField(required=False, default=False)


class CreateBulletinPdfView(APIView):
    permission_classes = [IsSchoolAdmin]

    def post(self, request, pk):
        serializer = ExportRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        force_new = serializer.validated_data.get("force_new", False)
        bulletin = get_object_or_404(Bulletin, pk=pk, school_id=admin_school_id(request))

        with transaction.atomic():
            existing = None
            if not force_new:
                existing = (
                    BulletinExport.objects.select_for_update()
                    .filter(bulletin=bulletin)
                    .order_by("-created_at", "-id")
                    .first()
                )
            enqueue = True
            if existing:
                prev_status = existing.status
                if existing.status == "READY" and existing.pdf_path:
                    return Response({"id": existing.id, "status": existing.status}, status=status.HTTP_200_OK)
                if existing.status == "PENDING":
                    enqueue = False  # déjà en file, on ne duplique pas
                export = existing
                export.status = "PENDING"
                export.pdf_path = ""
                export.completed_at = None
                export.save(update_fields=["status", "pdf_path", "completed_at"])
                if prev_status != "PENDING":
                    mark_pending(export.id)
            else:
                export = BulletinExport.objects.create(bulletin=bulletin, status="PENDING")
                mark_pending(export.id)

        try:
            if getattr(settings, "CELERY_TASK_ALWAYS_EAGER", False):
                res = generate_bulletin_pdf.apply(args=[export.id])
                pdf_url = res.get()
                return Response({"id": export.id, "status": "READY", "pdf_url": pdf_url}, status=status.HTTP_200_OK)
            if enqueue:
                generate_bulletin_pdf.delay(export.id)
        except Exception:
            logger.exception("Bulletin PDF export failed", extra={"export_id": export.id, "bulletin_id": bulletin.id})
            export.refresh_from_db(fields=["status"])
            if export.status != "FAILED":
                # en mode eager la tâche a déjà marqué l'échec
                export.status = "FAILED"
                export.completed_at = timezone.now()
                export.save(update_fields=["status", "completed_at"])
                mark_failed(export.id)
            return Response({"detail": "Erreur lors de l'export PDF"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        return Response({"id": export.id, "status": export.status}, status=status.HTTP_202_ACCEPTED)


class StreamBulletinPdfView(APIView):
    """
    Export éphémère : rend et stream le PDF sans le stocker ni créer d'export.
    """

    permission_classes = [IsSchoolAdmin]

    def post(self, request, pk):
        bulletin = get_object_or_404(Bulletin, pk=pk, school_id=admin_school_id(request))
        try:
            pdf_bytes = BulletinPdfRenderer(bulletin.html).generate()
        except PdfRenderError:
            return Response({"detail": "Erreur lors de l'export PDF"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        response = HttpResponse(pdf_bytes, content_type="application/pdf")
        response["Content-Disposition"] = f'attachment; filename="bulletin_{bulletin.id}.pdf"'
        return response


class DownloadExportView(APIView):
    permission_classes = [IsSchoolAdmin]

    def get(self, request, pk):
        export = get_object_or_404(
            BulletinExport.objects.exclude(pdf_path=""),
            pk=pk,
            status="READY",
            bulletin__school_id=admin_school_id(request),
        )
        if export.first_download_at is None:
            export.first_download_at = timezone.now()
            export.save(update_fields=["first_download_at"])
            transaction.on_commit(lambda: schedule_export_purge(export.id))
        return Response({"path": export.pdf_path, "id": export.id, "bulletin": export.bulletin_id})


class ResetMetricsView(APIView):
    permission_classes = [IsAdminUser]

    def post(self, request):
        reset_metrics()
        return Response({"detail": "Métriques réinitialisées"}, status=status.HTTP_200_OK)
