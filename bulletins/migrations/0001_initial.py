from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("schools", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="PDFTemplate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("show_logo", models.BooleanField(default=True)),
                ("logo_position", models.CharField(choices=[("left", "Gauche"), ("center", "Centre"), ("right", "Droite")], default="left", max_length=8)),
                ("header_color", models.CharField(default="#4F46E5", max_length=16)),
                ("school_name_size", models.PositiveSmallIntegerField(default=24)),
                ("show_address", models.BooleanField(default=True)),
                ("show_phone", models.BooleanField(default=True)),
                ("show_email", models.BooleanField(default=True)),
                ("show_stamp", models.BooleanField(default=True)),
                ("footer_text", models.CharField(blank=True, default="Ce document est officiel et certifié conforme.", max_length=255)),
                ("grade_table_style", models.CharField(choices=[("simple", "Simple"), ("detailed", "Détaillé")], default="detailed", max_length=16)),
                ("show_signatures", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("school", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="pdf_template", to="schools.school")),
            ],
        ),
        migrations.CreateModel(
            name="Bulletin",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("period_name", models.CharField(max_length=64)),
                ("academic_year", models.CharField(blank=True, max_length=32)),
                ("student_name", models.CharField(blank=True, max_length=160)),
                ("student_number", models.CharField(blank=True, max_length=64)),
                ("general_average", models.DecimalField(decimal_places=2, max_digits=8)),
                ("modules", models.JSONField(default=list)),
                ("template_config", models.JSONField(default=dict)),
                ("html", models.TextField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("filiere", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="bulletins", to="schools.filiere")),
                ("grading_period", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="bulletins", to="schools.gradingperiod")),
                ("school", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="bulletins", to="schools.school")),
                ("student", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="bulletins", to="schools.student")),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["school", "academic_year"], name="bulletin_school_year_idx"),
                    models.Index(fields=["student", "grading_period"], name="bulletin_student_period_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="BulletinExport",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("status", models.CharField(choices=[("PENDING", "Pending"), ("READY", "Ready"), ("FAILED", "Failed")], default="PENDING", max_length=12)),
                ("pdf_path", models.CharField(blank=True, max_length=512)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("first_download_at", models.DateTimeField(blank=True, null=True)),
                ("bulletin", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="exports", to="bulletins.bulletin")),
            ],
            options={
                "indexes": [models.Index(fields=["bulletin", "status"], name="export_bulletin_status_idx")],
            },
        ),
    ]
