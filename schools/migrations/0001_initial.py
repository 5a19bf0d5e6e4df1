from django.conf import settings
from django.db import migrations, models
import django.core.validators
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="School",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("school_type", models.CharField(choices=[("HIGH_SCHOOL", "Lycée"), ("UNIVERSITY", "Université")], default="UNIVERSITY", max_length=16)),
                ("address", models.TextField(blank=True)),
                ("phone", models.CharField(blank=True, max_length=32)),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("logo", models.URLField(blank=True, max_length=500)),
                ("stamp", models.URLField(blank=True, max_length=500)),
                ("primary_color", models.CharField(blank=True, max_length=16)),
                ("academic_year", models.CharField(blank=True, max_length=32)),
                ("grading_system", models.CharField(blank=True, choices=[("TRIMESTER", "Trimestre"), ("SEMESTER", "Semestre")], max_length=16)),
                ("grading_formula", models.TextField(blank=True)),
            ],
        ),
        migrations.CreateModel(
            name="Filiere",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=128)),
                ("code", models.CharField(blank=True, max_length=32)),
                ("school", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="filieres", to="schools.school")),
            ],
        ),
        migrations.CreateModel(
            name="Module",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=128)),
                ("code", models.CharField(blank=True, max_length=32)),
                ("volume_horaire", models.PositiveIntegerField(default=0)),
                ("filiere", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="modules", to="schools.filiere")),
                ("school", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="modules", to="schools.school")),
            ],
        ),
        migrations.CreateModel(
            name="Student",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("first_name", models.CharField(max_length=64)),
                ("last_name", models.CharField(max_length=64)),
                ("student_number", models.CharField(max_length=64)),
                ("niveau", models.CharField(blank=True, max_length=64)),
                ("is_enrolled", models.BooleanField(default=True)),
                ("filiere", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="students", to="schools.filiere")),
                ("school", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="students", to="schools.school")),
            ],
            options={
                "constraints": [models.UniqueConstraint(fields=("school", "student_number"), name="student_number_per_school")],
            },
        ),
        migrations.CreateModel(
            name="GradingPeriod",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=64)),
                ("academic_year", models.CharField(blank=True, max_length=32)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                ("school", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="grading_periods", to="schools.school")),
            ],
            options={
                "ordering": ["start_date"],
            },
        ),
        migrations.CreateModel(
            name="EvaluationType",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=64)),
                ("category", models.CharField(choices=[("HOMEWORK", "Devoirs"), ("EXAM", "Examens")], max_length=16)),
                ("weight", models.FloatField(default=1.0)),
                ("is_active", models.BooleanField(default=True)),
                ("school", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="evaluation_types", to="schools.school")),
            ],
            options={
                "constraints": [models.CheckConstraint(condition=models.Q(("weight__gt", 0)), name="evaluation_type_weight_positive")],
            },
        ),
        migrations.CreateModel(
            name="Evaluation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("type", models.CharField(max_length=64)),
                ("note", models.DecimalField(decimal_places=2, max_digits=5, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(20)])),
                ("coefficient", models.DecimalField(decimal_places=2, default=1, max_digits=4)),
                ("date", models.DateField()),
                ("module", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="evaluations", to="schools.module")),
                ("student", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="evaluations", to="schools.student")),
            ],
            options={
                "indexes": [models.Index(fields=["student", "date"], name="evaluation_student_date_idx")],
            },
        ),
        migrations.CreateModel(
            name="UserProfile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("role", models.CharField(choices=[("SUPER_ADMIN", "Super admin"), ("SCHOOL_ADMIN", "Administrateur d'école"), ("TEACHER", "Enseignant"), ("STUDENT", "Étudiant"), ("PARENT", "Parent")], max_length=16)),
                ("school", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name="members", to="schools.school")),
                ("user", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="profile", to=settings.AUTH_USER_MODEL)),
            ],
        ),
    ]
