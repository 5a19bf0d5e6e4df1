from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class School(models.Model):
    SCHOOL_TYPES = [("HIGH_SCHOOL", "Lycée"), ("UNIVERSITY", "Université")]
    GRADING_SYSTEMS = [("TRIMESTER", "Trimestre"), ("SEMESTER", "Semestre")]

    name = models.CharField(max_length=255)
    school_type = models.CharField(max_length=16, choices=SCHOOL_TYPES, default="UNIVERSITY")
    address = models.TextField(blank=True)
    phone = models.CharField(max_length=32, blank=True)
    email = models.EmailField(blank=True)
    logo = models.URLField(max_length=500, blank=True)
    stamp = models.URLField(max_length=500, blank=True)
    primary_color = models.CharField(max_length=16, blank=True)
    academic_year = models.CharField(max_length=32, blank=True)
    grading_system = models.CharField(max_length=16, choices=GRADING_SYSTEMS, blank=True)
    grading_formula = models.TextField(blank=True)

    def __str__(self):
        return self.name

    @property
    def is_high_school(self) -> bool:
        return self.school_type == "HIGH_SCHOOL"


class UserProfile(models.Model):
    ROLE_CHOICES = [
        ("SUPER_ADMIN", "Super admin"),
        ("SCHOOL_ADMIN", "Administrateur d'école"),
        ("TEACHER", "Enseignant"),
        ("STUDENT", "Étudiant"),
        ("PARENT", "Parent"),
    ]

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="profile")
    school = models.ForeignKey(School, on_delete=models.CASCADE, null=True, blank=True, related_name="members")
    role = models.CharField(max_length=16, choices=ROLE_CHOICES)

    def __str__(self):
        return f"{self.user} ({self.role})"


class Filiere(models.Model):
    school = models.ForeignKey(School, on_delete=models.CASCADE, related_name="filieres")
    name = models.CharField(max_length=128)
    code = models.CharField(max_length=32, blank=True)

    def __str__(self):
        return self.name


class Module(models.Model):
    school = models.ForeignKey(School, on_delete=models.CASCADE, related_name="modules")
    # null = UE Commune
    filiere = models.ForeignKey(Filiere, on_delete=models.SET_NULL, null=True, blank=True, related_name="modules")
    name = models.CharField(max_length=128)
    code = models.CharField(max_length=32, blank=True)
    volume_horaire = models.PositiveIntegerField(default=0)

    def __str__(self):
        return self.name

    @property
    def is_common(self) -> bool:
        return self.filiere_id is None


class Student(models.Model):
    school = models.ForeignKey(School, on_delete=models.CASCADE, related_name="students")
    filiere = models.ForeignKey(Filiere, on_delete=models.SET_NULL, null=True, blank=True, related_name="students")
    first_name = models.CharField(max_length=64)
    last_name = models.CharField(max_length=64)
    student_number = models.CharField(max_length=64)
    niveau = models.CharField(max_length=64, blank=True)
    is_enrolled = models.BooleanField(default=True)

    def __str__(self):
        return self.full_name

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["school", "student_number"], name="student_number_per_school"),
        ]


class GradingPeriod(models.Model):
    school = models.ForeignKey(School, on_delete=models.CASCADE, related_name="grading_periods")
    name = models.CharField(max_length=64)
    academic_year = models.CharField(max_length=32, blank=True)
    start_date = models.DateField()
    end_date = models.DateField()

    def __str__(self):
        return f"{self.name} ({self.academic_year})" if self.academic_year else self.name

    class Meta:
        ordering = ["start_date"]


class EvaluationType(models.Model):
    CATEGORY_CHOICES = [("HOMEWORK", "Devoirs"), ("EXAM", "Examens")]

    school = models.ForeignKey(School, on_delete=models.CASCADE, related_name="evaluation_types")
    name = models.CharField(max_length=64)
    category = models.CharField(max_length=16, choices=CATEGORY_CHOICES)
    weight = models.FloatField(default=1.0)
    is_active = models.BooleanField(default=True)

    def __str__(self):
        return f"{self.name} ({self.category})"

    class Meta:
        constraints = [
            models.CheckConstraint(condition=models.Q(weight__gt=0), name="evaluation_type_weight_positive"),
        ]


class Evaluation(models.Model):
    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name="evaluations")
    module = models.ForeignKey(Module, on_delete=models.CASCADE, related_name="evaluations")
    type = models.CharField(max_length=64)
    note = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=[MinValueValidator(0), MaxValueValidator(20)],
    )
    coefficient = models.DecimalField(max_digits=4, decimal_places=2, default=1)
    date = models.DateField()

    def __str__(self):
        return f"{self.student} - {self.module} ({self.type})"

    class Meta:
        indexes = [
            models.Index(fields=["student", "date"], name="evaluation_student_date_idx"),
        ]
