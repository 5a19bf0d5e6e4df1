import logging

from django.shortcuts import get_object_or_404
from rest_framework import serializers, status
from rest_framework.response import Response
from rest_framework.views import APIView

from bulletins.services.formula import validate_formula
from schools.models import EvaluationType, GradingPeriod, School
from schools.permissions import IsSchoolAdmin, admin_school_id, ensure_same_school

logger = logging.getLogger(__name__)


class EvaluationTypeSerializer(serializers.ModelSerializer):
    schoolId = serializers.IntegerField(source="school_id", read_only=True)
    isActive = serializers.BooleanField(source="is_active", read_only=True)
    weight = serializers.FloatField(min_value=0, required=True)

    class Meta:
        model = EvaluationType
        fields = ["id", "schoolId", "name", "category", "weight", "isActive"]

    def validate_weight(self, value):
        if value <= 0:
            raise serializers.ValidationError("Le poids doit être strictement positif.")
        return value


class EvaluationTypeCreateSerializer(EvaluationTypeSerializer):
    schoolId = serializers.IntegerField(source="school_id")


class EvaluationTypeListView(APIView):
    permission_classes = [IsSchoolAdmin]

    def get(self, request):
        types = EvaluationType.objects.filter(school_id=admin_school_id(request), is_active=True).order_by("id")
        return Response(EvaluationTypeSerializer(types, many=True).data)

    def post(self, request):
        serializer = EvaluationTypeCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ensure_same_school(request, serializer.validated_data["school_id"])
        get_object_or_404(School, pk=serializer.validated_data["school_id"])
        evaluation_type = serializer.save()
        logger.info(
            "Evaluation type created",
            extra={"school_id": evaluation_type.school_id, "evaluation_type_id": evaluation_type.id},
        )
        return Response(EvaluationTypeSerializer(evaluation_type).data, status=status.HTTP_201_CREATED)


class EvaluationTypeDetailView(APIView):
    permission_classes = [IsSchoolAdmin]

    def put(self, request, pk):
        evaluation_type = get_object_or_404(EvaluationType, pk=pk, school_id=admin_school_id(request))
        serializer = EvaluationTypeSerializer(evaluation_type, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)

    def delete(self, request, pk):
        evaluation_type = get_object_or_404(EvaluationType, pk=pk, school_id=admin_school_id(request))
        # suppression logique : les évaluations existantes gardent leur libellé
        evaluation_type.is_active = False
        evaluation_type.save(update_fields=["is_active"])
        return Response({"detail": "Type supprimé"}, status=status.HTTP_200_OK)


class GradingPeriodSerializer(serializers.ModelSerializer):
    schoolId = serializers.IntegerField(source="school_id", read_only=True)
    academicYear = serializers.CharField(source="academic_year", required=False, allow_blank=True, max_length=32)
    startDate = serializers.DateField(source="start_date")
    endDate = serializers.DateField(source="end_date")

    class Meta:
        model = GradingPeriod
        fields = ["id", "schoolId", "name", "academicYear", "startDate", "endDate"]

    def validate(self, attrs):
        start = attrs.get("start_date", getattr(self.instance, "start_date", None))
        end = attrs.get("end_date", getattr(self.instance, "end_date", None))
        if start and end and start > end:
            raise serializers.ValidationError({"endDate": "La date de fin précède la date de début."})
        return attrs


class GradingPeriodCreateSerializer(GradingPeriodSerializer):
    schoolId = serializers.IntegerField(source="school_id")


class GradingPeriodListView(APIView):
    permission_classes = [IsSchoolAdmin]

    def get(self, request):
        periods = GradingPeriod.objects.filter(school_id=admin_school_id(request))
        return Response(GradingPeriodSerializer(periods, many=True).data)

    def post(self, request):
        serializer = GradingPeriodCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ensure_same_school(request, serializer.validated_data["school_id"])
        school = get_object_or_404(School, pk=serializer.validated_data["school_id"])
        academic_year = serializer.validated_data.get("academic_year") or school.academic_year
        period = serializer.save(academic_year=academic_year)
        return Response(GradingPeriodSerializer(period).data, status=status.HTTP_201_CREATED)


class GradingPeriodDetailView(APIView):
    permission_classes = [IsSchoolAdmin]

    def put(self, request, pk):
        period = get_object_or_404(GradingPeriod, pk=pk, school_id=admin_school_id(request))
        serializer = GradingPeriodSerializer(period, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)


class GradingSystemSerializer(serializers.Serializer):
    schoolId = serializers.IntegerField(source="school_id")
    gradingSystem = serializers.ChoiceField(source="grading_system", choices=[c[0] for c in School.GRADING_SYSTEMS])
    gradingFormula = serializers.CharField(source="grading_formula", max_length=255)

    def validate_gradingFormula(self, value):
        result = validate_formula(value)
        if not result.ok:
            raise serializers.ValidationError(f"Formule invalide ({result.error}).")
        return value.strip()


class GradingSystemView(APIView):
    permission_classes = [IsSchoolAdmin]

    def put(self, request):
        serializer = GradingSystemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        ensure_same_school(request, data["school_id"])
        school = get_object_or_404(School, pk=data["school_id"])
        school.grading_system = data["grading_system"]
        school.grading_formula = data["grading_formula"]
        school.save(update_fields=["grading_system", "grading_formula"])
        logger.info("Grading system updated", extra={"school_id": school.id, "formula": school.grading_formula})
        return Response(
            {
                "detail": "Configuration mise à jour",
                "gradingSystem": school.grading_system,
                "gradingFormula": school.grading_formula,
            }
        )
