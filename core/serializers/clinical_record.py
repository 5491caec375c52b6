import bleach
from rest_framework import serializers

from core.models import ClinicalRecord, MedicalHistory, OphthalmicExam
from core.serializers.auth import UserSerializer
from core.serializers.patient import PatientSerializer


class MedicalHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = MedicalHistory
        fields = ['id', 'pregnancy', 'lactation', 'hypertension', 'diabetes', 'other']
        read_only_fields = ['id']

    def validate_other(self, v):
        return bleach.clean((v or '').strip(), strip=True)


class OphthalmicExamWriteSerializer(serializers.Serializer):
    # Plain floats here; range and integer checks live in core.validators
    od_sphere = serializers.FloatField(required=False, allow_null=True)
    od_cylinder = serializers.FloatField(required=False, allow_null=True)
    od_axis = serializers.FloatField(required=False, allow_null=True)
    od_pd = serializers.FloatField(required=False, allow_null=True)
    oi_sphere = serializers.FloatField(required=False, allow_null=True)
    oi_cylinder = serializers.FloatField(required=False, allow_null=True)
    oi_axis = serializers.FloatField(required=False, allow_null=True)
    oi_pd = serializers.FloatField(required=False, allow_null=True)
    comments = serializers.CharField(required=False, allow_blank=True)

    def validate_comments(self, v):
        return bleach.clean((v or '').strip(), strip=True)


class OphthalmicExamSerializer(serializers.ModelSerializer):
    class Meta:
        model = OphthalmicExam
        fields = [
            'id', 'od_sphere', 'od_cylinder', 'od_axis', 'od_pd',
            'oi_sphere', 'oi_cylinder', 'oi_axis', 'oi_pd', 'comments',
        ]


class ClinicalRecordWriteSerializer(serializers.Serializer):
    medicalHistory = MedicalHistorySerializer(source='medical_history', required=False)
    ophthalmicExam = OphthalmicExamWriteSerializer(source='ophthalmic_exam', required=False)


class ClinicalRecordSerializer(serializers.ModelSerializer):
    patientId = serializers.IntegerField(source='patient_id', read_only=True)
    patient = PatientSerializer(read_only=True)
    medicalHistory = MedicalHistorySerializer(source='medical_history', read_only=True)
    ophthalmicExam = OphthalmicExamSerializer(source='ophthalmic_exam', read_only=True)
    createdBy = UserSerializer(source='created_by', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = ClinicalRecord
        fields = [
            'id', 'patientId', 'patient', 'medicalHistory', 'ophthalmicExam',
            'createdBy', 'createdAt', 'updatedAt',
        ]
