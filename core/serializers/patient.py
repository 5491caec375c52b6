import bleach
from rest_framework import serializers

from core.models import Patient
from core.validators import format_rut


def _clean_text(v):
    return bleach.clean((v or '').strip(), strip=True)


class PatientWriteSerializer(serializers.Serializer):
    """Shape and type checks only.

    Required fields and the RUT check digit are enforced by
    ``core.services.patients`` so they map to VAL_003 / VAL_001.
    """
    rut = serializers.CharField(required=False, allow_blank=True, max_length=16)
    firstNames = serializers.CharField(source='first_names', required=False, allow_blank=True, max_length=255)
    lastNames = serializers.CharField(source='last_names', required=False, allow_blank=True, max_length=255)
    birthDate = serializers.DateField(source='birth_date', required=False, allow_null=True)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=32)
    email = serializers.EmailField(required=False, allow_blank=True)

    def validate_firstNames(self, v):
        return _clean_text(v)

    def validate_lastNames(self, v):
        return _clean_text(v)

    def validate_phone(self, v):
        return _clean_text(v)


class PatientSerializer(serializers.ModelSerializer):
    rutFormatted = serializers.SerializerMethodField()
    firstNames = serializers.CharField(source='first_names')
    lastNames = serializers.CharField(source='last_names')
    birthDate = serializers.DateField(source='birth_date')
    age = serializers.IntegerField(read_only=True)
    createdAt = serializers.DateTimeField(source='created_at')
    updatedAt = serializers.DateTimeField(source='updated_at')

    class Meta:
        model = Patient
        fields = [
            'id', 'rut', 'rutFormatted', 'firstNames', 'lastNames', 'birthDate',
            'age', 'phone', 'email', 'createdAt', 'updatedAt',
        ]

    def get_rutFormatted(self, obj) -> str:
        return format_rut(obj.rut)


class PatientSearchQuerySerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True, max_length=64)
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=100, default=10)
