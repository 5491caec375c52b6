"""
Clinical record views.

Records are created under a patient and addressed by their own id
afterwards. Exam values outside the ophthalmic ranges are rejected with
VAL_004 and a per-field message map in ``details``.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from core.models import Role
from core.permissions import IsAuthenticatedIdentity, authorize
from core.serializers.clinical_record import ClinicalRecordSerializer, ClinicalRecordWriteSerializer
from core.services import clinical_records as record_service
from core.services.patients import get_patient


@api_view(['GET', 'POST'])
def patient_clinical_records(request, patient_id: int):
    patient = get_patient(patient_id)
    if request.method == 'GET':
        records = record_service.records_for_patient(patient)
        return Response(ClinicalRecordSerializer(records, many=True).data)

    s = ClinicalRecordWriteSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    record = record_service.create_clinical_record(patient, request.user, s.validated_data)
    return Response(ClinicalRecordSerializer(record).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticatedIdentity, authorize(Role.ADMIN, methods=['DELETE'])])
def clinical_record_detail(request, pk: int):
    record = record_service.get_clinical_record(pk)
    if request.method == 'GET':
        return Response(ClinicalRecordSerializer(record).data)
    if request.method == 'DELETE':
        record_service.delete_clinical_record(record)
        return Response(status=status.HTTP_204_NO_CONTENT)
    # PUT and PATCH both apply only the fields sent, as the web client expects
    s = ClinicalRecordWriteSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    record = record_service.update_clinical_record(record, s.validated_data)
    return Response(ClinicalRecordSerializer(record).data)
