"""
Patient management views.

Any authenticated staff member may search, register and update
patients; deleting a patient is reserved for administrators.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from core.models import Role
from core.permissions import IsAuthenticatedIdentity, authorize
from core.serializers.patient import PatientSearchQuerySerializer, PatientSerializer, PatientWriteSerializer
from core.services import patients as patient_service


@api_view(['GET', 'POST'])
def patients(request):
    if request.method == 'POST':
        return _create_patient(request)
    q = PatientSearchQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    result = patient_service.search_patients(
        q.validated_data.get('search'),
        page=q.validated_data['page'],
        limit=q.validated_data['limit'],
    )
    result['data'] = PatientSerializer(result['data'], many=True).data
    return Response(result)


def _create_patient(request):
    s = PatientWriteSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    patient = patient_service.create_patient(s.validated_data)
    return Response(PatientSerializer(patient).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticatedIdentity, authorize(Role.ADMIN, methods=['DELETE'])])
def patient_detail(request, pk: int):
    patient = patient_service.get_patient(pk)
    if request.method == 'GET':
        return Response(PatientSerializer(patient).data)
    if request.method == 'DELETE':
        patient_service.delete_patient(patient)
        return Response(status=status.HTTP_204_NO_CONTENT)
    # PUT and PATCH both apply only the fields sent, as the web client expects
    s = PatientWriteSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    patient = patient_service.update_patient(patient, s.validated_data)
    return Response(PatientSerializer(patient).data)
