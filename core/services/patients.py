"""
Patient registration, lookup and search.

Callers pass already type-checked data (see
``core.serializers.patient.PatientWriteSerializer``) keyed by model
field name. The domain rules live here so every entry point shares them.
"""
from typing import Any, Dict, Optional

from django.db import IntegrityError, transaction
from django.db.models import Q

from core.exceptions import DuplicateRut, InvalidRut, MissingFields, RecordNotFound
from core.logging import get_logger
from core.models import MedicalHistory, OphthalmicExam, Patient
from core.validators import clean_rut, missing_patient_fields, normalize_rut

logger = get_logger(__name__)

PATIENT_FIELDS = ('rut', 'first_names', 'last_names', 'birth_date', 'phone', 'email')


def _normalized_rut_or_raise(value: Any) -> str:
    rut = normalize_rut(value)
    if rut is None:
        raise InvalidRut()
    return rut


def _ensure_rut_free(rut: str, exclude_id: Optional[int] = None) -> None:
    qs = Patient.objects.filter(rut=rut)
    if exclude_id is not None:
        qs = qs.exclude(id=exclude_id)
    if qs.exists():
        raise DuplicateRut()


def get_patient(patient_id: int) -> Patient:
    patient = Patient.objects.filter(id=patient_id).first()
    if not patient:
        raise RecordNotFound('Patient not found')
    return patient


def create_patient(data: Dict[str, Any]) -> Patient:
    missing = missing_patient_fields(data)
    if missing:
        raise MissingFields(f"Missing required fields: {', '.join(missing)}", details={'missing': missing})

    rut = _normalized_rut_or_raise(data['rut'])
    _ensure_rut_free(rut)

    values = {k: data[k] for k in PATIENT_FIELDS}
    values['rut'] = rut
    try:
        with transaction.atomic():
            patient = Patient.objects.create(**values)
    except IntegrityError:
        # lost a race with a concurrent insert of the same RUT
        raise DuplicateRut()
    logger.info('patient_created', patient_id=patient.id)
    return patient


def update_patient(patient: Patient, data: Dict[str, Any]) -> Patient:
    """Apply the provided fields; blank values for required fields are rejected."""
    changes = {k: data[k] for k in PATIENT_FIELDS if k in data}
    blank = missing_patient_fields({**_as_dict(patient), **changes})
    if blank:
        raise MissingFields(f"Missing required fields: {', '.join(blank)}", details={'missing': blank})

    if 'rut' in changes:
        changes['rut'] = _normalized_rut_or_raise(changes['rut'])
        _ensure_rut_free(changes['rut'], exclude_id=patient.id)

    for field, value in changes.items():
        setattr(patient, field, value)
    try:
        with transaction.atomic():
            patient.save()
    except IntegrityError:
        raise DuplicateRut()
    logger.info('patient_updated', patient_id=patient.id, fields=sorted(changes))
    return patient


def _as_dict(patient: Patient) -> Dict[str, Any]:
    return {k: getattr(patient, k) for k in PATIENT_FIELDS}


def search_patients(query: Optional[str] = None, page: int = 1, limit: int = 10) -> Dict[str, Any]:
    """Case-insensitive match on RUT, first names or last names, newest first."""
    qs = Patient.objects.all()
    query = (query or '').strip()
    if query:
        rut_query = clean_rut(query)
        cond = Q(first_names__icontains=query) | Q(last_names__icontains=query)
        if rut_query:
            cond |= Q(rut__icontains=rut_query)
        qs = qs.filter(cond)
    total = qs.count()
    start = (page - 1) * limit
    return {
        'data': list(qs[start:start + limit]),
        'totalCount': total,
        'page': page,
        'limit': limit,
    }


@transaction.atomic
def delete_patient(patient: Patient) -> None:
    """Remove the patient with every clinical record, history and exam."""
    patient_id = patient.id
    records = patient.clinical_records.all()
    exam_ids = list(records.values_list('ophthalmic_exam_id', flat=True))
    history_ids = list(records.values_list('medical_history_id', flat=True))
    patient.delete()
    MedicalHistory.objects.filter(id__in=history_ids).delete()
    OphthalmicExam.objects.filter(id__in=exam_ids).delete()
    logger.info('patient_deleted', patient_id=patient_id)
