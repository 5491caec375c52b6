"""
Clinical records: one medical history plus one ophthalmic exam per visit.

Exam values are checked with :func:`core.validators.validate_exam`
before anything is written; a non-empty result aborts with VAL_004 and
the per-field messages as details.
"""
from typing import Any, Dict, List, Optional

from django.db import transaction

from core.exceptions import InvalidOphthalmicValues, RecordNotFound
from core.logging import get_logger
from core.models import ClinicalRecord, MedicalHistory, OphthalmicExam, Patient
from core.validators import validate_exam

logger = get_logger(__name__)

_RELATED = ('patient', 'medical_history', 'ophthalmic_exam', 'created_by')


def _checked_exam(exam: Dict[str, Any]) -> Dict[str, Any]:
    errors = validate_exam(exam)
    if errors:
        raise InvalidOphthalmicValues(
            f"Invalid ophthalmic values: {', '.join(errors.values())}",
            details=errors,
        )
    values = dict(exam)
    for name in ('od_axis', 'oi_axis'):
        if values.get(name) is not None:
            values[name] = int(values[name])
    return values


def records_for_patient(patient: Patient) -> List[ClinicalRecord]:
    return list(patient.clinical_records.select_related(*_RELATED))


def get_clinical_record(record_id: int) -> ClinicalRecord:
    record = ClinicalRecord.objects.select_related(*_RELATED).filter(id=record_id).first()
    if not record:
        raise RecordNotFound('Clinical record not found')
    return record


@transaction.atomic
def create_clinical_record(patient: Patient, identity, data: Dict[str, Any]) -> ClinicalRecord:
    exam = _checked_exam(data.get('ophthalmic_exam') or {})
    history = MedicalHistory.objects.create(**(data.get('medical_history') or {}))
    ophthalmic_exam = OphthalmicExam.objects.create(**exam)
    record = ClinicalRecord.objects.create(
        patient=patient,
        medical_history=history,
        ophthalmic_exam=ophthalmic_exam,
        created_by_id=identity.user_id,
    )
    logger.info('clinical_record_created', record_id=record.id, patient_id=patient.id, by=identity.username)
    return get_clinical_record(record.id)


@transaction.atomic
def update_clinical_record(record: ClinicalRecord, data: Dict[str, Any]) -> ClinicalRecord:
    history = data.get('medical_history')
    if history:
        for field, value in history.items():
            setattr(record.medical_history, field, value)
        record.medical_history.save()

    exam: Optional[Dict[str, Any]] = data.get('ophthalmic_exam')
    if exam:
        for field, value in _checked_exam(exam).items():
            setattr(record.ophthalmic_exam, field, value)
        record.ophthalmic_exam.save()

    record.save(update_fields=['updated_at'])
    logger.info('clinical_record_updated', record_id=record.id)
    return get_clinical_record(record.id)


@transaction.atomic
def delete_clinical_record(record: ClinicalRecord) -> None:
    record_id = record.id
    # the record cascades from its history; the exam goes explicitly
    exam = record.ophthalmic_exam
    record.medical_history.delete()
    exam.delete()
    logger.info('clinical_record_deleted', record_id=record_id)
