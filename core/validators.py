"""
Domain validators for patients and ophthalmic exams.

Everything here is a pure function of its input. Validators report bad
input through their return value (``False``, an error mapping or a list
of missing fields) and never raise for it; the service layer decides
which classified error to raise.
"""
from __future__ import annotations

import math
import numbers
import re
from datetime import date
from typing import Any, Mapping

# -----------------------------------------------------------------------------
# RUT (Chilean national ID)
# -----------------------------------------------------------------------------
RUT_PATTERN = re.compile(r"^([0-9]{7,8})-([0-9K])$")
_THOUSANDS = re.compile(r"\B(?=(?:[0-9]{3})+$)")
RUT_BODY_MIN_DIGITS = 7
_RUT_NOISE = re.compile(r"[.\s]")


def clean_rut(value: str) -> str:
    """Remove dots and whitespace and uppercase the check character."""
    return _RUT_NOISE.sub("", value).upper()


def calculate_rut_check_digit(body: str) -> str:
    """Return the mod-11 check character for a numeric RUT body.

    Digits are weighted right to left with the repeating series
    2, 3, 4, 5, 6, 7. ``11`` maps to ``'0'`` and ``10`` to ``'K'``.
    """
    total = 0
    multiplier = 2
    for digit in reversed(body):
        total += int(digit) * multiplier
        multiplier = 2 if multiplier == 7 else multiplier + 1
    check = 11 - (total % 11)
    if check == 11:
        return "0"
    if check == 10:
        return "K"
    return str(check)


def _split_rut(value: Any) -> tuple[str, str] | None:
    if not value or not isinstance(value, str):
        return None
    match = RUT_PATTERN.match(clean_rut(value))
    if not match:
        return None
    body, check = match.groups()
    if calculate_rut_check_digit(body) != check:
        return None
    return body, check


def validate_rut(value: Any) -> bool:
    """Accept ``12345678-5``, ``12.345.678-5`` or ``1234567-k``."""
    return _split_rut(value) is not None


def format_rut(value: Any) -> Any:
    """Return ``12.345.678-5`` for a valid RUT.

    Invalid input is returned unchanged rather than rejected, so the
    function can be applied to user input for display without guarding.
    """
    parts = _split_rut(value)
    if parts is None:
        return value
    body, check = parts
    grouped = _THOUSANDS.sub(".", body)
    return f"{grouped}-{check}"


def normalize_rut(value: Any) -> str | None:
    """Storage form ``12345678-5`` (no dots), or ``None`` when invalid.

    Leading zeros beyond the seven digit minimum are dropped so that
    ``01234567-4`` and ``1234567-4`` name the same person.
    """
    parts = _split_rut(value)
    if parts is None:
        return None
    body, check = parts
    return f"{body.lstrip('0').zfill(RUT_BODY_MIN_DIGITS)}-{check}"


# -----------------------------------------------------------------------------
# Ophthalmic ranges
# -----------------------------------------------------------------------------
OPHTHALMIC_RANGES = {
    "sphere": {"min": -20, "max": 20},
    "cylinder": {"min": -10, "max": 10},
    "axis": {"min": 0, "max": 180},
    "pd": {"min": 50, "max": 80},
}

EYES = {"od": "OD", "oi": "OI"}

# (quantity, label used in messages)
QUANTITIES = (
    ("sphere", "Esfera"),
    ("cylinder", "Cilindro"),
    ("axis", "Eje"),
    ("pd", "DP"),
)

EXAM_FIELDS = tuple(f"{eye}_{quantity}" for eye in EYES for quantity, _ in QUANTITIES)


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return not math.isnan(value)


def _in_range(value: Any, quantity: str) -> bool:
    if not _is_number(value):
        return False
    bounds = OPHTHALMIC_RANGES[quantity]
    return bounds["min"] <= value <= bounds["max"]


def validate_sphere(value: Any) -> bool:
    """Sphere in diopters, -20 to 20."""
    return _in_range(value, "sphere")


def validate_cylinder(value: Any) -> bool:
    """Cylinder in diopters, -10 to 10."""
    return _in_range(value, "cylinder")


def validate_axis(value: Any) -> bool:
    """Axis in whole degrees, 0 to 180."""
    if not _in_range(value, "axis"):
        return False
    return float(value).is_integer()


def validate_pd(value: Any) -> bool:
    """Pupillary distance in millimetres, 50 to 80."""
    return _in_range(value, "pd")


PREDICATES = {
    "sphere": validate_sphere,
    "cylinder": validate_cylinder,
    "axis": validate_axis,
    "pd": validate_pd,
}


def _range_message(label: str, eye: str, quantity: str) -> str:
    bounds = OPHTHALMIC_RANGES[quantity]
    if quantity == "axis":
        return f"{label} {eye} debe ser un entero entre {bounds['min']} y {bounds['max']}"
    return f"{label} {eye} debe estar entre {bounds['min']} y {bounds['max']}"


def validate_exam(fields: Mapping[str, Any]) -> dict[str, str]:
    """Validate the measurement fields of an exam.

    Absent and ``None`` fields are optional and always pass. Returns a
    mapping of field name to message for every present field that is out
    of range; an empty mapping means the exam is valid.
    """
    errors: dict[str, str] = {}
    for eye_key, eye in EYES.items():
        for quantity, label in QUANTITIES:
            name = f"{eye_key}_{quantity}"
            value = fields.get(name)
            if value is None:
                continue
            if not PREDICATES[quantity](value):
                errors[name] = _range_message(label, eye, quantity)
    return errors


# -----------------------------------------------------------------------------
# Patient data
# -----------------------------------------------------------------------------
REQUIRED_PATIENT_FIELDS = (
    ("rut", "RUT"),
    ("first_names", "Nombres"),
    ("last_names", "Apellidos"),
    ("birth_date", "Fecha de nacimiento"),
    ("phone", "Teléfono"),
    ("email", "Correo electrónico"),
)


def missing_patient_fields(data: Mapping[str, Any]) -> list[str]:
    """Labels of required patient fields that are absent or blank."""
    missing = []
    for key, label in REQUIRED_PATIENT_FIELDS:
        value = data.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(label)
    return missing


def calculate_age(birth_date: date, today: date | None = None) -> int:
    today = today or date.today()
    age = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age
