import random
import re
from datetime import date

import pytest

from core.validators import (
    calculate_age,
    calculate_rut_check_digit,
    clean_rut,
    format_rut,
    missing_patient_fields,
    normalize_rut,
    validate_axis,
    validate_cylinder,
    validate_exam,
    validate_pd,
    validate_rut,
    validate_sphere,
)


# -- RUT ----------------------------------------------------------------------
@pytest.mark.parametrize('body,check', [
    ('12345678', '5'),
    ('1234567', '4'),
    ('10000013', 'K'),
    ('10000004', '0'),
    ('11111111', '1'),
])
def test_check_digit(body, check):
    assert calculate_rut_check_digit(body) == check


@pytest.mark.parametrize('value', [
    '12345678-5',
    '12.345.678-5',
    ' 12.345.678-5 ',
    '1234567-4',
    '10000013-K',
    '10.000.013-k',
    '10000004-0',
])
def test_valid_ruts(value):
    assert validate_rut(value) is True


@pytest.mark.parametrize('value', [
    '12345678-4',     # wrong check digit
    '12345678',       # no hyphen
    '123456-0',       # body too short
    '123456789-2',    # body too long
    '12345678-55',
    '12345678-X',
    'abc',
    '',
    None,
    12345678,
    '١٢٣٤٥٦٧٨-5',  # Arabic-Indic digits
    '１２３４５６７８-5',  # fullwidth digits
])
def test_invalid_ruts(value):
    assert validate_rut(value) is False


FORMATTED_RUT = re.compile(r'^\d{1,2}\.\d{3}\.\d{3}-[0-9K]$')


def generated_bodies(rng, count):
    """Random 7 and 8 digit bodies, a share of them with leading zeros."""
    for _ in range(count):
        width = rng.choice((7, 8))
        yield str(rng.randint(0, 10 ** rng.randint(1, width) - 1)).zfill(width)


def test_every_generated_rut_validates_and_wrong_digits_do_not():
    rng = random.Random(1234)
    for body in generated_bodies(rng, 200):
        check = calculate_rut_check_digit(body)
        assert validate_rut(f'{body}-{check}')
        for other in '0123456789K':
            if other != check:
                assert not validate_rut(f'{body}-{other}')


def test_format_rut():
    assert format_rut('12345678-5') == '12.345.678-5'
    assert format_rut('1234567-4') == '1.234.567-4'
    assert format_rut('10000013-k') == '10.000.013-K'


@pytest.mark.parametrize('value,formatted', [
    ('0000000-0', '0.000.000-0'),
    ('00000000-0', '00.000.000-0'),
    ('0123456-0', '0.123.456-0'),
    ('01234567-4', '01.234.567-4'),
])
def test_format_rut_keeps_leading_zeros(value, formatted):
    assert format_rut(value) == formatted
    assert FORMATTED_RUT.match(formatted)
    assert validate_rut(formatted)


def test_format_rut_leaves_invalid_input_alone():
    assert format_rut('bad') == 'bad'
    assert format_rut('12345678-4') == '12345678-4'
    assert format_rut(None) is None


def test_format_rut_is_idempotent():
    rng = random.Random(99)
    for body in generated_bodies(rng, 100):
        rut = f'{body}-{calculate_rut_check_digit(body)}'
        once = format_rut(rut)
        assert FORMATTED_RUT.match(once), once
        assert format_rut(once) == once
        assert validate_rut(once)


def test_clean_and_normalize():
    assert clean_rut(' 12.345.678-k ') == '12345678-K'
    assert normalize_rut('12.345.678-5') == '12345678-5'
    assert normalize_rut('12.345.678-4') is None


def test_normalize_collapses_leading_zeros():
    assert normalize_rut('01234567-4') == normalize_rut('1234567-4') == '1234567-4'
    assert normalize_rut('01.234.567-4') == '1234567-4'
    assert normalize_rut('00000000-0') == normalize_rut('0000000-0') == '0000000-0'


# -- ophthalmic ranges --------------------------------------------------------
@pytest.mark.parametrize('fn,good,bad', [
    (validate_sphere, [-20, -0.25, 0, 20], [-20.25, 20.5, 100]),
    (validate_cylinder, [-10, 0, 9.75, 10], [-10.5, 11]),
    (validate_axis, [0, 90, 180, 45.0], [-1, 181, 45.5]),
    (validate_pd, [50, 63.5, 80], [49.9, 80.5, 0]),
])
def test_range_bounds(fn, good, bad):
    for v in good:
        assert fn(v) is True, v
    for v in bad:
        assert fn(v) is False, v


@pytest.mark.parametrize('value', [None, 'abc', '10', True, float('nan'), [1]])
def test_range_rejects_non_numbers(value):
    assert validate_sphere(value) is False
    assert validate_axis(value) is False


def test_validate_exam_all_absent_is_valid():
    assert validate_exam({}) == {}
    assert validate_exam({'od_sphere': None, 'oi_axis': None}) == {}


def test_validate_exam_reports_each_bad_field():
    errors = validate_exam({
        'od_sphere': 25, 'od_cylinder': -11, 'od_axis': 181, 'od_pd': 40,
        'oi_sphere': -21, 'oi_cylinder': 10.5, 'oi_axis': 45.5, 'oi_pd': 90,
    })
    assert len(errors) == 8
    assert errors['od_sphere'] == 'Esfera OD debe estar entre -20 y 20'
    assert errors['oi_axis'] == 'Eje OI debe ser un entero entre 0 y 180'
    assert errors['od_pd'] == 'DP OD debe estar entre 50 y 80'


def test_validate_exam_all_valid():
    assert validate_exam({
        'od_sphere': -2.5, 'od_cylinder': -0.75, 'od_axis': 180, 'od_pd': 62,
        'oi_sphere': 1.25, 'oi_cylinder': 0, 'oi_axis': 0, 'oi_pd': 50,
    }) == {}


def test_validate_exam_ignores_unrelated_keys():
    assert validate_exam({'od_sphere': -1.5, 'comments': 'x' * 500}) == {}


# -- patient fields -----------------------------------------------------------
def test_missing_patient_fields():
    assert missing_patient_fields({}) == [
        'RUT', 'Nombres', 'Apellidos', 'Fecha de nacimiento', 'TelÃ©fono', 'Correo electrÃ³nico',
    ]
    complete = {
        'rut': '12345678-5', 'first_names': 'Ana', 'last_names': 'Rojas',
        'birth_date': date(1990, 1, 1), 'phone': '+56911111111', 'email': 'ana@example.cl',
    }
    assert missing_patient_fields(complete) == []
    assert missing_patient_fields({**complete, 'first_names': '   '}) == ['Nombres']


@pytest.mark.parametrize('birth,today,age', [
    (date(1990, 5, 10), date(2020, 5, 9), 29),
    (date(1990, 5, 10), date(2020, 5, 10), 30),
    (date(2000, 2, 29), date(2021, 2, 28), 20),
    (date(2000, 2, 29), date(2021, 3, 1), 21),
])
def test_calculate_age(birth, today, age):
    assert calculate_age(birth, today) == age
