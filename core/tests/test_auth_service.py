import base64
import json
from datetime import timedelta

import pytest

from core.exceptions import InvalidCredentials, InvalidToken
from core.models import Role, User
from core.services.auth import create_user, hash_password, login, mint_token, verify_token

pytestmark = pytest.mark.django_db


def _tamper_payload(token: str) -> str:
    header, payload, signature = token.split('.')
    padded = payload + '=' * (-len(payload) % 4)
    claims = json.loads(base64.urlsafe_b64decode(padded))
    claims['role'] = 'ADMIN'
    forged = base64.urlsafe_b64encode(json.dumps(claims).encode()).decode().rstrip('=')
    return '.'.join([header, forged, signature])


def test_minted_token_verifies_to_same_identity():
    token = mint_token(7, 'ana', Role.USER)
    identity = verify_token(token)
    assert identity.user_id == 7
    assert identity.username == 'ana'
    assert identity.role == Role.USER
    assert not identity.is_admin


def test_expired_token_is_rejected():
    token = mint_token(7, 'ana', Role.ADMIN, lifetime=timedelta(seconds=-30))
    with pytest.raises(InvalidToken):
        verify_token(token)


def test_tampered_payload_is_rejected():
    token = mint_token(7, 'ana', Role.USER)
    with pytest.raises(InvalidToken):
        verify_token(_tamper_payload(token))


@pytest.mark.parametrize('raw', ['', 'not-a-token', 'a.b.c'])
def test_garbage_is_rejected(raw):
    with pytest.raises(InvalidToken):
        verify_token(raw)


def test_token_signed_with_other_secret_is_rejected():
    from rest_framework_simplejwt.backends import TokenBackend
    from rest_framework_simplejwt.tokens import AccessToken

    claims = AccessToken(mint_token(7, 'ana', Role.USER)).payload
    forged = TokenBackend('HS256', 'some-other-secret-' * 3).encode(claims)
    with pytest.raises(InvalidToken):
        verify_token(forged)


def test_password_hash_is_bcrypt_and_salted():
    a = hash_password('Clave-Segura-123')
    b = hash_password('Clave-Segura-123')
    assert a.startswith('bcrypt_sha256$')
    assert a != b


def test_login_returns_token_for_valid_credentials():
    create_user(username='doc', password='Clave-Segura-123', role=Role.ADMIN, name='Dra. Soto')
    result = login('doc', 'Clave-Segura-123')
    assert result.user.username == 'doc'
    identity = verify_token(result.token)
    assert identity.role == Role.ADMIN
    assert identity.user_id == result.user.pk


def test_login_failures_are_indistinguishable():
    create_user(username='doc', password='Clave-Segura-123')
    with pytest.raises(InvalidCredentials) as wrong_password:
        login('doc', 'nope')
    with pytest.raises(InvalidCredentials) as unknown_user:
        login('ghost', 'nope')
    assert str(wrong_password.value.detail) == str(unknown_user.value.detail)


def test_inactive_user_cannot_login():
    user = create_user(username='doc', password='Clave-Segura-123')
    User.objects.filter(pk=user.pk).update(is_active=False)
    with pytest.raises(InvalidCredentials):
        login('doc', 'Clave-Segura-123')


def test_create_user_rejects_weak_password():
    from rest_framework.exceptions import ValidationError
    with pytest.raises(ValidationError):
        create_user(username='doc', password='123')
    assert not User.objects.filter(username='doc').exists()


def test_single_flipped_character_is_rejected():
    token = mint_token(7, 'ana', Role.USER)
    header, payload, signature = token.split('.')
    i = len(payload) // 2
    flipped = payload[:i] + ('A' if payload[i] != 'A' else 'B') + payload[i + 1:]
    with pytest.raises(InvalidToken):
        verify_token('.'.join([header, flipped, signature]))
