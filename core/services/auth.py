"""
Password hashing, login and access tokens.

Tokens are stateless HS256 JWTs minted with simplejwt's ``AccessToken``
and signed with ``settings.JWT_SECRET``. There is no server-side
revocation: a token stops being accepted only when it expires, which is
why logout is a no-op.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from django.contrib.auth.hashers import make_password
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from rest_framework.exceptions import ValidationError as DRFValidation
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken

from core.exceptions import InvalidCredentials, InvalidToken
from core.logging import get_logger
from core.models import Role, User

logger = get_logger(__name__)


@dataclass(frozen=True)
class Identity:
    """The verified caller, attached to the request as ``request.user``."""
    user_id: int
    username: str
    role: Role

    is_authenticated = True

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass(frozen=True)
class LoginResult:
    user: User
    token: str


def hash_password(plaintext: str) -> str:
    """Hash with the first configured hasher (bcrypt-SHA256, 12 rounds)."""
    return make_password(plaintext)


def mint_token(user_id: int, username: str, role: Role | str, lifetime: Optional[timedelta] = None) -> str:
    """Return a signed token for the identity.

    ``lifetime`` defaults to ``SIMPLE_JWT['ACCESS_TOKEN_LIFETIME']``.
    """
    token = AccessToken()
    if lifetime is not None:
        token.set_exp(lifetime=lifetime)
    token[api_settings.USER_ID_CLAIM] = user_id
    token["username"] = username
    token["role"] = Role(role).value
    return str(token)


def verify_token(raw: str) -> Identity:
    """Decode ``raw`` or raise :class:`InvalidToken`.

    Rejects bad signatures, malformed tokens, expired tokens, tokens of
    another type and tokens whose claims do not describe an identity.
    """
    try:
        token = AccessToken(raw)
    except TokenError as e:
        logger.info("token_rejected", reason=str(e))
        raise InvalidToken() from e
    try:
        return Identity(
            user_id=int(token[api_settings.USER_ID_CLAIM]),
            username=str(token["username"]),
            role=Role(token["role"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        logger.info("token_rejected", reason="bad claims")
        raise InvalidToken() from e


def identity_for(user: User) -> Identity:
    return Identity(user_id=user.pk, username=user.username, role=Role(user.role))


def login(username: str, password: str) -> LoginResult:
    """Check credentials and mint a token.

    Unknown usernames and wrong passwords raise the same error. A hash is
    still computed for unknown usernames so the response time does not
    tell them apart.
    """
    user = User.objects.filter(username=username).first()
    if user is None:
        make_password(password)
        logger.info("login_failed", username=username)
        raise InvalidCredentials()
    if not user.is_active or not user.check_password(password):
        logger.info("login_failed", username=username)
        raise InvalidCredentials()

    token = mint_token(user.pk, user.username, user.role)
    logger.info("login_succeeded", username=user.username, role=user.role)
    return LoginResult(user=user, token=token)


def create_user(*, username: str, password: str, role: Role | str = Role.USER, name: str = "") -> User:
    user = User(username=username, role=Role(role), name=name)
    try:
        validate_password(password, user)
    except ValidationError as e:
        raise DRFValidation({"password": e.messages})
    user.password = hash_password(password)
    user.save()
    logger.info("user_created", username=username, role=user.role)
    return user
