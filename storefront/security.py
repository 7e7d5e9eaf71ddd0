from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from werkzeug.security import check_password_hash, generate_password_hash

from storefront import config
from storefront.errors import Unauthorized
from storefront.models import Role


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, as read from a verified token."""

    username: str
    role: Role

    @property
    def is_admin(self):
        return self.role == Role.ADMIN


def hash_password(password):
    return generate_password_hash(password)


def verify_password(password_hash, password):
    return check_password_hash(password_hash, password)


def create_token(username, role, now=None):
    issued_at = now or datetime.now(timezone.utc)
    token_data = {
        "sub": username,
        "role": Role(role).value,
        "iat": issued_at,
        "exp": issued_at + timedelta(hours=config.TOKEN_EXPIRATION_HOURS),
    }
    return jwt.encode(token_data, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_token(token):
    try:
        payload = jwt.decode(
            token,
            config.JWT_SECRET_KEY,
            algorithms=[config.JWT_ALGORITHM],
            options={"require": ["sub", "exp", "iat"]},
        )
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Token has expired")
    except jwt.InvalidTokenError:
        raise Unauthorized("Invalid token")

    try:
        role = Role(payload.get("role"))
    except ValueError:
        raise Unauthorized("Invalid token")
    return Identity(username=payload["sub"], role=role)
