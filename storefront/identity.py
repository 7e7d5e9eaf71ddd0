import logging

from sqlalchemy.exc import IntegrityError

from storefront.errors import Conflict, Forbidden, Unauthorized
from storefront.models import Role, User
from storefront.repository import UserRepository
from storefront.schemas import AuthResponse
from storefront.security import create_token, hash_password, verify_password

logger = logging.getLogger(__name__)


def _auth_response(user):
    return AuthResponse(token=create_token(user.username, user.role), username=user.username, role=user.role)


def _create_user(db, username, email, password, role):
    users = UserRepository(db)
    if users.username_or_email_taken(username, email):
        raise Conflict("Username or Email already registered")

    new_user = User(username=username, email=email, password_hash=hash_password(password), role=role)
    try:
        users.add(new_user)
        db.commit()
    except IntegrityError:
        # lost a race with a concurrent registration of the same name
        db.rollback()
        raise Conflict("Username or Email already registered")
    return new_user


def register(db, username, email, password):
    user = _create_user(db, username, email, password, Role.USER)
    logger.info("Registered user %s", username)
    return _auth_response(user)


def login(db, username, password):
    user = UserRepository(db).find_by_username(username)
    if not user or not verify_password(user.password_hash, password):
        logger.warning("Failed login for %s", username)
        raise Unauthorized("Invalid credentials")
    return _auth_response(user)


def resolve(db, identity):
    """Looks up the user record behind an authenticated identity."""
    if identity is None:
        raise Unauthorized()
    user = UserRepository(db).find_by_username(identity.username)
    if not user:
        raise Unauthorized("User not found")
    return user


def ensure_admin(db, username, email, password):
    """Creates the administrator account unless the username already exists."""
    existing = UserRepository(db).find_by_username(username)
    if existing:
        if existing.role != Role.ADMIN:
            logger.warning(
                "Administrator %s not created: username belongs to a %s account", username, existing.role.value
            )
        return existing
    user = _create_user(db, username, email, password, Role.ADMIN)
    logger.info("Created administrator %s", username)
    return user


def list_users(db, identity):
    if resolve(db, identity).role != Role.ADMIN:
        raise Forbidden("Admins only")
    return UserRepository(db).list()
