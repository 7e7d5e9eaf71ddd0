"""Access control evaluated before any handler runs.

Every API route is looked up in ``POLICY`` by method and path. Routes the
table does not list need a valid token.
"""
import enum
import logging
import re
from typing import Optional

from fastapi import Request

from storefront import config
from storefront.errors import Forbidden, Unauthorized
from storefront.security import Identity, decode_token

logger = logging.getLogger(__name__)


class Access(enum.Enum):
    PUBLIC = "public"
    AUTHENTICATED = "authenticated"
    ADMIN = "admin"


# (methods, path pattern relative to the API prefix, requirement)
POLICY = [
    ({"POST"}, "/auth/register", Access.PUBLIC),
    ({"POST"}, "/auth/login", Access.PUBLIC),
    ({"GET"}, "/health", Access.PUBLIC),
    ({"GET"}, "/products", Access.PUBLIC),
    ({"GET"}, "/products/{id}", Access.PUBLIC),
    ({"POST"}, "/products", Access.ADMIN),
    ({"PUT", "DELETE"}, "/products/{id}", Access.ADMIN),
    ({"POST", "GET"}, "/orders", Access.AUTHENTICATED),
    ({"GET"}, "/orders/{id}", Access.AUTHENTICATED),
    ({"POST"}, "/admin/products", Access.ADMIN),
    ({"PUT", "DELETE"}, "/admin/products/{id}", Access.ADMIN),
    ({"PUT"}, "/admin/orders/{id}/status", Access.ADMIN),
    ({"GET"}, "/admin/users", Access.ADMIN),
]


def _compile(pattern, prefix):
    regex = re.sub(r"\\\{\w+\\\}", r"[^/]+", re.escape(prefix + pattern))
    return re.compile(f"^{regex}$")


def compile_policy(policy, prefix):
    return [(methods, _compile(pattern, prefix), access) for methods, pattern, access in policy]


_compiled = compile_policy(POLICY, config.API_PREFIX)


def required_access(method, path, table=None):
    if len(path) > 1:
        path = path.rstrip("/")
    for methods, regex, access in table or _compiled:
        if method in methods and regex.match(path):
            return access
    return Access.AUTHENTICATED


def identity_from_header(authorization):
    if not authorization:
        raise Unauthorized("Token is missing")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthorized("Invalid authorization header")
    return decode_token(token.strip())


def authorize(request: Request) -> Optional[Identity]:
    """Applies the policy table to the request.

    Returns the caller's identity for protected routes and None for public
    ones. Raises Unauthorized for a missing or bad token and Forbidden when
    the token's role is not enough.
    """
    access = required_access(request.method, request.url.path)
    if access is Access.PUBLIC:
        return None

    identity = identity_from_header(request.headers.get("Authorization"))
    if access is Access.ADMIN and not identity.is_admin:
        logger.warning("Denied %s %s to %s", request.method, request.url.path, identity.username)
        raise Forbidden("Admins only")
    return identity
