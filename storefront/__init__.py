"""Storefront: users, products and orders behind a JWT-gated REST API."""

__version__ = "0.1.0"
