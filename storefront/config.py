import logging
import os
import sys

# ------------------------------------------------------------
# Configuration
# ------------------------------------------------------------

DATABASE_URL = os.getenv("STORE_DATABASE_URL", "sqlite:///./storefront.db")

# JWT config
JWT_SECRET_KEY = os.getenv("STORE_JWT_SECRET_KEY", "dev_jwt_secret_key_change_me_in_production")
JWT_ALGORITHM = os.getenv("STORE_JWT_ALGORITHM", "HS256")
TOKEN_EXPIRATION_HOURS = int(os.getenv("STORE_TOKEN_EXPIRATION_HOURS", "24"))

API_PREFIX = os.getenv("STORE_API_PREFIX", "/api")

LOG_LEVEL = os.getenv("STORE_LOG_LEVEL", "INFO")

# optional administrator created at startup, registration only creates plain users
ADMIN_USERNAME = os.getenv("STORE_ADMIN_USERNAME")
ADMIN_EMAIL = os.getenv("STORE_ADMIN_EMAIL")
ADMIN_PASSWORD = os.getenv("STORE_ADMIN_PASSWORD")

HOST = os.getenv("STORE_HOST", "0.0.0.0")
PORT = int(os.getenv("STORE_PORT", "8000"))


def setup_logging(level=None):
    """Configures the ``storefront`` logger once."""
    logger = logging.getLogger("storefront")
    logger.setLevel(level or LOG_LEVEL)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(handler)
    return logger
