import logging
import os

from bloginno.rules.models import Rules

logger = logging.getLogger(__name__)

ADMIN_PASSWORD_HASH_ENV = "BLOGINNO_ADMIN_PASSWORD_HASH"
MEDIA_API_KEY_ENV = "BLOGINNO_MEDIA_API_KEY"
MEDIA_API_SECRET_ENV = "BLOGINNO_MEDIA_API_SECRET"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Set up root logging once for the process."""
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level}")
    logging.basicConfig(level=numeric, format=LOG_FORMAT)


def validate_ops_rules(rules: Rules) -> None:
    """
    Validate operational requirements before startup.
    Raises ValueError listing every missing required environment variable.
    """
    missing = [name for name in rules.ops.required_env if not os.environ.get(name)]
    if missing:
        logger.critical("Missing required environment variables: %s", ", ".join(missing))
        raise ValueError(f"Missing required environment variables: {', '.join(missing)}")

    logger.info("Configuration validated.")


def admin_password_hash() -> str | None:
    return os.environ.get(ADMIN_PASSWORD_HASH_ENV) or None


def media_credentials() -> tuple[str, str] | None:
    """API key/secret pair for signed media deletion, if both are set."""
    key = os.environ.get(MEDIA_API_KEY_ENV)
    secret = os.environ.get(MEDIA_API_SECRET_ENV)
    if key and secret:
        return key, secret
    return None
