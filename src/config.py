import os
import logging
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


class ConfigurationError(Exception):
    """Raised when a required environment variable is not set."""
    pass


def _as_bool(value: Optional[str], default: bool) -> bool:
    if value is None or value == '':
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _as_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == '':
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")


class Config:
    # Canvas
    OAUTH_TOKEN = os.getenv('OAUTH_TOKEN')
    CANVAS_HOST = (os.getenv('CANVAS_HOST') or '').rstrip('/') or None
    ACCOUNT_ID = os.getenv('ACCOUNT_ID')

    # CPN assets
    AMAZON_S3_BUCKET_URL = os.getenv('AMAZON_S3_BUCKET_URL')
    CPN_SCRIPT_PATH = os.getenv('CPN_SCRIPT_PATH', './canvas-where-am-I.js')
    CPN_STYLE_PATH = os.getenv('CPN_STYLE_PATH', './canvas-where-am-I.css')

    # Browser
    HEADLESS = _as_bool(os.getenv('HEADLESS'), True)
    # Canvas sometimes stalls for 60 seconds, keep this above that.
    PAGE_TIMEOUT_MS = _as_int('PAGE_TIMEOUT_MS', 90000)

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    @classmethod
    def reload(cls) -> None:
        """Re-read every setting from the environment."""
        cls.OAUTH_TOKEN = os.getenv('OAUTH_TOKEN')
        cls.CANVAS_HOST = (os.getenv('CANVAS_HOST') or '').rstrip('/') or None
        cls.ACCOUNT_ID = os.getenv('ACCOUNT_ID')
        cls.AMAZON_S3_BUCKET_URL = os.getenv('AMAZON_S3_BUCKET_URL')
        cls.CPN_SCRIPT_PATH = os.getenv('CPN_SCRIPT_PATH', './canvas-where-am-I.js')
        cls.CPN_STYLE_PATH = os.getenv('CPN_STYLE_PATH', './canvas-where-am-I.css')
        cls.HEADLESS = _as_bool(os.getenv('HEADLESS'), True)
        cls.PAGE_TIMEOUT_MS = _as_int('PAGE_TIMEOUT_MS', 90000)
        cls.LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    @classmethod
    def require(cls, *names: str) -> None:
        """Fail fast when any of the named settings is empty.

        Args:
            names: Attribute names, e.g. 'OAUTH_TOKEN', 'CANVAS_HOST'

        Raises:
            ConfigurationError: Naming the first missing variable
        """
        for name in names:
            if not getattr(cls, name, None):
                raise ConfigurationError(f"You must set the environmental variable {name}")


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for suite runs."""
    logging.basicConfig(
        level=getattr(logging, (level or Config.LOG_LEVEL).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
