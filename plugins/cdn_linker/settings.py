"""Builds the CDN linker configuration from Pelican settings and the environment."""

import logging
import os
from pathlib import Path

from .processor import DEPLOY, CDNLinkerConfig

_log = logging.getLogger(__name__)

FALSE_VALUES = {"false", "0", "no", "off", ""}

# Pelican setting name -> CDNLinkerConfig field
SETTING_FIELDS = {
    "CDN_ENABLE_IMAGES": "enable_images",
    "CDN_ENABLE_CSS": "enable_css",
    "CDN_ENABLE_JS": "enable_js",
    "CDN_ENABLE_FONTS": "enable_fonts",
    "CDN_ENABLE_JSON_FEED": "enable_json_feed",
    "CDN_ENABLE_XML_FEED": "enable_xml_feed",
    "CDN_ENABLE_SITEMAP": "enable_sitemap",
}


def load_env_variable(key: str, env_path: Path | None = None) -> str | None:
    """Load an environment variable from the environment or a .env file.

    First checks the system environment variables, then falls back to reading
    from a .env file if the variable is not found in the environment.

    Args:
        key: The environment variable name to load
        env_path: Path to the .env file. If None, uses the site root .env file.

    Returns:
        The value of the variable, or None if it is set in neither place
    """
    env_value = os.environ.get(key)
    if env_value is not None:
        return env_value

    if env_path is None:
        env_path = Path(__file__).parent.parent.parent / ".env"

    if not env_path.exists():
        return None

    with open(env_path, "r") as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#"):
                if "=" in line:
                    var_key, value = line.split("=", 1)
                    if var_key.strip() == key:
                        return value.strip()

    return None


def as_bool(value) -> bool:
    """Coerce a setting to bool, treating "false", "0", "no" and "off" strings as False."""
    if isinstance(value, str):
        return value.strip().lower() not in FALSE_VALUES
    return bool(value)


def load_config(settings: dict, env_path: Path | None = None) -> CDNLinkerConfig:
    """
    Build the configuration for one Pelican run.

    CDN_LINKER_URL overrides CDN_URL, and CDN_LINKER_ENABLED=false turns the
    plugin off by clearing the CDN URL.

    Args:
        settings: Pelican settings
        env_path: Optional .env file to read overrides from

    Returns:
        CDNLinkerConfig instance
    """
    cdn_url = settings.get("CDN_URL") or ""

    env_url = load_env_variable("CDN_LINKER_URL", env_path)
    if env_url is not None:
        cdn_url = env_url

    enabled = load_env_variable("CDN_LINKER_ENABLED", env_path)
    if enabled is not None and not as_bool(enabled):
        _log.info("CDN linker disabled by CDN_LINKER_ENABLED")
        cdn_url = ""

    flags = {
        field: as_bool(settings.get(name, False))
        for name, field in SETTING_FIELDS.items()
    }
    return CDNLinkerConfig(cdn_url=cdn_url, **flags)


def load_mode(settings: dict, env_path: Path | None = None) -> str:
    """Return the processing mode: CDN_LINKER_CONTEXT, then CDN_CONTEXT, then "deploy"."""
    mode = load_env_variable("CDN_LINKER_CONTEXT", env_path)
    if mode is None:
        mode = settings.get("CDN_CONTEXT") or DEPLOY
    return mode.strip().lower()
