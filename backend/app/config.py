from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

logger = logging.getLogger("starter.core.config")

DEV_NONCE_SECRET = "starter-dev-secret"

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _core_root() -> Path:
    # config.py -> app -> backend -> <core_root>
    return Path(__file__).resolve().parents[2]


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUE_VALUES


class WizardSettings(BaseModel):
    """
    Runtime settings for the setup wizard backend.

    - data_dir: where the option store keeps its JSON files.
    - wp_cli: WP-CLI executable (name on PATH or absolute path).
    - wp_path: WordPress root passed to WP-CLI as --path (optional).
    - site_url: public base URL of the site, used for admin-side callbacks.
    - multisite: network install; the final status is stored network-wide.
    """

    data_dir: Path = Field(default_factory=lambda: _core_root() / "data" / "wizard")
    wp_cli: str = "wp"
    wp_path: Optional[Path] = None
    wp_allow_root: bool = False
    site_url: str = "http://127.0.0.1"
    multisite: bool = False
    nonce_secret: str = DEV_NONCE_SECRET
    notify_timeout: float = 5.0

    def admin_url(self, path: str = "") -> str:
        return f"{self.site_url.rstrip('/')}/wp-admin/{path.lstrip('/')}"


def load_settings() -> WizardSettings:
    """Build settings from STARTER_* environment variables."""
    values: dict = {}

    data_dir = os.environ.get("STARTER_DATA_DIR")
    if data_dir:
        values["data_dir"] = Path(data_dir)

    wp_cli = os.environ.get("STARTER_WP_CLI")
    if wp_cli:
        values["wp_cli"] = wp_cli

    wp_path = os.environ.get("STARTER_WP_PATH")
    if wp_path:
        values["wp_path"] = Path(wp_path)

    site_url = os.environ.get("STARTER_SITE_URL")
    if site_url:
        values["site_url"] = site_url

    timeout = os.environ.get("STARTER_NOTIFY_TIMEOUT")
    if timeout:
        values["notify_timeout"] = float(timeout)

    values["wp_allow_root"] = _env_bool("STARTER_WP_ALLOW_ROOT")
    values["multisite"] = _env_bool("STARTER_MULTISITE")

    secret = os.environ.get("STARTER_NONCE_SECRET")
    if secret:
        values["nonce_secret"] = secret
    else:
        logger.warning("STARTER_NONCE_SECRET not set; using development nonce secret")

    settings = WizardSettings(**values)
    logger.info(
        f"Loaded settings: data_dir={settings.data_dir} "
        f"wp_cli={settings.wp_cli} multisite={settings.multisite}"
    )
    return settings
