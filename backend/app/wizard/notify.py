from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urlencode

import requests

from ..config import WizardSettings
from .security import create_nonce

logger = logging.getLogger("starter.wizard.notify")

OCEANWP_SKIP_ACTION = "oceanwp-theme_skip_activation"


def oceanwp_skip_url(settings: WizardSettings) -> str:
    query = urlencode(
        {
            "fs_action": OCEANWP_SKIP_ACTION,
            "page": "oceanwp-panel",
            "_wpnonce": create_nonce(OCEANWP_SKIP_ACTION, settings.nonce_secret),
        }
    )
    return settings.admin_url(f"admin.php?{query}")


def skip_oceanwp_activation(
    settings: WizardSettings,
    session: Optional[requests.Session] = None,
) -> None:
    """
    Ask the OceanWP theme admin panel to skip its first-run activation screen.

    Raises on connection errors; callers treat this as best-effort.
    """
    url = oceanwp_skip_url(settings)
    http = session or requests
    logger.debug(f"GET {url}")
    resp = http.get(url, timeout=settings.notify_timeout)
    logger.info(f"OceanWP skip-activation request returned HTTP {resp.status_code}")
