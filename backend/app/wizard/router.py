from __future__ import annotations
import logging

logger = logging.getLogger("starter.wizard.router")

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse

from ..config import load_settings
from .installer import WizardInstaller
from .models import EnqueueRequest, InstallationStatus, InstallRequest, QueueItem, WizardResponse
from .options_store import OptionStore
from .security import SecurityCheckError
from .wp_cli import WpCli

router = APIRouter(prefix="/api/wizard", tags=["wizard"])

# Plugin targets are positional WP-CLI arguments; nothing that reads as a flag.
PLUGIN_PATTERN = r"^\s*[^\s-]"

# ----------------------------
# Singleton (built on first use)
# ----------------------------

_installer: Optional[WizardInstaller] = None


def get_wizard_installer() -> WizardInstaller:
    global _installer
    if _installer is None:
        settings = load_settings()
        _installer = WizardInstaller(
            store=OptionStore(settings.data_dir),
            cli=WpCli(
                binary=settings.wp_cli,
                wp_path=settings.wp_path,
                allow_root=settings.wp_allow_root,
            ),
            settings=settings,
        )
    return _installer


def _security_check_response(exc: SecurityCheckError) -> PlainTextResponse:
    return PlainTextResponse(exc.message, status_code=403)


# ----------------------------
# Wizard steps
# ----------------------------

@router.post("/install", response_model=WizardResponse, response_model_exclude_none=True)
def install(
    req: InstallRequest,
    installer: WizardInstaller = Depends(get_wizard_installer),
) -> WizardResponse:
    logger.info(f"POST /install called for {req.type} '{req.slug}' (id={req.id})")
    return installer.install(req)


@router.post("/complete", response_model=WizardResponse, response_model_exclude_none=True)
def complete(installer: WizardInstaller = Depends(get_wizard_installer)) -> WizardResponse:
    logger.info("POST /complete called")
    return installer.complete()


# ----------------------------
# Dashboard (nonce-protected, query parameters)
# ----------------------------

@router.get("/install-from-dashboard", response_model=WizardResponse, response_model_exclude_none=True)
def install_from_dashboard(
    plugin: str = Query(..., pattern=PLUGIN_PATTERN, description="Plugin slug or package URL"),
    nonce: Optional[str] = Query(default=None),
    activate: bool = Query(default=True),
    installer: WizardInstaller = Depends(get_wizard_installer),
):
    logger.info(f"GET /install-from-dashboard called for plugin: {plugin}")
    try:
        return installer.install_from_dashboard(plugin, nonce, activate=activate)
    except SecurityCheckError as exc:
        return _security_check_response(exc)


@router.get("/activate-from-dashboard", response_model=WizardResponse, response_model_exclude_none=True)
def activate_from_dashboard(
    plugin: str = Query(..., pattern=PLUGIN_PATTERN, description="Plugin slug"),
    nonce: Optional[str] = Query(default=None),
    installer: WizardInstaller = Depends(get_wizard_installer),
):
    logger.info(f"GET /activate-from-dashboard called for plugin: {plugin}")
    try:
        return installer.activate_from_dashboard(plugin, nonce)
    except SecurityCheckError as exc:
        return _security_check_response(exc)


# ----------------------------
# Queue + status views
# ----------------------------

@router.get("/queue", response_model=list[QueueItem])
def get_queue(installer: WizardInstaller = Depends(get_wizard_installer)) -> list[QueueItem]:
    return [QueueItem.model_validate(entry) for entry in installer.get_queue()]


@router.post("/queue", response_model=list[QueueItem])
def enqueue(
    req: EnqueueRequest,
    installer: WizardInstaller = Depends(get_wizard_installer),
) -> list[QueueItem]:
    logger.info(f"POST /queue called with {len(req.items)} item(s)")
    queue = installer.enqueue(req.items)
    return [QueueItem.model_validate(entry) for entry in queue]


@router.get("/status", response_model=InstallationStatus)
def get_status(installer: WizardInstaller = Depends(get_wizard_installer)) -> InstallationStatus:
    return installer.get_status()
