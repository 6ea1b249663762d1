from __future__ import annotations

import logging
logger = logging.getLogger("starter.wizard.installer")

import threading
from typing import Any, Callable, List, Optional

from ..config import WizardSettings
from .models import InstallationStatus, InstallRequest, QueueItem, WizardResponse
from .notify import skip_oceanwp_activation
from .options_store import OptionStore
from .security import SecurityCheckError, verify_nonce
from .wp_cli import SUPPRESS_WOOCOMMERCE_PAGES, WpCli

# ----------------------------
# Option keys
# ----------------------------

QUEUE_OPTION = "siteground_wizard_installation_queue"
ERRORS_OPTION = "siteground_wizard_installation_errors"
STATUS_OPTION = "siteground_wizard_installation_status"
ASTRA_INSTALLED_OPTION = "siteground_wizard_installed_astra_theme"
EDD_STARTER_OPTION = "sg_wp_starter_edd"

OPTIMIZER_FLAGS = (
    "enable_cache",
    "autoflush_cache",
    "optimize_html",
    "optimize_javascript",
    "optimize_javascript_async",
    "optimize_css",
    "combine_css",
    "combine_google_fonts",
    "disable_emojis",
    "lazyload_images",
)

ACTIVATION_REDIRECT_TRANSIENTS = (
    "fs_plugin_foogallery_activated",
    "fs_theme_oceanwp_activated",
    "fs_plugin_ocean-posts-slider_activated",
    "fs_plugin_the-events-calendar_activated",
)


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


class WizardInstaller:
    """
    Installation queue and status for the setup wizard.

    Each queued item gets exactly one install attempt: it is evicted from the
    queue when its install starts, whatever the outcome.
    Queue and error-log updates are serialized on one lock.
    """

    def __init__(
        self,
        store: OptionStore,
        cli: WpCli,
        settings: WizardSettings,
        *,
        notify: Optional[Callable[[WizardSettings], None]] = None,
    ):
        self.store = store
        self.cli = cli
        self.settings = settings
        self.notify = notify or skip_oceanwp_activation
        self._state_lock = threading.Lock()

    # ----------------------------
    # Queue
    # ----------------------------

    def get_queue(self) -> List[dict]:
        return list(self.store.get(QUEUE_OPTION, []) or [])

    def enqueue(self, items: List[QueueItem]) -> List[dict]:
        with self._state_lock:
            queue = self.get_queue()
            queued_ids = {entry.get("id") for entry in queue}
            for item in items:
                if item.id in queued_ids:
                    logger.debug(f"Item already queued, skipping: {item.id}")
                    continue
                queue.append(item.model_dump(exclude_none=True))
                queued_ids.add(item.id)
            self.store.set(QUEUE_OPTION, queue)
        logger.info(f"Queue now holds {len(queue)} item(s)")
        return queue

    def remove_from_queue(self, item_id: str) -> None:
        with self._state_lock:
            queue = self.get_queue()
            if not queue:
                return

            index = next(
                (i for i, entry in enumerate(queue) if entry.get("id") == item_id),
                None,
            )
            if index is None:
                logger.debug(f"Item not in queue: {item_id}")
                return

            del queue[index]
            self.store.set(QUEUE_OPTION, queue)
        logger.info(f"Removed {item_id} from installation queue")

    # ----------------------------
    # Status
    # ----------------------------

    def get_status(self) -> InstallationStatus:
        raw = self.store.get(STATUS_OPTION, None, network=self.settings.multisite)
        if raw:
            return InstallationStatus.model_validate(raw)
        return InstallationStatus(errors=self._errors())

    def _errors(self) -> List[str]:
        return list(self.store.get(ERRORS_OPTION, []) or [])

    def _record_error(self, message: str) -> None:
        with self._state_lock:
            errors = self._errors()
            errors.append(message)
            self.store.set(ERRORS_OPTION, errors)

    # ----------------------------
    # Wizard steps
    # ----------------------------

    def install(self, request: InstallRequest) -> WizardResponse:
        self.remove_from_queue(request.id)

        exec_code = [SUPPRESS_WOOCOMMERCE_PAGES]

        # The EDD flavour of the starter ships without theme installs.
        if _as_int(self.store.get(EDD_STARTER_OPTION)) == 1 and request.type == "theme":
            logger.info(f"Theme installs disabled; skipping {request.slug}")
            return WizardResponse.ok()

        logger.info(f"Installing {request.type} '{request.slug}' (id={request.id})")
        result = self.cli.install(
            request.type,
            request.target,
            activate=True,
            skip_packages=True,
            exec_code=exec_code,
        )

        if not result.ok:
            self._record_error(f"Cannot install {request.type}: {request.slug}")
            return WizardResponse.error()

        # Lets other code tell wizard-installed Astra apart from a manual install.
        if request.type == "theme" and request.slug == "astra":
            self.store.set(ASTRA_INSTALLED_OPTION, 1)

        return WizardResponse.ok()

    def _check_nonce(self, plugin: str, nonce: Optional[str]) -> None:
        if not verify_nonce(nonce, plugin, self.settings.nonce_secret):
            logger.warning(f"Nonce check failed for plugin '{plugin}'")
            raise SecurityCheckError()

    def install_from_dashboard(
        self,
        plugin: str,
        nonce: Optional[str],
        activate: bool = True,
    ) -> WizardResponse:
        self._check_nonce(plugin, nonce)

        result = self.cli.install("plugin", plugin, activate=activate)
        self.clean_plugins_cache()

        if not result.ok:
            return WizardResponse.error()
        return WizardResponse.ok()

    def activate_from_dashboard(self, plugin: str, nonce: Optional[str]) -> WizardResponse:
        self._check_nonce(plugin, nonce)

        result = self.cli.activate("plugin", plugin)
        self.clean_plugins_cache()

        if not result.ok:
            return WizardResponse.error()
        return WizardResponse.ok()

    def clean_plugins_cache(self) -> None:
        self.store.delete_transient("update_plugins", network=True)
        self.store.delete_transient("plugin_slugs")
        self.store.flush_cache()

    def complete(self) -> WizardResponse:
        with self._state_lock:
            errors = self._errors()
            status = InstallationStatus(status="completed", errors=errors)
            self.store.set(STATUS_OPTION, status.model_dump(), network=self.settings.multisite)
            self.store.delete(ERRORS_OPTION)

        self.configure_other_plugins()

        try:
            self.notify(self.settings)
        except Exception as e:
            logger.warning(f"OceanWP skip-activation request failed (ignored): {e}")

        logger.info(f"Wizard run completed with {len(errors)} error(s)")
        return WizardResponse.ok()

    def configure_other_plugins(self) -> None:
        store = self.store

        for flag in OPTIMIZER_FLAGS:
            store.set(f"siteground_optimizer_{flag}", 1)

        store.set("siteground_optimizer_excluded_lazy_load_media_types", ["lazyload_shortcodes"])

        for transient in ACTIVATION_REDIRECT_TRANSIENTS:
            store.delete_transient(transient)

        # AIOSEO + Otter blocks redirects
        store.delete("_aioseo_cache_activation_redirect")
        store.delete("_aioseo_cache_expiration_activation_redirect")
        store.set("themeisle_blocks_settings_redirect", 0)
        store.set("aioseo_activation_redirect", True)

        # OptinMonster
        store.set("optin_monster_api_activation_redirect_disabled", True)
        store.delete_transient("optin_monster_api_activation_redirect")

        # MonsterInsights
        store.delete_transient("_monsterinsights_activation_redirect")

        # Modern Events Calendar
        store.delete("mec_activation_redirect")

        store.flush_cache()
