from __future__ import annotations

import copy
import json
import logging
import threading
import time
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger("starter.wizard.options")

SCOPE_SITE = "site"
SCOPE_NETWORK = "network"

_MISSING = object()


class OptionStoreError(RuntimeError):
    pass


class OptionStore:
    """
    Persisted key-value options, one JSON file per scope.

    - site scope:    <data_dir>/options-site.json
    - network scope: <data_dir>/options-network.json

    Reads go through an in-memory object cache; flush_cache() drops it.
    Values handed out are copies; only set() changes what is stored.
    Transients are stored as `_transient_<key>` with an optional
    `_transient_timeout_<key>` unix timestamp next to them.
    """

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()
        self._cache: Dict[str, Dict[str, Any]] = {}
        logger.info(f"OptionStore initialized, data_dir={self.data_dir}")

    # ----------------------------
    # File IO
    # ----------------------------

    def _path(self, scope: str) -> Path:
        return self.data_dir / f"options-{scope}.json"

    def _load(self, scope: str) -> Dict[str, Any]:
        cached = self._cache.get(scope)
        if cached is not None:
            return cached

        p = self._path(scope)
        if not p.exists():
            data: Dict[str, Any] = {}
        else:
            try:
                data = json.loads(p.read_text(encoding="utf-8"))
            except Exception as e:
                logger.error(f"Failed to load options file {p}: {e}")
                raise OptionStoreError(f"Failed to load options file {p}: {e}")
            if not isinstance(data, dict):
                raise OptionStoreError(f"Options file {p} does not hold an object")

        self._cache[scope] = data
        return data

    def _save(self, scope: str, data: Dict[str, Any]) -> None:
        p = self._path(scope)
        tmp = p.with_suffix(".json.tmp")
        tmp.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")
        tmp.replace(p)
        self._cache[scope] = data

    @staticmethod
    def _scope(network: bool) -> str:
        return SCOPE_NETWORK if network else SCOPE_SITE

    # ----------------------------
    # Options
    # ----------------------------

    def get(self, key: str, default: Any = None, *, network: bool = False) -> Any:
        with self._lock:
            data = self._load(self._scope(network))
            if key not in data:
                return default
            return copy.deepcopy(data[key])

    def set(self, key: str, value: Any, *, network: bool = False) -> None:
        scope = self._scope(network)
        with self._lock:
            data = dict(self._load(scope))
            data[key] = copy.deepcopy(value)
            self._save(scope, data)
        logger.debug(f"Set option {scope}:{key}")

    def delete(self, key: str, *, network: bool = False) -> bool:
        scope = self._scope(network)
        with self._lock:
            data = self._load(scope)
            if key not in data:
                return False
            data = dict(data)
            del data[key]
            self._save(scope, data)
        logger.debug(f"Deleted option {scope}:{key}")
        return True

    # ----------------------------
    # Transients
    # ----------------------------

    @staticmethod
    def _transient_keys(key: str) -> tuple[str, str]:
        return f"_transient_{key}", f"_transient_timeout_{key}"

    def get_transient(self, key: str, default: Any = None, *, network: bool = False) -> Any:
        value_key, timeout_key = self._transient_keys(key)
        with self._lock:
            data = self._load(self._scope(network))
            value = data.get(value_key, _MISSING)
            if value is _MISSING:
                return default
            expires_at = data.get(timeout_key)
            if expires_at and float(expires_at) < time.time():
                self.delete_transient(key, network=network)
                return default
            return copy.deepcopy(value)

    def set_transient(
        self,
        key: str,
        value: Any,
        expiration: int = 0,
        *,
        network: bool = False,
    ) -> None:
        """Store a transient; expiration is in seconds, 0 means no expiry."""
        scope = self._scope(network)
        value_key, timeout_key = self._transient_keys(key)
        with self._lock:
            data = dict(self._load(scope))
            data[value_key] = copy.deepcopy(value)
            if expiration > 0:
                data[timeout_key] = int(time.time()) + int(expiration)
            else:
                data.pop(timeout_key, None)
            self._save(scope, data)

    def delete_transient(self, key: str, *, network: bool = False) -> bool:
        scope = self._scope(network)
        value_key, timeout_key = self._transient_keys(key)
        with self._lock:
            data = self._load(scope)
            if value_key not in data and timeout_key not in data:
                return False
            data = dict(data)
            existed = data.pop(value_key, _MISSING) is not _MISSING
            data.pop(timeout_key, None)
            self._save(scope, data)
        logger.debug(f"Deleted transient {scope}:{key}")
        return existed

    # ----------------------------
    # Object cache
    # ----------------------------

    def flush_cache(self, scope: Optional[str] = None) -> None:
        with self._lock:
            if scope is None:
                self._cache.clear()
            else:
                self._cache.pop(scope, None)
        logger.debug("Flushed option object cache")
