from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

logger = logging.getLogger("starter.wizard.wp_cli")

# Keeps WooCommerce from creating its default shop/cart/checkout pages while
# it is being installed by the wizard.
SUPPRESS_WOOCOMMERCE_PAGES = "add_filter( 'woocommerce_create_pages', '__return_empty_array' );"


@dataclass
class ExitResult:
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


def is_safe_target(target: str) -> bool:
    """A package target is positional; anything WP-CLI would parse as a flag is refused."""
    return bool(target) and not target.lstrip().startswith("-")


def _rejected(target: str) -> ExitResult:
    logger.error(f"Refusing to dispatch option-like package target: {target!r}")
    return ExitResult(exit_code=2, stdout="", stderr=f"invalid package target: {target!r}")


class WpCli:
    """
    Runs WP-CLI package commands as argv lists (never through a shell).
    """

    def __init__(
        self,
        binary: str = "wp",
        wp_path: Optional[Path] = None,
        allow_root: bool = False,
    ):
        self.binary = binary
        self.wp_path = wp_path
        self.allow_root = allow_root

    def _global_flags(self) -> List[str]:
        flags: List[str] = []
        if self.wp_path is not None:
            flags.append(f"--path={self.wp_path}")
        if self.allow_root:
            flags.append("--allow-root")
        return flags

    def _run(self, args: List[str]) -> ExitResult:
        cmd = [self.binary, *args, *self._global_flags()]
        logger.info(f"Running: {' '.join(cmd)}")
        try:
            cp = subprocess.run(
                cmd,
                text=True,
                capture_output=True,
                check=False,
            )
        except FileNotFoundError as e:
            logger.error(f"WP-CLI executable not found: {self.binary}")
            return ExitResult(exit_code=127, stdout="", stderr=str(e))

        result = ExitResult(
            exit_code=cp.returncode,
            stdout=cp.stdout or "",
            stderr=cp.stderr or "",
        )
        if not result.ok:
            output = (result.stderr or result.stdout).strip()
            logger.warning(f"Command failed (exit {result.exit_code}): {output}")
        return result

    def install(
        self,
        package_type: str,
        target: str,
        *,
        activate: bool = False,
        skip_packages: bool = False,
        exec_code: Iterable[str] = (),
    ) -> ExitResult:
        if not is_safe_target(target):
            return _rejected(target)
        args = [package_type, "install", target]
        if activate:
            args.append("--activate")
        if skip_packages:
            args.append("--skip-packages")
        for php in exec_code:
            args.append(f"--exec={php}")
        return self._run(args)

    def activate(self, package_type: str, target: str) -> ExitResult:
        if not is_safe_target(target):
            return _rejected(target)
        return self._run([package_type, "activate", target])
