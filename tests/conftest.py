from __future__ import annotations

from typing import List, Tuple

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from backend.app.config import WizardSettings
from backend.app.wizard.installer import WizardInstaller
from backend.app.wizard.options_store import OptionStore
from backend.app.wizard.router import get_wizard_installer, router
from backend.app.wizard.wp_cli import ExitResult

SECRET = "test-secret"


class FakeWpCli:
    """Records dispatched commands; exit codes are scripted per target."""

    def __init__(self):
        self.calls: List[Tuple] = []
        self.failing: set[str] = set()

    def _result(self, target: str) -> ExitResult:
        if target in self.failing:
            return ExitResult(exit_code=1, stderr=f"Error: could not install {target}")
        return ExitResult(exit_code=0, stdout="Success")

    def install(self, package_type, target, *, activate=False, skip_packages=False, exec_code=()):
        self.calls.append(
            ("install", package_type, target, activate, skip_packages, tuple(exec_code))
        )
        return self._result(target)

    def activate(self, package_type, target):
        self.calls.append(("activate", package_type, target))
        return self._result(target)


class RecordingNotifier:
    def __init__(self, exc: Exception | None = None):
        self.calls = 0
        self.exc = exc

    def __call__(self, settings):
        self.calls += 1
        if self.exc is not None:
            raise self.exc


@pytest.fixture
def settings(tmp_path):
    return WizardSettings(
        data_dir=tmp_path / "wizard",
        site_url="http://starter.test",
        nonce_secret=SECRET,
    )


@pytest.fixture
def store(settings):
    return OptionStore(settings.data_dir)


@pytest.fixture
def cli():
    return FakeWpCli()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def installer(store, cli, settings, notifier):
    return WizardInstaller(store=store, cli=cli, settings=settings, notify=notifier)


@pytest.fixture
def client(installer):
    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_wizard_installer] = lambda: installer
    with TestClient(app) as c:
        yield c
