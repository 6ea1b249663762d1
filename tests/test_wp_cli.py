import subprocess
from pathlib import Path

import pytest

from backend.app.wizard import wp_cli
from backend.app.wizard.wp_cli import SUPPRESS_WOOCOMMERCE_PAGES, WpCli


@pytest.fixture
def recorded(monkeypatch):
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append((cmd, kwargs))
        return subprocess.CompletedProcess(cmd, 0, stdout="Success: Installed 1 of 1 plugins.", stderr="")

    monkeypatch.setattr(wp_cli.subprocess, "run", fake_run)
    return calls


def test_install_builds_argv_without_shell(recorded):
    result = WpCli().install(
        "plugin",
        "foo; rm -rf /",
        activate=True,
        skip_packages=True,
        exec_code=[SUPPRESS_WOOCOMMERCE_PAGES],
    )

    cmd, kwargs = recorded[0]
    assert cmd == [
        "wp",
        "plugin",
        "install",
        "foo; rm -rf /",
        "--activate",
        "--skip-packages",
        f"--exec={SUPPRESS_WOOCOMMERCE_PAGES}",
    ]
    assert "shell" not in kwargs
    assert kwargs["capture_output"] is True
    assert result.ok
    assert result.stdout.startswith("Success")


def test_global_flags_are_appended(recorded):
    WpCli(binary="/usr/local/bin/wp", wp_path=Path("/srv/www/site"), allow_root=True).activate(
        "plugin", "jetpack"
    )

    cmd, _ = recorded[0]
    assert cmd == [
        "/usr/local/bin/wp",
        "plugin",
        "activate",
        "jetpack",
        "--path=/srv/www/site",
        "--allow-root",
    ]


def test_non_zero_exit_is_reported(monkeypatch):
    def fake_run(cmd, **kwargs):
        return subprocess.CompletedProcess(cmd, 1, stdout="", stderr="Error: Plugin not found.")

    monkeypatch.setattr(wp_cli.subprocess, "run", fake_run)

    result = WpCli().install("theme", "missing")

    assert not result.ok
    assert result.exit_code == 1
    assert result.stderr == "Error: Plugin not found."


def test_missing_binary_maps_to_127(monkeypatch):
    def fake_run(cmd, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", cmd[0])

    monkeypatch.setattr(wp_cli.subprocess, "run", fake_run)

    result = WpCli(binary="wp-nope").install("plugin", "foo")

    assert result.exit_code == 127
    assert not result.ok


@pytest.mark.parametrize("target", ["--exec=system('id');", " -v", ""])
def test_option_like_install_target_is_refused(recorded, target):
    result = WpCli().install("plugin", target, activate=True)

    assert not result.ok
    assert result.exit_code == 2
    assert recorded == []


def test_option_like_activate_target_is_refused(recorded):
    result = WpCli().activate("plugin", "--require=/tmp/evil.php")

    assert not result.ok
    assert recorded == []
