"""
Shared test fixtures: a fake host behind ``subprocess.run`` and a config
whose paths all live under ``tmp_path``.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import pytest

from host_provisioner.config import ProvisionConfig
from host_provisioner.context import RunContext
from host_provisioner.lib import command, facts

PM_VERBS = {"install", "remove", "makecache", "groupinfo", "groupinstall", "clean"}


class FakeSystem:
    """Answers commands by argv prefix and records every call.

    Without a matching rule, a small model of the host answers: installed
    packages, existing users, hostname, default target.
    """

    def __init__(self) -> None:
        self.calls: List[List[str]] = []
        self.inputs: List[Tuple[List[str], str]] = []
        self.rules: List[Tuple[Tuple[str, ...], List[int], str, Optional[Callable[[List[str]], None]]]] = []
        self.installed: set = set()
        self.users: set = set()
        self.block_devices: set = set()
        self.commands: set = {"dnf", "git", "mandb"}
        self.hostname = "localhost.localdomain"
        self.default_target = "multi-user.target"
        self.reachable = False

    # -- configuration

    def on(
        self,
        *prefix: str,
        rc: Union[int, List[int]] = 0,
        stdout: str = "",
        effect: Optional[Callable[[List[str]], None]] = None,
    ) -> None:
        """Answer commands starting with ``prefix``.

        ``rc`` may be a list: one return code per call, the last one repeats.
        """
        codes = list(rc) if isinstance(rc, list) else [rc]
        self.rules.insert(0, (tuple(prefix), codes, stdout, effect))

    # -- assertions

    def called(self, *prefix: str) -> List[List[str]]:
        return [c for c in self.calls if c[: len(prefix)] == list(prefix)]

    def count(self, *prefix: str) -> int:
        return len(self.called(*prefix))

    # -- fakes

    def which(self, name: str) -> Optional[str]:
        return f"/usr/bin/{name}" if name in self.commands else None

    def is_block_device(self, path: str) -> bool:
        return path in self.block_devices

    def run(self, argv, input=None, **kwargs: Any) -> subprocess.CompletedProcess:
        argv = list(argv)
        self.calls.append(argv)
        if input is not None:
            self.inputs.append((argv, input))

        for prefix, codes, stdout, effect in self.rules:
            if argv[: len(prefix)] == list(prefix):
                if effect is not None:
                    effect(argv)
                rc = codes.pop(0) if len(codes) > 1 else codes[0]
                return subprocess.CompletedProcess(argv, rc, stdout, "")

        rc, stdout = self._model(argv)
        return subprocess.CompletedProcess(argv, rc, stdout, "" if rc == 0 else "fake failure")

    def _model(self, argv: List[str]) -> Tuple[int, str]:
        cmd = argv[0]
        if cmd == "rpm":
            return (0 if argv[-1] in self.installed else 1), ""
        if cmd == "hostname":
            return 0, self.hostname + "\n"
        if argv[:2] == ["systemctl", "get-default"]:
            return 0, self.default_target + "\n"
        if cmd == "id":
            return (0 if argv[-1] in self.users else 1), ""
        if cmd == "useradd":
            self.users.add(argv[-1])
            return 0, ""
        if cmd == "mountpoint":
            return 1, ""
        if argv[:2] == ["git", "ls-remote"]:
            return (0 if self.reachable else 128), ""
        if cmd in {"dnf", "yum"} and len(argv) > 1 and argv[1] in PM_VERBS:
            if argv[1] == "install":
                self.installed.update(a for a in argv[2:] if not a.startswith("-"))
            elif argv[1] == "remove":
                self.installed.difference_update(argv[2:])
            elif argv[1] == "groupinfo":
                return 1, ""
        return 0, ""


@pytest.fixture
def fake_system(monkeypatch: pytest.MonkeyPatch) -> FakeSystem:
    fake = FakeSystem()
    monkeypatch.setattr(command.subprocess, "run", fake.run)
    monkeypatch.setattr(facts.shutil, "which", fake.which)
    monkeypatch.setattr(facts, "_is_block_device", fake.is_block_device)
    return fake


def _merge(base: Dict[str, Any], extra: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(base)
    for key, value in extra.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _merge(out[key], value)
        else:
            out[key] = value
    return out


def make_config(root: Path, **overrides: Any) -> ProvisionConfig:
    raw: Dict[str, Any] = {
        "package_manager": "dnf",
        "reboot": False,
        "paths": {
            "hosts_file": str(root / "etc/hosts"),
            "fstab_file": str(root / "etc/fstab"),
        },
        "repository": {
            "mount_point": str(root / "dvd"),
            "repo_dir": str(root / "etc/yum.repos.d"),
        },
        "httpd": {"root": str(root / "etc/httpd")},
        "content": {"web_root": str(root / "var/www/html")},
        "docs": {
            "tmp_dir": str(root / "tmp/rhel-manpages"),
            "man_dir": str(root / "usr/share/man/man1"),
            "bin_dir": str(root / "usr/sbin"),
        },
        "teardown": {
            "history_file": str(root / "root/.bash_history"),
            "self_delete": False,
        },
    }
    return ProvisionConfig(raw=_merge(raw, overrides))


@pytest.fixture
def sysroot(tmp_path: Path) -> Path:
    """Scratch filesystem root for a fake host."""
    root = tmp_path / "root"
    (root / "etc").mkdir(parents=True)
    return root


@pytest.fixture
def config(sysroot: Path) -> ProvisionConfig:
    return make_config(sysroot)


@pytest.fixture
def ctx(config: ProvisionConfig) -> RunContext:
    return RunContext(config=config)


@pytest.fixture
def make_cfg(sysroot: Path) -> Callable[..., ProvisionConfig]:
    """Build a scratch-root config with section overrides."""
    return lambda **overrides: make_config(sysroot, **overrides)
