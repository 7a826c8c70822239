"""
Tests for the provisioning sequencer steps.
"""

import hashlib
import os
import stat
from pathlib import Path

import pytest

from host_provisioner.config import DEFAULT_USERS
from host_provisioner.context import HostFacts, RunContext, StepStatus, derive_package_plan
from host_provisioner.steps import (
    ActivateServiceStep,
    FetchDocsStep,
    InstallDesktopStep,
    InstallPackagesStep,
    ProbeFactsStep,
    ProvisionAccountsStep,
    ProvisionContentStep,
    ReconfigurePortStep,
    RemoveLegacyPackageStep,
    SetHostnameStep,
)


def _prime(ctx: RunContext, *, current="box", gui=False) -> RunContext:
    ctx.facts = HostFacts(current_hostname=current, desired_hostname=ctx.config.hostname, gui_present=gui)
    ctx.plan = derive_package_plan(ctx.facts, ctx.config)
    return ctx


def _sha(path: Path) -> str:
    return hashlib.sha256(path.read_bytes()).hexdigest()


# ── Facts ────────────────────────────────────────────────────────────


class TestProbeFacts:
    def test_builds_facts_and_plan(self, fake_system, ctx: RunContext):
        fake_system.hostname = "localhost.localdomain"
        fake_system.block_devices = {"/dev/sr0"}

        result = ProbeFactsStep().run(ctx)

        assert result.status is StepStatus.OK
        assert ctx.facts.current_hostname == "localhost.localdomain"
        assert ctx.facts.desired_hostname == "machine1.exam.com"
        assert ctx.facts.optical_device == "/dev/sr0"
        assert not ctx.facts.gui_present
        assert ctx.plan.to_remove == {"bzip2"}
        assert ctx.plan.to_install_if_missing == {"httpd"}
        assert ctx.plan.install_gui_group

    def test_gui_host_plans_no_installs(self, fake_system, ctx: RunContext):
        fake_system.default_target = "graphical.target"
        ProbeFactsStep().run(ctx)
        assert ctx.plan.to_install_if_missing == set()
        assert not ctx.plan.install_gui_group


# ── Hostname ─────────────────────────────────────────────────────────


class TestSetHostname:
    def test_same_hostname_leaves_hosts_identical(self, fake_system, ctx: RunContext, sysroot: Path):
        hosts = sysroot / "etc/hosts"
        hosts.write_text("127.0.0.1 localhost\n10.0.0.9 machine1.exam.com\n")
        before = _sha(hosts)
        _prime(ctx, current="machine1.exam.com")

        result = SetHostnameStep().run(ctx)

        assert result.status is StepStatus.SKIPPED
        assert _sha(hosts) == before
        assert fake_system.count("hostnamectl") == 0

    def test_sets_hostname_and_renames_hosts_entry(self, fake_system, ctx: RunContext, sysroot: Path):
        hosts = sysroot / "etc/hosts"
        hosts.write_text("127.0.0.1 localhost\n10.0.0.9 box\n")
        _prime(ctx, current="box")

        result = SetHostnameStep().run(ctx)

        assert result.status is StepStatus.OK
        assert fake_system.called("hostnamectl") == [["hostnamectl", "set-hostname", "machine1.exam.com"]]
        assert hosts.read_text() == "127.0.0.1 localhost\n10.0.0.9 machine1.exam.com\n"

    def test_appends_mapping(self, fake_system, ctx: RunContext, sysroot: Path):
        hosts = sysroot / "etc/hosts"
        hosts.write_text("127.0.0.1 localhost\n")
        _prime(ctx, current="localhost.localdomain")

        SetHostnameStep().run(ctx)

        assert hosts.read_text() == "127.0.0.1 localhost\n127.0.0.1   machine1.exam.com\n"

    def test_hostnamectl_failure_propagates(self, fake_system, ctx: RunContext, sysroot: Path):
        hosts = sysroot / "etc/hosts"
        hosts.write_text("127.0.0.1 localhost\n")
        fake_system.on("hostnamectl", rc=1)
        _prime(ctx)

        with pytest.raises(RuntimeError):
            SetHostnameStep().run(ctx)
        assert hosts.read_text() == "127.0.0.1 localhost\n"


# ── Packages ─────────────────────────────────────────────────────────


class TestRemoveLegacyPackage:
    def test_removes_when_installed(self, fake_system, ctx: RunContext):
        fake_system.installed = {"bzip2"}
        _prime(ctx)
        result = RemoveLegacyPackageStep().run(ctx)
        assert result.status is StepStatus.OK
        assert fake_system.called("dnf", "remove") == [["dnf", "remove", "-y", "bzip2"]]

    def test_absent_is_skipped(self, fake_system, ctx: RunContext):
        _prime(ctx)
        result = RemoveLegacyPackageStep().run(ctx)
        assert result.status is StepStatus.SKIPPED
        assert fake_system.count("dnf", "remove") == 0


class TestInstallPackages:
    def test_installed_package_not_reinstalled(self, fake_system, ctx: RunContext):
        fake_system.installed = {"httpd"}
        _prime(ctx)

        result = InstallPackagesStep().run(ctx)

        assert result.status is StepStatus.SKIPPED
        assert fake_system.count("dnf", "install") == 0
        assert fake_system.count("dnf", "makecache") == 0

    def test_gui_host_skips_refresh_and_install(self, fake_system, ctx: RunContext):
        _prime(ctx, gui=True)

        result = InstallPackagesStep().run(ctx)

        assert result.status is StepStatus.SKIPPED
        assert fake_system.count("dnf", "makecache") == 0
        assert fake_system.count("dnf", "install") == 0
        assert fake_system.count("rpm") == 0

    def test_installs_only_missing(self, fake_system, make_cfg):
        fake_system.installed = {"httpd"}
        ctx = _prime(RunContext(config=make_cfg(packages={"install": ["httpd", "mod_ssl", "php"]})))

        result = InstallPackagesStep().run(ctx)

        assert result.status is StepStatus.OK
        assert fake_system.count("dnf", "makecache") == 1
        assert fake_system.called("dnf", "install") == [["dnf", "install", "-y", "mod_ssl", "php"]]
        makecache_at = fake_system.calls.index(["dnf", "makecache", "--refresh", "-y"])
        install_at = fake_system.calls.index(["dnf", "install", "-y", "mod_ssl", "php"])
        assert makecache_at < install_at

    def test_refresh_failure_does_not_block_install(self, fake_system, ctx: RunContext):
        fake_system.on("dnf", "makecache", rc=1)
        _prime(ctx)

        result = InstallPackagesStep().run(ctx)

        assert result.status is StepStatus.OK
        assert fake_system.count("dnf", "install") == 1

    def test_install_failure_raises(self, fake_system, ctx: RunContext):
        fake_system.on("dnf", "install", rc=1)
        _prime(ctx)
        with pytest.raises(RuntimeError):
            InstallPackagesStep().run(ctx)


# ── Web server ───────────────────────────────────────────────────────


class TestActivateService:
    def test_enables_when_installed(self, fake_system, ctx: RunContext):
        fake_system.installed = {"httpd"}
        result = ActivateServiceStep().run(ctx)
        assert result.status is StepStatus.OK
        assert fake_system.called("systemctl", "enable") == [["systemctl", "enable", "--now", "httpd"]]

    def test_skipped_when_missing(self, fake_system, ctx: RunContext):
        result = ActivateServiceStep().run(ctx)
        assert result.status is StepStatus.SKIPPED
        assert fake_system.count("systemctl") == 0


@pytest.fixture
def httpd_conf(sysroot: Path) -> Path:
    conf = sysroot / "etc/httpd/conf/httpd.conf"
    conf.parent.mkdir(parents=True)
    conf.write_text("ServerRoot \"/etc/httpd\"\nListen 80\n")
    mods = sysroot / "etc/httpd/conf.modules.d"
    mods.mkdir()
    (mods / "00-base.conf").write_text("Listen 80\n")
    return conf


class TestReconfigurePort:
    def test_missing_config_skips(self, fake_system, ctx: RunContext):
        result = ReconfigurePortStep().run(ctx)
        assert result.status is StepStatus.SKIPPED
        assert fake_system.count("systemctl") == 0

    def test_rewrite_and_restart(self, fake_system, ctx: RunContext, httpd_conf: Path):
        result = ReconfigurePortStep().run(ctx)

        assert result.status is StepStatus.OK
        assert httpd_conf.read_text() == "ServerRoot \"/etc/httpd\"\nListen 82\n"
        assert Path(str(httpd_conf) + ".bak").read_text() == "ServerRoot \"/etc/httpd\"\nListen 80\n"
        assert (httpd_conf.parent.parent / "conf.modules.d/00-base.conf").read_text() == "Listen 80\n"
        assert fake_system.count("systemctl", "restart", "httpd") == 1
        assert result.data["states"][-1] == "succeeded"

    def test_restart_failure_restores_backup(self, fake_system, ctx: RunContext, httpd_conf: Path):
        before = _sha(httpd_conf)
        fake_system.on("systemctl", "restart", rc=1)

        result = ReconfigurePortStep().run(ctx)

        assert _sha(httpd_conf) == before
        assert fake_system.count("systemctl", "restart", "httpd") == 2
        assert result.status is StepStatus.FAILED
        assert result.data["states"] == [
            "unmodified",
            "backed_up",
            "rewritten",
            "restart_attempted",
            "rolled_back",
            "restart_retried",
            "failed",
        ]

    def test_retry_succeeds_after_rollback(self, fake_system, ctx: RunContext, httpd_conf: Path):
        fake_system.on("systemctl", "restart", rc=[1, 0])

        result = ReconfigurePortStep().run(ctx)

        assert result.status is StepStatus.OK
        assert fake_system.count("systemctl", "restart", "httpd") == 2
        assert httpd_conf.read_text().endswith("Listen 80\n")
        assert result.data["states"][-2:] == ["restart_retried", "succeeded"]


# ── Content and accounts ─────────────────────────────────────────────


class TestProvisionContent:
    def test_creates_markers_and_labels(self, fake_system, ctx: RunContext, sysroot: Path):
        result = ProvisionContentStep().run(ctx)

        web = sysroot / "var/www/html"
        assert result.status is StepStatus.OK
        assert sorted(p.name for p in web.iterdir()) == ["file1", "file2", "file3"]
        assert all(p.stat().st_size == 0 for p in web.iterdir())
        assert fake_system.called("chcon") == [["chcon", "-t", "user_home_t", str(web / "file1")]]

    def test_label_failure_is_not_fatal(self, fake_system, ctx: RunContext):
        fake_system.on("chcon", rc=1)
        result = ProvisionContentStep().run(ctx)
        assert result.status is StepStatus.OK
        assert result.data["labeled"] is False

    def test_existing_content_kept(self, fake_system, ctx: RunContext, sysroot: Path):
        web = sysroot / "var/www/html"
        web.mkdir(parents=True)
        (web / "file2").write_text("keep me")
        ProvisionContentStep().run(ctx)
        assert (web / "file2").read_text() == "keep me"


class TestProvisionAccounts:
    def test_all_created_and_passwords_set(self, fake_system, ctx: RunContext):
        result = ProvisionAccountsStep().run(ctx)

        assert result.status is StepStatus.OK
        assert [c[-1] for c in fake_system.called("useradd")] == DEFAULT_USERS
        assert fake_system.inputs == [(["chpasswd"], f"{u}:root\n") for u in DEFAULT_USERS]
        assert len(DEFAULT_USERS) == 10

    def test_existing_account_only_password_reset(self, fake_system, ctx: RunContext):
        fake_system.users = set(DEFAULT_USERS)

        result = ProvisionAccountsStep().run(ctx)

        assert fake_system.count("useradd") == 0
        assert fake_system.count("chpasswd") == 10
        assert result.data["created"] == []

    def test_useradd_failure_still_resets_password(self, fake_system, ctx: RunContext):
        fake_system.on("useradd", "siya", rc=9)

        result = ProvisionAccountsStep().run(ctx)

        assert result.status is StepStatus.OK
        assert "siya" not in result.data["created"]
        assert fake_system.count("chpasswd") == 10
        assert (["chpasswd"], "siya:root\n") in fake_system.inputs

    def test_one_password_failure_does_not_stop_others(self, fake_system, ctx: RunContext):
        # Fourth account in the default list is siya.
        fake_system.on("chpasswd", rc=[0, 0, 0, 1, 0])

        result = ProvisionAccountsStep().run(ctx)

        assert result.status is StepStatus.FAILED
        assert result.data["failed"] == ["siya"]
        assert fake_system.count("chpasswd") == 10


# ── Desktop group ────────────────────────────────────────────────────


class TestInstallDesktop:
    def test_gui_present_skips_query(self, fake_system, ctx: RunContext):
        _prime(ctx, gui=True)
        result = InstallDesktopStep().run(ctx)
        assert result.status is StepStatus.SKIPPED
        assert fake_system.count("dnf") == 0

    def test_missing_plan_skips_with_own_reason(self, fake_system, ctx: RunContext):
        result = InstallDesktopStep().run(ctx)
        assert result.status is StepStatus.SKIPPED
        assert result.detail == "no package plan"
        assert fake_system.count("dnf") == 0

    def test_group_not_offered(self, fake_system, ctx: RunContext):
        _prime(ctx)
        result = InstallDesktopStep().run(ctx)
        assert result.status is StepStatus.SKIPPED
        assert fake_system.count("dnf", "groupinstall") == 0

    def test_group_offered_is_installed(self, fake_system, ctx: RunContext):
        fake_system.on("dnf", "groupinfo", rc=0)
        _prime(ctx)
        result = InstallDesktopStep().run(ctx)
        assert result.status is StepStatus.OK
        assert fake_system.called("dnf", "groupinstall") == [["dnf", "groupinstall", "-y", "Server with GUI"]]


# ── Remote docs ──────────────────────────────────────────────────────


class TestFetchDocs:
    def test_unreachable_remote_skips_everything(self, fake_system, ctx: RunContext, sysroot: Path):
        fake_system.installed = {"git"}
        _prime(ctx)

        result = FetchDocsStep().run(ctx)

        assert result.status is StepStatus.SKIPPED
        assert fake_system.count("git", "clone") == 0
        assert not (sysroot / "usr/sbin").exists()

    def test_reachable_remote(self, fake_system, ctx: RunContext, sysroot: Path):
        fake_system.installed = {"git"}
        fake_system.reachable = True

        def clone(argv):
            man1 = Path(argv[-1]) / "man1"
            man1.mkdir(parents=True)
            (man1 / "ex200.1").write_text(".TH EX200 1\n")
            (man1 / "README").write_text("not a man page\n")

        fake_system.on("git", "clone", effect=clone)
        _prime(ctx)

        result = FetchDocsStep().run(ctx)

        assert result.status is StepStatus.OK
        clone_calls = fake_system.called("git", "clone")
        assert clone_calls == [
            ["git", "clone", "--depth", "1", ctx.config.docs_repo_url, str(sysroot / "tmp/rhel-manpages")]
        ]
        man = sysroot / "usr/share/man/man1"
        assert [p.name for p in man.iterdir()] == ["ex200.1"]
        assert fake_system.count("mandb") == 1
        for name in ("ex200", "welcome_message"):
            script = sysroot / "usr/sbin" / name
            assert script.read_text().startswith("#!/bin/bash\n")
            assert stat.S_IMODE(os.stat(script).st_mode) == 0o755

    def test_missing_git_installed_when_allowed(self, fake_system, ctx: RunContext):
        _prime(ctx)
        FetchDocsStep().run(ctx)
        assert fake_system.called("dnf", "install") == [["dnf", "install", "-y", "git"]]
        assert fake_system.count("git", "ls-remote") == 1

    def test_missing_git_on_gui_host_skips(self, fake_system, ctx: RunContext):
        _prime(ctx, gui=True)
        result = FetchDocsStep().run(ctx)
        assert result.status is StepStatus.SKIPPED
        assert fake_system.count("dnf", "install") == 0
        assert fake_system.count("git") == 0
