from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

DEFAULT_USERS = [
    "simone",
    "remoteuserx",
    "andrew",
    "siya",
    "test1",
    "test2",
    "user1",
    "user2",
    "pandora",
    "alex",
]


def _section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = raw.get(name) or {}
    if not isinstance(value, dict):
        raise ValueError(f"config section '{name}' must be a mapping")
    return value


def _str_list(value: Any, default: List[str]) -> List[str]:
    if value is None:
        return list(default)
    if not isinstance(value, list):
        raise ValueError(f"expected a list, got {type(value).__name__}")
    return [str(v).strip() for v in value if str(v).strip()]


@dataclass(frozen=True)
class ProvisionConfig:
    """Typed view over the YAML config. Every key is optional."""

    raw: Dict[str, Any]

    # -- run control

    @property
    def dry_run(self) -> bool:
        return bool(self.raw.get("dry_run", False))

    @property
    def reboot(self) -> bool:
        return bool(self.raw.get("reboot", True))

    @property
    def reboot_delay(self) -> float:
        return float(self.raw.get("reboot_delay", 1))

    @property
    def package_manager(self) -> Optional[str]:
        return self.raw.get("package_manager") or None

    # -- identity

    @property
    def hostname(self) -> str:
        return str(self.raw.get("hostname") or "machine1.exam.com").strip()

    @property
    def hosts_file(self) -> str:
        return str(_section(self.raw, "paths").get("hosts_file") or "/etc/hosts")

    # -- repository

    @property
    def optical_devices(self) -> List[str]:
        return _str_list(_section(self.raw, "repository").get("optical_devices"), ["/dev/sr1", "/dev/sr0"])

    @property
    def dvd_mount(self) -> str:
        return str(_section(self.raw, "repository").get("mount_point") or "/dvd")

    @property
    def repo_dir(self) -> str:
        return str(_section(self.raw, "repository").get("repo_dir") or "/etc/yum.repos.d")

    @property
    def fstab_file(self) -> str:
        return str(_section(self.raw, "paths").get("fstab_file") or "/etc/fstab")

    # -- packages

    @property
    def legacy_packages(self) -> List[str]:
        return _str_list(_section(self.raw, "packages").get("remove"), ["bzip2"])

    @property
    def required_packages(self) -> List[str]:
        return _str_list(_section(self.raw, "packages").get("install"), ["httpd"])

    @property
    def gui_packages(self) -> List[str]:
        return _str_list(_section(self.raw, "packages").get("gui_markers"), ["gnome-shell", "xorg-x11-server-Xorg"])

    @property
    def desktop_group(self) -> str:
        return str(_section(self.raw, "packages").get("desktop_group") or "Server with GUI")

    # -- web server

    @property
    def service_name(self) -> str:
        return str(_section(self.raw, "httpd").get("service") or "httpd")

    @property
    def service_package(self) -> str:
        return str(_section(self.raw, "httpd").get("package") or "httpd")

    @property
    def httpd_root(self) -> str:
        return str(_section(self.raw, "httpd").get("root") or "/etc/httpd")

    @property
    def httpd_conf(self) -> str:
        return str(_section(self.raw, "httpd").get("conf") or f"{self.httpd_root}/conf/httpd.conf")

    @property
    def httpd_conf_backup(self) -> str:
        return str(_section(self.raw, "httpd").get("conf_backup") or f"{self.httpd_conf}.bak")

    @property
    def httpd_exclude_dirs(self) -> List[str]:
        return _str_list(_section(self.raw, "httpd").get("exclude_dirs"), ["conf.modules.d"])

    @property
    def port_from(self) -> int:
        return int(_section(self.raw, "httpd").get("port_from", 80))

    @property
    def port_to(self) -> int:
        return int(_section(self.raw, "httpd").get("port_to", 82))

    # -- content

    @property
    def web_root(self) -> str:
        return str(_section(self.raw, "content").get("web_root") or "/var/www/html")

    @property
    def web_files(self) -> List[str]:
        return _str_list(_section(self.raw, "content").get("files"), ["file1", "file2", "file3"])

    @property
    def label_file(self) -> str:
        return str(_section(self.raw, "content").get("label_file") or "file1")

    @property
    def label_type(self) -> str:
        return str(_section(self.raw, "content").get("label_type") or "user_home_t")

    # -- accounts

    @property
    def users(self) -> List[str]:
        return _str_list(_section(self.raw, "accounts").get("users"), DEFAULT_USERS)

    @property
    def user_password(self) -> str:
        return str(_section(self.raw, "accounts").get("password") or "root")

    # -- remote docs

    @property
    def docs_repo_url(self) -> str:
        return str(
            _section(self.raw, "docs").get("repo_url") or "https://github.com/codexchangee/rhel-manpages.git"
        )

    @property
    def docs_tmp_dir(self) -> str:
        return str(_section(self.raw, "docs").get("tmp_dir") or "/tmp/rhel-manpages")

    @property
    def man_dir(self) -> str:
        return str(_section(self.raw, "docs").get("man_dir") or "/usr/share/man/man1")

    @property
    def helper_bin_dir(self) -> str:
        return str(_section(self.raw, "docs").get("bin_dir") or "/usr/sbin")

    # -- teardown

    @property
    def default_target(self) -> str:
        return str(_section(self.raw, "teardown").get("default_target") or "multi-user.target")

    @property
    def history_file(self) -> Optional[str]:
        return _section(self.raw, "teardown").get("history_file") or None

    @property
    def self_path(self) -> Optional[str]:
        return _section(self.raw, "teardown").get("self_path") or None

    @property
    def self_delete(self) -> bool:
        return bool(_section(self.raw, "teardown").get("self_delete", True))

    def with_overrides(self, **overrides: Any) -> "ProvisionConfig":
        raw = dict(self.raw)
        raw.update({k: v for k, v in overrides.items() if v is not None})
        return ProvisionConfig(raw=raw)


def load_config(path: Optional[str]) -> ProvisionConfig:
    """Load YAML overrides. A missing file means built-in defaults."""

    if not path:
        return ProvisionConfig(raw={})

    p = Path(path)
    if not p.exists():
        return ProvisionConfig(raw={})

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError("provisioner config must be YAML")

    try:
        import yaml  # type: ignore
    except Exception as e:  # pragma: no cover
        raise RuntimeError("PyYAML is required to read the provisioner config") from e

    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"{path} must contain a mapping/object")

    return ProvisionConfig(raw=raw)
