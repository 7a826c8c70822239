"""Read-only host probes.

Every probe is safe to call repeatedly and reports a missing resource
(no device, no binary, failing query) as absence rather than raising.
"""

from __future__ import annotations

import logging
import shutil
import socket
from pathlib import Path
from typing import Optional, Sequence

from .command import probe_cmd

logger = logging.getLogger(__name__)

INSTALL_TREE_DIRS = ("BaseOS", "AppStream")
INSTALL_TREE_MARKER = ".treeinfo"


def _is_block_device(path: str) -> bool:
    try:
        return Path(path).is_block_device()
    except OSError:
        return False


def probe_hostname() -> str:
    """Fully-qualified hostname if obtainable, else the short form."""

    for argv in (["hostname", "-f"], ["hostname"]):
        r = probe_cmd(argv)
        name = r.stdout.strip()
        if r.ok and name:
            return name
    return socket.gethostname()


def probe_optical_device(candidates: Sequence[str] = ("/dev/sr1", "/dev/sr0")) -> Optional[str]:
    """First candidate that is a block device. sr1 is listed before sr0 on purpose."""

    for dev in candidates:
        if _is_block_device(dev):
            return dev
    return None


def probe_media_is_install_tree(mount_path: str) -> bool:
    root = Path(mount_path)
    if any((root / d).is_dir() for d in INSTALL_TREE_DIRS):
        return True
    return (root / INSTALL_TREE_MARKER).is_file()


def probe_package_installed(name: str) -> bool:
    return probe_cmd(["rpm", "-q", name]).ok


def probe_default_target() -> Optional[str]:
    r = probe_cmd(["systemctl", "get-default"])
    if not r.ok:
        return None
    return r.stdout.strip() or None


def probe_gui_present(gui_packages: Sequence[str] = ("gnome-shell", "xorg-x11-server-Xorg")) -> bool:
    """Graphical default target, or any desktop-session / X-server package installed."""

    # Cheapest first; stop at the first positive.
    if probe_default_target() == "graphical.target":
        return True
    return any(probe_package_installed(name) for name in gui_packages)


def probe_package_manager() -> str:
    return "dnf" if shutil.which("dnf") else "yum"


def probe_is_mounted(path: str) -> bool:
    return probe_cmd(["mountpoint", "-q", path]).ok


def probe_user_exists(name: str) -> bool:
    return probe_cmd(["id", name]).ok


def probe_command_available(name: str) -> bool:
    return shutil.which(name) is not None
