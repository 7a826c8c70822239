from __future__ import annotations

import logging
from typing import Sequence

from .command import CmdResult, probe_cmd, run_cmd

logger = logging.getLogger(__name__)


def pm_makecache(pm: str, *, dry_run: bool = False) -> None:
    run_cmd([pm, "makecache", "--refresh", "-y"], dry_run=dry_run)


def pm_install(pm: str, packages: Sequence[str], *, dry_run: bool = False) -> None:
    if not packages:
        return
    run_cmd([pm, "install", "-y", *packages], dry_run=dry_run)


def pm_remove(pm: str, packages: Sequence[str], *, check: bool = True, dry_run: bool = False) -> CmdResult:
    return run_cmd([pm, "remove", "-y", *packages], check=check, dry_run=dry_run)


def pm_group_available(pm: str, group: str) -> bool:
    """Return True if the configured repos offer a package group.

    This is a query, so it runs even in dry-run mode.
    """
    return probe_cmd([pm, "groupinfo", group]).ok


def pm_group_install(pm: str, group: str, *, dry_run: bool = False) -> None:
    run_cmd([pm, "groupinstall", "-y", group], dry_run=dry_run)


def pm_clean_all(pm: str, *, dry_run: bool = False) -> CmdResult:
    return run_cmd([pm, "clean", "all"], check=False, dry_run=dry_run)
