from __future__ import annotations

import logging

from .command import run_cmd

logger = logging.getLogger(__name__)


def enable_now(unit: str, *, dry_run: bool = False) -> None:
    run_cmd(["systemctl", "enable", "--now", unit], dry_run=dry_run)


def restart(unit: str, *, dry_run: bool = False) -> bool:
    """Restart a unit; returns False instead of raising on failure."""

    r = run_cmd(["systemctl", "restart", unit], check=False, dry_run=dry_run)
    if not r.ok:
        logger.warning("Restart of %s failed (%s)", unit, r.returncode)
    return r.ok


def set_default_target(target: str, *, dry_run: bool = False) -> None:
    run_cmd(["systemctl", "set-default", target], dry_run=dry_run)


def set_hostname(hostname: str, *, dry_run: bool = False) -> None:
    run_cmd(["hostnamectl", "set-hostname", hostname], dry_run=dry_run)
