from __future__ import annotations

import logging

from .command import probe_cmd, run_cmd

logger = logging.getLogger(__name__)


def remote_reachable(url: str) -> bool:
    """Best-effort reachability check of a git remote, without cloning."""

    return probe_cmd(["git", "ls-remote", url]).ok


def shallow_clone(url: str, dest: str, *, dry_run: bool = False) -> None:
    run_cmd(["git", "clone", "--depth", "1", url, dest], dry_run=dry_run)
