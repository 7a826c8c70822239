from __future__ import annotations

import logging
from pathlib import Path

from ..context import RunContext, StepResult
from ..lib.assets import copy_glob, install_helper_scripts, remove_tree
from ..lib.command import CommandError, run_cmd
from ..lib.facts import probe_command_available, probe_package_installed
from ..lib.net import remote_reachable, shallow_clone
from ..lib.pkg import pm_install

logger = logging.getLogger(__name__)


class FetchDocsStep:
    """Pull man pages from the docs remote and install the helper scripts.

    Everything here depends on the remote answering ``git ls-remote``;
    an unreachable remote skips the whole step.
    """

    step_id = "85_fetch_docs"

    def _ensure_git(self, ctx: RunContext) -> bool:
        if probe_package_installed("git"):
            return True
        if not ctx.installs_allowed:
            logger.info("git missing and installs are disabled for this run")
            return False
        try:
            pm_install(ctx.package_manager, ["git"], dry_run=ctx.dry_run)
        except CommandError as e:
            logger.warning("git install failed (%s)", e.result.returncode)
            return False
        return ctx.dry_run or probe_package_installed("git")

    def run(self, ctx: RunContext) -> StepResult:
        cfg = ctx.config
        dry_run = ctx.dry_run

        if not self._ensure_git(ctx):
            return StepResult.skipped("git not available")

        url = cfg.docs_repo_url
        logger.info("Checking docs repo accessibility: %s", url)
        if not remote_reachable(url):
            logger.info("Docs repo not accessible; skipping clone and helper scripts")
            return StepResult.skipped(f"{url} unreachable")

        tmp = cfg.docs_tmp_dir
        remove_tree(tmp, dry_run=dry_run)
        try:
            shallow_clone(url, tmp, dry_run=dry_run)
        except CommandError as e:
            # Helper scripts do not depend on the clone.
            logger.warning("Clone of %s failed (%s)", url, e.result.returncode)

        man_pages = []
        man_src = Path(tmp) / "man1"
        if man_src.is_dir():
            man_pages = copy_glob(str(man_src), "*.1", cfg.man_dir, dry_run=dry_run)
            if probe_command_available("mandb"):
                run_cmd(["mandb"], check=False, dry_run=dry_run)
        else:
            logger.info("No man1 directory in the docs repo; skipping man page copy")

        scripts = install_helper_scripts(cfg.helper_bin_dir, dry_run=dry_run)
        return StepResult.ok(man_pages=man_pages, scripts=scripts)
