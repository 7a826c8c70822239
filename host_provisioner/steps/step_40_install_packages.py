from __future__ import annotations

import logging
from typing import List

from ..context import RunContext, StepResult
from ..lib.command import CommandError
from ..lib.facts import probe_package_installed
from ..lib.pkg import pm_install, pm_makecache

logger = logging.getLogger(__name__)


def missing_packages(packages: List[str]) -> List[str]:
    return [p for p in packages if not probe_package_installed(p)]


class InstallPackagesStep:
    """Install only the required packages that are actually absent.

    Skipped entirely on hosts that already have a desktop: no metadata
    refresh, no install.
    """

    step_id = "40_install_packages"

    def run(self, ctx: RunContext) -> StepResult:
        facts = ctx.require_facts()
        if facts.gui_present:
            return StepResult.skipped("GUI present; package installation skipped")

        wanted = sorted(ctx.plan.to_install_if_missing) if ctx.plan else []
        missing = missing_packages(wanted)
        if not missing:
            return StepResult.skipped("all required packages already installed")

        pm = ctx.package_manager
        try:
            pm_makecache(pm, dry_run=ctx.dry_run)
        except CommandError as e:
            logger.warning("Metadata refresh failed (%s); continuing", e.result.returncode)

        logger.info("Installing %s", ", ".join(missing))
        pm_install(pm, missing, dry_run=ctx.dry_run)
        return StepResult.ok(installed=missing)
