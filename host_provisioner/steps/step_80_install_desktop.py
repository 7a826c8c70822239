from __future__ import annotations

import logging

from ..context import RunContext, StepResult
from ..lib.pkg import pm_group_available, pm_group_install

logger = logging.getLogger(__name__)


class InstallDesktopStep:
    step_id = "80_install_desktop"

    def run(self, ctx: RunContext) -> StepResult:
        if ctx.plan is None:
            return StepResult.skipped("no package plan")
        if not ctx.plan.install_gui_group:
            return StepResult.skipped("GUI already present")

        group = ctx.config.desktop_group
        logger.info("Checking %s availability", group)
        if not pm_group_available(ctx.package_manager, group):
            return StepResult.skipped(f"{group} not offered by configured repos")

        pm_group_install(ctx.package_manager, group, dry_run=ctx.dry_run)
        return StepResult.ok(f"{group} installed")
