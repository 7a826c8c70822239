from __future__ import annotations

import logging

from ..context import RunContext, StepResult
from ..lib.facts import probe_package_installed
from ..lib.pkg import pm_remove

logger = logging.getLogger(__name__)


class RemoveLegacyPackageStep:
    step_id = "30_remove_legacy_package"

    def run(self, ctx: RunContext) -> StepResult:
        to_remove = sorted(ctx.plan.to_remove) if ctx.plan else []
        present = [p for p in to_remove if probe_package_installed(p)]
        if not present:
            return StepResult.skipped("nothing to remove")

        logger.info("Removing %s", ", ".join(present))
        pm_remove(ctx.package_manager, present, dry_run=ctx.dry_run)
        return StepResult.ok(removed=present)
