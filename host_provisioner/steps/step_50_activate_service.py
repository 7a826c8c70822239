from __future__ import annotations

import logging

from ..context import RunContext, StepResult
from ..lib.facts import probe_package_installed
from ..lib.service import enable_now

logger = logging.getLogger(__name__)


class ActivateServiceStep:
    step_id = "50_activate_service"

    def run(self, ctx: RunContext) -> StepResult:
        cfg = ctx.config
        if not probe_package_installed(cfg.service_package):
            return StepResult.skipped(f"{cfg.service_package} not installed")

        enable_now(cfg.service_name, dry_run=ctx.dry_run)
        return StepResult.ok(f"{cfg.service_name} enabled and started")
