from __future__ import annotations

import logging

from ..context import HostFacts, RunContext, StepResult, derive_package_plan
from ..lib.facts import probe_gui_present, probe_hostname, probe_optical_device, probe_package_manager

logger = logging.getLogger(__name__)


class ProbeFactsStep:
    step_id = "10_probe_facts"

    def run(self, ctx: RunContext) -> StepResult:
        cfg = ctx.config

        ctx.package_manager = cfg.package_manager or probe_package_manager()
        facts = HostFacts(
            current_hostname=probe_hostname(),
            desired_hostname=cfg.hostname,
            optical_device=probe_optical_device(cfg.optical_devices),
            gui_present=probe_gui_present(cfg.gui_packages),
        )
        ctx.facts = facts
        ctx.plan = derive_package_plan(facts, cfg)

        logger.info(
            "Facts: hostname=%s optical=%s gui=%s pm=%s",
            facts.current_hostname,
            facts.optical_device or "none",
            facts.gui_present,
            ctx.package_manager,
        )
        return StepResult.ok(
            hostname=facts.current_hostname,
            optical_device=facts.optical_device,
            gui_present=facts.gui_present,
            package_manager=ctx.package_manager,
        )
