from __future__ import annotations

import logging
from pathlib import Path

from ..context import RunContext, StepResult
from ..lib.files import write_file
from ..lib.hosts import update_hosts_text
from ..lib.service import set_hostname

logger = logging.getLogger(__name__)


class SetHostnameStep:
    step_id = "15_set_hostname"

    def run(self, ctx: RunContext) -> StepResult:
        facts = ctx.require_facts()
        current, desired = facts.current_hostname, facts.desired_hostname

        if current == desired:
            return StepResult.skipped(f"hostname already {desired}")

        logger.info("Setting hostname: %s -> %s", current, desired)
        set_hostname(desired, dry_run=ctx.dry_run)

        hosts = Path(ctx.config.hosts_file)
        before = hosts.read_text(encoding="utf-8") if hosts.exists() else ""
        after = update_hosts_text(before, current, desired)
        if after != before:
            write_file(str(hosts), after, dry_run=ctx.dry_run)

        return StepResult.ok(f"{current} -> {desired}", hosts_updated=after != before)
