from __future__ import annotations

import logging
from pathlib import Path

from ..context import RunContext, StepResult
from ..lib.command import run_cmd
from ..lib.files import touch

logger = logging.getLogger(__name__)


class ProvisionContentStep:
    step_id = "60_provision_content"

    def run(self, ctx: RunContext) -> StepResult:
        cfg = ctx.config
        web_root = Path(cfg.web_root)

        files = [str(web_root / name) for name in cfg.web_files]
        for f in files:
            touch(f, dry_run=ctx.dry_run)

        # chcon failure is not fatal.
        target = str(web_root / cfg.label_file)
        r = run_cmd(["chcon", "-t", cfg.label_type, target], check=False, dry_run=ctx.dry_run)
        if not r.ok:
            logger.warning("Could not set %s on %s", cfg.label_type, target)

        return StepResult.ok(files=files, labeled=r.ok)
