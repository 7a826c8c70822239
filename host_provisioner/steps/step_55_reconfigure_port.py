from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import List

from ..context import RunContext, ServiceReconfig, StepResult
from ..lib.httpd_conf import excluded_dirs, rewrite_listen
from ..lib.service import restart

logger = logging.getLogger(__name__)

# unmodified -> backed_up -> rewritten -> restart_attempted
#   -> succeeded
#   -> rolled_back -> restart_retried -> succeeded | failed
UNMODIFIED = "unmodified"
BACKED_UP = "backed_up"
REWRITTEN = "rewritten"
RESTART_ATTEMPTED = "restart_attempted"
ROLLED_BACK = "rolled_back"
RESTART_RETRIED = "restart_retried"
SUCCEEDED = "succeeded"
FAILED = "failed"


def _copy(src: str, dst: str, *, dry_run: bool) -> None:
    if dry_run:
        logger.info("Would copy %s -> %s", src, dst)
        return
    shutil.copy2(src, dst)


class ReconfigurePortStep:
    step_id = "55_reconfigure_port"

    def run(self, ctx: RunContext) -> StepResult:
        cfg = ctx.config
        dry_run = ctx.dry_run
        rc = ServiceReconfig(
            config_path=cfg.httpd_conf,
            backup_path=cfg.httpd_conf_backup,
            port_from=cfg.port_from,
            port_to=cfg.port_to,
        )

        if not Path(rc.config_path).is_file():
            return StepResult.skipped(f"{rc.config_path} not found")

        trail: List[str] = [UNMODIFIED]

        logger.info("Backing up %s to %s", rc.config_path, rc.backup_path)
        _copy(rc.config_path, rc.backup_path, dry_run=dry_run)
        trail.append(BACKED_UP)

        changed = rewrite_listen(
            cfg.httpd_root,
            rc.port_from,
            rc.port_to,
            exclude=excluded_dirs(cfg.httpd_exclude_dirs),
            skip=[rc.backup_path],
            dry_run=dry_run,
        )
        trail.append(REWRITTEN)

        trail.append(RESTART_ATTEMPTED)
        if restart(cfg.service_name, dry_run=dry_run):
            trail.append(SUCCEEDED)
            return StepResult.ok(f"Listen {rc.port_from} -> {rc.port_to}", files=changed, states=trail)

        logger.warning("%s failed to restart; restoring %s and retrying", cfg.service_name, rc.config_path)
        _copy(rc.backup_path, rc.config_path, dry_run=dry_run)
        trail.append(ROLLED_BACK)

        trail.append(RESTART_RETRIED)
        if restart(cfg.service_name, dry_run=dry_run):
            trail.append(SUCCEEDED)
            return StepResult.ok("restarted with original config", files=changed, states=trail)

        trail.append(FAILED)
        return StepResult.failed(f"{cfg.service_name} did not restart after rollback", files=changed, states=trail)
