from __future__ import annotations

import logging
import os
import sys
import time
from pathlib import Path
from typing import Callable, List, Optional

from ..context import RunContext, StepResult
from ..lib.command import run_cmd
from ..lib.files import remove_file
from ..lib.pkg import pm_clean_all, pm_remove
from ..lib.service import set_default_target

logger = logging.getLogger(__name__)

_PACKAGE_DIR = Path(__file__).resolve().parents[1]


def entry_script() -> Optional[str]:
    """The script this run was started from, if it is a standalone file.

    ``python -m host_provisioner`` points argv[0] inside the package; that is
    never deleted.
    """

    if not sys.argv or not sys.argv[0]:
        return None
    p = Path(sys.argv[0]).resolve()
    if not p.is_file() or _PACKAGE_DIR in p.parents:
        return None
    return str(p)


def history_file() -> str:
    return os.environ.get("HISTFILE") or str(Path.home() / ".bash_history")


def clear_history(path: str, *, dry_run: bool = False) -> bool:
    p = Path(path)
    if not p.is_file():
        return False
    if dry_run:
        logger.info("Would truncate %s", str(p))
        return True
    p.write_bytes(b"")
    return True


class TeardownStep:
    """Undo transient setup and reboot. Always the last step of a run.

    ``before_reboot`` is called with the teardown outcome so far, just before
    the reboot command. The run report is written there so it is on disk
    before the host goes down.
    """

    step_id = "90_teardown"

    def __init__(self, before_reboot: Optional[Callable[[StepResult], None]] = None) -> None:
        self.before_reboot = before_reboot

    def _attempt(self, label: str, errors: List[str], fn: Callable[[], object]) -> None:
        try:
            fn()
        except Exception as e:
            logger.warning("Teardown: %s failed: %s", label, e)
            errors.append(label)

    def _result(self, errors: List[str], deleted: List[str], rebooted: bool) -> StepResult:
        if errors:
            return StepResult.failed(f"teardown actions failed: {', '.join(errors)}", deleted=deleted)
        return StepResult.ok(deleted=deleted, rebooted=rebooted)

    def run(self, ctx: RunContext) -> StepResult:
        cfg = ctx.config
        pm = ctx.package_manager
        dry_run = ctx.dry_run
        errors: List[str] = []

        created = list(ctx.repository.created_files) if ctx.repository else []
        deleted: List[str] = []
        if not created:
            logger.info("No repo files were created by this run")
        for path in created:
            def _delete(path: str = path) -> None:
                if remove_file(path, dry_run=dry_run):
                    logger.info("Deleted %s", path)
                    deleted.append(path)

            self._attempt(f"delete {path}", errors, _delete)
        if deleted:
            self._attempt("clean package cache", errors, lambda: pm_clean_all(pm, dry_run=dry_run))

        # Unconditional second removal of the legacy packages.
        legacy = sorted(ctx.plan.to_remove) if ctx.plan else cfg.legacy_packages
        if legacy:
            self._attempt("remove legacy packages", errors, lambda: pm_remove(pm, legacy, check=False, dry_run=dry_run))

        self._attempt(
            "set default target",
            errors,
            lambda: set_default_target(cfg.default_target, dry_run=dry_run),
        )

        hist = cfg.history_file or history_file()
        self._attempt("clear shell history", errors, lambda: clear_history(hist, dry_run=dry_run))

        if cfg.self_delete:
            script = cfg.self_path or entry_script()
            if script:
                logger.info("Removing provisioning script %s", script)
                self._attempt("self delete", errors, lambda: remove_file(script, dry_run=dry_run))

        if cfg.reboot:
            logger.info("Rebooting now...")
            if self.before_reboot is not None:
                hook = self.before_reboot
                self._attempt("before reboot", errors, lambda: hook(self._result(errors, deleted, True)))
            time.sleep(cfg.reboot_delay if not dry_run else 0)
            # Fire-and-forget: nothing runs after this.
            run_cmd(["reboot"], check=False, dry_run=dry_run)
        else:
            logger.info("Reboot disabled by configuration")

        return self._result(errors, deleted, cfg.reboot)
