from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import Optional

from ..context import EMBEDDED_REMOTE, LOCAL_DVD, RepositoryChoice, RunContext, StepResult
from ..lib.command import run_cmd
from ..lib.facts import probe_is_mounted, probe_media_is_install_tree
from ..lib.files import append_line_once
from ..lib.fstab import iso_entry
from ..lib.repo import EMBEDDED_REPO, write_embedded_repo, write_local_repo

logger = logging.getLogger(__name__)


def mount_media(device: str, mount_point: str, *, dry_run: bool = False) -> bool:
    """Mount install media read-only. False means "treat as no device"."""

    if not dry_run:
        try:
            Path(mount_point).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning("Cannot create mount point %s (%s)", mount_point, e)
            return False

    if probe_is_mounted(mount_point):
        logger.info("%s already mounted", mount_point)
        return True

    r = run_cmd(["mount", "-o", "ro", device, mount_point], check=False, dry_run=dry_run)
    if not r.ok:
        logger.warning("Mount failed for %s; falling back to embedded repo", device)
        return False
    logger.info("Mounted %s -> %s", device, mount_point)
    return True


class ResolveRepositoryStep:
    """Configure exactly one package source: local media, else embedded mirrors."""

    step_id = "20_resolve_repository"

    def run(self, ctx: RunContext) -> StepResult:
        facts = ctx.require_facts()
        cfg = ctx.config
        dry_run = ctx.dry_run

        device: Optional[str] = facts.optical_device
        mount_point = cfg.dvd_mount

        if device is None:
            logger.info("No optical device found (%s)", ", ".join(cfg.optical_devices))
        elif not mount_media(device, mount_point, dry_run=dry_run):
            device = None

        install_tree = device is not None and probe_media_is_install_tree(mount_point)
        if device is not None and not install_tree:
            logger.info("Mounted media at %s is not an install tree", mount_point)
        ctx.facts = dataclasses.replace(facts, media_is_install_tree=install_tree)

        try:
            if install_tree:
                choice = RepositoryChoice(kind=LOCAL_DVD, source=mount_point)
                ctx.repository = choice
                choice.created_files.append(write_local_repo(cfg.repo_dir, mount_point, dry_run=dry_run))
                # Only local media is persisted in the mount table.
                append_line_once(cfg.fstab_file, iso_entry(str(device), mount_point).render(), dry_run=dry_run)
            else:
                choice = RepositoryChoice(kind=EMBEDDED_REMOTE, source=EMBEDDED_REPO)
                ctx.repository = choice
                choice.created_files.append(write_embedded_repo(cfg.repo_dir, dry_run=dry_run))
        except Exception as e:
            logger.exception("Repository setup failed; continuing without a configured repo")
            if ctx.repository is not None and not ctx.repository.created_files:
                ctx.repository = None
            return StepResult.failed(str(e))

        return StepResult.ok(choice.kind, created_files=list(choice.created_files))
