from __future__ import annotations

import logging
from typing import List

from ..context import RunContext, StepResult, UserAccount
from ..lib.accounts import ensure_account
from ..lib.command import CommandError

logger = logging.getLogger(__name__)


class ProvisionAccountsStep:
    step_id = "70_provision_accounts"

    def run(self, ctx: RunContext) -> StepResult:
        cfg = ctx.config
        accounts = [UserAccount(name=u, password=cfg.user_password) for u in cfg.users]

        created: List[str] = []
        failed: List[str] = []
        for account in accounts:
            try:
                if ensure_account(account, dry_run=ctx.dry_run):
                    created.append(account.name)
            except CommandError as e:
                logger.warning("Account %s: %s", account.name, e)
                failed.append(account.name)

        if failed:
            return StepResult.failed(f"accounts failed: {', '.join(failed)}", created=created, failed=failed)
        logger.info("Users created/updated")
        return StepResult.ok(created=created, updated=[a.name for a in accounts])
