from __future__ import annotations

import logging

from ..context import UserAccount
from .command import run_cmd
from .facts import probe_user_exists

logger = logging.getLogger(__name__)


def ensure_account(account: UserAccount, *, dry_run: bool = False) -> bool:
    """Create the account if absent and always reset its password.

    A failed ``useradd`` is logged only; the password reset is still
    attempted and raises ``CommandError`` if it fails.

    Returns True if the account was created by this call.
    """

    created = False
    if not probe_user_exists(account.name):
        r = run_cmd(["useradd", account.name], check=False, dry_run=dry_run)
        if r.ok:
            created = True
        else:
            logger.warning("useradd %s exited %s; resetting password anyway", account.name, r.returncode)

    run_cmd(["chpasswd"], input_text=f"{account.name}:{account.password}\n", dry_run=dry_run)
    return created
