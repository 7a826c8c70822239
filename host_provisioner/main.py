from __future__ import annotations

import argparse
import logging
from typing import Optional

from .config import ProvisionConfig, load_config
from .context import RunContext, RunReport, StepResult
from .lib.env import PATHS
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .pipeline import run_pipeline
from .report_store import save_report
from .steps import (
    ActivateServiceStep,
    FetchDocsStep,
    InstallDesktopStep,
    InstallPackagesStep,
    ProbeFactsStep,
    ProvisionAccountsStep,
    ProvisionContentStep,
    ReconfigurePortStep,
    RemoveLegacyPackageStep,
    ResolveRepositoryStep,
    SetHostnameStep,
    TeardownStep,
)

logger = logging.getLogger(__name__)


def build_steps():
    return [
        ProbeFactsStep(),
        SetHostnameStep(),
        ResolveRepositoryStep(),
        RemoveLegacyPackageStep(),
        InstallPackagesStep(),
        ActivateServiceStep(),
        ReconfigurePortStep(),
        ProvisionContentStep(),
        ProvisionAccountsStep(),
        InstallDesktopStep(),
        FetchDocsStep(),
    ]


def _write_report(path: str, report: RunReport) -> None:
    try:
        save_report(path, report)
    except OSError as e:
        logger.warning("Could not write run report to %s: %s", path, e)


def provision(config: ProvisionConfig, *, report_path: Optional[str] = None) -> RunReport:
    """Run the whole provisioning sequence once, then tear down.

    With a report path, the report is written before the reboot is issued
    and again once the run returns.
    """

    ctx = RunContext(config=config)

    def before_reboot(teardown_result: StepResult) -> None:
        if report_path:
            interim = RunReport(entries=list(ctx.report.entries))
            interim.record(TeardownStep.step_id, teardown_result)
            _write_report(report_path, interim)

    try:
        return run_pipeline(ctx, build_steps(), teardown=TeardownStep(before_reboot=before_reboot))
    finally:
        if report_path:
            _write_report(report_path, ctx.report)


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="host-provisioner")
    p.add_argument("--config", default=PATHS.config_default, help="YAML overrides (skipped if missing)")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to provisioning log")
    p.add_argument("--report", default=PATHS.report_default, help="Path to run report (json|yaml)")
    p.add_argument("--dry-run", action="store_true", help="Log mutating actions without performing them")
    p.add_argument("--no-reboot", action="store_true", help="Skip the final reboot")

    args = p.parse_args(argv)

    configure_logging(log_path=args.log)
    logger.info("=== Host provisioning starting ===")

    config = load_config(args.config).with_overrides(
        dry_run=True if args.dry_run else None,
        reboot=False if args.no_reboot else None,
    )
    provision(config, report_path=args.report)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
