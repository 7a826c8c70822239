from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol, Sequence

from .context import RunContext, RunReport, StepResult, StepStatus

logger = logging.getLogger(__name__)


class Step(Protocol):
    """A single best-effort provisioning step."""

    step_id: str

    def run(self, ctx: RunContext) -> StepResult:
        ...


ContinuationPolicy = Callable[[str, StepResult], bool]


def never_abort(step_id: str, result: StepResult) -> bool:
    """Provisioning is never blocked by a failed step."""

    return True


def run_step(ctx: RunContext, step: Step) -> StepResult:
    """Run one step; anything it raises becomes a failed result."""

    logger.info("Running step %s", step.step_id)
    try:
        result = step.run(ctx)
    except Exception as e:
        logger.exception("Step %s failed", step.step_id)
        result = StepResult.failed(str(e))

    if result.status is StepStatus.FAILED:
        logger.warning("Step %s: failed (%s)", step.step_id, result.detail)
    else:
        logger.info("Step %s: %s%s", step.step_id, result.status.value, f" ({result.detail})" if result.detail else "")

    ctx.report.record(step.step_id, result)
    return result


def run_pipeline(
    ctx: RunContext,
    steps: Sequence[Step],
    *,
    teardown: Optional[Step] = None,
    policy: ContinuationPolicy = never_abort,
) -> RunReport:
    """Run steps in order, then teardown regardless of outcome."""

    for step in steps:
        result = run_step(ctx, step)
        if not policy(step.step_id, result):
            logger.warning("Stopping after %s (policy)", step.step_id)
            break

    failed = ctx.report.failed_steps()
    if failed:
        logger.warning("Provisioning finished with failed steps: %s", ", ".join(failed))
    else:
        logger.info("Provisioning finished; no failed steps")

    if teardown is not None:
        run_step(ctx, teardown)

    return ctx.report
