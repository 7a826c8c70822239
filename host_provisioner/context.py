"""Run context threaded through every step.

Nothing here touches the system; steps and ``lib`` do that.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple

from .config import ProvisionConfig


@dataclass(frozen=True)
class HostFacts:
    current_hostname: str
    desired_hostname: str
    optical_device: Optional[str] = None
    media_is_install_tree: bool = False
    gui_present: bool = False


LOCAL_DVD = "local_dvd"
EMBEDDED_REMOTE = "embedded_remote"


@dataclass
class RepositoryChoice:
    kind: str
    # Mount path for local_dvd, definition text for embedded_remote.
    source: str
    created_files: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class PackagePlan:
    to_remove: Set[str]
    to_install_if_missing: Set[str]
    install_gui_group: bool


@dataclass(frozen=True)
class ServiceReconfig:
    config_path: str
    backup_path: str
    port_from: int
    port_to: int


@dataclass(frozen=True)
class UserAccount:
    name: str
    password: str = "root"


class StepStatus(str, Enum):
    OK = "ok"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class StepResult:
    status: StepStatus
    detail: str = ""
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, detail: str = "", **data: Any) -> "StepResult":
        return cls(StepStatus.OK, detail, dict(data))

    @classmethod
    def skipped(cls, detail: str = "", **data: Any) -> "StepResult":
        return cls(StepStatus.SKIPPED, detail, dict(data))

    @classmethod
    def failed(cls, detail: str = "", **data: Any) -> "StepResult":
        return cls(StepStatus.FAILED, detail, dict(data))


@dataclass
class RunReport:
    entries: List[Tuple[str, StepResult]] = field(default_factory=list)

    def record(self, step_id: str, result: StepResult) -> None:
        self.entries.append((step_id, result))

    def get(self, step_id: str) -> Optional[StepResult]:
        for sid, result in self.entries:
            if sid == step_id:
                return result
        return None

    def failed_steps(self) -> List[str]:
        return [sid for sid, r in self.entries if r.status is StepStatus.FAILED]

    def as_dict(self) -> Dict[str, Any]:
        return {
            "steps": [
                {"step": sid, "status": r.status.value, "detail": r.detail, "data": r.data}
                for sid, r in self.entries
            ],
            "failed_steps": self.failed_steps(),
        }


@dataclass
class RunContext:
    config: ProvisionConfig
    facts: Optional[HostFacts] = None
    package_manager: str = "dnf"
    plan: Optional[PackagePlan] = None
    repository: Optional[RepositoryChoice] = None
    report: RunReport = field(default_factory=RunReport)

    @property
    def dry_run(self) -> bool:
        return self.config.dry_run

    @property
    def installs_allowed(self) -> bool:
        return not (self.facts and self.facts.gui_present)

    def require_facts(self) -> HostFacts:
        if self.facts is None:
            raise RuntimeError("host facts missing; run the probe step first")
        return self.facts


def derive_package_plan(facts: HostFacts, config: ProvisionConfig) -> PackagePlan:
    if facts.gui_present:
        return PackagePlan(
            to_remove=set(config.legacy_packages),
            to_install_if_missing=set(),
            install_gui_group=False,
        )
    return PackagePlan(
        to_remove=set(config.legacy_packages),
        to_install_if_missing=set(config.required_packages),
        install_gui_group=True,
    )
