from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Paths:
    config_default: str = "/etc/host-provisioner/config.yaml"
    report_default: str = "/var/lib/host-provisioner/report.json"
    log_default: str = "/var/log/host-provisioner.log"


PATHS = Paths()
