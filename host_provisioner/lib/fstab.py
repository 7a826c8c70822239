from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FstabEntry:
    device: str
    mountpoint: str
    fstype: str
    options: str = "defaults"
    dump: int = 0
    passno: int = 0

    def render(self) -> str:
        return f"{self.device} {self.mountpoint} {self.fstype} {self.options} {self.dump} {self.passno}"


def iso_entry(device: str, mountpoint: str) -> FstabEntry:
    """Read-only entry for install media."""

    return FstabEntry(device=device, mountpoint=mountpoint, fstype="iso9660", options="loop,ro")
