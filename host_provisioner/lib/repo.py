from __future__ import annotations

import logging
from pathlib import Path

from .files import write_file

logger = logging.getLogger(__name__)

LOCAL_REPO_NAME = "local-dvd.repo"
EMBEDDED_REPO_NAME = "embedded-inline.repo"

# Written verbatim when no usable install media is present.
EMBEDDED_REPO = """\
[AppStream]
name=Embedded AppStream
baseurl = http://ftp.scientificlinux.org/linux/redhat/rhel/rhel-9-beta/appstream/x86_64/
enabled = 1
gpgcheck = 0

[BaseOS]
name=Embedded BaseOS
baseurl = http://ftp.scientificlinux.org/linux/redhat/rhel/rhel-9-beta/baseos/x86_64/
enabled = 1
gpgcheck = 0
"""


def render_local_repo(mount_path: str) -> str:
    """Repo definition pointing at the BaseOS/AppStream trees of mounted media."""

    sections = []
    for name in ("BaseOS", "AppStream"):
        sections.append(
            "\n".join(
                [
                    f"[{name}]",
                    f"name=Local DVD {name}",
                    f"baseurl=file://{mount_path}/{name}",
                    "enabled=1",
                    "gpgcheck=0",
                ]
            )
        )
    return "\n\n".join(sections) + "\n"


def write_local_repo(repo_dir: str, mount_path: str, *, dry_run: bool = False) -> str:
    path = str(Path(repo_dir) / LOCAL_REPO_NAME)
    write_file(path, render_local_repo(mount_path), dry_run=dry_run)
    logger.info("Configured local DVD repo: %s (media at %s)", path, mount_path)
    return path


def write_embedded_repo(repo_dir: str, *, dry_run: bool = False) -> str:
    path = str(Path(repo_dir) / EMBEDDED_REPO_NAME)
    write_file(path, EMBEDDED_REPO, dry_run=dry_run)
    logger.info("Configured embedded repo: %s (remote mirrors)", path)
    return path
