from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


def write_file(path: str, contents: str, *, mode: Optional[int] = None, dry_run: bool = False) -> None:
    p = Path(path)
    if dry_run:
        logger.info("Would write %s", str(p))
        return
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(contents, encoding="utf-8")
    if mode is not None:
        os.chmod(p, mode)


def append_line_once(path: str, line: str, *, dry_run: bool = False) -> bool:
    """Append ``line`` unless an identical line is already present.

    Returns True if the file was (or would be) changed.
    """

    p = Path(path)
    existing = p.read_text(encoding="utf-8") if p.exists() else ""
    if line in existing.splitlines():
        return False
    if dry_run:
        logger.info("Would append to %s: %s", str(p), line)
        return True
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("a", encoding="utf-8") as f:
        if existing and not existing.endswith("\n"):
            f.write("\n")
        f.write(line + "\n")
    return True


def touch(path: str, *, dry_run: bool = False) -> None:
    p = Path(path)
    if dry_run:
        logger.info("Would touch %s", str(p))
        return
    p.parent.mkdir(parents=True, exist_ok=True)
    p.touch(exist_ok=True)


def remove_file(path: str, *, dry_run: bool = False) -> bool:
    """Delete a regular file. Returns True if it existed."""

    p = Path(path)
    if not p.is_file():
        return False
    if dry_run:
        logger.info("Would delete %s", str(p))
        return True
    p.unlink()
    return True
