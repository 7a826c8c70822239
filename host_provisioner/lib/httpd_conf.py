"""Listen-port rewriting across the web server config tree."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Callable, Iterator, List, Sequence

logger = logging.getLogger(__name__)


def excluded_dirs(names: Sequence[str]) -> Callable[[str], bool]:
    """Predicate matching directories by basename."""

    wanted = set(names)
    return lambda dirname: dirname in wanted


def walk_files(root: str, exclude: Callable[[str], bool]) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if not exclude(d))
        for name in sorted(filenames):
            yield Path(dirpath) / name


def listen_pattern(port_from: int) -> "re.Pattern[str]":
    return re.compile(rf"\bListen {port_from}\b")


def rewrite_line(line: str, port_from: int, port_to: int) -> str:
    return listen_pattern(port_from).sub(f"Listen {port_to}", line)


def rewrite_listen(
    root: str,
    port_from: int,
    port_to: int,
    *,
    exclude: Callable[[str], bool],
    skip: Sequence[str] = (),
    dry_run: bool = False,
) -> List[str]:
    """Rewrite ``Listen <from>`` to ``Listen <to>`` in every file under root.

    Files in ``skip`` (e.g. the backup copy) are left alone.
    Returns the files that contained the directive.
    """

    pattern = listen_pattern(port_from)
    skipped = {os.path.realpath(s) for s in skip}
    changed: List[str] = []
    for path in walk_files(root, exclude):
        if os.path.realpath(path) in skipped:
            continue
        try:
            text = path.read_text(encoding="utf-8")
        except (UnicodeDecodeError, OSError):
            continue
        if not pattern.search(text):
            continue
        changed.append(str(path))
        if dry_run:
            logger.info("Would rewrite Listen %s -> %s in %s", port_from, port_to, str(path))
            continue
        new_text = "".join(rewrite_line(ln, port_from, port_to) for ln in text.splitlines(keepends=True))
        path.write_text(new_text, encoding="utf-8")
        logger.info("Rewrote Listen %s -> %s in %s", port_from, port_to, str(path))
    return changed
