from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Dict, List

from .files import write_file

logger = logging.getLogger(__name__)

HELPER_SCRIPTS: Dict[str, str] = {
    "ex200": """\
#!/bin/bash
if [ -f ~/.ex200/ex200.conf ]; then
    cat ~/.ex200/ex200.conf
else
    echo "There Is No Message For You Dude"
fi
""",
    "welcome_message": """\
#!/bin/bash
CURRENT_USER=$(whoami)
if [ "$CURRENT_USER" == "pandora" ]; then
    echo "$USER_MESSAGE"
else
    echo "No message specified"
fi
""",
}


def copy_glob(src: str, pattern: str, dst: str, *, dry_run: bool = False) -> List[str]:
    """Copy files matching ``pattern`` from ``src`` into ``dst`` (overwriting)."""

    s = Path(src)
    d = Path(dst)
    if not s.is_dir():
        raise FileNotFoundError(src)

    copied: List[str] = []
    for item in sorted(s.glob(pattern)):
        if not item.is_file():
            continue
        out = d / item.name
        if dry_run:
            logger.info("Would copy %s -> %s", str(item), str(out))
        else:
            d.mkdir(parents=True, exist_ok=True)
            shutil.copy2(item, out)
        copied.append(str(out))
    return copied


def install_helper_scripts(bin_dir: str, *, dry_run: bool = False) -> List[str]:
    written: List[str] = []
    for name, body in HELPER_SCRIPTS.items():
        path = str(Path(bin_dir) / name)
        write_file(path, body, mode=0o755, dry_run=dry_run)
        written.append(path)
    return written


def remove_tree(path: str, *, dry_run: bool = False) -> None:
    p = Path(path)
    if not p.exists():
        return
    if dry_run:
        logger.info("Would remove %s", str(p))
        return
    if p.is_dir() and not p.is_symlink():
        shutil.rmtree(p)
    else:
        p.unlink()
