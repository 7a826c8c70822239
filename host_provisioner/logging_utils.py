from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List

from .lib.env import PATHS

DEFAULT_LOG_PATH = PATHS.log_default
FALLBACK_LOG_NAME = "host-provisioner.log"

_CONFIGURED_ATTR = "_host_provisioner_configured"
_PATH_ATTR = "_host_provisioner_log_path"


def _open_transcript(log_path: str) -> logging.FileHandler:
    try:
        Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(log_path)
    except OSError:
        # /var/log is root-only; dry runs as a normal user land here.
        return logging.FileHandler(str(Path.cwd() / FALLBACK_LOG_NAME))


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
    also_console: bool = True,
) -> str:
    """Send the provisioning transcript to a file and the console.

    Every ``CMD`` line and step outcome ends up in the transcript, so an
    operator can see what a run did after the reboot. Calling this twice
    keeps the first setup. Returns the transcript path actually in use.
    """

    root = logging.getLogger()
    root.setLevel(level)

    if getattr(root, _CONFIGURED_ATTR, False):
        return getattr(root, _PATH_ATTR, log_path)

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    transcript = _open_transcript(log_path)
    handlers: List[logging.Handler] = [transcript]
    if also_console:
        handlers.append(logging.StreamHandler())

    for h in handlers:
        h.setFormatter(fmt)
        root.addHandler(h)

    chosen_path = transcript.baseFilename
    setattr(root, _CONFIGURED_ATTR, True)
    setattr(root, _PATH_ATTR, chosen_path)

    if chosen_path != os.path.abspath(log_path):
        logging.getLogger(__name__).warning("Cannot write %s; transcript goes to %s", log_path, chosen_path)
    return chosen_path
