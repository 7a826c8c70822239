from __future__ import annotations

import logging
import re
from typing import List

logger = logging.getLogger(__name__)

LOOPBACK_NAMES = frozenset(
    {
        "localhost",
        "localhost.localdomain",
        "localhost4",
        "localhost4.localdomain4",
        "localhost6",
        "localhost6.localdomain6",
    }
)

_WS = re.compile(r"(\s+)")


def _rename_line(line: str, old: str, new: str) -> str:
    body, sep, comment = line.partition("#")
    parts = _WS.split(body)
    # Even indices are tokens, odd are whitespace. The first token is the address.
    seen_address = False
    for i in range(0, len(parts), 2):
        if not parts[i]:
            continue
        if not seen_address:
            seen_address = True
            continue
        if parts[i] == old:
            parts[i] = new
    return "".join(parts) + sep + comment


def _mapped_names(text: str) -> List[str]:
    names: List[str] = []
    for line in text.splitlines():
        fields = line.split("#", 1)[0].split()
        names.extend(fields[1:])
    return names


def _has_address(text: str, address: str) -> bool:
    return any(line.split("#", 1)[0].split()[:1] == [address] for line in text.splitlines())


def update_hosts_text(text: str, old: str, new: str) -> str:
    """Point a hosts table at ``new``.

    If ``old`` is mapped, every occurrence is renamed in place. Otherwise a
    minimal loopback mapping is appended, never duplicating existing entries.
    Loopback names are never renamed.
    """

    if old == new:
        return text

    names = _mapped_names(text)
    if old and old not in LOOPBACK_NAMES and old in names:
        lines = text.splitlines(keepends=True)
        out = []
        for line in lines:
            stripped = line.rstrip("\r\n")
            out.append(_rename_line(stripped, old, new) + line[len(stripped):])
        return "".join(out)

    additions: List[str] = []
    if not _has_address(text, "127.0.0.1"):
        additions.append("127.0.0.1   localhost")
    if new not in names:
        additions.append(f"127.0.0.1   {new}")
    if not additions:
        return text

    if text and not text.endswith("\n"):
        text += "\n"
    return text + "".join(a + "\n" for a in additions)
