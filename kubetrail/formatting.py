"""
Log line filtering and terminal rendering.

This module turns raw log lines into what the operator sees: it decides
whether a line passes the substring filter, optionally rewrites structured
JSON lines into a compact ``[level] ts: msg`` form, and prints each line to
stdout behind a colored pod-name prefix.

Key Functions:
- line_matches: Substring filter applied to every retrieved line
- maybe_parse_json: Parse a line as a JSON object if it is one
- pretty_json: Render a parsed JSON log record
- pod_color: Stable color for a pod name
- LinePrinter: Writes prefixed lines through a rich Console

Example:
    ```python
    printer = LinePrinter(pretty_json=True)
    if line_matches(line, "ERROR"):
        printer.emit("web-7d9c-abcde", line)
    ```
"""

import json
import zlib
from typing import Any, Dict, Optional

from rich.console import Console
from rich.text import Text

from .constants import (
    JSON_DEFAULT_LEVEL, JSON_DEFAULT_MESSAGE, JSON_DEFAULT_TIMESTAMP,
    JSON_LEVEL_KEYS, JSON_MESSAGE_KEYS, JSON_TIMESTAMP_KEYS, POD_COLOR_PALETTE
)


def line_matches(line: str, line_filter: str) -> bool:
    """Return True if ``line`` contains ``line_filter`` (an empty filter matches everything)."""
    return not line_filter or line_filter in line


def maybe_parse_json(line: str) -> Optional[Dict[str, Any]]:
    """Parse ``line`` as a JSON object, returning None for anything else."""
    try:
        value = json.loads(line)
    except ValueError:
        return None
    return value if isinstance(value, dict) else None


def _first_string(value: Dict[str, Any], keys, default: str) -> str:
    for key in keys:
        found = value.get(key)
        if isinstance(found, str):
            return found
    return default


def pretty_json(value: Dict[str, Any]) -> str:
    """
    Render a structured log record as ``[level] ts: msg``.

    The first string-valued key found in each of the timestamp
    (``ts``/``timestamp``/``time``), level (``level``/``lvl``/``severity``)
    and message (``msg``/``message``/``log``) groups is used.

    Example:
        ```python
        pretty_json({"ts": "2025-07-28T12:01:00Z", "msg": "healthy", "lvl": "debug"})
        # '[debug] 2025-07-28T12:01:00Z: healthy'
        ```
    """
    ts = _first_string(value, JSON_TIMESTAMP_KEYS, JSON_DEFAULT_TIMESTAMP)
    level = _first_string(value, JSON_LEVEL_KEYS, JSON_DEFAULT_LEVEL)
    msg = _first_string(value, JSON_MESSAGE_KEYS, JSON_DEFAULT_MESSAGE)
    return f"[{level}] {ts}: {msg}"


def pod_color(pod_name: str) -> str:
    """Stable palette color for a pod name."""
    return POD_COLOR_PALETTE[zlib.crc32(pod_name.encode("utf-8")) % len(POD_COLOR_PALETTE)]


class LinePrinter:
    """
    Prints pod log lines to the terminal.

    Attributes:
        console: rich Console writing to stdout
        pretty_json: Rewrite JSON object lines with ``pretty_json``
    """

    def __init__(self, console: Optional[Console] = None, pretty_json: bool = False):
        self.console = console or Console(highlight=False, soft_wrap=True)
        self.pretty_json = pretty_json

    def render(self, pod_name: str, line: str) -> Text:
        if self.pretty_json:
            parsed = maybe_parse_json(line)
            if parsed is not None:
                line = pretty_json(parsed)
        return Text.assemble((pod_name, pod_color(pod_name)), " ", line)

    def emit(self, pod_name: str, line: str) -> None:
        self.console.print(self.render(pod_name, line))
