"""ANSI escape codes for coloured terminal output."""

import os
import sys

_enabled = sys.stdout.isatty() and os.getenv("NO_COLOR") is None


def _code(seq: str) -> str:
    return seq if _enabled else ""


reset = _code("\033[0m")
bold = _code("\033[1m")
red = _code("\033[31m")
green = _code("\033[32m")
yellow = _code("\033[33m")
blue = _code("\033[34m")
cyan = _code("\033[36m")
grey = _code("\033[90m")

STATUS_COLOURS = {
    "on-track": green,
    "at-risk": yellow,
    "off-track": red,
}


def status(text: str, status_key: str) -> str:
    """Wrap *text* in the colour for a delivery status."""
    return f"{STATUS_COLOURS.get(status_key, '')}{text}{reset}"
