# Terminal styling for ccs output
import os
import sys
from typing import TextIO

# ABOUTME: Terminal codes for CLI output
BOLD = "\033[1m"
RESET = "\033[0m"
GRAY = "\033[90m"
RED = "\033[91m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
CYAN = "\033[96m"


def use_color(stream: TextIO | None = None) -> bool:
    """Color only when writing to a terminal and NO_COLOR is unset."""
    stream = stream or sys.stdout
    if os.environ.get("NO_COLOR"):
        return False
    return hasattr(stream, "isatty") and stream.isatty()


def style(text: str, *codes: str, stream: TextIO | None = None) -> str:
    if not codes or not use_color(stream):
        return text
    return "".join(codes) + text + RESET


def bold(text: str) -> str:
    return style(text, BOLD)


def gray(text: str) -> str:
    return style(text, GRAY)


def red(text: str) -> str:
    return style(text, RED)


def green(text: str) -> str:
    return style(text, GREEN)


def yellow(text: str) -> str:
    return style(text, YELLOW)


def cyan(text: str) -> str:
    return style(text, CYAN)
