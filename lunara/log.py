"""Minimal tagged logging to standard error with printf-style formatting."""

from __future__ import annotations

import sys


def _log(tag: str, fmt: str, args: tuple) -> None:
    message = fmt % args if args else fmt
    sys.stderr.write(f"[{tag}] {message}\n")


def info(fmt: str, *args: object) -> None:
    _log("INFO", fmt, args)


def warn(fmt: str, *args: object) -> None:
    _log("WARN", fmt, args)


def error(fmt: str, *args: object) -> None:
    _log("ERROR", fmt, args)