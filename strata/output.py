"""Helpers for formatting CLI output safely across terminals."""

from __future__ import annotations

import sys

from rich.console import Console


def _encoding_supports(text: str, encoding: str | None) -> bool:
    if not encoding:
        return False
    try:
        text.encode(encoding)
    except (LookupError, UnicodeEncodeError):
        return False
    return True


def supports_unicode_output(console: Console | None = None) -> bool:
    sample = "✓✗"
    if console is not None and _encoding_supports(sample, console.encoding):
        return True
    return _encoding_supports(sample, sys.stdout.encoding)


def format_freshness(fresh: bool, console: Console | None = None) -> str:
    """Return a coloured fresh/stale marker, falling back to ASCII when needed."""
    if supports_unicode_output(console):
        icon = "✓" if fresh else "✗"
    else:
        icon = "OK" if fresh else "X"
    label = "fresh" if fresh else "stale"
    colour = "green" if fresh else "red"
    return f"[{colour}]{icon} {label}[/{colour}]"
