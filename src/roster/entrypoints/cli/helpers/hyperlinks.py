"""OSC-8 terminal hyperlinks with a plain-text fallback."""

import os
import sys
from typing import TextIO

OSC8_TERMINALS = frozenset({"apple_terminal", "vscode", "iterm.app", "wezterm", "kitty"})


def supports_osc8(stream: TextIO | None = None) -> bool:
    """Best-effort check that `stream` (default stdout) renders OSC-8 links.

    Piped or redirected streams never do. Otherwise the terminal is
    recognized from ``TERM_PROGRAM``, ``WT_SESSION``, ``VTE_VERSION`` or
    ``TERM``.
    """
    stream = stream or sys.stdout
    if not getattr(stream, "isatty", lambda: False)():
        return False
    return bool(
        (os.getenv("TERM_PROGRAM") or "").lower() in OSC8_TERMINALS
        or os.getenv("WT_SESSION")
        or os.getenv("VTE_VERSION")
        or os.getenv("TERM", "").startswith(("alacritty", "konsole"))
    )


def hyperlink(url: str, label: str | None = None) -> str:
    """Wrap `url` in an OSC-8 link (BEL-terminated) when supported.

    Args:
        url: Link target.
        label: Visible text; defaults to the URL itself.
    """
    text = label or url
    if not supports_osc8():
        return url if label is None else f"{label} ({url})"
    return f"\x1b]8;;{url}\x07{text}\x1b]8;;\x07"
