"""One-line status messages for the ROSTER CLI.

All messages go to stderr so stdout stays clean for tables and piped output.
Each line starts with an emoji glyph, or an ASCII stand-in when stderr cannot
encode it.
"""

import click

GLYPHS = {
    "warn": ("⚠️", "[!]"),
    "success": ("✅", "[OK]"),
    "error": ("❌", "[X]"),
}


def _can_encode(character: str) -> bool:
    """True if stderr's encoding can represent `character`."""
    encoding = getattr(click.get_text_stream("stderr"), "encoding", None) or "ascii"
    try:
        character.encode(encoding)
    except UnicodeEncodeError:
        return False
    return True


def glyph(kind: str) -> str:
    """Return the glyph for `kind` (``warn``, ``success`` or ``error``)."""
    emoji, fallback = GLYPHS[kind]
    return emoji if _can_encode(emoji) else fallback


def warn(msg: str) -> None:
    """Yellow warning line on stderr."""
    click.secho(f"{glyph('warn')}  {msg}", fg="yellow", bold=True, err=True)


def success(msg: str) -> None:
    """Green success line on stderr."""
    click.secho(f"{glyph('success')}  {msg}", fg="green", bold=True, err=True)


def error(msg: str) -> None:
    """Red error line on stderr."""
    click.secho(f"{glyph('error')}  {msg}", fg="red", bold=True, err=True)
