"""CLI helpers for ROSTER.

Display-safe database URLs, OSC-8 hyperlinks where the terminal supports
them, stderr message emitters with ASCII fallbacks and the ``-L NAME=LEVEL``
option parser.
"""

from .db_url import sanitize_url
from .hyperlinks import hyperlink
from .log_level_parser import parse_log_level
from .messages import error, success, warn

__all__ = ["error", "hyperlink", "parse_log_level", "sanitize_url", "success", "warn"]
