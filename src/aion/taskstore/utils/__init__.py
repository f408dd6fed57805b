from .dates import format_timestamp, parse_timestamp, to_utc, utcnow
from .text import colorize_text

__all__ = [
    "colorize_text",
    "utcnow",
    "to_utc",
    "parse_timestamp",
    "format_timestamp",
]
