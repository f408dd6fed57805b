from typing import Literal

__all__ = [
    "colorize_text",
]

_COLOR_CODES = {
    "red": "\033[31m",
    "orange": "\033[38;5;208m",
    "light_grey": "\033[37m",
    "bright_grey": "\033[97m",
    "bright_red": "\033[91m",
    "reset": "\033[0m",
}


def colorize_text(
        text: str,
        color: Literal["red", "orange", "light_grey", "bright_grey", "bright_red", "reset"] = "reset"
) -> str:
    """
    Wrap text in an ANSI color escape for terminal output

    Args:
        text (str): Text to colorize
        color (str): Color name, unknown names leave the text uncolored

    Returns:
        str: Colorized text
    """
    color_prefix = _COLOR_CODES.get(color, '')
    return f"{color_prefix}{text}{_COLOR_CODES['reset']}"
