"""Color string helpers for translucent fills."""

import re

RGB_PATTERN = re.compile(r"rgba?\((\d+),\s*(\d+),\s*(\d+)", re.IGNORECASE)
HEX3_PATTERN = re.compile(r"^[0-9a-f]{3}$", re.IGNORECASE)
HEX6_PATTERN = re.compile(r"^[0-9a-f]{6}$", re.IGNORECASE)

NAMED_COLORS = {
    "black": (0, 0, 0),
    "white": (255, 255, 255),
    "red": (255, 0, 0),
    "green": (0, 128, 0),
    "blue": (0, 0, 255),
    "gray": (128, 128, 128),
    "grey": (128, 128, 128),
    "purple": (128, 0, 128),
    "orange": (255, 165, 0),
}

WHITE = (255, 255, 255)


def parse_color_to_rgb(color: str) -> tuple[int, int, int]:
    """
    Parse rgb()/rgba(), #rgb, #rrggbb or a basic named color.

    Unknown colors resolve to white.
    """
    text = (color or "").strip()

    match = RGB_PATTERN.match(text)
    if match:
        return int(match.group(1)), int(match.group(2)), int(match.group(3))

    hex_text = text.replace("#", "")
    if HEX3_PATTERN.match(hex_text):
        return tuple(int(c * 2, 16) for c in hex_text)  # type: ignore[return-value]
    if HEX6_PATTERN.match(hex_text):
        return (int(hex_text[0:2], 16), int(hex_text[2:4], 16), int(hex_text[4:6], 16))

    return NAMED_COLORS.get(text.lower(), WHITE)


def rgba(color: str, alpha: float) -> str:
    """Same color with the given alpha as an rgba() string."""
    r, g, b = parse_color_to_rgb(color)
    return f"rgba({r},{g},{b},{alpha:g})"
