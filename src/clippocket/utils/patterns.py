import re

EMAIL_PATTERN = re.compile(r"^[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}$", re.IGNORECASE)

HEX_COLOR_PATTERN = re.compile(r"^#([0-9a-fA-F]{3}){1,2}$")

COLOR_FUNCTION_PREFIXES = ("rgb(", "rgba(", "hsl(", "hsla(")


def is_color_string(value: str) -> bool:
    """True for ``#RGB``/``#RRGGBB`` hex colors and rgb()/hsl() style colors."""
    return bool(HEX_COLOR_PATTERN.match(value)) or value.startswith(COLOR_FUNCTION_PREFIXES)
