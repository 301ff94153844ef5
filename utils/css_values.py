"""
CSS value helpers built on tinycss2 tokens.
"""

from typing import List, Optional, Tuple
import colorsys
import tinycss2
import tinycss2.color3

RGBA = Tuple[float, float, float, float]


def _tokens(value: Optional[str]):
    if not value:
        return []
    return [t for t in tinycss2.parse_component_value_list(value) if t.type not in ('whitespace', 'comment')]


def px_values(value: Optional[str]) -> List[float]:
    """Return every px length in a value; unitless zeros count as 0px."""
    result = []
    for token in _tokens(value):
        if token.type == 'dimension' and token.lower_unit == 'px':
            result.append(float(token.value))
        elif token.type == 'number' and token.value == 0:
            result.append(0.0)
    return result


def first_number(value: Optional[str]) -> Optional[float]:
    """First numeric token (number, dimension or percentage) in a value."""
    for token in _tokens(value):
        if token.type in ('number', 'dimension', 'percentage'):
            return float(token.value)
    return None


def parse_int(value: Optional[str]) -> Optional[int]:
    tokens = _tokens(value)
    if len(tokens) == 1 and tokens[0].type == 'number' and tokens[0].is_integer:
        return tokens[0].int_value
    return None


def idents(value: Optional[str]) -> List[str]:
    return [t.lower_value for t in _tokens(value) if t.type == 'ident']


def parse_rgba(value: Optional[str]) -> Optional[RGBA]:
    """Parse a CSS color into RGBA floats in [0, 1]; None when not a color."""
    if not value:
        return None
    color = tinycss2.color3.parse_color(value.strip())
    if color is None or isinstance(color, str):
        # currentColor carries no value of its own
        return None
    return (color.red, color.green, color.blue, color.alpha)


def is_transparent(value: Optional[str]) -> bool:
    rgba = parse_rgba(value)
    return rgba is None or rgba[3] == 0


def rgba_to_hsl(rgba: RGBA) -> Tuple[float, float, float]:
    """Convert RGBA floats to (hue degrees, saturation, lightness)."""
    h, l, s = colorsys.rgb_to_hls(rgba[0], rgba[1], rgba[2])
    return (h * 360.0, s, l)


def color_key(value: Optional[str], step: int = 32) -> str:
    """Quantized hex key for a color, 'none' for transparent or missing colors."""
    rgba = parse_rgba(value)
    if rgba is None or rgba[3] == 0:
        return 'none'
    channels = []
    for channel in rgba[:3]:
        level = channel * 255
        channels.append(min(255, int(round(level / step)) * step))
    return '#{:02x}{:02x}{:02x}'.format(*channels)


def normalize_spacing(value: Optional[str]) -> str:
    """Collapse a spacing shorthand to its canonical form ('8px 8px 8px 8px' -> '8px')."""
    if not value:
        return ''
    parts = value.split()
    if len(parts) == 4:
        top, right, bottom, left = parts
        if top == right == bottom == left:
            return top
        if top == bottom and right == left:
            return f"{top} {right}"
        if right == left:
            return f"{top} {right} {bottom}"
    elif len(parts) == 3 and parts[0] == parts[1] == parts[2]:
        return parts[0]
    elif len(parts) == 2 and parts[0] == parts[1]:
        return parts[0]
    return ' '.join(parts)
