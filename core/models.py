"""
Models Module
Geometry, color and style primitives shared by every detector.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Optional, Mapping, Any
import uuid

from core.errors import InvariantViolation
from utils import css_values


@dataclass(frozen=True)
class BoundingBox:
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise InvariantViolation(
                f"Bounding box dimensions must be non-negative, got {self.width}x{self.height}"
            )

    @classmethod
    def coerce(cls, value: Any) -> 'BoundingBox':
        """Accept a BoundingBox, an (x, y, w, h) sequence or a mapping with x/y/width/height."""
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            return cls(float(value.get('x', 0)), float(value.get('y', 0)),
                       float(value.get('width', 0)), float(value.get('height', 0)))
        x, y, width, height = value
        return cls(float(x), float(y), float(width), float(height))

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height if self.height > 0 else 0.0

    def intersects(self, other: 'BoundingBox') -> bool:
        return (self.x < other.right and self.right > other.x and
                self.y < other.bottom and self.bottom > other.y)

    def contains(self, other: 'BoundingBox') -> bool:
        return (self.x <= other.x and self.y <= other.y and
                self.right >= other.right and self.bottom >= other.bottom)

    def overlap_area(self, other: 'BoundingBox') -> float:
        if not self.intersects(other):
            return 0.0
        overlap_w = min(self.right, other.right) - max(self.x, other.x)
        overlap_h = min(self.bottom, other.bottom) - max(self.y, other.y)
        return overlap_w * overlap_h

    def to_dict(self) -> Dict:
        return {'x': self.x, 'y': self.y, 'width': self.width, 'height': self.height}


@dataclass(frozen=True)
class HslColor:
    h: float = 0.0
    s: float = 0.0
    l: float = 0.0

    @classmethod
    def from_css(cls, value: Optional[str]) -> 'HslColor':
        """Build from any CSS color; unparseable values give the zero color."""
        rgba = css_values.parse_rgba(value)
        if rgba is None:
            return cls()
        h, s, l = css_values.rgba_to_hsl(rgba)
        return cls(h, s, l)

    def to_dict(self) -> Dict:
        return {'h': round(self.h, 2), 's': round(self.s, 4), 'l': round(self.l, 4)}


class VisualProperties:
    """Measured box plus resolved style bag of one element. Read-only after creation."""

    def __init__(self, bounding_box: BoundingBox, styles: Optional[Mapping[str, str]] = None,
                 viewport_width: float = 1920.0, viewport_height: float = 1080.0):
        self.bounding_box = bounding_box
        self.styles = MappingProxyType(dict(styles or {}))
        self.viewport_width = viewport_width
        self.viewport_height = viewport_height

    def style(self, name: str) -> Optional[str]:
        """Style value or None when the property was not resolved."""
        value = self.styles.get(name)
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    @property
    def width(self) -> float:
        return self.bounding_box.width

    @property
    def height(self) -> float:
        return self.bounding_box.height

    @property
    def background_color(self) -> Optional[str]:
        return self.style('background-color')

    @property
    def color(self) -> Optional[str]:
        return self.style('color')

    @property
    def display(self) -> Optional[str]:
        return self.style('display')

    @property
    def position(self) -> Optional[str]:
        return self.style('position')

    @property
    def flex_direction(self) -> Optional[str]:
        return self.style('flex-direction')

    @property
    def box_shadow(self) -> Optional[str]:
        return self.style('box-shadow')

    @property
    def border(self) -> Optional[str]:
        return self.style('border')

    @property
    def border_radius(self) -> Optional[str]:
        return self.style('border-radius')

    @property
    def has_shadow(self) -> bool:
        shadow = self.box_shadow
        return shadow is not None and shadow.lower() != 'none'

    @property
    def has_border(self) -> bool:
        border = self.border or self.style('border-width')
        if border is None:
            return False
        if {'none', 'hidden'} & set(css_values.idents(border)):
            return False
        if {'none', 'hidden'} & set(css_values.idents(self.style('border-style'))):
            return False
        widths = css_values.px_values(border)
        if widths:
            return any(w > 0 for w in widths)
        # keyword widths such as "thin solid red"
        return bool(css_values.idents(border))

    @property
    def has_border_radius(self) -> bool:
        return self.parsed_border_radius > 0

    @property
    def has_distinct_background(self) -> bool:
        background = self.background_color
        if background is None or background.lower() in ('none', 'transparent'):
            return False
        rgba = css_values.parse_rgba(background)
        return rgba is None or rgba[3] > 0

    @property
    def is_centered(self) -> bool:
        return abs(self.bounding_box.center_x - self.viewport_width / 2) < 200

    @property
    def parsed_z_index(self) -> int:
        value = css_values.parse_int(self.style('z-index'))
        return value if value is not None else 0

    @property
    def parsed_font_size(self) -> float:
        value = css_values.first_number(self.style('font-size'))
        return value if value is not None else 16.0

    @property
    def parsed_font_weight(self) -> int:
        weight = self.style('font-weight')
        if weight is None:
            return 400
        if weight.lower() == 'normal':
            return 400
        if weight.lower() == 'bold':
            return 700
        value = css_values.parse_int(weight)
        return value if value is not None else 400

    @property
    def parsed_padding(self) -> float:
        values = css_values.px_values(self.style('padding'))
        return sum(values) / len(values) if values else 0.0

    @property
    def parsed_border_radius(self) -> float:
        value = css_values.first_number(self.border_radius)
        return value if value is not None else 0.0

    @property
    def background_hsl(self) -> HslColor:
        return HslColor.from_css(self.background_color)

    @property
    def text_hsl(self) -> HslColor:
        return HslColor.from_css(self.color)

    def to_dict(self) -> Dict:
        return {'bounding_box': self.bounding_box.to_dict(), 'styles': dict(self.styles)}


def new_component_id() -> str:
    return uuid.uuid4().hex[:8]


@dataclass(eq=False)
class DetectedComponent:
    type: str
    confidence: float
    fingerprint: Any
    visual_properties: VisualProperties
    dom_index: int
    selector: str = ''
    element_id: Optional[str] = None
    classes: List[str] = field(default_factory=list)
    text: str = ''
    outer_html: str = ''
    id: str = field(default_factory=new_component_id)
    parent_id: Optional[str] = None
    child_ids: List[str] = field(default_factory=list)
    composition: List[str] = field(default_factory=list)
    is_atomic: bool = True
    is_compound: bool = False
    section_id: Optional[str] = None

    @property
    def bounding_box(self) -> BoundingBox:
        return self.visual_properties.bounding_box

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'type': self.type,
            'confidence': self.confidence,
            'selector': self.selector,
            'element_id': self.element_id,
            'classes': list(self.classes),
            'text': self.text,
            'dom_index': self.dom_index,
            'fingerprint': self.fingerprint.to_dict() if self.fingerprint is not None else None,
            'visual_properties': self.visual_properties.to_dict(),
            'outer_html': self.outer_html,
            'parent_id': self.parent_id,
            'child_ids': list(self.child_ids),
            'composition': list(self.composition),
            'is_atomic': self.is_atomic,
            'is_compound': self.is_compound,
            'section_id': self.section_id,
        }
