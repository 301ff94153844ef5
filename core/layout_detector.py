"""
Layout Detector Module
Describes the flexbox or grid layout of an element from its resolved styles.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional
import logging

import tinycss2

from utils import css_values

logger = logging.getLogger(__name__)


class LayoutType(Enum):
    BLOCK = 'block'
    FLEX = 'flex'
    GRID = 'grid'
    INLINE_BLOCK = 'inline-block'
    INLINE_FLEX = 'inline-flex'
    INLINE_GRID = 'inline-grid'
    TABLE = 'table'
    NONE = 'none'


DISPLAY_TYPES = {
    'flex': LayoutType.FLEX,
    'inline-flex': LayoutType.INLINE_FLEX,
    'grid': LayoutType.GRID,
    'inline-grid': LayoutType.INLINE_GRID,
    'inline-block': LayoutType.INLINE_BLOCK,
    'table': LayoutType.TABLE,
    'table-cell': LayoutType.TABLE,
    'table-row': LayoutType.TABLE,
    'none': LayoutType.NONE,
}


@dataclass
class FlexboxLayout:
    direction: str = 'row'
    justify_content: str = 'flex-start'
    align_items: str = 'stretch'
    wrap: str = 'nowrap'
    gap: float = 0.0
    row_gap: float = 0.0
    column_gap: float = 0.0


@dataclass
class GridLayout:
    columns: int = 0
    rows: int = 1
    column_sizes: List[str] = field(default_factory=list)
    row_sizes: List[str] = field(default_factory=list)
    gap: float = 0.0
    row_gap: float = 0.0
    column_gap: float = 0.0


@dataclass
class LayoutInfo:
    selector: str
    type: LayoutType = LayoutType.BLOCK
    flexbox: Optional[FlexboxLayout] = None
    grid: Optional[GridLayout] = None

    def to_dict(self) -> Dict:
        return {
            'selector': self.selector,
            'type': self.type.value,
            'flexbox': self.flexbox.__dict__.copy() if self.flexbox else None,
            'grid': self.grid.__dict__.copy() if self.grid else None,
        }


def parse_pixels(value: Optional[str]) -> float:
    values = css_values.px_values(value)
    return values[0] if values else 0.0


def parse_grid_template(template: Optional[str]) -> List[str]:
    """Track sizes of a grid template; repeat(n, x) expands, auto-fill/auto-fit stay whole."""
    if not template or template.strip() == 'none':
        return []
    sizes = []
    for token in tinycss2.parse_component_value_list(template):
        if token.type in ('whitespace', 'comment', '[] block'):
            continue
        if token.type == 'function' and token.lower_name == 'repeat':
            sizes.extend(_expand_repeat(token))
        else:
            sizes.append(tinycss2.serialize([token]).strip())
    return sizes


def _expand_repeat(function) -> List[str]:
    count_tokens, track_tokens, seen_comma = [], [], False
    for token in function.arguments:
        if token.type == 'literal' and token.value == ',' and not seen_comma:
            seen_comma = True
            continue
        (track_tokens if seen_comma else count_tokens).append(token)
    count_text = tinycss2.serialize(count_tokens).strip()
    track = tinycss2.serialize(track_tokens).strip()
    count = css_values.parse_int(count_text)
    if count is None:
        return [f"repeat({count_text}, {track})"]
    return [track] * count


class LayoutDetector:
    def detect(self, selector: str, styles: Mapping[str, str]) -> LayoutInfo:
        display = (styles.get('display') or 'block').strip().lower()
        layout = LayoutInfo(selector=selector, type=DISPLAY_TYPES.get(display, LayoutType.BLOCK))
        if layout.type in (LayoutType.FLEX, LayoutType.INLINE_FLEX):
            layout.flexbox = self._flexbox(styles)
        elif layout.type in (LayoutType.GRID, LayoutType.INLINE_GRID):
            layout.grid = self._grid(styles)
        return layout

    @staticmethod
    def _flexbox(styles: Mapping[str, str]) -> FlexboxLayout:
        return FlexboxLayout(
            direction=styles.get('flex-direction') or 'row',
            justify_content=styles.get('justify-content') or 'flex-start',
            align_items=styles.get('align-items') or 'stretch',
            wrap=styles.get('flex-wrap') or 'nowrap',
            gap=parse_pixels(styles.get('gap')),
            row_gap=parse_pixels(styles.get('row-gap')),
            column_gap=parse_pixels(styles.get('column-gap')),
        )

    @staticmethod
    def _grid(styles: Mapping[str, str]) -> GridLayout:
        column_sizes = parse_grid_template(styles.get('grid-template-columns'))
        row_sizes = parse_grid_template(styles.get('grid-template-rows'))
        return GridLayout(
            columns=len(column_sizes),
            rows=max(len(row_sizes), 1),
            column_sizes=column_sizes,
            row_sizes=row_sizes,
            gap=parse_pixels(styles.get('gap')),
            row_gap=parse_pixels(styles.get('row-gap')),
            column_gap=parse_pixels(styles.get('column-gap')),
        )
