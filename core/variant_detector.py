"""
Variant Detector Module
Buckets components of one type into size and color variants.
"""

from bisect import bisect_right
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional
import logging
import numpy as np

from core.config import (
    HUE_NAMES, SEMANTIC_COLORS, SEMANTIC_HUE_TOLERANCE, SIZE_BREAKPOINTS, SIZE_NAMES,
)
from core.models import DetectedComponent, HslColor
from utils import css_values

logger = logging.getLogger(__name__)


class ComponentState(Enum):
    DEFAULT = 'default'
    HOVER = 'hover'
    ACTIVE = 'active'
    FOCUS = 'focus'
    DISABLED = 'disabled'


@dataclass
class SizeVariant:
    name: str
    avg_width: float = 0.0
    avg_height: float = 0.0
    avg_font_size: float = 0.0
    avg_padding: float = 0.0
    avg_border_radius: float = 0.0
    instance_count: int = 0

    def add(self, width: float, height: float, font_size: float, padding: float, radius: float) -> None:
        """Fold one more instance into the running averages."""
        old, new = self.instance_count, self.instance_count + 1
        self.avg_width = (self.avg_width * old + width) / new
        self.avg_height = (self.avg_height * old + height) / new
        self.avg_font_size = (self.avg_font_size * old + font_size) / new
        self.avg_padding = (self.avg_padding * old + padding) / new
        self.avg_border_radius = (self.avg_border_radius * old + radius) / new
        self.instance_count = new


@dataclass
class ColorVariant:
    name: str
    background_color: str
    text_color: str
    background_hsl: HslColor
    border_color: Optional[str] = None
    instance_count: int = 0


@dataclass
class StateVariant:
    state: ComponentState
    style_changes: Dict[str, str] = field(default_factory=dict)
    is_detected: bool = False


@dataclass
class ComponentVariants:
    component_type: str
    size_variants: List[SizeVariant] = field(default_factory=list)
    color_variants: List[ColorVariant] = field(default_factory=list)
    state_variants: List[StateVariant] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            'component_type': self.component_type,
            'size_variants': [v.__dict__.copy() for v in self.size_variants],
            'color_variants': [
                {
                    'name': v.name,
                    'background_color': v.background_color,
                    'text_color': v.text_color,
                    'border_color': v.border_color,
                    'background_hsl': v.background_hsl.to_dict(),
                    'instance_count': v.instance_count,
                }
                for v in self.color_variants
            ],
            'state_variants': [
                {'state': v.state.value, 'style_changes': dict(v.style_changes), 'is_detected': v.is_detected}
                for v in self.state_variants
            ],
        }


class SizeVariantDetector:
    def detect(self, components: List[DetectedComponent]) -> List[SizeVariant]:
        if len(components) < 2:
            return []
        median_width = float(np.median([c.visual_properties.width for c in components]))
        median_height = float(np.median([c.visual_properties.height for c in components]))

        variants: Dict[str, SizeVariant] = {}
        for component in components:
            vis = component.visual_properties
            width_ratio = vis.width / median_width if median_width > 0 else 1.0
            height_ratio = vis.height / median_height if median_height > 0 else 1.0
            name = SIZE_NAMES[bisect_right(SIZE_BREAKPOINTS, (width_ratio + height_ratio) / 2)]
            variant = variants.setdefault(name, SizeVariant(name))
            variant.add(vis.width, vis.height, vis.parsed_font_size, vis.parsed_padding,
                        vis.parsed_border_radius)

        return sorted(variants.values(), key=lambda v: SIZE_NAMES.index(v.name))


def hue_distance(h1: float, h2: float) -> float:
    diff = abs(h1 - h2)
    return min(diff, 360 - diff)


def hue_name(hue: float) -> str:
    for upper, name in HUE_NAMES:
        if hue < upper:
            return name
    return 'red'


def classify_color(color: HslColor) -> str:
    if color.s < 0.1:
        if color.l > 0.9:
            return 'light'
        if color.l < 0.15:
            return 'dark'
        return 'neutral'
    name, (hue, _, _) = min(SEMANTIC_COLORS.items(), key=lambda item: hue_distance(color.h, item[1][0]))
    if hue_distance(color.h, hue) < SEMANTIC_HUE_TOLERANCE:
        return name
    return hue_name(color.h)


class ColorVariantDetector:
    def detect(self, components: List[DetectedComponent]) -> List[ColorVariant]:
        variants: Dict[str, ColorVariant] = {}
        for component in components:
            vis = component.visual_properties
            background = vis.background_color
            if background is None or css_values.is_transparent(background):
                continue
            hsl = vis.background_hsl
            name = classify_color(hsl)
            variant = variants.get(name)
            if variant is None:
                variant = ColorVariant(
                    name=name,
                    background_color=background,
                    text_color=vis.color or '',
                    background_hsl=hsl,
                    border_color=vis.style('border-color'),
                )
                variants[name] = variant
            variant.instance_count += 1
        return sorted(variants.values(), key=lambda v: v.instance_count, reverse=True)


class VariantDetector:
    """Size, color and state variants for every component type on a page."""

    def __init__(self):
        self.size_detector = SizeVariantDetector()
        self.color_detector = ColorVariantDetector()

    def detect(self, components: List[DetectedComponent]) -> Dict[str, ComponentVariants]:
        by_type: Dict[str, List[DetectedComponent]] = {}
        for component in components:
            by_type.setdefault(component.type, []).append(component)

        result = {}
        for component_type, members in by_type.items():
            result[component_type] = ComponentVariants(
                component_type=component_type,
                size_variants=self.size_detector.detect(members),
                color_variants=self.color_detector.detect(members),
                # Interaction states need a live browser; only the rendered state is known
                state_variants=[StateVariant(ComponentState.DEFAULT, is_detected=True)],
            )
        logger.debug(f"Variants computed for {len(result)} component types")
        return result
