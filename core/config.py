"""
Configuration Module
Tunable thresholds and read-only lookup tables shared by the detectors.
"""

from dataclasses import dataclass, fields
from types import MappingProxyType
from typing import Dict, Any
import logging

logger = logging.getLogger(__name__)

# Tags that never become components
IGNORED_TAGS = frozenset({
    'script', 'style', 'noscript', 'meta', 'link', 'head', 'html',
    'br', 'hr', 'wbr', 'template',
})

# Tags skipped while building the hierarchy tree
HIERARCHY_SKIPPED_TAGS = frozenset({
    'script', 'style', 'noscript', 'meta', 'link', 'template',
})

# Semantic color name -> (hue, saturation, lightness)
SEMANTIC_COLORS = MappingProxyType({
    'primary': (220.0, 0.8, 0.5),
    'secondary': (210.0, 0.15, 0.5),
    'success': (140.0, 0.7, 0.45),
    'danger': (0.0, 0.75, 0.55),
    'warning': (40.0, 0.9, 0.55),
    'info': (195.0, 0.7, 0.5),
})

SEMANTIC_HUE_TOLERANCE = 35.0

# Upper hue bound -> name, checked in order
HUE_NAMES = (
    (15.0, 'red'),
    (45.0, 'orange'),
    (75.0, 'yellow'),
    (150.0, 'green'),
    (210.0, 'cyan'),
    (270.0, 'blue'),
    (330.0, 'purple'),
)

# Child-type sets that read as one logical unit
LOGICAL_GROUPINGS = (
    frozenset({'avatar', 'badge', 'text'}),
    frozenset({'icon', 'text', 'button'}),
    frozenset({'image', 'heading', 'text', 'button'}),
    frozenset({'input', 'label', 'button'}),
    frozenset({'avatar', 'heading', 'text'}),
    frozenset({'badge', 'text'}),
)

SPACING_MULTIPLIERS = (0.5, 1.0, 1.5, 2.0, 3.0, 4.0, 6.0, 8.0, 12.0, 16.0)
BASE_UNIT_CANDIDATES = (4, 5, 6, 8, 10, 12)
DEFAULT_BASE_UNIT = 8
MAX_SCALE_ENTRIES = 12

# Size ratio breakpoints between xs/sm/md/lg/xl
SIZE_BREAKPOINTS = (0.6, 0.85, 1.15, 1.4)
SIZE_NAMES = ('xs', 'sm', 'md', 'lg', 'xl')


@dataclass(frozen=True)
class DetectionConfig:
    confidence_threshold: float = 0.65
    min_element_size: float = 20.0
    max_component_width: float = 1900.0
    max_component_height: float = 1000.0
    outer_html_limit: int = 1000
    overlap_ratio: float = 0.8
    # Equal confidence, different type: drop the ancestor and keep the descendant
    prefer_descendant_on_tie: bool = True
    cluster_epsilon: float = 0.20
    cluster_min_points: int = 2
    pattern_similarity_threshold: float = 0.8
    match_similarity_threshold: float = 0.8
    visual_distance_threshold: float = 0.20
    viewport_width: float = 1920.0
    viewport_height: float = 1080.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DetectionConfig':
        """Build a config from a plain mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.error(f"Unknown configuration keys: {unknown}")
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


DEFAULT_CONFIG = DetectionConfig()
