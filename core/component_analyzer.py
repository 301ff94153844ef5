"""
Component Analyzer Module
Runs the full component analysis pipeline over one rendered page.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union
import logging

from comparator.component_matcher import ComponentGroup, ComponentMatcher
from core.component_detector import ComponentTypeDetector
from core.component_rules import RuleCatalog
from core.config import DetectionConfig, DEFAULT_CONFIG
from core.hierarchy import ComponentHierarchyBuilder, ComponentHierarchyNode
from core.html_parser import HTMLParser
from core.layout_detector import LayoutDetector, LayoutInfo, LayoutType
from core.models import DetectedComponent
from core.pattern_detector import RepeatedPattern, RepeatedPatternDetector
from core.spacing_detector import SpacingSystem, SpacingSystemDetector
from core.variant_detector import ComponentVariants, VariantDetector
from core.visual_clustering import ClusterableElement, VisualCluster, VisualClusteringEngine

logger = logging.getLogger(__name__)


@dataclass
class PageSection:
    y_position: float
    height: float
    id: Optional[str] = None
    class_name: Optional[str] = None
    heading: Optional[str] = None
    component_ids: List[str] = field(default_factory=list)

    @classmethod
    def coerce(cls, value: Union['PageSection', Mapping[str, Any]]) -> 'PageSection':
        if isinstance(value, cls):
            return value
        return cls(
            y_position=float(value.get('y_position', value.get('y', 0))),
            height=float(value.get('height', 0)),
            id=value.get('id'),
            class_name=value.get('class_name'),
            heading=value.get('heading'),
        )

    @property
    def section_key(self) -> str:
        return self.id or f"section-{int(self.y_position)}"


@dataclass
class PageAnalysisResult:
    url: str = ''
    analyzed_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    components: List[DetectedComponent] = field(default_factory=list)
    clusters: List[VisualCluster] = field(default_factory=list)
    patterns: List[RepeatedPattern] = field(default_factory=list)
    hierarchy: Optional[ComponentHierarchyNode] = None
    spacing_system: SpacingSystem = field(default_factory=SpacingSystem)
    component_variants: Dict[str, ComponentVariants] = field(default_factory=dict)
    layouts: List[LayoutInfo] = field(default_factory=list)
    component_groups: List[ComponentGroup] = field(default_factory=list)
    sections: List[PageSection] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            'url': self.url,
            'analyzed_at': self.analyzed_at,
            'components': [c.to_dict() for c in self.components],
            'clusters': [c.to_dict() for c in self.clusters],
            'patterns': [p.to_dict() for p in self.patterns],
            'hierarchy': self.hierarchy.to_dict() if self.hierarchy is not None else None,
            'spacing_system': self.spacing_system.to_dict(),
            'component_variants': {k: v.to_dict() for k, v in self.component_variants.items()},
            'layouts': [l.to_dict() for l in self.layouts],
            'component_groups': [g.to_dict() for g in self.component_groups],
            'sections': [s.__dict__.copy() for s in self.sections],
        }


class ComponentAnalyzer:
    """Page-level pipeline: detect, cluster, find patterns, build hierarchy, infer design tokens."""

    def __init__(self, config: DetectionConfig = DEFAULT_CONFIG, catalog: Optional[RuleCatalog] = None):
        self.config = config
        self.html_parser = HTMLParser(outer_html_limit=config.outer_html_limit)
        self.detector = ComponentTypeDetector(config, catalog)
        self.clustering_engine = VisualClusteringEngine(config.cluster_epsilon, config.cluster_min_points)
        self.pattern_detector = RepeatedPatternDetector(config.pattern_similarity_threshold)
        self.hierarchy_builder = ComponentHierarchyBuilder()
        self.spacing_detector = SpacingSystemDetector()
        self.variant_detector = VariantDetector()
        self.layout_detector = LayoutDetector()
        self.matcher = ComponentMatcher(config)

    def analyze(self, html: str, styles: Optional[Mapping[Any, Mapping[str, str]]],
                boxes: Optional[Mapping[Any, Any]], url: str = '',
                sections: Optional[Sequence[Any]] = None) -> PageAnalysisResult:
        try:
            logger.info(f"Analyzing page {url or '<inline>'}")
            document = self.html_parser.parse(html)
            result = PageAnalysisResult(url=url)
            result.sections = [PageSection.coerce(s) for s in sections or []]

            result.components = self.detector.detect(document, styles, boxes)
            logger.info(f"Found {len(result.components)} components")
            if not result.components:
                logger.info("No components detected, skipping further analysis")
                return result

            result.clusters = self.clustering_engine.cluster(
                [ClusterableElement.from_component(c) for c in result.components])
            result.patterns = self.pattern_detector.detect(result.components)
            result.hierarchy = self.hierarchy_builder.build(document, result.components)
            result.spacing_system = self.spacing_detector.detect(result.components)
            result.component_variants = self.variant_detector.detect(result.components)
            result.layouts = self._detect_layouts(result.components)
            result.component_groups = self.matcher.group_components(result.components)
            self.link_sections(result.components, result.sections)
            return result
        except Exception as e:
            logger.error(f"Error analyzing page {url}: {str(e)}", exc_info=True)
            raise

    def _detect_layouts(self, components: List[DetectedComponent]) -> List[LayoutInfo]:
        layouts = []
        for component in components:
            layout = self.layout_detector.detect(component.selector, component.visual_properties.styles)
            if layout.type in (LayoutType.FLEX, LayoutType.INLINE_FLEX, LayoutType.GRID, LayoutType.INLINE_GRID):
                layouts.append(layout)
        return layouts

    @staticmethod
    def link_sections(components: List[DetectedComponent], sections: List[PageSection]) -> None:
        """Attach each component to the section containing its vertical center."""
        for section in sections:
            top, bottom = section.y_position, section.y_position + section.height
            for component in components:
                if top <= component.bounding_box.center_y < bottom:
                    section.component_ids.append(component.id)
                    component.section_id = section.section_key
