"""
Result Aggregator Module
Merges the per-page component groups of a multi-page run into site-wide
components with page sets, instance counts and visual variants.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple
import logging

from comparator.component_matcher import ComponentGroup
from core.fingerprint import StructuralFingerprint
from core.models import DetectedComponent, VisualProperties
from utils import css_values

logger = logging.getLogger(__name__)

WIDTH_BUCKET = 50


@dataclass
class ComponentVariant:
    visual_key: str
    visual_properties: VisualProperties
    found_on_pages: List[str] = field(default_factory=list)
    instance_count: int = 0

    def to_dict(self) -> Dict:
        return {
            'visual_key': self.visual_key,
            'visual_properties': self.visual_properties.to_dict(),
            'found_on_pages': list(self.found_on_pages),
            'instance_count': self.instance_count,
        }


@dataclass
class AggregatedComponent:
    id: str
    type: str
    fingerprint_hash: str
    fingerprint: StructuralFingerprint
    representative: DetectedComponent
    found_on_pages: List[str] = field(default_factory=list)
    total_instances: int = 0
    variants: List[ComponentVariant] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.found_on_pages)

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'type': self.type,
            'fingerprint_hash': self.fingerprint_hash,
            'fingerprint': self.fingerprint.to_dict(),
            'representative': self.representative.to_dict(),
            'found_on_pages': list(self.found_on_pages),
            'total_instances': self.total_instances,
            'variants': [v.to_dict() for v in self.variants],
        }


@dataclass
class PageResult:
    url: str
    success: bool
    analysis: Optional[Any] = None
    error: Optional[str] = None
    failure: Optional[Exception] = None

    def to_dict(self) -> Dict:
        return {
            'url': self.url,
            'success': self.success,
            'error': self.error,
            'component_count': len(self.analysis.components) if self.analysis is not None else 0,
        }


@dataclass
class SiteSummary:
    total_pages_analyzed: int = 0
    total_pages_failed: int = 0
    total_unique_components: int = 0
    total_component_instances: int = 0


@dataclass
class AggregatedSiteResult:
    pages: List[PageResult] = field(default_factory=list)
    components: List[AggregatedComponent] = field(default_factory=list)
    summary: SiteSummary = field(default_factory=SiteSummary)
    analyzed_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> Dict:
        return {
            'analyzed_at': self.analyzed_at,
            'pages': [p.to_dict() for p in self.pages],
            'components': [c.to_dict() for c in self.components],
            'summary': self.summary.__dict__,
        }


def visual_key(component: DetectedComponent) -> str:
    """Quantized background | 50px width bucket | rounded font size | shadow | border."""
    vis = component.visual_properties
    width_bucket = int(round(vis.width / WIDTH_BUCKET) * WIDTH_BUCKET)
    return '|'.join([
        css_values.color_key(vis.background_color),
        str(width_bucket),
        str(int(round(vis.parsed_font_size))),
        str(vis.has_shadow).lower(),
        str(vis.has_border).lower(),
    ])


class ResultAggregator:
    def aggregate(self, page_results: Sequence[PageResult]) -> AggregatedSiteResult:
        """Reduce finished page results into one site result; failed pages are only counted."""
        successful = [p for p in page_results if p.success and p.analysis is not None]
        failed = len(page_results) - len(successful)

        components = self.aggregate_groups(
            [(p.url, p.analysis.component_groups) for p in successful])

        summary = SiteSummary(
            total_pages_analyzed=len(successful),
            total_pages_failed=failed,
            total_unique_components=len(components),
            total_component_instances=sum(c.total_instances for c in components),
        )
        logger.info(f"Aggregated {summary.total_unique_components} unique components "
                    f"from {summary.total_pages_analyzed} pages ({failed} failed)")
        return AggregatedSiteResult(pages=list(page_results), components=components, summary=summary)

    def aggregate_groups(self, pages: Sequence[Tuple[str, List[ComponentGroup]]]) -> List[AggregatedComponent]:
        """Merge (page url, groups) pairs keyed by each group's fingerprint hash.

        A fresh accumulator is used on every call.
        """
        merged: Dict[str, AggregatedComponent] = {}
        for page_url, groups in pages:
            for group in groups:
                aggregated = merged.get(group.fingerprint_hash)
                if aggregated is None:
                    representative = group.representative
                    aggregated = AggregatedComponent(
                        id=representative.id,
                        type=representative.type,
                        fingerprint_hash=group.fingerprint_hash,
                        fingerprint=representative.fingerprint,
                        representative=representative,
                    )
                    merged[group.fingerprint_hash] = aggregated
                if page_url not in aggregated.found_on_pages:
                    aggregated.found_on_pages.append(page_url)
                for component in group.components:
                    aggregated.total_instances += 1
                    self._track_variant(aggregated, component, page_url)

        return sorted(merged.values(), key=lambda c: (-c.page_count, -c.total_instances))

    @staticmethod
    def _track_variant(aggregated: AggregatedComponent, component: DetectedComponent, page_url: str) -> None:
        key = visual_key(component)
        variant = next((v for v in aggregated.variants if v.visual_key == key), None)
        if variant is None:
            variant = ComponentVariant(key, component.visual_properties)
            aggregated.variants.append(variant)
        if page_url not in variant.found_on_pages:
            variant.found_on_pages.append(page_url)
        variant.instance_count += 1
