"""
Pattern Detector Module
Surfaces repeated UI patterns (card grids, list items) from detected components.
"""

from dataclasses import dataclass, field
from typing import Dict, List
import logging

from core import spatial_analyzer
from core.models import DetectedComponent
from core.spatial_analyzer import SpatialArrangement

logger = logging.getLogger(__name__)


@dataclass
class RepeatedPattern:
    fingerprint_hash: str
    elements: List[DetectedComponent]
    arrangement: SpatialArrangement = field(default_factory=SpatialArrangement)
    is_similarity_based: bool = False

    @property
    def count(self) -> int:
        return len(self.elements)

    @property
    def layout_type(self) -> str:
        return self.arrangement.layout_type

    @property
    def sample_element(self) -> DetectedComponent:
        return self.elements[0]

    @property
    def component_type(self) -> str:
        return self.elements[0].type

    def to_dict(self) -> Dict:
        return {
            'fingerprint_hash': self.fingerprint_hash,
            'count': self.count,
            'layout_type': self.layout_type,
            'component_type': self.component_type,
            'is_similarity_based': self.is_similarity_based,
            'arrangement': self.arrangement.to_dict(),
            'component_ids': [c.id for c in self.elements],
        }


class RepeatedPatternDetector:
    def __init__(self, similarity_threshold: float = 0.8):
        self.similarity_threshold = similarity_threshold

    def detect(self, components: List[DetectedComponent]) -> List[RepeatedPattern]:
        patterns = []
        by_hash: Dict[str, List[DetectedComponent]] = {}
        for component in components:
            by_hash.setdefault(component.fingerprint.hash, []).append(component)

        grouped = set()
        for fingerprint_hash, members in by_hash.items():
            if len(members) < 2:
                continue
            patterns.append(self._pattern(fingerprint_hash, members, similarity_based=False))
            grouped.update(c.id for c in members)

        ungrouped = [c for c in components if c.id not in grouped]
        patterns.extend(self._similar_patterns(ungrouped))

        patterns.sort(key=lambda p: p.count, reverse=True)
        logger.info(f"Found {len(patterns)} repeated patterns")
        return patterns

    def _similar_patterns(self, ungrouped: List[DetectedComponent]) -> List[RepeatedPattern]:
        patterns = []
        if len(ungrouped) < 2:
            return patterns
        processed = set()
        for seed in ungrouped:
            if seed.id in processed:
                continue
            similar = [c for c in ungrouped
                       if c.id != seed.id and c.id not in processed
                       and c.fingerprint.similarity_to(seed.fingerprint) >= self.similarity_threshold]
            if not similar:
                continue
            members = [seed] + similar
            patterns.append(self._pattern(f"similar_{seed.id}", members, similarity_based=True))
            processed.update(c.id for c in members)
        return patterns

    @staticmethod
    def _pattern(key: str, members: List[DetectedComponent], similarity_based: bool) -> RepeatedPattern:
        arrangement = spatial_analyzer.analyze([c.bounding_box for c in members])
        return RepeatedPattern(key, members, arrangement, similarity_based)
