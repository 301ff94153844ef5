"""
Component Matcher Module
Decides whether two detected components are the same UI element and groups
the components of one page into canonical groups.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List
import logging

from core.config import DetectionConfig, DEFAULT_CONFIG
from core.models import DetectedComponent, new_component_id
from core.visual_clustering import VisualFeatureVector

logger = logging.getLogger(__name__)


class MatchType(Enum):
    NONE = 'none'
    EXACT = 'exact'
    SIMILAR = 'similar'
    UNIQUE = 'unique'


@dataclass
class MatchResult:
    is_match: bool
    match_type: MatchType
    structural_similarity: float
    visual_distance: float


@dataclass
class ComponentGroup:
    match_type: MatchType
    fingerprint_hash: str
    components: List[DetectedComponent] = field(default_factory=list)
    group_id: str = field(default_factory=new_component_id)

    @property
    def count(self) -> int:
        return len(self.components)

    @property
    def representative(self) -> DetectedComponent:
        return self.components[0]

    def to_dict(self) -> Dict:
        return {
            'group_id': self.group_id,
            'match_type': self.match_type.value,
            'fingerprint_hash': self.fingerprint_hash,
            'count': self.count,
            'type': self.representative.type,
            'component_ids': [c.id for c in self.components],
        }


def visual_distance(a: DetectedComponent, b: DetectedComponent) -> float:
    return VisualFeatureVector.from_component(a).distance_to(VisualFeatureVector.from_component(b))


class ComponentMatcher:
    def __init__(self, config: DetectionConfig = DEFAULT_CONFIG):
        self.similarity_threshold = config.match_similarity_threshold
        self.visual_distance_threshold = config.visual_distance_threshold

    def match(self, a: DetectedComponent, b: DetectedComponent) -> MatchResult:
        distance = visual_distance(a, b)
        if a.fingerprint.hash == b.fingerprint.hash:
            return MatchResult(True, MatchType.EXACT, 1.0, distance)

        similarity = a.fingerprint.similarity_to(b.fingerprint)
        if (similarity >= self.similarity_threshold and a.type == b.type
                and distance <= self.visual_distance_threshold):
            return MatchResult(True, MatchType.SIMILAR, similarity, distance)
        return MatchResult(False, MatchType.NONE, similarity, distance)

    def group_components(self, components: List[DetectedComponent]) -> List[ComponentGroup]:
        """Group one page's components.

        Exact-hash buckets with two or more members come first. The rest are
        grouped greedily by the similar-match rule; a component that matches
        nothing becomes a single-member UNIQUE group.
        """
        groups = []
        buckets: Dict[str, List[DetectedComponent]] = {}
        for component in components:
            buckets.setdefault(component.fingerprint.hash, []).append(component)

        assigned = set()
        for fingerprint_hash, members in buckets.items():
            if len(members) < 2:
                continue
            groups.append(ComponentGroup(MatchType.EXACT, fingerprint_hash, list(members)))
            assigned.update(c.id for c in members)

        remaining = [c for c in components if c.id not in assigned]
        for i, seed in enumerate(remaining):
            if seed.id in assigned:
                continue
            members = [seed]
            assigned.add(seed.id)
            for candidate in remaining[i + 1:]:
                if candidate.id in assigned:
                    continue
                if self.match(seed, candidate).match_type == MatchType.SIMILAR:
                    members.append(candidate)
                    assigned.add(candidate.id)
            match_type = MatchType.SIMILAR if len(members) > 1 else MatchType.UNIQUE
            groups.append(ComponentGroup(match_type, seed.fingerprint.hash, members))

        logger.info(f"Grouped {len(components)} components into {len(groups)} groups")
        return groups
