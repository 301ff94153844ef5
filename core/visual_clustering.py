"""
Visual Clustering Module
Projects components into a normalized feature space and groups visually
coherent ones with density-based clustering (DBSCAN).
"""

from collections import Counter, deque
from dataclasses import dataclass, field
from typing import Dict, List, Optional
import logging
import numpy as np

from core import spatial_analyzer
from core.fingerprint import StructuralFingerprint
from core.models import DetectedComponent
from core.spatial_analyzer import SpatialArrangement

logger = logging.getLogger(__name__)

UNVISITED = -1
NOISE = 0

MAX_FONT_SIZE = 72.0
MAX_PADDING = 100.0
MAX_BORDER_RADIUS = 50.0
MAX_ASPECT_RATIO = 5.0

FEATURE_NAMES = (
    'width', 'height', 'aspect_ratio',
    'background_h', 'background_s', 'background_l',
    'text_h', 'text_s', 'text_l',
    'font_size', 'font_weight', 'padding', 'border_radius',
    'has_shadow', 'has_border',
)


@dataclass(frozen=True)
class VisualFeatureVector:
    width: float = 0.0
    height: float = 0.0
    aspect_ratio: float = 0.0
    background_h: float = 0.0
    background_s: float = 0.0
    background_l: float = 0.0
    text_h: float = 0.0
    text_s: float = 0.0
    text_l: float = 0.0
    font_size: float = 0.0
    font_weight: float = 0.0
    padding: float = 0.0
    border_radius: float = 0.0
    has_shadow: float = 0.0
    has_border: float = 0.0

    @classmethod
    def from_component(cls, component: DetectedComponent) -> 'VisualFeatureVector':
        vis = component.visual_properties
        background = vis.background_hsl
        text = vis.text_hsl
        if vis.height > 0:
            aspect = min(vis.width / vis.height, MAX_ASPECT_RATIO) / MAX_ASPECT_RATIO
        else:
            aspect = 0.5
        values = [
            vis.width / vis.viewport_width if vis.viewport_width > 0 else 0.0,
            vis.height / vis.viewport_height if vis.viewport_height > 0 else 0.0,
            aspect,
            background.h / 360.0,
            background.s,
            background.l,
            text.h / 360.0,
            text.s,
            text.l,
            vis.parsed_font_size / MAX_FONT_SIZE,
            (vis.parsed_font_weight - 100) / 800.0,
            vis.parsed_padding / MAX_PADDING,
            vis.parsed_border_radius / MAX_BORDER_RADIUS,
            1.0 if vis.has_shadow else 0.0,
            1.0 if vis.has_border else 0.0,
        ]
        return cls.from_array(np.clip(np.array(values, dtype=float), 0.0, 1.0))

    @classmethod
    def from_array(cls, values) -> 'VisualFeatureVector':
        return cls(*(float(v) for v in values))

    def to_array(self) -> np.ndarray:
        return np.array([getattr(self, name) for name in FEATURE_NAMES], dtype=float)

    def distance_to(self, other: 'VisualFeatureVector') -> float:
        return float(np.linalg.norm(self.to_array() - other.to_array()))

    def to_dict(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in FEATURE_NAMES}


@dataclass(eq=False)
class ClusterableElement:
    component: DetectedComponent
    feature_vector: VisualFeatureVector
    fingerprint: Optional[StructuralFingerprint] = None
    cluster_id: int = UNVISITED

    @classmethod
    def from_component(cls, component: DetectedComponent) -> 'ClusterableElement':
        return cls(component, VisualFeatureVector.from_component(component), component.fingerprint)


@dataclass
class VisualCluster:
    id: int
    elements: List[ClusterableElement]
    centroid: VisualFeatureVector
    component_type: str
    arrangement: SpatialArrangement = field(default_factory=SpatialArrangement)

    @property
    def components(self) -> List[DetectedComponent]:
        return [e.component for e in self.elements]

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'component_type': self.component_type,
            'component_ids': [e.component.id for e in self.elements],
            'centroid': self.centroid.to_dict(),
            'arrangement': self.arrangement.to_dict(),
        }


class VisualClusteringEngine:
    def __init__(self, epsilon: float = 0.20, min_points: int = 2):
        self.epsilon = epsilon
        self.min_points = min_points

    def cluster(self, elements: List[ClusterableElement]) -> List[VisualCluster]:
        """Run DBSCAN over the elements' feature vectors.

        Cluster ids start at 1 in seed order; noise points get id 0 and are
        left out of the result, as are clusters smaller than min_points.
        """
        if len(elements) < self.min_points:
            return []

        vectors = np.vstack([e.feature_vector.to_array() for e in elements])
        distances = np.linalg.norm(vectors[:, None, :] - vectors[None, :, :], axis=2)
        labels = [UNVISITED] * len(elements)
        cluster_id = 0

        for i in range(len(elements)):
            if labels[i] != UNVISITED:
                continue
            neighbors = self._neighbors(distances, i)
            if len(neighbors) < self.min_points:
                labels[i] = NOISE
                continue

            cluster_id += 1
            labels[i] = cluster_id
            queue = deque(neighbors)
            while queue:
                j = queue.popleft()
                if labels[j] == NOISE:
                    # border point
                    labels[j] = cluster_id
                if labels[j] != UNVISITED:
                    continue
                labels[j] = cluster_id
                j_neighbors = self._neighbors(distances, j)
                if len(j_neighbors) >= self.min_points:
                    queue.extend(n for n in j_neighbors if labels[n] <= NOISE)

        for element, label in zip(elements, labels):
            element.cluster_id = label

        clusters = self._build_clusters(elements, cluster_id)
        logger.info(f"Clustering produced {len(clusters)} clusters from {len(elements)} elements")
        return clusters

    def _neighbors(self, distances: np.ndarray, index: int) -> List[int]:
        row = distances[index]
        return [int(j) for j in np.flatnonzero(row <= self.epsilon) if j != index]

    def _build_clusters(self, elements: List[ClusterableElement], max_id: int) -> List[VisualCluster]:
        clusters = []
        for cluster_id in range(1, max_id + 1):
            members = [e for e in elements if e.cluster_id == cluster_id]
            if len(members) < self.min_points:
                continue
            arrangement = spatial_analyzer.analyze([e.component.bounding_box for e in members])
            clusters.append(VisualCluster(
                id=cluster_id,
                elements=members,
                centroid=VisualFeatureVector.from_array(
                    np.mean([e.feature_vector.to_array() for e in members], axis=0)),
                component_type=self._label(members, arrangement),
                arrangement=arrangement,
            ))
        return clusters

    @staticmethod
    def _label(members: List[ClusterableElement], arrangement: SpatialArrangement) -> str:
        # Counter.most_common keeps first-seen order among equal counts
        primary_type = Counter(e.component.type for e in members).most_common(1)[0][0]
        if arrangement.is_grid or arrangement.is_horizontal:
            return f"{primary_type}-grid"
        return primary_type
