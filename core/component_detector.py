"""
Component Detector Module
Scores every visually significant element against the rule catalog and
removes nested or overlapping duplicates.
"""

from typing import Dict, List, Mapping, Any, Optional, Union
import logging

from core.component_rules import RuleCatalog, default_catalog
from core.config import DetectionConfig, DEFAULT_CONFIG, IGNORED_TAGS
from core.fingerprint import StructuralFingerprintGenerator
from core.html_parser import HTMLParser, ParsedDocument
from core.models import BoundingBox, DetectedComponent, VisualProperties

logger = logging.getLogger(__name__)


def index_map(data: Optional[Mapping[Any, Any]]) -> Dict[int, Any]:
    """Normalize a per-element mapping so its keys are ints (JSON input has str keys)."""
    if not data:
        return {}
    result = {}
    for key, value in data.items():
        try:
            result[int(key)] = value
        except (TypeError, ValueError):
            logger.warning(f"Ignoring entry with non-integer element index {key!r}")
    return result


class ComponentTypeDetector:
    def __init__(self, config: DetectionConfig = DEFAULT_CONFIG, catalog: Optional[RuleCatalog] = None):
        self.config = config
        self.catalog = catalog if catalog is not None else default_catalog()
        self.fingerprint_generator = StructuralFingerprintGenerator()
        self.html_parser = HTMLParser(outer_html_limit=config.outer_html_limit)

    def detect(self, document: Union[ParsedDocument, str],
               styles: Optional[Mapping[Any, Mapping[str, str]]],
               boxes: Optional[Mapping[Any, Any]]) -> List[DetectedComponent]:
        """Detect components in a parsed document.

        Args:
            document: parsed page (or raw HTML)
            styles: element index -> resolved CSS properties
            boxes: element index -> bounding box

        Returns:
            Surviving components; callers should treat the order as unspecified.
        """
        if isinstance(document, str):
            document = self.html_parser.parse(document)
        styles = index_map(styles)
        boxes = index_map(boxes)

        detected = []
        for index, element in enumerate(document.elements):
            component = self._classify(index, element, styles, boxes)
            if component is not None:
                detected.append(component)

        logger.info(f"Classified {len(detected)} candidate components")
        survivors = self.remove_duplicates(detected, document)
        logger.info(f"{len(survivors)} components after duplicate suppression")
        return survivors

    def _classify(self, index: int, element, styles: Dict[int, Mapping[str, str]],
                  boxes: Dict[int, Any]) -> Optional[DetectedComponent]:
        if element.name.lower() in IGNORED_TAGS:
            return None
        raw_box = boxes.get(index)
        if raw_box is None:
            return None
        box = BoundingBox.coerce(raw_box)
        cfg = self.config
        if box.width < cfg.min_element_size or box.height < cfg.min_element_size:
            return None
        if box.width > cfg.max_component_width and box.height > cfg.max_component_height:
            return None

        fingerprint = self.fingerprint_generator.generate(element)
        text = self.html_parser.get_direct_text(element)
        if len(text) == 1 and fingerprint.child_count == 0:
            # decorative glyph
            return None

        visual = VisualProperties(box, styles.get(index), viewport_width=cfg.viewport_width,
                                  viewport_height=cfg.viewport_height)
        component_type, confidence = self.catalog.best_match(fingerprint, visual)
        logger.debug(f"Element {index} <{element.name}> best match {component_type} ({confidence})")
        if confidence < cfg.confidence_threshold:
            return None

        return DetectedComponent(
            type=component_type,
            confidence=confidence,
            fingerprint=fingerprint,
            visual_properties=visual,
            dom_index=index,
            selector=self.html_parser.get_selector(element),
            element_id=element.get('id'),
            classes=list(element.get('class', [])),
            text=text,
            outer_html=self.html_parser.get_outer_html(element),
        )

    def remove_duplicates(self, components: List[DetectedComponent],
                          document: ParsedDocument) -> List[DetectedComponent]:
        """Containment pass followed by overlap pass. Idempotent."""
        to_remove = set()

        for outer in components:
            for inner in components:
                if outer is inner or not document.contains(outer.dom_index, inner.dom_index):
                    continue
                if self._drop_ancestor(outer, inner):
                    to_remove.add(outer.id)

        ranked = sorted((c for c in components if c.id not in to_remove),
                        key=lambda c: c.confidence, reverse=True)
        for i, keeper in enumerate(ranked):
            if keeper.id in to_remove:
                continue
            for other in ranked[i + 1:]:
                if other.id in to_remove:
                    continue
                if self._overlaps(keeper.bounding_box, other.bounding_box):
                    to_remove.add(other.id)

        if to_remove:
            logger.debug(f"Suppressed {len(to_remove)} duplicate components")
        return [c for c in components if c.id not in to_remove]

    def _drop_ancestor(self, ancestor: DetectedComponent, descendant: DetectedComponent) -> bool:
        if ancestor.type == descendant.type:
            return True
        if descendant.confidence > ancestor.confidence:
            return True
        return descendant.confidence == ancestor.confidence and self.config.prefer_descendant_on_tie

    def _overlaps(self, a: BoundingBox, b: BoundingBox) -> bool:
        smaller = min(a.area, b.area)
        if smaller <= 0:
            return False
        return a.overlap_area(b) / smaller > self.config.overlap_ratio
