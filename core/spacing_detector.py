"""
Spacing Detector Module
Infers the spacing base unit and scale shared by a page's components.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Sequence
import logging

from core.config import (
    BASE_UNIT_CANDIDATES, DEFAULT_BASE_UNIT, MAX_SCALE_ENTRIES, SPACING_MULTIPLIERS,
)
from core.models import DetectedComponent
from utils import css_values

logger = logging.getLogger(__name__)

SPACING_PROPERTIES = ('gap', 'padding', 'margin')
MAX_SPACING = 200
MIN_SCALE_VALUE = 2
MAX_SCALE_VALUE = 128
FREQUENCY_LIMIT = 10


@dataclass
class SpacingSystem:
    base_unit: float = DEFAULT_BASE_UNIT
    scale: List[float] = field(default_factory=list)
    gap_frequency: Dict[str, int] = field(default_factory=dict)
    padding_frequency: Dict[str, int] = field(default_factory=dict)
    margin_frequency: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return {
            'base_unit': self.base_unit,
            'scale': list(self.scale),
            'gap_frequency': dict(self.gap_frequency),
            'padding_frequency': dict(self.padding_frequency),
            'margin_frequency': dict(self.margin_frequency),
        }


def _usable(values: Sequence[float]) -> List[float]:
    """Distinct rounded values in (0, 200], ascending."""
    rounded = {float(round(v)) for v in values if 0 < v <= MAX_SPACING}
    return sorted(v for v in rounded if v > 0)


def find_base_unit(values: Sequence[float]) -> float:
    """Candidate unit dividing the most observed values; ties go to the larger unit."""
    usable = _usable(values)
    if len(usable) < 3:
        return float(DEFAULT_BASE_UNIT)
    best_unit, best_score = DEFAULT_BASE_UNIT, -1
    for candidate in BASE_UNIT_CANDIDATES:
        score = sum(1 for v in usable if v % candidate == 0)
        if score >= best_score:
            best_unit, best_score = candidate, score
    return float(best_unit)


def generate_scale(values: Sequence[float], base_unit: float) -> List[float]:
    half_unit = base_unit / 2
    valid = [v for v in _usable(values) if v % base_unit == 0 or v % half_unit == 0]
    scale = []
    for multiplier in SPACING_MULTIPLIERS:
        expected = base_unit * multiplier
        closest = min(valid, key=lambda v: abs(v - expected)) if valid else None
        if closest is not None and abs(closest - expected) <= half_unit:
            candidate = closest
        elif MIN_SCALE_VALUE <= expected <= MAX_SCALE_VALUE:
            candidate = expected
        else:
            continue
        if candidate not in scale:
            scale.append(candidate)
    return sorted(scale)[:MAX_SCALE_ENTRIES]


def count_frequency(values: Sequence[str]) -> Dict[str, int]:
    counts = Counter(css_values.normalize_spacing(v) for v in values if v and v != '0px')
    return dict(counts.most_common(FREQUENCY_LIMIT))


class SpacingSystemDetector:
    def detect(self, components: List[DetectedComponent]) -> SpacingSystem:
        raw: Dict[str, List[str]] = {name: [] for name in SPACING_PROPERTIES}
        samples: List[float] = []
        for component in components:
            for name in SPACING_PROPERTIES:
                value = component.visual_properties.style(name)
                if value is None:
                    continue
                raw[name].append(value)
                samples.extend(css_values.px_values(value))

        base_unit = find_base_unit(samples)
        system = SpacingSystem(
            base_unit=base_unit,
            scale=generate_scale(samples, base_unit),
            gap_frequency=count_frequency(raw['gap']),
            padding_frequency=count_frequency(raw['padding']),
            margin_frequency=count_frequency(raw['margin']),
        )
        logger.info(f"Spacing system: base unit {base_unit}px, {len(system.scale)} scale steps "
                    f"from {len(samples)} samples")
        return system
