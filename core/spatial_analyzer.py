"""
Spatial Analyzer Module
Classifies how a set of bounding boxes is arranged on the page.
"""

from dataclasses import dataclass, asdict
from typing import Dict, List, Sequence
import numpy as np

from core.models import BoundingBox

ROW_BIN = 30
COLUMN_BIN = 50
LOW_VARIANCE = 50
HIGH_VARIANCE = 100
MAX_GAP = 200


@dataclass(frozen=True)
class SpatialArrangement:
    is_horizontal: bool = False
    is_vertical: bool = False
    is_grid: bool = False
    columns: int = 1
    rows: int = 1
    gap: float = 0.0

    @property
    def layout_type(self) -> str:
        return get_layout_type(self)

    def to_dict(self) -> Dict:
        data = asdict(self)
        data['layout_type'] = self.layout_type
        return data


def analyze(boxes: Sequence[BoundingBox]) -> SpatialArrangement:
    if len(boxes) < 2:
        return SpatialArrangement()

    xs = np.array([b.x for b in boxes], dtype=float)
    ys = np.array([b.y for b in boxes], dtype=float)
    x_variance = float(np.var(xs))
    y_variance = float(np.var(ys))

    is_horizontal = y_variance < LOW_VARIANCE and x_variance > HIGH_VARIANCE
    is_vertical = x_variance < LOW_VARIANCE and y_variance > HIGH_VARIANCE
    is_grid = is_grid_pattern(boxes)

    if is_grid:
        columns, rows = column_count(boxes), row_count(boxes)
    else:
        columns = len(boxes) if is_horizontal else 1
        rows = len(boxes) if is_vertical else 1

    return SpatialArrangement(
        is_horizontal=is_horizontal,
        is_vertical=is_vertical,
        is_grid=is_grid,
        columns=columns,
        rows=rows,
        gap=calculate_gap(boxes, is_horizontal),
    )


def get_layout_type(arrangement: SpatialArrangement) -> str:
    if arrangement.is_grid:
        return 'grid'
    if arrangement.is_horizontal:
        return 'row'
    if arrangement.is_vertical:
        return 'column'
    return 'scattered'


def _bins(values: List[float], size: int) -> set:
    # np.round rounds half to even
    return {float(np.round(v / size) * size) for v in values}


def column_count(boxes: Sequence[BoundingBox]) -> int:
    return len(_bins([b.x for b in boxes], COLUMN_BIN))


def row_count(boxes: Sequence[BoundingBox]) -> int:
    return len(_bins([b.y for b in boxes], ROW_BIN))


def is_grid_pattern(boxes: Sequence[BoundingBox]) -> bool:
    if len(boxes) < 4:
        return False
    return row_count(boxes) >= 2 and column_count(boxes) >= 2


def calculate_gap(boxes: Sequence[BoundingBox], horizontal: bool) -> float:
    """Mean edge-to-edge gap along the arrangement axis, ignoring gaps outside (0, 200)."""
    if len(boxes) < 2:
        return 0.0
    ordered = sorted(boxes, key=lambda b: b.x if horizontal else b.y)
    gaps = []
    for previous, current in zip(ordered, ordered[1:]):
        gap = current.x - previous.right if horizontal else current.y - previous.bottom
        if 0 < gap < MAX_GAP:
            gaps.append(gap)
    return float(np.round(np.mean(gaps))) if gaps else 0.0
