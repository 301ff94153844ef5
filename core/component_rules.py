"""
Component Rules Module
Catalog of scoring rules that classify a fingerprinted element as a UI component type.

Each rule maps (StructuralFingerprint, VisualProperties) to a score in [0, 1].
Rules may hard-gate on a required feature by returning 0 before adding any
weighted credit. The weights of every rule add up to 1.0.
"""

from dataclasses import dataclass
from typing import Callable, List, Tuple, Iterable
import logging

from core.fingerprint import StructuralFingerprint
from core.models import VisualProperties

logger = logging.getLogger(__name__)

ScoreFunction = Callable[[StructuralFingerprint, VisualProperties], float]


@dataclass(frozen=True)
class ComponentTypeRule:
    component_type: str
    score: ScoreFunction

    def evaluate(self, fingerprint: StructuralFingerprint, visual: VisualProperties) -> float:
        # Rounded so that summed weights compare cleanly against thresholds
        return round(self.score(fingerprint, visual), 6)


class RuleCatalog:
    """Ordered set of rules; earlier rules win ties."""

    def __init__(self, rules: Iterable[ComponentTypeRule] = ()):
        self._rules: List[ComponentTypeRule] = list(rules)

    def register(self, rule: ComponentTypeRule) -> None:
        if any(r.component_type == rule.component_type for r in self._rules):
            raise ValueError(f"Rule already registered for type '{rule.component_type}'")
        self._rules.append(rule)
        logger.debug(f"Registered component rule: {rule.component_type}")

    @property
    def rules(self) -> Tuple[ComponentTypeRule, ...]:
        return tuple(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def best_match(self, fingerprint: StructuralFingerprint,
                   visual: VisualProperties) -> Tuple[str, float]:
        best_type, best_score = 'unknown', 0.0
        for rule in self._rules:
            score = rule.evaluate(fingerprint, visual)
            if score > best_score:
                best_type, best_score = rule.component_type, score
        return best_type, best_score


def _is_row(visual: VisualProperties) -> bool:
    return visual.flex_direction == 'row'


def _is_flex(visual: VisualProperties) -> bool:
    return visual.display == 'flex'


def score_button(fp: StructuralFingerprint, vis: VisualProperties) -> float:
    if not vis.has_distinct_background and not vis.has_border:
        return 0.0
    score = 0.25
    if 30 < vis.width < 400 and 20 < vis.height < 80:
        score += 0.25
    if fp.child_count <= 3 and fp.interactive_count == 0:
        score += 0.2
    if vis.has_border_radius:
        score += 0.1
    if vis.has_shadow:
        score += 0.05
    if 0 < fp.text_node_count <= 2:
        score += 0.15
    return score


def score_card(fp: StructuralFingerprint, vis: VisualProperties) -> float:
    if not fp.has_image or not fp.has_heading:
        return 0.0
    score = 0.35
    if fp.text_node_count > 0:
        score += 0.15
    if fp.has_link or fp.has_button:
        score += 0.1
    if vis.has_shadow or vis.has_border:
        score += 0.2
    if vis.has_border_radius:
        score += 0.05
    if 3 <= fp.child_count <= 15:
        score += 0.15
    return score


def score_navigation(fp: StructuralFingerprint, vis: VisualProperties) -> float:
    if not fp.has_link or fp.interactive_count < 3:
        return 0.0
    score = 0.3
    y = vis.bounding_box.y
    if y < 150:
        score += 0.25
    elif y < 300:
        score += 0.1
    else:
        return 0.0
    if fp.has_list or _is_flex(vis):
        score += 0.15
    if fp.has_image:
        score += 0.1
    if _is_row(vis) or vis.width > vis.height * 3:
        score += 0.15
    if vis.width > 800:
        score += 0.05
    return score


def score_hero(fp: StructuralFingerprint, vis: VisualProperties) -> float:
    score = 0.0
    if vis.bounding_box.y < 600:
        score += 0.2
    if vis.height > 300:
        score += 0.2
    if fp.has_heading:
        score += 0.25
    if vis.width > 900:
        score += 0.1
    if fp.has_button:
        score += 0.15
    if fp.text_node_count > 0:
        score += 0.1
    return score


def score_footer(fp: StructuralFingerprint, vis: VisualProperties) -> float:
    score = 0.0
    if vis.bounding_box.y > 800:
        score += 0.3
    if vis.width > 900:
        score += 0.15
    if fp.has_link and fp.interactive_count >= 2:
        score += 0.25
    if fp.has_list or fp.child_count >= 3:
        score += 0.15
    if fp.text_node_count > 0:
        score += 0.15
    return score


def score_modal(fp: StructuralFingerprint, vis: VisualProperties) -> float:
    score = 0.0
    if vis.position in ('fixed', 'absolute'):
        score += 0.3
    if vis.parsed_z_index > 100:
        score += 0.2
    if vis.is_centered:
        score += 0.15
    if fp.has_button:
        score += 0.15
    if vis.has_shadow:
        score += 0.1
    if vis.width > 200 and vis.height > 150 and vis.width < 800:
        score += 0.1
    return score


def score_tabs(fp: StructuralFingerprint, vis: VisualProperties) -> float:
    score = 0.0
    if 2 <= fp.interactive_count <= 10:
        score += 0.3
    if _is_row(vis) or _is_flex(vis):
        score += 0.2
    if fp.has_list:
        score += 0.15
    if vis.width > vis.height * 2:
        score += 0.2
    if fp.has_link or fp.has_button:
        score += 0.15
    return score


def score_accordion(fp: StructuralFingerprint, vis: VisualProperties) -> float:
    score = 0.0
    if 2 <= fp.child_count <= 20:
        score += 0.25
    if fp.has_heading:
        score += 0.2
    if fp.interactive_count >= 1:
        score += 0.2
    if vis.height > vis.width * 0.5 or vis.flex_direction == 'column':
        score += 0.2
    if fp.text_node_count > 0:
        score += 0.15
    return score


def score_table(fp: StructuralFingerprint, vis: VisualProperties) -> float:
    score = 0.0
    if fp.has_table:
        score += 0.6
    if vis.display in ('table', 'grid'):
        score += 0.2
    if fp.child_count >= 3:
        score += 0.1
    if vis.width > 400:
        score += 0.1
    return score


def score_form(fp: StructuralFingerprint, vis: VisualProperties) -> float:
    score = 0.0
    if fp.has_form:
        score += 0.4
    if fp.has_button:
        score += 0.2
    if fp.child_count >= 2:
        score += 0.15
    if vis.height > 100:
        score += 0.1
    if fp.text_node_count > 0:
        score += 0.15
    return score


def score_badge(fp: StructuralFingerprint, vis: VisualProperties) -> float:
    if vis.width >= 120 or vis.height >= 35:
        return 0.0
    score = 0.35
    if vis.parsed_border_radius > 4:
        score += 0.25
    if vis.has_distinct_background:
        score += 0.2
    if fp.child_count <= 1:
        score += 0.15
    if fp.text_node_count > 0:
        score += 0.05
    return score


def score_avatar(fp: StructuralFingerprint, vis: VisualProperties) -> float:
    if not vis.has_border_radius or vis.parsed_border_radius < vis.width / 2 * 0.9:
        return 0.0
    if vis.width >= 100 or vis.height >= 100 or abs(vis.width - vis.height) >= 15:
        return 0.0
    score = 0.65
    if fp.has_image:
        score += 0.25
    if fp.child_count <= 2:
        score += 0.1
    return score


def score_alert(fp: StructuralFingerprint, vis: VisualProperties) -> float:
    score = 0.0
    if vis.has_distinct_background:
        score += 0.25
    if vis.has_border or vis.has_border_radius:
        score += 0.15
    if fp.text_node_count > 0:
        score += 0.2
    if fp.has_button:
        score += 0.15
    if vis.width > 200:
        score += 0.1
    if vis.height < 200:
        score += 0.15
    return score


def score_input(fp: StructuralFingerprint, vis: VisualProperties) -> float:
    score = 0.0
    if fp.has_form:
        score += 0.4
    if 20 < vis.height < 60:
        score += 0.25
    if vis.has_border:
        score += 0.2
    if fp.child_count <= 2:
        score += 0.15
    return score


DEFAULT_RULES = (
    ComponentTypeRule('button', score_button),
    ComponentTypeRule('card', score_card),
    ComponentTypeRule('navigation', score_navigation),
    ComponentTypeRule('hero', score_hero),
    ComponentTypeRule('footer', score_footer),
    ComponentTypeRule('modal', score_modal),
    ComponentTypeRule('tabs', score_tabs),
    ComponentTypeRule('accordion', score_accordion),
    ComponentTypeRule('table', score_table),
    ComponentTypeRule('form', score_form),
    ComponentTypeRule('badge', score_badge),
    ComponentTypeRule('avatar', score_avatar),
    ComponentTypeRule('alert', score_alert),
    ComponentTypeRule('input', score_input),
)


def default_catalog() -> RuleCatalog:
    """Fresh catalog holding the built-in rules; callers may register more."""
    return RuleCatalog(DEFAULT_RULES)
