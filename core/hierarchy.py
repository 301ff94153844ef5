"""
Hierarchy Module
Rebuilds parent/child relationships between detected components from the DOM
tree and classifies how each node's children are composed.

Nodes reference their parent by id only; every walk uses an explicit worklist.
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Union
import logging

from bs4 import Tag

from core.config import HIERARCHY_SKIPPED_TAGS, LOGICAL_GROUPINGS
from core.errors import InvariantViolation
from core.html_parser import HTMLParser, ParsedDocument
from core.models import DetectedComponent, new_component_id

logger = logging.getLogger(__name__)


class CompositionType(Enum):
    NONE = 'none'
    NESTED = 'nested'
    SEQUENTIAL = 'sequential'
    GROUPED = 'grouped'
    MIXED = 'mixed'


@dataclass(eq=False)
class ComponentHierarchyNode:
    id: str
    component_type: str
    selector: str
    confidence: float = 0.0
    component: Optional[DetectedComponent] = None
    parent_id: Optional[str] = None
    children: List['ComponentHierarchyNode'] = field(default_factory=list)
    depth: int = 0
    dom_index: Optional[int] = None
    subtree_size: int = 1
    is_atomic: bool = True
    is_compound: bool = False
    composition_type: CompositionType = CompositionType.NONE
    child_types: List[str] = field(default_factory=list)

    def iter_descendants(self) -> Iterator['ComponentHierarchyNode']:
        """Pre-order walk of every node below this one."""
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find_by_id(self, node_id: str) -> Optional['ComponentHierarchyNode']:
        if self.id == node_id:
            return self
        for node in self.iter_descendants():
            if node.id == node_id:
                return node
        return None

    def index_nodes(self) -> Dict[str, 'ComponentHierarchyNode']:
        """Arena view of the tree: node id -> node."""
        nodes = {self.id: self}
        for node in self.iter_descendants():
            nodes[node.id] = node
        return nodes

    def to_dict(self) -> Dict:
        # Serialized iteratively so deep trees do not hit the recursion limit
        root_dict = self._shallow_dict()
        stack = [(self, root_dict)]
        while stack:
            node, node_dict = stack.pop()
            for child in node.children:
                child_dict = child._shallow_dict()
                node_dict['children'].append(child_dict)
                stack.append((child, child_dict))
        return root_dict

    def _shallow_dict(self) -> Dict:
        return {
            'id': self.id,
            'component_type': self.component_type,
            'selector': self.selector,
            'confidence': self.confidence,
            'parent_id': self.parent_id,
            'depth': self.depth,
            'subtree_size': self.subtree_size,
            'is_atomic': self.is_atomic,
            'is_compound': self.is_compound,
            'composition_type': self.composition_type.value,
            'child_types': list(self.child_types),
            'children': [],
        }


@dataclass
class ChildComponentInfo:
    type: str
    selector: str
    position: str
    count: int


@dataclass
class ComponentComposition:
    root_type: str
    selector: str
    children: List[ChildComponentInfo] = field(default_factory=list)
    nested_compositions: List['ComponentComposition'] = field(default_factory=list)


def is_logical_grouping(types: List[str]) -> bool:
    type_set = {t.lower() for t in types}
    return any(type_set <= grouping for grouping in LOGICAL_GROUPINGS)


def determine_composition_type(child_count: int, child_types: List[str]) -> CompositionType:
    if child_count == 0:
        return CompositionType.NONE
    if child_count == 1:
        return CompositionType.NESTED
    if not child_types:
        # several containers, no component directly below
        return CompositionType.MIXED
    if len(child_types) == 1:
        return CompositionType.SEQUENTIAL
    if len(child_types) <= 3 and is_logical_grouping(child_types):
        return CompositionType.GROUPED
    return CompositionType.MIXED


class ComponentHierarchyBuilder:
    def build(self, document: Union[ParsedDocument, str],
              components: List[DetectedComponent]) -> ComponentHierarchyNode:
        """Build the component tree for a document.

        Args:
            document: parsed page (or raw HTML)
            components: detected components, keyed to elements by dom_index

        Returns:
            Root node wrapping the document root.

        Raises:
            InvariantViolation: two components share an id or a DOM index.
        """
        if isinstance(document, str):
            document = HTMLParser().parse(document)
        by_index = self._index_components(components)

        root = self._make_node(document.root, None, by_index, 0)
        order = [root]
        stack = [(child, root, 1) for child in reversed(self._child_tags(document.root))]
        while stack:
            element, parent, depth = stack.pop()
            node = self._make_node(element, document.index_of(element), by_index, depth)
            parent.children.append(node)
            order.append(node)
            stack.extend((child, node, depth + 1) for child in reversed(self._child_tags(element)))

        # Descendants always follow their ancestors in pre-order, so a reversed
        # walk sees every child before its parent.
        for node in reversed(order):
            node.children = [c for c in node.children if c.component is not None or c.children]
            self._compute_metrics(node)

        self._link_components(root)
        logger.info(f"Hierarchy built: {root.subtree_size} nodes for {len(components)} components")
        return root

    @staticmethod
    def _index_components(components: List[DetectedComponent]) -> Dict[int, DetectedComponent]:
        by_index: Dict[int, DetectedComponent] = {}
        seen_ids = set()
        for component in components:
            if component.id in seen_ids:
                raise InvariantViolation(f"Duplicate component id '{component.id}'")
            if component.dom_index in by_index:
                raise InvariantViolation(f"Two components share DOM index {component.dom_index}")
            seen_ids.add(component.id)
            by_index[component.dom_index] = component
        return by_index

    @staticmethod
    def _child_tags(element: Tag) -> List[Tag]:
        return [c for c in element.children
                if isinstance(c, Tag) and c.name.lower() not in HIERARCHY_SKIPPED_TAGS]

    @staticmethod
    def _make_node(element: Tag, index: Optional[int], by_index: Dict[int, DetectedComponent],
                   depth: int) -> ComponentHierarchyNode:
        component = by_index.get(index) if index is not None else None
        if component is not None:
            return ComponentHierarchyNode(
                id=component.id,
                component_type=component.type,
                selector=component.selector,
                confidence=component.confidence,
                component=component,
                depth=depth,
                dom_index=index,
            )
        return ComponentHierarchyNode(
            id=new_component_id(),
            component_type='container',
            selector=HTMLParser.get_selector(element),
            depth=depth,
            dom_index=index,
        )

    @staticmethod
    def _compute_metrics(node: ComponentHierarchyNode) -> None:
        node.subtree_size = 1 + sum(c.subtree_size for c in node.children)
        component_children = [c for c in node.children if c.component is not None]
        node.is_compound = bool(component_children)
        node.is_atomic = not node.is_compound
        child_types = []
        for child in component_children:
            if child.component_type not in child_types:
                child_types.append(child.component_type)
        node.child_types = child_types
        node.composition_type = determine_composition_type(len(node.children), child_types)

    @staticmethod
    def _link_components(root: ComponentHierarchyNode) -> None:
        """Breadth-first back-fill of parent ids and component relationships."""
        visited = set()
        queue = deque([(root, None, None)])
        while queue:
            node, parent_node_id, component_ancestor_id = queue.popleft()
            if id(node) in visited:
                raise InvariantViolation(f"Hierarchy node '{node.id}' reached twice")
            visited.add(id(node))
            node.parent_id = parent_node_id

            if node.component is not None:
                component = node.component
                component.parent_id = component_ancestor_id
                component.child_ids = [c.component.id for c in node.children if c.component is not None]
                component.composition = list(node.child_types)
                component.is_atomic = node.is_atomic
                component.is_compound = node.is_compound
                component_ancestor_id = component.id

            for child in node.children:
                queue.append((child, node.id, component_ancestor_id))

    def analyze_composition(self, node: ComponentHierarchyNode) -> ComponentComposition:
        """Describe the component children of a node and of every nested node."""
        root_composition = ComponentComposition(node.component_type, node.selector)
        stack = [(node, root_composition)]
        while stack:
            current, composition = stack.pop()
            total = len(current.children)
            for position, child in enumerate(current.children):
                if child.component is not None:
                    composition.children.append(ChildComponentInfo(
                        type=child.component_type,
                        selector=child.selector,
                        position=self._position(position, total),
                        count=sum(1 for c in current.children if c.component_type == child.component_type),
                    ))
                if child.children:
                    nested = ComponentComposition(child.component_type, child.selector)
                    composition.nested_compositions.append(nested)
                    stack.append((child, nested))
        return root_composition

    @staticmethod
    def _position(index: int, total: int) -> str:
        if index == 0:
            return 'start'
        if index == total - 1:
            return 'end'
        return 'middle'
