"""
Fingerprint Module
Builds structural fingerprints of DOM subtrees and compares them.
"""

from dataclasses import dataclass, asdict
from typing import Dict, List
from bs4 import BeautifulSoup, Tag
import logging

from core.html_parser import direct_text_nodes

logger = logging.getLogger(__name__)

FLAG_LETTERS = (
    ('has_heading', 'H'),
    ('has_image', 'I'),
    ('has_link', 'L'),
    ('has_button', 'B'),
    ('has_form', 'F'),
    ('has_list', 'U'),
    ('has_table', 'T'),
)

SIGNATURE_WEIGHT = 3.0
PARTIAL_SIGNATURE_CREDIT = 1.0
CHILD_COUNT_WEIGHT = 1.0
FLAG_WEIGHT = 1.0
TOTAL_WEIGHT = SIGNATURE_WEIGHT + CHILD_COUNT_WEIGHT + FLAG_WEIGHT * len(FLAG_LETTERS)


@dataclass(frozen=True)
class StructuralFingerprint:
    tag_signature: str = ''
    child_count: int = 0
    depth: int = 0
    text_node_count: int = 0
    interactive_count: int = 0
    media_count: int = 0
    has_heading: bool = False
    has_image: bool = False
    has_link: bool = False
    has_button: bool = False
    has_form: bool = False
    has_list: bool = False
    has_table: bool = False

    @property
    def hash(self) -> str:
        return compute_hash(self)

    @property
    def root_tag(self) -> str:
        return self.tag_signature.split('[', 1)[0]

    def similarity_to(self, other: 'StructuralFingerprint') -> float:
        """Weighted structural similarity in [0, 1]; symmetric."""
        if self.hash == other.hash:
            return 1.0

        score = 0.0
        if self.tag_signature == other.tag_signature:
            score += SIGNATURE_WEIGHT
        elif self.root_tag == other.root_tag:
            score += PARTIAL_SIGNATURE_CREDIT

        if self.child_count == other.child_count:
            score += CHILD_COUNT_WEIGHT
        elif abs(self.child_count - other.child_count) <= 2:
            score += CHILD_COUNT_WEIGHT / 2

        for flag, _ in FLAG_LETTERS:
            if getattr(self, flag) == getattr(other, flag):
                score += FLAG_WEIGHT

        return score / TOTAL_WEIGHT

    def to_dict(self) -> Dict:
        data = asdict(self)
        data['hash'] = self.hash
        return data


def compute_hash(fingerprint: StructuralFingerprint) -> str:
    """Pipe-joined canonical key; empty fields are left out."""
    flags = ''.join(letter for flag, letter in FLAG_LETTERS if getattr(fingerprint, flag))
    parts = [
        fingerprint.tag_signature,
        str(fingerprint.child_count),
        str(fingerprint.interactive_count),
        str(fingerprint.media_count),
        flags,
    ]
    return '|'.join(p for p in parts if p)


class StructuralFingerprintGenerator:
    MAX_SIGNATURE_DEPTH = 4
    MAX_CHILDREN_PER_LEVEL = 10

    IGNORED_TAGS = frozenset({'script', 'style', 'noscript', 'meta', 'link', 'br', 'hr', 'wbr'})
    HEADING_TAGS = ['h1', 'h2', 'h3', 'h4', 'h5', 'h6']
    MEDIA_TAGS = ['img', 'video', 'audio', 'svg', 'canvas', 'picture', 'iframe']
    INTERACTIVE_TAGS = frozenset({'button', 'a', 'input', 'select', 'textarea'})

    def generate(self, element: Tag) -> StructuralFingerprint:
        return StructuralFingerprint(
            tag_signature=self.build_tag_signature(element),
            child_count=len(self._relevant_children(element)),
            depth=self._depth(element),
            text_node_count=sum(1 for t in direct_text_nodes(element) if t.strip()),
            interactive_count=self._count_interactive(element),
            media_count=len(element.find_all(self.MEDIA_TAGS)),
            has_heading=element.find(self.HEADING_TAGS) is not None,
            has_image=element.find(['img', 'svg', 'picture']) is not None,
            has_link=element.find('a', href=True) is not None,
            has_button=element.find(self._is_button) is not None,
            has_form=element.find(['form', 'input', 'textarea', 'select']) is not None,
            has_list=element.find(['ul', 'ol', 'dl']) is not None,
            has_table=element.find('table') is not None,
        )

    def build_tag_signature(self, element: Tag, depth: int = 0) -> str:
        if depth >= self.MAX_SIGNATURE_DEPTH:
            return '...'
        tag = element.name.lower()
        children = self._relevant_children(element)[:self.MAX_CHILDREN_PER_LEVEL]
        if not children:
            return tag
        signatures = [self.build_tag_signature(child, depth + 1) for child in children]
        return f"{tag}[{','.join(self._group_consecutive(signatures))}]"

    @staticmethod
    def _group_consecutive(signatures: List[str]) -> List[str]:
        result = []
        current, count = signatures[0], 1
        for signature in signatures[1:]:
            if signature == current:
                count += 1
                continue
            result.append(f"{current}*{count}" if count > 1 else current)
            current, count = signature, 1
        result.append(f"{current}*{count}" if count > 1 else current)
        return result

    def _relevant_children(self, element: Tag) -> List[Tag]:
        return [c for c in element.children
                if isinstance(c, Tag) and c.name.lower() not in self.IGNORED_TAGS]

    @staticmethod
    def _depth(element: Tag) -> int:
        depth = 0
        parent = element.parent
        while parent is not None and not isinstance(parent, BeautifulSoup):
            depth += 1
            parent = parent.parent
        return depth

    def _count_interactive(self, element: Tag) -> int:
        count = 0
        for child in element.find_all(True):
            if (child.name.lower() in self.INTERACTIVE_TAGS or child.has_attr('onclick')
                    or child.get('role') == 'button'):
                count += 1
        return count

    @staticmethod
    def _is_button(tag: Tag) -> bool:
        return tag.name == 'button' or tag.get('role') == 'button'
