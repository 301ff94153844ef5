"""
HTML Parser Module
Parses page HTML into a document-order element index used to correlate
per-element styles and bounding boxes with DOM nodes.
"""

from bs4 import BeautifulSoup, Tag, NavigableString
from bs4.element import PreformattedString
from typing import Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


def direct_text_nodes(element: Tag) -> List[str]:
    """Own text nodes of an element, comments and other markup strings excluded."""
    return [str(child) for child in element.children
            if isinstance(child, NavigableString) and not isinstance(child, PreformattedString)]


class ParsedDocument:
    """Parsed page with a stable document-order index of its elements.

    Index ``i`` is the position of an element in ``root.find_all(True)``,
    i.e. every descendant element of ``<body>`` (or of the document when the
    page has no body) in document order. Tags are tracked by identity since
    BeautifulSoup compares tags by content.
    """

    def __init__(self, soup: BeautifulSoup):
        self.soup = soup
        self.root = soup.body if soup.body else soup
        self.elements: List[Tag] = self.root.find_all(True)
        self._positions: Dict[int, int] = {id(el): i for i, el in enumerate(self.elements)}
        self._subtree_end = self._compute_subtree_ends()

    def _compute_subtree_ends(self) -> List[int]:
        # Descendants of element i occupy the contiguous range (i, end]
        ends = list(range(len(self.elements)))
        for i in range(len(self.elements) - 1, -1, -1):
            parent = self.elements[i].parent
            parent_index = self._positions.get(id(parent)) if parent is not None else None
            if parent_index is not None and ends[i] > ends[parent_index]:
                ends[parent_index] = ends[i]
        return ends

    def __len__(self) -> int:
        return len(self.elements)

    def index_of(self, element: Tag) -> Optional[int]:
        return self._positions.get(id(element))

    def subtree_end(self, index: int) -> int:
        return self._subtree_end[index]

    def contains(self, ancestor_index: int, descendant_index: int) -> bool:
        """True when the element at ancestor_index strictly contains the other."""
        return ancestor_index < descendant_index <= self._subtree_end[ancestor_index]


class HTMLParser:
    """Parser for HTML content."""

    def __init__(self, outer_html_limit: int = 1000, text_limit: int = 100):
        self.outer_html_limit = outer_html_limit
        self.text_limit = text_limit

    def parse(self, html_content: str) -> ParsedDocument:
        """Parse HTML content into an indexed document."""
        try:
            logger.debug(f"Input HTML content length: {len(html_content or '')}")
            soup = BeautifulSoup(html_content or '', 'html.parser')
            document = ParsedDocument(soup)
            logger.info(f"HTML parsing complete: {len(document)} elements indexed")
            return document
        except Exception as e:
            logger.error(f"Error parsing HTML: {str(e)}", exc_info=True)
            raise

    @staticmethod
    def get_selector(element: Tag) -> str:
        """Short selector: #id, tag.class1.class2 or the bare tag."""
        element_id = element.get('id')
        if element_id:
            return f"#{element_id}"
        classes = [c for c in element.get('class', []) if ':' not in c][:2]
        if classes:
            return f"{element.name.lower()}.{'.'.join(classes)}"
        return element.name.lower()

    def get_direct_text(self, element: Tag) -> str:
        """Text of the element's own text nodes, truncated."""
        parts = [s.strip() for s in direct_text_nodes(element)]
        text = ' '.join(p for p in parts if p)
        if len(text) > self.text_limit:
            return text[:self.text_limit] + '...'
        return text

    def get_outer_html(self, element: Tag) -> str:
        html = str(element)
        if len(html) > self.outer_html_limit:
            return html[:self.outer_html_limit] + '...'
        return html
