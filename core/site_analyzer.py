"""
Site Analyzer Module
Analyzes several pages independently and merges them into one site result.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union
import logging

from comparator.result_aggregator import AggregatedSiteResult, PageResult, ResultAggregator
from core.component_analyzer import ComponentAnalyzer
from core.config import DetectionConfig, DEFAULT_CONFIG
from core.errors import PageAnalysisError

logger = logging.getLogger(__name__)


@dataclass
class PageInput:
    url: str
    html: str
    styles: Dict[Any, Dict[str, str]] = field(default_factory=dict)
    boxes: Dict[Any, Any] = field(default_factory=dict)
    sections: List[Any] = field(default_factory=list)

    @classmethod
    def coerce(cls, value: Union['PageInput', Mapping[str, Any]]) -> 'PageInput':
        if isinstance(value, cls):
            return value
        return cls(
            url=value.get('url', ''),
            html=value.get('html', ''),
            styles=value.get('styles') or {},
            boxes=value.get('boxes') or {},
            sections=value.get('sections') or [],
        )


class SiteAnalyzer:
    def __init__(self, config: DetectionConfig = DEFAULT_CONFIG,
                 analyzer: Optional[ComponentAnalyzer] = None):
        self.analyzer = analyzer if analyzer is not None else ComponentAnalyzer(config)
        self.aggregator = ResultAggregator()

    def analyze_pages(self, pages: Sequence[Union[PageInput, Mapping[str, Any]]],
                      max_workers: int = 1) -> AggregatedSiteResult:
        """Analyze every page, then aggregate.

        A page that raises is recorded as a failed PageResult; the remaining
        pages are unaffected. Page results keep the input order.
        """
        inputs = [PageInput.coerce(p) for p in pages]
        results: List[Optional[PageResult]] = [None] * len(inputs)

        if max_workers > 1 and len(inputs) > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                futures = {executor.submit(self.analyze_page, page): i for i, page in enumerate(inputs)}
                for future in as_completed(futures):
                    results[futures[future]] = future.result()
        else:
            for i, page in enumerate(inputs):
                results[i] = self.analyze_page(page)

        failed = [r.url for r in results if not r.success]
        if failed:
            logger.warning(f"Failed pages: {', '.join(failed)}")
        return self.aggregator.aggregate(results)

    def analyze_page(self, page: PageInput) -> PageResult:
        try:
            analysis = self.analyzer.analyze(page.html, page.styles, page.boxes,
                                             url=page.url, sections=page.sections)
            return PageResult(url=page.url, success=True, analysis=analysis)
        except Exception as e:
            error = PageAnalysisError(page.url, str(e))
            logger.error(f"Page analysis failed: {error}", exc_info=True)
            return PageResult(url=page.url, success=False, error=str(error), failure=error)
