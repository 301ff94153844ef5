import sys
import os
import json
import pytest
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from core.errors import PageAnalysisError
from core.site_analyzer import PageInput, SiteAnalyzer

BUTTONS_HTML = ''.join('<button class="btn">Buy</button>' for _ in range(3))
BUTTON_STYLE = {'background-color': 'rgb(0, 123, 255)', 'border-radius': '4px'}

def page(url, width=120):
    return {
        'url': url,
        'html': BUTTONS_HTML,
        'styles': {str(i): BUTTON_STYLE for i in range(3)},
        'boxes': {str(i): [x, 0, width, 40] for i, x in enumerate((0, 150, 300))},
    }

@pytest.mark.parametrize('max_workers', [1, 2])
def test_failed_page_is_isolated(max_workers):
    result = SiteAnalyzer().analyze_pages([page('/good'), page('/bad', width=-1)], max_workers=max_workers)
    assert [p.url for p in result.pages] == ['/good', '/bad']
    assert result.pages[0].success
    assert not result.pages[1].success
    assert result.pages[1].error.startswith('/bad: ')
    assert isinstance(result.pages[1].failure, PageAnalysisError)
    assert result.pages[1].failure.url == '/bad'
    assert result.pages[0].failure is None
    assert result.summary.total_pages_analyzed == 1
    assert result.summary.total_pages_failed == 1
    assert result.components[0].found_on_pages == ['/good']
    assert result.components[0].total_instances == 3

def test_pages_merge_across_site():
    pages = [PageInput(**page(url)) for url in ('/', '/pricing', '/about')]
    result = SiteAnalyzer().analyze_pages(pages, max_workers=3)
    assert len(result.components) == 1
    assert result.components[0].found_on_pages == ['/', '/pricing', '/about']
    assert result.summary.total_component_instances == 9
    json.dumps(result.to_dict())

def test_no_pages():
    result = SiteAnalyzer().analyze_pages([])
    assert result.pages == [] and result.components == []
    assert result.summary.total_pages_analyzed == 0
