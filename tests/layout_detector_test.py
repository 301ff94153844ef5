import sys
import os
import pytest
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from core.layout_detector import LayoutDetector, LayoutType, parse_grid_template

def test_parse_repeat():
    assert parse_grid_template('repeat(3, 1fr)') == ['1fr', '1fr', '1fr']

def test_parse_auto_fill_kept_whole():
    assert parse_grid_template('repeat(auto-fill, minmax(200px, 1fr))') == ['repeat(auto-fill, minmax(200px, 1fr))']

def test_parse_mixed_tracks():
    assert parse_grid_template('200px 1fr') == ['200px', '1fr']
    assert parse_grid_template('[full-start] 100px [main] auto') == ['100px', 'auto']
    assert parse_grid_template('none') == []
    assert parse_grid_template(None) == []

def test_flex_layout():
    layout = LayoutDetector().detect('nav.menu', {'display': 'flex', 'gap': '16px', 'justify-content': 'space-between'})
    assert layout.type == LayoutType.FLEX
    assert layout.flexbox.gap == 16
    assert layout.flexbox.direction == 'row'
    assert layout.flexbox.justify_content == 'space-between'
    assert layout.grid is None

def test_grid_layout():
    layout = LayoutDetector().detect('div.grid', {
        'display': 'grid', 'grid-template-columns': 'repeat(3, 1fr)', 'column-gap': '24px',
    })
    assert layout.type == LayoutType.GRID
    assert layout.grid.columns == 3
    assert layout.grid.rows == 1
    assert layout.grid.column_gap == 24
    assert layout.to_dict()['type'] == 'grid'

def test_other_display_values():
    detector = LayoutDetector()
    assert detector.detect('p', {}).type == LayoutType.BLOCK
    assert detector.detect('p', {'display': 'none'}).type == LayoutType.NONE
    assert detector.detect('td', {'display': 'table-cell'}).type == LayoutType.TABLE
    assert detector.detect('p', {'display': 'contents'}).type == LayoutType.BLOCK
