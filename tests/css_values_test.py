import sys
import os
import pytest
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from utils import css_values

def test_px_values():
    assert css_values.px_values('8px 16px') == [8.0, 16.0]
    assert css_values.px_values('0 12px') == [0.0, 12.0]
    assert css_values.px_values('1rem 50%') == []
    assert css_values.px_values(None) == []

def test_first_number_and_parse_int():
    assert css_values.first_number('1.5rem') == 1.5
    assert css_values.first_number('auto') is None
    assert css_values.parse_int('100') == 100
    assert css_values.parse_int('auto') is None
    assert css_values.parse_int('1.5') is None

def test_parse_rgba_and_transparency():
    assert css_values.parse_rgba('rgb(255, 0, 0)') == (1.0, 0.0, 0.0, 1.0)
    assert css_values.is_transparent('transparent')
    assert css_values.is_transparent('rgba(0, 0, 0, 0)')
    assert not css_values.is_transparent('#fff')
    assert css_values.parse_rgba('not-a-color') is None

def test_rgba_to_hsl():
    h, s, l = css_values.rgba_to_hsl((0.0, 0.0, 1.0, 1.0))
    assert h == pytest.approx(240.0)
    assert s == pytest.approx(1.0)
    assert l == pytest.approx(0.5)

def test_color_key_quantizes_close_colors_together():
    assert css_values.color_key('rgb(255, 255, 255)') == '#ffffff'
    assert css_values.color_key('rgb(0, 122, 255)') == css_values.color_key('rgb(3, 125, 250)')
    assert css_values.color_key('transparent') == 'none'
    assert css_values.color_key(None) == 'none'

def test_normalize_spacing():
    assert css_values.normalize_spacing('8px 8px 8px 8px') == '8px'
    assert css_values.normalize_spacing('8px 16px 8px 16px') == '8px 16px'
    assert css_values.normalize_spacing('4px 8px 12px 8px') == '4px 8px 12px'
    assert css_values.normalize_spacing('1px 2px 3px 4px') == '1px 2px 3px 4px'
