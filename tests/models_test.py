import sys
import os
import pytest
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from core.config import DetectionConfig
from core.errors import InvariantViolation
from core.models import BoundingBox, HslColor, VisualProperties

def test_bounding_box_rejects_negative_size():
    with pytest.raises(InvariantViolation):
        BoundingBox(0, 0, -1, 10)
    with pytest.raises(ValueError):
        BoundingBox(0, 0, 10, -5)

def test_bounding_box_geometry():
    box = BoundingBox(10, 20, 100, 50)
    assert box.right == 110
    assert box.bottom == 70
    assert box.center_x == 60
    assert box.center_y == 45
    assert box.area == 5000
    assert box.aspect_ratio == 2.0
    assert BoundingBox(0, 0, 10, 0).aspect_ratio == 0.0

def test_bounding_box_overlap_and_containment():
    a = BoundingBox(0, 0, 100, 100)
    b = BoundingBox(50, 50, 100, 100)
    c = BoundingBox(200, 200, 10, 10)
    assert a.intersects(b)
    assert a.overlap_area(b) == 2500
    assert not a.intersects(c)
    assert a.overlap_area(c) == 0
    assert a.contains(BoundingBox(10, 10, 20, 20))

def test_bounding_box_coerce():
    assert BoundingBox.coerce((1, 2, 3, 4)) == BoundingBox(1, 2, 3, 4)
    assert BoundingBox.coerce({'x': 1, 'y': 2, 'width': 3, 'height': 4}) == BoundingBox(1, 2, 3, 4)

def test_missing_style_is_explicitly_absent():
    vis = VisualProperties(BoundingBox(0, 0, 10, 10), {'color': '  '})
    assert vis.style('color') is None
    assert vis.style('display') is None
    assert vis.parsed_font_size == 16
    assert vis.parsed_font_weight == 400
    assert vis.parsed_z_index == 0
    assert vis.parsed_padding == 0
    assert not vis.has_shadow
    assert not vis.has_border
    assert not vis.has_distinct_background

def test_parsed_accessors():
    vis = VisualProperties(BoundingBox(0, 0, 10, 10), {
        'font-size': '18px',
        'font-weight': 'bold',
        'z-index': 'auto',
        'padding': '8px 16px',
        'border-radius': '6px',
    })
    assert vis.parsed_font_size == 18
    assert vis.parsed_font_weight == 700
    assert vis.parsed_z_index == 0
    assert vis.parsed_padding == 12
    assert vis.parsed_border_radius == 6
    assert vis.has_border_radius

def test_border_detection():
    def border(value):
        return VisualProperties(BoundingBox(), {'border': value}).has_border
    assert border('1px solid rgb(204, 204, 204)')
    assert not border('0px none rgb(0, 0, 0)')
    assert not border('none')
    assert not border('2px hidden red')

def test_distinct_background_and_shadow():
    def vis(styles):
        return VisualProperties(BoundingBox(), styles)
    assert vis({'background-color': 'rgb(0, 123, 255)'}).has_distinct_background
    assert not vis({'background-color': 'rgba(0, 0, 0, 0)'}).has_distinct_background
    assert not vis({'background-color': 'transparent'}).has_distinct_background
    assert vis({'box-shadow': '0 1px 2px black'}).has_shadow
    assert not vis({'box-shadow': 'none'}).has_shadow

def test_is_centered():
    assert VisualProperties(BoundingBox(760, 0, 400, 100)).is_centered
    assert not VisualProperties(BoundingBox(0, 0, 400, 100)).is_centered

def test_hsl_color_from_css():
    red = HslColor.from_css('rgb(255, 0, 0)')
    assert red.h == pytest.approx(0.0)
    assert red.s == pytest.approx(1.0)
    assert red.l == pytest.approx(0.5)
    assert HslColor.from_css('garbage') == HslColor()

def test_config_from_dict():
    cfg = DetectionConfig.from_dict({'confidence_threshold': 0.5})
    assert cfg.confidence_threshold == 0.5
    assert cfg.overlap_ratio == 0.8
    with pytest.raises(ValueError):
        DetectionConfig.from_dict({'no_such_option': 1})
