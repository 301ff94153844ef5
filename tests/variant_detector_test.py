import sys
import os
import pytest
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from core.models import BoundingBox, DetectedComponent, HslColor, VisualProperties
from core.variant_detector import (
    ColorVariantDetector, ComponentState, SizeVariantDetector, VariantDetector, classify_color,
)

def make_component(kind='button', box=(0, 0, 100, 40), styles=None):
    return DetectedComponent(kind, 0.9, None, VisualProperties(BoundingBox(*box), styles), 0)

def test_size_variants():
    components = [make_component(box=(0, 0, w, h)) for w, h in ((50, 20), (100, 40), (100, 40), (200, 80))]
    variants = SizeVariantDetector().detect(components)
    assert [(v.name, v.instance_count) for v in variants] == [('xs', 1), ('md', 2), ('xl', 1)]
    assert variants[1].avg_width == pytest.approx(100)
    assert variants[1].avg_font_size == pytest.approx(16)

def test_size_variants_need_two_instances():
    assert SizeVariantDetector().detect([make_component()]) == []

@pytest.mark.parametrize('color,name', [
    ('#3b82f6', 'primary'),
    ('rgb(220, 38, 38)', 'danger'),
    ('#fff', 'light'),
    ('#111', 'dark'),
    ('gray', 'neutral'),
    ('rgb(128, 0, 128)', 'purple'),
])
def test_classify_color(color, name):
    assert classify_color(HslColor.from_css(color)) == name

def test_color_variants_skip_transparent():
    components = [
        make_component(styles={'background-color': '#3b82f6', 'color': '#fff'}),
        make_component(styles={'background-color': 'rgb(59, 130, 246)'}),
        make_component(styles={'background-color': 'rgb(220, 38, 38)'}),
        make_component(styles={'background-color': 'transparent'}),
        make_component(styles={'background-color': 'rgba(0, 0, 0, 0)'}),
        make_component(),
    ]
    variants = ColorVariantDetector().detect(components)
    assert [(v.name, v.instance_count) for v in variants] == [('primary', 2), ('danger', 1)]
    assert variants[0].background_color == '#3b82f6'
    assert variants[0].text_color == '#fff'

def test_variants_per_type():
    components = [make_component(), make_component(), make_component('card', (0, 0, 300, 300))]
    variants = VariantDetector().detect(components)
    assert set(variants) == {'button', 'card'}
    states = variants['button'].state_variants
    assert len(states) == 1
    assert states[0].state == ComponentState.DEFAULT and states[0].is_detected
    assert variants['card'].size_variants == []
    assert variants['button'].to_dict()['state_variants'][0]['state'] == 'default'
