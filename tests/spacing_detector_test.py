import sys
import os
import pytest
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from core.models import BoundingBox, DetectedComponent, VisualProperties
from core.spacing_detector import SpacingSystemDetector, count_frequency, find_base_unit, generate_scale

def make_component(styles):
    return DetectedComponent('card', 0.8, None, VisualProperties(BoundingBox(0, 0, 100, 100), styles), 0)

def test_base_unit_prefers_larger_on_tie():
    assert find_base_unit([8, 16, 24, 32, 40]) == 8

def test_base_unit_of_six():
    assert find_base_unit([6, 12, 18, 24]) == 6

def test_few_samples_default_to_eight():
    assert find_base_unit([6, 12]) == 8
    assert find_base_unit([0, 500, 6]) == 8

def test_scale_snaps_to_observed_values():
    assert generate_scale([8, 16, 24, 32, 40], 8) == [8, 16, 24, 32, 48, 64, 96, 128]

def test_scale_without_samples():
    assert generate_scale([], 4) == [2, 4, 6, 8, 12, 16, 24, 32, 48, 64]

def test_count_frequency_normalizes_shorthand():
    values = ['8px 16px 8px 16px', '8px 16px', '0px', '4px 4px 4px 4px']
    assert count_frequency(values) == {'8px 16px': 2, '4px': 1}

def test_detect_reads_component_styles():
    components = [
        make_component({'padding': '8px 16px', 'gap': '24px'}),
        make_component({'padding': '8px 16px 8px 16px', 'margin': '32px'}),
        make_component({'margin': '40px'}),
    ]
    system = SpacingSystemDetector().detect(components)
    assert system.base_unit == 8
    assert system.padding_frequency == {'8px 16px': 2}
    assert system.gap_frequency == {'24px': 1}
    assert system.margin_frequency == {'32px': 1, '40px': 1}
    assert system.scale[0] == 8
    assert system.to_dict()['base_unit'] == 8
