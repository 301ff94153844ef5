import sys
import os
import pytest
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
import numpy as np
from core.fingerprint import StructuralFingerprint
from core.models import BoundingBox, DetectedComponent, VisualProperties
from core.visual_clustering import ClusterableElement, VisualClusteringEngine, VisualFeatureVector

BUTTON_STYLE = {'background-color': 'rgb(0, 123, 255)', 'color': 'rgb(255, 255, 255)',
                'border-radius': '4px', 'font-size': '14px'}

def make_component(kind, box, styles):
    return DetectedComponent(kind, 0.9, StructuralFingerprint(tag_signature=kind),
                             VisualProperties(BoundingBox(*box), styles), 0)

def sample_elements():
    components = [make_component('button', (x, 0, 120, 40), BUTTON_STYLE) for x in (0, 150, 300)]
    components.append(make_component('card', (0, 300, 600, 800),
                                     {'background-color': 'rgb(250, 250, 250)', 'box-shadow': '0 1px 2px black'}))
    return [ClusterableElement.from_component(c) for c in components]

def test_feature_vector_is_normalized():
    vector = VisualFeatureVector.from_component(make_component('button', (0, 0, 120, 40), BUTTON_STYLE))
    values = vector.to_array()
    assert values.shape == (15,)
    assert np.all(values >= 0) and np.all(values <= 1)
    assert vector.width == pytest.approx(120 / 1920)
    assert vector.aspect_ratio == pytest.approx(3 / 5)
    assert vector.font_size == pytest.approx(14 / 72)
    assert vector.font_weight == pytest.approx(300 / 800)
    assert vector.border_radius == pytest.approx(4 / 50)

def test_zero_height_aspect_ratio_defaults_to_half():
    vector = VisualFeatureVector.from_component(make_component('badge', (0, 0, 50, 0), {}))
    assert vector.aspect_ratio == 0.5

def test_clusters_similar_buttons_and_leaves_noise_out():
    elements = sample_elements()
    clusters = VisualClusteringEngine().cluster(elements)
    assert len(clusters) == 1
    cluster = clusters[0]
    assert cluster.id == 1
    assert len(cluster.elements) == 3
    assert cluster.component_type == 'button-grid'
    assert cluster.arrangement.is_horizontal
    assert elements[3].cluster_id == 0
    assert cluster.centroid.to_array() == pytest.approx(elements[0].feature_vector.to_array())

def test_clustering_is_deterministic():
    first = VisualClusteringEngine().cluster(sample_elements())
    second = VisualClusteringEngine().cluster(sample_elements())
    membership = lambda clusters: [(c.id, [e.component.visual_properties.bounding_box for e in c.elements])
                                   for c in clusters]
    assert membership(first) == membership(second)

def test_vertical_cluster_has_no_suffix():
    components = [make_component('alert', (0, y, 600, 60), BUTTON_STYLE) for y in (0, 100, 200)]
    clusters = VisualClusteringEngine().cluster([ClusterableElement.from_component(c) for c in components])
    assert clusters[0].component_type == 'alert'

def test_too_few_elements_returns_nothing():
    element = ClusterableElement.from_component(make_component('button', (0, 0, 120, 40), BUTTON_STYLE))
    assert VisualClusteringEngine().cluster([element]) == []

def test_feature_vector_uses_component_viewport():
    vis = VisualProperties(BoundingBox(0, 0, 320, 40), BUTTON_STYLE, viewport_width=640, viewport_height=480)
    component = DetectedComponent('button', 0.9, StructuralFingerprint(tag_signature='button'), vis, 0)
    vector = VisualFeatureVector.from_component(component)
    assert vector.width == pytest.approx(0.5)
    assert vector.height == pytest.approx(40 / 480)

def test_small_viewport_separates_what_a_wide_one_groups():
    def elements(viewport_width):
        return [ClusterableElement.from_component(DetectedComponent(
            'button', 0.9, StructuralFingerprint(tag_signature='button'),
            VisualProperties(BoundingBox(x, 0, width, width * 0.4), BUTTON_STYLE, viewport_width=viewport_width), 0))
            for x, width in ((0, 100), (150, 200), (400, 300))]
    # neighbors differ by 100px in width: 0.052 of a 1920px viewport, 0.25 of a 400px one
    assert len(VisualClusteringEngine().cluster(elements(1920))) == 1
    assert VisualClusteringEngine().cluster(elements(400)) == []
