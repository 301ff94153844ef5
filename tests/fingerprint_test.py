import sys
import os
import pytest
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from bs4 import BeautifulSoup
from core.fingerprint import StructuralFingerprint, StructuralFingerprintGenerator

def first_element(html):
    soup = BeautifulSoup(html, 'html.parser')
    return soup.body.find(True) if soup.body else soup.find(True)

def test_button_fingerprint_and_hash():
    gen = StructuralFingerprintGenerator()
    fp = gen.generate(first_element('<html><body><button class="btn">Buy</button></body></html>'))
    assert fp.tag_signature == 'button'
    assert fp.child_count == 0
    assert fp.text_node_count == 1
    assert fp.depth == 2
    assert fp.hash == 'button|0|0|0'

def test_card_signature_flags_and_counts():
    gen = StructuralFingerprintGenerator()
    html = '<div class="card"><img src="a.png"><h3>Title</h3><p>Body</p><a href="/x">More</a></div>'
    fp = gen.generate(first_element(html))
    assert fp.tag_signature == 'div[img,h3,p,a]'
    assert fp.child_count == 4
    assert fp.interactive_count == 1
    assert fp.media_count == 1
    assert fp.has_heading and fp.has_image and fp.has_link
    assert not fp.has_button and not fp.has_table
    assert fp.hash == 'div[img,h3,p,a]|4|1|1|HIL'

def test_run_length_compression_and_ignored_tags():
    gen = StructuralFingerprintGenerator()
    html = '<ul><li>a</li><li>b</li><li>c</li><script>x()</script><br></ul>'
    fp = gen.generate(first_element(html))
    assert fp.tag_signature == 'ul[li*3]'
    assert fp.child_count == 3

def test_depth_cap_collapses_deep_content():
    gen = StructuralFingerprintGenerator()
    html = '<div><div><div><div><span>deep</span></div></div></div></div>'
    assert gen.build_tag_signature(first_element(html)) == 'div[div[div[div[...]]]]'

def test_children_per_level_are_capped():
    gen = StructuralFingerprintGenerator()
    html = '<ol>' + '<li>x</li>' * 15 + '</ol>'
    fp = gen.generate(first_element(html))
    assert fp.tag_signature == 'ol[li*10]'
    assert fp.child_count == 15

def test_comments_are_not_text_nodes():
    gen = StructuralFingerprintGenerator()
    fp = gen.generate(first_element('<div><!-- note -->  <span>x</span></div>'))
    assert fp.text_node_count == 0

def test_role_button_and_onclick_count_as_interactive():
    gen = StructuralFingerprintGenerator()
    html = '<div><span role="button">a</span><div onclick="go()">b</div><input></div>'
    fp = gen.generate(first_element(html))
    assert fp.interactive_count == 3
    assert fp.has_button
    assert fp.has_form

def test_similarity_identity_and_symmetry():
    a = StructuralFingerprint(tag_signature='div[img,h3,p]', child_count=3, has_heading=True, has_image=True)
    b = StructuralFingerprint(tag_signature='div[img,p]', child_count=2, has_image=True, has_link=True)
    assert a.similarity_to(a) == 1.0
    assert a.similarity_to(b) == b.similarity_to(a)
    # root tags match (1) + child count within 2 (0.5) + 5 agreeing flags
    assert a.similarity_to(b) == pytest.approx(6.5 / 11)

def test_identical_hash_means_full_similarity():
    a = StructuralFingerprint(tag_signature='li[a]', child_count=1, depth=3, has_link=True)
    b = StructuralFingerprint(tag_signature='li[a]', child_count=1, depth=7, has_link=True)
    assert a.hash == b.hash
    assert a.similarity_to(b) == 1.0

def test_different_root_tags_get_no_signature_credit():
    a = StructuralFingerprint(tag_signature='section[p]', child_count=1)
    b = StructuralFingerprint(tag_signature='article[p]', child_count=1)
    assert a.similarity_to(b) == pytest.approx(8 / 11)
