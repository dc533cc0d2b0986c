"""
Tests for the linkify filter and page rendering helpers.
"""

from markupsafe import Markup

from core.templating import linkify, redirect


def test_linkify_escapes_before_linking():
    html = linkify('<img src=x onerror="alert(1)"> read https://a.example/x?q=1&r=2')

    assert isinstance(html, Markup)
    assert "<img" not in html
    assert "&lt;img" in html
    assert 'href="https://a.example/x?q=1&amp;r=2"' in html
    assert 'rel="noopener noreferrer"' in html


def test_linkify_leaves_other_schemes_as_text():
    html = linkify("javascript:alert(1) and ftp://files.example")
    assert "<a " not in html
    assert "javascript:alert(1)" in html


def test_linkify_empty():
    assert linkify(None) == ""
    assert linkify("") == ""


def test_redirect_uses_see_other():
    response = redirect("/dashboard")
    assert response.status_code == 303
    assert response.headers["location"] == "/dashboard"


def test_linkify_stops_at_quotes():
    html = linkify('He said "https://a.example/x" and \'https://b.example/y\'.')
    assert 'href="https://a.example/x"' in html
    assert 'href="https://b.example/y"' in html
    assert "&amp;#34;" not in html
    assert "&amp;#39;" not in html


def test_linkify_stops_at_angle_bracket():
    html = linkify("<https://a.example/x>")
    assert 'href="https://a.example/x"' in html
    assert "&gt;" in html
